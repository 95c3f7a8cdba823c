"""
Remote character storage over HTTP.

Talks to a character API that wraps every response in the envelope
{"success": bool, "data": ..., "error": str}. Requests carry a Bearer token.

Routes:
    POST   /api/characters          save a record
    GET    /api/characters          list records
    GET    /api/characters/{name}   load one record (404 when unknown)
    DELETE /api/characters/{name}   delete one record
"""

from typing import Any, Optional
from urllib.parse import quote
import logging

import httpx

from src.storage.character_storage import CharacterStorage, StorageError
from src.storage.saved_character import SavedCharacter

logger = logging.getLogger(__name__)


DEFAULT_TIMEOUT = 10.0
CHARACTERS_PATH = "/api/characters"


class RemoteCharacterStorage(CharacterStorage):
    """
    Character storage backed by a remote HTTP API.

    A new httpx.AsyncClient is opened per call. Pass a transport to route
    requests somewhere other than the network.
    """

    def __init__(
        self,
        base_url: str,
        token: str,
        timeout: float = DEFAULT_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.timeout = timeout
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url,
            headers={"Authorization": f"Bearer {self.token}"},
            timeout=self.timeout,
            transport=self._transport,
        )

    @staticmethod
    def _character_path(name: str) -> str:
        return f"{CHARACTERS_PATH}/{quote(name, safe='')}"

    @staticmethod
    def _envelope(response: httpx.Response) -> dict[str, Any]:
        try:
            body = response.json()
        except ValueError as e:
            raise StorageError(f"Invalid JSON from {response.request.url}: {e}") from e
        if not isinstance(body, dict):
            raise StorageError(f"Unexpected response body from {response.request.url}")
        return body

    async def save_character(self, character: SavedCharacter) -> None:
        """
        POST a record to the API.

        Raises:
            StorageError: On transport failure or an unsuccessful envelope
        """
        try:
            async with self._client() as client:
                response = await client.post(CHARACTERS_PATH, json=character.to_dict())
        except httpx.RequestError as e:
            raise StorageError(f"Failed to reach character API: {e}") from e

        body = self._envelope(response)
        if not body.get("success"):
            raise StorageError(body.get("error") or "Failed to save character to remote storage")
        logger.info(f"Saved character '{character.name}' to {self.base_url}")

    async def load_character(self, name: str) -> Optional[SavedCharacter]:
        try:
            async with self._client() as client:
                response = await client.get(self._character_path(name))
            if response.status_code == 404:
                return None
            response.raise_for_status()
            body = self._envelope(response)
        except (httpx.RequestError, httpx.HTTPStatusError, StorageError) as e:
            logger.error(f"Remote load of '{name}' failed: {e}")
            return None

        if not body.get("success") or not body.get("data"):
            return None
        return SavedCharacter.from_dict(body["data"])

    async def load_character_by_hash(self, hash_value: str) -> Optional[SavedCharacter]:
        for character in await self.list_characters():
            if character.hash == hash_value:
                return character
        return None

    async def list_characters(self) -> list[SavedCharacter]:
        try:
            async with self._client() as client:
                response = await client.get(CHARACTERS_PATH)
            response.raise_for_status()
            body = self._envelope(response)
        except (httpx.RequestError, httpx.HTTPStatusError, StorageError) as e:
            logger.error(f"Remote character list failed: {e}")
            return []

        if not body.get("success"):
            return []
        characters = []
        for entry in body.get("data") or []:
            try:
                characters.append(SavedCharacter.from_dict(entry))
            except (KeyError, ValueError) as e:
                logger.warning(f"Skipping unreadable remote character record: {e}")
        return sorted(characters, key=lambda c: c.timestamp, reverse=True)

    async def delete_character(self, name: str) -> bool:
        try:
            async with self._client() as client:
                response = await client.delete(self._character_path(name))
            body = self._envelope(response)
        except (httpx.RequestError, StorageError) as e:
            logger.error(f"Remote delete of '{name}' failed: {e}")
            return False

        deleted = bool(body.get("success"))
        if deleted:
            logger.info(f"Deleted character '{name}' from {self.base_url}")
        return deleted

    async def character_exists(self, name: str) -> bool:
        return await self.load_character(name) is not None
