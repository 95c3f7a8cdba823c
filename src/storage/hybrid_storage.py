"""
Hybrid character storage: remote first, local as fallback.
"""

from typing import Optional
import logging

from src.storage.character_storage import CharacterStorage, StorageError
from src.storage.saved_character import SavedCharacter

logger = logging.getLogger(__name__)


class HybridCharacterStorage(CharacterStorage):
    """
    Combines a local backend with an optional remote backend.

    Without a remote backend every call goes straight to local storage.
    """

    def __init__(self, local: CharacterStorage, remote: Optional[CharacterStorage] = None):
        self.local = local
        self.remote = remote

    async def save_character(self, character: SavedCharacter) -> None:
        if self.remote is not None:
            try:
                await self.remote.save_character(character)
                return
            except StorageError as e:
                logger.warning(f"Remote save failed, falling back to local storage: {e}")
        await self.local.save_character(character)

    async def load_character(self, name: str) -> Optional[SavedCharacter]:
        if self.remote is not None:
            character = await self.remote.load_character(name)
            if character is not None:
                return character
        return await self.local.load_character(name)

    async def load_character_by_hash(self, hash_value: str) -> Optional[SavedCharacter]:
        if self.remote is not None:
            character = await self.remote.load_character_by_hash(hash_value)
            if character is not None:
                return character
        return await self.local.load_character_by_hash(hash_value)

    async def list_characters(self) -> list[SavedCharacter]:
        """Records from both backends; remote wins when names collide."""
        combined: dict[str, SavedCharacter] = {}
        for character in await self.local.list_characters():
            combined[character.name] = character
        if self.remote is not None:
            for character in await self.remote.list_characters():
                combined[character.name] = character
        return sorted(combined.values(), key=lambda c: c.timestamp, reverse=True)

    async def delete_character(self, name: str) -> bool:
        """Delete from both backends. True only if every delete succeeded."""
        success = True
        if self.remote is not None and not await self.remote.delete_character(name):
            success = False
        if not await self.local.delete_character(name):
            success = False
        return success

    async def character_exists(self, name: str) -> bool:
        if self.remote is not None and await self.remote.character_exists(name):
            return True
        return await self.local.character_exists(name)
