"""
Character storage contract and local backends.

Every storage method is async so local and remote backends share one
interface. A miss (unknown name or hash) returns None or False rather than
raising.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Optional
import json
import logging

from src.storage.saved_character import SavedCharacter

logger = logging.getLogger(__name__)


SAVE_FILE_NAME = "saved_characters.json"


class StorageError(Exception):
    """Raised when a storage backend cannot complete an operation."""
    pass


class CharacterSaveError(StorageError):
    """Raised when a character cannot be saved."""
    pass


class CharacterStorage(ABC):
    """Async save/load contract for character records."""

    @abstractmethod
    async def save_character(self, character: SavedCharacter) -> None:
        """Store a record, replacing any record with the same name."""
        pass

    @abstractmethod
    async def load_character(self, name: str) -> Optional[SavedCharacter]:
        pass

    @abstractmethod
    async def load_character_by_hash(self, hash_value: str) -> Optional[SavedCharacter]:
        pass

    @abstractmethod
    async def list_characters(self) -> list[SavedCharacter]:
        """All records, newest first."""
        pass

    @abstractmethod
    async def delete_character(self, name: str) -> bool:
        pass

    @abstractmethod
    async def character_exists(self, name: str) -> bool:
        pass


def _newest_first(characters: list[SavedCharacter]) -> list[SavedCharacter]:
    return sorted(characters, key=lambda c: c.timestamp, reverse=True)


# =============================================================================
# IN-MEMORY
# =============================================================================


class InMemoryCharacterStorage(CharacterStorage):
    """Keeps records in a dictionary. Records are copied in and out."""

    def __init__(self):
        self._characters: dict[str, dict[str, Any]] = {}

    async def save_character(self, character: SavedCharacter) -> None:
        self._characters[character.name] = character.to_dict()
        logger.info(f"Saved character '{character.name}' in memory")

    async def load_character(self, name: str) -> Optional[SavedCharacter]:
        data = self._characters.get(name)
        return SavedCharacter.from_dict(data) if data else None

    async def load_character_by_hash(self, hash_value: str) -> Optional[SavedCharacter]:
        for data in self._characters.values():
            if data["hash"] == hash_value:
                return SavedCharacter.from_dict(data)
        return None

    async def list_characters(self) -> list[SavedCharacter]:
        return _newest_first([SavedCharacter.from_dict(d) for d in self._characters.values()])

    async def delete_character(self, name: str) -> bool:
        if name not in self._characters:
            return False
        del self._characters[name]
        logger.info(f"Deleted character '{name}' from memory")
        return True

    async def character_exists(self, name: str) -> bool:
        return name in self._characters


# =============================================================================
# JSON FILE
# =============================================================================


class JsonFileCharacterStorage(CharacterStorage):
    """
    Stores all records in one JSON document inside a save directory.

    The document is a list of SavedCharacter dictionaries. It is re-read on
    every call, so several storage objects can share one directory.
    """

    def __init__(self, save_directory: Optional[Path | str] = None):
        """
        Initialize the file storage.

        Args:
            save_directory: Directory for the save file, created on first save.
                Defaults to ./saves/
        """
        self.save_directory = Path(save_directory) if save_directory else Path("./saves")
        self.save_file = self.save_directory / SAVE_FILE_NAME

    def _read_all(self) -> list[SavedCharacter]:
        if not self.save_file.exists():
            return []
        try:
            with open(self.save_file, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Could not read save file {self.save_file}: {e}")
            return []

        characters = []
        for entry in data:
            try:
                characters.append(SavedCharacter.from_dict(entry))
            except (KeyError, ValueError) as e:
                logger.warning(f"Skipping unreadable character record: {e}")
        return characters

    def _write_all(self, characters: list[SavedCharacter]) -> None:
        try:
            self.save_directory.mkdir(parents=True, exist_ok=True)
            with open(self.save_file, "w", encoding="utf-8") as f:
                json.dump([c.to_dict() for c in characters], f, indent=2, ensure_ascii=False)
        except OSError as e:
            raise StorageError(f"Could not write save file {self.save_file}: {e}") from e

    async def save_character(self, character: SavedCharacter) -> None:
        characters = [c for c in self._read_all() if c.name != character.name]
        characters.append(character)
        self._write_all(_newest_first(characters))
        logger.info(f"Saved character '{character.name}' to {self.save_file}")

    async def load_character(self, name: str) -> Optional[SavedCharacter]:
        for character in self._read_all():
            if character.name == name:
                return character
        return None

    async def load_character_by_hash(self, hash_value: str) -> Optional[SavedCharacter]:
        for character in self._read_all():
            if character.hash == hash_value:
                return character
        return None

    async def list_characters(self) -> list[SavedCharacter]:
        return _newest_first(self._read_all())

    async def delete_character(self, name: str) -> bool:
        characters = self._read_all()
        remaining = [c for c in characters if c.name != name]
        if len(remaining) == len(characters):
            return False
        self._write_all(remaining)
        logger.info(f"Deleted character '{name}' from {self.save_file}")
        return True

    async def character_exists(self, name: str) -> bool:
        return await self.load_character(name) is not None
