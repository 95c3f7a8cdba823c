"""
Character persistence: hashing, saved records, storage backends and the
CharacterManager that rebuilds characters from saved records.
"""

from src.storage.saved_character import (
    CHARACTER_DATA_VERSION,
    CharacterData,
    SavedCharacter,
)
from src.storage.character_hasher import (
    CharacterHasher,
    rolling_hash,
    to_base36,
)
from src.storage.character_storage import (
    StorageError,
    CharacterSaveError,
    CharacterStorage,
    InMemoryCharacterStorage,
    JsonFileCharacterStorage,
)
from src.storage.remote_storage import RemoteCharacterStorage
from src.storage.hybrid_storage import HybridCharacterStorage
from src.storage.character_manager import (
    CharacterManager,
    ReconstructionResult,
)

__all__ = [
    # Records
    "CHARACTER_DATA_VERSION",
    "CharacterData",
    "SavedCharacter",
    # Hashing
    "CharacterHasher",
    "rolling_hash",
    "to_base36",
    # Backends
    "StorageError",
    "CharacterSaveError",
    "CharacterStorage",
    "InMemoryCharacterStorage",
    "JsonFileCharacterStorage",
    "RemoteCharacterStorage",
    "HybridCharacterStorage",
    # Manager
    "CharacterManager",
    "ReconstructionResult",
]
