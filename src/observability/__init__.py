"""
Observability for the character engine.

Collects engine log records into a bounded history per character.
"""

from src.observability.character_log import (
    MAX_ENTRIES_PER_CHARACTER,
    CharacterLogEntry,
    CharacterLogManager,
    CharacterLogHandler,
    category_for_logger,
)

__all__ = [
    "MAX_ENTRIES_PER_CHARACTER",
    "CharacterLogEntry",
    "CharacterLogManager",
    "CharacterLogHandler",
    "category_for_logger",
]
