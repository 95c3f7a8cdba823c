"""
Per-character event log.

Engine modules log through the standard logging module. CharacterLogHandler
copies those records into a CharacterLogManager under the name of the
character currently being edited, so each character keeps its own history
of level-ups, equips, rolls and saves.
"""

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Optional
import json
import logging

logger = logging.getLogger(__name__)


MAX_ENTRIES_PER_CHARACTER = 500
ENGINE_LOGGER_PREFIX = "src."


@dataclass
class CharacterLogEntry:
    """One log record attributed to a character."""
    character_name: str
    level: str
    category: str
    message: str
    timestamp: str = field(default_factory=lambda: datetime.now().isoformat())
    character_hash: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "character_name": self.character_name,
            "level": self.level,
            "category": self.category,
            "message": self.message,
            "timestamp": self.timestamp,
            "character_hash": self.character_hash,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CharacterLogEntry":
        return cls(
            character_name=data["character_name"],
            level=data.get("level", "info"),
            category=data.get("category", "general"),
            message=data.get("message", ""),
            timestamp=data.get("timestamp", ""),
            character_hash=data.get("character_hash"),
        )

    def __str__(self) -> str:
        return f"[{self.timestamp}] {self.level.upper()} {self.category}: {self.message}"


class CharacterLogManager:
    """
    Bounded log history per character name.

    Keeps the most recent entries for each character. With a log file the
    history is loaded on creation and written back after every change, or
    only on flush() when autosave is off.
    """

    def __init__(
        self,
        log_file: Optional[Path | str] = None,
        max_entries: int = MAX_ENTRIES_PER_CHARACTER,
        autosave: bool = True,
    ):
        self.log_file = Path(log_file) if log_file else None
        self.max_entries = max_entries
        self.autosave = autosave
        self._dirty = False
        self.active_character: Optional[str] = None
        self.active_hash: Optional[str] = None
        self._logs: dict[str, list[CharacterLogEntry]] = {}
        self._load()

    # =========================================================================
    # PERSISTENCE
    # =========================================================================

    def _load(self) -> None:
        if self.log_file is None or not self.log_file.exists():
            return
        try:
            with open(self.log_file, "r", encoding="utf-8") as f:
                data = json.load(f)
            self._logs = {
                name: [CharacterLogEntry.from_dict(e) for e in entries]
                for name, entries in data.items()
            }
        except (OSError, json.JSONDecodeError, KeyError) as e:
            logger.warning(f"Could not load character logs from {self.log_file}: {e}")
            self._logs = {}

    def _save(self) -> None:
        if self.log_file is None:
            return
        try:
            self.log_file.parent.mkdir(parents=True, exist_ok=True)
            with open(self.log_file, "w", encoding="utf-8") as f:
                json.dump(
                    {name: [e.to_dict() for e in entries] for name, entries in self._logs.items()},
                    f,
                    indent=2,
                    ensure_ascii=False,
                )
        except OSError as e:
            logger.warning(f"Could not save character logs to {self.log_file}: {e}")

    def _changed(self) -> None:
        if self.autosave:
            self._save()
        else:
            self._dirty = True

    def flush(self) -> None:
        """Write changes held back while autosave is off."""
        if self._dirty:
            self._dirty = False
            self._save()

    # =========================================================================
    # ACTIVE CHARACTER
    # =========================================================================

    def set_active_character(self, name: Optional[str], character_hash: Optional[str] = None) -> None:
        """Route subsequent handler records to this character (None to stop)."""
        self.active_character = name
        self.active_hash = character_hash

    # =========================================================================
    # WRITING
    # =========================================================================

    def add_log(
        self,
        character_name: str,
        level: str,
        category: str,
        message: str,
        character_hash: Optional[str] = None,
    ) -> Optional[CharacterLogEntry]:
        """
        Append an entry for a character, dropping the oldest past the limit.

        Returns:
            The new entry, or None when the character name is blank
        """
        if not character_name or not character_name.strip():
            return None

        entry = CharacterLogEntry(
            character_name=character_name,
            level=level,
            category=category,
            message=message,
            character_hash=character_hash,
        )
        entries = self._logs.setdefault(character_name, [])
        entries.append(entry)
        if len(entries) > self.max_entries:
            del entries[: len(entries) - self.max_entries]
        self._changed()
        return entry

    def clear_character_logs(self, character_name: str) -> None:
        self._logs.pop(character_name, None)
        self._changed()

    def clear_all_logs(self) -> None:
        self._logs.clear()
        self._changed()

    def rename_character_logs(self, old_name: str, new_name: str) -> bool:
        entries = self._logs.pop(old_name, None)
        if entries is None:
            return False
        for entry in entries:
            entry.character_name = new_name
        self._logs[new_name] = entries
        if self.active_character == old_name:
            self.active_character = new_name
        self._changed()
        return True

    # =========================================================================
    # READING
    # =========================================================================

    def get_character_logs(self, character_name: str) -> list[CharacterLogEntry]:
        return list(self._logs.get(character_name, []))

    def get_character_names(self) -> list[str]:
        return sorted(self._logs)

    def get_filtered_character_logs(
        self,
        character_name: str,
        level: Optional[str] = None,
        category: Optional[str] = None,
    ) -> list[CharacterLogEntry]:
        """Entries matching a level and category; None or "all" matches everything."""
        return [
            entry
            for entry in self._logs.get(character_name, [])
            if (not level or level == "all" or entry.level == level)
            and (not category or category == "all" or entry.category == category)
        ]

    def get_recent_character_logs(self, character_name: str, count: int = 50) -> list[CharacterLogEntry]:
        if count <= 0:
            return []
        return list(self._logs.get(character_name, [])[-count:])

    def get_character_categories(self, character_name: str) -> list[str]:
        return sorted({entry.category for entry in self._logs.get(character_name, [])})

    def get_total_log_count(self) -> int:
        return sum(len(entries) for entries in self._logs.values())

    def get_all_logs(self) -> list[CharacterLogEntry]:
        """Every entry across all characters, oldest first."""
        all_entries = [e for entries in self._logs.values() for e in entries]
        return sorted(all_entries, key=lambda e: e.timestamp)


def category_for_logger(logger_name: str) -> str:
    """
    Category for a logger name: the engine subpackage, e.g. "storage".

    Loggers outside the engine keep their top-level name.
    """
    if logger_name.startswith(ENGINE_LOGGER_PREFIX):
        logger_name = logger_name[len(ENGINE_LOGGER_PREFIX):]
    return logger_name.split(".")[0] or "general"


class CharacterLogHandler(logging.Handler):
    """
    logging.Handler that feeds records into a CharacterLogManager.

    Records are attributed to the manager's active character and dropped
    when no character is active.
    """

    def __init__(self, manager: CharacterLogManager, level: int = logging.INFO):
        super().__init__(level)
        self.manager = manager

    def emit(self, record: logging.LogRecord) -> None:
        name = self.manager.active_character
        # Records from this module would re-enter add_log
        if not name or record.name == __name__:
            return
        try:
            self.manager.add_log(
                name,
                record.levelname.lower(),
                category_for_logger(record.name),
                record.getMessage(),
                self.manager.active_hash,
            )
        except Exception:
            self.handleError(record)

    def flush(self) -> None:
        self.manager.flush()

    def close(self) -> None:
        self.flush()
        super().close()
