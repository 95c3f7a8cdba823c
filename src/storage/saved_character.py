"""
Persisted character records.

A SavedCharacter wraps a name, a content hash, a timestamp and the
CharacterData needed to rebuild the character. CharacterData is versioned;
every field added after version 1 has a default so older records still load.
"""

from dataclasses import dataclass, field
from typing import Any, Optional

from src.character.progression import LevelUpStep
from src.data_models import ArmorType, Race, Stat, WeaponType


CHARACTER_DATA_VERSION = 2


def _zero_modifiers() -> dict[str, int]:
    return {stat.value: 0 for stat in Stat}


@dataclass
class CharacterData:
    """
    Everything needed to rebuild a character.

    Stats themselves are not stored: they are replayed from the creation
    choices and level-up history.
    """
    high: Stat
    mid: Stat
    race: Optional[Race] = None
    racial_bonuses: list[Stat] = field(default_factory=list)
    level: int = 1
    hp_rolls: list[int] = field(default_factory=list)
    level_up_choices: list[Stat] = field(default_factory=list)
    level_up_steps: Optional[list[LevelUpStep]] = None
    pending_level_up_points: int = 0
    armor: ArmorType = ArmorType.NONE
    weapon: WeaponType = WeaponType.NONE
    shield: bool = False
    inventory: dict[str, Any] = field(default_factory=lambda: {"items": [], "max_items": None})
    use_stat_overrides: bool = False
    stat_modifiers: dict[str, int] = field(default_factory=_zero_modifiers)
    learned_abilities: list[dict[str, Any]] = field(default_factory=list)
    sorcery_threshold_level: Optional[int] = None
    double_sorcery_threshold_level: Optional[int] = None
    finesse_threshold_level: Optional[int] = None
    notes: str = ""
    version: int = CHARACTER_DATA_VERSION

    def to_dict(self) -> dict[str, Any]:
        """Convert to the persisted JSON shape."""
        return {
            "version": self.version,
            "high": self.high.value,
            "mid": self.mid.value,
            "race": self.race.value if self.race else None,
            "racialBonuses": [s.value for s in self.racial_bonuses],
            "level": self.level,
            "hp_rolls": list(self.hp_rolls),
            "level_up_choices": [s.value for s in self.level_up_choices],
            "level_up_steps": (
                [step.to_dict() for step in self.level_up_steps]
                if self.level_up_steps is not None
                else None
            ),
            "pending_level_up_points": self.pending_level_up_points,
            "armor": self.armor.value,
            "weapon": self.weapon.value,
            "shield": self.shield,
            "inventory": self.inventory,
            "useStatOverrides": self.use_stat_overrides,
            "statModifiers": dict(self.stat_modifiers),
            "learnedAbilities": list(self.learned_abilities),
            "sorceryThresholdLevel": self.sorcery_threshold_level,
            "doubleSorceryThresholdLevel": self.double_sorcery_threshold_level,
            "finesseThresholdLevel": self.finesse_threshold_level,
            "notes": self.notes,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CharacterData":
        """Create from the persisted JSON shape, defaulting optional fields."""
        steps = data.get("level_up_steps")
        modifiers = _zero_modifiers()
        modifiers.update(data.get("statModifiers") or {})

        return cls(
            version=data.get("version", 1),
            high=Stat(data["high"]),
            mid=Stat(data["mid"]),
            race=Race(data["race"]) if data.get("race") else None,
            racial_bonuses=[Stat(s) for s in data.get("racialBonuses") or []],
            level=data.get("level", 1),
            hp_rolls=list(data.get("hp_rolls") or []),
            level_up_choices=[Stat(s) for s in data.get("level_up_choices") or []],
            level_up_steps=[LevelUpStep.from_dict(s) for s in steps] if steps is not None else None,
            pending_level_up_points=data.get("pending_level_up_points") or 0,
            armor=ArmorType(data.get("armor") or ArmorType.NONE.value),
            weapon=WeaponType(data.get("weapon") or WeaponType.NONE.value),
            shield=bool(data.get("shield", False)),
            inventory=data.get("inventory") or {"items": [], "max_items": None},
            use_stat_overrides=bool(data.get("useStatOverrides", False)),
            stat_modifiers=modifiers,
            learned_abilities=list(data.get("learnedAbilities") or []),
            sorcery_threshold_level=data.get("sorceryThresholdLevel"),
            double_sorcery_threshold_level=data.get("doubleSorceryThresholdLevel"),
            finesse_threshold_level=data.get("finesseThresholdLevel"),
            notes=data.get("notes") or "",
        )


@dataclass
class SavedCharacter:
    """A named, hashed, timestamped character record."""
    name: str
    hash: str
    data: CharacterData
    timestamp: int  # epoch milliseconds

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "hash": self.hash,
            "timestamp": self.timestamp,
            "data": self.data.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SavedCharacter":
        return cls(
            name=data["name"],
            hash=data.get("hash", ""),
            data=CharacterData.from_dict(data["data"]),
            timestamp=data.get("timestamp", 0),
        )
