"""
Character Hasher.

Produces a stable content hash for a character. The hash identifies a saved
character and detects drift when a saved record is rebuilt.

The canonical form is a JSON document with sorted keys and no whitespace.
The string is folded with the classic 31-multiplier rolling hash over its
UTF-16 code units, wrapped to a signed 32-bit integer, and rendered as the
absolute value in base 36.
"""

from typing import TYPE_CHECKING, Any, Optional, Sequence
import copy
import json
import logging
import time

from src.data_models import Stat, to_stat
from src.storage.saved_character import CharacterData, SavedCharacter

if TYPE_CHECKING:
    from src.character.character import Character

logger = logging.getLogger(__name__)


BASE36_DIGITS = "0123456789abcdefghijklmnopqrstuvwxyz"


def to_base36(value: int) -> str:
    if value == 0:
        return "0"
    digits = []
    while value:
        value, remainder = divmod(value, 36)
        digits.append(BASE36_DIGITS[remainder])
    return "".join(reversed(digits))


def rolling_hash(text: str) -> str:
    """
    Hash a string: h = h * 31 + c over UTF-16 code units, signed 32-bit.

    Returns:
        abs(h) in base 36
    """
    encoded = text.encode("utf-16-le")
    h = 0
    for i in range(0, len(encoded), 2):
        code_unit = encoded[i] | (encoded[i + 1] << 8)
        h = ((h << 5) - h + code_unit) & 0xFFFFFFFF
    if h >= 0x80000000:
        h -= 0x100000000
    return to_base36(abs(h))


class CharacterHasher:
    """Canonical serialization and hashing of characters."""

    @staticmethod
    def canonical_dict(character: "Character", name: str) -> dict[str, Any]:
        """The fields that make up a character's identity, in plain JSON types."""
        return {
            "name": name,
            "str": character.get_stat(Stat.STR),
            "dex": character.get_stat(Stat.DEX),
            "int": character.get_stat(Stat.INT),
            "level": character.level,
            "hp": character.hp,
            "race": character.race.value if character.race else None,
            "abilities": sorted(character.abilities),
            "armor": character.armor.value,
            "weapon": character.weapon.value,
            "shield": character.shield,
            "hp_rolls": list(character.hp_rolls),
            "level_up_choices": [s.value for s in character.level_up_choices],
            "pending_level_up_points": character.pending_level_up_points,
            "inventory": character.inventory.to_dict(),
            "useStatOverrides": character.is_using_stat_overrides(),
            "statModifiers": {
                stat.value: character.get_stat_override(stat) for stat in Stat
            },
            "learnedAbilities": character.ability_manager.to_list(),
            "sorceryThresholdLevel": character.sorcery_threshold_level,
            "doubleSorceryThresholdLevel": character.double_sorcery_threshold_level,
            "finesseThresholdLevel": character.finesse_threshold_level,
            "notes": character.get_notes(),
        }

    @classmethod
    def serialize(cls, character: "Character", name: str) -> str:
        return json.dumps(
            cls.canonical_dict(character, name),
            sort_keys=True,
            separators=(",", ":"),
            ensure_ascii=False,
        )

    @classmethod
    def create_hash(cls, character: "Character", name: str) -> str:
        return rolling_hash(cls.serialize(character, name))

    @classmethod
    def create_character_data(
        cls,
        character: "Character",
        high: Optional[Stat | str] = None,
        mid: Optional[Stat | str] = None,
        racial_bonuses: Optional[Sequence[Stat | str]] = None,
    ) -> CharacterData:
        """
        Snapshot a character into a CharacterData record.

        Creation choices default to the ones stored on the character.
        """
        bonuses = character.racial_bonuses if racial_bonuses is None else racial_bonuses
        return CharacterData(
            high=to_stat(high) if high is not None else character.high,
            mid=to_stat(mid) if mid is not None else character.mid,
            race=character.race,
            racial_bonuses=[to_stat(s) for s in bonuses],
            level=character.level,
            hp_rolls=list(character.hp_rolls),
            level_up_choices=list(character.level_up_choices),
            level_up_steps=copy.deepcopy(character.level_up_steps),
            pending_level_up_points=character.pending_level_up_points,
            armor=character.armor,
            weapon=character.weapon,
            shield=character.shield,
            inventory=character.inventory.to_dict(),
            use_stat_overrides=character.is_using_stat_overrides(),
            stat_modifiers={stat.value: character.get_stat_override(stat) for stat in Stat},
            learned_abilities=character.ability_manager.to_list(),
            sorcery_threshold_level=character.sorcery_threshold_level,
            double_sorcery_threshold_level=character.double_sorcery_threshold_level,
            finesse_threshold_level=character.finesse_threshold_level,
            notes=character.get_notes(),
        )

    @classmethod
    def create_saved_character(
        cls,
        character: "Character",
        name: str,
        high: Optional[Stat | str] = None,
        mid: Optional[Stat | str] = None,
        racial_bonuses: Optional[Sequence[Stat | str]] = None,
    ) -> SavedCharacter:
        """
        Build the persisted record for a character.

        Args:
            character: Character to save
            name: Save name
            high: High stat choice (defaults to the character's)
            mid: Mid stat choice (defaults to the character's)
            racial_bonuses: "Any" racial bonus choices (defaults to the character's)

        Returns:
            SavedCharacter with hash and a millisecond timestamp
        """
        saved = SavedCharacter(
            name=name,
            hash=cls.create_hash(character, name),
            data=cls.create_character_data(character, high, mid, racial_bonuses),
            timestamp=int(time.time() * 1000),
        )
        logger.debug(f"Created saved record for '{name}' with hash {saved.hash}")
        return saved

    @classmethod
    def validate_hash(cls, character: "Character", name: str, expected_hash: str) -> bool:
        return cls.create_hash(character, name) == expected_hash
