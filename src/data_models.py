"""
Shared data structures for the character rules engine.

Holds the enumerations, rule constants and the dice resolver that every
other subsystem (character, items, abilities, combat, storage) builds on.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional
import logging
import random
import re

logger = logging.getLogger(__name__)


# =============================================================================
# ENUMS
# =============================================================================


class Stat(str, Enum):
    """The three primary ability scores."""
    STR = "str"
    DEX = "dex"
    INT = "int"


class Race(str, Enum):
    """Playable races. Each grants a racial ability and stat bonuses."""
    ELF = "elf"
    GNOME = "gnome"
    HUMAN = "human"
    DWARF = "dwarf"
    DRAGONBORN = "dragonborn"
    HALFLING = "halfling"


class ArmorType(str, Enum):
    """Armor weight classes."""
    HEAVY = "heavy"
    MEDIUM = "medium"
    LIGHT = "light"
    NONE = "none"


class WeaponType(str, Enum):
    """Weapon handling categories. Determine die size and governing stat."""
    TWO_HAND = "two-hand"
    POLEARM = "polearm"
    ONE_HAND = "one-hand"
    FINESSE = "finesse"
    RANGED = "ranged"
    STAFF = "staff"
    NONE = "none"


class ItemType(str, Enum):
    """Inventory item categories."""
    WEAPON = "weapon"
    ARMOR = "armor"
    SHIELD = "shield"
    ACCESSORY = "accessory"


class EquipmentSlot(str, Enum):
    """Exclusive equipment slots. Accessories are equipped without a slot."""
    MAIN_HAND = "main-hand"
    OFF_HAND = "off-hand"
    ARMOR = "armor"
    SHIELD = "shield"


class AbilityType(str, Enum):
    """Categories of learnable abilities."""
    METAMAGIC = "metamagic"
    SPELLWORD = "spellword"
    COMBAT_MANEUVER = "combat_maneuver"


class ManeuverType(str, Enum):
    """Resource pools an item can boost."""
    COMBAT = "combat"
    FINESSE = "finesse"
    SORCERY = "sorcery"


# =============================================================================
# RULE CONSTANTS
# =============================================================================


BASE_AC = 13
LEVEL_UP_STAT_INCREASE = 2
SHIELD_AC = 2

# Stat values assigned at creation by priority
HIGH_STAT = 16
MID_STAT = 10
LOW_STAT = 6

MIN_STAT = 0
MAX_STAT = 30

MIN_ENCHANTMENT = -3
MAX_ENCHANTMENT = 3

ARMOR_STR_REQ: dict[ArmorType, int] = {
    ArmorType.HEAVY: 16,
    ArmorType.MEDIUM: 14,
    ArmorType.LIGHT: 12,
    ArmorType.NONE: 0,
}

ARMOR_MODS: dict[ArmorType, int] = {
    ArmorType.HEAVY: 3,
    ArmorType.MEDIUM: 2,
    ArmorType.LIGHT: 1,
    ArmorType.NONE: 0,
}

# Hit die by strength modifier (index = modifier - 1)
HIT_DICE_FROM_MOD: tuple[int, ...] = (4, 6, 8, 10, 12)
DEFAULT_HIT_DIE = 4

WEAPON_DIE: dict[WeaponType, int] = {
    WeaponType.TWO_HAND: 12,
    WeaponType.POLEARM: 10,
    WeaponType.ONE_HAND: 8,
    WeaponType.FINESSE: 6,
    WeaponType.RANGED: 6,
    WeaponType.STAFF: 4,
    WeaponType.NONE: 0,
}

WEAPON_STAT: dict[WeaponType, Stat] = {
    WeaponType.TWO_HAND: Stat.STR,
    WeaponType.POLEARM: Stat.STR,
    WeaponType.ONE_HAND: Stat.STR,
    WeaponType.FINESSE: Stat.DEX,
    WeaponType.RANGED: Stat.DEX,
    WeaponType.STAFF: Stat.INT,
    WeaponType.NONE: Stat.STR,
}

TWO_HANDED_WEAPONS: frozenset[WeaponType] = frozenset({
    WeaponType.TWO_HAND,
    WeaponType.RANGED,
})

MIN_SPELLCASTING_INT = 11
DBL_SPELLCASTING_INT = 14  # double threshold requires INT strictly above this
MIN_FINESSE_DEX = 16
MIN_COMBAT_STR = 16
BASE_SORCERY_POINTS = 3
SNEAK_ATTACK_DIE = 8

ATTACKS_PER_LEVEL: tuple[int, ...] = (1, 1, 1, 2, 2, 2, 2, 3, 3, 3)


def ability_modifier(score: int) -> int:
    """Standard ability modifier, rounding toward negative infinity."""
    return (score - 10) // 2


def to_stat(value: "Stat | str") -> Stat:
    """
    Coerce a stat name to a Stat.

    Raises:
        ValueError: If the name is not one of str/dex/int
    """
    if isinstance(value, Stat):
        return value
    try:
        return Stat(str(value).lower())
    except ValueError:
        raise ValueError(f"Unknown stat: {value!r}") from None


# =============================================================================
# DICE ROLLING
# =============================================================================


DICE_NOTATION = re.compile(r"^(\d*)d(\d+)(?:([+-])(\d+))?$", re.IGNORECASE)


def parse_dice_notation(notation: str) -> tuple[int, int, int]:
    """
    Parse dice notation like '2d6+3', '1d8' or 'd20'.

    Returns:
        Tuple of (count, sides, modifier)

    Raises:
        ValueError: If the notation cannot be parsed
    """
    match = DICE_NOTATION.match(notation.strip())
    if not match:
        raise ValueError(f"Invalid dice notation: {notation}")

    count = int(match.group(1)) if match.group(1) else 1
    sides = int(match.group(2))
    modifier = int(match.group(4)) if match.group(4) else 0
    if match.group(3) == "-":
        modifier = -modifier
    return count, sides, modifier


def format_dice_notation(count: int, sides: int, modifier: int = 0) -> str:
    """Build notation such as '1d8+2' from its parts."""
    notation = f"{count}d{sides}"
    if modifier > 0:
        notation += f"+{modifier}"
    elif modifier < 0:
        notation += f"-{abs(modifier)}"
    return notation


def get_average_value(count: int, sides: int, modifier: int = 0) -> int:
    """Average of count dice of the given size, floored, plus modifier."""
    return (count * (sides + 1)) // 2 + modifier


class DiceRoller:
    """
    Centralized randomization interface.
    All random rolls go through this class for reproducibility and logging.
    """

    _instance = None
    _seed: Optional[int] = None
    _roll_log: list = []

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    @classmethod
    def set_seed(cls, seed: int) -> None:
        """Set random seed for reproducibility."""
        cls._seed = seed
        random.seed(seed)

    @classmethod
    def roll_dice(
        cls,
        count: int,
        sides: int,
        modifier: int = 0,
        reason: str = "",
    ) -> "DiceResult":
        """
        Roll count dice of the given size and add a flat modifier.

        A die with fewer than one side always contributes 0.
        """
        if sides >= 1:
            rolls = [random.randint(1, sides) for _ in range(count)]
        else:
            rolls = [0] * count
        result = DiceResult(
            notation=format_dice_notation(count, sides, modifier),
            rolls=rolls,
            modifier=modifier,
            total=sum(rolls) + modifier,
            reason=reason,
        )
        cls._roll_log.append(result)
        logger.debug(f"Rolled {result} ({reason})")
        return result

    @classmethod
    def roll(cls, dice: str, reason: str = "") -> "DiceResult":
        """
        Roll dice using standard notation (e.g., '2d6', '1d20+5', '3d6-2').

        Args:
            dice: Dice notation string
            reason: Why this roll is being made (for logging)

        Returns:
            DiceResult with individual rolls and total
        """
        count, sides, modifier = parse_dice_notation(dice)
        result = cls.roll_dice(count, sides, modifier, reason)
        result.notation = dice
        return result

    @classmethod
    def roll_d4(cls, reason: str = "") -> "DiceResult":
        return cls.roll_dice(1, 4, 0, reason)

    @classmethod
    def roll_d6(cls, num_dice: int = 1, reason: str = "") -> "DiceResult":
        """Convenience method for d6 rolls."""
        return cls.roll_dice(num_dice, 6, 0, reason)

    @classmethod
    def roll_d8(cls, reason: str = "") -> "DiceResult":
        return cls.roll_dice(1, 8, 0, reason)

    @classmethod
    def roll_d10(cls, reason: str = "") -> "DiceResult":
        return cls.roll_dice(1, 10, 0, reason)

    @classmethod
    def roll_d12(cls, reason: str = "") -> "DiceResult":
        return cls.roll_dice(1, 12, 0, reason)

    @classmethod
    def roll_d20(cls, reason: str = "") -> "DiceResult":
        """Convenience method for d20 rolls."""
        return cls.roll_dice(1, 20, 0, reason)

    @classmethod
    def get_roll_log(cls) -> list:
        """Get the complete roll log for the session."""
        return cls._roll_log.copy()

    @classmethod
    def clear_roll_log(cls) -> None:
        """Clear the roll log."""
        cls._roll_log = []


def roll_from_notation(notation: str, reason: str = "") -> "DiceResult":
    """Roll dice from a notation string, always randomly."""
    return DiceRoller.roll(notation, reason)


@dataclass
class DiceResult:
    """Result of a dice roll with full information."""
    notation: str
    rolls: list[int]
    modifier: int
    total: int
    reason: str
    averaged: bool = False  # True when produced by average mode
    timestamp: datetime = field(default_factory=datetime.now)

    def __str__(self) -> str:
        if self.averaged:
            return f"{self.notation}: average = {self.total}"
        if self.modifier > 0:
            return f"{self.notation}: {self.rolls} + {self.modifier} = {self.total}"
        elif self.modifier < 0:
            return f"{self.notation}: {self.rolls} - {abs(self.modifier)} = {self.total}"
        return f"{self.notation}: {self.rolls} = {self.total}"


class DiceSettings:
    """
    Process-wide switch between random rolls and deterministic averages.

    Every roll in the engine reads this switch at roll time, so flipping it
    changes all subsequent rolls immediately. Averages are the default so
    that character state is reproducible unless dice are asked for.
    """

    _use_dice_rolls: bool = False

    @classmethod
    def set_use_dice_rolls(cls, enabled: bool) -> None:
        cls._use_dice_rolls = bool(enabled)
        mode = "random rolls" if enabled else "average values"
        logger.info(f"Dice rolling {'enabled' if enabled else 'disabled'} - using {mode}")

    @classmethod
    def get_use_dice_rolls(cls) -> bool:
        return cls._use_dice_rolls

    @classmethod
    def resolve(
        cls,
        count: int,
        sides: int,
        modifier: int = 0,
        reason: str = "",
    ) -> DiceResult:
        """
        Roll dice or take their average, depending on the current mode.

        Args:
            count: Number of dice
            sides: Die size
            modifier: Flat modifier added to the total
            reason: Why this roll is being made (for logging)

        Returns:
            DiceResult; `averaged` is set when no dice were rolled
        """
        if cls._use_dice_rolls:
            return DiceRoller.roll_dice(count, sides, modifier, reason)

        total = get_average_value(count, sides, modifier)
        logger.debug(
            f"Using average for {format_dice_notation(count, sides, modifier)}: {total} ({reason})"
        )
        return DiceResult(
            notation=format_dice_notation(count, sides, modifier),
            rolls=[],
            modifier=modifier,
            total=total,
            reason=reason,
            averaged=True,
        )

    @classmethod
    def roll_or_average(
        cls,
        count: int,
        sides: int,
        modifier: int = 0,
        reason: str = "",
    ) -> int:
        """Total of `resolve`."""
        return cls.resolve(count, sides, modifier, reason).total
