"""
Combat Resolver for the character rules engine.

Computes a character's own attack and damage outputs from its effective
stats and equipped weapons. There is no opponent model: results are the
numbers the player reports at the table.

Main hand vs off hand:
- Main-hand attacks add the character level; off-hand attacks never do.
- Main-hand damage adds the governing stat modifier; off-hand damage never does.

Finesse options:
- Sneak attack spends one finesse point and adds 1d8 per point remaining.
- Assassination spends nothing, doubles the weapon dice and adds 2d8 per
  finesse point as critical sneak attack dice.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, TYPE_CHECKING
import logging

from src.data_models import (
    ATTACKS_PER_LEVEL,
    SNEAK_ATTACK_DIE,
    DiceSettings,
    ability_modifier,
)
from src.items.inventory_manager import InventoryItem

if TYPE_CHECKING:
    from src.character.character import Character

logger = logging.getLogger(__name__)


class Hand(str, Enum):
    MAIN = "main-hand"
    OFF = "off-hand"


@dataclass
class RollBreakdown:
    """A roll total with a human-readable account of its parts."""
    result: int
    breakdown: str

    def __str__(self) -> str:
        return f"{self.result} = {self.breakdown}"


def _signed(value: int, label: str) -> str:
    if value < 0:
        return f" - {abs(value)} ({label})"
    return f" + {value} ({label})"


def _enchantment_part(enchantment: int) -> str:
    if enchantment > 0:
        return f" + {enchantment} (enchantment)"
    if enchantment < 0:
        return f" - {abs(enchantment)} (cursed)"
    return ""


class CombatResolver:
    """
    Computes attack, damage and finesse rolls for one character.

    Reads the character's effective stats and inventory on every call, so
    it always reflects the current equipment and overrides.
    """

    def __init__(self, character: "Character"):
        self.character = character

    # =========================================================================
    # HELPERS
    # =========================================================================

    def _weapon(self, hand: Hand) -> Optional[InventoryItem]:
        main_hand, off_hand = self.character.inventory.get_equipped_weapons()
        return main_hand if Hand(hand) == Hand.MAIN else off_hand

    def _stat_mod(self, weapon: InventoryItem) -> int:
        return ability_modifier(self.character.get_effective_stat(weapon.governing_stat))

    def attacks_per_round(self) -> int:
        index = min(self.character.level, len(ATTACKS_PER_LEVEL)) - 1
        return ATTACKS_PER_LEVEL[index]

    # =========================================================================
    # ATTACK AND DAMAGE
    # =========================================================================

    def attack_with_breakdown(self, hand: Hand) -> RollBreakdown:
        """
        To-hit roll: d20 + stat modifier + enchantment, plus level for the main hand.

        Returns:
            RollBreakdown with result 0 when the hand is empty
        """
        hand = Hand(hand)
        weapon = self._weapon(hand)
        if weapon is None:
            logger.debug(f"No {hand.value} weapon equipped for attack roll")
            return RollBreakdown(0, "No weapon equipped")

        stat = weapon.governing_stat
        stat_mod = self._stat_mod(weapon)
        enchantment = weapon.enchantment_level
        d20 = DiceSettings.roll_or_average(1, 20, 0, f"{hand.value} attack with {weapon.name}")

        total = d20 + stat_mod + enchantment
        breakdown = f"{d20} (1d20)" + _signed(stat_mod, f"{stat.value.upper()} modifier")
        if hand == Hand.MAIN:
            total += self.character.level
            breakdown += f" + {self.character.level} (level)"
        breakdown += _enchantment_part(enchantment)

        logger.info(f"{hand.value} attack roll with {weapon.name}: {total}")
        return RollBreakdown(total, breakdown)

    def damage_with_breakdown(self, hand: Hand) -> RollBreakdown:
        """
        Damage roll: weapon die + enchantment, plus stat modifier for the main hand.

        Returns:
            RollBreakdown with result 0 when the hand is empty
        """
        hand = Hand(hand)
        weapon = self._weapon(hand)
        if weapon is None:
            logger.debug(f"No {hand.value} weapon equipped for damage roll")
            return RollBreakdown(0, "No weapon equipped")

        die = weapon.weapon_die
        enchantment = weapon.enchantment_level
        roll = DiceSettings.roll_or_average(1, die, 0, f"{hand.value} damage with {weapon.name}")

        total = roll + enchantment
        breakdown = f"{roll} (1d{die})"
        if hand == Hand.MAIN:
            stat_mod = self._stat_mod(weapon)
            total += stat_mod
            breakdown += _signed(stat_mod, f"{weapon.governing_stat.value.upper()} modifier")
        breakdown += _enchantment_part(enchantment)

        logger.info(f"{hand.value} damage roll with {weapon.name}: {total}")
        return RollBreakdown(total, breakdown)

    def main_hand_attack_roll(self) -> int:
        return self.attack_with_breakdown(Hand.MAIN).result

    def off_hand_attack_roll(self) -> int:
        return self.attack_with_breakdown(Hand.OFF).result

    def main_hand_damage_roll(self) -> int:
        return self.damage_with_breakdown(Hand.MAIN).result

    def off_hand_damage_roll(self) -> int:
        return self.damage_with_breakdown(Hand.OFF).result

    # =========================================================================
    # FINESSE ATTACKS
    # =========================================================================

    def _finesse_precondition(self, hand: Hand) -> Optional[RollBreakdown]:
        if self.character.finesse_points <= 0:
            return RollBreakdown(0, "No finesse points available")
        if self._weapon(hand) is None:
            return RollBreakdown(0, f"No {hand.value} weapon equipped")
        return None

    def _finesse_roll(self, hand: Hand, critical: bool) -> RollBreakdown:
        weapon = self._weapon(hand)
        weapon_dice = 2 if critical else 1
        sneak_dice = (
            self.character.finesse_points * 2 if critical else self.character.finesse_points
        )
        tag = "critical " if critical else ""

        weapon_roll = DiceSettings.roll_or_average(
            weapon_dice, weapon.weapon_die, 0, f"{tag}{hand.value} weapon dice"
        )
        total = weapon_roll
        breakdown = f"{weapon_roll} ({weapon_dice}d{weapon.weapon_die}"
        breakdown += " critical)" if critical else ")"

        if hand == Hand.MAIN:
            stat_mod = self._stat_mod(weapon)
            total += stat_mod
            breakdown += _signed(stat_mod, f"{weapon.governing_stat.value.upper()} modifier")

        total += weapon.enchantment_level
        breakdown += _enchantment_part(weapon.enchantment_level)

        sneak_roll = DiceSettings.roll_or_average(
            sneak_dice, SNEAK_ATTACK_DIE, 0, f"{tag}sneak attack dice"
        )
        total += sneak_roll
        breakdown += f" + {sneak_roll} ({sneak_dice}d{SNEAK_ATTACK_DIE} {tag}sneak attack)"
        return RollBreakdown(total, breakdown)

    def sneak_attack(self, hand: Hand) -> RollBreakdown:
        """
        Sneak attack damage with the weapon in a hand.

        Spends one finesse point, then adds one d8 per point left.
        """
        hand = Hand(hand)
        failure = self._finesse_precondition(hand)
        if failure is not None:
            logger.info(f"Sneak attack ({hand.value}) not possible: {failure.breakdown}")
            return failure

        self.character.spend_finesse_point()
        result = self._finesse_roll(hand, critical=False)
        logger.info(f"Sneak attack ({hand.value}): {result}")
        return result

    def assassination(self, hand: Hand) -> RollBreakdown:
        """
        Assassination damage with the weapon in a hand.

        Costs nothing; weapon dice and sneak dice are both doubled.
        """
        hand = Hand(hand)
        failure = self._finesse_precondition(hand)
        if failure is not None:
            logger.info(f"Assassination ({hand.value}) not possible: {failure.breakdown}")
            return failure

        result = self._finesse_roll(hand, critical=True)
        logger.info(f"Assassination ({hand.value}): {result}")
        return result

    def sneak_attack_main_hand(self) -> RollBreakdown:
        return self.sneak_attack(Hand.MAIN)

    def sneak_attack_off_hand(self) -> RollBreakdown:
        return self.sneak_attack(Hand.OFF)

    def assassination_main_hand(self) -> RollBreakdown:
        return self.assassination(Hand.MAIN)

    def assassination_off_hand(self) -> RollBreakdown:
        return self.assassination(Hand.OFF)
