"""
Character Progression Engine.

The Character is the aggregate root of the rules engine. It owns the base
stats, level, hit points, resource pools and level-up history, plus exactly
one InventoryManager and one AbilityManager.

Key rules:
- Stats start at 16/10/6 by high/mid/low priority, plus racial bonuses
- Every level-up rolls hit points with a die sized by strength
- Resource thresholds are set once and never recomputed
- Effective stats (base + override delta, clamped to 0..30) are what every
  rule reads; base stats are only changed by creation and level-ups
"""

from typing import Any, Optional, Sequence
import logging

from src.abilities.ability_manager import AbilityManager
from src.character.progression import (
    LevelUpState,
    LevelUpStep,
    StepMode,
    combat_max,
    finesse_max,
    hit_die_for_strength,
    sorcery_max,
)
from src.character.race_data import RACIAL_BONUS
from src.combat.combat_resolver import CombatResolver
from src.data_models import (
    ARMOR_MODS,
    BASE_AC,
    DBL_SPELLCASTING_INT,
    HIGH_STAT,
    LEVEL_UP_STAT_INCREASE,
    LOW_STAT,
    MAX_STAT,
    MID_STAT,
    MIN_FINESSE_DEX,
    MIN_SPELLCASTING_INT,
    MIN_STAT,
    SHIELD_AC,
    AbilityType,
    ArmorType,
    DiceSettings,
    EquipmentSlot,
    ItemType,
    ManeuverType,
    Race,
    Stat,
    WeaponType,
    ability_modifier,
    to_stat,
)
from src.items.inventory_manager import InventoryManager, InventoryResult

logger = logging.getLogger(__name__)


STARTING_HP = 10


class Character:
    """
    A single player character.

    Attributes:
        stats: Base stat values keyed by Stat
        level: Current level, starting at 1
        hp: Total hit points, always sum(hp_rolls)
        hp_rolls: Every hit point roll, starting with the fixed 10
        level_up_choices: Each stat point allocation in order
        level_up_steps: Each level gained, full or split, with its choices
        inventory: The character's InventoryManager
        ability_manager: The character's AbilityManager
        combat: CombatResolver bound to this character
    """

    def __init__(
        self,
        high: Stat | str,
        mid: Stat | str,
        race: Optional[Race | str] = None,
        racial_bonuses: Optional[Sequence[Stat | str]] = None,
    ):
        """
        Create a level 1 character.

        Args:
            high: Stat that starts at 16
            mid: Stat that starts at 10 (the remaining stat starts at 6)
            race: Optional race granting an ability and stat bonuses
            racial_bonuses: Stats chosen for the race's "any" bonuses, in order

        Raises:
            ValueError: If high and mid name the same stat
        """
        self.high = to_stat(high)
        self.mid = to_stat(mid)
        if self.high == self.mid:
            raise ValueError(f"High and mid stats must differ (both {self.high.value})")

        self.race: Optional[Race] = Race(race) if race else None
        self.racial_bonuses: list[Stat] = [to_stat(s) for s in racial_bonuses or []]

        self.stats: dict[Stat, int] = {}
        for stat in Stat:
            if stat == self.high:
                self.stats[stat] = HIGH_STAT
            elif stat == self.mid:
                self.stats[stat] = MID_STAT
            else:
                self.stats[stat] = LOW_STAT

        self.abilities: list[str] = []
        self._apply_racial_bonuses()

        self.level = 1
        self.hp = STARTING_HP
        self.hp_rolls: list[int] = [STARTING_HP]
        self.level_up_choices: list[Stat] = []
        self.level_up_steps: list[LevelUpStep] = []
        self._level_up_state = LevelUpState.idle()

        self._use_stat_overrides = False
        self._stat_modifiers: dict[Stat, int] = {stat: 0 for stat in Stat}

        self._sorcery_threshold_level: Optional[int] = None
        self._double_sorcery_threshold_level: Optional[int] = None
        self._finesse_threshold_level: Optional[int] = None

        self.sorcery_points = 0
        self.max_sorcery_points = 0
        self.finesse_points = 0
        self.max_finesse_points = 0
        self.combat_maneuver_points = 0
        self.max_combat_maneuver_points = 0

        self.notes = ""

        self.inventory = InventoryManager()
        self.ability_manager = AbilityManager()
        self.combat = CombatResolver(self)

        self.update_inventory_stats()
        self.roll_hp()
        self._update_thresholds()
        self._recompute_resource_maxes(fill=True)

        logger.info(
            f"Created character: race={self.race.value if self.race else 'none'}, "
            f"STR {self.stats[Stat.STR]} DEX {self.stats[Stat.DEX]} INT {self.stats[Stat.INT]}, "
            f"HP {self.hp}"
        )

    def _apply_racial_bonuses(self) -> None:
        if self.race is None:
            return
        race_data = RACIAL_BONUS[self.race]
        self.abilities.append(race_data.ability)

        choices = iter(self.racial_bonuses)
        for bonus in race_data.bonuses:
            if bonus.is_any:
                chosen = next(choices, None)
                if chosen is None:
                    logger.warning(f"No stat chosen for {self.race.value} +{bonus.plus} bonus")
                    continue
                self.stats[chosen] += bonus.plus
            else:
                self.stats[bonus.stat] += bonus.plus

    # =========================================================================
    # STATS AND OVERRIDES
    # =========================================================================

    def get_stat(self, stat: Stat | str) -> int:
        """Base value of a stat."""
        return self.stats[to_stat(stat)]

    def get_effective_stats(self) -> dict[Stat, int]:
        """Stats every rule reads: base plus override delta when enabled, clamped."""
        if not self._use_stat_overrides:
            return dict(self.stats)
        return {
            stat: max(MIN_STAT, min(MAX_STAT, value + self._stat_modifiers[stat]))
            for stat, value in self.stats.items()
        }

    def get_effective_stat(self, stat: Stat | str) -> int:
        return self.get_effective_stats()[to_stat(stat)]

    def is_using_stat_overrides(self) -> bool:
        return self._use_stat_overrides

    def toggle_stat_overrides(self) -> bool:
        """
        Flip the override switch. Stored deltas are kept either way.

        Returns:
            Whether overrides are now enabled
        """
        self._use_stat_overrides = not self._use_stat_overrides
        self._stats_changed()
        logger.info(f"Stat overrides {'enabled' if self._use_stat_overrides else 'disabled'}")
        return self._use_stat_overrides

    def set_stat_override(self, stat: Stat | str, delta: int) -> int:
        """
        Store an override delta, clamped so the effective stat stays in 0..30.

        Returns:
            The delta actually stored
        """
        stat = to_stat(stat)
        base = self.stats[stat]
        clamped = max(MIN_STAT, min(MAX_STAT, base + delta))
        self._stat_modifiers[stat] = clamped - base
        self._stats_changed()
        logger.info(
            f"Set {stat.value} override to {self._stat_modifiers[stat]:+d} "
            f"(requested {delta:+d}, effective {clamped})"
        )
        return self._stat_modifiers[stat]

    def get_stat_override(self, stat: Stat | str) -> int:
        return self._stat_modifiers[to_stat(stat)]

    def get_stat_overrides(self) -> dict[Stat, int]:
        return dict(self._stat_modifiers)

    def update_inventory_stats(self) -> None:
        """Push effective stats to the inventory for requirement checks."""
        self.inventory.set_character_stats(self.get_effective_stats())

    def _stats_changed(self) -> None:
        self.update_inventory_stats()
        self._recompute_resource_maxes(fill=False)

    # =========================================================================
    # THRESHOLDS AND RESOURCES
    # =========================================================================

    @property
    def sorcery_threshold_level(self) -> Optional[int]:
        return self._sorcery_threshold_level

    @property
    def double_sorcery_threshold_level(self) -> Optional[int]:
        return self._double_sorcery_threshold_level

    @property
    def finesse_threshold_level(self) -> Optional[int]:
        return self._finesse_threshold_level

    def _update_thresholds(self) -> None:
        """Record the current level for any stat condition met for the first time."""
        effective = self.get_effective_stats()
        if self._sorcery_threshold_level is None and effective[Stat.INT] >= MIN_SPELLCASTING_INT:
            self._sorcery_threshold_level = self.level
            logger.info(f"Sorcery unlocked at level {self.level}")
        if (
            self._double_sorcery_threshold_level is None
            and effective[Stat.INT] > DBL_SPELLCASTING_INT
        ):
            self._double_sorcery_threshold_level = self.level
            logger.info(f"Double sorcery progression unlocked at level {self.level}")
        if self._finesse_threshold_level is None and effective[Stat.DEX] >= MIN_FINESSE_DEX:
            self._finesse_threshold_level = self.level
            logger.info(f"Finesse unlocked at level {self.level}")

    def restore_thresholds(
        self,
        sorcery: Optional[int],
        double_sorcery: Optional[int],
        finesse: Optional[int],
    ) -> None:
        """
        Overwrite threshold levels with recorded values and refill resources.

        Only used when rebuilding a saved character.
        """
        self._sorcery_threshold_level = sorcery
        self._double_sorcery_threshold_level = double_sorcery
        self._finesse_threshold_level = finesse
        self._recompute_resource_maxes(fill=True)

    def _recompute_resource_maxes(self, fill: bool, grow: bool = True) -> None:
        """
        Recompute resource maxes from thresholds, level and effective strength.

        Args:
            fill: Set current values to the new max
            grow: When not filling, add any increase in max to current.
                Current is always clamped to the new max.
        """
        new_maxes = {
            "sorcery": sorcery_max(
                self.level,
                self._sorcery_threshold_level,
                self._double_sorcery_threshold_level,
            ),
            "finesse": finesse_max(self.level, self._finesse_threshold_level),
            "combat": combat_max(self.level, self.get_effective_stat(Stat.STR)),
        }
        pools = {
            "sorcery": ("sorcery_points", "max_sorcery_points"),
            "finesse": ("finesse_points", "max_finesse_points"),
            "combat": ("combat_maneuver_points", "max_combat_maneuver_points"),
        }
        for key, (current_attr, max_attr) in pools.items():
            new_max = new_maxes[key]
            old_max = getattr(self, max_attr)
            current = getattr(self, current_attr)
            if fill:
                current = new_max
            elif grow and new_max > old_max:
                current = min(current + (new_max - old_max), new_max)
            else:
                current = min(current, new_max)
            setattr(self, max_attr, new_max)
            setattr(self, current_attr, current)

        logger.debug(
            f"Resources: sorcery {self.sorcery_points}/{self.max_sorcery_points}, "
            f"finesse {self.finesse_points}/{self.max_finesse_points}, "
            f"combat {self.combat_maneuver_points}/{self.max_combat_maneuver_points}"
        )
        self._update_ability_access()

    def _update_ability_access(self) -> None:
        unlocked: set[AbilityType] = set()
        if self.max_sorcery_points > 0:
            unlocked.update({AbilityType.METAMAGIC, AbilityType.SPELLWORD})
        if self.max_combat_maneuver_points > 0:
            unlocked.add(AbilityType.COMBAT_MANEUVER)
        self.ability_manager.set_unlocked_types(unlocked)

    def maneuvers(self, stat: Stat | str) -> int:
        """Current resource tied to a stat: sorcery (INT), finesse (DEX), combat (STR)."""
        stat = to_stat(stat)
        if stat == Stat.INT:
            return self.sorcery_points
        if stat == Stat.DEX:
            return self.finesse_points
        return self.combat_maneuver_points

    def _spend(self, current_attr: str, label: str) -> bool:
        current = getattr(self, current_attr)
        if current <= 0:
            logger.info(f"No {label} points to spend")
            return False
        setattr(self, current_attr, current - 1)
        logger.info(f"Spent {label} point, {current - 1} remaining")
        return True

    def spend_sorcery_point(self) -> bool:
        return self._spend("sorcery_points", "sorcery")

    def spend_finesse_point(self) -> bool:
        return self._spend("finesse_points", "finesse")

    def spend_combat_maneuver_point(self) -> bool:
        return self._spend("combat_maneuver_points", "combat maneuver")

    def rest(self) -> None:
        """Restore all resources to max. Hit points are unaffected."""
        self.sorcery_points = self.max_sorcery_points
        self.finesse_points = self.max_finesse_points
        self.combat_maneuver_points = self.max_combat_maneuver_points
        logger.info("Rested: all resources restored")

    def long_rest(self) -> None:
        self.rest()

    def short_rest(self) -> None:
        """Restore half of each max (rounded up), capped at max."""
        self.sorcery_points = min(
            self.max_sorcery_points,
            self.sorcery_points + -(-self.max_sorcery_points // 2),
        )
        self.finesse_points = min(
            self.max_finesse_points,
            self.finesse_points + -(-self.max_finesse_points // 2),
        )
        self.combat_maneuver_points = min(
            self.max_combat_maneuver_points,
            self.combat_maneuver_points + -(-self.max_combat_maneuver_points // 2),
        )
        logger.info(
            f"Short rest: sorcery {self.sorcery_points}/{self.max_sorcery_points}, "
            f"finesse {self.finesse_points}/{self.max_finesse_points}, "
            f"combat {self.combat_maneuver_points}/{self.max_combat_maneuver_points}"
        )

    def can_perform_finesse_attacks(self) -> bool:
        return self.get_effective_stat(Stat.DEX) >= MIN_FINESSE_DEX and self.finesse_points > 0

    # =========================================================================
    # HIT POINTS
    # =========================================================================

    def roll_hp(self) -> int:
        """
        Roll hit points for the current level and add them to the total.

        Returns:
            The hit points gained (at least 1)
        """
        hit_die, str_mod = hit_die_for_strength(self.get_effective_stat(Stat.STR))
        roll = DiceSettings.roll_or_average(1, hit_die, str_mod, f"HP for level {self.level}")
        gained = max(roll, 1)
        self.hp_rolls.append(gained)
        self.hp += gained
        logger.debug(f"Rolled HP for level {self.level}: 1d{hit_die}+{str_mod} -> {gained}")
        return gained

    def restore_hp_rolls(self, hp_rolls: Sequence[int]) -> None:
        """Replace the hit point history with recorded rolls."""
        self.hp_rolls = list(hp_rolls)
        self.hp = sum(self.hp_rolls)

    # =========================================================================
    # LEVEL-UP
    # =========================================================================

    @property
    def pending_level_up_points(self) -> int:
        return self._level_up_state.pending_points

    @property
    def level_up_state(self) -> LevelUpState:
        return self._level_up_state

    def level_up(self, stat: Stat | str) -> bool:
        """
        Gain a level and put both stat points into one stat.

        Returns:
            False if a split level-up is still waiting for allocations
        """
        stat = to_stat(stat)
        if self._level_up_state.is_leveling:
            logger.info(
                f"Cannot level up: {self.pending_level_up_points} point(s) still pending"
            )
            return False

        old_value = self.stats[stat]
        self.stats[stat] += LEVEL_UP_STAT_INCREASE
        self.level += 1
        self.level_up_choices.append(stat)
        self.level_up_steps.append(LevelUpStep(StepMode.FULL, [stat]))
        self.update_inventory_stats()
        self.roll_hp()
        self._finalize_level_up()

        logger.info(
            f"Leveled up to {self.level}: {stat.value} {old_value} -> {self.stats[stat]}"
        )
        return True

    def start_level_up(self) -> bool:
        """
        Gain a level now and allocate its stat points one at a time.

        Returns:
            False if points from a previous split level-up are still pending
        """
        if self._level_up_state.is_leveling:
            logger.info(
                f"Cannot start level up: {self.pending_level_up_points} point(s) pending"
            )
            return False

        self.level += 1
        self._level_up_state = LevelUpState.leveling(LEVEL_UP_STAT_INCREASE)
        self.level_up_steps.append(LevelUpStep(StepMode.SPLIT, []))
        self.roll_hp()
        logger.info(
            f"Started level up to {self.level} with {self.pending_level_up_points} points"
        )
        return True

    def allocate_point(self, stat: Stat | str) -> bool:
        """
        Spend one pending level-up point on a stat.

        Finalizes the level-up once no points remain.

        Returns:
            False if there are no pending points
        """
        stat = to_stat(stat)
        if not self._level_up_state.is_leveling:
            logger.info("Cannot allocate point: no pending level-up points")
            return False

        self.stats[stat] += 1
        self.level_up_choices.append(stat)
        self.level_up_steps[-1].choices.append(stat)
        self._level_up_state = self._level_up_state.allocate()
        logger.info(
            f"Allocated 1 point to {stat.value} ({self.stats[stat]}), "
            f"{self.pending_level_up_points} remaining"
        )

        if self._level_up_state.is_leveling:
            self.update_inventory_stats()
            self._recompute_resource_maxes(fill=False, grow=False)
        else:
            self.update_inventory_stats()
            self._finalize_level_up()
        return True

    def _finalize_level_up(self) -> None:
        self._update_thresholds()
        self._recompute_resource_maxes(fill=True)

    # =========================================================================
    # EQUIPMENT
    # =========================================================================

    @property
    def armor(self) -> ArmorType:
        item = self.inventory.get_equipped_item_by_slot(EquipmentSlot.ARMOR)
        if item is None or item.armor_type is None:
            return ArmorType.NONE
        return item.armor_type

    @property
    def weapon(self) -> WeaponType:
        item = self.inventory.get_equipped_item_by_slot(EquipmentSlot.MAIN_HAND)
        if item is None or item.weapon_type is None:
            return WeaponType.NONE
        return item.weapon_type

    @property
    def shield(self) -> bool:
        return self.inventory.get_equipped_item_by_slot(EquipmentSlot.SHIELD) is not None

    def equip_item(self, item_id: str) -> InventoryResult:
        self.update_inventory_stats()
        return self.inventory.equip_item(item_id)

    def unequip_item(self, item_id: str) -> bool:
        return self.inventory.unequip_item(item_id)

    def get_equipped_stat_bonuses(self) -> dict[Stat, int]:
        bonuses = {stat: 0 for stat in Stat}
        for item in self.inventory.get_equipped_items():
            for bonus in item.stat_bonuses:
                bonuses[bonus.stat] += bonus.bonus
        return bonuses

    def get_equipped_maneuver_bonuses(self) -> dict[ManeuverType, int]:
        bonuses = {maneuver: 0 for maneuver in ManeuverType}
        for item in self.inventory.get_equipped_items():
            for bonus in item.maneuver_bonuses:
                bonuses[bonus.type] += bonus.bonus
        return bonuses

    def ac(self) -> int:
        """Armor class from dexterity, armor, shield and armor enchantments."""
        dex = self.get_effective_stat(Stat.DEX) + self.get_equipped_stat_bonuses()[Stat.DEX]
        total = (
            BASE_AC
            + ability_modifier(dex)
            + ARMOR_MODS[self.armor]
            + (SHIELD_AC if self.shield else 0)
            + self.inventory.get_equipped_enchantment_ac_bonus()
        )
        logger.debug(f"AC {total} (armor {self.armor.value}, shield {self.shield})")
        return total

    def hide(self) -> int:
        """Stealth roll; the level bonus doubles for a nimble character out of heavy armor."""
        dex = self.get_effective_stat(Stat.DEX)
        factor = 2 if dex >= MIN_FINESSE_DEX and self.armor != ArmorType.HEAVY else 1
        return DiceSettings.roll_or_average(
            1, 20, ability_modifier(dex) + self.level * factor, "hide"
        )

    def proficiency(self) -> int:
        return self.level

    # =========================================================================
    # ABILITIES AND NOTES
    # =========================================================================

    def learn_ability(self, name: str, ability_type: AbilityType | str) -> bool:
        return self.ability_manager.learn_ability(name, AbilityType(ability_type), self.level)

    def forget_ability(self, name: str, ability_type: AbilityType | str) -> bool:
        return self.ability_manager.forget_ability(name, AbilityType(ability_type))

    def get_notes(self) -> str:
        return self.notes

    def set_notes(self, notes: str) -> None:
        self.notes = notes or ""

    # =========================================================================
    # DISPLAY
    # =========================================================================

    def summary(self) -> dict[str, Any]:
        """Plain dictionary of the character's current sheet."""
        effective = self.get_effective_stats()
        return {
            "race": self.race.value if self.race else None,
            "level": self.level,
            "hp": self.hp,
            "ac": self.ac(),
            "stats": {stat.value: value for stat, value in self.stats.items()},
            "effective_stats": {stat.value: value for stat, value in effective.items()},
            "modifiers": {stat.value: ability_modifier(v) for stat, v in effective.items()},
            "sorcery_points": f"{self.sorcery_points}/{self.max_sorcery_points}",
            "finesse_points": f"{self.finesse_points}/{self.max_finesse_points}",
            "combat_maneuver_points": (
                f"{self.combat_maneuver_points}/{self.max_combat_maneuver_points}"
            ),
            "armor": self.armor.value,
            "weapon": self.weapon.value,
            "shield": self.shield,
            "abilities": list(self.abilities),
            "learned_abilities": [a.name for a in self.ability_manager.get_all_abilities()],
            "equipped": [
                item.name for item in self.inventory.get_equipped_items()
            ],
            "items": len(self.inventory.get_items()),
            "pending_level_up_points": self.pending_level_up_points,
        }
