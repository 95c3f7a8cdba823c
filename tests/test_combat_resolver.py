"""
Tests for the combat resolver: attack and damage rolls, finesse attacks
and armor class.

All tests run in average mode, so every die is replaced by its floored
average (d20 = 10, d8 = 4, d6 = 3, 2d6 = 7, 2d8 = 9).
"""

import pytest

from src.character.character import Character
from src.combat import Hand, RollBreakdown
from src.data_models import ItemType, Stat
from src.items.inventory_manager import InventoryItem, StatBonus


class TestMainHand:
    """Tests for main-hand attack and damage."""

    def test_longsword_attack(self, fighter, equip):
        """Test d20 + STR modifier + level."""
        equip(fighter, "Longsword")
        result = fighter.combat.attack_with_breakdown(Hand.MAIN)
        assert result.result == 14
        assert result.breakdown == "10 (1d20) + 3 (STR modifier) + 1 (level)"

    def test_longsword_damage(self, fighter, equip):
        """Test weapon die + STR modifier."""
        equip(fighter, "Longsword")
        result = fighter.combat.damage_with_breakdown(Hand.MAIN)
        assert result.result == 7
        assert result.breakdown == "4 (1d8) + 3 (STR modifier)"

    def test_greatsword_damage(self, fighter, equip):
        """Test the two-handed die is a d12."""
        equip(fighter, "Greatsword")
        assert fighter.combat.main_hand_damage_roll() == 9

    def test_cursed_weapon(self, fighter, equip):
        """Test a negative enchantment lowers attack and damage."""
        equip(fighter, "Longsword", enchantment_level=-2)
        damage = fighter.combat.damage_with_breakdown(Hand.MAIN)
        assert damage.result == 5
        assert damage.breakdown.endswith(" - 2 (cursed)")
        assert fighter.combat.main_hand_attack_roll() == 12

    def test_enchanted_weapon(self, fighter, equip):
        """Test a positive enchantment is listed in the breakdown."""
        equip(fighter, "Longsword", enchantment_level=1)
        attack = fighter.combat.attack_with_breakdown("main-hand")
        assert attack.result == 15
        assert attack.breakdown.endswith(" + 1 (level) + 1 (enchantment)")

    def test_staff_uses_intelligence(self, fighter, equip):
        """Test a staff attacks with INT, negative modifiers shown as minus."""
        equip(fighter, "Staff")
        result = fighter.combat.attack_with_breakdown(Hand.MAIN)
        assert result.result == 9
        assert result.breakdown == "10 (1d20) - 2 (INT modifier) + 1 (level)"

    def test_ranged_uses_dexterity(self, rogue, equip):
        """Test ranged weapons use DEX."""
        equip(rogue, "Longbow")
        assert rogue.combat.main_hand_attack_roll() == 14
        assert rogue.combat.main_hand_damage_roll() == 6

    def test_level_adds_to_attack(self, fighter, equip):
        """Test the level bonus grows with level."""
        equip(fighter, "Longsword")
        fighter.level_up(Stat.DEX)
        fighter.level_up(Stat.DEX)
        assert fighter.combat.main_hand_attack_roll() == 16


class TestOffHand:
    """Tests for off-hand attack and damage."""

    def test_no_level_and_no_damage_modifier(self, fighter, equip):
        """Test the off hand skips level on attack and the stat on damage."""
        equip(fighter, "Longsword")
        equip(fighter, "Dagger")

        attack = fighter.combat.attack_with_breakdown(Hand.OFF)
        assert attack.result == 10
        assert attack.breakdown == "10 (1d20) + 0 (DEX modifier)"

        damage = fighter.combat.damage_with_breakdown(Hand.OFF)
        assert damage.result == 3
        assert damage.breakdown == "3 (1d6)"

    def test_empty_hand(self, fighter):
        """Test an empty hand gives zero."""
        result = fighter.combat.attack_with_breakdown(Hand.OFF)
        assert result == RollBreakdown(0, "No weapon equipped")
        assert fighter.combat.off_hand_damage_roll() == 0
        assert fighter.combat.main_hand_attack_roll() == 0

    def test_two_hander_leaves_off_hand_empty(self, fighter, equip):
        """Test the off hand is empty while a two-hander is held."""
        equip(fighter, "Dagger")
        equip(fighter, "Greatsword")
        assert fighter.combat.off_hand_attack_roll() == 0


class TestSneakAttack:
    """Tests for sneak attacks."""

    def test_spends_point_before_counting_dice(self, rogue, equip):
        """Test the last point is spent and adds no sneak dice."""
        rogue.level_up(Stat.DEX)
        equip(rogue, "Rapier")

        result = rogue.combat.sneak_attack_main_hand()
        assert result.result == 7
        assert result.breakdown == "3 (1d6) + 4 (DEX modifier) + 0 (0d8 sneak attack)"
        assert rogue.finesse_points == 0

    def test_remaining_points_add_dice(self, rogue, equip):
        """Test each point left after spending adds a d8."""
        rogue.level_up(Stat.DEX)
        rogue.level_up(Stat.DEX)
        assert rogue.finesse_points == 2
        equip(rogue, "Rapier", enchantment_level=2)

        result = rogue.combat.sneak_attack(Hand.MAIN)
        assert result.result == 14
        assert result.breakdown == (
            "3 (1d6) + 5 (DEX modifier) + 2 (enchantment) + 4 (1d8 sneak attack)"
        )
        assert rogue.finesse_points == 1

    def test_off_hand_skips_modifier(self, rogue, equip):
        """Test off-hand sneak attacks leave out the stat modifier."""
        rogue.level_up(Stat.DEX)
        rogue.level_up(Stat.DEX)
        equip(rogue, "Rapier")
        equip(rogue, "Dagger")
        result = rogue.combat.sneak_attack_off_hand()
        assert result.breakdown == "3 (1d6) + 4 (1d8 sneak attack)"
        assert result.result == 7

    def test_no_points(self, fighter, equip):
        """Test a sneak attack without finesse points fails."""
        equip(fighter, "Longsword")
        result = fighter.combat.sneak_attack(Hand.MAIN)
        assert result == RollBreakdown(0, "No finesse points available")

    def test_no_weapon(self, rogue):
        """Test a sneak attack needs a weapon in the chosen hand."""
        assert rogue.combat.sneak_attack_main_hand().breakdown == "No main-hand weapon equipped"
        assert rogue.combat.sneak_attack_off_hand().breakdown == "No off-hand weapon equipped"
        assert rogue.finesse_points == 1

    def test_points_checked_before_weapon(self, rogue):
        """Test missing points are reported before a missing weapon."""
        rogue.spend_finesse_point()
        assert rogue.combat.sneak_attack_main_hand().breakdown == "No finesse points available"


class TestAssassination:
    """Tests for assassination."""

    def test_critical_dice(self, rogue, equip):
        """Test weapon dice double and sneak dice are 2d8 per point."""
        equip(rogue, "Rapier", enchantment_level=2)
        result = rogue.combat.assassination_main_hand()
        assert result.result == 21
        assert result.breakdown == (
            "7 (2d6 critical) + 3 (DEX modifier) + 2 (enchantment) "
            "+ 9 (2d8 critical sneak attack)"
        )

    def test_spends_nothing(self, rogue, equip):
        """Test assassination keeps the finesse point."""
        equip(rogue, "Rapier")
        assert rogue.combat.assassination(Hand.MAIN).result == 19
        assert rogue.finesse_points == 1

    def test_needs_points(self, fighter, equip):
        """Test assassination still needs a finesse point."""
        equip(fighter, "Dagger")
        assert fighter.combat.assassination_off_hand().result == 0


class TestAttacksPerRound:
    """Tests for attacks_per_round."""

    @pytest.mark.parametrize("level,attacks", [(1, 1), (3, 1), (4, 2), (8, 3), (12, 3)])
    def test_by_level(self, level, attacks):
        """Test the attack table, capped at its last entry."""
        character = Character(Stat.STR, Stat.DEX)
        for _ in range(level - 1):
            character.level_up(Stat.DEX)
        assert character.combat.attacks_per_round() == attacks


class TestArmorClass:
    """Tests for Character.ac()."""

    def test_unarmored(self, fighter, rogue):
        """Test base AC plus DEX modifier."""
        assert fighter.ac() == 13
        assert rogue.ac() == 16

    def test_armor_and_shield(self, fighter, equip):
        """Test armor, shield and their enchantments add up."""
        equip(fighter, "Plate Armor", enchantment_level=2)
        equip(fighter, "Tower Shield", enchantment_level=2)
        assert fighter.ac() == 22

    def test_medium_armor(self, fighter, equip):
        """Test medium armor adds 2."""
        equip(fighter, "Chain Mail")
        assert fighter.ac() == 15

    def test_dex_bonus_from_items(self, fighter, catalog):
        """Test equipped DEX bonuses count toward AC."""
        boots = InventoryItem(
            name="Boots of Speed",
            type=ItemType.ACCESSORY,
            stat_bonuses=[StatBonus(Stat.DEX, 2)],
        )
        fighter.inventory.add_item(boots)
        fighter.equip_item(boots.id)
        assert fighter.get_equipped_stat_bonuses()[Stat.DEX] == 2
        assert fighter.ac() == 14

    def test_unequipped_armor_ignored(self, fighter, catalog):
        """Test armor in the pack does not count."""
        fighter.inventory.add_item(catalog.create("Plate Armor", enchantment_level=3))
        assert fighter.ac() == 13
