"""
Tests for the inventory manager: adding items, equip slot rules, stat
requirements and enchantments.
"""

import pytest

from src.data_models import ArmorType, EquipmentSlot, ItemType, Stat, WeaponType
from src.items.inventory_manager import (
    CharacterInventory,
    InventoryItem,
    InventoryManager,
    StatBonus,
)


@pytest.fixture
def manager():
    """Inventory with strong stats so requirements never block."""
    inventory = InventoryManager()
    inventory.set_character_stats({"str": 18, "dex": 16, "int": 10})
    return inventory


@pytest.fixture
def add(manager, catalog):
    """Add a catalog item to the manager and return it."""
    def _add(name, **overrides):
        item = catalog.create(name, **overrides)
        assert manager.add_item(item)
        return item
    return _add


class TestAddRemove:
    """Tests for add_item and remove_item."""

    def test_add_and_get(self, manager, add):
        """Test items can be added and looked up."""
        sword = add("Longsword")
        assert manager.get_item(sword.id) is sword
        assert manager.get_items() == [sword]

    def test_duplicate_id_rejected(self, manager, add):
        """Test adding an item with an existing id fails."""
        sword = add("Longsword")
        copy = InventoryItem(name="Copy", type=ItemType.WEAPON, id=sword.id)
        assert manager.add_item(copy) is False
        assert len(manager.get_items()) == 1

    def test_capacity(self, catalog):
        """Test a full inventory rejects new items."""
        manager = InventoryManager(CharacterInventory(max_items=1))
        assert manager.add_item(catalog.create("Dagger")) is True
        assert manager.add_item(catalog.create("Dagger")) is False

    def test_remove(self, manager, add):
        """Test removing items, including unknown ids."""
        sword = add("Longsword")
        assert manager.remove_item(sword.id) is True
        assert manager.remove_item(sword.id) is False
        assert manager.get_items() == []

    def test_remove_equipped(self, manager, add):
        """Test removing an equipped item clears it from its slot."""
        sword = add("Longsword")
        manager.equip_item(sword.id)
        manager.remove_item(sword.id)
        assert manager.get_equipped_item_by_slot(EquipmentSlot.MAIN_HAND) is None

    def test_items_by_type(self, manager, add):
        """Test filtering by item type."""
        add("Longsword")
        add("Dagger")
        add("Chain Mail")
        assert len(manager.get_items_by_type(ItemType.WEAPON)) == 2
        assert len(manager.get_items_by_type(ItemType.SHIELD)) == 0


class TestWeaponSlots:
    """Tests for weapon slot resolution."""

    def test_first_weapon_main_hand(self, manager, add):
        """Test the first one-handed weapon goes to the main hand."""
        sword = add("Longsword")
        assert manager.equip_item(sword.id).success
        assert sword.equipment_slot == EquipmentSlot.MAIN_HAND

    def test_second_weapon_off_hand(self, manager, add):
        """Test a second one-handed weapon goes to the off hand."""
        sword = add("Longsword")
        dagger = add("Dagger")
        manager.equip_item(sword.id)
        manager.equip_item(dagger.id)
        assert manager.get_equipped_weapons() == (sword, dagger)

    def test_third_weapon_replaces_main_hand(self, manager, add):
        """Test a third weapon displaces the main hand."""
        sword = add("Longsword")
        dagger = add("Dagger")
        hammer = add("Warhammer")
        manager.equip_item(sword.id)
        manager.equip_item(dagger.id)

        result = manager.equip_item(hammer.id)
        assert result.displaced == [sword.id]
        assert manager.get_equipped_weapons() == (hammer, dagger)
        assert sword.equipped is False

    def test_two_handed_clears_hands_and_shield(self, manager, add):
        """Test a two-handed weapon clears both hands and the shield."""
        sword = add("Longsword")
        shield = add("Wooden Shield")
        greatsword = add("Greatsword")
        manager.equip_item(sword.id)
        manager.equip_item(shield.id)

        result = manager.equip_item(greatsword.id)
        assert result.success
        assert set(result.displaced) == {sword.id, shield.id}
        assert manager.get_equipped_weapons() == (greatsword, None)
        assert manager.get_equipped_item_by_slot(EquipmentSlot.SHIELD) is None

    def test_ranged_is_two_handed(self, manager, add):
        """Test ranged weapons count as two-handed."""
        bow = add("Longbow")
        assert bow.is_two_handed
        manager.equip_item(add("Dagger").id)
        manager.equip_item(bow.id)
        assert manager.get_equipped_weapons() == (bow, None)

    def test_one_hand_replaces_two_handed(self, manager, add):
        """Test a one-handed weapon replaces a held two-hander."""
        greatsword = add("Greatsword")
        sword = add("Longsword")
        manager.equip_item(greatsword.id)
        manager.equip_item(sword.id)
        assert manager.get_equipped_weapons() == (sword, None)

    def test_equip_already_equipped(self, manager, add):
        """Test re-equipping is a no-op success."""
        sword = add("Longsword")
        manager.equip_item(sword.id)
        result = manager.equip_item(sword.id)
        assert result.success
        assert result.displaced == []

    def test_unknown_item(self, manager):
        """Test equipping an unknown id fails."""
        result = manager.equip_item("missing")
        assert result.success is False
        assert result.message == "Item not found"


class TestShieldAndArmor:
    """Tests for shield and armor slots."""

    def test_shield_displaces_off_hand(self, manager, add):
        """Test a shield bumps the off-hand weapon."""
        sword = add("Longsword")
        dagger = add("Dagger")
        shield = add("Metal Shield")
        manager.equip_item(sword.id)
        manager.equip_item(dagger.id)

        result = manager.equip_item(shield.id)
        assert result.displaced == [dagger.id]
        assert shield.equipment_slot == EquipmentSlot.SHIELD
        assert manager.get_equipped_weapons() == (sword, None)

    def test_shield_blocked_by_two_hander(self, manager, add):
        """Test a shield cannot be equipped while holding a two-hander."""
        manager.equip_item(add("Greatsword").id)
        result = manager.equip_item(add("Wooden Shield").id)
        assert result.success is False
        assert "two-handed" in result.message

    def test_second_weapon_with_shield_goes_off_hand(self, manager, add):
        """Test a second weapon bumps the shield into the pack."""
        shield = add("Wooden Shield")
        sword = add("Longsword")
        dagger = add("Dagger")
        manager.equip_item(shield.id)
        manager.equip_item(sword.id)
        result = manager.equip_item(dagger.id)
        assert result.displaced == [shield.id]
        assert dagger.equipment_slot == EquipmentSlot.OFF_HAND

    def test_armor_replaces_armor(self, manager, add):
        """Test new armor displaces only the old armor."""
        sword = add("Longsword")
        chain = add("Chain Mail")
        leather = add("Leather Armor")
        manager.equip_item(sword.id)
        manager.equip_item(chain.id)

        result = manager.equip_item(leather.id)
        assert result.displaced == [chain.id]
        assert manager.get_equipped_item_by_slot(EquipmentSlot.ARMOR) is leather
        assert sword.equipped

    def test_accessory_has_no_slot(self, manager):
        """Test accessories are equipped without a slot."""
        ring = InventoryItem(
            name="Ring of Might",
            type=ItemType.ACCESSORY,
            stat_bonuses=[StatBonus(Stat.STR, 2)],
        )
        manager.add_item(ring)
        assert manager.equip_item(ring.id).success
        assert ring.equipped is True
        assert ring.equipment_slot is None

    def test_unequip(self, manager, add):
        """Test unequipping only touches the one item."""
        sword = add("Longsword")
        chain = add("Chain Mail")
        manager.equip_item(sword.id)
        manager.equip_item(chain.id)
        assert manager.unequip_item(sword.id) is True
        assert manager.unequip_item(sword.id) is False
        assert chain.equipped


class TestRequirements:
    """Tests for stat requirement checks."""

    @pytest.mark.parametrize("armor,strength,allowed", [
        ("Plate Armor", 16, True),
        ("Plate Armor", 15, False),
        ("Scale Mail", 14, True),
        ("Scale Mail", 13, False),
        ("Studded Leather", 12, True),
        ("Studded Leather", 11, False),
    ])
    def test_armor_strength(self, catalog, armor, strength, allowed):
        """Test armor weight classes require 16/14/12 STR."""
        manager = InventoryManager()
        manager.set_character_stats({"str": strength, "dex": 10, "int": 10})
        item = catalog.create(armor)
        manager.add_item(item)
        assert manager.equip_item(item.id).success is allowed

    def test_explicit_requirement(self, manager):
        """Test an item's own requirement is checked."""
        tome = InventoryItem(
            name="Tome", type=ItemType.ACCESSORY, stat_requirements={"int": 14}
        )
        manager.add_item(tome)
        result = manager.equip_item(tome.id)
        assert result.message == "Requires 14 INT (you have 10)"

    def test_higher_requirement_wins(self):
        """Test the armor class requirement is kept unless the item's is higher."""
        light = InventoryItem(
            name="Odd Leather", type=ItemType.ARMOR, armor_type=ArmorType.LIGHT,
            stat_requirements={Stat.STR: 15},
        )
        heavy = InventoryItem(
            name="Odd Plate", type=ItemType.ARMOR, armor_type=ArmorType.HEAVY,
            stat_requirements={Stat.STR: 10},
        )
        assert light.requirements()[Stat.STR] == 15
        assert heavy.requirements()[Stat.STR] == 16

    def test_no_stats_no_check(self, catalog):
        """Test requirements are skipped until stats are pushed."""
        manager = InventoryManager()
        plate = catalog.create("Plate Armor")
        manager.add_item(plate)
        assert manager.equip_item(plate.id).success


class TestEnchantment:
    """Tests for enchantment changes."""

    def test_modify(self, manager, add):
        """Test relative changes within range."""
        sword = add("Longsword")
        assert manager.modify_enchantment(sword.id, 2).success
        assert manager.modify_enchantment(sword.id, 1).success
        assert sword.enchantment_level == 3

    def test_modify_out_of_range(self, manager, add):
        """Test changes past +3 or -3 are rejected."""
        sword = add("Longsword", enchantment_level=3)
        result = manager.modify_enchantment(sword.id, 1)
        assert result.success is False
        assert sword.enchantment_level == 3

        dagger = add("Dagger", enchantment_level=-3)
        result = manager.modify_enchantment(dagger.id, -1)
        assert result.message == "Cannot enchant below -3 (maximum curse)"

    def test_set(self, manager, add):
        """Test setting an absolute level."""
        sword = add("Longsword")
        assert manager.set_enchantment(sword.id, -2).success
        assert sword.enchantment_level == -2
        assert manager.set_enchantment(sword.id, 4).success is False

    def test_unknown_item(self, manager):
        """Test enchanting an unknown id fails."""
        assert manager.set_enchantment("missing", 1).message == "Item not found"

    def test_ac_bonus_counts_armor_and_shield(self, manager, add):
        """Test only equipped armor and shields count toward AC."""
        chain = add("Chain Mail", enchantment_level=2)
        shield = add("Wooden Shield", enchantment_level=1)
        add("Longsword", enchantment_level=3)
        add("Leather Armor", enchantment_level=3)
        manager.equip_item(chain.id)
        manager.equip_item(shield.id)
        assert manager.get_equipped_enchantment_ac_bonus() == 3


class TestSerialization:
    """Tests for inventory snapshots."""

    def test_item_round_trip(self, catalog):
        """Test an item survives to_dict and from_dict."""
        item = catalog.create("Rapier", enchantment_level=1)
        item.stat_bonuses.append(StatBonus(Stat.DEX, 1))
        restored = InventoryItem.from_dict(item.to_dict())
        assert restored == item

    def test_camel_case_keys(self):
        """Test older camelCase records still load."""
        item = InventoryItem.from_dict({
            "id": "abc",
            "name": "Old Bow",
            "type": "weapon",
            "weaponType": "ranged",
            "enchantmentLevel": 2,
            "equipped": True,
            "equipmentSlot": "main-hand",
        })
        assert item.weapon_type == WeaponType.RANGED
        assert item.enchantment_level == 2
        assert item.equipment_slot == EquipmentSlot.MAIN_HAND

    def test_load_dict(self, manager, add):
        """Test loading a snapshot replaces the inventory."""
        sword = add("Longsword")
        manager.equip_item(sword.id)
        data = manager.to_dict()

        other = InventoryManager()
        other.load_dict(data)
        assert other.get_equipped_item_by_slot(EquipmentSlot.MAIN_HAND).id == sword.id

    def test_summary(self, manager, add):
        """Test the inventory summary counts."""
        manager.equip_item(add("Longsword").id)
        add("Chain Mail")
        summary = manager.get_inventory_summary()
        assert summary["total"] == 2
        assert summary["equipped"] == 1
        assert summary["by_type"]["weapon"] == 1
