"""
Inventory Manager for the character rules engine.

Owns the items a character carries, tracks which are equipped and in which
slot, and enforces stat requirements and slot conflicts when equipping.

Slot rules:
- Two-handed weapons (two-hand, ranged) take the main hand and clear the
  off hand and any shield.
- Other weapons fill main hand, then off hand, then replace the main hand.
- A shield displaces an off-hand weapon, and cannot be equipped while a
  two-handed weapon is held.
- Armor only ever replaces armor.
- Accessories are equipped without a slot.

The manager never reads the character live; the owner pushes its effective
stats through set_character_stats() whenever they change.
"""

from dataclasses import dataclass, field
from typing import Any, Optional
import logging
import uuid

from src.data_models import (
    ARMOR_MODS,
    ARMOR_STR_REQ,
    MAX_ENCHANTMENT,
    MIN_ENCHANTMENT,
    SHIELD_AC,
    TWO_HANDED_WEAPONS,
    WEAPON_DIE,
    WEAPON_STAT,
    ArmorType,
    EquipmentSlot,
    ItemType,
    ManeuverType,
    Stat,
    WeaponType,
)

logger = logging.getLogger(__name__)


# =============================================================================
# ITEM DATA
# =============================================================================


@dataclass
class StatBonus:
    """Flat stat bonus granted while an item is equipped."""
    stat: Stat
    bonus: int

    def to_dict(self) -> dict[str, Any]:
        return {"stat": self.stat.value, "bonus": self.bonus}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "StatBonus":
        return cls(stat=Stat(data["stat"]), bonus=data.get("bonus", 0))


@dataclass
class ManeuverBonus:
    """Bonus to a resource pool granted while an item is equipped."""
    type: ManeuverType
    bonus: int

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type.value, "bonus": self.bonus}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ManeuverBonus":
        return cls(type=ManeuverType(data["type"]), bonus=data.get("bonus", 0))


@dataclass
class InventoryItem:
    """A single piece of equipment."""
    name: str
    type: ItemType
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    equipped: bool = False
    equipment_slot: Optional[EquipmentSlot] = None
    enchantment_level: int = 0
    description: Optional[str] = None
    stat_bonuses: list[StatBonus] = field(default_factory=list)
    maneuver_bonuses: list[ManeuverBonus] = field(default_factory=list)
    abilities: list[str] = field(default_factory=list)
    weapon_type: Optional[WeaponType] = None
    armor_type: Optional[ArmorType] = None
    is_shield: bool = False
    stat_requirements: dict[Stat, int] = field(default_factory=dict)

    def __post_init__(self):
        # Accept plain strings from templates and JSON
        self.type = ItemType(self.type)
        if self.weapon_type is not None:
            self.weapon_type = WeaponType(self.weapon_type)
        if self.armor_type is not None:
            self.armor_type = ArmorType(self.armor_type)
        if self.equipment_slot is not None:
            self.equipment_slot = EquipmentSlot(self.equipment_slot)
        self.stat_requirements = {Stat(k): v for k, v in self.stat_requirements.items()}

    @property
    def is_two_handed(self) -> bool:
        return self.type == ItemType.WEAPON and self.weapon_type in TWO_HANDED_WEAPONS

    @property
    def weapon_die(self) -> int:
        """Damage die size, 0 for non-weapons."""
        if self.type != ItemType.WEAPON:
            return 0
        return WEAPON_DIE[self.weapon_type or WeaponType.NONE]

    @property
    def governing_stat(self) -> Stat:
        """Stat that drives attack and damage modifiers."""
        return WEAPON_STAT[self.weapon_type or WeaponType.NONE]

    @property
    def ac_bonus(self) -> int:
        """Base AC contribution before enchantment."""
        if self.type == ItemType.ARMOR:
            return ARMOR_MODS[self.armor_type or ArmorType.NONE]
        if self.type == ItemType.SHIELD:
            return SHIELD_AC
        return 0

    def requirements(self) -> dict[Stat, int]:
        """
        Minimum stats needed to equip this item.

        Armor always carries the strength requirement of its weight class;
        an explicit requirement on the item wins when it is higher.
        """
        required = dict(self.stat_requirements)
        if self.type == ItemType.ARMOR and self.armor_type:
            armor_req = ARMOR_STR_REQ[self.armor_type]
            if armor_req > required.get(Stat.STR, 0):
                required[Stat.STR] = armor_req
        return required

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "id": self.id,
            "name": self.name,
            "type": self.type.value,
            "equipped": self.equipped,
            "equipment_slot": self.equipment_slot.value if self.equipment_slot else None,
            "enchantment_level": self.enchantment_level,
            "description": self.description,
            "stat_bonuses": [b.to_dict() for b in self.stat_bonuses],
            "maneuver_bonuses": [b.to_dict() for b in self.maneuver_bonuses],
            "abilities": list(self.abilities),
            "weapon_type": self.weapon_type.value if self.weapon_type else None,
            "armor_type": self.armor_type.value if self.armor_type else None,
            "is_shield": self.is_shield,
            "stat_requirements": {s.value: v for s, v in self.stat_requirements.items()},
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "InventoryItem":
        """
        Create from dictionary.

        Accepts the older camelCase keys (weaponType, enchantmentLevel, ...)
        so inventories saved before the snake_case format still load.
        """
        def pick(snake: str, camel: str, default: Any = None) -> Any:
            if snake in data:
                return data[snake]
            return data.get(camel, default)

        weapon_type = pick("weapon_type", "weaponType")
        armor_type = pick("armor_type", "armorType")
        slot = pick("equipment_slot", "equipmentSlot")
        item_type = ItemType(data["type"])

        return cls(
            id=data.get("id") or str(uuid.uuid4()),
            name=data.get("name", ""),
            type=item_type,
            equipped=data.get("equipped", False),
            equipment_slot=EquipmentSlot(slot) if slot else None,
            enchantment_level=pick("enchantment_level", "enchantmentLevel", 0) or 0,
            description=data.get("description"),
            stat_bonuses=[
                StatBonus.from_dict(b) for b in pick("stat_bonuses", "statBonuses", []) or []
            ],
            maneuver_bonuses=[
                ManeuverBonus.from_dict(b)
                for b in pick("maneuver_bonuses", "maneuverBonuses", []) or []
            ],
            abilities=list(data.get("abilities") or []),
            weapon_type=WeaponType(weapon_type) if weapon_type else None,
            armor_type=ArmorType(armor_type) if armor_type else None,
            is_shield=pick("is_shield", "isShield", item_type == ItemType.SHIELD),
            stat_requirements={
                Stat(s): v
                for s, v in (pick("stat_requirements", "statRequirements", {}) or {}).items()
            },
        )


@dataclass
class CharacterInventory:
    """Snapshot of an inventory: the items plus an optional capacity."""
    items: list[InventoryItem] = field(default_factory=list)
    max_items: Optional[int] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "items": [item.to_dict() for item in self.items],
            "max_items": self.max_items,
        }

    @classmethod
    def from_dict(cls, data: Optional[dict[str, Any]]) -> "CharacterInventory":
        data = data or {}
        return cls(
            items=[InventoryItem.from_dict(i) for i in data.get("items", [])],
            max_items=data.get("max_items", data.get("maxItems")),
        )


@dataclass
class InventoryResult:
    """Outcome of an equip or enchant request."""
    success: bool
    message: Optional[str] = None
    displaced: list[str] = field(default_factory=list)  # ids bumped out of their slots


# =============================================================================
# INVENTORY MANAGER
# =============================================================================


class InventoryManager:
    """
    Manages a character's items and equipment slots.

    Handles:
    - Adding and removing items (unique ids, optional capacity)
    - Equipping with stat requirement checks against pushed stats
    - Slot conflict resolution for weapons, shields and armor
    - Enchantment adjustments within -3..+3
    """

    def __init__(self, initial_inventory: Optional[CharacterInventory] = None):
        """
        Initialize the inventory manager.

        Args:
            initial_inventory: Starting items (defaults to empty)
        """
        self._inventory = initial_inventory or CharacterInventory()
        self._character_stats: Optional[dict[Stat, int]] = None

    # =========================================================================
    # STAT SNAPSHOT
    # =========================================================================

    def set_character_stats(self, stats: dict[str, int]) -> None:
        """Update the stats used for requirement checks."""
        self._character_stats = {Stat(k): v for k, v in stats.items()}

    def get_character_stats(self) -> Optional[dict[Stat, int]]:
        return dict(self._character_stats) if self._character_stats is not None else None

    # =========================================================================
    # LOOKUPS
    # =========================================================================

    def get_item(self, item_id: str) -> Optional[InventoryItem]:
        for item in self._inventory.items:
            if item.id == item_id:
                return item
        return None

    def get_items(self) -> list[InventoryItem]:
        return list(self._inventory.items)

    def get_items_by_type(self, item_type: ItemType) -> list[InventoryItem]:
        return [item for item in self._inventory.items if item.type == item_type]

    def get_equipped_items(self) -> list[InventoryItem]:
        return [item for item in self._inventory.items if item.equipped]

    def get_equipped_item_by_type(self, item_type: ItemType) -> Optional[InventoryItem]:
        """First equipped item of a type, or None."""
        for item in self._inventory.items:
            if item.type == item_type and item.equipped:
                return item
        return None

    def get_equipped_item_by_slot(self, slot: EquipmentSlot) -> Optional[InventoryItem]:
        """Item occupying a slot, or None."""
        for item in self._inventory.items:
            if item.equipped and item.equipment_slot == slot:
                return item
        return None

    def get_equipped_weapons(self) -> tuple[Optional[InventoryItem], Optional[InventoryItem]]:
        """
        Get the equipped weapons.

        Returns:
            Tuple of (main_hand, off_hand), either may be None
        """
        return (
            self.get_equipped_item_by_slot(EquipmentSlot.MAIN_HAND),
            self.get_equipped_item_by_slot(EquipmentSlot.OFF_HAND),
        )

    # =========================================================================
    # ADD / REMOVE
    # =========================================================================

    def add_item(self, item: InventoryItem) -> bool:
        """
        Add an item to the inventory.

        Returns:
            False if the inventory is full or the id is already present
        """
        max_items = self._inventory.max_items
        if max_items is not None and len(self._inventory.items) >= max_items:
            logger.info(f"Cannot add {item.name}: inventory full ({max_items} items)")
            return False

        if self.get_item(item.id) is not None:
            logger.info(f"Cannot add {item.name}: duplicate item id {item.id}")
            return False

        self._inventory.items.append(item)
        logger.debug(f"Added {item.name} ({item.type.value}) to inventory")
        return True

    def remove_item(self, item_id: str) -> bool:
        item = self.get_item(item_id)
        if item is None:
            return False
        self._inventory.items.remove(item)
        logger.debug(f"Removed {item.name} from inventory (was equipped: {item.equipped})")
        return True

    # =========================================================================
    # EQUIPPING
    # =========================================================================

    def can_equip_item(self, item: InventoryItem) -> tuple[bool, Optional[str]]:
        """
        Check stat requirements and hard slot conflicts.

        Returns:
            Tuple of (allowed, reason when not allowed)
        """
        if self._character_stats is not None:
            requirements = item.requirements()
            for stat in Stat:
                required = requirements.get(stat, 0)
                have = self._character_stats.get(stat, 0)
                if have < required:
                    return False, f"Requires {required} {stat.value.upper()} (you have {have})"

        if item.type == ItemType.SHIELD:
            main_hand, off_hand = self.get_equipped_weapons()
            if (main_hand and main_hand.is_two_handed) or (off_hand and off_hand.is_two_handed):
                return False, (
                    "Cannot equip shield while wielding a two-handed weapon. "
                    "Unequip the weapon first."
                )

        return True, None

    def equip_item(self, item_id: str) -> InventoryResult:
        """
        Equip an item, displacing whatever conflicts with it.

        Args:
            item_id: Id of an item in this inventory

        Returns:
            InventoryResult with the ids of any displaced items
        """
        item = self.get_item(item_id)
        if item is None:
            return InventoryResult(False, "Item not found")

        if item.equipped:
            return InventoryResult(True)

        allowed, reason = self.can_equip_item(item)
        if not allowed:
            logger.info(f"Cannot equip {item.name}: {reason}")
            return InventoryResult(False, reason)

        displaced: list[str] = []

        if item.type == ItemType.WEAPON:
            target = self._resolve_weapon_slot(item, displaced)
        elif item.type == ItemType.SHIELD:
            _, off_hand = self.get_equipped_weapons()
            self._bump(off_hand, displaced)
            self._bump(self.get_equipped_item_by_slot(EquipmentSlot.SHIELD), displaced)
            target = EquipmentSlot.SHIELD
        elif item.type == ItemType.ARMOR:
            self._bump(self.get_equipped_item_by_slot(EquipmentSlot.ARMOR), displaced)
            target = EquipmentSlot.ARMOR
        else:
            target = None

        item.equipped = True
        item.equipment_slot = target
        logger.info(
            f"Equipped {item.name} in {target.value if target else 'no slot'}"
            + (f", displacing {len(displaced)} item(s)" if displaced else "")
        )
        return InventoryResult(True, displaced=displaced)

    def _resolve_weapon_slot(
        self,
        item: InventoryItem,
        displaced: list[str],
    ) -> EquipmentSlot:
        """Pick the slot for a weapon and clear anything in its way."""
        main_hand, off_hand = self.get_equipped_weapons()

        if item.is_two_handed:
            self._bump(main_hand, displaced)
            self._bump(off_hand, displaced)
            self._bump(self.get_equipped_item_by_slot(EquipmentSlot.SHIELD), displaced)
            return EquipmentSlot.MAIN_HAND

        if main_hand is None or main_hand.is_two_handed:
            self._bump(main_hand, displaced)
            return EquipmentSlot.MAIN_HAND

        if off_hand is None:
            self._bump(self.get_equipped_item_by_slot(EquipmentSlot.SHIELD), displaced)
            return EquipmentSlot.OFF_HAND

        self._bump(main_hand, displaced)
        return EquipmentSlot.MAIN_HAND

    @staticmethod
    def _bump(item: Optional[InventoryItem], displaced: list[str]) -> None:
        if item is None:
            return
        item.equipped = False
        item.equipment_slot = None
        displaced.append(item.id)

    def unequip_item(self, item_id: str) -> bool:
        """
        Unequip an item, leaving other slots untouched.

        Returns:
            False if the item is unknown or not equipped
        """
        item = self.get_item(item_id)
        if item is None or not item.equipped:
            return False
        item.equipped = False
        item.equipment_slot = None
        logger.info(f"Unequipped {item.name}")
        return True

    # =========================================================================
    # ENCHANTMENT
    # =========================================================================

    def modify_enchantment(self, item_id: str, change: int) -> InventoryResult:
        """Adjust an item's enchantment by a relative amount."""
        item = self.get_item(item_id)
        if item is None:
            return InventoryResult(False, "Item not found")

        new_level = item.enchantment_level + change
        if new_level < MIN_ENCHANTMENT:
            return InventoryResult(False, "Cannot enchant below -3 (maximum curse)")
        if new_level > MAX_ENCHANTMENT:
            return InventoryResult(False, "Cannot enchant above +3 (maximum enchantment)")

        old_level = item.enchantment_level
        item.enchantment_level = new_level
        logger.info(f"Enchantment of {item.name} changed from {old_level:+d} to {new_level:+d}")
        return InventoryResult(True)

    def set_enchantment(self, item_id: str, level: int) -> InventoryResult:
        """Set an item's enchantment directly."""
        item = self.get_item(item_id)
        if item is None:
            return InventoryResult(False, "Item not found")

        if level < MIN_ENCHANTMENT or level > MAX_ENCHANTMENT:
            return InventoryResult(False, "Enchantment level must be between -3 and +3")

        old_level = item.enchantment_level
        item.enchantment_level = level
        logger.info(f"Enchantment of {item.name} set from {old_level:+d} to {level:+d}")
        return InventoryResult(True)

    def get_equipped_enchantment_ac_bonus(self) -> int:
        """Sum of enchantment on equipped armor and shields."""
        return sum(
            item.enchantment_level
            for item in self._inventory.items
            if item.equipped and item.type in (ItemType.ARMOR, ItemType.SHIELD)
        )

    # =========================================================================
    # SNAPSHOTS
    # =========================================================================

    def get_inventory(self) -> CharacterInventory:
        """Shallow snapshot of the inventory."""
        return CharacterInventory(
            items=list(self._inventory.items),
            max_items=self._inventory.max_items,
        )

    def set_inventory(self, inventory: CharacterInventory) -> None:
        """Replace the inventory with a snapshot."""
        self._inventory = CharacterInventory(
            items=list(inventory.items),
            max_items=inventory.max_items,
        )
        equipped = sum(1 for item in self._inventory.items if item.equipped)
        logger.debug(f"Inventory set: {len(self._inventory.items)} items, {equipped} equipped")

    def to_dict(self) -> dict[str, Any]:
        return self._inventory.to_dict()

    def load_dict(self, data: Optional[dict[str, Any]]) -> None:
        self.set_inventory(CharacterInventory.from_dict(data))

    def get_inventory_summary(self) -> dict[str, Any]:
        by_type = {item_type.value: 0 for item_type in ItemType}
        for item in self._inventory.items:
            by_type[item.type.value] += 1
        return {
            "total": len(self._inventory.items),
            "equipped": len(self.get_equipped_items()),
            "by_type": by_type,
        }
