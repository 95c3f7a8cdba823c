"""
Item catalog and inventory management.

This module provides:
- InventoryManager: Owns a character's items, equipment slots and enchantments
- ItemCatalog: Base weapon, armor and shield templates plus custom JSON templates
"""

from src.items.inventory_manager import (
    StatBonus,
    ManeuverBonus,
    InventoryItem,
    CharacterInventory,
    InventoryResult,
    InventoryManager,
)
from src.items.item_catalog import (
    BASE_WEAPONS,
    BASE_ARMOR,
    BASE_SHIELDS,
    BASE_ITEMS,
    ItemCatalog,
    create_inventory_item,
    generate_weapon_description,
    generate_armor_description,
    generate_shield_description,
)

__all__ = [
    "StatBonus",
    "ManeuverBonus",
    "InventoryItem",
    "CharacterInventory",
    "InventoryResult",
    "InventoryManager",
    "BASE_WEAPONS",
    "BASE_ARMOR",
    "BASE_SHIELDS",
    "BASE_ITEMS",
    "ItemCatalog",
    "create_inventory_item",
    "generate_weapon_description",
    "generate_armor_description",
    "generate_shield_description",
]
