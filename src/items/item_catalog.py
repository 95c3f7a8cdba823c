"""
Item catalog for standard equipment.

Provides the built-in weapon, armor and shield templates plus an ItemCatalog
that can be extended with custom templates from JSON files.
"""

from copy import deepcopy
from pathlib import Path
from typing import Any, Optional
import json
import logging

from src.data_models import (
    ARMOR_MODS,
    SHIELD_AC,
    TWO_HANDED_WEAPONS,
    WEAPON_DIE,
    WEAPON_STAT,
    ArmorType,
    ItemType,
    Stat,
    WeaponType,
)
from src.items.inventory_manager import InventoryItem

logger = logging.getLogger(__name__)


STAT_NAMES: dict[Stat, str] = {
    Stat.STR: "strength",
    Stat.DEX: "dexterity",
    Stat.INT: "intelligence",
}


# =============================================================================
# DESCRIPTIONS
# =============================================================================


def generate_weapon_description(weapon_type: WeaponType) -> str:
    """Describe a weapon by its handling, stat and damage die."""
    weapon_type = WeaponType(weapon_type)
    if weapon_type == WeaponType.NONE:
        return "No weapon equipped"

    if weapon_type in (WeaponType.ONE_HAND, WeaponType.FINESSE):
        handling = "one-handed"
    elif weapon_type in TWO_HANDED_WEAPONS:
        handling = "two-handed"
    else:
        handling = "weapon"

    if weapon_type == WeaponType.RANGED:
        category = "ranged weapon"
    elif weapon_type == WeaponType.STAFF:
        category = "magical focus"
    else:
        category = "melee weapon"

    stat_name = STAT_NAMES[WEAPON_STAT[weapon_type]]
    return (
        f"A {handling}, {stat_name}-based {category} "
        f"that deals 1d{WEAPON_DIE[weapon_type]} damage"
    )


def generate_armor_description(armor_type: ArmorType) -> str:
    armor_type = ArmorType(armor_type)
    if armor_type == ArmorType.NONE:
        return "No armor equipped"
    return f"{armor_type.value.capitalize()} armor that provides +{ARMOR_MODS[armor_type]} AC"


def generate_shield_description() -> str:
    return f"A shield that provides +{SHIELD_AC} AC when equipped"


# =============================================================================
# BASE TEMPLATES
# =============================================================================


def _weapon(name: str, weapon_type: WeaponType) -> dict[str, Any]:
    return {
        "name": name,
        "type": ItemType.WEAPON,
        "weapon_type": weapon_type,
        "enchantment_level": 0,
        "description": generate_weapon_description(weapon_type),
    }


def _armor(name: str, armor_type: ArmorType) -> dict[str, Any]:
    return {
        "name": name,
        "type": ItemType.ARMOR,
        "armor_type": armor_type,
        "enchantment_level": 0,
        "description": generate_armor_description(armor_type),
    }


def _shield(name: str) -> dict[str, Any]:
    return {
        "name": name,
        "type": ItemType.SHIELD,
        "is_shield": True,
        "enchantment_level": 0,
        "description": generate_shield_description(),
    }


BASE_WEAPONS: list[dict[str, Any]] = [
    _weapon("Greatsword", WeaponType.TWO_HAND),
    _weapon("Longsword", WeaponType.ONE_HAND),
    _weapon("Rapier", WeaponType.FINESSE),
    _weapon("Longbow", WeaponType.RANGED),
    _weapon("Staff", WeaponType.STAFF),
    _weapon("Dagger", WeaponType.FINESSE),
    _weapon("Warhammer", WeaponType.ONE_HAND),
    _weapon("Crossbow", WeaponType.RANGED),
]

BASE_ARMOR: list[dict[str, Any]] = [
    _armor("Plate Armor", ArmorType.HEAVY),
    _armor("Chain Mail", ArmorType.MEDIUM),
    _armor("Leather Armor", ArmorType.LIGHT),
    _armor("Studded Leather", ArmorType.LIGHT),
    _armor("Scale Mail", ArmorType.MEDIUM),
    _armor("Splint Armor", ArmorType.HEAVY),
]

BASE_SHIELDS: list[dict[str, Any]] = [
    _shield("Wooden Shield"),
    _shield("Metal Shield"),
    _shield("Tower Shield"),
]

BASE_ITEMS: list[dict[str, Any]] = BASE_WEAPONS + BASE_ARMOR + BASE_SHIELDS


def create_inventory_item(template: dict[str, Any], **overrides: Any) -> InventoryItem:
    """
    Create a fresh, unequipped item with a unique id from a template.

    Args:
        template: Item fields (name, type, weapon_type, ...)
        **overrides: Fields replacing the template's values

    Returns:
        New InventoryItem
    """
    fields_ = deepcopy(template)
    fields_.update(overrides)
    fields_.pop("id", None)
    fields_["equipped"] = False
    fields_["equipment_slot"] = None
    return InventoryItem(**fields_)


# =============================================================================
# CATALOG
# =============================================================================


class ItemCatalog:
    """
    Catalog of item templates keyed by name.

    Starts with the base weapons, armor and shields. Extra templates can be
    loaded from JSON files shaped like:

        {"items": [{"name": "Halberd", "type": "weapon",
                    "weapon_type": "polearm"}, ...]}
    """

    def __init__(self, include_base_items: bool = True):
        self._templates: dict[str, dict[str, Any]] = {}
        if include_base_items:
            for template in BASE_ITEMS:
                self.register(template)

    def register(self, template: dict[str, Any]) -> None:
        """Add or replace a template by name."""
        name = template.get("name")
        if not name:
            raise ValueError("Item template requires a name")
        if name in self._templates:
            logger.warning(f"Duplicate item template '{name}' - overwriting")
        self._templates[name] = dict(template)

    def load_directory(self, items_path: Path | str) -> int:
        """
        Load every JSON template file under a directory.

        Returns:
            Number of templates loaded
        """
        items_path = Path(items_path)
        if not items_path.exists():
            logger.warning(f"Items directory not found: {items_path}")
            return 0

        loaded = 0
        for json_file in sorted(items_path.rglob("*.json")):
            try:
                loaded += self._load_file(json_file)
            except (OSError, json.JSONDecodeError, ValueError) as e:
                logger.error(f"Error loading {json_file}: {e}")

        logger.info(f"Loaded {loaded} item templates from {items_path}")
        return loaded

    def _load_file(self, json_file: Path) -> int:
        with open(json_file, "r", encoding="utf-8") as f:
            data = json.load(f)

        count = 0
        for template in data.get("items", []):
            item_type = ItemType(template["type"])
            if "description" not in template:
                if item_type == ItemType.WEAPON and template.get("weapon_type"):
                    template["description"] = generate_weapon_description(template["weapon_type"])
                elif item_type == ItemType.ARMOR and template.get("armor_type"):
                    template["description"] = generate_armor_description(template["armor_type"])
                elif item_type == ItemType.SHIELD:
                    template["description"] = generate_shield_description()
            self.register(template)
            count += 1
        return count

    def get(self, name: str) -> Optional[dict[str, Any]]:
        template = self._templates.get(name)
        return dict(template) if template else None

    def names(self, item_type: Optional[ItemType] = None) -> list[str]:
        """Template names, optionally filtered by item type."""
        return [
            name for name, template in self._templates.items()
            if item_type is None or ItemType(template["type"]) == item_type
        ]

    def create(self, name: str, **overrides: Any) -> Optional[InventoryItem]:
        """Create an item from a named template, or None if unknown."""
        template = self._templates.get(name)
        if template is None:
            return None
        return create_inventory_item(template, **overrides)
