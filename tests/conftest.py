"""
Pytest fixtures for the character engine test suite.

Provides dice fixtures, ready-made characters and catalog items.
"""

import pytest

from src.character.character import Character
from src.data_models import DiceRoller, DiceSettings, Race, Stat
from src.items.item_catalog import ItemCatalog
from src.storage import CharacterManager, InMemoryCharacterStorage


# =============================================================================
# DICE FIXTURES
# =============================================================================


@pytest.fixture(autouse=True)
def average_dice():
    """Every test starts in average mode with an empty roll log."""
    DiceSettings.set_use_dice_rolls(False)
    DiceRoller.clear_roll_log()
    yield
    DiceSettings.set_use_dice_rolls(False)
    DiceRoller.clear_roll_log()


@pytest.fixture
def seeded_dice():
    """Provide a seeded DiceRoller for reproducible tests."""
    DiceRoller.clear_roll_log()
    DiceRoller.set_seed(42)
    yield DiceRoller()
    DiceRoller.clear_roll_log()


@pytest.fixture
def clean_dice():
    """Provide a clean DiceRoller without seed."""
    DiceRoller.clear_roll_log()
    yield DiceRoller()
    DiceRoller.clear_roll_log()


@pytest.fixture
def random_dice(seeded_dice):
    """Random dice mode with a fixed seed."""
    DiceSettings.set_use_dice_rolls(True)
    yield seeded_dice
    DiceSettings.set_use_dice_rolls(False)


# =============================================================================
# CHARACTER FIXTURES
# =============================================================================


@pytest.fixture
def fighter():
    """STR 16, DEX 10, INT 6, no race."""
    return Character(Stat.STR, Stat.DEX)


@pytest.fixture
def rogue():
    """DEX 16, STR 10, INT 6, no race."""
    return Character(Stat.DEX, Stat.STR)


@pytest.fixture
def mage():
    """INT 16, DEX 10, STR 6, no race."""
    return Character(Stat.INT, Stat.DEX)


@pytest.fixture
def human_fighter():
    """Human with STR 17, DEX 11, INT 6."""
    return Character(Stat.STR, Stat.DEX, Race.HUMAN, [Stat.STR, Stat.DEX])


# =============================================================================
# ITEM FIXTURES
# =============================================================================


@pytest.fixture
def catalog():
    """Item catalog with the base items."""
    return ItemCatalog()


@pytest.fixture
def equip(catalog):
    """Add a catalog item to a character and equip it."""
    def _equip(character, name, **overrides):
        item = catalog.create(name, **overrides)
        character.inventory.add_item(item)
        result = character.equip_item(item.id)
        assert result.success, result.message
        return item
    return _equip


# =============================================================================
# STORAGE FIXTURES
# =============================================================================


@pytest.fixture
def memory_storage():
    return InMemoryCharacterStorage()


@pytest.fixture
def character_manager(memory_storage):
    return CharacterManager(memory_storage)
