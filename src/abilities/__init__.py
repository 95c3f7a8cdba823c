"""
Learnable abilities: metamagic, spellwords and combat maneuvers.
"""

from src.abilities.ability_catalog import (
    METAMAGIC,
    SPELLWORDS,
    COMBAT_MANEUVERS,
    ABILITY_CATALOG,
    get_ability_description,
    get_master_ability_list,
)
from src.abilities.ability_manager import (
    LearnedAbility,
    AbilityManager,
    ability_id,
)

__all__ = [
    "METAMAGIC",
    "SPELLWORDS",
    "COMBAT_MANEUVERS",
    "ABILITY_CATALOG",
    "get_ability_description",
    "get_master_ability_list",
    "LearnedAbility",
    "AbilityManager",
    "ability_id",
]
