"""
Combat resolution: attack, damage, sneak attack and assassination rolls.
"""

from src.combat.combat_resolver import (
    Hand,
    RollBreakdown,
    CombatResolver,
)

__all__ = [
    "Hand",
    "RollBreakdown",
    "CombatResolver",
]
