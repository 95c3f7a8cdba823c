"""
Level-up state and resource formulas.

The resource formulas depend on threshold levels: the level at which a stat
condition first held. Thresholds are recorded once, so a character's
resource curve depends on its history and not only on its current stats.

Sorcery max:  3 + (level - sorcery_threshold) + (level - double_threshold)
Finesse max:  1 + number of odd levels reached after the finesse threshold
Combat max:   level, while effective strength is at least 16
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from src.data_models import (
    BASE_SORCERY_POINTS,
    DEFAULT_HIT_DIE,
    HIT_DICE_FROM_MOD,
    LEVEL_UP_STAT_INCREASE,
    MIN_COMBAT_STR,
    Stat,
    ability_modifier,
)


# =============================================================================
# LEVEL-UP STATE
# =============================================================================


class LevelUpPhase(str, Enum):
    IDLE = "idle"
    LEVELING = "leveling"  # split level-up with points left to allocate


class StepMode(str, Enum):
    FULL = "full"    # +2 to one stat in a single call
    SPLIT = "split"  # points allocated one at a time


@dataclass(frozen=True)
class LevelUpState:
    """
    Two-phase level-up state.

    IDLE -> start() -> LEVELING(pending=2) -> allocate() ... -> IDLE
    """
    phase: LevelUpPhase = LevelUpPhase.IDLE
    pending_points: int = 0

    @classmethod
    def idle(cls) -> "LevelUpState":
        return cls()

    @classmethod
    def leveling(cls, points: int = LEVEL_UP_STAT_INCREASE) -> "LevelUpState":
        return cls(LevelUpPhase.LEVELING, points)

    @property
    def is_leveling(self) -> bool:
        return self.phase == LevelUpPhase.LEVELING

    def allocate(self) -> "LevelUpState":
        """State after one point is spent."""
        if not self.is_leveling:
            raise ValueError("No level-up in progress")
        remaining = self.pending_points - 1
        if remaining <= 0:
            return LevelUpState.idle()
        return LevelUpState(LevelUpPhase.LEVELING, remaining)


@dataclass
class LevelUpStep:
    """One level gained and the stats chosen for it."""
    mode: StepMode
    choices: list[Stat] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {"mode": self.mode.value, "choices": [c.value for c in self.choices]}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "LevelUpStep":
        return cls(
            mode=StepMode(data.get("mode", StepMode.FULL.value)),
            choices=[Stat(c) for c in data.get("choices", [])],
        )


# =============================================================================
# RESOURCE FORMULAS
# =============================================================================


def sorcery_max(
    level: int,
    threshold_level: Optional[int],
    double_threshold_level: Optional[int],
) -> int:
    if threshold_level is None:
        return 0
    total = BASE_SORCERY_POINTS + max(0, level - threshold_level)
    if double_threshold_level is not None:
        total += max(0, level - double_threshold_level)
    return total


def finesse_max(level: int, threshold_level: Optional[int]) -> int:
    if threshold_level is None:
        return 0
    odd_levels = sum(1 for lvl in range(threshold_level + 1, level + 1) if lvl % 2)
    return 1 + odd_levels


def combat_max(level: int, effective_str: int) -> int:
    return level if effective_str >= MIN_COMBAT_STR else 0


def hit_die_for_strength(effective_str: int) -> tuple[int, int]:
    """
    Hit die and bonus for a strength score.

    Returns:
        Tuple of (die size, non-negative strength modifier). Modifiers past
        the end of the table fall back to the default die.
    """
    str_mod = max(ability_modifier(effective_str), 0)
    if 1 <= str_mod <= len(HIT_DICE_FROM_MOD):
        return HIT_DICE_FROM_MOD[str_mod - 1], str_mod
    return DEFAULT_HIT_DIE, str_mod
