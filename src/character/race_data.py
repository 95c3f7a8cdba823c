"""
Racial abilities and stat bonuses.
"""

from dataclasses import dataclass, field
from typing import Optional

from src.data_models import Race, Stat


@dataclass(frozen=True)
class RacialBonus:
    """A stat bonus. A stat of None means the player picks the stat."""
    plus: int
    stat: Optional[Stat] = None

    @property
    def is_any(self) -> bool:
        return self.stat is None


@dataclass(frozen=True)
class RaceData:
    ability: str
    bonuses: tuple[RacialBonus, ...] = field(default_factory=tuple)

    @property
    def any_bonus_count(self) -> int:
        """How many stat choices the player must make."""
        return sum(1 for b in self.bonuses if b.is_any)


RACIAL_BONUS: dict[Race, RaceData] = {
    Race.ELF: RaceData("Treewalk", (RacialBonus(2, Stat.DEX),)),
    Race.GNOME: RaceData("Tinker", (RacialBonus(2, Stat.INT),)),
    Race.HUMAN: RaceData("Contract", (RacialBonus(1), RacialBonus(1))),
    Race.DWARF: RaceData("Stonesense", (RacialBonus(2, Stat.STR),)),
    Race.DRAGONBORN: RaceData("Flametongue", (RacialBonus(2),)),
    Race.HALFLING: RaceData("Lucky", (RacialBonus(1, Stat.DEX), RacialBonus(1, Stat.INT))),
}
