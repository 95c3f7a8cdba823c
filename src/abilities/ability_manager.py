"""
Ability Manager for the character rules engine.

Tracks which optional abilities (metamagic, spellwords, combat maneuvers) a
character has learned. An ability can only be learned if it exists in the
catalog, is not already known, and its category is currently unlocked by
the character's resources:
- Metamagic and spellwords need sorcery points (max sorcery > 0)
- Combat maneuvers need combat maneuver points (max combat > 0)
"""

from dataclasses import dataclass
from typing import Any, Iterable, Optional
import logging

from src.abilities.ability_catalog import (
    get_ability_description,
    get_master_ability_list,
)
from src.data_models import AbilityType

logger = logging.getLogger(__name__)


@dataclass
class LearnedAbility:
    """An ability the character knows."""
    id: str
    name: str
    type: AbilityType
    description: str
    learned_at: Optional[int] = None  # Level when learned

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "type": self.type.value,
            "description": self.description,
            "learned_at": self.learned_at,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "LearnedAbility":
        ability_type = AbilityType(data["type"])
        name = data["name"]
        return cls(
            id=data.get("id") or ability_id(name, ability_type),
            name=name,
            type=ability_type,
            description=data.get("description") or get_ability_description(name, ability_type),
            learned_at=data.get("learned_at", data.get("learnedAt")),
        )


def ability_id(name: str, ability_type: AbilityType) -> str:
    return f"{AbilityType(ability_type).value}_{name}"


class AbilityManager:
    """
    Manages a character's learned abilities.

    The owning character pushes which categories are unlocked through
    set_unlocked_types(); until it does, every category is allowed.
    """

    def __init__(self):
        self._learned: dict[str, LearnedAbility] = {}
        self._unlocked_types: Optional[set[AbilityType]] = None

    def set_unlocked_types(self, ability_types: Iterable[AbilityType]) -> None:
        """Update the categories the character currently has access to."""
        self._unlocked_types = {AbilityType(t) for t in ability_types}

    def is_type_unlocked(self, ability_type: AbilityType) -> bool:
        if self._unlocked_types is None:
            return True
        return AbilityType(ability_type) in self._unlocked_types

    def can_learn(self, name: str, ability_type: AbilityType) -> tuple[bool, Optional[str]]:
        """
        Check whether an ability could be learned right now.

        Returns:
            Tuple of (allowed, reason when not allowed)
        """
        ability_type = AbilityType(ability_type)
        if name not in get_master_ability_list(ability_type):
            return False, f"Unknown ability: {name} ({ability_type.value})"
        if ability_id(name, ability_type) in self._learned:
            return False, f"Ability already learned: {name}"
        if not self.is_type_unlocked(ability_type):
            return False, f"{ability_type.value} abilities are not unlocked"
        return True, None

    def learn_ability(
        self,
        name: str,
        ability_type: AbilityType,
        level: Optional[int] = None,
    ) -> bool:
        """
        Learn a new ability.

        Args:
            name: Ability name as listed in the catalog
            ability_type: Category of the ability
            level: Character level when learned

        Returns:
            True if learned, False if unknown, duplicate or locked
        """
        ability_type = AbilityType(ability_type)
        allowed, reason = self.can_learn(name, ability_type)
        if not allowed:
            logger.info(f"Cannot learn ability: {reason}")
            return False

        ability = LearnedAbility(
            id=ability_id(name, ability_type),
            name=name,
            type=ability_type,
            description=get_ability_description(name, ability_type),
            learned_at=level,
        )
        self._learned[ability.id] = ability
        logger.info(
            f"Learned new ability: {name} ({ability_type.value}), "
            f"{len(self._learned)} total"
        )
        return True

    def forget_ability(self, name: str, ability_type: AbilityType) -> bool:
        key = ability_id(name, ability_type)
        if key not in self._learned:
            logger.info(f"Cannot forget unknown ability: {name}")
            return False
        del self._learned[key]
        logger.info(f"Forgot ability: {name} ({AbilityType(ability_type).value})")
        return True

    def get_abilities_by_type(self, ability_type: AbilityType) -> list[LearnedAbility]:
        """Learned abilities of one category, sorted by name."""
        ability_type = AbilityType(ability_type)
        return sorted(
            (a for a in self._learned.values() if a.type == ability_type),
            key=lambda a: a.name,
        )

    def get_all_abilities(self) -> list[LearnedAbility]:
        """All learned abilities, sorted by category then name."""
        return sorted(self._learned.values(), key=lambda a: (a.type.value, a.name))

    def has_ability(self, name: str, ability_type: AbilityType) -> bool:
        return ability_id(name, ability_type) in self._learned

    def get_ability_count(self, ability_type: Optional[AbilityType] = None) -> int:
        if ability_type is None:
            return len(self._learned)
        return len(self.get_abilities_by_type(ability_type))

    def get_available_abilities(self, ability_type: AbilityType) -> list[str]:
        """Catalog names of a category not learned yet."""
        learned = {a.name for a in self.get_abilities_by_type(ability_type)}
        return [name for name in get_master_ability_list(ability_type) if name not in learned]

    def clear_all_abilities(self) -> None:
        self._learned.clear()
        logger.info("Cleared all learned abilities")

    def restore_abilities(self, abilities: Iterable[LearnedAbility]) -> None:
        """
        Replace the learned set without unlock checks.

        Used when loading saved characters, whose abilities were validated
        when they were first learned.
        """
        self._learned = {a.id: a for a in abilities}

    def to_list(self) -> list[dict[str, Any]]:
        return [a.to_dict() for a in self.get_all_abilities()]
