"""
Character Manager.

Saves characters through a CharacterStorage backend and rebuilds them on
load. A saved record does not hold stats directly: the character is rebuilt
from its creation choices by replaying the recorded level-ups, then its
inventory, overrides, abilities and notes are restored on top. The rebuilt
character is re-hashed and compared against the saved hash.
"""

from dataclasses import dataclass
from typing import Optional, Sequence
import logging

from src.abilities.ability_manager import LearnedAbility
from src.character.character import Character
from src.character.progression import StepMode
from src.data_models import Stat
from src.storage.character_hasher import CharacterHasher
from src.storage.character_storage import CharacterSaveError, CharacterStorage, StorageError
from src.storage.saved_character import CHARACTER_DATA_VERSION, CharacterData, SavedCharacter

logger = logging.getLogger(__name__)


@dataclass
class ReconstructionResult:
    """A character rebuilt from a saved record."""
    character: Character
    name: str
    high: Stat
    mid: Stat
    racial_bonuses: list[Stat]
    hash_valid: bool
    saved: SavedCharacter


class CharacterManager:
    """
    Save, load, list and delete characters through a storage backend.

    Load-side failures are logged and reported as misses; only saving raises.
    """

    def __init__(self, storage: CharacterStorage):
        self.storage = storage

    async def save_character(
        self,
        character: Character,
        name: str,
        high: Optional[Stat | str] = None,
        mid: Optional[Stat | str] = None,
        racial_bonuses: Optional[Sequence[Stat | str]] = None,
    ) -> SavedCharacter:
        """
        Hash and save a character.

        Returns:
            The record that was stored

        Raises:
            CharacterSaveError: If the backend could not store the record
        """
        saved = CharacterHasher.create_saved_character(character, name, high, mid, racial_bonuses)
        try:
            await self.storage.save_character(saved)
        except (StorageError, OSError) as e:
            logger.error(f"Error saving character '{name}': {e}")
            raise CharacterSaveError(f"Failed to save character: {e}") from e

        logger.info(
            f"Character '{name}' saved (hash {saved.hash}, level {character.level}, "
            f"race {character.race.value if character.race else 'none'})"
        )
        return saved

    async def load_character(self, name: str) -> Optional[ReconstructionResult]:
        try:
            saved = await self.storage.load_character(name)
            if saved is None:
                return None
            return self.reconstruct_character(saved)
        except (StorageError, OSError, KeyError, ValueError) as e:
            logger.error(f"Error loading character '{name}': {e}")
            return None

    async def load_character_by_hash(self, hash_value: str) -> Optional[ReconstructionResult]:
        try:
            saved = await self.storage.load_character_by_hash(hash_value)
            if saved is None:
                return None
            return self.reconstruct_character(saved)
        except (StorageError, OSError, KeyError, ValueError) as e:
            logger.error(f"Error loading character by hash '{hash_value}': {e}")
            return None

    async def list_characters(self) -> list[SavedCharacter]:
        try:
            return await self.storage.list_characters()
        except (StorageError, OSError) as e:
            logger.error(f"Error listing characters: {e}")
            return []

    async def delete_character(self, name: str) -> bool:
        try:
            return await self.storage.delete_character(name)
        except (StorageError, OSError) as e:
            logger.error(f"Error deleting character '{name}': {e}")
            return False

    async def character_exists(self, name: str) -> bool:
        try:
            return await self.storage.character_exists(name)
        except (StorageError, OSError) as e:
            logger.error(f"Error checking if character '{name}' exists: {e}")
            return False

    @staticmethod
    def validate_character_hash(character: Character, name: str, expected_hash: str) -> bool:
        return CharacterHasher.validate_hash(character, name, expected_hash)

    # =========================================================================
    # RECONSTRUCTION
    # =========================================================================

    def reconstruct_character(self, saved: SavedCharacter) -> ReconstructionResult:
        """
        Rebuild a character from a saved record and check its hash.

        A hash mismatch is logged and reported in the result, never raised.
        """
        data = saved.data
        character = Character(data.high, data.mid, data.race, data.racial_bonuses)

        self._replay_progression(character, data)

        if data.hp_rolls:
            character.restore_hp_rolls(data.hp_rolls)
        if data.version >= CHARACTER_DATA_VERSION:
            character.restore_thresholds(
                data.sorcery_threshold_level,
                data.double_sorcery_threshold_level,
                data.finesse_threshold_level,
            )

        # Equip state and slots come back as recorded, without re-running equip rules
        character.inventory.load_dict(data.inventory)
        self._restore_overrides(character, data)
        character.update_inventory_stats()

        character.ability_manager.restore_abilities(
            LearnedAbility.from_dict(a) for a in data.learned_abilities
        )
        character.set_notes(data.notes)

        hash_valid = self.validate_character_hash(character, saved.name, saved.hash)
        if not hash_valid:
            logger.warning(
                f"Character '{saved.name}' hash validation failed during reconstruction"
            )
        logger.info(
            f"Character '{saved.name}' reconstructed (level {character.level}, "
            f"hash_valid={hash_valid})"
        )

        return ReconstructionResult(
            character=character,
            name=saved.name,
            high=data.high,
            mid=data.mid,
            racial_bonuses=list(data.racial_bonuses),
            hash_valid=hash_valid,
            saved=saved,
        )

    @staticmethod
    def _replay_progression(character: Character, data: CharacterData) -> None:
        if data.level_up_steps:
            for step in data.level_up_steps:
                if step.mode == StepMode.SPLIT:
                    character.start_level_up()
                    for choice in step.choices:
                        character.allocate_point(choice)
                else:
                    character.level_up(step.choices[0] if step.choices else data.high)
        elif data.level_up_choices:
            for choice in data.level_up_choices:
                character.level_up(choice)
        else:
            while character.level < data.level:
                character.level_up(data.high)

        if character.level != data.level:
            logger.warning(
                f"Replayed progression reached level {character.level}, "
                f"record says {data.level}"
            )

    @staticmethod
    def _restore_overrides(character: Character, data: CharacterData) -> None:
        for stat in Stat:
            delta = data.stat_modifiers.get(stat.value, 0)
            if delta:
                character.set_stat_override(stat, delta)
        if data.use_stat_overrides and not character.is_using_stat_overrides():
            character.toggle_stat_overrides()

