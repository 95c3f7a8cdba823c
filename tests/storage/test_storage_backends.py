"""
Tests for the in-memory, JSON file and hybrid storage backends.
"""

import asyncio
import json

import pytest

from src.storage import (
    CharacterHasher,
    HybridCharacterStorage,
    InMemoryCharacterStorage,
    JsonFileCharacterStorage,
    StorageError,
)


def record(character, name, timestamp):
    saved = CharacterHasher.create_saved_character(character, name)
    saved.timestamp = timestamp
    return saved


class UnreachableStorage(InMemoryCharacterStorage):
    """Remote stand-in that refuses every save."""

    async def save_character(self, character):
        raise StorageError("connection refused")


class TestInMemoryStorage:
    """Tests for InMemoryCharacterStorage."""

    def test_records_are_copied(self, fighter):
        """Test changing a loaded record does not change the stored one."""
        storage = InMemoryCharacterStorage()
        asyncio.run(storage.save_character(record(fighter, "Brom", 1)))

        loaded = asyncio.run(storage.load_character("Brom"))
        loaded.data.notes = "changed"
        assert asyncio.run(storage.load_character("Brom")).data.notes == ""

    def test_lookup_by_hash(self, fighter, rogue):
        """Test finding a record by hash."""
        storage = InMemoryCharacterStorage()
        asyncio.run(storage.save_character(record(fighter, "Brom", 1)))
        vex = record(rogue, "Vex", 2)
        asyncio.run(storage.save_character(vex))
        assert asyncio.run(storage.load_character_by_hash(vex.hash)).name == "Vex"


class TestJsonFileStorage:
    """Tests for JsonFileCharacterStorage."""

    def test_creates_directory_on_first_save(self, tmp_path, fighter):
        """Test reads leave the disk alone and the first save creates the directory."""
        storage = JsonFileCharacterStorage(tmp_path / "saves" / "nested")
        assert storage.save_file.name == "saved_characters.json"
        assert asyncio.run(storage.list_characters()) == []
        assert not storage.save_directory.exists()

        asyncio.run(storage.save_character(record(fighter, "Brom", 1)))
        assert storage.save_directory.is_dir()

    def test_save_and_load(self, tmp_path, fighter):
        """Test records round-trip through the file."""
        storage = JsonFileCharacterStorage(tmp_path)
        saved = record(fighter, "Brom", 5)
        asyncio.run(storage.save_character(saved))

        assert asyncio.run(storage.load_character("Brom")) == saved
        assert asyncio.run(storage.load_character_by_hash(saved.hash)) == saved
        assert asyncio.run(storage.character_exists("Brom"))
        assert not asyncio.run(storage.character_exists("Vex"))

    def test_file_shape(self, tmp_path, fighter):
        """Test the file holds a JSON list of records."""
        storage = JsonFileCharacterStorage(tmp_path)
        asyncio.run(storage.save_character(record(fighter, "Brom", 5)))
        data = json.loads(storage.save_file.read_text(encoding="utf-8"))
        assert isinstance(data, list)
        assert data[0]["name"] == "Brom"
        assert data[0]["data"]["high"] == "str"

    def test_shared_directory(self, tmp_path, fighter):
        """Test two storage objects see each other's writes."""
        writer = JsonFileCharacterStorage(tmp_path)
        reader = JsonFileCharacterStorage(tmp_path)
        asyncio.run(writer.save_character(record(fighter, "Brom", 5)))
        assert asyncio.run(reader.load_character("Brom")) is not None

    def test_overwrite_and_order(self, tmp_path, fighter, rogue):
        """Test same-name saves replace and listing is newest first."""
        storage = JsonFileCharacterStorage(tmp_path)
        asyncio.run(storage.save_character(record(fighter, "Brom", 1)))
        asyncio.run(storage.save_character(record(rogue, "Vex", 2)))
        asyncio.run(storage.save_character(record(rogue, "Brom", 3)))

        characters = asyncio.run(storage.list_characters())
        assert [(c.name, c.timestamp) for c in characters] == [("Brom", 3), ("Vex", 2)]

    def test_delete(self, tmp_path, fighter):
        """Test deleting removes the record from the file."""
        storage = JsonFileCharacterStorage(tmp_path)
        asyncio.run(storage.save_character(record(fighter, "Brom", 1)))
        assert asyncio.run(storage.delete_character("Brom")) is True
        assert asyncio.run(storage.delete_character("Brom")) is False
        assert asyncio.run(storage.list_characters()) == []

    def test_corrupt_file_reads_empty(self, tmp_path):
        """Test an unreadable file is treated as empty."""
        storage = JsonFileCharacterStorage(tmp_path)
        storage.save_file.write_text("{broken", encoding="utf-8")
        assert asyncio.run(storage.list_characters()) == []
        assert asyncio.run(storage.load_character("Brom")) is None

    def test_bad_record_skipped(self, tmp_path, fighter):
        """Test one unreadable record does not hide the others."""
        storage = JsonFileCharacterStorage(tmp_path)
        asyncio.run(storage.save_character(record(fighter, "Brom", 1)))
        data = json.loads(storage.save_file.read_text(encoding="utf-8"))
        data.append({"name": "Broken"})
        storage.save_file.write_text(json.dumps(data), encoding="utf-8")

        assert [c.name for c in asyncio.run(storage.list_characters())] == ["Brom"]

    def test_write_failure_raises(self, tmp_path, fighter):
        """Test a write failure raises StorageError."""
        storage = JsonFileCharacterStorage(tmp_path)
        storage.save_file.mkdir()
        with pytest.raises(StorageError):
            asyncio.run(storage.save_character(record(fighter, "Brom", 1)))


class TestHybridStorage:
    """Tests for HybridCharacterStorage."""

    def test_local_only(self, fighter):
        """Test without a remote everything goes to local storage."""
        local = InMemoryCharacterStorage()
        hybrid = HybridCharacterStorage(local)
        asyncio.run(hybrid.save_character(record(fighter, "Brom", 1)))
        assert asyncio.run(local.character_exists("Brom"))
        assert asyncio.run(hybrid.delete_character("Brom")) is True

    def test_saves_to_remote_first(self, fighter):
        """Test a successful remote save skips local storage."""
        local, remote = InMemoryCharacterStorage(), InMemoryCharacterStorage()
        hybrid = HybridCharacterStorage(local, remote)
        asyncio.run(hybrid.save_character(record(fighter, "Brom", 1)))
        assert asyncio.run(remote.character_exists("Brom"))
        assert not asyncio.run(local.character_exists("Brom"))

    def test_falls_back_to_local(self, fighter):
        """Test a failed remote save lands in local storage."""
        local = InMemoryCharacterStorage()
        hybrid = HybridCharacterStorage(local, UnreachableStorage())
        asyncio.run(hybrid.save_character(record(fighter, "Brom", 1)))
        assert asyncio.run(local.character_exists("Brom"))
        assert asyncio.run(hybrid.character_exists("Brom"))

    def test_load_prefers_remote(self, fighter, rogue):
        """Test loads try remote before local."""
        local, remote = InMemoryCharacterStorage(), InMemoryCharacterStorage()
        asyncio.run(local.save_character(record(fighter, "Hero", 1)))
        asyncio.run(remote.save_character(record(rogue, "Hero", 2)))
        asyncio.run(local.save_character(record(fighter, "Brom", 3)))
        hybrid = HybridCharacterStorage(local, remote)

        assert asyncio.run(hybrid.load_character("Hero")).timestamp == 2
        assert asyncio.run(hybrid.load_character("Brom")).timestamp == 3
        brom = asyncio.run(local.load_character("Brom"))
        assert asyncio.run(hybrid.load_character_by_hash(brom.hash)).name == "Brom"

    def test_list_merges(self, fighter, rogue):
        """Test listing merges both backends, remote winning by name."""
        local, remote = InMemoryCharacterStorage(), InMemoryCharacterStorage()
        asyncio.run(local.save_character(record(fighter, "Hero", 1)))
        asyncio.run(local.save_character(record(fighter, "Brom", 5)))
        asyncio.run(remote.save_character(record(rogue, "Hero", 2)))
        hybrid = HybridCharacterStorage(local, remote)

        characters = asyncio.run(hybrid.list_characters())
        assert [(c.name, c.timestamp) for c in characters] == [("Brom", 5), ("Hero", 2)]

    def test_delete_needs_both(self, fighter):
        """Test delete reports failure unless both backends deleted."""
        local, remote = InMemoryCharacterStorage(), InMemoryCharacterStorage()
        asyncio.run(local.save_character(record(fighter, "Brom", 1)))
        hybrid = HybridCharacterStorage(local, remote)

        assert asyncio.run(hybrid.delete_character("Brom")) is False
        assert not asyncio.run(local.character_exists("Brom"))
