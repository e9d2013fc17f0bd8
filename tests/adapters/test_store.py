"""Tests for the record store adapters."""

import asyncio
import json
from unittest.mock import patch

import pytest

from carpool_map.adapters.store import InMemoryRecordStore, JsonFileRecordStore
from carpool_map.config import StoreConfig
from carpool_map.domain.errors import ConfigurationError, PersistenceError, RecordNotFoundError


class TestInMemoryRecordStore:
    def test_lists_rows_for_event(self, memory_store):
        carpools = asyncio.run(memory_store.list_carpools("evt-1"))
        assert [c["id"] for c in carpools] == ["cp-1", "cp-2", "cp-3"]
        assert asyncio.run(memory_store.list_carpools("other")) == []

    def test_rows_are_copies(self, memory_store):
        rows = asyncio.run(memory_store.list_carpools("evt-1"))
        rows[0]["departure_lat"] = 0
        assert memory_store.carpools["cp-1"]["departure_lat"] == 43.6453

    def test_update(self, memory_store):
        row = asyncio.run(memory_store.update_registration("reg-2", {"carpool_return_lat": 43.7}))
        assert row["carpool_return_lat"] == 43.7
        assert "updated_at" in row

    def test_update_missing(self, memory_store):
        with pytest.raises(RecordNotFoundError):
            asyncio.run(memory_store.update_carpool("nope", {}))

    def test_unknown_event(self, memory_store):
        with pytest.raises(RecordNotFoundError):
            asyncio.run(memory_store.get_event("nope"))

    def test_snapshot_needs_event_id(self):
        with pytest.raises(PersistenceError):
            InMemoryRecordStore().load_snapshot({"carpools": []})


class TestJsonFileRecordStore:
    @pytest.fixture
    def path(self, tmp_path, snapshot):
        p = tmp_path / "event.json"
        p.write_text(json.dumps(snapshot), encoding="utf-8")
        return p

    def test_update_is_written_to_disk(self, path):
        store = JsonFileRecordStore(path=path)
        assert store.load() == "evt-1"
        asyncio.run(store.update_carpool("cp-3", {"departure_lat": 43.7, "departure_lng": -79.3}))

        on_disk = json.loads(path.read_text(encoding="utf-8"))
        cp3 = next(c for c in on_disk["carpools"] if c["id"] == "cp-3")
        assert cp3["departure_lat"] == 43.7

    def test_failed_write_rolls_back(self, path):
        store = JsonFileRecordStore(path=path)
        store.load()
        with patch.object(JsonFileRecordStore, "_write", side_effect=OSError("read-only")):
            with pytest.raises(PersistenceError):
                asyncio.run(store.update_carpool("cp-3", {"departure_lat": 43.7, "departure_lng": -79.3}))
        assert "departure_lat" not in store.carpools["cp-3"]

    def test_update_without_loaded_file_fails(self, path, snapshot):
        store = JsonFileRecordStore(path=path)
        store.load_snapshot(snapshot)
        with pytest.raises(PersistenceError):
            asyncio.run(store.update_carpool("cp-3", {"departure_lat": 43.7, "departure_lng": -79.3}))
        assert "departure_lat" not in store.carpools["cp-3"]

    def test_unreadable_file(self, tmp_path):
        bad = tmp_path / "bad.json"
        bad.write_text("{not json", encoding="utf-8")
        with pytest.raises(PersistenceError):
            JsonFileRecordStore(path=bad).load()

    def test_from_config_requires_path(self):
        with pytest.raises(ConfigurationError):
            JsonFileRecordStore.from_config(StoreConfig(backend="json"))

    def test_from_config(self, path):
        store = JsonFileRecordStore.from_config(StoreConfig(backend="json", data_path=path))
        assert "cp-1" in store.carpools
