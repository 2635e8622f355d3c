"""Tests for HistoryStore."""

from __future__ import annotations

from combat_telemetry.errors import StorageError
from combat_telemetry.history.storage import InMemoryStorage
from combat_telemetry.history.store import HISTORY_KEY, HistoryStore
from tests.history.helpers import make_summary


class FailingStorage(InMemoryStorage):
    def set(self, key, value):
        raise StorageError(key, "disk full")


class TestRecord:
    def test_most_recent_first(self):
        store = HistoryStore(InMemoryStorage())
        store.record(make_summary("a", minutes=0))
        store.record(make_summary("b", minutes=5))
        assert [s.combat_id for s in store.list()] == ["b", "a"]
        assert store.latest.combat_id == "b"

    def test_upsert_by_combat_id(self):
        store = HistoryStore(InMemoryStorage())
        store.record(make_summary("a", minutes=0, rounds=1))
        store.record(make_summary("b", minutes=1))
        store.record(make_summary("a", minutes=2))
        assert len(store) == 2
        assert [s.combat_id for s in store.list()] == ["a", "b"]

    def test_capacity_evicts_oldest(self):
        evicted = []
        store = HistoryStore(InMemoryStorage(), capacity=2, on_evict=evicted.append)
        for i, cid in enumerate(["a", "b", "c"]):
            store.record(make_summary(cid, minutes=i))
        assert [s.combat_id for s in store.list()] == ["c", "b"]
        assert [s.combat_id for s in evicted] == ["a"]

    def test_older_than_everything_when_full_is_not_kept(self):
        store = HistoryStore(InMemoryStorage(), capacity=1)
        store.record(make_summary("new", minutes=10))
        assert store.record(make_summary("old", minutes=0)) is False
        assert "old" not in store

    def test_limit(self):
        store = HistoryStore(InMemoryStorage())
        for i in range(5):
            store.record(make_summary(f"c{i}", minutes=i))
        assert len(store.list(2)) == 2
        assert store.list(0) == []


class TestRemove:
    def test_remove(self):
        store = HistoryStore(InMemoryStorage())
        store.record(make_summary("a"))
        assert store.remove("a").combat_id == "a"
        assert store.remove("a") is None
        assert len(store) == 0


class TestPersistence:
    def test_reload_from_storage(self):
        storage = InMemoryStorage()
        HistoryStore(storage).record(make_summary("a"))
        reloaded = HistoryStore(storage)
        assert reloaded.get("a") == make_summary("a")

    def test_invalid_entries_skipped_on_load(self):
        storage = InMemoryStorage()
        storage.set(HISTORY_KEY, [{"nope": 1}, make_summary("a").model_dump(mode="json")])
        assert [s.combat_id for s in HistoryStore(storage).list()] == ["a"]

    def test_write_failure_keeps_memory_state(self, caplog):
        store = HistoryStore(FailingStorage())
        store.record(make_summary("a"))
        assert store.get("a") is not None
        assert "Could not save combat history" in caplog.text
