"""Tests for the JSON layer over the storage port."""

import json

from signal_search.storage import (
    JsonStore,
    MemoryStorage,
    StoredWriteStatus,
    UnavailableStorage,
)
from signal_search.storage.json_store import MAX_WRITE_FAILURES
from signal_search.storage.keys import (
    SIGNAL_NOTES_KEY,
    SIGNAL_STORAGE_WRITE_FAILURES_KEY,
    corrupt_backup_key,
    corrupt_latest_key,
)

FIXED_CLOCK_MS = 1_770_811_200_000


class TestReadJson:
    def test_missing_returns_fallback(self, json_store):
        assert json_store.read_json(SIGNAL_NOTES_KEY, {}) == {}

    def test_round_trip(self, json_store):
        assert json_store.write_json(SIGNAL_NOTES_KEY, {"t1": "note"}) is StoredWriteStatus.OK
        assert json_store.read_json(SIGNAL_NOTES_KEY, {}) == {"t1": "note"}

    def test_empty_string_returns_fallback(self, memory_storage, json_store):
        memory_storage.set(SIGNAL_NOTES_KEY, "")
        assert json_store.read_json(SIGNAL_NOTES_KEY, []) == []


class TestCorruptBackup:
    def test_corrupt_blob_is_backed_up(self, memory_storage, json_store):
        memory_storage.set(SIGNAL_NOTES_KEY, "{oops")
        assert json_store.read_json(SIGNAL_NOTES_KEY, {"fallback": True}) == {"fallback": True}

        backup_key = corrupt_backup_key(SIGNAL_NOTES_KEY, FIXED_CLOCK_MS)
        assert memory_storage.get(backup_key) == "{oops"
        assert memory_storage.get(corrupt_latest_key(SIGNAL_NOTES_KEY)) == backup_key

    def test_backup_happens_once_per_key(self, memory_storage):
        ticks = iter(range(1, 100))
        store = JsonStore(memory_storage, clock=lambda: next(ticks))
        memory_storage.set(SIGNAL_NOTES_KEY, "{oops")
        store.read_json(SIGNAL_NOTES_KEY, {})
        store.read_json(SIGNAL_NOTES_KEY, {})
        backups = [k for k in memory_storage.keys() if k.startswith("signal-corrupt-backup-v1:")]
        assert backups == [corrupt_backup_key(SIGNAL_NOTES_KEY, 1)]

    def test_full_store_does_not_break_reads(self):
        storage = MemoryStorage({SIGNAL_NOTES_KEY: "{oops"}, quota_bytes=40)
        store = JsonStore(storage, clock=lambda: FIXED_CLOCK_MS)
        assert store.read_json(SIGNAL_NOTES_KEY, {}) == {}
        assert storage.get(corrupt_latest_key(SIGNAL_NOTES_KEY)) is None

    def test_unavailable_store_skips_backup(self):
        store = JsonStore(UnavailableStorage())
        assert store.read_json(SIGNAL_NOTES_KEY, "x") == "x"


class TestWriteFailures:
    def test_quota_failure_is_recorded(self):
        storage = MemoryStorage(quota_bytes=200)
        store = JsonStore(storage, clock=lambda: FIXED_CLOCK_MS)
        status = store.write_json(SIGNAL_NOTES_KEY, {"t1": "x" * 500})

        assert status is StoredWriteStatus.QUOTA
        failure = store.write_failures[0]
        assert failure.key == SIGNAL_NOTES_KEY
        assert failure.status is StoredWriteStatus.QUOTA
        assert failure.timestamp == "2026-02-11T12:00:00.000Z"
        assert json.loads(storage.get(SIGNAL_STORAGE_WRITE_FAILURES_KEY)) == [failure.to_dict()]

    def test_unserializable_value_fails(self, json_store):
        assert json_store.write_json("k", {"bad": object()}) is StoredWriteStatus.FAILED
        assert json_store.write_failures[0].status is StoredWriteStatus.FAILED

    def test_ring_buffer_is_bounded(self):
        store = JsonStore(UnavailableStorage(), clock=lambda: FIXED_CLOCK_MS)
        for i in range(MAX_WRITE_FAILURES + 5):
            assert store.write_json(f"key-{i}", i) is StoredWriteStatus.UNAVAILABLE
        failures = store.write_failures
        assert len(failures) == MAX_WRITE_FAILURES
        assert failures[0].key == "key-5"
        assert failures[-1].key == f"key-{MAX_WRITE_FAILURES + 4}"

    def test_successful_writes_are_not_recorded(self, json_store):
        json_store.write_json("k", [1, 2])
        assert json_store.write_failures == []
