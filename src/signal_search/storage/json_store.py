"""
JSON values on top of a StoragePort.

Reads fall back to a caller-supplied default. Unparsable blobs are copied aside
once per key for the lifetime of the store so a bad write never silently destroys
user data. Failed writes are kept in a small ring buffer for diagnostics.
"""

import json
import time
from collections import deque
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from loguru import logger

from signal_search.storage.keys import (
    SIGNAL_STORAGE_WRITE_FAILURES_KEY,
    corrupt_backup_key,
    corrupt_latest_key,
)
from signal_search.storage.port import StoragePort, StoredWriteStatus
from signal_search.utils import format_iso_ms

MAX_WRITE_FAILURES = 25


@dataclass(frozen=True)
class StorageWriteFailure:
    """A write that did not land."""

    key: str
    status: StoredWriteStatus
    timestamp: str

    def to_dict(self) -> dict[str, str]:
        return {"key": self.key, "status": self.status.value, "timestamp": self.timestamp}


def _now_ms() -> int:
    return int(time.time() * 1000)


class JsonStore:
    """Reads and writes JSON-serializable values through a storage port."""

    def __init__(self, port: StoragePort, clock: Callable[[], int] | None = None):
        self.port = port
        self.clock = clock or _now_ms
        self._backed_up_keys: set[str] = set()
        self._write_failures: deque[StorageWriteFailure] = deque(maxlen=MAX_WRITE_FAILURES)

    @property
    def write_failures(self) -> list[StorageWriteFailure]:
        """Most recent failed writes, oldest first."""
        return list(self._write_failures)

    def read_json(self, key: str, fallback: Any) -> Any:
        """Return the parsed value for ``key`` or ``fallback``."""
        raw = self.port.get(key)
        if not raw:
            return fallback
        try:
            return json.loads(raw)
        except json.JSONDecodeError:
            self._backup_corrupt_blob(key, raw)
            return fallback

    def write_json(self, key: str, value: Any) -> StoredWriteStatus:
        """Serialize and store ``value``; never raises."""
        try:
            payload = json.dumps(value, ensure_ascii=False)
        except (TypeError, ValueError) as e:
            logger.warning(f"Value for {key} is not JSON-serializable: {e}")
            status = StoredWriteStatus.FAILED
        else:
            status = self.port.set(key, payload)

        if status is not StoredWriteStatus.OK:
            self._record_failure(key, status)
        return status

    def remove(self, key: str) -> StoredWriteStatus:
        return self.port.remove(key)

    def _backup_corrupt_blob(self, key: str, raw: str) -> None:
        if not self.port.available:
            return
        if key in self._backed_up_keys:
            return
        self._backed_up_keys.add(key)

        backup_key = corrupt_backup_key(key, self.clock())
        logger.debug(f"Backing up corrupt value for {key} to {backup_key}")
        # Best effort only: a full store must not break reads.
        if self.port.set(backup_key, raw) is StoredWriteStatus.OK:
            self.port.set(corrupt_latest_key(key), backup_key)

    def _record_failure(self, key: str, status: StoredWriteStatus) -> None:
        failure = StorageWriteFailure(key=key, status=status, timestamp=format_iso_ms(self.clock()))
        self._write_failures.append(failure)
        logger.warning(f"Storage write for {key} returned {status.value}")

        if status is StoredWriteStatus.UNAVAILABLE or key == SIGNAL_STORAGE_WRITE_FAILURES_KEY:
            return
        payload = json.dumps([item.to_dict() for item in self._write_failures])
        self.port.set(SIGNAL_STORAGE_WRITE_FAILURES_KEY, payload)
