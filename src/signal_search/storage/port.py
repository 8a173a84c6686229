"""
Storage port: synchronous string key-value access with status-returning writes.

Backends implement ``_read`` / ``_write`` / ``_delete`` / ``_keys``; the port wraps
them so that writes never raise. Callers check the returned status instead.
"""

import errno
import json
import os
import time
from abc import ABC, abstractmethod
from enum import Enum
from pathlib import Path

from loguru import logger

from signal_search.errors import StorageQuotaError


class StoredWriteStatus(str, Enum):
    """Outcome of a write or remove against the store."""

    OK = "ok"
    QUOTA = "quota"
    FAILED = "failed"
    UNAVAILABLE = "unavailable"


QUOTA_ERRNOS = frozenset({errno.ENOSPC, getattr(errno, "EDQUOT", errno.ENOSPC)})


def is_quota_exceeded_error(error: BaseException) -> bool:
    """True for storage-full style errors."""
    if isinstance(error, StorageQuotaError):
        return True
    if isinstance(error, OSError) and error.errno in QUOTA_ERRNOS:
        return True
    return False


class StoragePort(ABC):
    """Persistent, per-origin string key-value store."""

    available: bool = True

    def get(self, key: str) -> str | None:
        """Return the stored string for ``key`` or None when missing or unreadable."""
        if not self.available:
            return None
        try:
            return self._read(key)
        except Exception as e:
            logger.debug(f"Storage read failed for {key}: {e}")
            return None

    def set(self, key: str, value: str) -> StoredWriteStatus:
        """Store ``value`` under ``key``."""
        if not self.available:
            return StoredWriteStatus.UNAVAILABLE
        try:
            self._write(key, value)
        except Exception as e:
            if is_quota_exceeded_error(e):
                return StoredWriteStatus.QUOTA
            logger.debug(f"Storage write failed for {key}: {e}")
            return StoredWriteStatus.FAILED
        return StoredWriteStatus.OK

    def remove(self, key: str) -> StoredWriteStatus:
        """Delete ``key``; removing a missing key is a success."""
        if not self.available:
            return StoredWriteStatus.UNAVAILABLE
        try:
            self._delete(key)
        except Exception as e:
            logger.debug(f"Storage remove failed for {key}: {e}")
            return StoredWriteStatus.FAILED
        return StoredWriteStatus.OK

    def keys(self) -> list[str]:
        """All stored keys, sorted."""
        if not self.available:
            return []
        try:
            return sorted(self._keys())
        except Exception as e:
            logger.debug(f"Storage key listing failed: {e}")
            return []

    @abstractmethod
    def _read(self, key: str) -> str | None: ...

    @abstractmethod
    def _write(self, key: str, value: str) -> None: ...

    @abstractmethod
    def _delete(self, key: str) -> None: ...

    @abstractmethod
    def _keys(self) -> list[str]: ...


def _entry_bytes(key: str, value: str) -> int:
    return len(key.encode("utf-8")) + len(value.encode("utf-8"))


class MemoryStorage(StoragePort):
    """In-process store, optionally enforcing a byte quota over all entries."""

    def __init__(self, initial: dict[str, str] | None = None, quota_bytes: int | None = None):
        self._data: dict[str, str] = dict(initial or {})
        self.quota_bytes = quota_bytes

    def _read(self, key: str) -> str | None:
        return self._data.get(key)

    def _write(self, key: str, value: str) -> None:
        if self.quota_bytes is not None:
            others = sum(_entry_bytes(k, v) for k, v in self._data.items() if k != key)
            size = others + _entry_bytes(key, value)
            if size > self.quota_bytes:
                raise StorageQuotaError(key, size, self.quota_bytes)
        self._data[key] = value

    def _delete(self, key: str) -> None:
        self._data.pop(key, None)

    def _keys(self) -> list[str]:
        return list(self._data)


class JsonFileStorage(StoragePort):
    """Store backed by a single JSON object file, written atomically."""

    def __init__(self, path: Path | str, quota_bytes: int | None = None):
        self.path = Path(path)
        self.quota_bytes = quota_bytes
        self.backup_path: Path | None = None

    def _backup_corrupt(self, text: str) -> None:
        """Copy an unreadable storage file aside unless that content is already backed up."""
        if self.backup_path is not None:
            return
        existing = sorted(self.path.parent.glob(f"{self.path.name}.corrupt-*"))
        if existing and existing[-1].read_text(encoding="utf-8") == text:
            self.backup_path = existing[-1]
            return
        backup = self.path.with_name(f"{self.path.name}.corrupt-{int(time.time() * 1000)}")
        backup.write_text(text, encoding="utf-8")
        self.backup_path = backup
        logger.warning(f"Backed up unreadable storage file {self.path} to {backup}")

    def _load(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        text = self.path.read_text(encoding="utf-8")
        if not text.strip():
            return {}
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            logger.warning(f"Storage file {self.path} is not valid JSON, starting empty: {e}")
            self._backup_corrupt(text)
            return {}
        if not isinstance(data, dict):
            logger.warning(f"Storage file {self.path} does not hold an object, starting empty")
            self._backup_corrupt(text)
            return {}
        return {str(k): v for k, v in data.items() if isinstance(v, str)}

    def _dump(self, data: dict[str, str]) -> None:
        content = json.dumps(data, ensure_ascii=False, indent=2)
        if self.quota_bytes is not None:
            size = len(content.encode("utf-8"))
            if size > self.quota_bytes:
                raise StorageQuotaError(str(self.path), size, self.quota_bytes)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        temp_path = self.path.with_suffix(".tmp")
        try:
            temp_path.write_text(content, encoding="utf-8")
            os.replace(temp_path, self.path)
        except OSError:
            temp_path.unlink(missing_ok=True)
            raise
        logger.trace(f"Wrote storage file {self.path} ({len(data)} keys)")

    def _read(self, key: str) -> str | None:
        return self._load().get(key)

    def _write(self, key: str, value: str) -> None:
        data = self._load()
        data[key] = value
        self._dump(data)

    def _delete(self, key: str) -> None:
        data = self._load()
        if key in data:
            del data[key]
            self._dump(data)

    def _keys(self) -> list[str]:
        return list(self._load())


class UnavailableStorage(StoragePort):
    """No persistent store present (e.g. a non-interactive context)."""

    available = False

    def _read(self, key: str) -> str | None:
        return None

    def _write(self, key: str, value: str) -> None:
        pass

    def _delete(self, key: str) -> None:
        pass

    def _keys(self) -> list[str]:
        return []
