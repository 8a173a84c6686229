"""
Local persistence for Signal Search.

A status-returning key-value port plus a JSON layer that backs up corrupt blobs
and tracks failed writes.
"""

from signal_search.storage.json_store import JsonStore, StorageWriteFailure
from signal_search.storage.port import (
    JsonFileStorage,
    MemoryStorage,
    StoragePort,
    StoredWriteStatus,
    UnavailableStorage,
    is_quota_exceeded_error,
)

__all__ = [
    "JsonFileStorage",
    "JsonStore",
    "MemoryStorage",
    "StoragePort",
    "StorageWriteFailure",
    "StoredWriteStatus",
    "UnavailableStorage",
    "is_quota_exceeded_error",
]
