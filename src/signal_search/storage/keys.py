"""Storage keys used by the search engine's persisted state."""

SIGNAL_HISTORY_KEY = "signal-history-v2"
SIGNAL_SPACES_KEY = "signal-spaces-v1"
SIGNAL_SPACE_TAGS_KEY = "signal-space-tags-v1"
SIGNAL_TASKS_KEY = "signal-tasks-v1"
SIGNAL_FILES_KEY = "signal-files-v1"
SIGNAL_COLLECTIONS_KEY = "signal-collections-v1"
SIGNAL_NOTES_KEY = "signal-notes-v1"

SIGNAL_UNIFIED_RECENT_SEARCH_KEY = "signal-unified-recent-v1"
SIGNAL_UNIFIED_SAVED_SEARCH_KEY = "signal-unified-saved-searches-v1"
# Older releases stored a bare array under these keys
SIGNAL_UNIFIED_SAVED_SEARCH_LEGACY_KEYS = ("signal-unified-saved-v1",)

SIGNAL_CORRUPT_BACKUP_PREFIX = "signal-corrupt-backup-v1:"
SIGNAL_CORRUPT_LATEST_PREFIX = "signal-corrupt-latest-v1:"
SIGNAL_STORAGE_WRITE_FAILURES_KEY = "signal-storage-write-failures-v1"


def corrupt_backup_key(key: str, timestamp_ms: int) -> str:
    """Key under which an unparsable blob for ``key`` is preserved."""
    return f"{SIGNAL_CORRUPT_BACKUP_PREFIX}{key}:{timestamp_ms}"


def corrupt_latest_key(key: str) -> str:
    """Key pointing at the most recent corrupt backup for ``key``."""
    return f"{SIGNAL_CORRUPT_LATEST_PREFIX}{key}"
