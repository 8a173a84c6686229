"""Common test fixtures for Signal Search."""

from typing import Any

import pytest

from signal_search.config import get_config
from signal_search.engine.models import SearchDataset, Thread
from signal_search.engine.prepare import PreparedIndex, prepare_index
from signal_search.fixtures import SMOKE_NOW_MS, smoke_dataset
from signal_search.storage import JsonStore, MemoryStorage

FIXED_CLOCK_MS = 1_770_811_200_000  # 2026-02-11T12:00:00Z


@pytest.fixture
def now_ms() -> float:
    return SMOKE_NOW_MS


@pytest.fixture
def memory_storage() -> MemoryStorage:
    return MemoryStorage()


@pytest.fixture
def json_store(memory_storage) -> JsonStore:
    """JsonStore over in-memory storage with a frozen clock."""
    return JsonStore(memory_storage, clock=lambda: FIXED_CLOCK_MS)


@pytest.fixture
def smoke() -> SearchDataset:
    return smoke_dataset()


@pytest.fixture
def smoke_index(smoke) -> PreparedIndex:
    return prepare_index(smoke)


@pytest.fixture
def make_thread():
    """Factory for threads with sensible defaults; keyword args use stored (camelCase) names."""

    def _make(thread_id: str = "t1", **fields: Any) -> Thread:
        payload = {
            "id": thread_id,
            "title": f"Thread {thread_id}",
            "question": "question",
            "answer": "answer",
            "createdAt": "2026-02-10T12:00:00.000Z",
        }
        payload.update(fields)
        return Thread.model_validate(payload)

    return _make


@pytest.fixture
def config_home(tmp_path, monkeypatch):
    """Point the CLI configuration at a temporary home directory."""
    monkeypatch.setenv("SIGNAL_SEARCH_HOME", str(tmp_path))
    monkeypatch.setenv("SIGNAL_SEARCH_LOG_LEVEL", "ERROR")
    get_config.cache_clear()
    yield tmp_path
    get_config.cache_clear()

