"""Tests for deterministic and smoke datasets."""

import pytest

from signal_search.engine.models import SearchDataset
from signal_search.fixtures import (
    BASELINE_QUERY_PHRASE,
    SMOKE_NOW_ISO,
    SMOKE_QUERY,
    SMOKE_ROUNDTRIP_QUERY,
    SMOKE_ROUNDTRIP_SAVED_ID,
    SPREAD_WINDOW_MS,
    DatasetCounts,
    create_deterministic_dataset,
    deterministic_offset_ms,
    smoke_archive_bootstrap,
    smoke_bootstrap,
    split_dataset_counts,
)
from signal_search.saved_searches import decode_saved_search_storage
from signal_search.utils import parse_timestamp_ms


class TestSplitDatasetCounts:
    def test_thousand(self):
        assert split_dataset_counts(1000) == DatasetCounts(480, 160, 120, 120, 120)

    @pytest.mark.parametrize("value", [3, 0, -10, "many", None, float("nan"), True])
    def test_small_or_invalid_totals_use_minimum(self, value):
        counts = split_dataset_counts(value)
        assert counts == DatasetCounts(2, 1, 1, 1, 1)

    def test_fractional_total_is_floored(self):
        assert split_dataset_counts(1000.9).total == 1000


class TestDeterministicDataset:
    def test_same_inputs_same_dataset(self, now_ms):
        assert create_deterministic_dataset(100, now_ms) == create_deterministic_dataset(100, now_ms)

    def test_counts_and_ids(self, now_ms):
        dataset = create_deterministic_dataset(1000, now_ms, id_prefix="perf-1000")
        assert len(dataset.threads) == 480
        assert len(dataset.tasks) == 120
        assert dataset.total_items == 1000
        assert dataset.threads[0].id == "perf-1000-thread-0"
        assert dataset.space_tags["perf-1000-space-0"] == ["incident", "ops"]

    def test_blank_prefix_falls_back(self, now_ms):
        dataset = create_deterministic_dataset(10, now_ms, id_prefix="  ")
        assert dataset.spaces[0].id == "fixture-space-0"

    def test_timestamps_within_spread_window(self, now_ms):
        dataset = create_deterministic_dataset(200, now_ms)
        for thread in dataset.threads:
            created = parse_timestamp_ms(thread.created_at)
            assert now_ms - SPREAD_WINDOW_MS <= created < now_ms

    def test_offsets_are_positive(self):
        assert all(0 < deterministic_offset_ms(i, 1000) <= SPREAD_WINDOW_MS for i in range(50))

    def test_text_carries_baseline_phrase(self, now_ms):
        dataset = create_deterministic_dataset(20, now_ms)
        assert BASELINE_QUERY_PHRASE in dataset.threads[0].answer
        assert BASELINE_QUERY_PHRASE in dataset.files[0].text

    def test_thread_flags_follow_index(self, now_ms):
        threads = create_deterministic_dataset(100, now_ms).threads
        assert threads[0].archived and threads[0].pinned and threads[0].favorite
        assert threads[0].citations
        assert not threads[1].citations
        assert threads[0].tags == ["incident", "workflow"]
        assert threads[1].tags == ["research", "notes"]


class TestSmokeFixtures:
    def test_bootstrap_is_fresh_copy(self):
        first = smoke_bootstrap()
        first["threads"].clear()
        assert len(smoke_bootstrap()["threads"]) == 3

    def test_saved_searches_decode(self):
        saved = decode_saved_search_storage(smoke_bootstrap()["savedSearches"], SMOKE_NOW_ISO)
        assert [s.id for s in saved] == ["smoke-saved-1", SMOKE_ROUNDTRIP_SAVED_ID]
        assert saved[0].query == SMOKE_QUERY and saved[0].pinned

        roundtrip = saved[1]
        assert roundtrip.query == SMOKE_ROUNDTRIP_QUERY
        assert (roundtrip.filter, roundtrip.sort_by, roundtrip.timeline_window) == ("tasks", "oldest", "7d")
        assert roundtrip.result_limit == 10
        assert roundtrip.verbatim is True

    def test_archive_bootstrap(self):
        dataset = SearchDataset.from_raw(smoke_archive_bootstrap())
        assert [t.archived for t in dataset.threads] == [True, False]
        assert dataset.total_items == 2
