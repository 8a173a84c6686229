"""Tests for the unified search pipeline."""

from signal_search.engine.models import SearchDataset
from signal_search.engine.prepare import EntityKind
from signal_search.engine.search import SearchRequest, run_unified_search, search_dataset
from signal_search.fixtures import (
    SMOKE_MATCH_TITLE,
    SMOKE_QUERY,
    SMOKE_ROUNDTRIP_QUERY,
    create_deterministic_dataset,
)


def titles(entries):
    return [entry.title for entry in entries]


class TestSmokeSearch:
    """Search the smoke dataset end to end."""

    def test_smoke_query_returns_single_thread(self, smoke_index, now_ms):
        results = run_unified_search(smoke_index, SearchRequest(query=SMOKE_QUERY, now_ms=now_ms))
        assert titles(results.threads) == [SMOKE_MATCH_TITLE]
        assert results.visible_types == {EntityKind.THREAD}
        assert results.spaces == [] and results.tasks == []
        assert results.total_matches == 1
        assert results.parsed.query == ""

    def test_roundtrip_query_finds_task(self, smoke_index, now_ms):
        request = SearchRequest(
            query=SMOKE_ROUNDTRIP_QUERY,
            filter="tasks",
            sort_by="oldest",
            timeline_window="7d",
            result_limit=10,
            now_ms=now_ms,
        )
        results = run_unified_search(smoke_index, request)
        assert titles(results.tasks) == ["Weekly incident digest"]
        assert results.total_shown == 1

    def test_verbatim_needs_contiguous_text(self, smoke_index, now_ms):
        request = SearchRequest(query=SMOKE_ROUNDTRIP_QUERY, verbatim=True, now_ms=now_ms)
        results = run_unified_search(smoke_index, request)
        assert results.verbatim
        assert results.tasks == []

        request = SearchRequest(query="type:tasks weekly incident", verbatim=True, now_ms=now_ms)
        assert titles(run_unified_search(smoke_index, request).tasks) == ["Weekly incident digest"]

    def test_plain_term_searches_every_kind(self, smoke_index, now_ms):
        results = run_unified_search(smoke_index, SearchRequest(query="incident", now_ms=now_ms))
        assert results.visible_types == frozenset(EntityKind)
        assert len(results.threads) == 3
        assert titles(results.spaces) == ["Incident Ops"]
        assert titles(results.collections) == ["Incident Reviews"]
        assert titles(results.files) == ["incident-retro.md"]
        assert titles(results.tasks) == ["Weekly incident digest"]

    def test_type_gate_hides_other_kinds(self, smoke_index, now_ms):
        request = SearchRequest(query="-type:threads incident", filter="all", now_ms=now_ms)
        results = run_unified_search(smoke_index, request)
        assert results.threads == []
        assert results.totals[EntityKind.THREAD] == 0
        assert len(results.spaces) == 1

    def test_conflicting_filter_returns_nothing(self, smoke_index, now_ms):
        request = SearchRequest(query="type:spaces", filter="threads", now_ms=now_ms)
        results = run_unified_search(smoke_index, request)
        assert results.visible_types == frozenset()
        assert results.total_matches == 0


class TestLimitsAndTotals:
    """Totals count every match; shown lists are capped."""

    def test_limit_caps_shown_but_not_totals(self, now_ms):
        dataset = create_deterministic_dataset(200, now_ms)
        request = SearchRequest(query="incident", result_limit=10, now_ms=now_ms)
        results = search_dataset(dataset, request)
        assert len(results.threads) == 10
        assert results.totals[EntityKind.THREAD] > 10
        assert results.total_shown <= 50

    def test_no_limit(self, now_ms):
        dataset = create_deterministic_dataset(100, now_ms)
        results = search_dataset(dataset, SearchRequest(result_limit=None, filter="spaces", now_ms=now_ms))
        assert len(results.spaces) == 16

    def test_relevance_order(self, smoke_index, now_ms):
        request = SearchRequest(query="type:threads incident", now_ms=now_ms)
        shown = run_unified_search(smoke_index, request).threads
        assert shown[0].title == SMOKE_MATCH_TITLE

    def test_empty_dataset(self, now_ms):
        results = search_dataset(SearchDataset(), SearchRequest(query="anything", now_ms=now_ms))
        assert results.total_matches == 0
        assert results.threads == []
