"""
Unified search pipeline: parse, gate by type, filter, rank, cap.
"""

from dataclasses import dataclass, field
from typing import Optional

from loguru import logger

from signal_search.engine.filters import (
    FilterOptions,
    filter_entries,
    now_ms,
    resolve_verbatim,
    resolve_visible_types,
)
from signal_search.engine.models import SearchDataset
from signal_search.engine.prepare import EntityKind, PreparedEntry, PreparedIndex, prepare_index
from signal_search.engine.ranking import make_relevance_scorer, top_k
from signal_search.query.ast import ParsedQuery
from signal_search.query.parser import parse_query

RESULT_LIMITS: tuple[int, ...] = (10, 20, 50)
DEFAULT_RESULT_LIMIT = 20


@dataclass(frozen=True)
class SearchRequest:
    """Everything the search controls contribute to one search pass."""

    query: str = ""
    filter: str = "all"
    sort_by: str = "relevance"
    timeline_window: str = "all"
    result_limit: Optional[int] = DEFAULT_RESULT_LIMIT
    verbatim: bool = False
    now_ms: Optional[float] = None


@dataclass
class UnifiedSearchResults:
    """Ranked, capped results per kind plus the uncapped match counts."""

    parsed: ParsedQuery
    visible_types: frozenset[EntityKind]
    verbatim: bool
    shown: dict[EntityKind, list[PreparedEntry]] = field(default_factory=dict)
    totals: dict[EntityKind, int] = field(default_factory=dict)

    @property
    def threads(self) -> list[PreparedEntry]:
        return self.shown.get(EntityKind.THREAD, [])

    @property
    def spaces(self) -> list[PreparedEntry]:
        return self.shown.get(EntityKind.SPACE, [])

    @property
    def collections(self) -> list[PreparedEntry]:
        return self.shown.get(EntityKind.COLLECTION, [])

    @property
    def files(self) -> list[PreparedEntry]:
        return self.shown.get(EntityKind.FILE, [])

    @property
    def tasks(self) -> list[PreparedEntry]:
        return self.shown.get(EntityKind.TASK, [])

    @property
    def total_matches(self) -> int:
        return sum(self.totals.values())

    @property
    def total_shown(self) -> int:
        return sum(len(entries) for entries in self.shown.values())


def run_unified_search(index: PreparedIndex, request: SearchRequest) -> UnifiedSearchResults:
    """Run one search pass over a prepared index.

    The query is parsed once; the free text is split once for all kinds.
    """
    parsed = parse_query(request.query)
    visible = resolve_visible_types(request.filter, parsed.operators)
    verbatim = resolve_verbatim(request.verbatim, parsed.operators)
    options = FilterOptions(
        query=parsed.query,
        operators=parsed.operators,
        timeline_window=request.timeline_window,
        now_ms=now_ms() if request.now_ms is None else request.now_ms,
        verbatim=verbatim,
    )
    scorer = make_relevance_scorer(parsed.query, verbatim)

    results = UnifiedSearchResults(parsed=parsed, visible_types=visible, verbatim=verbatim)
    for kind in EntityKind:
        if kind not in visible:
            results.shown[kind] = []
            results.totals[kind] = 0
            continue
        entries = index.entries_for(kind)
        filtered = filter_entries(entries, options)
        results.totals[kind] = len(filtered)
        results.shown[kind] = top_k(
            filtered, request.sort_by, parsed.query, request.result_limit, scorer
        )
        logger.trace(f"Search {kind.value}: {len(filtered)}/{len(entries)} matched")

    logger.debug(
        f"Search {parsed!r} matched {results.total_matches}, showing {results.total_shown}"
    )
    return results


def search_dataset(dataset: SearchDataset, request: SearchRequest) -> UnifiedSearchResults:
    """Prepare ``dataset`` and search it once."""
    return run_unified_search(prepare_index(dataset), request)
