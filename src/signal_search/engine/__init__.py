"""
Search engine for Signal Search.

Prepares entities, filters them against parsed queries and ranks the matches.
"""

from signal_search.engine.filters import (
    FilterOptions,
    apply_timeline_window,
    filter_collection_entries,
    filter_entries,
    filter_file_entries,
    filter_space_entries,
    filter_task_entries,
    filter_thread_entries,
    resolve_verbatim,
    resolve_visible_types,
)
from signal_search.engine.highlight import HighlightPart, build_highlight_parts
from signal_search.engine.models import (
    Citation,
    Collection,
    LibraryFile,
    SearchDataset,
    Space,
    Task,
    Thread,
)
from signal_search.engine.prepare import (
    EntityKind,
    PreparedEntry,
    PreparedIndex,
    WeightedField,
    prepare_index,
    relevance_fields,
)
from signal_search.engine.ranking import compute_relevance_score, make_relevance_scorer, top_k
from signal_search.engine.search import (
    SearchRequest,
    UnifiedSearchResults,
    run_unified_search,
    search_dataset,
)

__all__ = [
    # Models
    "Citation",
    "Collection",
    "LibraryFile",
    "SearchDataset",
    "Space",
    "Task",
    "Thread",
    # Preparation
    "EntityKind",
    "PreparedEntry",
    "PreparedIndex",
    "WeightedField",
    "prepare_index",
    "relevance_fields",
    # Filters
    "FilterOptions",
    "apply_timeline_window",
    "filter_collection_entries",
    "filter_entries",
    "filter_file_entries",
    "filter_space_entries",
    "filter_task_entries",
    "filter_thread_entries",
    "resolve_verbatim",
    "resolve_visible_types",
    # Ranking
    "compute_relevance_score",
    "make_relevance_scorer",
    "top_k",
    # Search
    "SearchRequest",
    "UnifiedSearchResults",
    "run_unified_search",
    "search_dataset",
    # Highlighting
    "HighlightPart",
    "build_highlight_parts",
]
