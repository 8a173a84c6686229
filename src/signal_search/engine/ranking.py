"""
Relevance scoring and top-K selection.

Scores are weighted occurrence counts: each field's weight is fixed when the
entry is prepared, so a query only pays for counting substrings.
"""

from typing import Callable, Iterable, Optional, Sequence

from signal_search.engine.prepare import PreparedEntry, WeightedField
from signal_search.query.ast import FreeText
from signal_search.query.parser import split_free_text

type ScoreFn = Callable[[PreparedEntry], float]

SORT_OPTIONS: tuple[str, ...] = ("relevance", "newest", "oldest")


def _score_fields(fields: Iterable[WeightedField], free_text: FreeText, verbatim: bool) -> float:
    if verbatim:
        needle = free_text.verbatim_needle
        if not needle:
            return 0.0
        return float(sum(field.lowered_text.count(needle) * field.weight for field in fields))

    terms = free_text.terms
    patterns = free_text.phrase_patterns
    score = 0
    for field in fields:
        text = field.lowered_text
        hits = sum(text.count(term) for term in terms)
        hits += sum(len(pattern.findall(text)) for pattern in patterns)
        score += hits * field.weight
    return float(score)


def compute_relevance_score(
    fields: Iterable[WeightedField], query: str, verbatim: bool = False
) -> float:
    """Weighted count of free-text occurrences across ``fields``.

    Args:
        fields: Lowercased fields with their weights
        query: Free-text query (operators already stripped)
        verbatim: Count the whole query as one exact needle

    Returns:
        Sum over fields of ``occurrences * weight``; 0 for an empty query
    """
    return _score_fields(fields, split_free_text(query), verbatim)


def make_relevance_scorer(query: str, verbatim: bool = False) -> ScoreFn:
    """Build a scorer with the query split once."""
    free_text = split_free_text(query)

    def score(entry: PreparedEntry) -> float:
        return _score_fields(entry.relevance_fields, free_text, verbatim)

    return score


def _created_key(entry: PreparedEntry, descending: bool) -> tuple[bool, float]:
    # Entries without a timestamp always sort last
    if entry.created_ms is None:
        return (True, 0.0)
    return (False, -entry.created_ms if descending else entry.created_ms)


def top_k(
    entries: Sequence[PreparedEntry],
    sort_by: str,
    query: str,
    limit: Optional[int],
    score_fn: Optional[ScoreFn] = None,
) -> list[PreparedEntry]:
    """Sort ``entries`` and keep the first ``limit``.

    ``relevance`` orders by score, then newest first, then input order.
    ``newest`` and ``oldest`` ignore the score. Python's sort is stable, so
    input order is the final tie-break in every mode. ``limit=None`` keeps all.
    """
    if sort_by == "newest":
        ranked = sorted(entries, key=lambda entry: _created_key(entry, descending=True))
    elif sort_by == "oldest":
        ranked = sorted(entries, key=lambda entry: _created_key(entry, descending=False))
    else:
        scorer = score_fn or make_relevance_scorer(query)
        scored = [(scorer(entry), entry) for entry in entries]
        scored.sort(key=lambda pair: (-pair[0], *_created_key(pair[1], descending=True)))
        ranked = [entry for _, entry in scored]

    if limit is None:
        return ranked
    return ranked[: max(0, limit)]
