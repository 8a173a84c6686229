"""Split display text into highlighted and plain parts for a query."""

from dataclasses import dataclass
from typing import Iterable

MIN_TOKEN_LENGTH = 2


@dataclass(frozen=True)
class HighlightPart:
    text: str
    highlighted: bool


def _find_ranges(haystack_lower: str, needle_lower: str) -> list[tuple[int, int]]:
    ranges = []
    index = haystack_lower.find(needle_lower)
    while needle_lower and index != -1:
        ranges.append((index, index + len(needle_lower)))
        index = haystack_lower.find(needle_lower, index + len(needle_lower))
    return ranges


def _merge_ranges(ranges: list[tuple[int, int]]) -> list[tuple[int, int]]:
    merged: list[tuple[int, int]] = []
    for start, end in sorted(ranges):
        if merged and start <= merged[-1][1]:
            merged[-1] = (merged[-1][0], max(merged[-1][1], end))
        else:
            merged.append((start, end))
    return merged


def _build_patterns(query: str, tokens: list[str]) -> list[str]:
    patterns = [query] if query else []
    # Single characters are noise unless the whole query is that short
    if len(query) >= MIN_TOKEN_LENGTH:
        patterns.extend(token for token in tokens if len(token) >= MIN_TOKEN_LENGTH)
    unique = list(dict.fromkeys(p.strip() for p in patterns if p.strip()))
    return sorted(unique, key=len, reverse=True)


def build_highlight_parts(text: str, query: str, tokens: Iterable[str]) -> list[HighlightPart]:
    """Mark every case-insensitive occurrence of the query or its tokens.

    Overlapping and touching matches are merged into one highlighted part.
    An empty query yields the whole text as a single plain part.
    """
    if not text:
        return []
    normalized_query = query.strip().lower()
    if not normalized_query:
        return [HighlightPart(text, False)]

    normalized_tokens = [t.strip().lower() for t in tokens if t.strip()]
    haystack = text.lower()
    ranges = []
    for pattern in _build_patterns(normalized_query, normalized_tokens):
        ranges.extend(_find_ranges(haystack, pattern))
    if not ranges:
        return [HighlightPart(text, False)]

    parts = []
    cursor = 0
    for start, end in _merge_ranges(ranges):
        if start > cursor:
            parts.append(HighlightPart(text[cursor:start], False))
        parts.append(HighlightPart(text[start:end], True))
        cursor = end
    if cursor < len(text):
        parts.append(HighlightPart(text[cursor:], False))
    return [part for part in parts if part.text]
