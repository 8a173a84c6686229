"""
Saved searches: normalization, migration, fingerprinting and list updates.

Saved searches are persisted as ``{"version": 2, "searches": [...]}`` with
camelCase keys. Decoding is forgiving: a bare array from older releases is
accepted, invalid fields fall back to defaults and broken entries are dropped.

List operations never mutate their input. When nothing changes they return the
input list itself.
"""

import json
import math
import re
import unicodedata
from dataclasses import dataclass, replace
from functools import cmp_to_key
from typing import Any, Optional, Protocol, Sequence

from loguru import logger

from signal_search.storage.json_store import JsonStore
from signal_search.storage.keys import (
    SIGNAL_UNIFIED_SAVED_SEARCH_KEY,
    SIGNAL_UNIFIED_SAVED_SEARCH_LEGACY_KEYS,
)
from signal_search.storage.port import StoredWriteStatus
from signal_search.utils import normalize_iso, parse_timestamp_ms

SAVED_SEARCH_STORAGE_VERSION = 2

VALID_FILTERS = ("all", "threads", "spaces", "collections", "files", "tasks")
VALID_SORTS = ("relevance", "newest", "oldest")
VALID_WINDOWS = ("all", "24h", "7d", "30d")
VALID_LIMITS = (10, 20, 50)

DEFAULT_NAME = "Saved search"
MAX_DEFAULT_NAME_LENGTH = 60
NAME_SUMMARY_SEPARATOR = " · "

_WHITESPACE = re.compile(r"\s+")


class SearchSpecLike(Protocol):
    """Anything carrying the functional fields of a saved search."""

    query: str
    filter: str
    sort_by: str
    timeline_window: str
    result_limit: int
    verbatim: bool


@dataclass(frozen=True)
class SavedSearchSpec:
    """The fields that decide what a saved search returns."""

    query: str = ""
    filter: str = "all"
    sort_by: str = "relevance"
    timeline_window: str = "all"
    result_limit: int = 20
    verbatim: bool = False


@dataclass(frozen=True)
class UnifiedSavedSearch:
    """A named, persisted search."""

    id: str
    name: str
    query: str
    filter: str = "all"
    sort_by: str = "relevance"
    timeline_window: str = "all"
    result_limit: int = 20
    verbatim: bool = False
    pinned: bool = False
    created_at: str = ""
    updated_at: str = ""

    @property
    def spec(self) -> SavedSearchSpec:
        return SavedSearchSpec(
            query=self.query,
            filter=self.filter,
            sort_by=self.sort_by,
            timeline_window=self.timeline_window,
            result_limit=self.result_limit,
            verbatim=self.verbatim,
        )

    def fingerprint(self) -> str:
        return fingerprint_saved_search(self)

    def to_dict(self) -> dict[str, Any]:
        """Persisted (camelCase) form."""
        return {
            "id": self.id,
            "name": self.name,
            "query": self.query,
            "filter": self.filter,
            "sortBy": self.sort_by,
            "timelineWindow": self.timeline_window,
            "resultLimit": self.result_limit,
            "verbatim": self.verbatim,
            "pinned": self.pinned,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }


def _truthy(value: Any) -> bool:
    """Truthiness as the browser client stored it: empty containers count as true."""
    if value is None or value is False:
        return False
    if isinstance(value, (int, float)):
        return value != 0 and not (isinstance(value, float) and math.isnan(value))
    if isinstance(value, str):
        return value != ""
    return True


def _pick(value: Any, valid: tuple[str, ...], default: str) -> str:
    return value if isinstance(value, str) and value in valid else default


def _normalize_limit(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 20
    return int(value) if value in VALID_LIMITS else 20


def normalize_saved_search_name(raw: str) -> str:
    return _WHITESPACE.sub(" ", raw.strip())


def default_saved_search_name(spec: SearchSpecLike) -> str:
    """Name a search after its query, or summarize its non-default controls."""
    query = spec.query.strip()
    if query:
        if len(query) > MAX_DEFAULT_NAME_LENGTH:
            return f"{query[: MAX_DEFAULT_NAME_LENGTH - 3]}..."
        return query

    parts = []
    if spec.filter != "all":
        parts.append(spec.filter)
    if spec.timeline_window != "all":
        parts.append(spec.timeline_window)
    if spec.sort_by != "relevance":
        parts.append(spec.sort_by)
    if spec.verbatim:
        parts.append("verbatim")
    return NAME_SUMMARY_SEPARATOR.join(parts) if parts else DEFAULT_NAME


def fingerprint_saved_search(spec: SearchSpecLike) -> str:
    """Functional identity of a search; names, pins and timestamps don't count."""
    return json.dumps(
        {
            "query": spec.query.strip(),
            "filter": spec.filter,
            "sortBy": spec.sort_by,
            "timelineWindow": spec.timeline_window,
            "resultLimit": spec.result_limit,
            "verbatim": bool(spec.verbatim),
        },
        separators=(",", ":"),
        ensure_ascii=False,
    )


def find_duplicate_saved_search(
    searches: Sequence[UnifiedSavedSearch], spec: SearchSpecLike
) -> Optional[UnifiedSavedSearch]:
    """First saved search with the same fingerprint as ``spec``."""
    needle = fingerprint_saved_search(spec)
    for search in searches:
        if fingerprint_saved_search(search) == needle:
            return search
    return None


def _normalize_entry(raw: Any, now_iso: str) -> Optional[UnifiedSavedSearch]:
    if not isinstance(raw, dict):
        return None
    entry_id = raw.get("id").strip() if isinstance(raw.get("id"), str) else ""
    if not entry_id:
        return None

    spec = SavedSearchSpec(
        query=raw["query"].strip() if isinstance(raw.get("query"), str) else "",
        filter=_pick(raw.get("filter"), VALID_FILTERS, "all"),
        sort_by=_pick(raw.get("sortBy"), VALID_SORTS, "relevance"),
        timeline_window=_pick(raw.get("timelineWindow"), VALID_WINDOWS, "all"),
        result_limit=_normalize_limit(raw.get("resultLimit")),
        verbatim=_truthy(raw.get("verbatim")),
    )
    raw_name = raw.get("name")
    if isinstance(raw_name, str) and raw_name.strip():
        name = normalize_saved_search_name(raw_name)
    else:
        name = default_saved_search_name(spec)

    created_at = normalize_iso(raw.get("createdAt"), normalize_iso(raw.get("updatedAt"), now_iso))
    updated_at = normalize_iso(raw.get("updatedAt"), created_at)
    return UnifiedSavedSearch(
        id=entry_id,
        name=name,
        query=spec.query,
        filter=spec.filter,
        sort_by=spec.sort_by,
        timeline_window=spec.timeline_window,
        result_limit=spec.result_limit,
        verbatim=spec.verbatim,
        pinned=_truthy(raw.get("pinned")),
        created_at=created_at,
        updated_at=updated_at,
    )


def decode_saved_search_storage(raw: Any, now_iso: str) -> list[UnifiedSavedSearch]:
    """Decode persisted saved searches.

    Accepts the current envelope or a legacy bare array. Envelopes with any
    other version decode to an empty list. Duplicate ids keep the first entry.

    Args:
        raw: Parsed JSON as read from storage
        now_iso: Timestamp used when an entry has no usable timestamps

    Returns:
        Normalized saved searches, in stored order
    """
    if isinstance(raw, list):
        candidates = raw
    elif isinstance(raw, dict) and raw.get("version") == SAVED_SEARCH_STORAGE_VERSION:
        searches = raw.get("searches")
        candidates = searches if isinstance(searches, list) else []
    else:
        return []

    seen: set[str] = set()
    decoded = []
    for candidate in candidates:
        saved = _normalize_entry(candidate, now_iso)
        if saved is None or saved.id in seen:
            continue
        seen.add(saved.id)
        decoded.append(saved)
    return decoded


def encode_saved_search_storage(searches: Sequence[UnifiedSavedSearch]) -> dict[str, Any]:
    return {
        "version": SAVED_SEARCH_STORAGE_VERSION,
        "searches": [search.to_dict() for search in searches],
    }


def _name_sort_key(name: str) -> tuple[str, str, str]:
    """Collation key for names: base letters, then accents, then case (lowercase first).

    Independent of the process locale, so "émile" sorts beside "emile" on every machine.
    """
    folded = name.casefold()
    base = "".join(c for c in unicodedata.normalize("NFKD", folded) if not unicodedata.combining(c))
    return base, folded, name.swapcase()


def _compare_saved(a: UnifiedSavedSearch, b: UnifiedSavedSearch) -> int:
    if a.pinned != b.pinned:
        return -1 if a.pinned else 1
    a_time = parse_timestamp_ms(a.updated_at)
    b_time = parse_timestamp_ms(b.updated_at)
    if a_time is not None and b_time is not None and a_time != b_time:
        return -1 if a_time > b_time else 1
    a_name = _name_sort_key(a.name)
    b_name = _name_sort_key(b.name)
    return (a_name > b_name) - (a_name < b_name)


def sort_saved_searches(searches: Sequence[UnifiedSavedSearch]) -> list[UnifiedSavedSearch]:
    """Pinned first, then most recently updated, then by name."""
    return sorted(searches, key=cmp_to_key(_compare_saved))


def _index_of(searches: Sequence[UnifiedSavedSearch], search_id: str) -> int:
    for index, search in enumerate(searches):
        if search.id == search_id:
            return index
    return -1


def upsert_saved_search(
    searches: list[UnifiedSavedSearch],
    saved: UnifiedSavedSearch,
    now_iso: Optional[str] = None,
) -> list[UnifiedSavedSearch]:
    """Prepend a new search or replace the one with the same id in place."""
    if now_iso is not None:
        saved = replace(saved, updated_at=now_iso)
    index = _index_of(searches, saved.id)
    if index == -1:
        return [saved, *searches]
    updated = list(searches)
    updated[index] = saved
    return updated


def rename_saved_search(
    searches: list[UnifiedSavedSearch], search_id: str, next_name: str, now_iso: str
) -> list[UnifiedSavedSearch]:
    name = normalize_saved_search_name(next_name)
    if not name:
        return searches
    index = _index_of(searches, search_id)
    if index == -1 or searches[index].name == name:
        return searches
    updated = list(searches)
    updated[index] = replace(searches[index], name=name, updated_at=now_iso)
    return updated


def toggle_pin_saved_search(
    searches: list[UnifiedSavedSearch], search_id: str, now_iso: str
) -> list[UnifiedSavedSearch]:
    index = _index_of(searches, search_id)
    if index == -1:
        return searches
    current = searches[index]
    updated = list(searches)
    updated[index] = replace(current, pinned=not current.pinned, updated_at=now_iso)
    return updated


def delete_saved_search(
    searches: list[UnifiedSavedSearch], search_id: str
) -> list[UnifiedSavedSearch]:
    remaining = [search for search in searches if search.id != search_id]
    return searches if len(remaining) == len(searches) else remaining


class SavedSearchStore:
    """Loads and saves the saved-search list through a JsonStore."""

    def __init__(self, store: JsonStore):
        self.store = store

    def load(self, now_iso: str) -> list[UnifiedSavedSearch]:
        """Read saved searches, migrating from a legacy key when needed."""
        raw = self.store.read_json(SIGNAL_UNIFIED_SAVED_SEARCH_KEY, None)
        if raw is not None:
            return decode_saved_search_storage(raw, now_iso)

        for legacy_key in SIGNAL_UNIFIED_SAVED_SEARCH_LEGACY_KEYS:
            legacy = self.store.read_json(legacy_key, None)
            if legacy is None:
                continue
            searches = decode_saved_search_storage(legacy, now_iso)
            logger.debug(f"Migrating {len(searches)} saved searches from {legacy_key}")
            self.save(searches)
            return searches
        return []

    def save(self, searches: Sequence[UnifiedSavedSearch]) -> StoredWriteStatus:
        return self.store.write_json(
            SIGNAL_UNIFIED_SAVED_SEARCH_KEY, encode_saved_search_storage(searches)
        )
