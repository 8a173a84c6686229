"""
Filter engine for prepared entries.

Every entry must pass the timeline window, the operator clauses that apply to
its kind, and the free-text query. Clauses that mean nothing for a kind (for
example ``has:citation`` against a space) are ignored for that kind. Filtering
is order preserving and never raises for odd input.
"""

import time
from dataclasses import dataclass
from typing import Callable, Iterable, Optional

from signal_search.engine.prepare import EntityKind, PreparedEntry
from signal_search.query.ast import FreeText, OperatorClause, OperatorKey
from signal_search.query.parser import split_free_text
from signal_search.utils import parse_timestamp_ms

type Predicate = Callable[[PreparedEntry], bool]

TIMELINE_WINDOWS: tuple[str, ...] = ("all", "24h", "7d", "30d")

WINDOW_TO_MS: dict[str, int] = {
    "24h": 24 * 60 * 60 * 1000,
    "7d": 7 * 24 * 60 * 60 * 1000,
    "30d": 30 * 24 * 60 * 60 * 1000,
}

TYPE_ALIASES: dict[str, EntityKind] = {}
for _kind in EntityKind:
    TYPE_ALIASES[_kind.value] = _kind
    TYPE_ALIASES[_kind.singular] = _kind

VERBATIM_ON = frozenset({"true", "on", "yes", "1"})
VERBATIM_OFF = frozenset({"false", "off", "no", "0"})

IS_FLAGS: dict[EntityKind, frozenset[str]] = {
    EntityKind.THREAD: frozenset({"pinned", "favorite", "archived"}),
}


def _has_note(entry: PreparedEntry) -> bool:
    return bool(entry.note_trimmed)


def _has_tags(entry: PreparedEntry) -> bool:
    return bool(entry.tag_set_lower)


def _has_space(entry: PreparedEntry) -> bool:
    return bool(entry.space_id_lower or entry.space_name_lower)


HAS_TESTS: dict[EntityKind, dict[str, Predicate]] = {
    EntityKind.THREAD: {
        "citation": lambda entry: entry.has_citation,
        "citations": lambda entry: entry.has_citation,
        "note": _has_note,
        "notes": _has_note,
        "tag": _has_tags,
        "tags": _has_tags,
        "space": _has_space,
    },
    EntityKind.SPACE: {
        "tag": _has_tags,
        "tags": _has_tags,
        "instructions": lambda entry: bool(entry.instructions_trimmed),
    },
    EntityKind.FILE: {
        "text": lambda entry: bool(entry.text_trimmed),
    },
    EntityKind.TASK: {
        "space": _has_space,
    },
}

TAG_KINDS = frozenset({EntityKind.THREAD, EntityKind.SPACE})
SPACE_KINDS = frozenset({EntityKind.THREAD, EntityKind.SPACE, EntityKind.TASK})
ARCHIVABLE_KINDS = frozenset({EntityKind.THREAD})


def now_ms() -> float:
    return time.time() * 1000


def apply_timeline_window(
    value: str | float | None, window: str, now: Optional[float] = None
) -> bool:
    """Check a timestamp (ISO string or epoch ms) against a timeline window.

    ``all`` (and any unknown window) always passes. Bounded windows accept
    ``[now - window, now]``; a missing or unparsable timestamp fails them.
    """
    window_ms = WINDOW_TO_MS.get(window)
    if window_ms is None:
        return True
    moment = value if isinstance(value, (int, float)) else parse_timestamp_ms(value)
    if moment is None:
        return False
    current = now_ms() if now is None else now
    return current - window_ms <= moment <= current


def resolve_visible_types(
    filter_value: str, operators: Iterable[OperatorClause]
) -> frozenset[EntityKind]:
    """Kinds that should be searched for a type filter plus ``type:`` clauses.

    Positive clauses intersect, negated clauses subtract. Unknown type names
    are ignored; a clause with no known names is ignored entirely.
    """
    visible = set(EntityKind)
    if filter_value in TYPE_ALIASES:
        visible = {TYPE_ALIASES[filter_value]}

    for clause in operators:
        if clause.key is not OperatorKey.TYPE:
            continue
        kinds = {TYPE_ALIASES[v] for v in clause.values if v in TYPE_ALIASES}
        if not kinds:
            continue
        if clause.negated:
            visible -= kinds
        else:
            visible &= kinds

    return frozenset(visible)


def resolve_verbatim(default: bool, operators: Iterable[OperatorClause]) -> bool:
    """Apply ``verbatim:`` clauses to a default; the last recognised clause wins."""
    verbatim = default
    for clause in operators:
        if clause.key is not OperatorKey.VERBATIM:
            continue
        for value in clause.values:
            if value in VERBATIM_ON:
                enabled = True
            elif value in VERBATIM_OFF:
                enabled = False
            else:
                continue
            verbatim = enabled != clause.negated
            break
    return verbatim


@dataclass(frozen=True)
class FilterOptions:
    """Inputs shared by every per-kind filter call."""

    query: str = ""
    operators: tuple[OperatorClause, ...] = ()
    timeline_window: str = "all"
    now_ms: Optional[float] = None
    verbatim: bool = False


def _flag_predicate(flags: list[str], negated: bool) -> Predicate:
    def check(entry: PreparedEntry) -> bool:
        return any(getattr(entry, flag) for flag in flags) != negated

    return check


def _any_predicate(tests: list[Predicate], negated: bool) -> Predicate:
    def check(entry: PreparedEntry) -> bool:
        return any(test(entry) for test in tests) != negated

    return check


def _tag_predicate(values: tuple[str, ...], negated: bool) -> Predicate:
    def check(entry: PreparedEntry) -> bool:
        return any(value in entry.tag_set_lower for value in values) != negated

    return check


def _space_predicate(values: tuple[str, ...], negated: bool) -> Predicate:
    def check(entry: PreparedEntry) -> bool:
        matched = any(
            value == entry.space_name_lower or value == entry.space_id_lower for value in values
        )
        return matched != negated

    return check


def _not_archived(entry: PreparedEntry) -> bool:
    return not entry.archived


def compile_clause_predicates(
    kind: EntityKind, operators: Iterable[OperatorClause]
) -> list[Predicate]:
    """Build the operator predicates that apply to ``kind``."""
    predicates: list[Predicate] = []
    flags = IS_FLAGS.get(kind, frozenset())
    has_tests = HAS_TESTS.get(kind, {})
    archived_mentioned = False

    for clause in operators:
        match clause.key:
            case OperatorKey.IS:
                if clause.mentions("archived"):
                    archived_mentioned = True
                named = [value for value in clause.values if value in flags]
                if named:
                    predicates.append(_flag_predicate(named, clause.negated))
            case OperatorKey.HAS:
                tests = [has_tests[value] for value in clause.values if value in has_tests]
                if tests:
                    predicates.append(_any_predicate(tests, clause.negated))
            case OperatorKey.TAG if kind in TAG_KINDS:
                predicates.append(_tag_predicate(clause.values, clause.negated))
            case OperatorKey.SPACE if kind in SPACE_KINDS:
                predicates.append(_space_predicate(clause.values, clause.negated))
            case _:
                # type: is gated by the caller, verbatim: changes text matching
                pass

    if kind in ARCHIVABLE_KINDS and not archived_mentioned:
        predicates.append(_not_archived)
    return predicates


def matches_free_text(combined_lower: str, free_text: FreeText, verbatim: bool = False) -> bool:
    """Check prepared text against free-text terms and phrases."""
    if verbatim:
        return free_text.verbatim_needle in combined_lower
    if any(term not in combined_lower for term in free_text.terms):
        return False
    return all(pattern.search(combined_lower) for pattern in free_text.phrase_patterns)


def filter_entries(
    entries: Iterable[PreparedEntry], options: FilterOptions
) -> list[PreparedEntry]:
    """Return the entries that pass every filter, in input order."""
    current = now_ms() if options.now_ms is None else options.now_ms
    free_text = split_free_text(options.query)
    verbatim = resolve_verbatim(options.verbatim, options.operators)
    check_text = not free_text.is_empty
    predicates_by_kind: dict[EntityKind, list[Predicate]] = {}

    results = []
    for entry in entries:
        predicates = predicates_by_kind.get(entry.kind)
        if predicates is None:
            predicates = compile_clause_predicates(entry.kind, options.operators)
            predicates_by_kind[entry.kind] = predicates

        if not apply_timeline_window(entry.created_ms, options.timeline_window, current):
            continue
        if not all(predicate(entry) for predicate in predicates):
            continue
        if check_text and not matches_free_text(entry.combined_lower, free_text, verbatim):
            continue
        results.append(entry)

    return results


def filter_thread_entries(entries: Iterable[PreparedEntry], options: FilterOptions) -> list[PreparedEntry]:
    return filter_entries(entries, options)


def filter_space_entries(entries: Iterable[PreparedEntry], options: FilterOptions) -> list[PreparedEntry]:
    return filter_entries(entries, options)


def filter_collection_entries(
    entries: Iterable[PreparedEntry], options: FilterOptions
) -> list[PreparedEntry]:
    return filter_entries(entries, options)


def filter_file_entries(entries: Iterable[PreparedEntry], options: FilterOptions) -> list[PreparedEntry]:
    return filter_entries(entries, options)


def filter_task_entries(entries: Iterable[PreparedEntry], options: FilterOptions) -> list[PreparedEntry]:
    return filter_entries(entries, options)
