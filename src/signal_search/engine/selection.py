"""
Helpers for result selection, bulk thread edits and recent queries.

List-returning helpers return the input list itself when nothing changes,
so callers can detect a no-op with an identity check.
"""

from dataclasses import dataclass
from typing import Callable, Collection, Iterable, Optional, Protocol, Sequence

RECENT_QUERY_LIMIT = 5


class HasId(Protocol):
    @property
    def id(self) -> str: ...


class NamedWithId(HasId, Protocol):
    @property
    def name(self) -> str: ...


def prune_selected_ids(selected_ids: list[str], valid_ids: Collection[str]) -> list[str]:
    """Drop selected ids that no longer exist."""
    kept = [selected for selected in selected_ids if selected in valid_ids]
    if len(kept) == len(selected_ids):
        return selected_ids
    return kept


def toggle_visible_selection(
    selected_ids: list[str], visible_ids: Sequence[str], enabled: bool
) -> list[str]:
    """Select or deselect every visible id, leaving hidden selections alone."""
    if not visible_ids:
        return selected_ids
    if enabled:
        present = set(selected_ids)
        additions = [v for v in dict.fromkeys(visible_ids) if v not in present]
        if not additions:
            return selected_ids
        return selected_ids + additions

    visible = set(visible_ids)
    kept = [selected for selected in selected_ids if selected not in visible]
    if len(kept) == len(selected_ids):
        return selected_ids
    return kept


@dataclass(frozen=True)
class ActiveSelection:
    active_ids: list[str]
    missing_count: int


def resolve_active_selected_ids(
    selected_ids: Sequence[str], items: Iterable[HasId]
) -> ActiveSelection:
    """Split a selection into ids still present (in selection order) and a missing count."""
    present = {item.id for item in items}
    active = [selected for selected in selected_ids if selected in present]
    return ActiveSelection(active_ids=active, missing_count=len(selected_ids) - len(active))


def apply_bulk_thread_update[T: HasId](
    threads: list[T], selected_ids: Sequence[str], updater: Callable[[T], T]
) -> list[T]:
    """Apply ``updater`` to the selected threads only."""
    if not selected_ids:
        return threads
    selected = set(selected_ids)
    return [updater(thread) if thread.id in selected else thread for thread in threads]


@dataclass(frozen=True)
class ThreadSpaceMeta:
    space_id: Optional[str] = None
    space_name: Optional[str] = None


def resolve_thread_space_meta(
    next_space_id: str, spaces: Iterable[NamedWithId]
) -> ThreadSpaceMeta:
    """Look up the space a thread is being moved to; blank or unknown clears it."""
    target = next_space_id.strip()
    if not target:
        return ThreadSpaceMeta()
    for space in spaces:
        if space.id == target:
            return ThreadSpaceMeta(space_id=space.id, space_name=space.name)
    return ThreadSpaceMeta()


def push_recent_query(
    recent: list[str], value: str, limit: int = RECENT_QUERY_LIMIT
) -> list[str]:
    """Put ``value`` first in the recent list, without duplicates, capped at ``limit``."""
    trimmed = value.strip()
    if not trimmed:
        return recent
    return [trimmed, *(item for item in recent if item != trimmed)][:limit]
