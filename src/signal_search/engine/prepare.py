"""Projection of raw entities into searchable prepared entries.

Entity text is lowercased once here so that filtering and scoring never touch
the raw models per keystroke. A prepared index is rebuilt whenever a
collection changes and is never mutated.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from signal_search.engine.models import (
    Collection,
    LibraryFile,
    SearchDataset,
    Space,
    Task,
    Thread,
)
from signal_search.utils import parse_timestamp_ms

type SourceEntity = Thread | Space | Collection | LibraryFile | Task


class EntityKind(str, Enum):
    """The five searchable entity kinds, valued as their ``type:`` name."""

    THREAD = "threads"
    SPACE = "spaces"
    COLLECTION = "collections"
    FILE = "files"
    TASK = "tasks"

    @property
    def singular(self) -> str:
        return self.value[:-1]


@dataclass(frozen=True)
class WeightedField:
    lowered_text: str
    weight: int


@dataclass(frozen=True)
class PreparedEntry:
    """Denormalized, lowercased view of one entity."""

    kind: EntityKind
    source: SourceEntity
    id: str
    combined_lower: str
    created_ms: Optional[float] = None
    space_name_lower: str = ""
    space_id_lower: str = ""
    tag_set_lower: frozenset[str] = frozenset()
    note_trimmed: str = ""
    instructions_trimmed: str = ""
    text_trimmed: str = ""
    pinned: bool = False
    favorite: bool = False
    archived: bool = False
    has_citation: bool = False
    relevance_fields: tuple[WeightedField, ...] = field(default=(), repr=False)

    @property
    def title(self) -> str:
        """Human readable label for listings."""
        match self.source:
            case Thread():
                return self.source.display_title
            case _:
                return self.source.name


def relevance_fields(parts: list[str]) -> tuple[WeightedField, ...]:
    """Weight non-empty parts by position: 8, 6, 4, 2, then 1 for the rest."""
    present = [part for part in parts if part]
    return tuple(
        WeightedField(lowered_text=part.lower(), weight=max(1, 8 - index * 2))
        for index, part in enumerate(present)
    )


def _combine(parts: list[str]) -> str:
    return "\n".join(part for part in parts if part).lower()


def prepare_thread(thread: Thread, notes: dict[str, str]) -> PreparedEntry:
    title = thread.display_title
    tags_text = " ".join(thread.tags)
    citations_text = " ".join(f"{c.title} {c.url}" for c in thread.citations)
    note_trimmed = notes.get(thread.id, "").strip()
    space_name = thread.space_name or ""
    return PreparedEntry(
        kind=EntityKind.THREAD,
        source=thread,
        id=thread.id,
        combined_lower=_combine(
            [title, thread.question, thread.answer, space_name, tags_text, citations_text, note_trimmed]
        ),
        created_ms=parse_timestamp_ms(thread.created_at),
        space_name_lower=space_name.lower(),
        space_id_lower=(thread.space_id or "").lower(),
        tag_set_lower=frozenset(tag.lower() for tag in thread.tags),
        note_trimmed=note_trimmed,
        pinned=thread.pinned,
        favorite=thread.favorite,
        archived=thread.archived,
        has_citation=bool(thread.citations),
        relevance_fields=relevance_fields(
            [title, thread.question, thread.answer, space_name, tags_text]
        ),
    )


def prepare_space(space: Space, space_tags: dict[str, list[str]]) -> PreparedEntry:
    tags = space_tags.get(space.id, [])
    tags_text = " ".join(tags)
    return PreparedEntry(
        kind=EntityKind.SPACE,
        source=space,
        id=space.id,
        combined_lower=_combine([space.name, space.instructions, tags_text]),
        created_ms=parse_timestamp_ms(space.created_at),
        space_name_lower=space.name.lower(),
        space_id_lower=space.id.lower(),
        tag_set_lower=frozenset(tag.lower() for tag in tags),
        instructions_trimmed=space.instructions.strip(),
        relevance_fields=relevance_fields([space.name, space.instructions, tags_text]),
    )


def prepare_collection(collection: Collection) -> PreparedEntry:
    description = collection.description or ""
    return PreparedEntry(
        kind=EntityKind.COLLECTION,
        source=collection,
        id=collection.id,
        combined_lower=_combine([collection.name, description]),
        created_ms=parse_timestamp_ms(collection.created_at),
        relevance_fields=relevance_fields([collection.name, description]),
    )


def prepare_file(library_file: LibraryFile) -> PreparedEntry:
    return PreparedEntry(
        kind=EntityKind.FILE,
        source=library_file,
        id=library_file.id,
        combined_lower=_combine([library_file.name, library_file.text]),
        created_ms=parse_timestamp_ms(library_file.added_at),
        text_trimmed=library_file.text.strip(),
        relevance_fields=relevance_fields([library_file.name, library_file.text]),
    )


def prepare_task(task: Task) -> PreparedEntry:
    space_name = task.space_name or ""
    return PreparedEntry(
        kind=EntityKind.TASK,
        source=task,
        id=task.id,
        combined_lower=_combine([task.name, task.prompt, space_name]),
        created_ms=parse_timestamp_ms(task.created_at),
        space_name_lower=space_name.lower(),
        space_id_lower=(task.space_id or "").lower(),
        relevance_fields=relevance_fields([task.name, task.prompt, space_name]),
    )


@dataclass(frozen=True)
class PreparedIndex:
    """Prepared entries for every kind, in source order."""

    threads: tuple[PreparedEntry, ...] = ()
    spaces: tuple[PreparedEntry, ...] = ()
    collections: tuple[PreparedEntry, ...] = ()
    files: tuple[PreparedEntry, ...] = ()
    tasks: tuple[PreparedEntry, ...] = ()

    def entries_for(self, kind: EntityKind) -> tuple[PreparedEntry, ...]:
        return getattr(self, kind.value)

    @property
    def total_items(self) -> int:
        return sum(len(self.entries_for(kind)) for kind in EntityKind)


def prepare_index(dataset: SearchDataset) -> PreparedIndex:
    """Prepare every collection of ``dataset``."""
    return PreparedIndex(
        threads=tuple(prepare_thread(t, dataset.notes) for t in dataset.threads),
        spaces=tuple(prepare_space(s, dataset.space_tags) for s in dataset.spaces),
        collections=tuple(prepare_collection(c) for c in dataset.collections),
        files=tuple(prepare_file(f) for f in dataset.files),
        tasks=tuple(prepare_task(t) for t in dataset.tasks),
    )
