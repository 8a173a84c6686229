"""Raw entity models and decoders for locally stored collections.

Stored collections are untrusted JSON. Decoders validate row by row and drop
rows that cannot be repaired, so one bad record never hides the rest.
"""

from dataclasses import dataclass, field
from typing import Any, Optional

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from signal_search.storage.json_store import JsonStore
from signal_search.storage.keys import (
    SIGNAL_COLLECTIONS_KEY,
    SIGNAL_FILES_KEY,
    SIGNAL_HISTORY_KEY,
    SIGNAL_NOTES_KEY,
    SIGNAL_SPACE_TAGS_KEY,
    SIGNAL_SPACES_KEY,
    SIGNAL_TASKS_KEY,
)


class EntityModel(BaseModel):
    """Base for stored entities: camelCase on disk, unknown fields ignored."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    id: str = Field(..., min_length=1, description="Caller-assigned identifier")


class Citation(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)

    title: str = ""
    url: str = ""


def _string_list(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, str)]


class Thread(EntityModel):
    """A question/answer thread from the library history."""

    title: Optional[str] = Field(None, description="Display title, falls back to the question")
    question: str = ""
    answer: str = ""
    mode: str = "quick"
    created_at: str = Field("", alias="createdAt")
    citations: list[Citation] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)
    space_id: Optional[str] = Field(None, alias="spaceId")
    space_name: Optional[str] = Field(None, alias="spaceName")
    pinned: bool = False
    favorite: bool = False
    archived: bool = False

    @field_validator("tags", mode="before")
    @classmethod
    def _coerce_tags(cls, value: Any) -> list[str]:
        return _string_list(value)

    @field_validator("citations", mode="before")
    @classmethod
    def _coerce_citations(cls, value: Any) -> list[Any]:
        if not isinstance(value, list):
            return []
        return [item for item in value if isinstance(item, dict)]

    @property
    def display_title(self) -> str:
        return self.title or self.question


class Space(EntityModel):
    name: str = ""
    instructions: str = ""
    created_at: str = Field("", alias="createdAt")


class Collection(EntityModel):
    name: str = ""
    description: Optional[str] = None
    created_at: str = Field("", alias="createdAt")


class LibraryFile(EntityModel):
    name: str = ""
    size: int = 0
    type: str = "text/plain"
    text: str = ""
    added_at: str = Field("", alias="addedAt")


class Task(EntityModel):
    """A scheduled prompt. Scheduling itself happens elsewhere."""

    name: str = ""
    prompt: str = ""
    cadence: str = "daily"
    time: str = "09:00"
    mode: str = "quick"
    created_at: str = Field("", alias="createdAt")
    next_run: str = Field("", alias="nextRun")
    space_id: Optional[str] = Field(None, alias="spaceId")
    space_name: Optional[str] = Field(None, alias="spaceName")


def _decode_rows[M: BaseModel](model: type[M], raw: Any) -> list[M]:
    if not isinstance(raw, list):
        return []
    rows: list[M] = []
    for index, item in enumerate(raw):
        try:
            rows.append(model.model_validate(item))
        except ValidationError as e:
            logger.debug(f"Dropping invalid {model.__name__} row {index}: {e.error_count()} error(s)")
    return rows


def decode_threads(raw: Any) -> list[Thread]:
    return _decode_rows(Thread, raw)


def decode_spaces(raw: Any) -> list[Space]:
    return _decode_rows(Space, raw)


def decode_collections(raw: Any) -> list[Collection]:
    return _decode_rows(Collection, raw)


def decode_files(raw: Any) -> list[LibraryFile]:
    return _decode_rows(LibraryFile, raw)


def decode_tasks(raw: Any) -> list[Task]:
    return _decode_rows(Task, raw)


def decode_notes(raw: Any) -> dict[str, str]:
    """Thread notes keyed by thread id."""
    if not isinstance(raw, dict):
        return {}
    return {str(key): value for key, value in raw.items() if isinstance(value, str)}


def decode_space_tags(raw: Any) -> dict[str, list[str]]:
    """Space tags keyed by space id."""
    if not isinstance(raw, dict):
        return {}
    return {str(key): _string_list(value) for key, value in raw.items()}


@dataclass
class SearchDataset:
    """Every collection the unified search looks at."""

    threads: list[Thread] = field(default_factory=list)
    spaces: list[Space] = field(default_factory=list)
    collections: list[Collection] = field(default_factory=list)
    files: list[LibraryFile] = field(default_factory=list)
    tasks: list[Task] = field(default_factory=list)
    notes: dict[str, str] = field(default_factory=dict)
    space_tags: dict[str, list[str]] = field(default_factory=dict)

    @property
    def total_items(self) -> int:
        return (
            len(self.threads)
            + len(self.spaces)
            + len(self.collections)
            + len(self.files)
            + len(self.tasks)
        )

    @classmethod
    def from_raw(cls, payload: Any) -> "SearchDataset":
        """Decode a bootstrap-style payload (``{"threads": [...], "spaces": [...], ...}``)."""
        if not isinstance(payload, dict):
            return cls()
        return cls(
            threads=decode_threads(payload.get("threads")),
            spaces=decode_spaces(payload.get("spaces")),
            collections=decode_collections(payload.get("collections")),
            files=decode_files(payload.get("files")),
            tasks=decode_tasks(payload.get("tasks")),
            notes=decode_notes(payload.get("notes")),
            space_tags=decode_space_tags(payload.get("spaceTags")),
        )

    @classmethod
    def from_store(cls, store: JsonStore) -> "SearchDataset":
        """Load every collection from its storage key."""
        return cls(
            threads=decode_threads(store.read_json(SIGNAL_HISTORY_KEY, [])),
            spaces=decode_spaces(store.read_json(SIGNAL_SPACES_KEY, [])),
            collections=decode_collections(store.read_json(SIGNAL_COLLECTIONS_KEY, [])),
            files=decode_files(store.read_json(SIGNAL_FILES_KEY, [])),
            tasks=decode_tasks(store.read_json(SIGNAL_TASKS_KEY, [])),
            notes=decode_notes(store.read_json(SIGNAL_NOTES_KEY, {})),
            space_tags=decode_space_tags(store.read_json(SIGNAL_SPACE_TAGS_KEY, {})),
        )
