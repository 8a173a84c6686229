"""
Deterministic datasets for benchmarks and smoke checks.

``create_deterministic_dataset`` always produces the same records for the same
size, clock and id prefix, so benchmark checksums are comparable across runs.
"""

import math
from dataclasses import dataclass
from typing import Any, Optional

from signal_search.engine.models import (
    Collection,
    LibraryFile,
    SearchDataset,
    Space,
    Task,
    Thread,
)
from signal_search.utils import format_iso_ms, parse_timestamp_ms

BASELINE_QUERY_PHRASE = "incident research workflow citation keyboard"
TASK_CADENCES = ("daily", "weekday", "weekly", "monthly", "yearly")
SPREAD_WINDOW_MS = 45 * 24 * 60 * 60 * 1000
MIN_TOTAL_ITEMS = 5


@dataclass(frozen=True)
class DatasetCounts:
    threads: int
    spaces: int
    collections: int
    files: int
    tasks: int

    @property
    def total(self) -> int:
        return self.threads + self.spaces + self.collections + self.files + self.tasks


def _positive_int(value: Any, fallback: int) -> int:
    if not isinstance(value, (int, float)) or isinstance(value, bool) or not math.isfinite(value):
        return fallback
    rounded = math.floor(value)
    return rounded if rounded > 0 else fallback


def split_dataset_counts(total_items: Any) -> DatasetCounts:
    """Split a total into 48% threads, 16% spaces, 12% collections, 12% files, rest tasks."""
    total = max(MIN_TOTAL_ITEMS, _positive_int(total_items, MIN_TOTAL_ITEMS))
    threads = max(1, math.floor(total * 0.48))
    spaces = max(1, math.floor(total * 0.16))
    collections = max(1, math.floor(total * 0.12))
    files = max(1, math.floor(total * 0.12))
    tasks = max(1, total - threads - spaces - collections - files)
    return DatasetCounts(threads, spaces, collections, files, tasks)


def deterministic_offset_ms(index: int, total_items: int) -> int:
    """Age of record ``index``, spread over 45 days without randomness."""
    return ((index + 1) * 104_729 + total_items * 8_191) % SPREAD_WINDOW_MS + 1


def create_deterministic_dataset(
    total_items: Any, now_ms: float, id_prefix: str = "fixture"
) -> SearchDataset:
    """Build a mixed dataset of roughly ``total_items`` records ending at ``now_ms``."""
    total = max(MIN_TOTAL_ITEMS, _positive_int(total_items, MIN_TOTAL_ITEMS))
    counts = split_dataset_counts(total)
    prefix = id_prefix.strip() or "fixture"

    def created(index: int) -> tuple[str, float]:
        created_ms = now_ms - deterministic_offset_ms(index, total)
        return format_iso_ms(created_ms), created_ms

    spaces: list[Space] = []
    space_tags: dict[str, list[str]] = {}
    for i in range(counts.spaces):
        space_id = f"{prefix}-space-{i}"
        incident = i % 2 == 0
        spaces.append(
            Space(
                id=space_id,
                name=f"Incident Ops {i}" if incident else f"Research {i}",
                instructions=(
                    f"Track incidents, mitigations, and postmortems. {BASELINE_QUERY_PHRASE}"
                    if incident
                    else f"Collect research findings and evidence. {BASELINE_QUERY_PHRASE}"
                ),
                createdAt=created(i)[0],
            )
        )
        space_tags[space_id] = ["incident", "ops"] if incident else ["research", "briefing"]

    threads: list[Thread] = []
    notes: dict[str, str] = {}
    offset = counts.spaces
    for i in range(counts.threads):
        thread_id = f"{prefix}-thread-{i}"
        incident = i % 4 == 0
        space = spaces[i % len(spaces)]
        citations = []
        if i % 2 == 0:
            citations.append(
                {
                    "title": f"Incident report {i}" if incident else f"Research note {i}",
                    "url": f"https://example.com/{prefix}/source-{i}",
                }
            )
        threads.append(
            Thread.model_validate(
                {
                    "id": thread_id,
                    "title": f"Incident analysis {i}" if incident else f"Research summary {i}",
                    "question": (
                        f"What caused incident {i}?"
                        if incident
                        else f"What changed in keyboard workflow {i}?"
                    ),
                    "answer": (
                        f"Incident timeline {i} with mitigation and owner follow-up. {BASELINE_QUERY_PHRASE}"
                        if incident
                        else f"Research workflow update {i} with notes and action items. {BASELINE_QUERY_PHRASE}"
                    ),
                    "mode": ("research", "quick", "learn")[i % 3],
                    "createdAt": created(i + offset)[0],
                    "citations": citations,
                    "spaceId": space.id,
                    "spaceName": space.name,
                    "tags": ["incident" if incident else "research", "workflow" if i % 2 == 0 else "notes"],
                    "pinned": i % 3 == 0,
                    "favorite": i % 2 == 0,
                    "archived": i % 11 == 0,
                }
            )
        )
        if i % 5 == 0:
            notes[thread_id] = (
                f"Escalate {thread_id} after retro completion."
                if incident
                else f"Review {thread_id} during weekly planning."
            )

    collections: list[Collection] = []
    offset += counts.threads
    for i in range(counts.collections):
        collections.append(
            Collection(
                id=f"{prefix}-collection-{i}",
                name=f"Incident collection {i}" if i % 2 == 0 else f"Research archive {i}",
                createdAt=created(i + offset)[0],
            )
        )

    files: list[LibraryFile] = []
    offset += counts.collections
    for i in range(counts.files):
        incident = i % 2 == 0
        files.append(
            LibraryFile(
                id=f"{prefix}-file-{i}",
                name=f"incident-{i}.md" if incident else f"research-{i}.txt",
                size=1024 + i * 17,
                type="text/markdown" if incident else "text/plain",
                text=(
                    f"Incident postmortem with timeline and citations. {BASELINE_QUERY_PHRASE}"
                    if incident
                    else f"Research brief with evidence and keyboard follow-up questions. {BASELINE_QUERY_PHRASE}"
                ),
                addedAt=created(i + offset)[0],
            )
        )

    tasks: list[Task] = []
    offset += counts.files
    for i in range(counts.tasks):
        created_at, created_ms = created(i + offset)
        space = spaces[i % len(spaces)]
        tasks.append(
            Task(
                id=f"{prefix}-task-{i}",
                name=f"Incident digest {i}" if i % 2 == 0 else f"Research digest {i}",
                prompt=(
                    f"Summarize this week's incidents with citations. {BASELINE_QUERY_PHRASE}"
                    if i % 2 == 0
                    else f"Summarize new research findings with keyboard references. {BASELINE_QUERY_PHRASE}"
                ),
                cadence=TASK_CADENCES[i % len(TASK_CADENCES)],
                time=f"{(8 + i % 8) % 24:02d}:00",
                mode="research" if i % 2 == 0 else "quick",
                createdAt=created_at,
                nextRun=format_iso_ms(created_ms + (i + 1) * 60 * 60 * 1000),
                spaceId=space.id,
                spaceName=space.name,
            )
        )

    return SearchDataset(
        threads=threads,
        spaces=spaces,
        collections=collections,
        files=files,
        tasks=tasks,
        notes=notes,
        space_tags=space_tags,
    )


# Smoke fixture: a tiny dataset with one record of every kind and a
# three-thread scenario for operator filtering.

SMOKE_NOW_ISO = "2026-02-11T12:00:00.000Z"
SMOKE_NOW_MS: float = parse_timestamp_ms(SMOKE_NOW_ISO) or 0.0

SMOKE_QUERY = "type:threads is:pinned has:citation tag:incident -has:note"
SMOKE_MATCH_TITLE = "Smoke Incident Thread"
SMOKE_ROUNDTRIP_QUERY = 'type:tasks space:"Incident Ops" weekly digest'
SMOKE_ROUNDTRIP_SAVED_ID = "smoke-saved-roundtrip"

SMOKE_ARCHIVE_INCLUDE_QUERY = "type:threads is:archived incident"
SMOKE_ARCHIVE_EXCLUDE_QUERY = "type:threads -is:archived incident"
SMOKE_ARCHIVE_INCLUDED_TITLE = "Archived incident retro"
SMOKE_ARCHIVE_EXCLUDED_TITLE = "Active incident review"


def _smoke_thread(thread_id: str, title: str, **fields: Any) -> dict[str, Any]:
    thread = {
        "id": thread_id,
        "title": title,
        "question": "",
        "answer": "",
        "mode": "quick",
        "createdAt": SMOKE_NOW_ISO,
        "citations": [],
        "spaceId": "smoke-space-incident",
        "spaceName": "Incident Ops",
        "tags": ["incident"],
        "pinned": False,
        "favorite": False,
        "archived": False,
    }
    thread.update(fields)
    return thread


def smoke_bootstrap() -> dict[str, Any]:
    """Raw payload for the smoke dataset; a fresh copy on every call."""
    return {
        "notes": {
            "smoke-thread-filtered-note": "Needs follow-up write-up after the retro is complete.",
        },
        "threads": [
            _smoke_thread(
                "smoke-thread-match",
                SMOKE_MATCH_TITLE,
                question="What happened during the API outage?",
                answer="Primary region overload triggered a failover and latency spike.",
                mode="research",
                citations=[
                    {
                        "title": "Incident timeline",
                        "url": "https://status.example.com/incidents/2026-02-11",
                    }
                ],
                tags=["incident", "postmortem"],
                pinned=True,
            ),
            _smoke_thread(
                "smoke-thread-filtered-note",
                "Incident follow-up with note",
                question="Did we capture mitigations?",
                answer="Yes, but this item has a note and should be filtered out.",
                citations=[{"title": "Mitigation checklist", "url": "https://example.com/checklist"}],
                pinned=True,
                favorite=True,
            ),
            _smoke_thread(
                "smoke-thread-filtered-state",
                "Unpinned incident scratchpad",
                question="Scratch notes",
                answer="Unpinned record used to verify operator filtering.",
                citations=[{"title": "Scratch source", "url": "https://example.com/scratch"}],
            ),
        ],
        "spaces": [
            {
                "id": "smoke-space-incident",
                "name": "Incident Ops",
                "instructions": "Track live incidents and postmortems.",
                "createdAt": SMOKE_NOW_ISO,
            }
        ],
        "spaceTags": {"smoke-space-incident": ["incident", "ops"]},
        "collections": [
            {"id": "smoke-collection-1", "name": "Incident Reviews", "createdAt": SMOKE_NOW_ISO}
        ],
        "files": [
            {
                "id": "smoke-file-1",
                "name": "incident-retro.md",
                "size": 1536,
                "type": "text/markdown",
                "text": "Postmortem summary and remediation owners.",
                "addedAt": SMOKE_NOW_ISO,
            }
        ],
        "tasks": [
            {
                "id": "smoke-task-1",
                "name": "Weekly incident digest",
                "prompt": "Summarize high-severity incidents from the week.",
                "cadence": "weekly",
                "time": "09:00",
                "mode": "research",
                "createdAt": SMOKE_NOW_ISO,
                "nextRun": SMOKE_NOW_ISO,
                "spaceId": "smoke-space-incident",
                "spaceName": "Incident Ops",
            }
        ],
        "recentQueries": [SMOKE_QUERY, "type:spaces tag:ops"],
        "savedSearches": [
            {
                "id": "smoke-saved-1",
                "name": "Pinned incidents with citations",
                "query": SMOKE_QUERY,
                "filter": "threads",
                "sortBy": "relevance",
                "timelineWindow": "all",
                "resultLimit": 20,
                "verbatim": False,
                "pinned": True,
                "createdAt": SMOKE_NOW_ISO,
                "updatedAt": SMOKE_NOW_ISO,
            },
            {
                "id": SMOKE_ROUNDTRIP_SAVED_ID,
                "name": "Roundtrip task digest",
                "query": SMOKE_ROUNDTRIP_QUERY,
                "filter": "tasks",
                "sortBy": "oldest",
                "timelineWindow": "7d",
                "resultLimit": 10,
                "verbatim": True,
                "pinned": False,
                "createdAt": SMOKE_NOW_ISO,
                "updatedAt": SMOKE_NOW_ISO,
            },
        ],
    }


def smoke_archive_bootstrap() -> dict[str, Any]:
    """Two incident threads, one archived, for archive include/exclude checks."""
    return {
        "threads": [
            _smoke_thread(
                "smoke-thread-archived",
                SMOKE_ARCHIVE_INCLUDED_TITLE,
                question="What did the archived retro cover?",
                answer="Closed out incident actions.",
                archived=True,
            ),
            _smoke_thread(
                "smoke-thread-active",
                SMOKE_ARCHIVE_EXCLUDED_TITLE,
                question="Which incident actions are open?",
                answer="Two remediation owners still pending.",
            ),
        ],
    }


def smoke_dataset(payload: Optional[dict[str, Any]] = None) -> SearchDataset:
    return SearchDataset.from_raw(payload if payload is not None else smoke_bootstrap())
