"""Tests for entity preparation."""

import pytest

from signal_search.engine.models import Collection, LibraryFile, Space, Task
from signal_search.engine.prepare import (
    EntityKind,
    WeightedField,
    prepare_collection,
    prepare_file,
    prepare_index,
    prepare_space,
    prepare_task,
    prepare_thread,
    relevance_fields,
)
from signal_search.utils import parse_timestamp_ms


class TestRelevanceFields:
    """Test positional field weights."""

    def test_weights_decrease_and_floor_at_one(self):
        fields = relevance_fields(["Title", "Question", "Body", "Space", "Tags", "Extra"])
        assert [f.weight for f in fields] == [8, 6, 4, 2, 1, 1]
        assert fields[0] == WeightedField("title", 8)

    def test_empty_parts_are_skipped_before_weighting(self):
        fields = relevance_fields(["Title", "", "Body"])
        assert fields == (WeightedField("title", 8), WeightedField("body", 6))


class TestPrepareThread:
    """Test thread projection."""

    def test_thread_fields(self, make_thread):
        thread = make_thread(
            "t1",
            title="Incident Analysis",
            question="What caused it?",
            answer="A bad deploy.",
            spaceId="Space-1",
            spaceName="Incident Ops",
            tags=["Incident", "Ops"],
            citations=[{"title": "Report", "url": "https://example.com/r"}],
            pinned=True,
        )
        entry = prepare_thread(thread, {"t1": "  follow up  "})

        assert entry.kind is EntityKind.THREAD
        assert entry.source is thread
        assert entry.id == "t1"
        assert entry.title == "Incident Analysis"
        assert entry.combined_lower == "\n".join(
            [
                "incident analysis",
                "what caused it?",
                "a bad deploy.",
                "incident ops",
                "incident ops",
                "report https://example.com/r",
                "follow up",
            ]
        )
        assert entry.note_trimmed == "follow up"
        assert entry.space_name_lower == "incident ops"
        assert entry.space_id_lower == "space-1"
        assert entry.tag_set_lower == frozenset({"incident", "ops"})
        assert entry.has_citation
        assert entry.pinned and not entry.favorite and not entry.archived
        assert entry.created_ms == parse_timestamp_ms("2026-02-10T12:00:00.000Z")
        assert [f.weight for f in entry.relevance_fields] == [8, 6, 4, 2, 1]

    def test_title_falls_back_to_question(self, make_thread):
        entry = prepare_thread(make_thread("t1", title=None, question="Why?"), {})
        assert entry.title == "Why?"
        assert entry.relevance_fields[0].lowered_text == "why?"

    def test_missing_timestamp(self, make_thread):
        entry = prepare_thread(make_thread("t1", createdAt="not a date"), {})
        assert entry.created_ms is None


class TestPrepareOtherKinds:
    """Test projections of spaces, collections, files and tasks."""

    def test_space_uses_space_tags(self):
        space = Space(id="S1", name="Research", instructions="  Cite sources ")
        entry = prepare_space(space, {"S1": ["Briefing"]})
        assert entry.kind is EntityKind.SPACE
        assert entry.tag_set_lower == frozenset({"briefing"})
        assert entry.space_name_lower == "research"
        assert entry.space_id_lower == "s1"
        assert entry.instructions_trimmed == "Cite sources"
        assert "briefing" in entry.combined_lower

    def test_collection(self):
        entry = prepare_collection(Collection(id="c1", name="Reviews", description="Weekly"))
        assert entry.combined_lower == "reviews\nweekly"
        assert entry.created_ms is None

    def test_file_uses_added_at(self):
        library_file = LibraryFile(id="f1", name="notes.md", text="Body", addedAt="2026-02-01T00:00:00Z")
        entry = prepare_file(library_file)
        assert entry.created_ms == parse_timestamp_ms("2026-02-01T00:00:00Z")
        assert entry.text_trimmed == "Body"

    def test_task_space(self):
        entry = prepare_task(Task(id="k1", name="Digest", prompt="Summarize", spaceId="S1", spaceName="Ops"))
        assert entry.space_id_lower == "s1"
        assert entry.space_name_lower == "ops"
        assert entry.combined_lower == "digest\nsummarize\nops"


class TestPrepareIndex:
    """Test whole-dataset preparation."""

    def test_smoke_index(self, smoke_index):
        assert smoke_index.total_items == 7
        assert [e.id for e in smoke_index.entries_for(EntityKind.THREAD)] == [
            "smoke-thread-match",
            "smoke-thread-filtered-note",
            "smoke-thread-filtered-state",
        ]
        note_entry = smoke_index.threads[1]
        assert note_entry.note_trimmed.startswith("Needs follow-up")

    def test_entries_are_immutable(self, smoke_index):
        with pytest.raises(AttributeError):
            smoke_index.threads[0].pinned = False

    def test_empty_dataset(self):
        from signal_search.engine.models import SearchDataset

        assert prepare_index(SearchDataset()).total_items == 0
