"""Tests for highlight part building."""

from signal_search.engine.highlight import HighlightPart, build_highlight_parts


def debug(parts: list[HighlightPart]) -> str:
    return "".join(f"[{p.text}]" if p.highlighted else p.text for p in parts)


class TestBuildHighlightParts:
    """Test match marking and range merging."""

    def test_empty_query_returns_plain_text(self):
        assert build_highlight_parts("Hello world", "", []) == [HighlightPart("Hello world", False)]

    def test_empty_text_returns_nothing(self):
        assert build_highlight_parts("", "world", ["world"]) == []

    def test_case_insensitive_full_query(self):
        assert debug(build_highlight_parts("Hello World", "world", ["world"])) == "Hello [World]"

    def test_full_query_covers_tokens(self):
        parts = build_highlight_parts("alpha beta gamma", "beta gamma", ["beta", "gamma"])
        assert debug(parts) == "alpha [beta gamma]"

    def test_overlapping_ranges_are_merged(self):
        assert debug(build_highlight_parts("foobar", "foo", ["foo", "oob"])) == "[foob]ar"

    def test_short_tokens_ignored_for_longer_query(self):
        assert debug(build_highlight_parts("a b c", "alpha", ["a", "b", "c"])) == "a b c"

    def test_single_character_query_is_highlighted(self):
        assert debug(build_highlight_parts("a b c", "b", ["b"])) == "a [b] c"

    def test_every_occurrence_is_marked(self):
        parts = build_highlight_parts("Incident, then another incident", "incident", [])
        assert debug(parts) == "[Incident], then another [incident]"

    def test_original_casing_is_kept(self):
        parts = build_highlight_parts("OPS team", "ops", [])
        assert parts[0] == HighlightPart("OPS", True)
