"""Tests for the unified search query parser."""

import pytest

from signal_search.query import OperatorClause, OperatorKey, QueryParser, parse_query
from signal_search.query.parser import split_alternatives, split_free_text

SMOKE_QUERY = "type:threads is:pinned has:citation tag:incident -has:note"


class TestParserOperators:
    """Test operator clause parsing."""

    def test_smoke_query_operators(self):
        """Every operator of the smoke query becomes a clause."""
        parsed = parse_query(SMOKE_QUERY)
        assert parsed.query == ""
        assert parsed.terms == ()
        assert parsed.operators == (
            OperatorClause(OperatorKey.TYPE, ("threads",)),
            OperatorClause(OperatorKey.IS, ("pinned",)),
            OperatorClause(OperatorKey.HAS, ("citation",)),
            OperatorClause(OperatorKey.TAG, ("incident",)),
            OperatorClause(OperatorKey.HAS, ("note",), negated=True),
        )

    def test_alternatives_split_on_pipe(self):
        """Unquoted values split on | into alternatives."""
        clause = parse_query("tag:incident|ops").operators[0]
        assert clause.values == ("incident", "ops")

    def test_escaped_pipe_is_literal(self):
        """A backslash-escaped pipe stays in the value."""
        clause = parse_query(r"tag:a\|b").operators[0]
        assert clause.values == ("a|b",)

    def test_quoted_value_is_single_alternative(self):
        """Quoted values keep whitespace and are not split."""
        assert parse_query('space:"Incident Ops"').operators[0].values == ("incident ops",)
        assert parse_query('space:"Ops|Team"').operators[0].values == ("ops|team",)

    def test_keys_and_values_are_lowercased(self):
        clause = parse_query("TYPE:Threads").operators[0]
        assert clause.key is OperatorKey.TYPE
        assert clause.values == ("threads",)

    @pytest.mark.parametrize("text", ["tag:", "tag:|", "-is:", "tag:||"])
    def test_incomplete_clause_is_dropped(self, text):
        """Clauses without any value contribute nothing."""
        parsed = parse_query(text)
        assert parsed.operators == ()
        assert parsed.query == ""

    def test_empty_alternatives_are_dropped(self):
        assert parse_query("tag:a||b|").operators[0].values == ("a", "b")

    def test_repeated_keys_stay_separate(self):
        """Repeated keys produce one clause each."""
        parsed = parse_query("tag:incident tag:ops")
        assert [c.values for c in parsed.clauses_for(OperatorKey.TAG)] == [("incident",), ("ops",)]

    def test_clause_str_round_trips_shape(self):
        clause = parse_query('-space:"Incident Ops"|research').operators[0]
        assert str(clause) == '-space:"incident ops"|research'


class TestParserFreeText:
    """Test free text extraction."""

    def test_operators_are_stripped_from_query(self):
        parsed = parse_query('type:tasks space:"Incident Ops" weekly digest')
        assert parsed.query == "weekly digest"
        assert parsed.terms == ("weekly", "digest")

    def test_phrases_keep_quotes_in_query(self):
        """The query string keeps phrases as typed; phrases are collapsed and lowercased."""
        parsed = parse_query('"Failover  Latency" Spike')
        assert parsed.query == '"Failover  Latency" Spike'
        assert parsed.phrases == ("failover latency",)
        assert parsed.terms == ("spike",)

    def test_empty_phrase_is_dropped(self):
        parsed = parse_query('"" incident')
        assert parsed.phrases == ()
        assert parsed.query == "incident"

    def test_negated_word_is_a_term(self):
        assert parse_query("-todo").terms == ("-todo",)

    def test_whitespace_is_normalized(self):
        assert parse_query("  alpha    beta  ").query == "alpha beta"

    def test_parse_is_total(self):
        """Odd input never raises."""
        for text in ['"', "\\", "type:\"", "::", "-", "|||"]:
            QueryParser.parse(text)


class TestSplitFreeText:
    """Test free text splitting used by filters and scoring."""

    def test_terms_and_phrases(self):
        free = split_free_text('"Failover  latency" Spike')
        assert free.terms == ("spike",)
        assert free.phrases == ("failover latency",)
        assert free.verbatim_needle == "failover  latency spike"

    def test_phrase_pattern_tolerates_whitespace_runs(self):
        free = split_free_text('"failover latency"')
        assert free.phrase_patterns[0].search("a failover \n  latency spike")

    def test_empty(self):
        assert split_free_text("").is_empty

    def test_split_alternatives_unquotes(self):
        assert split_alternatives('"A B"|c') == ("a b", "c")
