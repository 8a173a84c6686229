"""
Parser for unified search queries.

Converts tokens into a ParsedQuery: operator clauses plus the free-text
remainder. Parsing is total; any input produces a result.
"""

import re
from functools import lru_cache

from signal_search.query.ast import FreeText, OperatorClause, OperatorKey, ParsedQuery
from signal_search.query.lexer import OPERATOR_PATTERN, QueryLexer, Token, TokenType, unquote

_WHITESPACE = re.compile(r"\s+")


def collapse_whitespace(text: str) -> str:
    return _WHITESPACE.sub(" ", text).strip()


def split_alternatives(raw: str) -> tuple[str, ...]:
    """Split an operator value on unescaped ``|`` outside quotes.

    Each alternative is unquoted, trimmed and lowercased; empty ones are dropped.
    """
    parts: list[str] = []
    current: list[str] = []
    in_quote = False
    i = 0
    while i < len(raw):
        char = raw[i]
        if char == "\\" and i + 1 < len(raw):
            following = raw[i + 1]
            if following == "|":
                current.append("|")
            else:
                current.append(char + following)
            i += 2
            continue
        if char == '"':
            in_quote = not in_quote
            current.append(char)
        elif char == "|" and not in_quote:
            parts.append("".join(current))
            current = []
        else:
            current.append(char)
        i += 1
    parts.append("".join(current))

    values = []
    for part in parts:
        value = unquote(part).strip().lower()
        if value:
            values.append(value)
    return tuple(values)


class QueryParser:
    """Parser for unified search queries."""

    def __init__(self, tokens: list[Token]):
        self.tokens = tokens

    @classmethod
    def parse(cls, query_text: str) -> ParsedQuery:
        """Parse a raw query string."""
        lexer = QueryLexer(query_text or "")
        parser = cls(lexer.tokenize())
        return parser.parse_query()

    def parse_query(self) -> ParsedQuery:
        operators: list[OperatorClause] = []
        free_tokens: list[str] = []
        terms: list[str] = []
        phrases: list[str] = []

        for token in self.tokens:
            if token.type == TokenType.OPERATOR:
                clause = self._parse_operator(token)
                # Incomplete clauses such as "tag:" contribute nothing
                if clause is not None:
                    operators.append(clause)
                continue

            if token.type == TokenType.PHRASE:
                phrase = collapse_whitespace(unquote(token.value)).lower()
                if not phrase:
                    continue
                phrases.append(phrase)
            else:
                term = unquote(token.value).lower()
                if not term:
                    continue
                terms.append(term)
            free_tokens.append(token.value)

        return ParsedQuery(
            query=" ".join(free_tokens),
            operators=tuple(operators),
            terms=tuple(terms),
            phrases=tuple(phrases),
        )

    @staticmethod
    def _parse_operator(token: Token) -> OperatorClause | None:
        match = OPERATOR_PATTERN.match(token.value)
        if match is None:
            return None
        values = split_alternatives(match.group(3))
        if not values:
            return None
        return OperatorClause(
            key=OperatorKey(match.group(2).lower()),
            values=values,
            negated=bool(match.group(1)),
        )


def parse_query(raw: str) -> ParsedQuery:
    """Parse a raw query string into operators and free text."""
    return QueryParser.parse(raw)


def phrase_pattern(phrase: str) -> re.Pattern[str]:
    """Match phrase words in order, tolerating any whitespace run between them."""
    return re.compile(r"\s+".join(re.escape(word) for word in phrase.split(" ")))


@lru_cache(maxsize=256)
def split_free_text(query: str) -> FreeText:
    """Split a free-text query string into terms and phrases.

    Filter and scorer receive the ``query`` string of a ParsedQuery; this gives
    them the same terms and phrases without re-parsing per entity.
    """
    terms: list[str] = []
    phrases: list[str] = []
    needle_parts: list[str] = []

    for token in QueryLexer(query or "").tokenize():
        text = unquote(token.value)
        if token.type == TokenType.PHRASE:
            phrase = collapse_whitespace(text).lower()
            if phrase:
                phrases.append(phrase)
                needle_parts.append(text.lower())
        elif text:
            terms.append(text.lower())
            needle_parts.append(text.lower())

    return FreeText(
        terms=tuple(terms),
        phrases=tuple(phrases),
        verbatim_needle=" ".join(needle_parts),
        phrase_patterns=tuple(phrase_pattern(phrase) for phrase in phrases),
    )
