"""
Parsed representation of unified search queries.
"""

import re
from dataclasses import dataclass, field
from enum import Enum


class OperatorKey(Enum):
    """Operator keys understood by the query parser."""

    TYPE = "type"
    IS = "is"
    HAS = "has"
    TAG = "tag"
    SPACE = "space"
    VERBATIM = "verbatim"


OPERATOR_KEYS: tuple[str, ...] = tuple(key.value for key in OperatorKey)


@dataclass(frozen=True)
class OperatorClause:
    """A ``key:value[|value...]`` fragment, optionally negated with a leading ``-``."""

    key: OperatorKey
    values: tuple[str, ...]  # Lowercased alternatives, OR-combined
    negated: bool = False

    def mentions(self, value: str) -> bool:
        return value in self.values

    def __str__(self) -> str:
        prefix = "-" if self.negated else ""
        rendered = "|".join(f'"{v}"' if " " in v or "|" in v else v for v in self.values)
        return f"{prefix}{self.key.value}:{rendered}"


@dataclass(frozen=True)
class FreeText:
    """Terms and phrases of a free-text query, split once per search pass."""

    terms: tuple[str, ...] = ()
    phrases: tuple[str, ...] = ()  # Whitespace-collapsed
    verbatim_needle: str = ""  # Everything as typed, quotes removed
    phrase_patterns: tuple[re.Pattern[str], ...] = field(default=(), compare=False, repr=False)

    @property
    def is_empty(self) -> bool:
        return not self.terms and not self.phrases


@dataclass(frozen=True)
class ParsedQuery:
    """Result of parsing a raw query string."""

    query: str  # Free-text remainder, operators stripped
    operators: tuple[OperatorClause, ...] = ()
    terms: tuple[str, ...] = ()
    phrases: tuple[str, ...] = ()

    def clauses_for(self, key: OperatorKey) -> list[OperatorClause]:
        return [clause for clause in self.operators if clause.key is key]

    def __repr__(self) -> str:
        parts = [f"ParsedQuery(query={self.query!r}"]
        if self.operators:
            parts.append(f"operators=[{' '.join(str(c) for c in self.operators)}]")
        return ", ".join(parts) + ")"
