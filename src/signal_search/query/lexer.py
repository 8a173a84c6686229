"""
Lexical analyzer (tokenizer) for unified search queries.

Tokens are whitespace separated. A double-quoted span belongs to the token it
appears in, so ``space:"Incident Ops"`` is one token. The lexer never fails: an
unterminated quote simply runs to the end of the input.
"""

import re
from dataclasses import dataclass
from enum import Enum, auto

from signal_search.query.ast import OPERATOR_KEYS


class TokenType(Enum):
    """Token types for unified search queries."""

    OPERATOR = auto()  # key:value, -key:value
    PHRASE = auto()  # "quoted words"
    TERM = auto()  # anything else


@dataclass
class Token:
    """A token in the query."""

    type: TokenType
    value: str  # Raw text, quotes included
    column: int

    def __repr__(self) -> str:
        return f"Token({self.type.name}, {self.value!r}, col {self.column})"


OPERATOR_PATTERN = re.compile(
    r"^(-?)(" + "|".join(OPERATOR_KEYS) + r"):(.*)$",
    re.IGNORECASE | re.DOTALL,
)


def unquote(text: str) -> str:
    """Drop unescaped double quotes and resolve ``\\"`` escapes."""
    result = []
    i = 0
    while i < len(text):
        char = text[i]
        if char == "\\" and i + 1 < len(text) and text[i + 1] == '"':
            result.append('"')
            i += 2
            continue
        if char != '"':
            result.append(char)
        i += 1
    return "".join(result)


class QueryLexer:
    """Tokenizer for unified search queries."""

    def __init__(self, text: str):
        self.text = text
        self.pos = 0
        self.tokens: list[Token] = []

    def tokenize(self) -> list[Token]:
        """Tokenize the entire input."""
        while self.pos < len(self.text):
            self._skip_whitespace()
            if self.pos >= len(self.text):
                break
            start = self.pos
            raw = self._read_token()
            self.tokens.append(Token(self._classify(raw), raw, start + 1))
        return self.tokens

    def _skip_whitespace(self):
        while self.pos < len(self.text) and self.text[self.pos].isspace():
            self.pos += 1

    def _read_token(self) -> str:
        """Read up to the next whitespace outside of quotes."""
        start = self.pos
        in_quote = False
        while self.pos < len(self.text):
            char = self.text[self.pos]
            if char == "\\" and self.pos + 1 < len(self.text):
                # Keep escapes raw, they are resolved later
                self.pos += 2
                continue
            if char == '"':
                in_quote = not in_quote
            elif char.isspace() and not in_quote:
                break
            self.pos += 1
        return self.text[start : self.pos]

    @staticmethod
    def _classify(raw: str) -> TokenType:
        if OPERATOR_PATTERN.match(raw):
            return TokenType.OPERATOR
        if raw.startswith('"'):
            return TokenType.PHRASE
        return TokenType.TERM
