"""
Query language for Signal Search.

Parses ``type:``, ``is:``, ``has:``, ``tag:``, ``space:`` and ``verbatim:``
operators, quoted phrases and free-text terms.
"""

from signal_search.query.ast import (
    OPERATOR_KEYS,
    FreeText,
    OperatorClause,
    OperatorKey,
    ParsedQuery,
)
from signal_search.query.lexer import QueryLexer, Token, TokenType
from signal_search.query.parser import QueryParser, parse_query, split_free_text
from signal_search.query.suggestions import (
    UNIFIED_OPERATOR_SUGGESTIONS,
    apply_operator_suggestion,
    operator_suggestions,
)

__all__ = [
    # AST
    "OPERATOR_KEYS",
    "FreeText",
    "OperatorClause",
    "OperatorKey",
    "ParsedQuery",
    # Lexer
    "QueryLexer",
    "Token",
    "TokenType",
    # Parser
    "QueryParser",
    "parse_query",
    "split_free_text",
    # Suggestions
    "UNIFIED_OPERATOR_SUGGESTIONS",
    "apply_operator_suggestion",
    "operator_suggestions",
]
