"""
Operator autocomplete and the operator documentation consistency check.

Every bare operator token (``type:``, ``is:``, ...) offered here must be
mentioned in the operator docs; ``find_missing_operator_doc_tokens`` enforces it.
"""

from pathlib import Path

from signal_search.query.ast import OPERATOR_KEYS

UNIFIED_OPERATOR_SUGGESTIONS: tuple[str, ...] = (
    "type:",
    "type:threads",
    "type:spaces",
    "type:collections",
    "type:files",
    "type:tasks",
    "is:",
    "is:pinned",
    "is:favorite",
    "is:archived",
    "has:",
    "has:citation",
    "has:note",
    "has:tag",
    "has:space",
    "tag:",
    "space:",
    "verbatim:",
    "verbatim:true",
)

DEFAULT_SUGGESTION_LIMIT = 6


def _last_token(query: str) -> str:
    if not query or query[-1].isspace():
        return ""
    return query.split()[-1]


def operator_suggestions(query: str, limit: int = DEFAULT_SUGGESTION_LIMIT) -> list[str]:
    """Suggestions completing the token currently being typed.

    Only the last token is considered, and nothing is suggested once the query
    ends in whitespace. A leading ``-`` is ignored for matching.
    """
    token = _last_token(query).lower().lstrip("-")
    if not token:
        return []
    matches = [s for s in UNIFIED_OPERATOR_SUGGESTIONS if s.startswith(token) and s != token]
    return matches[: max(0, limit)]


def apply_operator_suggestion(query: str, suggestion: str) -> str:
    """Replace the token being typed with ``suggestion``, keeping a negation prefix.

    Completed ``key:value`` suggestions get a trailing space so typing continues
    with the next token; bare ``key:`` suggestions leave the cursor after the colon.
    """
    token = _last_token(query)
    head = query[: len(query) - len(token)] if token else query
    prefix = "-" if token.startswith("-") else ""
    completed = f"{head}{prefix}{suggestion}"
    if not suggestion.endswith(":"):
        completed += " "
    return completed


def extract_operator_tokens(suggestions: tuple[str, ...] = UNIFIED_OPERATOR_SUGGESTIONS) -> list[str]:
    """Bare operator tokens (those ending in ``:``)."""
    return [token for token in suggestions if token.endswith(":")]


def find_missing_operator_doc_tokens(tokens: list[str], docs_text: str) -> list[str]:
    """Tokens that do not appear (case-insensitively) in the docs."""
    lower_docs = docs_text.lower()
    return [token for token in tokens if token.lower() not in lower_docs]


def check_operator_docs(docs_path: Path) -> list[str]:
    """Return operator tokens missing from the docs at ``docs_path``.

    Raises:
        FileNotFoundError: If the docs file does not exist
    """
    docs_text = docs_path.read_text(encoding="utf-8")
    tokens = extract_operator_tokens()
    missing = find_missing_operator_doc_tokens(tokens, docs_text)
    # Suggestions and parser must agree on the vocabulary too
    missing.extend(
        f"{key}:" for key in OPERATOR_KEYS if f"{key}:" not in tokens and f"{key}:" not in missing
    )
    return missing
