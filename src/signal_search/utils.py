"""Utility functions for Signal Search."""

import sys
from datetime import datetime, timedelta, timezone
from typing import Any

from loguru import logger

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def setup_logging(level: str = "INFO") -> None:
    """Replace loguru's default handler with a single stderr sink at ``level``."""
    logger.remove()
    logger.add(
        sys.stderr,
        level=level.upper(),
        format="<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | {name}:{function} - {message}",
    )


def parse_timestamp_ms(value: Any) -> float | None:
    """Parse an ISO-8601 timestamp into epoch milliseconds.

    Naive timestamps are treated as UTC. Returns None for anything that is not a
    parseable string, or whose UTC equivalent falls outside the years 1-9999, so
    callers can treat "no timestamp" and "bad timestamp" alike.
    """
    if not isinstance(value, str):
        return None
    text = value.strip()
    if not text:
        return None
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    try:
        # Offsets can push year 1 or 9999 outside the representable UTC range
        parsed = parsed.astimezone(timezone.utc)
    except (OverflowError, ValueError):
        return None
    return parsed.timestamp() * 1000


def format_iso_ms(ms: float) -> str:
    """Format epoch milliseconds as ``YYYY-MM-DDTHH:MM:SS.mmmZ`` (UTC)."""
    moment = _EPOCH + timedelta(milliseconds=ms)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def normalize_iso(value: Any, fallback: str) -> str:
    """Return ``value`` re-formatted as a canonical UTC timestamp, or ``fallback``."""
    parsed = parse_timestamp_ms(value)
    if parsed is None:
        return fallback
    return format_iso_ms(parsed)
