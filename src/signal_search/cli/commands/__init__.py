"""CLI commands for signal-search."""

from . import bench, docs, saved, search

__all__ = [
    "bench",
    "docs",
    "saved",
    "search",
]
