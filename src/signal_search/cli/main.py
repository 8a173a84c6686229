"""Main CLI entry point for signal-search."""

from signal_search.cli.app import app

# Register commands
from signal_search.cli.commands import bench, docs, saved, search  # noqa: F401

if __name__ == "__main__":
    app()
