"""Signal Search - unified local search across threads, spaces, collections, files and tasks."""

__version__ = "0.4.0"
