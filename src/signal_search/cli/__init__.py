"""Command line interface for Signal Search."""
