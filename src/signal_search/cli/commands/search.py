"""Command module for running unified searches."""

import json
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table
from rich.text import Text

from signal_search.cli.app import app
from signal_search.cli.commands.command_utils import load_dataset, open_store
from signal_search.config import get_config
from signal_search.engine.filters import TIMELINE_WINDOWS
from signal_search.engine.highlight import build_highlight_parts
from signal_search.engine.prepare import EntityKind
from signal_search.engine.ranking import SORT_OPTIONS
from signal_search.engine.search import SearchRequest, search_dataset
from signal_search.engine.selection import push_recent_query
from signal_search.query.ast import ParsedQuery
from signal_search.saved_searches import VALID_FILTERS
from signal_search.storage.keys import SIGNAL_UNIFIED_RECENT_SEARCH_KEY
from signal_search.utils import format_iso_ms, parse_timestamp_ms

console = Console()


def _highlight(title: str, parsed: ParsedQuery) -> Text:
    text = Text()
    for part in build_highlight_parts(title, parsed.query, [*parsed.terms, *parsed.phrases]):
        text.append(part.text, style="bold yellow" if part.highlighted else None)
    return text


def _remember_query(query: str) -> None:
    """Push ``query`` onto the stored recent-query list."""
    store = open_store()
    recent = store.read_json(SIGNAL_UNIFIED_RECENT_SEARCH_KEY, [])
    if not isinstance(recent, list):
        recent = []
    recent = [item for item in recent if isinstance(item, str)]
    updated = push_recent_query(recent, query, get_config().recent_query_limit)
    if updated is not recent:
        store.write_json(SIGNAL_UNIFIED_RECENT_SEARCH_KEY, updated)


def _check_choice(name: str, value: str, choices: tuple[str, ...]) -> None:
    if value not in choices:
        console.print(f"[red]Invalid {name} {value!r}, expected one of: {', '.join(choices)}[/red]")
        raise typer.Exit(1)


@app.command()
def search(
    query: str = typer.Argument("", help="Search query, operators included"),
    data: Optional[Path] = typer.Option(
        None, "--data", "-d", help="Bootstrap JSON file (defaults to the configured store)"
    ),
    filter_value: str = typer.Option("all", "--filter", "-f", help="Entity type filter"),
    sort_by: str = typer.Option("relevance", "--sort", "-s", help="relevance, newest or oldest"),
    window: str = typer.Option("all", "--window", "-w", help="all, 24h, 7d or 30d"),
    limit: Optional[int] = typer.Option(None, "--limit", "-n", help="Results per type"),
    verbatim: bool = typer.Option(False, "--verbatim", help="Match the query as one exact string"),
    now: Optional[str] = typer.Option(None, "--now", help="Reference time (ISO-8601)"),
    as_json: bool = typer.Option(False, "--json", help="Print results as JSON"),
) -> None:
    """Search threads, spaces, collections, files and tasks."""
    _check_choice("filter", filter_value, VALID_FILTERS)
    _check_choice("sort", sort_by, SORT_OPTIONS)
    _check_choice("window", window, TIMELINE_WINDOWS)

    now_ms = None
    if now is not None:
        now_ms = parse_timestamp_ms(now)
        if now_ms is None:
            console.print(f"[red]Invalid --now timestamp {now!r}[/red]")
            raise typer.Exit(1)

    request = SearchRequest(
        query=query,
        filter=filter_value,
        sort_by=sort_by,
        timeline_window=window,
        result_limit=limit if limit is not None else get_config().default_result_limit,
        verbatim=verbatim,
        now_ms=now_ms,
    )
    results = search_dataset(load_dataset(data), request)
    if data is None:
        _remember_query(query)

    if as_json:
        payload = {
            "query": results.parsed.query,
            "operators": [str(clause) for clause in results.parsed.operators],
            "verbatim": results.verbatim,
            "results": {
                kind.value: [{"id": e.id, "title": e.title} for e in results.shown[kind]]
                for kind in EntityKind
            },
            "totals": {kind.value: results.totals[kind] for kind in EntityKind},
        }
        typer.echo(json.dumps(payload, indent=2))
        return

    if results.total_matches == 0:
        console.print("[yellow]No results[/yellow]")
        return

    for kind in EntityKind:
        shown = results.shown[kind]
        if not shown:
            continue
        table = Table(title=f"{kind.value.title()} ({len(shown)} of {results.totals[kind]})")
        table.add_column("Title", style="cyan")
        table.add_column("ID", style="dim")
        table.add_column("Created", style="green")
        for entry in shown:
            created = format_iso_ms(entry.created_ms) if entry.created_ms is not None else ""
            table.add_row(_highlight(entry.title, results.parsed), entry.id, created)
        console.print(table)
