"""Command module for managing saved searches."""

import uuid

import typer
from rich.console import Console
from rich.table import Table

from signal_search.cli.app import app
from signal_search.cli.commands.command_utils import now_iso, open_store
from signal_search.saved_searches import (
    VALID_FILTERS,
    VALID_LIMITS,
    VALID_SORTS,
    VALID_WINDOWS,
    SavedSearchSpec,
    SavedSearchStore,
    UnifiedSavedSearch,
    default_saved_search_name,
    delete_saved_search,
    find_duplicate_saved_search,
    normalize_saved_search_name,
    rename_saved_search,
    sort_saved_searches,
    toggle_pin_saved_search,
    upsert_saved_search,
)
from signal_search.storage import StoredWriteStatus

console = Console()

saved_app = typer.Typer(help="Manage saved searches")
app.add_typer(saved_app, name="saved")


def _persist(store: SavedSearchStore, searches: list[UnifiedSavedSearch]) -> None:
    status = store.save(searches)
    if status is not StoredWriteStatus.OK:
        console.print(f"[red]Could not save searches: storage returned {status.value}[/red]")
        raise typer.Exit(1)


@saved_app.command("list")
def list_saved() -> None:
    """List saved searches, pinned first."""
    store = SavedSearchStore(open_store())
    searches = sort_saved_searches(store.load(now_iso()))
    if not searches:
        console.print("[yellow]No saved searches[/yellow]")
        return

    table = Table(title="Saved Searches")
    table.add_column("ID", style="dim")
    table.add_column("Name", style="cyan")
    table.add_column("Query", style="green")
    table.add_column("Filter")
    table.add_column("Pinned", style="magenta")
    for saved in searches:
        table.add_row(saved.id, saved.name, saved.query, saved.filter, "✓" if saved.pinned else "")
    console.print(table)


@saved_app.command("add")
def add_saved(
    query: str = typer.Argument(..., help="Query to save"),
    name: str = typer.Option("", "--name", help="Display name (defaults to the query)"),
    filter_value: str = typer.Option("all", "--filter", help="Entity type filter"),
    sort_by: str = typer.Option("relevance", "--sort", help="relevance, newest or oldest"),
    window: str = typer.Option("all", "--window", help="all, 24h, 7d or 30d"),
    limit: int = typer.Option(20, "--limit", help="10, 20 or 50"),
    verbatim: bool = typer.Option(False, "--verbatim", help="Exact string matching"),
    pinned: bool = typer.Option(False, "--pin", help="Pin the saved search"),
) -> None:
    """Save a search, unless an identical one already exists."""
    if (
        filter_value not in VALID_FILTERS
        or sort_by not in VALID_SORTS
        or window not in VALID_WINDOWS
        or limit not in VALID_LIMITS
    ):
        console.print("[red]Invalid search controls[/red]")
        raise typer.Exit(1)

    spec = SavedSearchSpec(
        query=query.strip(),
        filter=filter_value,
        sort_by=sort_by,
        timeline_window=window,
        result_limit=limit,
        verbatim=verbatim,
    )
    store = SavedSearchStore(open_store())
    timestamp = now_iso()
    searches = store.load(timestamp)

    duplicate = find_duplicate_saved_search(searches, spec)
    if duplicate is not None:
        console.print(f"[yellow]Already saved as {duplicate.name!r} ({duplicate.id})[/yellow]")
        return

    saved = UnifiedSavedSearch(
        id=f"saved-{uuid.uuid4().hex[:12]}",
        name=normalize_saved_search_name(name) or default_saved_search_name(spec),
        query=spec.query,
        filter=spec.filter,
        sort_by=spec.sort_by,
        timeline_window=spec.timeline_window,
        result_limit=spec.result_limit,
        verbatim=spec.verbatim,
        pinned=pinned,
        created_at=timestamp,
        updated_at=timestamp,
    )
    _persist(store, upsert_saved_search(searches, saved))
    console.print(f"[green]Saved {saved.name!r} ({saved.id})[/green]")


@saved_app.command("rename")
def rename_saved(
    search_id: str = typer.Argument(..., help="Saved search id"),
    name: str = typer.Argument(..., help="New name"),
) -> None:
    """Rename a saved search."""
    store = SavedSearchStore(open_store())
    timestamp = now_iso()
    searches = store.load(timestamp)
    updated = rename_saved_search(searches, search_id, name, timestamp)
    if updated is searches:
        console.print("[yellow]Nothing to rename[/yellow]")
        return
    _persist(store, updated)
    console.print(f"[green]Renamed {search_id}[/green]")


@saved_app.command("pin")
def pin_saved(search_id: str = typer.Argument(..., help="Saved search id")) -> None:
    """Pin or unpin a saved search."""
    store = SavedSearchStore(open_store())
    timestamp = now_iso()
    searches = store.load(timestamp)
    updated = toggle_pin_saved_search(searches, search_id, timestamp)
    if updated is searches:
        console.print(f"[red]No saved search with id {search_id}[/red]")
        raise typer.Exit(1)
    _persist(store, updated)
    console.print(f"[green]Toggled pin for {search_id}[/green]")


@saved_app.command("delete")
def delete_saved(search_id: str = typer.Argument(..., help="Saved search id")) -> None:
    """Delete a saved search."""
    store = SavedSearchStore(open_store())
    searches = store.load(now_iso())
    updated = delete_saved_search(searches, search_id)
    if updated is searches:
        console.print(f"[red]No saved search with id {search_id}[/red]")
        raise typer.Exit(1)
    _persist(store, updated)
    console.print(f"[green]Deleted {search_id}[/green]")
