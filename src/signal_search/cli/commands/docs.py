"""Command module for documentation checks."""

from pathlib import Path

import typer
from rich.console import Console

from signal_search.cli.app import app
from signal_search.query.suggestions import check_operator_docs

console = Console()

DEFAULT_OPERATOR_DOCS = Path("docs/unified-search-operators.md")

docs_app = typer.Typer(help="Documentation checks")
app.add_typer(docs_app, name="docs")


@docs_app.command("check")
def check_docs(
    docs: Path = typer.Option(DEFAULT_OPERATOR_DOCS, "--docs", help="Operator docs file"),
) -> None:
    """Verify that every search operator is documented."""
    try:
        missing = check_operator_docs(docs)
    except FileNotFoundError:
        console.print(f"[red]Operator docs not found: {docs}[/red]")
        raise typer.Exit(1)

    if missing:
        console.print(f"[red]Operator docs check failed. Missing tokens in {docs}:[/red]")
        for token in missing:
            console.print(f"  - {token}")
        raise typer.Exit(1)
    console.print(f"[green]Operator docs check passed ({docs})[/green]")
