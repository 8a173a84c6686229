from typing import Optional

import typer

from signal_search.config import get_config
from signal_search.utils import setup_logging


def version_callback(value: bool) -> None:
    """Show version and exit."""
    if value:
        import signal_search

        config = get_config()
        typer.echo(f"Signal Search version: {signal_search.__version__}")
        typer.echo(f"Storage file: {config.storage_path}")
        raise typer.Exit()


app = typer.Typer(name="signal-search", no_args_is_help=True)


@app.callback()
def app_callback(
    log_level: Optional[str] = typer.Option(
        None,
        "--log-level",
        help="Minimum log level (defaults to SIGNAL_SEARCH_LOG_LEVEL)",
    ),
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        "-v",
        help="Show version and exit.",
        callback=version_callback,
        is_eager=True,
    ),
) -> None:
    """Signal Search - unified search over local threads, spaces, collections, files and tasks."""
    setup_logging(log_level or get_config().log_level)
