"""utility functions for commands"""

import json
import time
from pathlib import Path

import typer
from rich.console import Console

from signal_search.config import get_config
from signal_search.engine.models import SearchDataset
from signal_search.storage import JsonFileStorage, JsonStore
from signal_search.utils import format_iso_ms

console = Console()


def open_store() -> JsonStore:
    """JsonStore over the configured storage file."""
    return JsonStore(JsonFileStorage(get_config().storage_path))


def now_iso() -> str:
    return format_iso_ms(time.time() * 1000)


def load_dataset(data: Path | None) -> SearchDataset:
    """Load records from a bootstrap JSON file, or from the configured store."""
    if data is None:
        return SearchDataset.from_store(open_store())
    try:
        payload = json.loads(data.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        console.print(f"[red]Error reading {data}: {e}[/red]")
        raise typer.Exit(1)
    return SearchDataset.from_raw(payload)
