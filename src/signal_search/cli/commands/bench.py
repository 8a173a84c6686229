"""Command module for the search benchmark harness."""

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from signal_search.bench import (
    assert_perf_thresholds,
    clamp_count,
    format_perf_line,
    parse_threshold_spec,
    run_benchmarks,
    write_perf_json,
)
from signal_search.cli.app import app
from signal_search.config import get_config
from signal_search.errors import PerfThresholdError, ThresholdSpecError

console = Console()


def _parse_sizes(raw: Optional[str], default: list[int]) -> list[int]:
    if not raw:
        return default
    sizes = [clamp_count(part.strip(), 0) for part in raw.split(",") if part.strip()]
    if not sizes or 0 in sizes:
        console.print(f"[red]Invalid --sizes {raw!r}, expected e.g. 1000,5000[/red]")
        raise typer.Exit(1)
    return sizes


@app.command()
def bench(
    warmup: Optional[int] = typer.Option(None, "--warmup", help="Warmup passes per size"),
    iterations: Optional[int] = typer.Option(None, "--iterations", help="Measured passes per size"),
    query: Optional[str] = typer.Option(None, "--query", help="Benchmark query"),
    sizes: Optional[str] = typer.Option(None, "--sizes", help="Comma separated record counts"),
    json_output: Optional[Path] = typer.Option(None, "--json", help="Write a JSON artifact here"),
    max_median_ms: Optional[str] = typer.Option(
        None, "--max-median-ms", help='Median budget per size, e.g. "1000:1.5,5000:2.0"'
    ),
    max_p95_ms: Optional[str] = typer.Option(
        None, "--max-p95-ms", help='p95 budget per size, e.g. "1000:2.5"'
    ),
) -> None:
    """Benchmark the search pipeline over deterministic datasets."""
    config = get_config()
    warmup_count = clamp_count(warmup, config.perf_warmup)
    iteration_count = clamp_count(iterations, config.perf_iterations)
    bench_query = query if query is not None else config.perf_query
    bench_sizes = _parse_sizes(sizes, config.perf_sizes)

    try:
        median_limits = parse_threshold_spec(max_median_ms, "--max-median-ms")
        p95_limits = parse_threshold_spec(max_p95_ms, "--max-p95-ms")
    except ThresholdSpecError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)

    results = run_benchmarks(bench_sizes, bench_query, warmup_count, iteration_count)
    for result in results:
        # One machine-readable line per size
        typer.echo(format_perf_line(result))

    table = Table(title="Unified Search perf summary")
    for column in ("size", "median", "p95", "mean", "max", "checksum"):
        table.add_column(column, justify="right")
    for result in results:
        table.add_row(
            str(result.total_items),
            f"{result.median_ms:.2f}ms",
            f"{result.p95_ms:.2f}ms",
            f"{result.mean_ms:.2f}ms",
            f"{result.max_ms:.2f}ms",
            str(result.checksum),
        )
    console.print(table)

    try:
        assert_perf_thresholds(results, median_limits, "median_ms", "medianMs")
        assert_perf_thresholds(results, p95_limits, "p95_ms", "p95Ms")
    except PerfThresholdError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)

    if json_output is not None:
        write_perf_json(json_output, results, warmup_count, iteration_count, bench_query)
        console.print(f"Wrote perf JSON artifact: {json_output}")
