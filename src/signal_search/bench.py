"""
Benchmark harness for the unified search pipeline.

Runs the full parse, filter, rank and cap pass over deterministic datasets and
reports one ``PERF_RESULT {json}`` line per dataset size. Threshold specs such
as ``"1000:1.5,5000:2.0"`` turn the report into a pass/fail check.
"""

import json
import math
import time
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Iterable, Optional

from loguru import logger

from signal_search.engine.prepare import PreparedIndex, prepare_index
from signal_search.engine.search import SearchRequest, run_unified_search
from signal_search.errors import PerfThresholdError, ThresholdSpecError
from signal_search.fixtures import create_deterministic_dataset
from signal_search.utils import format_iso_ms, parse_timestamp_ms

PERF_RESULT_MARKER = "PERF_RESULT "
BENCH_NOW_ISO = "2026-02-11T12:00:00.000Z"
BENCH_NOW_MS: float = parse_timestamp_ms(BENCH_NOW_ISO) or 0.0
BENCH_TIMELINE_WINDOW = "30d"
BENCH_RESULT_LIMIT = 20
DEFAULT_SIZES = (1000, 5000, 10000)


@dataclass(frozen=True)
class PerfResult:
    """Timing summary for one dataset size."""

    total_items: int
    warmup: int
    iterations: int
    min_ms: float
    median_ms: float
    p95_ms: float
    mean_ms: float
    max_ms: float
    checksum: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "totalItems": self.total_items,
            "warmup": self.warmup,
            "iterations": self.iterations,
            "minMs": self.min_ms,
            "medianMs": self.median_ms,
            "p95Ms": self.p95_ms,
            "meanMs": self.mean_ms,
            "maxMs": self.max_ms,
            "checksum": self.checksum,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PerfResult":
        return cls(
            total_items=int(data["totalItems"]),
            warmup=int(data["warmup"]),
            iterations=int(data["iterations"]),
            min_ms=float(data["minMs"]),
            median_ms=float(data["medianMs"]),
            p95_ms=float(data["p95Ms"]),
            mean_ms=float(data["meanMs"]),
            max_ms=float(data["maxMs"]),
            checksum=int(data["checksum"]),
        )


@dataclass(frozen=True)
class TimingSummary:
    min_ms: float
    median_ms: float
    p95_ms: float
    mean_ms: float
    max_ms: float


def clamp_count(value: Any, fallback: int) -> int:
    """Floor ``value`` to a positive int, or return ``fallback``."""
    try:
        number = float(value)
    except (TypeError, ValueError):
        return fallback
    if not math.isfinite(number):
        return fallback
    rounded = math.floor(number)
    return rounded if rounded >= 1 else fallback


def summarize(samples: Iterable[float]) -> TimingSummary:
    """Min, median, p95, mean and max of timing samples (all 0 when empty)."""
    ordered = sorted(samples)
    if not ordered:
        return TimingSummary(0.0, 0.0, 0.0, 0.0, 0.0)
    p95_index = min(len(ordered) - 1, math.floor(len(ordered) * 0.95))
    return TimingSummary(
        min_ms=ordered[0],
        median_ms=ordered[len(ordered) // 2],
        p95_ms=ordered[p95_index],
        mean_ms=sum(ordered) / len(ordered),
        max_ms=ordered[-1],
    )


def build_bench_index(total_items: int) -> PreparedIndex:
    dataset = create_deterministic_dataset(
        total_items, now_ms=BENCH_NOW_MS, id_prefix=f"perf-{total_items}"
    )
    return prepare_index(dataset)


def run_search_pass(index: PreparedIndex, request: SearchRequest) -> int:
    """One full search; returns the number of results shown across kinds."""
    return run_unified_search(index, request).total_shown


def benchmark_index(
    index: PreparedIndex,
    query: str,
    warmup: int,
    iterations: int,
    total_items: Optional[int] = None,
) -> PerfResult:
    """Time ``warmup + iterations`` passes, keeping only the measured ones.

    ``total_items`` labels the result; it defaults to the index size.
    """
    request = SearchRequest(
        query=query,
        timeline_window=BENCH_TIMELINE_WINDOW,
        result_limit=BENCH_RESULT_LIMIT,
        now_ms=BENCH_NOW_MS,
    )
    samples: list[float] = []
    checksum = 0
    for i in range(warmup + iterations):
        started = time.perf_counter()
        checksum += run_search_pass(index, request)
        elapsed_ms = (time.perf_counter() - started) * 1000
        if i >= warmup:
            samples.append(elapsed_ms)

    summary = summarize(samples)
    return PerfResult(
        total_items=index.total_items if total_items is None else total_items,
        warmup=warmup,
        iterations=iterations,
        checksum=checksum,
        **asdict(summary),
    )


def run_benchmarks(
    sizes: Iterable[int], query: str, warmup: int, iterations: int
) -> list[PerfResult]:
    results = []
    for size in sizes:
        logger.debug(f"Benchmarking {size} records ({warmup} warmup, {iterations} measured)")
        index = build_bench_index(size)
        results.append(benchmark_index(index, query, warmup, iterations, total_items=size))
    return results


def format_perf_line(result: PerfResult) -> str:
    return PERF_RESULT_MARKER + json.dumps(result.to_dict(), separators=(",", ":"))


def parse_perf_results(output: str) -> list[PerfResult]:
    """Collect PERF_RESULT lines from mixed output, skipping anything malformed."""
    results = []
    for line in output.splitlines():
        marker = line.find(PERF_RESULT_MARKER)
        if marker == -1:
            continue
        payload = line[marker + len(PERF_RESULT_MARKER) :].strip()
        if not payload:
            continue
        try:
            results.append(PerfResult.from_dict(json.loads(payload)))
        except (json.JSONDecodeError, KeyError, TypeError, ValueError):
            logger.debug(f"Ignoring malformed perf line: {line!r}")
    return results


def parse_threshold_spec(raw: Optional[str], label: str) -> dict[int, float]:
    """Parse ``"size:limitMs,..."`` into a size to limit mapping.

    Raises:
        ThresholdSpecError: If a segment is not two positive numbers
    """
    thresholds: dict[int, float] = {}
    if not raw:
        return thresholds
    for segment in (part.strip() for part in raw.split(",")):
        if not segment:
            continue
        size_text, _, limit_text = segment.partition(":")
        try:
            size = float(size_text.strip())
            limit = float(limit_text.strip())
        except ValueError:
            size = limit = math.nan
        if not (math.isfinite(size) and math.isfinite(limit)) or size <= 0 or limit <= 0:
            raise ThresholdSpecError(
                f'Invalid {label} segment "{segment}". Use format like "1000:1.5,5000:2.0".'
            )
        thresholds[int(size)] = limit
    return thresholds


def assert_perf_thresholds(
    results: Iterable[PerfResult], thresholds: dict[int, float], metric: str, label: str
) -> None:
    """Fail when any result's ``metric`` exceeds the limit for its size.

    Raises:
        PerfThresholdError: Listing every size over budget
    """
    if not thresholds:
        return
    failures = []
    for result in results:
        limit = thresholds.get(result.total_items)
        if limit is None:
            continue
        value = getattr(result, metric)
        if not math.isfinite(value):
            failures.append(f"size={result.total_items} {label}=NaN limit={limit:.2f}ms")
        elif value > limit:
            failures.append(
                f"size={result.total_items} {label}={value:.2f}ms limit={limit:.2f}ms"
            )
    if failures:
        raise PerfThresholdError(label, failures)


def write_perf_json(
    path: Path, results: list[PerfResult], warmup: int, iterations: int, query: str
) -> None:
    """Write a JSON artifact describing a benchmark run."""
    payload = {
        "generatedAt": format_iso_ms(time.time() * 1000),
        "warmup": warmup,
        "iterations": iterations,
        "query": query,
        "results": [result.to_dict() for result in results],
    }
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(payload, indent=2) + "\n", encoding="utf-8")
