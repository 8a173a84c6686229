"""
Custom exceptions for Signal Search.

The search core never raises for bad data (it falls back to defaults); these
exceptions cover storage backends and the benchmark harness.
"""


class SignalSearchError(Exception):
    """Base exception for all Signal Search errors."""

    pass


class StorageQuotaError(SignalSearchError):
    """Raised by a storage backend when a write would exceed its quota."""

    def __init__(self, key: str, size: int, quota: int):
        self.key = key
        self.size = size
        self.quota = quota
        super().__init__(f"Writing {key!r} needs {size} bytes, quota is {quota} bytes")


class ThresholdSpecError(SignalSearchError):
    """Raised when a benchmark threshold spec cannot be parsed."""

    pass


class PerfThresholdError(SignalSearchError):
    """Raised when benchmark results exceed their latency budget."""

    def __init__(self, label: str, failures: list[str]):
        self.label = label
        self.failures = failures
        details = "\n- ".join(failures)
        super().__init__(f"{label} threshold check failed:\n- {details}")
