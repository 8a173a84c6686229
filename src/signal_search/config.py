"""Configuration settings for Signal Search."""

from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_PERF_QUERY = "incident research workflow citation keyboard"


class SignalSearchConfig(BaseSettings):
    """Settings loaded from ``SIGNAL_SEARCH_*`` environment variables.

    The storage file stands in for the browser's per-origin key-value store when
    the engine runs from the CLI.
    """

    model_config = SettingsConfigDict(
        env_prefix="SIGNAL_SEARCH_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    home: Path = Field(
        default_factory=lambda: Path.home() / ".signal-search",
        description="Directory holding local search state",
    )
    storage_file: str = Field(default="storage.json", description="Key-value store file name")
    log_level: str = Field(default="INFO", description="Minimum loguru level for the CLI")

    default_result_limit: int = Field(default=20, description="Result cap when none is given")
    recent_query_limit: int = Field(default=5, description="How many recent queries are kept")

    # Benchmark harness
    perf_warmup: int = Field(default=3, description="Warmup passes per dataset size")
    perf_iterations: int = Field(default=12, description="Measured passes per dataset size")
    perf_query: str = Field(default=DEFAULT_PERF_QUERY, description="Benchmark query")
    perf_sizes: list[int] = Field(
        default_factory=lambda: [1000, 5000, 10000],
        description="Total record counts to benchmark",
    )

    @property
    def storage_path(self) -> Path:
        """Full path of the JSON key-value store."""
        return self.home / self.storage_file


@lru_cache
def get_config() -> SignalSearchConfig:
    """Get cached settings instance."""
    return SignalSearchConfig()
