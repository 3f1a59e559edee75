"""
Configuration dataclasses for the domain sweep system.

This module defines the configuration structures used throughout the system:
retry policies, per-probe query settings, batch scheduling, logging, and the
top-level system configuration.
"""

from dataclasses import dataclass, field
from typing import Optional

from .tld_registry import DEFAULT_TLDS

LOG_LEVELS = ("debug", "info", "warn", "error")
LOG_FORMATS = ("json", "text", "both")


@dataclass(frozen=True)
class RetryConfig:
    """Retry behavior configuration."""

    max_retries: int = 3
    initial_delay_seconds: float = 1.0
    use_exponential_backoff: bool = True
    max_delay_seconds: float = 30.0
    backoff_multiplier: float = 2.0

    def __post_init__(self) -> None:
        if self.max_retries < 0:
            raise ValueError(f"max_retries must be >= 0, got {self.max_retries}")
        if self.initial_delay_seconds < 0:
            raise ValueError(
                f"initial_delay_seconds must be >= 0, got {self.initial_delay_seconds}"
            )
        if self.max_delay_seconds < 0:
            raise ValueError(
                f"max_delay_seconds must be >= 0, got {self.max_delay_seconds}"
            )
        if self.use_exponential_backoff and self.backoff_multiplier <= 1:
            raise ValueError(
                "backoff_multiplier must be > 1 when exponential backoff is enabled, "
                f"got {self.backoff_multiplier}"
            )


@dataclass(frozen=True)
class QueryConfig:
    """Per-probe query settings (timeout and retry policy)."""

    timeout_seconds: float = 5.0
    max_retries: int = 3
    retry_delay_seconds: float = 1.0
    use_exponential_backoff: bool = True

    def to_retry_config(self) -> RetryConfig:
        """Derive the retry policy applied around each probe attempt."""
        return RetryConfig(
            max_retries=self.max_retries,
            initial_delay_seconds=self.retry_delay_seconds,
            use_exponential_backoff=self.use_exponential_backoff,
            max_delay_seconds=30.0,
            backoff_multiplier=2.0,
        )


@dataclass(frozen=True)
class BatchConfig:
    """Batch scheduling configuration."""

    batch_size: int = 10
    max_concurrency: int = 5
    batch_delay_seconds: float = 0.1
    fail_fast: bool = False

    def __post_init__(self) -> None:
        if self.batch_size < 1:
            raise ValueError(f"batch_size must be >= 1, got {self.batch_size}")
        if self.max_concurrency < 1:
            raise ValueError(
                f"max_concurrency must be >= 1, got {self.max_concurrency}"
            )


@dataclass
class LoggingConfig:
    """Logging configuration."""

    level: str = "warn"
    output_format: str = "text"  # 'json', 'text', 'both'

    def __post_init__(self) -> None:
        if str(self.level).lower() not in LOG_LEVELS:
            raise ValueError(f"level must be one of {LOG_LEVELS}, got {self.level!r}")
        if self.output_format not in LOG_FORMATS:
            raise ValueError(
                f"output_format must be one of {LOG_FORMATS}, got {self.output_format!r}"
            )


@dataclass
class SystemConfig:
    """Main system configuration combining all sub-configurations."""

    tlds: list[str] = field(default_factory=lambda: list(DEFAULT_TLDS))
    dns: QueryConfig = field(
        default_factory=lambda: QueryConfig(timeout_seconds=5.0, max_retries=2)
    )
    whois: QueryConfig = field(
        default_factory=lambda: QueryConfig(timeout_seconds=10.0, max_retries=2)
    )
    # Per-domain retries on top of each probe's own retries
    retry: RetryConfig = field(default_factory=lambda: RetryConfig(max_retries=1))
    batch: BatchConfig = field(default_factory=BatchConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    whois_rate_limit_delay_seconds: float = 1.0
    whois_servers: Optional[dict[str, str]] = None
    simulation_mode: bool = False
