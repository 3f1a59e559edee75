"""
Base probe for domain availability checks.

A probe performs one network technique against one domain and classifies the
outcome into available / taken / error / unknown. Subclasses implement a
single attempt in `_probe`; this base class wraps every attempt in the shared
timeout and retry policy and turns the final outcome into a DomainResult.

Transient conditions (timeouts, server failures, rate limiting) are raised
from `_probe` as NetworkError so the retry loop sees them; conclusive answers
and permanent failures are returned as a ProbeOutcome.

When the probe's own retries are exhausted the failure is reported as an
ERROR result, or re-raised with `raise_on_failure=True` so that an outer
retry policy (the per-domain command) can take over.
"""

import dataclasses
import time
from abc import ABC
from dataclasses import dataclass
from typing import Optional

from .config import QueryConfig
from .domain_validator import parse_domain
from .enums import AvailabilityStatus, CheckMethod, LogLevel
from .models import DomainResult, WhoisData
from .retry_manager import RetryManager, Sleep
from .structured_logger import StructuredLogger
from .tld_registry import TLDRegistry

# Label prefix that simulation mode reports as available
SIMULATED_AVAILABLE_PREFIX = "available-"


@dataclass
class ProbeOutcome:
    """Classification of a single successful probe attempt."""

    status: AvailabilityStatus
    error: Optional[str] = None
    whois_data: Optional[WhoisData] = None


class BaseProbe(ABC):
    """
    Shared contract for DNS, WHOIS and hybrid probes: `check_domain(domain)`.
    """

    check_method: CheckMethod

    def __init__(
        self,
        config: Optional[QueryConfig] = None,
        registry: Optional[TLDRegistry] = None,
        logger: Optional[StructuredLogger] = None,
        simulation_mode: bool = False,
        retry_sleep: Optional[Sleep] = None,
    ) -> None:
        """
        Initialize the probe.

        Args:
            config: Timeout and retry settings; defaults apply when omitted
            registry: TLD registry used to split domains into base name and TLD
            logger: Optional structured logger
            simulation_mode: If True, no real network requests are made
            retry_sleep: Awaitable used between retries (defaults to asyncio.sleep)
        """
        self._config = config or QueryConfig()
        self._registry = registry
        self._logger = logger
        self._simulation_mode = simulation_mode
        self._retry_sleep = retry_sleep
        self._retry_manager = RetryManager(self._config.to_retry_config(), retry_sleep)

    @property
    def config(self) -> QueryConfig:
        return self._config

    @property
    def simulation_mode(self) -> bool:
        return self._simulation_mode

    def update_config(self, **changes) -> None:
        """Replace selected QueryConfig fields, e.g. update_config(timeout_seconds=2.0)."""
        self._config = dataclasses.replace(self._config, **changes)
        self._retry_manager = RetryManager(
            self._config.to_retry_config(), self._retry_sleep
        )

    async def check_domain(self, domain: str, raise_on_failure: bool = False) -> DomainResult:
        """
        Check one fully-qualified domain.

        Args:
            domain: Full domain, e.g. 'example.com'
            raise_on_failure: Re-raise a transient error left after the last
                              retry instead of returning an ERROR result

        Raises:
            ValidationError: If the domain string is malformed
            NetworkError: On exhausted transient failure with raise_on_failure
        """
        start_time = time.perf_counter()
        base_domain, tld = parse_domain(domain, self._registry)
        canonical = f"{base_domain}{tld}"

        async def attempt() -> ProbeOutcome:
            if self._simulation_mode:
                return self._simulated_outcome(canonical)
            return await self._probe(canonical)

        def on_retry(attempt_number: int, error: Exception, delay: float) -> None:
            self._log_info(
                f"Retrying {canonical} after attempt {attempt_number}",
                {"domain": canonical, "error": str(error), "delay_seconds": delay},
            )

        retry = await self._retry_manager.execute_with_retry(
            attempt,
            timeout=self._config.timeout_seconds,
            on_retry=on_retry,
        )
        elapsed_ms = (time.perf_counter() - start_time) * 1000

        if retry.success:
            outcome = retry.result
            return self._create_result(
                canonical,
                outcome.status,
                execution_time_ms=elapsed_ms,
                error=outcome.error,
                retry_count=retry.retry_count,
                whois_data=outcome.whois_data,
            )

        self._log_error(
            f"{self.check_method.name} check failed for {canonical}",
            retry.last_error,
            {"domain": canonical, "attempts": retry.attempts},
        )
        if raise_on_failure and self._retry_manager.is_retryable_error(retry.last_error):
            raise retry.last_error
        return self._create_result(
            canonical,
            AvailabilityStatus.ERROR,
            execution_time_ms=elapsed_ms,
            error=str(retry.last_error),
            retry_count=retry.retry_count,
        )

    async def _probe(self, domain: str) -> ProbeOutcome:
        """Run one attempt against the network; single-technique probes implement this."""
        raise NotImplementedError

    def _simulated_outcome(self, domain: str) -> ProbeOutcome:
        """
        Deterministic answer for simulation mode.

        Domains whose first label starts with 'available-' are available,
        everything else is taken.
        """
        if domain.startswith(SIMULATED_AVAILABLE_PREFIX):
            return ProbeOutcome(status=AvailabilityStatus.AVAILABLE)
        return ProbeOutcome(status=AvailabilityStatus.TAKEN)

    def _split(self, domain: str) -> tuple[str, str]:
        return parse_domain(domain, self._registry)

    def _create_result(
        self,
        domain: str,
        status: AvailabilityStatus,
        execution_time_ms: Optional[float] = None,
        error: Optional[str] = None,
        retry_count: int = 0,
        whois_data: Optional[WhoisData] = None,
        note: Optional[str] = None,
    ) -> DomainResult:
        """Build a DomainResult; `error` is kept only for ERROR status."""
        base_domain, tld = self._split(domain)
        if status == AvailabilityStatus.ERROR and not error:
            error = f"{self.check_method.name} check failed"
        return DomainResult(
            domain=domain,
            base_domain=base_domain,
            tld=tld,
            status=status,
            check_method=self.check_method,
            execution_time_ms=execution_time_ms,
            error=error if status == AvailabilityStatus.ERROR else None,
            retry_count=retry_count,
            whois_data=whois_data,
            note=note,
        )

    def _log_info(self, message: str, data: dict) -> None:
        if self._logger:
            self._logger.log(LogLevel.INFO, self.__class__.__name__, message, data)

    def _log_debug(self, message: str, data: dict) -> None:
        if self._logger:
            self._logger.log(LogLevel.DEBUG, self.__class__.__name__, message, data)

    def _log_error(
        self, message: str, error: Optional[Exception], data: dict
    ) -> None:
        if self._logger:
            self._logger.log_error(self.__class__.__name__, message, error, data)
