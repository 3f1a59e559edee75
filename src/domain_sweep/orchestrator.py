"""
Domain Query Engine for the domain sweep system.

This module provides the top-level orchestration that turns one request into
many probes. It integrates:
- Base-name validation
- TLD addressing
- Probe construction (DNS, WHOIS or hybrid) from the system configuration
- The batch controller for bounded-concurrency fan-out
- Result aggregation with one result per domain
"""

import dataclasses
import time
from typing import Iterable, Optional

from .batch_controller import BatchCheckController
from .config import SystemConfig
from .dns_client import DNSProbe
from .domain_validator import InputValidator
from .enums import AvailabilityStatus, CheckMethod, LogLevel
from .exceptions import ValidationError
from .hybrid_probe import HybridProbe
from .models import BatchResult, CheckRequest, CheckResponse, CheckSummary, DomainResult
from .probe import BaseProbe
from .result_store import PerformanceAnalytics, ResultAggregator, ResultsSummary
from .retry_manager import Sleep
from .structured_logger import StructuredLogger
from .tld_registry import TLDRegistry
from .whois_client import WHOISProbe


def build_probe(
    method: CheckMethod,
    config: SystemConfig,
    registry: Optional[TLDRegistry] = None,
    logger: Optional[StructuredLogger] = None,
    retry_sleep: Optional[Sleep] = None,
) -> BaseProbe:
    """Create the probe for a check method from the system configuration."""
    dns_probe = DNSProbe(
        config=config.dns,
        registry=registry,
        logger=logger,
        simulation_mode=config.simulation_mode,
        retry_sleep=retry_sleep,
    )
    whois_probe = WHOISProbe(
        config=config.whois,
        rate_limit_delay_seconds=config.whois_rate_limit_delay_seconds,
        custom_servers=config.whois_servers,
        registry=registry,
        logger=logger,
        simulation_mode=config.simulation_mode,
        retry_sleep=retry_sleep,
    )

    if method == CheckMethod.DNS:
        return dns_probe
    if method == CheckMethod.WHOIS:
        return whois_probe
    return HybridProbe(
        dns_probe=dns_probe,
        whois_probe=whois_probe,
        registry=registry,
        logger=logger,
        simulation_mode=config.simulation_mode,
    )


class DomainQueryEngine:
    """
    Main entry point for availability checks.

    Each call to check_multiple_tlds starts a fresh ResultAggregator, so
    results never carry over between requests.
    """

    def __init__(
        self,
        config: Optional[SystemConfig] = None,
        probe: Optional[BaseProbe] = None,
        method: CheckMethod = CheckMethod.HYBRID,
        logger: Optional[StructuredLogger] = None,
        retry_sleep: Optional[Sleep] = None,
    ) -> None:
        """
        Initialize the engine.

        Args:
            config: System configuration (defaults to SystemConfig())
            probe: Probe to use; built from config and method when omitted
            method: Check method used when no probe is given
            logger: Optional structured logger
            retry_sleep: Awaitable used between retries
        """
        self._config = config or SystemConfig()
        self._logger = logger
        self._registry = TLDRegistry(self._config.tlds)
        self._probe = probe or build_probe(
            method, self._config, self._registry, logger, retry_sleep
        )
        self._controller = BatchCheckController(
            self._probe,
            batch_config=self._config.batch,
            retry_config=self._config.retry,
            logger=logger,
            retry_sleep=retry_sleep,
        )
        self._input_validator = InputValidator()
        self._aggregator = ResultAggregator(self._registry)

    async def __aenter__(self) -> "DomainQueryEngine":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        self._controller.cancel()

    @property
    def config(self) -> SystemConfig:
        return self._config

    @property
    def probe(self) -> BaseProbe:
        return self._probe

    @property
    def registry(self) -> TLDRegistry:
        return self._registry

    @property
    def supported_tlds(self) -> list[str]:
        return self._registry.supported_tlds

    async def check_multiple_tlds(
        self, base_domain: str, tlds: Optional[Iterable[str]] = None
    ) -> list[DomainResult]:
        """
        Check a base name across TLDs.

        Args:
            base_domain: Base name, e.g. 'example'
            tlds: TLDs to check; None or empty uses the configured list

        Returns:
            One terminal DomainResult per TLD, in TLD order

        Raises:
            ValidationError: If the base name is empty
        """
        aggregator = ResultAggregator(self._registry)
        self._aggregator = aggregator
        seeded = aggregator.initialize(base_domain, tlds)

        self._log_info(
            f"Checking {len(seeded)} domains for '{base_domain.strip().lower()}'",
            {"tlds": [r.tld for r in seeded]},
        )

        batch = await self._controller.check_domains([r.domain for r in seeded])
        for result in batch.results:
            # Keep the requested split; probes only know the configured TLDs
            seed = aggregator.get(result.domain)
            if seed is not None:
                result = dataclasses.replace(result, base_domain=seed.base_domain, tld=seed.tld)
            aggregator.update(result)

        # Domains skipped by fail_fast or cancellation still need a terminal result
        for result in aggregator.results_by_status(AvailabilityStatus.CHECKING):
            aggregator.update(DomainResult(
                domain=result.domain,
                base_domain=result.base_domain,
                tld=result.tld,
                status=AvailabilityStatus.ERROR,
                check_method=self._probe.check_method,
                error="Check skipped: batch stopped before this domain",
            ))

        return aggregator.all_results()

    async def check_domains(self, domains: list[str]) -> BatchResult:
        """Check an explicit list of full domains."""
        return await self._controller.check_domains(domains)

    async def handle_request(self, request: CheckRequest) -> CheckResponse:
        """
        Serve one request end to end.

        Raises:
            ValidationError: Only when the base name is missing or invalid;
                             every per-domain failure is reported in the results
        """
        start_time = time.perf_counter()
        validation = self._input_validator.validate_domain_name(request.base_domain)
        if not validation.valid:
            self._log_error(
                "Rejected request",
                {"base_domain": request.base_domain, "errors": [e.code.value for e in validation.errors]},
            )
            first = validation.errors[0]
            raise ValidationError(
                code=first.code.value,
                message="; ".join(e.message for e in validation.errors),
                details={"errors": [e.code.value for e in validation.errors]},
            )

        results = await self.check_multiple_tlds(validation.sanitized_input, request.tlds)
        response = CheckResponse(
            base_domain=validation.sanitized_input,
            results=results,
            execution_time_ms=(time.perf_counter() - start_time) * 1000,
            summary=CheckSummary.from_results(results),
        )

        self._log_info(
            f"Request for '{response.base_domain}' completed",
            {"summary": response.summary.to_dict(), "execution_time_ms": response.execution_time_ms},
        )
        return response

    def all_results(self) -> list[DomainResult]:
        return self._aggregator.all_results()

    def summary(self) -> ResultsSummary:
        return self._aggregator.summary()

    def performance_analytics(self) -> PerformanceAnalytics:
        return self._aggregator.performance_analytics()

    def is_complete(self) -> bool:
        return self._aggregator.is_complete()

    def reset(self) -> None:
        self._aggregator = ResultAggregator(self._registry)

    def _log_info(self, message: str, data: dict) -> None:
        """Log an info message if logger is available."""
        if self._logger:
            self._logger.log(LogLevel.INFO, "DomainQueryEngine", message, data)

    def _log_error(self, message: str, data: dict) -> None:
        """Log an error message if logger is available."""
        if self._logger:
            self._logger.log(LogLevel.ERROR, "DomainQueryEngine", message, data)
