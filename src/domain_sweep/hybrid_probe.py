"""
Hybrid probe: DNS first for speed, WHOIS for confirmation.

Each stage keeps its own timeout and retry policy; the hybrid probe only
sequences them and hands both results to the DecisionEngine.
"""

import time
from typing import Optional

from .config import QueryConfig
from .decision_engine import DecisionEngine
from .dns_client import DNSProbe
from .domain_validator import parse_domain, split_domain_lenient
from .enums import AvailabilityStatus, CheckMethod
from .exceptions import NetworkError
from .models import DomainResult
from .probe import BaseProbe
from .structured_logger import StructuredLogger
from .tld_registry import TLDRegistry
from .whois_client import WHOISProbe

# TLDs whose registries see heavy speculative registration
PREMIUM_TLDS = (".ai", ".dev", ".io")


class HybridProbe(BaseProbe):
    """Combines a DNSProbe and a WHOISProbe under the hybrid decision policy."""

    check_method = CheckMethod.HYBRID

    def __init__(
        self,
        dns_probe: Optional[DNSProbe] = None,
        whois_probe: Optional[WHOISProbe] = None,
        decision_engine: Optional[DecisionEngine] = None,
        config: Optional[QueryConfig] = None,
        registry: Optional[TLDRegistry] = None,
        logger: Optional[StructuredLogger] = None,
        simulation_mode: bool = False,
    ) -> None:
        super().__init__(config, registry=registry, logger=logger, simulation_mode=simulation_mode)
        self._dns_probe = dns_probe or DNSProbe(
            registry=registry, logger=logger, simulation_mode=simulation_mode
        )
        self._whois_probe = whois_probe or WHOISProbe(
            registry=registry, logger=logger, simulation_mode=simulation_mode
        )
        self._decision_engine = decision_engine or DecisionEngine()

    @property
    def dns_probe(self) -> DNSProbe:
        return self._dns_probe

    @property
    def whois_probe(self) -> WHOISProbe:
        return self._whois_probe

    def update_config(self, **changes) -> None:
        """Apply the same QueryConfig changes to both stages."""
        super().update_config(**changes)
        self._dns_probe.update_config(**changes)
        self._whois_probe.update_config(**changes)

    async def check_domain(self, domain: str, raise_on_failure: bool = False) -> DomainResult:
        """
        Check one domain with DNS, consulting WHOIS unless DNS says available.

        Raises:
            ValidationError: If the domain string is malformed
            NetworkError: If both stages failed and raise_on_failure is set
        """
        start_time = time.perf_counter()
        base_domain, tld = parse_domain(domain, self._registry)
        canonical = f"{base_domain}{tld}"

        dns_result = await self._dns_probe.check_domain(canonical)

        whois_result: Optional[DomainResult] = None
        whois_error: Optional[Exception] = None
        if self._decision_engine.needs_whois(dns_result):
            try:
                whois_result = await self._whois_probe.check_domain(canonical)
            except Exception as e:
                whois_error = e
                self._log_error(
                    f"WHOIS stage raised for {canonical}",
                    e,
                    {"domain": canonical, "dns_status": dns_result.status.value},
                )

        decision = self._decision_engine.evaluate(dns_result, whois_result, whois_error)
        retry_count = dns_result.retry_count + (whois_result.retry_count if whois_result else 0)

        if self._decision_engine.sources_disagree(dns_result, whois_result):
            self._log_info(
                f"DNS and WHOIS disagree for {canonical}",
                {
                    "domain": canonical,
                    "dns_status": dns_result.status.value,
                    "whois_status": whois_result.status.value,
                },
            )

        if raise_on_failure and decision.status == AvailabilityStatus.ERROR:
            raise NetworkError(
                "probe_failed",
                decision.error or "Hybrid check failed",
                {"domain": canonical, "retry_count": retry_count},
            )

        return self._create_result(
            canonical,
            decision.status,
            execution_time_ms=(time.perf_counter() - start_time) * 1000,
            error=decision.error,
            retry_count=retry_count,
            whois_data=decision.whois_data,
            note=decision.note,
        )

    async def check_dns_only(self, domain: str) -> DomainResult:
        return await self._dns_probe.check_domain(domain)

    async def check_whois_only(self, domain: str) -> DomainResult:
        return await self._whois_probe.check_domain(domain)

    def strategy_explanation(self, domain: str) -> str:
        """Describe how a domain will be checked, for verbose output."""
        _, tld = split_domain_lenient(domain.lower())
        if tld in PREMIUM_TLDS:
            return "Using DNS + WHOIS confirmation for premium TLD accuracy"
        return "Using DNS first for speed, WHOIS confirmation if domain appears taken"

