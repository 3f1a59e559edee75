"""DNS-based domain availability probe."""

from typing import Optional

import dns.asyncresolver
import dns.exception
import dns.resolver

from .config import QueryConfig
from .enums import AvailabilityStatus, CheckMethod
from .exceptions import NetworkError, ProbeTimeoutError
from .probe import BaseProbe, ProbeOutcome
from .retry_manager import Sleep
from .structured_logger import StructuredLogger
from .tld_registry import TLDRegistry

# Record types tried after an unclassified A-record failure
FALLBACK_RECORD_TYPES = ("AAAA", "MX")


class DNSProbe(BaseProbe):
    """
    Fast DNS pre-filter.

    A domain that resolves is taken. A domain that does not exist (NXDOMAIN)
    or has no A record is reported available; only WHOIS can confirm it.
    """

    check_method = CheckMethod.DNS

    def __init__(
        self,
        config: Optional[QueryConfig] = None,
        resolver: Optional[dns.asyncresolver.Resolver] = None,
        registry: Optional[TLDRegistry] = None,
        logger: Optional[StructuredLogger] = None,
        simulation_mode: bool = False,
        retry_sleep: Optional[Sleep] = None,
    ) -> None:
        """
        Initialize the DNS probe.

        Args:
            config: Timeout and retry settings
            resolver: Object with an async resolve(name, rdtype) method;
                      a dnspython async resolver is created on first use if omitted
            registry: TLD registry used to split domains
            logger: Optional structured logger
            simulation_mode: If True, no real network requests are made
            retry_sleep: Awaitable used between retries
        """
        super().__init__(
            config,
            registry=registry,
            logger=logger,
            simulation_mode=simulation_mode,
            retry_sleep=retry_sleep,
        )
        self._resolver = resolver

    def _get_resolver(self) -> dns.asyncresolver.Resolver:
        if self._resolver is None:
            resolver = dns.asyncresolver.Resolver()
            resolver.timeout = self._config.timeout_seconds
            resolver.lifetime = self._config.timeout_seconds
            self._resolver = resolver
        return self._resolver

    async def _probe(self, domain: str) -> ProbeOutcome:
        resolver = self._get_resolver()
        try:
            await resolver.resolve(domain, "A")
            return ProbeOutcome(status=AvailabilityStatus.TAKEN)
        except (dns.resolver.NXDOMAIN, dns.resolver.NoAnswer):
            return ProbeOutcome(status=AvailabilityStatus.AVAILABLE)
        except dns.exception.Timeout:
            raise ProbeTimeoutError("DNS query timed out", {"domain": domain})
        except dns.resolver.NoNameservers as e:
            if "REFUSED" in str(e):
                raise NetworkError("refused", "DNS query refused", {"domain": domain})
            raise NetworkError("server_failure", "DNS server failure", {"domain": domain})
        except Exception as e:
            self._log_debug(
                f"A lookup for {domain} failed, trying fallback records",
                {"domain": domain, "error": str(e)},
            )

        for rdtype in FALLBACK_RECORD_TYPES:
            try:
                await resolver.resolve(domain, rdtype)
                return ProbeOutcome(status=AvailabilityStatus.TAKEN)
            except Exception:
                continue

        return ProbeOutcome(status=AvailabilityStatus.AVAILABLE)

    async def is_dns_resolvable(self, domain: str) -> bool:
        """True when the domain has any A, AAAA or MX record (single attempt)."""
        try:
            outcome = await self._probe(domain)
        except NetworkError:
            return False
        return outcome.status == AvailabilityStatus.TAKEN
