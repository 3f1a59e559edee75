"""
WHOIS probe for domain availability checking.

Queries the TLD's port-43 WHOIS server and classifies the free-text reply
with indicator phrases. WHOIS output is not standardized, so the parsing is
heuristic: explicit "not found" phrases win, then registration phrases, then
rate-limit and connection-failure phrases. A reply that matches nothing is
taken when it still looks like a registration record, otherwise unknown.
"""

import asyncio
import re
import socket
from typing import Awaitable, Callable, Optional

from .config import QueryConfig
from .enums import AvailabilityStatus, CheckMethod
from .exceptions import NetworkError, ProbeTimeoutError, RateLimitError
from .models import WhoisData
from .probe import SIMULATED_AVAILABLE_PREFIX, BaseProbe, ProbeOutcome
from .retry_manager import Sleep
from .structured_logger import StructuredLogger
from .tld_registry import WHOIS_SERVERS, TLDRegistry, normalize_tld

WHOIS_PORT = 43
MIN_RATE_LIMIT_DELAY_SECONDS = 0.1

NOT_FOUND_INDICATORS = (
    "no match",
    "not found",
    "no data found",
    "domain not found",
    "no entries found",
    "status: available",
)

REGISTERED_INDICATORS = (
    "creation date",
    "registered",
    "registrar:",
    "name server",
    "domain status:",
    "registry domain id",
)

RATE_LIMIT_INDICATORS = ("rate limit", "quota exceeded")
CONNECTION_FAILURE_INDICATORS = ("timeout", "connection failed")

# A reply with at least this many "key: value" lines is treated as a record
SUBSTANTIVE_FIELD_LINES = 2

_REGISTRAR_RE = re.compile(r"^\s*registrar:\s*(\S.*?)\s*$", re.IGNORECASE | re.MULTILINE)
_EXPIRATION_RE = re.compile(
    r"^\s*(?:registry expiry date|registrar registration expiration date"
    r"|expiration date|expiry date|expires on|paid-till):\s*(\S.*?)\s*$",
    re.IGNORECASE | re.MULTILINE,
)
_CREATION_RE = re.compile(
    r"^\s*(?:creation date|created on|created|registered on):\s*(\S.*?)\s*$",
    re.IGNORECASE | re.MULTILINE,
)

WhoisQuery = Callable[[str, str], Awaitable[str]]


class WHOISProbe(BaseProbe):
    """
    WHOIS probe with a fixed rate-limit delay before every query.

    The query function is injectable; by default a blocking socket query runs
    in the event loop's executor.
    """

    check_method = CheckMethod.WHOIS

    def __init__(
        self,
        config: Optional[QueryConfig] = None,
        rate_limit_delay_seconds: float = 1.0,
        custom_servers: Optional[dict[str, str]] = None,
        query_func: Optional[WhoisQuery] = None,
        registry: Optional[TLDRegistry] = None,
        logger: Optional[StructuredLogger] = None,
        simulation_mode: bool = False,
        retry_sleep: Optional[Sleep] = None,
    ) -> None:
        """
        Initialize the WHOIS probe.

        Args:
            config: Timeout and retry settings (defaults to a 10 second timeout)
            rate_limit_delay_seconds: Pause before each query, at least 0.1 seconds
            custom_servers: Extra or overriding WHOIS servers per TLD
            query_func: Async callable (domain, server) -> raw reply text
            registry: TLD registry used to split domains
            logger: Optional structured logger
            simulation_mode: If True, no real network requests are made
            retry_sleep: Awaitable used between retries
        """
        super().__init__(
            config or QueryConfig(timeout_seconds=10.0),
            registry=registry,
            logger=logger,
            simulation_mode=simulation_mode,
            retry_sleep=retry_sleep,
        )
        self._rate_limit_delay = max(rate_limit_delay_seconds, MIN_RATE_LIMIT_DELAY_SECONDS)

        self._servers = dict(WHOIS_SERVERS)
        if custom_servers:
            self._servers.update(
                {normalize_tld(tld): server for tld, server in custom_servers.items()}
            )

        self._query_func = query_func or self._execute_whois_query

    @property
    def rate_limit_delay(self) -> float:
        return self._rate_limit_delay

    def set_rate_limit_delay(self, delay_seconds: float) -> None:
        """Set the pause before each query; values below 0.1 seconds are raised to 0.1."""
        self._rate_limit_delay = max(delay_seconds, MIN_RATE_LIMIT_DELAY_SECONDS)

    def get_server_for_tld(self, tld: str) -> Optional[str]:
        return self._servers.get(normalize_tld(tld))

    def get_supported_tlds(self) -> list[str]:
        """Return TLDs with a configured WHOIS server."""
        return list(self._servers.keys())

    async def _probe(self, domain: str) -> ProbeOutcome:
        _, tld = self._split(domain)
        server = self.get_server_for_tld(tld)
        if not server:
            return ProbeOutcome(
                status=AvailabilityStatus.ERROR,
                error=f"No WHOIS server configured for TLD: {tld}",
            )

        await asyncio.sleep(self._rate_limit_delay)

        try:
            raw_response = await self._query_func(domain, server)
        except (socket.timeout, asyncio.TimeoutError):
            raise ProbeTimeoutError("WHOIS query timed out", {"server": server})
        except OSError as e:
            raise NetworkError(
                "connection_failed",
                f"WHOIS connection failed: {e}",
                {"server": server},
            )

        self._log_debug(
            f"WHOIS reply for {domain}",
            {"server": server, "length": len(raw_response)},
        )
        return self.parse_response(raw_response)

    def parse_response(self, raw_response: str) -> ProbeOutcome:
        """
        Classify a raw WHOIS reply.

        Raises:
            RateLimitError: If the server reports rate limiting or quota exhaustion
            NetworkError: If the reply reports a timeout or failed connection
        """
        lower = raw_response.lower()

        if any(indicator in lower for indicator in NOT_FOUND_INDICATORS):
            return ProbeOutcome(status=AvailabilityStatus.AVAILABLE)

        if any(indicator in lower for indicator in REGISTERED_INDICATORS):
            return ProbeOutcome(
                status=AvailabilityStatus.TAKEN,
                whois_data=extract_whois_data(raw_response),
            )

        if any(indicator in lower for indicator in RATE_LIMIT_INDICATORS):
            raise RateLimitError()

        if any(indicator in lower for indicator in CONNECTION_FAILURE_INDICATORS):
            raise NetworkError("connection_failed", "WHOIS connection failed")

        if is_substantive_response(raw_response):
            return ProbeOutcome(
                status=AvailabilityStatus.TAKEN,
                whois_data=extract_whois_data(raw_response),
            )

        return ProbeOutcome(status=AvailabilityStatus.UNKNOWN)

    async def _execute_whois_query(self, domain: str, server: str) -> str:
        """
        Execute the actual WHOIS query via socket.

        Args:
            domain: Domain to query
            server: WHOIS server hostname

        Returns:
            Raw WHOIS response as string
        """
        loop = asyncio.get_running_loop()
        timeout = self._config.timeout_seconds

        def _sync_query() -> str:
            with socket.create_connection((server, WHOIS_PORT), timeout=timeout) as sock:
                sock.sendall(f"{domain}\r\n".encode("utf-8"))

                response_parts: list[bytes] = []
                while True:
                    data = sock.recv(4096)
                    if not data:
                        break
                    response_parts.append(data)

                return b"".join(response_parts).decode("utf-8", errors="replace")

        return await loop.run_in_executor(None, _sync_query)

    def _simulated_outcome(self, domain: str) -> ProbeOutcome:
        if domain.startswith(SIMULATED_AVAILABLE_PREFIX):
            return ProbeOutcome(status=AvailabilityStatus.AVAILABLE)
        return ProbeOutcome(
            status=AvailabilityStatus.TAKEN,
            whois_data=WhoisData(
                registrar="Example Registrar",
                creation_date="2020-01-01",
            ),
        )


def is_substantive_response(raw_response: str) -> bool:
    """True when the reply carries enough 'key: value' lines to be a record."""
    field_lines = 0
    for line in raw_response.splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith(("%", "#")):
            continue
        if ":" in stripped:
            field_lines += 1
    return field_lines >= SUBSTANTIVE_FIELD_LINES


def extract_whois_data(raw_response: str) -> Optional[WhoisData]:
    """Pull registrar and dates out of a reply; None when none are present."""

    def first(pattern: re.Pattern) -> Optional[str]:
        match = pattern.search(raw_response)
        return match.group(1) if match else None

    data = WhoisData(
        registrar=first(_REGISTRAR_RE),
        expiration_date=first(_EXPIRATION_RE),
        creation_date=first(_CREATION_RE),
    )
    if data.registrar is None and data.expiration_date is None and data.creation_date is None:
        return None
    return data
