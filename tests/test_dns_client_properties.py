"""
Tests for the DNS probe.

A fake resolver stands in for dnspython's async resolver so each resolver
outcome can be driven directly.
"""

import asyncio
import string

import dns.exception
import dns.resolver
import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from domain_sweep.config import QueryConfig
from domain_sweep.dns_client import DNSProbe
from domain_sweep.enums import AvailabilityStatus, CheckMethod
from domain_sweep.exceptions import ProbeTimeoutError, ValidationError


class FakeResolver:
    """Answers per record type; an exception instance is raised instead of returned."""

    def __init__(self, outcomes: dict, delay: float = 0.0) -> None:
        self.outcomes = outcomes
        self.delay = delay
        self.calls: list[tuple[str, str]] = []

    async def resolve(self, name: str, rdtype: str):
        self.calls.append((name, rdtype))
        if self.delay:
            await asyncio.sleep(self.delay)
        outcome = self.outcomes.get(rdtype, dns.resolver.NoAnswer())
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome


class RefusedNoNameservers(dns.resolver.NoNameservers):
    def __str__(self) -> str:
        return "All nameservers failed to answer the query: Server 127.0.0.1 UDP port 53 answered REFUSED"


def make_probe(resolver: FakeResolver, max_retries: int = 2, timeout: float = 1.0) -> DNSProbe:
    return DNSProbe(
        config=QueryConfig(timeout_seconds=timeout, max_retries=max_retries, retry_delay_seconds=0.0),
        resolver=resolver,
    )


def check(probe: DNSProbe, domain: str):
    return asyncio.run(probe.check_domain(domain))


class TestDNSClassification:
    def test_resolving_domain_is_taken(self) -> None:
        resolver = FakeResolver({"A": ["93.184.216.34"]})
        result = check(make_probe(resolver), "Example.com")

        assert result.status == AvailabilityStatus.TAKEN
        assert result.check_method == CheckMethod.DNS
        assert result.domain == "example.com"
        assert result.base_domain == "example"
        assert result.tld == ".com"
        assert result.retry_count == 0
        assert result.error is None
        assert result.execution_time_ms >= 0
        assert resolver.calls == [("example.com", "A")]

    @pytest.mark.parametrize("error", [dns.resolver.NXDOMAIN(), dns.resolver.NoAnswer()])
    def test_nonexistent_domain_is_available(self, error: Exception) -> None:
        resolver = FakeResolver({"A": error, "AAAA": ["::1"]})
        result = check(make_probe(resolver), "free-name.io")

        assert result.status == AvailabilityStatus.AVAILABLE
        assert result.error is None
        assert resolver.calls == [("free-name.io", "A")]

    def test_timeout_is_retried_then_reported(self) -> None:
        resolver = FakeResolver({"A": dns.exception.Timeout()})
        result = check(make_probe(resolver, max_retries=2), "slow.com")

        assert result.status == AvailabilityStatus.ERROR
        assert result.error == "DNS query timed out"
        assert result.retry_count == 2
        assert len(resolver.calls) == 3

    def test_exhausted_timeout_raised_on_request(self) -> None:
        resolver = FakeResolver({"A": dns.exception.Timeout()})
        probe = make_probe(resolver, max_retries=1)

        with pytest.raises(ProbeTimeoutError, match="DNS query timed out"):
            asyncio.run(probe.check_domain("slow.com", raise_on_failure=True))

        assert len(resolver.calls) == 2

    def test_server_failure(self) -> None:
        resolver = FakeResolver({"A": dns.resolver.NoNameservers()})
        result = check(make_probe(resolver, max_retries=1), "broken.net")

        assert result.status == AvailabilityStatus.ERROR
        assert result.error == "DNS server failure"
        assert result.retry_count == 1

    def test_refused(self) -> None:
        resolver = FakeResolver({"A": RefusedNoNameservers()})
        result = check(make_probe(resolver, max_retries=0), "refused.net")

        assert result.error == "DNS query refused"
        assert result.retry_count == 0

    def test_transient_failure_then_success(self) -> None:
        outcomes = iter([dns.exception.Timeout(), ["1.2.3.4"]])

        class FlakyResolver(FakeResolver):
            async def resolve(self, name, rdtype):
                self.calls.append((name, rdtype))
                outcome = next(outcomes)
                if isinstance(outcome, BaseException):
                    raise outcome
                return outcome

        resolver = FlakyResolver({})
        result = check(make_probe(resolver), "flaky.com")

        assert result.status == AvailabilityStatus.TAKEN
        assert result.retry_count == 1


class TestFallbackRecords:
    """Unclassified A failures fall back to AAAA, then MX."""

    def test_aaaa_fallback(self) -> None:
        resolver = FakeResolver({"A": dns.exception.DNSException("odd"), "AAAA": ["::1"]})
        result = check(make_probe(resolver), "v6only.dev")

        assert result.status == AvailabilityStatus.TAKEN
        assert [rdtype for _, rdtype in resolver.calls] == ["A", "AAAA"]

    def test_mx_fallback(self) -> None:
        resolver = FakeResolver({
            "A": dns.exception.DNSException("odd"),
            "AAAA": dns.resolver.NoAnswer(),
            "MX": ["10 mail.example.org."],
        })
        result = check(make_probe(resolver), "mailonly.org")

        assert result.status == AvailabilityStatus.TAKEN
        assert [rdtype for _, rdtype in resolver.calls] == ["A", "AAAA", "MX"]

    def test_everything_failing_is_available(self) -> None:
        resolver = FakeResolver({
            "A": dns.exception.DNSException("odd"),
            "AAAA": RuntimeError("unexpected"),
            "MX": dns.resolver.NXDOMAIN(),
        })
        result = check(make_probe(resolver), "nothing.org")

        assert result.status == AvailabilityStatus.AVAILABLE
        assert result.retry_count == 0


class TestDNSProbeEdges:
    def test_invalid_domain_raises_validation_error(self) -> None:
        resolver = FakeResolver({"A": ["1.1.1.1"]})

        with pytest.raises(ValidationError):
            check(make_probe(resolver), "bad@domain")
        assert resolver.calls == []

    def test_slow_resolver_loses_the_race(self) -> None:
        resolver = FakeResolver({"A": ["1.1.1.1"]}, delay=0.5)
        result = check(make_probe(resolver, max_retries=0, timeout=0.05), "slow.com")

        assert result.status == AvailabilityStatus.ERROR
        assert result.error == "Operation timed out"

    def test_is_dns_resolvable(self) -> None:
        taken = make_probe(FakeResolver({"A": ["1.1.1.1"]}))
        free = make_probe(FakeResolver({"A": dns.resolver.NXDOMAIN()}))
        failing = make_probe(FakeResolver({"A": dns.exception.Timeout()}))

        assert asyncio.run(taken.is_dns_resolvable("a.com"))
        assert not asyncio.run(free.is_dns_resolvable("a.com"))
        assert not asyncio.run(failing.is_dns_resolvable("a.com"))

    def test_update_config(self) -> None:
        probe = make_probe(FakeResolver({}))
        probe.update_config(timeout_seconds=2.5)

        assert probe.config.timeout_seconds == 2.5
        assert probe.config.max_retries == 2


class TestSimulationMode:
    @given(label=st.text(alphabet=string.ascii_lowercase + string.digits, min_size=1, max_size=15))
    @settings(max_examples=50, deadline=None)
    def test_no_resolver_calls(self, label: str) -> None:
        resolver = FakeResolver({"A": ["1.1.1.1"]})
        probe = DNSProbe(resolver=resolver, simulation_mode=True)

        taken = asyncio.run(probe.check_domain(f"{label}.com"))
        free = asyncio.run(probe.check_domain(f"available-{label}.com"))

        assert resolver.calls == []
        assert taken.status == AvailabilityStatus.TAKEN
        assert free.status == AvailabilityStatus.AVAILABLE
