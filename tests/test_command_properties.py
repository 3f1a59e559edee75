"""
Property-based tests for the per-domain check command.

Covers the lifecycle state machine, command-level retry counting and
cancellation.
"""

import asyncio
from typing import Optional

import dns.exception
import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from domain_sweep.command import DomainCheckCommand
from domain_sweep.config import QueryConfig, RetryConfig
from domain_sweep.dns_client import DNSProbe
from domain_sweep.enums import AvailabilityStatus, CheckMethod, CommandStatus
from domain_sweep.exceptions import (
    CommandCancelledError,
    CommandStateError,
    NetworkError,
    ValidationError,
)
from domain_sweep.models import DomainResult


class RecordingSleep:
    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


class ScriptedProbe:
    """Probe that raises the first `failures` times, then answers."""

    check_method = CheckMethod.DNS

    def __init__(
        self,
        failures: int = 0,
        status: AvailabilityStatus = AvailabilityStatus.TAKEN,
        error: Optional[Exception] = None,
        delay: float = 0.0,
    ) -> None:
        self.failures = failures
        self.status = status
        self.error = error or NetworkError("network_error", "network down")
        self.delay = delay
        self.calls = 0

    async def check_domain(self, domain: str, raise_on_failure: bool = False) -> DomainResult:
        self.calls += 1
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.calls <= self.failures:
            raise self.error
        base, _, tld = domain.partition(".")
        return DomainResult(
            domain=domain,
            base_domain=base,
            tld=f".{tld}",
            status=self.status,
            check_method=self.check_method,
            retry_count=1,
        )


def make_command(probe, max_retries: int = 3, domain: str = "example.com") -> DomainCheckCommand:
    return DomainCheckCommand(
        domain,
        probe,
        RetryConfig(max_retries=max_retries, initial_delay_seconds=0.01),
        retry_sleep=RecordingSleep(),
    )


class TestRetryCountProperty:
    """An always-failing probe runs max_retries + 1 times and reports max_retries."""

    @given(max_retries=st.integers(min_value=0, max_value=6))
    @settings(max_examples=50, deadline=None)
    def test_always_failing(self, max_retries: int) -> None:
        probe = ScriptedProbe(failures=100)
        command = make_command(probe, max_retries)

        result = asyncio.run(command.run())

        assert probe.calls == max_retries + 1
        assert result.status == AvailabilityStatus.ERROR
        assert result.retry_count == max_retries
        assert result.error == "network down"
        assert command.status == CommandStatus.FAILED
        assert command.retry_count == max_retries

    @given(failures=st.integers(min_value=0, max_value=3))
    @settings(max_examples=20, deadline=None)
    def test_probe_retries_are_added(self, failures: int) -> None:
        probe = ScriptedProbe(failures=failures)
        command = make_command(probe, max_retries=3)

        result = asyncio.run(command.run())

        assert result.status == AvailabilityStatus.TAKEN
        assert result.retry_count == failures + 1
        assert command.status == CommandStatus.COMPLETED

    def test_backoff_delays(self) -> None:
        sleep = RecordingSleep()
        command = DomainCheckCommand(
            "example.com",
            ScriptedProbe(failures=100),
            RetryConfig(max_retries=3, initial_delay_seconds=1.0),
            retry_sleep=sleep,
        )

        asyncio.run(command.run())

        assert sleep.delays == [1.0, 2.0, 4.0]


class TestValidation:
    def test_invalid_domain_never_reaches_probe(self) -> None:
        probe = ScriptedProbe()
        command = make_command(probe, domain="bad@domain")

        result = asyncio.run(command.run())

        assert probe.calls == 0
        assert result.status == AvailabilityStatus.ERROR
        assert result.retry_count == 0
        assert result.domain == "bad@domain"
        assert command.status == CommandStatus.FAILED

    def test_validate_raises(self) -> None:
        with pytest.raises(ValidationError):
            make_command(ScriptedProbe(), domain="").validate()
        assert make_command(ScriptedProbe()).validate()

    def test_validation_error_from_probe_not_retried(self) -> None:
        probe = ScriptedProbe(failures=100, error=ValidationError("invalid_format", "bad"))
        result = asyncio.run(make_command(probe, max_retries=5).run())

        assert probe.calls == 1
        assert result.retry_count == 0


class TestLifecycle:
    def test_starts_pending(self) -> None:
        command = make_command(ScriptedProbe())

        assert command.status == CommandStatus.PENDING
        assert command.can_retry()
        assert command.name == "DomainCheck:example.com"
        assert command.description == "Check availability of domain 'example.com' using DNS strategy"

    def test_completed_command_cannot_run_again(self) -> None:
        command = make_command(ScriptedProbe())
        asyncio.run(command.execute())

        assert command.status == CommandStatus.COMPLETED
        assert command.metadata.completed_at is not None
        assert not command.can_retry()
        with pytest.raises(CommandStateError):
            asyncio.run(command.execute())

    def test_failed_command_can_execute_again(self) -> None:
        command = make_command(ScriptedProbe(failures=1))

        with pytest.raises(NetworkError):
            asyncio.run(command.execute())
        assert command.status == CommandStatus.FAILED

        result = asyncio.run(command.execute())
        assert result.status == AvailabilityStatus.TAKEN
        assert command.status == CommandStatus.COMPLETED

    def test_retry_config_only_changes_while_pending(self) -> None:
        command = make_command(ScriptedProbe())
        command.set_retry_config(RetryConfig(max_retries=7))
        assert command.retry_config.max_retries == 7

        asyncio.run(command.execute())
        with pytest.raises(CommandStateError):
            command.set_retry_config(RetryConfig())

    def test_metadata_is_a_copy(self) -> None:
        command = DomainCheckCommand("example.com", ScriptedProbe(), priority=4)
        snapshot = command.metadata
        snapshot.retry_count = 99

        assert command.retry_count == 0
        assert command.metadata.priority == 4
        assert command.metadata.command_id

    def test_clone_is_fresh(self) -> None:
        command = make_command(ScriptedProbe())
        asyncio.run(command.execute())

        copy = command.clone()

        assert copy.status == CommandStatus.PENDING
        assert copy.domain == command.domain
        assert copy.retry_config == command.retry_config
        assert copy.metadata.command_id != command.metadata.command_id


class TestCancellation:
    def test_cancel_pending(self) -> None:
        command = make_command(ScriptedProbe())

        assert command.cancel()
        assert command.status == CommandStatus.CANCELLED
        assert not command.cancel()
        with pytest.raises(CommandCancelledError):
            asyncio.run(command.execute())

    def test_cancelled_run_is_error_without_retries(self) -> None:
        probe = ScriptedProbe()
        command = make_command(probe, max_retries=3)
        command.cancel()

        result = asyncio.run(command.run())

        assert probe.calls == 0
        assert result.status == AvailabilityStatus.ERROR
        assert result.error == "Check for example.com was cancelled"

    def test_cancel_during_attempt_discards_result(self) -> None:
        probe = ScriptedProbe(delay=0.05)
        command = make_command(probe)

        async def scenario() -> DomainResult:
            task = asyncio.ensure_future(command.run())
            await asyncio.sleep(0.01)
            assert command.status == CommandStatus.EXECUTING
            command.cancel()
            return await task

        result = asyncio.run(scenario())

        assert probe.calls == 1
        assert command.status == CommandStatus.CANCELLED
        assert result.status == AvailabilityStatus.ERROR

    def test_completed_command_ignores_cancel(self) -> None:
        command = make_command(ScriptedProbe())
        asyncio.run(command.run())

        assert not command.cancel()
        assert command.status == CommandStatus.COMPLETED


class TimingOutResolver:
    def __init__(self) -> None:
        self.calls = 0

    async def resolve(self, name: str, rdtype: str):
        self.calls += 1
        raise dns.exception.Timeout()


class FixedResolver:
    def __init__(self, answer) -> None:
        self.answer = answer

    async def resolve(self, name: str, rdtype: str):
        return self.answer


class TestCommandDrivesProbeRetries:
    """A probe failure left after the probe's own retries is retried by the command."""

    def test_every_command_attempt_runs_the_probe_policy(self) -> None:
        resolver = TimingOutResolver()
        dns_probe = DNSProbe(
            config=QueryConfig(timeout_seconds=1.0, max_retries=1, retry_delay_seconds=0.0),
            resolver=resolver,
        )
        command = make_command(dns_probe, max_retries=2)

        result = asyncio.run(command.run())

        assert resolver.calls == 6
        assert result.status == AvailabilityStatus.ERROR
        assert result.error == "DNS query timed out"
        assert result.retry_count == 2
        assert command.status == CommandStatus.FAILED

    def test_conclusive_answer_is_not_retried(self) -> None:
        probe = DNSProbe(resolver=FixedResolver(["93.184.216.34"]))
        command = make_command(probe, max_retries=2)

        result = asyncio.run(command.run())

        assert result.status == AvailabilityStatus.TAKEN
        assert result.retry_count == 0
        assert command.status == CommandStatus.COMPLETED

