"""
Property-based tests for the batch controller.

Checks failure isolation, input ordering, the concurrency bound inside a
chunk and fail-fast behavior.
"""

import asyncio

from hypothesis import given, settings
from hypothesis import strategies as st

from domain_sweep.batch_controller import BatchCheckController
from domain_sweep.config import BatchConfig, RetryConfig
from domain_sweep.enums import AvailabilityStatus, CheckMethod
from domain_sweep.exceptions import NetworkError
from domain_sweep.models import DomainResult


class NoSleep:
    async def __call__(self, delay: float) -> None:
        return None


class TrackingProbe:
    """Raises for domains starting with 'fail', records peak concurrency."""

    check_method = CheckMethod.DNS

    def __init__(self, delay: float = 0.0) -> None:
        self.delay = delay
        self.in_flight = 0
        self.peak = 0
        self.checked: list[str] = []

    async def check_domain(self, domain: str, raise_on_failure: bool = False) -> DomainResult:
        self.in_flight += 1
        self.peak = max(self.peak, self.in_flight)
        try:
            await asyncio.sleep(self.delay)
            self.checked.append(domain)
            if domain.startswith("fail"):
                raise NetworkError("network_error", f"cannot reach {domain}")
            base, _, tld = domain.partition(".")
            return DomainResult(
                domain=domain,
                base_domain=base,
                tld=f".{tld}",
                status=AvailabilityStatus.AVAILABLE,
                check_method=self.check_method,
            )
        finally:
            self.in_flight -= 1


def make_controller(probe, batch_size=10, max_concurrency=5, fail_fast=False, max_retries=0):
    return BatchCheckController(
        probe,
        BatchConfig(
            batch_size=batch_size,
            max_concurrency=max_concurrency,
            batch_delay_seconds=0.0,
            fail_fast=fail_fast,
        ),
        RetryConfig(max_retries=max_retries, initial_delay_seconds=0.0),
        retry_sleep=NoSleep(),
    )


class TestFailureIsolation:
    def test_invalid_domain_does_not_affect_others(self) -> None:
        probe = TrackingProbe()
        batch = asyncio.run(make_controller(probe).check_domains(
            ["good1.com", "bad@domain", "good2.com"]
        ))

        assert [r.domain for r in batch.results] == ["good1.com", "bad@domain", "good2.com"]
        assert [r.domain for r in batch.successful] == ["good1.com", "good2.com"]
        assert [f.domain for f in batch.failed] == ["bad@domain"]
        assert batch.results[1].status == AvailabilityStatus.ERROR
        assert batch.success_rate == 2 / 3 * 100
        assert probe.checked.count("bad@domain") == 0

    def test_failed_probe_recorded_with_error(self) -> None:
        probe = TrackingProbe()
        batch = asyncio.run(make_controller(probe, max_retries=2).check_domains(
            ["ok.com", "fail.com"]
        ))

        assert batch.failed[0].domain == "fail.com"
        assert batch.failed[0].error == "cannot reach fail.com"
        assert batch.results[1].retry_count == 2
        assert probe.checked.count("fail.com") == 3

    def test_empty_batch(self) -> None:
        batch = asyncio.run(make_controller(TrackingProbe()).check_domains([]))

        assert batch.results == []
        assert batch.total_domains == 0
        assert batch.success_rate == 0.0


class TestSchedulingProperties:
    @given(
        count=st.integers(min_value=1, max_value=25),
        batch_size=st.integers(min_value=1, max_value=10),
        max_concurrency=st.integers(min_value=1, max_value=6),
    )
    @settings(max_examples=30, deadline=None)
    def test_order_and_concurrency_bound(self, count: int, batch_size: int, max_concurrency: int) -> None:
        probe = TrackingProbe(delay=0.001)
        domains = [f"site{i}.com" for i in range(count)]

        batch = asyncio.run(
            make_controller(probe, batch_size, max_concurrency).check_domains(domains)
        )

        assert [r.domain for r in batch.results] == domains
        assert batch.total_domains == count
        assert batch.success_rate == 100.0
        assert probe.peak <= min(max_concurrency, batch_size)

    def test_chunks_run_sequentially(self) -> None:
        probe = TrackingProbe(delay=0.01)
        domains = [f"d{i}.com" for i in range(6)]

        asyncio.run(make_controller(probe, batch_size=2, max_concurrency=10).check_domains(domains))

        assert probe.peak == 2
        assert sorted(probe.checked[:2]) == ["d0.com", "d1.com"]


class TestFailFast:
    def test_stops_after_failing_chunk(self) -> None:
        probe = TrackingProbe()
        domains = ["a.com", "fail.com", "c.com", "d.com", "e.com"]

        batch = asyncio.run(
            make_controller(probe, batch_size=2, fail_fast=True).check_domains(domains)
        )

        assert [r.domain for r in batch.results] == ["a.com", "fail.com"]
        assert batch.total_domains == 5
        assert "c.com" not in probe.checked

    def test_without_fail_fast_everything_runs(self) -> None:
        probe = TrackingProbe()
        domains = ["a.com", "fail.com", "c.com", "d.com"]

        batch = asyncio.run(make_controller(probe, batch_size=2).check_domains(domains))

        assert len(batch.results) == 4
        assert len(batch.failed) == 1


class TestCancellation:
    def test_cancel_skips_remaining_chunks(self) -> None:
        probe = TrackingProbe(delay=0.02)
        controller = make_controller(probe, batch_size=2, max_concurrency=2)
        domains = [f"d{i}.com" for i in range(6)]

        async def scenario():
            task = asyncio.ensure_future(controller.check_domains(domains))
            await asyncio.sleep(0.005)
            controller.cancel()
            return await task

        batch = asyncio.run(scenario())

        assert len(batch.results) == 2
        assert all(r.status == AvailabilityStatus.ERROR for r in batch.results)
        assert batch.successful == []

    def test_batch_config_update(self) -> None:
        controller = make_controller(TrackingProbe())
        controller.update_batch_config(BatchConfig(batch_size=3))

        assert controller.batch_config.batch_size == 3
