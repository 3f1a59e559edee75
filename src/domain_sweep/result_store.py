"""
In-memory result aggregation for one request.

ResultAggregator keeps exactly one DomainResult per full domain. Results are
seeded as CHECKING and may only move to a terminal status; a terminal result
is never overwritten.
"""

from dataclasses import dataclass
from typing import Iterable, Optional

from .enums import AvailabilityStatus, CheckMethod
from .exceptions import ResultStateError
from .models import DomainResult
from .tld_registry import TLDRegistry


@dataclass(frozen=True)
class ResultsSummary:
    """Status counts over every tracked domain."""

    total: int
    available: int
    taken: int
    checking: int
    errors: int
    unknown: int
    completed: int

    def to_dict(self) -> dict:
        return {
            "total": self.total,
            "available": self.available,
            "taken": self.taken,
            "checking": self.checking,
            "errors": self.errors,
            "unknown": self.unknown,
            "completed": self.completed,
        }


@dataclass(frozen=True)
class PerformanceAnalytics:
    """Timing statistics over results that did not end in ERROR."""

    fastest_check_time_ms: Optional[float]
    average_check_time_ms: Optional[float]
    success_rate: float

    def to_dict(self) -> dict:
        return {
            "fastest_check_time_ms": self.fastest_check_time_ms,
            "average_check_time_ms": self.average_check_time_ms,
            "success_rate": self.success_rate,
        }


class ResultAggregator:
    """Map of full domain -> DomainResult with one-way status transitions."""

    def __init__(self, registry: Optional[TLDRegistry] = None) -> None:
        self._registry = registry or TLDRegistry()
        self._results: dict[str, DomainResult] = {}

    def initialize(
        self, base_domain: str, tlds: Optional[Iterable[str]] = None
    ) -> list[DomainResult]:
        """
        Seed a CHECKING result for every base_domain + TLD combination.

        Any previous content is discarded.

        Raises:
            ValidationError: If the base name is empty
        """
        self._results.clear()
        base = base_domain.strip().lower() if isinstance(base_domain, str) else base_domain
        seeded = []
        for domain in self._registry.construct_domains(base_domain, tlds):
            result = DomainResult(
                domain=domain,
                base_domain=base,
                tld=domain[len(base):],
                status=AvailabilityStatus.CHECKING,
                check_method=CheckMethod.HYBRID,
            )
            self._results[domain] = result
            seeded.append(result)
        return seeded

    def update(self, result: DomainResult) -> None:
        """
        Record a result for its domain.

        Raises:
            ResultStateError: If the stored result is already terminal, or the
                              new result would move a domain back to CHECKING
        """
        current = self._results.get(result.domain)
        if current is not None and current.status.is_terminal:
            raise ResultStateError(
                "terminal_result",
                f"Result for {result.domain} is already {current.status.value}",
                {"domain": result.domain, "status": current.status.value},
            )
        if current is not None and not result.status.is_terminal:
            raise ResultStateError(
                "not_terminal",
                f"Result for {result.domain} can only move to a terminal status",
                {"domain": result.domain},
            )
        self._results[result.domain] = result

    def get(self, domain: str) -> Optional[DomainResult]:
        return self._results.get(domain.lower())

    def all_results(self) -> list[DomainResult]:
        """Results in the order their domains were first recorded."""
        return list(self._results.values())

    def results_by_status(self, status: AvailabilityStatus) -> list[DomainResult]:
        return [r for r in self._results.values() if r.status == status]

    def summary(self) -> ResultsSummary:
        results = self.all_results()

        def count(status: AvailabilityStatus) -> int:
            return sum(1 for r in results if r.status == status)

        return ResultsSummary(
            total=len(results),
            available=count(AvailabilityStatus.AVAILABLE),
            taken=count(AvailabilityStatus.TAKEN),
            checking=count(AvailabilityStatus.CHECKING),
            errors=count(AvailabilityStatus.ERROR),
            unknown=count(AvailabilityStatus.UNKNOWN),
            completed=sum(1 for r in results if r.status.is_terminal),
        )

    def is_complete(self) -> bool:
        return all(r.status.is_terminal for r in self._results.values())

    def retryable_domains(self, max_retries: int = 3) -> list[str]:
        """Domains that ended in ERROR with fewer than `max_retries` retries."""
        return [
            r.domain
            for r in self._results.values()
            if r.status == AvailabilityStatus.ERROR and r.retry_count < max_retries
        ]

    def performance_analytics(self) -> PerformanceAnalytics:
        results = self.all_results()
        timed = [
            r.execution_time_ms
            for r in results
            if r.execution_time_ms is not None and r.status != AvailabilityStatus.ERROR
        ]

        if not timed:
            return PerformanceAnalytics(None, None, 0.0)

        return PerformanceAnalytics(
            fastest_check_time_ms=min(timed),
            average_check_time_ms=sum(timed) / len(timed),
            success_rate=len(timed) / len(results) * 100,
        )

    def reset(self) -> None:
        self._results.clear()

    def __len__(self) -> int:
        return len(self._results)
