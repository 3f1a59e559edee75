"""
Data models for the domain sweep system.

This module defines the per-domain result, batch aggregation, and the
request/response pair exchanged with callers such as the CLI.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional

from .enums import AvailabilityStatus, CheckMethod


def utc_now() -> str:
    """Current UTC time as an ISO-8601 string."""
    return datetime.now(timezone.utc).isoformat()


@dataclass
class WhoisData:
    """Registration details opportunistically extracted from a WHOIS response."""

    registrar: Optional[str] = None
    expiration_date: Optional[str] = None
    creation_date: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "registrar": self.registrar,
            "expiration_date": self.expiration_date,
            "creation_date": self.creation_date,
        }


@dataclass
class DomainResult:
    """Outcome of checking one fully-qualified domain."""

    domain: str  # e.g. 'example.com'
    base_domain: str  # e.g. 'example'
    tld: str  # e.g. '.com'
    status: AvailabilityStatus
    check_method: CheckMethod
    last_checked: str = field(default_factory=utc_now)
    execution_time_ms: Optional[float] = None
    error: Optional[str] = None  # Set only when status is ERROR
    retry_count: int = 0
    whois_data: Optional[WhoisData] = None
    note: Optional[str] = None  # Non-fatal annotation, e.g. failed confirmation

    def to_dict(self) -> dict:
        """Convert the result to a JSON-serializable dictionary."""
        data = {
            "domain": self.domain,
            "base_domain": self.base_domain,
            "tld": self.tld,
            "status": self.status.value,
            "check_method": self.check_method.value,
            "last_checked": self.last_checked,
            "retry_count": self.retry_count,
        }
        if self.execution_time_ms is not None:
            data["execution_time_ms"] = round(self.execution_time_ms, 3)
        if self.error is not None:
            data["error"] = self.error
        if self.whois_data is not None:
            data["whois_data"] = self.whois_data.to_dict()
        if self.note is not None:
            data["note"] = self.note
        return data


@dataclass(frozen=True)
class FailedCheck:
    """A domain whose check command did not complete."""

    domain: str
    error: str


@dataclass(frozen=True)
class BatchResult:
    """Aggregated outcome of one batch invocation."""

    successful: list[DomainResult]
    failed: list[FailedCheck]
    results: list[DomainResult]
    total_execution_time_ms: float
    total_domains: int

    @property
    def success_rate(self) -> float:
        """Percentage of domains whose command completed; 0 for an empty batch."""
        if self.total_domains == 0:
            return 0.0
        return len(self.successful) / self.total_domains * 100

    def to_dict(self) -> dict:
        return {
            "results": [r.to_dict() for r in self.results],
            "failed": [{"domain": f.domain, "error": f.error} for f in self.failed],
            "total_execution_time_ms": round(self.total_execution_time_ms, 3),
            "total_domains": self.total_domains,
            "success_rate": self.success_rate,
        }

    @classmethod
    def empty(cls) -> "BatchResult":
        return cls(
            successful=[],
            failed=[],
            results=[],
            total_execution_time_ms=0.0,
            total_domains=0,
        )


@dataclass(frozen=True)
class CheckSummary:
    """Status counts for a response."""

    total: int
    available: int
    taken: int
    errors: int
    unknown: int = 0

    @classmethod
    def from_results(cls, results: list[DomainResult]) -> "CheckSummary":
        def count(status: AvailabilityStatus) -> int:
            return sum(1 for r in results if r.status == status)

        return cls(
            total=len(results),
            available=count(AvailabilityStatus.AVAILABLE),
            taken=count(AvailabilityStatus.TAKEN),
            errors=count(AvailabilityStatus.ERROR),
            unknown=count(AvailabilityStatus.UNKNOWN),
        )

    def to_dict(self) -> dict:
        return {
            "total": self.total,
            "available": self.available,
            "taken": self.taken,
            "errors": self.errors,
            "unknown": self.unknown,
        }


@dataclass
class CheckRequest:
    """Inbound request: a base name and an optional TLD list."""

    base_domain: str
    tlds: Optional[list[str]] = None

    @classmethod
    def from_dict(cls, data: dict) -> "CheckRequest":
        return cls(
            base_domain=data.get("base_domain") or data.get("baseDomain") or "",
            tlds=data.get("tlds"),
        )


@dataclass
class CheckResponse:
    """Outbound response for one request."""

    base_domain: str
    results: list[DomainResult]
    execution_time_ms: float
    summary: CheckSummary

    def to_dict(self) -> dict:
        return {
            "base_domain": self.base_domain,
            "results": [r.to_dict() for r in self.results],
            "execution_time_ms": round(self.execution_time_ms, 3),
            "summary": self.summary.to_dict(),
        }
