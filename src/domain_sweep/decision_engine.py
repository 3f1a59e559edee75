"""
Decision Engine for the hybrid availability strategy.

This module holds the pure policy that combines a DNS result with an optional
WHOIS result. DNS is fast but can only say "something resolves"; WHOIS is slow
but authoritative, so a conclusive WHOIS answer always wins.

Policy:
- DNS AVAILABLE: AVAILABLE, WHOIS is not consulted
- DNS TAKEN: WHOIS confirms; an inconclusive WHOIS keeps TAKEN with a note
- DNS ERROR: WHOIS decides; UNKNOWN stays UNKNOWN, a WHOIS failure is an ERROR
  naming both causes
"""

from dataclasses import dataclass
from typing import Optional

from .enums import AvailabilityStatus
from .models import DomainResult, WhoisData


@dataclass
class HybridDecision:
    """Combined outcome of the DNS and WHOIS stages."""

    status: AvailabilityStatus
    error: Optional[str] = None
    note: Optional[str] = None
    whois_data: Optional[WhoisData] = None


class DecisionEngine:
    """Stateless combination of DNS and WHOIS results."""

    def needs_whois(self, dns_result: DomainResult) -> bool:
        """WHOIS is skipped only when DNS already reports the domain available."""
        return dns_result.status != AvailabilityStatus.AVAILABLE

    def evaluate(
        self,
        dns_result: DomainResult,
        whois_result: Optional[DomainResult] = None,
        whois_error: Optional[Exception] = None,
    ) -> HybridDecision:
        """
        Combine the DNS result with the WHOIS stage.

        Args:
            dns_result: Result of the DNS probe
            whois_result: Result of the WHOIS probe, if it produced one
            whois_error: Exception raised by the WHOIS stage, if any

        Returns:
            HybridDecision with the final status and any error or note
        """
        if not self.needs_whois(dns_result):
            return HybridDecision(status=AvailabilityStatus.AVAILABLE)

        if whois_result is not None and whois_result.status.is_conclusive:
            return HybridDecision(
                status=whois_result.status,
                whois_data=whois_result.whois_data,
            )

        whois_reason = self._whois_failure_reason(whois_result, whois_error)

        if dns_result.status == AvailabilityStatus.TAKEN:
            return HybridDecision(
                status=AvailabilityStatus.TAKEN,
                note=f"WHOIS confirmation failed: {whois_reason}",
            )

        if dns_result.status == AvailabilityStatus.ERROR:
            if whois_result is not None and whois_result.status == AvailabilityStatus.UNKNOWN:
                return HybridDecision(
                    status=AvailabilityStatus.UNKNOWN,
                    note=f"DNS query failed: {dns_result.error}",
                )
            return HybridDecision(
                status=AvailabilityStatus.ERROR,
                error=(
                    "Both DNS and WHOIS queries failed. "
                    f"DNS: {dns_result.error}, WHOIS: {whois_reason}"
                ),
            )

        return HybridDecision(status=dns_result.status, error=dns_result.error)

    def sources_disagree(
        self,
        dns_result: DomainResult,
        whois_result: Optional[DomainResult],
    ) -> bool:
        """
        True when both stages are conclusive and contradict each other.

        The usual case is a parked or expired domain that still resolves
        while WHOIS reports it free.
        """
        if whois_result is None:
            return False
        if not (dns_result.status.is_conclusive and whois_result.status.is_conclusive):
            return False
        return dns_result.status != whois_result.status

    @staticmethod
    def _whois_failure_reason(
        whois_result: Optional[DomainResult],
        whois_error: Optional[Exception],
    ) -> str:
        if whois_error is not None:
            return str(whois_error)
        if whois_result is None:
            return "no WHOIS result"
        if whois_result.status == AvailabilityStatus.UNKNOWN:
            return "WHOIS response was inconclusive"
        return whois_result.error or f"WHOIS returned {whois_result.status.value}"
