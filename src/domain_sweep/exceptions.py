"""
Exception classes for the domain sweep system.

All exceptions inherit from DomainSweepError and provide structured
error information with codes, messages, and optional details.
"""

from typing import Optional


class DomainSweepError(Exception):
    """Base exception for all domain sweep errors."""

    retryable = False

    def __init__(
        self,
        code: str,
        message: str,
        details: Optional[dict] = None,
    ) -> None:
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code!r}, message={self.message!r})"

    def to_dict(self) -> dict:
        """Convert exception to dictionary for serialization."""
        return {
            "error_type": self.__class__.__name__,
            "code": self.code,
            "message": self.message,
            "details": self.details,
        }


class ValidationError(DomainSweepError):
    """Raised when a base name or full domain is malformed. Never retried."""

    pass


class NetworkError(DomainSweepError):
    """Raised when a probe hits a transient network condition."""

    retryable = True


class ProbeTimeoutError(NetworkError):
    """Raised when a probe attempt loses the race against its timeout."""

    def __init__(
        self,
        message: str = "Operation timed out",
        details: Optional[dict] = None,
    ) -> None:
        super().__init__("timeout", message, details)


class RateLimitError(NetworkError):
    """Raised when an upstream server reports rate limiting or quota exhaustion."""

    def __init__(
        self,
        message: str = "WHOIS rate limit exceeded",
        details: Optional[dict] = None,
    ) -> None:
        super().__init__("rate_limited", message, details)


class ResultStateError(DomainSweepError):
    """Raised when a terminal result would be overwritten."""

    pass


class CommandCancelledError(DomainSweepError):
    """Raised when a cancelled command is asked to execute."""

    def __init__(self, domain: str) -> None:
        super().__init__(
            "cancelled",
            f"Check for {domain} was cancelled",
            {"domain": domain},
        )


class CommandStateError(DomainSweepError):
    """Raised when a command is used in a lifecycle state that forbids the call."""

    pass
