"""
Enumeration types for the domain sweep system.

These enums provide type-safe constants for availability states, check
methods, command lifecycle states and validation error codes.
"""

from enum import Enum


class AvailabilityStatus(Enum):
    """Availability status of a single fully-qualified domain."""

    AVAILABLE = "available"
    TAKEN = "taken"
    CHECKING = "checking"
    ERROR = "error"
    UNKNOWN = "unknown"

    @property
    def is_terminal(self) -> bool:
        """True for every status except CHECKING."""
        return self is not AvailabilityStatus.CHECKING

    @property
    def is_conclusive(self) -> bool:
        """True when the status answers the availability question."""
        return self in (AvailabilityStatus.AVAILABLE, AvailabilityStatus.TAKEN)


class CheckMethod(Enum):
    """Network technique used to produce a result."""

    DNS = "dns"
    WHOIS = "whois"
    HYBRID = "hybrid"


class CommandStatus(Enum):
    """Lifecycle of a per-domain check command."""

    PENDING = "pending"
    EXECUTING = "executing"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"


class LogLevel(Enum):
    """Logging severity levels."""

    DEBUG = "debug"
    INFO = "info"
    WARN = "warn"
    ERROR = "error"


class DomainValidationErrorCode(Enum):
    """Error codes for domain validation failures."""

    EMPTY_INPUT = "empty_input"
    INVALID_LENGTH = "invalid_length"
    INVALID_CHARACTERS = "invalid_characters"
    INVALID_FORMAT = "invalid_format"
    RESERVED_FORMAT = "reserved_format"
    ALL_NUMERIC = "all_numeric"
    IDNA_ERROR = "idna_error"
