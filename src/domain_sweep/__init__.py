"""
Domain Sweep - multi-TLD domain availability checker.

This package checks whether a base name is registered across many TLDs,
using fast DNS resolution first and authoritative WHOIS lookups for
confirmation, with per-domain retries and bounded-concurrency batching.
"""

__version__ = "0.1.0"
__author__ = "Domain Sweep Team"

from domain_sweep.exceptions import (
    DomainSweepError,
    ValidationError,
    NetworkError,
    ProbeTimeoutError,
    RateLimitError,
    ResultStateError,
    CommandCancelledError,
    CommandStateError,
)
from domain_sweep.enums import (
    AvailabilityStatus,
    CheckMethod,
    CommandStatus,
    LogLevel,
    DomainValidationErrorCode,
)
from domain_sweep.config import (
    RetryConfig,
    QueryConfig,
    BatchConfig,
    LoggingConfig,
    SystemConfig,
)
from domain_sweep.models import (
    WhoisData,
    DomainResult,
    FailedCheck,
    BatchResult,
    CheckSummary,
    CheckRequest,
    CheckResponse,
)
from domain_sweep.tld_registry import (
    DEFAULT_TLDS,
    EXTENDED_TLDS,
    WHOIS_SERVERS,
    TLDRegistry,
)
from domain_sweep.domain_validator import (
    InputValidator,
    DomainValidator,
    DomainValidationError,
    DomainValidationResult,
    NameValidationResult,
    parse_domain,
)
from domain_sweep.retry_manager import (
    RetryManager,
    RetryResult,
)
from domain_sweep.structured_logger import (
    StructuredLogger,
    LogEntry,
)
from domain_sweep.probe import (
    BaseProbe,
    ProbeOutcome,
)
from domain_sweep.dns_client import DNSProbe
from domain_sweep.whois_client import WHOISProbe
from domain_sweep.decision_engine import (
    DecisionEngine,
    HybridDecision,
)
from domain_sweep.hybrid_probe import HybridProbe
from domain_sweep.command import (
    DomainCheckCommand,
    CommandMetadata,
)
from domain_sweep.batch_controller import BatchCheckController
from domain_sweep.result_store import (
    ResultAggregator,
    ResultsSummary,
    PerformanceAnalytics,
)
from domain_sweep.orchestrator import (
    DomainQueryEngine,
    build_probe,
)
from domain_sweep.cli import (
    main as cli_main,
    create_parser,
    create_default_config,
    load_config_from_env,
    load_config_from_file,
    save_config_to_file,
)

__all__ = [
    "__version__",
    # Exceptions
    "DomainSweepError",
    "ValidationError",
    "NetworkError",
    "ProbeTimeoutError",
    "RateLimitError",
    "ResultStateError",
    "CommandCancelledError",
    "CommandStateError",
    # Enums
    "AvailabilityStatus",
    "CheckMethod",
    "CommandStatus",
    "LogLevel",
    "DomainValidationErrorCode",
    # Config
    "RetryConfig",
    "QueryConfig",
    "BatchConfig",
    "LoggingConfig",
    "SystemConfig",
    # Models
    "WhoisData",
    "DomainResult",
    "FailedCheck",
    "BatchResult",
    "CheckSummary",
    "CheckRequest",
    "CheckResponse",
    # TLD Registry
    "DEFAULT_TLDS",
    "EXTENDED_TLDS",
    "WHOIS_SERVERS",
    "TLDRegistry",
    # Domain Validator
    "InputValidator",
    "DomainValidator",
    "DomainValidationError",
    "DomainValidationResult",
    "NameValidationResult",
    "parse_domain",
    # Retry Manager
    "RetryManager",
    "RetryResult",
    # Structured Logger
    "StructuredLogger",
    "LogEntry",
    # Probes
    "BaseProbe",
    "ProbeOutcome",
    "DNSProbe",
    "WHOISProbe",
    "HybridProbe",
    # Decision Engine
    "DecisionEngine",
    "HybridDecision",
    # Command
    "DomainCheckCommand",
    "CommandMetadata",
    # Batch Controller
    "BatchCheckController",
    # Result Store
    "ResultAggregator",
    "ResultsSummary",
    "PerformanceAnalytics",
    # Orchestrator
    "DomainQueryEngine",
    "build_probe",
    # CLI
    "cli_main",
    "create_parser",
    "create_default_config",
    "load_config_from_env",
    "load_config_from_file",
    "save_config_to_file",
]
