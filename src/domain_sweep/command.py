"""
Per-domain check command.

A DomainCheckCommand binds one domain to one probe and a retry policy, and
tracks its own lifecycle:

    PENDING -> EXECUTING -> COMPLETED | FAILED | CANCELLED

FAILED may return to EXECUTING while retries remain. Nothing leaves
COMPLETED or CANCELLED.
"""

import dataclasses
import time
import uuid
from dataclasses import dataclass, field
from typing import Optional

from .config import RetryConfig
from .domain_validator import DomainValidator, split_domain_lenient
from .enums import AvailabilityStatus, CommandStatus, LogLevel
from .exceptions import CommandCancelledError, CommandStateError, ValidationError
from .models import DomainResult, utc_now
from .probe import BaseProbe
from .retry_manager import RetryManager, Sleep
from .structured_logger import StructuredLogger


@dataclass
class CommandMetadata:
    """Bookkeeping for one command."""

    command_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    created_at: str = field(default_factory=utc_now)
    last_executed_at: Optional[str] = None
    completed_at: Optional[str] = None
    execution_time_ms: Optional[float] = None
    retry_count: int = 0
    priority: int = 0


class DomainCheckCommand:
    """Checks one domain with one probe under a retry policy."""

    _validator = DomainValidator()

    def __init__(
        self,
        domain: str,
        probe: BaseProbe,
        retry_config: Optional[RetryConfig] = None,
        priority: int = 0,
        logger: Optional[StructuredLogger] = None,
        retry_sleep: Optional[Sleep] = None,
    ) -> None:
        """
        Initialize the command.

        Args:
            domain: Full domain to check, e.g. 'example.com'
            probe: Probe used for every attempt
            retry_config: Command-level retry policy (defaults to RetryConfig())
            priority: Informational priority carried in the metadata
            logger: Optional structured logger
            retry_sleep: Awaitable used between retries (defaults to asyncio.sleep)
        """
        self._domain = domain
        self._probe = probe
        self._retry_config = retry_config or RetryConfig()
        self._logger = logger
        self._retry_sleep = retry_sleep
        self._status = CommandStatus.PENDING
        self._metadata = CommandMetadata(priority=priority)

    @property
    def domain(self) -> str:
        return self._domain

    @property
    def probe(self) -> BaseProbe:
        return self._probe

    @property
    def status(self) -> CommandStatus:
        return self._status

    @property
    def retry_config(self) -> RetryConfig:
        return self._retry_config

    @property
    def retry_count(self) -> int:
        return self._metadata.retry_count

    @property
    def metadata(self) -> CommandMetadata:
        return dataclasses.replace(self._metadata)

    @property
    def name(self) -> str:
        return f"DomainCheck:{self._domain}"

    @property
    def description(self) -> str:
        return (
            f"Check availability of domain '{self._domain}' "
            f"using {self._probe.check_method.name} strategy"
        )

    def set_retry_config(self, config: RetryConfig) -> None:
        """
        Replace the retry policy.

        Raises:
            CommandStateError: If the command has already started
        """
        if self._status != CommandStatus.PENDING:
            raise CommandStateError(
                "not_pending",
                f"Retry config can only change while pending (status: {self._status.value})",
                {"domain": self._domain},
            )
        self._retry_config = config

    def validate(self) -> bool:
        """
        Check that the bound domain is well formed.

        Raises:
            ValidationError: If the domain is empty or malformed
        """
        result = self._validator.validate(self._domain)
        if not result.valid:
            raise ValidationError(
                code=result.error.code.value,
                message=result.error.message,
                details=result.error.details,
            )
        return True

    def cancel(self) -> bool:
        """
        Request cancellation.

        An attempt already in flight is not interrupted; its result is
        discarded when it returns. Returns False if the command had already
        finished.
        """
        if self._status in (CommandStatus.PENDING, CommandStatus.EXECUTING):
            self._status = CommandStatus.CANCELLED
            self._log(LogLevel.INFO, f"Cancelled check for {self._domain}")
            return True
        return False

    def can_retry(self) -> bool:
        return (
            self._metadata.retry_count < self._retry_config.max_retries
            and self._status not in (CommandStatus.COMPLETED, CommandStatus.CANCELLED)
        )

    async def execute(self) -> DomainResult:
        """
        Run a single attempt.

        Raises:
            CommandCancelledError: If the command was cancelled before or during the attempt
            CommandStateError: If the command already completed
            Exception: Whatever the probe raised, including a transient failure
                       left after the probe's own retries
        """
        if self._status == CommandStatus.CANCELLED:
            raise CommandCancelledError(self._domain)
        if self._status == CommandStatus.COMPLETED:
            raise CommandStateError(
                "already_completed",
                f"Check for {self._domain} already completed",
                {"domain": self._domain},
            )

        self._status = CommandStatus.EXECUTING
        self._metadata.last_executed_at = utc_now()
        start_time = time.perf_counter()

        try:
            result = await self._probe.check_domain(self._domain, raise_on_failure=True)
        except Exception:
            self._metadata.execution_time_ms = (time.perf_counter() - start_time) * 1000
            if self._status != CommandStatus.CANCELLED:
                self._status = CommandStatus.FAILED
            raise

        self._metadata.execution_time_ms = (time.perf_counter() - start_time) * 1000
        if self._status == CommandStatus.CANCELLED:
            raise CommandCancelledError(self._domain)

        self._status = CommandStatus.COMPLETED
        self._metadata.completed_at = utc_now()
        return dataclasses.replace(
            result, retry_count=result.retry_count + self._metadata.retry_count
        )

    async def execute_with_retry(self) -> DomainResult:
        """
        Run attempts under the retry policy until one succeeds.

        Raises:
            Exception: The last error once retries are exhausted, or a
                       non-retryable error immediately
        """
        manager = RetryManager(self._retry_config, self._retry_sleep)

        def on_retry(attempt: int, error: Exception, delay: float) -> None:
            self._metadata.retry_count = attempt
            self._log(
                LogLevel.INFO,
                f"Retrying {self._domain} in {delay:.2f}s",
                {"attempt": attempt, "error": str(error)},
            )

        outcome = await manager.execute_with_retry(self.execute, on_retry=on_retry)
        self._metadata.retry_count = outcome.retry_count
        if outcome.success:
            return outcome.result
        raise outcome.last_error

    async def run(self) -> DomainResult:
        """
        Validate and execute with retries; never raises.

        Any final failure becomes an ERROR DomainResult carrying the number of
        retries that were made.
        """
        try:
            self.validate()
        except ValidationError as e:
            if self._status == CommandStatus.PENDING:
                self._status = CommandStatus.FAILED
            return self._failure_result(e)

        try:
            return await self.execute_with_retry()
        except Exception as e:
            if self._logger:
                self._logger.log_error(
                    self.__class__.__name__,
                    f"Check failed for {self._domain}",
                    e,
                    {"domain": self._domain, "retry_count": self.retry_count},
                )
            return self._failure_result(e)

    def clone(self) -> "DomainCheckCommand":
        """Fresh PENDING command with the same domain, probe and policy."""
        return DomainCheckCommand(
            self._domain,
            self._probe,
            self._retry_config,
            priority=self._metadata.priority,
            logger=self._logger,
            retry_sleep=self._retry_sleep,
        )

    def _failure_result(self, error: Exception) -> DomainResult:
        base_domain, tld = split_domain_lenient(str(self._domain).strip().lower())
        return DomainResult(
            domain=str(self._domain),
            base_domain=base_domain,
            tld=tld,
            status=AvailabilityStatus.ERROR,
            check_method=self._probe.check_method,
            execution_time_ms=self._metadata.execution_time_ms,
            error=str(error) or type(error).__name__,
            retry_count=self._metadata.retry_count,
        )

    def _log(self, level: LogLevel, message: str, data: Optional[dict] = None) -> None:
        if self._logger:
            payload = {"domain": self._domain}
            payload.update(data or {})
            self._logger.log(level, self.__class__.__name__, message, payload)

    def __repr__(self) -> str:
        return f"DomainCheckCommand(domain={self._domain!r}, status={self._status.value})"
