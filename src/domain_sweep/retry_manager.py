"""
Retry Manager for the domain sweep system.

This module wraps any probe call in two composable policies:

- a timeout race, where an attempt that outlives its budget is abandoned
  (left to finish on its own, no longer awaited) and reported as a timeout;
- a retry loop with flat or exponential backoff, capped at a maximum delay.

Every attempt gets a fresh timeout window; the timeout is not a deadline
across all retries.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Awaitable, Callable, Generic, Optional, TypeVar

from .config import RetryConfig
from .exceptions import ProbeTimeoutError

T = TypeVar("T")

Sleep = Callable[[float], Awaitable[None]]
RetryHook = Callable[[int, Exception, float], None]


@dataclass
class RetryResult(Generic[T]):
    """Result of a retry operation."""

    success: bool
    result: Optional[T]
    attempts: int
    last_error: Optional[Exception]

    @property
    def retry_count(self) -> int:
        """Attempts beyond the first one."""
        return max(self.attempts - 1, 0)


def _consume_abandoned(task: asyncio.Future) -> None:
    # Retrieve the outcome of an abandoned attempt so it is not reported as unhandled
    if not task.cancelled():
        task.exception()


class RetryManager:
    """
    Manages timeout and retry logic with optional exponential backoff.

    Probe-agnostic: DNS, WHOIS, hybrid checks and per-domain commands all run
    through the same loop.
    """

    def __init__(self, config: RetryConfig, sleep: Optional[Sleep] = None) -> None:
        """
        Initialize the retry manager.

        Args:
            config: Retry configuration
            sleep: Awaitable used between attempts (defaults to asyncio.sleep)
        """
        self._config = config
        self._sleep = sleep or asyncio.sleep

    @property
    def config(self) -> RetryConfig:
        return self._config

    def _calculate_delay(self, attempt: int) -> float:
        """
        Calculate wait time before retry number `attempt` (0-indexed).

        Flat: initial_delay. Exponential: initial_delay * multiplier^attempt,
        capped at max_delay.
        """
        if not self._config.use_exponential_backoff:
            return self._config.initial_delay_seconds

        delay = self._config.initial_delay_seconds * (
            self._config.backoff_multiplier ** attempt
        )
        return min(delay, self._config.max_delay_seconds)

    def is_retryable_error(self, error: Exception) -> bool:
        """
        Honor the `retryable` flag of domain sweep errors.

        Validation, cancellation and state errors are not retryable; foreign
        exceptions (socket errors, resolver failures) are.
        """
        return getattr(error, "retryable", True)

    async def run_with_timeout(
        self,
        operation: Callable[[], Awaitable[T]],
        timeout: Optional[float],
    ) -> T:
        """
        Race an operation against a timer.

        The operation is not cancelled when the timer wins; it keeps running
        in the background and its eventual outcome is discarded.

        Raises:
            ProbeTimeoutError: If the timer fires first
        """
        if timeout is None or timeout <= 0:
            return await operation()

        task = asyncio.ensure_future(operation())
        done, _ = await asyncio.wait({task}, timeout=timeout)
        if task in done:
            return task.result()

        task.add_done_callback(_consume_abandoned)
        raise ProbeTimeoutError(details={"timeout_seconds": timeout})

    async def execute_with_retry(
        self,
        operation: Callable[[], Awaitable[T]],
        timeout: Optional[float] = None,
        is_retryable: Optional[Callable[[Exception], bool]] = None,
        on_retry: Optional[RetryHook] = None,
    ) -> RetryResult[T]:
        """
        Execute an operation with per-attempt timeout and retry logic.

        Args:
            operation: The async operation to execute
            timeout: Per-attempt timeout in seconds; None disables the race
            is_retryable: Decides whether an exception is worth another attempt.
                          Defaults to is_retryable_error.
            on_retry: Called with (attempt_number, error, delay) before each retry sleep

        Returns:
            RetryResult containing success status, result, attempts, and last error
        """
        check = is_retryable or self.is_retryable_error
        last_error: Optional[Exception] = None
        attempts = 0

        # Total attempts = 1 initial + max_retries
        max_attempts = self._config.max_retries + 1

        while attempts < max_attempts:
            try:
                result = await self.run_with_timeout(operation, timeout)
                return RetryResult(
                    success=True,
                    result=result,
                    attempts=attempts + 1,
                    last_error=None,
                )
            except Exception as e:
                last_error = e
                attempts += 1

                if not check(e) or attempts >= max_attempts:
                    break

                delay = self._calculate_delay(attempts - 1)
                if on_retry is not None:
                    on_retry(attempts, e, delay)
                await self._sleep(delay)

        return RetryResult(
            success=False,
            result=None,
            attempts=attempts,
            last_error=last_error,
        )

    async def run(
        self,
        operation: Callable[[], Awaitable[T]],
        timeout: Optional[float] = None,
        is_retryable: Optional[Callable[[Exception], bool]] = None,
    ) -> T:
        """
        Like execute_with_retry, but return the value or raise the last error.
        """
        outcome = await self.execute_with_retry(operation, timeout, is_retryable)
        if outcome.success:
            return outcome.result  # type: ignore[return-value]
        assert outcome.last_error is not None
        raise outcome.last_error
