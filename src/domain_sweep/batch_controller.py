"""
Batch controller for checking many domains.

Domains are split into chunks of `batch_size`. Inside a chunk at most
`max_concurrency` checks are in flight at once (a semaphore sliding window);
chunks run strictly one after another with `batch_delay_seconds` between
them. One domain failing never affects the others unless `fail_fast` is set,
in which case processing stops after the first chunk that contains a failure.
"""

import asyncio
import time
from typing import Optional

from .command import DomainCheckCommand
from .config import BatchConfig, RetryConfig
from .enums import CommandStatus, LogLevel
from .models import BatchResult, DomainResult, FailedCheck
from .probe import BaseProbe
from .retry_manager import Sleep
from .structured_logger import StructuredLogger


class BatchCheckController:
    """Fans a list of domains out into per-domain commands."""

    def __init__(
        self,
        probe: BaseProbe,
        batch_config: Optional[BatchConfig] = None,
        retry_config: Optional[RetryConfig] = None,
        logger: Optional[StructuredLogger] = None,
        retry_sleep: Optional[Sleep] = None,
    ) -> None:
        """
        Initialize the controller.

        Args:
            probe: Probe shared by every command
            batch_config: Chunking and concurrency settings
            retry_config: Command-level retry policy applied to each domain
            logger: Optional structured logger
            retry_sleep: Awaitable used between command retries
        """
        self._probe = probe
        self._batch_config = batch_config or BatchConfig()
        self._retry_config = retry_config or RetryConfig()
        self._logger = logger
        self._retry_sleep = retry_sleep
        self._active: list[DomainCheckCommand] = []
        self._cancelled = False

    @property
    def batch_config(self) -> BatchConfig:
        return self._batch_config

    def update_batch_config(self, config: BatchConfig) -> None:
        self._batch_config = config

    def cancel(self) -> None:
        """Cancel in-flight commands and skip every chunk not yet started."""
        self._cancelled = True
        for command in self._active:
            command.cancel()

    def create_command(self, domain: str) -> DomainCheckCommand:
        return DomainCheckCommand(
            domain,
            self._probe,
            self._retry_config,
            logger=self._logger,
            retry_sleep=self._retry_sleep,
        )

    async def check_domains(self, domains: list[str]) -> BatchResult:
        """
        Check every domain and aggregate the outcome.

        Returns:
            BatchResult with results in input order; a fail-fast or cancelled
            run returns the results gathered so far
        """
        if not domains:
            return BatchResult.empty()

        self._cancelled = False
        start_time = time.perf_counter()
        config = self._batch_config
        chunks = [
            domains[i:i + config.batch_size]
            for i in range(0, len(domains), config.batch_size)
        ]

        successful: list[DomainResult] = []
        failed: list[FailedCheck] = []
        results: list[DomainResult] = []

        for index, chunk in enumerate(chunks):
            if self._cancelled:
                break

            outcomes = await self._process_chunk(chunk)
            chunk_failed = False
            for command, result in outcomes:
                results.append(result)
                if command.status == CommandStatus.COMPLETED:
                    successful.append(result)
                else:
                    chunk_failed = True
                    failed.append(FailedCheck(domain=command.domain, error=result.error or ""))

            self._log(
                LogLevel.DEBUG,
                f"Chunk {index + 1}/{len(chunks)} finished",
                {"size": len(chunk), "failed": len(failed)},
            )

            if config.fail_fast and chunk_failed:
                self._log(
                    LogLevel.WARN,
                    "Stopping batch after failure (fail_fast)",
                    {"first_error": failed[0].error, "processed": len(results)},
                )
                break

            if config.batch_delay_seconds > 0 and index < len(chunks) - 1:
                await asyncio.sleep(config.batch_delay_seconds)

        batch = BatchResult(
            successful=successful,
            failed=failed,
            results=results,
            total_execution_time_ms=(time.perf_counter() - start_time) * 1000,
            total_domains=len(domains),
        )
        self._log(
            LogLevel.INFO,
            f"Batch of {len(domains)} domains finished",
            {"successful": len(successful), "failed": len(failed), "success_rate": batch.success_rate},
        )
        return batch

    async def _process_chunk(
        self, chunk: list[str]
    ) -> list[tuple[DomainCheckCommand, DomainResult]]:
        semaphore = asyncio.Semaphore(self._batch_config.max_concurrency)
        commands = [self.create_command(domain) for domain in chunk]
        self._active = commands

        async def run_one(command: DomainCheckCommand) -> DomainResult:
            async with semaphore:
                if self._cancelled:
                    command.cancel()
                return await command.run()

        try:
            results = await asyncio.gather(*(run_one(c) for c in commands))
        finally:
            self._active = []
        return list(zip(commands, results))

    def _log(self, level: LogLevel, message: str, data: dict) -> None:
        if self._logger:
            self._logger.log(level, self.__class__.__name__, message, data)
