"""Check orchestrator coordinating the probe and statistics phases."""

import asyncio
from typing import Optional, Sequence

import httpx

from sitemap_verifier.checker.http_checker import HTTPChecker
from sitemap_verifier.checker.http_client import AsyncHTTPClient
from sitemap_verifier.checker.parallel_executor import ParallelExecutor, ProgressCallback
from sitemap_verifier.checker.retry_handler import RetryHandler
from sitemap_verifier.models.config import CheckerConfig
from sitemap_verifier.models.data_models import CheckResult, URLEntry
from sitemap_verifier.monitoring.logger import StructuredLogger
from sitemap_verifier.processor import calculate_stats


class CheckOrchestrator:
    """Orchestrates one verification run."""

    def __init__(
        self,
        config: CheckerConfig,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        logger: Optional[StructuredLogger] = None
    ):
        """
        Initialize orchestrator with checker configuration.

        Args:
            config: Checker configuration object
            transport: Optional httpx transport override (tests, proxies)
            logger: Optional structured logger (built from config if omitted)
        """
        self.config = config
        self.transport = transport
        self.logger = logger or StructuredLogger(level=config.log_level)
        self.cancel_event = asyncio.Event()

    def cancel(self) -> None:
        """Stop admitting new checks and retries for the running batch."""
        self.cancel_event.set()

    async def run(
        self,
        entries: Sequence[URLEntry],
        source: str = "",
        on_progress: Optional[ProgressCallback] = None
    ) -> CheckResult:
        """
        Run the complete check: probe all URLs → aggregate statistics.

        Enforces total_timeout from configuration when set.

        Returns:
            CheckResult with outcomes, summary and duration

        Raises:
            asyncio.TimeoutError: If the batch exceeds total_timeout
        """
        if self.config.total_timeout is None:
            return await self._run_batch(entries, source, on_progress)

        try:
            return await asyncio.wait_for(
                self._run_batch(entries, source, on_progress),
                timeout=self.config.total_timeout
            )
        except asyncio.TimeoutError:
            self.logger.log("pipeline_timeout", timeout=self.config.total_timeout)
            raise

    async def _run_batch(
        self,
        entries: Sequence[URLEntry],
        source: str,
        on_progress: Optional[ProgressCallback]
    ) -> CheckResult:
        """Internal batch execution without timeout wrapper."""
        loop = asyncio.get_running_loop()
        start = loop.time()

        retry_handler = RetryHandler(
            max_retries=self.config.max_retries,
            base_delay_ms=self.config.retry_delay_ms,
            backoff_multiplier=self.config.backoff_multiplier,
            max_delay_ms=self.config.max_backoff_delay_ms,
            retryable_status_codes=self.config.retryable_status_codes,
            cancel_event=self.cancel_event,
            logger=self.logger
        )

        async with AsyncHTTPClient(
            request_timeout=self.config.request_timeout,
            max_redirects=self.config.max_redirects,
            user_agent=self.config.user_agent,
            max_connections=self.config.max_parallel,
            transport=self.transport
        ) as http_client:
            checker = HTTPChecker(http_client, retry_handler, logger=self.logger)
            executor = ParallelExecutor(
                checker,
                max_parallel=self.config.max_parallel,
                cancel_event=self.cancel_event,
                logger=self.logger
            )
            outcomes = await executor.execute_parallel(entries, on_progress=on_progress)

        return CheckResult(
            source=source,
            outcomes=outcomes,
            summary=calculate_stats(outcomes),
            duration_seconds=loop.time() - start
        )
