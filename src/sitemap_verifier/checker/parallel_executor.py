"""Bounded-concurrency execution of URL checks."""

import asyncio
from typing import Awaitable, Callable, List, Optional, Protocol, Sequence

from sitemap_verifier.models.data_models import (
    Category,
    OutcomeRecord,
    ProgressEvent,
    URLEntry,
)


class URLChecker(Protocol):
    """Anything that turns a URL into an OutcomeRecord."""

    def check_url(self, url: str) -> Awaitable[OutcomeRecord]:
        ...


ProgressCallback = Callable[[ProgressEvent], None]


class ParallelExecutor:
    """
    Runs one check pipeline per URL entry under a fixed concurrency ceiling.

    A pipeline holds its semaphore slot for its whole lifetime, retries and
    backoff sleeps included, so max_parallel bounds simultaneous outbound
    connections. Results are index-aligned with the input regardless of the
    order in which pipelines finish.
    """

    def __init__(
        self,
        checker: URLChecker,
        max_parallel: int = 10,
        cancel_event: Optional[asyncio.Event] = None,
        logger=None
    ):
        """
        Initialize executor.

        Args:
            checker: Runs a full (retrying) check for one URL
            max_parallel: Maximum number of concurrently running pipelines
            cancel_event: Shared cancellation signal; created if not given
            logger: Optional structured logger
        """
        if max_parallel < 1:
            raise ValueError(f"max_parallel must be positive, got: {max_parallel}")
        self.checker = checker
        self.max_parallel = max_parallel
        self.cancel_event = cancel_event or asyncio.Event()
        self.logger = logger

    def cancel(self) -> None:
        """Stop admitting new pipelines and new retry attempts."""
        self.cancel_event.set()

    async def execute_parallel(
        self,
        entries: Sequence[URLEntry],
        on_progress: Optional[ProgressCallback] = None
    ) -> List[OutcomeRecord]:
        """
        Check all entries with bounded concurrency.

        Args:
            entries: Ordered URL entries
            on_progress: Called once per finished pipeline, in completion order

        Returns:
            One OutcomeRecord per entry, at the entry's index
        """
        total = len(entries)
        semaphore = asyncio.Semaphore(self.max_parallel)
        results: List[Optional[OutcomeRecord]] = [None] * total
        completed = 0

        if self.logger:
            self.logger.batch_start(total=total, max_parallel=self.max_parallel)
        loop = asyncio.get_running_loop()
        start = loop.time()

        async def run_pipeline(index: int, entry: URLEntry) -> None:
            nonlocal completed
            async with semaphore:
                results[index] = await self._run_one(entry.url)

            # Runs on the event loop thread; no lock needed for the counter
            completed += 1
            if on_progress:
                self._notify(on_progress, ProgressEvent(
                    completed_count=completed,
                    total=total,
                    url=entry.url,
                    status_code=results[index].status_code
                ))

        await asyncio.gather(*(
            run_pipeline(index, entry) for index, entry in enumerate(entries)
        ))

        if self.logger:
            self.logger.batch_complete(total=total, elapsed_ms=(loop.time() - start) * 1000)

        return list(results)

    async def _run_one(self, url: str) -> OutcomeRecord:
        """Run one pipeline, converting internal faults into records."""
        if self.cancel_event.is_set():
            return self._error_record(url, "Cancelled")

        try:
            return await self.checker.check_url(url)
        except Exception as e:
            if self.logger:
                self.logger.pipeline_fault(url, str(e))
            return self._error_record(url, str(e) or type(e).__name__)

    def _notify(self, on_progress: ProgressCallback, event: ProgressEvent) -> None:
        try:
            on_progress(event)
        except Exception as e:
            # Progress is advisory; a broken callback must not fail the batch
            if self.logger:
                self.logger.log("progress_callback_error", url=event.url, error=str(e))

    @staticmethod
    def _error_record(url: str, message: str) -> OutcomeRecord:
        return OutcomeRecord(
            url=url,
            status_code=None,
            response_time_ms=0,
            attempts=1,
            category=Category.ERROR,
            description=message,
            redirect_url=None,
            error=message
        )
