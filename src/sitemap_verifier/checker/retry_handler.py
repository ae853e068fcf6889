"""Retry handler with exponential backoff and jitter."""

import asyncio
import random
import time
from typing import Awaitable, Callable, Collection, Optional

import httpx

from sitemap_verifier.checker.error_classifier import classify_error
from sitemap_verifier.models.data_models import Category, OutcomeRecord, ProbeResult


JITTER_RATIO = 0.1


def calculate_backoff_delay(
    attempt: int,
    base_delay_ms: float = 1000,
    backoff_multiplier: float = 2.0,
    max_delay_ms: float = 30000,
    jitter_ratio: float = JITTER_RATIO,
    rng: random.Random = random
) -> float:
    """
    Calculate exponential backoff delay with additive jitter.

    Formula: min(base_delay * multiplier ** (attempt - 1), max_delay) + jitter,
    where jitter is uniform in [0, jitter_ratio * capped_delay].

    Args:
        attempt: Attempt number that just failed (1-indexed)
        base_delay_ms: Base delay in milliseconds
        backoff_multiplier: Growth factor per attempt
        max_delay_ms: Cap applied before jitter
        jitter_ratio: Maximum jitter as a fraction of the capped delay
        rng: Random source

    Returns:
        Delay in milliseconds
    """
    exponential_delay = min(
        base_delay_ms * (backoff_multiplier ** (attempt - 1)),
        max_delay_ms
    )
    jitter = rng.uniform(0, jitter_ratio * exponential_delay)
    return exponential_delay + jitter


class RetryHandler:
    """
    Runs a single-URL probe with bounded, classification-aware retries.

    The error classifier is the only authority on retry eligibility: 408, 429,
    5xx and timeouts retry by default; everything else fails on first sight.
    Failures are returned as OutcomeRecords, never raised. Exceptions other
    than transport errors are internal faults and propagate to the caller.
    """

    TRANSPORT_ERRORS = (httpx.RequestError, asyncio.TimeoutError)

    def __init__(
        self,
        max_retries: int = 3,
        base_delay_ms: float = 1000,
        backoff_multiplier: float = 2.0,
        max_delay_ms: float = 30000,
        retryable_status_codes: Optional[Collection[int]] = None,
        sleeper: Callable[[float], Awaitable[None]] = asyncio.sleep,
        now: Callable[[], float] = time.monotonic,
        rng: random.Random = random,
        cancel_event: Optional[asyncio.Event] = None,
        logger=None
    ):
        """
        Initialize retry handler.

        Args:
            max_retries: Retries after the first attempt
            base_delay_ms: Base delay for exponential backoff
            backoff_multiplier: Growth factor per attempt
            max_delay_ms: Maximum delay cap before jitter
            retryable_status_codes: Explicit retryable statuses (None: built-in policy)
            sleeper: Async sleep function taking seconds (default: asyncio.sleep)
            now: Clock function in seconds (default: time.monotonic)
            rng: Random source for jitter
            cancel_event: When set, no further attempts are started
            logger: Optional structured logger
        """
        if max_retries < 0:
            raise ValueError(f"max_retries must not be negative, got: {max_retries}")
        self.max_retries = max_retries
        self.base_delay_ms = base_delay_ms
        self.backoff_multiplier = backoff_multiplier
        self.max_delay_ms = max_delay_ms
        self.retryable_status_codes = (
            frozenset(retryable_status_codes) if retryable_status_codes is not None else None
        )
        self._sleep = sleeper
        self._now = now
        self._rng = rng
        self.cancel_event = cancel_event
        self.logger = logger

    @property
    def max_attempts(self) -> int:
        return self.max_retries + 1

    async def execute_with_retry(
        self,
        probe: Callable[[], Awaitable[ProbeResult]],
        url: str
    ) -> OutcomeRecord:
        """
        Execute probe with retry logic.

        Args:
            probe: Coroutine function performing one HTTP attempt
            url: URL being checked (for the record and logs)

        Returns:
            OutcomeRecord; error is non-None when the URL ultimately failed
        """
        start = self._now()
        attempt = 1

        while True:
            error: Optional[BaseException] = None
            result: Optional[ProbeResult] = None
            try:
                result = await probe()
                status_code: Optional[int] = result.status_code
            except self.TRANSPORT_ERRORS as e:
                error = e
                status_code = None

            decision = classify_error(status_code, error, self.retryable_status_codes)

            if decision.category is Category.SUCCESS:
                elapsed_ms = self._elapsed_ms(start)
                if self.logger:
                    self.logger.check_success(url, status_code, attempt, elapsed_ms)
                return OutcomeRecord(
                    url=url,
                    status_code=status_code,
                    response_time_ms=elapsed_ms,
                    attempts=attempt,
                    category=decision.category,
                    description=decision.description,
                    redirect_url=result.final_url if result.redirected else None,
                    error=None
                )

            if (
                decision.should_retry
                and attempt < self.max_attempts
                and not self._cancelled()
            ):
                delay_ms = calculate_backoff_delay(
                    attempt,
                    self.base_delay_ms,
                    self.backoff_multiplier,
                    self.max_delay_ms,
                    rng=self._rng
                )

                if self.logger:
                    self.logger.check_retry(url, status_code, attempt, delay_ms)

                await self._backoff(delay_ms / 1000.0)

                # A cancel during backoff ends the pipeline with the last failure
                if not self._cancelled():
                    attempt += 1
                    continue

            if self.logger:
                self.logger.check_failed(url, status_code, decision.category.value, attempt)
            return OutcomeRecord(
                url=url,
                status_code=status_code,
                response_time_ms=self._elapsed_ms(start),
                attempts=attempt,
                category=decision.category,
                description=decision.description,
                redirect_url=result.final_url if result is not None and result.redirected else None,
                error=decision.description
            )

    async def _backoff(self, seconds: float) -> None:
        """Sleep between attempts; returns early once the cancel event is set."""
        if self.cancel_event is None:
            await self._sleep(seconds)
            return

        sleep_task = asyncio.ensure_future(self._sleep(seconds))
        cancel_task = asyncio.ensure_future(self.cancel_event.wait())
        try:
            await asyncio.wait({sleep_task, cancel_task}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            for task in (sleep_task, cancel_task):
                task.cancel()

    def _cancelled(self) -> bool:
        return self.cancel_event is not None and self.cancel_event.is_set()

    def _elapsed_ms(self, start: float) -> int:
        return int(round((self._now() - start) * 1000))
