"""Pytest configuration and shared fixtures."""

from typing import List

import pytest


class RecordingSleeper:
    """Async sleeper that records requested delays instead of sleeping."""

    def __init__(self):
        self.delays: List[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


class FakeClock:
    """Manually advanced clock in seconds."""

    def __init__(self, start: float = 100.0):
        self.current = start

    def __call__(self) -> float:
        return self.current

    def advance(self, seconds: float) -> None:
        self.current += seconds


@pytest.fixture
def sleeper():
    return RecordingSleeper()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def sample_config():
    """Provide a fast configuration for testing."""
    from sitemap_verifier.models.config import CheckerConfig

    return CheckerConfig(
        request_timeout=5.0,
        max_redirects=5,
        max_parallel=4,
        max_retries=2,
        retry_delay_ms=1,
        backoff_multiplier=2.0,
        max_backoff_delay_ms=10,
        log_level="WARNING",
    )
