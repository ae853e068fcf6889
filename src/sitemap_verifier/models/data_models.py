"""Core data models for the sitemap verifier."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional


class Category(Enum):
    """Outcome categories attached to every checked URL."""
    SUCCESS = "success"
    CLIENT_ERROR = "client_error"
    SERVER_ERROR = "server_error"
    NETWORK_ERROR = "network_error"
    TIMEOUT = "timeout"
    ERROR = "error"  # Internal pipeline fault, not an HTTP outcome


@dataclass(frozen=True)
class URLEntry:
    """A single URL extracted from a sitemap."""
    url: str
    lastmod: Optional[str] = None
    changefreq: Optional[str] = None
    priority: Optional[float] = None


@dataclass(frozen=True)
class RetryDecision:
    """Classifier verdict for one attempt."""
    should_retry: bool
    category: Category
    description: str


@dataclass(frozen=True)
class ProbeResult:
    """Normalized result of a single HTTP attempt."""
    status_code: int
    final_url: str
    redirected: bool = False


@dataclass(frozen=True)
class OutcomeRecord:
    """Final result for one URL after all attempts."""
    url: str
    status_code: Optional[int]  # None: never reached the server
    response_time_ms: int
    attempts: int
    category: Category
    description: str
    redirect_url: Optional[str] = None
    error: Optional[str] = None


@dataclass(frozen=True)
class ProgressEvent:
    """Emitted once per finished pipeline, in completion order."""
    completed_count: int
    total: int
    url: str
    status_code: Optional[int]


@dataclass
class StatisticsSummary:
    """Aggregate statistics over a batch of outcomes."""
    total_urls: int = 0
    successful: int = 0
    failed: int = 0
    success_rate: float = 0.0  # Percentage 0-100
    avg_response_time_ms: int = 0
    min_response_time_ms: int = 0
    max_response_time_ms: int = 0
    p50: int = 0
    p95: int = 0
    p99: int = 0
    status_code_counts: Dict[Optional[int], int] = field(default_factory=dict)


@dataclass
class CheckResult:
    """Complete result of one verification run."""
    source: str
    outcomes: List[OutcomeRecord]
    summary: StatisticsSummary
    duration_seconds: float
