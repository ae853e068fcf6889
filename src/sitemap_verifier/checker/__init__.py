"""Concurrent URL checking with classification-aware retries."""

from .error_classifier import classify_error
from .http_checker import HTTPChecker
from .http_client import AsyncHTTPClient
from .parallel_executor import ParallelExecutor
from .retry_handler import RetryHandler, calculate_backoff_delay

__all__ = [
    "AsyncHTTPClient",
    "HTTPChecker",
    "ParallelExecutor",
    "RetryHandler",
    "calculate_backoff_delay",
    "classify_error",
]
