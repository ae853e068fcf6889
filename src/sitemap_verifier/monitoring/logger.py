"""Structured logging for verification runs."""

import json
import logging
from typing import Optional


class StructuredLogger:
    """Structured logger with uniform schema."""

    def __init__(self, name: str = "sitemap_verifier", level: str = "INFO"):
        self.logger = logging.getLogger(name)
        self.logger.setLevel(getattr(logging, level.upper()))

        if not self.logger.handlers:
            handler = logging.StreamHandler()
            handler.setFormatter(logging.Formatter('%(message)s'))
            self.logger.addHandler(handler)

    def log(self, event: str, level: int = logging.INFO, **kwargs) -> None:
        """
        Log structured event.

        Standard keys: event, url, status, attempt, attempts, category,
                      delay_ms, elapsed_ms, total, max_parallel
        """
        log_data = {"event": event, **kwargs}
        self.logger.log(level, json.dumps(log_data, default=str))

    def batch_start(self, total: int, max_parallel: int) -> None:
        self.log("batch_start", total=total, max_parallel=max_parallel)

    def batch_complete(self, total: int, elapsed_ms: float) -> None:
        self.log("batch_complete", total=total, elapsed_ms=round(elapsed_ms, 1))

    def check_start(self, url: str) -> None:
        self.log("check_start", level=logging.DEBUG, url=url)

    def check_success(self, url: str, status: int, attempts: int, elapsed_ms: int) -> None:
        self.log("check_success", level=logging.DEBUG, url=url, status=status,
                 attempts=attempts, elapsed_ms=elapsed_ms)

    def check_retry(self, url: str, status: Optional[int], attempt: int, delay_ms: float) -> None:
        self.log("check_retry", level=logging.DEBUG, url=url, status=status,
                 attempt=attempt, delay_ms=round(delay_ms))

    def check_failed(self, url: str, status: Optional[int], category: str, attempts: int) -> None:
        self.log("check_failed", level=logging.DEBUG, url=url, status=status,
                 category=category, attempts=attempts)

    def pipeline_fault(self, url: str, error: str) -> None:
        self.log("pipeline_fault", level=logging.ERROR, url=url, error=error)

    def url_skipped(self, url: str, reason: str) -> None:
        self.log("url_skipped", level=logging.WARNING, url=url, reason=reason)
