"""Classifies HTTP outcomes and decides retry eligibility."""

import asyncio
from typing import Collection, Optional

import httpx

from sitemap_verifier.models.data_models import Category, RetryDecision


HTTP_ERROR_DESCRIPTIONS = {
    400: "Bad Request",
    401: "Unauthorized",
    403: "Forbidden",
    404: "Not Found",
    405: "Method Not Allowed",
    408: "Request Timeout",
    429: "Too Many Requests",
    500: "Internal Server Error",
    501: "Not Implemented",
    502: "Bad Gateway",
    503: "Service Unavailable",
    504: "Gateway Timeout",
}

RETRYABLE_CLIENT_ERRORS = frozenset({408, 429})

_DNS_FAILURE_MARKERS = (
    "name or service not known",
    "nodename nor servname",
    "getaddrinfo failed",
    "temporary failure in name resolution",
    "no address associated with hostname",
    "name resolution",
)
_CONNECTION_REFUSED_MARKERS = (
    "connection refused",
    "actively refused",
    "errno 111",
    "errno 61",
)


def classify_error(
    status_code: Optional[int],
    error: Optional[BaseException] = None,
    retryable_status_codes: Optional[Collection[int]] = None
) -> RetryDecision:
    """
    Classify an attempt outcome.

    Args:
        status_code: HTTP status code, or None when the server was never reached
        error: Transport exception raised by the attempt, if any
        retryable_status_codes: Explicit retryable HTTP statuses replacing the
            built-in 4xx/5xx policy

    Returns:
        RetryDecision with category, retry eligibility and description
    """
    if status_code is None:
        return _classify_transport_error(error)

    if 200 <= status_code < 300:
        return RetryDecision(False, Category.SUCCESS, "Success")

    if 300 <= status_code < 400:
        return RetryDecision(False, Category.SUCCESS, "Redirect")

    if 400 <= status_code < 500:
        if retryable_status_codes is None:
            should_retry = status_code in RETRYABLE_CLIENT_ERRORS
        else:
            should_retry = status_code in retryable_status_codes
        return RetryDecision(
            should_retry,
            Category.CLIENT_ERROR,
            HTTP_ERROR_DESCRIPTIONS.get(status_code, f"Client Error ({status_code})")
        )

    if 500 <= status_code < 600:
        if retryable_status_codes is None:
            should_retry = True
        else:
            should_retry = status_code in retryable_status_codes
        return RetryDecision(
            should_retry,
            Category.SERVER_ERROR,
            HTTP_ERROR_DESCRIPTIONS.get(status_code, f"Server Error ({status_code})")
        )

    return RetryDecision(False, Category.CLIENT_ERROR, f"Unknown status code: {status_code}")


def _classify_transport_error(error: Optional[BaseException]) -> RetryDecision:
    """Classify a failure that never produced an HTTP response."""
    if isinstance(error, (httpx.TimeoutException, asyncio.TimeoutError)):
        return RetryDecision(True, Category.TIMEOUT, "Request timeout")

    if isinstance(error, httpx.TooManyRedirects):
        return RetryDecision(False, Category.NETWORK_ERROR, "Too many redirects")

    if isinstance(error, httpx.ConnectError):
        message = _error_chain_text(error)
        if any(marker in message for marker in _DNS_FAILURE_MARKERS):
            return RetryDecision(False, Category.NETWORK_ERROR, "Network error: ENOTFOUND")
        if any(marker in message for marker in _CONNECTION_REFUSED_MARKERS):
            return RetryDecision(False, Category.NETWORK_ERROR, "Network error: ECONNREFUSED")

    return RetryDecision(False, Category.NETWORK_ERROR, "Unknown network error")


def _error_chain_text(error: BaseException) -> str:
    # httpx wraps the socket error; the useful text is often on the cause
    parts = []
    current: Optional[BaseException] = error
    while current is not None and len(parts) < 5:
        parts.append(str(current))
        current = current.__cause__ or current.__context__
    return " ".join(parts).lower()
