"""Async HTTP client wrapper with timeout and redirect configuration."""

from typing import Optional

import httpx


class AsyncHTTPClient:
    """
    Async HTTP client wrapper around httpx.AsyncClient.

    Provides:
    - A single per-request timeout applied to every phase
    - Redirect following bounded by max_redirects
    - A fixed User-Agent header
    - Context manager for proper lifecycle management
    """

    def __init__(
        self,
        request_timeout: float = 30.0,
        max_redirects: int = 5,
        user_agent: str = "SitemapBot/1.0 (+https://example.com/bot)",
        max_connections: Optional[int] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        """
        Initialize HTTP client.

        Args:
            request_timeout: Timeout in seconds for connect, read, write and pool
            max_redirects: Maximum redirect hops before httpx.TooManyRedirects
            user_agent: User-Agent header value
            max_connections: Connection pool ceiling (None: httpx default)
            transport: Optional custom transport (mock or ASGI transports in tests)
        """
        self.request_timeout = request_timeout
        self.max_redirects = max_redirects
        self.user_agent = user_agent
        self.max_connections = max_connections
        self.transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def __aenter__(self):
        """Enter async context manager."""
        limits = httpx.Limits(
            max_connections=self.max_connections,
            max_keepalive_connections=self.max_connections
        ) if self.max_connections else httpx.Limits()
        self._client = httpx.AsyncClient(
            timeout=httpx.Timeout(self.request_timeout),
            follow_redirects=True,
            max_redirects=self.max_redirects,
            headers={"User-Agent": self.user_agent},
            limits=limits,
            transport=self.transport
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Exit async context manager."""
        if self._client:
            await self._client.aclose()
            self._client = None

    def _require_client(self) -> httpx.AsyncClient:
        if not self._client:
            raise RuntimeError("Client not initialized. Use 'async with' context manager.")
        return self._client

    async def head(self, url: str, **kwargs) -> httpx.Response:
        """Perform HEAD request."""
        return await self._require_client().head(url, **kwargs)

    async def get(self, url: str, **kwargs) -> httpx.Response:
        """Perform GET request."""
        return await self._require_client().get(url, **kwargs)
