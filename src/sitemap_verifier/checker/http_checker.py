"""Single-URL HTTP checks: HEAD probe with GET fallback, wrapped in retries."""

import httpx

from sitemap_verifier.checker.http_client import AsyncHTTPClient
from sitemap_verifier.checker.retry_handler import RetryHandler
from sitemap_verifier.models.data_models import OutcomeRecord, ProbeResult


class HTTPChecker:
    """
    Checks URLs over an AsyncHTTPClient.

    Responsibilities:
    - Issue a HEAD request, falling back to GET when the server answers 405
    - Treat every HTTP status as a normal result
    - Report the final URL reached after redirects
    - Delegate retry decisions to the RetryHandler
    """

    def __init__(self, http_client: AsyncHTTPClient, retry_handler: RetryHandler, logger=None):
        self.http_client = http_client
        self.retry_handler = retry_handler
        self.logger = logger

    async def probe(self, url: str) -> ProbeResult:
        """
        Perform one HTTP attempt.

        Raises:
            httpx.TimeoutException: Request exceeded the configured timeout
            httpx.TooManyRedirects: Redirect chain exceeded max_redirects
            httpx.RequestError: Any other transport-level failure
        """
        response = await self.http_client.head(url)

        if response.status_code == 405:
            response = await self.http_client.get(url)

        return self._to_probe_result(url, response)

    async def check_url(self, url: str) -> OutcomeRecord:
        """Check a URL with retries. Always returns an OutcomeRecord."""
        if self.logger:
            self.logger.check_start(url)
        return await self.retry_handler.execute_with_retry(lambda: self.probe(url), url)

    @staticmethod
    def _to_probe_result(url: str, response: httpx.Response) -> ProbeResult:
        final_url = str(response.url)
        return ProbeResult(
            status_code=response.status_code,
            final_url=final_url,
            redirected=bool(response.history) and final_url != url
        )
