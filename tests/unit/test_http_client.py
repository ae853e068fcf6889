"""Unit tests for HTTP client wrapper."""

import httpx
import pytest

from sitemap_verifier.checker.http_client import AsyncHTTPClient


class TestAsyncHTTPClient:

    @pytest.mark.asyncio
    async def test_initialization_with_defaults(self):
        async with AsyncHTTPClient() as client:
            assert client.request_timeout == 30.0
            assert client.max_redirects == 5
            assert client.user_agent.startswith("SitemapBot/1.0")

    @pytest.mark.asyncio
    async def test_context_manager_lifecycle(self):
        client = AsyncHTTPClient()

        async with client:
            assert client._client is not None

        # Client should be closed after context exit
        assert client._client is None

    @pytest.mark.asyncio
    async def test_request_outside_context_raises(self):
        client = AsyncHTTPClient()

        with pytest.raises(RuntimeError, match="not initialized"):
            await client.head("http://test.com/")

    @pytest.mark.asyncio
    async def test_timeout_and_redirect_configuration_applied(self):
        async with AsyncHTTPClient(request_timeout=7.0, max_redirects=2) as client:
            timeout = client._client.timeout
            assert timeout.connect == 7.0
            assert timeout.read == 7.0
            assert client._client.max_redirects == 2
            assert client._client.follow_redirects is True

    @pytest.mark.asyncio
    async def test_user_agent_sent(self):
        seen = {}

        def handler(request):
            seen["ua"] = request.headers["User-Agent"]
            seen["method"] = request.method
            return httpx.Response(200)

        transport = httpx.MockTransport(handler)

        async with AsyncHTTPClient(user_agent="TestBot/2.0", transport=transport) as client:
            response = await client.head("http://test.com/page")

        assert response.status_code == 200
        assert seen == {"ua": "TestBot/2.0", "method": "HEAD"}

    @pytest.mark.asyncio
    async def test_get_request_with_mock_transport(self):
        def handler(request):
            return httpx.Response(200, json={"status": "ok"})

        transport = httpx.MockTransport(handler)

        async with AsyncHTTPClient(transport=transport) as client:
            response = await client.get("http://test.com/api")

            assert response.status_code == 200
            assert response.json() == {"status": "ok"}
