"""Unit tests for the HEAD/GET probe and single-URL checks."""

import random

import httpx
import pytest

from sitemap_verifier.checker.http_checker import HTTPChecker
from sitemap_verifier.checker.http_client import AsyncHTTPClient
from sitemap_verifier.checker.retry_handler import RetryHandler
from sitemap_verifier.models.data_models import Category


def make_checker(handler, sleeper, max_retries=2, max_redirects=5):
    client = AsyncHTTPClient(
        request_timeout=1.0,
        max_redirects=max_redirects,
        transport=httpx.MockTransport(handler)
    )
    retry_handler = RetryHandler(
        max_retries=max_retries,
        base_delay_ms=1,
        max_delay_ms=5,
        sleeper=sleeper,
        rng=random.Random(0)
    )
    return client, HTTPChecker(client, retry_handler)


class TestProbe:

    @pytest.mark.asyncio
    async def test_head_used_when_allowed(self, sleeper):
        methods = []

        def handler(request):
            methods.append(request.method)
            return httpx.Response(200)

        client, checker = make_checker(handler, sleeper)
        async with client:
            result = await checker.probe("http://site.test/a")

        assert methods == ["HEAD"]
        assert result.status_code == 200
        assert result.redirected is False

    @pytest.mark.asyncio
    async def test_falls_back_to_get_on_405(self, sleeper):
        methods = []

        def handler(request):
            methods.append(request.method)
            if request.method == "HEAD":
                return httpx.Response(405)
            return httpx.Response(200, text="<html></html>")

        client, checker = make_checker(handler, sleeper)
        async with client:
            result = await checker.probe("http://site.test/no-head")

        assert methods == ["HEAD", "GET"]
        assert result.status_code == 200

    @pytest.mark.asyncio
    async def test_get_fallback_status_is_reported(self, sleeper):
        def handler(request):
            return httpx.Response(405 if request.method == "HEAD" else 404)

        client, checker = make_checker(handler, sleeper)
        async with client:
            result = await checker.probe("http://site.test/missing")

        assert result.status_code == 404

    @pytest.mark.asyncio
    async def test_error_statuses_do_not_raise(self, sleeper):
        def handler(request):
            return httpx.Response(int(request.url.path.strip("/")))

        client, checker = make_checker(handler, sleeper)
        async with client:
            for code in (400, 404, 500, 503):
                result = await checker.probe(f"http://site.test/{code}")
                assert result.status_code == code

    @pytest.mark.asyncio
    async def test_redirect_final_url_recorded(self, sleeper):
        def handler(request):
            if request.url.path == "/old":
                return httpx.Response(301, headers={"Location": "http://site.test/new"})
            return httpx.Response(200)

        client, checker = make_checker(handler, sleeper)
        async with client:
            result = await checker.probe("http://site.test/old")

        assert result.status_code == 200
        assert result.final_url == "http://site.test/new"
        assert result.redirected is True

    @pytest.mark.asyncio
    async def test_redirect_limit_raises_transport_error(self, sleeper):
        def handler(request):
            hop = int(request.url.path.strip("/") or 0)
            return httpx.Response(302, headers={"Location": f"http://site.test/{hop + 1}"})

        client, checker = make_checker(handler, sleeper, max_redirects=3)
        async with client:
            with pytest.raises(httpx.TooManyRedirects):
                await checker.probe("http://site.test/0")


class TestCheckUrl:

    @pytest.mark.asyncio
    async def test_redirected_url_populates_redirect_url(self, sleeper):
        def handler(request):
            if request.url.path == "/old":
                return httpx.Response(301, headers={"Location": "/new"})
            return httpx.Response(200)

        client, checker = make_checker(handler, sleeper)
        async with client:
            record = await checker.check_url("http://site.test/old")

        assert record.category == Category.SUCCESS
        assert record.status_code == 200
        assert record.redirect_url == "http://site.test/new"

    @pytest.mark.asyncio
    async def test_timeout_on_every_attempt(self, sleeper):
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        client, checker = make_checker(handler, sleeper, max_retries=2)
        async with client:
            record = await checker.check_url("http://site.test/slow")

        assert record.category == Category.TIMEOUT
        assert record.status_code is None
        assert record.attempts == 3
        assert len(sleeper.delays) == 2

    @pytest.mark.asyncio
    async def test_dns_failure_is_not_retried(self, sleeper):
        def handler(request):
            raise httpx.ConnectError("[Errno -2] Name or service not known", request=request)

        client, checker = make_checker(handler, sleeper, max_retries=3)
        async with client:
            record = await checker.check_url("http://nowhere.invalid/")

        assert record.category == Category.NETWORK_ERROR
        assert record.description == "Network error: ENOTFOUND"
        assert record.attempts == 1

    @pytest.mark.asyncio
    async def test_too_many_redirects_becomes_network_error(self, sleeper):
        def handler(request):
            return httpx.Response(302, headers={"Location": "http://site.test/loop"})

        client, checker = make_checker(handler, sleeper, max_redirects=2)
        async with client:
            record = await checker.check_url("http://site.test/loop")

        assert record.category == Category.NETWORK_ERROR
        assert record.description == "Too many redirects"
        assert record.attempts == 1

    @pytest.mark.asyncio
    async def test_flaky_server_recovers(self, sleeper):
        calls = {"count": 0}

        def handler(request):
            calls["count"] += 1
            return httpx.Response(502 if calls["count"] <= 2 else 200)

        client, checker = make_checker(handler, sleeper, max_retries=3)
        async with client:
            record = await checker.check_url("http://site.test/flaky")

        assert record.category == Category.SUCCESS
        assert record.attempts == 3
