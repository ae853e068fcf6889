"""FastAPI mock website for exercising the sitemap verifier."""

import asyncio
import os
from typing import Dict, Optional

from fastapi import FastAPI, Response
from fastapi.responses import RedirectResponse


def create_mock_site(
    name: str = "mock-site",
    flaky_failures: int = 2,
    flaky_status: int = 503,
    extra_latency_ms: int = 0
) -> FastAPI:
    """
    Create a FastAPI mock website with configurable behavior.

    Routes:
        /status/{code}          Responds with the given status to GET and HEAD
        /no-head                405 for HEAD, 200 for GET
        /redirect/{hops}        Redirect chain of the given length ending at /status/200
        /flaky/{key}            flaky_status for the first flaky_failures calls per key, then 200
        /slow?delay_ms=N        200 after a delay
        /sitemap-urls?count=N   JSON list of URLs served by this site
        /health                 Health check

    Args:
        name: Site name reported by /health
        flaky_failures: Failures served per /flaky key before succeeding
        flaky_status: Status returned while a /flaky key is failing
        extra_latency_ms: Additional latency in milliseconds on every route

    Returns:
        FastAPI application
    """
    app = FastAPI(title=f"Mock Site - {name}")
    flaky_calls: Dict[str, int] = {}

    async def _latency() -> None:
        if extra_latency_ms > 0:
            await asyncio.sleep(extra_latency_ms / 1000.0)

    @app.api_route("/status/{code}", methods=["GET", "HEAD"])
    async def status(code: int):
        """Respond with an arbitrary status code."""
        await _latency()
        return Response(status_code=code)

    @app.head("/no-head")
    async def no_head_head():
        """Servers that reject HEAD."""
        return Response(status_code=405)

    @app.get("/no-head")
    async def no_head_get():
        await _latency()
        return {"page": "no-head"}

    @app.api_route("/redirect/{hops}", methods=["GET", "HEAD"])
    async def redirect(hops: int):
        """Redirect chain of `hops` hops ending at /status/200."""
        await _latency()
        target = f"/redirect/{hops - 1}" if hops > 1 else "/status/200"
        return RedirectResponse(url=target, status_code=302)

    @app.api_route("/flaky/{key}", methods=["GET", "HEAD"])
    async def flaky(key: str):
        """Fail flaky_failures times per key, then succeed."""
        await _latency()
        calls = flaky_calls.get(key, 0) + 1
        flaky_calls[key] = calls
        if calls <= flaky_failures:
            return Response(status_code=flaky_status)
        return Response(status_code=200)

    @app.api_route("/slow", methods=["GET", "HEAD"])
    async def slow(delay_ms: int = 100):
        await asyncio.sleep(delay_ms / 1000.0)
        return Response(status_code=200)

    @app.get("/sitemap-urls")
    async def sitemap_urls(count: int = 10, base_url: Optional[str] = None):
        """URL list in the format accepted by the verifier's JSON loader."""
        base = (base_url or "http://testserver").rstrip("/")
        return {"urls": [f"{base}/status/200?page={i}" for i in range(1, count + 1)]}

    @app.get("/health")
    async def health():
        """Health check endpoint."""
        return {"status": "healthy", "site": name}

    return app


def create_app() -> FastAPI:
    """
    Factory function for uvicorn --factory.

    Reads FLAKY_FAILURES and EXTRA_LATENCY_MS from the environment.
    """
    return create_mock_site(
        name=os.getenv("SITE_NAME", "mock-site"),
        flaky_failures=int(os.getenv("FLAKY_FAILURES", 2)),
        extra_latency_ms=int(os.getenv("EXTRA_LATENCY_MS", 0))
    )
