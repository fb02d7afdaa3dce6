"""
Shared pytest fixtures for the PhantomPulse test suite.

Provides fast test settings, a scan-context factory, realistic header and
HTML samples, and a FastAPI test application with dependency overrides.
"""

from __future__ import annotations

from typing import AsyncGenerator, Callable
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from phantompulse.api.deps import get_orchestrator, get_rate_limiter
from phantompulse.api.v1.router import router as v1_router
from phantompulse.config import Settings
from phantompulse.core.security import RateLimiter
from phantompulse.probes.base import ScanContext


# ---------------------------------------------------------------------------
# Settings and context
# ---------------------------------------------------------------------------

@pytest.fixture()
def test_settings() -> Settings:
    """Settings with short bounds so a misbehaving test fails quickly."""
    return Settings(
        FETCH_TIMEOUT=2.0,
        PORT_TIMEOUT=0.2,
        TLS_TIMEOUT=0.5,
        DNS_TIMEOUT=0.5,
        DNS_LIFETIME=1.0,
        GEOIP_TIMEOUT=0.5,
        PROBE_TIMEOUT=5.0,
        SCAN_CONCURRENT=True,
    )


@pytest.fixture()
def make_context() -> Callable[..., ScanContext]:
    """Factory for :class:`ScanContext` instances with sensible defaults."""

    def _make(
        url: str = "https://www.example.com/",
        hostname: str = "www.example.com",
        status_code: int = 200,
        headers: dict[str, str] | None = None,
        body: str = "",
    ) -> ScanContext:
        return ScanContext(
            url=url,
            hostname=hostname,
            status_code=status_code,
            headers={k.lower(): v for k, v in (headers or {}).items()},
            body=body,
        )

    return _make


# ---------------------------------------------------------------------------
# Sample data
# ---------------------------------------------------------------------------

@pytest.fixture()
def hardened_headers() -> dict[str, str]:
    """A response that sets every canonical security header."""
    return {
        "Strict-Transport-Security": "max-age=31536000; includeSubDomains",
        "Content-Security-Policy": "default-src 'self'",
        "X-Content-Type-Options": "nosniff",
        "X-Frame-Options": "DENY",
        "X-XSS-Protection": "0",
        "Referrer-Policy": "no-referrer",
        "Content-Type": "text/html; charset=utf-8",
    }


@pytest.fixture()
def sample_html() -> str:
    """A page with insecure forms, mixed content and framework markers."""
    return """
    <!DOCTYPE html>
    <html>
      <head>
        <meta name="generator" content="WordPress 6.4.2">
        <link rel="stylesheet" href="http://cdn.example.com/style.css">
        <script src="http://code.jquery.com/jquery-3.7.1.min.js"></script>
        <script src="https://cdn.example.com/app.js"></script>
      </head>
      <body>
        <div id="root" data-reactroot=""></div>
        <form action="http://example.com/login" method="post"></form>
        <form action="http://example.com/subscribe"></form>
        <form action="https://example.com/search"></form>
        <img src="http://images.example.com/logo.png">
        <img src="/local.png">
      </body>
    </html>
    """


# ---------------------------------------------------------------------------
# API fixtures
# ---------------------------------------------------------------------------

@pytest.fixture()
def fake_orchestrator() -> MagicMock:
    """An orchestrator stand-in whose ``scan`` coroutine tests configure."""
    orchestrator = MagicMock()
    orchestrator.scan = AsyncMock()
    return orchestrator


@pytest.fixture()
def rate_limiter() -> RateLimiter:
    return RateLimiter(max_requests=100, window_seconds=900)


@pytest_asyncio.fixture()
async def test_app(fake_orchestrator: MagicMock, rate_limiter: RateLimiter) -> AsyncGenerator[FastAPI, None]:
    """Create a FastAPI app with the v1 router and overridden dependencies."""
    app = FastAPI()
    app.include_router(v1_router, prefix="/api/v1")
    app.dependency_overrides[get_orchestrator] = lambda: fake_orchestrator
    app.dependency_overrides[get_rate_limiter] = lambda: rate_limiter

    yield app

    app.dependency_overrides.clear()


@pytest_asyncio.fixture()
async def client(test_app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """Yield an httpx.AsyncClient wired to the test FastAPI app."""
    transport = ASGITransport(app=test_app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
