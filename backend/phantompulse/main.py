"""
PhantomPulse FastAPI application entry point.

Creates and configures the FastAPI app with:
- CORS middleware
- Security headers middleware
- API v1 router
- Health check endpoint
- Startup hook that configures logging

Run with ``uvicorn phantompulse.main:app``.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from phantompulse.api.v1.router import router as v1_router
from phantompulse.config import get_settings
from phantompulse.core.logging import configure_logging, get_logger
from phantompulse.probes.registry import ProbeRegistry

# ── Constants ────────────────────────────────────────────────────────────────

_HEALTH_CHECK_PATH: str = "/health"
_VERSION: str = "1.0.0"

_SECURITY_HEADERS: dict[str, str] = {
    "Content-Security-Policy": "default-src 'self'",
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "strict-origin-when-cross-origin",
}


# ── Security Headers Middleware ──────────────────────────────────────────────

class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Middleware that injects security-related HTTP response headers.

    Every outgoing response receives the headers defined in
    ``_SECURITY_HEADERS``.
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        response: Response = await call_next(request)
        for header_name, header_value in _SECURITY_HEADERS.items():
            response.headers[header_name] = header_value
        return response


# ── Lifecycle ────────────────────────────────────────────────────────────────

@asynccontextmanager
async def lifespan(application: FastAPI) -> AsyncIterator[None]:
    """Configure logging on startup and log the loaded probe set."""
    settings = get_settings()
    configure_logging()
    logger = get_logger(__name__)
    logger.info(
        "Application starting with probes: %s",
        ", ".join(ProbeRegistry.names()),
        extra={"action": "startup", "target": settings.APP_NAME},
    )
    yield
    logger.info(
        "Application shutting down",
        extra={"action": "shutdown", "target": settings.APP_NAME},
    )


# ── Application Factory ─────────────────────────────────────────────────────

def create_app() -> FastAPI:
    """Build and return the configured FastAPI application instance."""
    settings = get_settings()

    application = FastAPI(
        title=settings.APP_NAME,
        description=(
            "Point-in-time external security-posture snapshot of a URL -- "
            "ports, headers, TLS, subdomains, geolocation and content signals."
        ),
        version=_VERSION,
        docs_url="/docs",
        redoc_url="/redoc" if settings.DEBUG else None,
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # ── Middleware (order matters: outermost first) ───────────────────────

    application.add_middleware(SecurityHeadersMiddleware)

    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
        max_age=600,
    )

    # ── Routers ──────────────────────────────────────────────────────────

    application.include_router(v1_router, prefix=settings.API_V1_PREFIX)

    # ── Health Check ─────────────────────────────────────────────────────

    @application.get(
        _HEALTH_CHECK_PATH,
        tags=["health"],
        summary="Application health check",
        response_class=JSONResponse,
    )
    async def health_check() -> dict[str, Any]:
        """Return ``status``, ``app``, ``version`` and ``timestamp``."""
        return {
            "status": "healthy",
            "app": settings.APP_NAME,
            "version": _VERSION,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

    return application


# ── Module-Level App Instance ────────────────────────────────────────────────

app: FastAPI = create_app()
