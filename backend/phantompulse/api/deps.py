"""
Shared FastAPI dependency functions for the PhantomPulse API.

Provides the scan orchestrator and the per-client rate limit so endpoint
modules (and tests, through ``dependency_overrides``) can swap them out.
"""

from __future__ import annotations

from functools import lru_cache

from fastapi import Depends, HTTPException, Request, status

from phantompulse.config import get_settings
from phantompulse.core.security import RateLimiter
from phantompulse.engine.orchestrator import ScanOrchestrator


@lru_cache(maxsize=1)
def get_rate_limiter() -> RateLimiter:
    """Return the process-wide rate limiter built from settings."""
    settings = get_settings()
    return RateLimiter(
        max_requests=settings.RATE_LIMIT_REQUESTS,
        window_seconds=settings.RATE_LIMIT_WINDOW_SECONDS,
    )


def get_orchestrator() -> ScanOrchestrator:
    """Return a scan orchestrator running every registered probe."""
    return ScanOrchestrator()


async def enforce_rate_limit(
    request: Request,
    limiter: RateLimiter = Depends(get_rate_limiter),
) -> None:
    """Reject the request with *429 Too Many Requests* once the client's
    window is exhausted.

    Raises:
        HTTPException: *429* with a ``Retry-After`` header.
    """
    client_key: str = request.client.host if request.client else "anonymous"
    if not limiter.allow(client_key):
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail="Too many scan requests, please try again later.",
            headers={"Retry-After": str(limiter.retry_after(client_key))},
        )
