"""
Intake-side security utilities: target URL validation and rate limiting.

Provides:
- ``validate_target_url`` -- checks that a user-supplied scan target is an
  absolute ``http``/``https`` URL with a host.
- ``RateLimiter``         -- in-memory fixed-window request counter.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable, Optional
from urllib.parse import urlsplit

# ── Constants ────────────────────────────────────────────────────────────────

_ALLOWED_SCHEMES: frozenset[str] = frozenset({"http", "https"})
_MAX_URL_LENGTH: int = 2048


# ── URL Validation ───────────────────────────────────────────────────────────

def validate_target_url(url: str) -> str:
    """Validate and normalise a scan target URL.

    Surrounding whitespace is stripped; nothing else is rewritten.

    Args:
        url: The raw URL string supplied by the user.

    Returns:
        The stripped URL.

    Raises:
        ValueError: If the URL is empty, too long, not absolute, uses a
            scheme other than ``http``/``https``, or has no host.
    """
    if not url or not url.strip():
        raise ValueError("URL must not be empty.")

    cleaned: str = url.strip()

    if len(cleaned) > _MAX_URL_LENGTH:
        raise ValueError(
            f"URL exceeds maximum length of {_MAX_URL_LENGTH} characters."
        )

    try:
        parts = urlsplit(cleaned)
        hostname: Optional[str] = parts.hostname
        # Accessing .port validates the port component.
        parts.port
    except ValueError as exc:
        raise ValueError(f"Invalid URL provided: '{cleaned}'.") from exc

    if parts.scheme.lower() not in _ALLOWED_SCHEMES:
        raise ValueError(
            f"Invalid URL provided: '{cleaned}'. Only http and https URLs can be scanned."
        )
    if not hostname:
        raise ValueError(f"Invalid URL provided: '{cleaned}'. The URL has no host.")

    return cleaned


# ── Rate Limiter ─────────────────────────────────────────────────────────────

@dataclass
class _Window:
    started_at: float
    count: int = 0


class RateLimiter:
    """In-memory fixed-window rate limiter.

    Each *key* (typically a client IP address) may make at most
    ``max_requests`` requests per ``window_seconds``; the counter resets when
    a new window starts.

    Example::

        limiter = RateLimiter(max_requests=100, window_seconds=900)
        if not limiter.allow("192.168.1.1"):
            ...  # reject with 429
    """

    def __init__(
        self,
        max_requests: int,
        window_seconds: float,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if max_requests <= 0:
            raise ValueError("max_requests must be a positive integer.")
        if window_seconds <= 0:
            raise ValueError("window_seconds must be a positive number.")

        self.max_requests: int = max_requests
        self.window_seconds: float = window_seconds
        self._clock = clock
        self._windows: dict[str, _Window] = {}
        self._last_sweep: float = clock()

    def allow(self, key: str) -> bool:
        """Count a request for *key* and report whether it is within the limit."""
        window = self._current_window(key)
        if window.count >= self.max_requests:
            return False
        window.count += 1
        return True

    def retry_after(self, key: str) -> int:
        """Seconds until the window for *key* resets (``0`` if not limited)."""
        window = self._current_window(key)
        if window.count < self.max_requests:
            return 0
        remaining = window.started_at + self.window_seconds - self._clock()
        return max(int(remaining + 0.999), 1)

    def reset(self, key: Optional[str] = None) -> None:
        """Forget one key's window, or every window when *key* is ``None``."""
        if key is not None:
            self._windows.pop(key, None)
        else:
            self._windows.clear()

    @property
    def tracked_keys(self) -> int:
        """Number of clients currently holding a window."""
        return len(self._windows)

    def _sweep(self, now: float) -> None:
        """Drop windows that have expired, at most once per window period."""
        if now - self._last_sweep < self.window_seconds:
            return
        self._last_sweep = now
        expired = [
            key
            for key, window in self._windows.items()
            if now - window.started_at >= self.window_seconds
        ]
        for key in expired:
            del self._windows[key]

    def _current_window(self, key: str) -> _Window:
        now: float = self._clock()
        self._sweep(now)
        window = self._windows.get(key)
        if window is None or now - window.started_at >= self.window_seconds:
            window = _Window(started_at=now)
            self._windows[key] = window
        return window
