"""
PhantomPulse application configuration.

Loads settings from environment variables with sensible defaults for local
development.  Uses Pydantic BaseSettings so every value can be overridden via
an environment variable or a ``.env`` file placed next to the backend root.

Every external call made during a scan has an explicit bound here, so the
total latency of a single scan is always finite.
"""

from __future__ import annotations

from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Central configuration for the PhantomPulse backend.

    All attributes can be overridden through environment variables of the same
    name (case-insensitive).  For example, set ``PORT_TIMEOUT=0.5`` in the
    shell or in a ``.env`` file to shorten the TCP connect bound.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ── Application ─────────────────────────────────────────────────────────
    APP_NAME: str = "PhantomPulse"
    API_V1_PREFIX: str = "/api/v1"
    DEBUG: bool = False

    # ── CORS ────────────────────────────────────────────────────────────────
    CORS_ORIGINS: list[str] = ["http://localhost:3000"]

    # ── Initial fetch ───────────────────────────────────────────────────────
    USER_AGENT: str = "PhantomPulse Security Scanner 1.0"
    FETCH_TIMEOUT: float = 10.0
    FETCH_VERIFY_TLS: bool = True

    # ── Probe bounds (seconds) ──────────────────────────────────────────────
    PORT_TIMEOUT: float = 1.0
    TLS_TIMEOUT: float = 8.0
    DNS_TIMEOUT: float = 3.0
    DNS_LIFETIME: float = 5.0
    GEOIP_TIMEOUT: float = 5.0
    PROBE_TIMEOUT: float = 30.0

    # ── Geolocation ─────────────────────────────────────────────────────────
    GEOIP_URL: str = "http://ip-api.com/json/{ip}"

    # ── Scheduling ──────────────────────────────────────────────────────────
    SCAN_CONCURRENT: bool = True

    # ── Rate limiting (intake layer) ────────────────────────────────────────
    RATE_LIMIT_REQUESTS: int = 100
    RATE_LIMIT_WINDOW_SECONDS: int = 15 * 60

    # ── Validators ──────────────────────────────────────────────────────────

    @field_validator("CORS_ORIGINS", mode="before")
    @classmethod
    def parse_cors_origins(cls, value: object) -> list[str]:
        """Accept a comma-separated string *or* an actual list."""
        if isinstance(value, str):
            return [origin.strip() for origin in value.split(",") if origin.strip()]
        return list(value)  # type: ignore[arg-type]

    @field_validator(
        "FETCH_TIMEOUT",
        "PORT_TIMEOUT",
        "TLS_TIMEOUT",
        "DNS_TIMEOUT",
        "DNS_LIFETIME",
        "GEOIP_TIMEOUT",
        "PROBE_TIMEOUT",
        mode="after",
    )
    @classmethod
    def require_positive_timeout(cls, value: float) -> float:
        """Reject zero or negative bounds; an unbounded call is never allowed."""
        if value <= 0:
            raise ValueError("Timeouts must be positive numbers of seconds.")
        return value

    @field_validator("RATE_LIMIT_REQUESTS", "RATE_LIMIT_WINDOW_SECONDS", mode="after")
    @classmethod
    def require_positive_limit(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("Rate limit settings must be positive integers.")
        return value

    @field_validator("GEOIP_URL", mode="after")
    @classmethod
    def require_ip_placeholder(cls, value: str) -> str:
        """The geolocation URL is formatted with the resolved address."""
        if "{ip}" not in value:
            raise ValueError("GEOIP_URL must contain an '{ip}' placeholder.")
        return value


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached singleton of the application settings.

    Using ``lru_cache`` ensures the ``.env`` file is read only once and the
    same ``Settings`` instance is reused across the entire process.
    """
    return Settings()
