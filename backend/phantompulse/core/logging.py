"""
Structured logging configuration for PhantomPulse.

All log records include the fields ``action`` and ``target`` so that every
log line is machine-parseable while remaining human-readable.

Usage::

    from phantompulse.core.logging import configure_logging, get_logger

    configure_logging()                # call once at startup
    logger = get_logger(__name__)
    logger.info("scan started", extra={"action": "scan_start", "target": "https://example.com"})
"""

from __future__ import annotations

import logging
import sys
from typing import Optional

from phantompulse.config import get_settings

# ── Constants ────────────────────────────────────────────────────────────────

_LOG_FORMAT: str = (
    "%(asctime)s | %(levelname)-8s | %(name)s | "
    "action=%(action)s | target=%(target)s | %(message)s"
)
_DATE_FORMAT: str = "%Y-%m-%dT%H:%M:%S%z"
ROOT_LOGGER_NAME: str = "phantompulse"


# ── Custom Formatter ─────────────────────────────────────────────────────────

class StructuredFormatter(logging.Formatter):
    """Formatter that injects default values for structured fields.

    Probe modules log through plain ``logging.getLogger(__name__)`` without
    ``extra``; this formatter supplies a dash (``-``) for the missing fields
    so the format string never raises.
    """

    _DEFAULTS: dict[str, str] = {
        "action": "-",
        "target": "-",
    }

    def format(self, record: logging.LogRecord) -> str:
        for key, default in self._DEFAULTS.items():
            if not hasattr(record, key):
                setattr(record, key, default)
        return super().format(record)


# ── Public API ───────────────────────────────────────────────────────────────

def configure_logging(level: Optional[str] = None) -> None:
    """Initialise the application-wide logging configuration.

    Safe to call more than once: the handler is only attached the first time.

    Args:
        level: Override the log level.  When ``None``, ``DEBUG`` is used if
            ``settings.DEBUG`` is truthy, otherwise ``INFO``.
    """
    settings = get_settings()

    if level is None:
        level = "DEBUG" if settings.DEBUG else "INFO"

    root_logger: logging.Logger = logging.getLogger(ROOT_LOGGER_NAME)
    root_logger.setLevel(level)

    if not root_logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setLevel(level)
        handler.setFormatter(StructuredFormatter(_LOG_FORMAT, datefmt=_DATE_FORMAT))
        root_logger.addHandler(handler)

    # httpx logs every request at INFO.
    for noisy_logger in ("uvicorn.access", "httpx", "httpcore"):
        logging.getLogger(noisy_logger).setLevel(logging.WARNING)

    root_logger.info(
        "Logging configured at %s level",
        level,
        extra={"action": "logging_init", "target": settings.APP_NAME},
    )


def get_logger(name: str) -> logging.Logger:
    """Return a logger under the ``phantompulse`` namespace.

    Names that already live under the namespace (``__name__`` of any module
    in this package) are used as-is; anything else is nested below it.

    Args:
        name: Typically ``__name__`` of the calling module.

    Returns:
        A :class:`logging.Logger` instance.
    """
    if name == ROOT_LOGGER_NAME or name.startswith(f"{ROOT_LOGGER_NAME}."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")
