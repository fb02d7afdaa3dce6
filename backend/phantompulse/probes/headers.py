"""
HTTP Security Header Analysis probe for PhantomPulse.

Inspects the response headers of the initial fetch for the presence of a
fixed set of hardening headers, identifies the web server, and flags headers
that disclose implementation details.  This probe is **passive**: it sends
no traffic of its own.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Mapping
from typing import Optional

from phantompulse.models.report import (
    ReportFragment,
    SecurityHeader,
    ServerInfo,
    Severity,
    Vulnerability,
)
from phantompulse.probes.base import BaseProbe, ProbeResult, ScanContext
from phantompulse.probes.registry import ProbeRegistry
from phantompulse.probes.server_header import classify_server

logger = logging.getLogger(__name__)

# Canonical order; it is also the order of the report sections.
SECURITY_HEADERS: tuple[str, ...] = (
    "Strict-Transport-Security",
    "Content-Security-Policy",
    "X-Content-Type-Options",
    "X-Frame-Options",
    "X-XSS-Protection",
    "Referrer-Policy",
)

# Consulted only when ``Server`` yields no identification.
FALLBACK_SERVER_HEADERS: tuple[str, ...] = (
    "X-Powered-By",
    "X-Server",
    "X-Server-Name",
)

SENSITIVE_HEADERS: tuple[str, ...] = ("Server", "X-Powered-By")


def identify_server(headers: Mapping[str, str]) -> Optional[ServerInfo]:
    """Classify the server from ``Server``, then from the fallback headers."""
    server = classify_server(headers.get("server"))
    if server is not None:
        return server

    for header in FALLBACK_SERVER_HEADERS:
        server = classify_server(headers.get(header.lower()))
        if server is not None:
            return server
    return None


def analyze_headers(headers: Mapping[str, str]) -> ReportFragment:
    """Analyse a response-header mapping.

    Never raises: an absent header is a normal outcome.

    Args:
        headers: Header mapping; names are matched case-insensitively.

    Returns:
        A :class:`ReportFragment` with ``headers``, ``server``,
        ``security_headers``, ``missing_security_headers`` and any
        ``Information Disclosure`` vulnerabilities populated.
    """
    lowered: dict[str, str] = {name.lower(): value for name, value in headers.items()}

    present: list[SecurityHeader] = []
    missing: list[str] = []
    for header in SECURITY_HEADERS:
        value = lowered.get(header.lower())
        if value:
            present.append(SecurityHeader(header=header, value=value))
        else:
            missing.append(header)

    vulnerabilities: list[Vulnerability] = [
        Vulnerability(
            type="Information Disclosure",
            description=f"Sensitive header '{header}' exposed",
            severity=Severity.MEDIUM,
        )
        for header in SENSITIVE_HEADERS
        if lowered.get(header.lower())
    ]

    return ReportFragment(
        headers=lowered,
        server=identify_server(lowered),
        security_headers=tuple(present),
        missing_security_headers=tuple(missing),
        vulnerabilities=tuple(vulnerabilities),
    )


@ProbeRegistry.register
class HeaderAnalyzerProbe(BaseProbe):
    """Security-header presence and information-disclosure checks."""

    name: str = "headers"
    description: str = "HTTP Security Header Analysis"
    order: int = 10

    async def execute(self, context: ScanContext) -> ProbeResult:
        start: float = time.monotonic()
        fragment = analyze_headers(context.headers)
        duration: float = time.monotonic() - start

        logger.info(
            "Header analysis: %d present, %d missing security headers",
            len(fragment.security_headers),
            len(fragment.missing_security_headers),
        )

        return ProbeResult(
            probe_name=self.name,
            success=True,
            fragment=fragment,
            duration_seconds=round(duration, 3),
        )
