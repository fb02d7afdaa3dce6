"""
Tests for the scan API endpoint.

Validates the camelCase report contract, URL validation (422), mapping of
a failed initial fetch to 502, per-client rate limiting (429), and the
application-level health check and security headers.
"""

from __future__ import annotations

import pytest
from httpx import ASGITransport, AsyncClient

from phantompulse.api.deps import get_rate_limiter
from phantompulse.core.security import RateLimiter
from phantompulse.engine.orchestrator import ScanError
from phantompulse.main import create_app
from phantompulse.models.report import (
    Coordinates,
    Location,
    OpenPort,
    ScanReport,
    SecurityHeader,
    ServerInfo,
    Severity,
    SslInfo,
    Subdomain,
    Technology,
    TechnologyType,
    Vulnerability,
)

_REPORT = ScanReport(
    headers={"server": "nginx/1.21.0", "content-type": "text/html"},
    server=ServerInfo(name="Nginx", version="1.21.0"),
    open_ports=(OpenPort(port=443, service="HTTPS"), OpenPort(port=22, service="SSH")),
    security_headers=(SecurityHeader(header="X-Frame-Options", value="DENY"),),
    missing_security_headers=(
        "Strict-Transport-Security",
        "Content-Security-Policy",
        "X-Content-Type-Options",
        "X-XSS-Protection",
        "Referrer-Policy",
    ),
    vulnerabilities=(
        Vulnerability(
            type="Information Disclosure",
            description="Sensitive header 'Server' exposed",
            severity=Severity.MEDIUM,
        ),
        Vulnerability(
            type="Open Port",
            description="Port 22 (SSH) is open and may expose sensitive services",
            severity=Severity.HIGH,
        ),
    ),
    technologies=(Technology(name="WordPress 6.4.2", type=TechnologyType.CMS),),
    ssl=SslInfo(
        valid=True,
        issuer="Let's Encrypt",
        valid_from="2024-05-01T00:00:00+00:00",
        valid_to="2024-07-30T00:00:00+00:00",
        protocol="TLSv1.3",
        cipher="TLS_AES_256_GCM_SHA384",
        bits=256,
    ),
    subdomains=(Subdomain(subdomain="www.example.com", ip="93.184.216.34"),),
    location=Location(
        ip="93.184.216.34",
        country="United States",
        city="Norwell",
        coordinates=Coordinates(latitude=42.15, longitude=-70.82),
    ),
)


@pytest.mark.asyncio
async def test_scan_returns_camel_case_report(client, fake_orchestrator) -> None:
    """A completed scan returns the full report with camelCase keys."""
    fake_orchestrator.scan.return_value = _REPORT

    response = await client.post("/api/v1/scans", json={"url": "https://example.com"})

    assert response.status_code == 200
    fake_orchestrator.scan.assert_awaited_once_with("https://example.com")
    data = response.json()
    assert set(data) == {
        "headers",
        "server",
        "openPorts",
        "securityHeaders",
        "missingSecurityHeaders",
        "vulnerabilities",
        "technologies",
        "ssl",
        "subdomains",
        "location",
    }
    assert data["server"] == {"name": "Nginx", "version": "1.21.0"}
    assert data["openPorts"][1] == {"port": 22, "service": "SSH", "state": "open"}
    assert data["vulnerabilities"][1]["severity"] == "High"
    assert data["technologies"][0] == {"name": "WordPress 6.4.2", "type": "CMS"}
    assert data["ssl"]["validFrom"] == "2024-05-01T00:00:00+00:00"
    assert data["ssl"]["valid"] is True
    assert data["location"]["coordinates"] == {"latitude": 42.15, "longitude": -70.82}


@pytest.mark.asyncio
async def test_degraded_report_keeps_full_shape(client, fake_orchestrator) -> None:
    """A report where every probe failed still has every section."""
    fake_orchestrator.scan.return_value = ScanReport()

    response = await client.post("/api/v1/scans", json={"url": "http://example.com"})

    assert response.status_code == 200
    data = response.json()
    assert data["headers"] is None
    assert data["server"] == {"name": "unknown", "version": None}
    assert data["openPorts"] == []
    assert data["ssl"] == {
        "valid": "unknown",
        "issuer": "unknown",
        "validFrom": "unknown",
        "validTo": "unknown",
        "protocol": "unknown",
        "cipher": "unknown",
        "bits": "unknown",
    }
    assert data["location"] == {
        "ip": None,
        "country": None,
        "city": None,
        "coordinates": {"latitude": None, "longitude": None},
    }


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "url",
    ["", "   ", "not a url", "ftp://example.com", "example.com", "https://", "http://:80/"],
)
async def test_invalid_url_rejected(client, fake_orchestrator, url: str) -> None:
    """Anything but an absolute http(s) URL with a host is a 422."""
    response = await client.post("/api/v1/scans", json={"url": url})

    assert response.status_code == 422
    fake_orchestrator.scan.assert_not_awaited()


@pytest.mark.asyncio
async def test_missing_url_rejected(client) -> None:
    response = await client.post("/api/v1/scans", json={})

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_fetch_failure_maps_to_502(client, fake_orchestrator) -> None:
    """A failed initial fetch is reported as a bad gateway."""
    fake_orchestrator.scan.side_effect = ScanError("Failed to complete security scan")

    response = await client.post("/api/v1/scans", json={"url": "https://nonexistent.invalid"})

    assert response.status_code == 502
    assert response.json()["detail"] == "Error during scan: Failed to complete security scan"


@pytest.mark.asyncio
async def test_rate_limit(test_app, client, fake_orchestrator) -> None:
    """Requests beyond the window's budget get 429 with Retry-After."""
    limiter = RateLimiter(max_requests=2, window_seconds=900)
    test_app.dependency_overrides[get_rate_limiter] = lambda: limiter
    fake_orchestrator.scan.return_value = ScanReport()

    statuses = [
        (await client.post("/api/v1/scans", json={"url": "https://example.com"})).status_code
        for _ in range(3)
    ]

    assert statuses == [200, 200, 429]
    assert fake_orchestrator.scan.await_count == 2
    limited = await client.post("/api/v1/scans", json={"url": "https://example.com"})
    assert int(limited.headers["retry-after"]) > 0


# ---------------------------------------------------------------------------
# Application
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_health_check_and_security_headers() -> None:
    """The health endpoint answers and responses carry security headers."""
    app = create_app()
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        response = await ac.get("/health")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "healthy"
    assert body["app"] == "PhantomPulse"
    assert "timestamp" in body
    assert response.headers["x-content-type-options"] == "nosniff"
    assert response.headers["x-frame-options"] == "DENY"


def test_scan_route_is_mounted() -> None:
    """The v1 scan route is registered under the API prefix."""
    paths = {route.path for route in create_app().routes}

    assert "/api/v1/scans" in paths
    assert "/health" in paths
