"""
Geolocation probe for PhantomPulse.

Resolves the target's first A record and looks the address up in a free
IP-geolocation service (ip-api.com by default, no API key required).  Either
step failing leaves the report's location at its all-null default.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Optional

import dns.exception
import httpx

from phantompulse.models.report import Coordinates, Location, ReportFragment
from phantompulse.probes.base import BaseProbe, ProbeResult, ScanContext
from phantompulse.probes.registry import ProbeRegistry
from phantompulse.probes.resolver import build_resolver, is_ip_address, resolve_a_async

logger = logging.getLogger(__name__)


def parse_geolocation(payload: Any, resolved_ip: str) -> Optional[Location]:
    """Build a :class:`Location` from an ip-api style JSON payload.

    Returns ``None`` unless the payload reports ``status == "success"``.
    """
    if not isinstance(payload, dict) or payload.get("status") != "success":
        return None
    return Location(
        ip=payload.get("query") or resolved_ip,
        country=payload.get("country"),
        city=payload.get("city"),
        coordinates=Coordinates(
            latitude=payload.get("lat"),
            longitude=payload.get("lon"),
        ),
    )


@ProbeRegistry.register
class GeoLocatorProbe(BaseProbe):
    """Coarse geolocation of the target host."""

    name: str = "geolocation"
    description: str = "IP Geolocation via ip-api.com"
    order: int = 40

    async def execute(self, context: ScanContext) -> ProbeResult:
        start: float = time.monotonic()
        errors: list[str] = []
        location: Optional[Location] = None

        ip = await self._resolve_ip(context.hostname, errors)
        if ip is not None:
            location = await self._lookup(ip, errors)

        duration: float = time.monotonic() - start
        if location is None:
            logger.info("Geolocation unavailable for %s", context.hostname)
        else:
            logger.info(
                "Geolocated %s to %s, %s in %.1fs",
                location.ip,
                location.city,
                location.country,
                duration,
            )

        return ProbeResult(
            probe_name=self.name,
            success=location is not None,
            fragment=ReportFragment(location=location),
            errors=errors if errors else None,
            duration_seconds=round(duration, 3),
        )

    async def _resolve_ip(self, hostname: str, errors: list[str]) -> Optional[str]:
        """Return the first A record of *hostname*, or the literal itself."""
        if is_ip_address(hostname):
            return hostname
        try:
            resolver = build_resolver(self.settings)
            addresses = await resolve_a_async(resolver, hostname)
        except dns.exception.DNSException as exc:
            errors.append(f"geolocation DNS {hostname}: {exc}")
            return None
        if not addresses:
            errors.append(f"geolocation DNS {hostname}: no A record")
            return None
        return addresses[0]

    async def _lookup(self, ip: str, errors: list[str]) -> Optional[Location]:
        """Query the geolocation service for *ip*."""
        url = self.settings.GEOIP_URL.format(ip=ip)
        try:
            async with httpx.AsyncClient(
                timeout=httpx.Timeout(self.settings.GEOIP_TIMEOUT),
                headers={"User-Agent": self.settings.USER_AGENT},
            ) as client:
                response = await client.get(url)
                response.raise_for_status()
                payload = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            errors.append(f"geolocation lookup {ip}: {exc}")
            return None

        location = parse_geolocation(payload, ip)
        if location is None:
            errors.append(f"geolocation lookup {ip}: service reported failure")
        return location
