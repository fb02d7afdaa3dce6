"""
Port Reachability probe for PhantomPulse.

Attempts a plain TCP connect to a fixed list of well-known ports on the
target host.  Each connect has its own short timeout and every failure mode
(refusal, timeout, socket error) collapses to "not reachable", so one port
can never abort the batch.  This is an **active** probe.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Mapping
from types import MappingProxyType

from phantompulse.models.report import OpenPort, ReportFragment, Severity, Vulnerability
from phantompulse.probes.base import BaseProbe, ProbeResult, ScanContext
from phantompulse.probes.registry import ProbeRegistry

logger = logging.getLogger(__name__)

COMMON_PORTS: tuple[int, ...] = (80, 443, 8080, 8443, 21, 22, 23, 25, 3306, 5432)

# Open web ports are expected and not flagged.
WEB_PORTS: frozenset[int] = frozenset({80, 443})

SERVICE_NAMES: Mapping[int, str] = MappingProxyType({
    21: "FTP",
    22: "SSH",
    23: "Telnet",
    25: "SMTP",
    80: "HTTP",
    443: "HTTPS",
    3306: "MySQL",
    5432: "PostgreSQL",
    8080: "HTTP-Alternate",
    8443: "HTTPS-Alternate",
})


def service_name(port: int) -> str:
    return SERVICE_NAMES.get(port, "Unknown")


async def check_port(host: str, port: int, timeout: float) -> bool:
    """Return ``True`` if a TCP connection to ``host:port`` succeeds in time."""
    try:
        _, writer = await asyncio.wait_for(
            asyncio.open_connection(host, port),
            timeout=timeout,
        )
    except (asyncio.TimeoutError, OSError, ValueError) as exc:
        logger.debug("Port %d on %s not reachable: %r", port, host, exc)
        return False

    writer.close()
    try:
        await asyncio.wait_for(writer.wait_closed(), timeout=timeout)
    except (asyncio.TimeoutError, OSError):
        pass
    return True


@ProbeRegistry.register
class PortProbe(BaseProbe):
    """TCP reachability of the common service ports."""

    name: str = "ports"
    description: str = "TCP Port Reachability (fixed common-port list)"
    order: int = 20

    ports: tuple[int, ...] = COMMON_PORTS

    async def execute(self, context: ScanContext) -> ProbeResult:
        """Probe every port concurrently and report the reachable ones.

        Results keep the order of :data:`COMMON_PORTS` regardless of which
        connect finishes first.
        """
        start: float = time.monotonic()
        timeout: float = self.settings.PORT_TIMEOUT

        reachable: list[bool] = await asyncio.gather(
            *(check_port(context.hostname, port, timeout) for port in self.ports)
        )

        open_ports: list[OpenPort] = []
        vulnerabilities: list[Vulnerability] = []
        for port, is_open in zip(self.ports, reachable):
            if not is_open:
                continue
            service = service_name(port)
            open_ports.append(OpenPort(port=port, service=service))
            if port not in WEB_PORTS:
                vulnerabilities.append(
                    Vulnerability(
                        type="Open Port",
                        description=(
                            f"Port {port} ({service}) is open and may expose "
                            "sensitive services"
                        ),
                        severity=Severity.HIGH,
                    )
                )

        duration: float = time.monotonic() - start
        logger.info(
            "Port probe found %d/%d ports open on %s in %.1fs",
            len(open_ports),
            len(self.ports),
            context.hostname,
            duration,
        )

        return ProbeResult(
            probe_name=self.name,
            success=True,
            fragment=ReportFragment(
                open_ports=tuple(open_ports),
                vulnerabilities=tuple(vulnerabilities),
            ),
            duration_seconds=round(duration, 3),
        )
