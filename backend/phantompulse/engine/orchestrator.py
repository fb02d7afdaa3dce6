"""
Scan Orchestrator for PhantomPulse.

Coordinates one point-in-time scan of a single URL:

1. Fetch the target over HTTP(S).  This is the only step whose failure is
   fatal: it raises :class:`ScanError` and no report is produced.
2. Run every registered probe against the fetched response.  Probes are
   independent, so by default they run concurrently via
   :func:`asyncio.gather`; each runs under its own deadline and any failure
   is absorbed into an empty fragment.
3. Merge the fragments in probe order into an immutable
   :class:`~phantompulse.models.report.ScanReport`.
"""

from __future__ import annotations

import asyncio
import time
from typing import Optional

import httpx

import phantompulse.probes  # noqa: F401  (registers every probe)
from phantompulse.config import Settings, get_settings
from phantompulse.core.logging import get_logger
from phantompulse.engine.aggregate import merge_fragments
from phantompulse.models.report import ReportFragment, ScanReport
from phantompulse.probes.base import BaseProbe, ProbeResult, ScanContext
from phantompulse.probes.registry import ProbeRegistry

logger = get_logger(__name__)


class ScanError(Exception):
    """The initial fetch of the scan target failed; the scan was aborted."""


class ScanOrchestrator:
    """Runs one scan per :meth:`scan` call.

    The orchestrator holds no per-scan state, so one instance can serve any
    number of scans, concurrently or not.

    Usage::

        orchestrator = ScanOrchestrator()
        report = await orchestrator.scan("https://example.com")
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        probes: Optional[list[str]] = None,
    ) -> None:
        """Initialise the orchestrator.

        Args:
            settings: Configuration; defaults to :func:`get_settings`.
            probes:   Names of the probes to run; defaults to all registered.

        Raises:
            KeyError: If *probes* names an unregistered probe.
        """
        self._settings: Settings = settings or get_settings()
        self._probes: list[BaseProbe] = ProbeRegistry.get_execution_order(
            probes, settings=self._settings
        )

    @property
    def probe_names(self) -> list[str]:
        return [probe.name for probe in self._probes]

    # -- Public entry point ---------------------------------------------------

    async def scan(self, url: str) -> ScanReport:
        """Scan *url* and return the merged report.

        Args:
            url: An absolute ``http`` or ``https`` URL.

        Returns:
            The complete :class:`ScanReport`.

        Raises:
            ScanError: If the initial fetch fails (DNS failure, refused or
                timed-out connection, any other transport error).  Nothing
                else raises.
        """
        start: float = time.monotonic()
        logger.info("Starting scan", extra={"action": "scan_start", "target": url})

        context: ScanContext = await self._fetch(url)
        results: list[ProbeResult] = await self._run_probes(context)

        report: ScanReport = merge_fragments(
            [ReportFragment(headers=context.headers)]
            + [result.fragment for result in results]
        )

        failed: list[str] = [r.probe_name for r in results if not r.success]
        logger.info(
            "Scan completed in %.1fs (%d probes, degraded: %s)",
            time.monotonic() - start,
            len(results),
            ", ".join(failed) or "none",
            extra={"action": "scan_completed", "target": url},
        )
        return report

    # -- Initial fetch --------------------------------------------------------

    async def _fetch(self, url: str) -> ScanContext:
        """Fetch *url*, accepting every status code.

        The whole request, including redirects and the body, must finish
        within ``FETCH_TIMEOUT``; the httpx timeout only bounds each phase.

        Raises:
            ScanError: On any transport-level failure or an unusable URL.
        """
        try:
            hostname: str = httpx.URL(url).host
        except httpx.InvalidURL as exc:
            raise ScanError(f"Invalid scan target URL: {url!r}") from exc
        if not hostname:
            raise ScanError(f"Scan target URL has no host: {url!r}")

        try:
            async with httpx.AsyncClient(
                timeout=httpx.Timeout(self._settings.FETCH_TIMEOUT),
                headers={"User-Agent": self._settings.USER_AGENT},
                follow_redirects=True,
                verify=self._settings.FETCH_VERIFY_TLS,
            ) as client:
                response: httpx.Response = await asyncio.wait_for(
                    client.get(url),
                    timeout=self._settings.FETCH_TIMEOUT,
                )
        except (httpx.HTTPError, httpx.InvalidURL, asyncio.TimeoutError) as exc:
            logger.error(
                "Initial fetch failed: %r",
                exc,
                extra={"action": "fetch_failed", "target": url},
            )
            raise ScanError("Failed to complete security scan") from exc

        logger.info(
            "Fetched target (HTTP %d, %d bytes)",
            response.status_code,
            len(response.content),
            extra={"action": "fetch_done", "target": url},
        )

        return ScanContext(
            url=url,
            hostname=hostname,
            status_code=response.status_code,
            headers={name.lower(): value for name, value in response.headers.items()},
            body=response.text,
        )

    # -- Probe execution ------------------------------------------------------

    async def _run_probes(self, context: ScanContext) -> list[ProbeResult]:
        """Run every probe; results come back in probe order."""
        if self._settings.SCAN_CONCURRENT:
            return list(
                await asyncio.gather(
                    *(self._run_probe(probe, context) for probe in self._probes)
                )
            )
        return [await self._run_probe(probe, context) for probe in self._probes]

    async def _run_probe(self, probe: BaseProbe, context: ScanContext) -> ProbeResult:
        """Run one probe under its deadline, absorbing any failure."""
        start: float = time.monotonic()
        try:
            result: ProbeResult = await asyncio.wait_for(
                probe.execute(context),
                timeout=self._settings.PROBE_TIMEOUT,
            )
        except asyncio.TimeoutError:
            error_msg = f"{probe.name}: exceeded {self._settings.PROBE_TIMEOUT}s deadline"
        except Exception as exc:  # noqa: BLE001
            error_msg = f"{probe.name}: {exc!r}"
        else:
            logger.info(
                "Probe completed: %s (success=%s, duration=%.2fs)",
                probe.name,
                result.success,
                result.duration_seconds,
                extra={"action": "probe_completed", "target": context.url},
            )
            return result

        logger.warning(
            "Probe failed and was skipped: %s",
            error_msg,
            extra={"action": "probe_failed", "target": context.url},
        )
        return ProbeResult(
            probe_name=probe.name,
            success=False,
            errors=[error_msg],
            duration_seconds=round(time.monotonic() - start, 3),
        )


async def scan_target(url: str, settings: Optional[Settings] = None) -> ScanReport:
    """Scan *url* with every registered probe.

    Raises:
        ScanError: If the initial fetch fails.
    """
    return await ScanOrchestrator(settings=settings).scan(url)
