"""
Subdomain Enumeration probe for PhantomPulse.

Resolves a small fixed wordlist of common subdomain prefixes against the
target's base domain via DNS A-record lookups.  A candidate that does not
resolve simply does not exist; it is never an error for the probe as a
whole.  This is an **active** probe that generates DNS traffic.
"""

from __future__ import annotations

import asyncio
import logging
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Optional

import dns.resolver

from phantompulse.models.report import ReportFragment, Subdomain
from phantompulse.probes.base import BaseProbe, ProbeResult, ScanContext
from phantompulse.probes.registry import ProbeRegistry
from phantompulse.probes.resolver import build_resolver, is_ip_address, resolve_a_async

logger = logging.getLogger(__name__)

CANDIDATE_SUBDOMAINS: tuple[str, ...] = (
    "www", "mail", "ftp", "webmail", "admin",
    "test", "dev", "staging", "api", "blog",
)


def base_domain(hostname: str) -> str:
    """Return the last two DNS labels of *hostname* (``a.b.example.com`` -> ``example.com``)."""
    labels = [label for label in hostname.rstrip(".").split(".") if label]
    return ".".join(labels[-2:])


@ProbeRegistry.register
class SubdomainEnumeratorProbe(BaseProbe):
    """Fixed-wordlist subdomain discovery via DNS A records."""

    name: str = "subdomains"
    description: str = "Subdomain Discovery via DNS Resolution (fixed wordlist)"
    order: int = 60

    candidates: tuple[str, ...] = CANDIDATE_SUBDOMAINS

    async def execute(self, context: ScanContext) -> ProbeResult:
        """Resolve ``{candidate}.{base_domain}`` for every candidate.

        Only resolvable candidates are reported, each with its first
        address, in wordlist order.
        """
        start: float = time.monotonic()
        errors: list[str] = []

        if is_ip_address(context.hostname):
            logger.debug("Target %s is an IP literal; skipping subdomains", context.hostname)
            return ProbeResult(probe_name=self.name, success=True)

        domain = base_domain(context.hostname)
        try:
            resolver: dns.resolver.Resolver = build_resolver(self.settings)
        except dns.resolver.NoResolverConfiguration as exc:
            logger.warning("No DNS resolver configuration: %s", exc)
            return ProbeResult(
                probe_name=self.name,
                success=False,
                errors=[f"resolver configuration: {exc}"],
            )

        executor = ThreadPoolExecutor(max_workers=len(self.candidates))

        async def _check_candidate(prefix: str) -> Optional[Subdomain]:
            fqdn = f"{prefix}.{domain}"
            try:
                addresses = await resolve_a_async(resolver, fqdn, executor)
            except Exception as exc:  # noqa: BLE001
                error_msg = f"subdomain {fqdn}: {exc}"
                logger.debug(error_msg)
                errors.append(error_msg)
                return None
            if not addresses:
                return None
            return Subdomain(subdomain=fqdn, ip=addresses[0])

        try:
            resolved = await asyncio.gather(
                *(_check_candidate(prefix) for prefix in self.candidates)
            )
        finally:
            executor.shutdown(wait=False)

        subdomains = tuple(entry for entry in resolved if entry is not None)

        duration: float = time.monotonic() - start
        logger.info(
            "Subdomain probe resolved %d/%d candidates of %s in %.1fs",
            len(subdomains),
            len(self.candidates),
            domain,
            duration,
        )

        return ProbeResult(
            probe_name=self.name,
            success=True,
            fragment=ReportFragment(subdomains=subdomains),
            errors=errors if errors else None,
            duration_seconds=round(duration, 3),
        )
