"""
DNS helpers shared by the subdomain and geolocation probes.

dnspython's resolver is blocking, so lookups run on a thread pool from the
event loop.  Negative answers (NXDOMAIN, NoAnswer, timeouts) are ordinary
outcomes and come back as an empty list.
"""

from __future__ import annotations

import asyncio
import ipaddress
import logging
from concurrent.futures import Executor
from typing import Optional

import dns.exception
import dns.resolver

from phantompulse.config import Settings

logger = logging.getLogger(__name__)


def build_resolver(settings: Settings) -> dns.resolver.Resolver:
    """Return a resolver bounded by ``DNS_TIMEOUT`` / ``DNS_LIFETIME``."""
    resolver = dns.resolver.Resolver()
    resolver.timeout = settings.DNS_TIMEOUT
    resolver.lifetime = settings.DNS_LIFETIME
    return resolver


def is_ip_address(host: str) -> bool:
    try:
        ipaddress.ip_address(host)
    except ValueError:
        return False
    return True


def resolve_a(resolver: dns.resolver.Resolver, fqdn: str) -> list[str]:
    """Resolve the A records of *fqdn*.

    Returns an empty list on NXDOMAIN, NoAnswer, NoNameservers or timeout.
    """
    try:
        answers = resolver.resolve(fqdn, "A")
    except (
        dns.resolver.NXDOMAIN,
        dns.resolver.NoAnswer,
        dns.resolver.NoNameservers,
        dns.exception.Timeout,
    ):
        return []
    return [str(rdata) for rdata in answers]


async def resolve_a_async(
    resolver: dns.resolver.Resolver,
    fqdn: str,
    executor: Optional[Executor] = None,
) -> list[str]:
    """Run :func:`resolve_a` off the event loop."""
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(executor, resolve_a, resolver, fqdn)
