"""
TLS Inspection probe for PhantomPulse.

Connects to port 443 of the target with certificate verification disabled so
the certificate can be inspected even when it is invalid, then performs a
second, fully verifying handshake to obtain the validity verdict.  Certificate
fields are parsed from the DER form with ``cryptography``.

Either every ``ssl`` field is populated or every field is the ``"unknown"``
sentinel; a partially filled TLS section is never reported.  This is an
**active** probe.
"""

from __future__ import annotations

import asyncio
import logging
import ssl
import time
from typing import Optional

from cryptography import x509
from cryptography.x509.oid import NameOID

from phantompulse.models.report import ReportFragment, SslInfo
from phantompulse.probes.base import BaseProbe, ProbeResult, ScanContext
from phantompulse.probes.registry import ProbeRegistry

logger = logging.getLogger(__name__)

TLS_PORT: int = 443


def _permissive_context() -> ssl.SSLContext:
    ctx = ssl.create_default_context()
    ctx.check_hostname = False
    ctx.verify_mode = ssl.CERT_NONE
    return ctx


def issuer_name(cert: x509.Certificate) -> str:
    """Return the issuer's organisation, else its common name.

    Raises:
        ValueError: If the issuer carries neither attribute.
    """
    for oid in (NameOID.ORGANIZATION_NAME, NameOID.COMMON_NAME):
        attributes = cert.issuer.get_attributes_for_oid(oid)
        if attributes:
            return str(attributes[0].value)
    raise ValueError("certificate issuer has no organisation or common name")


def build_ssl_info(
    der_cert: Optional[bytes],
    protocol: Optional[str],
    cipher: Optional[tuple[str, str, int]],
    valid: bool,
) -> SslInfo:
    """Assemble a fully populated :class:`SslInfo`.

    Raises:
        ValueError: If the certificate or session details are absent or
            cannot be parsed.  Callers turn this into the unknown sentinel.
    """
    if not der_cert:
        raise ValueError("server presented no certificate")
    if not protocol or not cipher:
        raise ValueError("TLS session details unavailable")

    cert = x509.load_der_x509_certificate(der_cert)
    cipher_name, _, bits = cipher

    return SslInfo(
        valid=valid,
        issuer=issuer_name(cert),
        valid_from=cert.not_valid_before_utc.isoformat(),
        valid_to=cert.not_valid_after_utc.isoformat(),
        protocol=protocol,
        cipher=cipher_name,
        bits=bits,
    )


async def _close(writer: asyncio.StreamWriter, timeout: float) -> None:
    """Close *writer*, giving up on the TLS shutdown after *timeout*."""
    writer.close()
    try:
        await asyncio.wait_for(writer.wait_closed(), timeout=timeout)
    except (asyncio.TimeoutError, OSError):
        pass


async def verify_certificate(host: str, port: int, timeout: float) -> bool:
    """Return ``True`` if a handshake with chain and hostname checks succeeds."""
    try:
        _, writer = await asyncio.wait_for(
            asyncio.open_connection(host, port, ssl=ssl.create_default_context()),
            timeout=timeout,
        )
    except ssl.SSLCertVerificationError as exc:
        logger.debug("Certificate for %s failed verification: %s", host, exc)
        return False
    except (asyncio.TimeoutError, OSError, ValueError) as exc:
        logger.debug("Verifying TLS handshake with %s failed: %r", host, exc)
        return False

    await _close(writer, timeout)
    return True


async def inspect_tls(host: str, port: int = TLS_PORT, timeout: float = 8.0) -> SslInfo:
    """Inspect the TLS endpoint at ``host:port``.

    Returns:
        A fully populated :class:`SslInfo`, or :meth:`SslInfo.unknown` when
        the handshake or certificate parsing fails.
    """
    try:
        _, writer = await asyncio.wait_for(
            asyncio.open_connection(host, port, ssl=_permissive_context()),
            timeout=timeout,
        )
    except (asyncio.TimeoutError, OSError, ValueError) as exc:
        logger.debug("TLS connect to %s:%d failed: %r", host, port, exc)
        return SslInfo.unknown()

    try:
        ssl_object = writer.get_extra_info("ssl_object")
        if ssl_object is None:
            return SslInfo.unknown()
        der_cert = ssl_object.getpeercert(binary_form=True)
        protocol = ssl_object.version()
        cipher = ssl_object.cipher()
    finally:
        await _close(writer, timeout)

    valid = await verify_certificate(host, port, timeout)

    try:
        return build_ssl_info(der_cert, protocol, cipher, valid)
    except (ValueError, TypeError) as exc:
        logger.warning("Could not parse TLS certificate of %s: %s", host, exc)
        return SslInfo.unknown()


@ProbeRegistry.register
class TLSInspectorProbe(BaseProbe):
    """Certificate validity, issuer, protocol and cipher on port 443."""

    name: str = "tls"
    description: str = "TLS Certificate & Session Inspection"
    order: int = 50

    async def execute(self, context: ScanContext) -> ProbeResult:
        start: float = time.monotonic()
        info = await inspect_tls(context.hostname, TLS_PORT, self.settings.TLS_TIMEOUT)
        duration: float = time.monotonic() - start

        if info.is_unknown:
            logger.info("TLS details unavailable for %s", context.hostname)
        else:
            logger.info(
                "TLS %s / %s on %s (valid=%s) in %.1fs",
                info.protocol,
                info.cipher,
                context.hostname,
                info.valid,
                duration,
            )

        return ProbeResult(
            probe_name=self.name,
            success=not info.is_unknown,
            fragment=ReportFragment(ssl=info),
            errors=[f"TLS inspection {context.hostname}: unavailable"] if info.is_unknown else None,
            duration_seconds=round(duration, 3),
        )
