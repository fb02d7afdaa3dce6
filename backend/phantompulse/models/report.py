"""
Value types for the security-posture report.

Every type here is a frozen dataclass: probes return immutable
:class:`ReportFragment` partials and the aggregation step folds them into a
single :class:`ScanReport`.  Defaults are explicit empty / unknown values so
the report has the same shape no matter how many probes failed.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Optional, Union

UNKNOWN: str = "unknown"
"""Sentinel used for fields whose value could not be determined."""


def freeze_headers(headers: Optional[Mapping[str, str]]) -> Optional[Mapping[str, str]]:
    """Return a read-only view of *headers* (``None`` stays ``None``)."""
    if headers is None or isinstance(headers, MappingProxyType):
        return headers
    return MappingProxyType(dict(headers))


class Severity(str, Enum):
    """Closed set of vulnerability severities."""

    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


class TechnologyType(str, Enum):
    """Kinds of technology the content fingerprinting can report."""

    CMS = "CMS"
    FRAMEWORK = "Framework"


@dataclass(frozen=True)
class Vulnerability:
    """A single finding.  Multiple checks append these; no deduplication."""

    type: str
    description: str
    severity: Severity


@dataclass(frozen=True)
class OpenPort:
    port: int
    service: str
    state: str = "open"


@dataclass(frozen=True)
class SecurityHeader:
    header: str
    value: str


@dataclass(frozen=True)
class Technology:
    name: str
    type: TechnologyType


@dataclass(frozen=True)
class ServerInfo:
    """Best-effort web server identification from response headers."""

    name: str = UNKNOWN
    version: Optional[str] = None


@dataclass(frozen=True)
class SslInfo:
    """TLS certificate and session details for port 443.

    The default instance is the all-unknown sentinel: either every field is
    populated from a successful handshake or none of them is.
    """

    valid: Union[bool, str] = UNKNOWN
    issuer: str = UNKNOWN
    valid_from: str = UNKNOWN
    valid_to: str = UNKNOWN
    protocol: str = UNKNOWN
    cipher: str = UNKNOWN
    bits: Union[int, str] = UNKNOWN

    @classmethod
    def unknown(cls) -> "SslInfo":
        """Return the sentinel used when the TLS probe cannot report."""
        return cls()

    @property
    def is_unknown(self) -> bool:
        return self == SslInfo.unknown()


@dataclass(frozen=True)
class Subdomain:
    subdomain: str
    ip: str


@dataclass(frozen=True)
class Coordinates:
    latitude: Optional[float] = None
    longitude: Optional[float] = None


@dataclass(frozen=True)
class Location:
    """Coarse geolocation of the target's first A record (all-null default)."""

    ip: Optional[str] = None
    country: Optional[str] = None
    city: Optional[str] = None
    coordinates: Coordinates = field(default_factory=Coordinates)


@dataclass(frozen=True)
class ReportFragment:
    """Partial result contributed by one probe.

    ``None`` scalar sections and empty sequences mean "this probe has
    nothing to say about that section"; the aggregation step keeps the
    report default in that case.

    Attributes:
        headers:                  Lower-cased response headers of the initial fetch.
        server:                   Server identification.
        open_ports:               Reachable TCP ports.
        security_headers:         Recognised security headers that are present.
        missing_security_headers: Canonical security headers that are absent.
        vulnerabilities:          Findings, in the order the probe produced them.
        technologies:             Technology fingerprints.
        ssl:                      TLS details.
        subdomains:               Resolvable candidate subdomains.
        location:                 Geolocation.
    """

    headers: Optional[Mapping[str, str]] = field(default=None, hash=False)
    server: Optional[ServerInfo] = None
    open_ports: tuple[OpenPort, ...] = ()
    security_headers: tuple[SecurityHeader, ...] = ()
    missing_security_headers: tuple[str, ...] = ()
    vulnerabilities: tuple[Vulnerability, ...] = ()
    technologies: tuple[Technology, ...] = ()
    ssl: Optional[SslInfo] = None
    subdomains: tuple[Subdomain, ...] = ()
    location: Optional[Location] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "headers", freeze_headers(self.headers))


@dataclass(frozen=True)
class ScanReport:
    """The complete, immutable result of one scan.

    Field names follow the wire contract in snake_case; the API layer
    serialises them in camelCase (``openPorts``, ``validFrom`` and so on).
    """

    headers: Optional[Mapping[str, str]] = field(default=None, hash=False)
    server: ServerInfo = field(default_factory=ServerInfo)
    open_ports: tuple[OpenPort, ...] = ()
    security_headers: tuple[SecurityHeader, ...] = ()
    missing_security_headers: tuple[str, ...] = ()
    vulnerabilities: tuple[Vulnerability, ...] = ()
    technologies: tuple[Technology, ...] = ()
    ssl: SslInfo = field(default_factory=SslInfo)
    subdomains: tuple[Subdomain, ...] = ()
    location: Location = field(default_factory=Location)

    def __post_init__(self) -> None:
        object.__setattr__(self, "headers", freeze_headers(self.headers))

    def vulnerabilities_of_type(self, vuln_type: str) -> list[Vulnerability]:
        """Return every vulnerability whose ``type`` equals *vuln_type*."""
        return [v for v in self.vulnerabilities if v.type == vuln_type]
