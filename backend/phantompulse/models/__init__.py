"""
Report value types for PhantomPulse.

Re-exports every public type so consumers can do::

    from phantompulse.models import ScanReport, Vulnerability, Severity
"""

from phantompulse.models.report import (
    UNKNOWN,
    Coordinates,
    Location,
    OpenPort,
    ReportFragment,
    ScanReport,
    SecurityHeader,
    ServerInfo,
    Severity,
    SslInfo,
    Subdomain,
    Technology,
    TechnologyType,
    Vulnerability,
    freeze_headers,
)

__all__: list[str] = [
    "UNKNOWN",
    "Coordinates",
    "Location",
    "OpenPort",
    "ReportFragment",
    "ScanReport",
    "SecurityHeader",
    "ServerInfo",
    "Severity",
    "SslInfo",
    "Subdomain",
    "Technology",
    "TechnologyType",
    "Vulnerability",
    "freeze_headers",
]
