"""
Pydantic v2 schemas for the PhantomPulse REST API.

Re-exports every public schema so consumers can do::

    from phantompulse.api.schemas import ScanRequest, ScanReportResponse
"""

from phantompulse.api.schemas.report import (
    CoordinatesSchema,
    LocationSchema,
    OpenPortSchema,
    ScanReportResponse,
    ScanRequest,
    SecurityHeaderSchema,
    ServerSchema,
    SslSchema,
    SubdomainSchema,
    TechnologySchema,
    VulnerabilitySchema,
)

__all__: list[str] = [
    "ScanRequest",
    "ScanReportResponse",
    "ServerSchema",
    "OpenPortSchema",
    "SecurityHeaderSchema",
    "VulnerabilitySchema",
    "TechnologySchema",
    "SslSchema",
    "SubdomainSchema",
    "CoordinatesSchema",
    "LocationSchema",
]
