"""
Pydantic v2 schemas for the scan request and the serialised report.

Response models use ``ConfigDict(from_attributes=True)`` so the engine's
frozen dataclasses can be serialised directly via
``ScanReportResponse.model_validate(report)``.  Field names are emitted in
camelCase and every section is always present, with ``null`` / ``"unknown"``
in place of values a probe could not determine.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from phantompulse.core.security import validate_target_url
from phantompulse.models.report import Severity, TechnologyType

_RESPONSE_CONFIG = ConfigDict(
    from_attributes=True,
    alias_generator=to_camel,
    populate_by_name=True,
)

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class ScanRequest(BaseModel):
    """Payload for ``POST /api/v1/scans``.

    Attributes:
        url: Absolute ``http`` or ``https`` URL of the host to scan.
    """

    url: str = Field(
        ...,
        min_length=1,
        max_length=2048,
        examples=["https://example.com"],
        description="Absolute http(s) URL to scan.",
    )

    @field_validator("url", mode="after")
    @classmethod
    def validate_url(cls, value: str) -> str:
        return validate_target_url(value)


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class ServerSchema(BaseModel):
    name: str
    version: Optional[str] = None

    model_config = _RESPONSE_CONFIG


class OpenPortSchema(BaseModel):
    port: int
    service: str
    state: str

    model_config = _RESPONSE_CONFIG


class SecurityHeaderSchema(BaseModel):
    header: str
    value: str

    model_config = _RESPONSE_CONFIG


class VulnerabilitySchema(BaseModel):
    type: str
    description: str
    severity: Severity

    model_config = _RESPONSE_CONFIG


class TechnologySchema(BaseModel):
    name: str
    type: TechnologyType

    model_config = _RESPONSE_CONFIG


class SslSchema(BaseModel):
    """TLS section; every field is ``"unknown"`` when the probe failed."""

    valid: Union[bool, str]
    issuer: str
    valid_from: str
    valid_to: str
    protocol: str
    cipher: str
    bits: Union[int, str]

    model_config = _RESPONSE_CONFIG


class SubdomainSchema(BaseModel):
    subdomain: str
    ip: str

    model_config = _RESPONSE_CONFIG


class CoordinatesSchema(BaseModel):
    latitude: Optional[float] = None
    longitude: Optional[float] = None

    model_config = _RESPONSE_CONFIG


class LocationSchema(BaseModel):
    ip: Optional[str] = None
    country: Optional[str] = None
    city: Optional[str] = None
    coordinates: CoordinatesSchema

    model_config = _RESPONSE_CONFIG


class ScanReportResponse(BaseModel):
    """Returned by ``POST /api/v1/scans`` when the scan completes (200).

    Attributes:
        headers: Lower-cased response headers of the initial fetch.
        server: Best-effort web server identification.
        open_ports: Reachable TCP ports (closed ports are omitted).
        security_headers: Security headers present on the response.
        missing_security_headers: Canonical security headers that are absent.
        vulnerabilities: Findings from every probe, in probe order.
        technologies: CMS and framework fingerprints.
        ssl: TLS certificate and session details.
        subdomains: Resolvable candidate subdomains.
        location: Coarse geolocation of the target's address.
    """

    headers: Optional[dict[str, str]] = None
    server: ServerSchema
    open_ports: list[OpenPortSchema]
    security_headers: list[SecurityHeaderSchema]
    missing_security_headers: list[str]
    vulnerabilities: list[VulnerabilitySchema]
    technologies: list[TechnologySchema]
    ssl: SslSchema
    subdomains: list[SubdomainSchema]
    location: LocationSchema

    model_config = _RESPONSE_CONFIG

    @field_validator("headers", mode="before")
    @classmethod
    def copy_headers(cls, value: Any) -> Any:
        """The report holds a read-only mapping; serialise a plain dict."""
        if isinstance(value, Mapping):
            return dict(value)
        return value
