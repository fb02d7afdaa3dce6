"""
Tests for the report value types and their API serialisation.
"""

from __future__ import annotations

import dataclasses

import pytest

from phantompulse.api.schemas.report import ScanReportResponse, SslSchema
from phantompulse.models.report import (
    UNKNOWN,
    Location,
    OpenPort,
    ReportFragment,
    ScanReport,
    ServerInfo,
    Severity,
    SslInfo,
    Vulnerability,
)


def test_severity_values() -> None:
    """Severities serialise to their capitalised names."""
    assert [s.value for s in Severity] == ["Low", "Medium", "High"]


def test_value_types_are_immutable() -> None:
    port = OpenPort(port=22, service="SSH")

    with pytest.raises(dataclasses.FrozenInstanceError):
        port.port = 23  # type: ignore[misc]


def test_open_port_state_defaults_to_open() -> None:
    assert OpenPort(port=80, service="HTTP").state == "open"


def test_ssl_unknown_sentinel() -> None:
    """The sentinel has every field set to ``unknown``."""
    info = SslInfo.unknown()

    assert all(getattr(info, f.name) == UNKNOWN for f in dataclasses.fields(info))
    assert info.is_unknown is True


def test_partially_known_ssl_is_not_unknown() -> None:
    assert SslInfo(protocol="TLSv1.3").is_unknown is False


def test_default_report() -> None:
    report = ScanReport()

    assert report.server == ServerInfo(name=UNKNOWN, version=None)
    assert report.location == Location()
    assert report.vulnerabilities_of_type("Open Port") == []


def test_vulnerabilities_of_type() -> None:
    high = Vulnerability(type="Open Port", description="22", severity=Severity.HIGH)
    medium = Vulnerability(type="Mixed Content", description="img", severity=Severity.MEDIUM)
    report = ScanReport(vulnerabilities=(high, medium, high))

    assert report.vulnerabilities_of_type("Open Port") == [high, high]


def test_serialised_keys_are_camel_case() -> None:
    data = ScanReportResponse.model_validate(ScanReport()).model_dump(by_alias=True)

    assert "openPorts" in data
    assert "missingSecurityHeaders" in data
    assert set(data["ssl"]) == {
        "valid", "issuer", "validFrom", "validTo", "protocol", "cipher", "bits",
    }


def test_ssl_schema_keeps_types() -> None:
    """A real verdict stays boolean and key size stays numeric."""
    schema = SslSchema.model_validate(
        SslInfo(
            valid=False,
            issuer="Example CA",
            valid_from="2024-01-01T00:00:00+00:00",
            valid_to="2025-01-01T00:00:00+00:00",
            protocol="TLSv1.2",
            cipher="ECDHE-RSA-AES128-GCM-SHA256",
            bits=128,
        )
    )

    assert schema.valid is False
    assert schema.bits == 128


def test_report_headers_are_read_only() -> None:
    """Response headers in a report cannot be rewritten in place."""
    report = ScanReport(headers={"server": "nginx"})

    with pytest.raises(TypeError):
        report.headers["server"] = "tampered"  # type: ignore[index]
    assert report.headers == {"server": "nginx"}


def test_report_headers_detached_from_source() -> None:
    """Changing the dict a report was built from leaves the report alone."""
    source = {"server": "nginx"}
    fragment = ReportFragment(headers=source)
    source["server"] = "tampered"

    assert fragment.headers["server"] == "nginx"


def test_report_is_hashable() -> None:
    """Equal reports hash equally, headers included in equality."""
    first = ScanReport(headers={"server": "nginx"}, open_ports=(OpenPort(port=22, service="SSH"),))
    second = ScanReport(headers={"server": "nginx"}, open_ports=(OpenPort(port=22, service="SSH"),))

    assert first == second
    assert hash(first) == hash(second)
    assert first != ScanReport(headers={"server": "apache"}, open_ports=first.open_ports)


def test_serialised_headers_are_plain_dict() -> None:
    data = ScanReportResponse.model_validate(
        ScanReport(headers={"content-type": "text/html"})
    ).model_dump(by_alias=True)

    assert data["headers"] == {"content-type": "text/html"}
