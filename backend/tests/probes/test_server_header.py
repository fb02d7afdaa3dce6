"""
Tests for web server identification.

Validates the known server signatures, version extraction, verbatim
pass-through of unrecognised values and the absent-header case.
"""

from __future__ import annotations

import pytest

from phantompulse.models.report import ServerInfo
from phantompulse.probes.server_header import classify_server


@pytest.mark.parametrize(
    ("header", "name", "version"),
    [
        ("Apache/2.4.41 (Ubuntu)", "Apache", "2.4.41"),
        ("Apache", "Apache", None),
        ("nginx/1.21.0", "Nginx", "1.21.0"),
        ("nginx", "Nginx", None),
        ("Microsoft-IIS/10.0", "Iis", "10.0"),
        ("lighttpd/1.4.59", "Lighttpd", "1.4.59"),
        ("Node.js/18.12.1", "Nodejs", "18.12.1"),
        ("Express/4.18.2", "Express", "4.18.2"),
    ],
)
def test_known_signatures(header: str, name: str, version: str | None) -> None:
    """Recognised servers map to a canonical name and their version."""
    assert classify_server(header) == ServerInfo(name=name, version=version)


def test_matching_is_case_insensitive() -> None:
    """Signature matching ignores case."""
    assert classify_server("NGINX/1.25.3") == ServerInfo(name="Nginx", version="1.25.3")


def test_unrecognised_value_passes_through() -> None:
    """An unknown server string is reported verbatim without a version."""
    assert classify_server("cloudflare") == ServerInfo(name="cloudflare", version=None)


@pytest.mark.parametrize("header", [None, ""])
def test_absent_header_returns_none(header: str | None) -> None:
    """No header means no identification, not an error."""
    assert classify_server(header) is None
