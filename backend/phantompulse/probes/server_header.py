"""
Web server identification from a ``Server``-style response header.
"""

from __future__ import annotations

import re
from typing import Optional

from phantompulse.models.report import ServerInfo

# (signature key, pattern).  First match wins; group(1) is the version.
# The reported name is the key with its first letter upper-cased.
SERVER_SIGNATURES: tuple[tuple[str, re.Pattern[str]], ...] = (
    ("apache", re.compile(r"^Apache/?(\d+[.\d]*)?", re.IGNORECASE)),
    ("nginx", re.compile(r"^nginx/?(\d+[.\d]*)?", re.IGNORECASE)),
    ("iis", re.compile(r"^Microsoft-IIS/(\d+[.\d]*)", re.IGNORECASE)),
    ("lighttpd", re.compile(r"^lighttpd/(\d+[.\d]*)", re.IGNORECASE)),
    ("nodejs", re.compile(r"^Node\.js/(\d+[.\d]*)", re.IGNORECASE)),
    ("express", re.compile(r"^Express/(\d+[.\d]*)", re.IGNORECASE)),
)


def classify_server(header: Optional[str]) -> Optional[ServerInfo]:
    """Classify a raw server header into a name and optional version.

    Unrecognised values are returned verbatim as the name with no version.

    Args:
        header: Raw header value, possibly ``None`` or empty.

    Returns:
        A :class:`ServerInfo`, or ``None`` when *header* is absent.  Callers
        treat ``None`` as "unknown", never as an error.
    """
    if not header:
        return None

    for key, pattern in SERVER_SIGNATURES:
        match = pattern.match(header)
        if match:
            return ServerInfo(name=key.capitalize(), version=match.group(1))

    return ServerInfo(name=header, version=None)
