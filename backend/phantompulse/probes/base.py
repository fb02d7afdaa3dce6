"""
Base probe interface for all PhantomPulse checks.

Defines the abstract base class, the scan context handed to every probe and
the standard result container each probe returns.  A probe never writes to a
shared report: it returns an immutable :class:`ReportFragment` and the
orchestrator merges fragments once every probe has finished.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Optional

from phantompulse.config import Settings, get_settings
from phantompulse.models.report import ReportFragment, freeze_headers


@dataclass(frozen=True)
class ScanContext:
    """Immutable view of the initial fetch, shared by every probe.

    Attributes:
        url:         The URL the operator asked to scan.
        hostname:    Host part of *url* (no port, no brackets).
        status_code: HTTP status of the initial fetch (any code is accepted).
        headers:     Response headers with lower-cased names.
        body:        Decoded response body.
    """

    url: str
    hostname: str
    status_code: int = 0
    headers: Mapping[str, str] = field(default_factory=dict, hash=False)
    body: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "headers", freeze_headers(self.headers))


@dataclass
class ProbeResult:
    """Standardised result container returned by every probe.

    Attributes:
        probe_name:       Unique identifier of the probe that produced this result.
        success:          ``True`` when the probe completed without an absorbed failure.
        fragment:         The probe's contribution to the report.
        errors:           Human-readable error messages collected during execution.
        duration_seconds: Wall-clock time the probe spent executing.
    """

    probe_name: str
    success: bool
    fragment: ReportFragment = field(default_factory=ReportFragment)
    errors: Optional[list[str]] = None
    duration_seconds: float = 0.0


class BaseProbe(ABC):
    """Abstract base class that every probe must implement.

    Subclasses **must** override :meth:`execute` and set the class-level
    attributes ``name``, ``description`` and ``order``.

    Attributes:
        name:        Short unique identifier used in the registry.
        description: Human-readable one-liner describing the probe.
        order:       Merge position of the probe's fragment in the final
                     report.  Lower values come first, which fixes the order
                     of the shared ``vulnerabilities`` sequence.
    """

    name: str = "base"
    description: str = ""
    order: int = 100

    def __init__(self, settings: Optional[Settings] = None) -> None:
        self.settings: Settings = settings or get_settings()

    @abstractmethod
    async def execute(self, context: ScanContext) -> ProbeResult:
        """Run the probe against the target described by *context*.

        Implementations absorb every expected failure (refused connections,
        DNS misses, malformed input) and report it through
        :attr:`ProbeResult.errors` instead of raising.

        Args:
            context: The initial fetch of the scan target.

        Returns:
            A :class:`ProbeResult` carrying the probe's fragment.
        """
