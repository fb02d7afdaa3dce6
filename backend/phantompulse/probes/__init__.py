"""
Probe catalogue -- import all probes for auto-registration.

Importing this package causes every concrete probe class to be loaded and,
through the :func:`@ProbeRegistry.register <ProbeRegistry.register>`
decorator, registered in the central probe registry.  The scan orchestrator
only needs to ``import phantompulse.probes`` to have the full set available.
"""

from phantompulse.probes.registry import ProbeRegistry

# Passive: work on the initial fetch only
from phantompulse.probes.headers import HeaderAnalyzerProbe
from phantompulse.probes.content import ContentInspectorProbe

# Active: contact the target or a third-party service
from phantompulse.probes.ports import PortProbe
from phantompulse.probes.geolocation import GeoLocatorProbe
from phantompulse.probes.tls import TLSInspectorProbe
from phantompulse.probes.subdomains import SubdomainEnumeratorProbe

__all__: list[str] = [
    "ProbeRegistry",
    "HeaderAnalyzerProbe",
    "ContentInspectorProbe",
    # Active probes
    "PortProbe",
    "GeoLocatorProbe",
    "TLSInspectorProbe",
    "SubdomainEnumeratorProbe",
]
