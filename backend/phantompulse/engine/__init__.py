"""PhantomPulse Probing Engine - scan orchestration and report aggregation."""

from phantompulse.engine.aggregate import merge_fragments
from phantompulse.engine.orchestrator import ScanError, ScanOrchestrator, scan_target

__all__ = [
    "ScanError",
    "ScanOrchestrator",
    "merge_fragments",
    "scan_target",
]
