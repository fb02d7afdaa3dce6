"""
Scan endpoint.

Runs one synchronous scan per request and returns the full report.  Input
validation happens in :class:`~phantompulse.api.schemas.ScanRequest`; the
only scan-level error surfaced here is failure of the initial fetch.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from phantompulse.api.deps import enforce_rate_limit, get_orchestrator
from phantompulse.api.schemas.report import ScanReportResponse, ScanRequest
from phantompulse.engine.orchestrator import ScanError, ScanOrchestrator
from phantompulse.models.report import ScanReport

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "",
    response_model=ScanReportResponse,
    status_code=status.HTTP_200_OK,
    summary="Scan a URL and return its security-posture report",
    dependencies=[Depends(enforce_rate_limit)],
)
async def create_scan(
    payload: ScanRequest,
    orchestrator: ScanOrchestrator = Depends(get_orchestrator),
) -> ScanReportResponse:
    """Scan ``payload.url`` and return the complete report.

    Args:
        payload: Validated scan request.
        orchestrator: The scan orchestrator (injected automatically).

    Returns:
        The serialised :class:`~phantompulse.models.report.ScanReport`.

    Raises:
        HTTPException: *502 Bad Gateway* when the target could not be
            fetched.
    """
    try:
        report: ScanReport = await orchestrator.scan(payload.url)
    except ScanError as exc:
        logger.warning("Scan of %s failed: %s", payload.url, exc)
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=f"Error during scan: {exc}",
        ) from exc

    return ScanReportResponse.model_validate(report)
