"""
Scan API endpoints.

Routes: POST /scans

Dependencies: facescan.application.services, facescan.models
System role: Folder registration HTTP API
"""

from fastapi import APIRouter, Depends, status

from facescan.api.deps import get_job_service
from facescan.api.routers.router_utils import handle_scan_errors
from facescan.application.services import JobService
from facescan.models import ScanRequest, ScanResponse

router = APIRouter(prefix="/scans", tags=["scans"])


@router.post("", response_model=ScanResponse, status_code=status.HTTP_201_CREATED)
@handle_scan_errors
async def create_scan(
    request: ScanRequest,
    job_service: JobService = Depends(get_job_service),
) -> ScanResponse:
    """
    Scan a shared folder and create a pending job.

    Args:
        request: Folder URL
        job_service: Injected JobService

    Returns:
        ScanResponse: Job id and the number of images found

    Raises:
        HTTPException(400): URL invalid or provider unsupported
        HTTPException(502): Folder listing failed
    """
    job = await job_service.create_scan_job(request.url)
    return ScanResponse(
        job_id=job.id,
        status=job.status,
        source_type=job.source_type,
        item_count=job.item_count,
    )
