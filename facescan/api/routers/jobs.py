"""
Job API endpoints.

Routes: POST /jobs/{id}/analyze, GET /jobs/{id}

Dependencies: facescan.application.services, facescan.models
System role: Analysis and job status HTTP API
"""

from uuid import UUID

from fastapi import APIRouter, Depends, File, Form, UploadFile

from facescan.api.deps import get_job_service
from facescan.api.routers.router_utils import handle_scan_errors, validate_face_upload
from facescan.application.services import JobService
from facescan.models import AnalyzeResponse, JobSnapshotResponse

router = APIRouter(prefix="/jobs", tags=["jobs"])


@router.post("/{job_id}/analyze", response_model=AnalyzeResponse)
@handle_scan_errors
async def analyze_job(
    job_id: UUID,
    face: UploadFile | None = File(default=None),
    token: str | None = Form(default=None),
    batch_size: int | None = Form(default=None),
    job_service: JobService = Depends(get_job_service),
) -> AnalyzeResponse:
    """
    Begin or continue face analysis for a job.

    Without a token this starts the job: the folder is rescanned, the face
    stored and a token returned with no results yet. With a token the next
    batch is compared. Repeat with each returned token until next_token is
    null and processing.is_complete is true.

    Args:
        job_id: Job UUID
        face: Reference face image (required to begin; optional afterwards
            when the server keeps the reference)
        token: Continuation token from the previous response
        batch_size: Images to compare in this call
        job_service: Injected JobService

    Returns:
        AnalyzeResponse: Cumulative results, next token and progress

    Raises:
        HTTPException(400): Invalid token, missing face, or bad input
        HTTPException(404): Job not found
        HTTPException(409): Job updated concurrently
        HTTPException(502): Folder listing failed; retry with the same token
    """
    reference_bytes = None
    if face is not None:
        reference_bytes = await face.read()
        validate_face_upload(face.content_type, reference_bytes)

    tick = await job_service.analyze(
        job_id,
        token=token or None,
        reference_bytes=reference_bytes,
        batch_size=batch_size,
    )
    return AnalyzeResponse.from_tick(tick)


@router.get("/{job_id}", response_model=JobSnapshotResponse)
@handle_scan_errors
async def get_job_status(
    job_id: UUID,
    job_service: JobService = Depends(get_job_service),
) -> JobSnapshotResponse:
    """
    Get job status, results and progress for polling.

    Safe to call at any time; a processing job also reports the last
    issued continuation token so a client that lost a response can resume.

    Raises:
        HTTPException(404): Job not found
    """
    job = await job_service.get_job(job_id)
    return JobSnapshotResponse.from_record(job)
