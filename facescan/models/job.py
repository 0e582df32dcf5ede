"""
Job domain schemas.

Response schemas for analysis ticks and job status polling. Both carry
the same processing block so clients can render progress from either.

Dependencies: pydantic
System role: Job status API contracts
"""

import uuid
from datetime import datetime

from pydantic import BaseModel, Field

from facescan.core.batch.models import (
    ComparisonResult,
    JobRecord,
    JobStatus,
    ProcessingProgress,
    TickResult,
)


class ProcessingInfo(BaseModel):
    """Progress details."""

    total: int = Field(description="Images in the folder")
    processed: int = Field(description="Images with a recorded result")
    is_complete: bool = Field(description="Every image attempted")

    @classmethod
    def from_progress(cls, progress: ProcessingProgress) -> "ProcessingInfo":
        return cls(**progress.model_dump())


class AnalyzeResponse(BaseModel):
    """Response schema for one analysis tick."""

    job_id: uuid.UUID
    status: JobStatus
    results: list[ComparisonResult]
    next_token: str | None = Field(description="Send back to continue; null when done")
    processing: ProcessingInfo

    @classmethod
    def from_tick(cls, tick: TickResult) -> "AnalyzeResponse":
        return cls(
            job_id=tick.job_id,
            status=tick.status,
            results=tick.results,
            next_token=tick.next_token,
            processing=ProcessingInfo.from_progress(tick.processing),
        )


class JobSnapshotResponse(BaseModel):
    """Response schema for job status polling."""

    job_id: uuid.UUID
    status: JobStatus
    source_uri: str
    source_type: str
    results: list[ComparisonResult]
    next_token: str | None
    processing: ProcessingInfo
    error: str | None = None
    created_at: datetime
    updated_at: datetime | None = None

    @classmethod
    def from_record(cls, job: JobRecord) -> "JobSnapshotResponse":
        return cls(
            job_id=job.id,
            status=job.status,
            source_uri=job.source_uri,
            source_type=job.source_type,
            results=job.results,
            next_token=job.next_token if job.status == JobStatus.PROCESSING else None,
            processing=ProcessingInfo.from_progress(ProcessingProgress.for_job(job)),
            error=job.error,
            created_at=job.created_at,
            updated_at=job.updated_at,
        )
