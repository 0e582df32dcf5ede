"""
Scan domain schemas.

Request/response schemas for registering a remote folder.

Dependencies: pydantic
System role: Folder scan API contracts
"""

import uuid

from pydantic import BaseModel, Field

from facescan.core.batch.models import JobStatus


class ScanRequest(BaseModel):
    """Request schema for scanning a remote folder."""

    url: str = Field(min_length=1, max_length=2048, description="Shared folder URL")


class ScanResponse(BaseModel):
    """Response schema for a created scan job."""

    job_id: uuid.UUID
    status: JobStatus
    source_type: str
    item_count: int = Field(description="Images found in the folder")
