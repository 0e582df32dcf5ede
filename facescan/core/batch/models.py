"""
Batch engine domain models.

Job snapshot, per-item comparison results, continuation state and tick
results shared by the orchestrator, the merger and the token codec.

Dependencies: pydantic
System role: Data contracts of the resumable batch comparison engine
"""

import enum
import uuid
from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator


class JobStatus(str, enum.Enum):
    """
    Scan job lifecycle states.

    PENDING: Folder scanned, waiting for the reference face
    PROCESSING: Bootstrap done, batches being compared tick by tick
    COMPLETE: Every item attempted; terminal
    ERROR: Job failed before processing could start; terminal
    """

    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETE = "complete"
    ERROR = "error"

    @property
    def is_terminal(self) -> bool:
        return self in (JobStatus.COMPLETE, JobStatus.ERROR)


class ComparisonResult(BaseModel):
    """Outcome of comparing the reference face with one remote image."""

    model_config = ConfigDict(frozen=True)

    item_id: str = Field(description="Stable identity of the compared item")
    index: int = Field(ge=0, description="0-based position in the listing when compared")
    similarity: float = Field(default=0.0, ge=0, description="Best face similarity (0-100)")
    matched: bool = Field(default=False, description="Similarity above the match threshold")
    name: str | None = Field(default=None, description="Remote file name")
    source_url: str | None = Field(default=None, description="Direct image link")
    view_url: str | None = Field(default=None, description="Remote page for the image")
    error: str | None = Field(default=None, description="Comparison failure message")

    @classmethod
    def failed(cls, item: "RemoteItem", message: str) -> "ComparisonResult":
        """Build the result recorded for an item whose comparison failed."""
        return cls(
            item_id=item.item_id,
            index=item.index,
            similarity=0.0,
            matched=False,
            name=item.name,
            source_url=item.source_url,
            view_url=item.view_url,
            error=message,
        )


class ComparisonOutcome(BaseModel):
    """What a comparator reports for one reference/target pair."""

    matched: bool
    similarity: float = Field(ge=0)


class RemoteItem(BaseModel):
    """One image fetched from the remote collection."""

    item_id: str
    index: int = Field(ge=0)
    content: bytes | None = None
    name: str | None = None
    source_url: str | None = None
    view_url: str | None = None
    error: str | None = Field(default=None, description="Download failure, if any")


class ReferenceHandle(BaseModel):
    """
    How the next tick re-obtains the reference face bytes.

    inline: the client resends the face with every request
    stored: the bytes live in the reference store under ``key``
    """

    kind: Literal["inline", "stored"]
    key: str | None = None

    @model_validator(mode="after")
    def _key_matches_kind(self) -> "ReferenceHandle":
        if self.kind == "stored" and not self.key:
            raise ValueError("stored reference requires a key")
        if self.kind == "inline" and self.key is not None:
            raise ValueError("inline reference must not carry a key")
        return self

    @classmethod
    def inline(cls) -> "ReferenceHandle":
        return cls(kind="inline")

    @classmethod
    def stored(cls, key: str) -> "ReferenceHandle":
        return cls(kind="stored", key=key)


class ContinuationState(BaseModel):
    """Resume state carried by a continuation token."""

    model_config = ConfigDict(frozen=True)

    job_id: uuid.UUID
    reference: ReferenceHandle
    next_index: int = Field(ge=0)

    def advance(self, next_index: int) -> "ContinuationState":
        return self.model_copy(update={"next_index": next_index})


class JobRecord(BaseModel):
    """Snapshot of a scan job as read from the job store."""

    id: uuid.UUID
    source_uri: str
    source_type: str = "gdrive"
    item_count: int = Field(ge=0)
    status: JobStatus
    results: list[ComparisonResult] = Field(default_factory=list)
    next_token: str | None = None
    version: int = 0
    error: str | None = None
    created_at: datetime
    updated_at: datetime | None = None


class ProcessingProgress(BaseModel):
    """Progress block returned by every tick and status read."""

    total: int = Field(ge=0)
    processed: int = Field(ge=0)
    is_complete: bool

    @classmethod
    def for_job(cls, job: JobRecord) -> "ProcessingProgress":
        return cls(
            total=job.item_count,
            processed=len(job.results),
            is_complete=job.status == JobStatus.COMPLETE,
        )


class TickResult(BaseModel):
    """Outcome of one orchestrator tick."""

    job_id: uuid.UUID
    status: JobStatus
    results: list[ComparisonResult]
    next_token: str | None
    processed: int
    total: int
    is_complete: bool
    attempted: int = Field(default=0, description="Items compared during this tick")

    @property
    def processing(self) -> ProcessingProgress:
        return ProcessingProgress(
            total=self.total,
            processed=self.processed,
            is_complete=self.is_complete,
        )
