"""
Collaborator interfaces consumed by the batch orchestrator.

Concrete implementations live in facescan.boundary; tests provide fakes.

Dependencies: typing
System role: Seams between the engine and external systems
"""

import uuid
from typing import Protocol, Sequence

from facescan.core.batch.models import (
    ComparisonOutcome,
    ComparisonResult,
    JobRecord,
    JobStatus,
    RemoteItem,
)


class JobStore(Protocol):
    """Persistent keyed store for scan jobs."""

    async def create(
        self, source_uri: str, item_count: int, source_type: str = "gdrive"
    ) -> JobRecord: ...

    async def get(self, job_id: uuid.UUID) -> JobRecord:
        """Return the job or raise JobNotFoundError."""
        ...

    async def replace_results(
        self,
        job_id: uuid.UUID,
        results: Sequence[ComparisonResult],
        status: JobStatus,
        next_token: str | None = None,
        expected_version: int | None = None,
    ) -> JobRecord:
        """Replace the result set; raise ConcurrentUpdateError on version mismatch."""
        ...

    async def set_item_count(self, job_id: uuid.UUID, item_count: int) -> JobRecord: ...

    async def mark_error(self, job_id: uuid.UUID, message: str) -> JobRecord: ...


class CollectionLister(Protocol):
    """Lists a remote folder and fetches slices of its images."""

    def scan(self, source_uri: str) -> int:
        """Return the number of images; idempotent, paginates internally."""
        ...

    def slice(self, source_uri: str, start: int, count: int) -> list[RemoteItem]:
        """Return items [start, start+count); fewer near the end, [] past it."""
        ...


class Comparator(Protocol):
    """Compares the reference face against one target image."""

    def compare(self, reference: bytes, target: bytes) -> ComparisonOutcome:
        """Raise ComparatorError when the comparison cannot be made."""
        ...


class ReferenceStore(Protocol):
    """Durable storage for the reference face between ticks."""

    def save(self, job_id: uuid.UUID, data: bytes) -> str: ...

    def load(self, key: str) -> bytes | None: ...
