"""
Job CRUD operations.

Result replacement with an optional version guard, item count
corrections and error marking for JobModel. Every write bumps the
row version so a stale reader's guarded write is rejected.

Dependencies: sqlalchemy, facescan.boundary.db.models.job_model
System role: Job persistence operations for resumable scan jobs
"""

from typing import Any
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from facescan.boundary.db.CRUD.base_crud import BaseCRUD
from facescan.boundary.db.models.job_model import JobModel
from facescan.core.batch.models import JobStatus

_NEXT_VERSION = JobModel.version + 1


class JobCRUD(BaseCRUD[JobModel]):
    """CRUD operations for JobModel."""

    def __init__(self) -> None:
        super().__init__(JobModel)

    async def replace_results(
        self,
        session: AsyncSession,
        id: UUID,
        results: list[dict[str, Any]],
        status: JobStatus,
        next_token: str | None = None,
        expected_version: int | None = None,
    ) -> JobModel | None:
        """
        Replace the cumulative result set and status.

        Args:
            session: Async database session
            id: Job UUID
            results: Serialized comparison results
            status: New lifecycle status
            next_token: Continuation token to store (None clears it)
            expected_version: Version read before the write, if guarded

        Returns:
            Updated JobModel, or None when the job is missing or its
            version moved past expected_version
        """
        guards = []
        if expected_version is not None:
            guards.append(JobModel.version == expected_version)
        return await self.update_returning(
            session,
            id,
            *guards,
            results=results,
            status=status,
            next_token=next_token,
            version=_NEXT_VERSION,
        )

    async def set_item_count(self, session: AsyncSession, id: UUID, item_count: int) -> JobModel | None:
        """Overwrite the item count with the latest scan."""
        return await self.update_returning(session, id, item_count=item_count, version=_NEXT_VERSION)

    async def mark_error(self, session: AsyncSession, id: UUID, message: str) -> JobModel | None:
        """
        Mark job as failed; clears the continuation token.

        Returns:
            Updated JobModel if found, None otherwise
        """
        return await self.update_returning(
            session,
            id,
            status=JobStatus.ERROR,
            error=message,
            next_token=None,
            version=_NEXT_VERSION,
        )


job_crud = JobCRUD()
