"""
SQL-backed job store.

Adapts JobCRUD to the engine's JobStore interface: every operation runs
in its own session and commits before returning, so readers between
ticks always see a consistent snapshot.

Dependencies: sqlalchemy, facescan.boundary.db.CRUD, facescan.core.batch
System role: Durable job persistence for stateless ticks
"""

import logging
import uuid
from typing import Sequence

from sqlalchemy.ext.asyncio import async_sessionmaker

from facescan.boundary.db.CRUD.job_crud import job_crud
from facescan.boundary.db.models.job_model import JobModel
from facescan.core.batch.models import ComparisonResult, JobRecord, JobStatus
from facescan.core.exceptions import ConcurrentUpdateError, JobNotFoundError

logger = logging.getLogger(__name__)


def to_record(job: JobModel) -> JobRecord:
    """Convert an ORM row into the engine's job snapshot."""
    return JobRecord(
        id=job.id,
        source_uri=job.source_uri,
        source_type=job.source_type,
        item_count=job.item_count,
        status=job.status,
        results=[ComparisonResult.model_validate(r) for r in job.results or []],
        next_token=job.next_token,
        version=job.version,
        error=job.error,
        created_at=job.created_at,
        updated_at=job.updated_at,
    )


class SqlJobStore:
    """JobStore implementation over SQLAlchemy async sessions."""

    def __init__(self, session_factory: async_sessionmaker) -> None:
        """
        Initialize store with a session factory.

        Args:
            session_factory: Factory producing AsyncSession instances
        """
        self._session_factory = session_factory

    async def create(
        self, source_uri: str, item_count: int, source_type: str = "gdrive"
    ) -> JobRecord:
        """
        Create a pending job for a scanned folder.

        Args:
            source_uri: Remote folder URL
            item_count: Images found by the scan
            source_type: Storage provider

        Returns:
            JobRecord: Created job
        """
        async with self._session_factory() as session:
            job = await job_crud.create(
                session,
                source_uri=source_uri,
                source_type=source_type,
                item_count=item_count,
                status=JobStatus.PENDING,
                results=[],
                version=0,
            )
            record = to_record(job)
            await session.commit()
        logger.info("create - Job created", extra={"job_id": str(record.id), "item_count": item_count})
        return record

    async def get(self, job_id: uuid.UUID) -> JobRecord:
        """
        Read a job by id.

        Raises:
            JobNotFoundError: Job does not exist
        """
        async with self._session_factory() as session:
            job = await job_crud.get_by_id(session, job_id)
            if job is None:
                raise JobNotFoundError(str(job_id))
            return to_record(job)

    async def replace_results(
        self,
        job_id: uuid.UUID,
        results: Sequence[ComparisonResult],
        status: JobStatus,
        next_token: str | None = None,
        expected_version: int | None = None,
    ) -> JobRecord:
        """
        Replace the job's result set and status.

        Raises:
            JobNotFoundError: Job does not exist
            ConcurrentUpdateError: Stored version differs from expected_version
        """
        payload = [r.model_dump(mode="json") for r in results]
        async with self._session_factory() as session:
            job = await job_crud.replace_results(
                session, job_id, payload, status, next_token, expected_version
            )
            if job is None:
                current = await job_crud.get_by_id(session, job_id)
                # Rollback expires loaded rows; read the version first
                actual_version = current.version if current is not None else None
                await session.rollback()
                if actual_version is None:
                    raise JobNotFoundError(str(job_id))
                raise ConcurrentUpdateError(str(job_id), expected_version or 0, actual_version)
            record = to_record(job)
            await session.commit()
        return record

    async def set_item_count(self, job_id: uuid.UUID, item_count: int) -> JobRecord:
        """
        Overwrite the item count with the latest scan.

        Raises:
            JobNotFoundError: Job does not exist
        """
        async with self._session_factory() as session:
            job = await job_crud.set_item_count(session, job_id, item_count)
            if job is None:
                raise JobNotFoundError(str(job_id))
            record = to_record(job)
            await session.commit()
        return record

    async def mark_error(self, job_id: uuid.UUID, message: str) -> JobRecord:
        """
        Mark the job as failed.

        Raises:
            JobNotFoundError: Job does not exist
        """
        async with self._session_factory() as session:
            job = await job_crud.mark_error(session, job_id, message)
            if job is None:
                raise JobNotFoundError(str(job_id))
            record = to_record(job)
            await session.commit()
        logger.warning("mark_error - Job failed: %s", message, extra={"job_id": str(job_id)})
        return record
