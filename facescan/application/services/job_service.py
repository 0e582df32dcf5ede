"""
Job service orchestrator.

Coordinates folder scans, analysis ticks and status reads for scan jobs.
Wraps the batch orchestrator and the job store.

Dependencies: facescan.core.batch, facescan.boundary.drive
System role: Scan job management orchestration
"""

import asyncio
import logging
from uuid import UUID

from facescan.boundary.drive.folder_url import detect_source_type
from facescan.core.batch.models import JobRecord, TickResult
from facescan.core.batch.orchestrator import BatchOrchestrator
from facescan.core.batch.ports import CollectionLister, JobStore
from facescan.core.exceptions import CollectionFetchError, ValidationError
from facescan.observability.log_utils import log_with_context

logger = logging.getLogger(__name__)


class JobService:
    """
    Job service orchestrator.

    Creates pending jobs from folder URLs and runs analysis ticks.
    """

    def __init__(
        self,
        orchestrator: BatchOrchestrator,
        store: JobStore,
        lister: CollectionLister,
    ) -> None:
        """
        Initialize job service.

        Args:
            orchestrator: Batch orchestrator running ticks
            store: Job persistence
            lister: Remote folder lister used for the initial scan
        """
        self.orchestrator = orchestrator
        self.store = store
        self.lister = lister

    async def create_scan_job(self, url: str) -> JobRecord:
        """
        Scan a folder and register a pending job for it.

        Args:
            url: Shared folder URL

        Returns:
            JobRecord: Created job with the folder's image count

        Raises:
            ValidationError: URL invalid or provider unsupported
            CollectionFetchError: Folder listing failed
        """
        url = url.strip()
        source_type = detect_source_type(url)
        try:
            item_count = await asyncio.to_thread(self.lister.scan, url)
        except (ValidationError, CollectionFetchError):
            raise
        except Exception as e:
            raise CollectionFetchError(f"Failed to scan folder: {e}", url) from e

        job = await self.store.create(url, item_count, source_type)
        logger.info(
            "create_scan_job - Folder registered",
            extra={"job_id": str(job.id), "source_type": source_type, "item_count": item_count},
        )
        return job

    async def analyze(
        self,
        job_id: UUID,
        token: str | None = None,
        reference_bytes: bytes | None = None,
        batch_size: int | None = None,
        remaining_seconds: float | None = None,
    ) -> TickResult:
        """
        Begin or continue analysis of a job.

        Args:
            job_id: Job UUID
            token: Continuation token (None to begin)
            reference_bytes: Reference face image
            batch_size: Items to compare this tick
            remaining_seconds: Time left in the hosting invocation

        Returns:
            TickResult: Cumulative results with next token and progress
        """
        log_with_context(
            logger,
            logging.INFO,
            "analyze - Tick requested",
            job_id=job_id,
            token=token,
            reference=reference_bytes,
            batch_size=batch_size,
        )
        return await self.orchestrator.tick(
            job_id,
            token=token,
            reference_bytes=reference_bytes,
            batch_size=batch_size,
            remaining_seconds=remaining_seconds,
        )

    async def get_job(self, job_id: UUID) -> JobRecord:
        """
        Get job snapshot for polling.

        Raises:
            JobNotFoundError: Job does not exist
        """
        return await self.store.get(job_id)
