"""
Batch orchestrator.

Drives one tick of a scan job: bootstrap (scan + initialize) or continue
(fetch a bounded batch, compare each image, merge, persist, hand back a
continuation token). Ticks are stateless; everything needed to resume
lives in the job store and the token.

Dependencies: facescan.core.batch (models, merger, token_codec, time_budget, ports)
System role: Core state machine of the resumable batch comparison engine
"""

import asyncio
import logging
import time
import uuid
from typing import Callable, Sequence

from facescan.configs.engine import EngineSettings
from facescan.core.batch.merger import count_matches, merge_results
from facescan.core.batch.models import (
    ComparisonResult,
    ContinuationState,
    JobRecord,
    JobStatus,
    ReferenceHandle,
    RemoteItem,
    TickResult,
)
from facescan.core.batch.ports import CollectionLister, Comparator, JobStore, ReferenceStore
from facescan.core.batch.time_budget import TimeBudget
from facescan.core.batch.token_codec import decode_token, encode_token
from facescan.core.exceptions import (
    CollectionFetchError,
    ComparatorError,
    InvalidTokenError,
    ReferenceMissingError,
    TokenDecodeError,
    ValidationError,
)

logger = logging.getLogger(__name__)


class BatchOrchestrator:
    """
    Run bounded, resumable comparison ticks for scan jobs.

    A job is walked in batches across many invocations. The first tick for
    a job only scans the folder and issues a token with next_index=0; every
    later tick consumes the batch at next_index and returns a fresh token
    until every item has been attempted.
    """

    def __init__(
        self,
        store: JobStore,
        lister: CollectionLister,
        comparator: Comparator,
        reference_store: ReferenceStore | None = None,
        settings: EngineSettings | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """
        Initialize orchestrator with its collaborators.

        Args:
            store: Job persistence
            lister: Remote folder listing and image download
            comparator: Face comparison service
            reference_store: Durable reference face storage (optional)
            settings: Engine tuning (defaults from environment)
            clock: Monotonic time source for the tick budget
        """
        self._store = store
        self._lister = lister
        self._comparator = comparator
        self._reference_store = reference_store
        self._settings = settings or EngineSettings()
        self._clock = clock

    async def tick(
        self,
        job_id: uuid.UUID,
        token: str | None = None,
        reference_bytes: bytes | None = None,
        batch_size: int | None = None,
        remaining_seconds: float | None = None,
    ) -> TickResult:
        """
        Run one tick for a job.

        Args:
            job_id: Job being processed
            token: Continuation token from the previous tick (None to bootstrap)
            reference_bytes: Reference face, required on bootstrap
            batch_size: Items to compare this tick (defaults from settings)
            remaining_seconds: Time left in the hosting invocation, if known

        Returns:
            TickResult: Cumulative results, next token and progress

        Raises:
            JobNotFoundError: Job does not exist
            InvalidTokenError: Token malformed or issued for another job
            ReferenceMissingError: Reference face cannot be resolved
            CollectionFetchError: Remote listing or batch fetch failed
            ConcurrentUpdateError: Job changed under this tick
        """
        # Budget spans the whole tick, store and reference reads included
        budget = TimeBudget.from_settings(
            self._settings, remaining_seconds=remaining_seconds, clock=self._clock
        )
        size = self._resolve_batch_size(batch_size)

        if token is None:
            job = await self._store.get(job_id)
            return await self._bootstrap(job, reference_bytes)

        state = self._decode(job_id, token)
        job = await self._store.get(job_id)

        if job.status.is_terminal:
            logger.info(
                "tick - Job already terminal, returning snapshot",
                extra={"job_id": str(job_id), "status": job.status.value},
            )
            return self._result(job)
        if job.status == JobStatus.PENDING:
            raise InvalidTokenError("Job has not been started; bootstrap first", str(job_id))

        reference = await self._resolve_reference(job, state, reference_bytes)
        return await self._run_batch(job, state, token, reference, size, budget)

    def _resolve_batch_size(self, batch_size: int | None) -> int:
        if batch_size is None:
            return self._settings.batch_size
        if batch_size < 1:
            raise ValidationError("batch_size must be positive", field="batch_size")
        return min(batch_size, self._settings.max_batch_size)

    def _decode(self, job_id: uuid.UUID, token: str) -> ContinuationState:
        try:
            state = decode_token(token, max_length=self._settings.max_token_length)
        except TokenDecodeError as e:
            logger.warning("_decode - Rejected token: %s", e, extra={"job_id": str(job_id)})
            raise InvalidTokenError(f"Invalid continuation token: {e.message}", str(job_id)) from e

        if state.job_id != job_id:
            logger.warning(
                "_decode - Token issued for another job",
                extra={"job_id": str(job_id), "token_job_id": str(state.job_id)},
            )
            raise InvalidTokenError("Continuation token does not belong to this job", str(job_id))
        return state

    async def _bootstrap(self, job: JobRecord, reference_bytes: bytes | None) -> TickResult:
        if job.status.is_terminal:
            return self._result(job)

        if job.status == JobStatus.PROCESSING and job.next_token:
            # Lost bootstrap response: hand back the issued token, never reset
            logger.info(
                "_bootstrap - Job already processing, reusing issued token",
                extra={"job_id": str(job.id), "processed": len(job.results)},
            )
            return self._result(job)

        if not reference_bytes:
            raise ReferenceMissingError(str(job.id))

        try:
            total = await self._scan(job.source_uri)
        except ValidationError as e:
            # Folder reference can never be listed; retrying will not help
            await self._store.mark_error(job.id, e.message)
            raise
        if total != job.item_count:
            logger.info(
                "_bootstrap - Item count changed on rescan",
                extra={"job_id": str(job.id), "previous": job.item_count, "current": total},
            )
            job = await self._store.set_item_count(job.id, total)

        if total == 0:
            job = await self._store.replace_results(
                job.id, [], JobStatus.COMPLETE, next_token=None, expected_version=job.version
            )
            logger.info("_bootstrap - Empty folder, job complete", extra={"job_id": str(job.id)})
            return self._result(job)

        handle = await self._store_reference(job.id, reference_bytes)
        token = encode_token(ContinuationState(job_id=job.id, reference=handle, next_index=0))
        job = await self._store.replace_results(
            job.id, [], JobStatus.PROCESSING, next_token=token, expected_version=job.version
        )
        logger.info(
            "_bootstrap - Job initialized",
            extra={"job_id": str(job.id), "total": total, "reference": handle.kind},
        )
        return self._result(job)

    async def _scan(self, source_uri: str) -> int:
        try:
            return await asyncio.to_thread(self._lister.scan, source_uri)
        except (CollectionFetchError, ValidationError):
            raise
        except Exception as e:
            logger.error("_scan - %s: %s", type(e).__name__, e)
            raise CollectionFetchError(f"Failed to scan folder: {e}", source_uri) from e

    async def _store_reference(self, job_id: uuid.UUID, data: bytes) -> ReferenceHandle:
        if self._reference_store is None:
            return ReferenceHandle.inline()
        try:
            key = await asyncio.to_thread(self._reference_store.save, job_id, data)
        except Exception as e:  # pylint: disable=broad-except
            logger.warning(
                "_store_reference - Falling back to inline reference: %s: %s",
                type(e).__name__,
                e,
                extra={"job_id": str(job_id)},
            )
            return ReferenceHandle.inline()
        return ReferenceHandle.stored(key)

    async def _resolve_reference(
        self,
        job: JobRecord,
        state: ContinuationState,
        reference_bytes: bytes | None,
    ) -> bytes:
        if reference_bytes:
            return reference_bytes

        if state.reference.kind == "stored" and self._reference_store is not None:
            try:
                data = await asyncio.to_thread(self._reference_store.load, state.reference.key)
            except Exception as e:
                logger.error(
                    "_resolve_reference - %s: %s", type(e).__name__, e, extra={"job_id": str(job.id)}
                )
                raise ReferenceMissingError(str(job.id)) from e
            if data:
                return data

        raise ReferenceMissingError(str(job.id))

    async def _run_batch(
        self,
        job: JobRecord,
        state: ContinuationState,
        token: str,
        reference: bytes,
        batch_size: int,
        budget: TimeBudget,
    ) -> TickResult:
        total = job.item_count
        start = state.next_index

        if start >= total:
            return await self._persist(job, [], state, total)

        count = budget.plan_batch(batch_size, total - start)
        if budget.should_stop():
            logger.warning(
                "_run_batch - Budget exhausted before fetch",
                extra={"job_id": str(job.id), "next_index": start},
            )
            return self._result(job, next_token=token)

        items = await self._fetch(job, start, count)
        if not items:
            # Listing ended before the recorded count: accept the shorter folder
            logger.warning(
                "_run_batch - Listing shorter than recorded count",
                extra={"job_id": str(job.id), "recorded": total, "observed": start},
            )
            job = await self._store.set_item_count(job.id, start)
            return await self._persist(job, [], state, start)

        results = await self._compare_batch(job.id, items, reference, budget)
        attempted = _contiguous_prefix(items, results)
        if not attempted:
            logger.warning(
                "_run_batch - Budget exhausted before any comparison",
                extra={"job_id": str(job.id), "next_index": start},
            )
            return self._result(job, next_token=token)

        next_index = attempted[-1].index + 1
        logger.info(
            "_run_batch - Batch compared",
            extra={
                "job_id": str(job.id),
                "start": start,
                "fetched": len(items),
                "attempted": len(attempted),
                "matches": count_matches(attempted),
                "elapsed_s": round(budget.elapsed, 3),
            },
        )
        return await self._persist(job, attempted, state, next_index)

    async def _fetch(self, job: JobRecord, start: int, count: int) -> list[RemoteItem]:
        try:
            items = await asyncio.to_thread(self._lister.slice, job.source_uri, start, count)
        except CollectionFetchError:
            raise
        except Exception as e:
            logger.error(
                "_fetch - %s: %s", type(e).__name__, e, extra={"job_id": str(job.id), "start": start}
            )
            raise CollectionFetchError(f"Failed to fetch batch: {e}", job.source_uri) from e
        return sorted(items, key=lambda item: item.index)

    async def _compare_batch(
        self,
        job_id: uuid.UUID,
        items: Sequence[RemoteItem],
        reference: bytes,
        budget: TimeBudget,
    ) -> list[ComparisonResult | None]:
        semaphore = asyncio.Semaphore(self._settings.max_concurrency)

        async def run(item: RemoteItem) -> ComparisonResult | None:
            async with semaphore:
                if budget.should_stop():
                    return None
                return await self._compare_item(job_id, item, reference)

        return list(await asyncio.gather(*(run(item) for item in items)))

    async def _compare_item(
        self, job_id: uuid.UUID, item: RemoteItem, reference: bytes
    ) -> ComparisonResult:
        if item.error:
            return ComparisonResult.failed(item, item.error)
        if not item.content:
            return ComparisonResult.failed(item, "Image content is empty")

        try:
            outcome = await asyncio.to_thread(self._comparator.compare, reference, item.content)
        except ComparatorError as e:
            logger.warning(
                "_compare_item - ComparatorError: %s",
                e.message,
                extra={"job_id": str(job_id), "item_id": item.item_id},
            )
            return ComparisonResult.failed(item, e.message)
        except Exception as e:  # pylint: disable=broad-except
            logger.error(
                "_compare_item - %s: %s",
                type(e).__name__,
                e,
                extra={"job_id": str(job_id), "item_id": item.item_id},
            )
            return ComparisonResult.failed(item, f"{type(e).__name__}: {e}")

        return ComparisonResult(
            item_id=item.item_id,
            index=item.index,
            similarity=outcome.similarity if outcome.matched else 0.0,
            matched=outcome.matched,
            name=item.name,
            source_url=item.source_url,
            view_url=item.view_url,
        )

    async def _persist(
        self,
        job: JobRecord,
        batch: Sequence[ComparisonResult],
        state: ContinuationState,
        next_index: int,
    ) -> TickResult:
        merged = merge_results(job.results, batch)
        is_complete = next_index >= job.item_count
        if is_complete:
            status, next_token = JobStatus.COMPLETE, None
        else:
            status = JobStatus.PROCESSING
            next_token = encode_token(state.advance(next_index))

        updated = await self._store.replace_results(
            job.id, merged, status, next_token=next_token, expected_version=job.version
        )
        if is_complete:
            logger.info(
                "_persist - Job complete",
                extra={
                    "job_id": str(job.id),
                    "processed": len(merged),
                    "matches": count_matches(merged),
                },
            )
        return self._result(updated, attempted=len(batch))

    def _result(
        self,
        job: JobRecord,
        attempted: int = 0,
        next_token: str | None = None,
    ) -> TickResult:
        is_complete = job.status == JobStatus.COMPLETE
        token = None
        if job.status == JobStatus.PROCESSING:
            token = next_token or job.next_token
        return TickResult(
            job_id=job.id,
            status=job.status,
            results=list(job.results),
            next_token=token,
            processed=len(job.results),
            total=job.item_count,
            is_complete=is_complete,
            attempted=attempted,
        )


def _contiguous_prefix(
    items: Sequence[RemoteItem],
    results: Sequence[ComparisonResult | None],
) -> list[ComparisonResult]:
    """Results of the leading run of attempted items; later ones are redone next tick."""
    prefix: list[ComparisonResult] = []
    for item, result in zip(items, results):
        if result is None:
            break
        prefix.append(result)
    return prefix
