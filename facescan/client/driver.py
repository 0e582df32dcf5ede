"""
Client driver.

Drives a scan job to completion through a sequence of analysis calls.
When a continuation call fails without returning a new token, the driver
switches to polling the job status (always safe to repeat) and resumes
continuation calls as soon as the server reports a token to continue from.

Dependencies: tenacity, facescan.client (transport), facescan.configs
System role: Client-side loop handing continuation tokens back to the server
"""

import enum
import logging
import random
import threading
import time
import uuid
from typing import Any, Callable, Protocol

from pydantic import BaseModel
from tenacity import (
    RetryCallState,
    Retrying,
    retry_if_exception,
    retry_if_result,
    stop_after_attempt,
    wait_exponential_jitter,
)

from facescan.client.exceptions import (
    DriverBusyError,
    DriverGaveUpError,
    JobFailedError,
    TransportError,
)
from facescan.configs.client import ClientSettings
from facescan.core.batch.models import ComparisonResult, JobStatus, ProcessingProgress

logger = logging.getLogger(__name__)


class DriverState(str, enum.Enum):
    """Driver loop states."""

    CONTINUING = "continuing"
    POLLING = "polling"
    DONE = "done"


class JobTransport(Protocol):
    """Calls the driver makes against the API."""

    def analyze(
        self,
        job_id: uuid.UUID | str,
        token: str | None = None,
        face: bytes | None = None,
        face_content_type: str = "image/jpeg",
        batch_size: int | None = None,
    ) -> dict[str, Any]: ...

    def get_job(self, job_id: uuid.UUID | str) -> dict[str, Any]: ...


class JobSnapshot(BaseModel):
    """Job state as last seen by the driver."""

    job_id: uuid.UUID
    status: JobStatus
    results: list[ComparisonResult]
    next_token: str | None = None
    processing: ProcessingProgress
    error: str | None = None

    @property
    def matches(self) -> list[ComparisonResult]:
        return [r for r in self.results if r.matched]


# Jobs with a driver running in this process
_in_flight: set[str] = set()
_in_flight_lock = threading.Lock()


class ClientDriver:
    """
    Continuation/polling state machine for one job at a time.

    At most one tick is in flight per job: a second run() for a job that
    is already being driven in this process raises DriverBusyError.
    """

    def __init__(
        self,
        transport: JobTransport,
        settings: ClientSettings | None = None,
        batch_size: int | None = None,
        on_progress: Callable[[ProcessingProgress], None] | None = None,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
        rng: random.Random | None = None,
    ) -> None:
        """
        Initialize driver.

        Args:
            transport: API client
            settings: Pacing and polling policy (defaults from environment)
            batch_size: Batch size requested on every tick (server default if None)
            on_progress: Called with progress after every tick and poll
            sleep: Blocking sleep (tests inject a recorder)
            clock: Monotonic time source
            rng: Random source for jitter
        """
        self._transport = transport
        self._settings = settings or ClientSettings()
        self._batch_size = batch_size
        self._on_progress = on_progress
        self._sleep = sleep
        self._clock = clock
        self._rng = rng or random.Random()
        self._last_call_at: float | None = None
        self.state = DriverState.DONE

    def run(
        self,
        job_id: uuid.UUID | str,
        reference_bytes: bytes,
        content_type: str = "image/jpeg",
    ) -> JobSnapshot:
        """
        Drive a job from bootstrap to completion.

        Args:
            job_id: Pending or processing job
            reference_bytes: Reference face, sent with every analysis call
            content_type: MIME type of the reference face

        Returns:
            JobSnapshot: Final job state with all results

        Raises:
            DriverBusyError: Job already driven in this process
            DriverGaveUpError: Polling exhausted without progress
            JobFailedError: Server marked the job as failed
            TransportError: Non-retryable API rejection (bad token, unknown job)
        """
        key = str(job_id)
        with _in_flight_lock:
            if key in _in_flight:
                raise DriverBusyError(key)
            _in_flight.add(key)
        try:
            return self._drive(key, reference_bytes, content_type)
        finally:
            with _in_flight_lock:
                _in_flight.discard(key)

    def _drive(self, job_id: str, reference: bytes, content_type: str) -> JobSnapshot:
        self.state = DriverState.CONTINUING
        token: str | None = None
        snapshot: JobSnapshot | None = None

        while self.state != DriverState.DONE:
            if self.state == DriverState.CONTINUING:
                self._pace()
                try:
                    body = self._transport.analyze(
                        job_id,
                        token=token,
                        face=reference,
                        face_content_type=content_type,
                        batch_size=self._batch_size,
                    )
                except TransportError as e:
                    if not e.retryable:
                        raise
                    logger.warning(
                        "_drive - Continuation failed, polling: %s",
                        e.message,
                        extra={"job_id": job_id, "status_code": e.status_code},
                    )
                    self.state = DriverState.POLLING
                    continue

                snapshot = self._observe(body)
                if snapshot.processing.is_complete:
                    self.state = DriverState.DONE
                elif snapshot.status == JobStatus.ERROR or snapshot.next_token is None:
                    raise JobFailedError(job_id, snapshot.error)
                else:
                    token = snapshot.next_token
                continue

            # POLLING
            snapshot = self._poll(job_id)
            if snapshot.processing.is_complete:
                self.state = DriverState.DONE
            elif snapshot.status == JobStatus.ERROR:
                raise JobFailedError(job_id, snapshot.error)
            elif snapshot.status == JobStatus.PENDING:
                # Bootstrap never landed; starting over is safe
                token = None
                self.state = DriverState.CONTINUING
            else:
                logger.info(
                    "_drive - Resuming from polled token",
                    extra={"job_id": job_id, "fresh": snapshot.next_token != token},
                )
                token = snapshot.next_token
                self.state = DriverState.CONTINUING

        return snapshot

    def _poll(self, job_id: str) -> JobSnapshot:
        """
        Poll job status until it shows a way forward.

        Retryable transport failures and snapshots still waiting for a
        token are polled again with exponential backoff and jitter.

        Raises:
            DriverGaveUpError: max_poll_attempts polls without progress
            TransportError: Non-retryable API rejection
        """
        retrying = Retrying(
            retry=retry_if_exception(_is_retryable) | retry_if_result(_awaiting_token),
            stop=stop_after_attempt(self._settings.max_poll_attempts),
            wait=wait_exponential_jitter(
                initial=self._settings.poll_base_seconds,
                max=self._settings.poll_max_seconds,
                exp_base=self._settings.poll_backoff_factor,
                jitter=self._settings.jitter_seconds,
            ),
            sleep=self._sleep,
            before_sleep=lambda retry_state: _log_poll_retry(job_id, retry_state),
            retry_error_callback=lambda retry_state: _give_up(job_id, retry_state),
        )
        # Give the lost tick time to land before the first read
        self._sleep(self._settings.poll_base_seconds)
        return retrying(lambda: self._observe(self._transport.get_job(job_id)))

    def _observe(self, body: dict[str, Any]) -> JobSnapshot:
        snapshot = JobSnapshot.model_validate(body)
        if self._on_progress is not None:
            self._on_progress(snapshot.processing)
        return snapshot

    def _pace(self) -> None:
        """Wait so consecutive calls are at least min_interval apart, plus jitter."""
        if self._last_call_at is not None:
            wait = self._last_call_at + self._settings.min_interval_seconds - self._clock()
            wait = max(wait, 0.0) + self._rng.uniform(0, self._settings.jitter_seconds)
            if wait > 0:
                self._sleep(wait)
        self._last_call_at = self._clock()


def _is_retryable(error: BaseException) -> bool:
    return isinstance(error, TransportError) and error.retryable


def _awaiting_token(snapshot: JobSnapshot) -> bool:
    return snapshot.status == JobStatus.PROCESSING and not snapshot.next_token


def _log_poll_retry(job_id: str, retry_state: RetryCallState) -> None:
    outcome = retry_state.outcome
    if outcome is not None and outcome.failed:
        reason = str(outcome.exception())
    else:
        reason = "no token yet"
    logger.warning(
        "_poll - Poll %d without progress: %s",
        retry_state.attempt_number,
        reason,
        extra={"job_id": job_id},
    )


def _give_up(job_id: str, retry_state: RetryCallState) -> JobSnapshot:
    raise DriverGaveUpError(job_id, retry_state.attempt_number)
