"""
Client-side errors raised while driving a job.

Dependencies: facescan.core.exceptions
System role: Failure signals of the client driver
"""

from typing import Any

from facescan.core.exceptions import FaceScanException


class TransportError(FaceScanException):
    """
    Raised when a request to the API fails.

    retryable is True for network failures, timeouts, 409, 429 and 5xx
    responses: the server may or may not have applied the request.
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        retryable: bool = True,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        if status_code is not None:
            details["status_code"] = status_code
        self.status_code = status_code
        self.retryable = retryable
        super().__init__(message, details)


class DriverBusyError(FaceScanException):
    """Raised when a driver is already running ticks for the job in this process."""

    def __init__(self, job_id: str) -> None:
        super().__init__(f"Job {job_id} is already being driven", {"job_id": job_id})


class DriverGaveUpError(FaceScanException):
    """Raised after too many consecutive polls without progress."""

    def __init__(self, job_id: str, attempts: int) -> None:
        super().__init__(
            f"Gave up on job {job_id} after {attempts} polls",
            {"job_id": job_id, "attempts": attempts},
        )


class JobFailedError(FaceScanException):
    """Raised when the server reports the job as failed."""

    def __init__(self, job_id: str, reason: str | None = None) -> None:
        super().__init__(
            f"Job {job_id} failed: {reason or 'unknown error'}",
            {"job_id": job_id},
        )
