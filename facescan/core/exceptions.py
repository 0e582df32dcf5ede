"""
FaceScan exception hierarchy.

Input errors (bad token, missing reference, unknown job, invalid URL),
collaborator failures (folder listing, comparison, reference storage)
and write conflicts. The HTTP and Lambda surfaces map these to status
codes; per-item comparison errors never escape a tick.

Dependencies: None (pure domain layer)
System role: Error contract shared by the engine and its surfaces
"""

from typing import Any


class FaceScanException(Exception):
    """
    Root of all FaceScan errors.

    ``details`` carries identifiers (job id, field, status code) that end
    up as structured log fields.
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class ValidationError(FaceScanException):
    """Request input rejected (folder URL, upload, batch size)."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        if field:
            details["field"] = field
        super().__init__(message, details)


class JobNotFoundError(FaceScanException):
    """Raised when a scan job cannot be found."""

    def __init__(self, job_id: str, details: dict[str, Any] | None = None) -> None:
        """
        Initialize job not found error.

        Args:
            job_id: ID of the missing job
            details: Additional context
        """
        details = details or {}
        details["job_id"] = job_id
        super().__init__(f"Job not found: {job_id}", details)


class TokenDecodeError(FaceScanException):
    """Raised when a continuation token cannot be decoded."""


class InvalidTokenError(FaceScanException):
    """Raised when a continuation token is malformed or belongs to another job."""

    def __init__(
        self,
        message: str,
        job_id: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize invalid token error.

        Args:
            message: Error message
            job_id: Job the token was presented for
            details: Additional context
        """
        details = details or {}
        if job_id:
            details["job_id"] = job_id
        super().__init__(message, details)


class ReferenceMissingError(FaceScanException):
    """
    Raised when the reference face cannot be resolved for a tick.

    Not retryable: the client has to restart analysis with a new upload.
    """

    def __init__(self, job_id: str, details: dict[str, Any] | None = None) -> None:
        details = details or {}
        details["job_id"] = job_id
        super().__init__(
            f"Reference face not available for job {job_id}; restart the analysis",
            details,
        )


class CollectionFetchError(FaceScanException):
    """Raised when the remote folder cannot be listed or a batch cannot be fetched."""

    def __init__(
        self,
        message: str,
        source_uri: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize collection fetch error.

        Args:
            message: Error message
            source_uri: Remote folder reference that failed
            details: Additional context
        """
        details = details or {}
        if source_uri:
            details["source_uri"] = source_uri
        super().__init__(message, details)


class UnsupportedSourceError(ValidationError):
    """Raised when a folder URL points at a storage provider we cannot list."""


class ComparatorError(FaceScanException):
    """Raised when a single face comparison fails."""

    def __init__(
        self,
        message: str,
        item_id: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        if item_id:
            details["item_id"] = item_id
        super().__init__(message, details)


class ReferenceStoreError(FaceScanException):
    """Raised when the reference face cannot be persisted."""


class ConcurrentUpdateError(FaceScanException):
    """Raised when a job was modified by another writer between read and write."""

    def __init__(
        self,
        job_id: str,
        expected_version: int,
        actual_version: int,
    ) -> None:
        super().__init__(
            f"Job {job_id} was updated concurrently",
            {
                "job_id": job_id,
                "expected_version": expected_version,
                "actual_version": actual_version,
            },
        )
