"""
Scan error handling utilities.

Provides a decorator mapping domain exceptions to HTTP responses for the
scan and job endpoints.

Dependencies: fastapi, facescan.core.exceptions
System role: Uniform HTTP error mapping
"""

import functools
import logging
from typing import Any, Callable, TypeVar

from fastapi import HTTPException, status

from facescan.core.exceptions import (
    CollectionFetchError,
    ConcurrentUpdateError,
    FaceScanException,
    InvalidTokenError,
    JobNotFoundError,
    ReferenceMissingError,
    ValidationError,
)
from facescan.observability.log_utils import log_exception_with_context

logger = logging.getLogger(__name__)

# Type for the decorated function
F = TypeVar("F", bound=Callable[..., Any])

STATUS_BY_ERROR: tuple[tuple[type[FaceScanException], int], ...] = (
    (JobNotFoundError, status.HTTP_404_NOT_FOUND),
    (InvalidTokenError, status.HTTP_400_BAD_REQUEST),
    (ReferenceMissingError, status.HTTP_400_BAD_REQUEST),
    (ValidationError, status.HTTP_400_BAD_REQUEST),
    (ConcurrentUpdateError, status.HTTP_409_CONFLICT),
    (CollectionFetchError, status.HTTP_502_BAD_GATEWAY),
)


def status_for(exc: FaceScanException) -> int:
    """HTTP status code for a domain exception (500 when unmapped)."""
    for error_type, code in STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def error_body(exc: FaceScanException) -> dict[str, Any]:
    """Response detail for a domain exception."""
    return {
        "error": type(exc).__name__,
        "message": exc.message,
        "restart_required": isinstance(exc, ReferenceMissingError),
    }


def handle_scan_errors(func: F) -> F:
    """
    Decorator to handle scan job errors and transform them into HTTPExceptions.

    Client errors are logged as warnings, collaborator failures as errors.
    Anything unexpected becomes a 500 without leaking internals.
    """

    @functools.wraps(func)
    async def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return await func(*args, **kwargs)

        except HTTPException:
            raise

        except FaceScanException as e:
            code = status_for(e)
            log = logger.warning if code < 500 else logger.error
            log(
                f"{func.__name__} - {type(e).__name__}: {e.message}",
                extra={"status_code": code, **{k: str(v) for k, v in e.details.items()}},
            )
            raise HTTPException(status_code=code, detail=error_body(e)) from e

        except Exception as e:
            log_exception_with_context(
                logger, f"{func.__name__} - Unexpected failure", e, endpoint=func.__name__
            )
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail={"error": "InternalError", "message": "Unexpected server error"},
            ) from e

    return wrapper  # type: ignore
