"""API-specific dependencies."""

# Re-export common dependencies
from .dependencies import (
    ServiceCache,
    get_job_service,
    get_service_cache,
)

__all__ = [
    "ServiceCache",
    "get_job_service",
    "get_service_cache",
]
