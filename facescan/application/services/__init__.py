"""Application services."""

from facescan.application.services.job_service import JobService

__all__ = ["JobService"]
