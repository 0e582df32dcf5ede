"""API routers."""

from facescan.api.routers.health import router as health_router
from facescan.api.routers.jobs import router as jobs_router
from facescan.api.routers.scans import router as scans_router

__all__ = ["health_router", "jobs_router", "scans_router"]
