"""
FastAPI application for scan jobs.

Mounts the scans, jobs and health routers under /api/v1 and builds the
shared collaborators (database engine, Drive lister, Rekognition, S3)
once at startup.

Dependencies: fastapi, facescan.api.routers, uvicorn
System role: API entry point with router assembly and server launch
"""

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from facescan import __version__
from facescan.api.deps.dependencies import get_service_cache
from facescan.boundary.db.connection import init_models
from facescan.configs import get_settings
from facescan.observability.logger import configure_logging
from facescan.observability.middleware import CorrelationMiddleware, RequestLoggingMiddleware

from .routers import health_router, jobs_router, scans_router


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build collaborators on startup, dispose the database engine on shutdown."""
    logger = logging.getLogger("uvicorn")
    settings = get_settings()

    # Startup
    logger.info("Building scan services...")
    cache = get_service_cache()
    _ = cache.orchestrator
    if settings.database.create_tables:
        await init_models(cache.engine)
        logger.info("Database tables created")
    logger.info("Scan services ready")

    yield

    # Shutdown
    await cache.aclose()
    logger.info("Scan services closed")


def create_app() -> FastAPI:
    """
    Create and configure FastAPI application with routers.

    Returns:
        FastAPI: Configured application instance with all routers registered
    """
    settings = get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title="FaceScan API",
        description="Find a face across the images of a shared folder, batch by batch",
        version=__version__,
        lifespan=lifespan,
        # Interactive docs stay off in production
        docs_url=None if settings.is_production else "/docs",
        redoc_url=None if settings.is_production else "/redoc",
    )

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Correlation-ID"],
    )

    # Add observability middleware
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(CorrelationMiddleware)

    # Register all routers with /api/v1 prefix for versioning
    app.include_router(health_router, prefix="/api/v1")
    app.include_router(scans_router, prefix="/api/v1")
    app.include_router(jobs_router, prefix="/api/v1")

    return app


app = create_app()


if __name__ == "__main__":
    uvicorn.run(
        "facescan.api.main:app",
        host="0.0.0.0",
        port=8000,
    )
