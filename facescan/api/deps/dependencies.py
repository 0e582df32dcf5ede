"""
Dependency injection container.

Factory functions for FastAPI dependencies.

Dependencies: facescan.configs, facescan.application, facescan.boundary
System role: DI container for service injection
"""

from fastapi import Depends

from facescan.application.services import JobService
from facescan.configs import Settings, get_settings


class ServiceCache:
    """Container for cached service instances."""

    def __init__(self, settings: Settings | None = None, pooled_engine: bool = True):
        self._settings = settings
        self._pooled_engine = pooled_engine
        self._engine = None
        self._job_store = None
        self._lister = None
        self._comparator = None
        self._reference_store = None
        self._reference_store_loaded = False
        self._orchestrator = None

    @property
    def settings(self) -> Settings:
        if self._settings is None:
            self._settings = get_settings()
        return self._settings

    @property
    def engine(self):
        """Get cached async database engine."""
        if self._engine is None:
            from facescan.boundary.db.connection import get_async_engine

            self._engine = get_async_engine(self.settings.database, pooled=self._pooled_engine)
        return self._engine

    @property
    def job_store(self):
        """Get cached SQL job store."""
        if self._job_store is None:
            from facescan.boundary.db.connection import get_async_session_factory
            from facescan.boundary.db.job_store import SqlJobStore

            self._job_store = SqlJobStore(get_async_session_factory(self.engine))
        return self._job_store

    @property
    def lister(self):
        """Get cached Google Drive lister."""
        if self._lister is None:
            from facescan.boundary.drive import GoogleDriveLister

            self._lister = GoogleDriveLister(self.settings.drive)
        return self._lister

    @property
    def comparator(self):
        """Get cached Rekognition comparator."""
        if self._comparator is None:
            from facescan.boundary.aws import RekognitionComparator

            self._comparator = RekognitionComparator(
                region=self.settings.aws.region,
                similarity_threshold=self.settings.aws.similarity_threshold,
            )
        return self._comparator

    @property
    def reference_store(self):
        """Get cached S3 reference store (None when no bucket is configured)."""
        if not self._reference_store_loaded:
            aws = self.settings.aws
            if aws.reference_bucket:
                from facescan.boundary.aws import S3ReferenceStore

                self._reference_store = S3ReferenceStore(
                    bucket=aws.reference_bucket,
                    prefix=aws.reference_prefix,
                    region=aws.region,
                )
            self._reference_store_loaded = True
        return self._reference_store

    @property
    def orchestrator(self):
        """Get cached batch orchestrator."""
        if self._orchestrator is None:
            from facescan.core.batch import BatchOrchestrator

            self._orchestrator = BatchOrchestrator(
                store=self.job_store,
                lister=self.lister,
                comparator=self.comparator,
                reference_store=self.reference_store,
                settings=self.settings.engine,
            )
        return self._orchestrator

    def job_service(self) -> JobService:
        return JobService(orchestrator=self.orchestrator, store=self.job_store, lister=self.lister)

    async def aclose(self) -> None:
        """Dispose the engine and clear all cached instances."""
        if self._engine is not None:
            await self._engine.dispose()
        self.clear()

    def clear(self) -> None:
        """Clear all cached instances."""
        self._engine = None
        self._job_store = None
        self._lister = None
        self._comparator = None
        self._reference_store = None
        self._reference_store_loaded = False
        self._orchestrator = None


# Global service cache
_service_cache = ServiceCache()


def get_service_cache() -> ServiceCache:
    """Get service cache singleton."""
    return _service_cache


def get_job_service(cache: ServiceCache = Depends(get_service_cache)) -> JobService:
    """
    Get job service instance.

    Args:
        cache: Service cache (injected via Depends)

    Returns:
        JobService: Job service bound to the cached orchestrator and store
    """
    return cache.job_service()
