"""
API test fixtures.

Builds the FastAPI app without running its lifespan and swaps the job
service dependency for one wired to in-memory collaborators.
"""

from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from facescan.api.deps import get_job_service
from facescan.api.main import create_app
from facescan.application.services import JobService
from facescan.core.batch.orchestrator import BatchOrchestrator
from tests.fakes import FakeComparator, FakeLister


@pytest.fixture
def app():
    app = create_app()
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def lister() -> FakeLister:
    return FakeLister(total=5)


@pytest.fixture
def job_service(app, job_store, lister, reference_store, engine_settings) -> JobService:
    """Real JobService over fakes: five images, images 3 and 5 hold the face."""
    orchestrator = BatchOrchestrator(
        store=job_store,
        lister=lister,
        comparator=FakeComparator(matches={2: 97.5, 4: 88.0}),
        reference_store=reference_store,
        settings=engine_settings,
    )
    service = JobService(orchestrator=orchestrator, store=job_store, lister=lister)
    app.dependency_overrides[get_job_service] = lambda: service
    return service


@pytest.fixture
def mock_job_service(app):
    service = AsyncMock()
    app.dependency_overrides[get_job_service] = lambda: service
    return service
