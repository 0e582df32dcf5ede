"""
Shared test fixtures and configuration for entire test suite.

Provides: Engine settings, in-memory collaborator fakes, a controllable
clock, and an in-memory SQLite database for store integration tests.
Dependencies: pytest, sqlalchemy, aiosqlite
System role: Test infrastructure and fixture management
"""

import pytest

from facescan.configs.engine import EngineSettings
from tests.fakes import FakeClock, InMemoryJobStore, InMemoryReferenceStore


@pytest.fixture
def clock() -> FakeClock:
    """Provide a hand-driven monotonic clock."""
    return FakeClock()


@pytest.fixture
def engine_settings() -> EngineSettings:
    """Provide engine settings independent of the environment."""
    return EngineSettings(
        batch_size=2,
        max_batch_size=50,
        max_concurrency=3,
        max_execution_seconds=10.0,
        budget_fraction=1.0,
        degrade_fraction=0.5,
        abort_fraction=0.85,
    )


@pytest.fixture
def job_store() -> InMemoryJobStore:
    """Provide an empty in-memory job store."""
    return InMemoryJobStore()


@pytest.fixture
def reference_store() -> InMemoryReferenceStore:
    """Provide an empty in-memory reference store."""
    return InMemoryReferenceStore()


@pytest.fixture
def reference_face() -> bytes:
    """Provide reference face bytes."""
    return b"reference-face"


@pytest.fixture
async def session_factory():
    """
    Create in-memory SQLite async database for testing.

    Yields:
        async_sessionmaker: Session factory bound to a fresh database
    """
    from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
    from sqlalchemy.pool import StaticPool

    from facescan.boundary.db.connection import init_models

    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    await init_models(engine)

    yield async_sessionmaker(engine, expire_on_commit=False, autoflush=False)

    await engine.dispose()
