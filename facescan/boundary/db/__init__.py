"""
Database boundary layer: ORM models, CRUD operations, and connection management.

Exports:
  - Base, UUIDMixin, TimestampMixin: Model building blocks
  - get_async_engine(), get_async_session_factory(), init_models(): Connection management
  - JobModel: Scan job entity
  - job_crud: CRUD operation singleton
  - SqlJobStore: JobStore implementation used by the batch engine

Dependencies: sqlalchemy, facescan.configs
System role: Database adapter providing persistent storage for scan jobs.
"""

from facescan.boundary.db.base import Base, TimestampMixin, UUIDMixin
from facescan.boundary.db.connection import (
    get_async_engine,
    get_async_session_factory,
    init_models,
)
from facescan.boundary.db.models.job_model import JobModel
from facescan.boundary.db.CRUD import BaseCRUD, JobCRUD, job_crud
from facescan.boundary.db.job_store import SqlJobStore

__all__ = [
    # Base classes
    "Base",
    "TimestampMixin",
    "UUIDMixin",
    # Connection
    "get_async_engine",
    "get_async_session_factory",
    "init_models",
    # Models
    "JobModel",
    # CRUD
    "BaseCRUD",
    "JobCRUD",
    "job_crud",
    # Store
    "SqlJobStore",
]
