"""
CRUD operations for database models.

Exports base CRUD class and the job CRUD implementation
with a pre-instantiated singleton for direct use.

Usage:
    from facescan.boundary.db.CRUD import job_crud

    job = await job_crud.get_by_id(db, job_id)
"""

from facescan.boundary.db.CRUD.base_crud import BaseCRUD
from facescan.boundary.db.CRUD.job_crud import JobCRUD, job_crud

__all__ = [
    "BaseCRUD",
    "JobCRUD",
    "job_crud",
]
