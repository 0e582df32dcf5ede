"""
Database models package.

Exports:
  - JobModel: Scan job ORM model

Dependencies: sqlalchemy, facescan.boundary.db.base
System role: Database model definitions for domain entities
"""

from facescan.boundary.db.models.job_model import JobModel

__all__ = ["JobModel"]
