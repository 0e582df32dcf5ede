"""
Scan job ORM model.

Persists one face-scan run: the remote folder, how many images it holds,
the lifecycle status and the cumulative comparison results.

Dependencies: sqlalchemy, facescan.boundary.db.base
System role: Durable job state shared by stateless ticks
"""

from sqlalchemy import JSON, Enum, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from facescan.boundary.db.base import Base, TimestampMixin, UUIDMixin
from facescan.core.batch.models import JobStatus


class JobModel(Base, UUIDMixin, TimestampMixin):
    """
    Scan job ORM model.

    Ticks may land on different workers, so every piece of resume state
    lives here rather than in process memory.

    Attributes:
        id: UUID primary key (auto-generated)
        source_uri: Remote folder URL (immutable)
        source_type: Storage provider ("gdrive")
        item_count: Images found by the latest folder scan
        status: Lifecycle enum (PENDING/PROCESSING/COMPLETE/ERROR)
        results: JSON list of comparison results, one per item id
        next_token: Last continuation token issued while processing
        version: Incremented on every results write (compare-and-set)
        error: Job-level failure message
        created_at: Job creation timestamp (UTC)
        updated_at: Last update timestamp (UTC)

    Workflow:
        1. POST /scans lists the folder, creates JobModel with status=PENDING
        2. Bootstrap tick stores an empty result set, status → PROCESSING
        3. Each tick merges a batch into results and stores the next token
        4. Last tick sets status → COMPLETE and clears next_token
    """

    __tablename__ = "scan_jobs"

    source_uri: Mapped[str] = mapped_column(
        String(2048),
        nullable=False,
        doc="Remote folder URL",
    )

    source_type: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
        default="gdrive",
    )

    item_count: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
        doc="Images discovered by the latest scan",
    )

    status: Mapped[JobStatus] = mapped_column(
        Enum(JobStatus, native_enum=False, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=JobStatus.PENDING,
    )

    results: Mapped[list] = mapped_column(
        JSON,
        nullable=False,
        default=list,
        doc="Cumulative comparison results",
    )

    next_token: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
        doc="Continuation token issued by the latest tick",
    )

    version: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
    )

    error: Mapped[str | None] = mapped_column(Text, nullable=True)
