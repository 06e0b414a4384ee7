"""
Ingestion job model.

Defines the IngestionJob row that tracks externally-executed ingestion work:
- Status tracking (pending|processing|completed|failed|cancelled)
- Retry budget (retry_count / max_retries, default 3)
- Worker correlation via external_job_id
- Lifecycle timestamps (started_at / completed_at)

Derived values (duration, progress, retry eligibility) are pure functions in
docu_service.ingestion.jobs.derived, not methods on the row.
"""

import enum

from sqlalchemy import (
    Column,
    String,
    Integer,
    Enum,
    DateTime,
    Text,
    Index,
)

from docu_service.config.worker import DEFAULT_MAX_RETRIES
from docu_service.models.base import Base, TimestampMixin, JSONType, generate_uuid


class JobStatus(str, enum.Enum):
    """Ingestion job status enumeration."""
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"


class JobType(str, enum.Enum):
    """Kind of ingestion work. Only DOCUMENT jobs are dispatched on creation."""
    DOCUMENT = "document"
    BATCH = "batch"
    SCHEDULED = "scheduled"


ACTIVE_STATUSES = (JobStatus.PENDING, JobStatus.PROCESSING)
TERMINAL_STATUSES = (JobStatus.COMPLETED, JobStatus.FAILED, JobStatus.CANCELLED)


def _enum_values(enum_cls):
    return [member.value for member in enum_cls]


class IngestionJob(Base, TimestampMixin):
    """
    Tracks one unit of ingestion work handed to the external worker.

    Attributes:
        id: Primary key (UUID), assigned at creation
        type: Job type, fixed at creation
        status: Current job status
        payload: Worker input (shallow-merged on retry)
        result: Worker output, set only when the job completes
        error_message: Failure or cancellation reason
        external_job_id: Worker-assigned id for the current attempt
        retry_count: Number of retries performed
        max_retries: Retry budget
        started_at: When processing started
        completed_at: When the job reached completed/failed/cancelled
        triggered_by_id: Id of the principal that created the job
        document_id: Optional reference to a stored document
    """

    __tablename__ = "ingestion_jobs"

    id = Column(
        String(36),
        primary_key=True,
        default=generate_uuid,
        comment="Primary key (UUID)"
    )

    type = Column(
        Enum(JobType, name="ingestion_job_type", values_callable=_enum_values),
        nullable=False,
        index=True,
        comment="Job type: document, batch, scheduled"
    )

    status = Column(
        Enum(JobStatus, name="ingestion_job_status", values_callable=_enum_values),
        default=JobStatus.PENDING,
        nullable=False,
        index=True,
        comment="Job status: pending, processing, completed, failed, cancelled"
    )

    payload = Column(
        JSONType,
        nullable=False,
        default=dict,
        comment="Input handed to the worker"
    )
    result = Column(
        JSONType,
        nullable=True,
        comment="Worker output for completed jobs"
    )

    error_message = Column(
        Text,
        nullable=True,
        comment="Failure or cancellation reason"
    )

    external_job_id = Column(
        String(255),
        nullable=True,
        index=True,
        comment="Worker-assigned job id for the current attempt"
    )

    # Retry tracking
    retry_count = Column(
        Integer,
        default=0,
        nullable=False,
        comment="Number of retries performed"
    )
    max_retries = Column(
        Integer,
        default=DEFAULT_MAX_RETRIES,
        nullable=False,
        comment="Retry budget"
    )

    # Timestamps for lifecycle
    started_at = Column(
        DateTime(timezone=True),
        nullable=True,
        comment="When processing started"
    )
    completed_at = Column(
        DateTime(timezone=True),
        nullable=True,
        comment="When the job reached a terminal or failed state"
    )

    triggered_by_id = Column(
        String(255),
        nullable=False,
        index=True,
        comment="Principal that created the job"
    )
    document_id = Column(
        String(255),
        nullable=True,
        index=True,
        comment="Optional reference to a stored document"
    )

    __table_args__ = (
        Index("ix_ingestion_jobs_status_created", "status", "created_at"),
        Index("ix_ingestion_jobs_triggered_by_created", "triggered_by_id", "created_at"),
    )

    def __repr__(self) -> str:
        return (
            f"<IngestionJob("
            f"id={self.id}, "
            f"type={self.type.value if self.type else None}, "
            f"status={self.status.value if self.status else None}, "
            f"external_job_id={self.external_job_id}"
            f")>"
        )
