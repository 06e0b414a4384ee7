"""
Derived job values.

Pure functions over an IngestionJob's stored fields. They take any object with
the job's attributes (row or response model) and never touch the database.

Naive datetimes (SQLite returns them) are treated as UTC.
"""

from datetime import datetime, timezone
from typing import Optional

from docu_service.ingestion.jobs.models import (
    ACTIVE_STATUSES,
    TERMINAL_STATUSES,
    JobStatus,
)

PROGRESS_NOT_STARTED = 0
PROGRESS_IN_FLIGHT = 50
PROGRESS_DONE = 100


def as_utc(value: datetime) -> datetime:
    """Return value as an aware UTC datetime."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def is_active(job) -> bool:
    """True while the job is pending or processing."""
    return job.status in ACTIVE_STATUSES


def is_terminal(job) -> bool:
    """True once the job is completed, failed or cancelled."""
    return job.status in TERMINAL_STATUSES


def can_retry(job) -> bool:
    """True if the job failed and still has retry budget."""
    return job.status == JobStatus.FAILED and (job.retry_count or 0) < job.max_retries


def duration_seconds(job, now: Optional[datetime] = None) -> float:
    """
    Seconds between started_at and completed_at (or now while still running).

    Returns 0.0 for jobs that never started.
    """
    if job.started_at is None:
        return 0.0
    started = as_utc(job.started_at)
    if job.completed_at is not None:
        finished = as_utc(job.completed_at)
    else:
        finished = as_utc(now) if now is not None else datetime.now(timezone.utc)
    return max((finished - started).total_seconds(), 0.0)


def progress(job) -> int:
    """
    Coarse progress indicator.

    100 for completed jobs, 50 while processing, 0 otherwise. The worker
    does not report fine-grained progress.
    """
    if job.status == JobStatus.COMPLETED:
        return PROGRESS_DONE
    if job.status == JobStatus.PROCESSING:
        return PROGRESS_IN_FLIGHT
    return PROGRESS_NOT_STARTED
