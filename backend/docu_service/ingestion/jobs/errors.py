"""
Domain errors raised by the ingestion job lifecycle.
"""

from typing import Optional


class IngestionJobError(Exception):
    """Base class for ingestion job errors."""
    pass


class JobNotFoundError(IngestionJobError):
    """Raised when a job cannot be found by id or worker id."""

    def __init__(self, job_id: Optional[str] = None, external_job_id: Optional[str] = None):
        self.job_id = job_id
        self.external_job_id = external_job_id
        if external_job_id is not None and job_id is None:
            message = f"Ingestion job with external id {external_job_id} not found"
        else:
            message = f"Ingestion job {job_id} not found"
        super().__init__(message)


class InvalidTransitionError(IngestionJobError):
    """Raised when a job is not in a state that allows the requested change."""

    def __init__(
        self,
        job_id: Optional[str],
        current_status: Optional[str],
        reason: str,
    ):
        self.job_id = job_id
        self.current_status = current_status
        self.reason = reason
        super().__init__(reason)
