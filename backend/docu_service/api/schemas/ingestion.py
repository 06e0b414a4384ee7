"""
Pydantic schemas for the ingestion job API and the worker status webhook.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from docu_service.ingestion.jobs import derived
from docu_service.ingestion.jobs.models import IngestionJob, JobStatus, JobType


class CreateIngestionJobRequest(BaseModel):
    """Request body for POST /api/v1/ingestion/trigger."""
    model_config = ConfigDict(populate_by_name=True)

    type: JobType = Field(
        ...,
        description="Kind of ingestion job",
        examples=["document"],
    )
    payload: Dict[str, Any] = Field(
        default_factory=dict,
        description="Input handed to the worker",
        examples=[{"file": "a.pdf"}],
    )
    document_id: Optional[str] = Field(
        None,
        alias="documentId",
        description="Optional reference to a stored document",
        max_length=255,
    )
    max_retries: Optional[int] = Field(
        None,
        alias="maxRetries",
        description="Retry budget (defaults to the configured value)",
        ge=0,
        le=20,
    )


class RetryIngestionJobRequest(BaseModel):
    """Request body for POST /api/v1/ingestion/{job_id}/retry."""
    payload: Optional[Dict[str, Any]] = Field(
        None,
        description="Fields merged over the existing payload (top level only)",
    )


class CancelIngestionJobRequest(BaseModel):
    """Request body for POST /api/v1/ingestion/{job_id}/cancel."""
    reason: Optional[str] = Field(
        None,
        description="Cancellation reason (default: 'Cancelled by user')",
        max_length=500,
    )


class IngestionJobResponse(BaseModel):
    """Response model for an ingestion job, including derived values."""
    model_config = ConfigDict(from_attributes=True)

    id: str
    type: JobType
    status: JobStatus
    payload: Dict[str, Any] = Field(default_factory=dict)
    result: Optional[Any] = None
    error_message: Optional[str] = None
    external_job_id: Optional[str] = None
    retry_count: int
    max_retries: int
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    triggered_by_id: str
    document_id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    duration_seconds: float = 0.0
    progress: int = 0
    is_active: bool = False
    can_retry: bool = False

    @classmethod
    def from_job(cls, job: IngestionJob) -> "IngestionJobResponse":
        def _ts(value: Optional[datetime]) -> Optional[datetime]:
            return derived.as_utc(value) if value is not None else None

        return cls(
            id=job.id,
            type=job.type,
            status=job.status,
            payload=job.payload or {},
            result=job.result,
            error_message=job.error_message,
            external_job_id=job.external_job_id,
            retry_count=job.retry_count,
            max_retries=job.max_retries,
            started_at=_ts(job.started_at),
            completed_at=_ts(job.completed_at),
            triggered_by_id=job.triggered_by_id,
            document_id=job.document_id,
            created_at=_ts(job.created_at),
            updated_at=_ts(job.updated_at),
            duration_seconds=derived.duration_seconds(job),
            progress=derived.progress(job),
            is_active=derived.is_active(job),
            can_retry=derived.can_retry(job),
        )


class IngestionJobEnvelope(BaseModel):
    """Response for create/retry/cancel: a message plus the job."""
    message: str
    job: IngestionJobResponse


class JobListResponse(BaseModel):
    """Paginated job listing."""
    items: List[IngestionJobResponse]
    total: int
    page: int
    limit: int
    pages: int


class JobsResponse(BaseModel):
    """Unpaginated job listing (active / by status)."""
    items: List[IngestionJobResponse]
    total: int


class WorkerStatusUpdateRequest(BaseModel):
    """Body of the worker's status callback."""
    model_config = ConfigDict(populate_by_name=True)

    external_job_id: str = Field(
        ...,
        alias="jobId",
        min_length=1,
        max_length=255,
        description="Worker-assigned job id",
    )
    status: str = Field(
        ...,
        min_length=1,
        max_length=50,
        description="processing | completed | failed",
    )
    result: Optional[Any] = None

    @field_validator("status")
    @classmethod
    def strip_status(cls, value: str) -> str:
        return value.strip()


class WebhookResponse(BaseModel):
    """Response model for webhook endpoint."""
    received: bool
    message: str
    job_id: Optional[str] = None
    status: Optional[str] = None
