"""
API schemas package.

Contains Pydantic models for request/response validation.
"""

from docu_service.api.schemas.ingestion import (
    CreateIngestionJobRequest,
    RetryIngestionJobRequest,
    CancelIngestionJobRequest,
    IngestionJobResponse,
    IngestionJobEnvelope,
    JobListResponse,
    JobsResponse,
    WorkerStatusUpdateRequest,
    WebhookResponse,
)

__all__ = [
    "CreateIngestionJobRequest",
    "RetryIngestionJobRequest",
    "CancelIngestionJobRequest",
    "IngestionJobResponse",
    "IngestionJobEnvelope",
    "JobListResponse",
    "JobsResponse",
    "WorkerStatusUpdateRequest",
    "WebhookResponse",
]
