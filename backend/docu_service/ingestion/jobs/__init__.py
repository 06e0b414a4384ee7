"""Lifecycle management for externally-processed ingestion jobs."""

from docu_service.ingestion.jobs.models import (
    IngestionJob,
    JobStatus,
    JobType,
)
from docu_service.ingestion.jobs.errors import (
    IngestionJobError,
    JobNotFoundError,
    InvalidTransitionError,
)
from docu_service.ingestion.jobs.store import JobStore
from docu_service.ingestion.jobs.dispatcher import JobDispatcher, DispatchResult
from docu_service.ingestion.jobs.lifecycle import IngestionLifecycleManager, VALID_TRANSITIONS
from docu_service.ingestion.jobs.reconciler import WorkerStatusReconciler
from docu_service.ingestion.jobs.query import JobQueryService, JobListQuery, JobPage, SortOrder

__all__ = [
    "IngestionJob",
    "JobStatus",
    "JobType",
    "IngestionJobError",
    "JobNotFoundError",
    "InvalidTransitionError",
    "JobStore",
    "JobDispatcher",
    "DispatchResult",
    "IngestionLifecycleManager",
    "VALID_TRANSITIONS",
    "WorkerStatusReconciler",
    "JobQueryService",
    "JobListQuery",
    "JobPage",
    "SortOrder",
]
