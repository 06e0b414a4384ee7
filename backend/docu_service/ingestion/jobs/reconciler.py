"""
Worker status reconciliation.

Applies status reports delivered by the worker's webhook callback to the job
whose current attempt carries the reported worker id:

    processing -> PROCESSING (from pending/processing), started_at if unset
    completed  -> COMPLETED (from processing), stores result
    failed     -> FAILED (from processing), error from result.error

Terminal jobs reject every report, so a late callback never overwrites a
cancellation.
"""

import logging
from typing import Any

from docu_service.ingestion.jobs.errors import InvalidTransitionError, JobNotFoundError
from docu_service.ingestion.jobs.lifecycle import IngestionLifecycleManager
from docu_service.ingestion.jobs.models import IngestionJob, JobStatus
from docu_service.ingestion.jobs.store import JobStore
from docu_service.integrations.worker.models import WorkerJobStatus

logger = logging.getLogger(__name__)

DEFAULT_FAILURE_MESSAGE = "Processing failed"


def failure_message(result: Any) -> str:
    """Error text for a worker-reported failure."""
    if isinstance(result, dict):
        error = result.get("error")
        if error:
            return str(error)
    return DEFAULT_FAILURE_MESSAGE


class WorkerStatusReconciler:
    """Maps worker status callbacks onto lifecycle transitions."""

    def __init__(self, store: JobStore, lifecycle: IngestionLifecycleManager):
        self.store = store
        self.lifecycle = lifecycle

    async def apply_status_update(
        self,
        external_job_id: str,
        status: str,
        result: Any = None,
    ) -> IngestionJob:
        """
        Apply one worker status report.

        Args:
            external_job_id: Worker-assigned job id
            status: Reported status string (case-insensitive)
            result: Worker output or failure details

        Returns:
            The updated job

        Raises:
            JobNotFoundError: If no job carries the worker id
            InvalidTransitionError: If the status is unknown or not allowed
        """
        job = self.store.get_by_external_id(external_job_id)
        if job is None:
            logger.warning(
                "job.reconcile_unknown_job",
                extra={"external_job_id": external_job_id, "reported_status": status},
            )
            raise JobNotFoundError(external_job_id=external_job_id)

        reported = WorkerJobStatus.parse(status)
        if reported is None:
            logger.warning(
                "job.reconcile_unknown_status",
                extra={
                    "job_id": job.id,
                    "external_job_id": external_job_id,
                    "reported_status": status,
                },
            )
            raise InvalidTransitionError(
                job.id, job.status.value, f"Unknown worker status: {status!r}"
            )

        if reported == WorkerJobStatus.PROCESSING:
            updated = await self.lifecycle.mark_started(job.id, external_job_id=external_job_id)
        elif reported == WorkerJobStatus.COMPLETED:
            updated = await self.lifecycle.mark_completed(
                job.id, result=result, external_job_id=external_job_id
            )
        else:
            updated = await self.lifecycle.mark_failed(
                job.id,
                failure_message(result),
                external_job_id=external_job_id,
                from_statuses=(JobStatus.PROCESSING,),
            )

        logger.info(
            "job.reconciled",
            extra={
                "job_id": updated.id,
                "external_job_id": external_job_id,
                "reported_status": reported.value,
                "status": updated.status.value,
            },
        )
        return updated
