"""
Ingestion job lifecycle manager.

Owns every status change of an IngestionJob:

    (create) -> PENDING
    PENDING    -> PROCESSING | FAILED | CANCELLED
    PROCESSING -> PROCESSING | COMPLETED | FAILED | CANCELLED
    FAILED     -> PENDING (retry, within budget)
    COMPLETED, CANCELLED are terminal

Each change is a conditional update through JobStore.transition(). When it
matches no row the job is re-read: a missing job raises JobNotFoundError,
otherwise InvalidTransitionError names the status that refused it.

Dispatch failures never propagate out of create_job()/retry_job(); they are
recorded as a FAILED job.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from sqlalchemy import func

from docu_service.ingestion.jobs.dispatcher import JobDispatcher
from docu_service.ingestion.jobs.errors import InvalidTransitionError, JobNotFoundError
from docu_service.ingestion.jobs.models import (
    DEFAULT_MAX_RETRIES,
    IngestionJob,
    JobStatus,
    JobType,
)
from docu_service.ingestion.jobs.retry import (
    check_retry_eligibility,
    log_retry_decision,
    merge_retry_payload,
)
from docu_service.ingestion.jobs.store import JobStore

logger = logging.getLogger(__name__)

DEFAULT_CANCEL_REASON = "Cancelled by user"

VALID_TRANSITIONS = {
    JobStatus.PENDING: {JobStatus.PROCESSING, JobStatus.FAILED, JobStatus.CANCELLED},
    JobStatus.PROCESSING: {
        JobStatus.PROCESSING,
        JobStatus.COMPLETED,
        JobStatus.FAILED,
        JobStatus.CANCELLED,
    },
    JobStatus.FAILED: {JobStatus.PENDING},
    JobStatus.COMPLETED: set(),
    JobStatus.CANCELLED: set(),
}


def allowed_sources(target: JobStatus) -> tuple:
    """Statuses from which a job may move to target."""
    return tuple(
        status for status, targets in VALID_TRANSITIONS.items() if target in targets
    )


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _principal_id(principal) -> Optional[str]:
    return getattr(principal, "id", None) if principal is not None else None


class IngestionLifecycleManager:
    """
    Applies lifecycle transitions to ingestion jobs.

    Args:
        store: Job persistence
        dispatcher: Worker trigger/cancel calls
        default_max_retries: Retry budget for jobs created without one
    """

    def __init__(
        self,
        store: JobStore,
        dispatcher: JobDispatcher,
        default_max_retries: int = DEFAULT_MAX_RETRIES,
    ):
        self.store = store
        self.dispatcher = dispatcher
        self.default_max_retries = default_max_retries

    def _require(self, job_id: str) -> IngestionJob:
        job = self.store.get(job_id)
        if job is None:
            raise JobNotFoundError(job_id)
        return job

    def _transition(
        self,
        job_id: str,
        target: JobStatus,
        values: Dict[str, Any],
        action: str,
        *criteria: Any,
    ) -> IngestionJob:
        if self.store.transition(
            job_id,
            allowed_sources(target),
            {"status": target, **values},
            *criteria,
        ):
            return self._require(job_id)

        job = self._require(job_id)
        current = job.status.value
        logger.warning(
            "job.transition_rejected",
            extra={
                "job_id": job_id,
                "current_status": current,
                "requested_status": target.value,
                "action": action,
            },
        )
        raise InvalidTransitionError(
            job_id, current, f"Cannot {action} a job that is {current}"
        )

    async def get_job(self, job_id: str) -> IngestionJob:
        """
        Load a job.

        Raises:
            JobNotFoundError: If the job does not exist
        """
        return self._require(job_id)

    async def create_job(
        self,
        principal,
        job_type: JobType,
        payload: Optional[Dict[str, Any]] = None,
        document_id: Optional[str] = None,
        max_retries: Optional[int] = None,
    ) -> IngestionJob:
        """
        Create a PENDING job and, for document jobs, dispatch it.

        Args:
            principal: Acting principal (recorded as triggered_by_id)
            job_type: Job type
            payload: Worker input
            document_id: Optional stored document reference
            max_retries: Retry budget (default from configuration)

        Returns:
            The job after the dispatch step (PENDING, PROCESSING or FAILED)
        """
        job_type = JobType(job_type)
        job = self.store.create(
            type=job_type,
            status=JobStatus.PENDING,
            payload=dict(payload or {}),
            document_id=document_id,
            triggered_by_id=principal.id,
            retry_count=0,
            max_retries=self.default_max_retries if max_retries is None else max_retries,
        )

        logger.info(
            "job.created",
            extra={
                "job_id": job.id,
                "job_type": job_type.value,
                "triggered_by_id": principal.id,
                "document_id": document_id,
            },
        )

        if job_type == JobType.DOCUMENT:
            return await self._dispatch(job)
        return job

    async def _dispatch(self, job: IngestionJob) -> IngestionJob:
        """Run the dispatch step for a PENDING job and record its outcome."""
        outcome = await self.dispatcher.start(job)

        if outcome.success:
            applied = self.store.transition(
                job.id,
                (JobStatus.PENDING,),
                {
                    "status": JobStatus.PROCESSING,
                    "external_job_id": outcome.external_job_id,
                    "started_at": _utcnow(),
                },
            )
            if applied:
                logger.info(
                    "job.dispatched",
                    extra={"job_id": job.id, "external_job_id": outcome.external_job_id},
                )
                return self._require(job.id)

            # Job left PENDING (cancelled) while the trigger call was in flight.
            current = self._require(job.id)
            logger.warning(
                "job.dispatch_superseded",
                extra={
                    "job_id": job.id,
                    "current_status": current.status.value,
                    "external_job_id": outcome.external_job_id,
                },
            )
            await self.dispatcher.cancel(outcome.external_job_id)
            return current

        applied = self.store.transition(
            job.id,
            (JobStatus.PENDING,),
            {
                "status": JobStatus.FAILED,
                "error_message": outcome.error_message,
                "completed_at": _utcnow(),
            },
        )
        if applied:
            logger.warning(
                "job.dispatch_failed",
                extra={
                    "job_id": job.id,
                    "error_category": outcome.error_category.value if outcome.error_category else None,
                    "status_code": outcome.status_code,
                    "error": outcome.error_message,
                },
            )
        return self._require(job.id)

    async def mark_started(
        self,
        job_id: str,
        external_job_id: Optional[str] = None,
    ) -> IngestionJob:
        """
        Record that the worker is processing the job.

        started_at is only set if it is still empty. When external_job_id is
        given, the update applies only while the job carries that worker id.
        """
        criteria = []
        if external_job_id is not None:
            criteria.append(IngestionJob.external_job_id == external_job_id)

        job = self._transition(
            job_id,
            JobStatus.PROCESSING,
            {"started_at": func.coalesce(IngestionJob.started_at, _utcnow())},
            "start",
            *criteria,
        )
        logger.info("job.started", extra={"job_id": job_id})
        return job

    async def mark_completed(
        self,
        job_id: str,
        result: Any = None,
        external_job_id: Optional[str] = None,
    ) -> IngestionJob:
        """Record a successful worker result. Only PROCESSING jobs complete."""
        criteria = []
        if external_job_id is not None:
            criteria.append(IngestionJob.external_job_id == external_job_id)

        job = self._transition(
            job_id,
            JobStatus.COMPLETED,
            {"result": result, "completed_at": _utcnow()},
            "complete",
            *criteria,
        )
        logger.info("job.completed", extra={"job_id": job_id})
        return job

    async def mark_failed(
        self,
        job_id: str,
        error_message: str,
        external_job_id: Optional[str] = None,
        from_statuses: Optional[tuple] = None,
    ) -> IngestionJob:
        """
        Record a failure.

        Args:
            job_id: Job to fail
            error_message: Failure description
            external_job_id: Require the job to still carry this worker id
            from_statuses: Narrow the allowed source statuses (the worker
                callback only fails PROCESSING jobs)
        """
        criteria = []
        if external_job_id is not None:
            criteria.append(IngestionJob.external_job_id == external_job_id)
        if from_statuses is not None:
            criteria.append(IngestionJob.status.in_(from_statuses))

        job = self._transition(
            job_id,
            JobStatus.FAILED,
            {"error_message": error_message, "completed_at": _utcnow()},
            "fail",
            *criteria,
        )
        logger.warning(
            "job.failed",
            extra={"job_id": job_id, "error": error_message},
        )
        return job

    async def retry_job(
        self,
        job_id: str,
        payload: Optional[Dict[str, Any]] = None,
        principal=None,
    ) -> IngestionJob:
        """
        Put a FAILED job back to PENDING and run the dispatch step again.

        Args:
            job_id: Job to retry
            payload: Fields shallow-merged over the existing payload
            principal: Acting principal (logged)

        Raises:
            JobNotFoundError: If the job does not exist
            InvalidTransitionError: If the job is not failed or out of budget
        """
        job = self._require(job_id)
        eligibility = check_retry_eligibility(job)
        log_retry_decision(job.id, job.retry_count, job.max_retries, eligibility)
        if not eligibility.allowed:
            raise InvalidTransitionError(job.id, job.status.value, eligibility.reason)

        values: Dict[str, Any] = {
            "status": JobStatus.PENDING,
            "retry_count": IngestionJob.retry_count + 1,
            "error_message": None,
            "started_at": None,
            "completed_at": None,
            "external_job_id": None,
        }
        if payload:
            values["payload"] = merge_retry_payload(job.payload, payload)

        applied = self.store.transition(
            job_id,
            allowed_sources(JobStatus.PENDING),
            values,
            IngestionJob.retry_count < IngestionJob.max_retries,
        )
        if not applied:
            # Lost a race with another retry or a concurrent change.
            current = self._require(job_id)
            eligibility = check_retry_eligibility(current)
            reason = (
                f"Cannot retry a job that is {current.status.value}"
                if eligibility.allowed
                else eligibility.reason
            )
            raise InvalidTransitionError(current.id, current.status.value, reason)

        job = self._require(job_id)
        logger.info(
            "job.requeued",
            extra={
                "job_id": job.id,
                "retry_count": job.retry_count,
                "max_retries": job.max_retries,
                "principal_id": _principal_id(principal),
            },
        )

        if job.type == JobType.DOCUMENT:
            return await self._dispatch(job)
        return job

    async def cancel_job(
        self,
        job_id: str,
        reason: Optional[str] = None,
        principal=None,
    ) -> IngestionJob:
        """
        Cancel a PENDING or PROCESSING job.

        The worker-side cancel is best effort and never blocks the local
        CANCELLED state.

        Raises:
            JobNotFoundError: If the job does not exist
            InvalidTransitionError: If the job is no longer active
        """
        job = self._transition(
            job_id,
            JobStatus.CANCELLED,
            {"error_message": reason or DEFAULT_CANCEL_REASON, "completed_at": _utcnow()},
            "cancel",
        )

        logger.info(
            "job.cancelled",
            extra={
                "job_id": job.id,
                "reason": job.error_message,
                "external_job_id": job.external_job_id,
                "principal_id": _principal_id(principal),
            },
        )

        if job.external_job_id:
            await self.dispatcher.cancel(job.external_job_id)
        return job
