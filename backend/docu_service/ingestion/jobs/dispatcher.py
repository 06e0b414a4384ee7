"""
Job dispatcher: hands jobs to the external worker.

start() and cancel() never raise. Every worker outcome is returned as a value
so the lifecycle manager can apply the matching state transition.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from docu_service.ingestion.jobs.models import IngestionJob
from docu_service.ingestion.jobs.retry import ErrorCategory, categorize_error
from docu_service.integrations.worker.client import WorkerClient
from docu_service.integrations.worker.exceptions import (
    WorkerError,
    WorkerConnectionError,
    WorkerResponseError,
    WorkerTimeoutError,
)

logger = logging.getLogger(__name__)

MISSING_JOB_ID_MESSAGE = "Worker response did not include a job id"


@dataclass
class DispatchResult:
    """
    Outcome of a dispatch attempt.

    Attributes:
        success: Whether the worker accepted the job
        external_job_id: Worker-assigned id (success only)
        error_message: Failure description (failure only)
        error_category: Failure classification (failure only)
        status_code: Worker HTTP status, if it answered
    """
    success: bool
    external_job_id: Optional[str] = None
    error_message: Optional[str] = None
    error_category: Optional[ErrorCategory] = None
    status_code: Optional[int] = None

    @classmethod
    def succeeded(cls, external_job_id: str) -> "DispatchResult":
        return cls(success=True, external_job_id=external_job_id)

    @classmethod
    def failed(
        cls,
        error_message: str,
        error_category: ErrorCategory = ErrorCategory.UNKNOWN,
        status_code: Optional[int] = None,
    ) -> "DispatchResult":
        return cls(
            success=False,
            error_message=error_message,
            error_category=error_category,
            status_code=status_code,
        )


class JobDispatcher:
    """Issues trigger and cancel calls to the worker through a WorkerClient."""

    def __init__(self, client: WorkerClient):
        self.client = client

    @staticmethod
    def _classify_error(error: Exception) -> ErrorCategory:
        if isinstance(error, WorkerTimeoutError):
            return ErrorCategory.TIMEOUT
        if isinstance(error, WorkerConnectionError):
            return ErrorCategory.CONNECTION
        if isinstance(error, WorkerResponseError):
            return categorize_error(error.status_code, "response")
        return categorize_error(getattr(error, "status_code", None), type(error).__name__)

    async def start(self, job: IngestionJob) -> DispatchResult:
        """
        Ask the worker to process a job.

        Args:
            job: Job to dispatch

        Returns:
            DispatchResult; success only when the worker returned a job id
        """
        try:
            response = await self.client.trigger_ingestion(
                job_id=job.id,
                job_type=job.type.value,
                payload=job.payload or {},
            )
        except WorkerError as e:
            category = self._classify_error(e)
            logger.warning(
                "job.dispatch_error",
                extra={
                    "job_id": job.id,
                    "error_category": category.value,
                    "status_code": e.status_code,
                    "error": e.message,
                },
            )
            return DispatchResult.failed(e.message, category, e.status_code)
        except Exception as e:
            logger.error(
                "job.dispatch_error",
                extra={
                    "job_id": job.id,
                    "error_category": ErrorCategory.UNKNOWN.value,
                    "error": str(e),
                },
                exc_info=True,
            )
            return DispatchResult.failed(str(e) or type(e).__name__)

        if not response.external_job_id:
            logger.warning(
                "job.dispatch_error",
                extra={
                    "job_id": job.id,
                    "error_category": ErrorCategory.INVALID_RESPONSE.value,
                    "error": MISSING_JOB_ID_MESSAGE,
                },
            )
            return DispatchResult.failed(MISSING_JOB_ID_MESSAGE, ErrorCategory.INVALID_RESPONSE)

        return DispatchResult.succeeded(response.external_job_id)

    async def cancel(self, external_job_id: str) -> bool:
        """
        Best-effort request to stop the worker-side job.

        Returns:
            True if the worker acknowledged the cancel, False otherwise
        """
        try:
            await self.client.cancel_ingestion(external_job_id)
        except Exception as e:
            logger.warning(
                "job.worker_cancel_failed",
                extra={
                    "external_job_id": external_job_id,
                    "error_category": self._classify_error(e).value,
                    "error": str(e),
                },
            )
            return False

        logger.info(
            "job.worker_cancelled",
            extra={"external_job_id": external_job_id},
        )
        return True
