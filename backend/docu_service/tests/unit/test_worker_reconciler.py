"""
Tests for WorkerStatusReconciler.

A late or unknown worker report must never change a job it does not apply to.
"""

import pytest

from docu_service.ingestion.jobs.errors import InvalidTransitionError, JobNotFoundError
from docu_service.ingestion.jobs.lifecycle import IngestionLifecycleManager
from docu_service.ingestion.jobs.models import JobStatus, JobType
from docu_service.ingestion.jobs.reconciler import (
    DEFAULT_FAILURE_MESSAGE,
    WorkerStatusReconciler,
    failure_message,
)


@pytest.fixture
def manager(store, mock_dispatcher):
    return IngestionLifecycleManager(store, mock_dispatcher)


@pytest.fixture
def reconciler(store, manager):
    return WorkerStatusReconciler(store, manager)


class TestFailureMessage:

    def test_uses_result_error(self):
        assert failure_message({"error": "OCR failed"}) == "OCR failed"

    def test_default(self):
        assert failure_message(None) == DEFAULT_FAILURE_MESSAGE
        assert failure_message({"error": ""}) == DEFAULT_FAILURE_MESSAGE
        assert failure_message({"pages": 3}) == "Processing failed"

    def test_non_object_results(self):
        assert failure_message("OCR crashed") == DEFAULT_FAILURE_MESSAGE
        assert failure_message([{"error": "x"}]) == DEFAULT_FAILURE_MESSAGE


class TestApplyStatusUpdate:

    @pytest.mark.asyncio
    async def test_create_then_complete(self, manager, reconciler, editor):
        """Dispatched job w-1 completes with the worker's result."""
        job = await manager.create_job(editor, JobType.DOCUMENT, {"file": "a.pdf"})
        assert job.external_job_id == "w-1"

        updated = await reconciler.apply_status_update("w-1", "completed", {"pages": 10})

        assert updated.id == job.id
        assert updated.status == JobStatus.COMPLETED
        assert updated.result == {"pages": 10}
        assert updated.completed_at is not None

    @pytest.mark.asyncio
    async def test_processing_report_is_idempotent(self, reconciler, make_job):
        job = make_job(JobStatus.PROCESSING, external_job_id="w-1")
        started_at = job.started_at

        updated = await reconciler.apply_status_update("w-1", "processing")
        again = await reconciler.apply_status_update("w-1", "processing")

        assert updated.status == JobStatus.PROCESSING
        assert again.started_at == started_at

    @pytest.mark.asyncio
    async def test_failed_report(self, reconciler, make_job):
        make_job(JobStatus.PROCESSING, external_job_id="w-1")

        updated = await reconciler.apply_status_update("w-1", "failed", {"error": "Corrupt PDF"})

        assert updated.status == JobStatus.FAILED
        assert updated.error_message == "Corrupt PDF"
        assert updated.result is None
        assert updated.completed_at is not None

    @pytest.mark.asyncio
    async def test_failed_report_default_message(self, reconciler, make_job):
        make_job(JobStatus.PROCESSING, external_job_id="w-1")

        updated = await reconciler.apply_status_update("w-1", "failed")

        assert updated.error_message == "Processing failed"

    @pytest.mark.asyncio
    async def test_status_is_case_insensitive(self, reconciler, make_job):
        make_job(JobStatus.PROCESSING, external_job_id="w-1")

        updated = await reconciler.apply_status_update("w-1", " COMPLETED ")

        assert updated.status == JobStatus.COMPLETED

    @pytest.mark.asyncio
    async def test_completed_after_cancel_rejected(self, manager, reconciler, editor):
        """Cancellation wins over a late completion report."""
        job = await manager.create_job(editor, JobType.DOCUMENT, {"file": "a.pdf"})
        await manager.cancel_job(job.id)

        with pytest.raises(InvalidTransitionError):
            await reconciler.apply_status_update("w-1", "completed", {"pages": 10})

        current = manager.store.get(job.id)
        assert current.status == JobStatus.CANCELLED
        assert current.result is None

    @pytest.mark.asyncio
    @pytest.mark.parametrize("reported", ["processing", "completed", "failed"])
    async def test_terminal_jobs_reject_every_report(self, reconciler, make_job, reported):
        job = make_job(JobStatus.COMPLETED, external_job_id="w-1", result={"pages": 1})

        with pytest.raises(InvalidTransitionError):
            await reconciler.apply_status_update("w-1", reported, {"pages": 99})

        assert reconciler.store.get(job.id).result == {"pages": 1}

    @pytest.mark.asyncio
    async def test_failed_report_requires_processing(self, reconciler, make_job):
        job = make_job(JobStatus.PENDING, external_job_id="w-1")

        with pytest.raises(InvalidTransitionError):
            await reconciler.apply_status_update("w-1", "failed")

        assert reconciler.store.get(job.id).status == JobStatus.PENDING

    @pytest.mark.asyncio
    async def test_unknown_status_rejected(self, reconciler, make_job):
        job = make_job(JobStatus.PROCESSING, external_job_id="w-1")

        with pytest.raises(InvalidTransitionError, match="Unknown worker status"):
            await reconciler.apply_status_update("w-1", "done")

        unchanged = reconciler.store.get(job.id)
        assert unchanged.status == JobStatus.PROCESSING
        assert unchanged.completed_at is None

    @pytest.mark.asyncio
    async def test_unknown_external_id(self, reconciler):
        with pytest.raises(JobNotFoundError) as exc_info:
            await reconciler.apply_status_update("w-missing", "completed")

        assert exc_info.value.external_job_id == "w-missing"
