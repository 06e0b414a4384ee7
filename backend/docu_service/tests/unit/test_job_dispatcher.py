"""
Tests for JobDispatcher: worker outcomes become DispatchResult values and
nothing escapes as an exception.
"""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest

from docu_service.ingestion.jobs.dispatcher import MISSING_JOB_ID_MESSAGE, JobDispatcher
from docu_service.ingestion.jobs.models import JobType
from docu_service.ingestion.jobs.retry import ErrorCategory
from docu_service.integrations.worker.client import WorkerClient
from docu_service.integrations.worker.exceptions import (
    WorkerConnectionError,
    WorkerResponseError,
    WorkerTimeoutError,
)
from docu_service.integrations.worker.models import TriggerResponse


@pytest.fixture
def mock_client():
    client = MagicMock(spec=WorkerClient)
    client.trigger_ingestion = AsyncMock(return_value=TriggerResponse(external_job_id="w-1"))
    client.cancel_ingestion = AsyncMock(return_value=None)
    return client


@pytest.fixture
def job():
    return SimpleNamespace(id="job-1", type=JobType.DOCUMENT, payload={"file": "a.pdf"})


class TestStart:

    @pytest.mark.asyncio
    async def test_success(self, mock_client, job):
        result = await JobDispatcher(mock_client).start(job)

        assert result.success is True
        assert result.external_job_id == "w-1"
        mock_client.trigger_ingestion.assert_awaited_once_with(
            job_id="job-1", job_type="document", payload={"file": "a.pdf"}
        )

    @pytest.mark.asyncio
    async def test_missing_id_is_failure(self, mock_client, job):
        mock_client.trigger_ingestion.return_value = TriggerResponse(external_job_id=None)

        result = await JobDispatcher(mock_client).start(job)

        assert result.success is False
        assert result.error_message == MISSING_JOB_ID_MESSAGE
        assert result.error_category == ErrorCategory.INVALID_RESPONSE

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "error,category",
        [
            (WorkerTimeoutError("timed out"), ErrorCategory.TIMEOUT),
            (WorkerConnectionError("refused"), ErrorCategory.CONNECTION),
            (WorkerResponseError("error: 500", status_code=500), ErrorCategory.SERVER_ERROR),
            (WorkerResponseError("error: 400", status_code=400), ErrorCategory.CLIENT_ERROR),
            (WorkerResponseError("non-JSON", status_code=200), ErrorCategory.INVALID_RESPONSE),
        ],
    )
    async def test_worker_errors_become_failures(self, mock_client, job, error, category):
        mock_client.trigger_ingestion.side_effect = error

        result = await JobDispatcher(mock_client).start(job)

        assert result.success is False
        assert result.error_message == error.message
        assert result.error_category == category

    @pytest.mark.asyncio
    async def test_unexpected_error_is_absorbed(self, mock_client, job):
        mock_client.trigger_ingestion.side_effect = RuntimeError("kaboom")

        result = await JobDispatcher(mock_client).start(job)

        assert result.success is False
        assert result.error_message == "kaboom"
        assert result.error_category == ErrorCategory.UNKNOWN


class TestCancel:

    @pytest.mark.asyncio
    async def test_success(self, mock_client):
        assert await JobDispatcher(mock_client).cancel("w-1") is True
        mock_client.cancel_ingestion.assert_awaited_once_with("w-1")

    @pytest.mark.asyncio
    async def test_failure_is_swallowed(self, mock_client):
        mock_client.cancel_ingestion.side_effect = WorkerConnectionError("refused")

        assert await JobDispatcher(mock_client).cancel("w-1") is False
