"""
HTTP client for the external ingestion worker.

The worker exposes two endpoints under its base URL:
- POST /ingestion/trigger   {jobId, type, payload} -> {jobId}
- POST /ingestion/cancel    {jobId}

Every request carries the timeout configured in WorkerSettings. Transport
failures and error statuses are raised as WorkerError subclasses; callers that
must not raise (the job dispatcher) convert them into results.
"""

import logging
from typing import Any, Dict, Optional

import httpx

from docu_service.config.worker import WorkerSettings
from docu_service.integrations.worker.exceptions import (
    WorkerConnectionError,
    WorkerResponseError,
    WorkerTimeoutError,
)
from docu_service.integrations.worker.models import TriggerRequest, TriggerResponse

logger = logging.getLogger(__name__)


class WorkerClient:
    """
    Async client for the ingestion worker API.

    All methods are async and should be used with async/await.
    """

    def __init__(
        self,
        settings: WorkerSettings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize worker client.

        Args:
            settings: Worker base URL and timeouts
            transport: Optional httpx transport (tests use httpx.MockTransport)
        """
        self.settings = settings

        self._client = httpx.AsyncClient(
            timeout=httpx.Timeout(
                settings.timeout_seconds,
                connect=settings.connect_timeout_seconds,
            ),
            headers={
                "Content-Type": "application/json",
                "Accept": "application/json",
            },
            transport=transport,
        )

    async def close(self) -> None:
        """Close the HTTP client."""
        await self._client.aclose()

    async def _request(
        self,
        method: str,
        url: str,
        json: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """
        Make an HTTP request to the worker API.

        Args:
            method: HTTP method
            url: Absolute endpoint URL (from WorkerSettings)
            json: Request body as JSON

        Returns:
            Response data as dictionary ({} for empty bodies)

        Raises:
            WorkerTimeoutError: If the request exceeded the configured timeout
            WorkerConnectionError: If the worker could not be reached
            WorkerResponseError: On error statuses or a non-JSON body
        """
        try:
            response = await self._client.request(
                method=method,
                url=url,
                json=json,
            )
        except httpx.TimeoutException as e:
            logger.error(
                "Worker API timeout",
                extra={"url": url, "error": str(e)},
            )
            raise WorkerTimeoutError(
                f"Request to ingestion worker timed out after {self.settings.timeout_seconds}s"
            )
        except httpx.RequestError as e:
            logger.error(
                "Worker API connection error",
                extra={"url": url, "error": str(e)},
            )
            raise WorkerConnectionError(f"Connection error: {e}")

        if response.status_code == 429:
            retry_after = response.headers.get("Retry-After")
            logger.warning(
                "Worker API rate limited",
                extra={"url": url, "retry_after": retry_after},
            )
            raise WorkerResponseError(
                "Ingestion worker rate limit exceeded",
                status_code=429,
                retry_after=int(retry_after) if retry_after and retry_after.isdigit() else None,
            )

        if response.status_code >= 400:
            error_body: Dict[str, Any] = {}
            try:
                parsed = response.json()
                if isinstance(parsed, dict):
                    error_body = parsed
            except ValueError:
                pass

            logger.error(
                "Worker API error",
                extra={
                    "status_code": response.status_code,
                    "url": url,
                    "response": str(error_body)[:500],
                },
            )
            raise WorkerResponseError(
                f"Ingestion worker error: {response.status_code}",
                status_code=response.status_code,
                response=error_body,
            )

        if response.status_code == 204 or not response.content:
            return {}

        try:
            data = response.json()
        except ValueError:
            logger.error(
                "Worker API returned a non-JSON body",
                extra={"url": url, "status_code": response.status_code},
            )
            raise WorkerResponseError(
                "Ingestion worker returned a non-JSON response",
                status_code=response.status_code,
            )

        if not isinstance(data, dict):
            raise WorkerResponseError(
                "Ingestion worker returned an unexpected response body",
                status_code=response.status_code,
            )
        return data

    async def trigger_ingestion(
        self,
        job_id: str,
        job_type: str,
        payload: Optional[Dict[str, Any]] = None,
    ) -> TriggerResponse:
        """
        Ask the worker to start processing a job.

        Args:
            job_id: Local job id
            job_type: Job type value
            payload: Worker input

        Returns:
            TriggerResponse carrying the worker-assigned job id (may be None)

        Raises:
            WorkerError: On transport or API errors
        """
        request = TriggerRequest(job_id=job_id, job_type=job_type, payload=payload or {})
        data = await self._request("POST", self.settings.trigger_url, json=request.to_dict())
        response = TriggerResponse.from_dict(data)

        logger.debug(
            "Worker accepted trigger request",
            extra={"job_id": job_id, "external_job_id": response.external_job_id},
        )
        return response

    async def cancel_ingestion(self, external_job_id: str) -> None:
        """
        Ask the worker to stop processing a job.

        Args:
            external_job_id: Worker-assigned job id

        Raises:
            WorkerError: On transport or API errors
        """
        await self._request("POST", self.settings.cancel_url, json={"jobId": external_job_id})
