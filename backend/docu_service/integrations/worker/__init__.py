"""
Ingestion worker integration.

Client for triggering and cancelling processing on the external worker.
"""

from docu_service.integrations.worker.client import WorkerClient
from docu_service.integrations.worker.exceptions import (
    WorkerError,
    WorkerTimeoutError,
    WorkerConnectionError,
    WorkerResponseError,
)
from docu_service.integrations.worker.models import (
    WorkerJobStatus,
    TriggerRequest,
    TriggerResponse,
)

__all__ = [
    # Client
    "WorkerClient",
    # Exceptions
    "WorkerError",
    "WorkerTimeoutError",
    "WorkerConnectionError",
    "WorkerResponseError",
    # Models
    "WorkerJobStatus",
    "TriggerRequest",
    "TriggerResponse",
]
