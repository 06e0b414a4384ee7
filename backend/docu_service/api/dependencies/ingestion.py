"""
FastAPI dependencies that assemble the ingestion job components.

The worker settings and HTTP client are process-wide singletons; the store
and the services built on it are created per request around the request's
database session.
"""

import logging
from typing import Optional

from fastapi import Depends
from sqlalchemy.orm import Session

from docu_service.config.worker import WorkerSettings
from docu_service.database.session import get_db_session
from docu_service.ingestion.jobs.dispatcher import JobDispatcher
from docu_service.ingestion.jobs.lifecycle import IngestionLifecycleManager
from docu_service.ingestion.jobs.query import JobQueryService
from docu_service.ingestion.jobs.reconciler import WorkerStatusReconciler
from docu_service.ingestion.jobs.store import JobStore
from docu_service.integrations.worker.client import WorkerClient

logger = logging.getLogger(__name__)

# Module-level singletons
_worker_settings: Optional[WorkerSettings] = None
_worker_client: Optional[WorkerClient] = None


def get_worker_settings() -> WorkerSettings:
    """Worker settings, read from the environment once per process."""
    global _worker_settings
    if _worker_settings is None:
        _worker_settings = WorkerSettings.from_env()
    return _worker_settings


def get_worker_client(
    settings: WorkerSettings = Depends(get_worker_settings),
) -> WorkerClient:
    """Shared worker HTTP client."""
    global _worker_client
    if _worker_client is None:
        _worker_client = WorkerClient(settings)
        logger.info(
            "Worker client created",
            extra={"worker_base_url": settings.base_url},
        )
    return _worker_client


async def close_worker_client() -> None:
    """Close the shared worker client (application shutdown)."""
    global _worker_client
    if _worker_client is not None:
        await _worker_client.close()
        _worker_client = None


def get_job_store(db: Session = Depends(get_db_session)) -> JobStore:
    return JobStore(db)


def get_job_dispatcher(
    client: WorkerClient = Depends(get_worker_client),
) -> JobDispatcher:
    return JobDispatcher(client)


def get_lifecycle_manager(
    store: JobStore = Depends(get_job_store),
    dispatcher: JobDispatcher = Depends(get_job_dispatcher),
    settings: WorkerSettings = Depends(get_worker_settings),
) -> IngestionLifecycleManager:
    return IngestionLifecycleManager(
        store,
        dispatcher,
        default_max_retries=settings.default_max_retries,
    )


def get_query_service(store: JobStore = Depends(get_job_store)) -> JobQueryService:
    return JobQueryService(store)


def get_reconciler(
    store: JobStore = Depends(get_job_store),
    lifecycle: IngestionLifecycleManager = Depends(get_lifecycle_manager),
) -> WorkerStatusReconciler:
    return WorkerStatusReconciler(store, lifecycle)
