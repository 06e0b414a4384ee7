"""
API Dependencies module.

Provides shared FastAPI dependencies for route handlers.
"""

from docu_service.api.dependencies.ingestion import (
    get_worker_settings,
    get_worker_client,
    close_worker_client,
    get_job_store,
    get_job_dispatcher,
    get_lifecycle_manager,
    get_query_service,
    get_reconciler,
)

__all__ = [
    "get_worker_settings",
    "get_worker_client",
    "close_worker_client",
    "get_job_store",
    "get_job_dispatcher",
    "get_lifecycle_manager",
    "get_query_service",
    "get_reconciler",
]
