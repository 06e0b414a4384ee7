"""
Ingestion job API.

Editors and admins create, inspect, retry and cancel ingestion jobs; any
authenticated principal may list the jobs they triggered.

Domain errors map to:
- JobNotFoundError -> 404
- InvalidTransitionError -> 400
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from docu_service.api.dependencies.ingestion import (
    get_lifecycle_manager,
    get_query_service,
)
from docu_service.api.schemas.ingestion import (
    CancelIngestionJobRequest,
    CreateIngestionJobRequest,
    IngestionJobEnvelope,
    IngestionJobResponse,
    JobListResponse,
    JobsResponse,
    RetryIngestionJobRequest,
)
from docu_service.auth.principal import (
    ActingPrincipal,
    get_current_principal,
    require_elevated_principal,
)
from docu_service.ingestion.jobs.errors import InvalidTransitionError, JobNotFoundError
from docu_service.ingestion.jobs.lifecycle import IngestionLifecycleManager
from docu_service.ingestion.jobs.models import JobStatus, JobType
from docu_service.ingestion.jobs.query import (
    DEFAULT_OWN_PAGE_SIZE,
    DEFAULT_PAGE_SIZE,
    DEFAULT_SORT_COLUMN,
    JobListQuery,
    JobPage,
    JobQueryService,
    SortOrder,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/ingestion", tags=["ingestion"])


def _page_response(page: JobPage) -> JobListResponse:
    return JobListResponse(
        items=[IngestionJobResponse.from_job(job) for job in page.items],
        total=page.total,
        page=page.page,
        limit=page.limit,
        pages=page.pages,
    )


def _not_found(exc: JobNotFoundError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))


def _rejected(exc: InvalidTransitionError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))


def _parse_sort_order(value: Optional[str]) -> SortOrder:
    if not value:
        return SortOrder.DESC
    try:
        return SortOrder(value.strip().lower())
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"sort order must be 'asc' or 'desc', got {value!r}",
        )


@router.post(
    "/trigger",
    response_model=IngestionJobEnvelope,
    status_code=status.HTTP_201_CREATED,
    summary="Create an ingestion job",
    responses={
        201: {"description": "Job created (dispatch failures show as a FAILED job)"},
        403: {"description": "Editor or admin role required"},
    },
)
async def trigger_ingestion(
    body: CreateIngestionJobRequest,
    principal: ActingPrincipal = Depends(require_elevated_principal),
    lifecycle: IngestionLifecycleManager = Depends(get_lifecycle_manager),
):
    job = await lifecycle.create_job(
        principal,
        body.type,
        body.payload,
        document_id=body.document_id,
        max_retries=body.max_retries,
    )
    return IngestionJobEnvelope(
        message="Ingestion job triggered",
        job=IngestionJobResponse.from_job(job),
    )


@router.get("", response_model=JobListResponse, summary="List ingestion jobs")
async def list_jobs(
    job_type: Optional[JobType] = Query(None, alias="type", description="Filter by job type"),
    status_filter: Optional[JobStatus] = Query(None, alias="status", description="Filter by status"),
    triggered_by_id: Optional[str] = Query(None, description="Filter by triggering principal"),
    triggered_by: Optional[str] = Query(None, alias="triggeredBy", include_in_schema=False),
    sort_by: Optional[str] = Query(None, description="Sort field (snake_case or camelCase)"),
    sort_by_camel: Optional[str] = Query(None, alias="sortBy", include_in_schema=False),
    sort_order: Optional[str] = Query(None, description="asc or desc, any case"),
    sort_order_camel: Optional[str] = Query(None, alias="sortOrder", include_in_schema=False),
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=100),
    principal: ActingPrincipal = Depends(require_elevated_principal),
    queries: JobQueryService = Depends(get_query_service),
):
    result = queries.list_jobs(
        JobListQuery(
            type=job_type,
            status=status_filter,
            triggered_by_id=triggered_by_id or triggered_by,
            sort_by=sort_by or sort_by_camel or DEFAULT_SORT_COLUMN,
            sort_order=_parse_sort_order(sort_order or sort_order_camel),
            page=page,
            limit=limit,
        )
    )
    return _page_response(result)


@router.get("/my-jobs", response_model=JobListResponse, summary="List my ingestion jobs")
async def list_my_jobs(
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_OWN_PAGE_SIZE, ge=1, le=100),
    principal: ActingPrincipal = Depends(get_current_principal),
    queries: JobQueryService = Depends(get_query_service),
):
    return _page_response(queries.list_own_jobs(principal, page=page, limit=limit))


@router.get("/active", response_model=JobsResponse, summary="List active ingestion jobs")
async def list_active_jobs(
    principal: ActingPrincipal = Depends(require_elevated_principal),
    queries: JobQueryService = Depends(get_query_service),
):
    jobs = queries.list_active()
    return JobsResponse(
        items=[IngestionJobResponse.from_job(job) for job in jobs],
        total=len(jobs),
    )


@router.get(
    "/by-status/{job_status}",
    response_model=JobsResponse,
    summary="List ingestion jobs in one status",
)
async def list_jobs_by_status(
    job_status: JobStatus,
    principal: ActingPrincipal = Depends(require_elevated_principal),
    queries: JobQueryService = Depends(get_query_service),
):
    jobs = queries.list_by_status(job_status)
    return JobsResponse(
        items=[IngestionJobResponse.from_job(job) for job in jobs],
        total=len(jobs),
    )


@router.get("/{job_id}", response_model=IngestionJobResponse, summary="Get an ingestion job")
async def get_job(
    job_id: str,
    principal: ActingPrincipal = Depends(require_elevated_principal),
    lifecycle: IngestionLifecycleManager = Depends(get_lifecycle_manager),
):
    try:
        job = await lifecycle.get_job(job_id)
    except JobNotFoundError as e:
        raise _not_found(e)
    return IngestionJobResponse.from_job(job)


@router.post(
    "/{job_id}/retry",
    response_model=IngestionJobEnvelope,
    summary="Retry a failed ingestion job",
    responses={
        400: {"description": "Job is not failed or has no retries left"},
        404: {"description": "Job not found"},
    },
)
async def retry_job(
    job_id: str,
    body: Optional[RetryIngestionJobRequest] = None,
    principal: ActingPrincipal = Depends(require_elevated_principal),
    lifecycle: IngestionLifecycleManager = Depends(get_lifecycle_manager),
):
    try:
        job = await lifecycle.retry_job(
            job_id,
            payload=body.payload if body else None,
            principal=principal,
        )
    except JobNotFoundError as e:
        raise _not_found(e)
    except InvalidTransitionError as e:
        raise _rejected(e)

    return IngestionJobEnvelope(
        message="Ingestion job retry initiated",
        job=IngestionJobResponse.from_job(job),
    )


@router.post(
    "/{job_id}/cancel",
    response_model=IngestionJobEnvelope,
    summary="Cancel an active ingestion job",
    responses={
        400: {"description": "Job is no longer active"},
        404: {"description": "Job not found"},
    },
)
async def cancel_job(
    job_id: str,
    body: Optional[CancelIngestionJobRequest] = None,
    principal: ActingPrincipal = Depends(require_elevated_principal),
    lifecycle: IngestionLifecycleManager = Depends(get_lifecycle_manager),
):
    try:
        job = await lifecycle.cancel_job(
            job_id,
            reason=body.reason if body else None,
            principal=principal,
        )
    except JobNotFoundError as e:
        raise _not_found(e)
    except InvalidTransitionError as e:
        raise _rejected(e)

    return IngestionJobEnvelope(
        message="Ingestion job cancelled",
        job=IngestionJobResponse.from_job(job),
    )
