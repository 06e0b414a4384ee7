"""
Job listing: filtered, sorted, paginated queries over ingestion jobs.

Sort names are resolved against the job table's columns. camelCase names
(createdAt, retryCount, ...) are accepted; anything that is not a column falls
back to created_at.
"""

import logging
import math
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from docu_service.ingestion.jobs.models import (
    ACTIVE_STATUSES,
    IngestionJob,
    JobStatus,
    JobType,
)
from docu_service.ingestion.jobs.store import JobStore

logger = logging.getLogger(__name__)

DEFAULT_SORT_COLUMN = "created_at"
DEFAULT_PAGE_SIZE = 10
DEFAULT_OWN_PAGE_SIZE = 20

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"


def resolve_sort_column(sort_by: Optional[str]) -> str:
    """Map a requested sort name onto a job table column."""
    if not sort_by:
        return DEFAULT_SORT_COLUMN
    name = _CAMEL_BOUNDARY.sub("_", sort_by.strip()).lower()
    if name in IngestionJob.__table__.columns:
        return name
    logger.debug(
        "Unsupported sort field, using default",
        extra={"sort_by": sort_by, "default": DEFAULT_SORT_COLUMN},
    )
    return DEFAULT_SORT_COLUMN


@dataclass
class JobListQuery:
    """Filters, sort and page for list_jobs()."""
    type: Optional[JobType] = None
    status: Optional[JobStatus] = None
    triggered_by_id: Optional[str] = None
    sort_by: str = DEFAULT_SORT_COLUMN
    sort_order: SortOrder = SortOrder.DESC
    page: int = 1
    limit: int = DEFAULT_PAGE_SIZE


@dataclass
class JobPage:
    """One page of jobs plus the size of the full filtered set."""
    items: List[IngestionJob] = field(default_factory=list)
    total: int = 0
    page: int = 1
    limit: int = DEFAULT_PAGE_SIZE

    @property
    def pages(self) -> int:
        if self.limit <= 0:
            return 0
        return math.ceil(self.total / self.limit)


class JobQueryService:
    """Read-only listings over the job store."""

    def __init__(self, store: JobStore):
        self.store = store

    def list_jobs(self, query: JobListQuery) -> JobPage:
        page = max(query.page, 1)
        limit = max(query.limit, 1)
        items, total = self.store.find_page(
            filters={
                "type": query.type,
                "status": query.status,
                "triggered_by_id": query.triggered_by_id,
            },
            order_by=resolve_sort_column(query.sort_by),
            descending=SortOrder(query.sort_order) == SortOrder.DESC,
            offset=(page - 1) * limit,
            limit=limit,
        )
        return JobPage(items=items, total=total, page=page, limit=limit)

    def list_own_jobs(
        self,
        principal,
        page: int = 1,
        limit: int = DEFAULT_OWN_PAGE_SIZE,
    ) -> JobPage:
        """Jobs triggered by the given principal, newest first."""
        return self.list_jobs(
            JobListQuery(triggered_by_id=principal.id, page=page, limit=limit)
        )

    def list_by_status(self, status: JobStatus) -> List[IngestionJob]:
        """All jobs in one status, newest first."""
        return self.store.find_all(
            filters={"status": JobStatus(status)},
            order_by=DEFAULT_SORT_COLUMN,
            descending=True,
        )

    def list_active(self) -> List[IngestionJob]:
        """Pending and processing jobs, oldest first."""
        return self.store.find_all(
            filters={"status": ACTIVE_STATUSES},
            order_by=DEFAULT_SORT_COLUMN,
            descending=False,
        )
