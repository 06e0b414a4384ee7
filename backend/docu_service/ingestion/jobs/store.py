"""
Job store: the only code that reads and writes ingestion_jobs rows.

Status changes go through transition(), a conditional targeted update:

    UPDATE ingestion_jobs SET <fields> WHERE id = :id AND status IN (:from)

so concurrent writers (webhook deliveries, retry, cancel) never overwrite
fields they did not touch, and a writer that lost the race matches zero rows
instead of clobbering the winner. created_at/updated_at are assigned by the
database.
"""

import logging
from typing import Any, Dict, Iterable, List, Optional, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from docu_service.ingestion.jobs.models import IngestionJob, JobStatus
from docu_service.models.base import generate_uuid

logger = logging.getLogger(__name__)


class JobStore:
    """
    Persistence for IngestionJob rows.

    Every write commits. On SQLAlchemyError the session is rolled back and
    the error re-raised.
    """

    def __init__(self, db_session: Session):
        self.db_session = db_session

    def _commit(self, operation: str, job_id: Optional[str]) -> None:
        try:
            self.db_session.commit()
        except SQLAlchemyError as e:
            self.db_session.rollback()
            logger.error(
                "Job store write failed",
                extra={"operation": operation, "job_id": job_id, "error": str(e)},
            )
            raise

    def create(self, **fields: Any) -> IngestionJob:
        """
        Insert a new job row.

        Args:
            **fields: Column values (id, created_at, updated_at are assigned here
                or by the database)

        Returns:
            The persisted job, refreshed with database defaults
        """
        fields.pop("created_at", None)
        fields.pop("updated_at", None)
        fields.setdefault("id", generate_uuid())

        job = IngestionJob(**fields)
        self.db_session.add(job)
        self._commit("create", job.id)
        self.db_session.refresh(job)
        return job

    def get(self, job_id: str) -> Optional[IngestionJob]:
        """Load a job by id, always reflecting the current database row."""
        return self.db_session.get(IngestionJob, job_id, populate_existing=True)

    def get_by_external_id(self, external_job_id: str) -> Optional[IngestionJob]:
        """Load the job whose current attempt carries the given worker id."""
        return (
            self.db_session.query(IngestionJob)
            .populate_existing()
            .filter(IngestionJob.external_job_id == external_job_id)
            .order_by(IngestionJob.created_at.desc())
            .first()
        )

    def transition(
        self,
        job_id: str,
        from_statuses: Iterable[JobStatus],
        values: Dict[str, Any],
        *criteria: Any,
    ) -> bool:
        """
        Conditionally update a job.

        Args:
            job_id: Job to update
            from_statuses: Statuses the job must currently be in
            values: Column values to set (may be SQL expressions)
            *criteria: Extra WHERE clauses (e.g. retry budget guard)

        Returns:
            True if the row matched and was updated, False otherwise
        """
        from_statuses = tuple(from_statuses)
        try:
            matched = (
                self.db_session.query(IngestionJob)
                .filter(
                    IngestionJob.id == job_id,
                    IngestionJob.status.in_(from_statuses),
                    *criteria,
                )
                .update(values, synchronize_session=False)
            )
        except SQLAlchemyError as e:
            self.db_session.rollback()
            logger.error(
                "Job transition failed",
                extra={"job_id": job_id, "error": str(e)},
            )
            raise
        self._commit("transition", job_id)
        return matched > 0

    def _filtered(self, filters: Optional[Dict[str, Any]]):
        query = self.db_session.query(IngestionJob)
        for name, value in (filters or {}).items():
            if value is None:
                continue
            column = getattr(IngestionJob, name)
            if isinstance(value, (list, tuple, set, frozenset)):
                query = query.filter(column.in_(list(value)))
            else:
                query = query.filter(column == value)
        return query

    def _ordered(self, query, order_by: str, descending: bool):
        column = getattr(IngestionJob, order_by)
        if descending:
            return query.order_by(column.desc(), IngestionJob.id.desc())
        return query.order_by(column.asc(), IngestionJob.id.asc())

    def find_page(
        self,
        filters: Optional[Dict[str, Any]] = None,
        order_by: str = "created_at",
        descending: bool = True,
        offset: int = 0,
        limit: int = 10,
    ) -> Tuple[List[IngestionJob], int]:
        """
        Return one page of jobs and the total count of the filtered set.

        Args:
            filters: Column name -> value (sequence values become IN filters)
            order_by: Column name to sort by
            descending: Sort direction
            offset: Rows to skip
            limit: Page size

        Returns:
            (items, total)
        """
        query = self._filtered(filters)
        total = query.order_by(None).count()
        items = self._ordered(query, order_by, descending).offset(offset).limit(limit).all()
        return items, total

    def find_all(
        self,
        filters: Optional[Dict[str, Any]] = None,
        order_by: str = "created_at",
        descending: bool = True,
    ) -> List[IngestionJob]:
        """Return every job matching the filters, sorted."""
        return self._ordered(self._filtered(filters), order_by, descending).all()
