"""
Root test configuration and fixtures.

Provides a fresh SQLite in-memory database per test, a job store bound to it,
principals, and a mocked dispatcher.
"""

import os
import uuid
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# Set test environment
os.environ.setdefault("ENV", "test")

from docu_service.auth.principal import ActingPrincipal, Role
from docu_service.models.base import Base
from docu_service.ingestion.jobs.dispatcher import DispatchResult, JobDispatcher
from docu_service.ingestion.jobs.models import IngestionJob, JobStatus, JobType
from docu_service.ingestion.jobs.store import JobStore


# =============================================================================
# Database Fixtures
# =============================================================================

@pytest.fixture(scope="function")
def db_engine():
    """SQLite in-memory engine with the job table created."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)

    yield engine

    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(scope="function")
def db_session(db_engine):
    """Database session for one test."""
    SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)
    session = SessionLocal()
    yield session
    session.close()


@pytest.fixture
def store(db_session) -> JobStore:
    return JobStore(db_session)


# =============================================================================
# Identity Fixtures
# =============================================================================

@pytest.fixture
def editor() -> ActingPrincipal:
    return ActingPrincipal(id=f"user-{uuid.uuid4().hex[:8]}", role=Role.EDITOR)


@pytest.fixture
def viewer() -> ActingPrincipal:
    return ActingPrincipal(id=f"user-{uuid.uuid4().hex[:8]}", role=Role.VIEWER)


# =============================================================================
# Mock Fixtures
# =============================================================================

@pytest.fixture
def mock_dispatcher():
    """Dispatcher whose worker accepts every job as w-1."""
    dispatcher = MagicMock(spec=JobDispatcher)
    dispatcher.start = AsyncMock(return_value=DispatchResult.succeeded("w-1"))
    dispatcher.cancel = AsyncMock(return_value=True)
    return dispatcher


# =============================================================================
# Job Factory
# =============================================================================

@pytest.fixture
def make_job(store):
    """
    Factory inserting a job directly in a given state.

    created_at values are spread one minute apart so ordering assertions do
    not depend on the database clock resolution.
    """
    base_time = datetime(2024, 1, 1, tzinfo=timezone.utc)
    counter = {"n": 0}

    def _make(
        status: JobStatus = JobStatus.PENDING,
        job_type: JobType = JobType.DOCUMENT,
        triggered_by_id: str = "user-1",
        **fields,
    ) -> IngestionJob:
        counter["n"] += 1
        fields.setdefault("payload", {"file": "a.pdf"})
        fields.setdefault("retry_count", 0)
        fields.setdefault("max_retries", 3)
        if status in (JobStatus.COMPLETED, JobStatus.FAILED, JobStatus.CANCELLED):
            fields.setdefault("completed_at", base_time + timedelta(hours=1))
        if status in (JobStatus.PROCESSING, JobStatus.COMPLETED):
            fields.setdefault("started_at", base_time)
        job = IngestionJob(
            id=str(uuid.uuid4()),
            type=job_type,
            status=status,
            triggered_by_id=triggered_by_id,
            created_at=base_time + timedelta(minutes=counter["n"]),
            **fields,
        )
        store.db_session.add(job)
        store.db_session.commit()
        return store.get(job.id)

    return _make
