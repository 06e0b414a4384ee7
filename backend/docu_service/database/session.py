"""
Database engine and per-request sessions for the job store.

The engine is built lazily from DATABASE_URL. PostgreSQL gets a pooled
engine; SQLite (local runs, scripts) gets a single-thread-safe engine with
no pool sizing.

Usage:
    from docu_service.database.session import get_db_session

    @router.get("/jobs/{job_id}")
    async def read_job(db: Session = Depends(get_db_session)):
        return JobStore(db).get(job_id)
"""

import os
import logging
from typing import Any, AsyncGenerator, Dict, Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, Session
from fastapi import HTTPException, status

from docu_service.models.base import Base

logger = logging.getLogger(__name__)

_engine: Optional[Engine] = None
_SessionLocal: Optional[sessionmaker] = None


def normalize_database_url(database_url: str) -> str:
    """
    Normalize a database URL for SQLAlchemy.

    Rewrites the legacy postgres:// scheme and selects the psycopg (v3)
    driver for bare postgresql:// URLs. Other URLs pass through untouched.
    """
    if database_url.startswith("postgres://"):
        database_url = database_url.replace("postgres://", "postgresql://", 1)
    if database_url.startswith("postgresql://"):
        database_url = database_url.replace("postgresql://", "postgresql+psycopg://", 1)
    return database_url


def engine_options(database_url: str) -> Dict[str, Any]:
    """Engine keyword arguments for the given (normalized) URL."""
    if database_url.startswith("sqlite"):
        return {"connect_args": {"check_same_thread": False}}
    return {
        "pool_size": 5,
        "max_overflow": 10,
        "pool_pre_ping": True,
        "pool_recycle": 1800,
    }


def build_engine(database_url: str, echo: bool = False) -> Engine:
    """Create an engine for database_url with the options above."""
    url = normalize_database_url(database_url)
    return create_engine(url, echo=echo, **engine_options(url))


def get_engine() -> Engine:
    """
    Get or create the engine singleton.

    Raises:
        ValueError: If DATABASE_URL is not set
    """
    global _engine
    if _engine is None:
        database_url = os.getenv("DATABASE_URL")
        if not database_url:
            logger.error("Failed to create database engine", extra={"error": "DATABASE_URL not set"})
            raise ValueError("DATABASE_URL environment variable is not set")
        _engine = build_engine(database_url)
        logger.info("Database engine created", extra={"dialect": _engine.dialect.name})
    return _engine


def get_session_factory() -> sessionmaker:
    """Get or create the session factory singleton."""
    global _SessionLocal
    if _SessionLocal is None:
        _SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=get_engine())
    return _SessionLocal


def dispose_engine() -> None:
    """Close pooled connections and forget the singletons (shutdown, tests)."""
    global _engine, _SessionLocal
    if _engine is not None:
        _engine.dispose()
    _engine = None
    _SessionLocal = None


def create_schema(engine: Engine) -> list:
    """
    Create missing job tables and indexes on engine.

    Existing tables are left as they are.

    Returns:
        Names of the tables registered on the declarative base
    """
    # Registers ingestion_jobs on Base.metadata
    from docu_service.ingestion.jobs.models import IngestionJob  # noqa: F401

    Base.metadata.create_all(bind=engine)
    return sorted(Base.metadata.tables.keys())


async def get_db_session() -> AsyncGenerator[Session, None]:
    """
    FastAPI dependency yielding one session per request.

    Raises HTTP 503 if the database is not configured.
    """
    try:
        SessionLocal = get_session_factory()
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Database not configured"
        )

    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
