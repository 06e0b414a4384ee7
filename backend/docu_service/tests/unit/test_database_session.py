"""
Tests for database URL normalisation, engine options and schema creation.
"""

import pytest
from fastapi import HTTPException
from sqlalchemy import inspect

from docu_service.database import session as db_session
from docu_service.database.session import (
    build_engine,
    create_schema,
    engine_options,
    normalize_database_url,
)


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("postgres://u:p@db:5432/app", "postgresql+psycopg://u:p@db:5432/app"),
        ("postgresql://u:p@db:5432/app", "postgresql+psycopg://u:p@db:5432/app"),
        ("postgresql+psycopg://u:p@db/app", "postgresql+psycopg://u:p@db/app"),
        ("sqlite:///:memory:", "sqlite:///:memory:"),
    ],
)
def test_normalize_database_url(raw, expected):
    assert normalize_database_url(raw) == expected


def test_sqlite_engine_has_no_pool_sizing():
    options = engine_options("sqlite:///jobs.db")
    assert "pool_size" not in options
    assert options["connect_args"] == {"check_same_thread": False}


def test_postgres_engine_is_pooled():
    options = engine_options("postgresql+psycopg://u:p@db/app")
    assert options["pool_size"] == 5
    assert options["pool_pre_ping"] is True


def test_create_schema_creates_jobs_table():
    engine = build_engine("sqlite://")
    try:
        tables = create_schema(engine)
        assert "ingestion_jobs" in tables
        assert "ingestion_jobs" in inspect(engine).get_table_names()
    finally:
        engine.dispose()


@pytest.mark.asyncio
async def test_db_session_dependency_returns_503_without_database(monkeypatch):
    monkeypatch.delenv("DATABASE_URL", raising=False)
    db_session.dispose_engine()

    with pytest.raises(HTTPException) as exc_info:
        async for _ in db_session.get_db_session():
            pass

    assert exc_info.value.status_code == 503
