"""
Base mixins for database models.

Provides common functionality:
- Base: declarative base for every table
- TimestampMixin: created_at, updated_at timestamps
- JSONType: JSON column type (JSONB on PostgreSQL)
- generate_uuid: UUID generation for primary keys
"""

import uuid

from sqlalchemy import JSON, Column, DateTime, func
from sqlalchemy.orm import declarative_base
from sqlalchemy.dialects.postgresql import JSONB

# Declarative base shared by every table in the service
Base = declarative_base()

# Use JSONB for PostgreSQL, JSON for other databases (testing)
JSONType = JSON().with_variant(JSONB(), "postgresql")


def generate_uuid() -> str:
    """Generate a UUID4 string for use as a primary key default."""
    return str(uuid.uuid4())


class TimestampMixin:
    """
    Mixin that adds created_at and updated_at timestamp columns.

    Both values are assigned by the database (server default / onupdate),
    never by application code.
    """

    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        index=True,
        comment="Timestamp when record was created"
    )

    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
        comment="Timestamp when record was last updated"
    )
