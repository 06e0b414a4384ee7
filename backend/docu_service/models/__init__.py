"""
Shared database model building blocks.

Job tables live with their domain package (docu_service.ingestion.jobs.models);
this package only carries the mixins and helpers they share.
"""

from docu_service.models.base import Base, TimestampMixin, JSONType, generate_uuid

__all__ = [
    "Base",
    "TimestampMixin",
    "JSONType",
    "generate_uuid",
]
