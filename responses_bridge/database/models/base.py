"""Shared column helpers for database tables."""

from typing import Any

from sqlalchemy import Column, Integer
from sqlalchemy.types import JSON


class EpochTimestampMixin:
    """Mixin for an integer epoch-seconds creation timestamp."""

    created_at = Column(
        Integer,
        nullable=False,
        index=True,
        comment="Creation time in epoch seconds"
    )


def json_column(name: str, **kwargs: Any) -> Column:
    """Create a JSON column (JSON on PostgreSQL, TEXT-backed on SQLite)."""
    kwargs.setdefault("comment", "JSON data")
    return Column(name, JSON, **kwargs)
