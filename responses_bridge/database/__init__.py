"""Database support module for the responses bridge.

Provides interchangeable SQLite and PostgreSQL storage for responses and
their input/output items.
"""

from .base import Base, DatabaseBase
from .factory import create_database, get_database, reset_database_instance

__all__ = [
    "Base",
    "DatabaseBase",
    "create_database",
    "get_database",
    "reset_database_instance",
]
