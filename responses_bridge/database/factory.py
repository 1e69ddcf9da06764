"""Database factory for creating interchangeable database instances."""

import logging
from typing import Any, Optional

from .base import DatabaseBase
from .postgres import PostgreSQLDatabase
from .sqlite import DEFAULT_SQLITE_PATH, SQLiteDatabase

logger = logging.getLogger("responses-bridge")

# Global database instances, keyed so tests can hold several side by side
_database_instances: dict[str, DatabaseBase] = {}

DEFAULT_DATABASE_CONFIG: dict[str, Any] = {
    "backend": "sqlite",
    "connection": {"sqlite": {"path": DEFAULT_SQLITE_PATH}},
    "pool_size": 5,
    "max_overflow": 10,
}


def create_database(config: Optional[dict[str, Any]] = None) -> DatabaseBase:
    """Build a new, uninitialized database for ``config``.

    Raises:
        ValueError: If an unsupported database backend is specified.
    """
    if config is None:
        config = DEFAULT_DATABASE_CONFIG

    backend = str(config.get("backend", "sqlite")).lower()

    if backend == "sqlite":
        return SQLiteDatabase(config)
    if backend in ("postgres", "postgresql"):
        return PostgreSQLDatabase(config)
    raise ValueError(f"Unsupported database backend: {backend}. Supported backends: sqlite, postgres")


def get_database(
    config: Optional[dict[str, Any]] = None,
    instance_key: str = "default",
) -> DatabaseBase:
    """Get the shared database instance for ``instance_key``.

    The first call for a key creates the instance from ``config`` (default
    SQLite when None); later calls return the same instance and ignore
    ``config``.
    """
    key = instance_key or "default"
    if key in _database_instances:
        return _database_instances[key]

    instance = create_database(config)
    _database_instances[key] = instance
    logger.info(f"Database factory created {instance.backend_name} database instance (key={key})")
    return instance


def reset_database_instance(instance_key: Optional[str] = None) -> None:
    """Close and forget database instances.

    Resets every instance when ``instance_key`` is None. Mainly for tests.
    """
    if instance_key is None:
        for instance in _database_instances.values():
            instance.close()
        _database_instances.clear()
        logger.debug("All database instances reset")
        return

    instance = _database_instances.pop(instance_key, None)
    if instance is not None:
        instance.close()
    logger.debug("Database instance reset: %s", instance_key)
