"""SQLite backend."""

import logging
from pathlib import Path
from typing import Any

from sqlalchemy import event
from sqlalchemy.engine import Engine
from sqlalchemy.pool import NullPool, StaticPool

from .base import DatabaseBase

logger = logging.getLogger("responses-bridge")

DEFAULT_SQLITE_PATH = "data/responses.db"
MEMORY_PATH = ":memory:"


class SQLiteDatabase(DatabaseBase):
    """SQLite file or in-memory database.

    Every connection gets ``foreign_keys=ON`` so item rows cascade with their
    response. File databases also use WAL journaling and a busy timeout
    (``connection.sqlite.busy_timeout_ms``) so concurrent writers wait rather
    than fail immediately.
    """

    @property
    def backend_name(self) -> str:
        return "sqlite"

    @property
    def sqlite_config(self) -> dict[str, Any]:
        return self.config.get("connection", {}).get("sqlite", {})

    @property
    def db_path(self) -> str:
        return self.sqlite_config.get("path", DEFAULT_SQLITE_PATH)

    @property
    def is_memory(self) -> bool:
        return self.db_path == MEMORY_PATH

    def resolved_path(self) -> Path:
        """Absolute database file path; relative paths hang off the project root."""
        path = Path(self.db_path)
        if path.is_absolute():
            return path
        return Path(__file__).parent.parent.parent / path

    def get_connection_string(self) -> str:
        if self.is_memory:
            logger.debug("SQLite database: in-memory")
            return f"sqlite:///{MEMORY_PATH}"

        path = self.resolved_path()
        path.parent.mkdir(parents=True, exist_ok=True)
        logger.debug(f"SQLite database path: {path}")
        return f"sqlite:///{path}"

    def get_pool_options(self) -> dict[str, Any]:
        if self.is_memory:
            # One shared connection, otherwise each checkout sees an empty database
            return {
                "poolclass": StaticPool,
                "connect_args": {"check_same_thread": False},
            }
        return {"poolclass": NullPool}

    def on_engine_created(self, engine: Engine) -> None:
        pragmas = ["PRAGMA foreign_keys=ON"]
        if not self.is_memory:
            busy_timeout = int(self.sqlite_config.get("busy_timeout_ms", 5000))
            pragmas += [f"PRAGMA busy_timeout={busy_timeout}", "PRAGMA journal_mode=WAL"]

        @event.listens_for(engine, "connect")
        def _apply_pragmas(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            for pragma in pragmas:
                cursor.execute(pragma)
            cursor.close()
