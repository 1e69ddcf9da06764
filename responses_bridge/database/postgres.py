"""PostgreSQL backend."""

import logging
from typing import Any

from sqlalchemy.engine import URL

from .base import DatabaseBase

logger = logging.getLogger("responses-bridge")

DEFAULT_POSTGRES_DATABASE = "responses_bridge"


class PostgreSQLDatabase(DatabaseBase):
    """PostgreSQL through psycopg2.

    Reads ``connection.postgres`` (host, port, database, user, password and
    an optional ``connect_timeout`` in seconds).
    """

    @property
    def backend_name(self) -> str:
        return "postgresql"

    @property
    def pg_config(self) -> dict[str, Any]:
        return self.config.get("connection", {}).get("postgres", {})

    def get_connection_string(self) -> str:
        """Build the psycopg2 URL; credentials are escaped as needed."""
        pg = self.pg_config
        url = URL.create(
            "postgresql+psycopg2",
            username=pg.get("user", "postgres"),
            password=pg.get("password") or None,
            host=pg.get("host", "localhost"),
            port=int(pg.get("port", 5432)),
            database=pg.get("database", DEFAULT_POSTGRES_DATABASE),
        )
        logger.debug(f"PostgreSQL connection: {url.render_as_string(hide_password=True)}")
        return url.render_as_string(hide_password=False)

    def get_pool_options(self) -> dict[str, Any]:
        options = super().get_pool_options()
        options["connect_args"] = {
            "connect_timeout": int(self.pg_config.get("connect_timeout", 10)),
            "application_name": "responses-bridge",
        }
        return options
