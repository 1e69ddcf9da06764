"""Tests for database functionality."""

import threading
import time
from typing import Any

import pytest
from sqlalchemy import text

from responses_bridge.database.factory import (
    create_database,
    get_database,
    reset_database_instance,
)
from responses_bridge.database.postgres import PostgreSQLDatabase
from responses_bridge.database.sqlite import SQLiteDatabase
from responses_bridge.responses.state_store import ConversationStore


class TestDatabaseFactory:
    """Tests for database factory."""

    def test_get_sqlite_database(self, sqlite_config: dict[str, Any]) -> None:
        db = get_database(sqlite_config)
        assert db.backend_name == "sqlite"
        assert isinstance(db, SQLiteDatabase)

    def test_get_database_default(self) -> None:
        db = get_database()
        assert db.backend_name == "sqlite"
        assert db.db_path == "data/responses.db"

    def test_get_database_singleton(self, sqlite_config: dict[str, Any]) -> None:
        db1 = get_database(sqlite_config)
        db2 = get_database()
        assert db1 is db2

    def test_instance_keys_are_independent(self, sqlite_config: dict[str, Any]) -> None:
        assert get_database(sqlite_config, "a") is not get_database(sqlite_config, "b")

    def test_reset_single_instance(self, sqlite_config: dict[str, Any]) -> None:
        first = get_database(sqlite_config, "a")
        reset_database_instance("a")
        assert get_database(sqlite_config, "a") is not first

    def test_postgres_aliases(self) -> None:
        assert isinstance(create_database({"backend": "postgres"}), PostgreSQLDatabase)
        assert isinstance(create_database({"backend": "PostgreSQL"}), PostgreSQLDatabase)

    def test_unknown_backend(self) -> None:
        with pytest.raises(ValueError, match="Unsupported database backend"):
            create_database({"backend": "oracle"})


class TestSQLiteDatabase:
    """Tests for SQLite database functionality."""

    def test_initialize_creates_tables(self, sqlite_config: dict[str, Any]) -> None:
        db = get_database(sqlite_config)
        assert not db.is_initialized
        db.initialize()
        assert db.is_initialized
        assert {"responses", "input_items", "output_items"} <= set(db.table_names())

    def test_auto_create_can_be_disabled(self, sqlite_config: dict[str, Any]) -> None:
        db = create_database({**sqlite_config, "auto_create": False})
        db.initialize()
        assert db.table_names() == []
        db.close()

    def test_foreign_keys_enabled(self, sqlite_config: dict[str, Any]) -> None:
        db = get_database(sqlite_config)
        db.initialize()
        with db.session() as session:
            assert session.execute(text("PRAGMA foreign_keys")).scalar() == 1

    def test_absolute_path_is_kept(self, tmp_path) -> None:
        db = create_database({"backend": "sqlite", "connection": {"sqlite": {"path": str(tmp_path / "x.db")}}})
        assert db.get_connection_string() == f"sqlite:///{tmp_path / 'x.db'}"

    def test_health_check(self, sqlite_config: dict[str, Any]) -> None:
        db = get_database(sqlite_config)
        assert db.health_check() is False
        db.initialize()
        assert db.health_check() is True

    def test_close_database(self, sqlite_config: dict[str, Any]) -> None:
        db = get_database(sqlite_config)
        db.initialize()
        db.close()
        assert not db.is_initialized
        with pytest.raises(RuntimeError):
            db.get_session()


class TestPostgreSQLDatabase:
    """Tests for PostgreSQL configuration (no server required)."""

    def test_connection_string(self) -> None:
        db = create_database({
            "backend": "postgres",
            "connection": {
                "postgres": {
                    "host": "db.local",
                    "port": 5433,
                    "database": "bridge",
                    "user": "svc",
                    "password": "pw",
                }
            },
        })
        assert db.get_connection_string() == "postgresql+psycopg2://svc:pw@db.local:5433/bridge"

    def test_pool_options(self) -> None:
        db = create_database({"backend": "postgres", "pool_size": 3, "max_overflow": 1})
        options = db.get_pool_options()
        assert options["pool_size"] == 3
        assert options["max_overflow"] == 1


def test_postgres_password_is_escaped() -> None:
    db = create_database({
        "backend": "postgres",
        "connection": {"postgres": {"user": "svc", "password": "p@ss/word", "host": "h"}},
    })
    assert db.get_connection_string() == "postgresql+psycopg2://svc:p%40ss%2Fword@h:5432/responses_bridge"


def test_sqlite_file_uses_wal(tmp_path) -> None:
    db = create_database({"backend": "sqlite", "connection": {"sqlite": {"path": str(tmp_path / "r.db")}}})
    db.initialize()
    try:
        with db.session() as session:
            assert session.execute(text("PRAGMA journal_mode")).scalar() == "wal"
            assert session.execute(text("PRAGMA foreign_keys")).scalar() == 1
    finally:
        db.close()


class SlowSchemaDatabase(SQLiteDatabase):
    """SQLite database whose schema creation takes a while."""

    def create_schema(self, engine=None) -> None:
        time.sleep(0.3)
        super().create_schema(engine)


def test_concurrent_first_use_waits_for_schema(tmp_path) -> None:
    db = SlowSchemaDatabase({"backend": "sqlite", "connection": {"sqlite": {"path": str(tmp_path / "r.db")}}})
    store = ConversationStore(db)
    errors: list[BaseException] = []

    def lookup() -> None:
        try:
            assert store.get("resp_x") is None
        except BaseException as e:  # collected for the main thread
            errors.append(e)

    threads = [threading.Thread(target=lookup) for _ in range(4)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    try:
        assert errors == []
        assert {"responses", "input_items", "output_items"} <= set(db.table_names())
    finally:
        db.close()
