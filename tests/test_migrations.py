"""Tests for the Alembic schema migration."""

import importlib.util
from pathlib import Path
from typing import Any

import pytest
from alembic.migration import MigrationContext
from alembic.operations import Operations
from sqlalchemy import inspect

from conftest import make_record
from responses_bridge.database.base import Base
from responses_bridge.database.factory import create_database
from responses_bridge.responses.state_store import ConversationStore

MIGRATION_PATH = Path(__file__).parent.parent / "alembic" / "versions" / "001_initial_schema.py"


@pytest.fixture(scope="module")
def initial_schema():
    spec = importlib.util.spec_from_file_location("initial_schema", MIGRATION_PATH)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


@pytest.fixture
def bare_database(sqlite_config: dict[str, Any]):
    db = create_database({**sqlite_config, "auto_create": False})
    db.initialize()
    yield db
    db.close()


def _run(db, step) -> None:
    with db.engine.begin() as connection:
        with Operations.context(MigrationContext.configure(connection)):
            step()


def test_upgrade_matches_models(initial_schema, bare_database):
    _run(bare_database, initial_schema.upgrade)

    inspector = inspect(bare_database.engine)
    for table in Base.metadata.sorted_tables:
        migrated = {column["name"] for column in inspector.get_columns(table.name)}
        assert migrated == {column.name for column in table.columns}, table.name


def test_store_runs_on_migrated_schema(initial_schema, bare_database):
    _run(bare_database, initial_schema.upgrade)
    store = ConversationStore(bare_database)

    store.put(make_record("resp_1"))
    store.put(make_record("resp_2", "resp_1"))

    assert store.get("resp_2").previous_response_id == "resp_1"


def test_downgrade_drops_everything(initial_schema, bare_database):
    _run(bare_database, initial_schema.upgrade)
    _run(bare_database, initial_schema.downgrade)

    assert bare_database.table_names() == []
