"""Alembic environment configuration."""

import os
import sys
from logging.config import fileConfig

from sqlalchemy import pool, create_engine
from alembic import context

# Make the package importable when alembic runs from the project root
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from responses_bridge.config_loader import load_config
from responses_bridge.core.exceptions import ConfigurationError
from responses_bridge.database.base import Base
from responses_bridge.database.factory import DEFAULT_DATABASE_CONFIG, create_database
import responses_bridge.database.models  # noqa: F401  registers tables on Base.metadata

alembic_config = context.config

# Interpret the config file for Python logging.
if alembic_config.config_file_name is not None:
    fileConfig(alembic_config.config_file_name)

target_metadata = Base.metadata


def get_database_url() -> str:
    """Get the database URL from the bridge configuration.

    Honors $RESPONSES_BRIDGE_CONFIG; falls back to the default SQLite file
    when no config file is available.
    """
    try:
        db_config = load_config().get("database") or DEFAULT_DATABASE_CONFIG
    except ConfigurationError:
        db_config = DEFAULT_DATABASE_CONFIG
    return create_database(db_config).get_connection_string()


def run_migrations_offline() -> None:
    """Run migrations in 'offline' mode, emitting SQL without a connection."""
    context.configure(
        url=get_database_url(),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """Run migrations in 'online' mode against a live connection."""
    connectable = create_engine(
        get_database_url(),
        poolclass=pool.NullPool,
    )

    with connectable.connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
        )

        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
