"""Engine and session management shared by the storage backends."""

import logging
import threading
from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Any, Generator, Optional

from sqlalchemy import create_engine, inspect, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

logger = logging.getLogger("responses-bridge")

# Declarative base for the responses/items tables
Base = declarative_base()


class DatabaseBase(ABC):
    """One configured storage backend for the conversation store.

    Subclasses supply the connection URL and pool settings; this class owns
    the engine lifecycle and hands out transactional sessions. Nothing
    connects until ``initialize()`` runs.
    """

    def __init__(self, config: dict[str, Any]) -> None:
        """Keep the ``database`` config section for later initialization.

        Args:
            config: Backend, per-backend connection settings, pool sizing and
                ``auto_create``.
        """
        self.config = config
        self._engine: Optional[Engine] = None
        self._session_factory: Optional[sessionmaker[Session]] = None
        self._init_lock = threading.Lock()

    @property
    @abstractmethod
    def backend_name(self) -> str:
        """Short backend name used in logs."""

    @abstractmethod
    def get_connection_string(self) -> str:
        """SQLAlchemy URL for this backend."""

    def get_pool_options(self) -> dict[str, Any]:
        """Keyword arguments for ``create_engine`` controlling pooling."""
        return {
            "pool_size": self.config.get("pool_size", 5),
            "max_overflow": self.config.get("max_overflow", 10),
            "pool_pre_ping": True,
        }

    def on_engine_created(self, engine: Engine) -> None:
        """Attach backend-specific listeners to a freshly built engine."""

    @property
    def auto_create(self) -> bool:
        # False when the schema is managed by the Alembic migrations
        return bool(self.config.get("auto_create", True))

    def initialize(self) -> None:
        """Build the engine, session factory and schema once.

        Safe to call from many threads: one caller does the work under a lock
        and the engine is published only after the schema exists, so no caller
        ever sees a half-initialized database. Later calls are no-ops.
        """
        if self._engine is not None:
            return

        with self._init_lock:
            if self._engine is not None:
                return

            logger.info(f"Initializing {self.backend_name} database connection")
            engine = create_engine(self.get_connection_string(), echo=False, **self.get_pool_options())
            self.on_engine_created(engine)

            if self.auto_create:
                try:
                    self.create_schema(engine)
                except Exception:
                    engine.dispose()
                    raise

            # Records are built from rows after commit, so keep loaded values
            self._session_factory = sessionmaker(bind=engine, expire_on_commit=False)
            self._engine = engine

        logger.info(f"{self.backend_name} database initialized successfully")

    def create_schema(self, engine: Optional[Engine] = None) -> None:
        """Create any missing tables from the ORM models."""
        from . import models  # noqa: F401  registers the tables on Base.metadata

        Base.metadata.create_all(engine or self.engine)

    def table_names(self) -> list[str]:
        return inspect(self.engine).get_table_names()

    @property
    def engine(self) -> Engine:
        if self._engine is None:
            raise RuntimeError("Database not initialized. Call initialize() first.")
        return self._engine

    def get_session(self) -> Session:
        """Open a bare session. Prefer ``session()``, which also commits.

        Raises:
            RuntimeError: If the database is not initialized.
        """
        if self._session_factory is None:
            raise RuntimeError("Database not initialized. Call initialize() first.")
        return self._session_factory()

    @contextmanager
    def session(self) -> Generator[Session, None, None]:
        """One unit of work: commit on success, roll back on any exception."""
        sess = self.get_session()
        try:
            yield sess
            sess.commit()
        except Exception:
            sess.rollback()
            raise
        finally:
            sess.close()

    def close(self) -> None:
        """Dispose of the engine; ``initialize()`` may be called again."""
        with self._init_lock:
            engine = self._engine
            if engine is None:
                return
            self._engine = None
            self._session_factory = None
        logger.info(f"Closing {self.backend_name} database connection")
        engine.dispose()

    @property
    def is_initialized(self) -> bool:
        return self._engine is not None

    def health_check(self) -> bool:
        """Return True when a trivial query succeeds on an initialized engine."""
        if not self.is_initialized:
            return False
        try:
            with self.session() as sess:
                sess.execute(text("SELECT 1"))
        except Exception as e:
            logger.error(f"Database health check failed: {e}")
            return False
        return True
