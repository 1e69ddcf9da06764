"""Conversation store for the Responses API.

Persists responses and their input/output items for ``previous_response_id``
lookups. Every operation runs in its own database session; concurrency
correctness is left to the engine's transaction isolation.
"""

import logging
from contextlib import contextmanager
from typing import Any, Generator, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.exceptions import (
    BridgeError,
    ConflictError,
    InvalidReferenceError,
    InvalidStatusError,
    StoreError,
)
from ..database.base import DatabaseBase
from ..database.models import StoredInputItem, StoredOutputItem, StoredResponse
from ..types.records import InputItemRecord, OutputItemRecord, ResponseRecord
from ..types.responses import RESPONSE_STATUSES, ResponseUsage
from ..types.role import RoleCoercionHandler

logger = logging.getLogger("responses-bridge")


class ConversationStore:
    """Durable keyed storage for responses and their items.

    Read path: point lookups by id, ordered item listings.
    Write path: insert-once responses, append-only items, in-place
    lifecycle updates (status, usage, error) and explicit delete.

    Any storage fault surfaces as ``StoreError`` with the original exception
    chained. Nothing is retried here.
    """

    def __init__(
        self,
        database: DatabaseBase,
        on_role_coercion: Optional[RoleCoercionHandler] = None,
    ) -> None:
        """Initialize the store.

        Args:
            database: Database to persist into. Initialized on first use.
            on_role_coercion: Called with the raw value whenever a stored
                item's role is unknown and read back as ``user``.
        """
        self._db = database
        self.on_role_coercion = on_role_coercion

    @contextmanager
    def _session(self, action: str) -> Generator[Session, None, None]:
        """Open a session and translate storage faults into ``StoreError``."""
        try:
            self._db.initialize()
            with self._db.session() as sess:
                yield sess
        except BridgeError:
            raise
        except (SQLAlchemyError, ValueError, TypeError) as e:
            logger.error(f"ConversationStore: {action} failed: {e}")
            raise StoreError(f"Failed to {action}: {e}") from e

    # ------------------------------------------------------------------
    # Responses
    # ------------------------------------------------------------------

    def put(self, record: ResponseRecord) -> None:
        """Insert a new response.

        Raises:
            ConflictError: If a response with the same id exists.
            InvalidReferenceError: If ``previous_response_id`` does not resolve.
            StoreError: On any other storage fault.
        """
        with self._session(f"store response {record.id}") as sess:
            if sess.get(StoredResponse, record.id) is not None:
                raise ConflictError(f"Response {record.id} already exists")
            parent_id = record.previous_response_id
            if parent_id is not None and sess.get(StoredResponse, parent_id) is None:
                raise InvalidReferenceError(
                    f"Previous response {parent_id} does not exist",
                    reference=parent_id,
                )
            sess.add(StoredResponse.from_record(record))
            try:
                sess.flush()
            except IntegrityError as e:
                # Lost a race with a concurrent insert of the same id
                raise ConflictError(f"Response {record.id} already exists") from e

        logger.debug(f"ConversationStore: Stored response {record.id}")

    def get(self, response_id: str) -> Optional[ResponseRecord]:
        """Return the response with ``response_id``, or None."""
        if not response_id:
            return None
        with self._session(f"load response {response_id}") as sess:
            row = sess.get(StoredResponse, response_id)
            return row.to_record() if row is not None else None

    def delete(self, response_id: str) -> bool:
        """Delete a response and its items.

        Descendants that point at the deleted response keep their dangling
        ``previous_response_id``.

        Returns:
            True if a response was deleted.
        """
        with self._session(f"delete response {response_id}") as sess:
            row = sess.get(StoredResponse, response_id)
            if row is None:
                return False
            sess.delete(row)
        logger.debug(f"ConversationStore: Deleted response {response_id}")
        return True

    def update_status(self, response_id: str, status: str) -> None:
        """Set the status of a response, leaving every other field untouched."""
        self.update_result(response_id, status)

    def update_result(
        self,
        response_id: str,
        status: str,
        usage: Optional[ResponseUsage] = None,
        error: Optional[dict[str, Any]] = None,
        incomplete_details: Optional[dict[str, Any]] = None,
    ) -> None:
        """Record the outcome of the model call on a stored response.

        Only ``status`` and whichever of usage/error/incomplete details are
        given are written.

        Raises:
            InvalidStatusError: If ``status`` is not a known response status.
        """
        if status not in RESPONSE_STATUSES:
            raise InvalidStatusError(status)
        with self._session(f"update response {response_id}") as sess:
            row = sess.get(StoredResponse, response_id)
            if row is None:
                logger.warning(f"ConversationStore: Cannot update missing response {response_id}")
                return
            row.status = status
            if usage is not None:
                row.usage_input_tokens = usage.get("input_tokens")
                row.usage_output_tokens = usage.get("output_tokens")
                row.usage_total_tokens = usage.get("total_tokens")
            if error is not None:
                row.error = error
            if incomplete_details is not None:
                row.incomplete_details = incomplete_details

    def list_responses(self, user_id: Optional[str] = None, limit: int = 20) -> list[ResponseRecord]:
        """List responses newest first, optionally for one user."""
        with self._session("list responses") as sess:
            query = select(StoredResponse)
            if user_id is not None:
                query = query.where(StoredResponse.user_id == user_id)
            query = query.order_by(StoredResponse.created_at.desc()).limit(limit)
            return [row.to_record() for row in sess.scalars(query)]

    # ------------------------------------------------------------------
    # Items
    # ------------------------------------------------------------------

    def put_input_item(self, item: InputItemRecord) -> None:
        """Append an input item to an existing response."""
        self._put_item(StoredInputItem.from_record(item), "input")

    def put_output_item(self, item: OutputItemRecord) -> None:
        """Append an output item to an existing response."""
        self._put_item(StoredOutputItem.from_record(item), "output")

    def _put_item(self, row: Any, kind: str) -> None:
        with self._session(f"store {kind} item {row.id}") as sess:
            if sess.get(StoredResponse, row.response_id) is None:
                raise InvalidReferenceError(
                    f"Response {row.response_id} does not exist",
                    reference=row.response_id,
                )
            if sess.get(type(row), row.id) is not None:
                raise ConflictError(f"{kind.capitalize()} item {row.id} already exists")
            sess.add(row)

    def list_input_items(self, response_id: str) -> list[InputItemRecord]:
        """Return a response's input items, oldest first."""
        with self._session(f"list input items for {response_id}") as sess:
            query = (
                select(StoredInputItem)
                .where(StoredInputItem.response_id == response_id)
                .order_by(StoredInputItem.created_at.asc(), StoredInputItem.sequence.asc())
            )
            return [row.to_record(self.on_role_coercion) for row in sess.scalars(query)]

    def list_output_items(self, response_id: str) -> list[OutputItemRecord]:
        """Return a response's output items, oldest first."""
        with self._session(f"list output items for {response_id}") as sess:
            query = (
                select(StoredOutputItem)
                .where(StoredOutputItem.response_id == response_id)
                .order_by(StoredOutputItem.created_at.asc(), StoredOutputItem.sequence.asc())
            )
            return [row.to_record(self.on_role_coercion) for row in sess.scalars(query)]
