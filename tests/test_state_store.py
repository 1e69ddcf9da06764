"""Tests for the conversation store."""

from typing import Any

import pytest
from sqlalchemy import text

from conftest import make_record
from responses_bridge.core.exceptions import (
    ConflictError,
    InvalidReferenceError,
    InvalidStatusError,
    StoreError,
    ValidationError,
)
from responses_bridge.database.factory import create_database
from responses_bridge.responses.state_store import ConversationStore
from responses_bridge.types.metadata import Metadata
from responses_bridge.types.records import InputItemRecord, OutputItemRecord
from responses_bridge.types.role import Role


def _input_item(item_id: str, response_id: str, **overrides: Any) -> InputItemRecord:
    return InputItemRecord(
        id=item_id,
        response_id=response_id,
        item_type=overrides.pop("item_type", "message"),
        role=overrides.pop("role", Role.USER),
        content=overrides.pop("content", {"type": "input_text", "text": item_id}),
        created_at=overrides.pop("created_at", 1_700_000_000),
        **overrides,
    )


def _output_item(item_id: str, response_id: str, **overrides: Any) -> OutputItemRecord:
    return OutputItemRecord(
        id=item_id,
        response_id=response_id,
        item_type="message",
        role=Role.ASSISTANT,
        content=[{"type": "output_text", "text": item_id}],
        created_at=overrides.pop("created_at", 1_700_000_000),
        **overrides,
    )


class TestResponses:
    """Tests for storing and loading responses."""

    def test_put_then_get(self, store: ConversationStore):
        record = make_record(
            "resp_1",
            instructions="Be brief",
            metadata=Metadata.from_map({"project": "alpha"}),
            temperature=0.5,
            user_id="user-1",
        )
        store.put(record)

        loaded = store.get("resp_1")
        assert loaded == record
        assert loaded.metadata.get("project") == "alpha"

    def test_get_missing_returns_none(self, store: ConversationStore):
        assert store.get("resp_missing") is None
        assert store.get("") is None

    def test_put_duplicate_id_conflicts(self, store: ConversationStore):
        store.put(make_record("resp_1"))
        with pytest.raises(ConflictError):
            store.put(make_record("resp_1", model="other-model"))
        assert store.get("resp_1").model == "test-model"

    def test_put_with_missing_parent_is_rejected(self, store: ConversationStore):
        with pytest.raises(InvalidReferenceError) as exc_info:
            store.put(make_record("resp_2", "resp_missing"))
        assert exc_info.value.reference == "resp_missing"
        assert store.get("resp_2") is None

    def test_put_with_existing_parent(self, store: ConversationStore):
        store.put(make_record("resp_1"))
        store.put(make_record("resp_2", "resp_1"))
        assert store.get("resp_2").previous_response_id == "resp_1"

    def test_update_status_changes_only_status(self, store: ConversationStore):
        record = make_record("resp_1", instructions="keep me", temperature=0.2)
        store.put(record)

        store.update_status("resp_1", "completed")

        loaded = store.get("resp_1")
        assert loaded.status == "completed"
        assert loaded.instructions == "keep me"
        assert loaded.temperature == 0.2
        assert loaded.usage_total_tokens is None

    def test_update_result_records_usage_and_error(self, store: ConversationStore):
        store.put(make_record("resp_1"))
        store.update_result(
            "resp_1",
            "failed",
            usage={"input_tokens": 3, "output_tokens": 4, "total_tokens": 7},
            error={"code": "server_error", "message": "boom"},
        )

        loaded = store.get("resp_1")
        assert loaded.status == "failed"
        assert loaded.usage_total_tokens == 7
        assert loaded.error["message"] == "boom"

    def test_update_rejects_unknown_status(self, store: ConversationStore):
        store.put(make_record("resp_1"))
        with pytest.raises(InvalidStatusError) as exc_info:
            store.update_status("resp_1", "done")
        assert exc_info.value.status == "done"
        assert isinstance(exc_info.value, ValidationError)
        assert store.get("resp_1").status == "in_progress"

    def test_update_missing_response_is_a_no_op(self, store: ConversationStore):
        store.update_status("resp_missing", "completed")
        assert store.get("resp_missing") is None

    def test_list_responses_newest_first(self, store: ConversationStore):
        store.put(make_record("resp_old", created_at=100, user_id="u1"))
        store.put(make_record("resp_new", created_at=200, user_id="u1"))
        store.put(make_record("resp_other", created_at=300, user_id="u2"))

        assert [r.id for r in store.list_responses(user_id="u1")] == ["resp_new", "resp_old"]
        assert [r.id for r in store.list_responses(limit=1)] == ["resp_other"]


class TestItems:
    """Tests for input and output items."""

    def test_items_listed_in_insertion_order(self, store: ConversationStore):
        store.put(make_record("resp_1"))
        # Same timestamp: sequence breaks the tie
        store.put_input_item(_input_item("item_b", "resp_1", sequence=1))
        store.put_input_item(_input_item("item_a", "resp_1", sequence=0))
        store.put_input_item(_input_item("item_c", "resp_1", created_at=1_700_000_001))

        assert [i.id for i in store.list_input_items("resp_1")] == ["item_a", "item_b", "item_c"]

    def test_output_items_round_trip(self, store: ConversationStore):
        store.put(make_record("resp_1"))
        item = _output_item("msg_1", "resp_1")
        store.put_output_item(item)

        assert store.list_output_items("resp_1") == [item]
        assert store.list_input_items("resp_1") == []

    def test_item_for_missing_response_is_rejected(self, store: ConversationStore):
        with pytest.raises(InvalidReferenceError):
            store.put_input_item(_input_item("item_1", "resp_missing"))
        with pytest.raises(InvalidReferenceError):
            store.put_output_item(_output_item("msg_1", "resp_missing"))

    def test_duplicate_item_conflicts(self, store: ConversationStore):
        store.put(make_record("resp_1"))
        store.put_input_item(_input_item("item_1", "resp_1"))
        with pytest.raises(ConflictError):
            store.put_input_item(_input_item("item_1", "resp_1"))

    def test_items_of_unknown_response_is_empty(self, store: ConversationStore):
        assert store.list_input_items("resp_missing") == []
        assert store.list_output_items("resp_missing") == []

    def test_unknown_stored_role_is_coerced_and_reported(
        self, store: ConversationStore, database, coercions: list[str]
    ):
        store.put(make_record("resp_1"))
        store.put_input_item(_input_item("item_1", "resp_1"))
        with database.session() as sess:
            sess.execute(text("UPDATE input_items SET role = 'developer' WHERE id = 'item_1'"))

        items = store.list_input_items("resp_1")
        assert items[0].role is Role.USER
        assert coercions == ["developer"]


class TestDelete:
    """Tests for deleting responses."""

    def test_delete_removes_response_and_items(self, store: ConversationStore, database):
        store.put(make_record("resp_1"))
        store.put_input_item(_input_item("item_1", "resp_1"))
        store.put_output_item(_output_item("msg_1", "resp_1"))

        assert store.delete("resp_1") is True

        assert store.get("resp_1") is None
        assert store.list_input_items("resp_1") == []
        assert store.list_output_items("resp_1") == []
        with database.session() as sess:
            assert sess.execute(text("SELECT COUNT(*) FROM input_items")).scalar() == 0
            assert sess.execute(text("SELECT COUNT(*) FROM output_items")).scalar() == 0

    def test_delete_missing_returns_false(self, store: ConversationStore):
        assert store.delete("resp_missing") is False

    def test_delete_leaves_descendants_dangling(self, store: ConversationStore):
        store.put(make_record("resp_1"))
        store.put(make_record("resp_2", "resp_1"))

        store.delete("resp_1")

        child = store.get("resp_2")
        assert child is not None
        assert child.previous_response_id == "resp_1"

    def test_database_cascade_removes_items(self, store: ConversationStore, database):
        store.put(make_record("resp_1"))
        store.put_input_item(_input_item("item_1", "resp_1"))

        # Bypass the ORM: the foreign key alone must clean up
        with database.session() as sess:
            sess.execute(text("DELETE FROM responses WHERE id = 'resp_1'"))

        assert store.list_input_items("resp_1") == []


class TestStoreErrors:
    """Tests for storage faults."""

    def test_backend_failure_surfaces_as_store_error(self, tmp_path):
        # A directory cannot be opened as a SQLite database file
        db = create_database({
            "backend": "sqlite",
            "connection": {"sqlite": {"path": str(tmp_path)}},
        })
        store = ConversationStore(db)

        with pytest.raises(StoreError) as exc_info:
            store.get("resp_1")
        assert exc_info.value.__cause__ is not None
