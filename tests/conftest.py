"""Pytest configuration and fixtures for testing."""

from __future__ import annotations

from typing import Any, Generator

import pytest

from responses_bridge.database.base import DatabaseBase
from responses_bridge.database.factory import create_database, reset_database_instance
from responses_bridge.responses.state_store import ConversationStore
from responses_bridge.types.records import ResponseRecord


@pytest.fixture
def sqlite_config() -> dict[str, Any]:
    """Create a SQLite configuration for testing."""
    return {
        "backend": "sqlite",
        "connection": {
            "sqlite": {
                "path": ":memory:",  # In-memory database for testing
            }
        },
        "pool_size": 2,
        "max_overflow": 0,
    }


@pytest.fixture(autouse=True)
def reset_db() -> Generator[None, None, None]:
    """Reset shared database instances around each test."""
    reset_database_instance()
    yield
    reset_database_instance()


@pytest.fixture
def database(sqlite_config: dict[str, Any]) -> Generator[DatabaseBase, None, None]:
    """A fresh in-memory database, initialized."""
    db = create_database(sqlite_config)
    db.initialize()
    yield db
    db.close()


@pytest.fixture
def coercions() -> list[str]:
    """Collects role values the store coerced to ``user``."""
    return []


@pytest.fixture
def store(database: DatabaseBase, coercions: list[str]) -> ConversationStore:
    return ConversationStore(database, on_role_coercion=coercions.append)


# =============================================================================
# Record builders
# =============================================================================


def make_record(
    response_id: str,
    previous_response_id: str | None = None,
    *,
    created_at: int = 1_700_000_000,
    instructions: str | None = None,
    **overrides: Any,
) -> ResponseRecord:
    """Build a response record with sensible defaults."""
    return ResponseRecord(
        id=response_id,
        model=overrides.pop("model", "test-model"),
        created_at=created_at,
        previous_response_id=previous_response_id,
        instructions=instructions,
        **overrides,
    )


class FakeChatClient:
    """Chat backend double that records requests and replays canned results."""

    def __init__(self, *results: Any) -> None:
        self.results = list(results)
        self.requests: list[dict[str, Any]] = []

    def create_chat_completion(self, request: dict[str, Any]) -> dict[str, Any]:
        self.requests.append(request)
        result = self.results.pop(0) if self.results else completion("ok")
        if isinstance(result, Exception):
            raise result
        return result


def completion(*texts: str, usage: dict[str, int] | None = None) -> dict[str, Any]:
    """Build a chat completion with one choice per text."""
    body: dict[str, Any] = {
        "id": "chatcmpl-test",
        "object": "chat.completion",
        "created": 1_700_000_100,
        "model": "test-model",
        "choices": [
            {
                "index": i,
                "message": {"role": "assistant", "content": text},
                "finish_reason": "stop",
            }
            for i, text in enumerate(texts)
        ],
    }
    if usage is not None:
        body["usage"] = usage
    return body
