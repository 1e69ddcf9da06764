"""Persisted records for responses and their items."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any, Optional
from uuid import uuid4

from .metadata import Metadata
from .role import Role


def generate_response_id() -> str:
    """Generate a unique response ID."""
    return f"resp_{uuid4().hex}"


def generate_message_id() -> str:
    """Generate a unique message ID."""
    return f"msg_{uuid4().hex}"


def generate_item_id() -> str:
    """Generate a unique input item ID."""
    return f"item_{uuid4().hex}"


def now_epoch() -> int:
    return int(time.time())


@dataclass
class ResponseRecord:
    """One stored conversational turn."""

    id: str
    model: str
    created_at: int = field(default_factory=now_epoch)
    status: str = "in_progress"
    previous_response_id: Optional[str] = None
    instructions: Optional[str] = None
    max_output_tokens: Optional[int] = None
    temperature: Optional[float] = None
    top_p: Optional[float] = None
    store: bool = True
    metadata: Optional[Metadata] = None
    user_id: Optional[str] = None
    safety_identifier: Optional[str] = None
    prompt_cache_key: Optional[str] = None
    usage_input_tokens: Optional[int] = None
    usage_output_tokens: Optional[int] = None
    usage_total_tokens: Optional[int] = None
    error: Optional[dict[str, Any]] = None
    incomplete_details: Optional[dict[str, Any]] = None
    object: str = "response"


@dataclass
class InputItemRecord:
    """What was sent to the model for a response."""

    id: str
    response_id: str
    item_type: str
    content: Any
    role: Optional[Role] = None
    created_at: int = field(default_factory=now_epoch)
    sequence: int = 0


@dataclass
class OutputItemRecord:
    """What the model produced for a response."""

    id: str
    response_id: str
    item_type: str
    content: Any
    status: str = "completed"
    role: Optional[Role] = None
    created_at: int = field(default_factory=now_epoch)
    sequence: int = 0
