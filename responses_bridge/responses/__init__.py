"""Responses API support built on a chat-completion backend.

Key components:
- state_store: durable storage for responses and their items
- chain: rebuilds a conversation from ``previous_response_id`` links
- translator: Responses request ↔ chat-completion translation
- service: request orchestration across the above
"""

from .chain import reconstruct_chain
from .service import ResponsesService, response_from_record
from .state_store import ConversationStore
from .translator import (
    classify_input_item,
    convert_usage,
    from_chat_result,
    to_chat_request,
)

__all__ = [
    "ConversationStore",
    "ResponsesService",
    "classify_input_item",
    "convert_usage",
    "from_chat_result",
    "reconstruct_chain",
    "response_from_record",
    "to_chat_request",
]
