"""responses-bridge - stateful Responses API over chat completions

Serves the Responses API (``previous_response_id`` conversations, stored
input/output items, metadata) on top of any OpenAI-compatible
chat-completion backend.

This module provides:
- ResponsesService: create, retrieve and delete responses, list input items
- ConversationStore: SQLite/PostgreSQL persistence for responses and items
- Translation between Responses requests and chat completions

Example:
    >>> from responses_bridge import ResponsesService, load_config, load_settings
    >>> service = ResponsesService.from_settings(load_settings(load_config()))
    >>> service.create({"model": "gpt-4o-mini", "input": "hello"})
"""

from .config_loader import BridgeSettings, load_config, load_settings
from .core import ChatCompletionClient
from .logging import logger, setup_logging
from .responses import (
    ConversationStore,
    ResponsesService,
    from_chat_result,
    reconstruct_chain,
    to_chat_request,
)
from .types import Metadata, Role

__all__ = [
    "BridgeSettings",
    "ChatCompletionClient",
    "ConversationStore",
    "Metadata",
    "ResponsesService",
    "Role",
    "from_chat_result",
    "load_config",
    "load_settings",
    "logger",
    "reconstruct_chain",
    "setup_logging",
    "to_chat_request",
]
