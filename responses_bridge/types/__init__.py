"""Type definitions for the bridge."""

from .chat import (
    ChatCompletionRequest,
    ChatCompletionResponse,
    ChatMessage,
    ChatTool,
    Choice,
    Usage,
)
from .metadata import Metadata
from .records import InputItemRecord, OutputItemRecord, ResponseRecord
from .role import Role, parse_role

__all__ = [
    "ChatCompletionRequest",
    "ChatCompletionResponse",
    "ChatMessage",
    "ChatTool",
    "Choice",
    "InputItemRecord",
    "Metadata",
    "OutputItemRecord",
    "ResponseRecord",
    "Role",
    "Usage",
    "parse_role",
]
