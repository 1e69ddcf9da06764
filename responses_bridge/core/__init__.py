"""Core module initialization."""

from .exceptions import (
    BridgeError,
    ConfigurationError,
    ConflictError,
    InvalidReferenceError,
    InvalidRequestError,
    InvalidStatusError,
    MetadataError,
    NotFoundError,
    StoreError,
    TranslationError,
    UpstreamError,
    ValidationError,
)
from .upstream import ChatCompletionClient

__all__ = [
    "BridgeError",
    "ChatCompletionClient",
    "ConfigurationError",
    "ConflictError",
    "InvalidReferenceError",
    "InvalidRequestError",
    "InvalidStatusError",
    "MetadataError",
    "NotFoundError",
    "StoreError",
    "TranslationError",
    "UpstreamError",
    "ValidationError",
]
