"""Core exceptions for the responses bridge."""

from typing import Optional


class BridgeError(Exception):
    """Base exception for bridge errors."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(BridgeError):
    """Raised when caller-supplied data breaks a validation rule."""
    pass


class MetadataError(ValidationError):
    """Raised when a metadata map breaks one of its bounds.

    ``kind`` names the bound that was exceeded so callers can branch on it
    without matching message text.
    """

    kind = "invalid_type"


class TooManyKeysError(MetadataError):
    """Metadata would hold more than the allowed number of entries."""

    kind = "too_many_keys"

    def __init__(self, limit: int) -> None:
        super().__init__(f"Metadata cannot have more than {limit} key-value pairs")
        self.limit = limit


class KeyTooLongError(MetadataError):
    """A metadata key is longer than allowed."""

    kind = "key_too_long"

    def __init__(self, length: int, limit: int) -> None:
        super().__init__(f"Metadata key too long: {length} characters (max {limit})")
        self.length = length
        self.limit = limit


class ValueTooLongError(MetadataError):
    """A metadata value is longer than allowed."""

    kind = "value_too_long"

    def __init__(self, length: int, limit: int) -> None:
        super().__init__(f"Metadata value too long: {length} characters (max {limit})")
        self.length = length
        self.limit = limit


class InvalidStatusError(ValidationError):
    """Raised when a response status is not one of the known lifecycle states."""

    def __init__(self, status: str) -> None:
        super().__init__(f"Unknown response status: {status}")
        self.status = status


class NotFoundError(BridgeError):
    """Raised when a requested response does not exist."""
    pass


class ConflictError(BridgeError):
    """Raised when inserting a record whose id is already taken."""
    pass


class InvalidReferenceError(BridgeError):
    """Raised when a record points at a response that does not exist."""

    def __init__(self, message: str, reference: Optional[str] = None) -> None:
        super().__init__(message)
        self.reference = reference


class TranslationError(BridgeError):
    """Raised when an item cannot be mapped between Responses and Chat shapes."""

    def __init__(
        self,
        message: str,
        item_type: Optional[str] = None,
        item_id: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.item_type = item_type
        self.item_id = item_id


class StoreError(BridgeError):
    """Raised when the underlying storage fails."""
    pass


class InvalidRequestError(BridgeError):
    """Raised when an incoming request is invalid."""

    def __init__(self, message: str, code: str = "invalid_request") -> None:
        super().__init__(message)
        self.code = code


class UpstreamError(BridgeError):
    """Raised when the model-serving backend fails or is unreachable."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ConfigurationError(BridgeError):
    """Raised when there's an issue with the configuration."""
    pass
