"""Bounded key/value annotations attached to a response."""

from typing import Any, Iterator, Mapping, Optional

from ..core.exceptions import (
    KeyTooLongError,
    MetadataError,
    TooManyKeysError,
    ValueTooLongError,
)

MAX_ENTRIES = 16
MAX_KEY_LENGTH = 64
MAX_VALUE_LENGTH = 512


class Metadata:
    """A string-to-string map limited to 16 entries.

    Keys may be at most 64 characters and values at most 512. Every write
    path (``from_map`` and ``insert``) validates; ``from_storage_form`` trusts
    data that was validated before it was persisted.
    """

    __slots__ = ("_data",)

    def __init__(self) -> None:
        self._data: dict[str, str] = {}

    @classmethod
    def from_map(cls, data: Mapping[str, Any]) -> "Metadata":
        """Build metadata from a mapping, validating every bound.

        Raises:
            MetadataError: If any bound is exceeded. The input is not modified.
        """
        candidate = dict(data)
        _validate_entries(candidate)
        metadata = cls()
        metadata._data = candidate
        return metadata

    @classmethod
    def from_storage_form(cls, data: Optional[Mapping[str, str]]) -> "Metadata":
        """Rebuild metadata from its persisted form without re-validating."""
        metadata = cls()
        metadata._data = dict(data or {})
        return metadata

    def to_storage_form(self) -> dict[str, str]:
        """Return the flat mapping written to storage."""
        return dict(self._data)

    def to_dict(self) -> dict[str, str]:
        return dict(self._data)

    def insert(self, key: str, value: str) -> None:
        """Insert or overwrite one entry.

        Overwriting an existing key never counts toward the entry cap.

        Raises:
            TooManyKeysError: If ``key`` is new and the map is already full.
            KeyTooLongError: If ``key`` is too long.
            ValueTooLongError: If ``value`` is too long.
        """
        if len(self._data) >= MAX_ENTRIES and key not in self._data:
            raise TooManyKeysError(MAX_ENTRIES)
        _validate_entry(key, value)
        self._data[key] = value

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def remove(self, key: str) -> Optional[str]:
        """Remove ``key`` and return its value, or None if it was absent."""
        return self._data.pop(key, None)

    def items(self):
        return self._data.items()

    def __len__(self) -> int:
        return len(self._data)

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __contains__(self, key: object) -> bool:
        return key in self._data

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Metadata):
            return self._data == other._data
        return NotImplemented

    def __repr__(self) -> str:
        return f"Metadata({self._data!r})"


def _validate_entries(data: Mapping[str, Any]) -> None:
    if len(data) > MAX_ENTRIES:
        raise TooManyKeysError(MAX_ENTRIES)
    for key, value in data.items():
        _validate_entry(key, value)


def _validate_entry(key: Any, value: Any) -> None:
    if not isinstance(key, str) or not isinstance(value, str):
        raise MetadataError("Metadata keys and values must be strings")
    if len(key) > MAX_KEY_LENGTH:
        raise KeyTooLongError(len(key), MAX_KEY_LENGTH)
    if len(value) > MAX_VALUE_LENGTH:
        raise ValueTooLongError(len(value), MAX_VALUE_LENGTH)
