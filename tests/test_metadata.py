"""Tests for bounded response metadata."""

import pytest

from responses_bridge.core.exceptions import (
    KeyTooLongError,
    MetadataError,
    TooManyKeysError,
    ValidationError,
    ValueTooLongError,
)
from responses_bridge.types.metadata import (
    MAX_ENTRIES,
    MAX_KEY_LENGTH,
    MAX_VALUE_LENGTH,
    Metadata,
)


def _full_map(size: int = MAX_ENTRIES) -> dict[str, str]:
    return {f"key_{i}": f"value_{i}" for i in range(size)}


class TestFromMap:
    """Tests for building metadata from a caller-supplied map."""

    def test_accepts_exactly_sixteen_entries(self):
        metadata = Metadata.from_map(_full_map())
        assert len(metadata) == MAX_ENTRIES

    def test_rejects_seventeen_entries(self):
        with pytest.raises(TooManyKeysError) as exc_info:
            Metadata.from_map(_full_map(MAX_ENTRIES + 1))
        assert exc_info.value.kind == "too_many_keys"
        assert exc_info.value.limit == MAX_ENTRIES

    def test_key_length_boundary(self):
        Metadata.from_map({"k" * MAX_KEY_LENGTH: "v"})
        with pytest.raises(KeyTooLongError) as exc_info:
            Metadata.from_map({"k" * (MAX_KEY_LENGTH + 1): "v"})
        assert exc_info.value.length == MAX_KEY_LENGTH + 1

    def test_value_length_boundary(self):
        Metadata.from_map({"k": "v" * MAX_VALUE_LENGTH})
        with pytest.raises(ValueTooLongError) as exc_info:
            Metadata.from_map({"k": "v" * (MAX_VALUE_LENGTH + 1)})
        assert exc_info.value.kind == "value_too_long"

    def test_lengths_count_characters(self):
        # 64 multi-byte characters are still 64 characters
        metadata = Metadata.from_map({"é" * MAX_KEY_LENGTH: "ü" * MAX_VALUE_LENGTH})
        assert len(metadata) == 1

    def test_rejects_non_string_values(self):
        with pytest.raises(MetadataError):
            Metadata.from_map({"count": 3})

    def test_errors_are_validation_errors(self):
        with pytest.raises(ValidationError):
            Metadata.from_map(_full_map(MAX_ENTRIES + 1))

    def test_does_not_modify_input(self):
        data = _full_map(MAX_ENTRIES + 1)
        with pytest.raises(TooManyKeysError):
            Metadata.from_map(data)
        assert len(data) == MAX_ENTRIES + 1

    def test_copies_input(self):
        data = {"a": "1"}
        metadata = Metadata.from_map(data)
        data["b"] = "2"
        assert "b" not in metadata


class TestInsert:
    """Tests for single-entry writes."""

    def test_insert_new_key_on_full_map_fails(self):
        metadata = Metadata.from_map(_full_map())
        with pytest.raises(TooManyKeysError):
            metadata.insert("extra", "value")
        assert len(metadata) == MAX_ENTRIES
        assert "extra" not in metadata

    def test_overwrite_on_full_map_succeeds(self):
        metadata = Metadata.from_map(_full_map())
        metadata.insert("key_0", "changed")
        assert metadata.get("key_0") == "changed"
        assert len(metadata) == MAX_ENTRIES

    def test_insert_validates_lengths(self):
        metadata = Metadata()
        with pytest.raises(KeyTooLongError):
            metadata.insert("k" * (MAX_KEY_LENGTH + 1), "v")
        with pytest.raises(ValueTooLongError):
            metadata.insert("k", "v" * (MAX_VALUE_LENGTH + 1))
        assert len(metadata) == 0

    def test_remove_returns_value(self):
        metadata = Metadata.from_map({"a": "1"})
        assert metadata.remove("a") == "1"
        assert metadata.remove("a") is None
        assert metadata.get("a") is None


class TestStorageForm:
    """Tests for the persisted representation."""

    def test_storage_form_round_trip(self):
        metadata = Metadata.from_map({"project": "alpha", "team": "core"})
        restored = Metadata.from_storage_form(metadata.to_storage_form())
        assert restored == metadata

    def test_storage_form_is_not_revalidated(self):
        restored = Metadata.from_storage_form(_full_map(MAX_ENTRIES + 2))
        assert len(restored) == MAX_ENTRIES + 2

    def test_storage_form_of_none_is_empty(self):
        assert len(Metadata.from_storage_form(None)) == 0
