"""Tests for role parsing."""

import logging

from responses_bridge.types.role import Role, parse_role


def test_parses_known_roles():
    assert parse_role("user") is Role.USER
    assert parse_role("assistant") is Role.ASSISTANT
    assert parse_role("system") is Role.SYSTEM


def test_missing_role_defaults_to_user_without_report():
    seen: list[str] = []
    assert parse_role(None, seen.append) is Role.USER
    assert seen == []


def test_unknown_role_is_coerced_and_reported(caplog):
    seen: list[str] = []
    with caplog.at_level(logging.DEBUG, logger="responses-bridge"):
        assert parse_role("developer", seen.append) is Role.USER
    assert seen == ["developer"]
    assert "developer" in caplog.text


def test_role_instance_passes_through():
    assert parse_role(Role.SYSTEM) is Role.SYSTEM


def test_role_compares_to_wire_string():
    assert Role.ASSISTANT == "assistant"
    assert Role.USER.value == "user"
