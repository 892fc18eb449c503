"""Tests for backend error message extraction."""

from __future__ import annotations

from opsdash.core.errors import extract_error_message


def test_top_level_message_wins():
    payload = {"message": "Top level", "data": {"message": "Nested", "errors": {"x": ["y"]}}}
    assert extract_error_message(payload, "fallback") == "Top level"


def test_nested_message_when_no_top_level():
    payload = {"data": {"message": "Subject is too long", "errors": {"x": ["y"]}}}
    assert extract_error_message(payload, "fallback") == "Subject is too long"
    assert extract_error_message({"message": "", "data": {"message": "Nested"}}, "fallback") == "Nested"


def test_first_nested_error_next():
    payload = {"data": {"errors": {"recipient": ["Recipient is required", "other"]}}}
    assert extract_error_message(payload, "fallback") == "Recipient is required"


def test_fallback():
    assert extract_error_message({"message": "Not found", "data": None}, "fallback") == "Not found"
    assert extract_error_message({"data": {"errors": {}}}, "fallback") == "fallback"
    assert extract_error_message(None, "fallback") == "fallback"
    assert extract_error_message("<html>", "fallback") == "fallback"
