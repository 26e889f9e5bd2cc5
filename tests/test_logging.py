"""Unit tests for src/utils/logging.py."""

from __future__ import annotations

import json
from typing import Any
from unittest.mock import MagicMock

import pytest

from src.utils.logging import (
    LogFormat,
    LogLevel,
    StructuredLogger,
    _session_id,
    _thought_number,
    _tool_name,
    get_logger,
    get_session_id,
    json_serializer,
    redact_sensitive,
    set_session_id,
    set_thought_number,
    set_tool_name,
    text_format,
)


@pytest.fixture(autouse=True)
def clear_context() -> None:
    """Reset logging context variables around each test."""
    set_session_id(None)
    set_tool_name(None)
    set_thought_number(None)


def _record(message: str = "hello", extra: dict[str, Any] | None = None) -> dict[str, Any]:
    level = MagicMock()
    level.name = "INFO"
    return {
        "level": level,
        "message": message,
        "name": "tests",
        "function": "fn",
        "line": 7,
        "extra": extra or {},
        "exception": None,
    }


class TestRedactSensitive:
    """Test sensitive data redaction."""

    @pytest.mark.parametrize("key", ["api_key", "API-KEY", "apiKey", "password", "auth_token"])
    def test_redacts_key_variants(self, key: str) -> None:
        """Test separators and case do not hide sensitive keys."""
        assert redact_sensitive({key: "value"})[key] == "[REDACTED]"

    def test_nested_and_lists(self) -> None:
        """Test nested dicts and dicts inside lists are redacted."""
        data = {"outer": {"secret": "s"}, "items": [{"password": "p"}, "plain"]}
        assert redact_sensitive(data) == {
            "outer": {"secret": "[REDACTED]"},
            "items": [{"password": "[REDACTED]"}, "plain"],
        }

    def test_keeps_ordinary_values(self) -> None:
        """Test non-sensitive keys are untouched."""
        data = {"thought": 3, "phase": "Execution"}
        assert redact_sensitive(data) == data


class TestJsonSerializer:
    """Test JSON record serialization."""

    def test_basic_fields(self) -> None:
        """Test the core fields are present."""
        entry = json.loads(json_serializer(_record()))
        assert entry["level"] == "INFO"
        assert entry["message"] == "hello"
        assert entry["line"] == 7
        assert "session_id" not in entry

    def test_context_and_redacted_extra(self) -> None:
        """Test context variables and redacted extras are included."""
        set_session_id("abc123")
        set_tool_name("sequentialthinking")
        set_thought_number(4)
        entry = json.loads(json_serializer(_record(extra={"token": "t", "phase": "Planning"})))
        assert entry["session_id"] == "abc123"
        assert entry["tool"] == "sequentialthinking"
        assert entry["thought"] == 4
        assert entry["extra"] == {"token": "[REDACTED]", "phase": "Planning"}


class TestTextFormat:
    """Test the console format."""

    def test_without_context(self) -> None:
        """Test no context block is rendered by default."""
        assert "[sess=" not in text_format(_record())

    def test_with_context(self) -> None:
        """Test the session is shortened and the thought is tagged."""
        set_session_id("0123456789abcdef")
        set_thought_number(2)
        assert "[sess=01234567 T2] " in text_format(_record())


class TestStructuredLogger:
    """Test StructuredLogger."""

    def test_string_arguments_coerced(self) -> None:
        """Test level and format strings become enums."""
        log = StructuredLogger("test", level="DEBUG", log_format="json")
        assert log.level == LogLevel.DEBUG
        assert log.log_format == LogFormat.JSON

    def test_context_manager_scopes_values(self) -> None:
        """Test context values are set inside and restored after."""
        log = StructuredLogger("test")
        with log.context(session_id="s1", tool_name="status", thought_number=0):
            assert _session_id.get() == "s1"
            assert _tool_name.get() == "status"
            assert _thought_number.get() == 0
        assert get_session_id() is None
        assert _tool_name.get() is None
        assert _thought_number.get() is None

    def test_log_file(self, tmp_path: Any) -> None:
        """Test a log file handler creates its directory."""
        path = tmp_path / "logs" / "compass.log"
        log = StructuredLogger("test", log_file=path)
        log.info("written")
        assert path.parent.is_dir()


class TestGetLogger:
    """Test get_logger environment handling."""

    def test_reads_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test LOG_LEVEL and LOG_FORMAT are honored."""
        monkeypatch.setenv("LOG_LEVEL", "warning")
        monkeypatch.setenv("LOG_FORMAT", "JSON")
        monkeypatch.delenv("LOG_FILE", raising=False)
        log = get_logger("env")
        assert log.level == LogLevel.WARNING
        assert log.log_format == LogFormat.JSON

    def test_explicit_arguments_win(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test explicit arguments override the environment."""
        monkeypatch.setenv("LOG_LEVEL", "ERROR")
        monkeypatch.delenv("LOG_FILE", raising=False)
        assert get_logger("explicit", level="DEBUG").level == LogLevel.DEBUG
