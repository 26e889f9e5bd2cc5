"""Tests for src/utils/errors.py."""

from __future__ import annotations

import pytest

from src.utils.errors import (
    SessionLimitError,
    ThoughtCompassException,
    ThoughtValidationError,
    ToolExecutionError,
    VectorLoadError,
)


class TestHierarchy:
    """Tests for the exception hierarchy."""

    def test_validation_error_fields(self) -> None:
        """Test the field name and message are kept."""
        error = ThoughtValidationError("thought", "Invalid thought: must be a string")
        assert error.field_name == "thought"
        assert str(error) == "Invalid thought: must be a string"
        assert isinstance(error, ThoughtCompassException)

    def test_session_limit_is_validation_error(self) -> None:
        """Test session limits are caught as validation failures."""
        with pytest.raises(ThoughtValidationError):
            raise SessionLimitError("thoughtNumber", "Session limit reached: at most 1 thoughts")

    def test_vector_load_error(self) -> None:
        """Test vector loading failures share the base class."""
        assert issubclass(VectorLoadError, ThoughtCompassException)


class TestToolExecutionError:
    """Tests for ToolExecutionError."""

    def test_message(self) -> None:
        """Test the formatted message."""
        error = ToolExecutionError("visualize_thoughts", "unknown view", {"view": "x"})
        assert str(error) == "Tool visualize_thoughts failed: unknown view"
        assert error.to_mcp_error() == "[visualize_thoughts] unknown view. Details: {'view': 'x'}"

    def test_to_dict(self) -> None:
        """Test details default to an empty dict."""
        assert ToolExecutionError("status", "boom").to_dict() == {
            "error": True,
            "tool": "status",
            "message": "boom",
            "details": {},
        }
