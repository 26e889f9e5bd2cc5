"""Structured logging utilities for Thought Compass MCP.

Wraps loguru with:
- JSON output for log shippers, colored text for local development
- Context variables that tag every record with the session, tool and
  thought number currently being processed
- Redaction of sensitive values bound as extras
"""

from __future__ import annotations

import json
import os
import sys
from contextvars import ContextVar
from datetime import UTC, datetime
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Any

from loguru import logger

if TYPE_CHECKING:
    from loguru import Record

_session_id: ContextVar[str | None] = ContextVar("session_id", default=None)
_tool_name: ContextVar[str | None] = ContextVar("tool_name", default=None)
_thought_number: ContextVar[int | None] = ContextVar("thought_number", default=None)


class LogFormat(str, Enum):
    """Supported log output formats."""

    JSON = "json"
    TEXT = "text"


class LogLevel(str, Enum):
    """Supported log levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


SENSITIVE_KEYS = frozenset(
    {
        "apikey",
        "password",
        "secret",
        "token",
        "authorization",
        "credential",
        "privatekey",
    }
)


def redact_sensitive(data: dict[str, Any], depth: int = 0) -> dict[str, Any]:
    """Recursively redact sensitive values from a dictionary.

    Keys are compared after lowercasing and dropping ``_`` and ``-`` so
    ``API_KEY``, ``api-key`` and ``apiKey`` are all caught.

    Args:
        data: Dictionary to redact.
        depth: Current recursion depth.

    Returns:
        Dictionary with sensitive values replaced with "[REDACTED]".

    """
    if depth > 10:
        return data

    result: dict[str, Any] = {}
    for key, value in data.items():
        key_lower = str(key).lower().replace("_", "").replace("-", "")
        if any(sensitive in key_lower for sensitive in SENSITIVE_KEYS):
            result[key] = "[REDACTED]"
        elif isinstance(value, dict):
            result[key] = redact_sensitive(value, depth + 1)
        elif isinstance(value, list):
            result[key] = [
                redact_sensitive(item, depth + 1) if isinstance(item, dict) else item
                for item in value
            ]
        else:
            result[key] = value
    return result


def _context_fields() -> dict[str, Any]:
    fields: dict[str, Any] = {}
    if session_id := _session_id.get():
        fields["session_id"] = session_id
    if tool_name := _tool_name.get():
        fields["tool"] = tool_name
    thought_number = _thought_number.get()
    if thought_number is not None:
        fields["thought"] = thought_number
    return fields


def json_serializer(record: Record) -> str:
    """Serialize a loguru record to a single JSON line.

    Args:
        record: Loguru record dictionary.

    Returns:
        JSON string representation of the log entry.

    """
    log_entry: dict[str, Any] = {
        "timestamp": datetime.now(UTC).isoformat(),
        "level": record["level"].name,
        "message": record["message"],
        "module": record["name"],
        "function": record["function"],
        "line": record["line"],
    }
    log_entry.update(_context_fields())

    if record.get("extra"):
        log_entry["extra"] = redact_sensitive(dict(record["extra"]))

    if record["exception"]:
        exc_info = record["exception"]
        log_entry["exception"] = {
            "type": exc_info.type.__name__ if exc_info.type else None,
            "value": str(exc_info.value) if exc_info.value else None,
            "traceback": exc_info.traceback is not None,
        }

    return json.dumps(log_entry, default=str, ensure_ascii=False)


def text_format(record: Record) -> str:
    """Format a loguru record as human-readable text.

    Args:
        record: Loguru record dictionary.

    Returns:
        Format string for console output.

    """
    fields = _context_fields()
    context_parts = []
    if "session_id" in fields:
        context_parts.append(f"sess={fields['session_id'][:8]}")
    if "tool" in fields:
        context_parts.append(f"tool={fields['tool']}")
    if "thought" in fields:
        context_parts.append(f"T{fields['thought']}")
    context = f"[{' '.join(context_parts)}] " if context_parts else ""

    return (
        "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
        "<level>{level: <8}</level> | "
        "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
        f"{context.replace('{', '{{').replace('}', '}}')}"
        "<level>{message}</level>\n{exception}"
    )


def _json_sink_format(record: Record) -> str:
    record["extra"]["_serialized"] = json_serializer(record)
    return "{extra[_serialized]}\n"


class StructuredLogger:
    """Structured logging wrapper with context injection.

    Example:
        log = StructuredLogger("thought_compass")
        log.info("Thought appended", thought_number=3)

        with log.context(session_id="abc123", tool_name="sequentialthinking"):
            log.info("Processing")

    """

    def __init__(
        self,
        name: str,
        level: LogLevel | str = LogLevel.INFO,
        log_format: LogFormat | str = LogFormat.TEXT,
        log_file: str | Path | None = None,
    ) -> None:
        """Initialize structured logger.

        Args:
            name: Logger name (usually module name).
            level: Minimum log level.
            log_format: Output format (json or text).
            log_file: Optional file path for log output.

        """
        self.name = name
        self.level = LogLevel(level) if isinstance(level, str) else level
        self.log_format = LogFormat(log_format) if isinstance(log_format, str) else log_format

        self._configure_logger(log_file)

    def _configure_logger(self, log_file: str | Path | None = None) -> None:
        """Configure loguru handlers.

        Console output goes to stderr because stdout carries the stdio
        transport.
        """
        logger.remove()

        if self.log_format == LogFormat.JSON:
            logger.add(sys.stderr, format=_json_sink_format, level=self.level.value)
        else:
            logger.add(
                sys.stderr,
                format=text_format,
                level=self.level.value,
                colorize=True,
            )

        if log_file:
            log_path = Path(log_file)
            log_path.parent.mkdir(parents=True, exist_ok=True)

            logger.add(
                log_path,
                format=_json_sink_format,
                level=self.level.value,
                rotation="100 MB",
                retention="7 days",
                compression="gz",
            )

    def _log(self, level: str, message: str, **kwargs: Any) -> None:
        bound_logger = logger.bind(logger_name=self.name, **kwargs)
        getattr(bound_logger.opt(depth=2), level)(message)

    def debug(self, message: str, **kwargs: Any) -> None:
        """Log debug message."""
        self._log("debug", message, **kwargs)

    def info(self, message: str, **kwargs: Any) -> None:
        """Log info message."""
        self._log("info", message, **kwargs)

    def warning(self, message: str, **kwargs: Any) -> None:
        """Log warning message."""
        self._log("warning", message, **kwargs)

    def error(self, message: str, **kwargs: Any) -> None:
        """Log error message."""
        self._log("error", message, **kwargs)

    def critical(self, message: str, **kwargs: Any) -> None:
        """Log critical message."""
        self._log("critical", message, **kwargs)

    def exception(self, message: str, **kwargs: Any) -> None:
        """Log exception with traceback."""
        logger.bind(logger_name=self.name, **kwargs).opt(depth=1, exception=True).error(message)

    class _ContextManager:
        """Context manager for scoped logging context."""

        def __init__(
            self,
            session_id: str | None = None,
            tool_name: str | None = None,
            thought_number: int | None = None,
        ) -> None:
            self.session_id = session_id
            self.tool_name = tool_name
            self.thought_number = thought_number
            self._tokens: list[Any] = []

        def __enter__(self) -> StructuredLogger._ContextManager:
            if self.session_id:
                self._tokens.append(_session_id.set(self.session_id))
            if self.tool_name:
                self._tokens.append(_tool_name.set(self.tool_name))
            if self.thought_number is not None:
                self._tokens.append(_thought_number.set(self.thought_number))
            return self

        def __exit__(self, *args: Any) -> None:
            for token in reversed(self._tokens):
                token.var.reset(token)
            self._tokens.clear()

    def context(
        self,
        session_id: str | None = None,
        tool_name: str | None = None,
        thought_number: int | None = None,
    ) -> _ContextManager:
        """Create a context manager for scoped logging context.

        Args:
            session_id: Reasoning session identifier.
            tool_name: Name of the MCP tool being executed.
            thought_number: Number of the thought being processed.

        Returns:
            Context manager that sets the logging context.

        """
        return self._ContextManager(session_id, tool_name, thought_number)


def set_session_id(session_id: str | None) -> None:
    """Set the session ID for the current context."""
    _session_id.set(session_id)


def get_session_id() -> str | None:
    """Get the current session ID from context."""
    return _session_id.get()


def set_tool_name(tool_name: str | None) -> None:
    """Set the tool name for the current context."""
    _tool_name.set(tool_name)


def set_thought_number(thought_number: int | None) -> None:
    """Set the thought number for the current context."""
    _thought_number.set(thought_number)


def get_logger(
    name: str,
    level: LogLevel | str | None = None,
    log_format: LogFormat | str | None = None,
) -> StructuredLogger:
    """Get a configured structured logger.

    Reads configuration from environment variables if not specified:
    - LOG_LEVEL: Minimum log level (DEBUG, INFO, WARNING, ERROR)
    - LOG_FORMAT: Output format (json, text)
    - LOG_FILE: Optional file path for log output

    Args:
        name: Logger name (usually __name__).
        level: Minimum log level (default: from env or INFO).
        log_format: Output format (default: from env or TEXT).

    Returns:
        Configured StructuredLogger instance.

    """
    env_level = os.getenv("LOG_LEVEL", "INFO")
    env_format = os.getenv("LOG_FORMAT", "text")
    env_file = os.getenv("LOG_FILE")

    return StructuredLogger(
        name=name,
        level=level or LogLevel(env_level.upper()),
        log_format=log_format or LogFormat(env_format.lower()),
        log_file=env_file,
    )


_default_logger: StructuredLogger | None = None


def get_default_logger() -> StructuredLogger:
    """Get the default application logger."""
    global _default_logger
    if _default_logger is None:
        _default_logger = get_logger("thought_compass_mcp")
    return _default_logger


log = get_default_logger
