"""Utility modules for Thought Compass MCP."""

from .errors import (
    SessionLimitError,
    ThoughtCompassException,
    ThoughtValidationError,
    ToolExecutionError,
    VectorLoadError,
)
from .telemetry import LoguruSink, RecordingSink, Telemetry, TelemetrySink, ThoughtEvent

__all__ = [
    # Errors
    "ThoughtCompassException",
    "ThoughtValidationError",
    "SessionLimitError",
    "VectorLoadError",
    "ToolExecutionError",
    # Telemetry
    "ThoughtEvent",
    "TelemetrySink",
    "LoguruSink",
    "RecordingSink",
    "Telemetry",
]
