"""Telemetry events for the thought pipeline.

The store computes everything first and only then publishes a batch of
events describing what happened. Sinks receive the events; they never
take part in scoring.

Usage:
    from src.utils.telemetry import RecordingSink, Telemetry

    recorder = RecordingSink()
    telemetry = Telemetry([recorder])
    telemetry.emit("thought.appended", thought_number=3, phase="Execution")
"""

from __future__ import annotations

import time
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable

from loguru import logger


@dataclass(frozen=True)
class ThoughtEvent:
    """A single pipeline event."""

    name: str
    thought_number: int | None = None
    attributes: dict[str, Any] = field(default_factory=dict)
    timestamp: float = field(default_factory=time.time)

    def to_dict(self) -> dict[str, Any]:
        """Convert event to dictionary."""
        return {
            "name": self.name,
            "thought_number": self.thought_number,
            "attributes": dict(self.attributes),
            "timestamp": self.timestamp,
        }


@runtime_checkable
class TelemetrySink(Protocol):
    """Anything that can consume thought events."""

    def handle(self, event: ThoughtEvent) -> None: ...


class LoguruSink:
    """Writes events to loguru, attributes bound as extras."""

    def __init__(self, level: str = "DEBUG") -> None:
        self.level = level

    def handle(self, event: ThoughtEvent) -> None:
        extras = {**event.attributes, "event": event.name, "thought": event.thought_number}
        logger.bind(**extras).log(self.level, event.name)


class RecordingSink:
    """Keeps events in memory, for tests and visualizers."""

    def __init__(self) -> None:
        self.events: list[ThoughtEvent] = []

    def handle(self, event: ThoughtEvent) -> None:
        self.events.append(event)

    def names(self) -> list[str]:
        """Event names in emission order."""
        return [event.name for event in self.events]

    def by_name(self, name: str) -> list[ThoughtEvent]:
        """All recorded events with the given name."""
        return [event for event in self.events if event.name == name]

    def clear(self) -> None:
        self.events.clear()


class Telemetry:
    """Fans events out to every registered sink.

    A sink that raises is logged and skipped; the remaining sinks still
    receive the event.
    """

    def __init__(self, sinks: Iterable[TelemetrySink] | None = None) -> None:
        self._sinks: list[TelemetrySink] = list(sinks) if sinks is not None else [LoguruSink()]

    @property
    def sinks(self) -> tuple[TelemetrySink, ...]:
        return tuple(self._sinks)

    def add_sink(self, sink: TelemetrySink) -> None:
        self._sinks.append(sink)

    def publish(self, event: ThoughtEvent) -> None:
        for sink in self._sinks:
            try:
                sink.handle(event)
            except Exception as e:
                logger.warning(f"Telemetry sink {type(sink).__name__} failed on {event.name}: {e}")

    def emit(self, name: str, thought_number: int | None = None, **attributes: Any) -> ThoughtEvent:
        """Build and publish an event.

        Args:
            name: Dotted event name, e.g. ``thought.appended``.
            thought_number: Thought the event refers to, if any.
            **attributes: Event payload.

        Returns:
            The published event.

        """
        event = ThoughtEvent(name=name, thought_number=thought_number, attributes=attributes)
        self.publish(event)
        return event

    def emit_all(self, events: Iterable[ThoughtEvent]) -> None:
        for event in events:
            self.publish(event)
