"""Tests for src/utils/telemetry.py."""

from __future__ import annotations

from loguru import logger

from src.utils.telemetry import (
    LoguruSink,
    RecordingSink,
    Telemetry,
    TelemetrySink,
    ThoughtEvent,
)


class BrokenSink:
    def handle(self, event: ThoughtEvent) -> None:
        raise RuntimeError("sink down")


class TestThoughtEvent:
    """Tests for ThoughtEvent."""

    def test_to_dict(self) -> None:
        """Test the dict form copies attributes."""
        event = ThoughtEvent("thought.appended", 2, {"phase": "Execution"}, timestamp=1.0)
        assert event.to_dict() == {
            "name": "thought.appended",
            "thought_number": 2,
            "attributes": {"phase": "Execution"},
            "timestamp": 1.0,
        }


class TestSinks:
    """Tests for sink implementations."""

    def test_protocol(self) -> None:
        """Test both sinks satisfy the protocol."""
        assert isinstance(RecordingSink(), TelemetrySink)
        assert isinstance(LoguruSink(), TelemetrySink)

    def test_recording_sink(self) -> None:
        """Test recorded names, filtering and clearing."""
        sink = RecordingSink()
        telemetry = Telemetry([sink])
        telemetry.emit("a", 1)
        telemetry.emit("b", 2, x=1)
        telemetry.emit("a", 3)
        assert sink.names() == ["a", "b", "a"]
        assert [e.thought_number for e in sink.by_name("a")] == [1, 3]
        sink.clear()
        assert sink.events == []

    def test_loguru_sink_binds_attributes(self) -> None:
        """Test attributes reach loguru as extras."""
        records: list[dict] = []
        handler_id = logger.add(lambda message: records.append(message.record), level="DEBUG")
        try:
            LoguruSink().handle(ThoughtEvent("thought.guidance", 4, {"count": 2}))
        finally:
            logger.remove(handler_id)
        assert records[0]["message"] == "thought.guidance"
        assert records[0]["extra"]["count"] == 2
        assert records[0]["extra"]["thought"] == 4


class TestTelemetry:
    """Tests for the fan-out."""

    def test_default_sink_is_loguru(self) -> None:
        """Test a bare Telemetry logs through loguru."""
        assert [type(s) for s in Telemetry().sinks] == [LoguruSink]

    def test_broken_sink_skipped(self) -> None:
        """Test a raising sink does not block the others."""
        recorder = RecordingSink()
        telemetry = Telemetry([BrokenSink(), recorder])
        event = telemetry.emit("thought.appended", 1, phase="Planning")
        assert recorder.events == [event]

    def test_add_sink_and_emit_all(self) -> None:
        """Test late sinks receive batched events in order."""
        telemetry = Telemetry([])
        recorder = RecordingSink()
        telemetry.add_sink(recorder)
        telemetry.emit_all([ThoughtEvent("one"), ThoughtEvent("two")])
        assert recorder.names() == ["one", "two"]
