"""Tests for MCP server tool implementations.

Most tests call the FastMCP tool functions directly through ``.fn``; argument
validation is also checked through an in-memory client.
"""

from __future__ import annotations

from typing import Any

import orjson
import pytest
from fastmcp import Client

from src.server import (
    _json,
    get_store,
    mcp,
    reset_store,
    sequentialthinking,
    status,
    visualize_thoughts,
)

PROMPT = "I must write a Python script that parses CSV files. Urgent."


@pytest.fixture(autouse=True)
def fresh_store() -> None:
    """Start every test with an empty session."""
    reset_store()


async def _think(text: str, number: int, total: int = 3, **extra: Any) -> dict[str, Any]:
    raw = await sequentialthinking.fn(
        thought=text,
        thoughtNumber=number,
        totalThoughts=total,
        nextThoughtNeeded=True,
        **extra,
    )
    return orjson.loads(raw)


class TestJsonHelper:
    """Tests for the _json serializer."""

    def test_none_becomes_empty_object(self) -> None:
        """Test None serializes to an empty object."""
        assert _json(None) == "{}"

    def test_compact_and_indented(self) -> None:
        """Test the indent switch."""
        assert _json({"a": 1}, indent=False) == '{"a":1}'
        assert _json({"a": 1}) == '{\n  "a": 1\n}'


class TestServerSetup:
    """Tests for server registration."""

    def test_mcp_instance(self) -> None:
        """Test the FastMCP server is created."""
        assert mcp is not None

    def test_reset_store(self) -> None:
        """Test reset_store replaces the session."""
        first = get_store()
        assert reset_store() is not first
        assert get_store() is get_store()


class TestSequentialThinking:
    """Tests for the sequentialthinking tool."""

    @pytest.mark.asyncio
    async def test_first_thought(self) -> None:
        """Test thought 1 is profiled and the total is raised."""
        result = await _think(PROMPT, 1)
        assert result["thoughtNumber"] == 1
        assert result["totalThoughts"] == 6
        assert result["phase"] == "Planning"
        assert result["promptProgress"]["overallProgress"] >= 0

    @pytest.mark.asyncio
    async def test_optional_arguments(self) -> None:
        """Test optional fields flow through to the response."""
        await _think(PROMPT, 1)
        result = await _think(
            "Use the csv module to read rows",
            2,
            phase="Execution",
            dependencies=[1],
            toolsUsed=["search"],
            classification="solution",
        )
        assert result["phase"] == "Execution"
        assert result["toolUsageStats"]["search"]["thoughtsUsedIn"] == [2]
        assert get_store().graph.dependents(1) == [2]

    @pytest.mark.asyncio
    async def test_rejection(self) -> None:
        """Test invalid references come back as a failed status."""
        await _think(PROMPT, 1)
        result = await _think("Next", 2, dependencies=[5])
        assert result["status"] == "failed"
        assert result["error"].startswith("Invalid dependencies")
        assert len(get_store().thoughts) == 1


class TestClientValidation:
    """Tests for argument validation through an in-memory MCP client."""

    @staticmethod
    async def _call(arguments: dict[str, Any]) -> dict[str, Any]:
        async with Client(mcp) as client:
            result = await client.call_tool("sequentialthinking", arguments)
        assert not result.is_error
        return orjson.loads(result.data)

    @pytest.mark.asyncio
    async def test_missing_required_field(self) -> None:
        """Test a missing thought comes back as a failed status."""
        result = await self._call(
            {"thoughtNumber": 1, "totalThoughts": 3, "nextThoughtNeeded": True}
        )
        assert result == {"error": "Invalid thought: must be a string", "status": "failed"}
        assert get_store().thoughts == ()

    @pytest.mark.asyncio
    async def test_mistyped_required_field(self) -> None:
        """Test a non-numeric thought number is reported, not raised."""
        result = await self._call(
            {
                "thought": PROMPT,
                "thoughtNumber": "abc",
                "totalThoughts": 3,
                "nextThoughtNeeded": True,
            }
        )
        assert result == {
            "error": "Invalid thoughtNumber: must be a number",
            "status": "failed",
        }

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("field", "value", "message"),
        [
            ("thoughtNumber", "1", "Invalid thoughtNumber: must be a number"),
            ("totalThoughts", "2", "Invalid totalThoughts: must be a number"),
            ("nextThoughtNeeded", "true", "Invalid nextThoughtNeeded: must be a boolean"),
        ],
    )
    async def test_string_values_not_coerced(self, field: str, value: str, message: str) -> None:
        """Test string forms of numbers and booleans are rejected."""
        arguments: dict[str, Any] = {
            "thought": PROMPT,
            "thoughtNumber": 1,
            "totalThoughts": 3,
            "nextThoughtNeeded": True,
        }
        arguments[field] = value
        result = await self._call(arguments)
        assert result == {"error": message, "status": "failed"}
        assert get_store().thoughts == ()

    @pytest.mark.asyncio
    async def test_valid_call(self) -> None:
        """Test a well-formed call is recorded."""
        result = await self._call(
            {
                "thought": PROMPT,
                "thoughtNumber": 1,
                "totalThoughts": 3,
                "nextThoughtNeeded": True,
            }
        )
        assert "error" not in result
        assert len(get_store().thoughts) == 1


class TestVisualizeThoughts:
    """Tests for the visualize_thoughts tool."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("view", "marker"),
        [
            ("graph", "=== Thought Dependency Graph ==="),
            ("timeline", "=== Thought Timeline ==="),
            ("concepts", "=== Concept Map ==="),
            ("alignment", "=== Prompt Alignment View ==="),
            ("progress", "=== Prompt Progress View ==="),
            ("dot", "digraph"),
            ("mermaid", "```mermaid"),
        ],
    )
    async def test_views(self, view: str, marker: str) -> None:
        """Test every view renders."""
        await _think(PROMPT, 1)
        result = orjson.loads(await visualize_thoughts.fn(view=view))
        assert result["view"] == view
        assert result["thoughtCount"] == 1
        assert marker in result["rendering"]
        assert result["progressBar"].startswith("Progress: [")

    @pytest.mark.asyncio
    async def test_empty_session(self) -> None:
        """Test rendering an empty session."""
        result = orjson.loads(await visualize_thoughts.fn(view="alignment"))
        assert "(No prompt metadata available)" in result["rendering"]
        assert result["progressBar"].endswith("] 0%")

    @pytest.mark.asyncio
    async def test_unknown_view(self) -> None:
        """Test an unknown view lists the valid ones."""
        result = orjson.loads(await visualize_thoughts.fn(view="radar"))
        assert result["error"] == "Unknown view: radar"
        assert "mermaid" in result["views"]

    @pytest.mark.asyncio
    async def test_does_not_mutate(self) -> None:
        """Test rendering leaves the session untouched."""
        await _think(PROMPT, 1)
        before = get_store().session_summary()
        await visualize_thoughts.fn(view="graph")
        assert get_store().session_summary() == before


class TestStatus:
    """Tests for the status tool."""

    @pytest.mark.asyncio
    async def test_status(self) -> None:
        """Test server info and session counters."""
        await _think(PROMPT, 1)
        result = orjson.loads(await status.fn())
        assert result["server"]["tools"] == ["sequentialthinking", "visualize_thoughts", "status"]
        assert result["session"]["thoughtCount"] == 1
        assert result["session"]["profile"]["taskType"] == "technical"
        assert result["vectors"]["pretrained"] == 0
        assert "analysis" in result["config"]
