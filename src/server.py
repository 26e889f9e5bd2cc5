"""Thought Compass MCP Server.

FastMCP 2.0 implementation of a sequential-thinking session that keeps the
caller's reasoning anchored to the prompt it started from.
The calling LLM does all reasoning; these tools record, score and guide it.

Tools:
1. sequentialthinking - Submit one thought, receive analysis and guidance
2. visualize_thoughts - Read-only renderings of the session
3. status - Server/session status

Run with: uvx thought-compass
Or: python -m src.server
"""

# Note: We intentionally do NOT use `from __future__ import annotations` here
# because it causes issues with Pydantic/FastMCP type resolution at decorator time.
# Python 3.11+ supports PEP 604 union syntax (X | Y) natively.

import asyncio
import secrets
from typing import Any, Literal

import orjson
from dotenv import load_dotenv
from fastmcp import Context, FastMCP
from loguru import logger

from src.config import reload_config
from src.tools.render import (
    render_alignment_view,
    render_concept_map,
    render_dependency_graph,
    render_progress_bar,
    render_progress_view,
    render_timeline,
)
from src.tools.thought_store import ThoughtGraphStore
from src.utils.errors import ToolExecutionError
from src.utils.logging import get_default_logger, set_session_id

# Load environment variables from .env file (for local development)
load_dotenv()

# Rebuild configuration so values from .env take effect
CONFIG = reload_config()
SERVER_NAME = CONFIG.server.name
SERVER_TRANSPORT = CONFIG.server.transport
SERVER_HOST = CONFIG.server.host
SERVER_PORT = CONFIG.server.port
SERVER_VERSION = "1.0.0"

PhaseStr = Literal["Planning", "Analysis", "Execution", "Verification"]
ComplexityStr = Literal["simple", "medium", "complex"]
StatusStr = Literal["complete", "in-progress", "needs-revision"]
ClassificationStr = Literal["hypothesis", "observation", "conclusion", "question", "solution"]
ViewStr = Literal["graph", "timeline", "concepts", "alignment", "progress", "dot", "mermaid"]


def _json(data: dict[str, Any] | None, *, indent: bool = True) -> str:
    """Serialize data to JSON string with proper typing.

    Type-safe wrapper around orjson.dumps that returns str.
    """
    if data is None:
        data = {}
    opts = orjson.OPT_INDENT_2 if indent else 0
    result: bytes = orjson.dumps(data, option=opts, default=str)
    return result.decode("utf-8")


# =============================================================================
# Initialize FastMCP Server
# =============================================================================

mcp = FastMCP(
    name=SERVER_NAME,
    instructions="""Thought Compass MCP Server - Sequential thinking with prompt alignment.

ARCHITECTURE: You (the LLM) do ALL reasoning. These tools RECORD, SCORE, and GUIDE.

=== TOOLS ===

1. sequentialthinking(thought, thoughtNumber, totalThoughts, nextThoughtNeeded, ...)
   Submit one thought. Thought 1 is treated as the prompt: its goals,
   constraints and domains become the yardstick for every later thought.
   Returns: progress, quality, contradictions, prompt alignment and drift
   warnings, recommended strategies and strategic guidance.

2. visualize_thoughts(view) - Render the session
   Views: graph, timeline, concepts, alignment, progress, dot, mermaid

3. status() - Server info and session summary

=== RULES ===

- thoughtNumber must increase on every call, revisions included
- dependencies, revisesThought and branchFromThought may only name
  thoughts that already exist
- totalThoughts may be raised by the server; it never goes down

=== WORKFLOW ===

1. sequentialthinking(thought="<the task>", thoughtNumber=1, totalThoughts=5,
   nextThoughtNeeded=true)
2. sequentialthinking(thought="Step...", thoughtNumber=2, totalThoughts=5,
   nextThoughtNeeded=true, dependencies=[1], phase="Analysis")
   -> Read driftWarning and strategicGuidance before the next step
3. sequentialthinking(..., thoughtNumber=3, isRevision=true, revisesThought=2) to correct
4. sequentialthinking(..., nextThoughtNeeded=false) when done
""",
)

# =============================================================================
# Session Store
# =============================================================================

_store: ThoughtGraphStore | None = None
_store_lock = asyncio.Lock()
_session_id = secrets.token_hex(8)


def get_store() -> ThoughtGraphStore:
    """Get or create the session store."""
    global _store
    if _store is None:
        _store = ThoughtGraphStore(CONFIG)
        set_session_id(_session_id)
        logger.info(f"Session {_session_id} created")
    return _store


def reset_store() -> ThoughtGraphStore:
    """Replace the session store with a fresh one (for testing)."""
    global _store, _session_id
    _store = None
    _session_id = secrets.token_hex(8)
    return get_store()


# =============================================================================
# TOOL 1: SEQUENTIALTHINKING
# =============================================================================


@mcp.tool
async def sequentialthinking(
    thought: Any = None,
    thoughtNumber: Any = None,
    totalThoughts: Any = None,
    nextThoughtNeeded: Any = None,
    isRevision: bool | None = None,
    revisesThought: int | None = None,
    branchFromThought: int | None = None,
    branchId: str | None = None,
    needsMoreThoughts: bool | None = None,
    phase: PhaseStr | None = None,
    dependencies: list[int] | None = None,
    toolsUsed: list[str] | None = None,
    complexity: ComplexityStr | None = None,
    status: StatusStr | None = None,
    classification: ClassificationStr | None = None,
    confidenceScore: float | None = None,
    evidenceStrength: float | None = None,
    ctx: Context | None = None,
) -> str:
    """Record one thought and return its analysis.

    Each thought is scored against the previous ones and, from thought 1
    onward, against the prompt profile built from the first thought.

    The four required fields are accepted untyped here so the store's own
    validation reports missing or mistyped values as a failed status.

    Args:
        thought: Your current thinking step (required)
        thoughtNumber: Position in the sequence, starting at 1 (required)
        totalThoughts: Current estimate of thoughts needed (required)
        nextThoughtNeeded: Whether another thought follows (required)
        isRevision: Whether this revises an earlier thought
        revisesThought: Thought number being revised
        branchFromThought: Thought number this branch starts from
        branchId: Identifier of the branch
        needsMoreThoughts: Whether more thoughts than estimated are needed
        phase: Planning, Analysis, Execution or Verification
        dependencies: Earlier thought numbers this thought builds on
        toolsUsed: Tools used while producing this thought
        complexity: simple, medium or complex
        status: complete, in-progress or needs-revision
        classification: hypothesis, observation, conclusion, question or solution
        confidenceScore: Your confidence in this thought (0-1)
        evidenceStrength: Strength of the supporting evidence (0-1)

    Returns:
        JSON with progress, quality, semantic analysis, prompt alignment,
        recommendations and strategic guidance. On rejection:
        {"error": "...", "status": "failed"}

    """
    payload: dict[str, Any] = {
        "thought": thought,
        "thoughtNumber": thoughtNumber,
        "totalThoughts": totalThoughts,
        "nextThoughtNeeded": nextThoughtNeeded,
        "isRevision": isRevision,
        "revisesThought": revisesThought,
        "branchFromThought": branchFromThought,
        "branchId": branchId,
        "needsMoreThoughts": needsMoreThoughts,
        "phase": phase,
        "dependencies": dependencies,
        "toolsUsed": toolsUsed,
        "complexity": complexity,
        "status": status,
        "classification": classification,
        "confidenceScore": confidenceScore,
        "evidenceStrength": evidenceStrength,
    }
    payload = {key: value for key, value in payload.items() if value is not None}

    try:
        with get_default_logger().context(
            session_id=_session_id, tool_name="sequentialthinking", thought_number=thoughtNumber
        ):
            async with _store_lock:
                result = get_store().submit(payload)

        if result.get("status") == "failed":
            if ctx:
                await ctx.warning(f"Thought rejected: {result['error']}")
            return _json(result, indent=False)

        if ctx:
            await ctx.info(
                f"Thought {result['thoughtNumber']}/{result['totalThoughts']} recorded "
                f"({result['progress']})"
            )
            if result.get("driftWarning"):
                await ctx.warning(result["driftWarning"])

        return _json(result)

    except Exception as e:
        error = ToolExecutionError("sequentialthinking", str(e), {"type": type(e).__name__})
        logger.error(f"Thought processing failed: {e}")
        return _json(error.to_dict(), indent=False)


# =============================================================================
# TOOL 2: VISUALIZE_THOUGHTS
# =============================================================================


@mcp.tool
async def visualize_thoughts(
    view: ViewStr = "graph",
    ctx: Context | None = None,
) -> str:
    """Render the current session without changing it.

    Args:
        view: Which rendering to return (default: graph)
            - graph: Dependency graph with phases, quality and alignment
            - timeline: Thoughts in order with phase transitions
            - concepts: Concept map built from extracted concepts
            - alignment: Thoughts grouped by prompt alignment
            - progress: Progress against each prompt goal
            - dot: Graphviz DOT export of the thought graph
            - mermaid: Mermaid export of the thought graph

    Returns:
        JSON with the view name, the rendering and a progress bar

    """
    try:
        async with _store_lock:
            store = get_store()
            thoughts = store.thoughts
            profile = store.profile

            renderers = {
                "graph": lambda: render_dependency_graph(thoughts),
                "timeline": lambda: render_timeline(thoughts),
                "concepts": lambda: render_concept_map(thoughts),
                "alignment": lambda: render_alignment_view(thoughts, profile),
                "progress": lambda: render_progress_view(thoughts, profile),
                "dot": lambda: store.graph.to_dot(),
                "mermaid": lambda: store.graph.to_mermaid(),
            }
            renderer = renderers.get(view)
            if renderer is None:
                return _json(
                    {"error": f"Unknown view: {view}", "views": list(renderers)}, indent=False
                )
            rendering = renderer()

            progress = 0.0
            if thoughts:
                latest = thoughts[-1]
                progress = latest.thought_number / latest.total_thoughts * 100

        if ctx:
            await ctx.info(f"Rendered {view} view of {len(thoughts)} thoughts")

        return _json(
            {
                "view": view,
                "thoughtCount": len(thoughts),
                "rendering": rendering,
                "progressBar": render_progress_bar(progress),
            }
        )

    except Exception as e:
        error = ToolExecutionError("visualize_thoughts", str(e), {"view": view})
        logger.error(f"Visualization failed: {e}")
        return _json(error.to_dict(), indent=False)


# =============================================================================
# TOOL 3: STATUS
# =============================================================================


@mcp.tool
async def status(
    ctx: Context | None = None,
) -> str:
    """Get server status and a summary of the current session.

    Returns:
        JSON with server info, configuration and session counters

    """
    try:
        async with _store_lock:
            store = get_store()
            summary = store.session_summary()
            tool_usage = store.tool_usage_stats

        status_result: dict[str, Any] = {
            "server": {
                "name": SERVER_NAME,
                "transport": SERVER_TRANSPORT,
                "tools": ["sequentialthinking", "visualize_thoughts", "status"],
                "version": SERVER_VERSION,
            },
            "session": {"id": _session_id, **summary, "toolUsageStats": tool_usage},
            "config": CONFIG.to_dict(),
            "vectors": {
                "dimension": store.vectorizer.dimension,
                "pretrained": getattr(store.vectorizer, "pretrained_count", 0),
            },
        }

        if ctx:
            await ctx.info(f"Session {_session_id}: {summary['thoughtCount']} thoughts")

        return _json(status_result)

    except Exception as e:
        error = ToolExecutionError("status", str(e))
        logger.error(f"Status check failed: {e}")
        return _json(error.to_dict(), indent=False)


def main() -> None:
    """Run the Thought Compass MCP server."""
    logger.info(f"Starting {SERVER_NAME} (transport: {SERVER_TRANSPORT})")

    get_store()

    if SERVER_TRANSPORT == "stdio":
        mcp.run(transport="stdio")
    elif SERVER_TRANSPORT == "http":
        mcp.run(transport="streamable-http", host=SERVER_HOST, port=SERVER_PORT)
    elif SERVER_TRANSPORT == "sse":
        mcp.run(transport="sse", host=SERVER_HOST, port=SERVER_PORT)
    else:
        logger.warning(f"Unknown transport '{SERVER_TRANSPORT}', falling back to stdio")
        mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
