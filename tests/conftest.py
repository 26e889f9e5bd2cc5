"""pytest configuration and fixtures."""

from __future__ import annotations

from typing import Any

import pytest

from src.config import Config, reload_config
from src.tools.text_features import HashVectorizer
from src.tools.thought_store import ThoughtGraphStore
from src.tools.thought_types import Phase, Thought
from src.utils.telemetry import RecordingSink, Telemetry

_CONFIG_ENV_VARS = (
    "SERVER_NAME",
    "SERVER_TRANSPORT",
    "SERVER_HOST",
    "SERVER_PORT",
    "MAX_THOUGHT_SIZE",
    "MAX_THOUGHTS_PER_SESSION",
    "VECTOR_DIMENSION",
    "DRIFT_THRESHOLD",
    "CONTRADICTION_SIMILARITY_THRESHOLD",
    "CLUSTER_SIMILARITY_THRESHOLD",
    "ASPECT_PRESENCE_THRESHOLD",
    "WORD_VECTORS_PATH",
    "AVAILABLE_TOOLS",
)


@pytest.fixture(autouse=True)
def isolate_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Clear configuration env vars so every test sees the defaults."""
    for name in _CONFIG_ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def config() -> Config:
    """Fresh default configuration."""
    return reload_config()


@pytest.fixture
def recorder() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def store(config: Config, recorder: RecordingSink) -> ThoughtGraphStore:
    """Store with an in-memory telemetry recorder."""
    return ThoughtGraphStore(config, telemetry=Telemetry([recorder]))


@pytest.fixture
def vectorizer() -> HashVectorizer:
    return HashVectorizer()


@pytest.fixture
def sample_prompt() -> str:
    """Provide a technical prompt with a constraint and high priority."""
    return "I must write a Python script that parses CSV files. Urgent."


def make_payload(text: str, number: int, total: int = 5, **extra: Any) -> dict[str, Any]:
    """Build a SubmitThought payload."""
    return {
        "thought": text,
        "thoughtNumber": number,
        "totalThoughts": total,
        "nextThoughtNeeded": True,
        **extra,
    }


def make_thought(text: str, number: int = 1, **fields: Any) -> Thought:
    """Build a bare Thought for engine-level tests."""
    fields.setdefault("total_thoughts", 5)
    fields.setdefault("next_thought_needed", True)
    fields.setdefault("phase", Phase.EXECUTION)
    return Thought(text=text, thought_number=number, **fields)
