"""Thought Compass MCP Configuration.

Centralized configuration management with environment variable support
and Docker secrets integration.

Usage:
    from src.config import get_config
    print(get_config().server.name)
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from loguru import logger

DEFAULT_TOOL = "sequentialthinking"


def _get_env(key: str, default: str = "") -> str:
    """Get environment variable, treating empty string as unset.

    Also checks Docker secrets path for sensitive values.
    """
    secrets_path = f"/run/secrets/{key.lower()}"
    if os.path.isfile(secrets_path):
        try:
            with Path(secrets_path).open() as f:
                value = f.read().strip()
                if value:
                    return value
        except OSError as e:
            logger.warning(f"Failed to read secret {secrets_path}: {e}")

    value = os.getenv(key, default)
    return value if value else default


def _get_env_int(key: str, default: int) -> int:
    """Get environment variable as integer."""
    value = os.getenv(key)
    if value:
        try:
            return int(value)
        except ValueError:
            logger.warning(f"Invalid integer for {key}: {value}, using default {default}")
    return default


def _get_env_float(key: str, default: float) -> float:
    """Get environment variable as float."""
    value = os.getenv(key)
    if value:
        try:
            return float(value)
        except ValueError:
            logger.warning(f"Invalid float for {key}: {value}, using default {default}")
    return default


def _get_env_list(key: str) -> tuple[str, ...]:
    """Get a comma separated environment variable as a tuple of stripped items."""
    raw = _get_env(key, "")
    return tuple(item.strip() for item in raw.split(",") if item.strip())


def _available_tools() -> tuple[str, ...]:
    tools = [DEFAULT_TOOL]
    for name in _get_env_list("AVAILABLE_TOOLS"):
        if name not in tools:
            tools.append(name)
    return tuple(tools)


@dataclass(frozen=True)
class ServerConfig:
    """Server runtime configuration."""

    name: str = field(default_factory=lambda: _get_env("SERVER_NAME", "Thought-Compass-MCP"))
    transport: str = field(default_factory=lambda: _get_env("SERVER_TRANSPORT", "stdio"))
    host: str = field(default_factory=lambda: _get_env("SERVER_HOST", "127.0.0.1"))
    port: int = field(default_factory=lambda: _get_env_int("SERVER_PORT", 8000))


@dataclass(frozen=True)
class InputLimitsConfig:
    """Input size limits (CWE-400 mitigation)."""

    max_thought_size: int = field(default_factory=lambda: _get_env_int("MAX_THOUGHT_SIZE", 10000))
    max_thoughts_per_session: int = field(
        default_factory=lambda: _get_env_int("MAX_THOUGHTS_PER_SESSION", 1000)
    )


@dataclass(frozen=True)
class AnalysisConfig:
    """Heuristic analysis tunables.

    The thresholds are empirically chosen. The defaults reproduce the
    reference scoring behaviour and can be overridden per deployment.
    """

    vector_dimension: int = field(default_factory=lambda: _get_env_int("VECTOR_DIMENSION", 300))
    drift_threshold: float = field(
        default_factory=lambda: _get_env_float("DRIFT_THRESHOLD", 0.55)
    )
    contradiction_similarity_threshold: float = field(
        default_factory=lambda: _get_env_float("CONTRADICTION_SIMILARITY_THRESHOLD", 0.5)
    )
    cluster_similarity_threshold: float = field(
        default_factory=lambda: _get_env_float("CLUSTER_SIMILARITY_THRESHOLD", 0.6)
    )
    aspect_presence_threshold: float = field(
        default_factory=lambda: _get_env_float("ASPECT_PRESENCE_THRESHOLD", 0.65)
    )
    word_vectors_path: str = field(default_factory=lambda: _get_env("WORD_VECTORS_PATH", ""))
    available_tools: tuple[str, ...] = field(default_factory=_available_tools)


@dataclass(frozen=True)
class Config:
    """Root configuration object."""

    server: ServerConfig = field(default_factory=ServerConfig)
    input_limits: InputLimitsConfig = field(default_factory=InputLimitsConfig)
    analysis: AnalysisConfig = field(default_factory=AnalysisConfig)

    def to_dict(self) -> dict[str, Any]:
        """Convert config to dictionary (for logging/debugging)."""
        return {
            "server": {
                "name": self.server.name,
                "transport": self.server.transport,
                "host": self.server.host,
                "port": self.server.port,
            },
            "input_limits": {
                "max_thought_size": self.input_limits.max_thought_size,
                "max_thoughts_per_session": self.input_limits.max_thoughts_per_session,
            },
            "analysis": {
                "vector_dimension": self.analysis.vector_dimension,
                "drift_threshold": self.analysis.drift_threshold,
                "contradiction_similarity_threshold": (
                    self.analysis.contradiction_similarity_threshold
                ),
                "cluster_similarity_threshold": self.analysis.cluster_similarity_threshold,
                "aspect_presence_threshold": self.analysis.aspect_presence_threshold,
                "word_vectors_path": self.analysis.word_vectors_path or None,
                "available_tools": list(self.analysis.available_tools),
            },
        }


# Global config instance (lazy-loaded)
_config: Config | None = None


def get_config() -> Config:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = Config()
    return _config


def reload_config() -> Config:
    """Reload configuration (for testing)."""
    global _config
    _config = Config()
    return _config

