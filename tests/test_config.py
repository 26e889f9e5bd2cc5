"""Tests for src/config.py."""

from __future__ import annotations

import pytest

import src.config as config_module
from src.config import DEFAULT_TOOL, Config, get_config, reload_config


class TestDefaults:
    """Tests for default configuration values."""

    def test_server_defaults(self, config: Config) -> None:
        """Test server defaults."""
        assert config.server.name == "Thought-Compass-MCP"
        assert config.server.transport == "stdio"
        assert config.server.host == "127.0.0.1"
        assert config.server.port == 8000

    def test_limits_and_analysis_defaults(self, config: Config) -> None:
        """Test input limits and analysis thresholds."""
        assert config.input_limits.max_thought_size == 10000
        assert config.input_limits.max_thoughts_per_session == 1000
        assert config.analysis.vector_dimension == 300
        assert config.analysis.drift_threshold == 0.55
        assert config.analysis.contradiction_similarity_threshold == 0.5
        assert config.analysis.cluster_similarity_threshold == 0.6
        assert config.analysis.aspect_presence_threshold == 0.65
        assert config.analysis.available_tools == (DEFAULT_TOOL,)

    def test_frozen(self, config: Config) -> None:
        """Test config sections cannot be mutated."""
        with pytest.raises(AttributeError):
            config.server.port = 1  # type: ignore[misc]


class TestEnvironment:
    """Tests for environment overrides."""

    def test_overrides(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test env vars replace defaults."""
        monkeypatch.setenv("SERVER_TRANSPORT", "http")
        monkeypatch.setenv("SERVER_PORT", "9001")
        monkeypatch.setenv("DRIFT_THRESHOLD", "0.4")
        config = reload_config()
        assert config.server.transport == "http"
        assert config.server.port == 9001
        assert config.analysis.drift_threshold == 0.4

    def test_invalid_numbers_fall_back(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test unparsable numbers keep the defaults."""
        monkeypatch.setenv("SERVER_PORT", "eighty")
        monkeypatch.setenv("DRIFT_THRESHOLD", "high")
        config = reload_config()
        assert config.server.port == 8000
        assert config.analysis.drift_threshold == 0.55

    def test_empty_string_is_unset(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test an empty value behaves like a missing one."""
        monkeypatch.setenv("SERVER_NAME", "")
        assert reload_config().server.name == "Thought-Compass-MCP"

    def test_available_tools_deduplicated(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test the thinking tool stays first and duplicates are dropped."""
        monkeypatch.setenv("AVAILABLE_TOOLS", " search, sequentialthinking ,search,,code ")
        assert reload_config().analysis.available_tools == (DEFAULT_TOOL, "search", "code")

    def test_reload_replaces_global(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test reload_config swaps the cached instance."""
        monkeypatch.setenv("MAX_THOUGHT_SIZE", "50")
        reloaded = reload_config()
        assert get_config() is reloaded
        assert get_config().input_limits.max_thought_size == 50

    def test_no_module_level_snapshot(self) -> None:
        """Test the module exposes no config object that reloads would leave stale."""
        assert not hasattr(config_module, "config")


class TestToDict:
    """Tests for config serialization."""

    def test_sections(self, config: Config) -> None:
        """Test every section is present and tuples become lists."""
        data = config.to_dict()
        assert set(data) == {"server", "input_limits", "analysis"}
        assert data["analysis"]["available_tools"] == [DEFAULT_TOOL]
        assert data["analysis"]["word_vectors_path"] is None
