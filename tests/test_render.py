"""Tests for the plain-text session views."""

from __future__ import annotations

import pytest

from src.tools.render import (
    alignment_marker,
    render_alignment_view,
    render_concept_map,
    render_dependency_graph,
    render_progress_bar,
    render_progress_view,
    render_timeline,
    truncate,
)
from src.tools.thought_types import Classification, Phase, PromptProfile, QualityAssessment
from tests.conftest import make_thought

QUALITY = QualityAssessment(coherence=6, depth=5, relevance=5, quality_score=5)


@pytest.fixture
def profile() -> PromptProfile:
    return PromptProfile(original_prompt="Ship the parser.", goals=("Ship the parser",))


class TestHelpers:
    """Tests for small formatting helpers."""

    def test_truncate(self) -> None:
        """Test the ellipsis counts toward the limit."""
        assert truncate("short", 10) == "short"
        assert truncate("abcdefghijkl", 10) == "abcdefg..."

    @pytest.mark.parametrize(
        ("score", "marker"), [(9, "✓"), (7, "✓"), (5, "⚠️"), (4, "⚠️"), (3, "❌")]
    )
    def test_alignment_marker(self, score: int, marker: str) -> None:
        """Test marker bands."""
        assert alignment_marker(score) == marker

    def test_progress_bar(self) -> None:
        """Test the bar width and rounded percentage."""
        bar = render_progress_bar(50)
        assert bar == "Progress: [" + "█" * 25 + "░" * 25 + "] 50%"

    def test_progress_bar_clamped(self) -> None:
        """Test out-of-range values never overflow the bar."""
        assert render_progress_bar(150, width=4) == "Progress: [████] 150%"
        assert render_progress_bar(0, width=4) == "Progress: [░░░░] 0%"


class TestDependencyGraph:
    """Tests for the dependency graph view."""

    def test_nodes_and_arrows(self) -> None:
        """Test node lines list dependents and skip revisions."""
        thoughts = [
            make_thought("Plan", 1, phase=Phase.PLANNING, quality=QUALITY),
            make_thought("Build", 2, dependencies=(1,), classification=Classification.SOLUTION),
            make_thought("Build again", 4, is_revision=True, revises_thought=1),
            make_thought("Check", 3, dependencies=(1, 2), alignment_score=8),
        ]
        lines = render_dependency_graph(thoughts).splitlines()

        assert lines[0] == "=== Thought Dependency Graph ==="
        assert lines[2] == "T1(P)      [Q:5] → T2, T3"
        assert lines[3] == "T2(E)      [solution] → T3"
        assert lines[4] == "T3(E)      [A:8✓]"
        assert "Legend:" in lines

    def test_branches_section(self) -> None:
        """Test branch chains are listed."""
        thoughts = [
            make_thought("Plan", 1),
            make_thought("Alt", 2, branch_from_thought=1, branch_id="alt"),
        ]
        text = render_dependency_graph(thoughts)
        assert "Branches:\n  alt: T2(E)" in text


class TestConceptMap:
    """Tests for the concept map view."""

    def test_relations(self) -> None:
        """Test consecutive concepts and classification links."""
        thought = make_thought(
            "x",
            1,
            concepts=("parser", "csv rows"),
            classification=Classification.HYPOTHESIS,
        )
        text = render_concept_map([thought])
        assert text.startswith("=== Concept Map ===")
        assert "[parser]\n  relates to → csv rows\n  classified as → hypothesis" in text
        assert "[csv rows]" in text
        assert "[hypothesis]" in text

    def test_empty(self) -> None:
        """Test no thoughts give just the header."""
        assert render_concept_map([]) == "=== Concept Map ===\n"


class TestTimeline:
    """Tests for the timeline view."""

    def test_phase_markers_and_annotations(self) -> None:
        """Test phase headers, revisions, dependencies and warnings."""
        thoughts = [
            make_thought("Plan", 1, phase=Phase.PLANNING),
            make_thought("Build", 2, dependencies=(1,), drift_warning="Off topic"),
            make_thought("Fix", 3, is_revision=True, revises_thought=1),
        ]
        lines = render_timeline(thoughts).splitlines()

        assert lines[0] == "=== Thought Timeline ==="
        assert "[Phase: Planning]" in lines
        assert "[Phase: Execution]" in lines
        assert "      ↑ Depends on: T1" in lines
        assert "      ⚠️ Off topic" in lines
        assert "      ↳ Revises T1" in lines

    def test_long_text_truncated(self) -> None:
        """Test text is cut to sixty characters."""
        line = render_timeline([make_thought("y" * 80, 1)]).splitlines()[-1]
        assert "y" * 57 + "..." in line
        assert "y" * 58 not in line


class TestPromptViews:
    """Tests for alignment and progress views."""

    def test_alignment_without_profile(self) -> None:
        """Test the placeholder when the session has no profile."""
        assert "(No prompt metadata available)" in render_alignment_view([], None)
        assert "(No prompt metadata available)" in render_progress_view([], None)

    def test_alignment_groups(self, profile: PromptProfile) -> None:
        """Test thoughts are grouped by score band with metrics."""
        thoughts = [
            make_thought("Good", 1, alignment_score=8),
            make_thought("Okay", 2, alignment_score=5),
            make_thought("Poor", 3, alignment_score=2, drift_warning="Drifting"),
        ]
        text = render_alignment_view(thoughts, profile)

        assert "  1. Ship the parser" in text
        assert "  High Alignment:\n    T1 - Good [8/10]" in text
        assert "  Medium Alignment:\n    T2 - Okay [5/10]" in text
        assert "  Low Alignment:\n    T3 - Poor [2/10]\n      ⚠️ Drifting" in text
        assert "  Average Alignment: 5.0/10" in text
        assert "  Alignment Trend: ↘️ Declining" in text
        assert "  High Alignment Thoughts: 1/3" in text

    def test_progress_view(self, profile: PromptProfile) -> None:
        """Test goal bars and relevant thought lists."""
        thoughts = [
            make_thought("a", 1, relevance_by_aspect={"goal_0": 0.9}),
            make_thought("b", 2, relevance_by_aspect={"goal_0": 0.2}),
        ]
        text = render_progress_view(thoughts, profile)

        assert "  Goal 1: Ship the parser" in text
        assert "    [██████░░░░░░░░░░░░░░] 33%" in text
        assert "    Relevant thoughts: T1" in text
        assert "Estimated thoughts to completion:" in text

    def test_progress_view_no_relevant(self, profile: PromptProfile) -> None:
        """Test the placeholder for goals nobody addressed."""
        text = render_progress_view([make_thought("a", 1)], profile)
        assert "No thoughts directly addressing this goal yet" in text
