"""Tests for src/tools/progress.py."""

from __future__ import annotations

import pytest

from src.tools.progress import (
    alignment_trend,
    estimate_remaining_thoughts,
    goal_coverage,
    overall_progress,
    prompt_progress,
)
from src.tools.thought_types import ComplexityLevel, PromptProfile
from tests.conftest import make_thought


@pytest.fixture
def profile() -> PromptProfile:
    return PromptProfile(original_prompt="Ship the parser.", goals=("Ship the parser",))


class TestTrend:
    """Tests for the alignment trend."""

    @pytest.mark.parametrize(
        ("scores", "expected"),
        [
            ([5, 6], "Insufficient data"),
            ([3, 5, 7], "Improving"),
            ([7, 5, 3], "Declining"),
            ([5, 5, 6], "Stable"),
            ([1, 9, 9, 9, 9, 2], "Declining"),
        ],
    )
    def test_trend(self, scores: list[int], expected: str) -> None:
        """Test the last five scores decide the trend."""
        thoughts = [
            make_thought(f"T{i}", i, alignment_score=score) for i, score in enumerate(scores, 1)
        ]
        assert alignment_trend(thoughts) == expected


class TestCoverage:
    """Tests for per-goal coverage."""

    def test_partial_coverage(self, profile: PromptProfile) -> None:
        """Test two relevant thoughts of a three-thought target give 67%."""
        thoughts = [
            make_thought("a", 1, relevance_by_aspect={"goal_0": 0.9}),
            make_thought("b", 2, relevance_by_aspect={"goal_0": 0.8}),
            make_thought("c", 3, relevance_by_aspect={"goal_0": 0.5}),
        ]
        assert goal_coverage(thoughts, profile) == {"goal_0": 67}

    def test_capped_at_hundred(self) -> None:
        """Test coverage never exceeds 100."""
        profile = PromptProfile(
            original_prompt="x", goals=("x",), complexity=ComplexityLevel.SIMPLE
        )
        thoughts = [make_thought("a", i, relevance_by_aspect={"goal_0": 1.0}) for i in (1, 2, 3, 4)]
        assert goal_coverage(thoughts, profile) == {"goal_0": 100}


class TestOverall:
    """Tests for overall progress and remaining-thought estimates."""

    def test_empty(self, profile: PromptProfile) -> None:
        """Test an empty session has no progress."""
        assert overall_progress([], profile) == 0
        assert estimate_remaining_thoughts([], profile) == 0

    def test_single_thought(self, profile: PromptProfile) -> None:
        """Test 20% position, neutral alignment and execution phase."""
        thoughts = [make_thought("Start", 1)]
        # 20 * 0.3 + 50 * 0.3 + 0 * 0.3 + 50 * 0.1
        assert overall_progress(thoughts, profile) == 26
        # ceil(100 / 26) - 1
        assert estimate_remaining_thoughts(thoughts, profile) == 3

    def test_prompt_progress_dict(self, profile: PromptProfile) -> None:
        """Test the wire form keys."""
        data = prompt_progress([make_thought("Start", 1)], profile).to_dict()
        assert data == {
            "overallProgress": 26,
            "estimatedRemainingThoughts": 3,
            "goalCoverage": {"goal_0": 0},
            "alignmentTrend": "Insufficient data",
        }
