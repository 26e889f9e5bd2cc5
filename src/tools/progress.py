"""Progress toward the prompt's goals across the whole session."""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from src.tools.alignment import round_half_up
from src.tools.thought_types import ComplexityLevel, Phase, PromptProfile, Thought

# Thoughts expected to cover one goal, by prompt complexity
COVERAGE_TARGET: dict[ComplexityLevel, int] = {
    ComplexityLevel.SIMPLE: 3,
    ComplexityLevel.MEDIUM: 5,
    ComplexityLevel.COMPLEX: 8,
}

PHASE_WEIGHTS: dict[Phase, float] = {
    Phase.PLANNING: 0.1,
    Phase.ANALYSIS: 0.3,
    Phase.EXECUTION: 0.5,
    Phase.VERIFICATION: 0.9,
}

DEFAULT_REMAINING: dict[ComplexityLevel, int] = {
    ComplexityLevel.SIMPLE: 5,
    ComplexityLevel.MEDIUM: 8,
    ComplexityLevel.COMPLEX: 12,
}

GOAL_RELEVANCE_THRESHOLD = 0.5
TREND_WINDOW = 5


@dataclass(frozen=True)
class PromptProgress:
    overall_progress: int
    estimated_remaining_thoughts: int
    goal_coverage: dict[str, int]
    alignment_trend: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "overallProgress": self.overall_progress,
            "estimatedRemainingThoughts": self.estimated_remaining_thoughts,
            "goalCoverage": dict(self.goal_coverage),
            "alignmentTrend": self.alignment_trend,
        }


def _latest(thoughts: Sequence[Thought]) -> Thought:
    return max(thoughts, key=lambda t: t.thought_number)


def goal_coverage(thoughts: Sequence[Thought], profile: PromptProfile) -> dict[str, int]:
    """Percent coverage per goal, keyed ``goal_<i>``.

    A goal is covered by thoughts whose per-goal relevance exceeds 0.5,
    measured against a complexity-dependent target count.
    """
    target = COVERAGE_TARGET[profile.complexity]
    coverage: dict[str, int] = {}
    for index in range(len(profile.goals)):
        key = f"goal_{index}"
        relevant = sum(
            1
            for t in thoughts
            if t.relevance_by_aspect.get(key, 0.0) > GOAL_RELEVANCE_THRESHOLD
        )
        coverage[key] = min(100, round_half_up(relevant / target * 100))
    return coverage


def alignment_trend(thoughts: Sequence[Thought]) -> str:
    scored = sorted(
        ((t.thought_number, t.alignment_score) for t in thoughts if t.alignment_score is not None),
        key=lambda item: item[0],
    )
    if len(scored) < 3:
        return "Insufficient data"

    window = [score for _, score in scored[-TREND_WINDOW:]]
    difference = window[-1] - window[0]
    if difference > 1:
        return "Improving"
    if difference < -1:
        return "Declining"
    return "Stable"


def overall_progress(thoughts: Sequence[Thought], profile: PromptProfile) -> int:
    """0-100 blend of position, mean alignment, goal coverage and phase."""
    if not thoughts:
        return 0

    latest = _latest(thoughts)
    thought_progress = min(100.0, latest.thought_number / latest.total_thoughts * 100)

    scores = [t.alignment_score for t in thoughts if t.alignment_score is not None]
    average_alignment = sum(scores) / len(scores) if scores else 5.0

    coverage = goal_coverage(thoughts, profile)
    average_coverage = sum(coverage.values()) / max(1, len(coverage))

    phase_progress = PHASE_WEIGHTS.get(latest.phase, 0.5) * 100

    weighted = (
        thought_progress * 0.3
        + average_alignment * 10 * 0.3
        + average_coverage * 0.3
        + phase_progress * 0.1
    )
    return round_half_up(weighted)


def estimate_remaining_thoughts(thoughts: Sequence[Thought], profile: PromptProfile) -> int:
    if not thoughts:
        return 0

    progress = overall_progress(thoughts, profile)
    if progress < 10:
        return DEFAULT_REMAINING[profile.complexity]

    latest = _latest(thoughts)
    estimated_total = math.ceil(latest.thought_number * 100 / max(1, progress))
    return max(0, estimated_total - latest.thought_number)


def prompt_progress(thoughts: Sequence[Thought], profile: PromptProfile) -> PromptProgress:
    return PromptProgress(
        overall_progress=overall_progress(thoughts, profile),
        estimated_remaining_thoughts=estimate_remaining_thoughts(thoughts, profile),
        goal_coverage=goal_coverage(thoughts, profile),
        alignment_trend=alignment_trend(thoughts),
    )
