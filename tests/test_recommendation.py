"""Tests for src/tools/recommendation.py."""

from __future__ import annotations

import pytest

from src.tools.prompt_profiler import PromptProfiler
from src.tools.recommendation import (
    RecommendationEngine,
    analyze_patterns,
    entropy,
    estimate_complexity,
    pattern_evolution,
)
from src.tools.thought_types import ComplexityLevel, Phase, PromptProfile, TaskType
from tests.conftest import make_thought


@pytest.fixture
def engine() -> RecommendationEngine:
    return RecommendationEngine()


@pytest.fixture
def profile(sample_prompt: str) -> PromptProfile:
    return PromptProfiler().profile(sample_prompt)


class TestEntropy:
    """Tests for normalized entropy."""

    def test_uniform_is_one(self) -> None:
        """Test a uniform distribution scores 1.0."""
        assert entropy([0.5, 0.5]) == pytest.approx(1.0)
        assert entropy([0.25] * 4) == pytest.approx(1.0)

    def test_degenerate(self) -> None:
        """Test single values, zeros and empty input score 0."""
        assert entropy([1.0]) == 0.0
        assert entropy([0.0, 0.0]) == 0.0
        assert entropy([]) == 0.0


class TestComplexityEstimation:
    """Tests for dimensional complexity."""

    def test_urgent_technical_prompt(self, profile: PromptProfile) -> None:
        """Test each dimension and the scaled thought count."""
        estimation = estimate_complexity(profile)

        assert estimation.overall == ComplexityLevel.SIMPLE
        assert estimation.conceptual == 6.0
        assert estimation.procedural == 9.0
        assert estimation.contextual == 6.5
        assert estimation.domain == 5.0
        # 5 * (1 + (6.625 - 5) / 10) = 5.8125, rounded half-up
        assert estimation.recommended_thought_count == 6
        assert estimation.phase_distribution == {
            "Planning": 1,
            "Analysis": 1,
            "Execution": 3,
            "Verification": 1,
        }

    def test_bare_profile(self) -> None:
        """Test an empty profile still recommends at least one thought."""
        estimation = estimate_complexity(PromptProfile(original_prompt=""))
        assert estimation.recommended_thought_count >= 1
        assert 0.0 <= estimation.average <= 10.0

    def test_to_dict(self, profile: PromptProfile) -> None:
        """Test the wire form keys."""
        data = estimate_complexity(profile).to_dict()
        assert data["overallComplexity"] == "simple"
        assert set(data["dimensionalComplexity"]) == {
            "conceptual",
            "procedural",
            "contextual",
            "domain",
        }


class TestGenerate:
    """Tests for the recommendation bundle."""

    def test_bundle_limits(self, engine: RecommendationEngine, profile: PromptProfile) -> None:
        """Test capped lists and the default tool first."""
        bundle = engine.generate(profile, 1, 5, Phase.PLANNING)

        assert len(bundle.strategies) <= 3
        assert len(bundle.reasoning_types) <= 3
        assert len(bundle.metacognitive_strategies) <= 3
        assert len(bundle.insight_prompts) <= 3
        assert len(bundle.learning) <= 2
        assert bundle.tools[0] == "sequentialthinking"
        assert len(bundle.tools) == len(set(bundle.tools))

    def test_no_patterns_below_three_priors(
        self, engine: RecommendationEngine, profile: PromptProfile
    ) -> None:
        """Test pattern analysis needs three prior thoughts."""
        priors = [make_thought("One", 1), make_thought("Two", 2)]
        assert engine.generate(profile, 3, 5, prior_thoughts=priors).patterns is None

    def test_patterns_with_three_priors(
        self, engine: RecommendationEngine, profile: PromptProfile
    ) -> None:
        """Test pattern analysis appears once three priors exist."""
        priors = [make_thought(f"Step {i}", i) for i in (1, 2, 3)]
        bundle = engine.generate(profile, 4, 5, Phase.EXECUTION, prior_thoughts=priors)
        assert bundle.patterns is not None
        assert bundle.to_dict()["thoughtPatterns"]["patternEvolution"] == "stable"

    def test_focus_areas_by_progress(
        self, engine: RecommendationEngine, profile: PromptProfile
    ) -> None:
        """Test early, middle and late focus areas plus the key goal."""
        early = engine.focus_areas(profile, 1, 10)
        late = engine.focus_areas(profile, 9, 10)

        assert early[0] == "Ensure comprehensive understanding of the problem"
        assert "Ensure solution addresses highest priority aspects" in late
        assert late[-1] == f"Address the key goal: {profile.goals[0]}"

    def test_adaptive_suggestions_transition(
        self, engine: RecommendationEngine, profile: PromptProfile
    ) -> None:
        """Test a planning thought past 30% is told to move on."""
        suggestions = engine.adaptive_suggestions(profile, 4, 10, Phase.PLANNING)
        assert "Consider transitioning from planning to analysis phase" in suggestions
        assert "Consider both the implementation details and the user experience" in suggestions


class TestPatterns:
    """Tests for cross-thought pattern analysis."""

    def test_execution_only_session(self, profile: PromptProfile) -> None:
        """Test an execution-only session without tools shows three habits."""
        thoughts = [make_thought(f"Step {i}", i) for i in (1, 2, 3)]

        analysis = analyze_patterns(thoughts, profile)

        names = [p.name for p in analysis.dominant_patterns]
        assert names == ["Execution-Focused", "Verification-Light", "Tool-Avoidant"]
        # execution focus suits a simple prompt
        assert analysis.dominant_patterns[0].impact == "positive"

    def test_single_tool_dominant(self) -> None:
        """Test one heavily used tool is reported as dominant."""
        profile = PromptProfile(original_prompt="", task_type=TaskType.CREATIVE)
        thoughts = [make_thought(f"Step {i}", i, tools_used=("search",)) for i in (1, 2, 3)]
        names = [p.name for p in analyze_patterns(thoughts, profile).dominant_patterns]
        assert "Single-Tool-Dominant" in names

    def test_neutral_below_minimum(self, profile: PromptProfile) -> None:
        """Test fewer than three thoughts give the neutral analysis."""
        analysis = analyze_patterns([make_thought("One")], profile)
        assert analysis.dominant_patterns == ()
        assert analysis.diversity == 5.0

    def test_evolution_needs_five(self) -> None:
        """Test short sessions are always stable."""
        assert pattern_evolution([make_thought("One", 1)]) == "stable"
