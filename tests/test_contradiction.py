"""Tests for src/tools/contradiction.py."""

from __future__ import annotations

import pytest

from src.tools.contradiction import (
    ContradictionEngine,
    assumptions_conflict,
    contains_contradictory_statement,
    detect_prompt_element_contradiction,
    prompt_containment_score,
    resolution_strategies,
)
from src.tools.thought_types import Classification, Phase, PromptProfile
from tests.conftest import make_thought

CACHE_IMPROVES = "The cache layer improves read latency for user profile requests"
CACHE_DOES_NOT = "The cache layer does not improve read latency for user profile requests"


@pytest.fixture
def engine() -> ContradictionEngine:
    return ContradictionEngine()


@pytest.fixture
def profile() -> PromptProfile:
    return PromptProfile(
        original_prompt="Reduce memory use. Increase the cache hit rate.",
        goals=("Reduce memory use",),
        constraints=("Increase the cache hit rate",),
    )


class TestPairwise:
    """Tests for contradictions between two thoughts."""

    def test_conflicting_conclusions(self, engine: ContradictionEngine) -> None:
        """Test a negated conclusion about the same subject is flagged."""
        first = make_thought(CACHE_IMPROVES, 1, classification=Classification.CONCLUSION)
        second = make_thought(CACHE_DOES_NOT, 2, classification=Classification.CONCLUSION)

        details = engine.check_contradictions(second, [first])

        assert len(details) == 1
        assert details[0].thought_number == 1
        assert details[0].explanation == "Conflicting conclusions detected"

    def test_opposing_classifications(self, engine: ContradictionEngine) -> None:
        """Test opposing classifications are reported new thought first."""
        first = make_thought(CACHE_IMPROVES, 1, classification=Classification.HYPOTHESIS)
        second = make_thought(CACHE_IMPROVES, 2, classification=Classification.CONCLUSION)

        details = engine.check_contradictions(second, [first])

        assert [d.explanation for d in details] == [
            "Opposing classifications: conclusion vs hypothesis"
        ]

    def test_conflicting_assumptions(self, engine: ContradictionEngine) -> None:
        """Test an assumption and its negation conflict."""
        first = make_thought(CACHE_IMPROVES, 1, assumptions=("the queue is durable",))
        second = make_thought(CACHE_IMPROVES, 2, assumptions=("not the queue is durable",))

        details = engine.check_contradictions(second, [first])

        assert [d.explanation for d in details] == [
            "Conflicting assumptions: not the queue is durable"
        ]

    def test_dissimilar_thoughts_never_contradict(self, engine: ContradictionEngine) -> None:
        """Test pairs below the similarity threshold are skipped."""
        first = make_thought(
            "Bananas ripen faster beside apples", 1, classification=Classification.HYPOTHESIS
        )
        second = make_thought(
            "Kernel schedulers balance runqueues", 2, classification=Classification.CONCLUSION
        )
        assert engine.check_contradictions(second, [first]) == []

    def test_revisions_skipped(self, engine: ContradictionEngine) -> None:
        """Test revisions never take part as subject or target."""
        first = make_thought(CACHE_IMPROVES, 1, classification=Classification.CONCLUSION)
        revision = make_thought(
            CACHE_DOES_NOT,
            2,
            classification=Classification.CONCLUSION,
            is_revision=True,
            revises_thought=1,
        )
        third = make_thought(CACHE_DOES_NOT, 3, classification=Classification.CONCLUSION)

        assert engine.check_contradictions(revision, [first]) == []
        details = engine.check_contradictions(third, [revision, first])
        assert [d.thought_number for d in details] == [1]

    def test_assumptions_conflict_rules(self) -> None:
        """Test exactly one side must carry the negation."""
        assert assumptions_conflict("not the api is stable", "The API is stable")
        assert not assumptions_conflict("not a", "not a")
        assert not assumptions_conflict("a", "b")


class TestAssumptionAnalysis:
    """Tests for session-wide assumption conflicts."""

    def test_both_sides_reported(self, engine: ContradictionEngine) -> None:
        """Test each thought in a conflicting pair gets an entry."""
        thoughts = [
            make_thought("One", 1, assumptions=("the api is stable",)),
            make_thought("Two", 2, assumptions=("not the api is stable",)),
            make_thought("Three", 3),
        ]
        conflicts = engine.analyze_assumption_contradictions(thoughts)

        assert [c.thought_number for c in conflicts] == [1, 2]
        assert conflicts[0].conflicting_assumptions == (
            '"the api is stable" conflicts with "not the api is stable" in thought 2',
        )


class TestPromptContradictions:
    """Tests for thought-versus-prompt contradictions."""

    def test_negated_goal(self) -> None:
        """Test a negation shortly before the goal clause is detected."""
        explanation = detect_prompt_element_contradiction(
            "We should not reduce memory use yet", "Reduce memory use"
        )
        assert explanation == 'Thought negates the prompt element: "reduce memory use"'

    def test_antonym_statement(self) -> None:
        """Test an antonym about a shared subject word is detected."""
        assert contains_contradictory_statement(
            "this change would decrease the cache hit rate", "increase the cache hit rate"
        )
        assert not contains_contradictory_statement(
            "this change would decrease latency", "increase the cache hit rate"
        )

    def test_short_clauses_ignored(self) -> None:
        """Test clauses shorter than four characters are skipped."""
        assert detect_prompt_element_contradiction("not go", "go") is None

    def test_report(self, engine: ContradictionEngine, profile: PromptProfile) -> None:
        """Test the report lists details and resolution strategies."""
        thought = make_thought("This would decrease the cache hit rate", 2)

        report = engine.check_prompt_contradictions(thought, profile)

        assert report.has_contradictions
        assert [d.kind for d in report.details] == ["constraint"]
        assert report.resolution_strategies[0] == (
            'Modify approach to respect the constraint: "Increase the cache hit rate"'
        )
        assert (
            "Modify your implementation approach to resolve these contradictions"
            in report.resolution_strategies
        )

    def test_clean_thought(self, engine: ContradictionEngine, profile: PromptProfile) -> None:
        """Test an aligned thought yields no contradictions or strategies."""
        report = engine.check_prompt_contradictions(
            make_thought("Reduce memory use by streaming rows", 2), profile
        )
        assert not report.has_contradictions
        assert report.resolution_strategies == ()

    def test_resolution_strategies_empty(self) -> None:
        """Test no contradictions give no strategies."""
        assert resolution_strategies([], Phase.PLANNING) == []


class TestConsistency:
    """Tests for prompt consistency across the session."""

    def test_containment_score(self, profile: PromptProfile) -> None:
        """Test verbatim goals and constraints weigh 0.5 and 0.3."""
        thought = make_thought("Reduce memory use and increase the cache hit rate", 1)
        assert prompt_containment_score(thought, profile) == pytest.approx(0.8)

    def test_inconsistent_thought_listed(
        self, engine: ContradictionEngine, profile: PromptProfile
    ) -> None:
        """Test a thought negating a goal is listed with its reason."""
        thoughts = [make_thought("We will not reduce memory use", 1)]

        report = engine.analyze_prompt_consistency(thoughts, profile)

        assert report.inconsistent_thoughts == [
            (1, 'Thought negates the prompt element: "reduce memory use"')
        ]
        assert report.recommendations[0] == "Revise thoughts 1 to align with prompt requirements"
        assert report.consistency_trend == "stable"

    def test_empty_session(self, engine: ContradictionEngine, profile: PromptProfile) -> None:
        """Test an empty session still names the primary goals."""
        report = engine.analyze_prompt_consistency([], profile)
        assert report.overall_consistency == 0.0
        assert "Ensure all thoughts address the primary goals: Reduce memory use" in (
            report.recommendations
        )
