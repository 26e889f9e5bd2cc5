"""Contradiction detection between thoughts and against the prompt."""

from __future__ import annotations

import re
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any, Literal

from src.tools.similarity import SimilarityEngine
from src.tools.thought_types import (
    Classification,
    ContradictionDetail,
    Phase,
    PromptProfile,
    Thought,
)

OPPOSING_CLASSIFICATIONS: frozenset[frozenset[Classification]] = frozenset(
    {
        frozenset({Classification.HYPOTHESIS, Classification.CONCLUSION}),
        frozenset({Classification.QUESTION, Classification.SOLUTION}),
        frozenset({Classification.OBSERVATION, Classification.CONCLUSION}),
    }
)

CONCLUSION_NEGATIONS = frozenset({"not", "never", "no", "cannot", "don't", "doesn't"})
PROMPT_NEGATIONS = CONCLUSION_NEGATIONS | frozenset({"won't", "shouldn't"})

ANTONYM_PAIRS: tuple[tuple[str, str], ...] = (
    ("increase", "decrease"),
    ("more", "less"),
    ("high", "low"),
    ("good", "bad"),
    ("positive", "negative"),
    ("include", "exclude"),
    ("allow", "prevent"),
    ("enable", "disable"),
    ("start", "stop"),
    ("begin", "end"),
    ("create", "destroy"),
    ("add", "remove"),
    ("accept", "reject"),
)

NEGATION_WINDOW = 3
MIN_CLAUSE_LENGTH = 4
CONSISTENCY_THRESHOLD = 0.7

_CLAUSE_SPLIT = re.compile(r"[,.]")

ElementKind = Literal["goal", "constraint", "domain"]


@dataclass(frozen=True)
class PromptContradiction:
    """A thought statement that conflicts with one prompt element."""

    kind: ElementKind
    element: str
    explanation: str

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.kind, "element": self.element, "explanation": self.explanation}


@dataclass(frozen=True)
class PromptContradictionReport:
    details: tuple[PromptContradiction, ...] = ()
    resolution_strategies: tuple[str, ...] = ()

    @property
    def has_contradictions(self) -> bool:
        return bool(self.details)

    def to_dict(self) -> dict[str, Any]:
        return {
            "hasContradictions": self.has_contradictions,
            "details": [d.to_dict() for d in self.details],
            "resolutionStrategies": list(self.resolution_strategies),
        }


@dataclass(frozen=True)
class AssumptionConflict:
    thought_number: int
    conflicting_assumptions: tuple[str, ...]

    def to_dict(self) -> dict[str, Any]:
        return {
            "thoughtNumber": self.thought_number,
            "conflictingAssumptions": list(self.conflicting_assumptions),
        }


@dataclass
class ConsistencyReport:
    """Prompt consistency across a whole thought sequence."""

    overall_consistency: float = 1.0
    inconsistent_thoughts: list[tuple[int, str]] = field(default_factory=list)
    consistency_trend: Literal["improving", "declining", "stable"] = "stable"
    recommendations: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "overallConsistency": self.overall_consistency,
            "inconsistentThoughts": [
                {"thoughtNumber": number, "inconsistencyReason": reason}
                for number, reason in self.inconsistent_thoughts
            ],
            "consistencyTrend": self.consistency_trend,
            "recommendations": list(self.recommendations),
        }


def _contains_negation(text: str, negations: frozenset[str]) -> bool:
    return any(word in negations for word in text.lower().split(" "))


def assumptions_conflict(first: str, second: str) -> bool:
    """True when exactly one side is ``"not " + X`` and the other is X."""
    negated_first = first.lower().startswith("not ")
    negated_second = second.lower().startswith("not ")
    base_first = first[4:] if negated_first else first
    base_second = second[4:] if negated_second else second
    return base_first.lower() == base_second.lower() and negated_first != negated_second


def contains_contradictory_statement(text: str, phrase: str) -> bool:
    """Antonym of a phrase term in the text, about a shared subject word."""
    phrase_words = phrase.split()
    text_words = text.split()
    for term1, term2 in ANTONYM_PAIRS:
        for expected, opposite in ((term1, term2), (term2, term1)):
            if expected in phrase and opposite in text:
                shared = [
                    word
                    for word in phrase_words
                    if len(word) > 3 and word in text_words and word not in (term1, term2)
                ]
                if shared:
                    return True
    return False


def detect_prompt_element_contradiction(thought_text: str, element: str) -> str | None:
    """Explanation if the thought negates or contradicts a goal or constraint."""
    thought = thought_text.lower()
    clauses = [c.strip() for c in _CLAUSE_SPLIT.split(element.lower()) if c.strip()]

    for clause in clauses:
        if len(clause) < MIN_CLAUSE_LENGTH:
            continue

        if clause in thought:
            words = thought.split()
            lead = clause.split()[0]
            index = next((i for i, word in enumerate(words) if lead in word), -1)
            if index >= 0:
                window = words[max(0, index - NEGATION_WINDOW) : index]
                if any(word in PROMPT_NEGATIONS for word in window):
                    return f'Thought negates the prompt element: "{clause}"'

        if contains_contradictory_statement(thought, clause):
            return f'Thought contains a statement contradicting: "{clause}"'

    return None


def resolution_strategies(
    contradictions: Sequence[PromptContradiction], phase: Phase
) -> list[str]:
    if not contradictions:
        return []

    strategies: list[str] = []
    for item in contradictions:
        if item.kind == "goal":
            strategies.append(f'Revise thought to align with the goal: "{item.element}"')
            strategies.append(
                "Consider how to achieve the goal while maintaining your current approach"
            )
        elif item.kind == "constraint":
            strategies.append(f'Modify approach to respect the constraint: "{item.element}"')
            strategies.append("Find alternative solutions that don't violate this constraint")
        else:
            strategies.append(f'Incorporate knowledge from the domain: "{item.element}"')

    strategies.append("Review the original prompt to ensure alignment with all requirements")

    if phase == Phase.PLANNING:
        strategies.append("Adjust your planning to incorporate the prompt requirements")
    elif phase == Phase.EXECUTION:
        strategies.append("Modify your implementation approach to resolve these contradictions")
    elif phase == Phase.VERIFICATION:
        strategies.append("Verify your solution against all prompt requirements")

    return list(dict.fromkeys(strategies))


def _containment_ratio(text: str, items: Sequence[str]) -> float:
    matches = sum(1 for item in items if item.lower() in text)
    return matches / max(1, len(items))


def prompt_containment_score(thought: Thought, profile: PromptProfile) -> float:
    """Share of goals, constraints and domains quoted verbatim, weighted 0.5/0.3/0.2."""
    text = thought.text.lower()
    return (
        _containment_ratio(text, profile.goals) * 0.5
        + _containment_ratio(text, profile.constraints) * 0.3
        + _containment_ratio(text, profile.domains) * 0.2
    )


class ContradictionEngine:
    """Finds contradictions among thoughts and between a thought and the prompt.

    Pairwise checks are limited to thoughts at least moderately similar to
    each other. Revisions never take part, as subject or target.
    """

    def __init__(
        self,
        similarity: SimilarityEngine | None = None,
        similarity_threshold: float = 0.5,
    ) -> None:
        self.similarity = similarity or SimilarityEngine()
        self.similarity_threshold = similarity_threshold

    def detect_contradiction(self, first: Thought, second: Thought) -> str | None:
        if self.similarity.similarity(first, second) <= self.similarity_threshold:
            return None

        if first.classification is not None and second.classification is not None:
            if frozenset({first.classification, second.classification}) in OPPOSING_CLASSIFICATIONS:
                return (
                    f"Opposing classifications: {first.classification.value} "
                    f"vs {second.classification.value}"
                )

        if (
            first.classification == Classification.CONCLUSION
            and second.classification == Classification.CONCLUSION
            and _contains_negation(first.text, CONCLUSION_NEGATIONS)
            != _contains_negation(second.text, CONCLUSION_NEGATIONS)
        ):
            return "Conflicting conclusions detected"

        conflicts = [
            assumption
            for assumption in first.assumptions
            if any(assumptions_conflict(assumption, other) for other in second.assumptions)
        ]
        if conflicts:
            return f"Conflicting assumptions: {', '.join(conflicts)}"

        return None

    def check_contradictions(
        self, new_thought: Thought, existing: Sequence[Thought]
    ) -> list[ContradictionDetail]:
        if new_thought.is_revision:
            return []

        details: list[ContradictionDetail] = []
        for other in existing:
            if other.is_revision or other.thought_number == new_thought.thought_number:
                continue
            explanation = self.detect_contradiction(new_thought, other)
            if explanation:
                details.append(ContradictionDetail(other.thought_number, explanation))
        return details

    def find_conflicting_assumptions(
        self, thought: Thought, others: Sequence[Thought]
    ) -> list[str]:
        conflicts: list[str] = []
        for assumption in thought.assumptions:
            for other in others:
                for other_assumption in other.assumptions:
                    if assumptions_conflict(assumption, other_assumption):
                        conflicts.append(
                            f'"{assumption}" conflicts with "{other_assumption}" '
                            f"in thought {other.thought_number}"
                        )
        return conflicts

    def analyze_assumption_contradictions(
        self, thoughts: Sequence[Thought]
    ) -> list[AssumptionConflict]:
        result: list[AssumptionConflict] = []
        for thought in thoughts:
            if not thought.assumptions:
                continue
            others = [t for t in thoughts if t.thought_number != thought.thought_number]
            conflicts = self.find_conflicting_assumptions(thought, others)
            if conflicts:
                result.append(AssumptionConflict(thought.thought_number, tuple(conflicts)))
        return result

    def check_prompt_contradictions(
        self, thought: Thought, profile: PromptProfile
    ) -> PromptContradictionReport:
        details: list[PromptContradiction] = []
        sections: tuple[tuple[ElementKind, tuple[str, ...]], ...] = (
            ("goal", profile.goals),
            ("constraint", profile.constraints),
        )
        for kind, elements in sections:
            for element in elements:
                explanation = detect_prompt_element_contradiction(thought.text, element)
                if explanation:
                    details.append(PromptContradiction(kind, element, explanation))

        return PromptContradictionReport(
            details=tuple(details),
            resolution_strategies=tuple(resolution_strategies(details, thought.phase)),
        )

    def analyze_prompt_consistency(
        self, thoughts: Sequence[Thought], profile: PromptProfile
    ) -> ConsistencyReport:
        scores: list[tuple[int, float, str | None]] = []
        for thought in thoughts:
            report = self.check_prompt_contradictions(thought, profile)
            score = max(0.0, 1 - len(report.details) * 0.2) * prompt_containment_score(
                thought, profile
            )
            reason = (
                report.details[0].explanation
                if score < CONSISTENCY_THRESHOLD and report.details
                else None
            )
            scores.append((thought.thought_number, score, reason))

        overall = sum(score for _, score, _ in scores) / max(1, len(scores))
        inconsistent = [
            (number, reason)
            for number, score, reason in scores
            if score < CONSISTENCY_THRESHOLD and reason
        ]

        trend: Literal["improving", "declining", "stable"] = "stable"
        if len(scores) >= 3:
            middle = len(scores) // 2
            first_half = [score for _, score, _ in scores[:middle]]
            second_half = [score for _, score, _ in scores[middle:]]
            first_avg = sum(first_half) / len(first_half)
            second_avg = sum(second_half) / len(second_half)
            if second_avg > first_avg + 0.1:
                trend = "improving"
            elif first_avg > second_avg + 0.1:
                trend = "declining"

        return ConsistencyReport(
            overall_consistency=overall,
            inconsistent_thoughts=inconsistent,
            consistency_trend=trend,
            recommendations=self._consistency_recommendations(inconsistent, trend, profile),
        )

    def _consistency_recommendations(
        self,
        inconsistent: Sequence[tuple[int, str]],
        trend: str,
        profile: PromptProfile,
    ) -> list[str]:
        recommendations: list[str] = []
        if inconsistent:
            numbers = ", ".join(str(number) for number, _ in inconsistent)
            recommendations.append(f"Revise thoughts {numbers} to align with prompt requirements")

            groups: dict[str, list[int]] = {}
            for number, reason in inconsistent:
                groups.setdefault(reason, []).append(number)
            for reason, members in groups.items():
                joined = ", ".join(str(n) for n in members)
                if "negates" in reason:
                    recommendations.append(
                        f"Thoughts {joined} contradict prompt requirements - "
                        "consider alternative approaches"
                    )
                elif "contradicting" in reason:
                    recommendations.append(
                        f"Thoughts {joined} contain statements that conflict with prompt goals"
                    )

        if trend == "declining":
            recommendations.append(
                "Recent thoughts are becoming less aligned with the prompt - "
                "refocus on the original requirements"
            )
        elif trend == "improving":
            recommendations.append(
                "Continue the improving trend of prompt alignment in future thoughts"
            )

        recommendations.append(
            f"Ensure all thoughts address the primary goals: {', '.join(profile.goals[:3])}"
        )
        if profile.constraints:
            recommendations.append(
                f"Maintain awareness of key constraints: {', '.join(profile.constraints[:3])}"
            )
        return recommendations
