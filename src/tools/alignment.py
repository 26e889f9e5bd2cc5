"""Prompt alignment scoring and topic drift detection.

Every function here takes a thought's text and the session's
``PromptProfile`` and never raises on odd input: empty goal, keyword or
domain lists resolve to neutral values instead.
"""

from __future__ import annotations

import math
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from src.tools.prompt_profiler import DOMAIN_KEYWORDS, keyword_words
from src.tools.text_features import (
    contains_aspect_contextually,
    contextual_aspect_relevance,
    extract_keywords,
    ngrams,
    phrase_relevance,
    tokenize,
)
from src.tools.thought_types import PromptProfile, TaskType

NEUTRAL_RELEVANCE = 0.5
PRIMARY_GOAL_COUNT = 3


@dataclass(frozen=True)
class DriftResult:
    """Outcome of a topic drift check."""

    has_drift: bool
    drift_score: float
    goal_relevance: float
    keyword_relevance: float
    domain_relevance: float
    keyword_overlap: float
    reason: str | None = None
    direction: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "hasDrift": self.has_drift,
            "driftScore": round(self.drift_score, 4),
            "driftReason": self.reason,
            "driftDirection": self.direction,
        }


@dataclass(frozen=True)
class RequirementComparison:
    """How well a thought covers the prompt's goals, constraints and domains."""

    overall_alignment: float
    goal_alignment: float
    constraint_alignment: float
    domain_alignment: float
    missing_aspects: tuple[str, ...] = ()
    suggested_additions: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "overallAlignment": round(self.overall_alignment, 4),
            "goalAlignment": round(self.goal_alignment, 4),
            "constraintAlignment": round(self.constraint_alignment, 4),
            "domainAlignment": round(self.domain_alignment, 4),
            "missingAspects": list(self.missing_aspects),
            "suggestedAdditions": list(self.suggested_additions),
        }


@dataclass(frozen=True)
class AlignmentReport:
    """Everything the store attaches to a thought about prompt alignment."""

    alignment_score: int
    relevance_by_aspect: Mapping[str, float]
    drift: DriftResult
    requirements: RequirementComparison
    drift_warning: str | None = None
    suggested_corrections: tuple[str, ...] = ()
    prompt_keywords: tuple[tuple[str, float], ...] = field(default_factory=tuple)


def round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def _goal_keyword_matches(thought_lower: str, goal: str) -> tuple[int, int]:
    keywords = keyword_words(goal)
    return sum(1 for keyword in keywords if keyword in thought_lower), len(keywords)


def alternative_domains(text: str, profile: PromptProfile) -> list[str]:
    """Table domains mentioned by the text that the prompt did not cover."""
    lowered = text.lower()
    return [
        domain
        for domain, keywords in DOMAIN_KEYWORDS.items()
        if domain not in profile.domains and any(keyword in lowered for keyword in keywords)
    ]


class AlignmentEngine:
    """Scores thoughts against a prompt profile.

    Args:
        drift_threshold: Drift scores strictly above this are flagged.
        presence_threshold: Contextual relevance above this counts as the
            aspect being present in the thought.

    """

    def __init__(self, drift_threshold: float = 0.55, presence_threshold: float = 0.65) -> None:
        self.drift_threshold = drift_threshold
        self.presence_threshold = presence_threshold

    def alignment_score(self, text: str, profile: PromptProfile) -> int:
        """0-10 blend of keyword overlap and best goal keyword coverage."""
        lowered = text.lower()
        keyword_matches = sum(1 for keyword in profile.keywords if keyword in lowered)
        score = (5 + min(10, keyword_matches * 2)) / 2

        goal_score = 0.0
        for goal in profile.goals:
            matches, total = _goal_keyword_matches(lowered, goal)
            coverage = matches / total if total else 0.0
            goal_score = max(goal_score, coverage * 10)

        score = (score + goal_score) / 2
        return max(0, min(10, round_half_up(score)))

    def relevance_by_aspect(self, text: str, profile: PromptProfile) -> dict[str, float]:
        """Aggregate and per-item relevance, each in [0, 1].

        ``goals``, ``constraints`` and ``domains`` hold the aggregate for
        the whole list (0.5 when the list is empty). Per-item keys are
        ``goal_<i>``, ``constraint_<i>`` and ``domain_<name>``.
        """
        relevance: dict[str, float] = {}
        for key, items in (
            ("goals", profile.goals),
            ("constraints", profile.constraints),
            ("domains", profile.domains),
        ):
            relevance[key] = (
                contextual_aspect_relevance(text, items) if items else NEUTRAL_RELEVANCE
            )

        for i, goal in enumerate(profile.goals):
            relevance[f"goal_{i}"] = contextual_aspect_relevance(text, [goal])
        for i, constraint in enumerate(profile.constraints):
            relevance[f"constraint_{i}"] = contextual_aspect_relevance(text, [constraint])
        for domain in profile.domains:
            relevance[f"domain_{domain}"] = contextual_aspect_relevance(text, [domain])
        return relevance

    def detect_drift(self, text: str, profile: PromptProfile) -> DriftResult:
        goal_relevance = contextual_aspect_relevance(text, profile.goals)
        keyword_relevance = contextual_aspect_relevance(text, profile.keywords)
        domain_relevance = contextual_aspect_relevance(text, profile.domains)

        thought_keywords = extract_keywords(text)
        if not profile.keywords:
            overlap = 1.0
        elif not thought_keywords:
            overlap = 0.0
        else:
            prompt_keywords = set(profile.keywords)
            shared = sum(1 for keyword in thought_keywords if keyword in prompt_keywords)
            overlap = shared / min(len(thought_keywords), len(prompt_keywords))

        drift_score = 1 - (
            goal_relevance * 0.4 + keyword_relevance * 0.3 + domain_relevance * 0.1 + overlap * 0.2
        )

        direction = None
        if drift_score > 0.4:
            others = alternative_domains(text, profile)
            if others:
                direction = f"Drifting toward: {', '.join(others)}"

        has_drift = drift_score > self.drift_threshold
        reason = None
        if has_drift:
            if goal_relevance < 0.4:
                reason = "Thought has low relevance to the prompt's main goals"
            elif keyword_relevance < 0.4:
                reason = "Thought uses terminology unrelated to the prompt's key concepts"
            elif overlap < 0.3:
                reason = "Few overlapping keywords with the prompt"
            elif domain_relevance < 0.3:
                reason = "Thought appears to address a different knowledge domain"
            else:
                reason = "Thought is diverging from the prompt's intended direction"

        return DriftResult(
            has_drift=has_drift,
            drift_score=drift_score,
            goal_relevance=goal_relevance,
            keyword_relevance=keyword_relevance,
            domain_relevance=domain_relevance,
            keyword_overlap=overlap,
            reason=reason,
            direction=direction,
        )

    def is_important_aspect(self, aspect: str, profile: PromptProfile) -> bool:
        """A keyword match, one of the first three goals, or mentions an entity."""
        if any(
            keyword in aspect or aspect in keyword or phrase_relevance(keyword, aspect) > 0.8
            for keyword in profile.keywords
        ):
            return True
        if aspect in profile.goals[:PRIMARY_GOAL_COUNT]:
            return True
        return any(
            entity in aspect or phrase_relevance(entity, aspect) > 0.9
            for entity in profile.entities
        )

    def _missing(self, text: str, aspects: Sequence[str], profile: PromptProfile) -> list[str]:
        return [
            aspect
            for aspect in aspects
            if not contains_aspect_contextually(text, aspect, self.presence_threshold)
            and self.is_important_aspect(aspect, profile)
        ]

    def compare_to_requirements(self, text: str, profile: PromptProfile) -> RequirementComparison:
        goal_alignment = contextual_aspect_relevance(text, profile.goals)
        constraint_alignment = contextual_aspect_relevance(text, profile.constraints)
        domain_alignment = contextual_aspect_relevance(text, profile.domains)

        goal_weight, constraint_weight, domain_weight = 0.5, 0.3, 0.2
        if profile.task_type == TaskType.TECHNICAL:
            goal_weight, constraint_weight, domain_weight = 0.4, 0.4, 0.2
        elif profile.task_type == TaskType.CREATIVE:
            goal_weight, constraint_weight, domain_weight = 0.6, 0.2, 0.2

        overall = (
            goal_alignment * goal_weight
            + constraint_alignment * constraint_weight
            + domain_alignment * domain_weight
        )

        missing_goals = self._missing(text, profile.goals, profile)
        missing_constraints = self._missing(text, profile.constraints, profile)

        missing_aspects: list[str] = []
        suggestions: list[str] = []
        if missing_goals:
            missing_aspects.append(f"Missing goals: {', '.join(missing_goals)}")
            suggestions.append(f"Consider addressing these goals: {', '.join(missing_goals)}")
        if missing_constraints:
            missing_aspects.append(f"Missing constraints: {', '.join(missing_constraints)}")
            suggestions.append(
                f"Make sure to observe these constraints: {', '.join(missing_constraints)}"
            )
        if domain_alignment < 0.4 and profile.domains:
            domains = ", ".join(profile.domains)
            suggestions.append(f"Consider using more terminology from: {domains}")

        return RequirementComparison(
            overall_alignment=overall,
            goal_alignment=goal_alignment,
            constraint_alignment=constraint_alignment,
            domain_alignment=domain_alignment,
            missing_aspects=tuple(missing_aspects),
            suggested_additions=tuple(suggestions),
        )

    def prompt_specific_keywords(
        self, text: str, profile: PromptProfile, limit: int = 15
    ) -> list[tuple[str, float]]:
        """Phrases from the thought that echo the prompt's keywords."""
        if not profile.keywords:
            return []

        best: dict[str, float] = {}
        for phrase in ngrams(tokenize(text)):
            if phrase in profile.keywords:
                relevance = 1.0
            else:
                relevance = max(phrase_relevance(phrase, keyword) for keyword in profile.keywords)
            if relevance > 0.25 and relevance > best.get(phrase, 0.0):
                best[phrase] = relevance

        ranked = sorted(best.items(), key=lambda item: item[1], reverse=True)
        return ranked[:limit]

    def _corrections(
        self, text: str, profile: PromptProfile, requirements: RequirementComparison
    ) -> list[str]:
        lowered = text.lower()
        corrections: list[str] = []
        for goal in profile.goals:
            matches, total = _goal_keyword_matches(lowered, goal)
            if matches < total * 0.3:
                corrections.append(f'Consider addressing the goal: "{goal}"')
        for suggestion in requirements.suggested_additions:
            if suggestion not in corrections:
                corrections.append(suggestion)
        return corrections or ["Try to align more closely with the original prompt goals"]

    def analyze(self, text: str, profile: PromptProfile) -> AlignmentReport:
        """Full alignment pass for one thought."""
        score = self.alignment_score(text, profile)
        relevance = self.relevance_by_aspect(text, profile)
        drift = self.detect_drift(text, profile)
        requirements = self.compare_to_requirements(text, profile)

        warning = None
        corrections: tuple[str, ...] = ()
        if drift.has_drift:
            warning = f"{drift.reason} (alignment score: {score}/10)"
            if drift.direction:
                warning = f"{warning}. {drift.direction}"
            corrections = tuple(self._corrections(text, profile, requirements))

        return AlignmentReport(
            alignment_score=score,
            relevance_by_aspect=relevance,
            drift=drift,
            requirements=requirements,
            drift_warning=warning,
            suggested_corrections=corrections,
            prompt_keywords=tuple(self.prompt_specific_keywords(text, profile)),
        )
