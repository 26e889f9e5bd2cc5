"""Reflection prompts, assumption detection and corrective actions."""

from __future__ import annotations

import re
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

from src.tools.similarity import SimilarityEngine
from src.tools.thought_types import (
    Classification,
    ComplexityLevel,
    Phase,
    Priority,
    PromptProfile,
    TaskType,
    Thought,
)

ASSUMPTION_INDICATORS: tuple[str, ...] = (
    "assume",
    "assuming",
    "must be",
    "should be",
    "probably",
    "likely",
    "always",
    "never",
    "everyone",
    "nobody",
    "clearly",
    "obviously",
    "naturally",
    "of course",
)

_ASSUMPTION_LEAD = re.compile(
    r"^(assuming|we assume|it is assumed|clearly|obviously|naturally|of course|must be|should be)",
    re.IGNORECASE,
)
_RAW_SENTENCE_SPLIT = re.compile(r"[.!?]+")

IMPLICIT_ASSUMPTIONS: dict[Classification, str] = {
    Classification.HYPOTHESIS: "The variables being considered are the most relevant ones",
    Classification.OBSERVATION: "The observation is representative of the general case",
    Classification.CONCLUSION: "The available evidence is sufficient for this conclusion",
    Classification.QUESTION: "This question addresses a significant aspect of the problem",
    Classification.SOLUTION: "The solution is feasible to implement",
}

PHASE_PROMPTS: dict[Phase, tuple[str, ...]] = {
    Phase.PLANNING: (
        "What potential obstacles have been considered?",
        "Are there any missing steps in the plan?",
        "How flexible is this plan to changes?",
    ),
    Phase.ANALYSIS: (
        "What other angles of analysis could be explored?",
        "Are there any hidden patterns or relationships?",
        "What methods of analysis might yield different insights?",
    ),
    Phase.EXECUTION: (
        "What risks or challenges might arise during execution?",
        "Are there alternative approaches to implementation?",
        "How can the execution be optimized?",
    ),
    Phase.VERIFICATION: (
        "What criteria are being used for verification?",
        "How comprehensive is the verification process?",
        "What edge cases should be considered?",
    ),
}

CLASSIFICATION_PROMPTS: dict[Classification, tuple[str, ...]] = {
    Classification.HYPOTHESIS: (
        "What evidence would support or refute this hypothesis?",
        "What alternative hypotheses should be considered?",
    ),
    Classification.OBSERVATION: (
        "What factors might influence this observation?",
        "How reliable is this observation?",
    ),
    Classification.CONCLUSION: (
        "What assumptions led to this conclusion?",
        "How strong is the evidence supporting this conclusion?",
    ),
    Classification.QUESTION: (
        "What assumptions underlie this question?",
        "Are there related questions to consider?",
    ),
    Classification.SOLUTION: (
        "What are the limitations of this solution?",
        "How might this solution be improved?",
    ),
}

TASK_TYPE_PROMPTS: dict[TaskType, tuple[str, ...]] = {
    TaskType.ANALYTICAL: (
        "Is the analysis sufficiently rigorous?",
        "Have alternative explanations been considered?",
        "What additional data would strengthen this analysis?",
    ),
    TaskType.CREATIVE: (
        "How original is this idea?",
        "What makes this approach innovative?",
        "How could this idea be made more unique or impactful?",
    ),
    TaskType.TECHNICAL: (
        "Is this solution technically sound?",
        "What edge cases need to be considered?",
        "How could this be implemented more efficiently?",
    ),
    TaskType.INFORMATIONAL: (
        "Is this information accurate and complete?",
        "Is the information presented clearly?",
        "What additional context would be helpful?",
    ),
    TaskType.MIXED: (
        "Does this balance analytical rigor with creative thinking?",
        "Are both practical and theoretical aspects addressed?",
        "How could this be more comprehensive?",
    ),
}

COMPLEXITY_PROMPTS: dict[ComplexityLevel, tuple[str, ...]] = {
    ComplexityLevel.SIMPLE: (
        "Is this solution straightforward enough?",
        "Could this be explained more simply?",
        "Are there unnecessary complications in this approach?",
    ),
    ComplexityLevel.MEDIUM: (
        "Does this approach balance simplicity with thoroughness?",
        "Are there aspects that need more detailed exploration?",
        "Is the level of detail appropriate for this problem?",
    ),
    ComplexityLevel.COMPLEX: (
        "Has this complex problem been broken down effectively?",
        "Are there interconnections or dependencies being overlooked?",
        "Does this approach address the full complexity of the problem?",
        "Would a more systematic approach be beneficial?",
    ),
}

MAX_PROMPTS = 5


@dataclass
class ReflectionStrategy:
    """How often and how deeply the caller should pause to reflect."""

    focus_areas: list[str] = field(
        default_factory=lambda: ["consistency", "completeness", "quality"]
    )
    recommended_approach: str = "balanced"
    reflection_frequency: str = "medium"
    reflection_depth: str = "balanced"

    def to_dict(self) -> dict[str, Any]:
        return {
            "focusAreas": list(self.focus_areas),
            "recommendedApproach": self.recommended_approach,
            "reflectionFrequency": self.reflection_frequency,
            "reflectionDepth": self.reflection_depth,
        }


def prioritize_prompts(prompts: Sequence[str], limit: int = MAX_PROMPTS) -> list[str]:
    """De-duplicate, then keep the longest (most specific) prompts."""
    unique = list(dict.fromkeys(prompts))
    unique.sort(key=len, reverse=True)
    return unique[:limit]


def identify_assumptions(thought: Thought) -> list[str]:
    """Explicit assumption sentences plus the classification's implicit one."""
    assumptions: list[str] = []
    for sentence in _RAW_SENTENCE_SPLIT.split(thought.text.lower()):
        if any(indicator in sentence for indicator in ASSUMPTION_INDICATORS):
            cleaned = _ASSUMPTION_LEAD.sub("", sentence.strip(), count=1).strip()
            if cleaned:
                assumptions.append(cleaned)

    if thought.classification is not None:
        assumptions.append(IMPLICIT_ASSUMPTIONS[thought.classification])

    return list(dict.fromkeys(assumptions))


def alternative_perspectives(thought: Thought) -> list[str]:
    perspectives: list[str] = []
    if thought.classification == Classification.CONCLUSION:
        perspectives += [
            "Consider the opposite conclusion",
            "What if this conclusion is premature?",
        ]
    if thought.classification == Classification.HYPOTHESIS:
        perspectives += [
            "Consider alternative hypotheses",
            "What other factors might explain this?",
        ]
    perspectives += [
        "How might this look from a broader perspective?",
        "What if we focused on a more specific aspect?",
        "How might different stakeholders view this?",
        "What concerns might others raise about this?",
    ]
    return perspectives


def phase_corrections(phase: Phase, profile: PromptProfile) -> list[str]:
    if phase == Phase.PLANNING:
        goals = ", ".join(profile.goals[:2])
        constraints = ", ".join(profile.constraints[:2])
        return [
            f"Ensure your plan directly addresses the main goals: {goals}",
            f"Consider how your plan accounts for constraints: {constraints}",
        ]
    if phase == Phase.ANALYSIS:
        return [
            "Focus your analysis on aspects most relevant to the prompt goals",
            f"Consider analyzing from the perspective of {' and '.join(profile.domains)}",
        ]
    if phase == Phase.EXECUTION:
        return [
            "Ensure your implementation approach aligns with the prompt requirements",
            "Check that your execution addresses the priority level "
            f"({profile.priority.value}) appropriately",
        ]
    return [
        "Verify against all prompt goals and constraints",
        f"Ensure the verification is appropriate for the task type ({profile.task_type.value})",
    ]


def corrective_actions(thought: Thought, profile: PromptProfile) -> list[str]:
    """Steps to pull a drifting thought back toward the prompt."""
    if thought.alignment_score is None:
        return []

    actions: list[str] = []
    if thought.alignment_score < 5:
        actions.append(
            "Revise this thought to better align with the prompt's main goals: "
            f"{', '.join(profile.goals[:3])}"
        )
        warning = thought.drift_warning or ""
        if "main goals" in warning:
            actions.append("Refocus on addressing the primary goals of the prompt")
        elif "terminology" in warning:
            actions.append(
                "Use terminology more consistent with the prompt's domain: "
                f"{', '.join(profile.domains)}"
            )
        elif "diverging" in warning:
            actions.append("Reconnect this line of thinking to the original prompt requirements")
        actions.extend(thought.suggested_corrections)
    elif thought.alignment_score < 7:
        actions.append("Consider how this thought could better address the prompt's requirements")
        lowered = thought.text.lower()
        missing = [goal for goal in profile.goals if goal.lower() not in lowered]
        if missing:
            actions.append(f"Incorporate these missing goals: {', '.join(missing[:2])}")

    actions.extend(phase_corrections(thought.phase, profile))
    return actions


def reflection_strategy(thoughts: Sequence[Thought], profile: PromptProfile) -> ReflectionStrategy:
    """Tune reflection cadence to the task, its complexity and recent alignment."""
    strategy = ReflectionStrategy()

    if profile.task_type == TaskType.ANALYTICAL:
        strategy.focus_areas = [
            "logical consistency",
            "evidence quality",
            "alternative explanations",
        ]
        strategy.reflection_depth = "deep"
    elif profile.task_type == TaskType.CREATIVE:
        strategy.focus_areas = ["originality", "practicality", "impact"]
        strategy.reflection_frequency = "low"
    elif profile.task_type == TaskType.TECHNICAL:
        strategy.focus_areas = ["correctness", "efficiency", "edge cases"]
        strategy.reflection_frequency = "high"
    elif profile.task_type == TaskType.INFORMATIONAL:
        strategy.focus_areas = ["accuracy", "completeness", "relevance"]
        strategy.reflection_depth = "balanced"

    if profile.complexity == ComplexityLevel.COMPLEX:
        strategy.reflection_frequency = "high"
        strategy.reflection_depth = "deep"
        strategy.recommended_approach = "systematic"
    elif profile.complexity == ComplexityLevel.SIMPLE:
        strategy.reflection_frequency = "low"
        strategy.reflection_depth = "light"
        strategy.recommended_approach = "streamlined"

    if profile.priority == Priority.HIGH:
        strategy.reflection_frequency = "high"
        strategy.focus_areas.insert(0, "alignment with goals")

    scores = [t.alignment_score for t in thoughts[-3:] if t.alignment_score is not None]
    average = sum(scores) / len(scores) if scores else 5.0
    if average < 6:
        strategy.reflection_frequency = "high"
        strategy.focus_areas.insert(0, "prompt alignment")

    return strategy


class ReflectionEngine:
    """Generates reflection prompts for the latest thought in a sequence."""

    def __init__(self, similarity: SimilarityEngine | None = None) -> None:
        self.similarity = similarity or SimilarityEngine()

    def _context_prompts(self, current: Thought, thoughts: Sequence[Thought]) -> list[str]:
        prompts = [
            "How do the dependencies influence this thought?"
            if current.dependencies
            else "How does this thought connect to previous thinking?"
        ]
        if any(
            t.thought_number != current.thought_number
            and self.similarity.similarity(t, current) > 0.5
            for t in thoughts
        ):
            prompts.append(
                "How does this thought align with or differ from similar previous thoughts?"
            )
        return prompts

    def _standard_prompts(self, thoughts: Sequence[Thought]) -> list[str]:
        latest = thoughts[-1]
        prompts = self._context_prompts(latest, thoughts)
        prompts.extend(PHASE_PROMPTS[latest.phase])
        if latest.classification is not None:
            prompts.extend(CLASSIFICATION_PROMPTS[latest.classification])
        if latest.quality is not None:
            if latest.quality.coherence < 7:
                prompts.append("How could this thought be better connected to the overall context?")
            if latest.quality.depth < 7:
                prompts.append("What deeper aspects of this thought could be explored?")
            if latest.quality.relevance < 7:
                prompts.append("How could this thought be made more relevant to the main goal?")
        return prompts

    def reflection_prompts(self, thoughts: Sequence[Thought]) -> list[str]:
        """Top prompts for ``thoughts[-1]``; empty for an empty sequence."""
        if not thoughts:
            return []
        return prioritize_prompts(self._standard_prompts(thoughts))

    def _prompt_specific(self, profile: PromptProfile) -> list[str]:
        prompts: list[str] = []
        if profile.goals:
            prompts.append(f"How does this thought contribute to the goal of {profile.goals[0]}?")
            if len(profile.goals) > 1:
                prompts.append(
                    "Does this thought address multiple goals "
                    f"({', '.join(profile.goals[:3])}) or focus on one?"
                )
        if profile.constraints:
            prompts.append(f"Does this thought respect the constraint: {profile.constraints[0]}?")
            if len(profile.constraints) > 1:
                prompts.append("How does this thought balance multiple constraints?")
        if profile.domains:
            prompts.append(
                f"How well does this thought incorporate knowledge from {profile.domains[0]}?"
            )
            if len(profile.domains) > 1:
                prompts.append(
                    "Could insights from other domains "
                    f"({', '.join(profile.domains[1:])}) enhance this thought?"
                )
        if profile.expected_output_format:
            prompts.append(
                "Is this thought aligned with the expected output format: "
                f"{profile.expected_output_format}?"
            )
        return prompts

    def _alignment_prompts(self, thought: Thought) -> list[str]:
        prompts = ["How well does this thought align with the original prompt?"]
        score = thought.alignment_score
        if score is not None and score < 5:
            prompts += [
                "What aspects of the original prompt are being overlooked in this thought?",
                "How could this thought be reframed to better address the prompt requirements?",
            ]
        elif score is not None and score < 7:
            prompts += [
                "Which aspects of the prompt could be more thoroughly addressed in this thought?",
                "Is there a way to make this thought more directly relevant to the prompt?",
            ]
        low = [aspect for aspect, value in thought.relevance_by_aspect.items() if value < 0.5]
        if low:
            prompts.append(f"How could this thought better address: {', '.join(low)}?")
        return prompts

    def prompt_aware_reflection_prompts(
        self, thoughts: Sequence[Thought], profile: PromptProfile
    ) -> list[str]:
        """Standard prompts enriched with prompt goals, alignment and task type."""
        if not thoughts:
            return []
        latest = thoughts[-1]
        prompts = self._standard_prompts(thoughts)
        prompts.extend(self._prompt_specific(profile))
        if latest.alignment_score is not None and latest.alignment_score < 7:
            prompts.extend(self._alignment_prompts(latest))
        prompts.extend(TASK_TYPE_PROMPTS[profile.task_type])
        prompts.extend(COMPLEXITY_PROMPTS[profile.complexity])
        return prioritize_prompts(prompts)
