"""Recommendation engine.

Pure function of (prompt profile, position in the session, phase, prior
thoughts). Rules come from ``recommendation_rules`` and are applied in a
fixed order: task type, then phase, then progress bucket, then complexity.
"""

from __future__ import annotations

import math
from collections import Counter
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

from src.tools.recommendation_rules import (
    BASE_PHASE_DISTRIBUTION,
    BASE_THOUGHT_COUNT,
    COMPLEX_DOMAINS,
    COMPLEX_LEARNING,
    COMPLEX_PITFALLS,
    COMPLEX_STRATEGY,
    COMPLEXITY_BIAS,
    DOMAIN_LEARNING,
    EARLY_STRATEGY,
    ENGINEERING_DOMAINS,
    GENERAL_INSIGHT_PROMPTS,
    GENERAL_METACOGNITION,
    LATE_STRATEGY,
    LEVEL_BY_COMPLEXITY,
    LOW_DIVERSITY_SHIFT,
    MEDIUM_DOMAINS,
    NEGATIVE_PATTERN_SHIFTS,
    PHASE_BIASES,
    PHASE_INSIGHT_PROMPTS,
    PHASE_REASONING,
    PHASE_STRATEGIES,
    PHASE_TOOLS,
    POSITIVE_CLASSIFICATIONS,
    STAGE_METACOGNITION,
    TASK_BIASES,
    TASK_DIVERSITY_SHIFTS,
    TASK_INSIGHT_PROMPTS,
    TASK_LEARNING,
    TASK_METACOGNITION,
    TASK_PITFALLS,
    TASK_REASONING,
    TASK_STRATEGIES,
    TASK_TOOLS,
    CognitiveBias,
    LearningRecommendation,
    MetacognitiveStrategy,
    ReasoningTypeRecommendation,
    StrategyRecommendation,
)
from src.tools.thought_types import (
    PHASE_ORDER,
    ComplexityLevel,
    Phase,
    Priority,
    PromptProfile,
    TaskType,
    Thought,
)

MAX_STRATEGIES = 3
MAX_REASONING_TYPES = 3
MAX_METACOGNITIVE = 3
MAX_INSIGHT_PROMPTS = 3
MAX_LEARNING = 2
MIN_PATTERN_THOUGHTS = 3
MIN_EVOLUTION_THOUGHTS = 5

DEFAULT_TOOL = "sequentialthinking"


@dataclass(frozen=True)
class ComplexityEstimation:
    """Per-dimension complexity and the thought budget derived from it."""

    overall: ComplexityLevel
    conceptual: float
    procedural: float
    contextual: float
    domain: float
    recommended_thought_count: int
    phase_distribution: dict[str, int]

    @property
    def average(self) -> float:
        return (self.conceptual + self.procedural + self.contextual + self.domain) / 4

    def to_dict(self) -> dict[str, Any]:
        return {
            "overallComplexity": self.overall.value,
            "dimensionalComplexity": {
                "conceptual": self.conceptual,
                "procedural": self.procedural,
                "contextual": self.contextual,
                "domain": self.domain,
            },
            "recommendedThoughtCount": self.recommended_thought_count,
            "recommendedPhaseDistribution": dict(self.phase_distribution),
        }


@dataclass(frozen=True)
class DominantPattern:
    name: str
    description: str
    frequency: float
    impact: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "patternName": self.name,
            "description": self.description,
            "frequency": round(self.frequency, 4),
            "impact": self.impact,
        }


@dataclass(frozen=True)
class PatternShift:
    source: str
    target: str
    benefit: str

    def to_dict(self) -> dict[str, Any]:
        return {"from": self.source, "to": self.target, "benefit": self.benefit}


@dataclass(frozen=True)
class ThoughtPatternAnalysis:
    """Cross-thought patterns: dominant habits, diversity and its trend."""

    dominant_patterns: tuple[DominantPattern, ...] = ()
    suggested_shifts: tuple[PatternShift, ...] = ()
    diversity: float = 5.0
    evolution: str = "stable"

    def to_dict(self) -> dict[str, Any]:
        return {
            "dominantPatterns": [p.to_dict() for p in self.dominant_patterns],
            "suggestedPatternShifts": [s.to_dict() for s in self.suggested_shifts],
            "thinkingDiversity": round(self.diversity, 4),
            "patternEvolution": self.evolution,
        }


@dataclass(frozen=True)
class Recommendations:
    """The full recommendation bundle for one thought."""

    strategies: tuple[StrategyRecommendation, ...]
    reasoning_types: tuple[ReasoningTypeRecommendation, ...]
    complexity: ComplexityEstimation
    tools: tuple[str, ...]
    focus_areas: tuple[str, ...]
    pitfalls: tuple[str, ...]
    cognitive_biases: tuple[CognitiveBias, ...]
    metacognitive_strategies: tuple[MetacognitiveStrategy, ...]
    adaptive_suggestions: tuple[str, ...]
    insight_prompts: tuple[str, ...]
    learning: tuple[LearningRecommendation, ...]
    patterns: ThoughtPatternAnalysis | None = field(default=None)

    def to_dict(self) -> dict[str, Any]:
        return {
            "strategies": [s.to_dict() for s in self.strategies],
            "reasoningTypes": [r.to_dict() for r in self.reasoning_types],
            "complexityEstimation": self.complexity.to_dict(),
            "recommendedTools": list(self.tools),
            "focusAreas": list(self.focus_areas),
            "potentialPitfalls": list(self.pitfalls),
            "cognitiveBiases": [b.to_dict() for b in self.cognitive_biases],
            "metacognitiveStrategies": [m.to_dict() for m in self.metacognitive_strategies],
            "adaptiveSuggestions": list(self.adaptive_suggestions),
            "insightPrompts": list(self.insight_prompts),
            "learningRecommendations": [r.to_dict() for r in self.learning],
            "thoughtPatterns": self.patterns.to_dict() if self.patterns else None,
        }


def _clamp(value: float, low: float = 0.0, high: float = 10.0) -> float:
    return max(low, min(high, value))


def _progress(thought_number: int, total_thoughts: int) -> float:
    return thought_number / max(1, total_thoughts)


def entropy(probabilities: Sequence[float]) -> float:
    """Shannon entropy normalized by log2 of the number of non-zero values."""
    valid = [p for p in probabilities if p > 0]
    total = sum(valid)
    if not valid or total <= 0:
        return 0.0
    normalized = [p / total for p in valid]
    value = -sum(p * math.log2(p) for p in normalized)
    max_entropy = math.log2(len(normalized))
    return 0.0 if max_entropy == 0 else value / max_entropy


# =============================================================================
# Complexity
# =============================================================================


def conceptual_complexity(profile: PromptProfile) -> float:
    score = 5.0
    score += min(len(profile.goals) - 1, 3)
    score += min(len(profile.domains) - 1, 2)
    if profile.task_type in (TaskType.ANALYTICAL, TaskType.TECHNICAL):
        score += 1
    return _clamp(score)


def procedural_complexity(profile: PromptProfile) -> float:
    score = 5.0 + min(len(profile.constraints), 3)
    if profile.task_type == TaskType.TECHNICAL:
        score += 2
    elif profile.task_type == TaskType.ANALYTICAL:
        score += 1
    if profile.priority == Priority.HIGH:
        score += 1
    return _clamp(score)


def contextual_complexity(profile: PromptProfile) -> float:
    score = 5.0 + min(len(profile.entities) / 2, 3)
    if profile.task_type == TaskType.MIXED:
        score += 2
    elif profile.task_type == TaskType.CREATIVE:
        score += 1
    return _clamp(score)


def domain_complexity(profile: PromptProfile) -> float:
    """First domain that matches a complex or medium domain adjusts the score."""
    score = 5.0
    for domain in profile.domains:
        lowered = domain.lower()
        if any(d in lowered for d in COMPLEX_DOMAINS):
            score += 2
            break
        if any(d in lowered for d in MEDIUM_DOMAINS):
            score += 1
            break
    return _clamp(score)


def phase_distribution(
    overall: ComplexityLevel,
    conceptual: float,
    procedural: float,
    contextual: float,
    domain: float,
) -> dict[str, int]:
    planning, analysis, execution, verification = BASE_PHASE_DISTRIBUTION[overall]
    if conceptual > 7:
        planning += 1
        analysis += 1
    if procedural > 7:
        execution += 1
    if contextual > 7:
        analysis += 1
    if domain > 7:
        analysis += 1
        verification += 1
    return {
        Phase.PLANNING.value: planning,
        Phase.ANALYSIS.value: analysis,
        Phase.EXECUTION.value: execution,
        Phase.VERIFICATION.value: verification,
    }


def estimate_complexity(profile: PromptProfile) -> ComplexityEstimation:
    """Four 0-10 dimensions and a recommended thought count.

    The base count (5, 8 or 12 by prompt complexity) is scaled by how far
    the average dimension sits from the neutral 5, rounded half-up.
    """
    conceptual = conceptual_complexity(profile)
    procedural = procedural_complexity(profile)
    contextual = contextual_complexity(profile)
    domain = domain_complexity(profile)
    average = (conceptual + procedural + contextual + domain) / 4

    base = BASE_THOUGHT_COUNT[profile.complexity]
    recommended = math.floor(base * (1 + (average - 5) / 10) + 0.5)

    return ComplexityEstimation(
        overall=profile.complexity,
        conceptual=conceptual,
        procedural=procedural,
        contextual=contextual,
        domain=domain,
        recommended_thought_count=max(1, recommended),
        phase_distribution=phase_distribution(
            profile.complexity, conceptual, procedural, contextual, domain
        ),
    )


# =============================================================================
# Pattern analysis
# =============================================================================


def _phase_frequencies(thoughts: Sequence[Thought]) -> dict[str, float]:
    counts = Counter(t.phase.value for t in thoughts if t.phase is not None)
    total = len(thoughts) or 1
    return {phase.value: counts.get(phase.value, 0) / total for phase in PHASE_ORDER}


def _tool_frequencies(thoughts: Sequence[Thought]) -> list[tuple[str, float]]:
    counts: Counter[str] = Counter()
    for thought in thoughts:
        counts.update(thought.tools_used)
    total = len(thoughts) or 1
    return [(tool, count / total) for tool, count in counts.most_common()]


def _classification_frequencies(thoughts: Sequence[Thought]) -> list[tuple[str, float]]:
    classified = [t.classification.value for t in thoughts if t.classification is not None]
    total = len(classified) or 1
    return [(name, count / total) for name, count in Counter(classified).most_common()]


def thinking_diversity(thoughts: Sequence[Thought]) -> float:
    """5 plus weighted phase, tool and classification entropy, clamped to 0-10."""
    score = 5.0
    score += entropy(list(_phase_frequencies(thoughts).values())) * 2
    tools = _tool_frequencies(thoughts)
    if tools:
        score += entropy([freq for _, freq in tools]) * 1.5
    classifications = _classification_frequencies(thoughts)
    if classifications:
        score += entropy([freq for _, freq in classifications]) * 1.5
    return _clamp(score)


def pattern_evolution(thoughts: Sequence[Thought]) -> str:
    if len(thoughts) < MIN_EVOLUTION_THOUGHTS:
        return "stable"
    midpoint = len(thoughts) // 2
    difference = thinking_diversity(thoughts[midpoint:]) - thinking_diversity(thoughts[:midpoint])
    if difference > 1:
        return "improving"
    if difference < -1:
        return "narrowing"
    return "stable"


def dominant_patterns(
    thoughts: Sequence[Thought], profile: PromptProfile
) -> list[DominantPattern]:
    phases = _phase_frequencies(thoughts)
    tools = _tool_frequencies(thoughts)
    classifications = _classification_frequencies(thoughts)
    patterns: list[DominantPattern] = []

    planning = phases[Phase.PLANNING.value]
    if planning > 0.4:
        patterns.append(
            DominantPattern(
                "Planning-Heavy",
                "Significant focus on planning phase",
                planning,
                "positive" if profile.complexity == ComplexityLevel.COMPLEX else "negative",
            )
        )

    execution = phases[Phase.EXECUTION.value]
    if execution > 0.6:
        patterns.append(
            DominantPattern(
                "Execution-Focused",
                "Strong emphasis on execution with less planning/verification",
                execution,
                "positive" if profile.complexity == ComplexityLevel.SIMPLE else "negative",
            )
        )

    verification = phases[Phase.VERIFICATION.value]
    if verification < 0.1:
        patterns.append(
            DominantPattern(
                "Verification-Light",
                "Limited verification of solutions",
                1 - verification,
                "negative",
            )
        )

    if not tools:
        patterns.append(
            DominantPattern("Tool-Avoidant", "Minimal use of available tools", 0.8, "negative")
        )
    elif tools[0][1] > 0.7:
        tool, frequency = tools[0]
        patterns.append(
            DominantPattern(
                "Single-Tool-Dominant", f"Heavy reliance on {tool}", frequency, "neutral"
            )
        )

    if classifications and classifications[0][1] > 0.6:
        name, frequency = classifications[0]
        positive = POSITIVE_CLASSIFICATIONS.get(profile.task_type, frozenset())
        impact = "positive" if any(c.value == name for c in positive) else "neutral"
        patterns.append(
            DominantPattern(
                f"{name}-Dominant",
                f"Thinking primarily classified as {name}",
                frequency,
                impact,
            )
        )

    return patterns


def pattern_shifts(
    patterns: Sequence[DominantPattern], profile: PromptProfile, diversity: float
) -> list[PatternShift]:
    shifts: list[PatternShift] = []
    for pattern in patterns:
        if pattern.impact != "negative" or pattern.name not in NEGATIVE_PATTERN_SHIFTS:
            continue
        if pattern.name == "Execution-Focused" and profile.complexity == ComplexityLevel.SIMPLE:
            continue
        shifts.append(PatternShift(*NEGATIVE_PATTERN_SHIFTS[pattern.name]))

    if diversity < 5:
        shifts.append(PatternShift(*LOW_DIVERSITY_SHIFT))
        task_shift = TASK_DIVERSITY_SHIFTS.get(profile.task_type)
        if task_shift:
            shifts.append(PatternShift(*task_shift))
    return shifts


def analyze_patterns(thoughts: Sequence[Thought], profile: PromptProfile) -> ThoughtPatternAnalysis:
    """Pattern analysis over prior thoughts; neutral below three thoughts."""
    if len(thoughts) < MIN_PATTERN_THOUGHTS:
        return ThoughtPatternAnalysis()

    patterns = dominant_patterns(thoughts, profile)
    diversity = thinking_diversity(thoughts)
    return ThoughtPatternAnalysis(
        dominant_patterns=tuple(patterns),
        suggested_shifts=tuple(pattern_shifts(patterns, profile, diversity)),
        diversity=diversity,
        evolution=pattern_evolution(thoughts),
    )


# =============================================================================
# Engine
# =============================================================================


class RecommendationEngine:
    """Builds ``Recommendations`` bundles.

    Example:
        engine = RecommendationEngine()
        bundle = engine.generate(profile, 1, 5, Phase.PLANNING)
        bundle.complexity.recommended_thought_count

    """

    def strategies(
        self,
        profile: PromptProfile,
        thought_number: int,
        total_thoughts: int,
        phase: Phase | None,
    ) -> list[StrategyRecommendation]:
        found = list(TASK_STRATEGIES.get(profile.task_type, ()))
        if phase is not None:
            found.append(PHASE_STRATEGIES[phase])

        progress = _progress(thought_number, total_thoughts)
        if progress < 0.3:
            found.append(EARLY_STRATEGY)
        elif progress > 0.7:
            found.append(LATE_STRATEGY)

        if profile.complexity == ComplexityLevel.COMPLEX:
            found.append(COMPLEX_STRATEGY)
        return found[:MAX_STRATEGIES]

    def reasoning_types(
        self, profile: PromptProfile, phase: Phase | None
    ) -> list[ReasoningTypeRecommendation]:
        found = list(TASK_REASONING.get(profile.task_type, ()))
        if phase is not None:
            seen = {r.reasoning_type for r in found}
            for candidate in PHASE_REASONING[phase]:
                if candidate.reasoning_type not in seen:
                    found.append(candidate)
                    seen.add(candidate.reasoning_type)
        return found[:MAX_REASONING_TYPES]

    def tools(self, profile: PromptProfile, phase: Phase | None) -> list[str]:
        found = [DEFAULT_TOOL, *TASK_TOOLS.get(profile.task_type, ())]
        if phase is not None:
            found.append(PHASE_TOOLS[phase])
        return list(dict.fromkeys(found))

    def focus_areas(
        self, profile: PromptProfile, thought_number: int, total_thoughts: int
    ) -> list[str]:
        progress = _progress(thought_number, total_thoughts)
        areas: list[str] = []
        if progress < 0.3:
            areas += [
                "Ensure comprehensive understanding of the problem",
                "Identify key constraints and requirements",
            ]
            if profile.complexity == ComplexityLevel.COMPLEX:
                areas.append("Break down the problem into manageable components")
        elif progress < 0.7:
            areas += [
                "Develop detailed solution approaches",
                "Address the most challenging aspects first",
            ]
            if profile.task_type == TaskType.CREATIVE:
                areas.append("Explore multiple alternative approaches")
            elif profile.task_type == TaskType.ANALYTICAL:
                areas.append("Ensure logical consistency in your analysis")
        else:
            areas += [
                "Synthesize insights from previous thoughts",
                "Verify solution against original requirements",
            ]
            if profile.priority == Priority.HIGH:
                areas.append("Ensure solution addresses highest priority aspects")

        if profile.goals:
            areas.append(f"Address the key goal: {profile.goals[0]}")
        return areas

    def pitfalls(self, profile: PromptProfile) -> list[str]:
        found = list(TASK_PITFALLS.get(profile.task_type, ()))
        if profile.complexity == ComplexityLevel.COMPLEX:
            found += COMPLEX_PITFALLS
        if profile.constraints:
            found.append("Developing solutions that violate key constraints")
        if ENGINEERING_DOMAINS.intersection(profile.domains):
            found.append("Proposing technically infeasible solutions")
        return found

    def cognitive_biases(self, profile: PromptProfile, phase: Phase | None) -> list[CognitiveBias]:
        found: list[CognitiveBias] = []
        task_bias = TASK_BIASES.get(profile.task_type)
        if task_bias:
            found.append(task_bias)
        if phase is not None:
            found.append(PHASE_BIASES[phase])
        if profile.complexity == ComplexityLevel.COMPLEX:
            found.append(COMPLEXITY_BIAS)
        return found

    def metacognitive_strategies(
        self, profile: PromptProfile, thought_number: int, total_thoughts: int
    ) -> list[MetacognitiveStrategy]:
        progress = _progress(thought_number, total_thoughts)
        early, middle, late = STAGE_METACOGNITION
        found = list(GENERAL_METACOGNITION)
        found.append(early if progress < 0.3 else middle if progress < 0.7 else late)
        task_strategy = TASK_METACOGNITION.get(profile.task_type)
        if task_strategy:
            found.append(task_strategy)
        return found[:MAX_METACOGNITIVE]

    def adaptive_suggestions(
        self,
        profile: PromptProfile,
        thought_number: int,
        total_thoughts: int,
        phase: Phase | None,
    ) -> list[str]:
        progress = _progress(thought_number, total_thoughts)
        suggestions: list[str] = []
        if progress < 0.2:
            suggestions.append(
                "Consider spending more time understanding the problem before diving into solutions"
            )
        elif progress > 0.8:
            suggestions.append("Begin synthesizing key insights from your thinking process")

        if phase == Phase.PLANNING and progress > 0.3:
            suggestions.append("Consider transitioning from planning to analysis phase")
        elif phase == Phase.ANALYSIS and progress > 0.5:
            suggestions.append("Consider moving from analysis to execution phase")
        elif phase == Phase.EXECUTION and progress > 0.8:
            suggestions.append("Begin verification of your solution")

        if profile.complexity == ComplexityLevel.COMPLEX:
            suggestions.append("Break down complex aspects into manageable components")
            suggestions.append("Regularly zoom out to maintain perspective on the overall problem")

        if profile.task_type == TaskType.CREATIVE and thought_number > 3:
            suggestions.append(
                "Consider combining elements from your previous thoughts in novel ways"
            )
        elif profile.task_type == TaskType.ANALYTICAL and thought_number > 3:
            suggestions.append("Look for patterns or contradictions across your previous analyses")
        elif profile.task_type == TaskType.TECHNICAL:
            suggestions.append("Consider both the implementation details and the user experience")
        elif profile.task_type == TaskType.INFORMATIONAL:
            suggestions.append("Ensure information is organized in a logical hierarchy")
        return suggestions

    def insight_prompts(self, profile: PromptProfile, phase: Phase | None) -> list[str]:
        prompts = list(GENERAL_INSIGHT_PROMPTS)
        if phase is not None:
            prompts += PHASE_INSIGHT_PROMPTS[phase]
        if profile.domains:
            prompts.append(
                f"How might principles from {profile.domains[0]} be applied in unexpected ways?"
            )
        prompts += TASK_INSIGHT_PROMPTS.get(profile.task_type, ())
        return prompts[:MAX_INSIGHT_PROMPTS]

    def learning(
        self, profile: PromptProfile, thought_number: int, total_thoughts: int
    ) -> list[LearningRecommendation]:
        level = LEVEL_BY_COMPLEXITY[profile.complexity]
        found: list[LearningRecommendation] = []
        for domain in profile.domains:
            lowered = domain.lower()
            for key, (area, resources, benefits) in DOMAIN_LEARNING.items():
                if key in lowered or lowered in key:
                    found.append(LearningRecommendation(area, level, resources, benefits, 8))
                    break

        task_learning = TASK_LEARNING.get(profile.task_type)
        if task_learning:
            found.append(task_learning)
        if profile.complexity == ComplexityLevel.COMPLEX:
            found.append(COMPLEX_LEARNING)
        return found[:MAX_LEARNING]

    def generate(
        self,
        profile: PromptProfile,
        thought_number: int,
        total_thoughts: int,
        phase: Phase | None = None,
        prior_thoughts: Sequence[Thought] = (),
    ) -> Recommendations:
        """Build the full bundle.

        Pattern analysis is included only when at least three prior
        thoughts exist.
        """
        patterns = None
        if len(prior_thoughts) >= MIN_PATTERN_THOUGHTS:
            patterns = analyze_patterns(prior_thoughts, profile)

        return Recommendations(
            strategies=tuple(self.strategies(profile, thought_number, total_thoughts, phase)),
            reasoning_types=tuple(self.reasoning_types(profile, phase)),
            complexity=estimate_complexity(profile),
            tools=tuple(self.tools(profile, phase)),
            focus_areas=tuple(self.focus_areas(profile, thought_number, total_thoughts)),
            pitfalls=tuple(self.pitfalls(profile)),
            cognitive_biases=tuple(self.cognitive_biases(profile, phase)),
            metacognitive_strategies=tuple(
                self.metacognitive_strategies(profile, thought_number, total_thoughts)
            ),
            adaptive_suggestions=tuple(
                self.adaptive_suggestions(profile, thought_number, total_thoughts, phase)
            ),
            insight_prompts=tuple(self.insight_prompts(profile, phase)),
            learning=tuple(self.learning(profile, thought_number, total_thoughts)),
            patterns=patterns,
        )
