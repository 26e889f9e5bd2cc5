"""Per-thought quality heuristics and session-level guidance."""

from __future__ import annotations

import re
from collections import Counter
from collections.abc import Mapping, Sequence

from src.tools.alignment import round_half_up
from src.tools.reflection import corrective_actions
from src.tools.thought_types import (
    ComplexityLevel,
    Phase,
    PromptProfile,
    QualityAssessment,
    Thought,
)

DEFAULT_TOOL = "sequentialthinking"
SESSION_KEYWORD_STOPWORDS = frozenset({"about", "above", "across", "after", "again"})
MAX_SESSION_KEYWORDS = 8

_NON_WORD_OR_SPACE = re.compile(r"[^\w\s]", re.ASCII)

# (phase, progress above which the next phase is suggested, next phase)
PHASE_TRANSITIONS: tuple[tuple[Phase, float, Phase], ...] = (
    (Phase.PLANNING, 0.2, Phase.ANALYSIS),
    (Phase.ANALYSIS, 0.4, Phase.EXECUTION),
    (Phase.EXECUTION, 0.8, Phase.VERIFICATION),
)


def assess_quality(thought: Thought) -> QualityAssessment:
    """Coherence, depth and relevance on a 0-10 scale, starting at 5.

    Coherence rewards declared dependencies, depth rewards length and
    relevance penalizes planning that drags on past thought 3.
    """
    coherence, depth, relevance = 5, 5, 5
    feedback: list[str] = []

    if thought.dependencies:
        coherence = min(8, 5 + len(thought.dependencies))
    elif thought.thought_number > 1:
        coherence = 3
        feedback.append("Consider how this thought connects to previous thinking")

    word_count = len(thought.text.split())
    if word_count < 30:
        depth = 3
        feedback.append("This thought could be explored in more depth")
    elif word_count > 100:
        depth = 8

    if thought.phase == Phase.PLANNING and thought.thought_number > 3:
        relevance = 4
        feedback.append("Consider moving from planning to execution")

    return QualityAssessment(
        coherence=coherence,
        depth=depth,
        relevance=relevance,
        quality_score=round_half_up((coherence + depth + relevance) / 3),
        feedback=tuple(feedback),
    )


def insight_value(thought: Thought, quality: QualityAssessment) -> int:
    """Weighted quality with a 20% bonus for connected thoughts."""
    base = quality.depth * 0.4 + quality.coherence * 0.3 + quality.relevance * 0.3
    bonus = 1.2 if thought.dependencies else 1.0
    return round_half_up(base * bonus)


def session_keywords(text: str) -> list[str]:
    """Most frequent words longer than four characters."""
    words = [
        word
        for word in _NON_WORD_OR_SPACE.sub("", text.lower()).split()
        if len(word) > 4 and word not in SESSION_KEYWORD_STOPWORDS
    ]
    return [word for word, _ in Counter(words).most_common(MAX_SESSION_KEYWORDS)]


def suggest_next_phase(thought: Thought) -> Phase:
    progress = thought.thought_number / thought.total_thoughts
    for current, threshold, following in PHASE_TRANSITIONS:
        if thought.phase == current and progress > threshold:
            return following
    return thought.phase


def estimate_session_complexity(
    thought_count: int, revision_count: int, branch_count: int
) -> ComplexityLevel:
    if thought_count > 10 or branch_count > 2:
        return ComplexityLevel.COMPLEX
    if thought_count > 5 or revision_count > 1 or branch_count > 0:
        return ComplexityLevel.MEDIUM
    return ComplexityLevel.SIMPLE


def recent_thoughts(thoughts: Sequence[Thought], count: int = 3) -> list[dict[str, object]]:
    return [{"number": t.thought_number, "summary": t.summary()} for t in thoughts[-count:]]


def strategic_guidance(
    thought: Thought,
    history: Sequence[Thought],
    branches: Mapping[str, object],
    available_tools: Sequence[str],
    profile: PromptProfile | None = None,
) -> list[str]:
    """Guidance lines for the thought just appended to ``history``.

    When the thought is poorly aligned and a profile exists, the corrective
    actions for the thought replace the bare suggested corrections.
    """
    guidance: list[str] = []
    progress = thought.thought_number / thought.total_thoughts

    same_phase = sum(1 for t in history if t.phase == thought.phase)
    if same_phase > 4 and thought.phase != Phase.EXECUTION:
        guidance.append(f"Consider transitioning from {thought.phase.value} to the next phase")

    if sum(1 for t in history if t.is_revision) > 3:
        guidance.append(
            "Multiple revisions detected. Consider whether a different approach is needed"
        )

    if not thought.tools_used:
        others = [tool for tool in available_tools if tool != DEFAULT_TOOL]
        if others:
            guidance.append(f"Consider using available tools: {', '.join(others)}")

    if not branches and (thought.complexity == ComplexityLevel.COMPLEX or len(history) > 8):
        guidance.append(
            "For this complex problem, consider exploring alternative approaches through branching"
        )

    if progress > 0.75 and thought.phase != Phase.VERIFICATION:
        guidance.append(
            "Consider transitioning to the Verification phase to validate your solution"
        )

    if thought.quality is not None and thought.quality.quality_score < 5:
        guidance.append(
            "Consider improving the quality of this thought based on the feedback provided"
        )

    if thought.alignment_score is not None and thought.alignment_score < 5:
        guidance.append(
            "This thought has low alignment with the original prompt. "
            "Consider revising to better address the prompt's goals"
        )
        if profile is not None:
            guidance.extend(corrective_actions(thought, profile))
        else:
            guidance.extend(thought.suggested_corrections)

    drifting = [
        t for t in history[-3:] if t.alignment_score is not None and t.alignment_score < 5
    ]
    if len(drifting) >= 2:
        guidance.append(
            "Multiple recent thoughts show low prompt alignment. "
            "Consider refocusing on the original prompt goals"
        )

    recommendations = thought.recommendations
    if recommendations is not None:
        if recommendations.strategies:
            top = recommendations.strategies[0]
            guidance.append(f'Try using the "{top.name}" strategy: {top.description}')
        if recommendations.reasoning_types:
            top_type = recommendations.reasoning_types[0]
            guidance.append(
                f"Consider using {top_type.reasoning_type} reasoning: {top_type.description}"
            )
        if recommendations.focus_areas:
            guidance.append(f"Focus on: {recommendations.focus_areas[0]}")
        if recommendations.pitfalls:
            guidance.append(f"Watch out for: {recommendations.pitfalls[0]}")
        guidance.extend(recommendations.adaptive_suggestions[:2])
        likely = next((b for b in recommendations.cognitive_biases if b.likelihood > 0.7), None)
        if likely is not None:
            guidance.append(f"Be aware of potential {likely.bias_type}: {likely.mitigation}")

    return list(dict.fromkeys(guidance))
