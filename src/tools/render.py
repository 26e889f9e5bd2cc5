"""Plain-text views over a session.

Every function here is read-only: it takes thoughts (and optionally the
prompt profile) and returns a string. Nothing is printed and no store
state is touched.
"""

from __future__ import annotations

import math
from collections.abc import Sequence

from src.tools.alignment import round_half_up
from src.tools.progress import (
    COVERAGE_TARGET,
    alignment_trend,
    estimate_remaining_thoughts,
    overall_progress,
)
from src.tools.thought_types import PHASE_ORDER, Phase, PromptProfile, Thought

PROGRESS_BAR_WIDTH = 50
GOAL_BAR_WIDTH = 20
OVERALL_BAR_WIDTH = 30

TREND_ARROWS = {
    "Improving": "↗️ Improving",
    "Declining": "↘️ Declining",
    "Stable": "→ Stable",
}


def alignment_marker(score: int) -> str:
    if score >= 7:
        return "✓"
    if score >= 4:
        return "⚠️"
    return "❌"


def truncate(text: str, max_length: int) -> str:
    """Cut ``text`` to ``max_length`` characters including the ellipsis."""
    if len(text) <= max_length:
        return text
    return text[: max_length - 3] + "..."


def _bar(percentage: float, width: int) -> str:
    filled = max(0, min(width, math.floor(width * percentage / 100)))
    return "█" * filled + "░" * (width - filled)


def _alignment_tag(thought: Thought) -> str:
    if thought.alignment_score is None:
        return ""
    return f" [A:{thought.alignment_score}{alignment_marker(thought.alignment_score)}]"


def render_progress_bar(percentage: float, width: int = PROGRESS_BAR_WIDTH) -> str:
    """Render ``Progress: [██░░] N%`` for a 0-100 percentage."""
    return f"Progress: [{_bar(percentage, width)}] {round_half_up(percentage)}%"


def render_dependency_graph(thoughts: Sequence[Thought]) -> str:
    """One line per non-revision thought listing the thoughts that depend on it."""
    lines = ["=== Thought Dependency Graph ===", ""]

    dependents: dict[int, list[int]] = {}
    for thought in thoughts:
        for dependency in thought.dependencies:
            dependents.setdefault(dependency, []).append(thought.thought_number)

    for thought in thoughts:
        if thought.is_revision:
            continue
        node = f"T{thought.thought_number}({thought.phase.value[0]})"
        quality = f" [Q:{thought.quality.quality_score}]" if thought.quality else ""
        classification = f" [{thought.classification.value}]" if thought.classification else ""
        connections = dependents.get(thought.thought_number, [])
        arrow = " → " + ", ".join(f"T{n}" for n in connections) if connections else ""
        lines.append(f"{node:<10}{quality}{classification}{_alignment_tag(thought)}{arrow}")

    branches: dict[str, list[Thought]] = {}
    for thought in thoughts:
        if thought.branch_id:
            branches.setdefault(thought.branch_id, []).append(thought)
    if branches:
        lines += ["", "Branches:"]
        for branch_id, members in branches.items():
            chain = " → ".join(f"T{t.thought_number}({t.phase.value[0]})" for t in members)
            lines.append(f"  {branch_id}: {chain}")

    lines += ["", "Legend:"]
    lines += [f"  {phase.value[0]} - {phase.value}" for phase in PHASE_ORDER]
    lines.append(
        "  A:# - Prompt Alignment Score (A:8✓ = good, A:5⚠️ = moderate, A:2❌ = poor)"
    )
    return "\n".join(lines) + "\n"


def render_concept_map(thoughts: Sequence[Thought]) -> str:
    """Consecutive concepts of each thought linked, first concept tied to its classification."""
    relations: list[tuple[str, str, str]] = []
    for thought in thoughts:
        concepts = thought.concepts
        for source, target in zip(concepts, concepts[1:]):
            relations.append((source, "relates to", target))
        if thought.classification and concepts:
            relations.append((concepts[0], "classified as", thought.classification.value))

    ordered: dict[str, list[str]] = {}
    for source, relationship, target in relations:
        ordered.setdefault(source, []).append(f"{relationship} → {target}")
        ordered.setdefault(target, [])

    lines = ["=== Concept Map ===", ""]
    for concept, links in ordered.items():
        lines.append(f"[{concept}]")
        lines.extend(f"  {link}" for link in links)
        lines.append("")
    return "\n".join(lines)


def render_timeline(thoughts: Sequence[Thought]) -> str:
    lines = ["=== Thought Timeline ==="]
    current: Phase | None = None

    for thought in thoughts:
        if thought.phase != current:
            lines += ["", f"[Phase: {thought.phase.value}]"]
            current = thought.phase

        number = f"T{thought.thought_number}".ljust(4)
        classification = f"[{thought.classification.value}] " if thought.classification else ""
        quality = f" (Q:{thought.quality.quality_score})" if thought.quality else ""
        lines.append(
            f"{number} {classification}{truncate(thought.text, 60)}{quality}"
            f"{_alignment_tag(thought)}"
        )

        if thought.is_revision and thought.revises_thought is not None:
            lines.append(f"      ↳ Revises T{thought.revises_thought}")
        if thought.dependencies:
            lines.append(
                "      ↑ Depends on: " + ", ".join(f"T{n}" for n in thought.dependencies)
            )
        if thought.drift_warning:
            lines.append(f"      ⚠️ {thought.drift_warning}")

    return "\n".join(lines) + "\n"


def render_alignment_view(thoughts: Sequence[Thought], profile: PromptProfile | None) -> str:
    """Thoughts grouped by prompt alignment, with summary metrics."""
    if profile is None:
        return "=== Prompt Alignment View ===\n(No prompt metadata available)\n"

    lines = ["=== Prompt Alignment View ===", "", "Prompt Goals:"]
    lines += [f"  {i}. {goal}" for i, goal in enumerate(profile.goals, start=1)]
    lines += ["", "Thought Alignment to Goals:"]

    scored = [t for t in thoughts if t.alignment_score is not None]
    high = [t for t in scored if t.alignment_score >= 7]
    medium = [t for t in scored if 4 <= t.alignment_score < 7]
    low = [t for t in scored if t.alignment_score < 4]

    for title, group in (("High", high), ("Medium", medium), ("Low", low)):
        if not group:
            continue
        lines.append(f"  {title} Alignment:")
        for t in group:
            lines.append(
                f"    T{t.thought_number} - {truncate(t.text, 50)} [{t.alignment_score}/10]"
            )
            if title == "Low" and t.drift_warning:
                lines.append(f"      ⚠️ {t.drift_warning}")

    if scored:
        average = sum(t.alignment_score for t in scored) / len(scored)
        trend = alignment_trend(thoughts)
        lines += [
            "",
            "Alignment Metrics:",
            f"  Average Alignment: {average:.1f}/10",
            f"  Alignment Trend: {TREND_ARROWS.get(trend, trend)}",
            f"  High Alignment Thoughts: {len(high)}/{len(thoughts)}",
            f"  Low Alignment Thoughts: {len(low)}/{len(thoughts)}",
        ]
    return "\n".join(lines) + "\n"


def render_progress_view(thoughts: Sequence[Thought], profile: PromptProfile | None) -> str:
    """Per-goal progress bars plus the overall estimate."""
    if profile is None:
        return "=== Prompt Progress View ===\n(No prompt metadata available)\n"

    lines = ["=== Prompt Progress View ===", "", "Progress Against Goals:"]
    target = COVERAGE_TARGET[profile.complexity]
    for index, goal in enumerate(profile.goals):
        key = f"goal_{index}"
        relevant = [t for t in thoughts if t.relevance_by_aspect.get(key, 0.0) > 0.5]
        percentage = min(100, round_half_up(len(relevant) / target * 100))
        lines.append(f"  Goal {index + 1}: {goal}")
        lines.append(f"    [{_bar(percentage, GOAL_BAR_WIDTH)}] {percentage}%")
        if relevant:
            numbers = ", ".join(f"T{t.thought_number}" for t in relevant)
            lines.append(f"    Relevant thoughts: {numbers}")
        else:
            lines.append("    No thoughts directly addressing this goal yet")
        lines.append("")

    progress = overall_progress(thoughts, profile)
    lines += [
        "Overall Progress:",
        f"  [{_bar(progress, OVERALL_BAR_WIDTH)}] {progress}%",
        f"  Estimated thoughts to completion: {estimate_remaining_thoughts(thoughts, profile)}",
    ]
    return "\n".join(lines) + "\n"
