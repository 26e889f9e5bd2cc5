"""Session store: the single writer of thoughts, branches and tool stats.

Each ``submit`` runs the full pipeline for one thought before returning:

    validate -> enrich -> align -> recommend -> append -> guidance -> respond

and only then publishes telemetry describing what happened. Validation
failures return ``{"error": ..., "status": "failed"}`` and leave the store
untouched.

The store does no locking. Callers that share one instance between
concurrent requests must serialize access (the MCP server holds an
``asyncio.Lock`` around every call).

Example:
    store = ThoughtGraphStore()
    response = store.submit({
        "thought": "I need to parse CSV files quickly",
        "thoughtNumber": 1,
        "totalThoughts": 3,
        "nextThoughtNeeded": True,
    })
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import replace
from types import MappingProxyType
from typing import Any

from loguru import logger

from src.config import Config, get_config
from src.tools import guidance
from src.tools.alignment import AlignmentEngine, round_half_up
from src.tools.contradiction import ContradictionEngine
from src.tools.progress import prompt_progress
from src.tools.prompt_profiler import PromptProfiler
from src.tools.recommendation import RecommendationEngine
from src.tools.reflection import (
    ReflectionEngine,
    alternative_perspectives,
    identify_assumptions,
    reflection_strategy,
)
from src.tools.similarity import SimilarityEngine
from src.tools.text_features import HashVectorizer, Vectorizer, extract_concepts, extract_keywords
from src.tools.thought_graph import ThoughtGraph
from src.tools.thought_types import (
    Branch,
    Phase,
    PromptProfile,
    Thought,
    ThoughtInput,
    ToolUsage,
    parse_thought_input,
)
from src.utils.errors import SessionLimitError, ThoughtValidationError
from src.utils.telemetry import Telemetry, ThoughtEvent


class ThoughtGraphStore:
    """Owns one reasoning session.

    Attributes:
        similarity: Pairwise similarity and clustering.
        contradiction: Contradiction detection between thoughts.
        alignment: Prompt alignment and drift scoring.
        reflection: Reflection prompt generation.
        recommendation: Strategy and complexity recommendations.
        telemetry: Event dispatcher, published after each computation.

    """

    def __init__(
        self,
        config: Config | None = None,
        *,
        vectorizer: Vectorizer | None = None,
        telemetry: Telemetry | None = None,
    ) -> None:
        self.config = config or get_config()
        analysis = self.config.analysis

        if vectorizer is None:
            hash_vectorizer = HashVectorizer(analysis.vector_dimension)
            if analysis.word_vectors_path:
                hash_vectorizer.load_pretrained(analysis.word_vectors_path)
            vectorizer = hash_vectorizer
        self.vectorizer = vectorizer

        self.profiler = PromptProfiler()
        self.similarity = SimilarityEngine(self.vectorizer, analysis.cluster_similarity_threshold)
        self.contradiction = ContradictionEngine(
            self.similarity, analysis.contradiction_similarity_threshold
        )
        self.alignment = AlignmentEngine(
            drift_threshold=analysis.drift_threshold,
            presence_threshold=analysis.aspect_presence_threshold,
        )
        self.reflection = ReflectionEngine(self.similarity)
        self.recommendation = RecommendationEngine()
        self.telemetry = telemetry or Telemetry()

        self._thoughts: list[Thought] = []
        self._branches: dict[str, Branch] = {}
        self._tool_usage: dict[str, ToolUsage] = {}
        self._graph = ThoughtGraph()
        self._profile: PromptProfile | None = None
        self._total_thoughts = 0

        logger.debug(
            f"ThoughtGraphStore initialized (dimension={self.vectorizer.dimension}, "
            f"drift_threshold={analysis.drift_threshold})"
        )

    # =========================================================================
    # Read-only accessors
    # =========================================================================

    @property
    def thoughts(self) -> tuple[Thought, ...]:
        return tuple(self._thoughts)

    @property
    def branches(self) -> dict[str, Branch]:
        return {
            key: Branch(b.branch_id, b.branch_from_thought, list(b.thought_numbers))
            for key, b in self._branches.items()
        }

    @property
    def profile(self) -> PromptProfile | None:
        return self._profile

    @property
    def graph(self) -> ThoughtGraph:
        """Adjacency view. Callers must treat it as read-only."""
        return self._graph

    @property
    def tool_usage_stats(self) -> dict[str, dict[str, Any]]:
        return {name: usage.to_dict() for name, usage in self._tool_usage.items()}

    @property
    def available_tools(self) -> tuple[str, ...]:
        return self.config.analysis.available_tools

    @property
    def total_thoughts(self) -> int:
        return self._total_thoughts

    # =========================================================================
    # Session lifecycle
    # =========================================================================

    def _build_profile(self, prompt: str) -> tuple[PromptProfile, ThoughtEvent | None]:
        if self._profile is not None:
            return self._profile, None

        self._profile = self.profiler.profile(prompt)
        logger.info(
            f"Session initialized: task={self._profile.task_type.value}, "
            f"complexity={self._profile.complexity.value}, "
            f"priority={self._profile.priority.value}"
        )
        event = ThoughtEvent(
            name="prompt.profiled",
            attributes={
                "task_type": self._profile.task_type.value,
                "complexity": self._profile.complexity.value,
                "priority": self._profile.priority.value,
                "goals": len(self._profile.goals),
                "constraints": len(self._profile.constraints),
                "domains": list(self._profile.domains),
            },
        )
        return self._profile, event

    def initialize_session(self, prompt: str) -> PromptProfile:
        """Profile the session's initiating prompt.

        Only the first call builds a profile; later calls return it
        unchanged.
        """
        profile, event = self._build_profile(prompt)
        if event is not None:
            self.telemetry.publish(event)
        return profile

    def session_summary(self) -> dict[str, Any]:
        """Compact counters for status reporting."""
        return {
            "thoughtCount": len(self._thoughts),
            "totalThoughts": self._total_thoughts,
            "revisions": sum(1 for t in self._thoughts if t.is_revision),
            "branches": sorted(self._branches),
            "graph": {
                "nodes": self._graph.node_count,
                "edges": self._graph.edge_count,
                "contradictions": len(self._graph.contradictions()),
            },
            "profile": self._profile.to_dict() if self._profile else None,
        }

    # =========================================================================
    # Pipeline
    # =========================================================================

    def _validate(self, payload: Mapping[str, Any]) -> ThoughtInput:
        """Parse the payload and check it against the session state.

        Raises:
            ThoughtValidationError: If the payload is malformed, refers to
                thoughts that do not exist yet, or reuses a thought number.
                Revisions are new thoughts too and take the next number.
            SessionLimitError: If the session is full.

        """
        data = parse_thought_input(payload)
        limits = self.config.input_limits

        if not data.thought.strip():
            raise ThoughtValidationError("thought", "Invalid thought: must not be empty")
        if len(data.thought) > limits.max_thought_size:
            raise ThoughtValidationError(
                "thought",
                f"Invalid thought: exceeds maximum size of {limits.max_thought_size} characters",
            )
        if len(self._thoughts) >= limits.max_thoughts_per_session:
            raise SessionLimitError(
                "thoughtNumber",
                f"Session limit reached: at most {limits.max_thoughts_per_session} thoughts",
            )

        number = data.thought_number
        existing = {t.thought_number for t in self._thoughts}

        for dependency in data.dependencies:
            if dependency >= number or dependency not in existing:
                raise ThoughtValidationError(
                    "dependencies",
                    f"Invalid dependencies: thought {dependency} does not precede thought {number}",
                )
        for name, ref in (
            ("revisesThought", data.revises_thought),
            ("branchFromThought", data.branch_from_thought),
        ):
            if ref is not None and (ref >= number or ref not in existing):
                raise ThoughtValidationError(
                    name, f"Invalid {name}: thought {ref} does not precede thought {number}"
                )

        if existing and number <= max(existing):
            raise ThoughtValidationError(
                "thoughtNumber",
                f"Invalid thoughtNumber: expected a number greater than {max(existing)}",
            )
        return data

    def submit(self, payload: Mapping[str, Any]) -> dict[str, Any]:
        """Run one thought through the pipeline and append it.

        Args:
            payload: Raw ``SubmitThought`` object with camelCase keys.

        Returns:
            The response dict, or ``{"error": str, "status": "failed"}`` when
            the payload is rejected.

        """
        try:
            data = self._validate(payload)
        except ThoughtValidationError as e:
            logger.warning(f"Rejected thought: {e.message}")
            self.telemetry.emit("thought.rejected", field=e.field_name, error=e.message)
            return {"error": e.message, "status": "failed"}

        events: list[ThoughtEvent] = []
        number = data.thought_number

        profile = self._profile
        if number == 1 and profile is None:
            profile, profiled = self._build_profile(data.thought)
            if profiled is not None:
                events.append(profiled)

        previous_total = self._total_thoughts
        phase = data.phase or (Phase.PLANNING if number == 1 else Phase.EXECUTION)
        thought = Thought.from_input(data, phase)
        thought = replace(thought, total_thoughts=max(data.total_thoughts, number))

        history = list(self._thoughts)
        thought = self._enrich(thought, history)
        thought = self._align(thought, profile)
        prompts = self._reflect(thought, history, profile)
        thought = replace(thought, reflection_prompts=tuple(prompts))
        thought = self._recommend(thought, history, profile)

        total = max(thought.total_thoughts, previous_total)
        if thought.recommendations is not None:
            total = max(total, thought.recommendations.complexity.recommended_thought_count)
        thought = replace(thought, total_thoughts=total)

        self._append(thought)
        self._record_tools(thought)

        appended = self.thoughts
        strategic = guidance.strategic_guidance(
            thought, appended, self._branches, self.available_tools, profile
        )
        response = self._response(thought, profile, strategic)

        events.extend(
            self._pipeline_events(thought, data.total_thoughts, previous_total, strategic)
        )
        self.telemetry.emit_all(events)
        return response

    def _enrich(self, thought: Thought, history: list[Thought]) -> Thought:
        text = thought.text
        thought = replace(
            thought,
            vector=tuple(float(x) for x in self.vectorizer.vectorize(text)),
            keywords=tuple(extract_keywords(text)),
            concepts=tuple(extract_concepts(text)),
        )
        thought = replace(thought, assumptions=tuple(identify_assumptions(thought)))

        quality = guidance.assess_quality(thought)
        thought = replace(
            thought, quality=quality, insight_value=guidance.insight_value(thought, quality)
        )
        contradictions = self.contradiction.check_contradictions(thought, history)
        return replace(thought, contradictions=tuple(contradictions))

    def _align(self, thought: Thought, profile: PromptProfile | None) -> Thought:
        if profile is None:
            return thought
        report = self.alignment.analyze(thought.text, profile)
        return replace(
            thought,
            alignment_score=report.alignment_score,
            relevance_by_aspect=MappingProxyType(dict(report.relevance_by_aspect)),
            drift_warning=report.drift_warning,
            suggested_corrections=report.suggested_corrections,
        )

    def _reflect(
        self, thought: Thought, history: list[Thought], profile: PromptProfile | None
    ) -> list[str]:
        sequence = [*history, thought]
        if profile is None:
            return self.reflection.reflection_prompts(sequence)
        return self.reflection.prompt_aware_reflection_prompts(sequence, profile)

    def _recommend(
        self, thought: Thought, history: list[Thought], profile: PromptProfile | None
    ) -> Thought:
        if profile is None:
            return thought
        recommendations = self.recommendation.generate(
            profile,
            thought.thought_number,
            thought.total_thoughts,
            thought.phase,
            prior_thoughts=history,
        )
        return replace(thought, recommendations=recommendations)

    def _append(self, thought: Thought) -> None:
        self._thoughts.append(thought)
        self._total_thoughts = thought.total_thoughts

        if thought.branch_from_thought is not None and thought.branch_id:
            branch = self._branches.get(thought.branch_id)
            if branch is None:
                branch = Branch(thought.branch_id, thought.branch_from_thought)
                self._branches[thought.branch_id] = branch
            branch.thought_numbers.append(thought.thought_number)

        self._graph.add_thought(thought)

    def _record_tools(self, thought: Thought) -> None:
        for tool in thought.tools_used:
            usage = self._tool_usage.setdefault(tool, ToolUsage())
            usage.usage_count += 1
            if thought.thought_number not in usage.thoughts_used_in:
                usage.thoughts_used_in.append(thought.thought_number)
            phase = thought.phase.value
            usage.phase_usage[phase] = usage.phase_usage.get(phase, 0) + 1

    # =========================================================================
    # Output
    # =========================================================================

    def _session_complexity(self, thought: Thought) -> str:
        if thought.complexity is not None:
            return thought.complexity.value
        revisions = sum(1 for t in self._thoughts if t.is_revision)
        return guidance.estimate_session_complexity(
            len(self._thoughts), revisions, len(self._branches)
        ).value

    def _response(
        self, thought: Thought, profile: PromptProfile | None, strategic: list[str]
    ) -> dict[str, Any]:
        recommendations = thought.recommendations
        response: dict[str, Any] = {
            "thoughtNumber": thought.thought_number,
            "totalThoughts": thought.total_thoughts,
            "nextThoughtNeeded": thought.next_thought_needed,
            "branches": list(self._branches),
            "thoughtHistoryLength": len(self._thoughts),
            "availableTools": list(self.available_tools),
            "phase": thought.phase.value,
            "complexity": self._session_complexity(thought),
            "progress": f"{round_half_up(thought.thought_number / thought.total_thoughts * 100)}%",
            "recentThoughts": guidance.recent_thoughts(self._thoughts),
            "suggestedNextPhase": guidance.suggest_next_phase(thought).value,
            "thoughtQuality": thought.quality.to_dict() if thought.quality else None,
            "strategicGuidance": strategic,
            "toolUsageStats": self.tool_usage_stats,
            "keywords": guidance.session_keywords(thought.text),
            "insightValue": thought.insight_value,
            "semanticAnalysis": {
                "concepts": list(thought.concepts),
                "contradictions": [c.to_dict() for c in thought.contradictions],
                "assumptions": list(thought.assumptions),
                "reflectionPrompts": list(thought.reflection_prompts),
                "alternativePerspectives": alternative_perspectives(thought),
            },
            "promptAlignment": thought.alignment_score,
            "promptRelevance": dict(thought.relevance_by_aspect) if profile else None,
            "driftWarning": thought.drift_warning,
            "suggestedCorrections": list(thought.suggested_corrections),
            "intelligenceRecommendations": recommendations.to_dict() if recommendations else None,
            "cognitiveBiases": (
                [b.to_dict() for b in recommendations.cognitive_biases] if recommendations else []
            ),
            "metacognitiveStrategies": (
                [m.to_dict() for m in recommendations.metacognitive_strategies]
                if recommendations
                else []
            ),
            "adaptiveSuggestions": (
                list(recommendations.adaptive_suggestions) if recommendations else []
            ),
            "insightPrompts": list(recommendations.insight_prompts) if recommendations else [],
        }
        if profile is not None:
            response["semanticAnalysis"]["reflectionStrategy"] = reflection_strategy(
                self._thoughts, profile
            ).to_dict()
            response["promptProgress"] = prompt_progress(self._thoughts, profile).to_dict()
        return response

    def _pipeline_events(
        self,
        thought: Thought,
        submitted_total: int,
        previous_total: int,
        strategic: list[str],
    ) -> list[ThoughtEvent]:
        number = thought.thought_number
        events = [
            ThoughtEvent(
                "thought.contradictions",
                number,
                {
                    "count": len(thought.contradictions),
                    "with": [c.thought_number for c in thought.contradictions],
                },
            )
        ]
        if thought.alignment_score is not None:
            events.append(
                ThoughtEvent(
                    "thought.alignment",
                    number,
                    {"score": thought.alignment_score, "drift": thought.drift_warning is not None},
                )
            )
        if thought.recommendations is not None:
            events.append(
                ThoughtEvent(
                    "thought.recommendations",
                    number,
                    {
                        "strategies": [s.name for s in thought.recommendations.strategies],
                        "recommended_thoughts": (
                            thought.recommendations.complexity.recommended_thought_count
                        ),
                    },
                )
            )
        if thought.total_thoughts != submitted_total:
            events.append(
                ThoughtEvent(
                    "thought.total_adjusted",
                    number,
                    {
                        "submitted": submitted_total,
                        "previous": previous_total,
                        "adjusted": thought.total_thoughts,
                    },
                )
            )
        if thought.tools_used:
            tools = list(thought.tools_used)
            events.append(ThoughtEvent("thought.tools", number, {"tools": tools}))
        events.append(ThoughtEvent("thought.guidance", number, {"count": len(strategic)}))
        events.append(
            ThoughtEvent(
                "thought.appended",
                number,
                {
                    "phase": thought.phase.value,
                    "is_revision": thought.is_revision,
                    "branch_id": thought.branch_id,
                    "history_length": len(self._thoughts),
                },
            )
        )
        return events
