"""Type definitions for the thought pipeline.

Enums and records shared by the analysis engines, the store and the
renderers. Ingress validation lives here too so every entry point parses
payloads the same way.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, Field, StrictBool, StrictInt, StrictStr, ValidationError

from src.utils.errors import ThoughtValidationError

if TYPE_CHECKING:
    from src.tools.recommendation import Recommendations


class Phase(str, Enum):
    """Coarse stage label on a thought."""

    PLANNING = "Planning"
    ANALYSIS = "Analysis"
    EXECUTION = "Execution"
    VERIFICATION = "Verification"


PHASE_ORDER: tuple[Phase, ...] = (
    Phase.PLANNING,
    Phase.ANALYSIS,
    Phase.EXECUTION,
    Phase.VERIFICATION,
)


class Classification(str, Enum):
    """Epistemic role of a thought."""

    HYPOTHESIS = "hypothesis"
    OBSERVATION = "observation"
    CONCLUSION = "conclusion"
    QUESTION = "question"
    SOLUTION = "solution"


class TaskType(str, Enum):
    """Kind of work the initiating prompt asks for."""

    CREATIVE = "creative"
    ANALYTICAL = "analytical"
    INFORMATIONAL = "informational"
    TECHNICAL = "technical"
    MIXED = "mixed"


class ComplexityLevel(str, Enum):
    """Problem or session complexity."""

    SIMPLE = "simple"
    MEDIUM = "medium"
    COMPLEX = "complex"


class Priority(str, Enum):
    """Urgency expressed by the prompt."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class ThoughtStatus(str, Enum):
    """Caller-declared status of a thought."""

    COMPLETE = "complete"
    IN_PROGRESS = "in-progress"
    NEEDS_REVISION = "needs-revision"


# =============================================================================
# Ingress
# =============================================================================


class ThoughtInput(BaseModel):
    """A submitted thought as received from the host protocol.

    Required fields are strictly typed: ``"3"`` is not a thought number
    and ``1`` is not a boolean. Unknown keys are ignored.
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True, frozen=True)

    thought: StrictStr = Field(min_length=1, description="The thought text")
    thought_number: StrictInt = Field(alias="thoughtNumber", ge=1)
    total_thoughts: StrictInt = Field(alias="totalThoughts", ge=1)
    next_thought_needed: StrictBool = Field(alias="nextThoughtNeeded")

    is_revision: bool | None = Field(default=None, alias="isRevision")
    revises_thought: int | None = Field(default=None, alias="revisesThought", ge=1)
    branch_from_thought: int | None = Field(default=None, alias="branchFromThought", ge=1)
    branch_id: str | None = Field(default=None, alias="branchId")
    needs_more_thoughts: bool | None = Field(default=None, alias="needsMoreThoughts")
    phase: Phase | None = None
    dependencies: list[int] = Field(default_factory=list)
    tools_used: list[str] = Field(default_factory=list, alias="toolsUsed")
    complexity: ComplexityLevel | None = None
    status: ThoughtStatus | None = None
    classification: Classification | None = None
    confidence_score: float | None = Field(default=None, alias="confidenceScore", ge=0.0, le=1.0)
    evidence_strength: float | None = Field(
        default=None, alias="evidenceStrength", ge=0.0, le=1.0
    )


_REQUIRED_FIELDS: dict[str, str] = {
    "thought": "Invalid thought: must be a string",
    "thoughtNumber": "Invalid thoughtNumber: must be a number",
    "totalThoughts": "Invalid totalThoughts: must be a number",
    "nextThoughtNeeded": "Invalid nextThoughtNeeded: must be a boolean",
}

_FIELD_ALIASES: dict[str, str] = {
    name: info.alias or name for name, info in ThoughtInput.model_fields.items()
}


def parse_thought_input(payload: Mapping[str, Any]) -> ThoughtInput:
    """Validate a raw payload into a ThoughtInput.

    Required-field problems are reported first, in declaration order, with
    the fixed messages callers rely on.

    Raises:
        ThoughtValidationError: If the payload is malformed.

    """
    if not isinstance(payload, Mapping):
        raise ThoughtValidationError("payload", "Invalid input: expected an object")

    try:
        return ThoughtInput.model_validate(dict(payload))
    except ValidationError as e:
        errors = e.errors()

    by_field: dict[str, dict[str, Any]] = {}
    for err in errors:
        loc = err.get("loc") or ("payload",)
        name = str(loc[0])
        by_field.setdefault(_FIELD_ALIASES.get(name, name), err)

    for name, message in _REQUIRED_FIELDS.items():
        err = by_field.get(name)
        if err is None:
            continue
        if name == "thought" or err["type"] == "missing" or err["type"].endswith("_type"):
            raise ThoughtValidationError(name, message)
        raise ThoughtValidationError(name, f"Invalid {name}: {err['msg']}")

    name, err = next(iter(by_field.items()))
    raise ThoughtValidationError(name, f"Invalid {name}: {err['msg']}")


# =============================================================================
# Computed records
# =============================================================================


@dataclass(frozen=True, slots=True)
class ContradictionDetail:
    """A contradiction between the new thought and an earlier one."""

    thought_number: int
    explanation: str

    def to_dict(self) -> dict[str, Any]:
        return {"thoughtNumber": self.thought_number, "explanation": self.explanation}


@dataclass(frozen=True, slots=True)
class QualityAssessment:
    """Heuristic 0-10 quality scores for a thought."""

    coherence: int
    depth: int
    relevance: int
    quality_score: int
    feedback: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "coherence": self.coherence,
            "depth": self.depth,
            "relevance": self.relevance,
            "qualityScore": self.quality_score,
            "feedback": list(self.feedback),
        }


@dataclass(frozen=True, slots=True)
class PromptProfile:
    """Structured summary of the session's initiating prompt.

    Built once per session and never modified afterwards.
    """

    original_prompt: str
    goals: tuple[str, ...] = ()
    constraints: tuple[str, ...] = ()
    domains: tuple[str, ...] = ()
    keywords: tuple[str, ...] = ()
    entities: tuple[str, ...] = ()
    task_type: TaskType = TaskType.MIXED
    complexity: ComplexityLevel = ComplexityLevel.SIMPLE
    priority: Priority = Priority.LOW
    expected_output_format: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "originalPrompt": self.original_prompt,
            "goals": list(self.goals),
            "constraints": list(self.constraints),
            "domains": list(self.domains),
            "keywords": list(self.keywords),
            "entities": list(self.entities),
            "taskType": self.task_type.value,
            "complexity": self.complexity.value,
            "priority": self.priority.value,
            "expectedOutputFormat": self.expected_output_format,
        }


@dataclass(frozen=True)
class Thought:
    """One accepted thought plus its computed annotations.

    Created once per accepted submission. The store builds it in stages
    with ``dataclasses.replace`` and never touches it after appending.
    """

    text: str
    thought_number: int
    total_thoughts: int
    next_thought_needed: bool
    phase: Phase
    is_revision: bool = False
    revises_thought: int | None = None
    branch_from_thought: int | None = None
    branch_id: str | None = None
    needs_more_thoughts: bool = False
    dependencies: tuple[int, ...] = ()
    tools_used: tuple[str, ...] = ()
    complexity: ComplexityLevel | None = None
    status: ThoughtStatus | None = None
    classification: Classification | None = None
    confidence_score: float | None = None
    evidence_strength: float | None = None

    vector: tuple[float, ...] = ()
    keywords: tuple[str, ...] = ()
    concepts: tuple[str, ...] = ()
    assumptions: tuple[str, ...] = ()
    contradictions: tuple[ContradictionDetail, ...] = ()
    reflection_prompts: tuple[str, ...] = ()
    alignment_score: int | None = None
    relevance_by_aspect: Mapping[str, float] = field(
        default_factory=lambda: MappingProxyType({})
    )
    drift_warning: str | None = None
    suggested_corrections: tuple[str, ...] = ()
    quality: QualityAssessment | None = None
    insight_value: int | None = None
    recommendations: Recommendations | None = None

    @classmethod
    def from_input(cls, data: ThoughtInput, phase: Phase) -> Thought:
        """Build the base record from validated input."""
        return cls(
            text=data.thought,
            thought_number=data.thought_number,
            total_thoughts=data.total_thoughts,
            next_thought_needed=data.next_thought_needed,
            phase=phase,
            is_revision=bool(data.is_revision),
            revises_thought=data.revises_thought,
            branch_from_thought=data.branch_from_thought,
            branch_id=data.branch_id,
            needs_more_thoughts=bool(data.needs_more_thoughts),
            dependencies=tuple(data.dependencies),
            tools_used=tuple(data.tools_used),
            complexity=data.complexity,
            status=data.status,
            classification=data.classification,
            confidence_score=data.confidence_score,
            evidence_strength=data.evidence_strength,
        )

    def summary(self, limit: int = 50) -> str:
        """Text truncated to ``limit`` characters with an ellipsis."""
        if len(self.text) > limit:
            return self.text[:limit] + "..."
        return self.text


@dataclass
class Branch:
    """A named alternate sequence of thoughts."""

    branch_id: str
    branch_from_thought: int
    thought_numbers: list[int] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "branchId": self.branch_id,
            "branchFromThought": self.branch_from_thought,
            "thoughtNumbers": list(self.thought_numbers),
        }


@dataclass
class ToolUsage:
    """Accumulated usage counters for one tool."""

    usage_count: int = 0
    thoughts_used_in: list[int] = field(default_factory=list)
    phase_usage: dict[str, int] = field(
        default_factory=lambda: {phase.value: 0 for phase in PHASE_ORDER}
    )

    def to_dict(self) -> dict[str, Any]:
        return {
            "usageCount": self.usage_count,
            "thoughtsUsedIn": list(self.thoughts_used_in),
            "phaseUsage": dict(self.phase_usage),
        }
