"""Thought Compass analysis engines and the session store."""

from .alignment import AlignmentEngine, AlignmentReport, DriftResult
from .contradiction import ContradictionEngine
from .prompt_profiler import PromptProfiler
from .recommendation import RecommendationEngine, Recommendations
from .reflection import ReflectionEngine
from .similarity import SimilarityEngine, TopicCluster
from .text_features import HashVectorizer, Vectorizer
from .thought_graph import Edge, EdgeType, ThoughtGraph
from .thought_store import ThoughtGraphStore
from .thought_types import (
    Branch,
    Classification,
    ComplexityLevel,
    ContradictionDetail,
    Phase,
    Priority,
    PromptProfile,
    QualityAssessment,
    TaskType,
    Thought,
    ThoughtInput,
    ThoughtStatus,
    ToolUsage,
    parse_thought_input,
)

__all__ = [
    # Store
    "ThoughtGraphStore",
    "ThoughtGraph",
    "Edge",
    "EdgeType",
    # Engines
    "AlignmentEngine",
    "AlignmentReport",
    "DriftResult",
    "ContradictionEngine",
    "PromptProfiler",
    "RecommendationEngine",
    "Recommendations",
    "ReflectionEngine",
    "SimilarityEngine",
    "TopicCluster",
    "HashVectorizer",
    "Vectorizer",
    # Types
    "Branch",
    "Classification",
    "ComplexityLevel",
    "ContradictionDetail",
    "Phase",
    "Priority",
    "PromptProfile",
    "QualityAssessment",
    "TaskType",
    "Thought",
    "ThoughtInput",
    "ThoughtStatus",
    "ToolUsage",
    "parse_thought_input",
]
