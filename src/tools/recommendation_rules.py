"""Rule tables for the recommendation engine.

Each table is keyed by task type, phase or domain. The engine walks them in
a fixed order, so list order here is recommendation order.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from src.tools.thought_types import Classification, ComplexityLevel, Phase, TaskType

ALL_PHASES: tuple[Phase, ...] = (
    Phase.PLANNING,
    Phase.ANALYSIS,
    Phase.EXECUTION,
    Phase.VERIFICATION,
)


@dataclass(frozen=True)
class StrategyRecommendation:
    name: str
    description: str
    reason: str
    effectiveness: int
    phases: tuple[Phase, ...]

    def to_dict(self) -> dict[str, Any]:
        return {
            "strategyName": self.name,
            "description": self.description,
            "reasonForRecommendation": self.reason,
            "estimatedEffectiveness": self.effectiveness,
            "applicablePhases": [phase.value for phase in self.phases],
        }


@dataclass(frozen=True)
class ReasoningTypeRecommendation:
    reasoning_type: str
    description: str
    applicability: int
    examples: tuple[str, ...]

    def to_dict(self) -> dict[str, Any]:
        return {
            "reasoningType": self.reasoning_type,
            "description": self.description,
            "applicability": self.applicability,
            "examples": list(self.examples),
        }


@dataclass(frozen=True)
class CognitiveBias:
    bias_type: str
    description: str
    likelihood: float
    mitigation: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "biasType": self.bias_type,
            "description": self.description,
            "likelihood": self.likelihood,
            "mitigationStrategy": self.mitigation,
        }


@dataclass(frozen=True)
class MetacognitiveStrategy:
    name: str
    description: str
    applicability: int
    expected_benefit: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "strategyName": self.name,
            "description": self.description,
            "applicability": self.applicability,
            "expectedBenefit": self.expected_benefit,
        }


@dataclass(frozen=True)
class LearningRecommendation:
    area: str
    level: str
    resources: tuple[str, ...]
    benefits: tuple[str, ...]
    relevance: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "learningArea": self.area,
            "currentLevel": self.level,
            "recommendedResources": list(self.resources),
            "expectedBenefits": list(self.benefits),
            "relevanceToPrompt": self.relevance,
        }


# =============================================================================
# Strategies
# =============================================================================

TASK_STRATEGIES: dict[TaskType, tuple[StrategyRecommendation, ...]] = {
    TaskType.CREATIVE: (
        StrategyRecommendation(
            "Divergent Thinking",
            "Generate multiple diverse ideas before converging on solutions",
            "Creative tasks benefit from exploring multiple possibilities",
            9,
            (Phase.PLANNING, Phase.ANALYSIS),
        ),
        StrategyRecommendation(
            "Analogical Reasoning",
            "Draw parallels from different domains to inspire novel solutions",
            "Analogies can spark creative insights",
            8,
            (Phase.ANALYSIS, Phase.EXECUTION),
        ),
    ),
    TaskType.ANALYTICAL: (
        StrategyRecommendation(
            "Systematic Decomposition",
            "Break down the problem into clearly defined components",
            "Analytical tasks benefit from structured problem decomposition",
            9,
            (Phase.PLANNING, Phase.ANALYSIS),
        ),
        StrategyRecommendation(
            "Evidence-Based Reasoning",
            "Support each conclusion with specific evidence",
            "Analytical tasks require rigorous justification",
            8,
            (Phase.ANALYSIS, Phase.EXECUTION, Phase.VERIFICATION),
        ),
    ),
    TaskType.INFORMATIONAL: (
        StrategyRecommendation(
            "Comprehensive Coverage",
            "Ensure all relevant aspects of the topic are addressed",
            "Informational tasks benefit from breadth of coverage",
            9,
            (Phase.PLANNING, Phase.EXECUTION),
        ),
        StrategyRecommendation(
            "Hierarchical Organization",
            "Structure information from general to specific",
            "Hierarchical organization improves information accessibility",
            8,
            (Phase.EXECUTION, Phase.VERIFICATION),
        ),
    ),
    TaskType.TECHNICAL: (
        StrategyRecommendation(
            "Precision-First Approach",
            "Focus on technical accuracy and precise terminology",
            "Technical tasks require domain-specific precision",
            9,
            (Phase.ANALYSIS, Phase.EXECUTION),
        ),
        StrategyRecommendation(
            "Implementation Planning",
            "Develop detailed step-by-step implementation plans",
            "Technical tasks benefit from explicit implementation details",
            8,
            (Phase.PLANNING, Phase.EXECUTION),
        ),
    ),
    TaskType.MIXED: (
        StrategyRecommendation(
            "Adaptive Approach",
            "Flexibly switch between creative and analytical modes",
            "Mixed tasks require adaptability between thinking styles",
            9,
            (Phase.PLANNING, Phase.ANALYSIS, Phase.EXECUTION),
        ),
    ),
}

PHASE_STRATEGIES: dict[Phase, StrategyRecommendation] = {
    Phase.PLANNING: StrategyRecommendation(
        "Goal Decomposition",
        "Break down the main goal into sub-goals",
        "Planning phase benefits from clear goal hierarchy",
        8,
        (Phase.PLANNING,),
    ),
    Phase.ANALYSIS: StrategyRecommendation(
        "Multi-perspective Analysis",
        "Analyze the problem from multiple stakeholder perspectives",
        "Analysis phase benefits from diverse viewpoints",
        8,
        (Phase.ANALYSIS,),
    ),
    Phase.EXECUTION: StrategyRecommendation(
        "Incremental Development",
        "Build the solution in incremental steps with validation",
        "Execution phase benefits from iterative approach",
        8,
        (Phase.EXECUTION,),
    ),
    Phase.VERIFICATION: StrategyRecommendation(
        "Criteria-Based Evaluation",
        "Evaluate the solution against explicit success criteria",
        "Verification phase benefits from objective assessment",
        8,
        (Phase.VERIFICATION,),
    ),
}

EARLY_STRATEGY = StrategyRecommendation(
    "Exploratory Breadth",
    "Explore the problem space broadly before diving deep",
    "Early thoughts benefit from broad exploration",
    8,
    (Phase.PLANNING, Phase.ANALYSIS),
)

LATE_STRATEGY = StrategyRecommendation(
    "Convergent Synthesis",
    "Synthesize insights from previous thoughts into cohesive solution",
    "Later thoughts benefit from synthesis of earlier insights",
    8,
    (Phase.EXECUTION, Phase.VERIFICATION),
)

COMPLEX_STRATEGY = StrategyRecommendation(
    "Iterative Refinement",
    "Continuously refine understanding through multiple passes",
    "Complex problems benefit from iterative approaches",
    9,
    ALL_PHASES,
)


# =============================================================================
# Reasoning types
# =============================================================================

TASK_REASONING: dict[TaskType, tuple[ReasoningTypeRecommendation, ...]] = {
    TaskType.CREATIVE: (
        ReasoningTypeRecommendation(
            "creative",
            "Generate novel ideas by combining existing concepts in new ways",
            9,
            ("Brainstorming multiple solutions", "Using metaphors to reframe the problem"),
        ),
        ReasoningTypeRecommendation(
            "analogical",
            "Draw parallels between the current problem and similar situations",
            8,
            (
                "Applying solutions from one domain to another",
                "Using metaphors to generate insights",
            ),
        ),
        ReasoningTypeRecommendation(
            "divergent",
            "Explore multiple different directions to generate a variety of possibilities",
            8,
            (
                "Considering wildly different approaches",
                "Suspending judgment to explore unusual ideas",
            ),
        ),
    ),
    TaskType.ANALYTICAL: (
        ReasoningTypeRecommendation(
            "deductive",
            "Draw specific conclusions from general principles",
            9,
            ("Applying established rules to specific cases", "Using logical inference"),
        ),
        ReasoningTypeRecommendation(
            "causal",
            "Identify cause-effect relationships",
            8,
            ("Analyzing root causes", "Predicting outcomes based on actions"),
        ),
        ReasoningTypeRecommendation(
            "systems",
            "Analyze interactions between components in a complex system",
            8,
            ("Mapping feedback loops", "Identifying emergent properties"),
        ),
    ),
    TaskType.INFORMATIONAL: (
        ReasoningTypeRecommendation(
            "inductive",
            "Draw general conclusions from specific observations",
            9,
            ("Identifying patterns from examples", "Generalizing from specific cases"),
        ),
        ReasoningTypeRecommendation(
            "hierarchical",
            "Organize information in levels from general to specific",
            8,
            ("Creating taxonomies", "Developing conceptual hierarchies"),
        ),
    ),
    TaskType.TECHNICAL: (
        ReasoningTypeRecommendation(
            "deductive",
            "Apply established principles to specific technical problems",
            9,
            ("Applying technical standards", "Following established procedures"),
        ),
        ReasoningTypeRecommendation(
            "causal",
            "Analyze technical cause-effect relationships",
            8,
            ("Debugging by tracing effects to causes", "Predicting system behavior"),
        ),
        ReasoningTypeRecommendation(
            "modular",
            "Break down complex systems into independent functional components",
            9,
            ("Designing with separation of concerns", "Creating abstraction layers"),
        ),
    ),
    TaskType.MIXED: (
        ReasoningTypeRecommendation(
            "abductive",
            "Form the most likely explanation from incomplete information",
            8,
            ("Developing working hypotheses", "Making educated guesses with limited data"),
        ),
        ReasoningTypeRecommendation(
            "integrative",
            "Combine insights from multiple reasoning approaches",
            9,
            (
                "Synthesizing analytical and creative thinking",
                "Balancing quantitative and qualitative factors",
            ),
        ),
    ),
}

# Entries whose type is already recommended are skipped.
PHASE_REASONING: dict[Phase, tuple[ReasoningTypeRecommendation, ...]] = {
    Phase.PLANNING: (
        ReasoningTypeRecommendation(
            "counterfactual",
            "Consider alternative scenarios and their implications",
            7,
            ("What if analysis", "Considering edge cases"),
        ),
        ReasoningTypeRecommendation(
            "strategic",
            "Focus on long-term goals and high-level approaches",
            8,
            ("Identifying key leverage points", "Focusing on highest-impact areas"),
        ),
    ),
    Phase.ANALYSIS: (
        ReasoningTypeRecommendation(
            "causal",
            "Identify cause-effect relationships in the problem domain",
            8,
            ("Root cause analysis", "Impact assessment"),
        ),
        ReasoningTypeRecommendation(
            "comparative",
            "Analyze similarities and differences between options or scenarios",
            8,
            ("Side-by-side comparison", "Evaluating trade-offs"),
        ),
    ),
    Phase.EXECUTION: (
        ReasoningTypeRecommendation(
            "deductive",
            "Apply established principles to implementation",
            8,
            ("Following best practices", "Applying domain principles"),
        ),
        ReasoningTypeRecommendation(
            "procedural",
            "Focus on step-by-step processes and implementation details",
            9,
            ("Creating action sequences", "Defining workflows"),
        ),
    ),
    Phase.VERIFICATION: (
        ReasoningTypeRecommendation(
            "counterfactual",
            "Test solution against alternative scenarios",
            8,
            ("Edge case testing", "What-if analysis"),
        ),
        ReasoningTypeRecommendation(
            "evaluative",
            "Assess solutions against explicit criteria and requirements",
            9,
            ("Systematic testing", "Requirements validation"),
        ),
    ),
}


# =============================================================================
# Complexity
# =============================================================================

BASE_THOUGHT_COUNT: dict[ComplexityLevel, int] = {
    ComplexityLevel.SIMPLE: 5,
    ComplexityLevel.MEDIUM: 8,
    ComplexityLevel.COMPLEX: 12,
}

COMPLEX_DOMAINS: tuple[str, ...] = (
    "quantum physics",
    "machine learning",
    "artificial intelligence",
    "cryptography",
    "medicine",
    "law",
    "finance",
    "mathematics",
)

MEDIUM_DOMAINS: tuple[str, ...] = (
    "programming",
    "engineering",
    "biology",
    "chemistry",
    "psychology",
    "economics",
    "business",
    "education",
)

BASE_PHASE_DISTRIBUTION: dict[ComplexityLevel, tuple[int, int, int, int]] = {
    ComplexityLevel.SIMPLE: (1, 1, 2, 1),
    ComplexityLevel.MEDIUM: (2, 2, 3, 1),
    ComplexityLevel.COMPLEX: (3, 3, 4, 2),
}


# =============================================================================
# Tools, focus areas and pitfalls
# =============================================================================

TASK_TOOLS: dict[TaskType, tuple[str, ...]] = {
    TaskType.CREATIVE: ("brainstorming", "analogyMapping"),
    TaskType.ANALYTICAL: ("dataAnalysis", "logicalReasoning"),
    TaskType.INFORMATIONAL: ("informationRetrieval", "factChecking"),
    TaskType.TECHNICAL: ("codeGeneration", "technicalDocumentation"),
}

PHASE_TOOLS: dict[Phase, str] = {
    Phase.PLANNING: "goalDecomposition",
    Phase.ANALYSIS: "rootCauseAnalysis",
    Phase.EXECUTION: "stepByStepImplementation",
    Phase.VERIFICATION: "qualityAssessment",
}

TASK_PITFALLS: dict[TaskType, tuple[str, ...]] = {
    TaskType.CREATIVE: (
        "Focusing too narrowly on conventional solutions",
        "Failing to validate creative ideas against practical constraints",
    ),
    TaskType.ANALYTICAL: (
        "Making unwarranted assumptions without evidence",
        "Overlooking important variables or factors",
    ),
    TaskType.INFORMATIONAL: (
        "Providing excessive detail without clear organization",
        "Failing to prioritize the most relevant information",
    ),
    TaskType.TECHNICAL: (
        "Overlooking edge cases or error conditions",
        "Focusing on implementation details before understanding requirements",
    ),
    TaskType.MIXED: (
        "Inconsistent approach across different aspects of the problem",
        "Failing to integrate creative and analytical components",
    ),
}

COMPLEX_PITFALLS: tuple[str, ...] = (
    "Getting lost in details without maintaining big-picture view",
    "Failing to recognize interdependencies between components",
)

ENGINEERING_DOMAINS = frozenset({"technical", "programming", "engineering"})


# =============================================================================
# Biases, metacognition, suggestions and insight prompts
# =============================================================================

TASK_BIASES: dict[TaskType, CognitiveBias] = {
    TaskType.CREATIVE: CognitiveBias(
        "Novelty bias",
        "Favoring ideas that seem new over those that are effective",
        0.7,
        "Balance novelty with practicality by evaluating ideas against concrete criteria",
    ),
    TaskType.ANALYTICAL: CognitiveBias(
        "Confirmation bias",
        "Seeking information that confirms existing hypotheses",
        0.8,
        "Actively search for disconfirming evidence and alternative explanations",
    ),
    TaskType.TECHNICAL: CognitiveBias(
        "Sunk cost fallacy",
        "Continuing with an approach because of prior investment",
        0.6,
        "Evaluate approaches based on future utility, not past investment",
    ),
}

PHASE_BIASES: dict[Phase, CognitiveBias] = {
    Phase.PLANNING: CognitiveBias(
        "Planning fallacy",
        "Underestimating time and resources needed",
        0.75,
        "Add buffer time and consider past similar tasks as reference points",
    ),
    Phase.ANALYSIS: CognitiveBias(
        "Anchoring bias",
        "Over-relying on first piece of information encountered",
        0.65,
        "Consider multiple starting points and diverse information sources",
    ),
    Phase.EXECUTION: CognitiveBias(
        "Optimism bias",
        "Overestimating likelihood of positive outcomes",
        0.7,
        "Conduct pre-mortems to identify potential failure points",
    ),
    Phase.VERIFICATION: CognitiveBias(
        "Availability bias",
        "Judging quality based on easily recalled examples",
        0.6,
        "Use structured evaluation criteria rather than relying on memory",
    ),
}

COMPLEXITY_BIAS = CognitiveBias(
    "Simplification bias",
    "Reducing complex problems to simpler models that miss key factors",
    0.8,
    "Explicitly map out interconnections and feedback loops",
)

GENERAL_METACOGNITION: tuple[MetacognitiveStrategy, ...] = (
    MetacognitiveStrategy(
        "Explicit assumption testing",
        "Identify and validate key assumptions underlying your thinking",
        8,
        "Reduces risk of building on faulty premises",
    ),
    MetacognitiveStrategy(
        "Counterfactual thinking",
        "Consider what would happen if key facts or assumptions were different",
        7,
        "Reveals dependencies and alternative possibilities",
    ),
)

# Early, middle and late stages, in that order.
STAGE_METACOGNITION: tuple[MetacognitiveStrategy, MetacognitiveStrategy, MetacognitiveStrategy] = (
    MetacognitiveStrategy(
        "Problem reframing",
        "Describe the problem in multiple different ways to reveal new aspects",
        9,
        "Prevents premature narrowing of problem scope",
    ),
    MetacognitiveStrategy(
        "Intermediate synthesis",
        "Periodically integrate insights from multiple thoughts into coherent models",
        9,
        "Prevents fragmentation of thinking across multiple thoughts",
    ),
    MetacognitiveStrategy(
        "Critical review",
        "Systematically evaluate the strength of your solution against requirements",
        9,
        "Identifies gaps before finalizing solution",
    ),
)

TASK_METACOGNITION: dict[TaskType, MetacognitiveStrategy] = {
    TaskType.CREATIVE: MetacognitiveStrategy(
        "Constraint relaxation",
        "Temporarily ignore constraints to explore novel possibilities",
        8,
        "Generates innovative options that can be refined to meet constraints",
    ),
    TaskType.ANALYTICAL: MetacognitiveStrategy(
        "Multiple models analysis",
        "Apply different analytical frameworks to the same problem",
        8,
        "Reveals insights that any single model might miss",
    ),
    TaskType.TECHNICAL: MetacognitiveStrategy(
        "Edge case identification",
        "Systematically identify boundary conditions and exceptions",
        9,
        "Prevents failures in non-standard scenarios",
    ),
}

GENERAL_INSIGHT_PROMPTS: tuple[str, ...] = (
    "What unexpected connections exist between different aspects of this problem?",
    "What would an expert in this domain notice that others might miss?",
)

PHASE_INSIGHT_PROMPTS: dict[Phase, tuple[str, ...]] = {
    Phase.PLANNING: (
        "What hidden assumptions might be limiting your planning approach?",
        "What would a completely different planning approach look like?",
    ),
    Phase.ANALYSIS: (
        "What patterns or anomalies in the data haven't been explained yet?",
        "What would change if a key assumption in your analysis was incorrect?",
    ),
    Phase.EXECUTION: (
        "What elegant simplifications could make this solution more robust?",
        "What aspects of the implementation might create unexpected effects?",
    ),
    Phase.VERIFICATION: (
        "What perspectives or criteria haven't been considered in verification?",
        "What would be the most surprising way this solution could fail?",
    ),
}

TASK_INSIGHT_PROMPTS: dict[TaskType, tuple[str, ...]] = {
    TaskType.CREATIVE: (
        "What if you combined seemingly unrelated elements of this problem?",
        "How would you approach this if traditional constraints didn't apply?",
    ),
    TaskType.ANALYTICAL: (
        "What alternative explanations haven't been considered yet?",
        "What meta-patterns exist across different analyses you've performed?",
    ),
    TaskType.TECHNICAL: (
        "What elegant architectural patterns could simplify this solution?",
        "How might this solution evolve or need to adapt in the future?",
    ),
    TaskType.INFORMATIONAL: (
        "What deeper principles connect the information you've gathered?",
        "What context or background would make this information more meaningful?",
    ),
}


# =============================================================================
# Learning recommendations
# =============================================================================

LEVEL_BY_COMPLEXITY: dict[ComplexityLevel, str] = {
    ComplexityLevel.SIMPLE: "beginner",
    ComplexityLevel.MEDIUM: "intermediate",
    ComplexityLevel.COMPLEX: "advanced",
}

# (area, resources, benefits); level follows the prompt complexity.
DOMAIN_LEARNING: dict[str, tuple[str, tuple[str, ...], tuple[str, ...]]] = {
    "programming": (
        "Programming Patterns",
        (
            "Design patterns for maintainable code",
            "Testing strategies for robust software",
            "Performance optimization techniques",
        ),
        (
            "More elegant and maintainable solutions",
            "Fewer bugs and edge cases",
            "Better performance characteristics",
        ),
    ),
    "math": (
        "Mathematical Reasoning",
        (
            "Formal proof techniques",
            "Mathematical modeling approaches",
            "Numerical analysis methods",
        ),
        (
            "More rigorous analytical thinking",
            "Better quantitative problem solving",
            "Improved ability to formalize problems",
        ),
    ),
    "business": (
        "Strategic Business Analysis",
        (
            "Competitive analysis frameworks",
            "Market sizing and segmentation",
            "Business model innovation",
        ),
        (
            "More comprehensive business analysis",
            "Better strategic recommendations",
            "Improved market understanding",
        ),
    ),
    "writing": (
        "Effective Communication",
        (
            "Structured argumentation techniques",
            "Narrative development methods",
            "Audience-centered writing",
        ),
        (
            "More persuasive communication",
            "Better organized content",
            "Improved engagement with readers",
        ),
    ),
}

TASK_LEARNING: dict[TaskType, LearningRecommendation] = {
    TaskType.CREATIVE: LearningRecommendation(
        "Creative Problem Solving",
        "intermediate",
        (
            "Lateral thinking techniques",
            "Constraint relaxation methods",
            "Analogical reasoning approaches",
        ),
        (
            "More innovative solutions",
            "Breaking out of conventional thinking patterns",
            "Finding unexpected connections between ideas",
        ),
        9,
    ),
    TaskType.ANALYTICAL: LearningRecommendation(
        "Analytical Reasoning",
        "intermediate",
        (
            "Hypothesis testing frameworks",
            "Causal analysis techniques",
            "Evidence evaluation methods",
        ),
        (
            "More rigorous analysis",
            "Better identification of root causes",
            "Improved ability to evaluate competing explanations",
        ),
        9,
    ),
    TaskType.TECHNICAL: LearningRecommendation(
        "Technical Problem Solving",
        "intermediate",
        (
            "Systems thinking approaches",
            "Technical requirement analysis",
            "Implementation planning techniques",
        ),
        (
            "More robust technical solutions",
            "Better anticipation of edge cases",
            "Improved implementation planning",
        ),
        9,
    ),
}

COMPLEX_LEARNING = LearningRecommendation(
    "Complex Problem Decomposition",
    "intermediate",
    (
        "Breaking down complex problems into manageable components",
        "Identifying dependencies between sub-problems",
        "Tracking progress across multiple problem dimensions",
    ),
    (
        "More systematic approach to complex problems",
        "Better organization of thoughts and solutions",
        "Reduced cognitive load through structured decomposition",
    ),
    9,
)


# =============================================================================
# Pattern analysis
# =============================================================================

POSITIVE_CLASSIFICATIONS: dict[TaskType, frozenset[Classification]] = {
    TaskType.CREATIVE: frozenset({Classification.HYPOTHESIS, Classification.QUESTION}),
    TaskType.ANALYTICAL: frozenset({Classification.OBSERVATION, Classification.CONCLUSION}),
    TaskType.TECHNICAL: frozenset({Classification.SOLUTION}),
    TaskType.INFORMATIONAL: frozenset({Classification.OBSERVATION}),
}

# pattern name -> (from, to, benefit)
NEGATIVE_PATTERN_SHIFTS: dict[str, tuple[str, str, str]] = {
    "Planning-Heavy": (
        "Excessive planning",
        "Balanced execution and verification",
        "More concrete progress and validation of ideas",
    ),
    "Execution-Focused": (
        "Immediate execution",
        "More thorough planning and analysis",
        "Better structured approach for complex problems",
    ),
    "Verification-Light": (
        "Limited verification",
        "Systematic solution testing",
        "Higher quality, more robust solutions",
    ),
    "Tool-Avoidant": (
        "Manual reasoning only",
        "Strategic tool utilization",
        "Enhanced capabilities and efficiency",
    ),
}

LOW_DIVERSITY_SHIFT = (
    "Narrow thinking patterns",
    "Diverse reasoning approaches",
    "More creative and comprehensive solutions",
)

TASK_DIVERSITY_SHIFTS: dict[TaskType, tuple[str, str, str]] = {
    TaskType.CREATIVE: (
        "Conventional thinking",
        "Exploratory and divergent thinking",
        "More innovative and original ideas",
    ),
    TaskType.ANALYTICAL: (
        "Single analytical framework",
        "Multiple analytical perspectives",
        "More robust and nuanced analysis",
    ),
}
