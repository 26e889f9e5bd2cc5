"""Prompt profiling.

Turns the session's initiating prompt into a ``PromptProfile`` with
indicator-phrase tables. Pure and deterministic: the same prompt always
yields the same profile.
"""

from __future__ import annotations

import re
from collections import Counter

from src.tools.text_features import split_sentences
from src.tools.thought_types import ComplexityLevel, Priority, PromptProfile, TaskType

GOAL_INDICATORS: tuple[str, ...] = (
    "goal is",
    "objective is",
    "aim is",
    "purpose is",
    "trying to",
    "want to",
    "need to",
    "would like to",
    "goal:",
    "objective:",
)

CONSTRAINT_INDICATORS: tuple[str, ...] = (
    "must",
    "should",
    "need to",
    "have to",
    "required",
    "necessary",
    "important",
    "essential",
    "critical",
    "cannot",
    "can't",
    "don't",
    "shouldn't",
    "mustn't",
)

# Matched as lowercase substrings of the prompt
DOMAIN_KEYWORDS: dict[str, tuple[str, ...]] = {
    "programming": ("code", "programming", "software", "development", "algorithm", "function"),
    "math": ("math", "calculation", "formula", "equation", "numerical"),
    "science": ("science", "scientific", "experiment", "hypothesis", "theory"),
    "business": ("business", "market", "strategy", "company", "product", "service"),
    "writing": ("write", "essay", "article", "blog", "content", "story"),
    "design": ("design", "layout", "visual", "interface"),
    "data": ("data", "analysis", "statistics", "dataset", "visualization"),
}

OUTPUT_FORMAT_INDICATORS: tuple[str, ...] = (
    "format:",
    "in the form of",
    "as a",
    "output as",
    "result as",
    "in markdown",
    "in json",
    "in html",
    "in csv",
    "in table",
)

HIGH_PRIORITY_INDICATORS: tuple[str, ...] = (
    "urgent",
    "immediately",
    "asap",
    "critical",
    "high priority",
    "as soon as possible",
    "emergency",
    "deadline",
)

MEDIUM_PRIORITY_INDICATORS: tuple[str, ...] = (
    "important",
    "soon",
    "timely",
    "needed",
    "significant",
)

COMPLEXITY_INDICATORS: tuple[str, ...] = (
    "complex",
    "complicated",
    "difficult",
    "challenging",
    "advanced",
    "sophisticated",
    "intricate",
    "elaborate",
    "comprehensive",
)

TASK_TYPE_INDICATORS: dict[TaskType, tuple[str, ...]] = {
    TaskType.CREATIVE: ("create", "design", "generate", "write", "compose", "imagine", "story"),
    TaskType.ANALYTICAL: ("analyze", "evaluate", "assess", "compare", "contrast", "examine"),
    TaskType.INFORMATIONAL: (
        "explain",
        "describe",
        "what is",
        "how to",
        "information about",
        "tell me about",
    ),
    TaskType.TECHNICAL: (
        "code",
        "program",
        "implement",
        "function",
        "algorithm",
        "debug",
        "fix",
        "script",
        "parse",
    ),
}

KEYWORD_STOPWORDS = frozenset(
    {
        "a", "an", "the", "and", "or", "but", "in", "on",
        "at", "to", "for", "with", "by", "about", "as",
    }
)

_NON_WORD_OR_SPACE = re.compile(r"[^\w\s]", re.ASCII)
_NON_WORD = re.compile(r"[^\w]", re.ASCII)
_FORMAT_END = re.compile(r"[.!?]")


def _sentences_with(sentences: list[str], indicators: tuple[str, ...]) -> list[str]:
    return [s for s in sentences if any(ind in s.lower() for ind in indicators)]


def extract_goals(prompt: str) -> list[str]:
    """Sentences carrying a goal indicator, else the first sentence."""
    sentences = split_sentences(prompt)
    goals = _sentences_with(sentences, GOAL_INDICATORS)
    if not goals and sentences:
        goals = [sentences[0]]
    return goals


def extract_constraints(prompt: str) -> list[str]:
    return _sentences_with(split_sentences(prompt), CONSTRAINT_INDICATORS)


def extract_domains(prompt: str) -> list[str]:
    lowered = prompt.lower()
    return [
        domain
        for domain, keywords in DOMAIN_KEYWORDS.items()
        if any(keyword in lowered for keyword in keywords)
    ]


def extract_output_format(prompt: str) -> str | None:
    """Text following the first format indicator, up to the sentence end."""
    lowered = prompt.lower()
    for indicator in OUTPUT_FORMAT_INDICATORS:
        index = lowered.find(indicator)
        if index != -1:
            after = prompt[index + len(indicator) :].strip()
            return _FORMAT_END.split(after, maxsplit=1)[0].strip()
    return None


def determine_priority(prompt: str) -> Priority:
    lowered = prompt.lower()
    if any(ind in lowered for ind in HIGH_PRIORITY_INDICATORS):
        return Priority.HIGH
    if any(ind in lowered for ind in MEDIUM_PRIORITY_INDICATORS):
        return Priority.MEDIUM
    return Priority.LOW


def estimate_complexity(prompt: str) -> ComplexityLevel:
    """Explicit complexity words win; otherwise judge by length."""
    lowered = prompt.lower()
    if any(ind in lowered for ind in COMPLEXITY_INDICATORS):
        return ComplexityLevel.COMPLEX

    word_count = len(prompt.split())
    if word_count > 100:
        return ComplexityLevel.COMPLEX
    if word_count > 30:
        return ComplexityLevel.MEDIUM
    return ComplexityLevel.SIMPLE


def keyword_words(text: str) -> list[str]:
    """Lowercased words longer than three characters, punctuation removed."""
    cleaned = _NON_WORD_OR_SPACE.sub("", text.lower())
    return [word for word in cleaned.split() if len(word) > 3]


def extract_keywords(prompt: str, limit: int = 10) -> list[str]:
    words = [word for word in keyword_words(prompt) if word not in KEYWORD_STOPWORDS]
    return [word for word, _ in Counter(words).most_common(limit)]


def extract_entities(prompt: str) -> list[str]:
    """Capitalized words other than the prompt's first word."""
    entities: list[str] = []
    for index, raw in enumerate(prompt.split()):
        word = _NON_WORD.sub("", raw)
        if index > 0 and word and word[0] == word[0].upper() and word[0] != word[0].lower():
            entities.append(word)
    return list(dict.fromkeys(entities))


def determine_task_type(prompt: str) -> TaskType:
    """Category with strictly the most indicator hits, else mixed."""
    lowered = prompt.lower()
    counts = [
        (task_type, sum(1 for ind in indicators if ind in lowered))
        for task_type, indicators in TASK_TYPE_INDICATORS.items()
    ]
    counts.sort(key=lambda item: item[1], reverse=True)
    top_type, top_count = counts[0]
    if top_count > 0 and top_count > counts[1][1]:
        return top_type
    return TaskType.MIXED


class PromptProfiler:
    """Builds ``PromptProfile`` records from prompt text.

    Example:
        profile = PromptProfiler().profile("I must write a Python script. Urgent.")
        profile.task_type  # TaskType.TECHNICAL

    """

    def profile(self, prompt: str) -> PromptProfile:
        return PromptProfile(
            original_prompt=prompt,
            goals=tuple(extract_goals(prompt)),
            constraints=tuple(extract_constraints(prompt)),
            domains=tuple(extract_domains(prompt)),
            keywords=tuple(extract_keywords(prompt)),
            entities=tuple(extract_entities(prompt)),
            task_type=determine_task_type(prompt),
            complexity=estimate_complexity(prompt),
            priority=determine_priority(prompt),
            expected_output_format=extract_output_format(prompt),
        )
