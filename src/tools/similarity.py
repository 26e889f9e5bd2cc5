"""Pairwise thought similarity and topic clustering."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from src.tools.text_features import (
    HashVectorizer,
    Vectorizer,
    cosine_similarity,
    extract_keywords,
    jaccard_similarity,
    tfidf,
    tfidf_similarity,
    tokenize,
)
from src.tools.thought_types import Thought

COSINE_WEIGHT = 0.5
KEYWORD_WEIGHT = 0.2
TFIDF_WEIGHT = 0.3


@dataclass(frozen=True)
class TopicCluster:
    """A group of mutually similar thoughts."""

    label: str
    thought_numbers: tuple[int, ...]


class SimilarityEngine:
    """Scores thought pairs and groups thoughts into topics.

    ``similarity`` blends vector cosine, keyword Jaccard and a two-document
    TF-IDF cosine. The TF-IDF corpus is just the pair being compared.
    """

    def __init__(
        self,
        vectorizer: Vectorizer | None = None,
        cluster_threshold: float = 0.6,
    ) -> None:
        self.vectorizer = vectorizer or HashVectorizer()
        self.cluster_threshold = cluster_threshold

    def _vector(self, thought: Thought) -> Sequence[float]:
        if thought.vector:
            return thought.vector
        return self.vectorizer.vectorize(thought.text)

    def _keywords(self, thought: Thought) -> Sequence[str]:
        return thought.keywords or extract_keywords(thought.text)

    def similarity(self, first: Thought, second: Thought) -> float:
        """Symmetric similarity in [0, 1]; identical token streams score 1.0."""
        if tokenize(first.text) == tokenize(second.text):
            return 1.0

        cosine = cosine_similarity(self._vector(first), self._vector(second))
        keyword_overlap = jaccard_similarity(self._keywords(first), self._keywords(second))
        contextual = tfidf_similarity(first.text, second.text)
        score = (
            cosine * COSINE_WEIGHT + keyword_overlap * KEYWORD_WEIGHT + contextual * TFIDF_WEIGHT
        )
        return min(1.0, max(0.0, score))

    def similarity_matrix(self, thoughts: Sequence[Thought]) -> list[list[float]]:
        size = len(thoughts)
        matrix = [[1.0] * size for _ in range(size)]
        for i in range(size):
            for j in range(i + 1, size):
                value = self.similarity(thoughts[i], thoughts[j])
                matrix[i][j] = value
                matrix[j][i] = value
        return matrix

    def topic_keywords(self, thoughts: Sequence[Thought], limit: int = 5) -> list[str]:
        """Terms with the highest average TF-IDF across the thoughts."""
        documents = [tokenize(thought.text) for thought in thoughts]
        terms = list(dict.fromkeys(term for doc in documents for term in doc))
        if not terms:
            return []
        scored = [
            (term, sum(tfidf(term, i, documents) for i in range(len(documents))) / len(documents))
            for term in terms
        ]
        scored.sort(key=lambda item: item[1], reverse=True)
        return [term for term, _ in scored[:limit]]

    def cluster(self, thoughts: Sequence[Thought]) -> list[TopicCluster]:
        """Greedy single-pass clustering.

        Each unassigned thought, in order, gathers every unassigned thought
        whose similarity to it exceeds the threshold (itself included).
        Every thought ends up in exactly one cluster.
        """
        matrix = self.similarity_matrix(thoughts)
        assigned: set[int] = set()
        clusters: list[TopicCluster] = []
        labels: set[str] = set()

        for i in range(len(thoughts)):
            if i in assigned:
                continue
            members = [
                j
                for j in range(len(thoughts))
                if j not in assigned and (j == i or matrix[i][j] > self.cluster_threshold)
            ]
            assigned.update(members)
            member_thoughts = [thoughts[j] for j in members]

            top_terms = self.topic_keywords(member_thoughts)[:2]
            label = "_".join(top_terms) if top_terms else f"topic_{len(clusters) + 1}"
            if label in labels:
                suffix = 2
                while f"{label}_{suffix}" in labels:
                    suffix += 1
                label = f"{label}_{suffix}"
            labels.add(label)

            clusters.append(
                TopicCluster(
                    label=label,
                    thought_numbers=tuple(t.thought_number for t in member_thoughts),
                )
            )

        return clusters
