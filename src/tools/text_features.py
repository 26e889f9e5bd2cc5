"""Text feature extraction for thought analysis.

Deterministic, dependency-light heuristics: whitespace tokenization with
stopword removal, n-gram candidates, hashed pseudo-embeddings, edit
distance and a tiny in-memory TF-IDF. Everything here is a pure function
of its input except the per-token vector cache inside ``HashVectorizer``.
"""

from __future__ import annotations

import math
import re
import threading
from collections.abc import Iterable, Mapping, Sequence
from pathlib import Path
from typing import Protocol, runtime_checkable

import numpy as np
from loguru import logger

from src.utils.errors import VectorLoadError

STOPWORDS = frozenset(
    {
        "the", "and", "or", "but", "in", "on", "at", "to", "for", "with",
        "by", "is", "are", "was", "were", "this", "that", "these", "those",
    }
)  # fmt: skip

# Used only to judge whether a phrase is worth keeping as a concept
EXTENDED_STOPWORDS = STOPWORDS | frozenset(
    {
        "be", "been", "being", "have", "has", "had", "do", "does", "did",
        "can", "could", "will", "would", "should", "may", "might", "must", "shall",
    }
)  # fmt: skip

SEED_PRIMES: tuple[int, ...] = (31, 101, 257, 401, 631)
DEFAULT_DIMENSION = 300

_SENTENCE_SPLIT = re.compile(r"[.!?]+")


def tokenize(text: str) -> list[str]:
    """Lowercase, split on whitespace and drop stopwords."""
    return [token for token in text.lower().split() if token not in STOPWORDS]


def split_sentences(text: str) -> list[str]:
    """Split on runs of ``.``, ``!`` or ``?``; stripped, empties dropped."""
    return [s.strip() for s in _SENTENCE_SPLIT.split(text) if s.strip()]


def is_significant(phrase: str) -> bool:
    """Whether a candidate phrase is worth keeping as a concept.

    Phrases made only of stopwords are rejected. Trigrams are otherwise
    kept, bigrams need one non-stopword longer than three characters and
    single words must be longer than three characters.
    """
    words = phrase.split(" ")
    if len(words) > 1:
        if all(word in EXTENDED_STOPWORDS for word in words):
            return False
        if len(words) >= 3:
            return True
        return any(word not in EXTENDED_STOPWORDS and len(word) > 3 for word in words)
    return len(phrase) > 3 and phrase not in EXTENDED_STOPWORDS


def ngrams(tokens: Sequence[str], min_n: int = 1, max_n: int = 3) -> list[str]:
    """Significant n-grams, shortest first, in text order within each size."""
    result: list[str] = []
    for n in range(min_n, max_n + 1):
        for i in range(len(tokens) - n + 1):
            phrase = " ".join(tokens[i : i + n])
            if is_significant(phrase):
                result.append(phrase)
    return result


def stem(word: str) -> str:
    """Strip a trailing ``ing``, ``ed`` or ``s`` (first match only)."""
    for suffix in ("ing", "ed", "s"):
        if word.endswith(suffix):
            return word[: -len(suffix)]
    return word


def levenshtein_distance(a: str, b: str) -> int:
    if a == b:
        return 0
    if not a:
        return len(b)
    if not b:
        return len(a)

    previous = list(range(len(b) + 1))
    for i, ca in enumerate(a, start=1):
        current = [i]
        for j, cb in enumerate(b, start=1):
            cost = 0 if ca == cb else 1
            current.append(min(previous[j] + 1, current[j - 1] + 1, previous[j - 1] + cost))
        previous = current
    return previous[-1]


def string_similarity(a: str, b: str) -> float:
    """Normalized edit-distance similarity in [0, 1]."""
    max_length = max(len(a), len(b))
    if max_length == 0:
        return 1.0
    return 1.0 - levenshtein_distance(a, b) / max_length


def jaccard_similarity(a: Iterable[str], b: Iterable[str]) -> float:
    set_a, set_b = set(a), set(b)
    union = set_a | set_b
    if not union:
        return 0.0
    return len(set_a & set_b) / len(union)


def cosine_similarity(a: Sequence[float] | np.ndarray, b: Sequence[float] | np.ndarray) -> float:
    """Cosine of two dense vectors; 0.0 on length mismatch or a zero vector."""
    va = np.asarray(a, dtype=np.float64)
    vb = np.asarray(b, dtype=np.float64)
    if va.shape != vb.shape or va.size == 0:
        return 0.0
    norm_a = float(np.linalg.norm(va))
    norm_b = float(np.linalg.norm(vb))
    if norm_a == 0.0 or norm_b == 0.0:
        return 0.0
    return float(np.dot(va, vb) / (norm_a * norm_b))


def sparse_cosine(v1: Mapping[str, float], v2: Mapping[str, float]) -> float:
    """Cosine of two term-weight dictionaries.

    Terms are visited in sorted order so the result does not depend on
    argument order.
    """
    dot = 0.0
    mag1 = 0.0
    mag2 = 0.0
    for term in sorted(set(v1) | set(v2)):
        x = v1.get(term, 0.0)
        y = v2.get(term, 0.0)
        dot += x * y
        mag1 += x * x
        mag2 += y * y
    if mag1 == 0.0 or mag2 == 0.0:
        return 0.0
    return dot / (math.sqrt(mag1) * math.sqrt(mag2))


def tfidf(term: str, doc_index: int, documents: Sequence[Sequence[str]]) -> float:
    """TF-IDF of ``term`` in ``documents[doc_index]``.

    ``tf = count / len(doc)`` and ``idf = log(N / (1 + df))``. With the
    ``1 + df`` smoothing, a term present in every document scores below
    zero, so within a single document rarer tokens rank higher.
    """
    if doc_index < 0 or doc_index >= len(documents):
        return 0.0
    doc = documents[doc_index]
    if not doc:
        return 0.0
    tf = sum(1 for token in doc if token == term) / len(doc)
    df = sum(1 for d in documents if term in d)
    return tf * math.log(len(documents) / (1 + df))


def tfidf_similarity(text1: str, text2: str) -> float:
    """Cosine of TF-IDF vectors over a corpus of just these two texts."""
    docs = [tokenize(text1), tokenize(text2)]
    terms = set(docs[0]) | set(docs[1])
    vector1 = {term: tfidf(term, 0, docs) for term in terms}
    vector2 = {term: tfidf(term, 1, docs) for term in terms}
    return sparse_cosine(vector1, vector2)


def _unique(items: Iterable[str]) -> list[str]:
    return list(dict.fromkeys(items))


def extract_keywords(text: str, limit: int = 10) -> list[str]:
    """Top distinct tokens by single-document TF-IDF."""
    tokens = tokenize(text)
    if not tokens:
        return []
    docs = [tokens]
    scored = [(term, tfidf(term, 0, docs)) for term in _unique(tokens)]
    scored.sort(key=lambda item: item[1], reverse=True)
    return [term for term, _ in scored[:limit]]


def extract_concepts(text: str, limit: int = 10) -> list[str]:
    """Top significant 1-3 word phrases, scored by their tokens' TF-IDF."""
    tokens = tokenize(text)
    if not tokens:
        return []
    docs = [tokens]
    scored: list[tuple[str, float]] = []
    for phrase in _unique(ngrams(tokens)):
        parts = phrase.split(" ")
        score = sum(tfidf(part, 0, docs) for part in parts) / len(parts)
        scored.append((phrase, score))
    scored.sort(key=lambda item: item[1], reverse=True)
    return [phrase for phrase, _ in scored[:limit]]


def phrase_relevance(phrase1: str, phrase2: str) -> float:
    """Blend of word overlap, spelling similarity and stem similarity."""
    words1 = phrase1.split(" ")
    words2 = phrase2.split(" ")

    overlap = jaccard_similarity(words1, words2)
    spelling = string_similarity(phrase1, phrase2)

    semantic = 0.0
    for word1 in words1:
        stem1 = stem(word1)
        for word2 in words2:
            stem2 = stem(word2)
            if stem1 == stem2:
                semantic = max(semantic, 0.9)
            else:
                semantic = max(semantic, string_similarity(stem1, stem2) * 0.7)

    return overlap * 0.4 + spelling * 0.3 + semantic * 0.3


def contextual_aspect_relevance(text: str, aspects: Sequence[str]) -> float:
    """How well ``text`` covers ``aspects`` on average, in [0, 1].

    An empty aspect list is trivially covered (1.0).
    """
    if not aspects:
        return 1.0

    lowered = text.lower()
    text_tokens = tokenize(text)
    sentences = split_sentences(text)
    total = 0.0

    for aspect in aspects:
        if aspect.lower() in lowered:
            total += 1.0
            continue

        aspect_tokens = tokenize(aspect)
        if aspect_tokens:
            matches = sum(1 for token in aspect_tokens if token in text_tokens)
            match_ratio = matches / len(aspect_tokens)
        else:
            match_ratio = 0.0

        best_sentence = max((phrase_relevance(aspect, s) for s in sentences), default=0.0)
        total += match_ratio * 0.6 + best_sentence * 0.4

    return min(1.0, total / max(1, len(aspects)))


def contains_aspect_contextually(text: str, aspect: str, threshold: float = 0.65) -> bool:
    if aspect.lower() in text.lower():
        return True
    return contextual_aspect_relevance(text, [aspect]) > threshold


def _normalize(vector: np.ndarray) -> np.ndarray:
    magnitude = float(np.linalg.norm(vector))
    if magnitude == 0.0:
        return np.zeros_like(vector)
    return vector / magnitude


# =============================================================================
# Vectorizers
# =============================================================================


@runtime_checkable
class Vectorizer(Protocol):
    """Maps text to fixed-dimension float vectors."""

    @property
    def dimension(self) -> int: ...

    def token_vector(self, token: str) -> np.ndarray: ...

    def vectorize(self, text: str) -> np.ndarray: ...


class HashVectorizer:
    """Multi-hash pseudo-embeddings with optional pretrained overrides.

    Each character of a token feeds one bucket per seed prime with weight
    ``1 / (position + 1)``; the result is L2-normalized and cached. If a
    pretrained vector is available for a token it is used instead.

    Example:
        vectorizer = HashVectorizer()
        vec = vectorizer.vectorize("parse the CSV file")

    """

    def __init__(self, dimension: int = DEFAULT_DIMENSION) -> None:
        if dimension < 1:
            raise ValueError(f"Vector dimension must be positive, got {dimension}")
        self._dimension = dimension
        self._cache: dict[str, np.ndarray] = {}
        self._pretrained: dict[str, np.ndarray] = {}
        self._loader: threading.Thread | None = None

    @property
    def dimension(self) -> int:
        return self._dimension

    @property
    def pretrained_count(self) -> int:
        return len(self._pretrained)

    @property
    def cache_size(self) -> int:
        return len(self._cache)

    def token_vector(self, token: str) -> np.ndarray:
        pretrained = self._pretrained.get(token)
        if pretrained is not None:
            return pretrained

        cached = self._cache.get(token)
        if cached is None:
            vector = np.zeros(self._dimension, dtype=np.float64)
            for i, char in enumerate(token):
                code = ord(char)
                for j, prime in enumerate(SEED_PRIMES):
                    vector[(code * prime + i + j) % self._dimension] += 1.0 / (i + 1)
            cached = _normalize(vector)
            cached.setflags(write=False)
            self._cache[token] = cached
        return cached

    def vectorize(self, text: str) -> np.ndarray:
        """Average of the token vectors, L2-normalized; zeros for empty text."""
        tokens = tokenize(text)
        if not tokens:
            return np.zeros(self._dimension, dtype=np.float64)
        stacked = np.stack([self.token_vector(token) for token in tokens])
        return _normalize(stacked.mean(axis=0))

    def read_vectors(self, path: str | Path) -> dict[str, np.ndarray]:
        """Parse a GloVe-style text file (``word v1 v2 ...`` per line).

        Lines whose vector length differs from ``dimension`` are skipped.

        Raises:
            VectorLoadError: If the file cannot be read.

        """
        vectors: dict[str, np.ndarray] = {}
        skipped = 0
        try:
            with Path(path).open(encoding="utf-8") as f:
                for line in f:
                    parts = line.rstrip().split(" ")
                    if len(parts) != self._dimension + 1:
                        skipped += 1
                        continue
                    try:
                        values = np.asarray(parts[1:], dtype=np.float64)
                    except ValueError:
                        skipped += 1
                        continue
                    normalized = _normalize(values)
                    normalized.setflags(write=False)
                    vectors[parts[0].lower()] = normalized
        except OSError as e:
            raise VectorLoadError(f"Cannot read word vectors from {path}: {e}") from e

        if skipped:
            logger.debug(f"Skipped {skipped} malformed word vector lines in {path}")
        return vectors

    def _load(self, path: str | Path) -> None:
        try:
            vectors = self.read_vectors(path)
        except VectorLoadError as e:
            logger.warning(f"{e}; continuing with hash vectors")
            return
        self._pretrained = vectors
        logger.info(f"Loaded {len(vectors)} pretrained word vectors from {path}")

    def load_pretrained(
        self, path: str | Path, *, blocking: bool = False
    ) -> threading.Thread | None:
        """Load pretrained vectors without holding up enrichment.

        Args:
            path: GloVe-style text file.
            blocking: Load on the calling thread instead of a daemon thread.

        Returns:
            The loader thread, or None when loading synchronously.

        """
        if blocking:
            self._load(path)
            return None
        self._loader = threading.Thread(
            target=self._load, args=(path,), name="word-vector-loader", daemon=True
        )
        self._loader.start()
        return self._loader
