"""Vector math and scoring helpers for memory retrieval."""

from __future__ import annotations

import math
from collections.abc import Sequence
from datetime import UTC, datetime

Vector = Sequence[float]


def cosine_similarity(a: Vector, b: Vector) -> float:
    """Cosine similarity clamped to [0, 1].

    Vectors of different length, empty vectors and zero vectors score 0.0 so
    that bulk passes tolerate heterogeneous embeddings.
    """
    if len(a) != len(b) or not a:
        return 0.0
    dot = 0.0
    norm_a = 0.0
    norm_b = 0.0
    for x, y in zip(a, b):
        dot += x * y
        norm_a += x * x
        norm_b += y * y
    denom = math.sqrt(norm_a) * math.sqrt(norm_b)
    if denom == 0:
        return 0.0
    return max(0.0, min(1.0, dot / denom))


def zero_vector(dimension: int) -> list[float]:
    return [0.0] * dimension


def weighted_mean(vectors: Sequence[Vector], weights: Sequence[float]) -> list[float]:
    """Element-wise weighted average, normalized by the total weight."""
    if not vectors:
        return []
    dim = len(vectors[0])
    total = [0.0] * dim
    total_weight = 0.0
    for vector, weight in zip(vectors, weights):
        total_weight += weight
        for j in range(min(dim, len(vector))):
            total[j] += vector[j] * weight
    if total_weight == 0:
        return total
    return [value / total_weight for value in total]


def content_overlap(query: str, text: str) -> float:
    """Fraction of words in text that also appear in query."""
    q_tokens = set(query.lower().split())
    t_tokens = text.lower().split()
    if not t_tokens:
        return 0.0
    matches = sum(1 for token in t_tokens if token in q_tokens)
    return matches / len(t_tokens)


def age_days(timestamp: datetime, now: datetime | None = None) -> float:
    """Age of timestamp in fractional days."""
    if timestamp.tzinfo is None:
        timestamp = timestamp.replace(tzinfo=UTC)
    now = now or datetime.now(UTC)
    return (now - timestamp).total_seconds() / 86400.0


def recency_decay(
    timestamp: datetime, scale_days: float = 30.0, now: datetime | None = None
) -> float:
    """Exponential recency factor in (0, 1]."""
    return math.exp(-max(0.0, age_days(timestamp, now=now)) / scale_days)
