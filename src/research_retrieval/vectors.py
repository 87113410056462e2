"""
Vector math shared by the embedding providers and the ranker.
"""

from __future__ import annotations

import math
from collections.abc import Sequence


def dot(a: Sequence[float], b: Sequence[float]) -> float:
    return math.fsum(x * y for x, y in zip(a, b))


def norm(vector: Sequence[float]) -> float:
    return math.sqrt(math.fsum(x * x for x in vector))


def normalize(vector: Sequence[float]) -> list[float]:
    """Scale *vector* to unit length. The zero vector is returned unchanged."""
    magnitude = norm(vector)
    if magnitude == 0:
        return [float(x) for x in vector]
    return [x / magnitude for x in vector]


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """
    Cosine similarity of two vectors.

    Vectors of different length, or with zero norm, score 0.0.
    """
    if len(a) != len(b):
        return 0.0
    norm_a = norm(a)
    norm_b = norm(b)
    if norm_a == 0 or norm_b == 0:
        return 0.0
    return dot(a, b) / (norm_a * norm_b)
