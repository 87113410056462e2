"""
Brute-force cosine ranking of stored vectors against a query vector.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from ..embeddings import EmbeddingVector
from ..storage import EmbeddingRecord
from ..vectors import cosine_similarity


@dataclass(frozen=True)
class SearchResult:
    """A stored chunk scored against one query."""

    record_id: str
    workspace_id: str
    item_id: str
    position: int
    content: str
    model: str
    score: float


def partition_by_dimensions(
    query: EmbeddingVector, candidates: Sequence[EmbeddingRecord]
) -> tuple[list[EmbeddingRecord], int]:
    """Return candidates comparable with *query* and how many were excluded."""
    comparable = [
        candidate
        for candidate in candidates
        if candidate.dimensions == query.dimensions
        and len(candidate.vector) == query.dimensions
    ]
    return comparable, len(candidates) - len(comparable)


def rank(
    query: EmbeddingVector,
    candidates: Sequence[EmbeddingRecord],
    *,
    limit: int,
    threshold: float = 0.0,
) -> list[SearchResult]:
    """
    Score candidates by cosine similarity and return the best *limit*.

    Candidates of another dimensionality are skipped, results scoring below
    *threshold* are dropped, and equal scores keep candidate order. Never
    raises for malformed candidates.
    """
    if limit <= 0:
        return []

    comparable, _ = partition_by_dimensions(query, candidates)
    scored: list[tuple[float, int, EmbeddingRecord]] = []
    for index, candidate in enumerate(comparable):
        score = cosine_similarity(query.vector, candidate.vector)
        if score < threshold:
            continue
        scored.append((score, index, candidate))

    scored.sort(key=lambda item: (-item[0], item[1]))
    return [
        SearchResult(
            record_id=candidate.id,
            workspace_id=candidate.workspace_id,
            item_id=candidate.item_id,
            position=candidate.position,
            content=candidate.content,
            model=candidate.model,
            score=score,
        )
        for score, _, candidate in scored[:limit]
    ]
