"""Search helpers for workspace embeddings."""

from .ranker import SearchResult, partition_by_dimensions, rank
from .semantic import SearchResponse, SemanticSearchEngine

__all__ = [
    "SearchResult",
    "partition_by_dimensions",
    "rank",
    "SearchResponse",
    "SemanticSearchEngine",
]
