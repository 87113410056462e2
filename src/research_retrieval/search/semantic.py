"""
Vector-based semantic search engine.

Embeds a query and ranks the chunk embeddings stored for one workspace by
cosine similarity. Records from other workspaces are never loaded.
"""

from __future__ import annotations

from dataclasses import dataclass

from loguru import logger

from ..config import DEFAULT_SEARCH_LIMIT, DEFAULT_SEARCH_THRESHOLD
from ..embeddings import EmbeddingProvider
from ..storage import VectorStore
from .ranker import SearchResult, partition_by_dimensions, rank


@dataclass(frozen=True)
class SearchResponse:
    """Ranked results for one query."""

    query: str
    model: str
    dimensions: int
    results: list[SearchResult]
    excluded_dimension_mismatches: int = 0


class SemanticSearchEngine:
    """Embed a query and search stored chunk embeddings."""

    def __init__(
        self,
        storage: VectorStore,
        embedding_provider: EmbeddingProvider,
        *,
        default_limit: int = DEFAULT_SEARCH_LIMIT,
        default_threshold: float = DEFAULT_SEARCH_THRESHOLD,
    ) -> None:
        self.storage = storage
        self.embedding_provider = embedding_provider
        self.default_limit = default_limit
        self.default_threshold = default_threshold

    def search(
        self,
        *,
        workspace_id: str,
        query: str,
        limit: int | None = None,
        threshold: float | None = None,
        timeout: float | None = None,
    ) -> SearchResponse:
        """Return ranked chunk hits for *query* within *workspace_id*.

        Raises ``ValueError`` for a blank query and ``ProviderError`` when
        the query cannot be embedded.
        """
        if not query or not query.strip():
            raise ValueError("Query is required")

        effective_limit = self.default_limit if limit is None else limit
        effective_threshold = (
            self.default_threshold if threshold is None else threshold
        )

        query_vector = self.embedding_provider.embed_query(query, timeout=timeout)
        candidates = self.storage.list_records(workspace_id=workspace_id)

        _, excluded = partition_by_dimensions(query_vector, candidates)
        if excluded:
            logger.warning(
                f"[Search] workspace={workspace_id}: skipped {excluded} of "
                f"{len(candidates)} vectors whose dimensions differ from "
                f"{query_vector.model} ({query_vector.dimensions})"
            )

        results = rank(
            query_vector,
            candidates,
            limit=effective_limit,
            threshold=effective_threshold,
        )
        logger.info(
            f"[Search] workspace={workspace_id} candidates={len(candidates)} "
            f"results={len(results)}"
        )
        return SearchResponse(
            query=query,
            model=query_vector.model,
            dimensions=query_vector.dimensions,
            results=results,
            excluded_dimension_mismatches=excluded,
        )
