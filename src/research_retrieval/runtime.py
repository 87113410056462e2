"""
Wiring of settings, storage, provider, pipeline and search engine.
"""

from __future__ import annotations

from dataclasses import dataclass

from .config import RetrievalSettings, resolve_db_path
from .embeddings import EmbeddingProvider, build_provider
from .indexing import IngestionPipeline, ParagraphChunker
from .search import SemanticSearchEngine
from .storage import DuckDBVectorStore


@dataclass
class RetrievalRuntime:
    """Everything a request needs, built once per process."""

    settings: RetrievalSettings
    storage: DuckDBVectorStore
    provider: EmbeddingProvider
    pipeline: IngestionPipeline
    engine: SemanticSearchEngine

    @classmethod
    def from_settings(
        cls,
        settings: RetrievalSettings,
        *,
        db_path: str | None = None,
        provider: EmbeddingProvider | None = None,
    ) -> RetrievalRuntime:
        storage = DuckDBVectorStore(resolve_db_path(db_path, settings.db_path))
        provider = provider or build_provider(settings.provider)
        pipeline = IngestionPipeline(
            storage=storage,
            embedding_provider=provider,
            chunker=ParagraphChunker(settings.chunk_size),
            max_workers=settings.embedding_workers,
        )
        engine = SemanticSearchEngine(
            storage,
            provider,
            default_limit=settings.search_limit,
            default_threshold=settings.search_threshold,
        )
        return cls(
            settings=settings,
            storage=storage,
            provider=provider,
            pipeline=pipeline,
            engine=engine,
        )

    def close(self) -> None:
        self.provider.close()
        self.storage.close()
