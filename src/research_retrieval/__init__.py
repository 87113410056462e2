"""
Research Retrieval - semantic search over research workspace content.

This package chunks workspace text, embeds each chunk with a remote
embedding API or a deterministic local hashing fallback, stores the vectors
per workspace in DuckDB, and ranks them against queries by cosine
similarity. Results never cross workspace boundaries.

Example usage:
    >>> from research_retrieval import RetrievalRuntime, RetrievalSettings
    >>> runtime = RetrievalRuntime.from_settings(RetrievalSettings(), db_path=":memory:")
    >>> runtime.pipeline.ingest("ws_1", "item_1", "Fusion research notes.")
    >>> runtime.engine.search(workspace_id="ws_1", query="fusion")
"""

from .config import (
    LocalProviderConfig,
    RemoteProviderConfig,
    RetrievalSettings,
)
from .embeddings import (
    EmbeddingProvider,
    EmbeddingVector,
    GeminiEmbeddingProvider,
    LocalHashEmbeddingProvider,
    OpenAIEmbeddingProvider,
    build_provider,
)
from .errors import (
    ChunkFailure,
    ConfigurationError,
    IngestionError,
    ProviderError,
    RetrievalError,
)
from .indexing import IngestionPipeline, IngestionResult, TextChunk, chunk_text
from .runtime import RetrievalRuntime
from .search import SearchResponse, SearchResult, SemanticSearchEngine, rank
from .storage import DuckDBVectorStore, EmbeddingRecord

__all__ = [
    # Config
    "LocalProviderConfig",
    "RemoteProviderConfig",
    "RetrievalSettings",
    # Embeddings
    "EmbeddingProvider",
    "EmbeddingVector",
    "GeminiEmbeddingProvider",
    "LocalHashEmbeddingProvider",
    "OpenAIEmbeddingProvider",
    "build_provider",
    # Errors
    "ChunkFailure",
    "ConfigurationError",
    "IngestionError",
    "ProviderError",
    "RetrievalError",
    # Indexing
    "IngestionPipeline",
    "IngestionResult",
    "TextChunk",
    "chunk_text",
    # Runtime
    "RetrievalRuntime",
    # Search
    "SearchResponse",
    "SearchResult",
    "SemanticSearchEngine",
    "rank",
    # Storage
    "DuckDBVectorStore",
    "EmbeddingRecord",
]
