"""Storage backends for embedding records."""

from .base import EmbeddingRecord, ModelSummary, VectorStore, stable_id
from .duckdb import DuckDBVectorStore

__all__ = [
    "EmbeddingRecord",
    "ModelSummary",
    "VectorStore",
    "stable_id",
    "DuckDBVectorStore",
]
