"""Embedding providers: remote APIs and a deterministic local fallback."""

from .base import BaseEmbeddingProvider, EmbeddingProvider, EmbeddingVector
from .local import LOCAL_MODEL, LocalHashEmbeddingProvider, local_embed, tokenize
from .registry import build_provider
from .remote import GeminiEmbeddingProvider, OpenAIEmbeddingProvider

__all__ = [
    "BaseEmbeddingProvider",
    "EmbeddingProvider",
    "EmbeddingVector",
    "LOCAL_MODEL",
    "LocalHashEmbeddingProvider",
    "local_embed",
    "tokenize",
    "build_provider",
    "GeminiEmbeddingProvider",
    "OpenAIEmbeddingProvider",
]
