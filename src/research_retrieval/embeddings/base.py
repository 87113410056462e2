"""
Embedding vector type and the provider interface.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol


@dataclass(frozen=True)
class EmbeddingVector:
    """A fixed-length embedding and the method that produced it."""

    vector: tuple[float, ...]
    model: str

    @property
    def dimensions(self) -> int:
        return len(self.vector)


class EmbeddingProvider(Protocol):
    """Anything that can turn text into an ``EmbeddingVector``."""

    @property
    def model(self) -> str:
        """Identifier stored alongside every vector."""

    @property
    def dimensions(self) -> int | None:
        """Vector length, or None while unknown (remote, before first call)."""

    def embed(self, text: str, *, timeout: float | None = None) -> EmbeddingVector:
        """Embed one document chunk."""

    def embed_query(
        self, text: str, *, timeout: float | None = None
    ) -> EmbeddingVector:
        """Embed a search query."""

    def close(self) -> None:
        """Release any client the provider holds."""


class BaseEmbeddingProvider:
    """Shared query and lifecycle behaviour for concrete providers."""

    @property
    def model(self) -> str:
        raise NotImplementedError

    @property
    def dimensions(self) -> int | None:
        raise NotImplementedError

    def embed(self, text: str, *, timeout: float | None = None) -> EmbeddingVector:
        raise NotImplementedError

    def embed_query(
        self, text: str, *, timeout: float | None = None
    ) -> EmbeddingVector:
        return self.embed(text, timeout=timeout)

    def close(self) -> None:
        return None
