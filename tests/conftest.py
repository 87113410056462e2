from __future__ import annotations

import threading

import pytest

from research_retrieval.embeddings import (
    BaseEmbeddingProvider,
    EmbeddingVector,
    LocalHashEmbeddingProvider,
)
from research_retrieval.errors import ProviderError
from research_retrieval.storage import DuckDBVectorStore


class FlakyProvider(BaseEmbeddingProvider):
    """Local embeddings, except for texts containing a marker word."""

    def __init__(self, fail_marker: str = "unreachable", dimensions: int = 8) -> None:
        self._inner = LocalHashEmbeddingProvider(dimensions)
        self.fail_marker = fail_marker
        self.calls: list[str] = []
        self._lock = threading.Lock()

    @property
    def model(self) -> str:
        return "flaky-test"

    @property
    def dimensions(self) -> int:
        return self._inner.dimensions

    def embed(self, text: str, *, timeout: float | None = None) -> EmbeddingVector:
        with self._lock:
            self.calls.append(text)
        if self.fail_marker in text:
            raise ProviderError("OpenAI embeddings failed: 503 upstream unavailable", status_code=503)
        return EmbeddingVector(vector=self._inner.embed(text).vector, model=self.model)


@pytest.fixture()
def store():
    storage = DuckDBVectorStore(":memory:")
    yield storage
    storage.close()


@pytest.fixture()
def local_provider() -> LocalHashEmbeddingProvider:
    return LocalHashEmbeddingProvider(8)


@pytest.fixture()
def flaky_provider() -> FlakyProvider:
    return FlakyProvider()
