"""
Deterministic, network-free embeddings.

Each token is hashed into one of ``dimensions`` buckets and counted; the
count vector is then scaled to unit length. Lexically similar texts land
close together, which is all this method promises.
"""

from __future__ import annotations

import hashlib
import re

from ..config import DEFAULT_LOCAL_DIM
from ..vectors import normalize
from .base import BaseEmbeddingProvider, EmbeddingVector

LOCAL_MODEL = "local-hash-v1"

_NON_TOKEN_RE = re.compile(r"[^a-z0-9\s-]")


def tokenize(text: str | None) -> list[str]:
    cleaned = _NON_TOKEN_RE.sub(" ", (text or "").lower())
    return [token for token in cleaned.split() if token]


def hash_to_index(token: str, dimensions: int) -> int:
    # First two digest bytes read as an unsigned little-endian 16-bit integer.
    digest = hashlib.sha256(token.encode("utf-8")).digest()
    return int.from_bytes(digest[:2], "little") % dimensions


def local_embed(text: str | None, dimensions: int = DEFAULT_LOCAL_DIM) -> list[float]:
    vector = [0.0] * dimensions
    for token in tokenize(text):
        vector[hash_to_index(token, dimensions)] += 1.0
    return normalize(vector)


class LocalHashEmbeddingProvider(BaseEmbeddingProvider):
    """Hashing bag-of-words embeddings computed in-process."""

    def __init__(self, dimensions: int = DEFAULT_LOCAL_DIM) -> None:
        if dimensions <= 0:
            raise ValueError("dimensions must be > 0")
        self._dimensions = dimensions

    @property
    def model(self) -> str:
        return LOCAL_MODEL

    @property
    def dimensions(self) -> int:
        return self._dimensions

    def embed(self, text: str, *, timeout: float | None = None) -> EmbeddingVector:  # noqa: ARG002
        return EmbeddingVector(
            vector=tuple(local_embed(text, self._dimensions)),
            model=LOCAL_MODEL,
        )
