"""
Remote embedding providers.

``OpenAIEmbeddingProvider`` posts to an OpenAI-compatible ``/embeddings``
endpoint over httpx. ``GeminiEmbeddingProvider`` wraps the Google GenAI
embedding API. Neither retries: a failed call raises ``ProviderError`` and
the caller decides what to do next.

Both rescale the returned vector to unit length.
"""

from __future__ import annotations

import math
from typing import Any

import httpx
from google.genai import Client as GenAIClient
from google.genai import errors as genai_errors
from google.genai.types import HttpOptions

from ..config import (
    DEFAULT_GEMINI_DIM,
    DEFAULT_GEMINI_MODEL,
    DEFAULT_OPENAI_ENDPOINT,
    DEFAULT_OPENAI_MODEL,
    DEFAULT_TIMEOUT,
)
from ..errors import ConfigurationError, ProviderError
from ..vectors import normalize
from .base import BaseEmbeddingProvider, EmbeddingVector


def _as_vector(values: Any) -> tuple[float, ...]:
    """Validate a decoded embedding array and convert it to floats."""
    if not isinstance(values, (list, tuple)) or not values:
        raise ProviderError("Embedding response is missing a numeric array")
    vector: list[float] = []
    for value in values:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ProviderError("Embedding response contains non-numeric values")
        if not math.isfinite(value):
            raise ProviderError("Embedding response contains non-finite values")
        vector.append(float(value))
    return tuple(vector)


class OpenAIEmbeddingProvider(BaseEmbeddingProvider):
    """Generate embeddings via an OpenAI-compatible HTTP endpoint."""

    def __init__(
        self,
        *,
        api_key: str,
        model: str = DEFAULT_OPENAI_MODEL,
        endpoint: str = DEFAULT_OPENAI_ENDPOINT,
        timeout: float = DEFAULT_TIMEOUT,
        client: httpx.Client | None = None,
    ) -> None:
        self._api_key = api_key
        self._model = model
        self.endpoint = endpoint
        self.timeout = timeout
        self._client = client or httpx.Client()
        self._dimensions: int | None = None

    @property
    def model(self) -> str:
        return self._model

    @property
    def dimensions(self) -> int | None:
        return self._dimensions

    def close(self) -> None:
        self._client.close()

    def embed(self, text: str, *, timeout: float | None = None) -> EmbeddingVector:
        if not self._api_key:
            raise ProviderError("OPENAI_API_KEY is not set")

        try:
            response = self._client.post(
                self.endpoint,
                json={"input": text, "model": self._model},
                headers={"Authorization": f"Bearer {self._api_key}"},
                timeout=self.timeout if timeout is None else timeout,
            )
        except httpx.HTTPError as exc:
            raise ProviderError(f"OpenAI embeddings request failed: {exc}") from exc

        if not response.is_success:
            raise ProviderError(
                f"OpenAI embeddings failed: {response.status_code} {response.text}",
                status_code=response.status_code,
            )

        try:
            payload = response.json()
        except ValueError as exc:
            raise ProviderError("OpenAI embeddings response is not valid JSON") from exc

        try:
            values = payload["data"][0]["embedding"]
        except (KeyError, IndexError, TypeError) as exc:
            raise ProviderError("OpenAI embeddings missing from response") from exc

        vector = tuple(normalize(_as_vector(values)))
        self._dimensions = len(vector)
        return EmbeddingVector(vector=vector, model=self._model)


class GeminiEmbeddingProvider(BaseEmbeddingProvider):
    """Generate text embeddings via Google GenAI."""

    def __init__(
        self,
        *,
        api_key: str | None = None,
        model: str = DEFAULT_GEMINI_MODEL,
        dimensions: int = DEFAULT_GEMINI_DIM,
        timeout: float = DEFAULT_TIMEOUT,
        client: Any | None = None,
    ) -> None:
        self._model = model
        self._dimensions = dimensions
        self._owns_client = client is None

        if client is not None:
            self._client = client
        else:
            if not api_key:
                raise ConfigurationError(
                    "GOOGLE_API_KEY not found. "
                    "Provide api_key or set the environment variable."
                )
            self._client = GenAIClient(
                api_key=api_key,
                http_options=HttpOptions(timeout=int(timeout * 1000)),
            )

    @property
    def model(self) -> str:
        return self._model

    @property
    def dimensions(self) -> int:
        return self._dimensions

    def close(self) -> None:
        close = getattr(self._client, "close", None)
        if self._owns_client and callable(close):
            close()

    def embed(self, text: str, *, timeout: float | None = None) -> EmbeddingVector:
        return self._embed(text, task_type="RETRIEVAL_DOCUMENT", timeout=timeout)

    def embed_query(
        self, text: str, *, timeout: float | None = None
    ) -> EmbeddingVector:
        return self._embed(text, task_type="RETRIEVAL_QUERY", timeout=timeout)

    def _embed(
        self, text: str, *, task_type: str, timeout: float | None
    ) -> EmbeddingVector:
        config: dict[str, Any] = {
            "task_type": task_type,
            "output_dimensionality": self._dimensions,
        }
        if timeout is not None:
            config["http_options"] = {"timeout": int(timeout * 1000)}

        try:
            result = self._client.models.embed_content(
                model=self._model,
                contents=[text],
                config=config,
            )
        except genai_errors.APIError as exc:
            raise ProviderError(
                f"Gemini embeddings failed: {exc}", status_code=exc.code
            ) from exc
        except httpx.HTTPError as exc:
            raise ProviderError(f"Gemini embeddings request failed: {exc}") from exc

        embeddings = getattr(result, "embeddings", None)
        if not embeddings:
            raise ProviderError("Gemini embeddings missing from response")
        vector = tuple(normalize(_as_vector(embeddings[0].values)))
        return EmbeddingVector(vector=vector, model=self._model)
