"""Tests for embedding providers."""

from __future__ import annotations

import json
import math
from dataclasses import dataclass
from typing import Any

import httpx
import pytest
from google.genai import errors as genai_errors

from research_retrieval.config import LocalProviderConfig, RemoteProviderConfig
from research_retrieval.embeddings import (
    LOCAL_MODEL,
    GeminiEmbeddingProvider,
    LocalHashEmbeddingProvider,
    OpenAIEmbeddingProvider,
    build_provider,
    tokenize,
)
from research_retrieval.errors import ConfigurationError, ProviderError
from research_retrieval.vectors import norm


# ---------------------------------------------------------------------------
# Local hashing provider
# ---------------------------------------------------------------------------


def test_tokenize_lowercases_and_strips_punctuation() -> None:
    assert tokenize("Fusion-Energy, plasma & TOKAMAKS!\n2024") == [
        "fusion-energy",
        "plasma",
        "tokamaks",
        "2024",
    ]
    assert tokenize(None) == []


def test_local_embedding_is_unit_length() -> None:
    provider = LocalHashEmbeddingProvider()

    embedding = provider.embed("Magnetic confinement of hot plasma in a tokamak")

    assert embedding.model == LOCAL_MODEL
    assert embedding.dimensions == 384
    assert math.isclose(norm(embedding.vector), 1.0, abs_tol=1e-6)


def test_local_embedding_of_empty_tokens_is_zero_vector() -> None:
    provider = LocalHashEmbeddingProvider(16)

    for text in ("", "!!! ??? ...", "   "):
        embedding = provider.embed(text)
        assert embedding.vector == (0.0,) * 16


def test_local_embedding_is_deterministic() -> None:
    first = LocalHashEmbeddingProvider(64).embed("Stellarators twist the plasma")
    second = LocalHashEmbeddingProvider(64).embed("Stellarators twist the plasma")

    assert first.vector == second.vector


def test_local_embedding_known_slots() -> None:
    # sha256("fusion")[:2] little-endian = 54261 -> slot 5 of 8
    # sha256("research")[:2] little-endian = 63078 -> slot 6 of 8
    embedding = LocalHashEmbeddingProvider(8).embed("Fusion research.")

    expected = 1 / math.sqrt(2)
    assert embedding.vector[5] == pytest.approx(expected)
    assert embedding.vector[6] == pytest.approx(expected)
    assert sum(1 for value in embedding.vector if value) == 2


# ---------------------------------------------------------------------------
# OpenAI-compatible HTTP provider
# ---------------------------------------------------------------------------


def _openai_provider(handler, **kwargs: Any) -> OpenAIEmbeddingProvider:
    client = httpx.Client(transport=httpx.MockTransport(handler))
    return OpenAIEmbeddingProvider(
        api_key="sk-test",
        model="text-embedding-3-small",
        endpoint="https://embeddings.test/v1/embeddings",
        client=client,
        **kwargs,
    )


def test_openai_embed_sends_model_and_parses_vector() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"data": [{"embedding": [0.6, 0.8, 0]}]})

    provider = _openai_provider(handler)
    embedding = provider.embed("plasma physics")

    assert embedding.vector == pytest.approx((0.6, 0.8, 0.0))
    assert embedding.model == "text-embedding-3-small"
    assert provider.dimensions == 3
    body = json.loads(seen[0].content)
    assert body == {"input": "plasma physics", "model": "text-embedding-3-small"}
    assert seen[0].headers["Authorization"] == "Bearer sk-test"


def test_openai_embed_uses_per_call_timeout() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"data": [{"embedding": [1.0]}]})

    provider = _openai_provider(handler, timeout=30.0)
    provider.embed("a", timeout=1.5)

    assert seen[0].extensions["timeout"]["read"] == 1.5


def test_openai_non_success_status_raises_provider_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(429, text="rate limited")

    provider = _openai_provider(handler)

    with pytest.raises(ProviderError, match="429") as exc_info:
        provider.embed("anything")
    assert exc_info.value.status_code == 429


def test_openai_network_failure_raises_provider_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    provider = _openai_provider(handler)

    with pytest.raises(ProviderError, match="request failed"):
        provider.embed("anything")


def test_openai_timeout_raises_provider_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    provider = _openai_provider(handler)

    with pytest.raises(ProviderError):
        provider.embed("anything", timeout=0.01)


@pytest.mark.parametrize(
    "payload",
    [
        {"data": []},
        {"data": [{"embedding": "not-a-list"}]},
        {"data": [{"embedding": [0.1, "x"]}]},
        {"data": [{"embedding": [True, False]}]},
        {"data": [{"embedding": []}]},
        {"object": "list"},
    ],
)
def test_openai_malformed_body_raises_provider_error(payload: dict[str, Any]) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=payload)

    provider = _openai_provider(handler)

    with pytest.raises(ProviderError):
        provider.embed("anything")


def test_openai_non_json_body_raises_provider_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text="<html>gateway</html>")

    provider = _openai_provider(handler)

    with pytest.raises(ProviderError, match="not valid JSON"):
        provider.embed("anything")


def test_openai_missing_key_raises_provider_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:  # pragma: no cover
        raise AssertionError("no request expected")

    client = httpx.Client(transport=httpx.MockTransport(handler))
    provider = OpenAIEmbeddingProvider(api_key="", client=client)

    with pytest.raises(ProviderError, match="OPENAI_API_KEY"):
        provider.embed("anything")


def test_openai_vector_is_rescaled_to_unit_length() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"data": [{"embedding": [3.0, 4.0]}]})

    embedding = _openai_provider(handler).embed("anything")

    assert embedding.vector == pytest.approx((0.6, 0.8))
    assert math.isclose(norm(embedding.vector), 1.0)


def test_openai_close_closes_http_client() -> None:
    provider = OpenAIEmbeddingProvider(api_key="sk-test")

    provider.close()

    assert provider._client.is_closed


# ---------------------------------------------------------------------------
# Gemini provider (mock-based, no API key needed)
# ---------------------------------------------------------------------------


@dataclass
class _FakeEmbedding:
    values: list[float] | None


@dataclass
class _FakeEmbedResult:
    embeddings: list[_FakeEmbedding]


class _FakeModels:
    """Records calls and returns deterministic embeddings."""

    def __init__(
        self, error: Exception | None = None, values: list[float] | None = None
    ) -> None:
        self.calls: list[dict[str, Any]] = []
        self.error = error
        self.values = values

    def embed_content(
        self, *, model: str, contents: list[str], config: dict
    ) -> _FakeEmbedResult:
        self.calls.append({"model": model, "contents": contents, "config": config})
        if self.error is not None:
            raise self.error
        if self.values is not None:
            return _FakeEmbedResult(embeddings=[_FakeEmbedding(values=self.values)])
        dim = config.get("output_dimensionality", 768)
        return _FakeEmbedResult(embeddings=[_FakeEmbedding(values=[0.5] * dim)])


class _FakeClient:
    def __init__(
        self, error: Exception | None = None, values: list[float] | None = None
    ) -> None:
        self.models = _FakeModels(error, values)


def test_gemini_embed_uses_document_task_type() -> None:
    client = _FakeClient()
    provider = GeminiEmbeddingProvider(client=client, dimensions=4)

    embedding = provider.embed("test")

    assert embedding.dimensions == 4
    call = client.models.calls[0]
    assert call["config"]["task_type"] == "RETRIEVAL_DOCUMENT"
    assert call["config"]["output_dimensionality"] == 4
    assert "http_options" not in call["config"]


def test_gemini_embed_query_uses_query_task_type_and_timeout() -> None:
    client = _FakeClient()
    provider = GeminiEmbeddingProvider(client=client, dimensions=4)

    provider.embed_query("search query", timeout=2.0)

    call = client.models.calls[0]
    assert call["config"]["task_type"] == "RETRIEVAL_QUERY"
    assert call["config"]["http_options"] == {"timeout": 2000}


def test_gemini_api_error_becomes_provider_error() -> None:
    error = genai_errors.ClientError(
        400, {"error": {"message": "bad input", "status": "INVALID_ARGUMENT"}}
    )
    provider = GeminiEmbeddingProvider(client=_FakeClient(error), dimensions=4)

    with pytest.raises(ProviderError) as exc_info:
        provider.embed("test")
    assert exc_info.value.status_code == 400


def test_gemini_missing_key_raises_configuration_error() -> None:
    with pytest.raises(ConfigurationError, match="GOOGLE_API_KEY"):
        GeminiEmbeddingProvider(api_key=None, client=None)


def test_gemini_vector_is_rescaled_to_unit_length() -> None:
    provider = GeminiEmbeddingProvider(client=_FakeClient(values=[3.0, 4.0]), dimensions=2)

    embedding = provider.embed("x")

    assert embedding.vector == pytest.approx((0.6, 0.8))
    assert math.isclose(norm(embedding.vector), 1.0)


def test_gemini_zero_vector_stays_zero() -> None:
    provider = GeminiEmbeddingProvider(client=_FakeClient(values=[0.0, 0.0, 0.0]), dimensions=3)

    assert provider.embed("x").vector == (0.0, 0.0, 0.0)


def test_gemini_close_leaves_injected_client_alone() -> None:
    client = _FakeClient()
    client.closed = False

    def close() -> None:
        client.closed = True

    client.close = close
    GeminiEmbeddingProvider(client=client, dimensions=4).close()

    assert client.closed is False


# ---------------------------------------------------------------------------
# Provider selection
# ---------------------------------------------------------------------------


def test_build_provider_local() -> None:
    provider = build_provider(LocalProviderConfig(dimensions=12))

    assert isinstance(provider, LocalHashEmbeddingProvider)
    assert provider.dimensions == 12


def test_build_provider_openai() -> None:
    provider = build_provider(
        RemoteProviderConfig(backend="openai", api_key="sk-test", model="m-1", timeout=5.0)
    )

    assert isinstance(provider, OpenAIEmbeddingProvider)
    assert provider.model == "m-1"
    assert provider.timeout == 5.0


def test_build_provider_remote_without_key_fails_fast() -> None:
    with pytest.raises(ConfigurationError):
        build_provider(RemoteProviderConfig(backend="openai", api_key="", model="m-1"))
