"""
Build the configured embedding provider.
"""

from __future__ import annotations

from ..config import (
    DEFAULT_OPENAI_ENDPOINT,
    LocalProviderConfig,
    ProviderConfig,
    RemoteProviderConfig,
)
from ..errors import ConfigurationError
from .base import EmbeddingProvider
from .local import LocalHashEmbeddingProvider
from .remote import GeminiEmbeddingProvider, OpenAIEmbeddingProvider


def build_provider(config: ProviderConfig) -> EmbeddingProvider:
    """
    Construct the provider for a resolved configuration.

    Called once at startup; the result is shared by every request.
    """
    if isinstance(config, LocalProviderConfig):
        return LocalHashEmbeddingProvider(config.dimensions)

    if isinstance(config, RemoteProviderConfig):
        if not config.api_key:
            raise ConfigurationError(
                f"No API key configured for the {config.backend} embedding provider"
            )
        if config.backend == "openai":
            return OpenAIEmbeddingProvider(
                api_key=config.api_key,
                model=config.model,
                endpoint=config.endpoint or DEFAULT_OPENAI_ENDPOINT,
                timeout=config.timeout,
            )
        if config.backend == "gemini":
            kwargs = {"dimensions": config.dimensions} if config.dimensions else {}
            return GeminiEmbeddingProvider(
                api_key=config.api_key,
                model=config.model,
                timeout=config.timeout,
                **kwargs,
            )
        raise ConfigurationError(f"Unknown remote embedding backend: {config.backend!r}")

    raise ConfigurationError(f"Unsupported provider configuration: {config!r}")
