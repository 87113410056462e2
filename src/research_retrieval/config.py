"""
Process-wide settings for the retrieval core.

Settings are read from the environment once, at startup, and passed down
explicitly. The embedding backend is resolved here into either a
``RemoteProviderConfig`` or a ``LocalProviderConfig``; nothing downstream
looks at environment variables again.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal, TypeAlias

from .errors import ConfigurationError


DEFAULT_DB_PATH = "~/.research_retrieval/embeddings.duckdb"
ENV_DB_PATH = "RESEARCH_RETRIEVAL_DB_PATH"
MEMORY_DB_PATH = ":memory:"

DEFAULT_OPENAI_MODEL = "text-embedding-3-small"
DEFAULT_OPENAI_ENDPOINT = "https://api.openai.com/v1/embeddings"
DEFAULT_GEMINI_MODEL = "gemini-embedding-001"
DEFAULT_GEMINI_DIM = 768
DEFAULT_LOCAL_DIM = 384
DEFAULT_CHUNK_SIZE = 900
DEFAULT_SEARCH_LIMIT = 6
DEFAULT_SEARCH_THRESHOLD = 0.0
DEFAULT_TIMEOUT = 30.0
DEFAULT_WORKERS = 4

RemoteBackend: TypeAlias = Literal["openai", "gemini"]


@dataclass(frozen=True)
class LocalProviderConfig:
    """Deterministic hashing embeddings computed in-process."""

    dimensions: int = DEFAULT_LOCAL_DIM
    kind: Literal["local"] = field(default="local", init=False)


@dataclass(frozen=True)
class RemoteProviderConfig:
    """Embeddings produced by a remote API."""

    backend: RemoteBackend
    api_key: str = field(repr=False)
    model: str
    endpoint: str | None = None
    dimensions: int | None = None
    timeout: float = DEFAULT_TIMEOUT
    kind: Literal["remote"] = field(default="remote", init=False)


ProviderConfig: TypeAlias = RemoteProviderConfig | LocalProviderConfig


@dataclass(frozen=True)
class RetrievalSettings:
    """Resolved configuration for one process."""

    provider: ProviderConfig = field(default_factory=LocalProviderConfig)
    chunk_size: int = DEFAULT_CHUNK_SIZE
    search_limit: int = DEFAULT_SEARCH_LIMIT
    search_threshold: float = DEFAULT_SEARCH_THRESHOLD
    embedding_workers: int = DEFAULT_WORKERS
    db_path: str = DEFAULT_DB_PATH
    log_level: str = "INFO"
    log_file: str | None = None

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> RetrievalSettings:
        """
        Build settings from environment variables.

        Raises ``ConfigurationError`` for malformed values, an unknown provider
        name, or a remote provider requested without its credential.
        """
        env = os.environ if environ is None else environ
        return cls(
            provider=_resolve_provider(env),
            chunk_size=_int_setting(
                env, "RESEARCH_RETRIEVAL_CHUNK_SIZE", DEFAULT_CHUNK_SIZE, minimum=1
            ),
            search_limit=_int_setting(
                env, "RESEARCH_RETRIEVAL_SEARCH_LIMIT", DEFAULT_SEARCH_LIMIT, minimum=0
            ),
            search_threshold=_float_setting(
                env, "RESEARCH_RETRIEVAL_SEARCH_THRESHOLD", DEFAULT_SEARCH_THRESHOLD
            ),
            embedding_workers=_int_setting(
                env, "RESEARCH_RETRIEVAL_EMBEDDING_WORKERS", DEFAULT_WORKERS, minimum=1
            ),
            db_path=env.get(ENV_DB_PATH) or DEFAULT_DB_PATH,
            log_level=(env.get("RESEARCH_RETRIEVAL_LOG_LEVEL") or "INFO").upper(),
            log_file=env.get("RESEARCH_RETRIEVAL_LOG_FILE") or None,
        )

    @property
    def provider_name(self) -> str:
        if isinstance(self.provider, RemoteProviderConfig):
            return self.provider.backend
        return "local"


def resolve_db_path(override_path: str | None = None, db_path: str | None = None) -> str:
    """
    Resolve the DuckDB path from CLI override, settings, env var, or default.

    Precedence:
    1) explicit override_path
    2) db_path from settings
    3) RESEARCH_RETRIEVAL_DB_PATH
    4) default path
    """
    raw_path = override_path or db_path or os.getenv(ENV_DB_PATH) or DEFAULT_DB_PATH
    if raw_path == MEMORY_DB_PATH:
        return raw_path
    resolved = Path(raw_path).expanduser().resolve()
    resolved.parent.mkdir(parents=True, exist_ok=True)
    return str(resolved)


def _resolve_provider(env: Mapping[str, str]) -> ProviderConfig:
    name = (env.get("RESEARCH_RETRIEVAL_EMBEDDING_PROVIDER") or "auto").strip().lower()
    timeout = _float_setting(
        env, "RESEARCH_RETRIEVAL_EMBEDDING_TIMEOUT", DEFAULT_TIMEOUT
    )
    if timeout <= 0:
        raise ConfigurationError("RESEARCH_RETRIEVAL_EMBEDDING_TIMEOUT must be > 0")

    openai_key = env.get("OPENAI_API_KEY")
    if name == "auto":
        name = "openai" if openai_key else "local"

    if name == "local":
        return LocalProviderConfig(
            dimensions=_int_setting(env, "EMBEDDING_DIM", DEFAULT_LOCAL_DIM, minimum=1)
        )

    if name == "openai":
        if not openai_key:
            raise ConfigurationError(
                "OPENAI_API_KEY not found. "
                "Set it or choose RESEARCH_RETRIEVAL_EMBEDDING_PROVIDER=local."
            )
        return RemoteProviderConfig(
            backend="openai",
            api_key=openai_key,
            model=env.get("OPENAI_EMBEDDING_MODEL") or DEFAULT_OPENAI_MODEL,
            endpoint=env.get("RESEARCH_RETRIEVAL_EMBEDDING_URL")
            or DEFAULT_OPENAI_ENDPOINT,
            timeout=timeout,
        )

    if name == "gemini":
        google_key = env.get("GOOGLE_API_KEY")
        if not google_key:
            raise ConfigurationError(
                "GOOGLE_API_KEY not found. "
                "Set it or choose RESEARCH_RETRIEVAL_EMBEDDING_PROVIDER=local."
            )
        return RemoteProviderConfig(
            backend="gemini",
            api_key=google_key,
            model=env.get("RESEARCH_RETRIEVAL_GEMINI_MODEL") or DEFAULT_GEMINI_MODEL,
            dimensions=_int_setting(
                env, "RESEARCH_RETRIEVAL_GEMINI_DIM", DEFAULT_GEMINI_DIM, minimum=1
            ),
            timeout=timeout,
        )

    raise ConfigurationError(
        f"Unknown embedding provider: {name!r} (expected auto, openai, gemini or local)"
    )


def _int_setting(
    env: Mapping[str, str], name: str, default: int, *, minimum: int
) -> int:
    raw = env.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from exc
    if value < minimum:
        raise ConfigurationError(f"{name} must be >= {minimum}, got {value}")
    return value


def _float_setting(env: Mapping[str, str], name: str, default: float) -> float:
    raw = env.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}") from exc
