"""
Exception types raised by the retrieval core.
"""

from __future__ import annotations

from dataclasses import dataclass


class RetrievalError(Exception):
    """Base class for retrieval core errors."""


class ConfigurationError(RetrievalError):
    """Settings are missing or invalid at startup."""


class ProviderError(RetrievalError):
    """A remote embedding call failed."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


@dataclass(frozen=True)
class ChunkFailure:
    """An embedding failure for one chunk of an item."""

    position: int
    error: str


class IngestionError(ProviderError):
    """One or more chunks of an item could not be embedded."""

    def __init__(self, message: str, *, failures: list[ChunkFailure]) -> None:
        super().__init__(message)
        self.failures = failures
