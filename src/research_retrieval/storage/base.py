"""
Storage interfaces and data models for embedding persistence.
"""

from __future__ import annotations

import hashlib
import uuid
from dataclasses import dataclass
from typing import Protocol


def stable_id(prefix: str, value: str) -> str:
    digest = hashlib.sha1(value.encode("utf-8")).hexdigest()
    return f"{prefix}_{digest}"


@dataclass(frozen=True)
class EmbeddingRecord:
    """One embedded chunk, owned by an item inside a workspace."""

    id: str
    workspace_id: str
    item_id: str
    position: int
    content: str
    vector: tuple[float, ...]
    model: str
    dimensions: int

    @classmethod
    def create(
        cls,
        *,
        workspace_id: str,
        item_id: str,
        position: int,
        content: str,
        vector: tuple[float, ...],
        model: str,
    ) -> EmbeddingRecord:
        # Re-embedding the same chunk must produce a new record, hence the nonce.
        record_id = stable_id(
            "emb", f"{workspace_id}:{item_id}:{position}:{uuid.uuid4().hex}"
        )
        return cls(
            id=record_id,
            workspace_id=workspace_id,
            item_id=item_id,
            position=position,
            content=content,
            vector=tuple(vector),
            model=model,
            dimensions=len(vector),
        )


@dataclass(frozen=True)
class ModelSummary:
    """Count of stored vectors per (model, dimensions) in a workspace."""

    model: str
    dimensions: int
    count: int


class VectorStore(Protocol):
    """Protocol for embedding persistence. Every read is scoped to one workspace."""

    def initialize(self) -> None:
        """Initialize required tables."""

    def add_records(self, records: list[EmbeddingRecord]) -> int:
        """Insert records atomically. Return count written."""

    def replace_item_records(
        self,
        *,
        workspace_id: str,
        item_id: str,
        records: list[EmbeddingRecord],
    ) -> int:
        """Delete an item's records and insert *records* in one transaction."""

    def list_records(
        self,
        *,
        workspace_id: str,
        dimensions: int | None = None,
    ) -> list[EmbeddingRecord]:
        """List a workspace's records in insertion order."""

    def delete_item_records(self, *, workspace_id: str, item_id: str) -> int:
        """Delete all records for an item. Return count deleted."""

    def delete_workspace_records(self, *, workspace_id: str) -> int:
        """Delete all records for a workspace. Return count deleted."""

    def count_records(self, *, workspace_id: str) -> int:
        """Count records stored for a workspace."""

    def list_models(self, *, workspace_id: str) -> list[ModelSummary]:
        """Summarize stored vectors by model and dimensions."""
