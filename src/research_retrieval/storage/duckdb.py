"""
DuckDB storage backend for embedding records.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import duckdb

from ..config import MEMORY_DB_PATH
from .base import EmbeddingRecord, ModelSummary

_RECORD_COLUMNS = "id, workspace_id, item_id, position, content, vector, model, dimensions"


class DuckDBVectorStore:
    """DuckDB-backed persistence for workspace embedding records."""

    def __init__(
        self,
        db_path: str,
        *,
        read_only: bool = False,
        initialize: bool = True,
    ) -> None:
        if db_path == MEMORY_DB_PATH:
            self.db_path = db_path
        else:
            self.db_path = str(Path(db_path).expanduser().resolve())
            Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
        self.read_only = read_only
        self._conn = duckdb.connect(self.db_path, read_only=read_only)
        if initialize and not read_only:
            self.initialize()

    def close(self) -> None:
        """Close the underlying DuckDB connection."""
        self._conn.close()

    def _cursor(self) -> duckdb.DuckDBPyConnection:
        # A connection must not be shared between threads; cursors may.
        return self._conn.cursor()

    def initialize(self) -> None:
        with self._cursor() as cur:
            cur.execute("CREATE SEQUENCE IF NOT EXISTS embedding_seq START 1;")
            cur.execute(
                """
                CREATE TABLE IF NOT EXISTS embeddings (
                    id VARCHAR PRIMARY KEY,
                    seq BIGINT NOT NULL DEFAULT nextval('embedding_seq'),
                    workspace_id VARCHAR NOT NULL,
                    item_id VARCHAR NOT NULL,
                    position INTEGER NOT NULL,
                    content VARCHAR NOT NULL,
                    vector DOUBLE[] NOT NULL,
                    model VARCHAR NOT NULL,
                    dimensions INTEGER NOT NULL,
                    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                );
                """
            )

    def add_records(self, records: list[EmbeddingRecord]) -> int:
        if not records:
            return 0
        with self._cursor() as cur:
            cur.begin()
            try:
                self._insert(cur, records)
                cur.commit()
            except Exception:
                cur.rollback()
                raise
        return len(records)

    def replace_item_records(
        self,
        *,
        workspace_id: str,
        item_id: str,
        records: list[EmbeddingRecord],
    ) -> int:
        with self._cursor() as cur:
            cur.begin()
            try:
                cur.execute(
                    "DELETE FROM embeddings WHERE workspace_id = ? AND item_id = ?",
                    [workspace_id, item_id],
                )
                self._insert(cur, records)
                cur.commit()
            except Exception:
                cur.rollback()
                raise
        return len(records)

    def list_records(
        self,
        *,
        workspace_id: str,
        dimensions: int | None = None,
    ) -> list[EmbeddingRecord]:
        sql = f"SELECT {_RECORD_COLUMNS} FROM embeddings WHERE workspace_id = ?"
        params: list[Any] = [workspace_id]
        if dimensions is not None:
            sql += " AND dimensions = ?"
            params.append(dimensions)
        sql += " ORDER BY seq ASC"

        with self._cursor() as cur:
            rows = cur.execute(sql, params).fetchall()
        return [self._row_to_record(row) for row in rows]

    def delete_item_records(self, *, workspace_id: str, item_id: str) -> int:
        with self._cursor() as cur:
            rows = cur.execute(
                """
                DELETE FROM embeddings
                WHERE workspace_id = ? AND item_id = ?
                RETURNING id
                """,
                [workspace_id, item_id],
            ).fetchall()
        return len(rows)

    def delete_workspace_records(self, *, workspace_id: str) -> int:
        with self._cursor() as cur:
            rows = cur.execute(
                "DELETE FROM embeddings WHERE workspace_id = ? RETURNING id",
                [workspace_id],
            ).fetchall()
        return len(rows)

    def count_records(self, *, workspace_id: str) -> int:
        with self._cursor() as cur:
            row = cur.execute(
                "SELECT COUNT(*) FROM embeddings WHERE workspace_id = ?",
                [workspace_id],
            ).fetchone()
        return int(row[0]) if row else 0

    def list_models(self, *, workspace_id: str) -> list[ModelSummary]:
        with self._cursor() as cur:
            rows = cur.execute(
                """
                SELECT model, dimensions, COUNT(*)
                FROM embeddings
                WHERE workspace_id = ?
                GROUP BY model, dimensions
                ORDER BY model ASC, dimensions ASC
                """,
                [workspace_id],
            ).fetchall()
        return [
            ModelSummary(model=str(row[0]), dimensions=int(row[1]), count=int(row[2]))
            for row in rows
        ]

    @staticmethod
    def _insert(cur: duckdb.DuckDBPyConnection, records: list[EmbeddingRecord]) -> None:
        if not records:
            return
        cur.executemany(
            """
            INSERT INTO embeddings (
                id, workspace_id, item_id, position, content, vector, model, dimensions
            )
            VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            """,
            [
                (
                    record.id,
                    record.workspace_id,
                    record.item_id,
                    record.position,
                    record.content,
                    list(record.vector),
                    record.model,
                    record.dimensions,
                )
                for record in records
            ],
        )

    @staticmethod
    def _row_to_record(row: tuple[Any, ...]) -> EmbeddingRecord:
        return EmbeddingRecord(
            id=str(row[0]),
            workspace_id=str(row[1]),
            item_id=str(row[2]),
            position=int(row[3]),
            content=str(row[4]),
            vector=tuple(float(value) for value in row[5]),
            model=str(row[6]),
            dimensions=int(row[7]),
        )
