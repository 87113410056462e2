"""
Ingestion pipeline: chunk item text, embed each chunk, persist the records.
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field

from loguru import logger

from .chunker import ParagraphChunker, TextChunk, strip_markup
from ..config import DEFAULT_WORKERS
from ..embeddings import EmbeddingProvider, EmbeddingVector
from ..errors import ChunkFailure, IngestionError, ProviderError
from ..storage import EmbeddingRecord, VectorStore

MIN_MARKUP_CHARS = 20


@dataclass(frozen=True)
class IngestionResult:
    """Summary output for one ingested item."""

    workspace_id: str
    item_id: str
    chunks: int
    records_created: int
    model: str | None
    dimensions: int | None
    failures: list[ChunkFailure] = field(default_factory=list)
    replaced: bool = False


class IngestionPipeline:
    """Turn item text into stored embedding records."""

    def __init__(
        self,
        storage: VectorStore,
        embedding_provider: EmbeddingProvider,
        chunker: ParagraphChunker | None = None,
        max_workers: int = DEFAULT_WORKERS,
    ) -> None:
        self.storage = storage
        self.embedding_provider = embedding_provider
        self.chunker = chunker or ParagraphChunker()
        self._max_workers = max_workers

    def ingest(
        self,
        workspace_id: str,
        item_id: str,
        text: str | None,
        *,
        title: str | None = None,
        allow_partial: bool = False,
        timeout: float | None = None,
    ) -> IngestionResult:
        """
        Embed *text* (or *title* when text is empty) and append the records.

        By default an item is stored all-or-nothing: if any chunk fails to
        embed, nothing is written and ``IngestionError`` lists the failed
        chunk positions. With ``allow_partial`` the chunks that succeeded are
        stored and the failures are reported on the result instead.
        """
        return self._run(
            workspace_id,
            item_id,
            text,
            title=title,
            allow_partial=allow_partial,
            replace=False,
            timeout=timeout,
        )

    def reembed(
        self,
        workspace_id: str,
        item_id: str,
        text: str | None,
        *,
        title: str | None = None,
        replace: bool = False,
        allow_partial: bool = False,
        timeout: float | None = None,
    ) -> IngestionResult:
        """
        Embed new text for an item that may already have records.

        Existing records are left alone unless ``replace`` is set, in which
        case they are swapped for the new ones in a single transaction. A
        replacement is never partial: any chunk failure raises
        ``IngestionError`` and leaves the stored records untouched.
        """
        return self._run(
            workspace_id,
            item_id,
            text,
            title=title,
            allow_partial=allow_partial and not replace,
            replace=replace,
            timeout=timeout,
        )

    def ingest_markup(
        self,
        workspace_id: str,
        item_id: str,
        content: str | None,
        *,
        title: str | None = None,
        replace: bool = False,
        allow_partial: bool = False,
        min_chars: int = MIN_MARKUP_CHARS,
        timeout: float | None = None,
    ) -> IngestionResult:
        """
        Strip HTML from editor content and re-embed it.

        Plain text shorter than *min_chars* is not embedded. The item's
        *title* is embedded in its place when one is given; otherwise the item
        is skipped and nothing is written.
        """
        plain_text = strip_markup(content)
        if len(plain_text) < min_chars:
            if not (title and title.strip()):
                logger.debug(
                    f"[Ingest] {workspace_id}/{item_id}: {len(plain_text)} chars of text, skipping"
                )
                return IngestionResult(
                    workspace_id=workspace_id,
                    item_id=item_id,
                    chunks=0,
                    records_created=0,
                    model=None,
                    dimensions=None,
                )
            plain_text = ""
        return self.reembed(
            workspace_id,
            item_id,
            plain_text,
            title=title,
            replace=replace,
            allow_partial=allow_partial,
            timeout=timeout,
        )

    def _run(
        self,
        workspace_id: str,
        item_id: str,
        text: str | None,
        *,
        title: str | None,
        allow_partial: bool,
        replace: bool,
        timeout: float | None,
    ) -> IngestionResult:
        source = text if text and text.strip() else (title or "")
        chunks = self.chunker.chunk_text(source)

        embedded, failures = self._embed_chunks(chunks, timeout=timeout)
        if failures and not allow_partial:
            raise IngestionError(
                f"Failed to embed {len(failures)} of {len(chunks)} chunks "
                f"for item {item_id}",
                failures=failures,
            )

        records = [
            EmbeddingRecord.create(
                workspace_id=workspace_id,
                item_id=item_id,
                position=chunk.position,
                content=chunk.text,
                vector=embedding.vector,
                model=embedding.model,
            )
            for chunk, embedding in embedded
        ]

        if replace:
            written = self.storage.replace_item_records(
                workspace_id=workspace_id, item_id=item_id, records=records
            )
        else:
            written = self.storage.add_records(records)

        if failures:
            logger.warning(
                f"[Ingest] {workspace_id}/{item_id}: stored {written} of "
                f"{len(chunks)} chunks, {len(failures)} failed"
            )
        else:
            logger.info(
                f"[Ingest] {workspace_id}/{item_id}: stored {written} chunks"
            )

        first = records[0] if records else None
        return IngestionResult(
            workspace_id=workspace_id,
            item_id=item_id,
            chunks=len(chunks),
            records_created=written,
            model=first.model if first else None,
            dimensions=first.dimensions if first else None,
            failures=failures,
            replaced=replace,
        )

    def _embed_chunks(
        self,
        chunks: list[TextChunk],
        *,
        timeout: float | None,
    ) -> tuple[list[tuple[TextChunk, EmbeddingVector]], list[ChunkFailure]]:
        """Embed chunks in parallel, keeping chunk order in the output."""
        embedded: list[tuple[TextChunk, EmbeddingVector]] = []
        failures: list[ChunkFailure] = []
        if not chunks:
            return embedded, failures

        workers = min(self._max_workers, len(chunks))
        with ThreadPoolExecutor(max_workers=workers) as executor:
            futures = [
                executor.submit(
                    self.embedding_provider.embed, chunk.text, timeout=timeout
                )
                for chunk in chunks
            ]
            for chunk, future in zip(chunks, futures):
                try:
                    embedded.append((chunk, future.result()))
                except ProviderError as exc:
                    logger.debug(
                        f"[Ingest] chunk {chunk.position} failed to embed: {exc}"
                    )
                    failures.append(ChunkFailure(position=chunk.position, error=str(exc)))
        return embedded, failures
