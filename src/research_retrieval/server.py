"""
FastAPI server exposing ingestion and search for workspace embeddings.

Authentication and workspace ownership checks happen upstream; every route
here is scoped by the ``workspace_id`` path parameter and never reads
another workspace's records.
"""

from typing import Literal

from fastapi import Depends, FastAPI
from fastapi.responses import JSONResponse
from loguru import logger
from pydantic import BaseModel, Field

from .config import RetrievalSettings
from .errors import IngestionError, ProviderError
from .logger import setup_logger
from .runtime import RetrievalRuntime

app = FastAPI(
    title="Research Retrieval",
    description="Semantic retrieval over research workspace content",
)

_RUNTIME: RetrievalRuntime | None = None


def get_runtime() -> RetrievalRuntime:
    """Return the process runtime, building it from the environment once."""
    global _RUNTIME
    if _RUNTIME is None:
        _RUNTIME = RetrievalRuntime.from_settings(RetrievalSettings.from_env())
    return _RUNTIME


def reset_runtime() -> None:
    global _RUNTIME
    if _RUNTIME is not None:
        _RUNTIME.close()
    _RUNTIME = None


class IngestRequest(BaseModel):
    """Request model for embedding an item's text."""

    text: str | None = None
    title: str | None = None
    format: Literal["text", "html"] = "text"
    replace: bool = False
    allow_partial: bool = False


class SearchRequest(BaseModel):
    """Request model for search queries."""

    query: str = ""
    limit: int | None = Field(default=None, ge=0)
    threshold: float | None = None


@app.get("/api/health")
def health(runtime: RetrievalRuntime = Depends(get_runtime)):
    return {
        "status": "ok",
        "provider": runtime.settings.provider_name,
        "model": runtime.provider.model,
        "dimensions": runtime.provider.dimensions,
    }


@app.post("/api/workspaces/{workspace_id}/items/{item_id}/embeddings")
def embed_item(
    workspace_id: str,
    item_id: str,
    request: IngestRequest,
    runtime: RetrievalRuntime = Depends(get_runtime),
):
    """Chunk and embed an item's text (falls back to its title)."""
    has_text = bool(request.text and request.text.strip())
    has_title = bool(request.title and request.title.strip())
    if not has_text and not has_title:
        return JSONResponse({"error": "No content provided to embed"}, status_code=400)

    try:
        if request.format == "html" and has_text:
            result = runtime.pipeline.ingest_markup(
                workspace_id,
                item_id,
                request.text,
                title=request.title,
                replace=request.replace,
                allow_partial=request.allow_partial,
            )
        else:
            result = runtime.pipeline.reembed(
                workspace_id,
                item_id,
                request.text,
                title=request.title,
                replace=request.replace,
                allow_partial=request.allow_partial,
            )
    except IngestionError as exc:
        logger.error(f"[API] Item embed error for {workspace_id}/{item_id}: {exc}")
        return JSONResponse(
            {
                "error": "Embedding generation failed",
                "failures": [
                    {"position": failure.position, "error": failure.error}
                    for failure in exc.failures
                ],
            },
            status_code=502,
        )
    except ProviderError as exc:
        logger.error(f"[API] Item embed error for {workspace_id}/{item_id}: {exc}")
        return JSONResponse({"error": "Embedding generation failed"}, status_code=502)

    return {
        "embeddings_created": result.records_created,
        "chunks": result.chunks,
        "model": result.model,
        "dimensions": result.dimensions,
        "replaced": result.replaced,
        "failures": [
            {"position": failure.position, "error": failure.error}
            for failure in result.failures
        ],
    }


@app.delete("/api/workspaces/{workspace_id}/items/{item_id}/embeddings")
def delete_item_embeddings(
    workspace_id: str,
    item_id: str,
    runtime: RetrievalRuntime = Depends(get_runtime),
):
    deleted = runtime.storage.delete_item_records(
        workspace_id=workspace_id, item_id=item_id
    )
    return {"deleted": deleted}


@app.get("/api/workspaces/{workspace_id}/embeddings/status")
def embeddings_status(
    workspace_id: str,
    runtime: RetrievalRuntime = Depends(get_runtime),
):
    models = runtime.storage.list_models(workspace_id=workspace_id)
    return {
        "workspace_id": workspace_id,
        "embeddings": runtime.storage.count_records(workspace_id=workspace_id),
        "models": [
            {"model": summary.model, "dimensions": summary.dimensions, "count": summary.count}
            for summary in models
        ],
    }


@app.post("/api/workspaces/{workspace_id}/search")
def search_workspace(
    workspace_id: str,
    request: SearchRequest,
    runtime: RetrievalRuntime = Depends(get_runtime),
):
    """Rank the workspace's stored chunks against a query."""
    if not request.query.strip():
        return JSONResponse({"error": "Query is required"}, status_code=400)

    try:
        response = runtime.engine.search(
            workspace_id=workspace_id,
            query=request.query,
            limit=request.limit,
            threshold=request.threshold,
        )
    except ProviderError as exc:
        logger.error(f"[API] Workspace search error for {workspace_id}: {exc}")
        return JSONResponse(
            {"error": "Search temporarily unavailable"}, status_code=502
        )

    return {
        "query": response.query,
        "model": response.model,
        "dimensions": response.dimensions,
        "results": [
            {
                "score": result.score,
                "embedding_id": result.record_id,
                "item_id": result.item_id,
                "position": result.position,
                "content": result.content,
            }
            for result in response.results
        ],
    }


def run_server(
    host: str = "127.0.0.1",
    port: int = 8000,
    log_level: str = "INFO",
    log_file: str | None = None,
):
    """Run the FastAPI server."""
    import uvicorn

    setup_logger(log_level, log_file)
    runtime = get_runtime()
    logger.info(
        f"[API] embeddings via {runtime.settings.provider_name} ({runtime.provider.model}), "
        f"store at {runtime.storage.db_path}"
    )
    uvicorn.run(app, host=host, port=port)


if __name__ == "__main__":
    run_server()
