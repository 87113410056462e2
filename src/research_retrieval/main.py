from pathlib import Path
from typing import Annotated

from rich.console import Console
from rich.markup import escape
from rich.table import Table
from typer import Argument, Exit, Option, Typer

from .config import RetrievalSettings
from .errors import ConfigurationError, IngestionError, ProviderError
from .logger import setup_logger
from .runtime import RetrievalRuntime

app = Typer(help="Embed research workspace content and search it semantically.")
console = Console()

DbPathOption = Annotated[
    str | None,
    Option(
        "--db-path",
        help="DuckDB file for embeddings (defaults to RESEARCH_RETRIEVAL_DB_PATH).",
    ),
]
LogLevelOption = Annotated[
    str | None,
    Option("--log-level", help="Loguru level, e.g. DEBUG or WARNING."),
]


def _load_settings(log_level: str | None) -> RetrievalSettings:
    try:
        settings = RetrievalSettings.from_env()
    except ConfigurationError as exc:
        console.print(f"[bold red]Configuration error:[/] {exc}")
        raise Exit(code=2) from exc
    setup_logger((log_level or settings.log_level).upper(), settings.log_file)
    return settings


def _open_runtime(db_path: str | None, log_level: str | None) -> RetrievalRuntime:
    settings = _load_settings(log_level)
    try:
        return RetrievalRuntime.from_settings(settings, db_path=db_path)
    except ConfigurationError as exc:
        console.print(f"[bold red]Configuration error:[/] {exc}")
        raise Exit(code=2) from exc


@app.command()
def ingest(
    workspace_id: Annotated[str, Argument(help="Workspace that owns the item.")],
    item_id: Annotated[str, Argument(help="Item whose text is embedded.")],
    file: Annotated[
        Path | None,
        Option("--file", "-f", help="Read the item text from this file."),
    ] = None,
    text: Annotated[
        str | None, Option("--text", "-t", help="Item text given inline.")
    ] = None,
    title: Annotated[
        str | None, Option("--title", help="Embedded when the text is empty.")
    ] = None,
    html: Annotated[
        bool, Option("--html", help="Strip HTML tags before embedding.")
    ] = False,
    replace: Annotated[
        bool, Option("--replace", help="Replace the item's existing embeddings.")
    ] = False,
    allow_partial: Annotated[
        bool,
        Option("--allow-partial", help="Keep chunks that embedded when others fail."),
    ] = False,
    db_path: DbPathOption = None,
    log_level: LogLevelOption = None,
) -> None:
    """Chunk, embed and store an item's text."""
    if file is not None and text is not None:
        console.print("[bold red]Use either --file or --text, not both.[/]")
        raise Exit(code=1)
    if file is not None:
        if not file.is_file():
            console.print(f"[bold red]No such file:[/] {file}")
            raise Exit(code=1)
        text = file.read_text()
    if not (text and text.strip()) and not (title and title.strip()):
        console.print("[bold red]No content provided to embed.[/]")
        raise Exit(code=1)

    runtime = _open_runtime(db_path, log_level)
    try:
        if html:
            result = runtime.pipeline.ingest_markup(
                workspace_id,
                item_id,
                text,
                title=title,
                replace=replace,
                allow_partial=allow_partial,
            )
        else:
            result = runtime.pipeline.reembed(
                workspace_id,
                item_id,
                text,
                title=title,
                replace=replace,
                allow_partial=allow_partial,
            )
    except IngestionError as exc:
        console.print(f"[bold red]Embedding failed:[/] {exc}")
        for failure in exc.failures:
            console.print(f"  chunk {failure.position}: {failure.error}")
        raise Exit(code=1) from exc
    except ProviderError as exc:
        console.print(f"[bold red]Embedding failed:[/] {exc}")
        raise Exit(code=1) from exc
    finally:
        runtime.close()

    table = Table(title=f"Ingested {workspace_id}/{item_id}")
    table.add_column("Metric", style="bold")
    table.add_column("Value")
    table.add_row("Chunks", str(result.chunks))
    table.add_row("Embeddings Created", str(result.records_created))
    table.add_row("Model", result.model or "-")
    table.add_row("Dimensions", str(result.dimensions or "-"))
    table.add_row("Replaced", "yes" if result.replaced else "no")
    table.add_row("Failed Chunks", str(len(result.failures)))
    console.print(table)


@app.command()
def search(
    workspace_id: Annotated[str, Argument(help="Workspace to search.")],
    query: Annotated[str, Argument(help="Free-text query.")],
    limit: Annotated[
        int | None, Option("--limit", "-n", min=0, help="Maximum results.")
    ] = None,
    threshold: Annotated[
        float | None, Option("--threshold", help="Minimum cosine score.")
    ] = None,
    db_path: DbPathOption = None,
    log_level: LogLevelOption = None,
) -> None:
    """Rank a workspace's stored chunks against a query."""
    if not query.strip():
        console.print("[bold red]Query is required.[/]")
        raise Exit(code=1)

    runtime = _open_runtime(db_path, log_level)
    try:
        response = runtime.engine.search(
            workspace_id=workspace_id,
            query=query,
            limit=limit,
            threshold=threshold,
        )
    except ProviderError as exc:
        console.print(f"[bold red]Search temporarily unavailable:[/] {exc}")
        raise Exit(code=1) from exc
    finally:
        runtime.close()

    if not response.results:
        console.print(f"No results in workspace {workspace_id}.")
        return

    table = Table(title=f"{response.model} ({response.dimensions} dims)")
    table.add_column("#", justify="right")
    table.add_column("Score", justify="right")
    table.add_column("Item")
    table.add_column("Content")
    for rank, result in enumerate(response.results, start=1):
        preview = result.content if len(result.content) <= 120 else result.content[:117] + "..."
        table.add_row(str(rank), f"{result.score:.4f}", escape(result.item_id), escape(preview))
    console.print(table)


@app.command()
def delete(
    workspace_id: Annotated[str, Argument(help="Workspace that owns the item.")],
    item_id: Annotated[str, Argument(help="Item whose embeddings are removed.")],
    db_path: DbPathOption = None,
    log_level: LogLevelOption = None,
) -> None:
    """Delete every embedding stored for an item."""
    runtime = _open_runtime(db_path, log_level)
    try:
        deleted = runtime.storage.delete_item_records(
            workspace_id=workspace_id, item_id=item_id
        )
    finally:
        runtime.close()
    console.print(f"Deleted {deleted} embeddings for {workspace_id}/{item_id}.")


@app.command()
def status(
    workspace_id: Annotated[str, Argument(help="Workspace to summarize.")],
    db_path: DbPathOption = None,
    log_level: LogLevelOption = None,
) -> None:
    """Show how many vectors a workspace holds, per model."""
    runtime = _open_runtime(db_path, log_level)
    try:
        total = runtime.storage.count_records(workspace_id=workspace_id)
        models = runtime.storage.list_models(workspace_id=workspace_id)
        provider_name = runtime.settings.provider_name
        active_model = runtime.provider.model
    finally:
        runtime.close()

    table = Table(title=f"Workspace {workspace_id}")
    table.add_column("Model")
    table.add_column("Dimensions", justify="right")
    table.add_column("Embeddings", justify="right")
    for summary in models:
        table.add_row(summary.model, str(summary.dimensions), str(summary.count))
    console.print(table)
    console.print(f"Total embeddings: {total}")
    console.print(f"Active provider: {provider_name} ({active_model})")


@app.command()
def serve(
    host: Annotated[str, Option("--host", help="Interface to bind.")] = "127.0.0.1",
    port: Annotated[int, Option("--port", help="Port to listen on.")] = 8000,
    log_level: LogLevelOption = None,
) -> None:
    """Run the HTTP API."""
    from .server import run_server

    settings = _load_settings(log_level)
    run_server(
        host=host,
        port=port,
        log_level=(log_level or settings.log_level).upper(),
        log_file=settings.log_file,
    )
