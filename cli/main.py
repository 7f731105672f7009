"""CLI entry point — Typer app for kbase commands.

Usage:
    kbase index ./books
    kbase index manual.pdf --collection manuals
    kbase search "How do I reset the device?"
    kbase chunk manual.pdf --strategy paragraph_boundary
    kbase collections
    kbase status
"""

from __future__ import annotations

import logging
from contextlib import closing
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.table import Table

from kbase import __version__
from kbase.config import Settings, load_settings
from kbase.embeddings.factory import available_providers, get_embedding_provider
from kbase.errors import KnowledgeBaseError
from kbase.pipeline.schemas import BatchResult
from kbase.vectorstore.factory import available_stores, get_vector_store

app = typer.Typer(
    name="kbase",
    help="Knowledge base indexer — chunk, embed, store, search.",
    no_args_is_help=True,
)

console = Console()

_INDEX_PATH = typer.Argument(..., help="Document file or directory to index")
_CHUNK_PATH = typer.Argument(..., help="Document file to chunk")
_SETTINGS = typer.Option(None, "--settings", help="Path to settings YAML")
_VERBOSE = typer.Option(False, "--verbose", "-v", help="Enable debug logging")

# Set by the callback; --verbose wins over the settings file's log level.
_verbose = False


@app.callback()
def main(
    verbose: bool = _VERBOSE,
) -> None:
    """Configure logging for every command."""
    global _verbose
    _verbose = verbose
    logging.basicConfig(format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    logging.getLogger().setLevel(logging.DEBUG if verbose else logging.INFO)


def _load_settings(settings_file: Path | None) -> Settings:
    """Load settings and apply their log level unless --verbose was given."""
    settings = load_settings(settings_file)
    if not _verbose:
        logging.getLogger().setLevel(settings.log_level.upper())
    return settings


def _fail(label: str, exc: Exception) -> typer.Exit:
    console.print(f"[bold red]{label}:[/] {exc}")
    return typer.Exit(code=1)


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


@app.command()
def index(
    path: Annotated[Path, _INDEX_PATH],
    collection: str | None = typer.Option(
        None, "--collection", "-c", help="Target collection (default from settings)",
    ),
    recursive: bool | None = typer.Option(
        None, "--recursive/--no-recursive", help="Descend into subdirectories",
    ),
    settings_file: Path | None = _SETTINGS,
) -> None:
    """Index a document, or every supported document in a directory."""
    from kbase.documents.loader import DocumentLoader
    from kbase.pipeline.indexer import KnowledgeBaseIndexer

    settings = _load_settings(settings_file)
    with (
        closing(get_embedding_provider(settings.embedding)) as embedder,
        closing(get_vector_store(settings.vectorstore)) as store,
    ):
        indexer = KnowledgeBaseIndexer(
            extractor=DocumentLoader(),
            embedding_provider=embedder,
            vector_store=store,
            collection_name=collection or settings.vectorstore.collection,
            chunking_config=settings.chunking.to_config(),
            supported_formats=settings.indexing.supported_formats,
            pause_seconds=settings.indexing.pause_seconds,
        )

        try:
            indexer.preflight(settings.embedding.dimension)
            indexer.initialize_collection()
        except KnowledgeBaseError as exc:
            raise _fail("Setup failed", exc) from exc

        if path.is_dir():
            walk = settings.indexing.recursive if recursive is None else recursive
            batch = indexer.index_directory(path, recursive=walk)
        else:
            batch = indexer.index_books([path])

    if batch.total == 0:
        console.print(f"[yellow]No supported documents found in {path}[/]")
        return

    _print_batch(batch)
    if batch.failed:
        raise typer.Exit(code=1)


def _print_batch(batch: BatchResult) -> None:
    table = Table(title="Indexing Results")
    table.add_column("Document", style="cyan")
    table.add_column("Status")
    table.add_column("Chars", justify="right")
    table.add_column("Chunks", justify="right")
    table.add_column("Stored", justify="right")
    table.add_column("Time (ms)", justify="right")

    for r in batch.results:
        status_cell = "[green]OK[/]" if r.success else f"[red]FAIL[/] {r.error_message}"
        table.add_row(
            r.document_name,
            status_cell,
            str(r.characters_extracted),
            str(r.chunks_created),
            str(r.chunks_stored),
            str(r.duration_ms),
        )

    console.print(table)
    style = "bold red" if batch.failed else "bold green"
    console.print(f"\n[{style}]{batch.summary()}[/]")


@app.command()
def search(
    query: str = typer.Argument(..., help="Text to search for"),
    top_k: int | None = typer.Option(
        None, "--top-k", "-k", help="Number of results",
    ),
    collection: str | None = typer.Option(
        None, "--collection", "-c", help="Collection to search",
    ),
    settings_file: Path | None = _SETTINGS,
) -> None:
    """Search the knowledge base for chunks similar to a query."""
    from kbase.retrieval.retriever import Retriever

    settings = _load_settings(settings_file)
    with (
        closing(get_embedding_provider(settings.embedding)) as embedder,
        closing(get_vector_store(settings.vectorstore)) as store,
    ):
        retriever = Retriever(
            embedding_provider=embedder,
            vector_store=store,
            collection_name=collection or settings.vectorstore.collection,
            max_distance=settings.retrieval.max_distance,
        )
        try:
            result = retriever.retrieve(query, top_k=top_k or settings.retrieval.top_k)
        except (KnowledgeBaseError, ValueError) as exc:
            raise _fail("Search failed", exc) from exc

    if not result.results:
        console.print("[yellow]No matching chunks.[/]")
        return

    table = Table(title=f"Results for: {query}")
    table.add_column("#", justify="right")
    table.add_column("Distance", justify="right")
    table.add_column("Source", style="cyan")
    table.add_column("Text")

    for i, r in enumerate(result.results, start=1):
        table.add_row(
            str(i),
            f"{r.distance:.4f}",
            r.metadata.get("source", ""),
            r.document[:120],
        )
    console.print(table)


@app.command()
def chunk(
    path: Annotated[Path, _CHUNK_PATH],
    strategy: str | None = typer.Option(
        None, "--strategy", "-s",
        help="fixed_size, sentence_boundary or paragraph_boundary",
    ),
    size: int | None = typer.Option(None, "--size", help="Target chunk size in words"),
    overlap: int | None = typer.Option(None, "--overlap", help="Overlap in words"),
    show: int = typer.Option(5, "--show", help="Number of chunks to preview"),
    settings_file: Path | None = _SETTINGS,
) -> None:
    """Preview how a document would be chunked (no embedding, no storage)."""
    from kbase.chunking.factory import chunk_text
    from kbase.chunking.schemas import ChunkingConfig, ChunkingStrategy
    from kbase.chunking.stats import compute_stats
    from kbase.documents.loader import DocumentLoader

    settings = _load_settings(settings_file)
    base = settings.chunking
    loader = DocumentLoader()
    try:
        config = ChunkingConfig(
            target_size=size or base.chunk_size,
            overlap=base.overlap if overlap is None else overlap,
            strategy=ChunkingStrategy(strategy) if strategy else base.strategy,
        )
        text = loader.extract_text(path)
        title = loader.get_metadata(path).title
        chunks = chunk_text(text, path.name, title, config)
    except (KnowledgeBaseError, ValueError) as exc:
        raise _fail("Chunking failed", exc) from exc

    table = Table(title=f"{path.name} ({config.strategy})")
    table.add_column("ID", style="cyan")
    table.add_column("Words", justify="right")
    table.add_column("Span", justify="right")
    table.add_column("Preview")

    for c in chunks[:show]:
        table.add_row(
            c.id, str(c.word_count), f"{c.start_position}-{c.end_position}", c.preview(),
        )
    console.print(table)
    console.print(f"\n{compute_stats(chunks)}")


@app.command()
def collections(
    settings_file: Path | None = _SETTINGS,
) -> None:
    """List collections in the vector store."""
    settings = _load_settings(settings_file)
    table = Table(title="Collections")
    table.add_column("Name", style="cyan")
    table.add_column("Records", justify="right")

    with closing(get_vector_store(settings.vectorstore)) as store:
        try:
            for name in store.list_collections():
                table.add_row(name, str(store.count(name)))
        except KnowledgeBaseError as exc:
            raise _fail("Listing failed", exc) from exc
    console.print(table)


@app.command("delete-collection")
def delete_collection(
    name: str = typer.Argument(..., help="Collection to delete"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
    settings_file: Path | None = _SETTINGS,
) -> None:
    """Delete a collection and everything stored in it."""
    if not yes:
        typer.confirm(f"Delete collection '{name}'?", abort=True)

    settings = _load_settings(settings_file)
    with closing(get_vector_store(settings.vectorstore)) as store:
        try:
            store.delete_collection(name)
        except KnowledgeBaseError as exc:
            raise _fail("Delete failed", exc) from exc
    console.print(f"[bold green]Deleted:[/] {name}")


@app.command()
def status(
    settings_file: Path | None = _SETTINGS,
) -> None:
    """Show system status (backends, embedding dimension, components)."""
    from kbase.chunking.factory import available_chunkers

    settings = _load_settings(settings_file)
    console.print(f"\n[bold green]knowledge-base-indexer[/] v{__version__}\n")

    with (
        closing(get_embedding_provider(settings.embedding)) as emb,
        closing(get_vector_store(settings.vectorstore)) as store,
    ):
        try:
            dimension = str(emb.probe_dimension())
        except KnowledgeBaseError as exc:
            dimension = f"[red]unavailable[/] ({exc})"

        store_up = store.health_check()
        collection = settings.vectorstore.collection
        records = "-"
        if store_up:
            try:
                records = str(store.count(collection))
            except KnowledgeBaseError:
                records = "[yellow]missing[/]"

    table = Table(title="Status")
    table.add_column("Component", style="cyan")
    table.add_column("Value")

    table.add_row("Embedding model", f"{settings.embedding.model} @ {settings.embedding.base_url}")
    table.add_row("Embedding dimension", dimension)
    table.add_row(
        "Vector store",
        f"{settings.vectorstore.base_url} "
        + ("[green]up[/]" if store_up else "[red]down[/]"),
    )
    table.add_row(f"Collection '{collection}'", records)
    table.add_row("Chunkers", ", ".join(available_chunkers()))
    table.add_row("Embedding Providers", ", ".join(available_providers()))
    table.add_row("Vector Stores", ", ".join(available_stores()))

    console.print(table)


if __name__ == "__main__":
    app()
