"""Indexing pipeline — file → extract → chunk → embed → store.

This is the main entry point for adding documents to the knowledge base.
A single document either indexes fully or raises; batch runs record each
document's outcome and keep going.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Iterable
from pathlib import Path

from kbase.chunking.factory import chunk_text
from kbase.chunking.schemas import Chunk, ChunkingConfig
from kbase.documents.base import TextExtractor
from kbase.documents.loader import SUPPORTED_EXTENSIONS
from kbase.embeddings.base import EmbeddingProvider
from kbase.errors import EmbeddingError, ExtractionError
from kbase.pipeline.schemas import BatchResult, IndexingResult
from kbase.vectorstore.base import VectorStore

logger = logging.getLogger(__name__)


class KnowledgeBaseIndexer:
    """Orchestrates document indexing into one named collection."""

    def __init__(
        self,
        extractor: TextExtractor,
        embedding_provider: EmbeddingProvider,
        vector_store: VectorStore,
        collection_name: str,
        chunking_config: ChunkingConfig | None = None,
        supported_formats: Iterable[str] = SUPPORTED_EXTENSIONS,
        pause_seconds: float = 1.0,
    ):
        self.extractor = extractor
        self.embedding_provider = embedding_provider
        self.vector_store = vector_store
        self.collection_name = collection_name
        self.chunking_config = chunking_config or ChunkingConfig()
        self.supported_formats = {ext.lower() for ext in supported_formats}
        self.pause_seconds = pause_seconds

    # ------------------------------------------------------------------
    # Setup
    # ------------------------------------------------------------------

    def initialize_collection(self) -> None:
        """Create the target collection if it does not exist."""
        logger.info("Initializing collection: %s", self.collection_name)
        self.vector_store.ensure_collection(self.collection_name)

    def preflight(self, expected_dimension: int | None = None) -> int:
        """Probe the embedding backend before bulk work.

        Returns:
            The embedding dimension reported by the backend.

        Raises:
            EmbeddingError: The backend is unreachable or the dimension
                differs from ``expected_dimension``.
        """
        dimension = self.embedding_provider.probe_dimension()
        if expected_dimension is not None and dimension != expected_dimension:
            raise EmbeddingError(
                f"Embedding dimension mismatch: backend produces {dimension}, "
                f"configured {expected_dimension}"
            )
        logger.info("Embedding backend ready (dim=%d)", dimension)
        return dimension

    # ------------------------------------------------------------------
    # Single document
    # ------------------------------------------------------------------

    def index_document(self, path: str | Path) -> IndexingResult:
        """Index one file.

        Raises:
            Exception: Whatever stage failed, after the result was marked
                failed with the error's message.
        """
        path = Path(path)
        result = IndexingResult(document_name=path.name)
        error = self._run_stages(path, result)
        if error is not None:
            raise error
        return result

    def index_text(
        self,
        text: str,
        source_name: str = "inline",
        document_title: str | None = None,
    ) -> IndexingResult:
        """Index raw text directly (no extraction step)."""
        result = IndexingResult(document_name=source_name)
        started = time.perf_counter()
        try:
            if not text.strip():
                raise ExtractionError("Text is empty", path=source_name)
            result.characters_extracted = len(text)
            self._chunk_embed_store(text, source_name, document_title or source_name, result)
        except Exception as exc:
            result.mark_failed(exc, _elapsed_ms(started))
            logger.error("Failed to index %s: %s", source_name, result.error_message)
            raise
        result.mark_succeeded(_elapsed_ms(started))
        return result

    def _run_stages(self, path: Path, result: IndexingResult) -> Exception | None:
        """Run all four stages, finalizing ``result``; return the failure, if any."""
        logger.info("Starting to index document: %s", path.name)
        started = time.perf_counter()
        try:
            logger.info("Step 1/4: Extracting text...")
            text = self.extractor.extract_text(path)
            result.characters_extracted = len(text)
            if not text.strip():
                raise ExtractionError("Document contains no extractable text", path=str(path))
            title = self.extractor.get_metadata(path).title
            logger.info("Extracted %d characters", len(text))

            self._chunk_embed_store(text, path.name, title, result)
        except Exception as exc:
            result.mark_failed(exc, _elapsed_ms(started))
            logger.exception("Failed to index document: %s", path.name)
            return exc

        result.mark_succeeded(_elapsed_ms(started))
        logger.info("Indexed %s in %dms", path.name, result.duration_ms)
        return None

    def _chunk_embed_store(
        self,
        text: str,
        source_name: str,
        title: str,
        result: IndexingResult,
    ) -> None:
        logger.info("Step 2/4: Chunking text...")
        chunks = chunk_text(text, source_name, title, self.chunking_config)
        result.chunks_created = len(chunks)
        logger.info("Created %d chunks", len(chunks))

        logger.info("Step 3/4: Generating embeddings...")
        embeddings = self.embedding_provider.embed_batch([c.text for c in chunks])
        result.embeddings_generated = len(embeddings)
        if len(embeddings) != len(chunks):
            raise EmbeddingError(
                f"Chunks and embeddings size mismatch ({len(chunks)} vs {len(embeddings)})"
            )
        logger.info("Generated %d embeddings", len(embeddings))

        logger.info("Step 4/4: Storing in vector store...")
        result.chunks_stored = self._store(chunks, embeddings)
        logger.info("Stored %d chunks in %s", result.chunks_stored, self.collection_name)

    def _store(self, chunks: list[Chunk], embeddings: list[list[float]]) -> int:
        ids: list[str] = []
        documents: list[str] = []
        metadatas: list[dict[str, str]] = []

        for chunk in chunks:
            ids.append(chunk.id)
            documents.append(chunk.text)
            metadatas.append({
                **chunk.metadata,
                "source": chunk.source_file,
                "document_title": chunk.document_title,
                "chunk_index": str(chunk.chunk_index),
                "start_position": str(chunk.start_position),
                "end_position": str(chunk.end_position),
            })

        return self.vector_store.add_documents(
            self.collection_name, ids, embeddings, documents, metadatas,
        )

    # ------------------------------------------------------------------
    # Batches
    # ------------------------------------------------------------------

    def index_books(self, paths: Iterable[str | Path]) -> BatchResult:
        """Index several files, isolating failures per document."""
        files = [Path(p) for p in paths]
        logger.info("Starting to index %d documents", len(files))

        batch = BatchResult()
        for i, path in enumerate(files):
            logger.info("=== Indexing document %d/%d: %s ===", i + 1, len(files), path.name)
            result = IndexingResult(document_name=path.name)
            self._run_stages(path, result)
            batch.results.append(result)

            if i < len(files) - 1 and self.pause_seconds > 0:
                time.sleep(self.pause_seconds)

        logger.info("Indexing complete: %s", batch.summary())
        return batch

    def index_directory(self, directory: str | Path, recursive: bool = False) -> BatchResult:
        """Index every supported file in ``directory``.

        Raises:
            NotADirectoryError: ``directory`` does not exist or is a file.
        """
        files = self.discover_files(directory, recursive=recursive)
        if not files:
            logger.warning("No supported documents found in %s", directory)
            return BatchResult()

        logger.info("Found %d documents to index", len(files))
        return self.index_books(files)

    def discover_files(self, directory: str | Path, recursive: bool = False) -> list[Path]:
        """Files in ``directory`` whose extension is supported, sorted by path."""
        root = Path(directory)
        if not root.is_dir():
            raise NotADirectoryError(f"Directory not found: {root}")

        candidates = root.rglob("*") if recursive else root.iterdir()
        return sorted(
            p for p in candidates
            if p.is_file() and p.suffix.lower() in self.supported_formats
        )


def _elapsed_ms(started: float) -> int:
    return int((time.perf_counter() - started) * 1000)
