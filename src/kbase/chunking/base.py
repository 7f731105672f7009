"""Abstract base classes for all chunkers.

Strategies only decide where chunk boundaries fall (``_split``); this
module turns the resulting texts into numbered, positioned ``Chunk``
records with the audit metadata every chunk carries.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import ClassVar

from kbase.chunking.schemas import (
    UNKNOWN_SOURCE,
    Chunk,
    ChunkingConfig,
    ChunkingStrategy,
    count_words,
    make_chunk_id,
)
from kbase.errors import ChunkingError

logger = logging.getLogger(__name__)


class BaseChunker(ABC):
    """Interface for document chunking strategies."""

    strategy: ClassVar[ChunkingStrategy]

    def __init__(self, config: ChunkingConfig | None = None):
        self.config = config or ChunkingConfig(strategy=self.strategy)

    def chunk(
        self,
        text: str,
        source_file: str | None,
        document_title: str | None = None,
    ) -> list[Chunk]:
        """Split text into chunks.

        Args:
            text: Full document text.
            source_file: Origin file name; drives the chunk ids.
            document_title: Human-readable title, defaults to the source name.

        Returns:
            Ordered list of ``Chunk`` objects. Empty for blank text.
        """
        source = source_file or UNKNOWN_SOURCE
        title = document_title or source

        if not text or not text.strip():
            logger.warning("Empty text provided for chunking: %s", source)
            return []

        logger.info("Chunking document: %s (strategy: %s)", source, self.strategy)
        chunks = self._build_chunks(self._split(text), source, title)
        logger.info("Created %d chunks from %s", len(chunks), source)
        return chunks

    @abstractmethod
    def _split(self, text: str) -> list[str]:
        """Return the chunk texts, in document order."""

    def _build_chunks(self, pieces: list[str], source: str, title: str) -> list[Chunk]:
        chunks: list[Chunk] = []
        start = 0
        for piece in pieces:
            if not piece.strip():
                continue
            index = len(chunks)
            end = start + len(piece)
            try:
                chunk = Chunk(
                    id=make_chunk_id(source, index),
                    text=piece,
                    source_file=source,
                    document_title=title,
                    chunk_index=index,
                    start_position=start,
                    end_position=end,
                    metadata=self._metadata_for(piece),
                )
            except ValueError as exc:
                raise ChunkingError(f"Invalid chunk {index} for {source}: {exc}") from exc
            chunks.append(chunk)
            start = end
        return chunks

    def _metadata_for(self, piece: str) -> dict[str, str]:
        return {
            "word_count": str(count_words(piece)),
            "char_count": str(len(piece)),
            "strategy": self.strategy.value,
            "chunk_size": str(self.config.target_size),
            "overlap": str(self.config.overlap),
        }


class BoundaryChunker(BaseChunker):
    """Accumulates whole units (sentences, paragraphs) up to the target size.

    When the next unit would push the current chunk past ``target_size``
    words, the chunk is closed and its trailing units, up to ``overlap``
    words in total, seed the next one; the seed loses units from its front
    while the next unit would not fit. Units are never split.
    """

    separator: ClassVar[str] = " "

    @abstractmethod
    def _split_units(self, text: str) -> list[str]:
        """Break text into the atomic units this strategy respects."""

    def _split(self, text: str) -> list[str]:
        target = self.config.target_size
        pieces: list[str] = []
        current: list[str] = []
        current_words = 0

        for unit in self._split_units(text):
            unit_words = count_words(unit)

            if current and current_words + unit_words > target:
                pieces.append(self.separator.join(current))
                current = self._overlap_tail(current)
                current_words = sum(count_words(u) for u in current)
                # Shorten the carried tail from the front until the next unit fits.
                while current and current_words + unit_words > target:
                    current_words -= count_words(current.pop(0))

            current.append(unit)
            current_words += unit_words

        if current:
            pieces.append(self.separator.join(current))
        return pieces

    def _overlap_tail(self, units: list[str]) -> list[str]:
        """Longest suffix of ``units`` whose word count fits in ``overlap``."""
        kept: list[str] = []
        words = 0
        for unit in reversed(units):
            unit_words = count_words(unit)
            if words + unit_words > self.config.overlap:
                break
            kept.append(unit)
            words += unit_words
        kept.reverse()
        return kept
