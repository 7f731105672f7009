"""Data models for chunks."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import StrEnum

_NON_ALNUM = re.compile(r"[^a-zA-Z0-9]")

UNKNOWN_SOURCE = "unknown_source"


class ChunkingStrategy(StrEnum):
    """How chunk boundaries are chosen."""

    FIXED_SIZE = "fixed_size"
    SENTENCE_BOUNDARY = "sentence_boundary"
    PARAGRAPH_BOUNDARY = "paragraph_boundary"


@dataclass(frozen=True)
class ChunkingConfig:
    """Sizing and strategy for one chunking run.

    Attributes:
        target_size: Target chunk size in words. A soft cap: a single
            sentence or paragraph longer than this still gets its own chunk.
        overlap: Words carried from the end of one chunk into the next.
        strategy: Boundary strategy.
    """

    target_size: int = 500
    overlap: int = 50
    strategy: ChunkingStrategy = ChunkingStrategy.SENTENCE_BOUNDARY

    def __post_init__(self) -> None:
        if self.target_size <= 0:
            raise ValueError(f"target_size must be positive, got {self.target_size}")
        if not 0 <= self.overlap < self.target_size:
            raise ValueError(
                f"overlap must satisfy 0 <= overlap < target_size "
                f"(got overlap={self.overlap}, target_size={self.target_size})"
            )


def make_chunk_id(source_file: str, chunk_index: int) -> str:
    """Deterministic chunk id, e.g. ``my_book_v2_pdf_chunk_0003``."""
    clean_name = _NON_ALNUM.sub("_", source_file).lower()
    return f"{clean_name}_chunk_{chunk_index:04d}"


def count_words(text: str) -> int:
    return len(text.split())


@dataclass(frozen=True)
class Chunk:
    """A single retrievable piece of a document.

    Positions are offsets into the concatenation of emitted chunk texts,
    not into the original document.
    """

    id: str
    text: str
    source_file: str
    document_title: str
    chunk_index: int
    start_position: int
    end_position: int
    metadata: dict[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.chunk_index < 0:
            raise ValueError(f"chunk_index must be >= 0, got {self.chunk_index}")
        if self.end_position <= self.start_position:
            raise ValueError(
                f"end_position ({self.end_position}) must be greater than "
                f"start_position ({self.start_position})"
            )

    @property
    def word_count(self) -> int:
        return count_words(self.text)

    @property
    def char_count(self) -> int:
        return len(self.text)

    @property
    def is_valid(self) -> bool:
        return bool(self.text.strip())

    def preview(self, max_length: int = 80) -> str:
        """Return the first ``max_length`` characters, ellipsized."""
        if len(self.text) <= max_length:
            return self.text
        return self.text[:max_length] + "..."
