"""Summary statistics over a list of chunks."""

from __future__ import annotations

from dataclasses import dataclass

from kbase.chunking.schemas import Chunk


@dataclass(frozen=True)
class ChunkingStats:
    total_chunks: int = 0
    total_words: int = 0
    total_chars: int = 0
    min_words: int = 0
    max_words: int = 0
    avg_words: int = 0
    avg_chars: int = 0

    def __str__(self) -> str:
        return (
            f"ChunkingStats(chunks={self.total_chunks}, words={self.total_words}, "
            f"avg_words={self.avg_words} (min={self.min_words}, max={self.max_words}))"
        )


def compute_stats(chunks: list[Chunk]) -> ChunkingStats:
    """Aggregate word/char counts; all zeros for an empty list."""
    if not chunks:
        return ChunkingStats()

    word_counts = [c.word_count for c in chunks]
    total_words = sum(word_counts)
    total_chars = sum(c.char_count for c in chunks)

    return ChunkingStats(
        total_chunks=len(chunks),
        total_words=total_words,
        total_chars=total_chars,
        min_words=min(word_counts),
        max_words=max(word_counts),
        avg_words=total_words // len(chunks),
        avg_chars=total_chars // len(chunks),
    )
