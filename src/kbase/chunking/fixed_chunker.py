"""Fixed-size word-window chunker.

The simplest strategy: overlap is guaranteed in word count, but windows
ignore sentence boundaries.
"""

from __future__ import annotations

from kbase.chunking.base import BaseChunker
from kbase.chunking.schemas import ChunkingStrategy


class FixedSizeChunker(BaseChunker):
    """Windows of ``target_size`` words, advancing by ``target_size - overlap``."""

    strategy = ChunkingStrategy.FIXED_SIZE

    def _split(self, text: str) -> list[str]:
        words = text.split()
        size = self.config.target_size
        step = size - self.config.overlap

        pieces: list[str] = []
        for start in range(0, len(words), step):
            pieces.append(" ".join(words[start : start + size]))
            if start + size >= len(words):
                break
        return pieces
