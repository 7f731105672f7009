"""Sentence-boundary chunker (the default strategy)."""

from __future__ import annotations

import re

from kbase.chunking.base import BoundaryChunker
from kbase.chunking.schemas import ChunkingStrategy

# Terminal punctuation followed by whitespace; trailing text without a
# terminator becomes the last sentence.
_SENTENCE_END = re.compile(r"(?<=[.!?])\s+")


def split_sentences(text: str) -> list[str]:
    return [s.strip() for s in _SENTENCE_END.split(text) if s.strip()]


class SentenceChunker(BoundaryChunker):
    """Packs whole sentences into chunks with sentence-level overlap."""

    strategy = ChunkingStrategy.SENTENCE_BOUNDARY
    separator = " "

    def _split_units(self, text: str) -> list[str]:
        return split_sentences(text)
