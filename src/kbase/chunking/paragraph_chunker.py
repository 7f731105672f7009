"""Paragraph-boundary chunker."""

from __future__ import annotations

import re

from kbase.chunking.base import BoundaryChunker
from kbase.chunking.schemas import ChunkingStrategy

_BLANK_LINE = re.compile(r"\n\s*\n")


def split_paragraphs(text: str) -> list[str]:
    return [p.strip() for p in _BLANK_LINE.split(text) if p.strip()]


class ParagraphChunker(BoundaryChunker):
    """Packs whole blank-line delimited paragraphs into chunks.

    Overlap is carried in whole paragraphs only, so a paragraph longer than
    the configured overlap is never repeated.
    """

    strategy = ChunkingStrategy.PARAGRAPH_BOUNDARY
    separator = "\n\n"

    def _split_units(self, text: str) -> list[str]:
        return split_paragraphs(text)
