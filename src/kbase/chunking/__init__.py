"""Boundary-aware document chunking."""

from kbase.chunking.base import BaseChunker
from kbase.chunking.factory import available_chunkers, chunk_text, get_chunker
from kbase.chunking.schemas import Chunk, ChunkingConfig, ChunkingStrategy, make_chunk_id
from kbase.chunking.stats import ChunkingStats, compute_stats

__all__ = [
    "BaseChunker",
    "Chunk",
    "ChunkingConfig",
    "ChunkingStats",
    "ChunkingStrategy",
    "available_chunkers",
    "chunk_text",
    "compute_stats",
    "get_chunker",
    "make_chunk_id",
]
