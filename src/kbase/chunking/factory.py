"""Chunker factory — dispatch a ``ChunkingConfig`` to its strategy chunker.

Same registry / lazy import / cache shape as the embedding and vector
store factories.
"""

from __future__ import annotations

import importlib
import logging

from kbase.chunking.base import BaseChunker
from kbase.chunking.schemas import Chunk, ChunkingConfig, ChunkingStrategy

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Chunker registry
#
# Each entry: (strategy, module_path, class_name)
# ---------------------------------------------------------------------------

_CHUNKER_REGISTRY: list[tuple[ChunkingStrategy, str, str]] = [
    (ChunkingStrategy.FIXED_SIZE, "kbase.chunking.fixed_chunker", "FixedSizeChunker"),
    (ChunkingStrategy.SENTENCE_BOUNDARY, "kbase.chunking.sentence_chunker", "SentenceChunker"),
    (ChunkingStrategy.PARAGRAPH_BOUNDARY, "kbase.chunking.paragraph_chunker", "ParagraphChunker"),
]

# Chunkers are stateless apart from their config, so one per config is enough.
_chunker_cache: dict[ChunkingConfig, BaseChunker] = {}


def get_chunker(config: ChunkingConfig | None = None) -> BaseChunker:
    """Get the chunker implementing ``config.strategy``."""
    cfg = config or ChunkingConfig()

    if cfg in _chunker_cache:
        return _chunker_cache[cfg]

    for strategy, module_path, cls_name in _CHUNKER_REGISTRY:
        if strategy == cfg.strategy:
            mod = importlib.import_module(module_path)
            cls = getattr(mod, cls_name)
            instance = cls(cfg)
            _chunker_cache[cfg] = instance
            return instance

    available = [s.value for s, _, _ in _CHUNKER_REGISTRY]
    raise ValueError(f"Unknown chunking strategy '{cfg.strategy}'. Available: {available}")


def chunk_text(
    text: str,
    source_file: str | None,
    document_title: str | None = None,
    config: ChunkingConfig | None = None,
) -> list[Chunk]:
    """Chunk ``text`` with the strategy and sizes in ``config``.

    Pure with respect to its arguments: the same inputs always produce the
    same chunks, ids included.
    """
    return get_chunker(config).chunk(text, source_file, document_title)


def available_chunkers() -> list[str]:
    """Return names of registered strategies."""
    return [s.value for s, _, _ in _CHUNKER_REGISTRY]


def clear_cache() -> None:
    """Clear chunker cache (for testing)."""
    _chunker_cache.clear()
