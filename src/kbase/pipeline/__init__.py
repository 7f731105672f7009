"""Indexing pipeline — extract, chunk, embed, store."""

from kbase.pipeline.indexer import KnowledgeBaseIndexer
from kbase.pipeline.schemas import BatchResult, IndexingResult

__all__ = [
    "BatchResult",
    "IndexingResult",
    "KnowledgeBaseIndexer",
]
