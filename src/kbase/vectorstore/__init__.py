"""Vector store backends — Chroma over HTTP."""

from kbase.vectorstore.base import VectorStore
from kbase.vectorstore.factory import available_stores, get_vector_store
from kbase.vectorstore.schemas import CollectionInfo, QueryResult

__all__ = [
    "CollectionInfo",
    "QueryResult",
    "VectorStore",
    "available_stores",
    "get_vector_store",
]
