"""Retrieval — similarity search over an indexed collection."""

from kbase.retrieval.retriever import Retriever
from kbase.retrieval.schemas import RetrievalResult

__all__ = ["Retriever", "RetrievalResult"]
