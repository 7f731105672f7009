"""Embedding providers — text to fixed-length vectors."""

from kbase.embeddings.base import EmbeddingProvider
from kbase.embeddings.factory import available_providers, get_embedding_provider

__all__ = [
    "EmbeddingProvider",
    "available_providers",
    "get_embedding_provider",
]
