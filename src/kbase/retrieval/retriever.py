"""Retriever — embed query, search the collection, filter by distance."""

from __future__ import annotations

import logging

from kbase.embeddings.base import EmbeddingProvider
from kbase.retrieval.schemas import RetrievalResult
from kbase.vectorstore.base import VectorStore

logger = logging.getLogger(__name__)


class Retriever:
    """Orchestrates embedding → nearest-neighbor search."""

    def __init__(
        self,
        embedding_provider: EmbeddingProvider,
        vector_store: VectorStore,
        collection_name: str,
        max_distance: float | None = None,
    ):
        self.embedding_provider = embedding_provider
        self.vector_store = vector_store
        self.collection_name = collection_name
        self.max_distance = max_distance

    def retrieve(self, query: str, top_k: int = 5) -> RetrievalResult:
        """Run a retrieval: embed → search → distance filter.

        Args:
            query: The search query.
            top_k: Number of nearest neighbors to request from the store.

        Returns:
            A ``RetrievalResult`` ordered by ascending distance.
        """
        query_embedding = self.embedding_provider.embed(query)
        raw_results = self.vector_store.query(
            self.collection_name,
            query_embedding,
            top_k=top_k,
        )
        total_candidates = len(raw_results)

        if self.max_distance is not None:
            raw_results = [r for r in raw_results if r.distance <= self.max_distance]

        logger.info(
            "Retrieved %d results for query (candidates=%d)",
            len(raw_results),
            total_candidates,
        )
        return RetrievalResult(
            query=query,
            results=raw_results,
            total_candidates=total_candidates,
        )
