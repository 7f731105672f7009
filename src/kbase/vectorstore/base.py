"""Abstract base class for vector stores.

Collections are named by callers but addressed by an opaque store-side id.
Every write or query is a two-step protocol: resolve the id, then act on
it. Both steps are public so retries can be layered around each one;
ids are never cached because a collection can be recreated externally.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

from kbase.errors import StoreError
from kbase.vectorstore.schemas import CollectionInfo, QueryResult

logger = logging.getLogger(__name__)


class VectorStore(ABC):
    """Interface for vector store backends."""

    # ------------------------------------------------------------------
    # Collection lifecycle
    # ------------------------------------------------------------------

    @abstractmethod
    def ensure_collection(self, name: str) -> None:
        """Create the collection unless it already exists (idempotent)."""

    @abstractmethod
    def get_collection(self, name: str) -> CollectionInfo | None:
        """Return the collection, or ``None`` when it does not exist."""

    @abstractmethod
    def list_collections(self) -> list[str]:
        """Return the names of all collections."""

    @abstractmethod
    def delete_collection(self, name: str) -> None:
        """Delete a collection. Deleting a missing collection is not an error."""

    def resolve_collection_id(self, name: str) -> str:
        """Look up the store-side id of a named collection.

        Raises:
            StoreError: The collection does not exist.
        """
        info = self.get_collection(name)
        if info is None:
            raise StoreError(f"Collection not found: {name}")
        return info.id

    # ------------------------------------------------------------------
    # Id-addressed operations
    # ------------------------------------------------------------------

    @abstractmethod
    def add_by_id(
        self,
        collection_id: str,
        ids: list[str],
        embeddings: list[list[float]],
        documents: list[str],
        metadatas: list[dict[str, str]],
    ) -> int:
        """Insert parallel arrays into a resolved collection.

        Returns:
            Number of records inserted.
        """

    @abstractmethod
    def query_by_id(
        self,
        collection_id: str,
        query_embedding: list[float],
        top_k: int = 5,
    ) -> list[QueryResult]:
        """Nearest-neighbor lookup in a resolved collection.

        Returns:
            ``QueryResult`` list sorted by ascending distance.
        """

    @abstractmethod
    def count_by_id(self, collection_id: str) -> int:
        """Return the number of records in a resolved collection."""

    # ------------------------------------------------------------------
    # Name-addressed conveniences (resolve, then act)
    # ------------------------------------------------------------------

    def add_documents(
        self,
        collection_name: str,
        ids: list[str],
        embeddings: list[list[float]],
        documents: list[str],
        metadatas: list[dict[str, str]],
    ) -> int:
        """Insert into a named collection, creating it first if needed.

        Raises:
            StoreError: Array lengths differ or the insert failed.
        """
        lengths = {len(ids), len(embeddings), len(documents), len(metadatas)}
        if len(lengths) != 1:
            raise StoreError(
                "ids, embeddings, documents and metadatas must have equal length "
                f"(got {len(ids)}, {len(embeddings)}, {len(documents)}, {len(metadatas)})"
            )
        if not ids:
            return 0

        logger.info("Adding %d documents to collection %s", len(ids), collection_name)
        self.ensure_collection(collection_name)
        collection_id = self.resolve_collection_id(collection_name)
        return self.add_by_id(collection_id, ids, embeddings, documents, metadatas)

    def query(
        self,
        collection_name: str,
        query_embedding: list[float],
        top_k: int = 5,
    ) -> list[QueryResult]:
        """Nearest-neighbor lookup in a named collection."""
        logger.info("Querying collection %s (top %d)", collection_name, top_k)
        collection_id = self.resolve_collection_id(collection_name)
        return self.query_by_id(collection_id, query_embedding, top_k)

    def count(self, collection_name: str) -> int:
        """Number of records in a named collection."""
        return self.count_by_id(self.resolve_collection_id(collection_name))

    def health_check(self) -> bool:
        """Return ``True`` when the backend is reachable."""
        return True

    def close(self) -> None:
        """Release any client the store holds."""

    @classmethod
    def store_name(cls) -> str:
        """Return human-readable store name."""
        return cls.__name__
