"""Exception hierarchy shared by the indexing stages."""

from __future__ import annotations


class KnowledgeBaseError(Exception):
    """Base class for all knowledge-base failures."""


class ExtractionError(KnowledgeBaseError):
    """Raised when a document cannot be read or yields no text."""

    def __init__(self, message: str, path: str | None = None) -> None:
        self.path = path
        super().__init__(message)


class ChunkingError(KnowledgeBaseError):
    """Raised when chunking fails unexpectedly."""


class EmbeddingError(KnowledgeBaseError):
    """Raised when the embedding backend fails or returns a bad payload."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message)


class StoreError(KnowledgeBaseError):
    """Raised when a vector-store operation fails."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message)
