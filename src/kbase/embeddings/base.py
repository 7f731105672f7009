"""Abstract base class for embedding providers."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

logger = logging.getLogger(__name__)

PROBE_TEXT = "test"


class EmbeddingProvider(ABC):
    """Interface for text embedding backends."""

    @abstractmethod
    def embed(self, text: str) -> list[float]:
        """Embed a single text.

        Args:
            text: Non-blank string to embed.

        Returns:
            Embedding vector.

        Raises:
            EmbeddingError: The backend failed or returned a bad payload.
        """

    def embed_batch(self, texts: list[str]) -> list[list[float]]:
        """Embed texts one at a time, in order.

        Fail-fast: the first failing item aborts the whole batch and no
        partial results are returned.

        Args:
            texts: Strings to embed.

        Returns:
            List of embedding vectors (same order as input).
        """
        embeddings: list[list[float]] = []
        for i, text in enumerate(texts, start=1):
            logger.debug("Embedding text %d/%d", i, len(texts))
            try:
                embeddings.append(self.embed(text))
            except Exception as exc:
                logger.error("Failed to embed text %d/%d: %s", i, len(texts), exc)
                raise
            if i < len(texts):
                self._between_items()
        return embeddings

    def probe_dimension(self) -> int:
        """Return the length of the vector produced for a fixed probe string."""
        return len(self.embed(PROBE_TEXT))

    def _between_items(self) -> None:
        """Hook run between batch items (rate limiting)."""

    def close(self) -> None:
        """Release any client the provider holds."""

    @classmethod
    def provider_name(cls) -> str:
        """Return human-readable provider name."""
        return cls.__name__
