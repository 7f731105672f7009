"""Ollama embedding provider — local-first, no API keys needed.

Uses the Ollama REST API (http://localhost:11434) with models like
``nomic-embed-text``, ``mxbai-embed-large``, etc.
"""

from __future__ import annotations

import logging
import time

import httpx

from kbase.embeddings.base import EmbeddingProvider
from kbase.errors import EmbeddingError

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "nomic-embed-text"
DEFAULT_BASE_URL = "http://localhost:11434"


class OllamaEmbeddingProvider(EmbeddingProvider):
    """Embed text via a local Ollama server."""

    def __init__(
        self,
        model: str = DEFAULT_MODEL,
        base_url: str = DEFAULT_BASE_URL,
        dimension: int | None = None,
        timeout: float = 30.0,
        request_delay: float = 0.1,
        client: httpx.Client | None = None,
    ):
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.dimension = dimension
        self.request_delay = request_delay
        self._client = client or httpx.Client(
            base_url=self.base_url,
            timeout=httpx.Timeout(timeout, connect=10.0),
        )
        logger.info("Ollama embeddings initialized with model %s at %s", model, self.base_url)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def embed(self, text: str) -> list[float]:
        if not text or not text.strip():
            raise ValueError("Text to embed cannot be empty")

        logger.debug("Generating embedding for text (%d chars)", len(text))
        try:
            resp = self._client.post(
                "/api/embeddings",
                json={"model": self.model, "prompt": text},
            )
        except httpx.HTTPError as exc:
            raise EmbeddingError(f"Embedding request failed: {exc}") from exc

        if resp.status_code != 200:
            raise EmbeddingError(
                f"Embedding API error: {resp.status_code} - {resp.text}",
                status_code=resp.status_code,
            )

        embedding = self._parse_embedding(resp)
        if self.dimension is not None and len(embedding) != self.dimension:
            raise EmbeddingError(
                f"Embedding dimension mismatch: expected {self.dimension}, "
                f"got {len(embedding)}"
            )
        return embedding

    def health_check(self) -> bool:
        """Return ``True`` when the backend answers a probe embedding."""
        try:
            self.probe_dimension()
        except EmbeddingError:
            logger.warning("Ollama health-check failed", exc_info=True)
            return False
        return True

    def close(self) -> None:
        self._client.close()

    # ------------------------------------------------------------------
    # Private
    # ------------------------------------------------------------------

    def _between_items(self) -> None:
        if self.request_delay > 0:
            time.sleep(self.request_delay)

    @staticmethod
    def _parse_embedding(resp: httpx.Response) -> list[float]:
        try:
            data = resp.json()
        except ValueError as exc:
            raise EmbeddingError("Embedding response is not valid JSON") from exc

        embedding = data.get("embedding") if isinstance(data, dict) else None
        if not isinstance(embedding, list) or not embedding:
            raise EmbeddingError("Embedding response has no 'embedding' array")
        try:
            return [float(x) for x in embedding]
        except (TypeError, ValueError) as exc:
            raise EmbeddingError("Embedding array contains non-numeric values") from exc
