"""Build the configured embedding provider from its settings section.

Backends are imported lazily so an unused provider never pulls in its
client stack.
"""

from __future__ import annotations

import importlib
import logging

import httpx

from kbase.config import EmbeddingSettings
from kbase.embeddings.base import EmbeddingProvider

logger = logging.getLogger(__name__)

# provider key -> (module path, class name)
_PROVIDERS: dict[str, tuple[str, str]] = {
    "ollama": ("kbase.embeddings.ollama_provider", "OllamaEmbeddingProvider"),
}


def get_embedding_provider(
    settings: EmbeddingSettings | None = None,
    client: httpx.Client | None = None,
) -> EmbeddingProvider:
    """Create a fresh provider for ``settings.provider``.

    Args:
        settings: Embedding section of the app settings (defaults if omitted).
        client: Pre-built HTTP client, mainly for tests.

    Raises:
        ValueError: The provider name is not registered.
    """
    settings = settings or EmbeddingSettings()
    key = settings.provider.lower()
    if key not in _PROVIDERS:
        raise ValueError(
            f"Unknown embedding provider '{settings.provider}'. "
            f"Available: {available_providers()}"
        )

    module_path, cls_name = _PROVIDERS[key]
    cls = getattr(importlib.import_module(module_path), cls_name)
    logger.debug("Creating %s for model %s", cls_name, settings.model)
    return cls(
        model=settings.model,
        base_url=settings.base_url,
        dimension=settings.dimension,
        timeout=settings.timeout,
        request_delay=settings.request_delay,
        client=client,
    )


def available_providers() -> list[str]:
    """Return names of registered embedding providers."""
    return list(_PROVIDERS)
