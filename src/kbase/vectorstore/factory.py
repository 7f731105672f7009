"""Build the configured vector store from its settings section."""

from __future__ import annotations

import importlib
import logging

import httpx

from kbase.config import VectorStoreSettings
from kbase.vectorstore.base import VectorStore

logger = logging.getLogger(__name__)

# backend key -> (module path, class name)
_BACKENDS: dict[str, tuple[str, str]] = {
    "chroma": ("kbase.vectorstore.chroma_store", "ChromaStore"),
}


def get_vector_store(
    settings: VectorStoreSettings | None = None,
    client: httpx.Client | None = None,
) -> VectorStore:
    """Create a fresh store client for ``settings.backend``.

    The collection name in ``settings`` is not bound here; callers pass it
    to each operation.

    Raises:
        ValueError: The backend name is not registered.
    """
    settings = settings or VectorStoreSettings()
    key = settings.backend.lower()
    if key not in _BACKENDS:
        raise ValueError(
            f"Unknown vector store '{settings.backend}'. Available: {available_stores()}"
        )

    module_path, cls_name = _BACKENDS[key]
    cls = getattr(importlib.import_module(module_path), cls_name)
    logger.debug("Creating %s for %s", cls_name, settings.base_url)
    return cls(
        base_url=settings.base_url,
        tenant=settings.tenant,
        database=settings.database,
        timeout=settings.timeout,
        client=client,
    )


def available_stores() -> list[str]:
    """Return names of registered vector store backends."""
    return list(_BACKENDS)
