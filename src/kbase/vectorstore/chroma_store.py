"""Chroma vector store over the v2 HTTP API.

Collections live under a fixed tenant/database pair. Lookups and deletes
address a collection by name; add, query and count address it by the id
the server assigned at creation.
"""

from __future__ import annotations

import logging
from typing import Any
from urllib.parse import quote

import httpx

from kbase.errors import StoreError
from kbase.vectorstore.base import VectorStore
from kbase.vectorstore.schemas import CollectionInfo, QueryResult

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "http://localhost:8000"
DEFAULT_TENANT = "default_tenant"
DEFAULT_DATABASE = "default_database"


class ChromaStore(VectorStore):
    """Chroma-backed vector store."""

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        tenant: str = DEFAULT_TENANT,
        database: str = DEFAULT_DATABASE,
        timeout: float = 30.0,
        client: httpx.Client | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.tenant = tenant
        self.database = database
        self._client = client or httpx.Client(base_url=self.base_url, timeout=timeout)
        self._prefix = (
            f"/api/v2/tenants/{quote(tenant, safe='')}"
            f"/databases/{quote(database, safe='')}/collections"
        )
        logger.info("Chroma client initialized (v2 API): %s", self.base_url)

    # ------------------------------------------------------------------
    # Collection lifecycle
    # ------------------------------------------------------------------

    def ensure_collection(self, name: str) -> None:
        if self.get_collection(name) is not None:
            logger.debug("Collection already exists: %s", name)
            return

        resp = self._request(
            "POST",
            self._prefix,
            json={"name": name, "metadata": {"description": "Knowledge base collection"}},
        )
        if resp.status_code == 409:
            logger.info("Collection already exists: %s", name)
            return
        self._check(resp, f"create collection {name}")
        logger.info("Created collection: %s", name)

    def get_collection(self, name: str) -> CollectionInfo | None:
        resp = self._request("GET", self._path(name))
        if not resp.is_success:
            logger.debug("Collection lookup for %s returned %d", name, resp.status_code)
            return None

        data = self._json(resp, f"get collection {name}")
        if not isinstance(data, dict) or "id" not in data:
            raise StoreError(f"Malformed collection response for {name}")
        return CollectionInfo(
            id=str(data["id"]),
            name=data.get("name", name),
            metadata=data.get("metadata") or {},
        )

    def list_collections(self) -> list[str]:
        resp = self._request("GET", self._prefix)
        self._check(resp, "list collections")
        data = self._json(resp, "list collections")
        if not isinstance(data, list):
            raise StoreError("Malformed list-collections response")
        try:
            return [str(c["name"]) for c in data]
        except (KeyError, TypeError) as exc:
            raise StoreError("Malformed list-collections response") from exc

    def delete_collection(self, name: str) -> None:
        logger.info("Deleting collection: %s", name)
        resp = self._request("DELETE", self._path(name))
        if resp.status_code == 404:
            logger.info("Collection doesn't exist (already deleted): %s", name)
            return
        self._check(resp, f"delete collection {name}")
        logger.info("Collection deleted: %s", name)

    # ------------------------------------------------------------------
    # Id-addressed operations
    # ------------------------------------------------------------------

    def add_by_id(
        self,
        collection_id: str,
        ids: list[str],
        embeddings: list[list[float]],
        documents: list[str],
        metadatas: list[dict[str, str]],
    ) -> int:
        resp = self._request(
            "POST",
            self._path(collection_id, "add"),
            json={
                "ids": ids,
                "embeddings": embeddings,
                "documents": documents,
                "metadatas": metadatas,
            },
        )
        self._check(resp, "add documents")
        logger.info("Added %d documents", len(ids))
        return len(ids)

    def query_by_id(
        self,
        collection_id: str,
        query_embedding: list[float],
        top_k: int = 5,
    ) -> list[QueryResult]:
        resp = self._request(
            "POST",
            self._path(collection_id, "query"),
            json={
                "query_embeddings": [query_embedding],
                "n_results": top_k,
                "include": ["documents", "metadatas", "distances"],
            },
        )
        self._check(resp, "query")
        results = self._decode_query(self._json(resp, "query"))
        logger.info("Query returned %d results", len(results))
        return results

    def count_by_id(self, collection_id: str) -> int:
        resp = self._request("GET", self._path(collection_id, "count"))
        self._check(resp, "count")
        data = self._json(resp, "count")
        if isinstance(data, bool):
            raise StoreError(f"Malformed count response: {data!r}")
        try:
            return int(data)
        except (TypeError, ValueError) as exc:
            raise StoreError(f"Malformed count response: {data!r}") from exc

    def health_check(self) -> bool:
        try:
            resp = self._client.get("/api/v2/heartbeat")
        except httpx.HTTPError:
            logger.warning("Chroma health-check failed", exc_info=True)
            return False
        return resp.is_success

    def close(self) -> None:
        self._client.close()

    # ------------------------------------------------------------------
    # Response decoding
    # ------------------------------------------------------------------

    @staticmethod
    def _decode_query(data: Any) -> list[QueryResult]:
        """Turn Chroma's per-query parallel arrays into sorted results."""
        if not isinstance(data, dict):
            raise StoreError("Malformed query response")

        batches = data.get("ids") or []
        if not batches or not batches[0]:
            return []
        ids = batches[0]

        def _first(key: str) -> list[Any]:
            values = data.get(key) or [None]
            return values[0] if values[0] is not None else [None] * len(ids)

        documents = _first("documents")
        distances = _first("distances")
        metadatas = _first("metadatas")

        if not len(ids) == len(documents) == len(distances) == len(metadatas):
            raise StoreError("Query response arrays have mismatched lengths")
        if any(d is None for d in distances):
            raise StoreError("Query response is missing distances")

        results = [
            QueryResult(
                id=str(doc_id),
                document=document or "",
                distance=float(distance),
                metadata={k: str(v) for k, v in (meta or {}).items() if v is not None},
            )
            for doc_id, document, distance, meta in zip(ids, documents, distances, metadatas)
        ]
        # Stable sort keeps the server's order for equal distances.
        results.sort(key=lambda r: r.distance)
        return results

    # ------------------------------------------------------------------
    # HTTP helpers
    # ------------------------------------------------------------------

    def _path(self, segment: str, action: str | None = None) -> str:
        """Collection URL for a name or id; the segment is percent-encoded."""
        path = f"{self._prefix}/{quote(segment, safe='')}"
        return f"{path}/{action}" if action else path

    def _request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        try:
            return self._client.request(method, url, **kwargs)
        except httpx.HTTPError as exc:
            raise StoreError(f"Chroma request {method} {url} failed: {exc}") from exc

    @staticmethod
    def _check(resp: httpx.Response, action: str) -> None:
        if not resp.is_success:
            logger.error("Failed to %s: %d - %s", action, resp.status_code, resp.text)
            raise StoreError(
                f"Failed to {action}: {resp.status_code} - {resp.text}",
                status_code=resp.status_code,
            )

    @staticmethod
    def _json(resp: httpx.Response, action: str) -> Any:
        try:
            return resp.json()
        except ValueError as exc:
            raise StoreError(f"Invalid JSON in {action} response") from exc
