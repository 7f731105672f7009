"""Tests for the vector store layer — Chroma over MockTransport, no network."""

from __future__ import annotations

import json

import httpx
import pytest

from kbase.config import VectorStoreSettings
from kbase.errors import StoreError
from kbase.vectorstore.base import VectorStore
from kbase.vectorstore.chroma_store import ChromaStore
from kbase.vectorstore.factory import available_stores, get_vector_store
from kbase.vectorstore.schemas import QueryResult

from conftest import InMemoryStore

BASE_URL = "http://chroma.test"
PREFIX = "/api/v2/tenants/default_tenant/databases/default_database/collections"


class FakeChroma:
    """Minimal route table standing in for a Chroma server."""

    def __init__(self):
        self.collections: dict[str, str] = {}
        self.query_payload: dict = {"ids": [[]]}
        self.create_status = 200

    def __call__(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path
        method = request.method

        if path == "/api/v2/heartbeat":
            return httpx.Response(200, json={"nanosecond heartbeat": 1})
        if path == PREFIX and method == "GET":
            return httpx.Response(200, json=[
                {"id": cid, "name": name} for name, cid in self.collections.items()
            ])
        if path == PREFIX and method == "POST":
            if self.create_status != 200:
                return httpx.Response(self.create_status, json={"error": "exists"})
            name = json.loads(request.content)["name"]
            self.collections[name] = f"uuid-{name}"
            return httpx.Response(200, json={"id": f"uuid-{name}", "name": name})

        tail = path[len(PREFIX) + 1:]
        if tail.endswith("/add"):
            return httpx.Response(201, json=True)
        if tail.endswith("/query"):
            return httpx.Response(200, json=self.query_payload)
        if tail.endswith("/count"):
            return httpx.Response(200, json=42)
        if method == "GET":
            if tail in self.collections:
                return httpx.Response(200, json={
                    "id": self.collections[tail], "name": tail, "metadata": None,
                })
            return httpx.Response(404, json={"error": "NotFoundError"})
        if method == "DELETE":
            if self.collections.pop(tail, None) is None:
                return httpx.Response(404, json={"error": "NotFoundError"})
            return httpx.Response(200, json=None)
        return httpx.Response(500, text="unexpected route")


@pytest.fixture
def server() -> FakeChroma:
    return FakeChroma()


@pytest.fixture
def transport(mock_http, server: FakeChroma):
    return mock_http(server)


@pytest.fixture
def chroma(transport) -> ChromaStore:
    return ChromaStore(base_url=BASE_URL, client=transport.client(BASE_URL))


def _calls(transport) -> list[tuple[str, str]]:
    return [(r.method, r.url.path) for r in transport.requests]


# ---------------------------------------------------------------------------
# Collection lifecycle
# ---------------------------------------------------------------------------


class TestChromaCollections:
    def test_is_vector_store(self, chroma: ChromaStore):
        assert isinstance(chroma, VectorStore)

    def test_ensure_creates_missing(self, chroma, server, transport):
        chroma.ensure_collection("books")
        assert server.collections == {"books": "uuid-books"}
        assert _calls(transport) == [("GET", f"{PREFIX}/books"), ("POST", PREFIX)]
        assert transport.bodies()[0] == {
            "name": "books",
            "metadata": {"description": "Knowledge base collection"},
        }

    def test_ensure_existing_is_noop(self, chroma, server, transport):
        server.collections["books"] = "uuid-books"
        chroma.ensure_collection("books")
        assert _calls(transport) == [("GET", f"{PREFIX}/books")]

    def test_ensure_conflict_is_success(self, chroma, server):
        server.create_status = 409
        chroma.ensure_collection("books")

    def test_ensure_other_error_raises(self, chroma, server):
        server.create_status = 500
        with pytest.raises(StoreError) as exc_info:
            chroma.ensure_collection("books")
        assert exc_info.value.status_code == 500

    def test_resolve_id(self, chroma, server):
        server.collections["books"] = "uuid-books"
        assert chroma.resolve_collection_id("books") == "uuid-books"

    def test_resolve_missing_raises(self, chroma):
        with pytest.raises(StoreError, match="Collection not found"):
            chroma.resolve_collection_id("ghost")

    def test_ids_not_cached(self, chroma, server, transport):
        server.collections["books"] = "uuid-1"
        assert chroma.resolve_collection_id("books") == "uuid-1"
        server.collections["books"] = "uuid-2"
        assert chroma.resolve_collection_id("books") == "uuid-2"
        assert len(transport.requests) == 2

    def test_list(self, chroma, server):
        server.collections.update({"a": "1", "b": "2"})
        assert chroma.list_collections() == ["a", "b"]

    def test_delete(self, chroma, server):
        server.collections["books"] = "uuid-books"
        chroma.delete_collection("books")
        assert "books" not in server.collections

    def test_delete_missing_is_success(self, chroma):
        chroma.delete_collection("ghost")

    def test_count(self, chroma, server, transport):
        server.collections["books"] = "uuid-books"
        assert chroma.count("books") == 42
        assert transport.requests[-1].url.path == f"{PREFIX}/uuid-books/count"

    def test_health_check(self, chroma):
        assert chroma.health_check() is True

    def test_health_check_down(self, mock_http):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        store = ChromaStore(base_url=BASE_URL, client=mock_http(handler).client(BASE_URL))
        assert store.health_check() is False

    def test_transport_error_wrapped(self, mock_http):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        store = ChromaStore(base_url=BASE_URL, client=mock_http(handler).client(BASE_URL))
        with pytest.raises(StoreError):
            store.list_collections()

    def test_names_are_percent_encoded(self, chroma, server, transport):
        chroma.get_collection("team a/b?")
        chroma.delete_collection("team a/b?")
        for request in transport.requests:
            assert request.url.raw_path.decode().endswith("/collections/team%20a%2Fb%3F")

    @pytest.mark.parametrize("payload", [[{"id": "1"}], ["books"], [None]])
    def test_malformed_list_raises_store_error(self, mock_http, payload):
        transport = mock_http(lambda r: httpx.Response(200, json=payload))
        store = ChromaStore(base_url=BASE_URL, client=transport.client(BASE_URL))
        with pytest.raises(StoreError, match="Malformed list-collections"):
            store.list_collections()

    @pytest.mark.parametrize("payload", [{"count": 3}, "many", None, True])
    def test_malformed_count_raises_store_error(self, mock_http, server, payload):
        server.collections["books"] = "uuid-books"

        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path.endswith("/count"):
                return httpx.Response(200, json=payload)
            return server(request)

        store = ChromaStore(base_url=BASE_URL, client=mock_http(handler).client(BASE_URL))
        with pytest.raises(StoreError, match="Malformed count"):
            store.count("books")

    def test_close_releases_client(self, chroma):
        chroma.close()
        assert chroma._client.is_closed

    def test_custom_tenant_and_database(self, mock_http):
        transport = mock_http(lambda r: httpx.Response(200, json=[]))
        store = ChromaStore(
            base_url=BASE_URL, tenant="acme", database="docs",
            client=transport.client(BASE_URL),
        )
        store.list_collections()
        assert transport.requests[0].url.path == "/api/v2/tenants/acme/databases/docs/collections"


# ---------------------------------------------------------------------------
# Writes
# ---------------------------------------------------------------------------


class TestChromaAdd:
    def test_resolve_then_add(self, chroma, server, transport):
        server.collections["books"] = "uuid-books"
        added = chroma.add_documents(
            "books", ["c0", "c1"], [[0.1], [0.2]], ["zero", "one"], [{"k": "v"}, {}],
        )
        assert added == 2
        assert _calls(transport) == [
            ("GET", f"{PREFIX}/books"),
            ("GET", f"{PREFIX}/books"),
            ("POST", f"{PREFIX}/uuid-books/add"),
        ]
        assert transport.bodies()[-1] == {
            "ids": ["c0", "c1"],
            "embeddings": [[0.1], [0.2]],
            "documents": ["zero", "one"],
            "metadatas": [{"k": "v"}, {}],
        }

    def test_length_mismatch_raises_before_any_request(self, chroma, transport):
        with pytest.raises(StoreError, match="equal length"):
            chroma.add_documents("books", ["c0", "c1"], [[0.1]], ["a", "b"], [{}, {}])
        assert transport.requests == []

    def test_empty_add_is_noop(self, chroma, transport):
        assert chroma.add_documents("books", [], [], [], []) == 0
        assert transport.requests == []


# ---------------------------------------------------------------------------
# Query decoding
# ---------------------------------------------------------------------------


class TestChromaQuery:
    def test_request_shape(self, chroma, server, transport):
        server.collections["books"] = "uuid-books"
        chroma.query("books", [0.5, 0.5], top_k=3)
        assert transport.requests[-1].url.path == f"{PREFIX}/uuid-books/query"
        assert transport.bodies()[-1] == {
            "query_embeddings": [[0.5, 0.5]],
            "n_results": 3,
            "include": ["documents", "metadatas", "distances"],
        }

    def test_results_sorted_by_distance(self, chroma, server):
        server.collections["books"] = "uuid-books"
        server.query_payload = {
            "ids": [["far", "near", "mid"]],
            "documents": [["F", "N", "M"]],
            "distances": [[0.9, 0.1, 0.5]],
            "metadatas": [[{"source": "f.txt"}, {"source": "n.txt", "chunk_index": 3}, None]],
        }
        results = chroma.query("books", [0.0])
        assert [r.id for r in results] == ["near", "mid", "far"]
        assert results[0] == QueryResult(
            id="near", document="N", distance=0.1,
            metadata={"source": "n.txt", "chunk_index": "3"},
        )
        assert results[1].metadata == {}

    def test_equal_distances_keep_server_order(self, chroma, server):
        server.collections["books"] = "uuid-books"
        server.query_payload = {
            "ids": [["a", "b", "c"]],
            "documents": [["A", "B", "C"]],
            "distances": [[0.3, 0.3, 0.1]],
            "metadatas": [[{}, {}, {}]],
        }
        assert [r.id for r in chroma.query("books", [0.0])] == ["c", "a", "b"]

    @pytest.mark.parametrize("payload", [{"ids": [[]]}, {"ids": []}, {}])
    def test_empty_ids(self, chroma, server, payload):
        server.collections["books"] = "uuid-books"
        server.query_payload = payload
        assert chroma.query("books", [0.0]) == []

    def test_missing_documents_filled(self, chroma, server):
        server.collections["books"] = "uuid-books"
        server.query_payload = {"ids": [["a"]], "distances": [[0.2]], "documents": None}
        results = chroma.query("books", [0.0])
        assert results[0].document == ""
        assert results[0].metadata == {}

    def test_mismatched_arrays_raise(self, chroma, server):
        server.collections["books"] = "uuid-books"
        server.query_payload = {
            "ids": [["a", "b"]],
            "documents": [["A"]],
            "distances": [[0.1, 0.2]],
            "metadatas": [[{}, {}]],
        }
        with pytest.raises(StoreError, match="mismatched"):
            chroma.query("books", [0.0])

    def test_missing_distances_raise(self, chroma, server):
        server.collections["books"] = "uuid-books"
        server.query_payload = {"ids": [["a"]], "documents": [["A"]]}
        with pytest.raises(StoreError, match="distances"):
            chroma.query("books", [0.0])

    def test_query_missing_collection(self, chroma):
        with pytest.raises(StoreError):
            chroma.query("ghost", [0.0])


# ---------------------------------------------------------------------------
# Base-class protocol (in-memory store)
# ---------------------------------------------------------------------------


class TestVectorStoreProtocol:
    def test_add_creates_collection(self):
        store = InMemoryStore()
        store.add_documents("notes", ["n0"], [[1.0, 0.0]], ["text"], [{"source": "a"}])
        assert store.list_collections() == ["notes"]
        assert store.count("notes") == 1

    def test_query_nearest_first(self):
        store = InMemoryStore()
        store.add_documents(
            "notes", ["x", "y"], [[1.0, 0.0], [0.0, 1.0]], ["X", "Y"], [{}, {}],
        )
        results = store.query("notes", [0.0, 0.9], top_k=2)
        assert [r.id for r in results] == ["y", "x"]
        assert results[0].distance <= results[1].distance

    def test_readd_overwrites(self):
        store = InMemoryStore()
        store.add_documents("notes", ["x"], [[1.0]], ["old"], [{}])
        store.add_documents("notes", ["x"], [[1.0]], ["new"], [{}])
        assert store.count("notes") == 1
        assert store.query("notes", [1.0])[0].document == "new"

    def test_store_name(self):
        assert ChromaStore.store_name() == "ChromaStore"


# ---------------------------------------------------------------------------
# Factory
# ---------------------------------------------------------------------------


class TestStoreFactory:
    def test_available(self):
        assert available_stores() == ["chroma"]

    def test_unknown_raises(self):
        with pytest.raises(ValueError, match="Unknown vector store"):
            get_vector_store(VectorStoreSettings(backend="pinecone"))

    def test_built_from_settings(self, mock_http):
        transport = mock_http(lambda r: httpx.Response(200, json=[]))
        settings = VectorStoreSettings(
            base_url="http://chroma.internal:9000", tenant="t1", database="db1",
        )
        store = get_vector_store(settings, client=transport.client(BASE_URL))
        assert isinstance(store, ChromaStore)
        assert store.base_url == "http://chroma.internal:9000"
        store.list_collections()
        assert transport.requests[0].url.path == "/api/v2/tenants/t1/databases/db1/collections"
