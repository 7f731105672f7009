"""Shared fixtures for tests — synthetic documents, fake backends, no network calls."""

from __future__ import annotations

import hashlib
import json
import textwrap
from collections.abc import Callable
from pathlib import Path

import httpx
import pytest

from kbase.documents.base import TextExtractor
from kbase.documents.schemas import DocumentMetadata
from kbase.embeddings.base import EmbeddingProvider
from kbase.errors import EmbeddingError, ExtractionError, StoreError
from kbase.vectorstore.base import VectorStore
from kbase.vectorstore.schemas import CollectionInfo, QueryResult

DIM = 8

# ---------------------------------------------------------------------------
# Fake collaborators
# ---------------------------------------------------------------------------


class FakeExtractor(TextExtractor):
    """Serves text from a dict keyed by file name; missing names fail."""

    def __init__(self, texts: dict[str, str]):
        self.texts = texts

    def extract_text(self, path) -> str:
        name = Path(path).name
        if name not in self.texts:
            raise ExtractionError(f"Cannot read {name}", path=str(path))
        return self.texts[name]

    def get_metadata(self, path) -> DocumentMetadata:
        name = Path(path).name
        return DocumentMetadata(
            filename=name,
            file_path=str(path),
            file_size=len(self.texts.get(name, "")),
            page_count=1,
            title=f"Title of {name}",
        )


class FakeEmbedder(EmbeddingProvider):
    """Deterministic hash embeddings; optionally fails on a given text."""

    def __init__(self, dim: int = DIM, fail_on: str | None = None):
        self.dim = dim
        self.fail_on = fail_on
        self.calls: list[str] = []
        self.closed = False

    def embed(self, text: str) -> list[float]:
        self.calls.append(text)
        if self.fail_on is not None and self.fail_on in text:
            raise EmbeddingError("Embedding API error: 500 - boom", status_code=500)
        h = hashlib.sha256(text.encode()).digest()
        return [h[i % len(h)] / 255.0 for i in range(self.dim)]

    def close(self) -> None:
        self.closed = True


class InMemoryStore(VectorStore):
    """Dict-backed store mirroring the resolve-then-act protocol."""

    def __init__(self):
        self.collections: dict[str, dict] = {}
        self.add_calls = 0
        self.closed = False

    def ensure_collection(self, name: str) -> None:
        self.collections.setdefault(
            name, {"id": f"id-{name}", "records": {}},
        )

    def get_collection(self, name: str) -> CollectionInfo | None:
        if name not in self.collections:
            return None
        return CollectionInfo(id=self.collections[name]["id"], name=name)

    def list_collections(self) -> list[str]:
        return list(self.collections)

    def delete_collection(self, name: str) -> None:
        self.collections.pop(name, None)

    def _by_id(self, collection_id: str) -> dict:
        for coll in self.collections.values():
            if coll["id"] == collection_id:
                return coll["records"]
        raise StoreError(f"Unknown collection id {collection_id}", status_code=404)

    def add_by_id(self, collection_id, ids, embeddings, documents, metadatas) -> int:
        self.add_calls += 1
        records = self._by_id(collection_id)
        for i, doc_id in enumerate(ids):
            records[doc_id] = (embeddings[i], documents[i], metadatas[i])
        return len(ids)

    def query_by_id(self, collection_id, query_embedding, top_k=5) -> list[QueryResult]:
        records = self._by_id(collection_id)
        results = [
            QueryResult(
                id=doc_id,
                document=doc,
                distance=sum((a - b) ** 2 for a, b in zip(emb, query_embedding)),
                metadata=meta,
            )
            for doc_id, (emb, doc, meta) in records.items()
        ]
        results.sort(key=lambda r: r.distance)
        return results[:top_k]

    def count_by_id(self, collection_id: str) -> int:
        return len(self._by_id(collection_id))

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def embedder() -> FakeEmbedder:
    return FakeEmbedder()


@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore()


# ---------------------------------------------------------------------------
# HTTP mocking
# ---------------------------------------------------------------------------


class RecordingTransport:
    """Wraps a handler for ``httpx.MockTransport`` and records every request."""

    def __init__(self, handler: Callable[[httpx.Request], httpx.Response]):
        self.handler = handler
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.handler(request)

    def bodies(self) -> list[dict]:
        return [json.loads(r.content) for r in self.requests if r.content]

    def client(self, base_url: str) -> httpx.Client:
        return httpx.Client(base_url=base_url, transport=httpx.MockTransport(self))


@pytest.fixture
def mock_http() -> Callable[..., RecordingTransport]:
    """Factory: ``mock_http(handler)`` → ``RecordingTransport``."""
    return RecordingTransport


# ---------------------------------------------------------------------------
# Synthetic document content
# ---------------------------------------------------------------------------


@pytest.fixture
def sample_txt_content() -> str:
    return textwrap.dedent("""\
        The Lighthouse Keeper's Handbook

        A lighthouse must be kept lit from sunset to sunrise. The keeper trims
        the wick every four hours. Oil is stored in the base of the tower, away
        from the lamp room.

        Weather logs are written at dawn and dusk. Wind speed, visibility and
        sea state are recorded in the station book. Storms are reported to the
        harbor master by signal flag.

        Page 3

        The lens is cleaned daily with a soft linen cloth. Scratches on the
        prisms reduce the range of the beam. Visit https://example.org/lens for
        the full care guide or write to keeper@example.org with questions.
    """)


@pytest.fixture
def sample_txt_file(tmp_path: Path, sample_txt_content: str) -> Path:
    p = tmp_path / "keeper_handbook.txt"
    p.write_text(sample_txt_content, encoding="utf-8")
    return p


@pytest.fixture
def sample_pdf_file(tmp_path: Path) -> Path:
    """Create a minimal two-page PDF using fpdf2."""
    from fpdf import FPDF

    pdf = FPDF()
    pdf.set_auto_page_break(auto=True, margin=15)
    pdf.set_title("Tide Tables Explained")
    pdf.set_author("Harbor Office")

    pdf.add_page()
    pdf.set_font("Helvetica", size=12)
    pdf.multi_cell(0, 10, text=(
        "Tides rise and fall twice each day. The height of the tide depends "
        "on the phase of the moon and the shape of the coastline."
    ))

    pdf.add_page()
    pdf.multi_cell(0, 10, text=(
        "Spring tides occur near the new and full moon. Neap tides occur "
        "near the quarter moons and have the smallest range."
    ))

    p = tmp_path / "tide_tables.pdf"
    pdf.output(str(p))
    return p


@pytest.fixture
def sample_docx_file(tmp_path: Path) -> Path:
    """Create a minimal DOCX file."""
    from docx import Document

    doc = Document()
    doc.core_properties.title = "Knot Tying Guide"
    doc.core_properties.author = "Deck Crew"
    doc.add_heading("Knot Tying Guide", level=1)
    doc.add_paragraph(
        "The bowline forms a fixed loop at the end of a rope. "
        "It is easy to untie after bearing a load."
    )
    doc.add_paragraph(
        "The clove hitch secures a line to a post. "
        "It can slip if the load changes direction."
    )

    p = tmp_path / "knots.docx"
    doc.save(str(p))
    return p


@pytest.fixture
def long_text() -> str:
    """Forty numbered sentences of five words each."""
    return " ".join(f"Sentence number {i} ends here." for i in range(40))


@pytest.fixture
def paragraph_text() -> str:
    """Six paragraphs of twelve words each."""
    paragraphs = [
        " ".join(f"p{p}w{w}" for w in range(11)) + f" end{p}."
        for p in range(6)
    ]
    return "\n\n".join(paragraphs)
