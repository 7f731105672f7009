"""Data models for retrieval operations."""

from __future__ import annotations

from dataclasses import dataclass, field

from kbase.vectorstore.schemas import QueryResult


@dataclass
class RetrievalResult:
    """Result of a retrieval operation, closest match first."""

    query: str
    results: list[QueryResult] = field(default_factory=list)
    total_candidates: int = 0

    @property
    def best(self) -> QueryResult | None:
        return self.results[0] if self.results else None
