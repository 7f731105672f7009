"""Data models for vector store operations."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class QueryResult:
    """A single nearest-neighbor match. Lower distance means more similar."""

    id: str
    document: str
    distance: float
    metadata: dict[str, str] = field(default_factory=dict)

    def __str__(self) -> str:
        return f"QueryResult(id={self.id!r}, distance={self.distance:.4f}, doc={self.document[:50]!r})"


@dataclass(frozen=True)
class CollectionInfo:
    """A collection as described by the store."""

    id: str
    name: str
    metadata: dict[str, Any] = field(default_factory=dict)
