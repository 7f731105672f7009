"""Data models for document extraction."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class DocumentMetadata:
    """Descriptive metadata for a source file."""

    filename: str
    file_path: str
    file_size: int
    page_count: int
    title: str
    author: str | None = None
    subject: str | None = None

    @property
    def file_size_formatted(self) -> str:
        kb = self.file_size // 1024
        if kb < 1024:
            return f"{kb} KB"
        return f"{kb // 1024} MB"
