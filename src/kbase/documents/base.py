"""Interface the indexer uses to get text out of a document file."""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path

from kbase.documents.schemas import DocumentMetadata


class TextExtractor(ABC):
    """Text-in/text-out collaborator: file path to cleaned text + metadata."""

    @abstractmethod
    def extract_text(self, path: str | Path) -> str:
        """Return the cleaned text of a document.

        Raises:
            ExtractionError: The file is missing, unsupported, or unreadable.
        """

    @abstractmethod
    def get_metadata(self, path: str | Path) -> DocumentMetadata:
        """Return title, author, page count, and size of a document."""
