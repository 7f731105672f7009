"""Document text extraction — the indexer's extraction collaborator."""

from kbase.documents.base import TextExtractor
from kbase.documents.clean import clean_text
from kbase.documents.loader import SUPPORTED_EXTENSIONS, DocumentLoader
from kbase.documents.schemas import DocumentMetadata

__all__ = [
    "DocumentLoader",
    "DocumentMetadata",
    "SUPPORTED_EXTENSIONS",
    "TextExtractor",
    "clean_text",
]
