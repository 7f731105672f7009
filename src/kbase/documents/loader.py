"""Default text extractor — PDF, DOCX, TXT.

Reads a file, extracts its text with a format-specific backend, and runs
the result through ``clean_text``.
"""

from __future__ import annotations

import logging
from pathlib import Path

from kbase.documents.base import TextExtractor
from kbase.documents.clean import clean_text
from kbase.documents.schemas import DocumentMetadata
from kbase.errors import ExtractionError

logger = logging.getLogger(__name__)

SUPPORTED_EXTENSIONS = {".txt", ".pdf", ".docx"}


class DocumentLoader(TextExtractor):
    """Extract cleaned text and metadata from supported document files."""

    def extract_text(self, path: str | Path) -> str:
        path = self._check_path(path)
        ext = path.suffix.lower()
        handlers = {
            ".txt": self._read_txt,
            ".pdf": self._read_pdf,
            ".docx": self._read_docx,
        }

        logger.info("Extracting text from %s", path.name)
        raw = handlers[ext](path)
        text = clean_text(raw)
        logger.info("Extracted %d words from %s", len(text.split()), path.name)
        return text

    def get_metadata(self, path: str | Path) -> DocumentMetadata:
        path = self._check_path(path)
        ext = path.suffix.lower()

        title: str | None = None
        author: str | None = None
        subject: str | None = None
        page_count = 1

        if ext == ".pdf":
            import pdfplumber

            try:
                with pdfplumber.open(path) as pdf:
                    page_count = len(pdf.pages)
                    info = pdf.metadata or {}
            except Exception as exc:
                raise ExtractionError(f"Cannot read PDF metadata: {exc}", path=str(path)) from exc
            title = info.get("Title")
            author = info.get("Author")
            subject = info.get("Subject")
        elif ext == ".docx":
            from docx import Document

            try:
                props = Document(str(path)).core_properties
            except Exception as exc:
                raise ExtractionError(f"Cannot read DOCX metadata: {exc}", path=str(path)) from exc
            title = props.title
            author = props.author
            subject = props.subject

        metadata = DocumentMetadata(
            filename=path.name,
            file_path=str(path.resolve()),
            file_size=path.stat().st_size,
            page_count=page_count,
            title=title or path.name,
            author=author or None,
            subject=subject or None,
        )
        logger.info(
            "Metadata extracted for %s -> %d pages, size: %d bytes",
            metadata.filename, metadata.page_count, metadata.file_size,
        )
        return metadata

    # ------------------------------------------------------------------
    # Private
    # ------------------------------------------------------------------

    @staticmethod
    def _check_path(path: str | Path) -> Path:
        path = Path(path)
        if not path.is_file():
            raise ExtractionError(f"File not found: {path}", path=str(path))

        ext = path.suffix.lower()
        if ext not in SUPPORTED_EXTENSIONS:
            raise ExtractionError(
                f"Unsupported file type '{ext}'. Supported: {sorted(SUPPORTED_EXTENSIONS)}",
                path=str(path),
            )
        return path

    @staticmethod
    def _read_txt(path: Path) -> str:
        data = path.read_bytes()
        for encoding in ("utf-8", "cp1252"):
            try:
                return data.decode(encoding)
            except UnicodeDecodeError:
                continue
        # latin-1 maps every byte, so it always succeeds.
        return data.decode("latin-1")

    @staticmethod
    def _read_pdf(path: Path) -> str:
        import pdfplumber

        page_texts: list[str] = []
        try:
            with pdfplumber.open(path) as pdf:
                for page in pdf.pages:
                    page_texts.append(page.extract_text() or "")
        except Exception as exc:
            raise ExtractionError(f"PDF extraction error: {exc}", path=str(path)) from exc
        return "\n\n".join(page_texts)

    @staticmethod
    def _read_docx(path: Path) -> str:
        from docx import Document

        try:
            doc = Document(str(path))
        except Exception as exc:
            raise ExtractionError(f"DOCX extraction error: {exc}", path=str(path)) from exc
        return "\n\n".join(p.text for p in doc.paragraphs if p.text.strip())
