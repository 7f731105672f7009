"""Data models for the indexing pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class IndexingResult:
    """Outcome of indexing one document.

    Stage counters are filled in as the pipeline advances, so a failed
    result still shows how far the document got. Finalized exactly once.
    """

    document_name: str
    success: bool = False
    characters_extracted: int = 0
    chunks_created: int = 0
    embeddings_generated: int = 0
    chunks_stored: int = 0
    duration_ms: int = 0
    error_message: str | None = None
    _finalized: bool = field(default=False, init=False, repr=False, compare=False)

    @property
    def finalized(self) -> bool:
        return self._finalized

    def mark_succeeded(self, duration_ms: int) -> None:
        self._finalize(duration_ms)
        self.success = True

    def mark_failed(self, error: BaseException | str, duration_ms: int = 0) -> None:
        self._finalize(duration_ms)
        self.success = False
        if isinstance(error, BaseException):
            self.error_message = str(error) or type(error).__name__
        else:
            self.error_message = error

    def _finalize(self, duration_ms: int) -> None:
        if self._finalized:
            raise RuntimeError(f"IndexingResult for {self.document_name} already finalized")
        self._finalized = True
        self.duration_ms = duration_ms

    def __str__(self) -> str:
        if self.success:
            return (
                f"OK   {self.document_name}: {self.characters_extracted} chars -> "
                f"{self.chunks_created} chunks -> {self.embeddings_generated} embeddings "
                f"({self.duration_ms} ms)"
            )
        return f"FAIL {self.document_name}: {self.error_message}"


@dataclass
class BatchResult:
    """Per-document results of a batch run, in input order."""

    results: list[IndexingResult] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.results)

    @property
    def succeeded(self) -> int:
        return sum(1 for r in self.results if r.success)

    @property
    def failed(self) -> int:
        return self.total - self.succeeded

    @property
    def total_chunks_stored(self) -> int:
        return sum(r.chunks_stored for r in self.results)

    @property
    def failures(self) -> list[IndexingResult]:
        return [r for r in self.results if not r.success]

    def summary(self) -> str:
        return (
            f"Indexed {self.succeeded}/{self.total} documents "
            f"({self.failed} failed, {self.total_chunks_stored} chunks stored)"
        )
