"""Application settings loaded from YAML with environment variable overrides."""

from __future__ import annotations

import os
from pathlib import Path

import yaml
from pydantic import BaseModel, Field

from kbase.chunking.schemas import ChunkingConfig, ChunkingStrategy

# ---------------------------------------------------------------------------
# Settings sections
# ---------------------------------------------------------------------------


class EmbeddingSettings(BaseModel):
    provider: str = "ollama"
    model: str = "nomic-embed-text"
    base_url: str = "http://localhost:11434"
    dimension: int | None = None
    timeout: float = 30.0
    request_delay: float = 0.1


class VectorStoreSettings(BaseModel):
    backend: str = "chroma"
    base_url: str = "http://localhost:8000"
    tenant: str = "default_tenant"
    database: str = "default_database"
    collection: str = "knowledge_base"
    timeout: float = 30.0


class ChunkingSettings(BaseModel):
    chunk_size: int = 500
    overlap: int = 50
    strategy: ChunkingStrategy = ChunkingStrategy.SENTENCE_BOUNDARY

    def to_config(self) -> ChunkingConfig:
        """Build the immutable config value handed to the chunking engine."""
        return ChunkingConfig(
            target_size=self.chunk_size,
            overlap=self.overlap,
            strategy=self.strategy,
        )


class IndexingSettings(BaseModel):
    supported_formats: list[str] = Field(
        default_factory=lambda: [".pdf", ".txt", ".docx"]
    )
    pause_seconds: float = 1.0
    recursive: bool = False


class RetrievalSettings(BaseModel):
    top_k: int = 5
    max_distance: float | None = None


# ---------------------------------------------------------------------------
# Root settings
# ---------------------------------------------------------------------------


class Settings(BaseModel):
    embedding: EmbeddingSettings = Field(default_factory=EmbeddingSettings)
    vectorstore: VectorStoreSettings = Field(default_factory=VectorStoreSettings)
    chunking: ChunkingSettings = Field(default_factory=ChunkingSettings)
    indexing: IndexingSettings = Field(default_factory=IndexingSettings)
    retrieval: RetrievalSettings = Field(default_factory=RetrievalSettings)
    log_level: str = "INFO"


def _find_settings_file() -> Path | None:
    """Walk up from cwd looking for settings.yaml."""
    profile = os.getenv("KBASE_PROFILE", "")
    names = [f"settings-{profile}.yaml", "settings.yaml"] if profile else ["settings.yaml"]

    cwd = Path.cwd()
    for parent in [cwd, *cwd.parents]:
        for name in names:
            candidate = parent / name
            if candidate.exists():
                return candidate
    return None


def load_settings(path: str | Path | None = None) -> Settings:
    """Load settings from a YAML file, falling back to defaults.

    Args:
        path: Explicit settings file. When omitted the nearest
            ``settings.yaml`` (or profile variant) above cwd is used.
    """
    settings_path = Path(path) if path is not None else _find_settings_file()
    raw: dict = {}
    if settings_path is not None:
        with open(settings_path, encoding="utf-8") as fh:
            raw = yaml.safe_load(fh) or {}

    settings = Settings(**raw)

    log_level = os.getenv("KBASE_LOG_LEVEL")
    if log_level:
        settings.log_level = log_level.upper()
    return settings
