"""Chunk schemas shared by the hybrid and multi-pass paths."""

from enum import Enum
from typing import Any, NamedTuple

from pydantic import BaseModel, ConfigDict, Field

# ("id", <explicit id>) or (document_id, chunk_number)
ChunkKey = tuple[str, str | int]


class ChunkSource(str, Enum):
    """Which retrieval source(s) produced a scored chunk."""

    VECTOR = "vector"
    FULL_DOC = "full_doc"
    BOTH = "both"


class RetrievedChunk(BaseModel):
    """A span of document text as handed over by a retrieval provider."""

    model_config = ConfigDict(frozen=True)

    id: str = Field("", description="Explicit chunk id, if the provider assigns one.")
    document_id: str = Field("", description="ID of the source document.")
    document_name: str = Field("", description="Human-readable document name.")
    notebook_id: str = Field("", description="Notebook the document belongs to.")
    content: str = Field("", description="Chunk text.")
    chunk_number: int = Field(0, description="Position of the chunk within its document.")
    total_chunks: int = Field(0, description="Number of chunks in the source document (0 if unknown).")
    score: float = Field(0.0, description="Similarity score; meaningful for vector-sourced chunks only.")
    distance: float = Field(0.0, description="Distance metric reported by the vector store.")
    metadata: dict[str, Any] = Field(
        default_factory=dict, description="Free-form hints (is_header, is_summary, chunk_type)."
    )
    content_type: str = Field("", description="text, table, image, ...")
    language: str = Field("", description="Content language, if known.")
    page_number: int | None = Field(None, description="Page the chunk starts on, if known.")

    @property
    def key(self) -> ChunkKey:
        """
        Identity key used to merge the same chunk across sources.

        The explicit id wins when the provider assigns one; otherwise the
        chunk is identified by its document id and chunk number.
        """
        if self.id:
            return ("id", self.id)
        return (self.document_id, self.chunk_number)

    @property
    def identity(self) -> str:
        """Explicit id, or one derived from the document id and chunk number."""
        if self.id:
            return self.id
        return f"{self.document_id}_{self.chunk_number}"


class ScoredChunk(NamedTuple):
    """A retrieved chunk with its hybrid score breakdown."""

    chunk: RetrievedChunk
    vector_score: float = 0.0
    full_doc_score: float = 0.0
    position_score: float = 0.0
    summary_boost: float = 1.0
    combined_score: float = 0.0
    source: ChunkSource = ChunkSource.VECTOR
    priority_tier: str = ""
    estimated_tokens: int = 0

    @property
    def key(self) -> ChunkKey:
        return self.chunk.key
