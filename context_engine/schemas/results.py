from typing import Any, NamedTuple

from pydantic import BaseModel, Field

from .chunk import RetrievedChunk, ScoredChunk
from .config import HybridContextConfig

STRATEGY_HYBRID = "hybrid"
STRATEGY_NONE = "none"


class HybridContextResult(BaseModel):
    chunks: list[RetrievedChunk] = Field(..., description="Selected chunks, score replaced by the combined score.")
    scored_chunks: list[ScoredChunk] = Field(..., description="Selected chunks with their score breakdown.")
    total_tokens: int = Field(..., description="Estimated tokens of all selected chunks.")
    vector_chunk_count: int = Field(0, description="Selected chunks that came from vector search.")
    full_doc_chunk_count: int = Field(0, description="Selected chunks that came from full-document retrieval.")
    duplicates_removed: int = Field(0, description="Chunks dropped by content deduplication.")
    tier_breakdown: dict[str, int] = Field(default_factory=dict, description="Tokens used per priority tier.")
    config: HybridContextConfig = Field(..., description="Configuration the result was built with.")
    strategy: str = STRATEGY_HYBRID
    retrieval_time_ms: int = 0
    metadata: dict[str, Any] = Field(default_factory=dict)


class ContextInjection(BaseModel):
    formatted_context: str = Field(..., description="Text ready to inject into a prompt.")
    chunk_count: int = 0
    document_count: int = 0
    total_tokens: int = 0
    strategy: str = STRATEGY_NONE
    truncated: bool = False
    metadata: dict[str, Any] = Field(default_factory=dict)


class Segment(NamedTuple):
    """A token-bounded window of the chunk stream."""

    index: int
    chunks: list[RetrievedChunk]
    formatted_text: str
    chunk_count: int
    document_count: int
    total_tokens: int
    overlap_chunks: int = 0  # leading chunks repeated from the previous segment


class SegmentResult(BaseModel):
    segment_number: int = Field(..., description="1-based position of the segment.")
    content: str = Field(..., description="Formatted segment text sent to the model.")
    partial_result: str = Field(..., description="Model output for this segment.")
    tokens_used: int = 0
    processing_time_ms: int = 0


class MultiPassResult(BaseModel):
    segments: list[SegmentResult]
    aggregated_result: str
    total_passes: int
    total_tokens: int = Field(0, description="Sum of token usage across the per-segment calls.")
    aggregation_tokens: int = Field(0, description="Token usage of the aggregation call (0 when skipped).")
    processing_time_ms: int = 0
