from .chunk import ChunkKey, ChunkSource, RetrievedChunk, ScoredChunk
from .config import HybridContextConfig, MultiPassConfig, PriorityTier
from .messages import Message, ModelResponse
from .results import ContextInjection, HybridContextResult, MultiPassResult, Segment, SegmentResult

__all__ = [
    "ChunkKey",
    "ChunkSource",
    "RetrievedChunk",
    "ScoredChunk",
    "HybridContextConfig",
    "MultiPassConfig",
    "PriorityTier",
    "Message",
    "ModelResponse",
    "ContextInjection",
    "HybridContextResult",
    "MultiPassResult",
    "Segment",
    "SegmentResult",
]
