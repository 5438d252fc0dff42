"""
Segmentation of a chunk stream into overlapping, token-bounded windows.

Each window becomes one pass of the multi-pass strategy. Adjacent windows
share a few trailing chunks so that content cut at a boundary is still seen
with its local context.
"""

import logging

from ..core.text import TokenEstimator, estimate_tokens
from ..schemas.chunk import RetrievedChunk
from ..schemas.results import Segment
from .formatter import SEGMENT_FOOTER, SEGMENT_HEADER, render_chunks

logger = logging.getLogger(__name__)

_Sized = tuple[RetrievedChunk, int]


def overlap_tail(window: list[_Sized], overlap_tokens: int) -> list[_Sized]:
    """
    Trailing chunks of a window whose token sum stays within `overlap_tokens`.

    Walks backward from the last chunk and stops at the first chunk that
    would exceed the overlap budget.

    Args:
        window: (chunk, tokens) pairs of the closed window
        overlap_tokens: Overlap budget in tokens

    Returns:
        The tail, in original order (empty when the budget is 0)
    """
    tail: list[_Sized] = []
    tokens = 0

    for sized in reversed(window):
        if tokens + sized[1] > overlap_tokens:
            break
        tail.append(sized)
        tokens += sized[1]

    tail.reverse()
    return tail


def build_segment(index: int, window: list[_Sized], overlap_chunks: int = 0) -> Segment:
    """Render one window into a Segment."""
    chunks = [chunk for chunk, _ in window]
    formatted, document_count = render_chunks(chunks, SEGMENT_HEADER, SEGMENT_FOOTER)
    return Segment(
        index=index,
        chunks=chunks,
        formatted_text=formatted,
        chunk_count=len(chunks),
        document_count=document_count,
        total_tokens=sum(tokens for _, tokens in window),
        overlap_chunks=overlap_chunks,
    )


def segment_chunks(
    chunks: list[RetrievedChunk],
    segment_size: int,
    overlap_tokens: int,
    token_estimator: TokenEstimator = estimate_tokens,
    max_passes: int | None = None,
) -> list[Segment]:
    """
    Split an ordered chunk stream into overlapping segments.

    Chunks are accumulated while the running total stays within
    `segment_size`. When the next chunk does not fit, the segment is closed and
    the next one is seeded with the closed segment's overlap tail. If the tail
    plus the incoming chunk would still not fit, the oldest tail chunks are
    dropped. A single chunk larger than `segment_size` gets a segment of its own.

    Args:
        chunks: Chunks in retrieval order (not re-ranked)
        segment_size: Token ceiling per segment
        overlap_tokens: Token budget for chunks repeated across a boundary
        token_estimator: Function mapping text to an estimated token count
        max_passes: Keep at most this many segments; extra segments are dropped

    Returns:
        Segments in document order
    """
    if segment_size <= 0:
        raise ValueError("segment_size must be positive")
    if overlap_tokens >= segment_size:
        raise ValueError("overlap_tokens must be smaller than segment_size")

    segments: list[Segment] = []
    window: list[_Sized] = []
    window_tokens = 0
    window_overlap = 0

    for chunk in chunks:
        chunk_tokens = token_estimator(chunk.content)

        if window and window_tokens + chunk_tokens > segment_size:
            segments.append(build_segment(len(segments), window, window_overlap))

            tail = overlap_tail(window, overlap_tokens)
            tail_tokens = sum(tokens for _, tokens in tail)
            while tail and tail_tokens + chunk_tokens > segment_size:
                tail_tokens -= tail.pop(0)[1]

            window = tail
            window_tokens = tail_tokens
            window_overlap = len(tail)

        window.append((chunk, chunk_tokens))
        window_tokens += chunk_tokens

    if window:
        segments.append(build_segment(len(segments), window, window_overlap))

    if max_passes is not None and len(segments) > max_passes:
        logger.warning(f"Document stream produced {len(segments)} segments, processing only the first {max_passes}")
        segments = segments[:max_passes]

    logger.debug(f"Segmented {len(chunks)} chunks into {len(segments)} segments")
    return segments
