"""Hybrid chunk scoring across vector-search and full-document sources."""

import logging

from ..core.text import TokenEstimator
from ..schemas.chunk import ChunkKey, ChunkSource, RetrievedChunk, ScoredChunk
from ..schemas.config import HybridContextConfig

logger = logging.getLogger(__name__)

# Assumed document length when the provider does not report one
DEFAULT_TOTAL_CHUNKS = 100

SUMMARY_CHUNK_TYPES = frozenset({"summary", "abstract", "introduction"})


def position_score(chunk_number: int, total_chunks: int) -> float:
    """
    Score a chunk by its position in the document; earlier chunks score higher.

    Args:
        chunk_number: Position of the chunk in its document
        total_chunks: Number of chunks in the document (<= 0 if unknown)

    Returns:
        1.0 for the first chunk, decreasing linearly towards 0.0 for the last
    """
    if total_chunks <= 0:
        total_chunks = DEFAULT_TOTAL_CHUNKS
    return 1.0 - chunk_number / total_chunks


def full_doc_score(chunk: RetrievedChunk) -> float:
    """
    Heuristic relevance of a chunk that came from full-document retrieval.

    Opening chunks and chunks flagged as headers or summaries are likely to
    carry the gist of the document, so they get a bump over the 0.5 base.
    """
    score = 0.5

    if chunk.chunk_number <= 2:
        score += 0.3

    metadata = chunk.metadata or {}
    if metadata.get("is_header") is True:
        score += 0.2
    if metadata.get("is_summary") is True:
        score += 0.3

    return score


def summary_boost(chunk: RetrievedChunk, config: HybridContextConfig) -> float:
    """Multiplier applied to chunks that summarize their document."""
    if not config.include_summaries:
        return 1.0

    metadata = chunk.metadata or {}
    if metadata.get("is_summary") is True:
        return config.summary_boost
    if metadata.get("chunk_type") in SUMMARY_CHUNK_TYPES:
        return config.summary_boost

    return 1.0


def combined_score(scored: ScoredChunk, config: HybridContextConfig) -> float:
    """Weighted sum of the per-source contributions, times the summary boost."""
    score = (
        scored.vector_score * config.vector_weight
        + scored.full_doc_score * config.full_doc_weight
        + scored.position_score * config.position_weight
    )
    return score * scored.summary_boost


def _score_vector_chunk(
    chunk: RetrievedChunk, token_estimator: TokenEstimator, config: HybridContextConfig
) -> ScoredChunk:
    scored = ScoredChunk(
        chunk=chunk,
        vector_score=chunk.score,
        full_doc_score=0.0,
        position_score=position_score(chunk.chunk_number, chunk.total_chunks),
        summary_boost=summary_boost(chunk, config),
        source=ChunkSource.VECTOR,
        estimated_tokens=token_estimator(chunk.content),
    )
    return scored._replace(combined_score=combined_score(scored, config))


def _score_full_doc_chunk(
    chunk: RetrievedChunk, token_estimator: TokenEstimator, config: HybridContextConfig
) -> ScoredChunk:
    scored = ScoredChunk(
        chunk=chunk,
        vector_score=0.0,
        full_doc_score=full_doc_score(chunk),
        position_score=position_score(chunk.chunk_number, chunk.total_chunks),
        summary_boost=summary_boost(chunk, config),
        source=ChunkSource.FULL_DOC,
        estimated_tokens=token_estimator(chunk.content),
    )
    return scored._replace(combined_score=combined_score(scored, config))


def _merge_full_doc_chunk(
    existing: ScoredChunk, chunk: RetrievedChunk, token_estimator: TokenEstimator, config: HybridContextConfig
) -> ScoredChunk:
    # The full-document occurrence is merged second, so its payload wins.
    # The vector contribution of the first occurrence is kept as-is.
    merged = existing._replace(
        chunk=chunk,
        full_doc_score=full_doc_score(chunk),
        position_score=position_score(chunk.chunk_number, chunk.total_chunks),
        summary_boost=summary_boost(chunk, config),
        source=ChunkSource.BOTH,
        estimated_tokens=token_estimator(chunk.content),
    )
    return merged._replace(combined_score=combined_score(merged, config))


def score_chunks(
    vector_chunks: list[RetrievedChunk],
    full_doc_chunks: list[RetrievedChunk],
    token_estimator: TokenEstimator,
    config: HybridContextConfig,
) -> list[ScoredChunk]:
    """
    Score and merge chunks from both retrieval sources.

    Chunks are merged on their key: the explicit id when set, otherwise
    `(document_id, chunk_number)`. A key present in both lists yields one
    ScoredChunk tagged `both` that carries the vector score of the vector
    occurrence and the full-document score of the full-document occurrence;
    content and metadata come from the full-document occurrence.

    Args:
        vector_chunks: Chunks returned by vector search
        full_doc_chunks: Chunks returned by full-document retrieval
        token_estimator: Function mapping text to an estimated token count
        config: Weights and boosts to apply

    Returns:
        Scored chunks sorted by combined score (highest first); ties keep
        first-seen order
    """
    scored_by_key: dict[ChunkKey, ScoredChunk] = {}

    for chunk in vector_chunks:
        scored_by_key[chunk.key] = _score_vector_chunk(chunk, token_estimator, config)

    for chunk in full_doc_chunks:
        existing = scored_by_key.get(chunk.key)
        if existing is not None and existing.source in (ChunkSource.VECTOR, ChunkSource.BOTH):
            scored_by_key[chunk.key] = _merge_full_doc_chunk(existing, chunk, token_estimator, config)
        else:
            scored_by_key[chunk.key] = _score_full_doc_chunk(chunk, token_estimator, config)

    scored = sorted(scored_by_key.values(), key=lambda sc: sc.combined_score, reverse=True)

    logger.debug(
        f"Scored {len(scored)} chunks from {len(vector_chunks)} vector and {len(full_doc_chunks)} full-doc inputs"
    )
    return scored
