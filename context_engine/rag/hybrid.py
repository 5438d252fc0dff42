"""Hybrid context assembly: score, deduplicate, tier and budget retrieved chunks.

The pipeline is pure and synchronous. A builder holds only its immutable
config, so one instance can serve concurrent requests.
"""

import logging
import time

from ..core.text import TokenEstimator, estimate_tokens
from ..schemas.chunk import ChunkSource, RetrievedChunk
from ..schemas.config import (
    HybridContextConfig,
    default_hybrid_config,
    with_full_doc_weight,
    with_token_budget,
    with_vector_weight,
)
from ..schemas.results import STRATEGY_HYBRID, HybridContextResult
from .budget import fit_to_token_budget
from .deduplicator import deduplicate_by_content
from .scorer import score_chunks
from .tiers import assign_priority_tiers

logger = logging.getLogger(__name__)


class HybridContextBuilder:
    """Combines vector-search and full-document chunks into one budgeted context."""

    def __init__(self, config: HybridContextConfig | None = None):
        self.config = config or default_hybrid_config()

    def build(
        self,
        vector_chunks: list[RetrievedChunk],
        full_doc_chunks: list[RetrievedChunk],
        token_estimator: TokenEstimator = estimate_tokens,
    ) -> HybridContextResult:
        """
        Rank and fit retrieved chunks into the configured token budget.

        Args:
            vector_chunks: Chunks from vector search, with similarity scores
            full_doc_chunks: Chunks from full-document retrieval
            token_estimator: Function mapping text to an estimated token count

        Returns:
            HybridContextResult with the selected chunks in descending score order
        """
        start = time.perf_counter()
        config = self.config

        scored = score_chunks(vector_chunks, full_doc_chunks, token_estimator, config)

        duplicates_removed = 0
        if config.deduplicate_by_content:
            scored, duplicates_removed = deduplicate_by_content(scored)

        scored = assign_priority_tiers(scored, config.priority_tiers)
        selected, tier_breakdown = fit_to_token_budget(scored, config.priority_tiers, config.token_budget)

        chunks = []
        total_tokens = 0
        vector_count = 0
        full_doc_count = 0
        for sc in selected:
            chunks.append(sc.chunk.model_copy(update={"score": sc.combined_score}))
            total_tokens += sc.estimated_tokens
            if sc.source in (ChunkSource.VECTOR, ChunkSource.BOTH):
                vector_count += 1
            if sc.source in (ChunkSource.FULL_DOC, ChunkSource.BOTH):
                full_doc_count += 1

        elapsed_ms = int((time.perf_counter() - start) * 1000)

        logger.debug(
            f"Hybrid context: {len(selected)} chunks, {total_tokens} tokens, "
            f"{duplicates_removed} duplicates removed in {elapsed_ms}ms"
        )

        return HybridContextResult(
            chunks=chunks,
            scored_chunks=selected,
            total_tokens=total_tokens,
            vector_chunk_count=vector_count,
            full_doc_chunk_count=full_doc_count,
            duplicates_removed=duplicates_removed,
            tier_breakdown=tier_breakdown,
            config=config,
            strategy=STRATEGY_HYBRID,
            retrieval_time_ms=elapsed_ms,
            metadata={
                "vector_weight": config.vector_weight,
                "full_doc_weight": config.full_doc_weight,
                "position_weight": config.position_weight,
                "summary_boost": config.summary_boost,
                "token_budget": config.token_budget,
                "original_vector": len(vector_chunks),
                "original_full_doc": len(full_doc_chunks),
            },
        )

    def with_vector_weight(self, weight: float) -> "HybridContextBuilder":
        return HybridContextBuilder(with_vector_weight(self.config, weight))

    def with_full_doc_weight(self, weight: float) -> "HybridContextBuilder":
        return HybridContextBuilder(with_full_doc_weight(self.config, weight))

    def with_token_budget(self, budget: int) -> "HybridContextBuilder":
        return HybridContextBuilder(with_token_budget(self.config, budget))
