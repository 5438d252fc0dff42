"""Token budget allocation across priority tiers."""

import logging
from collections import defaultdict
from collections.abc import Sequence

from ..schemas.chunk import ScoredChunk
from ..schemas.config import PriorityTier

logger = logging.getLogger(__name__)


def tier_budget(tier: PriorityTier, token_budget: int) -> int:
    """Tokens reserved for a tier: its share of the global budget, capped by `max_tokens` when set."""
    budget = int(token_budget * tier.budget_percentage)
    if tier.max_tokens and budget > tier.max_tokens:
        budget = tier.max_tokens
    return budget


def tier_usage(chunks: Sequence[ScoredChunk]) -> dict[str, int]:
    """Estimated tokens per priority tier."""
    usage: dict[str, int] = defaultdict(int)
    for chunk in chunks:
        usage[chunk.priority_tier] += chunk.estimated_tokens
    return dict(usage)


def fit_to_token_budget(
    chunks: list[ScoredChunk], tiers: Sequence[PriorityTier], token_budget: int
) -> tuple[list[ScoredChunk], dict[str, int]]:
    """
    Select the chunks that fit the global token budget, honoring tier sub-budgets.

    Tiers are served in their declared order. Within a tier chunks are admitted
    greedily in their existing (score) order; a chunk that does not fit is
    skipped, never reordered. Whatever the tiers leave unused is then offered
    to every unselected chunk in score order, first-fit. This is a greedy
    approximation and does not search for the optimal packing.

    Args:
        chunks: Tiered chunks sorted by combined score (highest first)
        tiers: Priority tiers in declared order
        token_budget: Global budget; 0 or less means unlimited

    Returns:
        Tuple of (selected chunks sorted by combined score, tokens used per tier)
    """
    if token_budget <= 0:
        return list(chunks), tier_usage(chunks)

    by_tier: dict[str, list[int]] = defaultdict(list)
    for idx, chunk in enumerate(chunks):
        by_tier[chunk.priority_tier].append(idx)

    selected: list[int] = []
    selected_set: set[int] = set()
    breakdown: dict[str, int] = {}
    remaining = token_budget

    # First pass: each tier spends at most its own slice
    for tier in tiers:
        budget = min(tier_budget(tier, token_budget), remaining)
        used = 0
        for idx in by_tier.get(tier.name, []):
            if idx in selected_set:
                continue
            cost = chunks[idx].estimated_tokens
            if used + cost <= budget:
                selected.append(idx)
                selected_set.add(idx)
                used += cost
        breakdown[tier.name] = breakdown.get(tier.name, 0) + used
        remaining -= used

    # Second pass: hand the leftover budget to any chunk that still fits
    if remaining > 0:
        for idx, chunk in enumerate(chunks):
            if idx in selected_set:
                continue
            if chunk.estimated_tokens <= remaining:
                selected.append(idx)
                selected_set.add(idx)
                remaining -= chunk.estimated_tokens
                breakdown[chunk.priority_tier] = breakdown.get(chunk.priority_tier, 0) + chunk.estimated_tokens

    result = sorted((chunks[idx] for idx in selected), key=lambda sc: sc.combined_score, reverse=True)

    logger.debug(f"Selected {len(result)} of {len(chunks)} chunks within a budget of {token_budget} tokens")
    return result, breakdown
