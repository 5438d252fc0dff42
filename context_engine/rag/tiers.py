"""Priority tier assignment for scored chunks."""

from collections.abc import Sequence

from ..schemas.chunk import ScoredChunk
from ..schemas.config import PriorityTier

DEFAULT_TIER = "default"


def sort_tiers(tiers: Sequence[PriorityTier]) -> list[PriorityTier]:
    """Tiers ordered by descending minimum score, so the highest bracket matches first."""
    return sorted(tiers, key=lambda tier: tier.min_score, reverse=True)


def tier_for_score(score: float, sorted_tiers: Sequence[PriorityTier]) -> str:
    """
    Name of the first tier whose minimum score the given score meets.

    Args:
        score: Combined score of a chunk
        sorted_tiers: Tiers as returned by `sort_tiers`

    Returns:
        Matching tier name; the lowest tier when none matches, or
        `default` when no tiers are configured
    """
    if not sorted_tiers:
        return DEFAULT_TIER

    for tier in sorted_tiers:
        if score >= tier.min_score:
            return tier.name

    return sorted_tiers[-1].name


def assign_priority_tiers(chunks: list[ScoredChunk], tiers: Sequence[PriorityTier]) -> list[ScoredChunk]:
    """Return copies of the chunks with `priority_tier` set, order preserved."""
    sorted_tiers = sort_tiers(tiers)
    return [chunk._replace(priority_tier=tier_for_score(chunk.combined_score, sorted_tiers)) for chunk in chunks]
