"""Content-hash deduplication of scored chunks."""

import logging

from ..core.hashing import content_hash
from ..schemas.chunk import ScoredChunk

logger = logging.getLogger(__name__)


def deduplicate_by_content(chunks: list[ScoredChunk]) -> tuple[list[ScoredChunk], int]:
    """
    Collapse chunks whose content is identical, keeping the best-scored one.

    Args:
        chunks: Scored chunks, in the order they should be considered

    Returns:
        Tuple of (surviving chunks in first-seen group order, number removed).
        Within a group a later chunk replaces the survivor only when its
        combined score is strictly higher.
    """
    index_by_hash: dict[str, int] = {}
    survivors: list[ScoredChunk] = []
    removed = 0

    for chunk in chunks:
        digest = content_hash(chunk.chunk.content)
        existing_idx = index_by_hash.get(digest)

        if existing_idx is None:
            index_by_hash[digest] = len(survivors)
            survivors.append(chunk)
            continue

        if chunk.combined_score > survivors[existing_idx].combined_score:
            survivors[existing_idx] = chunk
        removed += 1

    if removed:
        logger.debug(f"Removed {removed} duplicate chunks by content hash")

    return survivors, removed
