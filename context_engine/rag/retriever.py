"""Two-source retrieval: vector search plus full-document chunks."""

import logging
from collections.abc import Awaitable, Callable
from functools import partial
from typing import Protocol, TypeVar

import anyio

from ..schemas.chunk import RetrievedChunk
from ..schemas.config import HybridContextConfig

logger = logging.getLogger(__name__)

T = TypeVar("T")

VECTOR_PHASE = "vector search"
FULL_DOC_PHASE = "full document retrieval"


class RetrievalProvider(Protocol):
    """Backend that supplies chunks for context assembly."""

    async def vector_search(self, query: str, *, top_k: int, min_score: float) -> list[RetrievedChunk]:
        """Chunks most similar to the query, each carrying its similarity score."""
        ...

    async def full_documents(self, *, limit: int) -> list[RetrievedChunk]:
        """Chunks of the selected documents in document order; `limit` 0 means no limit."""
        ...


async def _in_phase(phase: str, call: Awaitable[T]) -> T:
    try:
        return await call
    except Exception as e:
        logger.error(f"{phase} failed: {e}")
        e.add_note(f"context assembly phase: {phase}")
        raise


async def fetch_hybrid_sources(
    provider: RetrievalProvider, query: str, config: HybridContextConfig
) -> tuple[list[RetrievedChunk], list[RetrievedChunk]]:
    """
    Fetch vector-search and full-document chunks for one request.

    Both sources are queried in parallel. The first failure cancels the other
    request and propagates unchanged, annotated with the phase that failed.

    Args:
        provider: Retrieval backend
        query: The user's query
        config: Supplies top-k, minimum score and full-document chunk limit

    Returns:
        Tuple of (vector chunks, full-document chunks)
    """
    fetched: dict[str, list[RetrievedChunk]] = {}
    failures: list[Exception] = []

    async with anyio.create_task_group() as tg:

        async def fetch(phase: str, call: Callable[[], Awaitable[list[RetrievedChunk]]]) -> None:
            try:
                fetched[phase] = await _in_phase(phase, call())
            except Exception as e:
                failures.append(e)
                tg.cancel_scope.cancel()

        tg.start_soon(
            fetch,
            VECTOR_PHASE,
            partial(provider.vector_search, query, top_k=config.vector_top_k, min_score=config.vector_min_score),
        )
        tg.start_soon(fetch, FULL_DOC_PHASE, partial(provider.full_documents, limit=config.full_doc_max_chunks))

    if failures:
        raise failures[0]

    vector_chunks, full_doc_chunks = fetched[VECTOR_PHASE], fetched[FULL_DOC_PHASE]
    logger.debug(f"Retrieved {len(vector_chunks)} vector chunks and {len(full_doc_chunks)} full-doc chunks")
    return vector_chunks, full_doc_chunks
