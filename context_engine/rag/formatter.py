"""Rendering of chunk lists into prompt-ready text blocks."""

from collections.abc import Sequence

from ..core.text import TokenEstimator, estimate_tokens
from ..schemas.chunk import RetrievedChunk
from ..schemas.results import STRATEGY_NONE, ContextInjection

CONTEXT_HEADER = "\n--- RELEVANT CONTEXT ---\n\n"
CONTEXT_FOOTER = "\n--- END CONTEXT ---\n"
SEGMENT_HEADER = "\n--- DOCUMENT SEGMENT ---\n\n"
SEGMENT_FOOTER = "\n--- END SEGMENT ---\n"


def render_chunks(chunks: Sequence[RetrievedChunk], header: str, footer: str) -> tuple[str, int]:
    """
    Render chunks between start/end markers.

    A `--- Document: <name> ---` line is written whenever the document id
    changes, using the document name when the provider supplied one.

    Returns:
        Tuple of (rendered text, number of distinct documents)
    """
    parts = [header]
    documents: set[str] = set()
    current_doc = ""

    for chunk in chunks:
        if chunk.document_id and chunk.document_id != current_doc:
            if current_doc:
                parts.append("\n")
            parts.append(f"--- Document: {chunk.document_name or chunk.document_id} ---\n")
            current_doc = chunk.document_id
            documents.add(chunk.document_id)

        parts.append(chunk.content)
        parts.append("\n")

    parts.append(footer)
    return "".join(parts), len(documents)


def format_context_for_injection(
    chunks: Sequence[RetrievedChunk],
    max_tokens: int = 0,
    token_estimator: TokenEstimator = estimate_tokens,
    strategy: str = STRATEGY_NONE,
) -> ContextInjection:
    """
    Format chunks into a context block ready for prompt injection.

    Chunks are taken in order until the next one would push the estimate past
    `max_tokens`; everything after that point is dropped and the result is
    marked truncated.

    Args:
        chunks: Chunks in presentation order
        max_tokens: Token ceiling for the block; 0 means unlimited
        token_estimator: Function mapping text to an estimated token count
        strategy: Retrieval strategy label carried into the result

    Returns:
        ContextInjection with the formatted text and counts
    """
    if not chunks:
        return ContextInjection(formatted_context="", strategy=STRATEGY_NONE)

    current_tokens = token_estimator(CONTEXT_HEADER)
    included: list[RetrievedChunk] = []
    truncated = False

    for chunk in chunks:
        chunk_tokens = token_estimator(chunk.content)
        if max_tokens > 0 and current_tokens + chunk_tokens > max_tokens:
            truncated = True
            break
        included.append(chunk)
        current_tokens += chunk_tokens

    formatted, document_count = render_chunks(included, CONTEXT_HEADER, CONTEXT_FOOTER)

    return ContextInjection(
        formatted_context=formatted,
        chunk_count=len(included),
        document_count=document_count,
        total_tokens=token_estimator(formatted),
        strategy=strategy,
        truncated=truncated,
        metadata={
            "original_chunk_count": len(chunks),
            "truncated_count": len(chunks) - len(included),
        },
    )
