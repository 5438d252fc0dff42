"""Per-segment model passes and the final aggregation call."""

import logging
import time
from collections.abc import Sequence

import anyio

from ..schemas.messages import Message, ModelResponse
from ..schemas.results import Segment, SegmentResult
from .gateway import ModelGateway
from .prompts import (
    AGGREGATION_SYSTEM_PROMPT,
    build_aggregation_prompt,
    build_extraction_prompt,
    build_segment_system_prompt,
)

logger = logging.getLogger(__name__)


async def run_segment_pass(
    gateway: ModelGateway, segment: Segment, user_input: str, system_prompt: str, total_segments: int
) -> SegmentResult:
    """
    Run one model call over a segment.

    Any gateway error is re-raised as-is with a note naming the segment.
    """
    segment_number = segment.index + 1
    started = time.perf_counter()

    messages = [
        Message(role="system", content=system_prompt),
        Message(
            role="user",
            content=build_extraction_prompt(segment.formatted_text, user_input, segment_number, total_segments),
        ),
    ]

    try:
        response = await gateway.complete(messages)
    except Exception as e:
        logger.error(f"Failed to process segment {segment_number} of {total_segments}: {e}")
        e.add_note(f"multi-pass phase: segment {segment_number} of {total_segments}")
        raise

    return SegmentResult(
        segment_number=segment_number,
        content=segment.formatted_text,
        partial_result=response.content,
        tokens_used=response.token_usage,
        processing_time_ms=int((time.perf_counter() - started) * 1000),
    )


async def run_segment_passes(
    gateway: ModelGateway,
    segments: Sequence[Segment],
    user_input: str,
    system_prompt: str | None = None,
    max_concurrency: int = 1,
) -> list[SegmentResult]:
    """
    Process every segment with one model call each.

    With `max_concurrency` 1 the calls run strictly one after another. With a
    higher value up to that many calls are in flight at once. Either way the
    results come back in segment order, and the first failure cancels the
    outstanding calls and is raised with no partial results.

    Args:
        gateway: Model gateway
        segments: Segments in document order
        user_input: The original user request
        system_prompt: Caller's system prompt, prepended to the segment instructions
        max_concurrency: Upper bound on concurrent segment calls

    Returns:
        One SegmentResult per segment, in segment order
    """
    total = len(segments)
    system = build_segment_system_prompt(system_prompt)

    if max_concurrency <= 1:
        return [await run_segment_pass(gateway, segment, user_input, system, total) for segment in segments]

    results: list[SegmentResult | None] = [None] * total
    failures: list[Exception] = []
    limiter = anyio.CapacityLimiter(max_concurrency)

    async with anyio.create_task_group() as tg:

        async def worker(position: int, segment: Segment) -> None:
            async with limiter:
                try:
                    results[position] = await run_segment_pass(gateway, segment, user_input, system, total)
                except Exception as e:
                    failures.append(e)
                    tg.cancel_scope.cancel()

        for position, segment in enumerate(segments):
            tg.start_soon(worker, position, segment)

    if failures:
        raise failures[0]

    return results


async def aggregate_results(
    gateway: ModelGateway,
    results: Sequence[SegmentResult],
    user_input: str,
    aggregation_prompt: str | None = None,
) -> ModelResponse:
    """
    Synthesize the per-segment findings into one answer with a single model call.

    Gateway errors are re-raised as-is with a note naming the aggregation phase.
    """
    messages = [
        Message(role="system", content=AGGREGATION_SYSTEM_PROMPT),
        Message(role="user", content=build_aggregation_prompt(results, user_input, aggregation_prompt)),
    ]

    try:
        return await gateway.complete(messages)
    except Exception as e:
        logger.error(f"Aggregation request failed: {e}")
        e.add_note("multi-pass phase: aggregation")
        raise
