"""LangGraph orchestration for the multi-pass strategy.

This module implements the stateful graph that drives multi-pass processing:
segment → extract → aggregate (or single, when only one segment exists).
Collaborators (model gateway, token estimator) and the config travel in the
graph state, so a compiled graph holds no per-request data.
"""

import logging
from collections.abc import Sequence
from typing import TypedDict

from langgraph.graph import END, StateGraph

from ..core.text import TokenEstimator, estimate_tokens
from ..schemas.chunk import RetrievedChunk
from ..schemas.config import MultiPassConfig
from ..schemas.results import Segment, SegmentResult
from .gateway import ModelGateway
from .passes import aggregate_results, run_segment_passes
from .segmenter import segment_chunks

logger = logging.getLogger(__name__)


class MultiPassState(TypedDict, total=False):
    """State dictionary that flows through the LangGraph nodes."""

    # Input
    user_input: str
    chunks: Sequence[RetrievedChunk]
    config: MultiPassConfig
    gateway: ModelGateway
    token_estimator: TokenEstimator
    system_prompt: str | None

    # Intermediate state
    segments: list[Segment]
    segment_results: list[SegmentResult]
    segment_tokens: int

    # Output
    final_answer: str
    aggregation_tokens: int


def segment_node(state: MultiPassState) -> MultiPassState:
    """
    Split the chunk stream into overlapping segments.

    Raises:
        ValueError: If there is nothing to process
    """
    config = state["config"]

    segments = segment_chunks(
        list(state.get("chunks", [])),
        config.segment_size,
        config.overlap_tokens,
        state.get("token_estimator", estimate_tokens),
        max_passes=config.max_passes,
    )

    if not segments:
        raise ValueError("No document segments to process.")

    return {**state, "segments": segments}


async def extract_node(state: MultiPassState) -> MultiPassState:
    """Run one model pass per segment."""
    config = state["config"]

    results = await run_segment_passes(
        state["gateway"],
        state["segments"],
        state["user_input"],
        system_prompt=state.get("system_prompt"),
        max_concurrency=config.max_concurrency,
    )

    segment_tokens = sum(result.tokens_used for result in results)
    logger.debug(f"Processed {len(results)} segments using {segment_tokens} tokens")

    return {**state, "segment_results": results, "segment_tokens": segment_tokens}


def route_after_extract(state: MultiPassState) -> str:
    """Aggregate only when more than one segment was processed."""
    return "aggregate" if len(state.get("segment_results", [])) > 1 else "single"


async def aggregate_node(state: MultiPassState) -> MultiPassState:
    """Synthesize the partial results with one more model call."""
    config = state["config"]

    response = await aggregate_results(
        state["gateway"],
        state["segment_results"],
        state["user_input"],
        aggregation_prompt=config.aggregation_prompt or None,
    )

    return {**state, "final_answer": response.content, "aggregation_tokens": response.token_usage}


def single_node(state: MultiPassState) -> MultiPassState:
    """With a single segment its partial result is the answer, verbatim."""
    results = state["segment_results"]
    return {**state, "final_answer": results[0].partial_result, "aggregation_tokens": 0}


def build_multipass_graph():
    """
    Build and compile the LangGraph for multi-pass processing.

    Returns:
        Compiled LangGraph instance ready for execution
    """
    graph = StateGraph(MultiPassState)

    graph.add_node("segment", segment_node)
    graph.add_node("extract", extract_node)
    graph.add_node("aggregate", aggregate_node)
    graph.add_node("single", single_node)

    graph.set_entry_point("segment")

    graph.add_edge("segment", "extract")
    graph.add_conditional_edges("extract", route_after_extract, {"aggregate": "aggregate", "single": "single"})
    graph.add_edge("aggregate", END)
    graph.add_edge("single", END)

    compiled_graph = graph.compile()

    logger.info("Multi-pass graph compiled successfully")

    return compiled_graph
