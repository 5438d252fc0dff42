import logging
import time

import anyio

from context_engine.core.config import Settings
from context_engine.core.text import TokenEstimator, estimate_tokens, normalize
from context_engine.rag.gateway import ModelGateway
from context_engine.rag.graph import build_multipass_graph
from context_engine.schemas.chunk import RetrievedChunk
from context_engine.schemas.config import MultiPassConfig, default_multipass_config
from context_engine.schemas.results import MultiPassResult

logger = logging.getLogger(__name__)
settings = Settings()


class MultiPassService:
    """
    Service for processing an oversized document stream in multiple model passes,
    orchestrated by LangGraph.
    """

    def __init__(
        self,
        gateway: ModelGateway,
        config: MultiPassConfig | None = None,
        token_estimator: TokenEstimator = estimate_tokens,
    ):
        self.gateway = gateway
        self.config = config or default_multipass_config(settings)
        self.token_estimator = token_estimator
        self.compiled_graph = build_multipass_graph()

    async def execute(
        self,
        chunks: list[RetrievedChunk],
        user_input: str,
        config: MultiPassConfig | None = None,
        system_prompt: str | None = None,
        timeout: float | None = None,
    ) -> MultiPassResult:
        """
        Answer a request over a chunk stream too large for one prompt.

        Args:
            chunks: Chunks in retrieval order.
            user_input: The user's question or task.
            config: Per-request override of the service config.
            system_prompt: Caller's system prompt, prepended to the segment instructions.
            timeout: Deadline in seconds for the whole operation. Defaults to
                settings.MULTIPASS_TIMEOUT_SECONDS (no deadline when unset).

        Returns:
            A MultiPassResult with per-segment results and the final answer.

        Raises:
            ValueError: If multi-pass is disabled, the request is empty, or there is nothing to process.
            TimeoutError: If the deadline passes before the final answer is ready.
        """
        config = config or self.config
        if not config.enabled:
            raise ValueError("Multi-pass execution is not enabled.")
        if not normalize(user_input):
            raise ValueError("User request cannot be empty.")

        timeout = timeout if timeout is not None else settings.MULTIPASS_TIMEOUT_SECONDS
        started = time.perf_counter()

        logger.info(
            f"Starting multi-pass over {len(chunks)} chunks with segment_size={config.segment_size}, "
            f"overlap={config.overlap_tokens}, max_passes={config.max_passes}"
        )

        initial_state = {
            "user_input": user_input,
            "chunks": chunks,
            "config": config,
            "gateway": self.gateway,
            "token_estimator": self.token_estimator,
            "system_prompt": system_prompt,
        }

        with anyio.fail_after(timeout):
            final_state = await self.compiled_graph.ainvoke(initial_state)

        segment_results = final_state["segment_results"]
        result = MultiPassResult(
            segments=segment_results,
            aggregated_result=final_state["final_answer"],
            total_passes=len(segment_results),
            total_tokens=final_state.get("segment_tokens", 0),
            aggregation_tokens=final_state.get("aggregation_tokens", 0),
            processing_time_ms=int((time.perf_counter() - started) * 1000),
        )

        logger.info(
            f"Multi-pass finished: {result.total_passes} passes, {result.total_tokens} tokens "
            f"in {result.processing_time_ms}ms"
        )
        return result
