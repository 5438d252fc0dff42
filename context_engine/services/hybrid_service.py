import logging

from context_engine.core.config import Settings
from context_engine.core.text import TokenEstimator, estimate_tokens
from context_engine.rag.formatter import format_context_for_injection
from context_engine.rag.hybrid import HybridContextBuilder
from context_engine.rag.retriever import RetrievalProvider, fetch_hybrid_sources
from context_engine.schemas.config import HybridContextConfig, default_hybrid_config
from context_engine.schemas.results import ContextInjection, HybridContextResult

logger = logging.getLogger(__name__)
settings = Settings()


class HybridContextService:
    """
    Service for assembling a hybrid (vector + full-document) context for a query.
    """

    def __init__(
        self,
        provider: RetrievalProvider,
        config: HybridContextConfig | None = None,
        token_estimator: TokenEstimator = estimate_tokens,
    ):
        self.provider = provider
        self.config = config or default_hybrid_config(settings)
        self.token_estimator = token_estimator

    async def retrieve(self, query: str, config: HybridContextConfig | None = None) -> HybridContextResult:
        """
        Retrieve chunks from both sources and fit them into the token budget.

        Args:
            query: The user's query.
            config: Per-request override of the service config.

        Returns:
            A HybridContextResult with the selected chunks and their scores.
        """
        config = config or self.config

        logger.info(f"Building hybrid context for query: '{query[:50]}' with budget={config.token_budget}")

        vector_chunks, full_doc_chunks = await fetch_hybrid_sources(self.provider, query, config)

        result = HybridContextBuilder(config).build(vector_chunks, full_doc_chunks, self.token_estimator)

        logger.info(
            f"Hybrid context built: {len(result.chunks)} chunks, {result.total_tokens} tokens, "
            f"{result.duplicates_removed} duplicates removed"
        )
        return result

    def inject(self, result: HybridContextResult, max_tokens: int = 0) -> ContextInjection:
        """Format a hybrid result into a prompt-ready context block."""
        return format_context_for_injection(result.chunks, max_tokens, self.token_estimator, result.strategy)
