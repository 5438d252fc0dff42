"""Immutable configuration values for context assembly.

Configs are frozen pydantic models. Variants are derived with the pure
`with_*` helpers below, which validate and return a new config and never
touch the input.
"""

from pydantic import BaseModel, ConfigDict, Field, model_validator

from ..core.config import Settings


class PriorityTier(BaseModel):
    """A named score bracket with its own slice of the token budget."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1, description="Tier name, e.g. 'high_relevance'.")
    min_score: float = Field(0.0, description="Minimum combined score to qualify for this tier.")
    budget_percentage: float = Field(0.0, ge=0.0, description="Share of the global token budget (0..1).")
    max_tokens: int | None = Field(None, description="Hard cap for this tier; None or 0 means uncapped.")


class HybridContextConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    vector_weight: float = Field(0.6, allow_inf_nan=False)
    full_doc_weight: float = Field(0.3, allow_inf_nan=False)
    position_weight: float = Field(0.1, allow_inf_nan=False)
    summary_boost: float = Field(1.5, allow_inf_nan=False)
    include_summaries: bool = True
    deduplicate_by_content: bool = True
    token_budget: int = Field(8000, description="Global token budget; 0 or less means unlimited.")
    priority_tiers: tuple[PriorityTier, ...] = ()

    # Retrieval knobs, forwarded to the retrieval provider
    vector_top_k: int = Field(20, ge=1)
    vector_min_score: float = 0.5
    full_doc_max_chunks: int = Field(50, ge=0)


class MultiPassConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    enabled: bool = False
    segment_size: int = Field(8000, gt=0, description="Tokens per segment.")
    overlap_tokens: int = Field(500, ge=0, description="Tokens repeated between adjacent segments.")
    max_passes: int = Field(10, ge=1, description="Maximum number of segments processed.")
    aggregation_prompt: str = Field("", description="Custom instructions prepended to the aggregation prompt.")
    max_concurrency: int = Field(1, ge=1, description="Segment calls in flight at once; 1 is strictly sequential.")

    @model_validator(mode="after")
    def _check_overlap(self) -> "MultiPassConfig":
        if self.overlap_tokens >= self.segment_size:
            raise ValueError("overlap_tokens must be smaller than segment_size")
        return self


DEFAULT_PRIORITY_TIERS = (
    PriorityTier(name="high_relevance", min_score=0.8, budget_percentage=0.5),
    PriorityTier(name="medium_relevance", min_score=0.6, budget_percentage=0.3),
    PriorityTier(name="context", min_score=0.0, budget_percentage=0.2),
)


def default_hybrid_config(settings: Settings | None = None) -> HybridContextConfig:
    """Build the hybrid config from environment settings with the default tiers."""
    settings = settings or Settings()
    return HybridContextConfig(
        vector_weight=settings.HYBRID_VECTOR_WEIGHT,
        full_doc_weight=settings.HYBRID_FULL_DOC_WEIGHT,
        position_weight=settings.HYBRID_POSITION_WEIGHT,
        summary_boost=settings.HYBRID_SUMMARY_BOOST,
        include_summaries=settings.HYBRID_INCLUDE_SUMMARIES,
        deduplicate_by_content=settings.HYBRID_DEDUPLICATE_BY_CONTENT,
        token_budget=settings.HYBRID_TOKEN_BUDGET,
        priority_tiers=DEFAULT_PRIORITY_TIERS,
        vector_top_k=settings.VECTOR_TOP_K,
        vector_min_score=settings.VECTOR_MIN_SCORE,
        full_doc_max_chunks=settings.FULL_DOC_MAX_CHUNKS,
    )


def default_multipass_config(settings: Settings | None = None) -> MultiPassConfig:
    settings = settings or Settings()
    return MultiPassConfig(
        enabled=settings.MULTIPASS_ENABLED,
        segment_size=settings.MULTIPASS_SEGMENT_SIZE,
        overlap_tokens=settings.MULTIPASS_OVERLAP_TOKENS,
        max_passes=settings.MULTIPASS_MAX_PASSES,
        max_concurrency=settings.MULTIPASS_MAX_CONCURRENCY,
    )


def _revalidated(config: HybridContextConfig, **changes) -> HybridContextConfig:
    # model_copy skips validation, so rebuild the model from its fields
    return HybridContextConfig.model_validate({**dict(config), **changes})


def with_vector_weight(config: HybridContextConfig, weight: float) -> HybridContextConfig:
    return _revalidated(config, vector_weight=weight)


def with_full_doc_weight(config: HybridContextConfig, weight: float) -> HybridContextConfig:
    return _revalidated(config, full_doc_weight=weight)


def with_token_budget(config: HybridContextConfig, budget: int) -> HybridContextConfig:
    return _revalidated(config, token_budget=budget)
