from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Runtime
    APP_ENV: str = "dev"

    # Hybrid context
    HYBRID_VECTOR_WEIGHT: float = 0.6
    HYBRID_FULL_DOC_WEIGHT: float = 0.3
    HYBRID_POSITION_WEIGHT: float = 0.1
    HYBRID_SUMMARY_BOOST: float = 1.5
    HYBRID_INCLUDE_SUMMARIES: bool = True
    HYBRID_DEDUPLICATE_BY_CONTENT: bool = True
    HYBRID_TOKEN_BUDGET: int = 8000  # 0 means unlimited

    # Retrieval
    VECTOR_TOP_K: int = 20
    VECTOR_MIN_SCORE: float = 0.5
    FULL_DOC_MAX_CHUNKS: int = 50

    # Multi-pass
    MULTIPASS_ENABLED: bool = False
    MULTIPASS_SEGMENT_SIZE: int = 8000
    MULTIPASS_OVERLAP_TOKENS: int = 500
    MULTIPASS_MAX_PASSES: int = 10
    MULTIPASS_MAX_CONCURRENCY: int = 1
    MULTIPASS_TIMEOUT_SECONDS: float | None = None

    # Model gateway
    LLM_MODEL: str = "openai/gpt-4o-mini"
    LLM_TEMPERATURE: float = 0.0
    LLM_MAX_TOKENS: int = 2000
