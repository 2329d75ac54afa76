"""Configuration settings for sign search."""

from pathlib import Path
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Provider selection
    ai_provider: Literal["gemini", "groq"] = "gemini"

    # Gemini API
    gemini_api_key: str = ""
    gemini_model: str = "gemini-2.5-flash"
    gemini_embedding_model: str = "text-embedding-004"

    # Gemini rate limiting
    gemini_daily_limit: int = 1500  # requests per day
    gemini_request_interval: float = 1.0  # seconds between requests

    # Groq API (text generation only, no embeddings)
    groq_api_key: str = ""
    groq_text_model: str = "openai/gpt-oss-120b"

    # Groq rate limiting
    groq_daily_limit: int = 14400
    groq_request_interval: float = 0.5

    # Timeout applied to every external call
    request_timeout_seconds: float = 30.0

    # Paths
    db_path: Path = Path("data/sign_search.db")

    # Search
    embedding_dimension: int = 768
    max_vector_distance: float = 0.7  # cosine distance cutoff, similarity >= 0.3
    default_search_limit: int = 20
    max_search_limit: int = 100
    rerank_candidate_multiplier: int = 2
    enhanced_candidate_multiplier: int = 3
    min_relevance_score: int = 7  # reranker scores are 1..10

    # Logging
    log_level: str = "INFO"

    @property
    def database_path(self) -> Path:
        """Get absolute database path."""
        return self.db_path.resolve()


settings = Settings()
