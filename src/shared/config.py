"""Application configuration loaded from environment variables."""

from functools import lru_cache
from typing import Literal

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Environment
    environment: Literal["development", "staging", "production"] = "development"
    log_level: str = "INFO"

    # Anthropic (absent key means every AI call takes the fallback path)
    anthropic_api_key: str | None = None
    default_model: str = "claude-3-5-sonnet-20241022"

    # AI call settings
    ai_timeout_seconds: float = 30.0
    insight_max_tokens: int = 800
    insight_temperature: float = 0.7
    assessment_max_tokens: int = 2000
    assessment_temperature: float = 0.6

    # AI rate limiting (fixed window)
    ai_rate_limit_requests: int = 100
    ai_rate_limit_window_ms: int = 900_000  # 15 minutes

    # Retry policy
    retry_max_retries: int = 3
    retry_base_delay_ms: int = 1000
    retry_backoff_multiplier: float = 2.0

    # Circuit breaker
    circuit_failure_threshold: int = 5
    circuit_recovery_timeout_seconds: float = 60.0
    circuit_success_threshold: int = 3

    # Assessment shape
    total_questions: int = 12
    insight_batch_boundaries: list[int] = [4, 9, 12]

    # Session lifecycle
    session_retention_seconds: int = 3600  # Keep completed sessions for 1 hour
    session_cleanup_interval_minutes: int = 15

    # Persistence
    persistence_timeout_seconds: float = 10.0
    supabase_url: str | None = None
    supabase_key: str | None = None

    # API Settings
    api_host: str = "0.0.0.0"
    api_port: int = 8000

    # CORS Settings
    # In production, set CORS_ORIGINS to a comma-separated list of allowed origins
    cors_origins: str = ""

    # Feature Flags (can also be set via FF_* env vars)
    ff_enable_ai_insights: bool = True
    ff_use_supabase_persistence: bool = False
    ff_enable_background_jobs: bool = False

    @field_validator("insight_batch_boundaries")
    @classmethod
    def _boundaries_strictly_increasing(cls, value: list[int]) -> list[int]:
        if len(value) != 3:
            raise ValueError("exactly three batch boundaries are required")
        if any(b <= a for a, b in zip(value, value[1:])) or value[0] <= 0:
            raise ValueError("batch boundaries must be positive and strictly increasing")
        return value

    @model_validator(mode="after")
    def _last_boundary_is_total(self) -> "Settings":
        if self.insight_batch_boundaries[-1] != self.total_questions:
            raise ValueError(
                "the last insight batch boundary must equal total_questions"
            )
        return self

    @property
    def is_development(self) -> bool:
        return self.environment == "development"

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def is_ai_configured(self) -> bool:
        """Whether an Anthropic API key has been provided."""
        return bool(self.anthropic_api_key)

    @property
    def is_supabase_configured(self) -> bool:
        return bool(self.supabase_url and self.supabase_key)

    @property
    def cors_origins_list(self) -> list[str]:
        """Get CORS origins as a list.

        Returns:
            List of allowed origins. In development, includes localhost.
            In production, only returns explicitly configured origins.
        """
        if self.cors_origins:
            return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]
        if self.is_development:
            return [
                "http://localhost:3000",
                "http://localhost:8000",
                "http://127.0.0.1:3000",
                "http://127.0.0.1:8000",
            ]
        return []


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
