"""Configuration settings for the Enlighten2Code backend."""

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="E2C_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
    )

    # Application
    app_name: str = "Enlighten2Code API"
    debug: bool = False
    environment: str = "development"
    log_level: str = "INFO"

    # Database
    # Default to Postgres; tests override via E2C_DB_URL
    db_url: str = "postgresql+asyncpg://localhost/enlighten2code"
    db_pool_size: int = 10
    db_max_overflow: int = 20

    # Auth
    jwt_secret: str = "change-me"
    jwt_algorithm: str = "HS256"
    jwt_expires_days: int = 7
    auth_cookie_name: str = "token"

    # CORS
    cors_origins: list[str] = [
        "http://localhost:5000",
        "http://localhost:5173",
    ]

    # Rate Limiting
    rate_limit_requests: int = 60
    rate_limit_window: int = 60  # seconds

    # Judge0
    judge0_api_url: str = "http://localhost:2358"
    judge0_api_key: Optional[str] = None
    judge0_host: Optional[str] = None
    judge0_timeout_s: float = 30.0
    # Judge0 accepts at most 20 submissions per batch
    judge0_batch_size: int = Field(default=20, ge=1, le=20)

    # Result polling
    judge0_poll_interval: float = 1.0
    judge0_poll_backoff_factor: float = 1.5
    judge0_poll_max_interval: float = 5.0
    judge0_poll_max_retries: int = 3
    judge0_poll_deadline_seconds: float = 120.0

    validate_languages_concurrently: bool = False


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
