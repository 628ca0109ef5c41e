"""Application configuration using pydantic-settings.

All environment variables should be accessed through the settings object
rather than using os.getenv() directly. This keeps the transaction retry
and lock-timeout knobs used by the stock engine in one typed place.
"""

from functools import lru_cache
from typing import List, Literal

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # Ignore extra env vars
    )

    # Database - SQLite file in the working directory by default, override via env
    database_url: str = "sqlite:///./kitchen_ledger.db"
    database_echo: bool = False
    auto_create_tables: bool = True  # SQLite dev convenience; use Alembic elsewhere

    # ==========================================================================
    # Stock engine transactions
    # ==========================================================================
    lock_timeout_ms: int = 5000  # Bounded wait for row locks before aborting
    transaction_max_attempts: int = 3  # Attempts before ConcurrencyConflictError
    transaction_retry_backoff_ms: int = 50  # Multiplied by the attempt number

    # CORS - comma-separated origins or "*" for development only
    cors_origins: str = "http://localhost:3000,http://localhost:8000"

    # Server
    debug: bool = False
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    # API
    api_v1_prefix: str = "/api/v1"

    @field_validator("transaction_max_attempts")
    @classmethod
    def validate_max_attempts(cls, v: int) -> int:
        if v < 1:
            raise ValueError("TRANSACTION_MAX_ATTEMPTS must be at least 1")
        return v

    @field_validator("lock_timeout_ms", "transaction_retry_backoff_ms")
    @classmethod
    def validate_non_negative_ms(cls, v: int) -> int:
        if v < 0:
            raise ValueError("Timeouts and backoff must not be negative")
        return v

    @property
    def cors_origins_list(self) -> List[str]:
        """Parse CORS origins into a list."""
        if self.cors_origins == "*":
            return ["*"]
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
