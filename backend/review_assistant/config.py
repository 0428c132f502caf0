"""Application configuration using pydantic-settings."""

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "ai-code-review-assistant"
    app_version: str = "1.0.0"
    environment: str = "production"
    log_level: str = "info"

    # Google AI
    google_api_key: str = Field(min_length=10)
    gemini_model: str = "gemini-2.5-flash"

    # Access control
    access_token: str = ""
    allowed_origins: str = "*"

    # Rate limiting
    rate_limit_requests: int = Field(default=20, ge=1)
    rate_limit_window: int = Field(default=60, ge=1)
    rate_limit_sweep_interval: int = Field(default=60, ge=1)

    # Review input
    max_code_length: int = Field(default=10_000, ge=100)

    # Sessions
    session_backend: Literal["mongodb", "memory", "none"] = "memory"
    session_ttl_seconds: int = Field(default=3600, ge=1)
    max_session_messages: int = Field(default=10, ge=2)

    # MongoDB
    mongodb_uri: str = "mongodb://mongodb:27017"
    mongodb_database: str = "code_review"

    @property
    def cors_origins(self) -> list[str]:
        if self.allowed_origins.strip() == "*":
            return ["*"]
        return [o.strip() for o in self.allowed_origins.split(",") if o.strip()]


settings = Settings()


def get_settings() -> Settings:
    """FastAPI dependency for injecting settings."""
    return settings
