"""Application configuration using pydantic-settings."""

from functools import lru_cache
from pathlib import Path
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

    # Environment
    env: Literal["development", "production", "test"] = "development"
    debug: bool = False
    log_level: str = "INFO"

    # API Server
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    cors_origins: list[str] = Field(default_factory=lambda: ["http://localhost:3000"])

    # Analysis provider
    analysis_provider: Literal["gemini", "openrouter", "mock"] = "gemini"
    gemini_api_key: str | None = None
    openrouter_api_key: str | None = None
    analysis_model: str = "gemini-2.5-flash"
    analysis_timeout_seconds: float = 90.0  # Per-call timeout, owned by the provider client
    analysis_temperature: float = 0.2
    analysis_max_output_tokens: int = 8192

    # Capture (headless Chromium)
    capture_timeout_ms: int = 30000
    capture_viewport_width: int = 1280
    capture_viewport_height: int = 800
    capture_full_page: bool = True

    # Storage
    data_dir: Path = Path("data")

    # Sentry
    sentry_dsn: str | None = None

    @property
    def is_production(self) -> bool:
        """Check if running in production."""
        return self.env == "production"

    @property
    def is_test(self) -> bool:
        """Check if running in test mode."""
        return self.env == "test"

    @property
    def analysis_enabled(self) -> bool:
        """Check if the configured provider has the credentials it needs."""
        if self.analysis_provider == "mock":
            return True
        if self.analysis_provider == "openrouter":
            return bool(self.openrouter_api_key)
        return bool(self.gemini_api_key)

    @property
    def analysis_api_key(self) -> str:
        """API key for the configured provider (empty for mock)."""
        if self.analysis_provider == "openrouter":
            return self.openrouter_api_key or ""
        if self.analysis_provider == "gemini":
            return self.gemini_api_key or ""
        return ""


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
