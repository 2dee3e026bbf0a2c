"""
Configuration settings for the entprep engine.

Uses Pydantic Settings for environment variable management with .env file support.
Nested values use a double underscore, e.g. ENTPREP_API__BASE_URL.
"""
from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ApiConfig(BaseModel):
    """Remote backend location and endpoint paths."""

    base_url: str = "http://localhost:8000"
    timeout_seconds: float = 10.0

    # Endpoints
    health_endpoint: str = "/api/health"
    login_endpoint: str = "/api/auth/login"
    register_endpoint: str = "/api/auth/register"
    logout_endpoint: str = "/api/auth/logout"
    tests_endpoint: str = "/api/tests"
    submit_endpoint: str = "/api/tests/submit"
    questions_endpoint: str = "/api/questions"
    generate_quiz_endpoint: str = "/api/ai/generate-quiz"
    generate_track_quiz_endpoint: str = "/api/ai/generate-ent-quiz"
    chat_endpoint: str = "/api/ai/chat"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="ENTPREP_",
        env_nested_delimiter="__",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ========================================
    # Remote backend
    # ========================================
    api: ApiConfig = Field(default_factory=ApiConfig)

    # Third-party model keys forwarded to the chat endpoint
    deepseek_api_key: str = Field(default="", description="Forwarded as x-deepseek-api-key")
    gemini_api_key: str = Field(default="", description="Forwarded as x-gemini-api-key")

    # ========================================
    # Local fallback
    # ========================================
    data_dir: Path = Field(
        default=Path.home() / ".entprep",
        description="Holds session.json with the persisted auth token",
    )
    demo_email: str = "demo@example.com"
    demo_password: str = "password123"

    # Simulated latency before returning locally generated content
    generation_delay_seconds: float = Field(default=2.0, ge=0.0)
    assistant_delay_min_seconds: float = Field(default=1.0, ge=0.0)
    assistant_delay_max_seconds: float = Field(default=3.0, ge=0.0)

    default_language: Literal["ru", "kz"] = "ru"

    # ========================================
    # Logging
    # ========================================
    log_level: str = "INFO"

    @property
    def session_file(self) -> Path:
        return self.data_dir / "session.json"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
