"""Application settings and configuration management."""
from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings loaded from environment variables or defaults."""

    CEREBRAS_API_KEY: str | None = None
    COMPLETION_BASE_URL: str = "https://api.cerebras.ai"
    COMPLETION_ENDPOINT: str = "/v1/chat/completions"
    COMPLETION_MODEL: str = "llama3.1-8b"
    COMPLETION_TIMEOUT_S: float = Field(default=30.0, ge=0.1)

    FIRST_QUESTION_DELAY_S: float = Field(default=3.0, ge=0.0)
    MAX_QUESTIONS: int = Field(default=10, ge=1)

    LIVEKIT_URL: str = ""
    LIVEKIT_API_KEY: str | None = None
    LIVEKIT_API_SECRET: str | None = None

    UPLOAD_DIR: str = "uploads"
    UPLOAD_MAX_BYTES: int = 10 * 1024 * 1024

    CORS_ORIGINS: str = "*"
    HOST: str = "0.0.0.0"
    PORT: int = 7880

    model_config = SettingsConfigDict(env_file=".env", extra="ignore", validate_assignment=True)

    def cors_origins(self) -> list[str]:
        origins = [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]
        return origins or ["*"]


settings = Settings()
