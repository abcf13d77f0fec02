"""Completion endpoint route definition."""
from __future__ import annotations

from typing import Dict

from pydantic import BaseModel, Field

from .settings import Settings


class CompletionRoute(BaseModel):
    """Chat-completion endpoint configuration."""

    name: str
    base_url: str
    endpoint: str
    model: str
    timeout_s: float = Field(default=30.0, ge=0.1)
    api_key_env: str | None = "CEREBRAS_API_KEY"
    extra_headers: Dict[str, str] = Field(default_factory=dict)

    @property
    def url(self) -> str:
        return f"{self.base_url.rstrip('/')}{self.endpoint}"


def route_from_settings(cfg: Settings) -> CompletionRoute:  # Build the completion route from settings
    return CompletionRoute(
        name="cerebras",
        base_url=cfg.COMPLETION_BASE_URL,
        endpoint=cfg.COMPLETION_ENDPOINT,
        model=cfg.COMPLETION_MODEL,
        timeout_s=cfg.COMPLETION_TIMEOUT_S,
    )
