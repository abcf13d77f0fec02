from __future__ import annotations  # Re-export completion_client public API

from .completion_client import (
    CompletionClient,
    CompletionConfigError,
    CompletionError,
    CompletionResult,
    HttpClient,
    HttpResponse,
)

__all__ = [
    "CompletionClient",
    "CompletionConfigError",
    "CompletionError",
    "CompletionResult",
    "HttpClient",
    "HttpResponse",
]
