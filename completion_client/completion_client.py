from __future__ import annotations  # Chat-completion request client

import logging
import os
from typing import Any, Dict, Optional, Protocol, Sequence

import httpx
from pydantic import BaseModel, Field

from config import CompletionRoute


logger = logging.getLogger(__name__)  # Module logger setup


class HttpClient(Protocol):  # Minimal HTTP client protocol
    def post(self, url: str, *, json: Dict[str, Any], headers: Dict[str, str], timeout: float) -> "HttpResponse": ...


class HttpResponse(Protocol):  # Minimal HTTP response protocol
    @property
    def status_code(self) -> int: ...

    def json(self) -> Any: ...

    @property
    def text(self) -> str: ...


class CompletionError(RuntimeError):  # Base completion failure
    def __init__(self, message: str, *, status_code: Optional[int] = None, body: Any = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body

    def detail(self) -> Any:  # Upstream error body when available, message otherwise
        return self.body if self.body is not None else str(self)


class CompletionConfigError(CompletionError):  # Credential or route missing
    pass


class CompletionResult(BaseModel):  # Generated text plus usage counters
    text: str
    model: str
    usage: Dict[str, Any] = Field(default_factory=dict)


class CompletionClient:  # Stateless wrapper around one chat-completion route
    def __init__(
        self,
        route: CompletionRoute,
        *,
        http_client: Optional[HttpClient] = None,
        api_key: Optional[str] = None,
    ) -> None:
        self._route = route
        self._api_key = api_key
        self._owned: Optional[httpx.Client] = None
        if http_client is None:
            self._owned = httpx.Client(timeout=route.timeout_s)
            http_client = self._owned
        self._http = http_client

    @property
    def model(self) -> str:
        return self._route.model

    def complete(
        self,
        messages: Sequence[Dict[str, str]],
        *,
        temperature: float,
        max_tokens: int,
        stream: bool = False,
    ) -> CompletionResult:  # Send one chat request, no retries
        payload: Dict[str, Any] = {
            "model": self._route.model,
            "messages": _normalize_messages(messages),
            "temperature": temperature,
            "max_tokens": max_tokens,
            "stream": stream,
        }
        headers = {"Content-Type": "application/json", "Authorization": f"Bearer {self._resolve_key()}"}
        headers.update(self._route.extra_headers)
        logger.info(
            "Completion request route=%s model=%s messages=%d temperature=%s max_tokens=%d",
            self._route.name,
            self._route.model,
            len(payload["messages"]),
            temperature,
            max_tokens,
        )
        try:
            response = self._http.post(self._route.url, json=payload, headers=headers, timeout=self._route.timeout_s)
        except Exception as exc:  # noqa: BLE001
            logger.error("Completion transport failure: %s", exc)
            raise CompletionError(f"Completion transport failed: {exc}") from exc
        if response.status_code >= 400:
            body = _error_body(response)
            logger.error("Completion error status=%s body=%s", response.status_code, body)
            raise CompletionError(
                f"Completion endpoint returned status {response.status_code}",
                status_code=response.status_code,
                body=body,
            )
        try:
            data = response.json()
        except Exception as exc:  # noqa: BLE001
            logger.error("Invalid JSON payload from completion endpoint: %s", exc)
            raise CompletionError("Completion payload was not JSON", status_code=response.status_code) from exc
        text = _extract_content(data)
        usage = data.get("usage") if isinstance(data.get("usage"), dict) else {}
        logger.info("Completion request done route=%s usage=%s", self._route.name, usage)
        return CompletionResult(text=text, model=str(data.get("model") or self._route.model), usage=usage)

    def close(self) -> None:  # Release owned transport
        if self._owned is not None:
            self._owned.close()
            self._owned = None

    def _resolve_key(self) -> str:
        if self._api_key:
            return self._api_key
        if self._route.api_key_env:
            value = os.getenv(self._route.api_key_env)
            if value:
                return value
        raise CompletionConfigError(
            f"Missing API key for completion route '{self._route.name}' ({self._route.api_key_env})"
        )


def _normalize_messages(messages: Sequence[Dict[str, str]]) -> list[Dict[str, str]]:  # Ensure message payload shape
    normalized: list[Dict[str, str]] = []
    for item in messages:
        if not isinstance(item, dict):
            raise TypeError("Each chat message must be a dict with role/content")
        role = str(item.get("role", "")).strip()
        if not role:
            raise ValueError("Chat message missing role")
        normalized.append({"role": role, "content": str(item.get("content", ""))})
    return normalized


def _extract_content(data: Any) -> str:  # Extract message content from completion response
    if isinstance(data, dict):
        choices = data.get("choices")
        if isinstance(choices, list) and choices:
            message = choices[0].get("message") if isinstance(choices[0], dict) else None
            content = message.get("content") if isinstance(message, dict) else None
            if isinstance(content, str):
                return content
    raise CompletionError("Completion response missing content", body=data)


def _error_body(response: HttpResponse) -> Any:  # Decode upstream error body
    try:
        return response.json()
    except Exception:  # noqa: BLE001
        return response.text or None
