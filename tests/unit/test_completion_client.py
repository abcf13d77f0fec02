import json

import httpx
import pytest

from completion_client import CompletionClient, CompletionConfigError, CompletionError
from config import CompletionRoute


def _route() -> CompletionRoute:
    return CompletionRoute(
        name="test",
        base_url="http://example.com/",
        endpoint="/v1/chat/completions",
        model="test-model",
        timeout_s=1.0,
        api_key_env="TEST_COMPLETION_KEY",
    )


def _client(handler, *, api_key: str | None = "secret") -> CompletionClient:
    transport = httpx.MockTransport(handler)
    return CompletionClient(_route(), http_client=httpx.Client(transport=transport), api_key=api_key)


def test_complete_posts_chat_payload_and_returns_usage() -> None:
    captured = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured["url"] = str(request.url)
        captured["auth"] = request.headers["Authorization"]
        captured["body"] = json.loads(request.content)
        return httpx.Response(
            200,
            json={
                "model": "test-model",
                "choices": [{"message": {"role": "assistant", "content": "Hello there"}}],
                "usage": {"prompt_tokens": 12, "completion_tokens": 3, "total_tokens": 15},
            },
        )

    client = _client(handler)
    result = client.complete(
        [{"role": "system", "content": "Be brief"}, {"role": "user", "content": "Hi"}],
        temperature=0.7,
        max_tokens=200,
    )

    assert result.text == "Hello there"
    assert result.usage["total_tokens"] == 15
    assert captured["url"] == "http://example.com/v1/chat/completions"
    assert captured["auth"] == "Bearer secret"
    assert captured["body"] == {
        "model": "test-model",
        "messages": [{"role": "system", "content": "Be brief"}, {"role": "user", "content": "Hi"}],
        "temperature": 0.7,
        "max_tokens": 200,
        "stream": False,
    }


def test_error_status_carries_upstream_body() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(429, json={"error": {"message": "rate limited"}})

    client = _client(handler)
    with pytest.raises(CompletionError) as excinfo:
        client.complete([{"role": "user", "content": "Hi"}], temperature=0.6, max_tokens=150)

    assert excinfo.value.status_code == 429
    assert excinfo.value.detail() == {"error": {"message": "rate limited"}}


def test_missing_content_is_an_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"choices": []})

    client = _client(handler)
    with pytest.raises(CompletionError, match="missing content"):
        client.complete([{"role": "user", "content": "Hi"}], temperature=0.5, max_tokens=500)


def test_non_json_payload_is_an_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text="<html>oops</html>")

    client = _client(handler)
    with pytest.raises(CompletionError, match="not JSON"):
        client.complete([{"role": "user", "content": "Hi"}], temperature=0.5, max_tokens=500)


def test_transport_failure_is_wrapped() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    client = _client(handler)
    with pytest.raises(CompletionError, match="transport failed"):
        client.complete([{"role": "user", "content": "Hi"}], temperature=0.5, max_tokens=500)


def test_missing_api_key_fails_at_call_time(monkeypatch) -> None:
    monkeypatch.delenv("TEST_COMPLETION_KEY", raising=False)
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(200, json={})

    client = _client(handler, api_key=None)
    with pytest.raises(CompletionConfigError):
        client.complete([{"role": "user", "content": "Hi"}], temperature=0.7, max_tokens=200)
    assert calls == []


def test_api_key_read_from_environment(monkeypatch) -> None:
    monkeypatch.setenv("TEST_COMPLETION_KEY", "from-env")
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["auth"] = request.headers["Authorization"]
        return httpx.Response(200, json={"choices": [{"message": {"content": "ok"}}]})

    client = _client(handler, api_key=None)
    result = client.complete([{"role": "user", "content": "Hi"}], temperature=0.7, max_tokens=200)

    assert seen["auth"] == "Bearer from-env"
    assert result.model == "test-model"
    assert result.usage == {}
