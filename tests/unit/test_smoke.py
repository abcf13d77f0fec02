"""Basic smoke tests for the service scaffolding."""
import importlib
import logging


def test_imports():
    import api_server  # noqa: F401
    from config.settings import settings

    assert settings.COMPLETION_ENDPOINT.endswith("/chat/completions")


def test_importing_server_leaves_root_logging_alone(monkeypatch):
    import api_server

    calls = []
    monkeypatch.setattr(logging, "basicConfig", lambda *args, **kwargs: calls.append(kwargs))
    importlib.reload(api_server)

    assert calls == []
