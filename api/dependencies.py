"""Request-scoped accessors for objects owned by the application."""
from __future__ import annotations

from fastapi import Request

from config import Settings
from services.sessions import SessionRegistry


def get_registry(request: Request) -> SessionRegistry:
    return request.app.state.registry


def get_settings(request: Request) -> Settings:
    return request.app.state.settings
