"""Configuration package for the interview session broker."""
from .routes import CompletionRoute, route_from_settings
from .settings import Settings, settings

__all__ = [
    "CompletionRoute",
    "route_from_settings",
    "Settings",
    "settings",
]
