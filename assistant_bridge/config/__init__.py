"""Configuration module."""

from assistant_bridge.config.settings import Settings, get_settings

__all__ = [
    "Settings",
    "get_settings",
]
