"""Process configuration."""

from geo_agent.config.settings import (
    DEFAULT_MODEL,
    DEFAULT_SYSTEM_PROMPT,
    ChatSettings,
    LogSettings,
    ServerSettings,
    Settings,
    configure,
    get_settings,
    settings,
)

__all__ = [
    "DEFAULT_MODEL",
    "DEFAULT_SYSTEM_PROMPT",
    "ChatSettings",
    "LogSettings",
    "ServerSettings",
    "Settings",
    "configure",
    "get_settings",
    "settings",
]
