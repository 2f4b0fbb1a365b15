"""
Unified configuration management for the GeoGebra chat assistant.

Supports loading from:
- Environment variables (.env is loaded by the launcher)
- YAML config files (config.yaml)
- Programmatic overrides

Priority (highest to lowest):
1. Programmatic overrides
2. Environment variables
3. YAML config files
4. Default values

Provider API keys are deliberately not part of these settings: the
provider router reads them per request through its credential resolver.

Usage:
    from geo_agent.config import settings

    settings.server.port
    settings.chat.default_model

    # Override at runtime
    settings.server.port = 9000

    # Reload from files
    settings.reload()
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import yaml


DEFAULT_MODEL = "gpt-4o"

DEFAULT_SYSTEM_PROMPT = (
    "You are an assistant focused on mathematics and GeoGebra. Help users "
    "understand mathematical concepts and visualize them with GeoGebra. "
    "Make sure to only use valid GeoGebra commands."
)


# =============================================================================
# Configuration Dataclasses
# =============================================================================

@dataclass
class ServerSettings:
    """HTTP server configuration."""
    host: str = "0.0.0.0"
    port: int = 8000
    auto_open_browser: bool = False


@dataclass
class ChatSettings:
    """Chat pipeline defaults."""
    default_model: str = DEFAULT_MODEL
    system_prompt: str = DEFAULT_SYSTEM_PROMPT
    config_file: str = "geo_agent_config.json"


@dataclass
class LogSettings:
    """Logging configuration."""
    level: str = "INFO"
    json_format: bool = False


@dataclass
class Settings:
    """
    Main settings container.

    Provides unified access to all configuration.
    """
    server: ServerSettings = field(default_factory=ServerSettings)
    chat: ChatSettings = field(default_factory=ChatSettings)
    log: LogSettings = field(default_factory=LogSettings)

    # Internal state
    _config_file: Optional[Path] = None
    _env_prefix: str = "GEO_AGENT_"

    def __post_init__(self):
        """Load configuration after initialization."""
        # YAML first so environment variables win
        self._load_from_yaml()
        self._load_from_env()

    def _load_from_env(self):
        """Load settings from environment variables."""
        prefix = self._env_prefix

        # Server settings
        if val := os.getenv(f"{prefix}HOST"):
            self.server.host = val
        if val := os.getenv(f"{prefix}PORT"):
            self.server.port = int(val)
        if val := os.getenv(f"{prefix}OPEN_BROWSER"):
            self.server.auto_open_browser = val.lower() in ("true", "1", "yes")

        # Chat settings
        if val := os.getenv(f"{prefix}DEFAULT_MODEL"):
            self.chat.default_model = val
        if val := os.getenv(f"{prefix}SYSTEM_PROMPT"):
            self.chat.system_prompt = val
        if val := os.getenv(f"{prefix}CONFIG_FILE"):
            self.chat.config_file = val

        # Log settings
        if val := os.getenv(f"{prefix}LOG_LEVEL"):
            self.log.level = val.upper()
        if val := os.getenv(f"{prefix}LOG_JSON"):
            self.log.json_format = val.lower() in ("true", "1", "yes")

    def _load_from_yaml(self):
        """Load settings from the first YAML config file found."""
        search_paths = [
            Path.cwd() / "config.yaml",
            Path.cwd() / "config.yml",
            Path.home() / ".geo_agent" / "config.yaml",
        ]

        for config_path in search_paths:
            if config_path.exists():
                self._config_file = config_path
                self._apply_yaml_config(config_path)
                break

    def _apply_yaml_config(self, path: Path):
        """Apply config from YAML file."""
        with open(path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f) or {}

        for section_name in ("server", "chat", "log"):
            section = data.get(section_name)
            if not isinstance(section, dict):
                continue
            target = getattr(self, section_name)
            for key, val in section.items():
                if hasattr(target, key):
                    setattr(target, key, val)

    def reload(self):
        """Reload configuration from all sources."""
        # Reset to defaults
        self.server = ServerSettings()
        self.chat = ChatSettings()
        self.log = LogSettings()

        # Reload
        self._load_from_yaml()
        self._load_from_env()

    def to_dict(self) -> dict:
        """Convert settings to dictionary."""
        return {
            "server": {
                "host": self.server.host,
                "port": self.server.port,
                "auto_open_browser": self.server.auto_open_browser,
            },
            "chat": {
                "default_model": self.chat.default_model,
                "system_prompt": self.chat.system_prompt,
                "config_file": self.chat.config_file,
            },
            "log": {
                "level": self.log.level,
                "json_format": self.log.json_format,
            }
        }

    def __repr__(self) -> str:
        return f"Settings(config_file={self._config_file})"


# =============================================================================
# Global Settings Instance
# =============================================================================

settings = Settings()


def get_settings() -> Settings:
    """Get the global settings instance."""
    return settings


def configure(**kwargs):
    """
    Configure settings programmatically.

    Args:
        **kwargs: Settings to override in format "section_key=value"

    Example:
        configure(server_port=9000, chat_default_model="claude-3-opus")
    """
    for key, value in kwargs.items():
        parts = key.split("_", 1)
        if len(parts) == 2:
            section, attr = parts
            if hasattr(settings, section):
                section_obj = getattr(settings, section)
                if hasattr(section_obj, attr):
                    setattr(section_obj, attr, value)
