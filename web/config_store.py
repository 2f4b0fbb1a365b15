"""Persistent storage of the settings edited in the configuration UI."""

import json
import os
from pathlib import Path
from typing import Optional

from geo_agent.config import DEFAULT_MODEL, DEFAULT_SYSTEM_PROMPT, settings
from geo_agent.exceptions import ConfigStoreError
from geo_agent.logging import get_logger
from geo_agent.model import ConfigSettings, ModelConfig

logger = get_logger("config_store")


def default_config() -> ConfigSettings:
    """Settings used before anything has been saved."""
    return ConfigSettings(
        model_type=settings.chat.default_model or DEFAULT_MODEL,
        system_prompt=settings.chat.system_prompt or DEFAULT_SYSTEM_PROMPT,
        custom_models=[],
    )


class ConfigStore:
    """
    Key-value settings store backed by a JSON file.

    The chat pipeline never reads from here; the front-end loads a snapshot
    and sends it with every request.

    Args:
        path: JSON file location. Defaults to ``settings.chat.config_file``.
    """

    def __init__(self, path: Optional[str | Path] = None):
        self.path = Path(path or settings.chat.config_file)

    def get_config(self) -> ConfigSettings:
        """
        Load the stored settings, or defaults if nothing is stored.

        An unreadable file is logged and treated as empty.
        """
        if not self.path.exists():
            return default_config()
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                return ConfigSettings.model_validate(json.load(f))
        except (OSError, ValueError) as e:
            logger.warn("Failed to load stored settings", path=str(self.path), error=str(e))
            return default_config()

    def set_config(self, config: ConfigSettings) -> ConfigSettings:
        """
        Validate and persist settings.

        Raises:
            ConfigStoreError: On duplicate custom model names, or when the
                selected custom model has no API key.
        """
        seen: set[str] = set()
        for model in config.custom_models:
            if model.name in seen:
                raise ConfigStoreError(f"Duplicate custom model name: {model.name}", model=model.name)
            seen.add(model.name)

        selected = config.find_custom_model(config.model_type or "")
        if selected is not None and not selected.api_config.key:
            raise ConfigStoreError(f"{selected.provider.value} API key is required", model=selected.name)

        self._write(json.dumps(config.model_dump(mode="json", by_alias=True), indent=2, ensure_ascii=False))
        logger.info("Settings saved", model=config.model_type, custom_models=len(config.custom_models))
        return config

    def add_custom_model(self, model: ModelConfig) -> ConfigSettings:
        """Append a custom model to the stored settings."""
        config = self.get_config()
        config.custom_models.append(model)
        return self.set_config(config)

    def delete_custom_model(self, name: str) -> ConfigSettings:
        """
        Remove a custom model.

        If it was the selected model, the selection falls back to the
        default model.

        Raises:
            ConfigStoreError: If no custom model has that name.
        """
        config = self.get_config()
        remaining = [m for m in config.custom_models if m.name != name]
        if len(remaining) == len(config.custom_models):
            raise ConfigStoreError(f"Unknown custom model: {name}", model=name)
        config.custom_models = remaining
        if config.model_type == name:
            config.model_type = DEFAULT_MODEL
        return self.set_config(config)

    def _write(self, text: str) -> None:
        # Readers see either the old file or the new one, never a partial write
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        try:
            tmp.write_text(text, encoding="utf-8")
            os.replace(tmp, self.path)
        except OSError:
            tmp.unlink(missing_ok=True)
            raise
