"""
Provider routing: from a model identifier and a settings snapshot to a
concrete upstream endpoint.

Resolution order:
1. A custom model whose name matches the identifier supplies domain, path
   and key. The placeholder key is swapped for the proxy key from the
   environment.
2. Otherwise the built-in preset for the identifier is used, falling back
   to the default model's preset.
3. An empty key after both steps is a MissingCredentialError.

The provider kind (which adapter speaks to the endpoint) is picked
separately: a custom model's ``provider`` always wins, then the identifier
prefix, then OpenAI-compatible.
"""

import os
from dataclasses import dataclass
from typing import Callable, Optional

from geo_agent.config.settings import DEFAULT_MODEL
from geo_agent.exceptions import MissingCredentialError
from geo_agent.logging import get_logger
from geo_agent.model.config import (
    DEFAULT_CUSTOM_DOMAIN,
    DEFAULT_CUSTOM_PATH,
    ConfigSettings,
    ModelConfig,
    ProviderKind,
    ResolvedEndpoint,
)

logger = get_logger("router")

# Reads a credential from process-wide configuration; None when unset.
CredentialResolver = Callable[[str], Optional[str]]

PLACEHOLDER_KEY = "OPENROUTER_API_KEY_PLACEHOLDER"
PROXY_KEY_ENV = "OPENROUTER_API_KEY"

# Models offered for free through the OpenRouter proxy
FREE_PROXY_MODELS = frozenset({"deepseek-free"})


@dataclass(frozen=True)
class BuiltInPreset:
    """Endpoint of a built-in model and the environment variable holding its key."""
    domain: str
    path: str
    key_env: str


BUILTIN_PRESETS: dict[str, BuiltInPreset] = {
    "gpt-4o": BuiltInPreset(
        domain="https://api.openai.com",
        path="/v1/chat/completions",
        key_env="OPENAI_API_KEY",
    ),
    "claude-3-opus": BuiltInPreset(
        domain="https://api.anthropic.com",
        path="/v1/messages",
        key_env="ANTHROPIC_API_KEY",
    ),
    "deepseek-chat": BuiltInPreset(
        domain="https://api.deepseek.com",
        path="/v1/chat/completions",
        key_env="DEEPSEEK_API_KEY",
    ),
}

# Identifier prefixes that select a provider when no custom entry applies
PREFIX_PROVIDERS: tuple[tuple[str, ProviderKind], ...] = (
    ("claude", ProviderKind.ANTHROPIC),
    ("deepseek", ProviderKind.DEEPSEEK),
)


def env_credentials(name: str) -> Optional[str]:
    """Default credential resolver backed by the process environment."""
    return os.environ.get(name)


def select_provider_kind(model_type: str, custom_model: Optional[ModelConfig] = None) -> ProviderKind:
    """
    Pick the adapter family for a request.

    ``OTHER`` is folded into ``OPENAI`` so the result always names one of
    the three adapters.
    """
    if custom_model is not None:
        kind = custom_model.provider
    else:
        kind = ProviderKind.OPENAI
        for prefix, prefixed_kind in PREFIX_PROVIDERS:
            if model_type.startswith(prefix):
                kind = prefixed_kind
                break
    if kind == ProviderKind.OTHER:
        return ProviderKind.OPENAI
    return kind


def upstream_model_name(model_type: str, custom_model: Optional[ModelConfig] = None) -> str:
    """Model name sent to the provider."""
    if custom_model is not None:
        return custom_model.model_type or custom_model.name
    if model_type.startswith("deepseek"):
        return "deepseek-chat" if model_type == "deepseek-chat" else "deepseek-coder"
    return model_type


class ProviderRouter:
    """
    Resolves model identifiers to upstream endpoints.

    Args:
        credentials: Credential resolver; reads ``os.environ`` by default.
        default_model: Preset used when the identifier has none.
    """

    def __init__(
        self,
        credentials: Optional[CredentialResolver] = None,
        default_model: str = DEFAULT_MODEL,
    ):
        self.credentials = credentials or env_credentials
        self.default_model = default_model if default_model in BUILTIN_PRESETS else DEFAULT_MODEL

    def resolve(self, model_type: str, config: Optional[ConfigSettings] = None) -> ResolvedEndpoint:
        """
        Resolve a model identifier against a settings snapshot.

        Raises:
            MissingCredentialError: If no API key can be found.
        """
        config = config or ConfigSettings()
        custom_model = config.find_custom_model(model_type)

        if custom_model is not None:
            domain, path, key = self._custom_endpoint(custom_model)
            logger.api(
                "Using custom model configuration",
                model=custom_model.name,
                provider=custom_model.provider.value,
                domain=domain,
            )
        else:
            preset = BUILTIN_PRESETS.get(model_type) or BUILTIN_PRESETS[self.default_model]
            domain, path = preset.domain, preset.path
            key = self.credentials(preset.key_env) or ""
            logger.api("Using built-in model configuration", model=model_type, domain=domain)

        if not key:
            logger.error("Missing API key", model=model_type)
            raise MissingCredentialError(self._missing_key_message(model_type), model=model_type)

        return ResolvedEndpoint(
            domain=domain,
            path=path,
            key=key,
            provider_kind=select_provider_kind(model_type, custom_model),
            model=upstream_model_name(model_type, custom_model),
        )

    def _custom_endpoint(self, model: ModelConfig) -> tuple[str, str, str]:
        api = model.api_config
        domain = api.domain or DEFAULT_CUSTOM_DOMAIN
        path = api.path or DEFAULT_CUSTOM_PATH
        key = api.key

        if key == PLACEHOLDER_KEY:
            key = self.credentials(PROXY_KEY_ENV) or ""
            if not key:
                logger.error("Proxy key environment variable is not set", variable=PROXY_KEY_ENV)
                raise MissingCredentialError(
                    f"The {PROXY_KEY_ENV} environment variable is not set. Add it to the "
                    "deployment environment, or configure a custom API key on the settings page.",
                    model=model.name,
                    variable=PROXY_KEY_ENV,
                )
            logger.api("Using proxy API key from environment", variable=PROXY_KEY_ENV)

        return domain, path, key

    @staticmethod
    def _missing_key_message(model_type: str) -> str:
        if model_type in FREE_PROXY_MODELS:
            return (
                f"Missing OpenRouter API key. Add the {PROXY_KEY_ENV} environment variable to the "
                "deployment environment, or configure a custom API key on the settings page."
            )
        return "An API key is required. Configure the API key for this model in settings."
