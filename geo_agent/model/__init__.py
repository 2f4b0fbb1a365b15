"""Model configuration, provider routing and chat adapters."""

from geo_agent.model.adapters import (
    AdapterFactory,
    AnthropicChatAdapter,
    ChatAdapter,
    DeepSeekChatAdapter,
    OpenAIChatAdapter,
    build_adapter,
)
from geo_agent.model.config import (
    ApiConfig,
    ChatMessage,
    ConfigSettings,
    ModelConfig,
    ProviderKind,
    ResolvedEndpoint,
)
from geo_agent.model.router import (
    BUILTIN_PRESETS,
    PLACEHOLDER_KEY,
    PROXY_KEY_ENV,
    CredentialResolver,
    ProviderRouter,
    env_credentials,
    select_provider_kind,
)

__all__ = [
    "AdapterFactory",
    "AnthropicChatAdapter",
    "ApiConfig",
    "BUILTIN_PRESETS",
    "ChatAdapter",
    "ChatMessage",
    "ConfigSettings",
    "CredentialResolver",
    "DeepSeekChatAdapter",
    "ModelConfig",
    "OpenAIChatAdapter",
    "PLACEHOLDER_KEY",
    "PROXY_KEY_ENV",
    "ProviderKind",
    "ProviderRouter",
    "ResolvedEndpoint",
    "build_adapter",
    "env_credentials",
    "select_provider_kind",
]
