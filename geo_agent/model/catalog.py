"""Model choices and provider presets offered to the settings UI."""

from typing import Optional

from geo_agent.model.config import ApiConfig, ModelConfig, ProviderKind


# Built-in model identifiers: value -> (label, provider)
MODEL_OPTIONS: dict[str, tuple[str, str]] = {
    "gpt-4o": ("GPT-4o", "openai"),
    "gpt-4": ("GPT-4", "openai"),
    "gpt-3.5-turbo": ("GPT-3.5 Turbo", "openai"),
    "claude-3-opus": ("Claude 3 Opus", "anthropic"),
    "claude-3-sonnet": ("Claude 3 Sonnet", "anthropic"),
    "claude-3-haiku": ("Claude 3 Haiku", "anthropic"),
    "deepseek-chat": ("DeepSeek Chat", "deepseek"),
    "deepseek-coder": ("DeepSeek Coder", "deepseek"),
    "llama-3": ("Llama 3", "openai"),
}

# Endpoint pre-filled when a custom model of a provider is created
PROVIDER_PRESETS: dict[str, ApiConfig] = {
    "openai": ApiConfig(domain="https://api.openai.com", path="/v1/chat/completions"),
    "anthropic": ApiConfig(domain="https://api.anthropic.com", path="/v1/messages"),
    "deepseek": ApiConfig(domain="https://api.deepseek.com", path="/v1/chat/completions"),
    "openrouter": ApiConfig(domain="https://openrouter.ai", path="/api/v1/chat/completions"),
}


def model_options() -> list[dict[str, str]]:
    """Built-in models in display order."""
    return [
        {"value": value, "label": label, "provider": provider}
        for value, (label, provider) in MODEL_OPTIONS.items()
    ]


def new_custom_model(name: str, provider: str, model_type: str = "", key: str = "") -> ModelConfig:
    """
    Create a custom model entry pre-filled with its provider's endpoint.

    Unknown providers get the OpenAI endpoint.
    """
    preset: Optional[ApiConfig] = PROVIDER_PRESETS.get(provider.lower())
    if preset is None:
        preset = PROVIDER_PRESETS[ProviderKind.OPENAI.value]
    return ModelConfig(
        name=name,
        provider=provider,
        model_type=model_type or name,
        api_config=ApiConfig(domain=preset.domain, path=preset.path, key=key),
    )
