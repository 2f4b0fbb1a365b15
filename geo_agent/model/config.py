"""Model configuration types shared by the router, adapters and web layer."""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


DEFAULT_CUSTOM_DOMAIN = "https://api.openai.com"
DEFAULT_CUSTOM_PATH = "/v1/chat/completions"


class ProviderKind(str, Enum):
    """Upstream provider families. OTHER is served by the OpenAI-compatible adapter."""
    OPENAI = "openai"
    ANTHROPIC = "anthropic"
    DEEPSEEK = "deepseek"
    OTHER = "other"


class _WireModel(BaseModel):
    """Base for models exchanged with the front-end in camelCase."""
    model_config = ConfigDict(populate_by_name=True)


class ApiConfig(_WireModel):
    """Endpoint and credential of a custom model."""
    domain: str = ""
    path: str = ""
    key: str = ""


class ModelConfig(_WireModel):
    """A user-defined model entry, identified by its unique name."""
    name: str
    provider: ProviderKind = ProviderKind.OPENAI
    model_type: str = Field(default="", alias="modelType")
    api_config: ApiConfig = Field(default_factory=ApiConfig, alias="apiConfig")

    @field_validator("provider", mode="before")
    @classmethod
    def _normalize_provider(cls, value: Any) -> Any:
        # The settings UI also offers providers (e.g. openrouter) that have
        # no adapter of their own
        if isinstance(value, ProviderKind) or value is None:
            return value or ProviderKind.OPENAI
        text = str(value).strip().lower()
        if text in ProviderKind._value2member_map_:
            return text
        return ProviderKind.OTHER


class ConfigSettings(_WireModel):
    """Snapshot of the user's settings sent along with each chat request."""
    model_type: Optional[str] = Field(default=None, alias="modelType")
    system_prompt: Optional[str] = Field(default=None, alias="systemPrompt")
    custom_models: list[ModelConfig] = Field(default_factory=list, alias="customModels")

    def find_custom_model(self, name: str) -> Optional[ModelConfig]:
        """Return the custom model with the given name, if any."""
        for model in self.custom_models:
            if model.name == name:
                return model
        return None


class ChatMessage(BaseModel):
    """One message of the conversation history."""
    role: str
    content: Union[str, list[dict[str, Any]]]


@dataclass(frozen=True)
class ResolvedEndpoint:
    """Concrete upstream target for a single request."""

    domain: str
    path: str
    key: str
    provider_kind: ProviderKind
    model: str

    @property
    def base_url(self) -> str:
        """
        SDK base URL for this endpoint.

        The SDK clients append their own request path, so that suffix is
        removed from ``domain + path``: ``/chat/completions`` for
        OpenAI-compatible clients, ``/v1/messages`` for Anthropic.
        """
        url = self.domain.rstrip("/") + "/" + self.path.strip("/")
        url = url.rstrip("/")
        suffix = "/v1/messages" if self.provider_kind == ProviderKind.ANTHROPIC else "/chat/completions"
        if url.endswith(suffix):
            url = url[: -len(suffix)]
        return url or self.domain.rstrip("/")
