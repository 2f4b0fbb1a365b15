"""Streaming chat adapters for OpenAI-compatible, Anthropic and DeepSeek APIs."""

from typing import Any, AsyncIterator, Callable, Protocol

import httpx
from anthropic import AsyncAnthropic
from openai import AsyncOpenAI

from geo_agent.exceptions import AdapterInitError
from geo_agent.logging import get_logger
from geo_agent.model.config import ProviderKind, ResolvedEndpoint
from geo_agent.stream.closing import ClosingStream

# Module logger
logger = get_logger("model")

DEFAULT_MAX_TOKENS = 4096


class ChatAdapter(Protocol):
    """Common streaming-chat capability of every provider adapter."""

    async def stream_chat(
        self, system_prompt: str, messages: list[dict[str, Any]]
    ) -> AsyncIterator[str]:
        """
        Open a streaming chat completion.

        Awaiting this opens the upstream stream, so connection and
        authentication failures surface here. The returned iterator yields
        text deltas and closes the upstream stream when it finishes or is
        closed early.
        """
        ...


def _check_base_url(base_url: str) -> str:
    url = httpx.URL(base_url)
    if url.scheme not in ("http", "https") or not url.host:
        raise ValueError(f"Invalid base URL: {base_url!r}")
    return base_url


def _completion_deltas(chunk) -> list[str]:
    if not chunk.choices:
        return []
    delta = chunk.choices[0].delta.content
    return [delta] if delta else []


def _message_deltas(event) -> list[str]:
    if event.type == "content_block_delta" and event.delta.type == "text_delta":
        return [event.delta.text]
    return []


def _content_text(content: str | list[dict[str, Any]]) -> str:
    """Plain text of a message body; non-text parts are skipped."""
    if isinstance(content, str):
        return content
    return "\n".join(
        part.get("text", "") for part in content
        if part.get("type") == "text" and part.get("text")
    )


class OpenAIChatAdapter:
    """
    Adapter for the OpenAI chat completions API and compatible services.

    Args:
        api_key: Provider API key.
        base_url: SDK base URL, e.g. ``https://api.openai.com/v1``.
        model: Upstream model name.
    """

    def __init__(self, api_key: str, base_url: str, model: str):
        self.model = model
        # Retries are the caller's concern
        self.client = AsyncOpenAI(
            api_key=api_key,
            base_url=_check_base_url(base_url),
            max_retries=0,
        )

    async def stream_chat(
        self, system_prompt: str, messages: list[dict[str, Any]]
    ) -> AsyncIterator[str]:
        stream = await self.client.chat.completions.create(
            model=self.model,
            messages=[{"role": "system", "content": system_prompt}, *messages],
            stream=True,
        )
        return ClosingStream(stream, _completion_deltas, close=stream.close)


class DeepSeekChatAdapter(OpenAIChatAdapter):
    """DeepSeek speaks the OpenAI wire format."""

    def __init__(self, api_key: str, base_url: str = "https://api.deepseek.com", model: str = "deepseek-chat"):
        super().__init__(api_key=api_key, base_url=base_url, model=model)


class AnthropicChatAdapter:
    """
    Adapter for the Anthropic messages API.

    Args:
        api_key: Provider API key.
        base_url: SDK base URL, e.g. ``https://api.anthropic.com``.
        model: Upstream model name.
        max_tokens: Completion limit, required by the messages API.
    """

    def __init__(self, api_key: str, base_url: str, model: str, max_tokens: int = DEFAULT_MAX_TOKENS):
        self.model = model
        self.max_tokens = max_tokens
        self.client = AsyncAnthropic(
            api_key=api_key,
            base_url=_check_base_url(base_url),
            max_retries=0,
        )

    async def stream_chat(
        self, system_prompt: str, messages: list[dict[str, Any]]
    ) -> AsyncIterator[str]:
        # Anthropic takes the system prompt separately from the history
        system_parts = [system_prompt] if system_prompt else []
        filtered_messages = []
        for msg in messages:
            if msg["role"] == "system":
                text = _content_text(msg["content"])
                if text:
                    system_parts.append(text)
            else:
                filtered_messages.append(msg)

        stream = await self.client.messages.create(
            model=self.model,
            max_tokens=self.max_tokens,
            system="\n\n".join(system_parts),
            messages=filtered_messages,
            stream=True,
        )
        return ClosingStream(stream, _message_deltas, close=stream.close)


AdapterFactory = Callable[[ResolvedEndpoint], ChatAdapter]


def build_adapter(endpoint: ResolvedEndpoint) -> ChatAdapter:
    """
    Construct the adapter for a resolved endpoint.

    Raises:
        AdapterInitError: If the SDK client cannot be built, e.g. for a
            malformed base URL.
    """
    base_url = endpoint.base_url
    try:
        match endpoint.provider_kind:
            case ProviderKind.ANTHROPIC:
                logger.api("Initializing Anthropic adapter", model=endpoint.model)
                return AnthropicChatAdapter(api_key=endpoint.key, base_url=base_url, model=endpoint.model)
            case ProviderKind.DEEPSEEK:
                logger.api("Initializing DeepSeek adapter", model=endpoint.model)
                return DeepSeekChatAdapter(api_key=endpoint.key, base_url=base_url, model=endpoint.model)
            case ProviderKind.OPENAI | ProviderKind.OTHER:
                logger.api("Initializing OpenAI-compatible adapter", model=endpoint.model)
                return OpenAIChatAdapter(api_key=endpoint.key, base_url=base_url, model=endpoint.model)
    except Exception as e:
        logger.error("Adapter initialization failed", model=endpoint.model, domain=endpoint.domain, error=str(e))
        raise AdapterInitError(str(e), model=endpoint.model) from e
    raise AdapterInitError(f"Unsupported provider: {endpoint.provider_kind}", model=endpoint.model)
