"""
Chat request handling.

A request moves through these states:

    RECEIVED -> CONFIG_RESOLVED -> CREDENTIAL_CHECKED -> ADAPTER_INITIALIZED
             -> UPSTREAM_STREAMING -> ANNOTATING -> COMPLETE

and lands in ERRORED from any step, in which case a single JSON error object
is returned. Once the streaming response is handed back, failures inside the
stream body belong to the transport.
"""

import json
from enum import Enum
from typing import Any, AsyncIterable, AsyncIterator, Optional

from fastapi.responses import JSONResponse, StreamingResponse
from pydantic import ValidationError
from starlette.responses import Response

from geo_agent.config import settings
from geo_agent.exceptions import (
    AdapterInitError,
    GeoAgentError,
    MalformedRequestError,
    UpstreamStreamError,
    get_status_code,
    get_user_message,
)
from geo_agent.logging import get_logger
from geo_agent.model import AdapterFactory, ChatAdapter, ProviderRouter, ResolvedEndpoint, build_adapter
from geo_agent.stream import ClosingStream, annotate_stream
from web.models import ChatRequest

# Module logger
logger = get_logger("chat")

STREAM_HEADERS = {
    "Transfer-Encoding": "chunked",
    "Connection": "keep-alive",
}
STREAM_MEDIA_TYPE = "text/plain; charset=utf-8"


class ChatState(Enum):
    """Lifecycle states of one chat request."""
    RECEIVED = "received"
    CONFIG_RESOLVED = "config_resolved"
    CREDENTIAL_CHECKED = "credential_checked"
    ADAPTER_INITIALIZED = "adapter_initialized"
    UPSTREAM_STREAMING = "upstream_streaming"
    ANNOTATING = "annotating"
    COMPLETE = "complete"
    ERRORED = "errored"


def parse_chat_request(body: bytes) -> ChatRequest:
    """
    Parse a raw request body.

    Raises:
        MalformedRequestError: If the body is not a JSON object with a
            ``messages`` list.
    """
    try:
        data = json.loads(body)
    except (UnicodeDecodeError, ValueError) as e:
        raise MalformedRequestError("Request body is not valid JSON", error=str(e)) from e
    if not isinstance(data, dict):
        raise MalformedRequestError("Request body must be a JSON object")
    try:
        return ChatRequest.model_validate(data)
    except ValidationError as e:
        raise MalformedRequestError("Request body failed validation", errors=e.error_count()) from e


def error_response(error: Exception) -> JSONResponse:
    """Convert an exception into the public JSON error."""
    return JSONResponse({"error": get_user_message(error)}, status_code=get_status_code(error))


def encode_text(source: AsyncIterable[str]) -> ClosingStream:
    """Encode upstream text deltas as UTF-8 chunks; closing the result closes the source."""
    return ClosingStream(source, _encode)


def _encode(text: str) -> list[bytes]:
    return [text.encode("utf-8")]


async def release(stream: Optional[AsyncIterable[Any]]) -> None:
    """Close a stream if it supports it."""
    aclose = getattr(stream, "aclose", None)
    if aclose is not None:
        await aclose()


class ClosingStreamingResponse(StreamingResponse):
    """
    Streaming response that always closes its body iterator.

    Starlette stops pulling from the body on client disconnect without
    closing it.
    """

    async def __call__(self, scope, receive, send) -> None:
        try:
            await super().__call__(scope, receive, send)
        finally:
            await release(self.body_iterator)


class ChatPipeline:
    """
    Turns chat requests into annotated model-output streams.

    Args:
        router: Provider router; a default one reads keys from the environment.
        adapter_factory: Builds the provider adapter for a resolved endpoint.
        default_model: Model used when the request names none.
        default_system_prompt: Prompt used when the request has none.
    """

    def __init__(
        self,
        router: Optional[ProviderRouter] = None,
        adapter_factory: AdapterFactory = build_adapter,
        default_model: Optional[str] = None,
        default_system_prompt: Optional[str] = None,
    ):
        self.default_model = default_model or settings.chat.default_model
        self.default_system_prompt = default_system_prompt or settings.chat.system_prompt
        self.router = router or ProviderRouter(default_model=self.default_model)
        self.adapter_factory = adapter_factory

    async def handle(self, body: bytes) -> Response:
        """Run one request through the pipeline; never raises."""
        state = ChatState.RECEIVED
        upstream = None
        logger.api("Chat request received")
        try:
            request = parse_chat_request(body)
            config = request.config_settings
            model_type = (config and config.model_type) or self.default_model
            system_prompt = (config and config.system_prompt) or self.default_system_prompt
            state = ChatState.CONFIG_RESOLVED
            logger.api(
                "Request data",
                message_count=len(request.messages),
                model=model_type,
                system_prompt_length=len(system_prompt),
            )

            endpoint = self.router.resolve(model_type, config)
            state = ChatState.CREDENTIAL_CHECKED

            adapter = self._init_adapter(endpoint)
            state = ChatState.ADAPTER_INITIALIZED

            messages = [message.model_dump() for message in request.messages]
            upstream = await self._open_stream(adapter, endpoint, system_prompt, messages)
            state = ChatState.UPSTREAM_STREAMING

            annotated = annotate_stream(encode_text(upstream))
            state = ChatState.ANNOTATING

            response = ClosingStreamingResponse(annotated, media_type=STREAM_MEDIA_TYPE, headers=STREAM_HEADERS)
            state = ChatState.COMPLETE
            logger.api("Returning streaming response", model=endpoint.model)
            return response
        except GeoAgentError as e:
            logger.error("Chat request failed", state=state.value, error=str(e))
            await release(upstream)
            return error_response(e)
        except Exception as e:
            logger.error("Unexpected error while handling chat request", state=state.value, error=str(e))
            await release(upstream)
            return error_response(e)
        except BaseException:
            await release(upstream)
            raise

    def _init_adapter(self, endpoint: ResolvedEndpoint) -> ChatAdapter:
        try:
            return self.adapter_factory(endpoint)
        except AdapterInitError:
            raise
        except Exception as e:
            raise AdapterInitError(str(e), model=endpoint.model) from e

    async def _open_stream(
        self,
        adapter: ChatAdapter,
        endpoint: ResolvedEndpoint,
        system_prompt: str,
        messages: list[dict[str, Any]],
    ) -> AsyncIterator[str]:
        logger.api("Creating chat stream", model=endpoint.model, domain=endpoint.domain)
        try:
            return await adapter.stream_chat(system_prompt, messages)
        except Exception as e:
            raise UpstreamStreamError(str(e), model=endpoint.model) from e
