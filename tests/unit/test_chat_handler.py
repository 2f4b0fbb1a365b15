"""
Unit tests for the chat request pipeline.
"""
import json

import pytest


def _body(payload):
    return json.dumps(payload).encode("utf-8")


async def _read(response):
    return [chunk async for chunk in response.body_iterator]


def _pipeline(credentials, adapter):
    from geo_agent.model import ProviderRouter
    from web.chat_handler import ChatPipeline

    endpoints = []

    def factory(endpoint):
        endpoints.append(endpoint)
        return adapter

    pipeline = ChatPipeline(
        router=ProviderRouter(credentials),
        adapter_factory=factory,
        default_model="gpt-4o",
        default_system_prompt="Default prompt.",
    )
    return pipeline, endpoints


class TestParseChatRequest:
    """Tests for parse_chat_request."""

    @pytest.mark.parametrize("body", [b"not json", b"[1, 2]", b'{"configSettings": {}}', b'{"messages": "hi"}', b"\xff"])
    def test_malformed(self, body):
        from geo_agent.exceptions import MalformedRequestError
        from web.chat_handler import parse_chat_request

        with pytest.raises(MalformedRequestError):
            parse_chat_request(body)

    def test_camel_case_settings(self):
        from web.chat_handler import parse_chat_request

        request = parse_chat_request(_body({
            "messages": [{"role": "user", "content": "hi"}],
            "configSettings": {"modelType": "claude-3-opus", "systemPrompt": "S", "customModels": []},
        }))

        assert request.config_settings.model_type == "claude-3-opus"
        assert request.config_settings.system_prompt == "S"


class TestChatPipeline:
    """Tests for ChatPipeline.handle."""

    @pytest.mark.asyncio
    async def test_defaults_applied(self, credentials, fake_adapter, sample_messages):
        """Missing configSettings means default model and prompt."""
        pipeline, endpoints = _pipeline(credentials, fake_adapter)

        response = await pipeline.handle(_body({"messages": sample_messages}))
        chunks = await _read(response)

        assert response.status_code == 200
        assert endpoints[0].domain == "https://api.openai.com"
        assert endpoints[0].model == "gpt-4o"
        assert fake_adapter.calls[0]["system_prompt"] == "Default prompt."
        assert fake_adapter.calls[0]["messages"] == sample_messages
        assert b"".join(chunks) == "".join(fake_adapter.chunks).encode("utf-8")

    @pytest.mark.asyncio
    async def test_streaming_headers(self, credentials, fake_adapter, sample_messages):
        pipeline, _ = _pipeline(credentials, fake_adapter)

        response = await pipeline.handle(_body({"messages": sample_messages}))

        assert response.headers["transfer-encoding"] == "chunked"
        assert response.headers["connection"] == "keep-alive"
        assert response.media_type.startswith("text/plain")

    @pytest.mark.asyncio
    async def test_request_settings_used(self, credentials, fake_adapter, sample_messages, custom_settings):
        """Model and prompt come from the request snapshot."""
        pipeline, endpoints = _pipeline(credentials, fake_adapter)

        response = await pipeline.handle(_body({
            "messages": sample_messages,
            "configSettings": custom_settings.model_dump(mode="json", by_alias=True),
        }))
        await _read(response)

        assert endpoints[0].key == "sk-custom"
        assert fake_adapter.calls[0]["system_prompt"] == "Draw things."

    @pytest.mark.asyncio
    async def test_invalid_command_warning_in_stream(self, credentials, make_adapter, sample_messages):
        adapter = make_adapter(["Try:\n", "```geogebra\nBar(1)\n```"])
        pipeline, _ = _pipeline(credentials, adapter)

        response = await pipeline.handle(_body({"messages": sample_messages}))
        chunks = await _read(response)

        assert chunks[0] == b"Try:\n"
        assert b"unknown command: Bar" in chunks[1]
        assert chunks[2] == "```geogebra\nBar(1)\n```".encode("utf-8")

    @pytest.mark.asyncio
    async def test_malformed_request(self, credentials, fake_adapter):
        pipeline, endpoints = _pipeline(credentials, fake_adapter)

        response = await pipeline.handle(b"{broken")

        assert response.status_code == 400
        assert "error" in json.loads(response.body)
        assert endpoints == []

    @pytest.mark.asyncio
    async def test_missing_credential(self, make_credentials, fake_adapter, sample_messages):
        pipeline, endpoints = _pipeline(make_credentials(), fake_adapter)

        response = await pipeline.handle(_body({"messages": sample_messages}))

        assert response.status_code == 400
        assert "API key" in json.loads(response.body)["error"]
        assert endpoints == []

    @pytest.mark.asyncio
    async def test_adapter_init_failure(self, credentials, sample_messages):
        from geo_agent.model import ProviderRouter
        from web.chat_handler import ChatPipeline

        def broken_factory(endpoint):
            raise RuntimeError("secret internal detail")

        pipeline = ChatPipeline(router=ProviderRouter(credentials), adapter_factory=broken_factory)

        response = await pipeline.handle(_body({"messages": sample_messages}))
        error = json.loads(response.body)["error"]

        assert response.status_code == 500
        assert error.startswith("Model initialization failed")
        assert "secret" not in error

    @pytest.mark.asyncio
    async def test_malformed_custom_domain(self, credentials, sample_messages):
        """A bad base URL in a custom model fails adapter construction."""
        from geo_agent.model import ProviderRouter
        from web.chat_handler import ChatPipeline

        pipeline = ChatPipeline(router=ProviderRouter(credentials))
        response = await pipeline.handle(_body({
            "messages": sample_messages,
            "configSettings": {
                "modelType": "bad",
                "customModels": [{"name": "bad", "apiConfig": {"domain": "nonsense", "key": "sk-1"}}],
            },
        }))

        assert response.status_code == 500
        assert json.loads(response.body)["error"].startswith("Model initialization failed")

    @pytest.mark.asyncio
    async def test_stream_open_failure(self, credentials, make_adapter, sample_messages):
        adapter = make_adapter([], fail_on_open=True)
        pipeline, _ = _pipeline(credentials, adapter)

        response = await pipeline.handle(_body({"messages": sample_messages}))
        error = json.loads(response.body)["error"]

        assert response.status_code == 500
        assert error.startswith("Failed to create chat stream")
        assert "unreachable" not in error

    @pytest.mark.asyncio
    async def test_upstream_released_on_early_close(self, credentials, make_adapter, sample_messages):
        """Stopping the response body closes the upstream iterator."""
        adapter = make_adapter(["a", "b", "c"])
        pipeline, _ = _pipeline(credentials, adapter)

        response = await pipeline.handle(_body({"messages": sample_messages}))
        body = response.body_iterator
        assert await body.__anext__() == b"a"
        await body.aclose()

        assert adapter.closed

    @pytest.mark.asyncio
    async def test_upstream_released_when_body_closed_before_first_chunk(self, credentials, make_adapter, sample_messages):
        adapter = make_adapter(["a", "b"])
        pipeline, _ = _pipeline(credentials, adapter)

        response = await pipeline.handle(_body({"messages": sample_messages}))
        await response.body_iterator.aclose()

        assert adapter.closed

    @pytest.mark.asyncio
    async def test_disconnect_before_first_chunk_releases_upstream(self, credentials, make_adapter, sample_messages):
        """A client gone before any body is sent still frees the upstream."""
        import asyncio

        adapter = make_adapter(["a", "b"])
        pipeline, _ = _pipeline(credentials, adapter)
        response = await pipeline.handle(_body({"messages": sample_messages}))

        async def receive():
            return {"type": "http.disconnect"}

        async def send(message):
            await asyncio.Event().wait()

        await response({"type": "http", "asgi": {"spec_version": "2.0"}}, receive, send)

        assert adapter.closed

    @pytest.mark.asyncio
    async def test_upstream_released_when_wrapping_fails(self, credentials, make_adapter, sample_messages, monkeypatch):
        import web.chat_handler

        def broken_annotate(source):
            raise RuntimeError("annotator unavailable")

        monkeypatch.setattr(web.chat_handler, "annotate_stream", broken_annotate)
        adapter = make_adapter(["a"])
        pipeline, _ = _pipeline(credentials, adapter)

        response = await pipeline.handle(_body({"messages": sample_messages}))

        assert response.status_code == 500
        assert adapter.closed
