"""
Pytest configuration and shared fixtures.
"""
import pytest
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))


# =============================================================================
# Fakes
# =============================================================================

class FakeAdapter:
    """Provider adapter that replays fixed text deltas."""

    def __init__(self, chunks, fail_on_open=False):
        self.chunks = list(chunks)
        self.fail_on_open = fail_on_open
        self.calls = []
        self.closed = False

    async def stream_chat(self, system_prompt, messages):
        self.calls.append({"system_prompt": system_prompt, "messages": messages})
        if self.fail_on_open:
            raise ConnectionError("upstream unreachable")
        return FakeUpstream(self)


class FakeUpstream:
    """Upstream text stream that records being released, started or not."""

    def __init__(self, adapter):
        self.adapter = adapter
        self.remaining = list(adapter.chunks)

    def __aiter__(self):
        return self

    async def __anext__(self):
        if self.adapter.closed or not self.remaining:
            raise StopAsyncIteration
        return self.remaining.pop(0)

    async def aclose(self):
        self.adapter.closed = True


class FakeCredentials:
    """Credential resolver backed by a plain dict."""

    def __init__(self, values=None):
        self.values = dict(values or {})
        self.requested = []

    def __call__(self, name):
        self.requested.append(name)
        return self.values.get(name)


# =============================================================================
# Router fixtures
# =============================================================================

@pytest.fixture
def credentials():
    """Credentials with every built-in provider key set."""
    return FakeCredentials({
        "OPENAI_API_KEY": "sk-openai",
        "ANTHROPIC_API_KEY": "sk-anthropic",
        "DEEPSEEK_API_KEY": "sk-deepseek",
    })


@pytest.fixture
def empty_credentials():
    """Credentials with nothing set."""
    return FakeCredentials()


@pytest.fixture
def custom_settings():
    """Settings snapshot with one custom model per provider style."""
    from geo_agent.model import ConfigSettings
    return ConfigSettings.model_validate({
        "modelType": "my-gpt",
        "systemPrompt": "Draw things.",
        "customModels": [
            {
                "name": "my-gpt",
                "provider": "openai",
                "modelType": "gpt-4o-mini",
                "apiConfig": {
                    "domain": "https://proxy.example.com",
                    "path": "/v1/chat/completions",
                    "key": "sk-custom",
                },
            },
            {
                "name": "claude-via-openai",
                "provider": "openai",
                "modelType": "claude-3-haiku",
                "apiConfig": {
                    "domain": "https://gateway.example.com",
                    "path": "/v1/chat/completions",
                    "key": "sk-gateway",
                },
            },
            {
                "name": "deepseek-free",
                "provider": "openrouter",
                "modelType": "deepseek/deepseek-chat:free",
                "apiConfig": {
                    "domain": "https://openrouter.ai",
                    "path": "/api/v1/chat/completions",
                    "key": "OPENROUTER_API_KEY_PLACEHOLDER",
                },
            },
        ],
    })


# =============================================================================
# Adapter fixtures
# =============================================================================

@pytest.fixture
def fake_adapter():
    """Adapter streaming a short answer with a valid command block."""
    return FakeAdapter([
        "Here is a circle:\n",
        "```geogebra\nCircle((0,0), 2)\n```",
        "\nDone.",
    ])


@pytest.fixture
def sample_messages():
    """Provide a minimal conversation."""
    return [{"role": "user", "content": "draw a circle"}]


@pytest.fixture
def make_adapter():
    """Factory for FakeAdapter instances."""
    return FakeAdapter


@pytest.fixture
def make_credentials():
    """Factory for FakeCredentials instances."""
    return FakeCredentials
