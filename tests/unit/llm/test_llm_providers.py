"""
Unit tests for the LLM transport providers.

SDK clients are replaced with mocks; the tests check request translation and
response parsing only.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest

from orchestra.llm import LLMProviderFactory, LLMRequest, Message
from orchestra.llm.anthropic import AnthropicProvider
from orchestra.llm.openai import OpenAIProvider


@pytest.fixture
def request_with_system():
    return LLMRequest(
        messages=[
            Message(role="system", content="You are a release assistant."),
            Message(role="user", content="Summarize PROJ-7"),
        ],
        max_tokens=256,
        temperature=0.1,
        stop_sequences=["END"],
    )


def test_factory_creates_known_providers():
    """Test factory returns the provider class for each supported name."""
    anthropic_provider = LLMProviderFactory.create("anthropic", api_key="k", model_id="m")
    openai_provider = LLMProviderFactory.create(
        "openai", api_key="k", model_id="m", timeout_seconds=5
    )

    assert isinstance(anthropic_provider, AnthropicProvider)
    assert isinstance(openai_provider, OpenAIProvider)
    assert openai_provider.kwargs == {"timeout_seconds": 5}


def test_factory_rejects_unknown_provider():
    """Test factory raises ValueError for an unsupported provider."""
    with pytest.raises(ValueError, match="Unknown provider: mystery"):
        LLMProviderFactory.create("mystery", api_key="k", model_id="m")


@pytest.mark.asyncio
async def test_anthropic_generate(request_with_system):
    """Test system message extraction and text block joining."""
    provider = AnthropicProvider(api_key="k", model_id="claude-test")
    sdk_response = MagicMock()
    sdk_response.content = [
        MagicMock(type="text", text="PROJ-7 "),
        MagicMock(type="tool_use"),
        MagicMock(type="text", text="fixes login."),
    ]
    sdk_response.model = "claude-test"
    sdk_response.usage.input_tokens = 20
    sdk_response.usage.output_tokens = 7
    sdk_response.stop_reason = "end_turn"
    provider.client = MagicMock()
    provider.client.messages.create = AsyncMock(return_value=sdk_response)

    response = await provider.generate(request_with_system)

    assert response.content == "PROJ-7 fixes login."
    assert response.usage.total_tokens == 27
    assert response.finish_reason == "end_turn"
    kwargs = provider.client.messages.create.call_args.kwargs
    assert kwargs["system"] == "You are a release assistant."
    assert kwargs["messages"] == [{"role": "user", "content": "Summarize PROJ-7"}]
    assert kwargs["stop_sequences"] == ["END"]
    assert kwargs["max_tokens"] == 256


@pytest.mark.asyncio
async def test_openai_generate(request_with_system):
    """Test message passthrough and usage parsing."""
    provider = OpenAIProvider(api_key="k", model_id="gpt-test")
    choice = MagicMock()
    choice.message.content = "PROJ-7 fixes login."
    choice.finish_reason = "stop"
    sdk_response = MagicMock()
    sdk_response.choices = [choice]
    sdk_response.model = "gpt-test"
    sdk_response.usage.prompt_tokens = 20
    sdk_response.usage.completion_tokens = 7
    sdk_response.usage.total_tokens = 27
    provider.client = MagicMock()
    provider.client.chat.completions.create = AsyncMock(return_value=sdk_response)

    response = await provider.generate(request_with_system)

    assert response.content == "PROJ-7 fixes login."
    assert response.usage.total_tokens == 27
    kwargs = provider.client.chat.completions.create.call_args.kwargs
    assert kwargs["messages"][0] == {"role": "system", "content": "You are a release assistant."}
    assert kwargs["stop"] == ["END"]


@pytest.mark.asyncio
async def test_openai_generate_without_usage(request_with_system):
    """Test missing usage block is reported as zero tokens."""
    provider = OpenAIProvider(api_key="k", model_id="gpt-test")
    choice = MagicMock()
    choice.message.content = None
    choice.finish_reason = "length"
    sdk_response = MagicMock(choices=[choice], model="gpt-test", usage=None)
    provider.client = MagicMock()
    provider.client.chat.completions.create = AsyncMock(return_value=sdk_response)

    response = await provider.generate(request_with_system)

    assert response.content == ""
    assert response.usage.total_tokens == 0


@pytest.mark.asyncio
async def test_openai_generate_without_choices(request_with_system):
    """Test an empty choices list yields empty content instead of raising."""
    provider = OpenAIProvider(api_key="k", model_id="gpt-test")
    sdk_response = MagicMock(choices=[], model="gpt-test", usage=None)
    provider.client = MagicMock()
    provider.client.chat.completions.create = AsyncMock(return_value=sdk_response)

    response = await provider.generate(request_with_system)

    assert response.content == ""
    assert response.finish_reason is None
