"""Tests for the completion provider layer."""
from types import SimpleNamespace
from unittest.mock import AsyncMock, Mock

import pytest

from aidea.llm import (
    ChatMessage,
    LLMResponse,
    OpenRouterProvider,
    create_llm_provider,
    normalize_assistant_content,
)
from aidea.llm.providers.openrouter import resolve_model


def completion(content="hi", reasoning_details=None, reasoning=None, choices=True):
    message = SimpleNamespace(
        content=content, reasoning_details=reasoning_details, reasoning=reasoning
    )
    return SimpleNamespace(
        id="resp-1",
        model="service/model",
        choices=[SimpleNamespace(message=message)] if choices else [],
        usage=SimpleNamespace(prompt_tokens=3, completion_tokens=5, total_tokens=8),
    )


@pytest.fixture
def provider():
    """Provider with a mocked OpenAI client."""
    provider = OpenRouterProvider(api_key="fake-key")
    client = Mock()
    client.chat.completions.create = AsyncMock(return_value=completion())
    client.close = AsyncMock()
    provider._client = client
    return provider


class TestNormalizeAssistantContent:
    """Tests for flattening assistant content."""

    def test_string(self):
        """Test that strings pass through."""
        assert normalize_assistant_content("hello") == "hello"

    def test_none(self):
        """Test that missing content is empty."""
        assert normalize_assistant_content(None) == ""

    def test_parts(self):
        """Test joining a list of content parts."""
        parts = [
            {"type": "text", "text": "one"},
            {"content": "two"},
            "three",
            SimpleNamespace(text="four"),
        ]
        assert normalize_assistant_content(parts) == "one\ntwo\nthree\nfour"


class TestOpenRouterProvider:
    """Tests for OpenRouterProvider."""

    def test_resolve_model(self):
        """Test UI names map to service ids and others pass through."""
        assert resolve_model("temper-1") == "openrouter/sherlock-think-alpha"
        assert resolve_model("vendor/other") == "vendor/other"

    def test_set_model(self, provider):
        """Test switching the default model."""
        assert provider.model == "temper-1"
        provider.set_model("temper-1-colossus")
        assert provider.model == "temper-1-colossus"

    @pytest.mark.asyncio
    async def test_request_shape(self, provider):
        """Test the request sent to the service."""
        messages = [
            ChatMessage(role="system", content="be brief"),
            ChatMessage(role="user", content="hi"),
            ChatMessage(role="assistant", content="hello", reasoning_details=[{"text": "r"}]),
            ChatMessage(role="user", content="again"),
        ]
        await provider.chat_completion(messages, temperature=0.2)

        params = provider._client.chat.completions.create.call_args.kwargs
        assert params["model"] == "openrouter/sherlock-think-alpha"
        assert params["temperature"] == 0.2
        assert "max_tokens" not in params
        assert params["extra_body"] == {"reasoning": {"enabled": True}}
        assert params["messages"][2] == {
            "role": "assistant", "content": "hello", "reasoning_details": [{"text": "r"}],
        }
        assert "reasoning_details" not in params["messages"][1]

    @pytest.mark.asyncio
    async def test_reasoning_can_be_disabled(self, provider):
        """Test that reasoning=False sends no extra body."""
        await provider.chat_completion([ChatMessage(role="user", content="hi")], reasoning=False)
        params = provider._client.chat.completions.create.call_args.kwargs
        assert "extra_body" not in params

    @pytest.mark.asyncio
    async def test_response(self, provider, reasoning_details):
        """Test response parsing with structured reasoning."""
        provider._client.chat.completions.create.return_value = completion(
            content="answer", reasoning_details=reasoning_details
        )
        response = await provider.chat_completion([ChatMessage(role="user", content="q")])

        assert isinstance(response, LLMResponse)
        assert response.content == "answer"
        assert response.model == "service/model"
        assert response.response_id == "resp-1"
        assert response.usage == {"prompt_tokens": 3, "completion_tokens": 5, "total_tokens": 8}
        assert response.reasoning_details == reasoning_details

    @pytest.mark.asyncio
    async def test_plain_reasoning_string(self, provider):
        """Test the fallback to a plain reasoning string."""
        provider._client.chat.completions.create.return_value = completion(reasoning="thought")
        response = await provider.chat_completion([ChatMessage(role="user", content="q")])
        assert response.reasoning_details == "thought"

    @pytest.mark.asyncio
    async def test_no_choices(self, provider):
        """Test that an empty response raises."""
        provider._client.chat.completions.create.return_value = completion(choices=False)
        with pytest.raises(ValueError, match="Invalid response format"):
            await provider.chat_completion([ChatMessage(role="user", content="q")])

    @pytest.mark.asyncio
    async def test_available_models_failure(self, provider):
        """Test that a failed model listing yields nothing."""
        provider._client.models.list = AsyncMock(side_effect=RuntimeError("offline"))
        assert await provider.available_models() == []

    @pytest.mark.asyncio
    async def test_context_manager_closes(self, provider):
        """Test async context manager support."""
        async with provider:
            pass
        provider._client.close.assert_awaited_once()

    @pytest.mark.asyncio
    @pytest.mark.integration
    async def test_chat_completion_real_api(self, api_keys):
        """Integration test: Chat completion with the real service."""
        if not api_keys["openrouter"]:
            pytest.skip("OPENROUTER_API_KEY not set")

        provider = OpenRouterProvider(api_key=api_keys["openrouter"])
        try:
            response = await provider.chat_completion(
                [ChatMessage(role="user", content="Reply with the word 'pong'.")],
                max_tokens=200,
            )
            assert response.content
        finally:
            await provider.close()


class TestFactory:
    """Tests for create_llm_provider."""

    def test_openrouter(self):
        """Test creating the default provider."""
        provider = create_llm_provider("OpenRouter", api_key="fake-key", model="temper-1-colossus")
        assert isinstance(provider, OpenRouterProvider)
        assert provider.model == "temper-1-colossus"

    def test_unsupported(self):
        """Test that unknown providers raise ValueError."""
        with pytest.raises(ValueError, match="Unsupported provider"):
            create_llm_provider("anthropic", api_key="fake-key")

    def test_missing_key(self):
        """Test that a missing API key raises TypeError."""
        with pytest.raises(TypeError):
            create_llm_provider("openrouter")
