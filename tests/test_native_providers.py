"""Tests for the native SDK providers with mocked clients."""

import asyncio
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

from providers import get_provider
from providers.anthropic_provider import AnthropicProvider
from providers.openai_provider import DeepseekProvider, OpenAIProvider


class TestAnthropicProvider:

    def test_tier_alias_resolves(self):
        provider = AnthropicProvider(api_key="sk-ant-test")
        client = MagicMock()
        client.messages.create.return_value = SimpleNamespace(
            content=[SimpleNamespace(text='{"choices": []}')],
            usage=SimpleNamespace(input_tokens=12, output_tokens=4),
        )
        provider._client = client

        result = provider.complete("Sys", "User", model="fast", max_tokens=256)

        call_kw = client.messages.create.call_args.kwargs
        assert call_kw["model"] == "claude-3-5-haiku-20241022"
        assert call_kw["system"] == "Sys"
        assert result.content == '{"choices": []}'
        assert result.provider == "anthropic"
        assert result.input_tokens == 12

    def test_async_completion(self):
        provider = AnthropicProvider(api_key="sk-ant-test")
        client = MagicMock()
        client.messages.create = AsyncMock(return_value=SimpleNamespace(
            content=[SimpleNamespace(text="ok")],
            usage=SimpleNamespace(input_tokens=1, output_tokens=1),
        ))
        provider._async_client = client

        result = asyncio.run(provider.acomplete("Sys", "User"))

        assert result.content == "ok"
        assert result.model == "claude-sonnet-4-20250514"

    def test_availability_follows_key(self, monkeypatch):
        monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)
        assert not AnthropicProvider().is_available()
        assert AnthropicProvider(api_key="k").is_available()


class TestOpenAIProviders:

    def test_completion(self):
        provider = OpenAIProvider(api_key="sk-test")
        client = MagicMock()
        client.chat.completions.create.return_value = SimpleNamespace(
            choices=[SimpleNamespace(message=SimpleNamespace(content=None))],
            usage=SimpleNamespace(prompt_tokens=9, completion_tokens=3),
        )
        provider._client = client

        result = provider.complete("Sys", "User", model="quality")

        assert client.chat.completions.create.call_args.kwargs["model"] == "gpt-4o"
        assert result.content == ""
        assert result.output_tokens == 3

    def test_deepseek_uses_own_endpoint(self, monkeypatch):
        monkeypatch.setenv("DEEPSEEK_API_KEY", "ds-test")
        provider = DeepseekProvider()
        assert provider.name == "deepseek"
        assert provider.is_available()
        assert provider._client_kwargs()["base_url"] == DeepseekProvider.BASE_URL

    def test_factory_builds_native_providers(self):
        assert isinstance(get_provider("claude"), AnthropicProvider)
        assert isinstance(get_provider("gpt"), OpenAIProvider)


class TestJsonMode:
    """Composition stages always request a bare JSON object."""

    def test_anthropic_prefills_brace(self):
        provider = AnthropicProvider(api_key="k")
        client = MagicMock()
        client.messages.create.return_value = SimpleNamespace(
            content=[SimpleNamespace(text='"choices": []}')],
            usage=SimpleNamespace(input_tokens=1, output_tokens=1),
        )
        provider._client = client

        result = provider.complete("Sys", "User", json_mode=True)

        messages = client.messages.create.call_args.kwargs["messages"]
        assert messages[-1] == {"role": "assistant", "content": "{"}
        assert result.content == '{"choices": []}'

    def test_openai_response_format(self):
        provider = OpenAIProvider(api_key="k")
        client = MagicMock()
        client.chat.completions.create.return_value = SimpleNamespace(
            choices=[SimpleNamespace(message=SimpleNamespace(content="{}"))],
            usage=SimpleNamespace(prompt_tokens=1, completion_tokens=1),
        )
        provider._client = client

        provider.complete("Sys", "User", json_mode=True)
        assert client.chat.completions.create.call_args.kwargs["response_format"] == {"type": "json_object"}

        provider.complete("Sys", "User")
        assert "response_format" not in client.chat.completions.create.call_args.kwargs
