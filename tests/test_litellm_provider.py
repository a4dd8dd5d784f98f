"""Tests for the LiteLLM provider, model mapping, and tier router."""

import asyncio

import pytest
from unittest.mock import AsyncMock, MagicMock, patch

from providers import get_provider, list_providers
from providers.base import LLMResponse
from providers.litellm_provider import LiteLLMProvider, _to_litellm_model
from providers.router import create_router, get_tier_model_list, is_tier, reset_router


class TestToLiteLLMModel:
    """Test _to_litellm_model mapping."""

    def test_openai_default(self):
        assert _to_litellm_model("openai", None) == "gpt-4o-mini"

    def test_openai_explicit_model(self):
        assert _to_litellm_model("openai", "gpt-4o") == "gpt-4o"
        assert _to_litellm_model("openai", "gpt-4o-mini") == "gpt-4o-mini"

    def test_anthropic_default(self):
        assert "anthropic" in _to_litellm_model("anthropic", None)
        assert "claude" in _to_litellm_model("anthropic", None).lower()

    def test_anthropic_haiku(self):
        assert "haiku" in _to_litellm_model("anthropic", "claude-haiku").lower()

    def test_provider_synonyms(self):
        assert _to_litellm_model("claude", None) == _to_litellm_model("anthropic", None)
        assert _to_litellm_model("google", None) == "gemini/gemini-2.0-flash"

    def test_gemini_explicit(self):
        assert _to_litellm_model("gemini", "gemini-2.5-pro") == "gemini/gemini-2.5-pro"

    def test_unknown_model_gets_provider_prefix(self):
        assert _to_litellm_model("deepseek", "deepseek-coder") == "deepseek/deepseek-coder"

    def test_no_provider_model_only(self):
        assert _to_litellm_model(None, "claude-opus") == "anthropic/claude-opus-4-20250514"
        assert _to_litellm_model(None, "my-local-model") == "my-local-model"

    def test_no_provider_no_model(self):
        assert _to_litellm_model(None, None) == "gpt-4o-mini"

    def test_tier_names_pass_through(self):
        assert _to_litellm_model(None, "fast") == "fast"
        assert _to_litellm_model("openai", "quality") == "quality"


class TestTierRouter:

    def test_is_tier(self):
        assert is_tier("fast")
        assert is_tier("quality")
        assert not is_tier("gpt-4o")

    def test_model_list_follows_api_keys(self, monkeypatch):
        for var in ("OPENAI_API_KEY", "GOOGLE_API_KEY", "DEEPSEEK_API_KEY", "ANTHROPIC_API_KEY"):
            monkeypatch.delenv(var, raising=False)
        assert get_tier_model_list() == []

        monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
        models = get_tier_model_list()
        assert {entry["model_name"] for entry in models} == {"fast", "quality"}
        assert all(entry["litellm_params"]["model"].startswith("gpt-") for entry in models)

    def test_candidates_keep_preference_order(self, monkeypatch):
        for var in ("OPENAI_API_KEY", "GOOGLE_API_KEY", "DEEPSEEK_API_KEY", "ANTHROPIC_API_KEY"):
            monkeypatch.setenv(var, "key")
        fast = [e for e in get_tier_model_list() if e["model_name"] == "fast"]
        assert [e["order"] for e in fast] == [1, 2, 3, 4]
        assert fast[0]["litellm_params"]["model"] == "gpt-4o-mini"

    def test_router_needs_a_key(self, monkeypatch):
        for var in ("OPENAI_API_KEY", "GOOGLE_API_KEY", "DEEPSEEK_API_KEY", "ANTHROPIC_API_KEY"):
            monkeypatch.delenv(var, raising=False)
        with pytest.raises(RuntimeError, match="No LLM provider configured"):
            create_router()


class TestLiteLLMProvider:
    """Test LiteLLMProvider with mocked litellm."""

    @pytest.fixture
    def mock_completion_response(self):
        resp = MagicMock()
        resp.choices = [MagicMock()]
        resp.choices[0].message.content = "Hello, world."
        resp.usage = MagicMock(prompt_tokens=10, completion_tokens=5)
        resp._hidden_params = {"response_cost": 0.001}
        resp.model = "gpt-4o-mini"
        return resp

    def test_complete_returns_llm_response(self, mock_completion_response):
        with patch("litellm.completion", return_value=mock_completion_response):
            provider = LiteLLMProvider(default_model="gpt-4o-mini")
            result = provider.complete("You are helpful.", "Hi", max_tokens=100)
        assert isinstance(result, LLMResponse)
        assert result.content == "Hello, world."
        assert result.input_tokens == 10
        assert result.output_tokens == 5
        assert result.cost == 0.001
        assert result.model == "gpt-4o-mini"
        assert result.provider == "litellm"

    def test_acomplete_uses_async_client(self, mock_completion_response):
        with patch("litellm.acompletion", new=AsyncMock(return_value=mock_completion_response)) as mock_acompletion:
            provider = LiteLLMProvider(default_model="gpt-4o-mini")
            result = asyncio.run(provider.acomplete("Sys", "User", max_tokens=64, json_mode=True))
        assert result.content == "Hello, world."
        call_kw = mock_acompletion.await_args.kwargs
        assert call_kw["max_tokens"] == 64
        assert call_kw["messages"][0] == {"role": "system", "content": "Sys"}
        assert call_kw["response_format"] == {"type": "json_object"}

    def test_complete_passes_metadata(self, mock_completion_response):
        with patch("litellm.completion", return_value=mock_completion_response) as mock_completion:
            provider = LiteLLMProvider(default_model="gpt-4o-mini", metadata={"agent": "selector", "tier": "fast"})
            provider.complete("Sys", "User")
        call_kw = mock_completion.call_args[1]
        assert call_kw.get("metadata") == {"agent": "selector", "tier": "fast"}
        assert "response_format" not in call_kw

    def test_tier_model_uses_router(self, mock_completion_response):
        mock_router = MagicMock()
        mock_router.acompletion = AsyncMock(return_value=mock_completion_response)
        with patch("litellm.acompletion") as mock_lt_completion:
            with patch("providers.router.create_router", return_value=mock_router):
                reset_router()
                provider = LiteLLMProvider(default_model="fast")
                result = asyncio.run(provider.acomplete("Sys", "User", model="quality"))
                reset_router()
        mock_router.acompletion.assert_awaited_once()
        assert mock_router.acompletion.await_args.kwargs["model"] == "quality"
        mock_lt_completion.assert_not_called()
        assert result.content == "Hello, world."

    def test_missing_usage_counts_zero(self):
        resp = MagicMock()
        resp.choices = [MagicMock()]
        resp.choices[0].message.content = None
        resp.usage = None
        resp._hidden_params = None
        resp.model = None
        with patch("litellm.completion", return_value=resp):
            result = LiteLLMProvider(default_model="gpt-4o").complete("Sys", "User")
        assert result.content == ""
        assert result.input_tokens == 0
        assert result.cost == 0.0
        assert result.model == "gpt-4o"

    def test_set_metadata(self):
        provider = LiteLLMProvider(default_model="gpt-4o-mini")
        provider.set_metadata({"agent": "gap_filler"})
        provider.set_metadata({"tier": "quality"})
        assert provider._metadata == {"agent": "gap_filler", "tier": "quality"}

    def test_name_and_default_model(self):
        provider = LiteLLMProvider(default_model="gemini/gemini-2.0-flash")
        assert provider.name == "litellm"
        assert provider.default_model == "gemini/gemini-2.0-flash"

    def test_is_available(self):
        assert LiteLLMProvider(default_model="gpt-4o-mini").is_available() is True
        assert LiteLLMProvider(default_model="").is_available() is False


class TestFactory:

    def test_default_is_litellm(self):
        provider = get_provider(model="fast")
        assert isinstance(provider, LiteLLMProvider)
        assert provider.default_model == "fast"

    def test_gemini_goes_through_litellm(self):
        provider = get_provider("gemini", "gemini-2.5-flash")
        assert provider.default_model == "gemini/gemini-2.5-flash"

    def test_unknown_provider(self):
        with pytest.raises(ValueError, match="Unknown provider"):
            get_provider("carrier-pigeon")

    def test_list_providers_reflects_keys(self, monkeypatch):
        for var in ("OPENAI_API_KEY", "GOOGLE_API_KEY", "DEEPSEEK_API_KEY", "ANTHROPIC_API_KEY"):
            monkeypatch.delenv(var, raising=False)
        assert list_providers() == {"litellm": False, "anthropic": False, "openai": False, "deepseek": False}

        monkeypatch.setenv("ANTHROPIC_API_KEY", "sk-ant")
        report = list_providers()
        assert report["litellm"] and report["anthropic"]
        assert not report["openai"]
