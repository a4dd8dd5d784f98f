"""OpenAI chat models, and Deepseek through its OpenAI-compatible endpoint."""

import os
from typing import Any, Dict, Optional

from .base import LLMProvider, LLMResponse


class OpenAIProvider(LLMProvider):
    """Chat-completions provider; json_mode maps to response_format=json_object."""

    MODELS = {
        "gpt-4o": "gpt-4o",
        "gpt-4o-mini": "gpt-4o-mini",
        "fast": "gpt-4o-mini",
        "quality": "gpt-4o",
    }
    BASE_URL: Optional[str] = None
    API_KEY_ENV = "OPENAI_API_KEY"

    def __init__(self, api_key: Optional[str] = None):
        self.api_key = api_key or os.environ.get(self.API_KEY_ENV)
        self._client = None
        self._async_client = None

    @property
    def name(self) -> str:
        return "openai"

    @property
    def default_model(self) -> str:
        return self.MODELS["quality"]

    def _client_kwargs(self) -> dict:
        kwargs = {"api_key": self.api_key}
        if self.BASE_URL:
            kwargs["base_url"] = self.BASE_URL
        return kwargs

    def _get_client(self):
        if self._client is None:
            from openai import OpenAI
            self._client = OpenAI(**self._client_kwargs())
        return self._client

    def _get_async_client(self):
        if self._async_client is None:
            from openai import AsyncOpenAI
            self._async_client = AsyncOpenAI(**self._client_kwargs())
        return self._async_client

    def _chat_kwargs(
        self, system_prompt: str, user_message: str, model: Optional[str], max_tokens: int, json_mode: bool
    ) -> Dict[str, Any]:
        kwargs: Dict[str, Any] = {
            "model": self.MODELS.get(model, model) if model else self.default_model,
            "max_tokens": max_tokens,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_message},
            ],
        }
        if json_mode:
            kwargs["response_format"] = {"type": "json_object"}
        return kwargs

    def _to_response(self, response, model: str) -> LLMResponse:
        usage = response.usage
        return LLMResponse(
            content=response.choices[0].message.content or "",
            input_tokens=getattr(usage, "prompt_tokens", 0) or 0,
            output_tokens=getattr(usage, "completion_tokens", 0) or 0,
            model=model,
            provider=self.name,
        )

    def complete(
        self,
        system_prompt: str,
        user_message: str,
        model: Optional[str] = None,
        max_tokens: int = 4096,
        json_mode: bool = False,
    ) -> LLMResponse:
        kwargs = self._chat_kwargs(system_prompt, user_message, model, max_tokens, json_mode)
        response = self._get_client().chat.completions.create(**kwargs)
        return self._to_response(response, kwargs["model"])

    async def acomplete(
        self,
        system_prompt: str,
        user_message: str,
        model: Optional[str] = None,
        max_tokens: int = 4096,
        json_mode: bool = False,
    ) -> LLMResponse:
        kwargs = self._chat_kwargs(system_prompt, user_message, model, max_tokens, json_mode)
        response = await self._get_async_client().chat.completions.create(**kwargs)
        return self._to_response(response, kwargs["model"])

    def is_available(self) -> bool:
        return bool(self.api_key)


class DeepseekProvider(OpenAIProvider):
    """Deepseek chat; both tiers resolve to deepseek-chat."""

    MODELS = {
        "deepseek-chat": "deepseek-chat",
        "deepseek-reasoner": "deepseek-reasoner",
        "fast": "deepseek-chat",
        "quality": "deepseek-chat",
    }
    BASE_URL = "https://api.deepseek.com/v1"
    API_KEY_ENV = "DEEPSEEK_API_KEY"

    @property
    def name(self) -> str:
        return "deepseek"
