"""Claude through the native Anthropic SDK."""

import os
from typing import Any, Dict, Optional

from .base import LLMProvider, LLMResponse

# Seeding the assistant turn keeps Claude from wrapping JSON in prose
JSON_PREFILL = "{"


class AnthropicProvider(LLMProvider):
    """Claude models; tier aliases map to haiku (fast) and sonnet (quality)."""

    MODELS = {
        "claude-sonnet": "claude-sonnet-4-20250514",
        "claude-haiku": "claude-3-5-haiku-20241022",
        "sonnet": "claude-sonnet-4-20250514",
        "haiku": "claude-3-5-haiku-20241022",
        "fast": "claude-3-5-haiku-20241022",
        "quality": "claude-sonnet-4-20250514",
    }

    def __init__(self, api_key: Optional[str] = None):
        self.api_key = api_key or os.environ.get("ANTHROPIC_API_KEY")
        self._client = None
        self._async_client = None

    @property
    def name(self) -> str:
        return "anthropic"

    @property
    def default_model(self) -> str:
        return self.MODELS["quality"]

    def _get_client(self):
        if self._client is None:
            from anthropic import Anthropic
            self._client = Anthropic(api_key=self.api_key)
        return self._client

    def _get_async_client(self):
        if self._async_client is None:
            from anthropic import AsyncAnthropic
            self._async_client = AsyncAnthropic(api_key=self.api_key)
        return self._async_client

    def _message_kwargs(
        self, system_prompt: str, user_message: str, model: Optional[str], max_tokens: int, json_mode: bool
    ) -> Dict[str, Any]:
        messages = [{"role": "user", "content": user_message}]
        if json_mode:
            messages.append({"role": "assistant", "content": JSON_PREFILL})
        return {
            "model": self.MODELS.get(model, model) if model else self.default_model,
            "max_tokens": max_tokens,
            "system": system_prompt,
            "messages": messages,
        }

    def _to_response(self, response, model: str, json_mode: bool) -> LLMResponse:
        text = "".join(block.text for block in response.content if getattr(block, "text", None))
        return LLMResponse(
            content=JSON_PREFILL + text if json_mode else text,
            input_tokens=response.usage.input_tokens,
            output_tokens=response.usage.output_tokens,
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
        kwargs = self._message_kwargs(system_prompt, user_message, model, max_tokens, json_mode)
        response = self._get_client().messages.create(**kwargs)
        return self._to_response(response, kwargs["model"], json_mode)

    async def acomplete(
        self,
        system_prompt: str,
        user_message: str,
        model: Optional[str] = None,
        max_tokens: int = 4096,
        json_mode: bool = False,
    ) -> LLMResponse:
        kwargs = self._message_kwargs(system_prompt, user_message, model, max_tokens, json_mode)
        response = await self._get_async_client().messages.create(**kwargs)
        return self._to_response(response, kwargs["model"], json_mode)

    def is_available(self) -> bool:
        return bool(self.api_key)
