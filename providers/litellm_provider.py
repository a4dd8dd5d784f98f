"""LiteLLM-backed provider. Default implementation for all generative calls."""

from typing import Any, Dict, List, Optional

from .base import LLMProvider, LLMResponse
from .router import get_router, is_tier


# LiteLLM model strings: provider/model-name (OpenAI can omit prefix)
DEFAULT_MODELS = {
    "anthropic": "anthropic/claude-sonnet-4-20250514",
    "openai": "gpt-4o-mini",
    "gemini": "gemini/gemini-2.0-flash",
    "deepseek": "deepseek/deepseek-chat",
}

# Map provider + optional model -> LiteLLM model string
MODEL_ALIASES = {
    "anthropic": {
        None: "anthropic/claude-sonnet-4-20250514",
        "claude-sonnet": "anthropic/claude-sonnet-4-20250514",
        "claude-opus": "anthropic/claude-opus-4-20250514",
        "claude-haiku": "anthropic/claude-3-5-haiku-20241022",
    },
    "openai": {
        None: "gpt-4o-mini",
        "gpt-4o": "gpt-4o",
        "gpt-4o-mini": "gpt-4o-mini",
        "gpt-4-turbo": "gpt-4-turbo",
    },
    "gemini": {
        None: "gemini/gemini-2.0-flash",
        "gemini-2.0-flash": "gemini/gemini-2.0-flash",
        "gemini-2.5-flash": "gemini/gemini-2.5-flash",
        "gemini-2.5-pro": "gemini/gemini-2.5-pro",
    },
    "deepseek": {
        None: "deepseek/deepseek-chat",
        "deepseek-chat": "deepseek/deepseek-chat",
        "deepseek-reasoner": "deepseek/deepseek-reasoner",
    },
}

_PROVIDER_SYNONYMS = {"claude": "anthropic", "gpt": "openai", "google": "gemini"}


def _match_alias(aliases: Dict[Optional[str], str], model_lower: str) -> Optional[str]:
    # Longest alias first so gpt-4o-mini wins over gpt-4o
    for alias in sorted((a for a in aliases if a), key=len, reverse=True):
        if model_lower == alias or model_lower.startswith(alias + "-") or model_lower.startswith(alias + "."):
            return aliases[alias]
    return None


def _to_litellm_model(provider_name: Optional[str], model: Optional[str]) -> str:
    """Map provider + model to LiteLLM model string. Tier aliases pass through."""
    if model and is_tier(model):
        return model
    if provider_name:
        key = _PROVIDER_SYNONYMS.get(provider_name.lower(), provider_name.lower())
        if key in MODEL_ALIASES:
            aliases = MODEL_ALIASES[key]
            if model:
                matched = _match_alias(aliases, model.lower())
                if matched:
                    return matched
                return model if key == "openai" else f"{key}/{model}"
            return aliases[None]
    if model:
        for aliases in MODEL_ALIASES.values():
            matched = _match_alias(aliases, model.lower())
            if matched:
                return matched
        return model
    return DEFAULT_MODELS["openai"]


def _to_llm_response(response: Any, resolved_model: str, provider_name: str) -> LLMResponse:
    content = response.choices[0].message.content or ""
    usage = getattr(response, "usage", None)
    input_tokens = getattr(usage, "prompt_tokens", 0) or 0
    output_tokens = getattr(usage, "completion_tokens", 0) or 0
    hidden = getattr(response, "_hidden_params", None) or {}
    cost = float(hidden.get("response_cost", 0) or 0)
    model_id = getattr(response, "model", None) or resolved_model
    return LLMResponse(
        content=content,
        input_tokens=input_tokens,
        output_tokens=output_tokens,
        model=model_id,
        provider=provider_name,
        cost=cost,
    )


class LiteLLMProvider(LLMProvider):
    """Default provider: concrete models go to litellm, tier aliases to the tier Router."""

    def __init__(self, default_model: str, metadata: Optional[dict] = None):
        """
        Args:
            default_model: LiteLLM model string or tier alias (fast, quality).
            metadata: Sent with every call so litellm callbacks can tag the stage.
        """
        self._default_model = default_model
        self._metadata = metadata or {}

    @property
    def name(self) -> str:
        return "litellm"

    @property
    def default_model(self) -> str:
        return self._default_model

    def set_metadata(self, metadata: dict) -> None:
        self._metadata.update(metadata)

    def _request(
        self, system_prompt: str, user_message: str, model: str, max_tokens: int, json_mode: bool
    ) -> Dict[str, Any]:
        messages: List[Dict[str, str]] = [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": user_message},
        ]
        request: Dict[str, Any] = {
            "model": model,
            "messages": messages,
            "max_tokens": max_tokens,
            "metadata": dict(self._metadata),
        }
        if json_mode:
            request["response_format"] = {"type": "json_object"}
        return request

    def complete(
        self,
        system_prompt: str,
        user_message: str,
        model: Optional[str] = None,
        max_tokens: int = 4096,
        json_mode: bool = False,
    ) -> LLMResponse:
        import litellm

        resolved_model = model or self._default_model
        request = self._request(system_prompt, user_message, resolved_model, max_tokens, json_mode)
        send = get_router().completion if is_tier(resolved_model) else litellm.completion
        return _to_llm_response(send(**request), resolved_model, self.name)

    async def acomplete(
        self,
        system_prompt: str,
        user_message: str,
        model: Optional[str] = None,
        max_tokens: int = 4096,
        json_mode: bool = False,
    ) -> LLMResponse:
        import litellm

        resolved_model = model or self._default_model
        request = self._request(system_prompt, user_message, resolved_model, max_tokens, json_mode)
        send = get_router().acompletion if is_tier(resolved_model) else litellm.acompletion
        return _to_llm_response(await send(**request), resolved_model, self.name)

    def is_available(self) -> bool:
        # Keys are read from the environment by litellm at call time
        return bool(self._default_model)
