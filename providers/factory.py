"""Provider lookup by name, plus an availability report for the CLI."""

from typing import Optional, Dict, Type

from config import settings
from .base import LLMProvider
from .anthropic_provider import AnthropicProvider
from .openai_provider import OpenAIProvider, DeepseekProvider
from .litellm_provider import LiteLLMProvider, _to_litellm_model
from .router import get_tier_model_list


NATIVE_PROVIDERS: Dict[str, Type[LLMProvider]] = {
    "anthropic": AnthropicProvider,
    "claude": AnthropicProvider,
    "openai": OpenAIProvider,
    "gpt": OpenAIProvider,
    "deepseek": DeepseekProvider,
}

# Reachable only through litellm
LITELLM_PROVIDERS = ("litellm", "gemini", "google")


def get_provider(
    provider_name: Optional[str] = None,
    model: Optional[str] = None,
) -> LLMProvider:
    """Build the provider the agents will call.

    Without a name the LiteLLM provider is returned, with ``model`` (or
    ``settings.default_model``) resolved to a litellm model string. Tier
    aliases pass through untouched and are routed at call time.

    Examples:
        get_provider()                              # litellm, default tier
        get_provider(model="quality")               # litellm, quality tier
        get_provider("anthropic")                   # native SDK
        get_provider("gemini", "gemini-2.5-flash")  # litellm, gemini/gemini-2.5-flash

    Raises:
        ValueError: for a provider name that is not known
    """
    if provider_name is None:
        return LiteLLMProvider(default_model=_to_litellm_model(None, model or settings.default_model))

    key = provider_name.lower()
    if key in NATIVE_PROVIDERS:
        return NATIVE_PROVIDERS[key]()
    if key in LITELLM_PROVIDERS:
        target = None if key == "litellm" else key
        return LiteLLMProvider(default_model=_to_litellm_model(target, model or settings.default_model))
    raise ValueError(
        f"Unknown provider: {provider_name}. "
        f"Available: {sorted(set(NATIVE_PROVIDERS) | set(LITELLM_PROVIDERS))}"
    )


def list_providers() -> Dict[str, bool]:
    """Provider name -> whether it can be called with the current environment.

    litellm counts as ready when the tier Router would have at least one
    deployment; native providers need their own API key.
    """
    report = {"litellm": bool(get_tier_model_list())}
    for name in ("anthropic", "openai", "deepseek"):
        report[name] = NATIVE_PROVIDERS[name]().is_available()
    return report
