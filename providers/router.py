"""Tier aliases resolved by a litellm Router.

Composition stages name a tier rather than a model: ``fast`` for pattern
selection and slot copy (many small calls), ``quality`` for designing custom
sections. The Router only sees the providers that have an API key set.
"""

import os
from typing import Any, Dict, List, Tuple

_tier_router = None

TIER_NAMES = ("fast", "quality")

# Preference order per tier
TIER_CANDIDATES: Dict[str, Tuple[str, ...]] = {
    "fast": (
        "gpt-4o-mini",
        "anthropic/claude-3-5-haiku-20241022",
        "gemini/gemini-2.0-flash",
        "deepseek/deepseek-chat",
    ),
    "quality": (
        "anthropic/claude-sonnet-4-20250514",
        "gpt-4o",
        "gemini/gemini-2.5-pro",
        "deepseek/deepseek-chat",
    ),
}

KEY_FOR_PREFIX = {
    "gpt-": "OPENAI_API_KEY",
    "anthropic/": "ANTHROPIC_API_KEY",
    "gemini/": "GOOGLE_API_KEY",
    "deepseek/": "DEEPSEEK_API_KEY",
}


def is_tier(model: str) -> bool:
    return model in TIER_NAMES


def has_key(model: str) -> bool:
    for prefix, env_var in KEY_FOR_PREFIX.items():
        if model.startswith(prefix):
            return bool(os.environ.get(env_var, "").strip())
    return False


def get_tier_model_list() -> List[Dict[str, Any]]:
    """Router deployments for every tier candidate whose provider key is present."""
    return [
        {"model_name": tier, "litellm_params": {"model": model}, "order": rank}
        for tier, models in TIER_CANDIDATES.items()
        for rank, model in enumerate(models, start=1)
        if has_key(model)
    ]


def create_router():
    from litellm import Router

    model_list = get_tier_model_list()
    if not model_list:
        raise RuntimeError(
            "No LLM provider configured. Set one of "
            + ", ".join(sorted(set(KEY_FOR_PREFIX.values())))
            + " in the environment or .env."
        )
    return Router(
        model_list=model_list,
        num_retries=1,
        fallbacks=[{"quality": ["fast"]}],
        enable_pre_call_checks=False,
    )


def get_router():
    """Process-wide Router, built on first use."""
    global _tier_router
    if _tier_router is None:
        _tier_router = create_router()
    return _tier_router


def reset_router() -> None:
    """Drop the cached Router so the next call sees changed keys."""
    global _tier_router
    _tier_router = None
