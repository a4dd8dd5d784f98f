"""Generative stages of the Page Composer.

Each agent wraps one kind of LLM call and always returns a usable value:
provider failures surface as StageResult.fallback(...).
"""

from .base_agent import BaseAgent, AgentResult, TokenUsage
from .context import BrandContext, brand_context, context_terms, tokenize
from .selector_agent import SelectorAgent, fallback_select, choose_variant, recommend_layout
from .prop_generator_agent import PropGeneratorAgent, default_props, sanitize_props
from .gap_filler_agent import (
    GapFillerAgent,
    can_fulfill_with_pattern,
    custom_pattern_id,
    fallback_section,
)

__all__ = [
    # Base
    "BaseAgent",
    "AgentResult",
    "TokenUsage",
    # Context
    "BrandContext",
    "brand_context",
    "context_terms",
    "tokenize",
    # Selector
    "SelectorAgent",
    "fallback_select",
    "choose_variant",
    "recommend_layout",
    # Props
    "PropGeneratorAgent",
    "default_props",
    "sanitize_props",
    # Gap filling
    "GapFillerAgent",
    "can_fulfill_with_pattern",
    "custom_pattern_id",
    "fallback_section",
]
