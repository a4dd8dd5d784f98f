"""Configuration settings for the Page Composer engine."""

# Load .env into os.environ so provider API keys (e.g. OPENAI_API_KEY) reach litellm
from dotenv import load_dotenv

load_dotenv()

from pydantic_settings import BaseSettings
from pydantic import Field
from typing import Dict, List, Optional
from pathlib import Path


class Settings(BaseSettings):
    """Global settings for the Page Composer.

    Settings can be overridden via environment variables with PAGE_COMPOSER_ prefix.
    Example: PAGE_COMPOSER_MAX_CONCURRENT_SECTIONS=8
    """

    # Model config (tier aliases "fast" / "quality" resolve through the LiteLLM router)
    default_model: str = Field(
        default="fast",
        description="Default model for generative calls"
    )
    selector_model: str = Field(
        default="fast",
        description="Model used for pattern selection"
    )
    prop_model: str = Field(
        default="fast",
        description="Model used for slot content generation"
    )
    gap_filler_model: str = Field(
        default="quality",
        description="Model used to synthesize custom sections"
    )
    image_model: str = Field(
        default="dall-e-3",
        description="LiteLLM image model used for placeholder images (balanced tier)"
    )
    image_model_fast: str = Field(
        default="dall-e-2",
        description="Image model for low-priority slots such as logos and backgrounds"
    )
    image_model_quality: str = Field(
        default="gpt-image-1",
        description="Image model for high-priority slots such as hero visuals"
    )
    image_model_tier: Optional[str] = Field(
        default=None,
        description="Force one image tier (fast, balanced, quality) instead of choosing by slot priority"
    )

    # Call limits
    max_tokens_per_agent_call: int = Field(
        default=4096,
        description="Maximum tokens per individual generative call"
    )
    api_timeout_seconds: float = Field(
        default=60.0,
        gt=0,
        description="Timeout for a single generative or image call in seconds"
    )
    api_max_retries: int = Field(
        default=1,
        ge=0,
        description="Retries when a response does not match the required JSON shape"
    )

    # Concurrency
    max_concurrent_sections: int = Field(
        default=4,
        ge=1,
        description="Default ceiling on sections composed at the same time"
    )
    max_concurrent_images: int = Field(
        default=3,
        ge=1,
        description="Default ceiling on in-flight image synthesis calls"
    )

    # Selection
    selector_max_candidates: int = Field(
        default=6,
        ge=1,
        description="Maximum candidate patterns described per section requirement"
    )
    selector_guidance_chars: int = Field(
        default=160,
        ge=20,
        description="Guidance text is truncated to this many characters in prompts"
    )
    max_patterns_per_page: int = Field(
        default=8,
        ge=1,
        description="Default maximum number of sections per page"
    )

    # Images
    image_cache_ttl_seconds: int = Field(
        default=3600,
        description="How long a generated image URL is reused for an identical prompt"
    )
    seconds_per_image_estimate: float = Field(
        default=2.0,
        description="Average synthesis time used by the image estimator"
    )

    # Token pricing (per 1M tokens), used when a provider reports no cost
    input_token_cost_per_million: float = Field(
        default=0.15,
        description="Cost per 1M input tokens"
    )
    output_token_cost_per_million: float = Field(
        default=0.60,
        description="Cost per 1M output tokens"
    )

    # Paths
    registry_path: str = Field(
        default="",
        description="Pattern catalog JSON (empty: the bundled patterns/catalog.json)"
    )
    output_dir: str = Field(
        default="./outputs",
        description="Directory for written compositions"
    )

    model_config = {
        "env_prefix": "PAGE_COMPOSER_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",  # ignore extra env vars (e.g. OPENAI_API_KEY) not in schema
    }

    def get_output_path(self) -> Path:
        """Get output path as Path object."""
        return Path(self.output_dir)

    def get_registry_path(self) -> Path:
        """Get the catalog path, falling back to the bundled catalog."""
        if self.registry_path:
            return Path(self.registry_path)
        return Path(__file__).parent / "patterns" / "catalog.json"

    def calculate_cost(self, input_tokens: int, output_tokens: int) -> float:
        """Calculate cost in USD for given token usage."""
        input_cost = (input_tokens / 1_000_000) * self.input_token_cost_per_million
        output_cost = (output_tokens / 1_000_000) * self.output_token_cost_per_million
        return input_cost + output_cost


# Page type -> ordered section categories used when a page lists no explicit sections
PAGE_TYPE_CATEGORIES: Dict[str, List[str]] = {
    "home": ["navigation", "hero", "features", "testimonials", "cta", "footer"],
    "about": ["navigation", "hero", "content", "team", "stats", "footer"],
    "pricing": ["navigation", "pricing", "faq", "cta", "footer"],
    "features": ["navigation", "hero", "features", "stats", "cta", "footer"],
    "blog": ["navigation", "hero", "content", "footer"],
    "blog-post": ["navigation", "content", "cta", "footer"],
    "contact": ["navigation", "hero", "faq", "footer"],
    "product": ["navigation", "hero", "commerce", "testimonials", "footer"],
    "dashboard": ["navigation", "stats", "dashboard"],
    "settings": ["navigation", "content"],
    "auth": ["auth"],
}

# Template -> primary/secondary/accent brand colors layered on the dark base scheme
TEMPLATE_COLORS: Dict[str, Dict[str, str]] = {
    "saas": {"primary": "#F97316", "secondary": "#FB923C", "accent": "#FDBA74"},
    "ecommerce": {"primary": "#10B981", "secondary": "#34D399", "accent": "#6EE7B7"},
    "blog": {"primary": "#6366F1", "secondary": "#818CF8", "accent": "#A5B4FC"},
    "portfolio": {"primary": "#8B5CF6", "secondary": "#A78BFA", "accent": "#C4B5FD"},
    "dashboard": {"primary": "#3B82F6", "secondary": "#60A5FA", "accent": "#93C5FD"},
}

BASE_COLORS: Dict[str, str] = {
    "background": "#0A0A0A",
    "foreground": "#FFFFFF",
    "muted": "#78716C",
}

DEFAULT_FONTS: Dict[str, str] = {
    "heading": "Inter",
    "body": "Inter",
    "mono": "JetBrains Mono",
}


# Create singleton instance
settings = Settings()
