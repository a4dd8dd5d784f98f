"""Image synthesis providers.

The generator only depends on ImageProvider.generate(); the LiteLLM
implementation maps model tiers to models and adds an in-process cache so
repeated prompts report a cache hit.
"""

import hashlib
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from config import settings
from contracts import ImageModelTier, ImageStyle, SizeClass


@dataclass
class ImageResult:
    """Outcome of one synthesis call."""
    success: bool
    url: Optional[str] = None
    cached: bool = False
    error: Optional[str] = None


class ImageProvider(ABC):
    """Abstract image synthesis capability."""

    @property
    @abstractmethod
    def name(self) -> str:
        pass

    @abstractmethod
    async def generate(
        self,
        prompt: str,
        size: SizeClass,
        style: ImageStyle,
        tier: ImageModelTier = ImageModelTier.BALANCED,
    ) -> ImageResult:
        """Synthesize one image with the model behind ``tier``.

        Providers may raise; callers record exceptions as failed outcomes.
        """
        pass

    def is_available(self) -> bool:
        return True


# Size class -> resolution accepted by DALL-E 3 style endpoints
SIZE_MAP: Dict[SizeClass, str] = {
    SizeClass.ICON: "1024x1024",
    SizeClass.SQUARE: "1024x1024",
    SizeClass.LANDSCAPE: "1792x1024",
    SizeClass.BANNER: "1792x1024",
    SizeClass.PORTRAIT: "1024x1792",
}

STYLE_SUFFIX: Dict[ImageStyle, str] = {
    ImageStyle.ICON: "Flat icon, simple shapes, centered, plain background.",
    ImageStyle.ILLUSTRATION: "Clean modern illustration.",
    ImageStyle.PHOTO: "Photorealistic, professional lighting.",
    ImageStyle.ABSTRACT: "Abstract shapes and gradients, no text.",
    ImageStyle.LOGO: "Minimal vector logo mark, no text.",
}


def cache_key(prompt: str, size: SizeClass, style: ImageStyle, model: str = "") -> str:
    raw = f"{model}|{prompt}|{size.value}|{style.value}"
    return hashlib.sha256(raw.encode("utf-8")).hexdigest()


class LiteLLMImageProvider(ImageProvider):
    """Image provider that delegates to litellm.aimage_generation().

    Each tier maps to its own model; generated URLs are cached per model and
    prompt for ``cache_ttl_seconds``. Expired entries are swept on every insert.
    """

    def __init__(
        self,
        model: Optional[str] = None,
        cache_ttl_seconds: Optional[int] = None,
        tier_models: Optional[Dict[ImageModelTier, str]] = None,
    ):
        self.model = model or settings.image_model
        self.tier_models: Dict[ImageModelTier, str] = {
            ImageModelTier.FAST: settings.image_model_fast,
            ImageModelTier.BALANCED: self.model,
            ImageModelTier.QUALITY: settings.image_model_quality,
        }
        if tier_models:
            self.tier_models.update(tier_models)
        self.cache_ttl_seconds = (
            settings.image_cache_ttl_seconds if cache_ttl_seconds is None else cache_ttl_seconds
        )
        self._cache: Dict[str, Tuple[float, str]] = {}
        self._hits = 0
        self._misses = 0

    @property
    def name(self) -> str:
        return "litellm"

    def model_for(self, tier: ImageModelTier) -> str:
        return self.tier_models.get(tier) or self.model

    def _expired(self, stored_at: float, now: float) -> bool:
        return now - stored_at > self.cache_ttl_seconds

    def _cached(self, key: str) -> Optional[str]:
        entry = self._cache.get(key)
        if entry is None:
            return None
        stored_at, url = entry
        if self._expired(stored_at, time.monotonic()):
            del self._cache[key]
            return None
        return url

    def _store(self, key: str, url: str) -> None:
        now = time.monotonic()
        for stale in [k for k, (stored_at, _) in self._cache.items() if self._expired(stored_at, now)]:
            del self._cache[stale]
        self._cache[key] = (now, url)

    def clear_cache(self) -> None:
        self._cache.clear()
        self._hits = 0
        self._misses = 0

    def cache_stats(self) -> Dict[str, int]:
        return {"entries": len(self._cache), "hits": self._hits, "misses": self._misses}

    async def generate(
        self,
        prompt: str,
        size: SizeClass,
        style: ImageStyle,
        tier: ImageModelTier = ImageModelTier.BALANCED,
    ) -> ImageResult:
        import litellm

        model = self.model_for(tier)
        key = cache_key(prompt, size, style, model)
        url = self._cached(key)
        if url:
            self._hits += 1
            return ImageResult(success=True, url=url, cached=True)
        self._misses += 1

        response = await litellm.aimage_generation(
            model=model,
            prompt=f"{prompt} {STYLE_SUFFIX[style]}",
            size=SIZE_MAP[size],
            n=1,
        )
        data = response.data[0] if response.data else None
        if data is None:
            return ImageResult(success=False, error="Image service returned no data")
        url = getattr(data, "url", None)
        if not url and getattr(data, "b64_json", None):
            url = f"data:image/png;base64,{data.b64_json}"
        if not url:
            return ImageResult(success=False, error="Image service returned no URL")

        self._store(key, url)
        return ImageResult(success=True, url=url)

    def is_available(self) -> bool:
        return bool(self.model)


def get_image_provider(model: Optional[str] = None) -> ImageProvider:
    """Return the default image provider."""
    return LiteLLMImageProvider(model=model)
