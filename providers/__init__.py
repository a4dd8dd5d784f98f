"""LLM and image provider abstractions for multi-model support."""

from .base import LLMProvider, LLMResponse
from .factory import get_provider, list_providers
from .image_provider import ImageProvider, ImageResult, LiteLLMImageProvider, get_image_provider

__all__ = [
    "LLMProvider",
    "LLMResponse",
    "get_provider",
    "list_providers",
    "ImageProvider",
    "ImageResult",
    "LiteLLMImageProvider",
    "get_image_provider",
]
