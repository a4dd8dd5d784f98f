"""Image slot detection, prompt building, and synthesis."""

from .prompts import (
    ImageSlotConfig,
    PATTERN_IMAGE_CONFIGS,
    build_prompt,
    recommended_model_tier,
    prompt_values,
    size_for_aspect,
)
from .detector import detect_image_tasks, estimate_images, section_slots
from .generator import (
    CancelSignal,
    ImageFillResult,
    ImageGenerator,
    set_prop_path,
    stats_for,
)

__all__ = [
    "ImageSlotConfig",
    "PATTERN_IMAGE_CONFIGS",
    "build_prompt",
    "recommended_model_tier",
    "prompt_values",
    "size_for_aspect",
    "detect_image_tasks",
    "estimate_images",
    "section_slots",
    "CancelSignal",
    "ImageFillResult",
    "ImageGenerator",
    "set_prop_path",
    "stats_for",
]
