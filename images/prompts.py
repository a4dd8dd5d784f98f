"""Prompt templates and size/style hints for image slots."""

import re
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

from contracts import ImageModelTier, ImagePriority, ImageStyle, PatternCategory, SizeClass


@dataclass(frozen=True)
class ImageSlotConfig:
    """How to synthesize the image for one slot path."""
    prompt_template: str
    size: SizeClass
    style: ImageStyle
    priority: ImagePriority = ImagePriority.MEDIUM


# pattern id -> slot path ("image", "features[].image") -> config
PATTERN_IMAGE_CONFIGS: Dict[str, Dict[str, ImageSlotConfig]] = {
    "hero-split-image": {
        "image": ImageSlotConfig(
            "Hero image for {projectName} - {domain}. Professional, modern, high-quality photography style, "
            "{industry} industry",
            SizeClass.LANDSCAPE, ImageStyle.PHOTO, ImagePriority.HIGH,
        ),
    },
    "hero-video-bg": {
        "posterImage": ImageSlotConfig(
            "Cinematic poster image for {projectName}, {domain}. Dark, atmospheric, professional",
            SizeClass.BANNER, ImageStyle.PHOTO, ImagePriority.HIGH,
        ),
    },
    "features-icon-grid": {
        "features[].image": ImageSlotConfig(
            "Minimal icon illustration for {title}: {description}. Flat design, single accent color, "
            "modern tech aesthetic, centered",
            SizeClass.ICON, ImageStyle.ICON,
        ),
    },
    "features-grid": {
        "features[].image": ImageSlotConfig(
            "Feature icon for {title}. Simple geometric shape, modern, minimal, single color on neutral background",
            SizeClass.ICON, ImageStyle.ICON,
        ),
    },
    "features-bento": {
        "features[].image": ImageSlotConfig(
            "Abstract illustration for {title}. Modern gradient, geometric shapes, tech aesthetic",
            SizeClass.SQUARE, ImageStyle.ILLUSTRATION,
        ),
    },
    "features-alternating": {
        "features[].image": ImageSlotConfig(
            "Feature illustration for {title}: {description}. Modern, clean, professional illustration style",
            SizeClass.SQUARE, ImageStyle.ILLUSTRATION,
        ),
    },
    "testimonials-grid": {
        "testimonials[].avatar": ImageSlotConfig(
            "Professional headshot of {author}, {role}. Natural lighting, friendly expression, "
            "business professional, neutral background",
            SizeClass.ICON, ImageStyle.PHOTO,
        ),
    },
    "testimonials-carousel": {
        "testimonials[].avatar": ImageSlotConfig(
            "Professional portrait of {author}, {role}. Corporate headshot style, confident expression",
            SizeClass.ICON, ImageStyle.PHOTO,
        ),
    },
    "logos-simple": {
        "logos[].src": ImageSlotConfig(
            "Minimalist company logo for {name}. Abstract geometric mark, single color, professional, "
            "tech company aesthetic",
            SizeClass.ICON, ImageStyle.LOGO, ImagePriority.LOW,
        ),
    },
    "cta-simple": {
        "backgroundImage": ImageSlotConfig(
            "Abstract gradient background for call-to-action. Flowing shapes, {primaryColor} tones, "
            "subtle glow, professional dark theme",
            SizeClass.BANNER, ImageStyle.ABSTRACT, ImagePriority.LOW,
        ),
    },
    "product-grid": {
        "products[].image": ImageSlotConfig(
            "Product photo of {name}. E-commerce style, white background, professional lighting, centered, "
            "{category} product",
            SizeClass.SQUARE, ImageStyle.PHOTO,
        ),
    },
    "team-grid": {
        "members[].avatar": ImageSlotConfig(
            "Professional headshot of {name}, {role}. Corporate portrait, friendly, approachable, "
            "neutral background",
            SizeClass.ICON, ImageStyle.PHOTO,
        ),
    },
}

CATEGORY_PROMPTS: Dict[PatternCategory, str] = {
    PatternCategory.HERO: "Hero image for {projectName}, {domain}",
    PatternCategory.FEATURES: "Feature illustration for {projectName}, representing {title}",
    PatternCategory.TESTIMONIALS: "Professional headshot of a {audience}, friendly and approachable",
    PatternCategory.COMMERCE: "Product showcase for {projectName}, clean modern presentation",
    PatternCategory.TEAM: "Professional team member portrait, {industry} industry",
    PatternCategory.CONTENT: "Editorial illustration for {projectName}, {domain}",
    PatternCategory.CTA: "Call-to-action background for {projectName}, abstract and inviting",
    PatternCategory.PRICING: "Abstract background for pricing section, professional and clean",
    PatternCategory.LOGOS: "Minimalist company logo for {name}, single color",
}

GENERIC_PROMPT = "Image for {projectName}, {domain}"

ASPECT_SIZES: Dict[str, SizeClass] = {
    "1:1": SizeClass.SQUARE,
    "4:3": SizeClass.LANDSCAPE,
    "3:2": SizeClass.LANDSCAPE,
    "16:9": SizeClass.LANDSCAPE,
    "21:9": SizeClass.BANNER,
    "3:1": SizeClass.BANNER,
    "9:16": SizeClass.PORTRAIT,
    "3:4": SizeClass.PORTRAIT,
    "2:3": SizeClass.PORTRAIT,
}

_PLACEHOLDER = re.compile(r"\{[^}]+\}")


def pattern_config(pattern_id: str, slot_path: str) -> Optional[ImageSlotConfig]:
    """Config for a slot path of a pattern; slot_path uses [] for array items."""
    return PATTERN_IMAGE_CONFIGS.get(pattern_id, {}).get(slot_path)


def size_for_aspect(aspect_ratio: Optional[str], field_name: str = "") -> SizeClass:
    """Map an aspect-ratio hint (or a field name) to a size class."""
    if aspect_ratio and aspect_ratio in ASPECT_SIZES:
        return ASPECT_SIZES[aspect_ratio]
    lowered = field_name.lower()
    if "avatar" in lowered or "icon" in lowered or "logo" in lowered or lowered == "src":
        return SizeClass.ICON
    if "background" in lowered or "banner" in lowered:
        return SizeClass.BANNER
    return SizeClass.SQUARE


def style_for(field_name: str, category: Optional[PatternCategory]) -> ImageStyle:
    lowered = field_name.lower()
    if "avatar" in lowered or "photo" in lowered:
        return ImageStyle.PHOTO
    if "logo" in lowered or lowered == "src":
        return ImageStyle.LOGO
    if "icon" in lowered:
        return ImageStyle.ICON
    if "background" in lowered:
        return ImageStyle.ABSTRACT
    if category in (PatternCategory.HERO, PatternCategory.TEAM, PatternCategory.COMMERCE):
        return ImageStyle.PHOTO
    return ImageStyle.ILLUSTRATION


PRIORITY_MODEL_TIERS: Dict[ImagePriority, ImageModelTier] = {
    ImagePriority.HIGH: ImageModelTier.QUALITY,
    ImagePriority.MEDIUM: ImageModelTier.BALANCED,
    ImagePriority.LOW: ImageModelTier.FAST,
}


def recommended_model_tier(priority: ImagePriority) -> ImageModelTier:
    """Model tier for a slot priority: hero visuals get the best model, logos the cheapest."""
    return PRIORITY_MODEL_TIERS[priority]


def build_prompt(template: str, values: Mapping[str, Any]) -> str:
    """Interpolate {key} placeholders with string values and drop the rest."""
    prompt = template
    for key, value in values.items():
        if isinstance(value, str) and value:
            prompt = prompt.replace("{" + key + "}", value)
    prompt = _PLACEHOLDER.sub("", prompt)
    prompt = re.sub(r"\s+", " ", prompt)
    prompt = re.sub(r"\s+([,.:])", r"\1", prompt)
    return prompt.strip(" ,-")


def prompt_values(
    project_name: str,
    description: str = "",
    template: str = "",
    primary_color: str = "",
    audience: str = "",
) -> Dict[str, str]:
    """Context fields available to every prompt template."""
    return {
        "projectName": project_name,
        "domain": description[:100],
        "industry": template,
        "primaryColor": primary_color,
        "audience": audience or "business professional",
    }
