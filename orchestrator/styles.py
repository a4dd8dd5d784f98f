"""Global color and font scheme for a composition."""

import logging
from typing import Dict, Optional

from config import BASE_COLORS, DEFAULT_FONTS, TEMPLATE_COLORS
from contracts import (
    ColorScheme,
    CompositionRequest,
    FontScheme,
    GlobalStyles,
    ReferenceSiteAnalysis,
    StyleInheritance,
)
from patterns import is_css_color

logger = logging.getLogger(__name__)

SPACIOUS_TERMS = {"minimal", "airy", "clean", "luxury", "elegant"}
COMPACT_TERMS = {"dense", "dashboard", "data", "compact"}
ROUNDED_TERMS = {"playful", "friendly", "soft", "fun"}
SHARP_TERMS = {"brutalist", "technical", "sharp", "editorial"}


def template_colors(template: str) -> Dict[str, str]:
    colors = dict(BASE_COLORS)
    colors.update(TEMPLATE_COLORS.get(template, TEMPLATE_COLORS["saas"]))
    return colors


def _reference_with_palette(request: CompositionRequest) -> Optional[ReferenceSiteAnalysis]:
    for reference in request.references:
        if reference.palette is not None:
            return reference
    return None


def extract_global_styles(request: CompositionRequest) -> GlobalStyles:
    """Build global styles from the template and reference sites.

    template: template colors only. reference: the first reference palette
    overrides every color it defines. blend: the reference supplies the brand
    colors (primary, accent) over the template's base scheme.
    """
    colors = template_colors(request.template)
    fonts = dict(DEFAULT_FONTS)
    mode = request.options.style_inheritance

    reference = _reference_with_palette(request)
    if mode != StyleInheritance.TEMPLATE and reference is not None:
        palette = reference.palette.model_dump(exclude_none=True)
        if mode == StyleInheritance.BLEND:
            palette = {role: palette[role] for role in ("primary", "accent") if role in palette}
        rejected = sorted(role for role, value in palette.items() if not is_css_color(value))
        if rejected:
            logger.warning("[Composer] Ignoring unusable reference colors from %s: %s", reference.url, rejected)
        palette = {role: value for role, value in palette.items() if role not in rejected}
        colors.update(palette)
        logger.debug("[Composer] Colors from %s (%s): %s", reference.url, mode.value, sorted(palette))

    if mode != StyleInheritance.TEMPLATE:
        for ref in request.references:
            for role, family in ref.fonts.items():
                if role in fonts and family:
                    fonts[role] = family
            if ref.fonts:
                break

    terms = set(request.aesthetic_terms())
    spacing = "comfortable"
    if terms & COMPACT_TERMS:
        spacing = "compact"
    elif terms & SPACIOUS_TERMS:
        spacing = "spacious"
    radius = "md"
    if terms & ROUNDED_TERMS:
        radius = "lg"
    elif terms & SHARP_TERMS:
        radius = "sm"

    return GlobalStyles(
        colors=ColorScheme(**colors),
        fonts=FontScheme(**fonts),
        spacing=spacing,
        border_radius=radius,
    )
