"""Pattern migration: move a section's content onto a different pattern.

Migration starts from the target pattern's defaults and carries over every
value it can place, first by exact slot name, then through the alias table,
then through category-specific rules. Text is never shortened; over-length
values are left for validation to report. It never raises.
"""

import copy
import hashlib
import logging
import uuid
from typing import Any, Dict, List, Optional, Sequence, Tuple

from contracts import Pattern, PatternCategory, SectionComposition, SlotKind
from .registry import PatternRegistry, get_registry
from .slots import coerce, is_empty, is_placeholder

logger = logging.getLogger(__name__)

# Each group lists interchangeable slot names in lookup order.
PROP_ALIASES: Tuple[Tuple[str, ...], ...] = (
    ("headline", "title", "heading"),
    ("subheadline", "subtitle", "description", "tagline"),
    ("primaryCta", "ctaText", "cta", "button", "buttonText"),
    ("secondaryCta", "secondaryButton"),
    ("ctaLink", "buttonUrl", "buttonHref", "href"),
    ("image", "media", "backgroundImage", "heroImage", "posterImage"),
    ("features", "items", "cards", "list"),
    ("testimonials", "reviews", "quotes"),
    ("plans", "tiers", "pricing"),
    ("faqs", "questions"),
    ("members", "team", "people"),
    ("logos", "brands", "companies"),
    ("stats", "metrics"),
    ("posts", "articles"),
    ("products", "items"),
)

_IMAGE_NAMES = ("image", "backgroundImage", "posterImage", "heroImage", "media")
_VIDEO_NAMES = ("videoUrl", "video")

# Category -> (array slot names, setting slot names) preserved between patterns of that category
_CATEGORY_RULES: Dict[PatternCategory, Tuple[Tuple[str, ...], Tuple[str, ...]]] = {
    PatternCategory.FEATURES: (("features", "items", "cards", "list"), ("columns",)),
    PatternCategory.TESTIMONIALS: (("testimonials", "reviews", "quotes"), ("layout",)),
    PatternCategory.PRICING: (("plans", "tiers"), ("showToggle",)),
    PatternCategory.FAQ: (("faqs", "items", "questions"), ()),
    PatternCategory.TEAM: (("members", "team", "people"), ()),
    PatternCategory.LOGOS: (("logos", "brands"), ()),
    PatternCategory.STATS: (("stats", "metrics"), ()),
}


def aliases_for(name: str) -> List[str]:
    """Alternative names for a slot, in lookup order, without the name itself."""
    found: List[str] = []
    for group in PROP_ALIASES:
        if name in group:
            found.extend(alias for alias in group if alias != name and alias not in found)
    return found


def _first_present(props: Dict[str, Any], names: Sequence[str]) -> Optional[str]:
    for name in names:
        if name in props and not is_empty(props[name]):
            return name
    return None


def _fits(value: Any, pattern: Pattern, name: str) -> Tuple[bool, Any]:
    # Text is carried at full length so a later migration back restores it
    slot = pattern.get_slot(name)
    if slot is None:
        return False, None
    return coerce(value, slot.kind)


def _apply_category_rules(
    old_props: Dict[str, Any],
    new_props: Dict[str, Any],
    carried: set,
    new_pattern: Pattern,
) -> None:
    category = new_pattern.category
    if category == PatternCategory.HERO:
        image_source = next(
            (n for n in _IMAGE_NAMES if n in old_props and not is_placeholder(old_props[n])),
            None,
        )
        video_source = _first_present(old_props, _VIDEO_NAMES)
        for slot in new_pattern.slots:
            if slot.name in carried:
                continue
            if slot.kind == SlotKind.IMAGE and image_source:
                new_props[slot.name] = copy.deepcopy(old_props[image_source])
                carried.add(slot.name)
            elif slot.name in _VIDEO_NAMES and video_source:
                new_props[slot.name] = copy.deepcopy(old_props[video_source])
                carried.add(slot.name)
        return

    rule = _CATEGORY_RULES.get(category)
    if rule is None:
        return
    array_names, setting_names = rule
    source = _first_present(old_props, array_names)
    target = next((n for n in array_names if new_pattern.get_slot(n)), None)
    if source and target and target not in carried:
        ok, value = _fits(copy.deepcopy(old_props[source]), new_pattern, target)
        if ok:
            new_props[target] = value
            carried.add(target)
    for name in setting_names:
        if name in old_props and name not in carried and new_pattern.get_slot(name):
            ok, value = _fits(old_props[name], new_pattern, name)
            if ok:
                new_props[name] = value
                carried.add(name)


def migrate_section(
    section: SectionComposition,
    new_pattern_id: str,
    registry: Optional[PatternRegistry] = None,
) -> SectionComposition:
    """Re-target a section to another pattern, keeping as much content as possible.

    The variant is always cleared. An unknown target id swaps only the id.
    """
    registry = registry or get_registry()
    new_pattern = registry.get(new_pattern_id)
    if new_pattern is None:
        logger.warning(
            "[PatternMigration] Unknown pattern '%s'; swapping id of section '%s' without migrating props",
            new_pattern_id, section.id,
        )
        return section.model_copy(update={"pattern_id": new_pattern_id, "variant_id": None}, deep=True)

    old_pattern = registry.get(section.pattern_id)
    old_props = section.props
    new_props = new_pattern.defaults()
    carried: set = set()

    for slot in new_pattern.slots:
        if slot.name in old_props and not is_empty(old_props[slot.name]):
            ok, value = _fits(copy.deepcopy(old_props[slot.name]), new_pattern, slot.name)
            if ok:
                new_props[slot.name] = value
                carried.add(slot.name)

    for slot in new_pattern.slots:
        if slot.name in carried:
            continue
        source = _first_present(old_props, aliases_for(slot.name))
        if source:
            ok, value = _fits(copy.deepcopy(old_props[source]), new_pattern, slot.name)
            if ok:
                new_props[slot.name] = value
                carried.add(slot.name)

    if old_pattern is not None and old_pattern.category == new_pattern.category:
        _apply_category_rules(old_props, new_props, carried, new_pattern)

    logger.debug(
        "[PatternMigration] %s -> %s carried %s",
        section.pattern_id, new_pattern_id, sorted(carried),
    )
    return SectionComposition(
        id=section.id,
        pattern_id=new_pattern.id,
        variant_id=None,
        props=new_props,
        intent=section.intent,
        is_custom_generated=False,
        custom_slots=None,
    )


def generate_section_id(pattern_id: str, *parts: Any) -> str:
    """Section id derived from the pattern id.

    With parts (seed, page, index...) the id is deterministic; without, it is random.
    """
    if parts:
        digest = hashlib.sha1(":".join(str(p) for p in parts).encode("utf-8")).hexdigest()[:8]
    else:
        digest = uuid.uuid4().hex[:8]
    return f"{pattern_id}-{digest}"


def duplicate_section(section: SectionComposition) -> SectionComposition:
    """Deep copy of a section under a fresh id."""
    return section.model_copy(update={"id": generate_section_id(section.pattern_id)}, deep=True)
