"""Find the image slots of a composition that still need a real image."""

import re
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from config import settings
from contracts import (
    ImageEstimate,
    ImagePriority,
    ImageTask,
    PatternCategory,
    SectionComposition,
    Slot,
    SlotKind,
)
from patterns import PatternRegistry, is_empty, is_placeholder
from patterns.slots import walk_image_values
from .prompts import (
    CATEGORY_PROMPTS,
    GENERIC_PROMPT,
    build_prompt,
    pattern_config,
    size_for_aspect,
    style_for,
)

_INDEXED = re.compile(r"\[\d+\]")


def section_slots(section: SectionComposition, registry: PatternRegistry) -> Sequence[Slot]:
    """Slot schema of a section: inline for custom sections, from the registry otherwise."""
    if section.custom_slots is not None:
        return section.custom_slots
    pattern = registry.get(section.pattern_id)
    return pattern.slots if pattern is not None else ()


def section_category(section: SectionComposition, registry: PatternRegistry) -> Optional[PatternCategory]:
    pattern = registry.get(section.pattern_id)
    if pattern is not None:
        return pattern.category
    return section.intent


def _item(props: Dict[str, Any], path: str) -> Dict[str, Any]:
    """Array item a nested path points into, or {} for direct paths."""
    match = re.match(r"^([^\[]+)\[(\d+)\]\.", path)
    if not match:
        return {}
    items = props.get(match.group(1))
    index = int(match.group(2))
    if isinstance(items, list) and index < len(items) and isinstance(items[index], dict):
        return items[index]
    return {}


def detect_image_tasks(
    section: SectionComposition,
    registry: PatternRegistry,
    values: Mapping[str, str],
    skip_low_priority: bool = False,
) -> List[ImageTask]:
    """Image tasks for every placeholder image value of one section.

    Optional direct image slots that are absent are only filled when the
    pattern has an explicit image config for them.
    """
    tasks: List[ImageTask] = []
    category = section_category(section, registry)
    for slot, path, value in walk_image_values(section_slots(section, registry), section.props):
        if not is_placeholder(value):
            continue
        template_path = _INDEXED.sub("[]", path)
        config = pattern_config(section.pattern_id, template_path)
        nested = slot.kind == SlotKind.ARRAY
        if config is None and not nested and not slot.required and is_empty(value):
            continue
        priority = config.priority if config else ImagePriority.MEDIUM
        if skip_low_priority and priority == ImagePriority.LOW:
            continue

        field_name = path.rsplit(".", 1)[-1] if nested else slot.name
        item = _item(section.props, path)
        merged: Dict[str, Any] = dict(values)
        merged.update({k: v for k, v in item.items() if isinstance(v, str)})
        if config is not None:
            template = config.prompt_template
        elif slot.ai_prompt:
            template = f"{slot.ai_prompt} for {{projectName}}, {{domain}}"
        else:
            template = CATEGORY_PROMPTS.get(category, GENERIC_PROMPT)

        tasks.append(ImageTask(
            section_id=section.id,
            prop_path=path,
            prompt=build_prompt(template, merged),
            size=config.size if config else size_for_aspect(slot.aspect_ratio, field_name),
            style=config.style if config else style_for(field_name, category),
            priority=priority,
        ))
    return tasks


def estimate_images(
    sections: Iterable[SectionComposition],
    registry: PatternRegistry,
    skip_low_priority: bool = False,
) -> ImageEstimate:
    """Count image work without calling the image service."""
    section_count = 0
    images = 0
    for section in sections:
        found = len(detect_image_tasks(section, registry, {}, skip_low_priority))
        if found:
            section_count += 1
            images += found
    return ImageEstimate(
        sections_needing_images=section_count,
        estimated_images=images,
        estimated_seconds=images * settings.seconds_per_image_estimate,
    )
