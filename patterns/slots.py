"""Slot value rules shared by generation, validation, migration, and image filling."""

import copy
import logging
from typing import Any, Callable, Dict, Iterable, Optional, Tuple

from contracts import Slot, SlotKind

logger = logging.getLogger(__name__)

PLACEHOLDER_IMAGE = "/images/placeholder.webp"

_TRUE_STRINGS = {"true", "yes", "1", "on"}
_FALSE_STRINGS = {"false", "no", "0", "off"}


def is_empty(value: Any) -> bool:
    """None, blank strings, and empty collections count as empty."""
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, dict)):
        return len(value) == 0
    return False


def is_placeholder(value: Any) -> bool:
    """True when an image value still needs a real image.

    Empty values, non-strings, placeholder services, and local paths outside
    /api are all unresolved.
    """
    if not isinstance(value, str) or not value.strip():
        return True
    lowered = value.lower()
    if "placeholder" in lowered or "placehold.co" in lowered:
        return True
    return value.startswith("/") and not value.startswith("/api")


def matches_kind(value: Any, kind: SlotKind) -> bool:
    if kind in (SlotKind.TEXT, SlotKind.RICH_TEXT, SlotKind.IMAGE):
        return isinstance(value, str)
    if kind == SlotKind.ARRAY:
        return isinstance(value, list)
    if kind == SlotKind.BOOLEAN:
        return isinstance(value, bool)
    if kind == SlotKind.NUMBER:
        return isinstance(value, (int, float)) and not isinstance(value, bool)
    return False


def coerce(value: Any, kind: SlotKind) -> Tuple[bool, Any]:
    """Convert unambiguous values to the slot kind.

    Returns (ok, value); ok is False when the value cannot be used.
    """
    if matches_kind(value, kind):
        return True, value
    if kind in (SlotKind.TEXT, SlotKind.RICH_TEXT):
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return True, str(value)
        return False, None
    if kind == SlotKind.NUMBER and isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return False, None
        return True, int(number) if number.is_integer() else number
    if kind == SlotKind.BOOLEAN and isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in _TRUE_STRINGS:
            return True, True
        if lowered in _FALSE_STRINGS:
            return True, False
    return False, None


def truncate(text: str, max_length: Optional[int]) -> str:
    """Cut text to max_length characters, preferring a word boundary."""
    if max_length is None or len(text) <= max_length:
        return text
    cut = text[:max_length]
    space = cut.rfind(" ")
    if space >= max_length * 0.6:
        cut = cut[:space]
    return cut.rstrip(" ,;:-") or text[:max_length]


def repair_props(
    slots: Iterable[Slot],
    raw: Dict[str, Any],
    fallback: Callable[[Slot], Any],
    owner: str = "",
) -> Dict[str, Any]:
    """Shape a raw property bag to a slot schema.

    Unknown keys are dropped, values are coerced to their slot kind, text is
    truncated to max length, and any missing or unusable required value is
    replaced by ``fallback(slot)``. Optional slots keep their default when
    the raw value is unusable.
    """
    repaired: Dict[str, Any] = {}
    for slot in slots:
        value = raw.get(slot.name)
        if not is_empty(value):
            ok, value = coerce(value, slot.kind)
            if not ok:
                logger.debug("[Slots] %s.%s: discarding value of wrong kind", owner, slot.name)
                value = None
        if slot.is_text and isinstance(value, str):
            value = truncate(value.strip(), slot.max_length)
        if is_empty(value):
            if slot.required:
                value = fallback(slot)
            elif slot.default is not None:
                value = copy.deepcopy(slot.default)
            else:
                continue
            if slot.is_text and isinstance(value, str):
                value = truncate(value.strip(), slot.max_length)
        repaired[slot.name] = value
    return repaired


def walk_image_values(slots: Iterable[Slot], props: Dict[str, Any]):
    """Yield (slot, concrete path, value) for every image value a bag can hold.

    Direct image slots yield even when absent; array-nested image fields yield
    once per existing item.
    """
    for slot in slots:
        if slot.kind == SlotKind.IMAGE:
            yield slot, slot.name, props.get(slot.name)
        elif slot.kind == SlotKind.ARRAY:
            fields = slot.image_fields()
            items = props.get(slot.name)
            if not fields or not isinstance(items, list):
                continue
            for index, item in enumerate(items):
                if not isinstance(item, dict):
                    continue
                for field in fields:
                    yield slot, f"{slot.name}[{index}].{field}", item.get(field)
