"""Prop Generator Agent - writes the content for every slot of a chosen pattern.

All slots of a pattern are generated in one call. The response is never
trusted as-is: it is repaired against the slot schema so required slots are
always filled and text never exceeds its maximum length.
"""

import copy
import logging
from typing import Any, Dict, List, Optional, Sequence, Type

from pydantic import BaseModel, Field, create_model

from contracts import Pattern, Slot, SlotKind, StageResult
from patterns import PLACEHOLDER_IMAGE, is_empty, repair_props
from providers import LLMProvider
from config import settings
from .base_agent import BaseAgent
from .context import BrandContext

logger = logging.getLogger(__name__)


PROP_SYSTEM_PROMPT = """You are a world-class copywriter writing the content of one website section.

The project description is context for understanding the product. Do not copy it;
write original marketing copy for the listed slots.

Copy rules:
1. Headlines: 3-8 words, punchy, benefit-focused.
2. Subheadlines: 10-20 words that expand on the headline with specific value.
3. Features: concrete capabilities of this product, with an icon name that matches.
4. Calls to action: specific to the product ("Start Your First Build", not "Click Here").
5. Testimonials: specific to the product's domain, with plausible names and roles.
6. Respect every maximum length. Leave image slots as empty strings.
7. Only include the listed slots. Match the tone requested by the brand.
"""

_SLOT_JSON_TYPES = {
    SlotKind.TEXT: "string",
    SlotKind.RICH_TEXT: "string",
    SlotKind.IMAGE: "string",
    SlotKind.ARRAY: "array",
    SlotKind.BOOLEAN: "boolean",
    SlotKind.NUMBER: "number",
}


class PropInput(BaseModel):
    """Payload sent to the LLM for one section."""
    context: BrandContext
    pattern_id: str
    pattern_name: str
    category: str
    pattern_description: str = ""
    section_position: int = Field(..., description="0-based position of the section on the page")
    slots: List[str] = Field(..., description="One line per slot: name (kind) [REQUIRED] max N chars: description")
    instructions: Optional[str] = Field(default=None, description="Extra instructions from the user")


def format_slot(slot: Slot) -> str:
    """Human-readable slot line used in prompts."""
    line = f"- {slot.name} ({slot.kind.value})"
    if slot.required:
        line += " [REQUIRED]"
    if slot.max_length:
        line += f" max {slot.max_length} chars"
    if slot.item_fields:
        fields = ", ".join(f"{name}: {kind.value}" for name, kind in slot.item_fields.items())
        line += f" items {{{fields}}}"
    hint = slot.ai_prompt or slot.description
    if hint:
        line += f": {hint}"
    return line


def _slot_schema(slot: Slot) -> Dict[str, Any]:
    schema: Dict[str, Any] = {"type": _SLOT_JSON_TYPES[slot.kind]}
    if slot.is_text and slot.max_length:
        schema["maxLength"] = slot.max_length
    if slot.kind == SlotKind.ARRAY and slot.item_fields:
        schema["items"] = {
            "type": "object",
            "properties": {name: {"type": _SLOT_JSON_TYPES[kind]} for name, kind in slot.item_fields.items()},
        }
    return schema


def build_props_schema(name: str, slots: Sequence[Slot]) -> Type[BaseModel]:
    """Response contract for one slot schema.

    Fields accept any value so a single malformed slot never rejects the whole
    answer; the JSON schema still tells the model the expected kind.
    """
    fields: Dict[str, Any] = {}
    for slot in slots:
        fields[slot.name] = (
            Any,
            Field(default=None, description=slot.description or slot.name, json_schema_extra=_slot_schema(slot)),
        )
    model_name = "".join(part.capitalize() for part in name.replace("_", "-").split("-")) + "Props"
    return create_model(model_name, **fields)


def contextual_text(slot_name: str, context: BrandContext) -> Optional[str]:
    """Project-aware copy for well-known slot names."""
    name = context.project_name
    defaults = {
        "headline": f"Welcome to {name}",
        "subheadline": "Start building something amazing today",
        "primaryCta": "Get Started",
        "ctaText": "Get Started",
        "ctaLink": "/signup",
        "secondaryCta": "Learn More",
        "description": f"Discover what {name} can do for you",
        "logoText": name,
        "copyright": f"© {name}. All rights reserved.",
        "imageAlt": f"{name} product image",
    }
    return defaults.get(slot_name)


def contextual_value(slot: Slot, context: BrandContext) -> Any:
    """A non-empty value of the slot's kind, used when nothing better exists."""
    if slot.is_text:
        if slot.kind == SlotKind.RICH_TEXT:
            return f"Discover the power of {context.project_name}"
        return contextual_text(slot.name, context) or context.project_name
    if slot.kind == SlotKind.IMAGE:
        return PLACEHOLDER_IMAGE
    if slot.kind == SlotKind.BOOLEAN:
        return True
    if slot.kind == SlotKind.NUMBER:
        return 0
    if slot.item_fields:
        item = {
            field: "" if kind == SlotKind.IMAGE else contextual_value(
                Slot(name=field, kind=kind), context,
            )
            for field, kind in slot.item_fields.items()
        }
        return [item]
    return [context.project_name]


def required_fallback(context: BrandContext):
    """Fallback used by repair_props: declared default first, then contextual copy."""
    def fallback(slot: Slot) -> Any:
        if not is_empty(slot.default):
            return copy.deepcopy(slot.default)
        return contextual_value(slot, context)
    return fallback


def sanitize_props(slots: Sequence[Slot], raw: Dict[str, Any], context: BrandContext, owner: str = "") -> Dict[str, Any]:
    """Shape an untrusted property bag to the slot schema."""
    return repair_props(slots, raw, required_fallback(context), owner=owner)


def default_props(slots: Sequence[Slot], context: BrandContext, owner: str = "") -> Dict[str, Any]:
    """Content used when generation fails: contextual copy for known names, declared defaults otherwise."""
    raw: Dict[str, Any] = {}
    for slot in slots:
        text = contextual_text(slot.name, context) if slot.is_text else None
        if text is not None:
            raw[slot.name] = text
        elif not is_empty(slot.default):
            raw[slot.name] = copy.deepcopy(slot.default)
        elif slot.required:
            raw[slot.name] = contextual_value(slot, context)
    return sanitize_props(slots, raw, context, owner=owner)


class PropGeneratorAgent(BaseAgent):
    """Fills every slot of a pattern in a single LLM call."""

    DEFAULT_TIER = "fast"

    def __init__(
        self,
        model: Optional[str] = None,
        provider: Optional[str] = None,
        llm_provider: Optional[LLMProvider] = None,
    ):
        super().__init__(
            role="prop_generator",
            system_prompt=PROP_SYSTEM_PROMPT,
            output_schema=None,
            model=model or settings.prop_model,
            provider=provider,
            llm_provider=llm_provider,
        )
        self._schemas: Dict[str, Type[BaseModel]] = {}

    def get_task_description(self) -> str:
        return "Write content for every slot of a section pattern"

    def schema_for(self, pattern: Pattern) -> Type[BaseModel]:
        if pattern.id not in self._schemas:
            self._schemas[pattern.id] = build_props_schema(pattern.id, pattern.slots)
        return self._schemas[pattern.id]

    async def generate(
        self,
        pattern: Pattern,
        context: BrandContext,
        section_index: int = 0,
        instructions: Optional[str] = None,
    ) -> StageResult[Dict[str, Any]]:
        """Generate and repair the property bag for one section.

        Returns:
            StageResult with props satisfying every slot; FALLBACK when the call
            failed and default content was used instead.
        """
        prop_input = PropInput(
            context=context,
            pattern_id=pattern.id,
            pattern_name=pattern.name,
            category=pattern.category.value,
            pattern_description=pattern.description,
            section_position=section_index,
            slots=[format_slot(slot) for slot in pattern.slots],
            instructions=instructions,
        )
        try:
            result = await self.run(prop_input, output_schema=self.schema_for(pattern))
        except Exception as e:
            logger.warning("[PropGenerator] %s: generation failed (%s); using defaults", pattern.id, e)
            return StageResult.fallback(default_props(pattern.slots, context, owner=pattern.id), str(e))

        raw = result.output.model_dump()
        missing = [s.name for s in pattern.required_slots if is_empty(raw.get(s.name))]
        if missing:
            logger.debug("[PropGenerator] %s: repairing missing required slots %s", pattern.id, missing)
        return StageResult.success(sanitize_props(pattern.slots, raw, context, owner=pattern.id))
