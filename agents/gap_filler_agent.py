"""Gap Filler Agent - designs a bespoke section when no catalog pattern fits.

The result is a self-contained section: a synthetic ``custom-<hash>`` pattern
id, a minimal inline slot schema, and content that satisfies it.
"""

import hashlib
import logging
import re
from typing import Dict, List, Optional, Sequence

from pydantic import BaseModel, Field

from contracts import (
    CUSTOM_PATTERN_PREFIX,
    CustomSlotSpec,
    GapFillerResponse,
    PatternCategory,
    SectionComposition,
    SectionRequirement,
    Slot,
    SlotKind,
    StageResult,
)
from patterns import PatternRegistry, get_registry, truncate
from providers import LLMProvider
from config import settings
from .base_agent import BaseAgent
from .context import BrandContext, tokenize
from .prop_generator_agent import sanitize_props

logger = logging.getLogger(__name__)

MAX_CUSTOM_SLOTS = 8
MAX_TEXT_LENGTH = 2000
_SLOT_NAME = re.compile(r"^[A-Za-z][A-Za-z0-9_]*$")


GAP_FILLER_SYSTEM_PROMPT = """You are a senior product designer. No section in the component catalog
fits the requirement below, so you design a small bespoke section.

Rules:
- Describe the section with a minimal slot schema (at most 8 slots, camelCase names).
- Slot kinds are limited to: text, richText, image, array, boolean, number.
- Give text slots a sensible max_length.
- Fill every slot in "props" with original copy for this project; leave image slots empty.
- The section must make sense between the surrounding sections listed in the input.
"""

# Keyword lists used to map a free-text requirement onto a catalog category
CATEGORY_KEYWORDS: Dict[PatternCategory, List[str]] = {
    PatternCategory.HERO: ["hero", "banner", "headline", "landing", "above the fold"],
    PatternCategory.FEATURES: ["feature", "benefit", "capability", "grid", "bento", "service"],
    PatternCategory.PRICING: ["pricing", "price", "plan", "tier", "subscription", "cost"],
    PatternCategory.TESTIMONIALS: ["testimonial", "review", "quote", "customer say", "feedback"],
    PatternCategory.CTA: ["call to action", "cta", "sign up", "signup", "newsletter", "subscribe", "waitlist"],
    PatternCategory.FAQ: ["faq", "question", "answer", "help"],
    PatternCategory.TEAM: ["team", "member", "people", "staff", "founder"],
    PatternCategory.STATS: ["stats", "statistic", "metric", "number", "kpi"],
    PatternCategory.LOGOS: ["logo", "partner", "client", "trusted by", "brand"],
    PatternCategory.FOOTER: ["footer", "bottom", "copyright"],
    PatternCategory.NAVIGATION: ["nav", "navigation", "menu", "header"],
    PatternCategory.CONTENT: ["article", "blog", "story", "text", "content", "about"],
    PatternCategory.COMMERCE: ["product", "shop", "store", "catalog", "cart"],
    PatternCategory.DASHBOARD: ["dashboard", "chart", "analytics", "admin"],
    PatternCategory.AUTH: ["login", "sign in", "signin", "register", "auth", "password"],
}


class GapFillerInput(BaseModel):
    """Payload sent to the LLM for one missing section."""
    context: BrandContext
    requirement: str = Field(..., description="What the section must accomplish")
    category: Optional[str] = None
    surrounding_sections: List[str] = Field(default_factory=list, description="Pattern ids around the gap")


def custom_pattern_id(*parts: object) -> str:
    """Deterministic synthetic pattern id, never a registry id."""
    digest = hashlib.sha1(":".join(str(p) for p in parts).encode("utf-8")).hexdigest()[:8]
    return f"{CUSTOM_PATTERN_PREFIX}{digest}"


def requirement_text(requirement: SectionRequirement) -> str:
    text = requirement.description.strip()
    if text:
        return text
    return f"A {requirement.category.value} section"


def sanitize_slots(specs: Sequence[CustomSlotSpec]) -> List[Slot]:
    """Validate a generated slot schema: unique valid names, bounded size and length."""
    slots: List[Slot] = []
    seen = set()
    for spec in specs:
        name = spec.name.strip()
        if not _SLOT_NAME.match(name) or name in seen:
            logger.debug("[GapFiller] Dropping invalid or duplicate slot '%s'", spec.name)
            continue
        seen.add(name)
        max_length = None
        if spec.kind in (SlotKind.TEXT, SlotKind.RICH_TEXT):
            max_length = min(spec.max_length or MAX_TEXT_LENGTH, MAX_TEXT_LENGTH)
            if max_length <= 0:
                max_length = MAX_TEXT_LENGTH
        slots.append(Slot(
            name=name,
            kind=spec.kind,
            required=spec.required,
            max_length=max_length,
            description=spec.description,
        ))
        if len(slots) == MAX_CUSTOM_SLOTS:
            break
    return slots


def fallback_slots() -> List[Slot]:
    return [
        Slot(name="title", kind=SlotKind.TEXT, required=True, max_length=80, description="Section heading"),
        Slot(name="description", kind=SlotKind.RICH_TEXT, required=True, max_length=600, description="Section body"),
    ]


def fallback_section(
    section_id: str,
    pattern_id: str,
    requirement: SectionRequirement,
    context: BrandContext,
) -> SectionComposition:
    """Minimal title + description section used when design generation fails."""
    slots = fallback_slots()
    props = sanitize_props(
        slots,
        {
            "title": f"{context.project_name} {requirement.category.value.title()}",
            "description": truncate(requirement_text(requirement), 600),
        },
        context,
        owner=pattern_id,
    )
    return SectionComposition(
        id=section_id,
        pattern_id=pattern_id,
        props=props,
        intent=requirement.category,
        is_custom_generated=True,
        custom_slots=slots,
    )


def detect_category(text: str) -> Optional[PatternCategory]:
    """Best keyword match of free text against the catalog categories."""
    lowered = text.lower()
    words = tokenize([text])
    best, best_hits = None, 0
    for category, keywords in CATEGORY_KEYWORDS.items():
        hits = sum(1 for kw in keywords if (kw in lowered if " " in kw else kw in words))
        if hits > best_hits:
            best, best_hits = category, hits
    return best


def can_fulfill_with_pattern(text: str, registry: Optional[PatternRegistry] = None) -> Optional[str]:
    """Map a free-text requirement to a catalog pattern id, if a category matches."""
    registry = registry or get_registry()
    category = detect_category(text)
    if category is None:
        return None
    words = tokenize([text])
    candidates = registry.by_category(category)
    if not candidates:
        return None
    ranked = sorted(candidates, key=lambda p: (-sum(1 for t in p.tags if t in words), p.id))
    return ranked[0].id


class GapFillerAgent(BaseAgent):
    """Synthesizes one custom section per unmet requirement."""

    DEFAULT_TIER = "quality"

    def __init__(
        self,
        model: Optional[str] = None,
        provider: Optional[str] = None,
        llm_provider: Optional[LLMProvider] = None,
    ):
        super().__init__(
            role="gap_filler",
            system_prompt=GAP_FILLER_SYSTEM_PROMPT,
            output_schema=GapFillerResponse,
            model=model or settings.gap_filler_model,
            provider=provider,
            llm_provider=llm_provider,
        )

    def get_task_description(self) -> str:
        return "Design a bespoke section when no catalog pattern fits"

    async def fill(
        self,
        requirement: SectionRequirement,
        context: BrandContext,
        section_id: str,
        pattern_id: str,
        surrounding: Sequence[str] = (),
    ) -> StageResult[SectionComposition]:
        """Design and fill a custom section.

        Args:
            requirement: The unmet section requirement
            context: Brand and page context
            section_id: Id to give the section
            pattern_id: Synthetic custom-<hash> id
            surrounding: Pattern ids of neighbouring sections

        Returns:
            StageResult with a validated custom section; FALLBACK when the call
            failed or the generated schema was unusable.
        """
        gap_input = GapFillerInput(
            context=context,
            requirement=requirement_text(requirement),
            category=requirement.category.value,
            surrounding_sections=list(surrounding),
        )
        try:
            result = await self.run(gap_input)
        except Exception as e:
            logger.warning("[GapFiller] %s: design failed (%s); using fallback section", pattern_id, e)
            return StageResult.fallback(fallback_section(section_id, pattern_id, requirement, context), str(e))

        response: GapFillerResponse = result.output
        slots = sanitize_slots(response.slots)
        if not slots:
            logger.warning("[GapFiller] %s: generated schema had no usable slots", pattern_id)
            return StageResult.fallback(
                fallback_section(section_id, pattern_id, requirement, context),
                "generated schema had no usable slots",
            )

        section = SectionComposition(
            id=section_id,
            pattern_id=pattern_id,
            props=sanitize_props(slots, response.props, context, owner=pattern_id),
            intent=requirement.category,
            is_custom_generated=True,
            custom_slots=slots,
        )
        logger.info("[GapFiller] Designed '%s' with %d slots for %s", response.name, len(slots), pattern_id)
        return StageResult.success(section)
