"""Selector Agent - chooses a registered pattern and variant for each section.

The decision is delegated to the LLM over a bounded candidate list. Every
answer is checked against the registry; hallucinated ids, category
mismatches, timeouts, and malformed responses all fall back to a
deterministic tag-overlap heuristic.
"""

import logging
from typing import Dict, List, Optional, Sequence, Set

from pydantic import BaseModel, Field

from contracts import (
    ComposerMode,
    CompositionRequest,
    DecisionSource,
    LayoutType,
    PageRequest,
    PageSelection,
    PageType,
    Pattern,
    PatternSelection,
    SectionChoice,
    SectionRequirement,
    SelectorResponse,
    StageResult,
)
from patterns import PatternRegistry, get_registry
from providers import LLMProvider
from config import settings
from .base_agent import BaseAgent
from .context import BrandContext, brand_context, context_terms

logger = logging.getLogger(__name__)


SELECTOR_SYSTEM_PROMPT = """You are a senior web designer choosing section patterns for a page.

For every section requirement you receive a list of candidate patterns from a fixed
catalog. Pick the candidate that best fits the project's audience, tone, and aesthetic.

Rules:
- Only answer with pattern ids that appear in that requirement's candidate list.
- Only answer with a variant listed for the chosen pattern.
- Answer exactly one choice per requirement, using its requirement_index.
- Explain each choice in one or two sentences and give a confidence from 0 to 100.
- List the other candidates you considered in "alternatives".
"""

MODE_INSTRUCTIONS: Dict[ComposerMode, str] = {
    ComposerMode.REGISTRY: (
        "Always choose a catalog pattern. Never answer null for pattern_id."
    ),
    ComposerMode.HYBRID: (
        "Strongly prefer catalog patterns. Answer null for pattern_id only when no "
        "candidate can reasonably serve the requirement; a custom section will be designed instead."
    ),
    ComposerMode.AUTO: (
        "Choose a catalog pattern when it fits well. Answer null for pattern_id whenever a "
        "bespoke section would clearly serve the requirement better; it will be designed from scratch."
    ),
}

DARK_TERMS = {"dark", "tech", "technical", "luxury", "premium", "cinematic", "moody"}
GRADIENT_TERMS = {"playful", "energetic", "vibrant", "bold", "colorful", "fun"}
LIGHT_TERMS = {"light", "minimal", "clean", "airy", "bright"}


class CandidateSummary(BaseModel):
    """Bounded description of one candidate pattern."""
    id: str
    name: str
    tags: List[str]
    variants: List[str]
    guidance: str


class RequirementCandidates(BaseModel):
    requirement_index: int
    category: str
    description: str = ""
    tags: List[str] = Field(default_factory=list)
    candidates: List[CandidateSummary]


class SelectorInput(BaseModel):
    """Payload sent to the LLM for one page."""
    mode_instructions: str
    context: BrandContext
    references: List[str] = Field(default_factory=list, description="Reference site descriptions")
    layouts: List[str] = Field(default_factory=lambda: [layout.value for layout in LayoutType])
    requirements: List[RequirementCandidates]


def score_pattern(pattern: Pattern, terms: Set[str]) -> int:
    """Number of pattern tags found in the context terms."""
    return sum(1 for tag in pattern.tags if tag.lower() in terms)


def choose_variant(pattern: Pattern, aesthetic_terms: Sequence[str]) -> str:
    """Map aesthetic descriptors to a variant the pattern supports."""
    terms = {t.lower() for t in aesthetic_terms}
    if terms & DARK_TERMS:
        wanted = "dark"
    elif terms & GRADIENT_TERMS:
        wanted = "gradient"
    elif terms & LIGHT_TERMS:
        wanted = "light"
    else:
        wanted = None
    if wanted and wanted in pattern.variants:
        return wanted
    return pattern.preferred_variant


def recommend_layout(page: PageRequest, request: CompositionRequest) -> str:
    """Layout hint from the first reference layout, or from the page type."""
    for reference in request.references:
        layout = (reference.layout_type or "").lower()
        if "bento" in layout:
            return LayoutType.BENTO.value
        if "grid" in layout:
            return LayoutType.GRID.value
        if "dashboard" in layout:
            return LayoutType.DASHBOARD.value
    if page.page_type == PageType.DASHBOARD or page.page_type == PageType.SETTINGS:
        return LayoutType.DASHBOARD.value
    if page.page_type in (PageType.BLOG, PageType.BLOG_POST):
        return LayoutType.BLOG.value
    if page.page_type == PageType.AUTH:
        return LayoutType.AUTH.value
    return LayoutType.MARKETING.value


def fallback_select(
    requirement: SectionRequirement,
    requirement_index: int,
    registry: PatternRegistry,
    terms: Set[str],
    aesthetic_terms: Sequence[str] = (),
    reason: str = "",
) -> PatternSelection:
    """Deterministic choice: same-category pattern with the highest tag overlap, ties by id.

    Returns a no-fit selection when the category has no patterns.
    """
    candidates = registry.by_category(requirement.category)
    if not candidates:
        return PatternSelection(
            requirement_index=requirement_index,
            category=requirement.category,
            pattern_id=None,
            reason=f"No {requirement.category.value} pattern in the catalog",
            confidence_score=0,
            source=DecisionSource.FALLBACK,
        )
    ranked = sorted(candidates, key=lambda p: (-score_pattern(p, terms), p.id))
    best = ranked[0]
    overlap = score_pattern(best, terms)
    prefix = f"{reason}; " if reason else ""
    return PatternSelection(
        requirement_index=requirement_index,
        category=requirement.category,
        pattern_id=best.id,
        variant_id=choose_variant(best, aesthetic_terms),
        reason=f"{prefix}heuristic match on {overlap} shared tag(s)",
        confidence_score=min(90, 40 + 10 * overlap),
        alternatives=[p.id for p in ranked[1:4]],
        source=DecisionSource.FALLBACK,
    )


class SelectorAgent(BaseAgent):
    """Chooses patterns for every section of a page in one LLM call."""

    DEFAULT_TIER = "fast"

    def __init__(
        self,
        registry: Optional[PatternRegistry] = None,
        model: Optional[str] = None,
        provider: Optional[str] = None,
        llm_provider: Optional[LLMProvider] = None,
    ):
        super().__init__(
            role="selector",
            system_prompt=SELECTOR_SYSTEM_PROMPT,
            output_schema=SelectorResponse,
            model=model or settings.selector_model,
            provider=provider,
            llm_provider=llm_provider,
        )
        self.registry = registry or get_registry()

    def get_task_description(self) -> str:
        return "Select catalog patterns and variants for each section of a page"

    def _candidates(self, requirement: SectionRequirement, terms: Set[str]) -> List[Pattern]:
        ranked = sorted(
            self.registry.by_category(requirement.category),
            key=lambda p: (-score_pattern(p, terms), p.id),
        )
        return ranked[: settings.selector_max_candidates]

    def _summary(self, pattern: Pattern) -> CandidateSummary:
        limit = settings.selector_guidance_chars
        guidance = pattern.ai_guidance or pattern.description
        if len(guidance) > limit:
            guidance = guidance[: limit - 3].rstrip() + "..."
        return CandidateSummary(
            id=pattern.id,
            name=pattern.name,
            tags=pattern.tags,
            variants=pattern.variants,
            guidance=guidance,
        )

    def _reference_pick(
        self,
        requirement: SectionRequirement,
        index: int,
        request: CompositionRequest,
        aesthetic: Sequence[str],
    ) -> Optional[PatternSelection]:
        for reference in request.references:
            for pattern_id in reference.recommended_patterns:
                pattern = self.registry.get(pattern_id)
                if pattern is not None and pattern.category == requirement.category:
                    return PatternSelection(
                        requirement_index=index,
                        category=requirement.category,
                        pattern_id=pattern.id,
                        variant_id=choose_variant(pattern, aesthetic),
                        reason=f"Recommended by reference analysis of {reference.url}",
                        confidence_score=85,
                        alternatives=[p.id for p in self.registry.similar(pattern.id, limit=3)],
                        source=DecisionSource.REFERENCE,
                    )
        return None

    def _accept(
        self,
        choice: Optional[SectionChoice],
        requirement: SectionRequirement,
        index: int,
        candidate_ids: Set[str],
        request: CompositionRequest,
        aesthetic: Sequence[str],
    ) -> Optional[PatternSelection]:
        """Turn an LLM choice into a selection, or None when it must fall back."""
        if choice is None:
            return None
        options = request.options
        if choice.pattern_id is None:
            if options.mode == ComposerMode.REGISTRY or not options.enable_gap_filling:
                return None
            return PatternSelection(
                requirement_index=index,
                category=requirement.category,
                pattern_id=None,
                reason=choice.reason or "No catalog pattern fits",
                confidence_score=choice.confidence_score,
                source=DecisionSource.AI,
            )
        pattern = self.registry.get(choice.pattern_id)
        if pattern is None:
            logger.warning("[Selector] Rejected unknown pattern id '%s'", choice.pattern_id)
            return None
        if pattern.category != requirement.category:
            logger.warning(
                "[Selector] Rejected '%s': category %s does not match %s",
                pattern.id, pattern.category.value, requirement.category.value,
            )
            return None
        if choice.pattern_id not in candidate_ids:
            logger.debug("[Selector] '%s' was not offered but matches the category", pattern.id)
        variant = choice.variant_id if choice.variant_id in pattern.variants else choose_variant(pattern, aesthetic)
        return PatternSelection(
            requirement_index=index,
            category=requirement.category,
            pattern_id=pattern.id,
            variant_id=variant,
            reason=choice.reason,
            confidence_score=choice.confidence_score,
            alternatives=[a for a in choice.alternatives if self.registry.exists(a) and a != pattern.id],
            source=DecisionSource.AI,
        )

    async def select(
        self,
        page: PageRequest,
        requirements: Sequence[SectionRequirement],
        request: CompositionRequest,
    ) -> StageResult[PageSelection]:
        """Choose a pattern (or report no fit) for each requirement of a page.

        Returns:
            StageResult whose value holds one selection per requirement, in order.
            Status is FALLBACK when any requirement was decided by the heuristic.
        """
        aesthetic = request.aesthetic_terms()
        decided: Dict[int, PatternSelection] = {}
        problems: List[str] = []

        pending: List[RequirementCandidates] = []
        candidate_ids: Dict[int, Set[str]] = {}
        for index, requirement in enumerate(requirements):
            picked = self._reference_pick(requirement, index, request, aesthetic)
            if picked is not None:
                decided[index] = picked
                continue
            candidates = self._candidates(requirement, context_terms(request, requirement))
            candidate_ids[index] = {p.id for p in candidates}
            pending.append(RequirementCandidates(
                requirement_index=index,
                category=requirement.category.value,
                description=requirement.description,
                tags=requirement.tags,
                candidates=[self._summary(p) for p in candidates],
            ))

        layout = recommend_layout(page, request)
        response: Optional[SelectorResponse] = None
        if pending:
            selector_input = SelectorInput(
                mode_instructions=MODE_INSTRUCTIONS[request.options.mode],
                context=brand_context(request, page),
                references=[
                    f"{ref.url}: {', '.join(ref.aesthetic)} {ref.mood}".strip() for ref in request.references
                ],
                requirements=pending,
            )
            try:
                result = await self.run(selector_input)
                response = result.output
            except Exception as e:
                logger.warning("[Selector] %s: generative selection failed (%s); using heuristic", page.resolved_path(), e)
                problems.append(f"selection call failed: {e}")

        choices = {c.requirement_index: c for c in response.choices} if response else {}
        if response and response.layout in {layout_type.value for layout_type in LayoutType}:
            layout = response.layout

        for entry in pending:
            index = entry.requirement_index
            requirement = requirements[index]
            accepted = None
            if response is not None:
                accepted = self._accept(
                    choices.get(index), requirement, index, candidate_ids[index], request, aesthetic,
                )
                if accepted is None:
                    problems.append(f"requirement {index}: invalid or missing choice")
            if accepted is None:
                accepted = fallback_select(
                    requirement,
                    index,
                    self.registry,
                    context_terms(request, requirement),
                    aesthetic,
                    reason="generative selection unavailable" if response is None else "generative choice rejected",
                )
            decided[index] = accepted

        value = PageSelection(
            selections=[decided[i] for i in range(len(requirements))],
            layout=layout,
        )
        if problems:
            return StageResult.fallback(value, "; ".join(problems))
        return StageResult.success(value)
