"""Composer - the central orchestrator of a composition run.

For every page the composer:
1. Resolves the section requirements (explicit, or from the page type)
2. Selects a pattern per requirement (or learns that none fits)
3. Generates slot content, or designs a custom section for gaps
4. Validates every section
5. Resolves placeholder images

Pages and their sections run concurrently under one section ceiling. Stage
failures degrade to deterministic fallbacks; only configuration errors,
unfillable gaps, and cancellation stop a run.
"""

import asyncio
import hashlib
import json
import logging
import random
import re
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Awaitable, List, Optional, Sequence, Tuple, TypeVar, Union

from pydantic import BaseModel, Field

from agents import (
    GapFillerAgent,
    PropGeneratorAgent,
    SelectorAgent,
    TokenUsage,
    brand_context,
    can_fulfill_with_pattern,
    choose_variant,
    custom_pattern_id,
)
from agents.gap_filler_agent import detect_category
from config import PAGE_TYPE_CATEGORIES, settings
from contracts import (
    ComposerMode,
    ComposerOptions,
    CompositionIntent,
    CompositionMetadata,
    CompositionRequest,
    DecisionSource,
    ImageEstimate,
    ImageOutcome,
    PageComposition,
    PageRequest,
    PageType,
    PatternCategory,
    PatternReasoning,
    PatternSelection,
    ProjectComposition,
    SectionComposition,
    SectionRequirement,
    ValidationResult,
    is_custom_pattern_id,
)
from images import CancelSignal, ImageGenerator, estimate_images, prompt_values, stats_for
from patterns import (
    PatternRegistry,
    generate_section_id,
    get_registry,
    is_valid_for_export,
    migrate_section,
    validate_definition,
    validate_section,
)
from providers import ImageProvider, LLMProvider, get_image_provider
from .errors import CompositionCancelled, NoFitError, NotFoundError
from .progress import ProgressEvent, ProgressHandler, notify
from .styles import extract_global_styles

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ComposerOutput(BaseModel):
    """Everything a composition run hands back to the caller."""
    composition: ProjectComposition
    reasoning: List[PatternReasoning] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)
    validation: ValidationResult = Field(default_factory=ValidationResult)
    export_ready: bool = Field(default=False, description="Valid, with every image resolved and all text within limits")


@dataclass
class PageResult:
    """One composed page with its decisions and image outcomes."""
    page: PageComposition
    reasoning: List[PatternReasoning] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    outcomes: List[ImageOutcome] = field(default_factory=list)


def slugify(name: str) -> str:
    slug = re.sub(r"[^a-z0-9]+", "-", name.lower()).strip("-")
    return slug or "project"


def page_id_for(path: str) -> str:
    """Stable page id derived from the route: / -> home, /blog/post -> blog-post."""
    stripped = path.strip("/")
    return stripped.replace("/", "-") if stripped else "home"


def project_id_for(name: str, seed: int) -> str:
    digest = hashlib.sha1(f"{seed}:{name}".encode("utf-8")).hexdigest()[:6]
    return f"{slugify(name)}-{digest}"


def resolve_requirements(page: PageRequest, options: ComposerOptions) -> List[SectionRequirement]:
    """Explicit requirements, or the page type's default categories, capped per page."""
    if page.sections:
        requirements = list(page.sections)
    else:
        requirements = [
            SectionRequirement(category=PatternCategory(category))
            for category in PAGE_TYPE_CATEGORIES.get(page.page_type.value, PAGE_TYPE_CATEGORIES["home"])
        ]
    limit = options.max_patterns_per_page or settings.max_patterns_per_page
    if len(requirements) > limit:
        logger.info(
            "[Composer] %s: keeping %d of %d section requirements",
            page.resolved_path(), limit, len(requirements),
        )
    return requirements[:limit]


def shared_components(pages: Sequence[PageComposition]) -> List[str]:
    """Registry pattern ids that appear on more than one page."""
    pages_by_pattern = {}
    for page in pages:
        for section in page.sections:
            if not section.is_custom_generated:
                pages_by_pattern.setdefault(section.pattern_id, set()).add(page.id)
    return sorted(pid for pid, used_on in pages_by_pattern.items() if len(used_on) > 1)


def gap_filling_allowed(options: ComposerOptions) -> bool:
    return options.enable_gap_filling and options.mode != ComposerMode.REGISTRY


def _check_cancel(cancel: Optional[CancelSignal]) -> None:
    if cancel is not None and cancel.is_set():
        raise CompositionCancelled("Composition cancelled")


async def gather_or_cancel(*aws: Awaitable[T]) -> List[T]:
    """Like asyncio.gather, but the first failure cancels the remaining awaitables before it propagates."""
    tasks = [asyncio.ensure_future(aw) for aw in aws]
    try:
        return list(await asyncio.gather(*tasks))
    except BaseException:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise


class Composer:
    """Coordinates selection, content generation, gap filling, validation, and images."""

    def __init__(
        self,
        registry: Optional[PatternRegistry] = None,
        provider: Optional[str] = None,
        model: Optional[str] = None,
        llm_provider: Optional[LLMProvider] = None,
        image_provider: Optional[ImageProvider] = None,
        selector: Optional[SelectorAgent] = None,
        prop_generator: Optional[PropGeneratorAgent] = None,
        gap_filler: Optional[GapFillerAgent] = None,
    ):
        """Initialize the composer.

        Args:
            registry: Pattern catalog (defaults to the bundled catalog)
            provider: LLM provider name for every agent (litellm, anthropic, openai, deepseek)
            model: Model or tier override for every agent
            llm_provider: Ready provider instance shared by every agent
            image_provider: Image synthesis provider (defaults to LiteLLM)
            selector, prop_generator, gap_filler: Pre-built agents
        """
        self.registry = registry or get_registry()
        self.selector = selector or SelectorAgent(
            registry=self.registry, model=model, provider=provider, llm_provider=llm_provider,
        )
        self.prop_generator = prop_generator or PropGeneratorAgent(
            model=model, provider=provider, llm_provider=llm_provider,
        )
        self.gap_filler = gap_filler or GapFillerAgent(
            model=model, provider=provider, llm_provider=llm_provider,
        )
        self._image_provider = image_provider

    @property
    def image_provider(self) -> ImageProvider:
        if self._image_provider is None:
            self._image_provider = get_image_provider()
        return self._image_provider

    @property
    def agents(self):
        return (self.selector, self.prop_generator, self.gap_filler)

    def image_generator(self, options: ComposerOptions) -> ImageGenerator:
        return ImageGenerator(
            provider=self.image_provider,
            registry=self.registry,
            max_concurrent=options.max_concurrent_images,
            skip_low_priority=options.skip_low_priority_images,
        )

    def _usage(self) -> TokenUsage:
        usage = TokenUsage()
        for agent in self.agents:
            usage.add(agent.total_usage)
        return usage

    # ------------------------------------------------------------------
    # Full run
    # ------------------------------------------------------------------

    async def compose_project(
        self,
        request: CompositionRequest,
        cancel: Optional[CancelSignal] = None,
        on_progress: Optional[ProgressHandler] = None,
    ) -> ComposerOutput:
        """Compose every page of a request.

        Raises:
            NoFitError: A requirement has no pattern and gap filling is not allowed
            CompositionCancelled: The cancel signal was set during the run
        """
        started = time.monotonic()
        options = request.options
        seed = options.seed if options.seed is not None else random.randint(0, 2 ** 31 - 1)
        for agent in self.agents:
            agent.total_usage = TokenUsage()

        styles = extract_global_styles(request)
        gate = asyncio.Semaphore(options.max_concurrent_sections or settings.max_concurrent_sections)
        images = self.image_generator(options) if options.generate_images else None
        values = prompt_values(
            request.vision.project_name,
            request.vision.description,
            request.template,
            styles.colors.primary,
            request.vision.target_audience,
        )
        logger.info(
            "[Composer] Composing %d page(s) for '%s' (mode=%s, seed=%d)",
            len(request.pages), request.vision.project_name, options.mode.value, seed,
        )

        results: List[PageResult] = await gather_or_cancel(*(
            self._compose_page(request, page, index, seed, gate, images, values, cancel, on_progress)
            for index, page in enumerate(request.pages)
        ))

        pages = [result.page for result in results]
        reasoning = [entry for result in results for entry in result.reasoning]
        warnings = [warning for result in results for warning in result.warnings]
        outcomes = [outcome for result in results for outcome in result.outcomes]

        usage = self._usage()
        models = {agent.role: agent.model for agent in self.agents}
        if images is not None:
            models["images"] = getattr(self.image_provider, "model", self.image_provider.name)

        metadata = CompositionMetadata(
            seed=seed,
            template=request.template,
            mode=options.mode.value,
            models=models,
            audit_trail=reasoning,
            average_confidence=(
                round(sum(r.confidence_score for r in reasoning) / len(reasoning)) if reasoning else 0
            ),
            generation_time_seconds=round(time.monotonic() - started, 2),
            input_tokens=usage.input_tokens,
            output_tokens=usage.output_tokens,
            cost_usd=round(usage.total_cost, 6),
            image_stats=stats_for(outcomes),
            warnings=warnings,
        )
        composition = ProjectComposition(
            id=project_id_for(request.vision.project_name, seed),
            name=request.vision.project_name,
            pages=pages,
            global_styles=styles,
            shared_components=shared_components(pages),
            metadata=metadata,
        )

        notify(on_progress, ProgressEvent(stage="validate", total=len(pages)))
        validation, export_ready = self.validate(composition)
        for issue in validation.issues:
            warnings.append(f"{issue.path}: {issue.message}")
        if options.intent == CompositionIntent.EXPORT and not export_ready:
            warnings.append(
                f"Composition is not ready for export ({len(validation.issues)} issue(s)); "
                "resolve them before exporting"
            )
        composition.metadata.warnings = list(warnings)

        notify(on_progress, ProgressEvent(stage="done", completed=len(pages), total=len(pages)))
        logger.info(
            "[Composer] Done: %d page(s), %d section(s), confidence %d, export_ready=%s",
            len(pages), sum(len(p.sections) for p in pages), metadata.average_confidence, export_ready,
        )
        return ComposerOutput(
            composition=composition,
            reasoning=reasoning,
            warnings=warnings,
            validation=validation,
            export_ready=export_ready,
        )

    async def compose_page(
        self,
        request: CompositionRequest,
        page: PageRequest,
        page_index: int = 0,
        cancel: Optional[CancelSignal] = None,
        on_progress: Optional[ProgressHandler] = None,
    ) -> PageResult:
        """Compose a single page outside a full project run."""
        options = request.options
        seed = options.seed if options.seed is not None else random.randint(0, 2 ** 31 - 1)
        gate = asyncio.Semaphore(options.max_concurrent_sections or settings.max_concurrent_sections)
        images = self.image_generator(options) if options.generate_images else None
        styles = extract_global_styles(request)
        values = prompt_values(
            request.vision.project_name,
            request.vision.description,
            request.template,
            styles.colors.primary,
            request.vision.target_audience,
        )
        return await self._compose_page(request, page, page_index, seed, gate, images, values, cancel, on_progress)

    async def _compose_page(
        self,
        request: CompositionRequest,
        page: PageRequest,
        page_index: int,
        seed: int,
        gate: asyncio.Semaphore,
        images: Optional[ImageGenerator],
        values: dict,
        cancel: Optional[CancelSignal],
        on_progress: Optional[ProgressHandler],
    ) -> PageResult:
        path = page.resolved_path()
        page_id = page_id_for(path)
        requirements = resolve_requirements(page, request.options)
        warnings: List[str] = []

        _check_cancel(cancel)
        notify(on_progress, ProgressEvent(stage="select", page_index=page_index, total=len(requirements)))
        selected = await self.selector.select(page, requirements, request)
        if selected.used_fallback:
            warnings.append(f"{path}: pattern selection used the heuristic fallback ({selected.error})")

        selections = selected.value.selections
        for selection in selections:
            if selection.no_fit and not gap_filling_allowed(request.options):
                raise NoFitError(path, selection.requirement_index, selection.category.value, selection.reason)

        context = brand_context(request, page)
        completed = 0

        async def build(index: int, selection: PatternSelection):
            nonlocal completed
            async with gate:
                _check_cancel(cancel)
                neighbours = [
                    s.pattern_id for s in selections[max(0, index - 1):index + 2]
                    if s.pattern_id and s is not selection
                ]
                built = await self._build_section(
                    request, requirements[index], selection, index, context, seed, path, page_id, neighbours,
                )
            completed += 1
            notify(on_progress, ProgressEvent(
                stage="section", page_index=page_index, section_index=index,
                completed=completed, total=len(selections),
            ))
            return built

        built = await gather_or_cancel(*(build(i, s) for i, s in enumerate(selections)))
        sections = [section for section, _, _ in built]
        reasoning = [entry for _, entry, _ in built]
        warnings.extend(warning for _, _, warning in built if warning)

        for index, section in enumerate(sections):
            result = validate_section(section, self.registry, intent=section.intent, path=f"{path} sections[{index}]")
            for issue in result.errors:
                warnings.append(f"{issue.path}: {issue.message}")

        composed = PageComposition(
            id=page_id,
            page_type=page.page_type.value,
            path=path,
            title=page.resolved_title(request.vision.project_name),
            description=page.description,
            layout=selected.value.layout,
            sections=sections,
        )

        outcomes: List[ImageOutcome] = []
        if images is not None:
            def image_progress(done: int, total: int) -> None:
                notify(on_progress, ProgressEvent(stage="images", page_index=page_index, completed=done, total=total))

            filled = await images.generate_for_page(composed, values, cancel=cancel, on_progress=image_progress)
            composed, outcomes = filled.value, filled.outcomes
            failed = [o for o in outcomes if not o.success and o.error != "cancelled"]
            if failed:
                warnings.append(f"{path}: {len(failed)} image(s) could not be generated")
        _check_cancel(cancel)

        logger.info("[Composer] %s: %d section(s) composed", path, len(composed.sections))
        return PageResult(page=composed, reasoning=reasoning, warnings=warnings, outcomes=outcomes)

    async def _build_section(
        self,
        request: CompositionRequest,
        requirement: SectionRequirement,
        selection: PatternSelection,
        index: int,
        context,
        seed: int,
        path: str,
        page_id: str,
        neighbours: Sequence[str],
    ) -> Tuple[SectionComposition, PatternReasoning, Optional[str]]:
        if selection.no_fit:
            pattern_id = custom_pattern_id(seed, path, index, requirement.category.value, requirement.description)
            section_id = generate_section_id(pattern_id, seed, path, index)
            filled = await self.gap_filler.fill(requirement, context, section_id, pattern_id, neighbours)
            reasoning = PatternReasoning(
                page_id=page_id,
                section_index=index,
                pattern_id=pattern_id,
                reason=selection.reason or "No catalog pattern fits the requirement",
                rejected_alternatives=selection.alternatives,
                confidence_score=selection.confidence_score,
                source=DecisionSource.GAP_FILLER,
            )
            warning = f"{path}: custom section {index} used fallback content ({filled.error})" if filled.used_fallback else None
            return filled.value, reasoning, warning

        pattern = self.registry.get(selection.pattern_id)
        generated = await self.prop_generator.generate(
            pattern, context, section_index=index, instructions=request.options.custom_instructions,
        )
        section = SectionComposition(
            id=generate_section_id(pattern.id, seed, path, index),
            pattern_id=pattern.id,
            variant_id=selection.variant_id,
            props=generated.value,
            intent=requirement.category,
        )
        reasoning = PatternReasoning(
            page_id=page_id,
            section_index=index,
            pattern_id=pattern.id,
            reason=selection.reason,
            rejected_alternatives=selection.alternatives,
            confidence_score=selection.confidence_score,
            source=selection.source,
        )
        warning = f"{path}: section {index} ({pattern.id}) used default content ({generated.error})" if generated.used_fallback else None
        return section, reasoning, warning

    # ------------------------------------------------------------------
    # Edits on an existing composition
    # ------------------------------------------------------------------

    def _locate_page(self, project: ProjectComposition, page_key: str) -> int:
        for index, page in enumerate(project.pages):
            if page.id == page_key or page.path == page_key:
                return index
        raise NotFoundError(f"Page not found: {page_key}")

    def _locate_section(self, page: PageComposition, section_id: str) -> int:
        for index, section in enumerate(page.sections):
            if section.id == section_id:
                return index
        raise NotFoundError(f"Section not found on {page.path}: {section_id}")

    @staticmethod
    def _page_request(request: CompositionRequest, page: PageComposition) -> PageRequest:
        for candidate in request.pages:
            if candidate.resolved_path() == page.path:
                return candidate
        page_type = page.page_type if page.page_type in {t.value for t in PageType} else PageType.HOME.value
        return PageRequest(page_type=page_type, path=page.path, title=page.title, description=page.description)

    @staticmethod
    def _with_sections(
        project: ProjectComposition,
        page_index: int,
        sections: List[SectionComposition],
        audit: Optional[PatternReasoning] = None,
    ) -> ProjectComposition:
        pages = list(project.pages)
        pages[page_index] = pages[page_index].model_copy(update={"sections": sections})
        update = {"pages": pages, "shared_components": shared_components(pages)}
        if audit is not None:
            update["metadata"] = project.metadata.model_copy(
                update={"audit_trail": project.metadata.audit_trail + [audit]},
            )
        return project.model_copy(update=update, deep=True)

    async def _fill_images(
        self,
        section: SectionComposition,
        request: CompositionRequest,
        project: ProjectComposition,
    ) -> SectionComposition:
        if not request.options.generate_images:
            return section
        values = prompt_values(
            project.name,
            request.vision.description,
            request.template,
            project.global_styles.colors.primary,
            request.vision.target_audience,
        )
        filled = await self.image_generator(request.options).generate_for_section(section, values)
        return filled.value

    async def regenerate_section(
        self,
        project: ProjectComposition,
        page_key: str,
        section_id: str,
        request: CompositionRequest,
        instructions: Optional[str] = None,
    ) -> ProjectComposition:
        """Rewrite one section's content, keeping its pattern, variant, and id.

        Args:
            project: Existing composition (not modified)
            page_key: Page id or path
            section_id: Section to regenerate
            request: The request the project was composed from
            instructions: Feedback for the new content

        Returns:
            A new ProjectComposition with the section replaced
        """
        page_index = self._locate_page(project, page_key)
        page = project.pages[page_index]
        index = self._locate_section(page, section_id)
        section = page.sections[index]
        context = brand_context(request, self._page_request(request, page))
        instructions = instructions or request.options.custom_instructions

        if section.is_custom_generated or is_custom_pattern_id(section.pattern_id):
            requirement = SectionRequirement(
                category=section.intent or PatternCategory.CONTENT,
                description=instructions or "",
            )
            neighbours = [s.pattern_id for s in page.sections if s.id != section.id]
            filled = await self.gap_filler.fill(requirement, context, section.id, section.pattern_id, neighbours)
            replacement = filled.value.model_copy(update={"variant_id": section.variant_id})
        else:
            pattern = self.registry.get(section.pattern_id)
            if pattern is None:
                raise NotFoundError(f"Pattern not found: {section.pattern_id}")
            generated = await self.prop_generator.generate(pattern, context, section_index=index, instructions=instructions)
            replacement = section.model_copy(update={"props": generated.value}, deep=True)

        replacement = await self._fill_images(replacement, request, project)
        sections = list(page.sections)
        sections[index] = replacement
        logger.info("[Composer] Regenerated %s on %s", section_id, page.path)
        return self._with_sections(project, page_index, sections)

    async def fill_gap(
        self,
        project: ProjectComposition,
        page_key: str,
        requirement_text: str,
        request: CompositionRequest,
        position: Optional[int] = None,
    ) -> ProjectComposition:
        """Insert a section for a free-text requirement.

        A catalog pattern is used when the text maps onto one; otherwise a
        custom section is designed.

        Raises:
            NoFitError: No pattern matches and gap filling is not allowed
        """
        page_index = self._locate_page(project, page_key)
        page = project.pages[page_index]
        context = brand_context(request, self._page_request(request, page))
        index = len(page.sections) if position is None else max(0, min(position, len(page.sections)))
        neighbours = [s.pattern_id for s in page.sections[max(0, index - 1):index + 1]]

        pattern_id = can_fulfill_with_pattern(requirement_text, self.registry)
        if pattern_id is not None:
            pattern = self.registry.get(pattern_id)
            generated = await self.prop_generator.generate(
                pattern, context, section_index=index, instructions=requirement_text,
            )
            section = SectionComposition(
                id=generate_section_id(pattern.id),
                pattern_id=pattern.id,
                variant_id=choose_variant(pattern, request.aesthetic_terms()),
                props=generated.value,
                intent=pattern.category,
            )
            audit = PatternReasoning(
                page_id=page.id,
                section_index=index,
                pattern_id=pattern.id,
                reason=f"Keyword match for '{requirement_text}'",
                confidence_score=60,
                source=DecisionSource.FALLBACK,
            )
        else:
            category = detect_category(requirement_text) or PatternCategory.CONTENT
            if not gap_filling_allowed(request.options):
                raise NoFitError(page.path, index, category.value, "gap filling is disabled")
            requirement = SectionRequirement(category=category, description=requirement_text)
            custom_id = custom_pattern_id(project.metadata.seed, page.path, index, requirement_text)
            filled = await self.gap_filler.fill(
                requirement, context, generate_section_id(custom_id), custom_id, neighbours,
            )
            section = filled.value
            audit = PatternReasoning(
                page_id=page.id,
                section_index=index,
                pattern_id=custom_id,
                reason=f"No catalog pattern matches '{requirement_text}'",
                confidence_score=50,
                source=DecisionSource.GAP_FILLER,
            )

        section = await self._fill_images(section, request, project)
        sections = list(page.sections)
        sections.insert(index, section)
        logger.info("[Composer] Filled gap on %s with %s at %d", page.path, section.pattern_id, index)
        return self._with_sections(project, page_index, sections, audit)

    def swap_pattern(
        self,
        project: ProjectComposition,
        page_key: str,
        section_id: str,
        new_pattern_id: str,
    ) -> ProjectComposition:
        """Re-target one section to another pattern, migrating its content."""
        page_index = self._locate_page(project, page_key)
        page = project.pages[page_index]
        index = self._locate_section(page, section_id)
        sections = list(page.sections)
        sections[index] = migrate_section(sections[index], new_pattern_id, self.registry)
        return self._with_sections(project, page_index, sections)

    def validate(self, project: ProjectComposition) -> Tuple[ValidationResult, bool]:
        """Validate a composition; returns (result, export_ready)."""
        result = validate_definition(project, self.registry)
        return result, is_valid_for_export(result)

    def estimate_images(self, project: ProjectComposition, skip_low_priority: bool = False) -> ImageEstimate:
        sections = [section for page in project.pages for section in page.sections]
        return estimate_images(sections, self.registry, skip_low_priority)


def load_request(path: Union[str, Path]) -> CompositionRequest:
    """Read a CompositionRequest from a JSON file."""
    return CompositionRequest.model_validate_json(Path(path).read_text(encoding="utf-8"))


def load_composition(path: Union[str, Path]) -> ProjectComposition:
    """Read a ProjectComposition from a JSON file."""
    return ProjectComposition.model_validate_json(Path(path).read_text(encoding="utf-8"))


def write_output(output: ComposerOutput, output_dir: Optional[Union[str, Path]] = None) -> Path:
    """Write composition.json and reasoning.json under <output_dir>/<project id>/."""
    target = Path(output_dir) if output_dir else settings.get_output_path()
    target = target / output.composition.id
    target.mkdir(parents=True, exist_ok=True)

    (target / "composition.json").write_text(output.composition.model_dump_json(indent=2), encoding="utf-8")
    reasoning = {
        "reasoning": [entry.model_dump(mode="json") for entry in output.reasoning],
        "warnings": output.warnings,
        "export_ready": output.export_ready,
        "issues": [issue.model_dump(mode="json") for issue in output.validation.issues],
    }
    (target / "reasoning.json").write_text(json.dumps(reasoning, indent=2), encoding="utf-8")
    return target


def run_composer(
    request: CompositionRequest,
    provider: Optional[str] = None,
    model: Optional[str] = None,
    registry: Optional[PatternRegistry] = None,
    cancel: Optional[CancelSignal] = None,
    on_progress: Optional[ProgressHandler] = None,
) -> ComposerOutput:
    """Convenience function to run a full composition.

    Args:
        request: What to compose
        provider: LLM provider (litellm, anthropic, openai, deepseek)
        model: Model or tier (e.g. fast, quality, gpt-4o-mini)
        registry: Pattern catalog (defaults to the configured catalog)
        cancel: Optional cancel signal with is_set()
        on_progress: Optional progress handler

    Returns:
        ComposerOutput with the composition, reasoning, and validation
    """
    composer = Composer(registry=registry, provider=provider, model=model)
    return asyncio.run(composer.compose_project(request, cancel=cancel, on_progress=on_progress))
