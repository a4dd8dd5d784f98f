"""Image Generator - fills placeholder image slots through an ImageProvider.

Tasks run in batches; a semaphore shared by the whole generator bounds the
number of in-flight calls, so pages or sections filled concurrently still
respect one ceiling. Every task records its own outcome and a failure never
aborts the rest of the batch.
"""

import asyncio
import copy
import logging
import re
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Generic, List, Mapping, Optional, Protocol, Sequence, Tuple, TypeVar

from config import settings
from contracts import (
    ImageModelTier,
    ImageOutcome,
    ImageStats,
    ImageTask,
    PageComposition,
    SectionComposition,
)
from patterns import PatternRegistry, get_registry
from providers import ImageProvider, get_image_provider
from .detector import detect_image_tasks
from .prompts import recommended_model_tier

logger = logging.getLogger(__name__)

T = TypeVar("T")

ProgressCallback = Callable[[int, int], None]

_NESTED_PATH = re.compile(r"^([^\[]+)\[(\d+)\]\.(.+)$")


class CancelSignal(Protocol):
    """Anything with is_set(), e.g. asyncio.Event or threading.Event."""

    def is_set(self) -> bool:
        ...


def stats_for(outcomes: Sequence[ImageOutcome]) -> ImageStats:
    stats = ImageStats()
    for outcome in outcomes:
        if not outcome.success:
            stats.failed += 1
        elif outcome.cached:
            stats.cached += 1
        else:
            stats.generated += 1
    return stats


@dataclass
class ImageFillResult(Generic[T]):
    """Updated value plus one outcome per attempted image."""
    value: T
    outcomes: List[ImageOutcome] = field(default_factory=list)

    @property
    def stats(self) -> ImageStats:
        return stats_for(self.outcomes)


def set_prop_path(props: Dict[str, Any], path: str, value: Any) -> Dict[str, Any]:
    """Return a copy of props with the value at path replaced.

    Paths are either a slot name or ``name[index].field``.
    """
    updated = copy.deepcopy(props)
    match = _NESTED_PATH.match(path)
    if match is None:
        updated[path] = value
        return updated
    name, index, item_field = match.group(1), int(match.group(2)), match.group(3)
    items = updated.get(name)
    if not isinstance(items, list) or index >= len(items) or not isinstance(items[index], dict):
        logger.warning("[ImageGenerator] Cannot write %s: item no longer exists", path)
        return updated
    items[index][item_field] = value
    return updated


class ImageGenerator:
    """Resolves placeholder images for sections and pages."""

    def __init__(
        self,
        provider: Optional[ImageProvider] = None,
        registry: Optional[PatternRegistry] = None,
        max_concurrent: Optional[int] = None,
        skip_low_priority: bool = False,
        timeout_seconds: Optional[float] = None,
        model_tier: Optional[ImageModelTier] = None,
    ):
        self.provider = provider or get_image_provider()
        self.registry = registry or get_registry()
        self.max_concurrent = max(1, max_concurrent or settings.max_concurrent_images)
        self.skip_low_priority = skip_low_priority
        self.timeout_seconds = timeout_seconds or settings.api_timeout_seconds
        forced = model_tier or settings.image_model_tier
        self.model_tier: Optional[ImageModelTier] = ImageModelTier(forced) if forced else None
        self._semaphore: Optional[asyncio.Semaphore] = None
        self._semaphore_loop: Optional[asyncio.AbstractEventLoop] = None

    def _gate(self) -> asyncio.Semaphore:
        loop = asyncio.get_running_loop()
        if self._semaphore is None or self._semaphore_loop is not loop:
            self._semaphore = asyncio.Semaphore(self.max_concurrent)
            self._semaphore_loop = loop
        return self._semaphore

    def plan(self, sections: Sequence[SectionComposition], values: Mapping[str, str]) -> List[ImageTask]:
        tasks: List[ImageTask] = []
        for section in sections:
            tasks.extend(detect_image_tasks(section, self.registry, values, self.skip_low_priority))
        return tasks

    def tier_for(self, task: ImageTask) -> ImageModelTier:
        """The forced tier when one is set, otherwise the one the slot priority recommends."""
        return self.model_tier or recommended_model_tier(task.priority)

    async def _run_task(self, task: ImageTask) -> ImageOutcome:
        async with self._gate():
            try:
                result = await asyncio.wait_for(
                    self.provider.generate(task.prompt, task.size, task.style, tier=self.tier_for(task)),
                    timeout=self.timeout_seconds,
                )
            except asyncio.TimeoutError:
                logger.warning("[ImageGenerator] %s.%s timed out", task.section_id, task.prop_path)
                return ImageOutcome(section_id=task.section_id, prop_path=task.prop_path,
                                    success=False, error="timeout")
            except Exception as e:
                logger.warning("[ImageGenerator] %s.%s failed: %s", task.section_id, task.prop_path, e)
                return ImageOutcome(section_id=task.section_id, prop_path=task.prop_path,
                                    success=False, error=str(e))
        if not result.success or not result.url:
            return ImageOutcome(section_id=task.section_id, prop_path=task.prop_path,
                                success=False, error=result.error or "no image returned")
        return ImageOutcome(section_id=task.section_id, prop_path=task.prop_path,
                            success=True, url=result.url, cached=result.cached)

    async def execute(
        self,
        tasks: Sequence[ImageTask],
        cancel: Optional[CancelSignal] = None,
        on_progress: Optional[ProgressCallback] = None,
    ) -> List[ImageOutcome]:
        """Run tasks in batches and return one outcome per task, in task order."""
        outcomes: List[ImageOutcome] = []
        total = len(tasks)
        for start in range(0, total, self.max_concurrent):
            if cancel is not None and cancel.is_set():
                logger.info("[ImageGenerator] Cancelled with %d task(s) not started", total - start)
                outcomes.extend(
                    ImageOutcome(section_id=t.section_id, prop_path=t.prop_path, success=False, error="cancelled")
                    for t in tasks[start:]
                )
                break
            batch = tasks[start:start + self.max_concurrent]
            for outcome in await asyncio.gather(*(self._run_task(task) for task in batch)):
                outcomes.append(outcome)
                if on_progress is not None:
                    try:
                        on_progress(len(outcomes), total)
                    except Exception as e:
                        logger.warning("[ImageGenerator] Progress callback failed: %s", e)
        return outcomes

    @staticmethod
    def apply(sections: Sequence[SectionComposition], outcomes: Sequence[ImageOutcome]) -> List[SectionComposition]:
        """New sections with every successful outcome written into their props."""
        by_section: Dict[str, List[Tuple[str, str]]] = {}
        for outcome in outcomes:
            if outcome.success and outcome.url:
                by_section.setdefault(outcome.section_id, []).append((outcome.prop_path, outcome.url))
        updated: List[SectionComposition] = []
        for section in sections:
            writes = by_section.get(section.id)
            if not writes:
                updated.append(section)
                continue
            props = section.props
            for path, url in writes:
                props = set_prop_path(props, path, url)
            updated.append(section.model_copy(update={"props": props}, deep=True))
        return updated

    async def fill_sections(
        self,
        sections: Sequence[SectionComposition],
        values: Mapping[str, str],
        cancel: Optional[CancelSignal] = None,
        on_progress: Optional[ProgressCallback] = None,
    ) -> ImageFillResult[List[SectionComposition]]:
        tasks = self.plan(sections, values)
        if not tasks:
            return ImageFillResult(value=list(sections))
        logger.info("[ImageGenerator] %d image(s) to resolve", len(tasks))
        outcomes = await self.execute(tasks, cancel=cancel, on_progress=on_progress)
        return ImageFillResult(value=self.apply(sections, outcomes), outcomes=outcomes)

    async def generate_for_section(
        self,
        section: SectionComposition,
        values: Mapping[str, str],
        cancel: Optional[CancelSignal] = None,
        on_progress: Optional[ProgressCallback] = None,
    ) -> ImageFillResult[SectionComposition]:
        result = await self.fill_sections([section], values, cancel, on_progress)
        return ImageFillResult(value=result.value[0], outcomes=result.outcomes)

    async def generate_for_page(
        self,
        page: PageComposition,
        values: Mapping[str, str],
        cancel: Optional[CancelSignal] = None,
        on_progress: Optional[ProgressCallback] = None,
    ) -> ImageFillResult[PageComposition]:
        result = await self.fill_sections(page.sections, values, cancel, on_progress)
        updated = page.model_copy(update={"sections": result.value}, deep=True)
        return ImageFillResult(value=updated, outcomes=result.outcomes)
