"""Composition contracts: the generated artifact and its audit trail."""

from pydantic import BaseModel, Field
from typing import Any, Dict, List, Optional
from datetime import datetime, timezone
from enum import Enum

from .pattern_contracts import PatternCategory, Slot


CUSTOM_PATTERN_PREFIX = "custom-"


def is_custom_pattern_id(pattern_id: str) -> bool:
    """True for synthetic ids produced by the gap filler."""
    return pattern_id.startswith(CUSTOM_PATTERN_PREFIX)


class SectionComposition(BaseModel):
    """One instantiated pattern with concrete slot values."""
    id: str = Field(..., description="Section id, unique within its page")
    pattern_id: str = Field(..., description="Registry pattern id or custom-<hash> marker")
    variant_id: Optional[str] = Field(default=None, description="Chosen visual variant")
    props: Dict[str, Any] = Field(default_factory=dict, description="Slot name -> value")
    intent: Optional[PatternCategory] = Field(default=None, description="Category the section was requested for")
    is_custom_generated: bool = Field(default=False, description="Built by the gap filler")
    custom_slots: Optional[List[Slot]] = Field(
        default=None,
        description="Inline slot schema for custom sections",
    )


class PageComposition(BaseModel):
    """An ordered list of sections plus page metadata."""
    id: str = Field(..., description="Page id")
    page_type: str = Field(default="home")
    path: str = Field(..., description="Route, e.g. /pricing")
    title: str = Field(..., description="Page title")
    description: str = Field(default="")
    layout: Optional[str] = Field(default=None, description="Layout hint for the renderer")
    sections: List[SectionComposition] = Field(default_factory=list)


class ColorScheme(BaseModel):
    primary: str
    secondary: str
    accent: str
    background: str
    foreground: str
    muted: str


class FontScheme(BaseModel):
    heading: str
    body: str
    mono: str


class GlobalStyles(BaseModel):
    """Project-wide color, font, and spacing scheme."""
    colors: ColorScheme
    fonts: FontScheme
    spacing: str = Field(default="comfortable", description="compact, comfortable, or spacious")
    border_radius: str = Field(default="md", description="none, sm, md, lg, or full")


class DecisionSource(str, Enum):
    """Who made a selection decision."""
    AI = "ai"
    FALLBACK = "fallback"
    REFERENCE = "reference"
    GAP_FILLER = "gap_filler"


class PatternReasoning(BaseModel):
    """Append-only audit record for one selection decision."""
    page_id: str
    section_index: int = Field(..., ge=0)
    pattern_id: str
    reason: str = Field(default="")
    rejected_alternatives: List[str] = Field(default_factory=list)
    confidence_score: int = Field(default=50, ge=0, le=100)
    source: DecisionSource = Field(default=DecisionSource.AI)


class ImageStats(BaseModel):
    """Counts of image synthesis outcomes."""
    generated: int = 0
    cached: int = 0
    failed: int = 0

    @property
    def total(self) -> int:
        return self.generated + self.cached + self.failed

    def merge(self, other: "ImageStats") -> "ImageStats":
        return ImageStats(
            generated=self.generated + other.generated,
            cached=self.cached + other.cached,
            failed=self.failed + other.failed,
        )


class CompositionMetadata(BaseModel):
    """Provenance of a composition run."""
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    version: str = Field(default="1.0.0")
    seed: int = Field(default=0)
    template: str = Field(default="saas")
    mode: str = Field(default="hybrid")
    models: Dict[str, str] = Field(default_factory=dict, description="Stage -> model identifier")
    audit_trail: List[PatternReasoning] = Field(default_factory=list)
    average_confidence: int = Field(default=0, ge=0, le=100)
    generation_time_seconds: float = Field(default=0.0)
    input_tokens: int = Field(default=0)
    output_tokens: int = Field(default=0)
    cost_usd: float = Field(default=0.0)
    image_stats: ImageStats = Field(default_factory=ImageStats)
    warnings: List[str] = Field(default_factory=list)


class ProjectComposition(BaseModel):
    """Terminal output: every page plus global styles and provenance."""
    id: str
    name: str
    pages: List[PageComposition] = Field(..., min_length=1)
    global_styles: GlobalStyles
    shared_components: List[str] = Field(
        default_factory=list,
        description="Pattern ids used on more than one page",
    )
    metadata: CompositionMetadata = Field(default_factory=CompositionMetadata)

    def get_page(self, page_id: str) -> Optional[PageComposition]:
        for page in self.pages:
            if page.id == page_id:
                return page
        return None
