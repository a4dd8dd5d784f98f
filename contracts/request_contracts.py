"""Upstream request contracts: what the caller asks the composer to build."""

from pydantic import BaseModel, Field, field_validator
from typing import List, Optional, Dict
from enum import Enum

from .pattern_contracts import PatternCategory


class PageType(str, Enum):
    """Kind of page being composed."""
    HOME = "home"
    ABOUT = "about"
    PRICING = "pricing"
    FEATURES = "features"
    BLOG = "blog"
    BLOG_POST = "blog-post"
    CONTACT = "contact"
    PRODUCT = "product"
    DASHBOARD = "dashboard"
    SETTINGS = "settings"
    AUTH = "auth"


class ComposerMode(str, Enum):
    """How strictly selection is bound to the registry."""
    REGISTRY = "registry"
    HYBRID = "hybrid"
    AUTO = "auto"


class StyleInheritance(str, Enum):
    """Where global styles come from."""
    TEMPLATE = "template"
    REFERENCE = "reference"
    BLEND = "blend"


class CompositionIntent(str, Enum):
    """What the composition will be used for; export is validated strictly."""
    PREVIEW = "preview"
    EXPORT = "export"


class LayoutType(str, Enum):
    """Page-level layout hint handed to the renderer."""
    MARKETING = "layout-marketing"
    BENTO = "layout-bento"
    GRID = "layout-grid"
    DASHBOARD = "layout-dashboard"
    BLOG = "layout-blog"
    AUTH = "layout-auth"


class VisionDocument(BaseModel):
    """The caller's description of the product and its brand."""
    project_name: str = Field(..., min_length=1, description="Product or project name")
    description: str = Field(default="", description="What the product does")
    target_audience: str = Field(default="", description="Who the site is for")
    tone: str = Field(default="", description="Voice of the copy, e.g. confident, playful")
    aesthetic: List[str] = Field(default_factory=list, description="Aesthetic descriptors, e.g. dark, technical")
    goals: List[str] = Field(default_factory=list, description="Business goals of the site")
    keywords: List[str] = Field(default_factory=list, description="Terms the copy should reflect")


class ColorPalette(BaseModel):
    """Colors extracted from a reference site."""
    primary: Optional[str] = None
    secondary: Optional[str] = None
    accent: Optional[str] = None
    background: Optional[str] = None
    foreground: Optional[str] = None
    muted: Optional[str] = None


class ReferenceSiteAnalysis(BaseModel):
    """Analysis of a site the caller wants the result to resemble."""
    url: str = Field(..., description="Reference site URL")
    aesthetic: List[str] = Field(default_factory=list, description="Aesthetic descriptors of the site")
    mood: str = Field(default="", description="Overall mood")
    layout_type: Optional[str] = Field(default=None, description="Detected layout, e.g. bento, grid, marketing")
    palette: Optional[ColorPalette] = Field(default=None, description="Extracted colors")
    fonts: Dict[str, str] = Field(default_factory=dict, description="Role -> font family")
    recommended_patterns: List[str] = Field(
        default_factory=list,
        description="Pattern ids recommended for recreating the site",
    )


class SectionRequirement(BaseModel):
    """One section the page needs."""
    category: PatternCategory = Field(..., description="Category the section must belong to")
    description: str = Field(default="", description="Free-text description of the section")
    tags: List[str] = Field(default_factory=list, description="Extra descriptors for matching")


class PageRequest(BaseModel):
    """One page to compose."""
    page_type: PageType = Field(default=PageType.HOME, description="Kind of page")
    path: Optional[str] = Field(default=None, description="Route, e.g. /pricing (derived from type when omitted)")
    title: Optional[str] = Field(default=None, description="Page title (derived when omitted)")
    description: str = Field(default="", description="What the page is for")
    sections: List[SectionRequirement] = Field(
        default_factory=list,
        description="Explicit section requirements; page-type defaults are used when empty",
    )

    def resolved_path(self) -> str:
        if self.path:
            return self.path
        if self.page_type == PageType.HOME:
            return "/"
        return f"/{self.page_type.value}"

    def resolved_title(self, project_name: str) -> str:
        if self.title:
            return self.title
        if self.page_type == PageType.HOME:
            return project_name
        label = self.page_type.value.replace("-", " ").title()
        return f"{label} | {project_name}"


class ComposerOptions(BaseModel):
    """Tuning knobs for a composition run."""
    mode: ComposerMode = Field(default=ComposerMode.HYBRID, description="Matching strictness")
    max_patterns_per_page: Optional[int] = Field(default=None, ge=1, description="Section cap per page")
    enable_gap_filling: bool = Field(default=True, description="Synthesize custom sections when nothing fits")
    style_inheritance: StyleInheritance = Field(default=StyleInheritance.REFERENCE)
    generate_images: bool = Field(default=True, description="Fill placeholder images")
    skip_low_priority_images: bool = Field(default=False)
    max_concurrent_sections: Optional[int] = Field(default=None, ge=1)
    max_concurrent_images: Optional[int] = Field(default=None, ge=1)
    seed: Optional[int] = Field(default=None, description="Seed for reproducible ids")
    intent: CompositionIntent = Field(default=CompositionIntent.PREVIEW)
    custom_instructions: Optional[str] = Field(default=None, description="Extra instructions for copy generation")


class CompositionRequest(BaseModel):
    """Everything the composer needs to build a project."""
    vision: VisionDocument
    template: str = Field(default="saas", description="Starter template, e.g. saas, ecommerce, blog")
    pages: List[PageRequest] = Field(default_factory=lambda: [PageRequest()], min_length=1)
    references: List[ReferenceSiteAnalysis] = Field(default_factory=list)
    integrations: List[str] = Field(default_factory=list)
    features: List[str] = Field(default_factory=list)
    options: ComposerOptions = Field(default_factory=ComposerOptions)

    @field_validator("template")
    @classmethod
    def normalize_template(cls, value: str) -> str:
        return value.strip().lower() or "saas"

    def aesthetic_terms(self) -> List[str]:
        """Aesthetic descriptors from the vision and every reference, in order, without repeats."""
        terms: List[str] = []
        for term in self.vision.aesthetic + [t for ref in self.references for t in ref.aesthetic]:
            lowered = term.strip().lower()
            if lowered and lowered not in terms:
                terms.append(lowered)
        return terms
