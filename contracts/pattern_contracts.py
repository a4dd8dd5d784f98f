"""Pattern catalog contracts: the immutable structural templates sections are built from."""

import copy
from pydantic import BaseModel, Field, model_validator
from typing import Any, Dict, List, Optional
from enum import Enum


class PatternCategory(str, Enum):
    """Closed set of section categories a pattern can belong to."""
    HERO = "hero"
    FEATURES = "features"
    PRICING = "pricing"
    TESTIMONIALS = "testimonials"
    CTA = "cta"
    FAQ = "faq"
    TEAM = "team"
    STATS = "stats"
    LOGOS = "logos"
    FOOTER = "footer"
    NAVIGATION = "navigation"
    CONTENT = "content"
    COMMERCE = "commerce"
    DASHBOARD = "dashboard"
    AUTH = "auth"


class SlotKind(str, Enum):
    """Value kind a slot accepts."""
    TEXT = "text"
    RICH_TEXT = "richText"
    IMAGE = "image"
    ARRAY = "array"
    BOOLEAN = "boolean"
    NUMBER = "number"


TEXT_KINDS = (SlotKind.TEXT, SlotKind.RICH_TEXT)


class Slot(BaseModel):
    """A named, typed content field exposed by a pattern."""
    name: str = Field(..., min_length=1, description="Slot name, unique within its pattern")
    kind: SlotKind = Field(..., description="Value kind the slot accepts")
    required: bool = Field(default=False, description="Whether the slot must hold a non-empty value")
    max_length: Optional[int] = Field(default=None, gt=0, description="Maximum characters for text slots")
    default: Any = Field(default=None, description="Value used when nothing better is available")
    description: str = Field(default="", description="What the slot holds")
    aspect_ratio: Optional[str] = Field(default=None, description="Aspect-ratio hint for image slots, e.g. 16:9")
    ai_prompt: Optional[str] = Field(default=None, description="Generation hint for the slot")
    item_fields: Dict[str, SlotKind] = Field(
        default_factory=dict,
        description="For array slots: field name -> kind of each item's fields",
    )

    model_config = {"frozen": True}

    @property
    def is_text(self) -> bool:
        return self.kind in TEXT_KINDS

    def image_fields(self) -> List[str]:
        """Item fields of an array slot that hold images."""
        return [name for name, kind in self.item_fields.items() if kind == SlotKind.IMAGE]


class Pattern(BaseModel):
    """Immutable catalog entry describing one reusable section structure."""
    id: str = Field(..., min_length=1, description="Unique pattern id, e.g. hero-split-image")
    name: str = Field(..., min_length=1, description="Human readable name")
    category: PatternCategory = Field(..., description="Section category")
    description: str = Field(default="", description="What the pattern renders")
    ai_guidance: str = Field(default="", description="Free-text guidance on when to choose the pattern")
    tags: List[str] = Field(default_factory=list, description="Descriptive tags used for matching")
    inspiration_sources: List[str] = Field(
        default_factory=list,
        description="Sites whose sections inspired the pattern, e.g. linear.app",
    )
    variants: List[str] = Field(default_factory=lambda: ["light"], description="Supported visual variants")
    default_variant: Optional[str] = Field(default=None, description="Variant used when none is chosen")
    slots: List[Slot] = Field(default_factory=list, description="Ordered content slots")
    default_props: Dict[str, Any] = Field(
        default_factory=dict,
        description="Pattern-level defaults for optional settings (e.g. columns)",
    )

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def check_slots_and_variants(self) -> "Pattern":
        names = [slot.name for slot in self.slots]
        duplicates = sorted({name for name in names if names.count(name) > 1})
        if duplicates:
            raise ValueError(f"duplicate slot names in pattern '{self.id}': {duplicates}")
        if not self.variants:
            raise ValueError(f"pattern '{self.id}' declares no variants")
        if self.default_variant is not None and self.default_variant not in self.variants:
            raise ValueError(
                f"default variant '{self.default_variant}' of pattern '{self.id}' "
                f"is not one of {self.variants}"
            )
        return self

    def get_slot(self, name: str) -> Optional[Slot]:
        for slot in self.slots:
            if slot.name == name:
                return slot
        return None

    @property
    def slot_names(self) -> List[str]:
        return [slot.name for slot in self.slots]

    @property
    def required_slots(self) -> List[Slot]:
        return [slot for slot in self.slots if slot.required]

    @property
    def image_slots(self) -> List[Slot]:
        """Slots holding images directly or inside array items."""
        return [
            slot for slot in self.slots
            if slot.kind == SlotKind.IMAGE or (slot.kind == SlotKind.ARRAY and slot.image_fields())
        ]

    @property
    def preferred_variant(self) -> str:
        return self.default_variant or self.variants[0]

    def defaults(self) -> Dict[str, Any]:
        """Fresh copy of the pattern's default property bag."""
        props: Dict[str, Any] = copy.deepcopy(dict(self.default_props))
        for slot in self.slots:
            if slot.default is not None:
                props[slot.name] = copy.deepcopy(slot.default)
        return props
