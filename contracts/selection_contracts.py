"""Contracts exchanged with the generative service and between pipeline stages."""

from dataclasses import dataclass
from pydantic import BaseModel, Field
from typing import Any, Dict, Generic, List, Optional, TypeVar
from enum import Enum

from .pattern_contracts import PatternCategory, SlotKind
from .composition_contracts import DecisionSource

T = TypeVar("T")


class StageStatus(str, Enum):
    OK = "ok"
    FALLBACK = "fallback"


@dataclass
class StageResult(Generic[T]):
    """Outcome of a generative stage; always carries a usable value."""
    value: T
    status: StageStatus = StageStatus.OK
    error: Optional[str] = None

    @classmethod
    def success(cls, value: T) -> "StageResult[T]":
        return cls(value=value)

    @classmethod
    def fallback(cls, value: T, error: Optional[str] = None) -> "StageResult[T]":
        return cls(value=value, status=StageStatus.FALLBACK, error=error)

    @property
    def used_fallback(self) -> bool:
        return self.status == StageStatus.FALLBACK


class PatternSelection(BaseModel):
    """The selector's decision for one section requirement."""
    requirement_index: int = Field(..., ge=0)
    category: PatternCategory
    pattern_id: Optional[str] = Field(default=None, description="None means no registered pattern fits")
    variant_id: Optional[str] = None
    reason: str = Field(default="")
    confidence_score: int = Field(default=50, ge=0, le=100)
    alternatives: List[str] = Field(default_factory=list)
    source: DecisionSource = Field(default=DecisionSource.AI)

    @property
    def no_fit(self) -> bool:
        return self.pattern_id is None


class PageSelection(BaseModel):
    """Selector output for a whole page."""
    selections: List[PatternSelection] = Field(default_factory=list)
    layout: str = Field(default="layout-marketing")


# Shapes the generative service is asked to return


class SectionChoice(BaseModel):
    """One entry of the selector's JSON answer."""
    requirement_index: int = Field(..., ge=0, description="Index of the requirement being answered")
    pattern_id: Optional[str] = Field(
        default=None,
        description="Chosen candidate pattern id, or null when no candidate fits",
    )
    variant_id: Optional[str] = Field(default=None, description="One of the chosen pattern's variants")
    reason: str = Field(default="", description="Why this pattern fits the page")
    confidence_score: int = Field(default=70, ge=0, le=100, description="Confidence 0-100")
    alternatives: List[str] = Field(default_factory=list, description="Other candidates considered")


class SelectorResponse(BaseModel):
    """Full selector answer for one page."""
    choices: List[SectionChoice] = Field(..., description="One choice per requirement")
    layout: Optional[str] = Field(default=None, description="Recommended layout hint")


class CustomSlotSpec(BaseModel):
    """Slot description returned by the gap filler."""
    name: str = Field(..., description="camelCase slot name")
    kind: SlotKind = Field(default=SlotKind.TEXT, description="Value kind")
    required: bool = Field(default=False)
    max_length: Optional[int] = Field(default=None, description="Maximum characters for text slots")
    description: str = Field(default="")


class GapFillerResponse(BaseModel):
    """A bespoke section: minimal schema plus content."""
    name: str = Field(..., description="Short name of the section")
    reason: str = Field(default="", description="Why this structure answers the requirement")
    slots: List[CustomSlotSpec] = Field(..., min_length=1, description="Minimal slot schema")
    props: Dict[str, Any] = Field(default_factory=dict, description="Slot name -> content")
