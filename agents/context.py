"""Page and brand context shared by the generative stages."""

import re
from typing import Iterable, List, Optional, Set

from pydantic import BaseModel, Field

from contracts import CompositionRequest, PageRequest, SectionRequirement

_WORD = re.compile(r"[a-z0-9]+(?:-[a-z0-9]+)*")


def tokenize(texts: Iterable[str]) -> Set[str]:
    """Lowercase word set, with naive singular forms added for plurals."""
    words: Set[str] = set()
    for text in texts:
        for word in _WORD.findall((text or "").lower()):
            words.add(word)
            if len(word) > 3 and word.endswith("s"):
                words.add(word[:-1])
    return words


def context_terms(
    request: CompositionRequest,
    requirement: Optional[SectionRequirement] = None,
) -> Set[str]:
    """Words describing audience, aesthetic, tone, and the section itself."""
    vision = request.vision
    texts: List[str] = [vision.target_audience, vision.tone]
    texts.extend(vision.keywords)
    texts.extend(request.aesthetic_terms())
    for reference in request.references:
        texts.append(reference.mood)
    if requirement is not None:
        texts.append(requirement.description)
        texts.extend(requirement.tags)
    return tokenize(texts)


class BrandContext(BaseModel):
    """What every prompt needs to know about the project and page."""
    project_name: str
    description: str = ""
    target_audience: str = ""
    tone: str = ""
    aesthetic: List[str] = Field(default_factory=list)
    goals: List[str] = Field(default_factory=list)
    keywords: List[str] = Field(default_factory=list)
    template: str = "saas"
    features: List[str] = Field(default_factory=list)
    page_type: str = "home"
    page_path: str = "/"
    page_description: str = ""


def brand_context(request: CompositionRequest, page: PageRequest) -> BrandContext:
    vision = request.vision
    return BrandContext(
        project_name=vision.project_name,
        description=vision.description,
        target_audience=vision.target_audience,
        tone=vision.tone,
        aesthetic=request.aesthetic_terms(),
        goals=vision.goals,
        keywords=vision.keywords,
        template=request.template,
        features=request.features,
        page_type=page.page_type.value,
        page_path=page.resolved_path(),
        page_description=page.description,
    )
