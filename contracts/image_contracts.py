"""Image synthesis contracts."""

from pydantic import BaseModel, Field
from typing import Optional
from enum import Enum


class SizeClass(str, Enum):
    """Target size class; providers map it to a concrete resolution."""
    ICON = "icon"            # 256x256
    SQUARE = "square"        # 512x512
    LANDSCAPE = "landscape"  # 1344x768
    BANNER = "banner"        # 1920x600
    PORTRAIT = "portrait"    # 768x1344


class ImageStyle(str, Enum):
    ICON = "icon"
    ILLUSTRATION = "illustration"
    PHOTO = "photo"
    ABSTRACT = "abstract"
    LOGO = "logo"


class ImagePriority(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class ImageModelTier(str, Enum):
    """Cost/quality tier an image provider maps to a concrete model."""
    FAST = "fast"
    BALANCED = "balanced"
    QUALITY = "quality"


class ImageTask(BaseModel):
    """One placeholder image slot to fill."""
    section_id: str
    prop_path: str = Field(..., description="Concrete path, e.g. image or features[1].image")
    prompt: str
    size: SizeClass = SizeClass.SQUARE
    style: ImageStyle = ImageStyle.ILLUSTRATION
    priority: ImagePriority = ImagePriority.MEDIUM


class ImageOutcome(BaseModel):
    """Result of one image task."""
    section_id: str
    prop_path: str
    success: bool
    url: Optional[str] = None
    cached: bool = False
    error: Optional[str] = None


class ImageEstimate(BaseModel):
    """Pre-flight count of image work, computed without calling the service."""
    sections_needing_images: int = 0
    estimated_images: int = 0
    estimated_seconds: float = 0.0

    @property
    def estimated_time(self) -> str:
        seconds = int(round(self.estimated_seconds))
        if seconds < 60:
            return f"{seconds}s"
        return f"{seconds // 60}m {seconds % 60}s"
