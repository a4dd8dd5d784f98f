"""Pydantic contracts for the Page Composer.

Every handoff between pipeline stages is typed through these contracts.
"""

from .pattern_contracts import (
    PatternCategory,
    SlotKind,
    TEXT_KINDS,
    Slot,
    Pattern,
)

from .request_contracts import (
    PageType,
    ComposerMode,
    StyleInheritance,
    CompositionIntent,
    LayoutType,
    VisionDocument,
    ColorPalette,
    ReferenceSiteAnalysis,
    SectionRequirement,
    PageRequest,
    ComposerOptions,
    CompositionRequest,
)

from .composition_contracts import (
    CUSTOM_PATTERN_PREFIX,
    is_custom_pattern_id,
    SectionComposition,
    PageComposition,
    ColorScheme,
    FontScheme,
    GlobalStyles,
    DecisionSource,
    PatternReasoning,
    ImageStats,
    CompositionMetadata,
    ProjectComposition,
)

from .validation_contracts import (
    IssueSeverity,
    IssueCode,
    ValidationIssue,
    ValidationResult,
)

from .selection_contracts import (
    StageStatus,
    StageResult,
    PatternSelection,
    PageSelection,
    SectionChoice,
    SelectorResponse,
    CustomSlotSpec,
    GapFillerResponse,
)

from .image_contracts import (
    SizeClass,
    ImageStyle,
    ImagePriority,
    ImageModelTier,
    ImageTask,
    ImageOutcome,
    ImageEstimate,
)

__all__ = [
    # Patterns
    "PatternCategory",
    "SlotKind",
    "TEXT_KINDS",
    "Slot",
    "Pattern",
    # Requests
    "PageType",
    "ComposerMode",
    "StyleInheritance",
    "CompositionIntent",
    "LayoutType",
    "VisionDocument",
    "ColorPalette",
    "ReferenceSiteAnalysis",
    "SectionRequirement",
    "PageRequest",
    "ComposerOptions",
    "CompositionRequest",
    # Compositions
    "CUSTOM_PATTERN_PREFIX",
    "is_custom_pattern_id",
    "SectionComposition",
    "PageComposition",
    "ColorScheme",
    "FontScheme",
    "GlobalStyles",
    "DecisionSource",
    "PatternReasoning",
    "ImageStats",
    "CompositionMetadata",
    "ProjectComposition",
    # Validation
    "IssueSeverity",
    "IssueCode",
    "ValidationIssue",
    "ValidationResult",
    # Stages
    "StageStatus",
    "StageResult",
    "PatternSelection",
    "PageSelection",
    "SectionChoice",
    "SelectorResponse",
    "CustomSlotSpec",
    "GapFillerResponse",
    # Images
    "SizeClass",
    "ImageStyle",
    "ImagePriority",
    "ImageModelTier",
    "ImageTask",
    "ImageOutcome",
    "ImageEstimate",
]
