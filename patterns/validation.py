"""Structural validation of sections, pages, and whole projects.

Validation never raises and never corrects anything: every problem is
reported as a ValidationIssue with a dotted path.
"""

import re
from typing import List, Optional, Sequence

from contracts import (
    IssueCode,
    IssueSeverity,
    PageComposition,
    PatternCategory,
    ProjectComposition,
    SectionComposition,
    Slot,
    SlotKind,
    ValidationIssue,
    ValidationResult,
    is_custom_pattern_id,
)
from .registry import PatternRegistry, get_registry
from .slots import is_empty, is_placeholder, matches_kind, walk_image_values

_HEX_COLOR = re.compile(r"^#(?:[0-9a-fA-F]{3}|[0-9a-fA-F]{6}|[0-9a-fA-F]{8})$")
_CSS_VAR = re.compile(r"^var\(--[\w-]+\)$")

# Minimum perceived-brightness difference (0-255) between text and background
MIN_BRIGHTNESS_DIFFERENCE = 100


def is_css_color(value: str) -> bool:
    """Hex colors and ``var(--name)`` references are the accepted color forms."""
    return bool(_HEX_COLOR.match(value) or _CSS_VAR.match(value))


def color_brightness(value: str) -> Optional[float]:
    """Perceived brightness of a hex color, or None for anything else."""
    if not _HEX_COLOR.match(value):
        return None
    digits = value[1:]
    if len(digits) == 3:
        digits = "".join(ch * 2 for ch in digits)
    r, g, b = (int(digits[i:i + 2], 16) for i in (0, 2, 4))
    return (r * 299 + g * 587 + b * 114) / 1000


def _issue(code: IssueCode, path: str, message: str, warning: bool = False) -> ValidationIssue:
    severity = IssueSeverity.WARNING if warning else IssueSeverity.ERROR
    return ValidationIssue(code=code, severity=severity, path=path, message=message)


def _join(prefix: str, name: str) -> str:
    return f"{prefix}.{name}" if prefix else name


def validate_section(
    section: SectionComposition,
    registry: Optional[PatternRegistry] = None,
    intent: Optional[PatternCategory] = None,
    path: str = "",
) -> ValidationResult:
    """Check one section against its pattern's slot schema.

    Args:
        section: Section to check
        registry: Registry to resolve pattern ids (process registry if omitted)
        intent: Category the section is expected to fill (falls back to section.intent)
        path: Dotted prefix for issue paths
    """
    registry = registry or get_registry()
    issues: List[ValidationIssue] = []
    intent = intent or section.intent

    if is_custom_pattern_id(section.pattern_id):
        if not section.custom_slots:
            issues.append(_issue(
                IssueCode.MISSING_CUSTOM_SCHEMA,
                _join(path, "pattern_id"),
                f"Custom section '{section.id}' carries no inline slot schema",
            ))
            return ValidationResult(issues=issues)
        slots: Sequence[Slot] = section.custom_slots
    else:
        pattern = registry.get(section.pattern_id)
        if pattern is None:
            issues.append(_issue(
                IssueCode.UNKNOWN_PATTERN,
                _join(path, "pattern_id"),
                f"Unknown pattern: {section.pattern_id}",
            ))
            return ValidationResult(issues=issues)
        if intent is not None and pattern.category != intent:
            issues.append(_issue(
                IssueCode.CATEGORY_MISMATCH,
                _join(path, "pattern_id"),
                f"Pattern '{pattern.id}' is a {pattern.category.value} pattern, "
                f"but the section requires {PatternCategory(intent).value}",
            ))
        slots = pattern.slots

    props_path = _join(path, "props")
    for slot in slots:
        slot_path = _join(props_path, slot.name)
        value = section.props.get(slot.name)
        if is_empty(value):
            if slot.required and slot.kind != SlotKind.IMAGE:
                issues.append(_issue(
                    IssueCode.MISSING_REQUIRED_SLOT,
                    slot_path,
                    f"Required slot '{slot.name}' is empty",
                ))
            continue
        if not matches_kind(value, slot.kind):
            issues.append(_issue(
                IssueCode.WRONG_SLOT_KIND,
                slot_path,
                f"Slot '{slot.name}' expects {slot.kind.value}, got {type(value).__name__}",
            ))
            continue
        if slot.is_text and slot.max_length is not None and len(value) > slot.max_length:
            issues.append(_issue(
                IssueCode.MAX_LENGTH_EXCEEDED,
                slot_path,
                f"Slot '{slot.name}' has {len(value)} characters (max {slot.max_length})",
                warning=True,
            ))

    for slot, image_path, value in walk_image_values(slots, section.props):
        if slot.kind == SlotKind.IMAGE and is_empty(value) and not slot.required:
            continue
        if is_placeholder(value):
            issues.append(_issue(
                IssueCode.UNRESOLVED_PLACEHOLDER,
                _join(props_path, image_path),
                f"Image '{image_path}' is still a placeholder",
                warning=True,
            ))

    return ValidationResult(issues=issues)


def validate_page(
    page: PageComposition,
    registry: Optional[PatternRegistry] = None,
    path: str = "",
) -> ValidationResult:
    """Check page metadata, section id uniqueness, and every section."""
    registry = registry or get_registry()
    issues: List[ValidationIssue] = []

    if not page.path.startswith("/"):
        issues.append(_issue(
            IssueCode.INVALID_PAGE_PATH,
            _join(path, "path"),
            f"Page path must start with '/': {page.path}",
        ))
    if not page.title.strip():
        issues.append(_issue(IssueCode.MISSING_PAGE_TITLE, _join(path, "title"), "Page has no title"))
    if not page.sections:
        issues.append(_issue(
            IssueCode.EMPTY_PAGE,
            _join(path, "sections"),
            f"Page '{page.path}' has no sections",
            warning=True,
        ))

    seen = set()
    result = ValidationResult(issues=issues)
    for index, section in enumerate(page.sections):
        section_path = _join(path, f"sections[{index}]")
        if section.id in seen:
            result.issues.append(_issue(
                IssueCode.DUPLICATE_SECTION_ID,
                _join(section_path, "id"),
                f"Duplicate section id: {section.id}",
            ))
        seen.add(section.id)
        result = result.extend(validate_section(section, registry, path=section_path))
    return result


def validate_definition(
    project: ProjectComposition,
    registry: Optional[PatternRegistry] = None,
) -> ValidationResult:
    """Check a whole project: page paths, global colors, and every page."""
    registry = registry or get_registry()
    issues: List[ValidationIssue] = []

    paths = [page.path for page in project.pages]
    for index, page_path in enumerate(paths):
        if page_path in paths[:index]:
            issues.append(_issue(
                IssueCode.DUPLICATE_PAGE_PATH,
                f"pages[{index}].path",
                f"Duplicate page path: {page_path}",
            ))
    if "/" not in paths:
        issues.append(_issue(IssueCode.NO_HOME_PAGE, "pages", "No home page ('/') defined", warning=True))

    colors = project.global_styles.colors
    for role, color in colors.model_dump().items():
        if not is_css_color(color):
            issues.append(_issue(
                IssueCode.INVALID_COLOR,
                f"global_styles.colors.{role}",
                f"Invalid color for {role}: {color}",
            ))

    background = color_brightness(colors.background)
    foreground = color_brightness(colors.foreground)
    if background is not None and foreground is not None:
        if abs(background - foreground) < MIN_BRIGHTNESS_DIFFERENCE:
            issues.append(_issue(
                IssueCode.LOW_CONTRAST,
                "global_styles.colors.foreground",
                f"Low contrast between background {colors.background} and foreground {colors.foreground}",
                warning=True,
            ))

    result = ValidationResult(issues=issues)
    for index, page in enumerate(project.pages):
        result = result.extend(validate_page(page, registry, path=f"pages[{index}]"))
    return result


def is_valid_for_preview(result: ValidationResult) -> bool:
    """Preview tolerates warnings such as unresolved images and over-length text."""
    return result.valid


def is_valid_for_export(result: ValidationResult) -> bool:
    """Export additionally requires resolved images and text within its max length."""
    return result.valid and not any(
        result.has(code) for code in (IssueCode.UNRESOLVED_PLACEHOLDER, IssueCode.MAX_LENGTH_EXCEEDED)
    )


_FIX_HINTS = {
    IssueCode.UNKNOWN_PATTERN: "Swap the section to a registered pattern of the same category.",
    IssueCode.MISSING_CUSTOM_SCHEMA: "Regenerate the custom section so it carries its slot schema.",
    IssueCode.MISSING_REQUIRED_SLOT: "Regenerate the section content or fill the slot manually.",
    IssueCode.WRONG_SLOT_KIND: "Replace the value with one of the slot's declared kind.",
    IssueCode.MAX_LENGTH_EXCEEDED: "Shorten the text to the slot's maximum length.",
    IssueCode.CATEGORY_MISMATCH: "Choose a pattern from the requested category.",
    IssueCode.UNRESOLVED_PLACEHOLDER: "Run image generation or upload an image for this slot.",
    IssueCode.DUPLICATE_SECTION_ID: "Give the duplicated section a new id.",
    IssueCode.DUPLICATE_PAGE_PATH: "Give each page a unique path.",
    IssueCode.INVALID_PAGE_PATH: "Prefix the page path with '/'.",
    IssueCode.MISSING_PAGE_TITLE: "Add a page title.",
    IssueCode.EMPTY_PAGE: "Add at least one section to the page.",
    IssueCode.NO_HOME_PAGE: "Add a page with path '/'.",
    IssueCode.INVALID_COLOR: "Use a hex color such as #3B82F6.",
    IssueCode.LOW_CONTRAST: "Use darker text on a light background or lighter text on a dark one.",
}


def suggest_fixes(result: ValidationResult) -> List[str]:
    """One human hint per issue, prefixed with its location."""
    return [
        f"{issue.path or 'composition'}: {_FIX_HINTS.get(issue.code, issue.message)}"
        for issue in result.issues
    ]
