"""Pattern catalog, validation, and migration."""

from .registry import (
    PatternRegistry,
    RegistryError,
    get_registry,
    load_registry,
    parse_catalog,
)
from .slots import (
    PLACEHOLDER_IMAGE,
    is_empty,
    is_placeholder,
    repair_props,
    truncate,
)
from .validation import (
    validate_section,
    validate_page,
    validate_definition,
    is_valid_for_preview,
    is_valid_for_export,
    suggest_fixes,
    is_css_color,
)
from .migration import (
    PROP_ALIASES,
    migrate_section,
    duplicate_section,
    generate_section_id,
)

__all__ = [
    "PatternRegistry",
    "RegistryError",
    "get_registry",
    "load_registry",
    "parse_catalog",
    "PLACEHOLDER_IMAGE",
    "is_empty",
    "is_placeholder",
    "repair_props",
    "truncate",
    "validate_section",
    "validate_page",
    "validate_definition",
    "is_valid_for_preview",
    "is_valid_for_export",
    "suggest_fixes",
    "is_css_color",
    "PROP_ALIASES",
    "migrate_section",
    "duplicate_section",
    "generate_section_id",
]
