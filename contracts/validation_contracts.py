"""Validation contracts: structured issues instead of exceptions."""

from pydantic import BaseModel, Field
from typing import List
from enum import Enum


class IssueSeverity(str, Enum):
    ERROR = "error"
    WARNING = "warning"


class IssueCode(str, Enum):
    """Kinds of structural problems a composition can have."""
    UNKNOWN_PATTERN = "unknown_pattern"
    MISSING_CUSTOM_SCHEMA = "missing_custom_schema"
    MISSING_REQUIRED_SLOT = "missing_required_slot"
    WRONG_SLOT_KIND = "wrong_slot_kind"
    MAX_LENGTH_EXCEEDED = "max_length_exceeded"
    CATEGORY_MISMATCH = "category_mismatch"
    UNRESOLVED_PLACEHOLDER = "unresolved_placeholder"
    DUPLICATE_SECTION_ID = "duplicate_section_id"
    DUPLICATE_PAGE_PATH = "duplicate_page_path"
    INVALID_PAGE_PATH = "invalid_page_path"
    MISSING_PAGE_TITLE = "missing_page_title"
    EMPTY_PAGE = "empty_page"
    NO_HOME_PAGE = "no_home_page"
    INVALID_COLOR = "invalid_color"
    LOW_CONTRAST = "low_contrast"


class ValidationIssue(BaseModel):
    """A single structural problem, addressed by a dotted path."""
    code: IssueCode
    severity: IssueSeverity = IssueSeverity.ERROR
    path: str = Field(default="", description="Dotted location, e.g. pages[0].sections[1].props.headline")
    message: str


class ValidationResult(BaseModel):
    """Pass/fail plus every issue found."""
    issues: List[ValidationIssue] = Field(default_factory=list)

    @property
    def valid(self) -> bool:
        return not self.errors

    @property
    def errors(self) -> List[ValidationIssue]:
        return [issue for issue in self.issues if issue.severity == IssueSeverity.ERROR]

    @property
    def warnings(self) -> List[ValidationIssue]:
        return [issue for issue in self.issues if issue.severity == IssueSeverity.WARNING]

    def has(self, code: IssueCode) -> bool:
        return any(issue.code == code for issue in self.issues)

    def extend(self, other: "ValidationResult") -> "ValidationResult":
        return ValidationResult(issues=self.issues + other.issues)
