"""Orchestrator module for composition runs."""

from .errors import CompositionError, NoFitError, CompositionCancelled, NotFoundError
from .progress import ProgressEvent, notify
from .styles import extract_global_styles
from .composer import (
    Composer,
    ComposerOutput,
    PageResult,
    load_composition,
    load_request,
    resolve_requirements,
    run_composer,
    write_output,
)

__all__ = [
    "CompositionError",
    "NoFitError",
    "CompositionCancelled",
    "NotFoundError",
    "ProgressEvent",
    "notify",
    "extract_global_styles",
    "Composer",
    "ComposerOutput",
    "PageResult",
    "load_composition",
    "load_request",
    "resolve_requirements",
    "run_composer",
    "write_output",
]
