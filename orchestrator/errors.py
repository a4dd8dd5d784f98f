"""Terminal failures of a composition run."""


class CompositionError(Exception):
    """Base class for errors that stop a composition run."""


class NoFitError(CompositionError):
    """A requirement has no registered pattern and cannot be gap-filled."""

    def __init__(self, page_path: str, requirement_index: int, category: str, reason: str = ""):
        self.page_path = page_path
        self.requirement_index = requirement_index
        self.category = category
        message = f"No pattern fits {category} section {requirement_index} on {page_path}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class CompositionCancelled(CompositionError):
    """The caller's cancel signal was set before the run finished."""


class NotFoundError(CompositionError, LookupError):
    """A page or section referenced by an edit operation does not exist."""
