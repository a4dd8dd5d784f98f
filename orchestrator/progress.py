"""Advisory progress reporting."""

import logging
from dataclasses import dataclass
from typing import Callable, Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProgressEvent:
    stage: str
    page_index: int = 0
    section_index: Optional[int] = None
    completed: int = 0
    total: int = 0


ProgressHandler = Callable[[ProgressEvent], None]


def notify(handler: Optional[ProgressHandler], event: ProgressEvent) -> None:
    """Deliver an event; a failing handler is logged and ignored."""
    if handler is None:
        return
    try:
        handler(event)
    except Exception as e:
        logger.warning("[Composer] Progress handler failed on %s: %s", event.stage, e)
