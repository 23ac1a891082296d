"""Scroll position kept across reloads of the same page."""

import logging
from typing import Optional

from wedding_planner_api.app.core.config import settings

from .preferences import MemoryStore

logger = logging.getLogger(__name__)

SCROLL_KEY = "scrollPosition"


class ScrollPositionKeeper:
    """Records the scroll offset into session storage and restores it once.

    ``record`` is called from a periodic sampler and from the
    visibility-change and blur handlers.  ``restore`` returns the stored
    offset on the first call after a page load and only on viewports at
    least ``narrow_width`` wide; on narrow screens the page starts at the
    top.
    """

    def __init__(
        self, session_store: MemoryStore, narrow_width: int = settings.narrow_viewport_width, key: str = SCROLL_KEY
    ) -> None:
        self.store = session_store
        self.narrow_width = narrow_width
        self.key = key
        self._restored = False

    def record(self, position: float) -> None:
        self.store.set(self.key, str(int(position)))

    def restore(self, viewport_width: int) -> Optional[int]:
        if self._restored:
            return None
        self._restored = True
        if viewport_width < self.narrow_width:
            return None
        raw = self.store.get(self.key)
        if raw is None:
            return None
        try:
            return int(raw)
        except ValueError:
            logger.warning("Ignoring malformed scroll position %r", raw)
            return None

    def page_loaded(self) -> None:
        """Allow one more restore (a new page load)."""
        self._restored = False
