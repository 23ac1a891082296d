"""
Presentation slide navigation.

A presentation is a list of slide images shown inline as a carousel
and, on demand, in a fullscreen overlay.  The inline view and the
overlay keep separate positions: opening the overlay starts from the
inline slide, but paging inside the overlay does not move the carousel.

Inline, only horizontal swipes navigate; in fullscreen, only vertical
ones do.  A swipe counts when its dominant axis moves further than
``SWIPE_THRESHOLD`` units.
"""

import enum
import logging
from typing import Any, Dict, List, Optional, Sequence

logger = logging.getLogger(__name__)

SWIPE_THRESHOLD = 50

NEXT_KEYS = {"ArrowRight", "ArrowDown"}
PREVIOUS_KEYS = {"ArrowLeft", "ArrowUp"}
CLOSE_KEYS = {"Escape"}


class SwipeAxis(str, enum.Enum):
    HORIZONTAL = "horizontal"
    VERTICAL = "vertical"


def classify_swipe(dx: float, dy: float, threshold: float = SWIPE_THRESHOLD) -> Optional[SwipeAxis]:
    """Return the axis of a swipe, or ``None`` if it is too short or diagonal."""
    if abs(dx) > abs(dy):
        return SwipeAxis.HORIZONTAL if abs(dx) > threshold else None
    if abs(dy) > abs(dx):
        return SwipeAxis.VERTICAL if abs(dy) > threshold else None
    return None


class ScrollLock:
    """Page scroll control.  The default implementation only records state."""

    def __init__(self) -> None:
        self.suspended = False

    def suspend(self) -> None:
        self.suspended = True

    def restore(self) -> None:
        self.suspended = False


class SlideNavigator:
    """Inline and fullscreen positions within one presentation."""

    def __init__(self, slide_count: int, scroll_lock: Optional[ScrollLock] = None) -> None:
        self.slide_count = max(0, slide_count)
        self.scroll_lock = scroll_lock or ScrollLock()
        self.active_index = 0
        self.fullscreen_index = 0
        self.is_fullscreen = False

    @property
    def last_index(self) -> int:
        return max(0, self.slide_count - 1)

    def _clamp(self, index: int) -> int:
        return min(max(index, 0), self.last_index)

    @property
    def current_index(self) -> int:
        return self.fullscreen_index if self.is_fullscreen else self.active_index

    def _move_to(self, index: int) -> bool:
        index = self._clamp(index)
        if index == self.current_index:
            return False
        if self.is_fullscreen:
            self.fullscreen_index = index
        else:
            self.active_index = index
        return True

    def next(self) -> bool:
        """Advance the visible view.  Returns False at the last slide."""
        return self._move_to(self.current_index + 1)

    def previous(self) -> bool:
        """Step back in the visible view.  Returns False at the first slide."""
        return self._move_to(self.current_index - 1)

    def jump(self, index: int) -> bool:
        """Select a slide from the section menu."""
        return self._move_to(index)

    def swipe(self, dx: float, dy: float) -> bool:
        axis = classify_swipe(dx, dy)
        if self.is_fullscreen:
            if axis is not SwipeAxis.VERTICAL:
                return False
            return self.next() if dy < 0 else self.previous()
        if axis is not SwipeAxis.HORIZONTAL:
            return False
        return self.next() if dx < 0 else self.previous()

    def on_key(self, key: str) -> bool:
        if key in NEXT_KEYS:
            return self.next()
        if key in PREVIOUS_KEYS:
            return self.previous()
        if key in CLOSE_KEYS:
            return self.close_fullscreen()
        return False

    # overlay -------------------------------------------------------------
    def open_fullscreen(self, index: Optional[int] = None) -> None:
        self.fullscreen_index = self._clamp(self.active_index if index is None else index)
        if not self.is_fullscreen:
            self.scroll_lock.suspend()
        self.is_fullscreen = True

    def close_fullscreen(self) -> bool:
        """Single exit path for the Escape key, backdrop and close button."""
        if not self.is_fullscreen:
            return False
        self.is_fullscreen = False
        self.scroll_lock.restore()
        return True

    def on_backdrop_click(self) -> bool:
        return self.close_fullscreen()

    def as_dict(self) -> Dict[str, Any]:
        return {
            "slide_count": self.slide_count,
            "active_index": self.active_index,
            "fullscreen_index": self.fullscreen_index,
            "is_fullscreen": self.is_fullscreen,
        }


def sorted_sections(sections: Sequence[Dict[str, Any]]) -> List[Dict[str, Any]]:
    return sorted(sections or [], key=lambda section: section.get("order_index") or 0)


class PresentationViewer:
    """Several presentations, each remembering the page it was left on."""

    def __init__(self, presentations: Sequence[Dict[str, Any]], scroll_lock: Optional[ScrollLock] = None) -> None:
        self.presentations = list(presentations)
        self.scroll_lock = scroll_lock or ScrollLock()
        self._navigators: Dict[Any, SlideNavigator] = {}
        self.selected_id = self.presentations[0].get("id") if self.presentations else None

    @property
    def current(self) -> Optional[Dict[str, Any]]:
        for presentation in self.presentations:
            if presentation.get("id") == self.selected_id:
                return presentation
        return None

    def select(self, presentation_id: Any) -> bool:
        if not any(p.get("id") == presentation_id for p in self.presentations):
            return False
        if self.navigator is not None:
            self.navigator.close_fullscreen()
        self.selected_id = presentation_id
        return True

    @property
    def navigator(self) -> Optional[SlideNavigator]:
        presentation = self.current
        if presentation is None:
            return None
        key = presentation.get("id")
        if key not in self._navigators:
            slides = presentation.get("image_urls") or []
            self._navigators[key] = SlideNavigator(len(slides), self.scroll_lock)
        return self._navigators[key]

    def sections(self) -> List[Dict[str, Any]]:
        presentation = self.current or {}
        return sorted_sections(presentation.get("sections") or [])

    def go_to_section(self, section: Dict[str, Any]) -> bool:
        navigator = self.navigator
        if navigator is None:
            return False
        return navigator.jump(int(section.get("page_number") or 1) - 1)

    def active_section(self) -> Optional[Dict[str, Any]]:
        """Last section starting at or before the inline slide."""
        navigator = self.navigator
        if navigator is None:
            return None
        page = navigator.active_index + 1
        found = None
        for section in self.sections():
            start = section.get("page_number") or 1
            if start <= page and (found is None or start >= (found.get("page_number") or 1)):
                found = section
        return found
