"""
Drag-and-drop state machine.

A drag is either idle or in progress with a known source item.  The
controller owns nothing but that state: the work of a drop is delegated
to a callback (normally :meth:`OrderingService.reorder`), and the
controller always returns to idle afterwards, whether the drop
succeeded, failed or raised.
"""

import enum
import logging
from typing import Any, Awaitable, Callable, Hashable, Optional

from .collections import UNSET, OrderedCollection
from .optimistic import OptimisticOutcome

logger = logging.getLogger(__name__)

DropHandler = Callable[[Any, Any, Any], Awaitable[OptimisticOutcome]]


class DragPhase(str, enum.Enum):
    IDLE = "idle"
    DRAGGING = "dragging"


class DragController:
    """Tracks one drag gesture over an :class:`OrderedCollection`."""

    def __init__(self, collection: OrderedCollection, on_drop: DropHandler) -> None:
        self.collection = collection
        self._on_drop = on_drop
        self.phase = DragPhase.IDLE
        self.source_id: Any = None
        self.source_partition: Optional[Hashable] = None

    @property
    def is_dragging(self) -> bool:
        return self.phase is DragPhase.DRAGGING

    def start(self, item_id: Any) -> bool:
        """Begin dragging ``item_id``.  Unknown items are ignored."""
        item = self.collection.find(item_id)
        if item is None:
            logger.debug("Drag start ignored: unknown item %s", item_id)
            return False
        self.phase = DragPhase.DRAGGING
        self.source_id = item_id
        self.source_partition = self.collection.partition_of(item)
        return True

    async def drop(self, target_id: Any = None, target_partition: Any = UNSET) -> OptimisticOutcome:
        """Finish the drag on an item or a partition.

        A drop without an active drag does nothing.
        """
        if self.phase is DragPhase.IDLE:
            return OptimisticOutcome(success=True, noop=True)
        try:
            return await self._on_drop(self.source_id, target_id, target_partition)
        finally:
            self.end()

    def cancel(self) -> None:
        """Abort the drag (pointer left the board, Escape pressed)."""
        self.end()

    def end(self) -> None:
        self.phase = DragPhase.IDLE
        self.source_id = None
        self.source_partition = None
