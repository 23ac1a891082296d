"""
Local list state for orderable collections and the reorder planner.

Tasks, documents and task groups carry an optional integer ``order``
and a partition key (``task_group_id`` for organizer tasks, ``pinned``
for documents, a single partition for wedding tasks and groups).  Each
partition is ordered independently: items with an ``order`` come first
in ascending order, the rest follow newest first.

``plan_reorder`` computes the result of dragging one item onto another
(or onto a partition) without touching any state, so the same logic
serves pointer drags, keyboard moves and programmatic calls.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Hashable, List, Optional, Sequence

# Sentinel for "no destination partition given".
UNSET: Any = object()

PartitionFn = Callable[[Dict[str, Any]], Hashable]


def _single_partition(item: Dict[str, Any]) -> Hashable:
    return None


def sort_by_order(items: Sequence[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Return ``items`` in display order."""
    ordered = sorted(
        (item for item in items if item.get("order") is not None),
        key=lambda item: item["order"],
    )
    unordered = sorted(
        (item for item in items if item.get("order") is None),
        key=lambda item: item.get("created_at") or "",
        reverse=True,
    )
    return ordered + unordered


class OrderedCollection:
    """Mutable list of rows partitioned into independently ordered sublists."""

    def __init__(
        self,
        items: Sequence[Dict[str, Any]],
        *,
        partition_of: PartitionFn = _single_partition,
        partition_field: Optional[str] = None,
    ) -> None:
        self.items: List[Dict[str, Any]] = [dict(item) for item in items]
        self.partition_of = partition_of
        # Column that stores the partition.  Only collections with a
        # partition field allow moving items between partitions.
        self.partition_field = partition_field

    # snapshot / restore -------------------------------------------------
    def snapshot(self) -> List[Dict[str, Any]]:
        return [dict(item) for item in self.items]

    def restore(self, snapshot: Sequence[Dict[str, Any]]) -> None:
        self.items = [dict(item) for item in snapshot]

    def replace_all(self, items: Sequence[Dict[str, Any]]) -> None:
        self.items = list(items)

    # lookups -------------------------------------------------------------
    def find(self, item_id: Any) -> Optional[Dict[str, Any]]:
        for item in self.items:
            if item.get("id") == item_id:
                return item
        return None

    def ids(self) -> List[Any]:
        return [item.get("id") for item in self.items]

    def partition(self, key: Hashable) -> List[Dict[str, Any]]:
        """Items of one partition in display order."""
        return sort_by_order([item for item in self.items if self.partition_of(item) == key])

    def partition_keys(self) -> List[Hashable]:
        keys: List[Hashable] = []
        for item in self.items:
            key = self.partition_of(item)
            if key not in keys:
                keys.append(key)
        return keys

    def ordered(self) -> List[Dict[str, Any]]:
        """Whole collection, partition by partition, in display order."""
        result: List[Dict[str, Any]] = []
        for key in self.partition_keys():
            result.extend(self.partition(key))
        return result

    # mutations -----------------------------------------------------------
    def update(self, item_id: Any, **changes: Any) -> Optional[Dict[str, Any]]:
        for index, item in enumerate(self.items):
            if item.get("id") == item_id:
                self.items[index] = dict(item, **changes)
                return self.items[index]
        return None

    def replace(self, canonical: Dict[str, Any]) -> bool:
        """Swap the local copy of an item for the backend's version."""
        for index, item in enumerate(self.items):
            if item.get("id") == canonical.get("id"):
                self.items[index] = dict(canonical)
                return True
        return False

    def remove(self, item_id: Any) -> Optional[Dict[str, Any]]:
        for index, item in enumerate(self.items):
            if item.get("id") == item_id:
                return self.items.pop(index)
        return None

    def add(self, item: Dict[str, Any]) -> None:
        self.items.append(dict(item))

    def __len__(self) -> int:
        return len(self.items)


@dataclass
class ReorderPlan:
    """Outcome of a drag: the new collection and the rows to persist."""

    moved_id: Any
    items: List[Dict[str, Any]]
    updates: List[Dict[str, Any]] = field(default_factory=list)
    partitions: List[Hashable] = field(default_factory=list)
    partition_changed: bool = False


def plan_reorder(
    collection: OrderedCollection,
    dragged_id: Any,
    target_id: Any = None,
    target_partition: Any = UNSET,
) -> Optional[ReorderPlan]:
    """Compute the effect of dropping ``dragged_id``.

    The drop target is either another item (``target_id``), in which
    case the dragged item takes its index within the target's partition,
    or a partition (``target_partition``), in which case it is appended.
    Every item of each affected partition gets a dense zero-based
    ``order``.  Returns ``None`` when the drop changes nothing or is
    invalid: same item, unknown ids, a drop onto the partition it came
    from, or a cross-partition drop on a collection without a partition
    field.
    """
    dragged = collection.find(dragged_id)
    if dragged is None:
        return None
    source = collection.partition_of(dragged)

    target = None
    if target_id is not None:
        if target_id == dragged_id:
            return None
        target = collection.find(target_id)
        if target is None:
            return None
        destination = collection.partition_of(target)
    elif target_partition is not UNSET:
        destination = target_partition
        if destination == source:
            return None
    else:
        return None

    if destination != source and collection.partition_field is None:
        return None

    source_seq = collection.partition(source)
    dragged_index = next(i for i, item in enumerate(source_seq) if item.get("id") == dragged_id)

    sequences: Dict[Hashable, List[Dict[str, Any]]] = {}
    if destination == source:
        seq = list(source_seq)
        target_index = next(i for i, item in enumerate(seq) if item.get("id") == target_id)
        moved = seq.pop(dragged_index)
        seq.insert(target_index, moved)
        sequences[source] = seq
    else:
        remaining = [item for item in source_seq if item.get("id") != dragged_id]
        dest_seq = list(collection.partition(destination))
        if target is not None:
            target_index = next(i for i, item in enumerate(dest_seq) if item.get("id") == target_id)
        else:
            target_index = len(dest_seq)
        dest_seq.insert(target_index, dict(dragged, **{collection.partition_field: destination}))
        sequences[source] = remaining
        sequences[destination] = dest_seq

    updates: List[Dict[str, Any]] = []
    for key, seq in sequences.items():
        renumbered = [dict(item, order=index) for index, item in enumerate(seq)]
        sequences[key] = renumbered
        for item in renumbered:
            update = {"id": item.get("id"), "order": item["order"]}
            if destination != source and item.get("id") == dragged_id:
                update[collection.partition_field] = destination
            updates.append(update)

    # Rebuild the flat list, keeping untouched partitions where they were.
    items: List[Dict[str, Any]] = []
    emitted = set()
    for item in collection.items:
        key = collection.partition_of(item)
        if key in sequences:
            if key not in emitted:
                items.extend(sequences[key])
                emitted.add(key)
            continue
        items.append(item)
    for key, seq in sequences.items():
        if key not in emitted:
            items.extend(seq)

    return ReorderPlan(
        moved_id=dragged_id,
        items=items,
        updates=updates,
        partitions=list(sequences),
        partition_changed=destination != source,
    )
