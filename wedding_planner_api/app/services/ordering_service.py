"""
Manual ordering of tasks, documents and task groups.

A drop is planned locally (:func:`plan_reorder`), applied to the
collection at once and then persisted as one update per affected row,
issued concurrently.  Outcomes:

* all writes succeed: the collection's cache entries are invalidated;
* the table has no ``order`` column: nothing is written (except a
  cross-group move, which still needs its new ``task_group_id``) and
  the drop is reported as a degraded success, since ordering is an
  enhancement the schema may not support;
* anything else fails, even partly: the collection is reloaded from the
  backend, bypassing the cache.  No partial rollback is attempted.
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Optional, Tuple

from wedding_planner_api.app.core.backend import BackendClient, is_undefined_column
from wedding_planner_api.app.core.cache import TTLCache, documents_key, organizer_tasks_key, task_groups_key, tasks_key
from wedding_planner_api.app.core.capabilities import ORDER_COLUMN, SchemaCapabilities
from wedding_planner_api.app.state.collections import UNSET, OrderedCollection, ReorderPlan, plan_reorder
from wedding_planner_api.app.state.drag import DragController
from wedding_planner_api.app.state.optimistic import OptimisticOutcome, apply_optimistically

from .document_service import DocumentService, document_partition
from .task_group_service import TaskGroupService
from .task_service import TaskService, organizer_task_partition

logger = logging.getLogger(__name__)

Reload = Callable[[], Awaitable[List[Dict[str, Any]]]]


class OrderingService:
    def __init__(self, backend: BackendClient, cache: TTLCache, capabilities: SchemaCapabilities) -> None:
        self.backend = backend
        self.cache = cache
        self.capabilities = capabilities

    async def reorder(
        self,
        collection: OrderedCollection,
        table: str,
        dragged_id: Any,
        target_id: Any = None,
        target_partition: Any = UNSET,
        *,
        reload: Reload,
        cache_keys: Iterable[str] = (),
        failure_message: Optional[str] = None,
    ) -> OptimisticOutcome:
        """Move ``dragged_id`` within ``collection`` and persist the new order.

        Parameters
        ----------
        collection : OrderedCollection
            Local state; updated in place.
        table : str
            Backend table holding the rows.
        dragged_id, target_id, target_partition
            The drop, as understood by :func:`plan_reorder`.
        reload : callable
            Fetches the collection from the backend without the cache.
            Used after a failed write.
        cache_keys : iterable of str
            Entries to invalidate once the writes succeeded.
        failure_message : str, optional
            Banner text reported on failure.
        """
        plan = plan_reorder(collection, dragged_id, target_id, target_partition)
        if plan is None:
            return OptimisticOutcome(success=True, noop=True)
        cache_keys = list(cache_keys)

        async def recover(previous: List[Dict[str, Any]]) -> None:
            fresh = await reload()
            if not fresh and previous:
                logger.warning("Reload of %s returned nothing; keeping previous state", table)
                collection.restore(previous)
                return
            collection.replace_all(fresh)

        outcome = await apply_optimistically(
            snapshot=collection.snapshot,
            restore=collection.restore,
            mutate=lambda: collection.replace_all(plan.items),
            commit=lambda: self._persist(table, plan),
            recover=recover,
            label=f"reorder {table}",
            failure_message=failure_message,
        )
        if outcome.success:
            outcome.degraded = bool(outcome.result.get("degraded"))
            if not outcome.degraded or plan.partition_changed:
                self.cache.invalidate_many(cache_keys)
        return outcome

    async def _persist(self, table: str, plan: ReorderPlan) -> Tuple[Optional[Dict[str, Any]], Optional[dict]]:
        if not self.capabilities.supports_ordering(table):
            logger.warning("%s has no %s column; order kept locally only", table, ORDER_COLUMN)
            return await self._persist_partition_only(table, plan)

        results = await asyncio.gather(
            *(
                self.backend.update(table, {"id": update["id"]}, {k: v for k, v in update.items() if k != "id"})
                for update in plan.updates
            )
        )
        errors = [error for _, error in results if error]
        if errors:
            if all(is_undefined_column(error) for error in errors):
                self.capabilities.mark_missing(table, ORDER_COLUMN)
                logger.warning("%s rejected the %s column; order kept locally only", table, ORDER_COLUMN)
                return await self._persist_partition_only(table, plan)
            return None, errors[0]
        if any(row is None for row, _ in results):
            return None, {"status_code": None, "code": None, "message": "some rows were not updated"}
        logger.info("Saved order of %d %s rows", len(plan.updates), table)
        return {"degraded": False, "updated": len(plan.updates)}, None

    async def _persist_partition_only(self, table: str, plan: ReorderPlan):
        if not plan.partition_changed:
            return {"degraded": True, "updated": 0}, None
        moved = next(update for update in plan.updates if update["id"] == plan.moved_id)
        values = {k: v for k, v in moved.items() if k not in ("id", ORDER_COLUMN)}
        row, error = await self.backend.update(table, {"id": plan.moved_id}, values)
        if error or row is None:
            return None, error or {"status_code": None, "code": None, "message": "row was not updated"}
        return {"degraded": True, "updated": 1}, None

    async def _drag(self, collection: OrderedCollection, dragged_id: Any, target_id: Any, target_partition: Any, on_drop) -> OptimisticOutcome:
        controller = DragController(collection, on_drop)
        if not controller.start(dragged_id):
            return OptimisticOutcome(success=True, noop=True)
        return await controller.drop(target_id, target_partition)

    # ------------------------------------------------------------------
    # Collections
    # ------------------------------------------------------------------
    async def reorder_wedding_tasks(
        self, tasks: TaskService, wedding_id: str, dragged_id: Any, target_id: Any, use_rpc: bool = False
    ) -> Tuple[OptimisticOutcome, List[Dict[str, Any]]]:
        collection = OrderedCollection(await tasks.get_wedding_tasks(wedding_id, use_rpc=use_rpc))

        async def on_drop(source_id, target, partition):
            return await self.reorder(
                collection,
                TaskService.TABLE,
                source_id,
                target,
                partition,
                reload=lambda: tasks.get_wedding_tasks(wedding_id, use_cache=False, use_rpc=use_rpc),
                cache_keys=[tasks_key(wedding_id)],
                failure_message="Не удалось сохранить порядок заданий",
            )

        outcome = await self._drag(collection, dragged_id, target_id, UNSET, on_drop)
        return outcome, collection.ordered()

    async def reorder_documents(
        self, documents: DocumentService, wedding_id: str, dragged_id: Any, target_id: Any, use_rpc: bool = False
    ) -> Tuple[OptimisticOutcome, List[Dict[str, Any]]]:
        """Reorder within the pinned or the unpinned list.  Dropping across them is ignored."""
        collection = OrderedCollection(
            await documents.get_wedding_documents(wedding_id, use_rpc=use_rpc),
            partition_of=document_partition,
        )

        async def on_drop(source_id, target, partition):
            return await self.reorder(
                collection,
                DocumentService.TABLE,
                source_id,
                target,
                partition,
                reload=lambda: documents.get_wedding_documents(wedding_id, use_cache=False, use_rpc=use_rpc),
                cache_keys=[documents_key(wedding_id)],
                failure_message="Не удалось сохранить порядок документов",
            )

        outcome = await self._drag(collection, dragged_id, target_id, UNSET, on_drop)
        pinned = collection.partition(True)
        return outcome, pinned + collection.partition(False)

    async def reorder_task_groups(
        self, groups: TaskGroupService, organizer_id: str, dragged_id: Any, target_id: Any
    ) -> Tuple[OptimisticOutcome, List[Dict[str, Any]]]:
        collection = OrderedCollection(await groups.get_task_groups(organizer_id))

        async def on_drop(source_id, target, partition):
            return await self.reorder(
                collection,
                TaskGroupService.TABLE,
                source_id,
                target,
                partition,
                reload=lambda: groups.get_task_groups(organizer_id, use_cache=False),
                cache_keys=[task_groups_key(organizer_id)],
                failure_message="Не удалось сохранить порядок блоков",
            )

        outcome = await self._drag(collection, dragged_id, target_id, UNSET, on_drop)
        return outcome, collection.ordered()

    async def move_organizer_task(
        self,
        tasks: TaskService,
        organizer_id: str,
        task_id: Any,
        target_id: Any = None,
        target_group_id: Any = UNSET,
    ) -> Tuple[OptimisticOutcome, List[Dict[str, Any]]]:
        """Move a board task onto another task or onto a column (``None`` is unsorted)."""
        collection = OrderedCollection(
            await tasks.get_organizer_tasks(organizer_id),
            partition_of=organizer_task_partition,
            partition_field="task_group_id",
        )

        async def on_drop(source_id, target, partition):
            return await self.reorder(
                collection,
                TaskService.TABLE,
                source_id,
                target,
                partition,
                reload=lambda: tasks.get_organizer_tasks(organizer_id, use_cache=False),
                cache_keys=[organizer_tasks_key(organizer_id)],
                failure_message="Не удалось переместить задание",
            )

        outcome = await self._drag(collection, task_id, target_id, target_group_id, on_drop)
        return outcome, collection.ordered()
