"""
Service for tasks.

Two kinds of rows live in the ``tasks`` table:

* wedding tasks (``wedding_id`` set) form the checklist shown to the
  couple and edited by their organizer;
* organizer tasks (``wedding_id`` null) are the organizers' own work
  items, grouped into task groups on a board.  Every status change of
  an organizer task is recorded in ``organizer_task_logs``.

Lists are returned in display order (see
:func:`~wedding_planner_api.app.state.collections.sort_by_order`).
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

from wedding_planner_api.app.core.backend import BackendClient
from wedding_planner_api.app.core.cache import TTLCache, organizer_tasks_key, tasks_key
from wedding_planner_api.app.core.capabilities import ORDER_COLUMN, SchemaCapabilities
from wedding_planner_api.app.core.config import Settings, settings as default_settings
from wedding_planner_api.app.state.collections import OrderedCollection, sort_by_order
from wedding_planner_api.app.state.optimistic import OptimisticOutcome, apply_optimistically
from wedding_planner_api.app.utils.tasks import next_order, status_action

logger = logging.getLogger(__name__)

COMPLETED = "completed"
PENDING = "pending"


def organizer_task_partition(task: Dict[str, Any]) -> Any:
    return task.get("task_group_id")


class TaskService:
    """CRUD for wedding and organizer tasks plus status logs."""

    TABLE = "tasks"
    LOGS_TABLE = "organizer_task_logs"

    def __init__(
        self,
        backend: BackendClient,
        cache: TTLCache,
        capabilities: SchemaCapabilities,
        config: Settings = default_settings,
    ) -> None:
        self.backend = backend
        self.cache = cache
        self.capabilities = capabilities
        self.config = config

    # ------------------------------------------------------------------
    # Wedding tasks
    # ------------------------------------------------------------------
    async def get_wedding_tasks(
        self, wedding_id: str, use_cache: bool = True, use_rpc: bool = False
    ) -> List[Dict[str, Any]]:
        """Return the checklist of a wedding in display order.

        Parameters
        ----------
        wedding_id : str
            Wedding whose tasks are requested.
        use_cache : bool
            Consult the cache first.  Reloads after a failed reorder pass
            ``False`` to read the source of truth.
        use_rpc : bool
            Read through the elevated procedure (main organizer).
        """
        key = tasks_key(wedding_id)
        if use_cache:
            cached = self.cache.get(key)
            if cached is not None:
                return cached
        logger.debug("Fetching tasks for wedding %s", wedding_id)
        if use_rpc:
            data, error = await self.backend.rpc("get_wedding_tasks", {"p_wedding_id": wedding_id})
        else:
            data, error = await self.backend.select(
                self.TABLE, filters={"wedding_id": wedding_id}, order="created_at", descending=True
            )
        if error:
            return []
        tasks = sort_by_order(data or [])
        self.cache.set(key, tasks, self.config.tasks_cache_ttl_ms)
        return tasks

    async def create_task(self, payload: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """Create a wedding task appended after the ordered ones."""
        row = dict(payload)
        wedding_id = row.get("wedding_id")
        if wedding_id and row.get(ORDER_COLUMN) is None and self.capabilities.supports_ordering(self.TABLE):
            existing = await self.get_wedding_tasks(wedding_id)
            order = next_order(existing)
            if order is not None:
                row[ORDER_COLUMN] = order
        data, error = await self.backend.insert(self.TABLE, row)
        if error or not data:
            return None
        logger.info("Created task %s for wedding %s", data.get("id"), wedding_id)
        if wedding_id:
            self.cache.invalidate(tasks_key(wedding_id))
        return data

    async def get_task(self, task_id: str) -> Optional[Dict[str, Any]]:
        data, error = await self.backend.select(self.TABLE, filters={"id": task_id}, single=True)
        if error or not data:
            return None
        return data

    async def update_task(
        self, task_id: str, updates: Dict[str, Any], wedding_id: Optional[str] = None
    ) -> Optional[Dict[str, Any]]:
        """Update a task, restricted to ``wedding_id`` when given.

        The cache key is taken from the stored row, not from the caller.
        """
        match = {"id": task_id}
        if wedding_id:
            match["wedding_id"] = wedding_id
        data, error = await self.backend.update(self.TABLE, match, updates)
        if error or not data:
            return None
        logger.info("Updated task %s", task_id)
        if data.get("wedding_id"):
            self.cache.invalidate(tasks_key(data["wedding_id"]))
        return data

    async def delete_task(self, task_id: str, wedding_id: str) -> bool:
        _, error = await self.backend.delete(self.TABLE, {"id": task_id, "wedding_id": wedding_id})
        if error:
            return False
        logger.info("Deleted task %s", task_id)
        self.cache.invalidate(tasks_key(wedding_id))
        return True

    async def toggle_wedding_task(
        self, wedding_id: str, task_id: str, completed: bool
    ) -> Tuple[OptimisticOutcome, List[Dict[str, Any]]]:
        """Tick or untick a checklist item optimistically.

        Returns the outcome and the checklist as it stands afterwards:
        with the canonical row on success, as before on failure.
        """
        collection = OrderedCollection(await self.get_wedding_tasks(wedding_id))
        if collection.find(task_id) is None:
            return OptimisticOutcome(success=False, error="Задание не найдено"), collection.items
        status = COMPLETED if completed else PENDING
        outcome = await apply_optimistically(
            snapshot=collection.snapshot,
            restore=collection.restore,
            mutate=lambda: collection.update(task_id, status=status),
            commit=lambda: self._commit_update(task_id, {"status": status}),
            reconcile=collection.replace,
            label=f"toggle task {task_id}",
            failure_message="Не удалось обновить статус задания",
        )
        if outcome.success:
            self.cache.invalidate(tasks_key(wedding_id))
        return outcome, sort_by_order(collection.items)

    async def _commit_update(self, task_id: str, updates: Dict[str, Any]):
        return await self.backend.update(self.TABLE, {"id": task_id}, updates)

    # ------------------------------------------------------------------
    # Organizer tasks
    # ------------------------------------------------------------------
    async def get_organizer_tasks(self, organizer_id: str, use_cache: bool = True) -> List[Dict[str, Any]]:
        """Tasks owned by an organizer (not attached to any wedding)."""
        key = organizer_tasks_key(organizer_id)
        if use_cache:
            cached = self.cache.get(key)
            if cached is not None:
                return cached
        data, error = await self.backend.select(
            self.TABLE,
            filters={"organizer_id": organizer_id, "wedding_id": None},
            order="created_at",
            descending=True,
        )
        if error:
            return []
        tasks = data or []
        self.cache.set(key, tasks, self.config.tasks_cache_ttl_ms)
        return tasks

    async def create_organizer_task(self, payload: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        row = dict(payload, wedding_id=None)
        organizer_id = row.get("organizer_id")
        if row.get(ORDER_COLUMN) is None and self.capabilities.supports_ordering(self.TABLE):
            existing = await self.get_organizer_tasks(organizer_id)
            same_group = [t for t in existing if t.get("task_group_id") == row.get("task_group_id")]
            order = next_order(same_group)
            if order is not None:
                row[ORDER_COLUMN] = order
        data, error = await self.backend.insert(self.TABLE, row)
        if error or not data:
            return None
        logger.info("Created organizer task %s", data.get("id"))
        self.cache.invalidate(organizer_tasks_key(organizer_id))
        return data

    async def update_organizer_task(
        self, task_id: str, updates: Dict[str, Any], actor_id: Optional[str] = None
    ) -> Optional[Dict[str, Any]]:
        """Update an organizer task and log a status change.

        The previous status is read first when ``updates`` touches the
        status.  A failure to write the log is only logged.
        """
        old_status = None
        if "status" in updates:
            current, error = await self.backend.select(self.TABLE, filters={"id": task_id}, single=True)
            if not error and current:
                old_status = current.get("status")
        data, error = await self.backend.update(self.TABLE, {"id": task_id}, updates)
        if error or not data:
            return None
        logger.info("Updated organizer task %s", task_id)
        self.cache.invalidate(organizer_tasks_key(data.get("organizer_id")))
        if "status" in updates:
            await self._log_status_change(task_id, actor_id or data.get("organizer_id"), old_status, data.get("status"))
        return data

    async def _log_status_change(
        self, task_id: str, organizer_id: Optional[str], old_status: Optional[str], new_status: Optional[str]
    ) -> None:
        action = status_action(old_status, new_status)
        if action is None:
            return
        _, error = await self.backend.insert(
            self.LOGS_TABLE,
            {
                "task_id": task_id,
                "organizer_id": organizer_id,
                "old_status": old_status,
                "new_status": new_status,
                "action": action,
            },
        )
        if error:
            logger.warning("Could not log status change of task %s: %s", task_id, error.get("message"))

    async def delete_organizer_task(self, task_id: str, organizer_id: Optional[str] = None) -> bool:
        _, error = await self.backend.delete(self.TABLE, {"id": task_id})
        if error:
            return False
        logger.info("Deleted organizer task %s", task_id)
        if organizer_id:
            self.cache.invalidate(organizer_tasks_key(organizer_id))
        return True

    async def toggle_organizer_task(
        self, organizer_id: str, task_id: str, completed: bool
    ) -> Tuple[OptimisticOutcome, List[Dict[str, Any]]]:
        collection = OrderedCollection(
            await self.get_organizer_tasks(organizer_id),
            partition_of=organizer_task_partition,
            partition_field="task_group_id",
        )
        if collection.find(task_id) is None:
            return OptimisticOutcome(success=False, error="Задание не найдено"), collection.items
        status = COMPLETED if completed else PENDING

        async def commit():
            row = await self.update_organizer_task(task_id, {"status": status}, actor_id=organizer_id)
            return row, None if row else {"message": "update failed"}

        outcome = await apply_optimistically(
            snapshot=collection.snapshot,
            restore=collection.restore,
            mutate=lambda: collection.update(task_id, status=status),
            commit=commit,
            reconcile=collection.replace,
            label=f"toggle organizer task {task_id}",
            failure_message="Не удалось обновить статус задания",
        )
        return outcome, collection.ordered()

    async def remove_organizer_task(
        self, organizer_id: str, task_id: str
    ) -> Tuple[OptimisticOutcome, List[Dict[str, Any]]]:
        """Delete optimistically: the task disappears at once and comes back on failure."""
        collection = OrderedCollection(
            await self.get_organizer_tasks(organizer_id),
            partition_of=organizer_task_partition,
            partition_field="task_group_id",
        )
        if collection.find(task_id) is None:
            return OptimisticOutcome(success=False, error="Задание не найдено"), collection.items

        async def commit():
            ok = await self.delete_organizer_task(task_id, organizer_id)
            return ok, None if ok else {"message": "delete failed"}

        outcome = await apply_optimistically(
            snapshot=collection.snapshot,
            restore=collection.restore,
            mutate=lambda: collection.remove(task_id),
            commit=commit,
            label=f"delete organizer task {task_id}",
            failure_message="Не удалось удалить задание",
        )
        return outcome, collection.ordered()

    # ------------------------------------------------------------------
    # Logs
    # ------------------------------------------------------------------
    async def get_organizer_task_logs(self, task_id: str, limit: int = 50) -> List[Dict[str, Any]]:
        """Status history of a task, newest first, with the acting organizer."""
        data, error = await self.backend.select(
            self.LOGS_TABLE,
            filters={"task_id": task_id},
            columns="*,organizer:profiles(*)",
            order="created_at",
            descending=True,
            limit=limit,
        )
        if error:
            return []
        return data or []
