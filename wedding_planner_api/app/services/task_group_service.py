"""
Service for task groups.

Task groups are the columns of an organizer's task board.  Tasks whose
``task_group_id`` is null form the implicit "unsorted" column, which is
always shown first.
"""

import logging
from typing import Any, Dict, List, Optional

from wedding_planner_api.app.core.backend import BackendClient
from wedding_planner_api.app.core.cache import TTLCache, organizer_tasks_key, task_groups_key
from wedding_planner_api.app.core.capabilities import ORDER_COLUMN, SchemaCapabilities
from wedding_planner_api.app.core.config import Settings, settings as default_settings
from wedding_planner_api.app.state.collections import sort_by_order
from wedding_planner_api.app.utils.tasks import group_name, next_order, priority_text, task_title

logger = logging.getLogger(__name__)


class TaskGroupService:
    TABLE = "task_groups"

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

    async def get_task_groups(self, organizer_id: str, use_cache: bool = True) -> List[Dict[str, Any]]:
        key = task_groups_key(organizer_id)
        if use_cache:
            cached = self.cache.get(key)
            if cached is not None:
                return cached
        data, error = await self.backend.select(
            self.TABLE, filters={"organizer_id": organizer_id}, order="created_at", descending=True
        )
        if error:
            return []
        groups = sort_by_order(data or [])
        self.cache.set(key, groups, self.config.tasks_cache_ttl_ms)
        return groups

    async def create_task_group(self, payload: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        row = dict(payload)
        organizer_id = row.get("organizer_id")
        if row.get(ORDER_COLUMN) is None and self.capabilities.supports_ordering(self.TABLE):
            order = next_order(await self.get_task_groups(organizer_id))
            if order is not None:
                row[ORDER_COLUMN] = order
        data, error = await self.backend.insert(self.TABLE, row)
        if error or not data:
            return None
        logger.info("Created task group %s", data.get("id"))
        self.cache.invalidate(task_groups_key(organizer_id))
        return data

    async def update_task_group(self, group_id: str, updates: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        data, error = await self.backend.update(self.TABLE, {"id": group_id}, updates)
        if error or not data:
            return None
        logger.info("Updated task group %s", group_id)
        self.cache.invalidate(task_groups_key(data.get("organizer_id")))
        return data

    async def delete_task_group(self, group_id: str, organizer_id: str) -> bool:
        """Delete a group; its tasks move to the unsorted column."""
        _, error = await self.backend.update("tasks", {"task_group_id": group_id}, {"task_group_id": None})
        if error:
            return False
        _, error = await self.backend.delete(self.TABLE, {"id": group_id})
        if error:
            return False
        logger.info("Deleted task group %s", group_id)
        self.cache.invalidate_many([task_groups_key(organizer_id), organizer_tasks_key(organizer_id)])
        return True


def _cards(tasks: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    return [
        dict(task, display_title=task_title(task), priority_label=priority_text(task.get("priority")))
        for task in sort_by_order(tasks)
    ]


def build_board(groups: List[Dict[str, Any]], tasks: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Arrange tasks into board columns.

    The unsorted column comes first, followed by the groups in display
    order.  Tasks pointing at an unknown group land in the unsorted
    column.
    """
    known = {group.get("id") for group in groups}
    unsorted = [t for t in tasks if t.get("task_group_id") is None or t.get("task_group_id") not in known]
    columns = [
        {"group": None, "name": group_name(None), "is_unsorted": True, "tasks": _cards(unsorted)}
    ]
    for group in sort_by_order(groups):
        columns.append(
            {
                "group": group,
                "name": group_name(group),
                "is_unsorted": False,
                "tasks": _cards([t for t in tasks if t.get("task_group_id") == group.get("id")]),
            }
        )
    return columns
