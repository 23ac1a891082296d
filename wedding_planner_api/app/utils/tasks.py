"""Task display helpers used by the board and log endpoints."""

from typing import Any, Dict, Iterable, Optional

UNSORTED_GROUP_NAME = "Несортированные задачи"

ACTION_TEXT = {
    "completed": "Выполнил",
    "uncompleted": "Отменил выполнение",
    "started": "Начал",
    "paused": "Приостановил",
    "edited": "Изменил",
}

PRIORITY_TEXT = {"high": "Срочный", "medium": "Средний", "low": "Низкий"}


def task_title(task: Dict[str, Any]) -> str:
    """Board title: Russian first, then the default, then any language."""
    return task.get("title_ru") or task.get("title") or task.get("title_en") or task.get("title_ua") or ""


def group_name(group: Optional[Dict[str, Any]]) -> str:
    if not group:
        return UNSORTED_GROUP_NAME
    return group.get("name") or UNSORTED_GROUP_NAME


def action_text(action: str) -> str:
    return ACTION_TEXT.get(action, action)


def priority_text(priority: Optional[str]) -> str:
    return PRIORITY_TEXT.get(priority or "", "")


def status_action(old_status: Optional[str], new_status: Optional[str]) -> Optional[str]:
    """Log action for a status change, or ``None`` if the status is unchanged."""
    if old_status == new_status:
        return None
    if new_status == "completed":
        return "completed"
    if old_status == "completed":
        return "uncompleted"
    if new_status == "in_progress":
        return "started"
    if old_status == "in_progress" and new_status == "pending":
        return "paused"
    return "edited"


def next_order(items: Iterable[Dict[str, Any]]) -> Optional[int]:
    """``max(order) + 1`` when any item is ordered, else ``None``."""
    orders = [item["order"] for item in items if item.get("order") is not None]
    if not orders:
        return None
    return max(orders) + 1
