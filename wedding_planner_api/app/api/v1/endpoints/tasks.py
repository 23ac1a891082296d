"""
Wedding checklist endpoints.

The couple reads the checklist and ticks items off; the organizer also
creates, edits, deletes and reorders them.  Toggle and reorder return a
:class:`ListOperationResult` instead of failing the request, so the
screen can show the list as it stands together with a banner.
"""

from typing import Any, Dict, List

from fastapi import APIRouter, Depends, HTTPException, Query, status

from wedding_planner_api.app.core.security import MAIN_ORGANIZER, ORGANIZER, get_current_user, require_roles
from wedding_planner_api.app.schemas.preferences import Language
from wedding_planner_api.app.schemas.results import ListOperationResult
from wedding_planner_api.app.schemas.task import ReorderRequest, TaskCreate, TaskRead, TaskUpdate, ToggleRequest
from wedding_planner_api.app.services.ordering_service import OrderingService
from wedding_planner_api.app.services.task_service import TaskService
from wedding_planner_api.app.state.preferences import DEFAULT_LANGUAGE
from wedding_planner_api.app.utils.links import parse_text_with_links
from wedding_planner_api.app.utils.localization import localized

from ..dependencies import get_accessible_wedding, get_ordering_service, get_task_service, get_wedding_task

router = APIRouter()


def _use_rpc(user: Dict[str, Any]) -> bool:
    return user.get("role") == MAIN_ORGANIZER


@router.get("/weddings/{wedding_id}/tasks", response_model=List[TaskRead])
async def list_wedding_tasks(
    lang: Language = Query(DEFAULT_LANGUAGE),
    wedding: Dict[str, Any] = Depends(get_accessible_wedding),
    current_user: Dict[str, Any] = Depends(get_current_user),
    tasks: TaskService = Depends(get_task_service),
) -> List[Dict[str, Any]]:
    """Checklist in display order (cached for three minutes).

    Each task carries ``display_title`` (also split into link markup
    parts) and ``display_link_text`` in ``lang``, falling back to any
    filled language.
    """
    items = await tasks.get_wedding_tasks(wedding["id"], use_rpc=_use_rpc(current_user))
    result = []
    for task in items:
        title = localized(task, "title", lang)
        result.append(
            dict(
                task,
                display_title=title,
                title_parts=parse_text_with_links(title),
                display_link_text=localized(task, "link_text", lang),
            )
        )
    return result


@router.post("/weddings/{wedding_id}/tasks", response_model=TaskRead, status_code=status.HTTP_201_CREATED)
async def create_wedding_task(
    payload: TaskCreate,
    wedding: Dict[str, Any] = Depends(get_accessible_wedding),
    current_user: Dict[str, Any] = Depends(require_roles(ORGANIZER, MAIN_ORGANIZER)),
    tasks: TaskService = Depends(get_task_service),
) -> Dict[str, Any]:
    data = payload.model_dump(mode="json", exclude={"task_group_id"})
    data["wedding_id"] = wedding["id"]
    data["organizer_id"] = wedding.get("organizer_id") or current_user["user_id"]
    task = await tasks.create_task(data)
    if task is None:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail="Не удалось создать задание")
    return task


@router.put("/weddings/{wedding_id}/tasks/{task_id}", response_model=TaskRead)
async def update_wedding_task(
    updates: TaskUpdate,
    wedding: Dict[str, Any] = Depends(get_accessible_wedding),
    current_user: Dict[str, Any] = Depends(require_roles(ORGANIZER, MAIN_ORGANIZER)),
    task: Dict[str, Any] = Depends(get_wedding_task),
    tasks: TaskService = Depends(get_task_service),
) -> Dict[str, Any]:
    updated = await tasks.update_task(task["id"], updates.model_dump(mode="json", exclude_unset=True), wedding["id"])
    if updated is None:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail="Не удалось обновить задание")
    return updated


@router.delete("/weddings/{wedding_id}/tasks/{task_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_wedding_task(
    wedding: Dict[str, Any] = Depends(get_accessible_wedding),
    current_user: Dict[str, Any] = Depends(require_roles(ORGANIZER, MAIN_ORGANIZER)),
    task: Dict[str, Any] = Depends(get_wedding_task),
    tasks: TaskService = Depends(get_task_service),
) -> None:
    if not await tasks.delete_task(task["id"], wedding["id"]):
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail="Не удалось удалить задание")
    return None


@router.post("/weddings/{wedding_id}/tasks/reorder", response_model=ListOperationResult)
async def reorder_wedding_tasks(
    payload: ReorderRequest,
    wedding: Dict[str, Any] = Depends(get_accessible_wedding),
    current_user: Dict[str, Any] = Depends(require_roles(ORGANIZER, MAIN_ORGANIZER)),
    tasks: TaskService = Depends(get_task_service),
    ordering: OrderingService = Depends(get_ordering_service),
) -> ListOperationResult:
    """Drop ``dragged_id`` onto ``target_id`` and renumber the checklist."""
    outcome, items = await ordering.reorder_wedding_tasks(
        tasks, wedding["id"], payload.dragged_id, payload.target_id, use_rpc=_use_rpc(current_user)
    )
    return ListOperationResult.from_outcome(outcome, items)


@router.post("/weddings/{wedding_id}/tasks/{task_id}/toggle", response_model=ListOperationResult)
async def toggle_wedding_task(
    task_id: str,
    payload: ToggleRequest,
    wedding: Dict[str, Any] = Depends(get_accessible_wedding),
    tasks: TaskService = Depends(get_task_service),
) -> ListOperationResult:
    """Mark a checklist item done or not done."""
    outcome, items = await tasks.toggle_wedding_task(wedding["id"], task_id, payload.completed)
    return ListOperationResult.from_outcome(outcome, items)
