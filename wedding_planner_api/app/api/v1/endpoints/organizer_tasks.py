"""
Organizer task board: tasks.

Toggle, move and delete apply optimistically and answer with the
resulting task list and an optional banner; create and update fail the
request when the backend rejects them.
"""

from typing import Any, Dict, List

from fastapi import APIRouter, Depends, HTTPException, Query, status

from wedding_planner_api.app.core.security import MAIN_ORGANIZER, ORGANIZER, require_roles
from wedding_planner_api.app.schemas.results import ListOperationResult
from wedding_planner_api.app.schemas.task import (
    MoveRequest,
    TaskCreate,
    TaskLogRead,
    TaskRead,
    TaskUpdate,
    ToggleRequest,
)
from wedding_planner_api.app.services.ordering_service import OrderingService
from wedding_planner_api.app.services.task_service import TaskService
from wedding_planner_api.app.state.collections import UNSET
from wedding_planner_api.app.utils.tasks import action_text

from ..dependencies import get_ordering_service, get_task_service

router = APIRouter()

organizer_only = require_roles(ORGANIZER, MAIN_ORGANIZER)


@router.post("/", response_model=TaskRead, status_code=status.HTTP_201_CREATED)
async def create_organizer_task(
    payload: TaskCreate,
    current_user: Dict[str, Any] = Depends(organizer_only),
    tasks: TaskService = Depends(get_task_service),
) -> Dict[str, Any]:
    data = payload.model_dump(mode="json")
    data["organizer_id"] = current_user["user_id"]
    task = await tasks.create_organizer_task(data)
    if task is None:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail="Не удалось создать задание")
    return task


@router.put("/{task_id}", response_model=TaskRead)
async def update_organizer_task(
    task_id: str,
    updates: TaskUpdate,
    current_user: Dict[str, Any] = Depends(organizer_only),
    tasks: TaskService = Depends(get_task_service),
) -> Dict[str, Any]:
    task = await tasks.update_organizer_task(
        task_id, updates.model_dump(mode="json", exclude_unset=True), actor_id=current_user["user_id"]
    )
    if task is None:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail="Не удалось обновить задание")
    return task


@router.delete("/{task_id}", response_model=ListOperationResult)
async def delete_organizer_task(
    task_id: str,
    current_user: Dict[str, Any] = Depends(organizer_only),
    tasks: TaskService = Depends(get_task_service),
) -> ListOperationResult:
    outcome, items = await tasks.remove_organizer_task(current_user["user_id"], task_id)
    return ListOperationResult.from_outcome(outcome, items)


@router.post("/move", response_model=ListOperationResult)
async def move_organizer_task(
    payload: MoveRequest,
    current_user: Dict[str, Any] = Depends(organizer_only),
    tasks: TaskService = Depends(get_task_service),
    ordering: OrderingService = Depends(get_ordering_service),
) -> ListOperationResult:
    """Drop a task onto another task, or onto a column when ``target_id`` is omitted."""
    target_group = UNSET
    if payload.target_id is None:
        target_group = payload.target_group_id
    outcome, items = await ordering.move_organizer_task(
        tasks, current_user["user_id"], payload.task_id, payload.target_id, target_group
    )
    return ListOperationResult.from_outcome(outcome, items)


@router.post("/{task_id}/toggle", response_model=ListOperationResult)
async def toggle_organizer_task(
    task_id: str,
    payload: ToggleRequest,
    current_user: Dict[str, Any] = Depends(organizer_only),
    tasks: TaskService = Depends(get_task_service),
) -> ListOperationResult:
    outcome, items = await tasks.toggle_organizer_task(current_user["user_id"], task_id, payload.completed)
    return ListOperationResult.from_outcome(outcome, items)


@router.get("/{task_id}/logs", response_model=List[TaskLogRead])
async def get_task_logs(
    task_id: str,
    limit: int = Query(50, ge=1, le=200),
    current_user: Dict[str, Any] = Depends(organizer_only),
    tasks: TaskService = Depends(get_task_service),
) -> List[Dict[str, Any]]:
    """Status history of a task, newest first."""
    logs = await tasks.get_organizer_task_logs(task_id, limit=limit)
    return [dict(log, action_text=action_text(log.get("action", ""))) for log in logs]
