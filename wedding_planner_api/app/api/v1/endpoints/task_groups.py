"""
Organizer task board: columns.

``GET /task-groups/board`` returns the whole board, the unsorted column
first, then the organizer's groups in display order.
"""

from typing import Any, Dict, List

from fastapi import APIRouter, Depends, HTTPException, Query, status

from wedding_planner_api.app.core.security import MAIN_ORGANIZER, ORGANIZER, require_roles
from wedding_planner_api.app.schemas.results import ListOperationResult
from wedding_planner_api.app.schemas.task import BoardColumn, ReorderRequest
from wedding_planner_api.app.schemas.task_group import TaskGroupCreate, TaskGroupRead, TaskGroupUpdate
from wedding_planner_api.app.services.ordering_service import OrderingService
from wedding_planner_api.app.services.task_group_service import TaskGroupService, build_board
from wedding_planner_api.app.services.task_service import TaskService

from ..dependencies import get_ordering_service, get_task_group_service, get_task_service

router = APIRouter()

organizer_only = require_roles(ORGANIZER, MAIN_ORGANIZER)


@router.get("/board", response_model=List[BoardColumn])
async def get_board(
    use_cache: bool = Query(True),
    current_user: Dict[str, Any] = Depends(organizer_only),
    groups: TaskGroupService = Depends(get_task_group_service),
    tasks: TaskService = Depends(get_task_service),
) -> List[Dict[str, Any]]:
    organizer_id = current_user["user_id"]
    return build_board(
        await groups.get_task_groups(organizer_id, use_cache=use_cache),
        await tasks.get_organizer_tasks(organizer_id, use_cache=use_cache),
    )


@router.post("/", response_model=TaskGroupRead, status_code=status.HTTP_201_CREATED)
async def create_task_group(
    payload: TaskGroupCreate,
    current_user: Dict[str, Any] = Depends(organizer_only),
    groups: TaskGroupService = Depends(get_task_group_service),
) -> Dict[str, Any]:
    group = await groups.create_task_group(dict(payload.model_dump(), organizer_id=current_user["user_id"]))
    if group is None:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail="Не удалось создать блок заданий")
    return group


@router.put("/{group_id}", response_model=TaskGroupRead)
async def update_task_group(
    group_id: str,
    updates: TaskGroupUpdate,
    current_user: Dict[str, Any] = Depends(organizer_only),
    groups: TaskGroupService = Depends(get_task_group_service),
) -> Dict[str, Any]:
    group = await groups.update_task_group(group_id, updates.model_dump(exclude_unset=True))
    if group is None:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail="Не удалось обновить блок заданий")
    return group


@router.delete("/{group_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_task_group(
    group_id: str,
    current_user: Dict[str, Any] = Depends(organizer_only),
    groups: TaskGroupService = Depends(get_task_group_service),
) -> None:
    """Delete a column; its tasks move to the unsorted column."""
    if not await groups.delete_task_group(group_id, current_user["user_id"]):
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail="Не удалось удалить блок заданий")
    return None


@router.post("/reorder", response_model=ListOperationResult)
async def reorder_task_groups(
    payload: ReorderRequest,
    current_user: Dict[str, Any] = Depends(organizer_only),
    groups: TaskGroupService = Depends(get_task_group_service),
    ordering: OrderingService = Depends(get_ordering_service),
) -> ListOperationResult:
    outcome, items = await ordering.reorder_task_groups(
        groups, current_user["user_id"], payload.dragged_id, payload.target_id
    )
    return ListOperationResult.from_outcome(outcome, items)
