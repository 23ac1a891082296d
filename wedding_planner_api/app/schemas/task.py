"""
Pydantic models for tasks and their status logs.

The same shape serves wedding checklist items and organizer board
tasks; organizer tasks simply have no ``wedding_id``.
"""

from datetime import date, datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field, model_validator

TaskStatus = Literal["pending", "in_progress", "completed"]
TaskPriority = Literal["low", "medium", "high"]
LogAction = Literal["completed", "uncompleted", "started", "paused", "edited"]


class TaskBase(BaseModel):
    title: Optional[str] = Field(None, examples=["Book the photographer"])
    title_en: Optional[str] = None
    title_ru: Optional[str] = None
    title_ua: Optional[str] = None
    link: Optional[str] = None
    link_text: Optional[str] = None
    link_text_en: Optional[str] = None
    link_text_ru: Optional[str] = None
    link_text_ua: Optional[str] = None
    due_date: Optional[date] = None
    status: TaskStatus = "pending"
    priority: Optional[TaskPriority] = None
    assigned_organizer_id: Optional[str] = None


class TaskCreate(TaskBase):
    """Schema for creating a task.  A title in at least one language is required."""

    task_group_id: Optional[str] = None

    @model_validator(mode="after")
    def require_title(self) -> "TaskCreate":
        titles = [self.title, self.title_en, self.title_ru, self.title_ua]
        filled = [t.strip() for t in titles if t and t.strip()]
        if not filled:
            raise ValueError("Введите название задания")
        if not self.title:
            self.title = filled[0]
        return self


class TaskUpdate(BaseModel):
    """All fields optional; only provided fields are updated."""

    title: Optional[str] = None
    title_en: Optional[str] = None
    title_ru: Optional[str] = None
    title_ua: Optional[str] = None
    link: Optional[str] = None
    link_text: Optional[str] = None
    link_text_en: Optional[str] = None
    link_text_ru: Optional[str] = None
    link_text_ua: Optional[str] = None
    due_date: Optional[date] = None
    status: Optional[TaskStatus] = None
    priority: Optional[TaskPriority] = None
    assigned_organizer_id: Optional[str] = None
    task_group_id: Optional[str] = None


class TaskRead(TaskBase):
    id: str
    wedding_id: Optional[str] = None
    organizer_id: Optional[str] = None
    task_group_id: Optional[str] = None
    order: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {
        "from_attributes": True,
        "extra": "allow",
    }


class ToggleRequest(BaseModel):
    completed: bool


class ReorderRequest(BaseModel):
    """Drop of ``dragged_id`` onto ``target_id``."""

    dragged_id: str
    target_id: str


class MoveRequest(BaseModel):
    """Drop of a board task onto another task or onto a column.

    Give ``target_id`` to drop onto a task, or ``target_group_id`` to
    drop onto a column (``null`` is the unsorted column).
    """

    task_id: str
    target_id: Optional[str] = None
    target_group_id: Optional[str] = None


class TaskLogRead(BaseModel):
    id: str
    task_id: str
    organizer_id: Optional[str] = None
    old_status: Optional[TaskStatus] = None
    new_status: TaskStatus
    action: LogAction
    action_text: Optional[str] = None
    created_at: Optional[datetime] = None
    organizer: Optional[Dict[str, Any]] = None


class BoardColumn(BaseModel):
    group: Optional[Dict[str, Any]] = None
    name: str
    is_unsorted: bool = False
    tasks: List[Dict[str, Any]] = []
