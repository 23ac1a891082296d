"""Pydantic models for task groups (board columns)."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator


class TaskGroupCreate(BaseModel):
    name: str = Field(..., examples=["Подрядчики"])
    color: Optional[str] = Field(None, examples=["#f59e0b"])

    @field_validator("name")
    @classmethod
    def name_required(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Введите название блока")
        return value.strip()


class TaskGroupUpdate(BaseModel):
    name: Optional[str] = None
    color: Optional[str] = None

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and not value.strip():
            raise ValueError("Введите название блока")
        return value.strip() if value else value


class TaskGroupRead(BaseModel):
    id: str
    organizer_id: str
    name: str
    color: Optional[str] = None
    order: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {
        "from_attributes": True,
        "extra": "allow",
    }
