"""
Pydantic models for client accounts.

Creating a client also creates the wedding that links the client to an
organizer, so ``ClientCreate`` carries the mandatory wedding fields.
"""

from datetime import date, datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, field_validator


class ClientCreate(BaseModel):
    email: str = Field(..., examples=["couple@example.com"])
    password: str = Field(..., examples=["secret123"])
    couple_name_1: str
    couple_name_2: str
    wedding_date: date
    venue: str
    country: str
    guest_count: int = Field(0, ge=0)
    organizer_id: Optional[str] = None

    @field_validator("email")
    @classmethod
    def email_required(cls, value: str) -> str:
        value = value.strip()
        if not value or "@" not in value:
            raise ValueError("Введите email")
        return value

    @field_validator("password")
    @classmethod
    def password_length(cls, value: str) -> str:
        if len(value) < 6:
            raise ValueError("Пароль должен содержать минимум 6 символов")
        return value

    @field_validator("couple_name_1", "couple_name_2", "venue", "country")
    @classmethod
    def not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Поле обязательно для заполнения")
        return value.strip()

    @property
    def display_name(self) -> str:
        return f"{self.couple_name_1} & {self.couple_name_2}"


class ClientRead(BaseModel):
    id: str
    email: Optional[str] = None
    name: Optional[str] = None
    role: str = "client"
    created_at: Optional[datetime] = None

    model_config = {
        "from_attributes": True,
        "extra": "allow",
    }


class ClientCreated(BaseModel):
    client: ClientRead
    wedding: Dict[str, Any]
