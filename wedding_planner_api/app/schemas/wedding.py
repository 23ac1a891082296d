"""
Pydantic models for weddings.

``WeddingBase`` holds the editable columns; ``WeddingCreate`` requires
the fields the organizer form marks as mandatory and ``WeddingUpdate``
makes everything optional for partial updates.
"""

from datetime import date, datetime
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator


class WeddingBase(BaseModel):
    project_name: Optional[str] = Field(None, examples=["Montenegro 2026"])
    couple_name_1_en: Optional[str] = None
    couple_name_1_ru: Optional[str] = None
    couple_name_2_en: Optional[str] = None
    couple_name_2_ru: Optional[str] = None
    wedding_date: Optional[date] = Field(None, examples=["2026-05-28"])
    country: Optional[str] = None
    country_en: Optional[str] = None
    country_ru: Optional[str] = None
    country_ua: Optional[str] = None
    venue: Optional[str] = None
    guest_count: Optional[int] = Field(None, ge=0)
    chat_link: Optional[str] = None
    notes: Optional[str] = None
    welcome_text_en: Optional[str] = None
    welcome_text_ru: Optional[str] = None
    welcome_text_ua: Optional[str] = None


class WeddingCreate(WeddingBase):
    """Schema for creating a wedding.

    The organizer form requires both partners' names, the date, the
    country and the venue.
    """

    client_id: str
    organizer_id: Optional[str] = None
    couple_name_1_en: str
    couple_name_2_en: str
    wedding_date: date
    country: str
    venue: str
    guest_count: int = Field(0, ge=0)

    @field_validator("couple_name_1_en", "couple_name_2_en", "country", "venue")
    @classmethod
    def not_blank(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("Поле обязательно для заполнения")
        return value.strip()


class WeddingUpdate(WeddingBase):
    """All fields optional; only provided fields are updated."""

    organizer_id: Optional[str] = None


class WeddingRead(WeddingBase):
    id: str
    client_id: Optional[str] = None
    organizer_id: Optional[str] = None
    presentation: Optional[Any] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {
        "from_attributes": True,
        "extra": "allow",
    }


class NotesUpdate(BaseModel):
    notes: str = ""
