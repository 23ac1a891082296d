"""Pydantic models for wedding documents."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, model_validator

from wedding_planner_api.app.utils.localization import main_name


class DocumentCreate(BaseModel):
    """Schema for creating a link document.

    At least one of the localized names must be filled; the first
    filled of en, ru, ua becomes ``name``.
    """

    name_en: Optional[str] = None
    name_ru: Optional[str] = None
    name_ua: Optional[str] = None
    name: Optional[str] = None
    link: Optional[str] = None
    file_path: Optional[str] = None
    pinned: bool = False

    @model_validator(mode="after")
    def require_name(self) -> "DocumentCreate":
        primary = main_name(
            {"name_en": self.name_en, "name_ru": self.name_ru, "name_ua": self.name_ua}
        ) or (self.name.strip() if self.name and self.name.strip() else None)
        if not primary:
            raise ValueError("Введите название документа хотя бы на одном языке")
        self.name = primary
        return self


class DocumentUpdate(BaseModel):
    name: Optional[str] = None
    name_en: Optional[str] = None
    name_ru: Optional[str] = None
    name_ua: Optional[str] = None
    link: Optional[str] = None
    pinned: Optional[bool] = None


class DocumentRead(BaseModel):
    id: str
    wedding_id: str
    name: str
    name_en: Optional[str] = None
    name_ru: Optional[str] = None
    name_ua: Optional[str] = None
    link: Optional[str] = None
    pinned: bool = False
    order: Optional[int] = None
    file_path: Optional[str] = None
    file_url: Optional[str] = None
    file_size: Optional[int] = None
    mime_type: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {
        "from_attributes": True,
        "extra": "allow",
    }


class DownloadLink(BaseModel):
    url: str
