"""Pydantic models for presentations and their sections."""

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field, field_validator


class SectionIn(BaseModel):
    title: str
    page_number: int = Field(..., ge=1)

    @field_validator("title")
    @classmethod
    def title_required(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Введите название раздела")
        return value.strip()


class SectionsUpdate(BaseModel):
    sections: List[SectionIn] = []


class PresentationRead(BaseModel):
    id: Optional[str] = None
    wedding_id: Optional[str] = None
    type: Literal["company", "wedding"] = "company"
    title: str = ""
    image_urls: List[str] = []
    sections: List[Dict[str, Any]] = []

    model_config = {
        "extra": "allow",
    }


class PresentationView(BaseModel):
    """A presentation plus the viewer state for its first page."""

    presentation: PresentationRead
    presentations: List[PresentationRead] = []
    navigator: Dict[str, Any]
    active_section: Optional[Dict[str, Any]] = None
