"""Pydantic models for user preferences."""

from typing import Literal

from pydantic import BaseModel

Language = Literal["en", "ru", "ua"]


class LanguagePreference(BaseModel):
    language: Language


class NotesScheduled(BaseModel):
    scheduled: bool = True
    delay_ms: int
