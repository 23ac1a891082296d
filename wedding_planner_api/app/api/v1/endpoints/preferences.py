"""
Per-user preferences kept by the API itself.

The language choice is stored per user in the persistent preference
store.  Notes typed before the couple has a wedding record are kept
there as well, with the same debounce as wedding notes.
"""

from typing import Any, Dict

from fastapi import APIRouter, Depends, Request, status

from wedding_planner_api.app.core.deps import get_local_store, notes_saver_for
from wedding_planner_api.app.core.security import get_current_user
from wedding_planner_api.app.schemas.preferences import LanguagePreference, NotesScheduled
from wedding_planner_api.app.schemas.wedding import NotesUpdate
from wedding_planner_api.app.state.preferences import (
    LANGUAGE_KEY,
    NOTES_KEY,
    MemoryStore,
    get_initial_language,
    set_language,
)

router = APIRouter()


def _language_key(user: Dict[str, Any]) -> str:
    return f"{LANGUAGE_KEY}:{user['user_id']}"


@router.get("/language", response_model=LanguagePreference)
async def get_language(
    current_user: Dict[str, Any] = Depends(get_current_user),
    store: MemoryStore = Depends(get_local_store),
) -> LanguagePreference:
    """Stored language, Russian when nothing valid is stored."""
    return LanguagePreference(language=get_initial_language(store, _language_key(current_user)))


@router.put("/language", response_model=LanguagePreference)
async def put_language(
    payload: LanguagePreference,
    current_user: Dict[str, Any] = Depends(get_current_user),
    store: MemoryStore = Depends(get_local_store),
) -> LanguagePreference:
    return LanguagePreference(language=set_language(store, payload.language, _language_key(current_user)))


@router.put("/notes", response_model=NotesScheduled, status_code=status.HTTP_202_ACCEPTED)
async def save_local_notes(
    payload: NotesUpdate,
    request: Request,
    current_user: Dict[str, Any] = Depends(get_current_user),
) -> NotesScheduled:
    user_id = current_user["user_id"]
    saver = notes_saver_for(request, f"user:{user_id}", storage_key=f"{NOTES_KEY}:{user_id}")
    saver.schedule(payload.notes)
    return NotesScheduled(delay_ms=saver.delay_ms)
