"""
Wedding endpoints for API v1.

Clients read their own wedding through ``/weddings/me``; organizers
list, create, update and delete weddings.  Every route that takes a
``wedding_id`` first checks that the caller may access that wedding.
"""

from typing import Any, Dict, List

from fastapi import APIRouter, Depends, HTTPException, Request, status

from wedding_planner_api.app.core.deps import notes_saver_for
from wedding_planner_api.app.core.security import (
    CLIENT,
    MAIN_ORGANIZER,
    ORGANIZER,
    get_current_user,
    require_roles,
)
from wedding_planner_api.app.schemas.preferences import NotesScheduled
from wedding_planner_api.app.schemas.wedding import NotesUpdate, WeddingCreate, WeddingRead, WeddingUpdate
from wedding_planner_api.app.services.wedding_service import WeddingService

from ..dependencies import get_accessible_wedding, get_wedding_service

router = APIRouter()


@router.get("/me", response_model=WeddingRead)
async def get_my_wedding(
    current_user: Dict[str, Any] = Depends(require_roles(CLIENT)),
    weddings: WeddingService = Depends(get_wedding_service),
) -> Dict[str, Any]:
    """Return the wedding of the signed-in client (cached for five minutes)."""
    wedding = await weddings.get_client_wedding(current_user["user_id"])
    if wedding is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Wedding not found")
    return wedding


@router.get("/", response_model=List[WeddingRead])
async def list_weddings(
    current_user: Dict[str, Any] = Depends(require_roles(ORGANIZER, MAIN_ORGANIZER)),
    weddings: WeddingService = Depends(get_wedding_service),
) -> List[Dict[str, Any]]:
    """Weddings of the organizer; the main organizer sees all of them."""
    if current_user["role"] == MAIN_ORGANIZER:
        return await weddings.get_all_weddings()
    return await weddings.get_organizer_weddings(current_user["user_id"])


@router.post("/", response_model=WeddingRead, status_code=status.HTTP_201_CREATED)
async def create_wedding(
    payload: WeddingCreate,
    current_user: Dict[str, Any] = Depends(require_roles(ORGANIZER, MAIN_ORGANIZER)),
    weddings: WeddingService = Depends(get_wedding_service),
) -> Dict[str, Any]:
    data = payload.model_dump(mode="json")
    if not data.get("organizer_id"):
        data["organizer_id"] = current_user["user_id"]
    wedding = await weddings.create_wedding(data)
    if wedding is None:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail="Не удалось создать свадьбу")
    return wedding


@router.get("/{wedding_id}", response_model=WeddingRead)
async def get_wedding(wedding: Dict[str, Any] = Depends(get_accessible_wedding)) -> Dict[str, Any]:
    return wedding


@router.put("/{wedding_id}", response_model=WeddingRead)
async def update_wedding(
    updates: WeddingUpdate,
    wedding: Dict[str, Any] = Depends(get_accessible_wedding),
    current_user: Dict[str, Any] = Depends(require_roles(ORGANIZER, MAIN_ORGANIZER)),
    weddings: WeddingService = Depends(get_wedding_service),
) -> Dict[str, Any]:
    """Partial update; unspecified fields stay unchanged."""
    update_dict = updates.model_dump(mode="json", exclude_unset=True)
    updated = await weddings.update_wedding(wedding["id"], update_dict)
    if updated is None:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail="Не удалось обновить свадьбу")
    return updated


@router.delete("/{wedding_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_wedding(
    wedding: Dict[str, Any] = Depends(get_accessible_wedding),
    current_user: Dict[str, Any] = Depends(require_roles(ORGANIZER, MAIN_ORGANIZER)),
    weddings: WeddingService = Depends(get_wedding_service),
) -> None:
    if not await weddings.delete_wedding(wedding["id"]):
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail="Не удалось удалить свадьбу")
    return None


@router.put("/{wedding_id}/notes", response_model=NotesScheduled, status_code=status.HTTP_202_ACCEPTED)
async def save_notes(
    payload: NotesUpdate,
    request: Request,
    wedding: Dict[str, Any] = Depends(get_accessible_wedding),
    weddings: WeddingService = Depends(get_wedding_service),
) -> NotesScheduled:
    """Schedule a save of the wedding notes.

    Edits arriving within the debounce window replace each other; only
    the last text is written.
    """
    wedding_id = wedding["id"]
    saver = notes_saver_for(request, f"wedding:{wedding_id}")

    async def save_remote(text: str) -> bool:
        return await weddings.update_notes(wedding_id, text)

    saver.schedule(payload.notes, save_remote)
    return NotesScheduled(delay_ms=saver.delay_ms)
