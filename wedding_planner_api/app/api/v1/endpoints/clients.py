"""
Client account endpoints (organizers only).

``POST /clients`` signs the couple up, creates their profile and their
wedding in one go.
"""

from typing import Any, Dict, List

from fastapi import APIRouter, Depends, HTTPException, status

from wedding_planner_api.app.core.security import MAIN_ORGANIZER, ORGANIZER, require_roles
from wedding_planner_api.app.schemas.client import ClientCreate, ClientCreated, ClientRead
from wedding_planner_api.app.services.client_service import ClientService

from ..dependencies import get_client_service

router = APIRouter()

organizer_only = require_roles(ORGANIZER, MAIN_ORGANIZER)


@router.get("/", response_model=List[ClientRead])
async def list_clients(
    current_user: Dict[str, Any] = Depends(organizer_only),
    clients: ClientService = Depends(get_client_service),
) -> List[Dict[str, Any]]:
    return await clients.list_clients()


@router.get("/{client_id}", response_model=ClientRead)
async def get_client(
    client_id: str,
    current_user: Dict[str, Any] = Depends(organizer_only),
    clients: ClientService = Depends(get_client_service),
) -> Dict[str, Any]:
    client = await clients.get_client_by_id(client_id)
    if client is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Client not found")
    return client


@router.post("/", response_model=ClientCreated, status_code=status.HTTP_201_CREATED)
async def create_client(
    payload: ClientCreate,
    current_user: Dict[str, Any] = Depends(organizer_only),
    clients: ClientService = Depends(get_client_service),
) -> Dict[str, Any]:
    wedding = {
        "organizer_id": payload.organizer_id or current_user["user_id"],
        "couple_name_1_en": payload.couple_name_1,
        "couple_name_2_en": payload.couple_name_2,
        "wedding_date": payload.wedding_date.isoformat(),
        "venue": payload.venue,
        "country": payload.country,
        "guest_count": payload.guest_count,
    }
    created = await clients.create_client(payload.email, payload.password, payload.display_name, wedding)
    if created is None:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail="Не удалось создать клиента")
    return {"client": created["profile"], "wedding": created["wedding"]}
