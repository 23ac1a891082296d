"""
Document endpoints.

Documents belong to a wedding and are split into pinned and unpinned
lists, each ordered on its own.  ``/documents/{id}/download`` returns
the URL the browser should open: a fresh signed URL for uploaded files
or the provider's export URL for shared links.
"""

from typing import Any, Dict, List

from fastapi import APIRouter, Depends, HTTPException, status

from wedding_planner_api.app.core.security import MAIN_ORGANIZER, ORGANIZER, get_current_user, require_roles
from wedding_planner_api.app.schemas.document import DocumentCreate, DocumentRead, DocumentUpdate, DownloadLink
from wedding_planner_api.app.schemas.results import ListOperationResult
from wedding_planner_api.app.schemas.task import ReorderRequest
from wedding_planner_api.app.services.document_service import DocumentService
from wedding_planner_api.app.services.ordering_service import OrderingService
from wedding_planner_api.app.services.wedding_service import WeddingService

from ..dependencies import (
    get_accessible_wedding,
    get_document_service,
    get_ordering_service,
    get_wedding_document,
    get_wedding_service,
)

router = APIRouter()


@router.get("/weddings/{wedding_id}/documents", response_model=List[DocumentRead])
async def list_documents(
    wedding: Dict[str, Any] = Depends(get_accessible_wedding),
    current_user: Dict[str, Any] = Depends(get_current_user),
    documents: DocumentService = Depends(get_document_service),
) -> List[Dict[str, Any]]:
    """Pinned documents first; cached for ten minutes."""
    return await documents.get_wedding_documents(wedding["id"], use_rpc=current_user["role"] == MAIN_ORGANIZER)


@router.post("/weddings/{wedding_id}/documents", response_model=DocumentRead, status_code=status.HTTP_201_CREATED)
async def create_document(
    payload: DocumentCreate,
    wedding: Dict[str, Any] = Depends(get_accessible_wedding),
    current_user: Dict[str, Any] = Depends(require_roles(ORGANIZER, MAIN_ORGANIZER)),
    documents: DocumentService = Depends(get_document_service),
) -> Dict[str, Any]:
    data = payload.model_dump(mode="json", exclude_none=True)
    data["wedding_id"] = wedding["id"]
    document = await documents.create_document(data)
    if document is None:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail="Не удалось создать документ")
    return document


@router.put("/weddings/{wedding_id}/documents/{document_id}", response_model=DocumentRead)
async def update_document(
    updates: DocumentUpdate,
    wedding: Dict[str, Any] = Depends(get_accessible_wedding),
    current_user: Dict[str, Any] = Depends(require_roles(ORGANIZER, MAIN_ORGANIZER)),
    document: Dict[str, Any] = Depends(get_wedding_document),
    documents: DocumentService = Depends(get_document_service),
) -> Dict[str, Any]:
    updated = await documents.update_document(
        document["id"], updates.model_dump(mode="json", exclude_unset=True), wedding["id"]
    )
    if updated is None:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail="Не удалось обновить документ")
    return updated


@router.delete("/weddings/{wedding_id}/documents/{document_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_document(
    wedding: Dict[str, Any] = Depends(get_accessible_wedding),
    current_user: Dict[str, Any] = Depends(require_roles(ORGANIZER, MAIN_ORGANIZER)),
    document: Dict[str, Any] = Depends(get_wedding_document),
    documents: DocumentService = Depends(get_document_service),
) -> None:
    if not await documents.delete_document(document["id"], wedding["id"]):
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail="Не удалось удалить документ")
    return None


@router.post("/weddings/{wedding_id}/documents/reorder", response_model=ListOperationResult)
async def reorder_documents(
    payload: ReorderRequest,
    wedding: Dict[str, Any] = Depends(get_accessible_wedding),
    current_user: Dict[str, Any] = Depends(require_roles(ORGANIZER, MAIN_ORGANIZER)),
    documents: DocumentService = Depends(get_document_service),
    ordering: OrderingService = Depends(get_ordering_service),
) -> ListOperationResult:
    """Reorder within the pinned or unpinned list of the dragged document."""
    outcome, items = await ordering.reorder_documents(
        documents,
        wedding["id"],
        payload.dragged_id,
        payload.target_id,
        use_rpc=current_user["role"] == MAIN_ORGANIZER,
    )
    return ListOperationResult.from_outcome(outcome, items)


@router.get("/documents/{document_id}/download", response_model=DownloadLink)
async def download_document(
    document_id: str,
    current_user: Dict[str, Any] = Depends(get_current_user),
    documents: DocumentService = Depends(get_document_service),
    weddings: WeddingService = Depends(get_wedding_service),
) -> DownloadLink:
    document = await documents.get_document(document_id)
    if document is None or await weddings.get_accessible_wedding(current_user, document["wedding_id"]) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Document not found")
    url = await documents.get_download_url(document)
    if not url:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Document has no file or link")
    return DownloadLink(url=url)
