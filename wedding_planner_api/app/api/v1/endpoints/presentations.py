"""
Presentation endpoints.

The couple sees their own presentation and the company one; the viewer
state returned with it starts on the first slide of the first
presentation.  Organizers upload a wedding presentation (the PDF plus the
slide images rendered from it), edit its table of contents and remove
it.
"""

from pathlib import Path
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile, status

from wedding_planner_api.app.core.security import MAIN_ORGANIZER, ORGANIZER, require_roles
from wedding_planner_api.app.schemas.presentation import PresentationRead, PresentationView, SectionsUpdate
from wedding_planner_api.app.services.presentation_service import PresentationService
from wedding_planner_api.app.state.slides import PresentationViewer

from ..dependencies import get_accessible_wedding, get_presentation_service

router = APIRouter()


@router.get("/weddings/{wedding_id}/presentation", response_model=PresentationView)
async def get_presentation(
    wedding: Dict[str, Any] = Depends(get_accessible_wedding),
    presentations: PresentationService = Depends(get_presentation_service),
) -> PresentationView:
    available = await presentations.get_presentations(wedding["id"])
    if not available:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Presentation not found")
    viewer = PresentationViewer(available)
    return PresentationView(
        presentation=viewer.current,
        presentations=available,
        navigator=viewer.navigator.as_dict(),
        active_section=viewer.active_section(),
    )


@router.post(
    "/weddings/{wedding_id}/presentation",
    response_model=PresentationRead,
    status_code=status.HTTP_201_CREATED,
)
async def upload_presentation(
    title: str = Form(...),
    pdf: UploadFile = File(...),
    images: Optional[List[UploadFile]] = File(None),
    wedding: Dict[str, Any] = Depends(get_accessible_wedding),
    current_user: Dict[str, Any] = Depends(require_roles(ORGANIZER, MAIN_ORGANIZER)),
    presentations: PresentationService = Depends(get_presentation_service),
) -> Dict[str, Any]:
    """Upload the PDF and its slide images (one image per page, in order)."""
    if not title.strip():
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail="Введите название презентации")
    filename = Path(pdf.filename or "presentation.pdf").name
    if (pdf.content_type or "").lower() != "application/pdf" and not filename.lower().endswith(".pdf"):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Only PDF presentations are accepted")
    pdf_data = await pdf.read()
    if not pdf_data:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Empty file")
    slides = []
    for image in images or []:
        content_type = (image.content_type or "").lower()
        if not content_type.startswith("image/"):
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Slides must be images")
        slides.append((image.filename or "", await image.read(), content_type))

    presentation = await presentations.create_presentation(wedding["id"], title.strip(), filename, pdf_data, slides)
    if presentation is None:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail="Ошибка загрузки презентации")
    return presentation


@router.put("/presentations/{presentation_id}/sections", response_model=Dict[str, Any])
async def update_sections(
    presentation_id: str,
    payload: SectionsUpdate,
    current_user: Dict[str, Any] = Depends(require_roles(ORGANIZER, MAIN_ORGANIZER)),
    presentations: PresentationService = Depends(get_presentation_service),
) -> Dict[str, Any]:
    sections = await presentations.update_sections(
        presentation_id, [section.model_dump() for section in payload.sections]
    )
    if sections is None:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail="Ошибка обновления секций презентации")
    return {"presentation_id": presentation_id, "sections": sections}


@router.delete("/weddings/{wedding_id}/presentation", status_code=status.HTTP_204_NO_CONTENT)
async def delete_presentation(
    wedding: Dict[str, Any] = Depends(get_accessible_wedding),
    current_user: Dict[str, Any] = Depends(require_roles(ORGANIZER, MAIN_ORGANIZER)),
    presentations: PresentationService = Depends(get_presentation_service),
) -> None:
    if not await presentations.delete_presentation(wedding["id"]):
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail="Не удалось удалить презентацию")
    return None
