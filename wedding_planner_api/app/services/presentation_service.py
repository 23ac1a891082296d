"""
Service for presentations.

Each wedding may have its own presentation; the company presentation
(``wedding_id`` null) is shown to every couple.  Slides are stored as
image URLs produced from an uploaded PDF; sections give the viewer a
table of contents pointing at 1-based page numbers.
"""

import logging
import time
from typing import Any, Dict, List, Optional, Sequence, Tuple

from wedding_planner_api.app.core.backend import BackendClient
from wedding_planner_api.app.state.slides import sorted_sections

logger = logging.getLogger(__name__)

PRESENTATIONS_BUCKET = "presentations"

# (file name, content, content type) of an uploaded slide image.
SlideImage = Tuple[str, bytes, str]


def _normalize(row: Dict[str, Any]) -> Dict[str, Any]:
    presentation = dict(row)
    sections = presentation.pop("presentation_sections", None)
    if sections is None:
        sections = presentation.get("sections") or []
    presentation["sections"] = sorted_sections(sections)
    presentation["image_urls"] = presentation.get("image_urls") or []
    if not presentation.get("type"):
        presentation["type"] = "wedding" if presentation.get("wedding_id") else "company"
    return presentation


class PresentationService:
    TABLE = "presentations"
    SECTIONS_TABLE = "presentation_sections"
    COLUMNS = "*,presentation_sections(*)"

    def __init__(self, backend: BackendClient) -> None:
        self.backend = backend

    async def get_company_presentation(self) -> Optional[Dict[str, Any]]:
        data, error = await self.backend.select(
            self.TABLE, filters={"wedding_id": None}, columns=self.COLUMNS, single=True
        )
        if error or not data:
            return None
        return _normalize(data)

    async def get_presentation(self, wedding_id: str) -> Optional[Dict[str, Any]]:
        """The wedding's own presentation, falling back to the company one."""
        data, error = await self.backend.select(
            self.TABLE, filters={"wedding_id": wedding_id}, columns=self.COLUMNS, single=True
        )
        if not error and data:
            return _normalize(data)
        return await self.get_company_presentation()

    async def get_presentations(self, wedding_id: str) -> List[Dict[str, Any]]:
        """All presentations a couple can switch between: theirs, then the company one."""
        result: List[Dict[str, Any]] = []
        data, error = await self.backend.select(
            self.TABLE, filters={"wedding_id": wedding_id}, columns=self.COLUMNS, single=True
        )
        if not error and data:
            result.append(_normalize(data))
        company = await self.get_company_presentation()
        if company is not None:
            result.append(company)
        return result

    async def create_presentation(
        self,
        wedding_id: str,
        title: str,
        pdf_name: str,
        pdf_data: bytes,
        images: Sequence[SlideImage] = (),
    ) -> Optional[Dict[str, Any]]:
        """Upload a wedding presentation and create its record.

        The PDF and the slide images rendered from it are stored in the
        presentations bucket; the record keeps the PDF path and the public
        image URLs in page order.  When any step fails, files uploaded so
        far are removed again and ``None`` is returned.
        """
        prefix = f"presentations/{wedding_id}/{int(time.time() * 1000)}"
        pdf_path, error = await self.backend.upload_object(
            PRESENTATIONS_BUCKET, f"{prefix}_{pdf_name}", pdf_data, "application/pdf"
        )
        if error or not pdf_path:
            logger.error("PDF upload failed for wedding %s", wedding_id)
            return None
        stored = [pdf_path]
        image_urls = []
        for index, (_, content, content_type) in enumerate(images, start=1):
            path, error = await self.backend.upload_object(
                PRESENTATIONS_BUCKET, f"{prefix}/page_{index}.jpg", content, content_type or "image/jpeg"
            )
            if error or not path:
                await self._remove_uploaded(stored)
                return None
            stored.append(path)
            image_urls.append(self.backend.public_url(PRESENTATIONS_BUCKET, path))

        row = {
            "wedding_id": wedding_id,
            "title": title,
            "type": "wedding",
            "pdf_file_path": pdf_path,
            "image_urls": image_urls,
        }
        data, error = await self.backend.insert(self.TABLE, row)
        if error or not data:
            await self._remove_uploaded(stored)
            return None
        logger.info("Created presentation %s for wedding %s (%d slides)", data.get("id"), wedding_id, len(image_urls))
        return _normalize(data)

    async def _remove_uploaded(self, paths: List[str]) -> None:
        _, error = await self.backend.remove_objects(PRESENTATIONS_BUCKET, paths)
        if error:
            logger.warning("Uploaded presentation files were not removed: %s", paths)

    async def update_sections(self, presentation_id: str, sections: List[Dict[str, Any]]) -> Optional[List[Dict[str, Any]]]:
        """Replace the table of contents.  ``order_index`` follows list order."""
        _, error = await self.backend.delete(self.SECTIONS_TABLE, {"presentation_id": presentation_id})
        if error:
            return None
        if not sections:
            return []
        rows = [
            {
                "presentation_id": presentation_id,
                "title": section["title"],
                "page_number": section["page_number"],
                "order_index": index,
            }
            for index, section in enumerate(sections)
        ]
        data, error = await self.backend.insert(self.SECTIONS_TABLE, rows)
        if error:
            return None
        logger.info("Replaced %d sections of presentation %s", len(rows), presentation_id)
        return sorted_sections(data or rows)

    async def delete_presentation(self, wedding_id: str) -> bool:
        """Remove the wedding's presentation, its sections and its PDF."""
        data, error = await self.backend.select(self.TABLE, filters={"wedding_id": wedding_id}, single=True)
        if error:
            return False
        if not data:
            return True
        await self.backend.delete(self.SECTIONS_TABLE, {"presentation_id": data["id"]})
        _, error = await self.backend.delete(self.TABLE, {"id": data["id"]})
        if error:
            return False
        if data.get("pdf_file_path"):
            _, storage_error = await self.backend.remove_objects(PRESENTATIONS_BUCKET, [data["pdf_file_path"]])
            if storage_error:
                logger.warning("PDF of presentation %s was not removed", data["id"])
        logger.info("Deleted presentation of wedding %s", wedding_id)
        return True
