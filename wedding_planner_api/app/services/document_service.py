"""
Service for wedding documents.

A document is either an uploaded file kept in the documents bucket
(``file_path``) or an external link.  Uploaded files are served through
signed URLs, generated on every uncached read and valid for
``settings.signed_url_ttl`` seconds.  Documents are split into a pinned
and an unpinned list, each with its own manual order.
"""

import asyncio
import logging
from typing import Any, Dict, List, Optional

from wedding_planner_api.app.core.backend import BackendClient
from wedding_planner_api.app.core.cache import TTLCache, documents_key
from wedding_planner_api.app.core.capabilities import ORDER_COLUMN, SchemaCapabilities
from wedding_planner_api.app.core.config import Settings, settings as default_settings
from wedding_planner_api.app.state.collections import sort_by_order
from wedding_planner_api.app.utils.links import normalize_href, to_download_url
from wedding_planner_api.app.utils.tasks import next_order

logger = logging.getLogger(__name__)


def document_partition(document: Dict[str, Any]) -> bool:
    return bool(document.get("pinned"))


class DocumentService:
    TABLE = "documents"

    def __init__(
        self,
        backend: BackendClient,
        cache: TTLCache,
        capabilities: SchemaCapabilities,
        config: Settings = default_settings,
    ) -> None:
        self.backend = backend
        self.cache = cache
        self.capabilities = capabilities
        self.config = config

    async def _with_file_url(self, document: Dict[str, Any]) -> Dict[str, Any]:
        if not document.get("file_path"):
            return dict(document, file_url=None)
        url, error = await self.backend.create_signed_url(
            self.config.documents_bucket, document["file_path"], self.config.signed_url_ttl
        )
        if error:
            logger.warning("No signed URL for document %s", document.get("id"))
        return dict(document, file_url=url)

    async def get_wedding_documents(
        self, wedding_id: str, use_cache: bool = True, use_rpc: bool = False
    ) -> List[Dict[str, Any]]:
        """Documents of a wedding: pinned first, each list in display order."""
        key = documents_key(wedding_id)
        if use_cache:
            cached = self.cache.get(key)
            if cached is not None:
                return cached
        logger.debug("Fetching documents for wedding %s", wedding_id)
        if use_rpc:
            data, error = await self.backend.rpc("get_wedding_documents", {"p_wedding_id": wedding_id})
        else:
            data, error = await self.backend.select(
                self.TABLE, filters={"wedding_id": wedding_id}, order="created_at", descending=True
            )
        if error:
            return []
        documents = await asyncio.gather(*(self._with_file_url(doc) for doc in data or []))
        documents = list(documents)
        ordered = sort_by_order([d for d in documents if document_partition(d)]) + sort_by_order(
            [d for d in documents if not document_partition(d)]
        )
        self.cache.set(key, ordered, self.config.documents_cache_ttl_ms)
        return ordered

    async def get_document(self, document_id: str) -> Optional[Dict[str, Any]]:
        data, error = await self.backend.select(self.TABLE, filters={"id": document_id}, single=True)
        if error or not data:
            return None
        return data

    async def create_document(self, payload: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """Create a document at the end of its pinned/unpinned list."""
        row = dict(payload)
        wedding_id = row.get("wedding_id")
        if row.get(ORDER_COLUMN) is None and self.capabilities.supports_ordering(self.TABLE):
            existing = await self.get_wedding_documents(wedding_id)
            pinned = bool(row.get("pinned"))
            order = next_order([d for d in existing if document_partition(d) == pinned])
            if order is not None:
                row[ORDER_COLUMN] = order
        data, error = await self.backend.insert(self.TABLE, row)
        if error or not data:
            return None
        logger.info("Created document %s for wedding %s", data.get("id"), wedding_id)
        self.cache.invalidate(documents_key(wedding_id))
        return data

    async def update_document(
        self, document_id: str, updates: Dict[str, Any], wedding_id: Optional[str] = None
    ) -> Optional[Dict[str, Any]]:
        match = {"id": document_id}
        if wedding_id:
            match["wedding_id"] = wedding_id
        data, error = await self.backend.update(self.TABLE, match, updates)
        if error or not data:
            return None
        logger.info("Updated document %s", document_id)
        if data.get("wedding_id"):
            self.cache.invalidate(documents_key(data["wedding_id"]))
        return data

    async def delete_document(self, document_id: str, wedding_id: str) -> bool:
        """Delete the stored file (if any) and then the row.

        Only a document of ``wedding_id`` is deleted.  A storage failure
        is logged but does not stop the row deletion.
        """
        document = await self.get_document(document_id)
        if document is None or document.get("wedding_id") != wedding_id:
            return False
        if document.get("file_path"):
            _, error = await self.backend.remove_objects(self.config.documents_bucket, [document["file_path"]])
            if error:
                logger.error("Could not remove file of document %s", document_id)
        _, error = await self.backend.delete(self.TABLE, {"id": document_id, "wedding_id": wedding_id})
        if error:
            return False
        logger.info("Deleted document %s", document_id)
        self.cache.invalidate(documents_key(wedding_id))
        return True

    async def get_download_url(self, document: Dict[str, Any]) -> Optional[str]:
        """Where the download button should send the browser."""
        if document.get("file_path"):
            url, _ = await self.backend.create_signed_url(
                self.config.documents_bucket, document["file_path"], self.config.signed_url_ttl
            )
            return url
        link = document.get("link")
        if not link:
            return None
        return to_download_url(normalize_href(link))
