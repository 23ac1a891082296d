"""
Per-request service construction.

Services are cheap objects; each request gets its own, built around a
backend client bound to the caller's access token and the shared cache
and capabilities.
"""

from typing import Any, Dict

from fastapi import Depends, HTTPException, Request, status

from wedding_planner_api.app.core.backend import BackendClient
from wedding_planner_api.app.core.cache import TTLCache
from wedding_planner_api.app.core.capabilities import SchemaCapabilities
from wedding_planner_api.app.core.deps import get_backend, get_cache, get_capabilities
from wedding_planner_api.app.core.security import get_current_user
from wedding_planner_api.app.services.client_service import ClientService
from wedding_planner_api.app.services.document_service import DocumentService
from wedding_planner_api.app.services.ordering_service import OrderingService
from wedding_planner_api.app.services.presentation_service import PresentationService
from wedding_planner_api.app.services.task_group_service import TaskGroupService
from wedding_planner_api.app.services.task_service import TaskService
from wedding_planner_api.app.services.wedding_service import WeddingService


def get_user_backend(
    request: Request, current_user: Dict[str, Any] = Depends(get_current_user)
) -> BackendClient:
    return get_backend(request).for_token(current_user.get("access_token"))


def get_wedding_service(
    backend: BackendClient = Depends(get_user_backend), cache: TTLCache = Depends(get_cache)
) -> WeddingService:
    return WeddingService(backend, cache)


def get_task_service(
    backend: BackendClient = Depends(get_user_backend),
    cache: TTLCache = Depends(get_cache),
    capabilities: SchemaCapabilities = Depends(get_capabilities),
) -> TaskService:
    return TaskService(backend, cache, capabilities)


def get_task_group_service(
    backend: BackendClient = Depends(get_user_backend),
    cache: TTLCache = Depends(get_cache),
    capabilities: SchemaCapabilities = Depends(get_capabilities),
) -> TaskGroupService:
    return TaskGroupService(backend, cache, capabilities)


def get_document_service(
    backend: BackendClient = Depends(get_user_backend),
    cache: TTLCache = Depends(get_cache),
    capabilities: SchemaCapabilities = Depends(get_capabilities),
) -> DocumentService:
    return DocumentService(backend, cache, capabilities)


def get_ordering_service(
    backend: BackendClient = Depends(get_user_backend),
    cache: TTLCache = Depends(get_cache),
    capabilities: SchemaCapabilities = Depends(get_capabilities),
) -> OrderingService:
    return OrderingService(backend, cache, capabilities)


def get_presentation_service(backend: BackendClient = Depends(get_user_backend)) -> PresentationService:
    return PresentationService(backend)


def get_client_service(backend: BackendClient = Depends(get_user_backend)) -> ClientService:
    return ClientService(backend)


async def get_accessible_wedding(
    wedding_id: str,
    current_user: Dict[str, Any] = Depends(get_current_user),
    weddings: WeddingService = Depends(get_wedding_service),
) -> Dict[str, Any]:
    """Resolve the ``wedding_id`` path parameter or fail with 404."""
    wedding = await weddings.get_accessible_wedding(current_user, wedding_id)
    if wedding is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Wedding not found")
    return wedding


async def get_wedding_task(
    task_id: str,
    wedding: Dict[str, Any] = Depends(get_accessible_wedding),
    tasks: TaskService = Depends(get_task_service),
) -> Dict[str, Any]:
    """Resolve ``task_id`` within the route's wedding or fail with 404."""
    task = await tasks.get_task(task_id)
    if task is None or task.get("wedding_id") != wedding["id"]:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Task not found")
    return task


async def get_wedding_document(
    document_id: str,
    wedding: Dict[str, Any] = Depends(get_accessible_wedding),
    documents: DocumentService = Depends(get_document_service),
) -> Dict[str, Any]:
    """Resolve ``document_id`` within the route's wedding or fail with 404."""
    document = await documents.get_document(document_id)
    if document is None or document.get("wedding_id") != wedding["id"]:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Document not found")
    return document
