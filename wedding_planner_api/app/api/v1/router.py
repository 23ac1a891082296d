"""
Top-level router for version 1 of the API.

This router aggregates the domain routers under a unified prefix.
Routers whose paths span several resources (wedding tasks, documents,
presentations) define their full paths internally and are included
without a prefix.
"""

from fastapi import APIRouter

from .endpoints import (
    clients,
    documents,
    info,
    organizer_tasks,
    preferences,
    presentations,
    task_groups,
    tasks,
    weddings,
)

router = APIRouter()

router.include_router(info.router, prefix="/info", tags=["info"])
# ``/weddings/me`` must be registered before any ``/weddings/{wedding_id}`` route.
router.include_router(weddings.router, prefix="/weddings", tags=["weddings"])
router.include_router(tasks.router, tags=["tasks"])
router.include_router(documents.router, tags=["documents"])
router.include_router(presentations.router, tags=["presentations"])
router.include_router(task_groups.router, prefix="/task-groups", tags=["task groups"])
router.include_router(organizer_tasks.router, prefix="/organizer-tasks", tags=["organizer tasks"])
router.include_router(clients.router, prefix="/clients", tags=["clients"])
router.include_router(preferences.router, prefix="/preferences", tags=["preferences"])
