"""
Service information endpoint.

Reports liveness together with the schema capabilities detected at
start-up, so operators can see at a glance whether manual ordering is
persisted or only kept for the current view.
"""

from typing import Any, Dict

from fastapi import APIRouter, Depends

from wedding_planner_api.app.core.capabilities import SchemaCapabilities
from wedding_planner_api.app.core.config import settings
from wedding_planner_api.app.core.deps import get_capabilities

router = APIRouter()


@router.get("/health", response_model=Dict[str, Any])
async def health(capabilities: SchemaCapabilities = Depends(get_capabilities)) -> Dict[str, Any]:
    """Liveness check.  Does not call the backend."""
    return {
        "status": "ok",
        "name": settings.project_name,
        "version": settings.api_version,
        "ordering": capabilities.as_dict(),
    }
