"""
Main entrypoint for the Wedding Planner Dashboard API.

This module assembles the FastAPI application, sets up logging and
includes versioned routers.  The ``create_app`` function builds and
configures the app, which is then instantiated at module import time as
``app``, so it can be served with uvicorn::

    uvicorn wedding_planner_api.app.main:app --reload

Shared objects (the backend client, the TTL cache, the schema
capabilities and the preference store) are created once, on start-up,
and kept on ``app.state``.
"""

import logging
from typing import Callable, Optional

from fastapi import FastAPI

from .api.v1.router import router as v1_router
from .core.backend import BackendClient
from .core.cache import TTLCache, monotonic_ms
from .core.capabilities import SchemaCapabilities
from .core.config import settings
from .core.logging_config import setup_logging
from .state.preferences import JsonFileStore, MemoryStore

logger = logging.getLogger(__name__)


def create_app(
    backend: Optional[BackendClient] = None,
    clock: Callable[[], float] = monotonic_ms,
    local_store: Optional[MemoryStore] = None,
) -> FastAPI:
    """Create and configure a FastAPI application.

    Parameters
    ----------
    backend : Optional[BackendClient]
        Backend client to use instead of one built from settings.
    clock : Callable[[], float]
        Millisecond clock for the cache.
    local_store : Optional[MemoryStore]
        Preference store to use instead of the JSON file from settings.

    Returns
    -------
    FastAPI
        A configured FastAPI application instance.
    """
    setup_logging(settings.log_level, settings.log_file)

    app = FastAPI(title=settings.project_name, version=settings.api_version, debug=settings.debug)
    app.include_router(v1_router, prefix="/api/v1")

    @app.on_event("startup")
    async def startup_event() -> None:
        app.state.backend = backend or BackendClient(
            base_url=settings.backend_url, api_key=settings.backend_anon_key
        )
        app.state.cache = TTLCache(clock, purge_every=settings.cache_purge_every)
        app.state.local_store = local_store if local_store is not None else JsonFileStore(settings.preferences_path)
        app.state.notes_savers = {}
        # Один раз при старте: какие необязательные колонки есть в схеме.
        app.state.capabilities = await SchemaCapabilities.load(app.state.backend)
        logger.info("Ordering support: %s", app.state.capabilities.as_dict())

    @app.on_event("shutdown")
    async def shutdown_event() -> None:
        for key, saver in app.state.notes_savers.items():
            if not await saver.flush():
                logger.error("Pending notes for %s were lost on shutdown", key)
        await app.state.backend.aclose()

    return app


# Create the application instance at import time so that tools such as
# uvicorn can discover it without calling create_app manually.
app = create_app()
