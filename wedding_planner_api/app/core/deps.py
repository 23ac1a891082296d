"""
Accessors for the objects built once at start-up.

``create_app`` stores the shared cache, backend client, schema
capabilities and preference store on ``app.state``.  The functions
below fetch them from the request so they can be used with ``Depends``
and swapped with ``app.dependency_overrides`` in tests.
"""

from fastapi import Request

from wedding_planner_api.app.state.preferences import NOTES_KEY, DebouncedNotesSaver, MemoryStore

from .backend import BackendClient
from .cache import TTLCache
from .capabilities import SchemaCapabilities
from .config import settings


def get_cache(request: Request) -> TTLCache:
    return request.app.state.cache


def get_backend(request: Request) -> BackendClient:
    """Backend client bound to the anonymous key."""
    return request.app.state.backend


def get_capabilities(request: Request) -> SchemaCapabilities:
    return request.app.state.capabilities


def get_local_store(request: Request) -> MemoryStore:
    """Persistent key/value store (language, notes without a wedding)."""
    return request.app.state.local_store


def notes_saver_for(request: Request, key: str, storage_key: str = NOTES_KEY) -> DebouncedNotesSaver:
    """Debounced notes saver for ``key``, created on first use.

    Savers of other keys that have already fired are dropped here.
    """
    savers = request.app.state.notes_savers
    for idle in [k for k, saver in savers.items() if k != key and not saver.pending]:
        del savers[idle]
    if key not in savers:
        savers[key] = DebouncedNotesSaver(
            get_local_store(request), delay_ms=settings.notes_debounce_ms, storage_key=storage_key
        )
    return savers[key]
