"""
Service for weddings.

A wedding is the engagement record linking one client (the couple) to
an organizer.  Clients and organizers read their own weddings through
the row API, where row-level policies decide visibility.  The main
organizer works across all weddings, so administrative reads and all
create/update/delete operations go through elevated remote procedures.

Reads are cached for ``settings.wedding_cache_ttl_ms``; every write
invalidates both the per-client and the per-id entry.
"""

import logging
from typing import Any, Dict, List, Optional

from wedding_planner_api.app.core.backend import BackendClient, unwrap_single
from wedding_planner_api.app.core.cache import TTLCache, wedding_by_id_key, wedding_key
from wedding_planner_api.app.core.config import Settings, settings as default_settings
from wedding_planner_api.app.core.security import CLIENT, MAIN_ORGANIZER, ORGANIZER

logger = logging.getLogger(__name__)


class WeddingService:
    """Reads and writes wedding records."""

    TABLE = "weddings"

    def __init__(self, backend: BackendClient, cache: TTLCache, config: Settings = default_settings) -> None:
        self.backend = backend
        self.cache = cache
        self.config = config

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------
    async def get_client_wedding(self, client_id: str, use_cache: bool = True) -> Optional[Dict[str, Any]]:
        """Return the wedding of a client, or ``None``.

        Parameters
        ----------
        client_id : str
            Profile id of the client.
        use_cache : bool
            Consult the cache first.  The result is cached either way.
        """
        key = wedding_key(client_id)
        if use_cache:
            cached = self.cache.get(key)
            if cached is not None:
                return cached
        logger.debug("Fetching wedding for client %s", client_id)
        data, error = await self.backend.select(self.TABLE, filters={"client_id": client_id}, single=True)
        if error or not data:
            return None
        self.cache.set(key, data, self.config.wedding_cache_ttl_ms)
        return data

    async def get_organizer_weddings(self, organizer_id: str) -> List[Dict[str, Any]]:
        """Weddings assigned to an organizer, newest first."""
        data, error = await self.backend.select(
            self.TABLE, filters={"organizer_id": organizer_id}, order="created_at", descending=True
        )
        if error:
            return []
        return data or []

    async def get_all_weddings(self) -> List[Dict[str, Any]]:
        """Every wedding, through the elevated procedure."""
        data, error = await self.backend.rpc("get_all_weddings")
        if error:
            return []
        if isinstance(data, dict):
            return [data]
        return data or []

    async def get_wedding_by_id(
        self, wedding_id: str, use_rpc: bool = False, use_cache: bool = True
    ) -> Optional[Dict[str, Any]]:
        """Return one wedding or ``None``.

        With ``use_rpc`` the elevated procedure is used so that the main
        organizer can see weddings owned by other organizers.
        """
        key = wedding_by_id_key(wedding_id)
        if use_cache:
            cached = self.cache.get(key)
            if cached is not None:
                return cached
        if use_rpc:
            data, error = await self.backend.rpc("get_wedding_by_id", {"p_wedding_id": wedding_id})
            data = unwrap_single(data)
        else:
            data, error = await self.backend.select(self.TABLE, filters={"id": wedding_id}, single=True)
        if error or not data:
            return None
        self.cache.set(key, data, self.config.wedding_cache_ttl_ms)
        return data

    async def get_accessible_wedding(self, user: Dict[str, Any], wedding_id: str) -> Optional[Dict[str, Any]]:
        """Return the wedding if ``user`` may see it.

        Cached weddings are shared between users, so ownership is checked
        against the record itself: clients see their own wedding,
        organizers the weddings they run, the main organizer all of them.
        """
        role = user.get("role")
        wedding = await self.get_wedding_by_id(wedding_id, use_rpc=role == MAIN_ORGANIZER)
        if wedding is None:
            return None
        if role == MAIN_ORGANIZER:
            return wedding
        if role == ORGANIZER and wedding.get("organizer_id") == user.get("user_id"):
            return wedding
        if role == CLIENT and wedding.get("client_id") == user.get("user_id"):
            return wedding
        logger.warning("User %s denied access to wedding %s", user.get("user_id"), wedding_id)
        return None

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------
    def invalidate(self, wedding: Optional[Dict[str, Any]], wedding_id: Optional[str] = None) -> None:
        keys = []
        if wedding_id or (wedding and wedding.get("id")):
            keys.append(wedding_by_id_key(wedding_id or wedding["id"]))
        if wedding and wedding.get("client_id"):
            keys.append(wedding_key(wedding["client_id"]))
        self.cache.invalidate_many(keys)

    async def create_wedding(self, payload: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        data, error = await self.backend.rpc("create_wedding", {"p_data": payload})
        wedding = unwrap_single(data)
        if error or not wedding:
            return None
        logger.info("Created wedding %s", wedding.get("id"))
        self.invalidate(wedding)
        return wedding

    async def update_wedding(self, wedding_id: str, updates: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        previous = self.cache.get(wedding_by_id_key(wedding_id))
        data, error = await self.backend.rpc(
            "update_wedding", {"p_wedding_id": wedding_id, "p_updates": updates}
        )
        wedding = unwrap_single(data)
        if error or not wedding:
            return None
        logger.info("Updated wedding %s", wedding_id)
        self.invalidate(previous)
        self.invalidate(wedding, wedding_id)
        return wedding

    async def delete_wedding(self, wedding_id: str) -> bool:
        previous = self.cache.get(wedding_by_id_key(wedding_id))
        _, error = await self.backend.rpc("delete_wedding", {"p_wedding_id": wedding_id})
        if error:
            return False
        logger.info("Deleted wedding %s", wedding_id)
        self.invalidate(previous, wedding_id)
        return True

    async def update_notes(self, wedding_id: str, notes: str) -> bool:
        """Persist the free-text notes of a wedding."""
        data, error = await self.backend.update(self.TABLE, {"id": wedding_id}, {"notes": notes})
        if error or not data:
            return False
        logger.info("Saved notes for wedding %s", wedding_id)
        self.invalidate(data, wedding_id)
        return True
