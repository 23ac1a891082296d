"""
Service for client accounts.

Clients are profiles with the ``client`` role.  Creating a client means
three backend calls: sign the user up with the auth service, create the
profile row (a database trigger may already have done so, which is
fine) and create the wedding that links the client to an organizer.
"""

import logging
from typing import Any, Dict, List, Optional

from wedding_planner_api.app.core.backend import UNIQUE_VIOLATION_CODE, BackendClient
from wedding_planner_api.app.core.security import CLIENT

logger = logging.getLogger(__name__)


class ClientService:
    PROFILES_TABLE = "profiles"

    def __init__(self, backend: BackendClient) -> None:
        self.backend = backend

    async def list_clients(self) -> List[Dict[str, Any]]:
        data, error = await self.backend.select(
            self.PROFILES_TABLE, filters={"role": CLIENT}, order="created_at", descending=True
        )
        if error:
            return []
        return data or []

    async def get_client_by_id(self, client_id: str) -> Optional[Dict[str, Any]]:
        data, error = await self.backend.select(self.PROFILES_TABLE, filters={"id": client_id}, single=True)
        if error or not data:
            return None
        return data

    async def create_client(
        self, email: str, password: str, name: str, wedding: Dict[str, Any]
    ) -> Optional[Dict[str, Any]]:
        """Create the auth user, its profile and its wedding.

        Parameters
        ----------
        email, password : str
            Credentials of the new client.
        name : str
            Display name, usually ``"<partner 1> & <partner 2>"``.
        wedding : dict
            Wedding columns; ``client_id`` is filled in here.

        Returns
        -------
        Optional[dict]
            ``{"user": ..., "profile": ..., "wedding": ...}`` or ``None``
            if signup or the wedding insert failed.
        """
        user, error = await self.backend.sign_up(email, password, {"name": name, "role": CLIENT})
        if error or not user or not user.get("id"):
            return None
        user_id = user["id"]
        logger.info("Signed up client %s", user_id)

        profile = {"id": user_id, "email": email, "name": name, "role": CLIENT}
        stored, error = await self.backend.insert(self.PROFILES_TABLE, profile)
        if error and error.get("code") != UNIQUE_VIOLATION_CODE:
            logger.warning("Profile for %s not created: %s", user_id, error.get("message"))
        profile = stored or profile

        wedding_row, error = await self.backend.insert("weddings", dict(wedding, client_id=user_id))
        if error or not wedding_row:
            logger.error("Wedding for client %s not created", user_id)
            return None
        return {"user": user, "profile": profile, "wedding": wedding_row}
