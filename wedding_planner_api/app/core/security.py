"""
Authentication and role checks.

Users sign in against the backend's auth service; the API never sees a
password.  Each request carries the backend access token as a bearer
token.  ``get_current_user`` resolves it to the auth user through
``/auth/v1/user`` and looks up the caller's role in the ``profiles``
table with the caller's own token, so row-level policies apply.

Three roles exist: ``client`` (the couple), ``organizer`` and
``main_organizer``.  Endpoints restrict access with ``require_roles``.
"""

import logging
from typing import Any, Callable, Dict

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from .deps import get_backend

logger = logging.getLogger(__name__)

CLIENT = "client"
ORGANIZER = "organizer"
MAIN_ORGANIZER = "main_organizer"

security = HTTPBearer(auto_error=False)


async def get_current_user(
    request: Request,
    credentials: HTTPAuthorizationCredentials = Depends(security),
) -> Dict[str, Any]:
    """Dependency that retrieves the current authenticated user.

    Raises 401 if the ``Authorization`` header is missing or the backend
    rejects the token, and 503 if the profile lookup fails.  A user
    without a profile row is a client.  On success returns a dictionary
    with ``user_id``, ``sub`` (email), ``role``, ``name`` and the raw
    ``access_token`` so that downstream dependencies can bind a backend
    client to it.
    """
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    token = credentials.credentials
    backend = get_backend(request)
    user, error = await backend.get_user(token)
    if error or not user or not user.get("id"):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    profile, error = await backend.for_token(token).select(
        "profiles", filters={"id": user["id"]}, single=True
    )
    if error:
        logger.error("Profile lookup failed for %s: %s", user["id"], error.get("message"))
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Could not resolve user role",
        )
    profile = profile or {}
    metadata = user.get("user_metadata") or {}
    # Роль только из профиля: метаданные регистрации пишет сам пользователь.
    role = profile.get("role") or CLIENT
    return {
        "user_id": user["id"],
        "sub": user.get("email") or profile.get("email"),
        "name": profile.get("name") or metadata.get("name"),
        "role": role,
        "access_token": token,
    }


# ---------------------------------------------------------------------------
# Role-based access control helpers
# ---------------------------------------------------------------------------

def require_roles(*roles: str) -> Callable[..., Dict[str, Any]]:
    """Dependency factory enforcing that the current user has one of ``roles``.

    Use it via ``Depends(require_roles(ORGANIZER, MAIN_ORGANIZER))``.
    Raises 403 for any other role and returns the user payload on
    success.
    """

    def _role_dependency(current_user: Dict[str, Any] = Depends(get_current_user)) -> Dict[str, Any]:
        if current_user.get("role") not in roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Insufficient permissions",
            )
        return current_user

    return _role_dependency
