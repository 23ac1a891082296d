"""Backend-as-a-service client.

All persistence, authentication and file storage live in a remote
backend that exposes a PostgREST-style row API (``/rest/v1``), remote
procedures (``/rest/v1/rpc``), object storage (``/storage/v1``) and an
auth service (``/auth/v1``).  This module wraps those endpoints in a
small asynchronous client built on ``httpx``.

Every call returns a tuple ``(data, error)``.  On success ``error`` is
``None``; on failure ``data`` is ``None`` and ``error`` is a dictionary
with the keys ``status_code``, ``code`` and ``message``.  HTTP and
transport errors are logged here and never raised, so callers only have
to look at the returned tuple.

Row-level security applies to the caller's access token.  A client is
created once at start-up with the anonymous key and then bound to the
token of each request with :meth:`BackendClient.for_token`; bound
clients share the underlying connection pool.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional, Tuple

import httpx


logger = logging.getLogger(__name__)

BackendError = Dict[str, Any]
BackendResult = Tuple[Optional[Any], Optional[BackendError]]

# Error codes the backend uses when a request names a column that does
# not exist (database error and schema-cache error respectively).
UNDEFINED_COLUMN_CODES = {"42703", "PGRST204"}

# Unique constraint violation.
UNIQUE_VIOLATION_CODE = "23505"


def is_undefined_column(error: Optional[BackendError]) -> bool:
    """Return True if ``error`` reports a missing column."""
    return bool(error) and error.get("code") in UNDEFINED_COLUMN_CODES


def unwrap_single(data: Any) -> Optional[Any]:
    """Normalise an RPC/row response to a single record.

    Elevated procedures return either the record itself or an array
    wrapping exactly one record; row endpoints always return arrays.
    """
    if isinstance(data, list):
        return data[0] if data else None
    return data


def _filter_value(value: Any) -> str:
    if value is None:
        return "is.null"
    if isinstance(value, bool):
        return f"eq.{str(value).lower()}"
    return f"eq.{value}"


class BackendClient:
    """Asynchronous client for the backend row, RPC, storage and auth APIs."""

    def __init__(
        self,
        *,
        base_url: str,
        api_key: str,
        access_token: Optional[str] = None,
        http: Optional[httpx.AsyncClient] = None,
    ) -> None:
        """Initialise the client.

        Args:
            base_url: Base URL of the backend project.
            api_key: Anonymous API key, sent as ``apikey`` on every call.
            access_token: Optional user access token.  When set it is sent
                as the bearer token so that row-level policies see the
                user; otherwise the anonymous key is used.
            http: Optional shared ``httpx.AsyncClient``.  One is created
                when omitted.
        """
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.access_token = access_token
        self.http = http or httpx.AsyncClient()

    def for_token(self, access_token: Optional[str]) -> "BackendClient":
        """Return a client bound to ``access_token`` sharing this pool."""
        return BackendClient(
            base_url=self.base_url,
            api_key=self.api_key,
            access_token=access_token,
            http=self.http,
        )

    async def aclose(self) -> None:
        await self.http.aclose()

    # ------------------------------------------------------------------
    # Low level HTTP helper
    # ------------------------------------------------------------------
    def _headers(self, extra: Optional[Mapping[str, str]] = None) -> Dict[str, str]:
        headers = {
            "apikey": self.api_key,
            "Authorization": f"Bearer {self.access_token or self.api_key}",
        }
        if extra:
            headers.update(extra)
        return headers

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        json_body: Any = None,
        content: Optional[bytes] = None,
        headers: Optional[Mapping[str, str]] = None,
    ) -> BackendResult:
        """Perform an HTTP request against the backend.

        Args:
            method: HTTP method (``GET``, ``POST``, ``PATCH``, ``DELETE``).
            path: Path relative to :attr:`base_url` (e.g. ``/rest/v1/tasks``).
            params: Query parameters.
            json_body: JSON body for POST/PATCH/DELETE.
            content: Raw body (file uploads); used instead of ``json_body``.
            headers: Extra headers merged over the defaults.
        Returns:
            A tuple ``(data, error)``.  ``data`` is the parsed JSON body
            (``None`` for empty bodies).
        """
        url = f"{self.base_url}{path}"
        try:
            logger.debug("Sending %s request to %s", method, url)
            response = await self.http.request(
                method,
                url,
                params=params,
                json=json_body,
                content=content,
                headers=self._headers(headers),
            )
            response.raise_for_status()
            if not response.content:
                return None, None
            try:
                return response.json(), None
            except ValueError as exc:
                logger.error("Backend %s %s returned a non-JSON body: %s", method, path, exc)
                return None, {"status_code": response.status_code, "code": None, "message": "Invalid JSON response"}
        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code
            code = None
            message = ""
            try:
                err_json = exc.response.json()
                if isinstance(err_json, dict):
                    code = err_json.get("code") or err_json.get("error_code")
                    if code is not None:
                        code = str(code)
                    message = (
                        err_json.get("message")
                        or err_json.get("msg")
                        or err_json.get("error_description")
                        or str(err_json)
                    )
            except ValueError:
                message = exc.response.text
            if not message:
                message = str(exc)
            logger.error("Backend %s %s failed (%s): %s", method, path, status, message)
            return None, {"status_code": status, "code": code, "message": message}
        except httpx.HTTPError as exc:
            logger.error("Backend %s %s failed: %s", method, path, exc)
            return None, {"status_code": None, "code": None, "message": str(exc)}

    # ------------------------------------------------------------------
    # Row operations
    # ------------------------------------------------------------------
    async def select(
        self,
        table: str,
        *,
        filters: Optional[Mapping[str, Any]] = None,
        order: Optional[str] = None,
        descending: bool = False,
        single: bool = False,
        columns: str = "*",
        limit: Optional[int] = None,
    ) -> BackendResult:
        """Read rows from ``table``.

        ``filters`` are equality filters (``None`` matches SQL NULL).
        With ``single=True`` the first matching row, or ``None``, is
        returned instead of a list.
        """
        params: Dict[str, Any] = {"select": columns}
        for column, value in (filters or {}).items():
            params[column] = _filter_value(value)
        if order:
            params["order"] = f"{order}.{'desc' if descending else 'asc'}"
        if limit is not None:
            params["limit"] = limit
        data, error = await self._request("GET", f"/rest/v1/{table}", params=params)
        if error:
            return None, error
        rows = data or []
        if single:
            return unwrap_single(rows), None
        return rows, None

    async def insert(self, table: str, row: Any) -> BackendResult:
        """Insert ``row`` and return the stored representation.

        ``row`` may also be a list of rows; the stored rows are then
        returned as a list.
        """
        bulk = isinstance(row, list)
        data, error = await self._request(
            "POST",
            f"/rest/v1/{table}",
            json_body=[dict(r) for r in row] if bulk else dict(row),
            headers={"Prefer": "return=representation"},
        )
        if error:
            return None, error
        if bulk:
            return data or [], None
        return unwrap_single(data), None

    async def update(
        self, table: str, match: Mapping[str, Any], values: Mapping[str, Any]
    ) -> BackendResult:
        """Update rows matching ``match`` and return the first updated row.

        When no row matched (for example because a policy hid it), the
        result is ``(None, None)``.
        """
        params = {column: _filter_value(value) for column, value in match.items()}
        data, error = await self._request(
            "PATCH",
            f"/rest/v1/{table}",
            params=params,
            json_body=dict(values),
            headers={"Prefer": "return=representation"},
        )
        if error:
            return None, error
        return unwrap_single(data), None

    async def delete(self, table: str, match: Mapping[str, Any]) -> BackendResult:
        """Delete rows matching ``match``.  Returns ``(True, None)`` on success."""
        params = {column: _filter_value(value) for column, value in match.items()}
        _, error = await self._request("DELETE", f"/rest/v1/{table}", params=params)
        if error:
            return None, error
        return True, None

    async def rpc(self, name: str, params: Optional[Mapping[str, Any]] = None) -> BackendResult:
        """Call a remote procedure with named parameters."""
        return await self._request("POST", f"/rest/v1/rpc/{name}", json_body=dict(params or {}))

    async def fetch_schema(self) -> BackendResult:
        """Return the OpenAPI document describing the exposed tables."""
        return await self._request("GET", "/rest/v1/")

    # ------------------------------------------------------------------
    # Storage
    # ------------------------------------------------------------------
    async def create_signed_url(self, bucket: str, path: str, expires_in: int) -> BackendResult:
        """Issue a time-limited download URL for a stored object."""
        data, error = await self._request(
            "POST",
            f"/storage/v1/object/sign/{bucket}/{path}",
            json_body={"expiresIn": expires_in},
        )
        if error:
            return None, error
        signed = (data or {}).get("signedURL") or (data or {}).get("signedUrl")
        if not signed:
            return None, None
        if signed.startswith("http"):
            return signed, None
        return f"{self.base_url}/storage/v1{signed}", None

    async def upload_object(
        self, bucket: str, path: str, data: bytes, content_type: str, upsert: bool = True
    ) -> BackendResult:
        """Store ``data`` at ``path`` in ``bucket``.  Returns the path on success."""
        _, error = await self._request(
            "POST",
            f"/storage/v1/object/{bucket}/{path}",
            content=data,
            headers={"Content-Type": content_type, "x-upsert": "true" if upsert else "false"},
        )
        if error:
            return None, error
        return path, None

    def public_url(self, bucket: str, path: str) -> str:
        return f"{self.base_url}/storage/v1/object/public/{bucket}/{path}"

    async def remove_objects(self, bucket: str, paths: List[str]) -> BackendResult:
        return await self._request(
            "DELETE", f"/storage/v1/object/{bucket}", json_body={"prefixes": paths}
        )

    # ------------------------------------------------------------------
    # Auth
    # ------------------------------------------------------------------
    async def get_user(self, access_token: str) -> BackendResult:
        """Resolve an access token to the auth user record."""
        bound = self.for_token(access_token)
        return await bound._request("GET", "/auth/v1/user")

    async def sign_up(
        self, email: str, password: str, metadata: Optional[Mapping[str, Any]] = None
    ) -> BackendResult:
        """Create an auth user.  Returns the created user record."""
        data, error = await self._request(
            "POST",
            "/auth/v1/signup",
            json_body={"email": email, "password": password, "data": dict(metadata or {})},
        )
        if error:
            return None, error
        # Depending on email confirmation settings the user is returned
        # directly or nested under ``user``.
        if isinstance(data, dict) and isinstance(data.get("user"), dict):
            return data["user"], None
        return data, None
