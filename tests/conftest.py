"""
Test configuration: repo root on sys.path plus in-memory fakes.

``FakeBackend`` mirrors the public surface of ``BackendClient`` (the
``(data, error)`` tuples included) over plain dictionaries, so services,
the ordering engine and the HTTP layer can be exercised without a
network.  Failures are injected per table and operation.
"""

import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

import pytest

# Add repo root to sys.path so tests can import wedding_planner_api.*
REPO_ROOT = Path(__file__).parent.parent
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from wedding_planner_api.app.core.cache import TTLCache  # noqa: E402
from wedding_planner_api.app.core.capabilities import SchemaCapabilities  # noqa: E402


class FakeClock:
    """Millisecond clock moved by hand."""

    def __init__(self, now: float = 0.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, ms: float) -> None:
        self.now += ms


def backend_error(message: str = "boom", code: Optional[str] = None, status_code: int = 400) -> Dict[str, Any]:
    return {"status_code": status_code, "code": code, "message": message}


class FakeBackend:
    """In-memory stand-in for ``BackendClient``."""

    def __init__(self, tables: Optional[Dict[str, List[Dict[str, Any]]]] = None) -> None:
        self.tables: Dict[str, List[Dict[str, Any]]] = {
            name: [dict(row) for row in rows] for name, rows in (tables or {}).items()
        }
        self.calls: List[tuple] = []
        self.failures: Dict[tuple, Dict[str, Any]] = {}
        self.fail_ids: Dict[tuple, set] = {}
        self.schema: Optional[Dict[str, Any]] = None
        self.users: Dict[str, Dict[str, Any]] = {}
        self.removed_objects: List[tuple] = []
        self.uploaded: Dict[tuple, bytes] = {}
        self.tokens: List[Optional[str]] = []
        self._next_id = 0

    # -- helpers -----------------------------------------------------------
    def fail(self, table: str, op: str, message: str = "boom", code: Optional[str] = None, ids=None) -> None:
        """Make ``op`` on ``table`` fail, optionally only for some row ids."""
        self.failures[(table, op)] = backend_error(message, code)
        if ids is not None:
            self.fail_ids[(table, op)] = set(ids)

    def _failure(self, table: str, op: str, row_id: Any = None) -> Optional[Dict[str, Any]]:
        error = self.failures.get((table, op))
        if error is None:
            return None
        ids = self.fail_ids.get((table, op))
        if ids is not None and row_id not in ids:
            return None
        return error

    def rows(self, table: str) -> List[Dict[str, Any]]:
        return self.tables.setdefault(table, [])

    def row(self, table: str, row_id: Any) -> Optional[Dict[str, Any]]:
        for row in self.rows(table):
            if row.get("id") == row_id:
                return row
        return None

    def calls_for(self, op: str, table: Optional[str] = None) -> List[tuple]:
        return [call for call in self.calls if call[0] == op and (table is None or call[1] == table)]

    def _new_id(self, table: str) -> str:
        self._next_id += 1
        return f"{table}-{self._next_id}"

    @staticmethod
    def _matches(row: Dict[str, Any], filters: Dict[str, Any]) -> bool:
        return all(row.get(column) == value for column, value in filters.items())

    # -- BackendClient surface ---------------------------------------------
    def for_token(self, access_token: Optional[str]) -> "FakeBackend":
        self.tokens.append(access_token)
        return self

    async def aclose(self) -> None:
        self.calls.append(("aclose", None))

    async def select(
        self,
        table: str,
        *,
        filters=None,
        order=None,
        descending=False,
        single=False,
        columns="*",
        limit=None,
    ):
        self.calls.append(("select", table, dict(filters or {})))
        error = self._failure(table, "select")
        if error:
            return None, error
        rows = [dict(row) for row in self.rows(table) if self._matches(row, filters or {})]
        if order:
            rows.sort(key=lambda row: (row.get(order) is None, row.get(order) or ""), reverse=descending)
        if limit is not None:
            rows = rows[:limit]
        if single:
            return (rows[0] if rows else None), None
        return rows, None

    async def insert(self, table: str, row: Any):
        self.calls.append(("insert", table, row))
        error = self._failure(table, "insert")
        if error:
            return None, error
        bulk = isinstance(row, list)
        stored = []
        for item in row if bulk else [row]:
            item = dict(item)
            item.setdefault("id", self._new_id(table))
            self.rows(table).append(item)
            stored.append(dict(item))
        return (stored if bulk else stored[0]), None

    async def update(self, table: str, match, values):
        self.calls.append(("update", table, dict(match), dict(values)))
        error = self._failure(table, "update", match.get("id"))
        if error:
            return None, error
        first = None
        for row in self.rows(table):
            if self._matches(row, match):
                row.update(values)
                if first is None:
                    first = dict(row)
        return first, None

    async def delete(self, table: str, match):
        self.calls.append(("delete", table, dict(match)))
        error = self._failure(table, "delete", match.get("id"))
        if error:
            return None, error
        self.tables[table] = [row for row in self.rows(table) if not self._matches(row, match)]
        return True, None

    async def rpc(self, name: str, params=None):
        params = dict(params or {})
        self.calls.append(("rpc", name, params))
        error = self._failure(name, "rpc")
        if error:
            return None, error
        if name == "get_all_weddings":
            return [dict(row) for row in self.rows("weddings")], None
        if name == "get_wedding_by_id":
            row = self.row("weddings", params["p_wedding_id"])
            return ([dict(row)] if row else []), None
        if name == "get_wedding_tasks":
            return [dict(r) for r in self.rows("tasks") if r.get("wedding_id") == params["p_wedding_id"]], None
        if name == "get_wedding_documents":
            return [dict(r) for r in self.rows("documents") if r.get("wedding_id") == params["p_wedding_id"]], None
        if name == "create_wedding":
            data = dict(params["p_data"])
            data.setdefault("id", self._new_id("weddings"))
            self.rows("weddings").append(data)
            return dict(data), None
        if name == "update_wedding":
            row = self.row("weddings", params["p_wedding_id"])
            if row is None:
                return None, None
            row.update(params["p_updates"])
            return [dict(row)], None
        if name == "delete_wedding":
            self.tables["weddings"] = [r for r in self.rows("weddings") if r.get("id") != params["p_wedding_id"]]
            return None, None
        return None, backend_error(f"unknown procedure {name}", status_code=404)

    async def fetch_schema(self):
        if self.schema is None:
            return None, backend_error("schema unavailable", status_code=404)
        return self.schema, None

    async def create_signed_url(self, bucket: str, path: str, expires_in: int):
        self.calls.append(("sign", bucket, path))
        error = self._failure(bucket, "sign")
        if error:
            return None, error
        return f"https://files.test/{bucket}/{path}?expires={expires_in}", None

    async def upload_object(self, bucket: str, path: str, data: bytes, content_type: str, upsert: bool = True):
        self.calls.append(("upload", bucket, path, content_type))
        error = self._failure(bucket, "upload", path)
        if error:
            return None, error
        self.uploaded[(bucket, path)] = data
        return path, None

    def public_url(self, bucket: str, path: str) -> str:
        return f"https://files.test/public/{bucket}/{path}"

    async def remove_objects(self, bucket: str, paths):
        self.calls.append(("remove_objects", bucket, list(paths)))
        error = self._failure(bucket, "remove_objects")
        if error:
            return None, error
        self.removed_objects.append((bucket, list(paths)))
        return [], None

    async def get_user(self, access_token: str):
        user = self.users.get(access_token)
        if user is None:
            return None, backend_error("invalid JWT", status_code=401)
        return dict(user), None

    async def sign_up(self, email: str, password: str, metadata=None):
        self.calls.append(("sign_up", email, dict(metadata or {})))
        error = self._failure("auth", "sign_up")
        if error:
            return None, error
        user = {"id": self._new_id("user"), "email": email, "user_metadata": dict(metadata or {})}
        return user, None


def schema_with(**tables: List[str]) -> Dict[str, Any]:
    """Schema document listing ``tables`` and their columns."""
    return {
        "definitions": {
            table: {"properties": {column: {"type": "string"} for column in columns}}
            for table, columns in tables.items()
        }
    }


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def cache(clock) -> TTLCache:
    return TTLCache(clock)


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def capabilities() -> SchemaCapabilities:
    return SchemaCapabilities()
