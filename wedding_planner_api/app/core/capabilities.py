"""
Schema capability flags.

Some columns are optional on the remote schema: older projects were
created before manual ordering existed, so ``tasks``, ``documents`` and
``task_groups`` may lack the ``order`` column.  Instead of guessing from
error messages, the application inspects the schema document published
by the row API once at start-up and keeps the result for the lifetime of
the process.

Tables that could not be inspected are assumed to have every column; if
a write later fails with an undefined-column error the column is marked
missing so later operations skip it.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, Optional, Set, Tuple

logger = logging.getLogger(__name__)

ORDER_COLUMN = "order"
ORDERED_TABLES = ("tasks", "documents", "task_groups")


class SchemaCapabilities:
    """Known columns per table plus columns found missing at runtime."""

    def __init__(self, columns: Optional[Dict[str, Iterable[str]]] = None) -> None:
        self._columns: Dict[str, Set[str]] = {
            table: set(cols) for table, cols in (columns or {}).items()
        }
        self._missing: Set[Tuple[str, str]] = set()

    @classmethod
    async def load(cls, backend: Any) -> "SchemaCapabilities":
        """Build capabilities from the backend's schema document.

        The document is an OpenAPI description; table columns are listed
        under ``definitions`` (Swagger 2) or ``components.schemas``
        (OpenAPI 3).  If it cannot be fetched every column is assumed to
        exist.
        """
        data, error = await backend.fetch_schema()
        if error or not isinstance(data, dict):
            logger.warning("Schema introspection unavailable; assuming all optional columns exist")
            return cls()
        definitions = data.get("definitions") or data.get("components", {}).get("schemas", {}) or {}
        columns: Dict[str, Iterable[str]] = {}
        for table, definition in definitions.items():
            if isinstance(definition, dict):
                columns[table] = (definition.get("properties") or {}).keys()
        capabilities = cls(columns)
        for table in ORDERED_TABLES:
            if not capabilities.supports_ordering(table):
                logger.warning("Table %s has no %s column; manual ordering disabled", table, ORDER_COLUMN)
        return capabilities

    def has_column(self, table: str, column: str) -> bool:
        if (table, column) in self._missing:
            return False
        known = self._columns.get(table)
        if known is None:
            return True
        return column in known

    def supports_ordering(self, table: str) -> bool:
        return self.has_column(table, ORDER_COLUMN)

    def mark_missing(self, table: str, column: str) -> None:
        if (table, column) not in self._missing:
            logger.warning("Marking column %s.%s as missing", table, column)
        self._missing.add((table, column))

    def as_dict(self) -> Dict[str, bool]:
        return {table: self.supports_ordering(table) for table in ORDERED_TABLES}
