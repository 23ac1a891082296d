"""
In-memory cache with per-entry expiry.

A single ``TTLCache`` is created when the application starts and handed
to every data-access service.  Services consult it before a remote read,
populate it after a successful read and invalidate the affected keys
after any write.  The cache knows nothing about what it stores; keeping
invalidation correct is the caller's job.

The clock is injected so tests can move time forward deterministically.
It must return milliseconds.

Every ``purge_every``-th ``set`` also sweeps out expired entries, so keys
that are never read again do not accumulate.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, Optional

logger = logging.getLogger(__name__)


def monotonic_ms() -> float:
    """Default clock: monotonic time in milliseconds."""
    return time.monotonic() * 1000.0


@dataclass
class CacheEntry:
    value: Any
    expires_at: float


class TTLCache:
    """Key/value store whose entries disappear after their TTL."""

    def __init__(self, clock: Callable[[], float] = monotonic_ms, purge_every: int = 100) -> None:
        self._clock = clock
        self._entries: Dict[str, CacheEntry] = {}
        self._purge_every = purge_every
        self._sets = 0

    def get(self, key: str) -> Optional[Any]:
        """Return the cached value, or ``None`` if missing or expired.

        Expired entries are evicted on the way out, so a miss and an
        expired entry are indistinguishable to the caller.
        """
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self._clock() >= entry.expires_at:
            self._entries.pop(key, None)
            logger.debug("Cache entry %s expired", key)
            return None
        return entry.value

    def set(self, key: str, value: Any, ttl_ms: float) -> None:
        """Store ``value`` under ``key`` for ``ttl_ms`` milliseconds."""
        self._entries[key] = CacheEntry(value=value, expires_at=self._clock() + ttl_ms)
        self._sets += 1
        if self._purge_every > 0 and self._sets % self._purge_every == 0:
            removed = self.purge_expired()
            if removed:
                logger.debug("Purged %d expired cache entries", removed)

    def invalidate(self, key: str) -> None:
        """Drop ``key`` regardless of its expiry.  Absent keys are ignored."""
        self._entries.pop(key, None)

    def invalidate_many(self, keys: Iterable[str]) -> None:
        for key in keys:
            self.invalidate(key)

    def clear(self) -> None:
        self._entries.clear()

    def purge_expired(self) -> int:
        """Remove every expired entry and return how many were removed."""
        now = self._clock()
        expired = [key for key, entry in self._entries.items() if now >= entry.expires_at]
        for key in expired:
            del self._entries[key]
        return len(expired)

    def __contains__(self, key: str) -> bool:
        return self.get(key) is not None

    def __len__(self) -> int:
        return len(self._entries)


# ---------------------------------------------------------------------------
# Cache key helpers
# ---------------------------------------------------------------------------

def wedding_key(client_id: str) -> str:
    return f"wedding_{client_id}"


def wedding_by_id_key(wedding_id: str) -> str:
    return f"wedding_by_id_{wedding_id}"


def tasks_key(wedding_id: str) -> str:
    return f"tasks_{wedding_id}"


def documents_key(wedding_id: str) -> str:
    return f"documents_{wedding_id}"


def organizer_tasks_key(organizer_id: str) -> str:
    return f"organizer_tasks_{organizer_id}"


def task_groups_key(organizer_id: str) -> str:
    return f"task_groups_{organizer_id}"
