"""
Apply locally, commit remotely, roll back on failure.

Every list mutation in the dashboard (status toggles, reorders, moves
between groups, deletes) follows the same sequence, captured once here:

1. take a snapshot of the state about to change;
2. apply the change locally, synchronously;
3. await the remote commit, which returns ``(result, error)``;
4. on success, optionally reconcile the local entity with the canonical
   row returned by the backend;
5. on failure (an error, an empty result or an exception), restore the
   snapshot, or hand it to a ``recover`` strategy such as a full reload,
   log the failure and report it.  Nothing is raised to the caller.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional, Tuple

logger = logging.getLogger(__name__)

CommitFn = Callable[[], Awaitable[Tuple[Any, Optional[dict]]]]


@dataclass
class OptimisticOutcome:
    """What happened to an optimistic mutation."""

    success: bool
    result: Any = None
    error: Optional[str] = None
    noop: bool = False
    degraded: bool = False


async def apply_optimistically(
    *,
    snapshot: Callable[[], Any],
    restore: Callable[[Any], None],
    mutate: Callable[[], None],
    commit: CommitFn,
    reconcile: Optional[Callable[[Any], None]] = None,
    recover: Optional[Callable[[Any], Awaitable[None]]] = None,
    label: str = "update",
    failure_message: Optional[str] = None,
) -> OptimisticOutcome:
    """Run one optimistic mutation.

    Parameters
    ----------
    snapshot, restore
        Getter and setter for the state the mutation touches.
    mutate
        Applies the new value locally.  Must not suspend.
    commit
        Issues the remote write and returns ``(result, error)``.
    reconcile
        Called with the result when the commit succeeded and returned a
        row, to replace the optimistic copy with the canonical one.
    recover
        Failure strategy.  Receives the snapshot; defaults to
        ``restore``.
    label
        Used in log messages.
    failure_message
        Banner text reported on failure instead of the backend message.
    """
    previous = snapshot()
    mutate()
    try:
        result, error = await commit()
    except Exception as exc:
        logger.exception("%s raised", label)
        result, error = None, {"status_code": None, "code": None, "message": str(exc)}

    if error is None and result:
        if reconcile is not None and isinstance(result, dict):
            reconcile(result)
        return OptimisticOutcome(success=True, result=result)

    message = (error or {}).get("message") or "empty result"
    logger.error("%s failed, reverting local state: %s", label, message)
    if recover is not None:
        await recover(previous)
    else:
        restore(previous)
    return OptimisticOutcome(success=False, error=failure_message or message)
