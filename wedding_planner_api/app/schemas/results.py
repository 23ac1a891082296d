"""
Result of a list-level operation.

Toggles, reorders, moves and optimistic deletes never fail the HTTP
request.  They report whether the change stuck, an optional banner
message for the user and the list as it should now be displayed.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel

from wedding_planner_api.app.state.optimistic import OptimisticOutcome


class ListOperationResult(BaseModel):
    success: bool
    error: Optional[str] = None
    noop: bool = False
    degraded: bool = False
    items: List[Dict[str, Any]] = []

    @classmethod
    def from_outcome(cls, outcome: OptimisticOutcome, items: List[Dict[str, Any]]) -> "ListOperationResult":
        return cls(
            success=outcome.success,
            error=outcome.error,
            noop=outcome.noop,
            degraded=outcome.degraded,
            items=items,
        )
