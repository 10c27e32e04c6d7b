"""
Pydantic schema for change-feed events.
Mirrors the payload a realtime database pushes for each changed row.
"""
from typing import Any, Dict, Literal, Optional
from pydantic import BaseModel, Field

class ChangeEvent(BaseModel):
    """
    One change notification for one row of a watched table.

    - INSERT: `new` holds the inserted row, `old` is empty
    - UPDATE: `new` holds the row after the write, `old` the row before it
    - DELETE: `old` holds the removed row (at least its id), `new` is empty
    """
    eventType: Literal["INSERT", "UPDATE", "DELETE"]
    table: str
    new: Dict[str, Any] = Field(default_factory=dict)
    old: Dict[str, Any] = Field(default_factory=dict)

    @property
    def record_id(self) -> Optional[str]:
        """Identifier of the affected row, taken from `new` or, for deletes, `old`."""
        source = self.old if self.eventType == "DELETE" else self.new
        rid = source.get("id")
        return str(rid) if rid is not None else None
