"""
Entity Cache

In-process map from record id to last-known record for one table, warmed by a
bulk load and kept fresh by the table's change feed.

Events are folded into the map in arrival order, one at a time:
- INSERT adds the row unless its id is already cached
- UPDATE merges the new fields into the cached row (adding it when missing)
- DELETE drops the row named by `old.id`
There is no reordering and no dedup beyond what the rules above imply; a
redelivered INSERT or DELETE is a no-op, a stale UPDATE wins until the next
initialize().
"""
import logging
from typing import Dict, Generic, Iterable, List, Optional, Type, TypeVar

from pydantic import BaseModel

from teamboard.core.pubsub import Subscription
from teamboard.schemas.events import ChangeEvent
from teamboard.schemas.project import Project
from .store_base import Record, RemoteStore

logger = logging.getLogger("uvicorn.error")

M = TypeVar("M", bound=BaseModel)


class EntityCache(Generic[M]):
    """Read-through cache for one table. Only ProjectService (or the change feed) writes to it."""

    def __init__(self, store: RemoteStore, table: str = "projects", model: Type[M] = Project, key: str = "id"):
        self.store = store
        self.table = table
        self.model = model
        self.key = key
        self._entries: Dict[str, M] = {}  # insertion-ordered
        self._subscription: Optional[Subscription] = None

    # -------- lifecycle --------
    async def initialize(self) -> None:
        """
        Replace the whole content with a fresh bulk load, then make sure the
        change-feed subscription exists (at most one per cache).
        """
        rows = await self.store.select(self.table, order_by="-created_at")
        self._entries = {}
        self.extend(rows)
        if self._subscription is None or not self._subscription.active:
            self._subscription = await self.store.subscribe(self.table, self._on_change, event="*")
        logger.info("[cache] %s loaded: %d entries", self.table, len(self._entries))

    def close(self) -> None:
        if self._subscription is not None:
            self._subscription.unsubscribe()
            self._subscription = None

    @property
    def subscribed(self) -> bool:
        return self._subscription is not None and self._subscription.active

    async def _on_change(self, event: ChangeEvent) -> None:
        self.apply(event)

    # -------- event fold --------
    def apply(self, event: ChangeEvent) -> None:
        if event.table != self.table:
            return
        if event.eventType == "INSERT":
            if str(event.new.get(self.key)) not in self._entries:
                self.upsert(event.new)
        elif event.eventType == "UPDATE":
            self.merge(str(event.new[self.key]), event.new)
        elif event.eventType == "DELETE":
            if event.record_id is not None:
                self.remove(event.record_id)

    # -------- reads --------
    def get(self, record_id: str) -> Optional[M]:
        return self._entries.get(str(record_id))

    def filter_by(self, field: str, value) -> List[M]:
        return [e for e in self._entries.values() if getattr(e, field, None) == value]

    def filter_by_team(self, team_id: str) -> List[M]:
        """Cached rows of one team. Empty when the team has none cached, cold or not."""
        return self.filter_by("team_id", str(team_id))

    def values(self) -> List[M]:
        return list(self._entries.values())

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, record_id) -> bool:
        return str(record_id) in self._entries

    # -------- writes --------
    def _coerce(self, record) -> M:
        if isinstance(record, self.model):
            return record
        return self.model.model_validate(record)

    def upsert(self, record) -> M:
        """Insert or replace one entry keyed by its id."""
        entry = self._coerce(record)
        self._entries[str(getattr(entry, self.key))] = entry
        return entry

    def extend(self, records: Iterable) -> List[M]:
        return [self.upsert(r) for r in records]

    def merge(self, record_id: str, fields: Record) -> M:
        """Merge fields into the cached entry, creating it when absent."""
        record_id = str(record_id)
        current = self._entries.get(record_id)
        if current is None:
            data = dict(fields)
        else:
            data = {**current.model_dump(), **fields}
            # joined detail belongs to the old team once the row moves
            moved = "team_id" in fields and str(fields["team_id"]) != str(getattr(current, "team_id", None))
            if moved and "team" in data:
                data["team"] = None
        data[self.key] = record_id
        entry = self.model.model_validate(data)
        self._entries[record_id] = entry
        return entry

    def remove(self, record_id: str) -> Optional[M]:
        return self._entries.pop(str(record_id), None)
