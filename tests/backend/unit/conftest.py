"""
In-memory stand-in for the remote store, shared by the unit tests.
Records every call so tests can assert which reads hit the store.
"""
import datetime as dt
import uuid

import pytest

from teamboard.core.pubsub import Channel
from teamboard.schemas.events import ChangeEvent
from teamboard.services.entity_cache import EntityCache
from teamboard.services.project_service import ProjectService
from teamboard.services.session_identity import SessionIdentity
from teamboard.services.store_base import NotFoundError, RemoteStore, StoreError
from teamboard.services.user_service import UserService

BASE_TIME = dt.datetime(2024, 1, 1, 12, 0, 0)


class FakeStore(RemoteStore):
    def __init__(self):
        self.channel = Channel()
        self.tables = {"users": {}, "teams": {}, "team_members": {}, "projects": {}}
        self.calls = []  # (op, table)
        self.failures = {}  # (op, table) -> StoreError
        self.hooks = {}  # (op, table) -> async callable(values), awaited before a write returns
        self._tick = 0

    # -------- test helpers --------
    def now(self) -> str:
        self._tick += 1
        return (BASE_TIME + dt.timedelta(seconds=self._tick)).isoformat()

    def seed(self, table: str, **row) -> dict:
        """Put a row in place without publishing or recording a call."""
        row.setdefault("id", str(uuid.uuid4()))
        if table == "team_members":
            row.setdefault("joined_at", self.now())
        else:
            row.setdefault("created_at", self.now())
            row.setdefault("updated_at", row["created_at"])
        self.tables[table][row["id"]] = dict(row)
        return dict(row)

    def fail(self, op: str, table: str, message: str = "store unavailable") -> None:
        self.failures[(op, table)] = StoreError(message)

    def heal(self) -> None:
        self.failures.clear()

    def count(self, op: str, table: str) -> int:
        return sum(1 for c in self.calls if c == (op, table))

    def _enter(self, op: str, table: str) -> None:
        self.calls.append((op, table))
        if (op, table) in self.failures:
            raise self.failures[(op, table)]

    @staticmethod
    def _match(row: dict, filters: dict) -> bool:
        for key, value in (filters or {}).items():
            if isinstance(value, (list, tuple, set)):
                if row.get(key) not in value:
                    return False
            elif row.get(key) != value:
                return False
        return True

    # -------- RemoteStore --------
    async def select(self, table, filters=None, order_by=None, single=False):
        self._enter("select", table)
        rows = [dict(r) for r in self.tables[table].values() if self._match(r, filters)]
        if order_by:
            key = order_by.lstrip("-")
            rows.sort(key=lambda r: r.get(key) or "", reverse=order_by.startswith("-"))
        if single:
            if not rows:
                raise NotFoundError()
            return rows[0]
        return rows

    async def insert(self, table, values):
        self._enter("insert", table)
        row = {"id": str(uuid.uuid4()), **values}
        stamp = self.now()
        if table == "team_members":
            row.setdefault("joined_at", stamp)
        else:
            row.setdefault("created_at", stamp)
            row.setdefault("updated_at", stamp)
        self.tables[table][row["id"]] = row
        await self.channel.pub(ChangeEvent(eventType="INSERT", table=table, new=dict(row)))
        await self._hook("insert", table, values)
        return dict(row)

    async def update(self, table, values, filters, single=True):
        self._enter("update", table)
        matched = [r for r in self.tables[table].values() if self._match(r, filters)]
        if single and not matched:
            raise NotFoundError()
        after = []
        for row in matched:
            old = dict(row)
            row.update(values)
            if table != "team_members":
                row["updated_at"] = self.now()
            after.append(dict(row))
            await self.channel.pub(ChangeEvent(eventType="UPDATE", table=table, new=dict(row), old=old))
        await self._hook("update", table, values)
        return after[0] if single else after

    async def delete(self, table, filters):
        self._enter("delete", table)
        matched = [r for r in self.tables[table].values() if self._match(r, filters)]
        for row in matched:
            del self.tables[table][row["id"]]
            await self.channel.pub(ChangeEvent(eventType="DELETE", table=table, old=dict(row)))
        return len(matched)

    async def subscribe(self, table, callback, event="*"):
        self.calls.append(("subscribe", table))
        return self.channel.sub(table, callback, event=event)

    async def _hook(self, op, table, values):
        hook = self.hooks.get((op, table))
        if hook is not None:
            await hook(values)


@pytest.fixture
def store():
    return FakeStore()


@pytest.fixture
def cache(store):
    return EntityCache(store, table="projects")


@pytest.fixture
def service(store, cache):
    return ProjectService(store, cache)


@pytest.fixture
def identity(store):
    return SessionIdentity(UserService(store))


@pytest.fixture
def world(store):
    """
    One user in teams T1 and T2; projects P1 (T1), P2 (T2, newer) and P3 (T3).
    """
    user = store.seed("users", username="alice", email="alice@example.com")
    t1 = store.seed("teams", name="T1", owner_id=user["id"], max_members=10)
    t2 = store.seed("teams", name="T2", owner_id=user["id"], max_members=10)
    t3 = store.seed("teams", name="T3", owner_id=str(uuid.uuid4()), max_members=10)
    store.seed("team_members", team_id=t1["id"], user_id=user["id"], role="owner")
    store.seed("team_members", team_id=t2["id"], user_id=user["id"], role="member")
    p1 = store.seed("projects", title="P1", team_id=t1["id"], status="planning")
    p2 = store.seed("projects", title="P2", team_id=t2["id"], status="active")
    p3 = store.seed("projects", title="P3", team_id=t3["id"], status="planning")
    return {"user": user, "teams": (t1, t2, t3), "projects": (p1, p2, p3)}
