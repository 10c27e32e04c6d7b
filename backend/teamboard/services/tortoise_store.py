"""
Tortoise ORM implementation of the Remote Store

Every successful write publishes one ChangeEvent per affected row on the
change-feed channel, after the write has been committed.
"""
import datetime as dt
import logging
import uuid
from typing import Dict, Iterable, List, Optional, Tuple, Type

from tortoise import models, timezone
from tortoise.exceptions import BaseORMException, IntegrityError, ValidationError

from teamboard.core.pubsub import Channel, Subscriber, Subscription
from teamboard.models import Project, Team, TeamMember, User
from teamboard.schemas.events import ChangeEvent
from .store_base import Filters, NotFoundError, Record, RemoteStore, StoreError

logger = logging.getLogger("uvicorn.error")

# table -> (model, readable columns, write-only columns)
TABLES: Dict[str, Tuple[Type[models.Model], Tuple[str, ...], Tuple[str, ...]]] = {
    "users": (
        User,
        ("id", "email", "username", "avatar_url", "bio", "created_at", "updated_at"),
        ("password_hash",),
    ),
    "teams": (
        Team,
        ("id", "name", "description", "owner_id", "max_members", "created_at", "updated_at"),
        (),
    ),
    "team_members": (
        TeamMember,
        ("id", "team_id", "user_id", "role", "joined_at"),
        (),
    ),
    "projects": (
        Project,
        ("id", "title", "description", "team_id", "owner_id", "status",
         "start_date", "end_date", "created_at", "updated_at"),
        (),
    ),
}


def _jsonable(row: dict) -> Record:
    """Convert ORM values to the wire shape: UUIDs and dates as strings."""
    out = {}
    for k, v in row.items():
        if isinstance(v, uuid.UUID):
            v = str(v)
        elif isinstance(v, (dt.datetime, dt.date)):
            v = v.isoformat()
        out[k] = v
    return out


class TortoiseStore(RemoteStore):
    """Remote Store backed by the Tortoise ORM models in teamboard.models"""

    def __init__(self, channel: Optional[Channel] = None):
        self.channel = channel or Channel()

    # -------- helpers --------
    def _table(self, table: str):
        if table not in TABLES:
            raise StoreError(f"unknown table: {table}", code="UNKNOWN_TABLE")
        return TABLES[table]

    def _check_columns(self, table: str, names: Iterable[str], allowed: Iterable[str]) -> None:
        unknown = sorted(set(names) - set(allowed))
        if unknown:
            raise StoreError(f"unknown column(s) for {table}: {', '.join(unknown)}", code="VALIDATION_ERROR")

    def _queryset(self, table: str, filters: Optional[Filters]):
        model, columns, _ = self._table(table)
        filters = filters or {}
        self._check_columns(table, filters.keys(), columns)
        kwargs = {}
        for key, value in filters.items():
            if isinstance(value, (list, tuple, set, frozenset)):
                kwargs[f"{key}__in"] = list(value)
            else:
                kwargs[key] = value
        return model.filter(**kwargs)

    async def _rows(self, table: str, queryset, order_by: Optional[str] = None) -> List[Record]:
        _, columns, _ = self._table(table)
        if order_by:
            self._check_columns(table, [order_by.lstrip("-")], columns)
            queryset = queryset.order_by(order_by)
        rows = await queryset.values(*columns)
        return [_jsonable(r) for r in rows]

    async def _publish(self, table: str, event_type: str, new: Optional[Record] = None,
                       old: Optional[Record] = None) -> None:
        await self.channel.pub(ChangeEvent(eventType=event_type, table=table, new=new or {}, old=old or {}))

    def _wrap(self, table: str, op: str, exc: Exception) -> StoreError:
        if isinstance(exc, IntegrityError):
            code = "INTEGRITY_ERROR"
        elif isinstance(exc, (ValidationError, ValueError, TypeError)):
            code = "VALIDATION_ERROR"
        else:
            code = "STORE_ERROR"
        logger.warning("[store] %s %s failed: %r", op, table, exc)
        return StoreError(str(exc) or exc.__class__.__name__, code=code)

    # -------- reads --------
    async def select(self, table, filters=None, order_by=None, single=False):
        try:
            rows = await self._rows(table, self._queryset(table, filters), order_by)
        except StoreError:
            raise
        except (BaseORMException, ValueError, TypeError) as e:
            raise self._wrap(table, "select", e) from e
        if single:
            if not rows:
                raise NotFoundError(f"{table}: no row matches {filters}")
            return rows[0]
        return rows

    # -------- writes --------
    async def insert(self, table, values):
        model, columns, write_only = self._table(table)
        self._check_columns(table, values.keys(), columns + write_only)
        try:
            obj = await model.create(**values)
            rows = await self._rows(table, model.filter(pk=obj.pk))
        except (BaseORMException, ValueError, TypeError) as e:
            raise self._wrap(table, "insert", e) from e
        row = rows[0]
        await self._publish(table, "INSERT", new=row)
        return row

    async def update(self, table, values, filters, single=True):
        model, columns, write_only = self._table(table)
        self._check_columns(table, values.keys(), columns + write_only)
        values = dict(values)
        if "updated_at" in columns:
            values.setdefault("updated_at", timezone.now())  # queryset.update() skips auto_now
        try:
            before = await self._rows(table, self._queryset(table, filters))
            if single and len(before) != 1:
                if not before:
                    raise NotFoundError(f"{table}: no row matches {filters}")
                raise StoreError(f"{table}: {len(before)} rows match {filters}", code="MULTIPLE_ROWS")
            ids = [r["id"] for r in before]
            if ids and values:
                await model.filter(id__in=ids).update(**values)
            after = await self._rows(table, model.filter(id__in=ids))
        except StoreError:
            raise
        except (BaseORMException, ValueError, TypeError) as e:
            raise self._wrap(table, "update", e) from e
        old_by_id = {r["id"]: r for r in before}
        for row in after:
            await self._publish(table, "UPDATE", new=row, old=old_by_id.get(row["id"]))
        if single:
            return after[0]
        return after

    async def delete(self, table, filters):
        model, _, _ = self._table(table)
        try:
            before = await self._rows(table, self._queryset(table, filters))
            if before:
                await model.filter(id__in=[r["id"] for r in before]).delete()
        except StoreError:
            raise
        except (BaseORMException, ValueError, TypeError) as e:
            raise self._wrap(table, "delete", e) from e
        for row in before:
            await self._publish(table, "DELETE", old=row)
        return len(before)

    # -------- change feed --------
    async def subscribe(self, table: str, callback: Subscriber, event: str = "*") -> Subscription:
        self._table(table)
        return self.channel.sub(table, callback, event=event)
