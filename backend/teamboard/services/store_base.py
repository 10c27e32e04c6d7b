"""
Remote Store Abstract Interface

Unified interface for the record store behind the services: filtered reads,
inserts, updates and deletes against named tables, plus a per-table change feed.
Records travel as JSON-compatible dicts (ids and timestamps as strings).
"""
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Union

from teamboard.core.pubsub import Subscriber, Subscription

Record = Dict[str, Any]
# Equality filter for scalars; membership ("in") filter for list / tuple / set values
Filters = Dict[str, Any]


class StoreError(Exception):
    """
    Failure reported by the store (network, validation, permission).
    Opaque to callers: they log it and re-raise or surface `message`.
    """
    def __init__(self, message: str, code: str = "STORE_ERROR"):
        super().__init__(message)
        self.code = code
        self.message = message


class NotFoundError(StoreError):
    """A single-row read or write matched no row."""
    def __init__(self, message: str = "Record not found"):
        super().__init__(message, code="NOT_FOUND")


class RemoteStore(ABC):
    """Remote Store Abstract Base Class"""

    @abstractmethod
    async def select(
        self,
        table: str,
        filters: Optional[Filters] = None,
        order_by: Optional[str] = None,
        single: bool = False,
    ) -> Union[List[Record], Record]:
        """
        Read rows from a table

        Parameters:
        - filters: {"team_id": "t1"} equality, {"team_id": ["t1", "t2"]} membership
        - order_by: field name, "-" prefix for descending (e.g. "-created_at")
        - single: return exactly one row; raise NotFoundError when none matches

        Returns:
        - list of records, or one record when `single`
        """
        pass

    @abstractmethod
    async def insert(self, table: str, values: Record) -> Record:
        """Insert one row and return it as stored (server-generated id and timestamps included)"""
        pass

    @abstractmethod
    async def update(
        self,
        table: str,
        values: Record,
        filters: Filters,
        single: bool = True,
    ) -> Union[List[Record], Record]:
        """
        Update matching rows and return them after the write

        With `single`, exactly one row must match (NotFoundError otherwise) and it is returned alone.
        """
        pass

    @abstractmethod
    async def delete(self, table: str, filters: Filters) -> int:
        """Delete matching rows; returns the number of rows removed"""
        pass

    @abstractmethod
    async def subscribe(self, table: str, callback: Subscriber, event: str = "*") -> Subscription:
        """
        Watch a table for changes

        Parameters:
        - event: "*", "INSERT", "UPDATE" or "DELETE"

        Returns:
        - Subscription handle; call unsubscribe() to release it
        """
        pass
