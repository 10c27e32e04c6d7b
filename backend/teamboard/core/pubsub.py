# teamboard/core/pubsub.py
"""
PubSub (Publish-Subscribe) module for table change events.
Provides a simple table-based channel that fans change events out to every
subscriber of a table, whether an in-process cache, a per-session view
container, or a WebSocket forwarder.
"""
import logging
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Dict, List

from teamboard.schemas.events import ChangeEvent

logger = logging.getLogger("uvicorn.error")

Subscriber = Callable[[ChangeEvent], Awaitable[None]]

EVENT_TYPES = ("*", "INSERT", "UPDATE", "DELETE")


@dataclass(eq=False)
class Subscription:
    """
    Handle returned by Channel.sub().

    Keep it to release the registration later; releasing twice is harmless.
    """
    table: str
    event: str
    callback: Subscriber
    channel: "Channel" = field(repr=False)

    @property
    def active(self) -> bool:
        return self in self.channel._topics.get(self.table, [])

    def unsubscribe(self) -> None:
        self.channel.unsub(self)


class Channel:
    """
    Simple PubSub channel implementation for change events.

    Architecture:
    - The store publishes one event per affected row after each successful write
    - Subscribers are called in subscription order and awaited one by one
    - A subscriber that raises is logged and skipped; delivery continues

    Data structure:
    - _topics: Dict[table_name, List[Subscription]]
    """
    def __init__(self):
        # Example: {"projects": [<cache sub>, <view sub>], "teams": []}
        self._topics: Dict[str, List[Subscription]] = {}

    # -------- subscribe / unsubscribe --------
    def sub(self, table: str, callback: Subscriber, event: str = "*") -> Subscription:
        """
        Register a callback for change events on a table.

        Args:
            table: Table name to watch (e.g. "projects")
            callback: Coroutine function receiving a ChangeEvent
            event: "*" for every event type, or one of INSERT / UPDATE / DELETE
        """
        event = event.upper()
        if event not in EVENT_TYPES:
            raise ValueError(f"unknown event type: {event}")
        subscription = Subscription(table=table, event=event, callback=callback, channel=self)
        self._topics.setdefault(table, []).append(subscription)
        return subscription

    def unsub(self, subscription: Subscription) -> None:
        subs = self._topics.get(subscription.table, [])
        if subscription in subs:
            subs.remove(subscription)

    def subscriber_count(self, table: str) -> int:
        return len(self._topics.get(table, []))

    # -------- publish --------
    async def pub(self, event: ChangeEvent) -> None:
        """
        Publish a change event to all matching subscribers of its table.

        Note: a failing subscriber is logged; the remaining ones still receive the event.
        """
        subs = list(self._topics.get(event.table, []))  # Snapshot: callbacks may (un)subscribe
        for s in subs:
            if s.event != "*" and s.event != event.eventType:
                continue
            if s not in self._topics.get(event.table, []):
                continue  # Released by an earlier subscriber during this publish
            try:
                await s.callback(event)
            except Exception:
                logger.exception("[feed] subscriber failed on %s %s", event.table, event.eventType)
