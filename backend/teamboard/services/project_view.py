"""
Project View State

Per-session holder of the visible project list: every project of every team
the signed-in identity belongs to, newest first.

- Recomputed in full on sign-in, on every change event of the `projects`
  table, and after every mutation made through this container
- Exactly one change subscription at a time; the previous one is released
  before a new one is taken
- A failed refresh keeps the last good list and records the error
"""
import enum
import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional

from teamboard.core.pubsub import Subscription
from teamboard.schemas.events import ChangeEvent
from teamboard.schemas.project import Project
from .project_service import ProjectService
from .session_identity import Identity, SessionIdentity
from .store_base import RemoteStore, StoreError

logger = logging.getLogger("uvicorn.error")

ViewListener = Callable[["ProjectViewState"], Awaitable[None]]


class MissingSessionError(Exception):
    """An operation that needs a signed-in identity ran without one."""


class ViewStatus(str, enum.Enum):
    UNINITIALIZED = "uninitialized"
    LOADING = "loading"
    READY = "ready"
    ERROR = "error"


class ProjectViewState:
    def __init__(self, store: RemoteStore, service: ProjectService, identity: SessionIdentity):
        self.store = store
        self.service = service
        self.identity = identity

        self.projects: List[Project] = []
        self.loading: bool = False
        self.error: Optional[str] = None
        self.status: ViewStatus = ViewStatus.UNINITIALIZED

        self._subscription: Optional[Subscription] = None
        self._identity_unsub: Optional[Callable[[], None]] = None
        self._listeners: List[ViewListener] = []

    # -------- lifecycle --------
    async def start(self) -> None:
        """Follow identity changes and process the identity present right now."""
        if self._identity_unsub is None:
            self._identity_unsub = self.identity.subscribe(self._on_identity_change)
        await self._on_identity_change(self.identity.current)

    async def close(self) -> None:
        self._release_subscription()
        if self._identity_unsub is not None:
            self._identity_unsub()
            self._identity_unsub = None

    def subscribe(self, listener: ViewListener) -> Callable[[], None]:
        """Observe every publish of the visible list; returns the unsubscribe callable."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    @property
    def subscribed(self) -> bool:
        return self._subscription is not None and self._subscription.active

    def _release_subscription(self) -> None:
        if self._subscription is not None:
            self._subscription.unsubscribe()
            self._subscription = None

    async def _on_identity_change(self, identity: Optional[Identity]) -> None:
        self._release_subscription()
        if identity is None:
            self.projects = []
            self.error = None
            self.status = ViewStatus.READY
            await self._publish()
            return
        self._subscription = await self.store.subscribe("projects", self._on_project_change, event="*")
        await self._load()

    async def _on_project_change(self, event: ChangeEvent) -> None:
        logger.info("[view] %s on %s, refreshing", event.eventType, event.record_id)
        await self.refresh()

    async def _load(self) -> None:
        """Rebuild the shared project cache, then the visible list."""
        self.loading = True
        self.status = ViewStatus.LOADING
        try:
            await self.service.initialize_cache()
        except StoreError as e:
            self._fail(e)
            self.loading = False
            await self._publish()
            return
        await self.refresh()

    # -------- refresh --------
    async def refresh(self) -> None:
        identity = self.identity.current
        if identity is None:
            self.projects = []
            await self._publish()
            return

        self.loading = True
        self.status = ViewStatus.LOADING
        try:
            memberships = await self.store.select("team_members", {"user_id": identity.id})
            team_ids = [m["team_id"] for m in memberships]
            rows = []
            if team_ids:
                rows = await self.store.select("projects", {"team_id": team_ids}, order_by="-created_at")
            self.projects = [Project.model_validate(r) for r in rows]
            self.error = None
            self.status = ViewStatus.READY
        except StoreError as e:
            self._fail(e)
        finally:
            self.loading = False
        await self._publish()

    def _fail(self, exc: StoreError) -> None:
        logger.error("[view] refreshing projects failed: %s", exc)
        self.error = exc.message or "Failed to refresh projects"
        self.status = ViewStatus.ERROR

    async def _publish(self) -> None:
        for listener in list(self._listeners):
            await listener(self)

    # -------- mutations --------
    def _require_identity(self) -> Identity:
        identity = self.identity.current
        if identity is None:
            raise MissingSessionError("no signed-in identity")
        return identity

    async def create(self, data: Dict[str, Any]) -> Project:
        identity = self._require_identity()
        project = await self.service.create(data, identity.id)
        await self.refresh()
        return project

    async def update(self, project_id: str, data: Dict[str, Any]) -> Project:
        self._require_identity()
        project = await self.service.update(project_id, data)
        await self.refresh()
        return project

    async def delete(self, project_id: str) -> None:
        self._require_identity()
        await self.service.delete(project_id)
        await self.refresh()

    def snapshot(self) -> Dict[str, Any]:
        """JSON-ready view of the public state."""
        return {
            "items": [p.model_dump(mode="json", exclude={"team"}) for p in self.projects],
            "loading": self.loading,
            "error": self.error,
            "status": self.status.value,
        }
