"""
Session Registry

One SessionIdentity + ProjectViewState pair per signed-in user inside the
server process. Opened on login (or lazily on the first request carrying a
valid token), closed on logout, at shutdown, and by sweep() once the access
token behind the session has expired or the session sat idle too long.
"""
import logging
import time
from dataclasses import dataclass
from typing import Dict, Optional

from teamboard.config import settings
from .project_service import ProjectService
from .project_view import ProjectViewState
from .session_identity import Identity, SessionIdentity
from .store_base import RemoteStore
from .user_service import UserService

logger = logging.getLogger("uvicorn.error")


@dataclass
class _Session:
    identity: SessionIdentity
    view: ProjectViewState
    expires_at: Optional[float]  # token `exp`, epoch seconds
    last_seen: float


class SessionRegistry:
    def __init__(
        self,
        store: RemoteStore,
        project_service: ProjectService,
        user_service: UserService,
        idle_timeout: Optional[float] = None,
    ):
        self.store = store
        self.project_service = project_service
        self.user_service = user_service
        self.idle_timeout = settings.session_idle_timeout if idle_timeout is None else idle_timeout
        self._sessions: Dict[str, _Session] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    def get(self, user_id: str) -> Optional[ProjectViewState]:
        entry = self._sessions.get(str(user_id))
        return entry.view if entry else None

    async def open(
        self,
        user_id: str,
        email: Optional[str] = None,
        expires_at: Optional[float] = None,
        now: Optional[float] = None,
    ) -> ProjectViewState:
        """Return the user's view container, signing the identity in the first time."""
        now = time.time() if now is None else now
        await self.sweep(now)
        user_id = str(user_id)
        entry = self._sessions.get(user_id)
        if entry is not None:
            entry.last_seen = now
            if expires_at is not None:
                entry.expires_at = max(expires_at, entry.expires_at or expires_at)
            return entry.view
        identity = SessionIdentity(self.user_service)
        view = ProjectViewState(self.store, self.project_service, identity)
        self._sessions[user_id] = _Session(identity, view, expires_at, now)
        await identity.sign_in(Identity(id=user_id, email=email))
        await view.start()
        logger.info("[session] opened for %s", user_id)
        return view

    def _expired(self, entry: _Session, now: float) -> bool:
        if entry.expires_at is not None and entry.expires_at <= now:
            return True
        return bool(self.idle_timeout) and now - entry.last_seen > self.idle_timeout

    async def sweep(self, now: Optional[float] = None) -> int:
        """Close every session whose token expired or that has been idle too long."""
        now = time.time() if now is None else now
        stale = [uid for uid, entry in self._sessions.items() if self._expired(entry, now)]
        for user_id in stale:
            logger.info("[session] expiring %s", user_id)
            await self.close(user_id)
        return len(stale)

    async def close(self, user_id: str) -> None:
        entry = self._sessions.pop(str(user_id), None)
        if entry is None:
            return
        await entry.identity.sign_out()
        await entry.view.close()
        logger.info("[session] closed for %s", user_id)

    async def close_all(self) -> None:
        for user_id in list(self._sessions):
            await self.close(user_id)
