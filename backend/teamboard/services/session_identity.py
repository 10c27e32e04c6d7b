"""
Session Identity Provider

Holds the signed-in identity of one session together with its profile record,
and notifies listeners on every sign-in / sign-out transition.
"""
import logging
from dataclasses import dataclass, field
from typing import Awaitable, Callable, List, Optional

from teamboard.schemas.user import UserProfile
from .store_base import StoreError
from .user_service import UserService

logger = logging.getLogger("uvicorn.error")


@dataclass(frozen=True)
class Identity:
    """Authenticated identity as carried by the access token."""
    id: str
    email: Optional[str] = None
    expires_at: Optional[float] = field(default=None, compare=False)  # token `exp`


IdentityListener = Callable[[Optional[Identity]], Awaitable[None]]


class SessionIdentity:
    def __init__(self, user_service: UserService):
        self.user_service = user_service
        self.current: Optional[Identity] = None
        self.profile: Optional[UserProfile] = None
        self._listeners: List[IdentityListener] = []

    def subscribe(self, listener: IdentityListener) -> Callable[[], None]:
        """Register a listener; returns a callable that removes it again."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def sign_in(self, identity: Identity) -> None:
        self.current = identity
        await self._load_profile(identity.id)
        await self._notify()

    async def sign_out(self) -> None:
        self.current = None
        self.profile = None
        await self._notify()

    async def _load_profile(self, user_id: str) -> None:
        try:
            self.profile = await self.user_service.get_by_id(user_id)
        except StoreError as e:
            # A missing profile does not block the session
            logger.error("[session] loading profile %s failed: %s", user_id, e)
            self.profile = None

    async def _notify(self) -> None:
        for listener in list(self._listeners):
            await listener(self.current)
