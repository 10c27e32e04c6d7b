"""
User Service

Profile reads and writes against the `users` table.
"""
import logging
from typing import Any, Dict, Optional

from teamboard.schemas.user import UserProfile
from .store_base import RemoteStore, StoreError

logger = logging.getLogger("uvicorn.error")

TABLE = "users"


class UserService:
    def __init__(self, store: RemoteStore):
        self.store = store

    async def get_by_id(self, user_id: str) -> UserProfile:
        row = await self.store.select(TABLE, {"id": user_id}, single=True)
        return UserProfile.model_validate(row)

    async def get_current(self, identity) -> Optional[UserProfile]:
        """Profile of the signed-in identity, or None when signed out or not yet provisioned."""
        if identity is None:
            return None
        rows = await self.store.select(TABLE, {"id": identity.id})
        return UserProfile.model_validate(rows[0]) if rows else None

    async def create(self, values: Dict[str, Any]) -> UserProfile:
        try:
            row = await self.store.insert(TABLE, values)
        except StoreError as e:
            logger.error("[users] create failed: %s", e)
            raise
        return UserProfile.model_validate(row)

    async def update(self, user_id: str, values: Dict[str, Any]) -> UserProfile:
        try:
            row = await self.store.update(TABLE, values, {"id": user_id})
        except StoreError as e:
            logger.error("[users] update %s failed: %s", user_id, e)
            raise
        return UserProfile.model_validate(row)
