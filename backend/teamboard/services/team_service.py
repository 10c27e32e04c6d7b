"""
Team Service

Team and membership pass-through to the store. Same error policy as the
project service: log, re-raise.
"""
import logging
from typing import Any, Dict, List

from teamboard.config import settings
from teamboard.schemas.team import Team, TeamDetail, TeamMember
from .store_base import RemoteStore, StoreError

logger = logging.getLogger("uvicorn.error")


class TeamService:
    def __init__(self, store: RemoteStore):
        self.store = store

    async def create(self, data: Dict[str, Any], owner_id: str) -> Team:
        """Create a team and enrol its owner as a member with role "owner"."""
        values = {k: v for k, v in data.items() if v is not None}
        values.setdefault("max_members", settings.team_default_max_members)
        values["owner_id"] = owner_id
        try:
            row = await self.store.insert("teams", values)
            await self.store.insert("team_members", {"team_id": row["id"], "user_id": owner_id, "role": "owner"})
        except StoreError as e:
            logger.error("[teams] create failed: %s", e)
            raise
        return Team.model_validate(row)

    async def update(self, team_id: str, data: Dict[str, Any]) -> Team:
        try:
            row = await self.store.update("teams", data, {"id": team_id})
        except StoreError as e:
            logger.error("[teams] update %s failed: %s", team_id, e)
            raise
        return Team.model_validate(row)

    async def delete(self, team_id: str) -> None:
        """
        Delete a team. Its projects and memberships are deleted first, row by row,
        so that their DELETE events reach the change feed.
        """
        try:
            await self.store.delete("projects", {"team_id": team_id})
            await self.store.delete("team_members", {"team_id": team_id})
            await self.store.delete("teams", {"id": team_id})
        except StoreError as e:
            logger.error("[teams] delete %s failed: %s", team_id, e)
            raise

    async def get_by_id(self, team_id: str) -> TeamDetail:
        """Team joined with its members and their profiles."""
        try:
            team = await self.store.select("teams", {"id": team_id}, single=True)
            members = await self.store.select("team_members", {"team_id": team_id}, order_by="joined_at")
            user_ids = [m["user_id"] for m in members]
            users = await self.store.select("users", {"id": user_ids}) if user_ids else []
        except StoreError as e:
            logger.error("[teams] fetch %s failed: %s", team_id, e)
            raise
        by_id = {u["id"]: u for u in users}
        return TeamDetail.model_validate(
            {**team, "members": [{**m, "user": by_id.get(m["user_id"])} for m in members]}
        )

    async def get_user_teams(self, user_id: str) -> List[Team]:
        """Teams the user is a member of, newest first."""
        try:
            memberships = await self.store.select("team_members", {"user_id": user_id})
            team_ids = [m["team_id"] for m in memberships]
            rows = await self.store.select("teams", {"id": team_ids}, order_by="-created_at") if team_ids else []
        except StoreError as e:
            logger.error("[teams] membership lookup for %s failed: %s", user_id, e)
            raise
        return [Team.model_validate(r) for r in rows]

    async def add_member(self, team_id: str, user_id: str, role: str = "member") -> TeamMember:
        """Add a member unless the team is already at max_members."""
        try:
            team = await self.store.select("teams", {"id": team_id}, single=True)
            members = await self.store.select("team_members", {"team_id": team_id})
            if len(members) >= team["max_members"]:
                raise StoreError(f"team {team_id} is full ({team['max_members']} members)", code="TEAM_FULL")
            row = await self.store.insert("team_members", {"team_id": team_id, "user_id": user_id, "role": role})
        except StoreError as e:
            logger.error("[teams] add member %s to %s failed: %s", user_id, team_id, e)
            raise
        return TeamMember.model_validate(row)

    async def is_member(self, team_id: str, user_id: str) -> bool:
        try:
            rows = await self.store.select("team_members", {"team_id": team_id, "user_id": user_id})
        except StoreError as e:
            logger.error("[teams] membership check %s/%s failed: %s", team_id, user_id, e)
            raise
        return bool(rows)
