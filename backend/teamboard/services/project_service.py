"""
Project Access Service

The only sanctioned path for reading and mutating projects:
- mutations go to the store first, and the authoritative response is folded
  into the entity cache only after the store acknowledged the write
- reads are served from the cache, falling back to the store on a miss

Store failures are logged and re-raised unchanged; the cache is left untouched.
"""
import logging
from typing import Any, Dict, List, Optional

from teamboard.config import settings
from teamboard.schemas.project import Project
from .entity_cache import EntityCache
from .store_base import RemoteStore, StoreError

logger = logging.getLogger("uvicorn.error")

TABLE = "projects"


class ProjectService:
    def __init__(self, store: RemoteStore, cache: EntityCache[Project]):
        self.store = store
        self.cache = cache

    async def initialize_cache(self) -> None:
        try:
            await self.cache.initialize()
        except StoreError as e:
            logger.error("[projects] cache initialization failed: %s", e)
            raise

    # -------- mutations --------
    async def create(self, data: Dict[str, Any], owner_id: str) -> Project:
        """Insert a project owned by `owner_id`; the stored row lands in the cache."""
        values = {k: v for k, v in data.items() if v is not None}
        values.setdefault("status", settings.project_default_status)
        values["owner_id"] = owner_id
        try:
            row = await self.store.insert(TABLE, values)
        except StoreError as e:
            logger.error("[projects] create failed: %s", e)
            raise
        return self.cache.upsert(row)

    async def update(self, project_id: str, data: Dict[str, Any]) -> Project:
        """Apply a partial update; returns the cached entry merged with the stored row."""
        try:
            row = await self.store.update(TABLE, data, {"id": project_id})
        except StoreError as e:
            logger.error("[projects] update %s failed: %s", project_id, e)
            raise
        return self.cache.merge(project_id, row)

    async def delete(self, project_id: str) -> None:
        try:
            await self.store.delete(TABLE, {"id": project_id})
        except StoreError as e:
            logger.error("[projects] delete %s failed: %s", project_id, e)
            raise
        self.cache.remove(project_id)

    async def update_status(self, project_id: str, status: str) -> Project:
        """
        Write only the status field and return the stored row.
        The cache is not touched here; callers refresh afterwards.
        """
        try:
            row = await self.store.update(TABLE, {"status": status}, {"id": project_id})
        except StoreError as e:
            logger.error("[projects] status update %s failed: %s", project_id, e)
            raise
        return Project.model_validate(row)

    # -------- reads --------
    async def get_by_id(self, project_id: str) -> Project:
        """Cached entry, or the project joined with its team, members and their users."""
        cached = self.cache.get(project_id)
        if cached is not None:
            return cached
        try:
            record = await self._fetch_detail(project_id)
        except StoreError as e:
            logger.error("[projects] fetch %s failed: %s", project_id, e)
            raise
        return self.cache.upsert(record)

    async def get_by_team(self, team_id: str) -> List[Project]:
        """
        Cached projects of a team when any are cached; otherwise a store read
        (newest first) whose rows are added to the cache.
        """
        cached = self.cache.filter_by_team(team_id)
        if cached:
            return cached
        try:
            rows = await self.store.select(TABLE, {"team_id": team_id}, order_by="-created_at")
        except StoreError as e:
            logger.error("[projects] team %s fetch failed: %s", team_id, e)
            raise
        return self.cache.extend(rows)

    async def _fetch_detail(self, project_id: str) -> Dict[str, Any]:
        project = await self.store.select(TABLE, {"id": project_id}, single=True)
        team: Optional[Dict[str, Any]] = None
        teams = await self.store.select("teams", {"id": project["team_id"]})
        if teams:
            members = await self.store.select("team_members", {"team_id": project["team_id"]})
            user_ids = [m["user_id"] for m in members]
            users = await self.store.select("users", {"id": user_ids}) if user_ids else []
            by_id = {u["id"]: u for u in users}
            team = {
                **teams[0],
                "members": [{**m, "user": by_id.get(m["user_id"])} for m in members],
            }
        return {**project, "team": team}
