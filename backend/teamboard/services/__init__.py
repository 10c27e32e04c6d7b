"""
Services Module

Data-layer services behind the HTTP routers:
- Remote Store: abstract interface + Tortoise ORM implementation with a change feed
- Entity Cache: in-process project cache kept fresh by change events
- Project / Team / User services: the sanctioned read and write paths
- Session identity, per-session project view and the registry pairing them
"""

# Remote store
from .store_base import (
    NotFoundError,
    RemoteStore,
    StoreError,
)
from .tortoise_store import TortoiseStore

# Cache and services
from .entity_cache import EntityCache
from .project_service import ProjectService
from .team_service import TeamService
from .user_service import UserService

# Sessions
from .session_identity import Identity, SessionIdentity
from .project_view import MissingSessionError, ProjectViewState, ViewStatus
from .sessions import SessionRegistry

__all__ = [
    # Remote store
    "NotFoundError",
    "RemoteStore",
    "StoreError",
    "TortoiseStore",
    # Cache and services
    "EntityCache",
    "ProjectService",
    "TeamService",
    "UserService",
    # Sessions
    "Identity",
    "SessionIdentity",
    "MissingSessionError",
    "ProjectViewState",
    "ViewStatus",
    "SessionRegistry",
]
