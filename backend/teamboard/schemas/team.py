"""
Pydantic schemas for teams and team memberships.
"""
import datetime as dt
from typing import List, Optional
from pydantic import BaseModel, Field

from .user import UserProfile

class Team(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    owner_id: str
    max_members: int = 10
    created_at: Optional[dt.datetime] = None
    updated_at: Optional[dt.datetime] = None

class TeamCreate(BaseModel):
    name: str = Field(min_length=1, max_length=128)
    description: Optional[str] = None
    max_members: Optional[int] = Field(default=None, ge=1)

class TeamUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=128)
    description: Optional[str] = None
    max_members: Optional[int] = Field(default=None, ge=1)

class TeamMember(BaseModel):
    """Membership row linking one user to one team."""
    id: str
    team_id: str
    user_id: str
    role: str
    joined_at: Optional[dt.datetime] = None

class TeamMemberCreate(BaseModel):
    user_id: str
    role: str = "member"

class TeamMemberDetail(TeamMember):
    """Membership joined with the member's profile."""
    user: Optional[UserProfile] = None

class TeamDetail(Team):
    """Team joined with its memberships."""
    members: List[TeamMemberDetail] = Field(default_factory=list)
