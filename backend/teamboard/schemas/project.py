"""
Pydantic schemas for projects.
`Project` is both the store record and the entity-cache value.
"""
import datetime as dt
from typing import Optional
from pydantic import BaseModel, Field

from .team import TeamDetail

class Project(BaseModel):
    """
    Project record.

    `team` is only filled by the joined detail fetch (project -> team -> members -> users);
    rows coming from list reads and change events leave it empty.
    """
    id: str
    title: str
    description: Optional[str] = None
    team_id: str
    owner_id: Optional[str] = None  # Identity that created the project
    status: str = "planning"  # Free-form; "planning", "active", "done" by convention
    start_date: Optional[dt.date] = None
    end_date: Optional[dt.date] = None
    created_at: Optional[dt.datetime] = None
    updated_at: Optional[dt.datetime] = None
    team: Optional[TeamDetail] = None

class ProjectCreate(BaseModel):
    title: str = Field(min_length=1, max_length=256)
    team_id: str
    description: Optional[str] = None
    status: Optional[str] = None
    start_date: Optional[dt.date] = None
    end_date: Optional[dt.date] = None

class ProjectUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=256)
    team_id: Optional[str] = None
    description: Optional[str] = None
    status: Optional[str] = None
    start_date: Optional[dt.date] = None
    end_date: Optional[dt.date] = None

class ProjectStatusIn(BaseModel):
    status: str = Field(min_length=1, max_length=32)
