"""
Pydantic schemas for user profiles.
The password hash never appears here; it stays inside the auth layer.
"""
import datetime as dt
from typing import Optional
from pydantic import BaseModel

class UserProfile(BaseModel):
    """Public profile of a user. `id` equals the authenticated identity's id."""
    id: str
    email: Optional[str] = None
    username: str
    avatar_url: Optional[str] = None
    bio: Optional[str] = None
    created_at: Optional[dt.datetime] = None
    updated_at: Optional[dt.datetime] = None

class UserUpdate(BaseModel):
    """Fields a user may change on their own profile."""
    email: Optional[str] = None
    username: Optional[str] = None
    avatar_url: Optional[str] = None
    bio: Optional[str] = None
