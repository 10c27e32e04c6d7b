# teamboard/models/__init__.py
"""
Database models module initialization.
Exports all database models for convenient imports throughout the application.

Models exported:
- User: User account and profile model
- Team: Team model (owned by a User)
- TeamMember: Membership linking a User to a Team
- Project: Project model (belongs to a Team)
"""
from .user import User
from .team import Team, TeamMember
from .project import Project
