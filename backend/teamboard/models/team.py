"""
Database models for teams and team memberships.
"""
import uuid
from tortoise import fields, models

class Team(models.Model):
    """
    Team database model.

    Relationships:
    - Belongs to an owner User (many-to-one)
    - Has many TeamMember rows and many Projects
    """
    id = fields.UUIDField(pk=True, default=uuid.uuid4)
    name = fields.CharField(max_length=128)
    description = fields.TextField(null=True)
    owner = fields.ForeignKeyField("models.User", related_name="owned_teams", on_delete=fields.CASCADE)
    max_members = fields.IntField(default=10)
    created_at = fields.DatetimeField(auto_now_add=True)
    updated_at = fields.DatetimeField(auto_now=True)

    class Meta:
        table = "teams"

class TeamMember(models.Model):
    """
    Composite relation between User and Team.
    A user may belong to many teams; a team has many members.
    """
    id = fields.UUIDField(pk=True, default=uuid.uuid4)
    team = fields.ForeignKeyField("models.Team", related_name="members", on_delete=fields.CASCADE)
    user = fields.ForeignKeyField("models.User", related_name="memberships", on_delete=fields.CASCADE)
    role = fields.CharField(max_length=32)  # "owner", "member", ... by convention
    joined_at = fields.DatetimeField(auto_now_add=True)

    class Meta:
        table = "team_members"
        unique_together = (("team", "user"),)
