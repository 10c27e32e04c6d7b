"""
Database model for projects.
Each project belongs to exactly one team.
"""
import uuid
from tortoise import fields, models

class Project(models.Model):
    id = fields.UUIDField(pk=True, default=uuid.uuid4)
    title = fields.CharField(max_length=256)
    description = fields.TextField(null=True)
    team = fields.ForeignKeyField("models.Team", related_name="projects", on_delete=fields.CASCADE)
    owner = fields.ForeignKeyField(
        "models.User",
        related_name="owned_projects",
        null=True,
        on_delete=fields.SET_NULL,
    )  # Creator; kept nullable so removing a user does not remove team work
    status = fields.CharField(max_length=32, default="planning")  # Free-form, not enforced
    start_date = fields.DateField(null=True)
    end_date = fields.DateField(null=True)
    created_at = fields.DatetimeField(auto_now_add=True)
    updated_at = fields.DatetimeField(auto_now=True)

    class Meta:
        table = "projects"
