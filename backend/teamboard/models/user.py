"""
Database model for users.
Represents a user account in the system, containing authentication credentials
and profile information.
"""
import uuid
from tortoise import fields, models

class User(models.Model):
    """
    User database model.

    Relationships:
    - Owns many Teams (one-to-many, via related_name="owned_teams")
    - Has many TeamMember rows (one-to-many, via related_name="memberships")
    - Owns many Projects (one-to-many, via related_name="owned_projects")

    Security:
    - Password is stored as a hash (never store plain text passwords)
    - Username and email must be unique across all users
    """
    id = fields.UUIDField(pk=True, default=uuid.uuid4)  # Primary key, also the identity id carried in access tokens
    email = fields.CharField(max_length=256, unique=True)
    username = fields.CharField(max_length=256, unique=True, index=True)
    password_hash = fields.CharField(max_length=255)  # Argon2 hash, never returned by the store layer
    avatar_url = fields.CharField(max_length=1024, null=True)
    bio = fields.TextField(null=True)
    created_at = fields.DatetimeField(auto_now_add=True)
    updated_at = fields.DatetimeField(auto_now=True)

    class Meta:
        """Tortoise ORM metadata configuration."""
        table = "users"
