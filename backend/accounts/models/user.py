# accounts/models/user.py
"""
Database model for users.
Represents a user account: login email, display name, opaque role tag,
block status and the password hash.
"""
import uuid
from tortoise import fields, models


class User(models.Model):
    """
    User database model.

    Security:
    - Password is stored as a bcrypt hash (never store plain text passwords)
    - Email uniqueness is checked by the register route before insert,
      not enforced by the table
    - status="blocked" denies login and the check-* lookups
    """
    id = fields.UUIDField(pk=True, default=uuid.uuid4)  # Primary key, assigned on insert
    email = fields.CharField(max_length=256, index=True)  # Login key (indexed for lookups)
    name = fields.CharField(max_length=256)  # Display label
    role = fields.CharField(max_length=64)  # Classification tag, not interpreted by the API
    status = fields.CharField(max_length=16, default="unblocked")  # "unblocked" or "blocked"
    password = fields.CharField(max_length=255)  # bcrypt hash
    last_seen = fields.DatetimeField(null=True)  # Set once at registration

    class Meta:
        """Tortoise ORM metadata configuration."""
        table = "users"  # Database table name
