"""
Pydantic schemas for the user endpoints.

Fields are optional at the schema level so that a missing field reaches the
route's own check and produces a 400 with a specific message rather than a
generic validation failure.
"""
from typing import Any, Optional

from pydantic import BaseModel


class RegisterIn(BaseModel):
    """Request model for registration. All fields are required by the route."""
    email: Optional[str] = None
    name: Optional[str] = None
    role: Optional[str] = None
    status: Optional[str] = None
    password: Optional[str] = None  # Plain text, hashed server-side


class LoginIn(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


class UserIdsIn(BaseModel):
    """Body of block / unblock / delete. Shape is checked by the route."""
    userIds: Any = None


class EmailIn(BaseModel):
    email: Optional[str] = None
