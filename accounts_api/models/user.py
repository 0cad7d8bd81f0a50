"""
User entity stored in the ``users`` collection.
Implements a simple admin/user role system.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Mapping

from pydantic import BaseModel, Field


class UserRole(str, Enum):
    """User role enumeration for RBAC."""

    ADMIN = "admin"
    USER = "user"


class User(BaseModel):
    """
    User as returned by the repository.

    The password hash never leaves the store, so it has no field here.

    Attributes:
        id: Hex string of the document's ObjectId
        name: Display name
        email: Unique email address
        role: User role (admin or user)
        created_at: Timestamp of account creation
    """

    id: str
    name: str
    email: str
    role: UserRole = UserRole.USER
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @classmethod
    def from_document(cls, document: Mapping[str, Any]) -> "User":
        """Build a user from a stored document, dropping the password."""
        created_at = document["created_at"]
        # PyMongo returns naive UTC datetimes unless the client is tz_aware
        if created_at.tzinfo is None:
            created_at = created_at.replace(tzinfo=timezone.utc)
        return cls(
            id=str(document["_id"]),
            name=document["name"],
            email=document["email"],
            role=document.get("role", UserRole.USER.value),
            created_at=created_at,
        )
