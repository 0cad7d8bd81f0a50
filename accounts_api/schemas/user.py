"""
User schemas for API request/response validation.
Separates internal models from API contracts using Pydantic.
"""

from datetime import datetime
from typing import Annotated, Any, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from pydantic_core import PydanticCustomError

from accounts_api.models.user import UserRole

OBJECT_ID_PATTERN = r"^[0-9a-fA-F]{24}$"

Name = Annotated[str, Field(min_length=2, max_length=50)]
Password = Annotated[str, Field(min_length=6, max_length=100)]


class UserCreate(BaseModel):
    """Schema for creating a user. Unknown fields are ignored."""

    name: Name
    email: EmailStr
    password: Password
    role: UserRole = UserRole.USER


class UserUpdate(BaseModel):
    """
    Schema for a partial update.

    Every field may be left out, but a field that is present must be valid;
    an explicit ``null`` is rejected.
    """

    name: Optional[Name] = None
    email: Optional[EmailStr] = None
    password: Optional[Password] = None
    role: Optional[UserRole] = None

    @field_validator("name", "email", "password", "role", mode="before")
    @classmethod
    def reject_null(cls, v: Any) -> Any:
        if v is None:
            raise PydanticCustomError("null_value", "Field cannot be null")
        return v


class UserResponse(BaseModel):
    """
    Schema for user data in API responses.
    Excludes sensitive information like the password hash.
    """

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: str
    name: str
    email: str
    role: UserRole
    created_at: datetime = Field(alias="createdAt")


class UserEnvelope(BaseModel):
    """Single user wrapped in the ``data`` envelope."""

    data: UserResponse


class UserListEnvelope(BaseModel):
    """User list wrapped in the ``data`` envelope."""

    data: list[UserResponse]
