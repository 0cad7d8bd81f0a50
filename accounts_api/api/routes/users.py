"""
User routes for CRUD operations on accounts.
Request validation happens before any handler runs; handlers only shape
repository results into the ``data`` envelope.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Path, Response, status

from accounts_api.api.deps import get_user_repository
from accounts_api.core.logging import get_logger
from accounts_api.schemas.user import (
    OBJECT_ID_PATTERN,
    UserCreate,
    UserEnvelope,
    UserListEnvelope,
    UserResponse,
    UserUpdate,
)
from accounts_api.services.user_repository import UserRepository

logger = get_logger(__name__)

router = APIRouter(prefix="/users", tags=["users"])

UserId = Annotated[str, Path(pattern=OBJECT_ID_PATTERN)]
Repository = Annotated[UserRepository, Depends(get_user_repository)]


@router.get("", response_model=UserListEnvelope)
def list_users(repository: Repository) -> UserListEnvelope:
    """
    Get all users.

    Returns:
        Every user, passwords omitted
    """
    users = repository.find_all()
    return UserListEnvelope(data=[UserResponse.model_validate(user) for user in users])


@router.get("/{id}", response_model=UserEnvelope)
def get_user(id: UserId, repository: Repository) -> UserEnvelope:
    """
    Get a user by ID.

    Args:
        id: 24-character hex identifier
        repository: User repository

    Returns:
        The user
    """
    user = repository.find_by_id(id)
    return UserEnvelope(data=UserResponse.model_validate(user))


@router.post("", response_model=UserEnvelope, status_code=status.HTTP_201_CREATED)
def create_user(user_in: UserCreate, repository: Repository) -> UserEnvelope:
    """
    Create a user. Role defaults to ``user``.

    Args:
        user_in: Validated creation payload
        repository: User repository

    Returns:
        Created user data
    """
    user = repository.create(user_in)
    logger.info(f"User created (ID: {user.id})")
    return UserEnvelope(data=UserResponse.model_validate(user))


@router.put("/{id}", response_model=UserEnvelope)
def update_user(
    id: UserId, user_in: UserUpdate, repository: Repository
) -> UserEnvelope:
    """Partially update a user; fields left out of the body are unchanged."""
    user = repository.update(id, user_in)
    return UserEnvelope(data=UserResponse.model_validate(user))


@router.delete("/{id}", status_code=status.HTTP_204_NO_CONTENT, response_class=Response)
def delete_user(id: UserId, repository: Repository) -> Response:
    """Delete a user."""
    repository.delete(id)
    logger.info(f"User deleted (ID: {id})")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
