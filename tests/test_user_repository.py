"""
Tests for the user repository and its storage error mapping.
"""

from unittest.mock import MagicMock

import pytest
from pymongo.errors import DuplicateKeyError, ServerSelectionTimeoutError

from accounts_api.core.errors import ApiError, ErrorKind
from accounts_api.core.security import pwd_context
from accounts_api.models.user import UserRole
from accounts_api.schemas.user import UserCreate, UserUpdate
from accounts_api.services.user_repository import UserRepository

MISSING_ID = "0123456789abcdef01234567"


def _create(repository: UserRepository, email: str = "repo@example.com", **overrides: str):
    payload = {"name": "Repo User", "email": email, "password": "repopassword"}
    payload.update(overrides)
    return repository.create(UserCreate(**payload))


def test_create_and_find(repository: UserRepository) -> None:
    user = _create(repository)
    assert user.role is UserRole.USER
    assert not hasattr(user, "password")

    found = repository.find_by_id(user.id)
    assert found.id == user.id
    assert found.email == "repo@example.com"
    assert found.created_at == user.created_at


def test_create_hashes_password(repository: UserRepository, users_collection) -> None:
    user = _create(repository)
    document = users_collection.find_one({"email": user.email})
    assert pwd_context.verify("repopassword", document["password"])


def test_duplicate_email_is_conflict(repository: UserRepository) -> None:
    _create(repository)
    with pytest.raises(ApiError) as exc_info:
        _create(repository, name="Someone Else")
    assert exc_info.value.kind is ErrorKind.CONFLICT
    assert exc_info.value.message == "User with this email already exists"
    assert exc_info.value.code == "RESOURCE_CONFLICT"


def test_find_all_excludes_passwords(repository: UserRepository) -> None:
    _create(repository, email="a@example.com")
    _create(repository, email="b@example.com", role="admin")

    users = repository.find_all()
    assert [user.email for user in users] == ["a@example.com", "b@example.com"]
    assert [user.role for user in users] == [UserRole.USER, UserRole.ADMIN]


def test_update_changes_only_supplied_fields(repository: UserRepository) -> None:
    user = _create(repository)
    updated = repository.update(user.id, UserUpdate(role=UserRole.ADMIN))
    assert updated.role is UserRole.ADMIN
    assert updated.name == user.name
    assert updated.email == user.email


@pytest.mark.parametrize("operation", ["find_by_id", "update", "delete"])
def test_missing_user_is_not_found(repository: UserRepository, operation: str) -> None:
    args = (MISSING_ID, UserUpdate(name="Nobody")) if operation == "update" else (MISSING_ID,)
    with pytest.raises(ApiError) as exc_info:
        getattr(repository, operation)(*args)
    assert exc_info.value.kind is ErrorKind.NOT_FOUND
    assert exc_info.value.message == "User not found"


def test_delete(repository: UserRepository) -> None:
    user = _create(repository)
    repository.delete(user.id)
    with pytest.raises(ApiError) as exc_info:
        repository.delete(user.id)
    assert exc_info.value.kind is ErrorKind.NOT_FOUND


def test_malformed_id_is_not_found(repository: UserRepository) -> None:
    with pytest.raises(ApiError) as exc_info:
        repository.find_by_id("not-an-object-id")
    assert exc_info.value.kind is ErrorKind.NOT_FOUND


@pytest.mark.parametrize(
    "method, args, message",
    [
        ("find_all", (), "Unable to find users"),
        ("find_by_id", (MISSING_ID,), "Unable to find user"),
        ("update", (MISSING_ID, UserUpdate(name="Someone")), "Unable to update user"),
        ("delete", (MISSING_ID,), "Unable to delete user"),
    ],
)
def test_storage_failure_is_server_error(method: str, args: tuple, message: str) -> None:
    collection = MagicMock()
    failure = ServerSelectionTimeoutError("no servers available")
    collection.find.side_effect = failure
    collection.find_one.side_effect = failure
    collection.find_one_and_update.side_effect = failure
    collection.delete_one.side_effect = failure

    with pytest.raises(ApiError) as exc_info:
        getattr(UserRepository(collection), method)(*args)
    assert exc_info.value.kind is ErrorKind.SERVER
    assert exc_info.value.message == message
    assert exc_info.value.__cause__ is failure


def test_create_storage_failure_is_server_error() -> None:
    collection = MagicMock()
    collection.insert_one.side_effect = ServerSelectionTimeoutError("no servers available")

    with pytest.raises(ApiError) as exc_info:
        UserRepository(collection).create(
            UserCreate(name="Repo User", email="repo@example.com", password="repopassword")
        )
    assert exc_info.value.kind is ErrorKind.SERVER
    assert exc_info.value.message == "Unable to create user"


def test_create_duplicate_key_from_driver() -> None:
    collection = MagicMock()
    collection.insert_one.side_effect = DuplicateKeyError("E11000 duplicate key error")

    with pytest.raises(ApiError) as exc_info:
        UserRepository(collection).create(
            UserCreate(name="Repo User", email="repo@example.com", password="repopassword")
        )
    assert exc_info.value.kind is ErrorKind.CONFLICT
