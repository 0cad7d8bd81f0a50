"""
User repository implementing CRUD against the ``users`` collection.
Translates storage failures into the API error taxonomy.
"""

from datetime import datetime, timezone
from typing import Any

from bson import ObjectId
from bson.errors import InvalidId
from pymongo import ASCENDING, ReturnDocument
from pymongo.collection import Collection
from pymongo.errors import DuplicateKeyError, PyMongoError

from accounts_api.core.errors import ApiError
from accounts_api.core.security import get_password_hash
from accounts_api.models.user import User
from accounts_api.schemas.user import UserCreate, UserUpdate

# Projection applied to every read so the hash never leaves the store
WITHOUT_PASSWORD = {"password": 0}

DUPLICATE_EMAIL = "User with this email"


def _object_id(user_id: str) -> ObjectId:
    try:
        return ObjectId(user_id)
    except (InvalidId, TypeError):
        raise ApiError.not_found("User")


def _now() -> datetime:
    # BSON dates keep millisecond precision
    now = datetime.now(timezone.utc)
    return now.replace(microsecond=now.microsecond // 1000 * 1000)


class UserRepository:
    """Data access for user documents."""

    def __init__(self, collection: Collection) -> None:
        self.collection = collection

    def create(self, user_create: UserCreate) -> User:
        """
        Insert a new user with a hashed password.

        Args:
            user_create: Validated creation payload

        Returns:
            Created user without the password

        Raises:
            ApiError: CONFLICT if the email is taken, SERVER on any other
                storage failure
        """
        document: dict[str, Any] = {
            "name": user_create.name,
            "email": user_create.email,
            "password": get_password_hash(user_create.password),
            "role": user_create.role.value,
            "created_at": _now(),
        }
        try:
            result = self.collection.insert_one(document)
        except DuplicateKeyError:
            raise ApiError.conflict(DUPLICATE_EMAIL)
        except PyMongoError as e:
            raise ApiError.server("Unable to create user") from e

        document["_id"] = result.inserted_id
        return User.from_document(document)

    def find_all(self) -> list[User]:
        """Return every user in insertion order."""
        try:
            documents = list(self.collection.find({}, WITHOUT_PASSWORD).sort("_id", ASCENDING))
        except PyMongoError as e:
            raise ApiError.server("Unable to find users") from e
        return [User.from_document(document) for document in documents]

    def find_by_id(self, user_id: str) -> User:
        """
        Retrieve a user by ID.

        Raises:
            ApiError: NOT_FOUND if no such user, SERVER on storage failure
        """
        object_id = _object_id(user_id)
        try:
            document = self.collection.find_one({"_id": object_id}, WITHOUT_PASSWORD)
        except PyMongoError as e:
            raise ApiError.server("Unable to find user") from e

        if document is None:
            raise ApiError.not_found("User")
        return User.from_document(document)

    def update(self, user_id: str, user_update: UserUpdate) -> User:
        """
        Apply a partial update; only the supplied fields change.

        Raises:
            ApiError: NOT_FOUND if no such user, CONFLICT if the new email is
                taken, SERVER on any other storage failure
        """
        object_id = _object_id(user_id)
        changes = user_update.model_dump(mode="json", exclude_unset=True)
        if "password" in changes:
            changes["password"] = get_password_hash(changes["password"])

        try:
            if changes:
                document = self.collection.find_one_and_update(
                    {"_id": object_id},
                    {"$set": changes},
                    projection=WITHOUT_PASSWORD,
                    return_document=ReturnDocument.AFTER,
                )
            else:
                document = self.collection.find_one({"_id": object_id}, WITHOUT_PASSWORD)
        except DuplicateKeyError:
            raise ApiError.conflict(DUPLICATE_EMAIL)
        except PyMongoError as e:
            raise ApiError.server("Unable to update user") from e

        if document is None:
            raise ApiError.not_found("User")
        return User.from_document(document)

    def delete(self, user_id: str) -> None:
        """
        Delete a user.

        Raises:
            ApiError: NOT_FOUND if no such user, SERVER on storage failure
        """
        object_id = _object_id(user_id)
        try:
            result = self.collection.delete_one({"_id": object_id})
        except PyMongoError as e:
            raise ApiError.server("Unable to delete user") from e

        if result.deleted_count == 0:
            raise ApiError.not_found("User")
