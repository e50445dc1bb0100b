"""
Users Infrastructure Repositories
=================================

MongoDB implementation of the user repository.
"""

from contextlib import contextmanager
from typing import Any, List, Optional

from bson import ObjectId
from bson.errors import InvalidId
from pymongo import ReturnDocument
from pymongo.errors import PyMongoError

from users_service.core import RepositoryException, ValidationException
from users_service.shared.infrastructure.logging import get_logger
from users_service.users.application import IUserRepository
from users_service.users.domain import User

logger = get_logger(__name__)


def _parse_object_id(user_id: str) -> Optional[ObjectId]:
    try:
        return ObjectId(user_id)
    except (InvalidId, TypeError):
        return None


def _to_domain(document: dict) -> Optional[User]:
    """Build a User, or None when the stored document lacks valid names."""
    try:
        return User(
            id=str(document["_id"]),
            name=document.get("name"),
            lastname=document.get("lastname")
        )
    except ValidationException:
        return None


def _require_user(document: dict) -> User:
    user = _to_domain(document)
    if user is None:
        raise RepositoryException(
            "Stored user document is malformed",
            {"user_id": str(document["_id"])}
        )
    return user


@contextmanager
def _driver_errors(operation: str):
    """Wrap driver failures in RepositoryException."""
    try:
        yield
    except PyMongoError as e:
        raise RepositoryException(
            f"User {operation} failed: {e}",
            {"operation": operation}
        ) from e


class MongoUserRepository(IUserRepository):
    """MongoDB implementation for users, backed by one collection handle."""

    def __init__(self, collection: Any):
        self._collection = collection

    @property
    def collection(self) -> Any:
        return self._collection

    async def list_all(self) -> List[User]:
        """Get every stored user."""
        with _driver_errors("list"):
            documents = await self._collection.find({}).to_list(length=None)
        users = []
        for document in documents:
            user = _to_domain(document)
            if user is None:
                logger.warning(
                    "Skipping malformed user document",
                    extra={"user_id": str(document.get("_id"))}
                )
                continue
            users.append(user)
        return users

    async def get_by_id(self, user_id: str) -> Optional[User]:
        """Get user by id."""
        object_id = _parse_object_id(user_id)
        if object_id is None:
            return None

        with _driver_errors("lookup"):
            document = await self._collection.find_one({"_id": object_id})
        return _require_user(document) if document else None

    async def create(self, user: User) -> User:
        """Insert a new user document."""
        with _driver_errors("insert"):
            result = await self._collection.insert_one(
                {"name": user.name, "lastname": user.lastname}
            )
        return user.with_id(str(result.inserted_id))

    async def update(self, user_id: str, user: User) -> Optional[User]:
        """Replace the name fields of an existing user."""
        object_id = _parse_object_id(user_id)
        if object_id is None:
            return None

        with _driver_errors("update"):
            document = await self._collection.find_one_and_update(
                {"_id": object_id},
                {"$set": {"name": user.name, "lastname": user.lastname}},
                return_document=ReturnDocument.AFTER
            )
        return _require_user(document) if document else None

    async def delete(self, user_id: str) -> int:
        """Delete a user document."""
        object_id = _parse_object_id(user_id)
        if object_id is None:
            return 0

        with _driver_errors("delete"):
            result = await self._collection.delete_one({"_id": object_id})
        return result.deleted_count
