"""
Users Application Services
==========================

Orchestrates user operations between the API layer and the repository.
"""

from abc import ABC, abstractmethod
from typing import List, Optional

from users_service.core import ResourceNotFoundException
from users_service.shared.infrastructure.logging import get_logger
from users_service.users.domain import User

logger = get_logger(__name__)


# ========== Repository Interfaces ==========

class IUserRepository(ABC):
    """Interface for user data access."""

    @abstractmethod
    async def list_all(self) -> List[User]:
        """Get every stored user."""

    @abstractmethod
    async def get_by_id(self, user_id: str) -> Optional[User]:
        """Get user by id, None when unknown."""

    @abstractmethod
    async def create(self, user: User) -> User:
        """Store a new user and return it with its id."""

    @abstractmethod
    async def update(self, user_id: str, user: User) -> Optional[User]:
        """Replace a user's fields, None when unknown."""

    @abstractmethod
    async def delete(self, user_id: str) -> int:
        """Delete a user, returning the number of removed documents."""


# ========== Application Services ==========

class UserService:
    """
    Service for user management.

    Translates missing users into ResourceNotFoundException.
    """

    def __init__(self, repository: IUserRepository):
        self._repository = repository

    async def list_users(self) -> List[User]:
        return await self._repository.list_all()

    async def get_user(self, user_id: str) -> User:
        user = await self._repository.get_by_id(user_id)
        if user is None:
            raise ResourceNotFoundException("User", user_id)
        return user

    async def create_user(self, user: User) -> User:
        created = await self._repository.create(user)
        logger.info("User created", extra={"user_id": created.id})
        return created

    async def update_user(self, user_id: str, user: User) -> User:
        updated = await self._repository.update(user_id, user)
        if updated is None:
            raise ResourceNotFoundException("User", user_id)
        logger.info("User updated", extra={"user_id": user_id})
        return updated

    async def delete_user(self, user_id: str) -> int:
        deleted = await self._repository.delete(user_id)
        if deleted == 0:
            raise ResourceNotFoundException("User", user_id)
        logger.info("User deleted", extra={"user_id": user_id})
        return deleted
