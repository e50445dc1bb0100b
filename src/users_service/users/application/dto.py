"""
Users Application DTOs
======================

Pydantic models for request/response validation.
"""

from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, StringConstraints

from users_service.users.domain import User

# Surrounding whitespace is stripped before the length check.
NameStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=200)]


# ========== Request DTOs ==========

class CreateUserRequest(BaseModel):
    """Request model for user creation."""
    name: NameStr = Field(..., description="First name")
    lastname: NameStr = Field(..., description="Last name")

    def to_domain(self) -> User:
        return User(id=None, name=self.name, lastname=self.lastname)


class UpdateUserRequest(CreateUserRequest):
    """Request model for replacing a user's fields."""


# ========== Response DTOs ==========

class UserResponse(BaseModel):
    """Response model for a single user."""
    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="User ObjectId as hex string")
    name: str
    lastname: str

    @classmethod
    def from_domain(cls, user: User) -> "UserResponse":
        """Create from domain entity."""
        return cls(id=user.id, name=user.name, lastname=user.lastname)


class DeleteUserResponse(BaseModel):
    """Response model for user deletion."""
    deleted: int
