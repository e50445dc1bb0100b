"""
Users Application Layer
=======================

Contains:
- Services: Business logic orchestration
- DTOs: Data transfer objects for API serialization
"""

from users_service.users.application.dto import (
    CreateUserRequest,
    UpdateUserRequest,
    UserResponse,
    DeleteUserResponse,
)
from users_service.users.application.services import (
    UserService,
    IUserRepository,
)

__all__ = [
    # DTOs
    "CreateUserRequest",
    "UpdateUserRequest",
    "UserResponse",
    "DeleteUserResponse",
    # Services
    "UserService",
    # Repository Interfaces
    "IUserRepository",
]
