"""
Users Infrastructure Layer
==========================

Contains:
- Repositories: MongoDB data access implementations
"""

from users_service.users.infrastructure.repositories import MongoUserRepository

__all__ = ["MongoUserRepository"]
