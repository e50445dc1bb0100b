"""
Users Domain Layer
==================

Framework-agnostic entities for the users module.
"""

from users_service.users.domain.entities import User

__all__ = ["User"]
