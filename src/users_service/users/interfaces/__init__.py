"""
Users Interfaces Layer
======================

Contains:
- Controllers: FastAPI route handlers
"""

from users_service.users.interfaces.controllers import router as users_router

__all__ = ["users_router"]
