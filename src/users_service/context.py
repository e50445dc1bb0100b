"""
Application Context
===================

Dependencies shared read-only by every request handler.
"""

import logging
from dataclasses import dataclass

from users_service.config import Settings
from users_service.users.application import IUserRepository, UserService


@dataclass(frozen=True)
class ApplicationContext:
    """
    Built once at startup and handed to the app factory.

    Holds the logger, the settings the process was started with, and the
    user data-access object.
    """
    settings: Settings
    logger: logging.Logger
    users: IUserRepository
    user_service: UserService

    @classmethod
    def build(
        cls,
        settings: Settings,
        logger: logging.Logger,
        users: IUserRepository
    ) -> "ApplicationContext":
        return cls(
            settings=settings,
            logger=logger,
            users=users,
            user_service=UserService(users)
        )
