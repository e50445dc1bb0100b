"""
Core Module
============

Shared core utilities and abstractions used across the application.
"""

from users_service.core.exceptions import (
    ApplicationException,
    ConfigurationException,
    ValidationException,
    RepositoryException,
    DatabaseConnectionError,
    DatabaseDisconnectError,
    ResourceNotFoundException,
    ServerError,
)

__all__ = [
    "ApplicationException",
    "ConfigurationException",
    "ValidationException",
    "RepositoryException",
    "DatabaseConnectionError",
    "DatabaseDisconnectError",
    "ResourceNotFoundException",
    "ServerError",
]
