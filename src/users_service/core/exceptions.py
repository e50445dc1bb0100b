"""
Core Exceptions
================

Custom exceptions for the users service.

Startup failures (configuration, database connect/disconnect, server
termination) are terminal: the bootstrap logs them and exits non-zero.
Request-time failures are translated into JSON error responses at the API
boundary.
"""

from typing import Optional


class ApplicationException(Exception):
    """Base exception for all application errors."""

    def __init__(self, message: str, details: Optional[dict] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


class ConfigurationException(ApplicationException):
    """Exception for configuration errors."""


class ValidationException(ApplicationException):
    """Exception for validation errors."""


class RepositoryException(ApplicationException):
    """Base exception for repository/data access errors."""


class DatabaseConnectionError(RepositoryException):
    """Raised when the database connection cannot be established."""

    def __init__(self, message: str, attempts: int = 1, details: Optional[dict] = None):
        self.attempts = attempts
        super().__init__(message, details or {"attempts": attempts})


class DatabaseDisconnectError(RepositoryException):
    """Raised when the database connection cannot be released at shutdown."""


class ResourceNotFoundException(ApplicationException):
    """Exception when a requested resource is not found."""

    def __init__(
        self,
        resource_type: str,
        resource_id: Optional[str] = None,
        details: Optional[dict] = None
    ):
        self.resource_type = resource_type
        self.resource_id = resource_id
        message = f"{resource_type}"
        if resource_id:
            message += f" with id '{resource_id}'"
        message += " not found"
        super().__init__(message, details)


class ServerError(ApplicationException):
    """Raised when the HTTP server stops serving."""
