"""
Database Infrastructure
=======================

Manages the MongoDB client: connection options, the bounded-timeout connect,
the handle to the ``users`` collection and the disconnect at shutdown.

Uses PyMongo's native asyncio client.
"""

import asyncio
from typing import Any, Callable, Optional

from pymongo import AsyncMongoClient
from pymongo.asynchronous.collection import AsyncCollection
from pymongo.errors import (
    ConfigurationError,
    ConnectionFailure,
    OperationFailure,
    PyMongoError,
)

from users_service.config import USERS_COLLECTION, MongoCredentials, Settings
from users_service.core import DatabaseConnectionError, DatabaseDisconnectError
from users_service.shared.infrastructure.logging import get_logger, log_latency

logger = get_logger(__name__)

ClientFactory = Callable[..., Any]


def build_client_options(settings: Settings) -> dict[str, Any]:
    """
    Build the keyword arguments for the MongoDB client.

    Credentials are read from the environment only when ``enable_creds``
    is set.

    Args:
        settings: Application settings

    Returns:
        dict: Client keyword arguments
    """
    timeout_ms = int(settings.mongo_connect_timeout * 1000)
    options: dict[str, Any] = {
        "host": settings.mongo_uri,
        "serverSelectionTimeoutMS": timeout_ms,
        "connectTimeoutMS": timeout_ms,
        "appname": settings.app_name,
    }

    if settings.enable_creds:
        credentials = MongoCredentials()
        options["username"] = credentials.mongodb_username
        options["password"] = credentials.mongodb_password.get_secret_value()

    return options


class MongoDatabase:
    """
    Owner of the MongoDB client for the process lifetime.

    Usage:
        database = MongoDatabase(settings)
        await database.connect()
        collection = database.users_collection()
        ...
        await database.disconnect()
    """

    def __init__(self, settings: Settings, client_factory: ClientFactory = AsyncMongoClient):
        self._settings = settings
        self._client_factory = client_factory
        self._client: Optional[Any] = None

    @property
    def client(self) -> Any:
        """
        Get the connected client.

        Raises:
            RuntimeError: If connect() has not succeeded
        """
        if self._client is None:
            raise RuntimeError("Database not connected. Call connect() first.")
        return self._client

    async def connect(self) -> None:
        """
        Open the connection and verify it with a ping.

        Each attempt is bounded by ``mongo_connect_timeout``. Configuration
        errors fail immediately; transient errors are retried up to
        ``mongo_connect_retries`` times with linear backoff.

        Raises:
            DatabaseConnectionError: If no attempt succeeds
        """
        settings = self._settings
        max_attempts = settings.mongo_connect_retries + 1
        timeout = settings.mongo_connect_timeout
        client = None
        last_error: Optional[BaseException] = None

        for attempt in range(1, max_attempts + 1):
            try:
                if client is None:
                    client = self._client_factory(**build_client_options(settings))
                with log_latency(logger, "mongo_ping", attempt=attempt):
                    await asyncio.wait_for(client.admin.command("ping"), timeout=timeout)
            except (ConfigurationError, OperationFailure) as e:
                if client is not None:
                    await self._close_quietly(client)
                raise DatabaseConnectionError(
                    f"Invalid database configuration: {e}", attempts=attempt
                ) from e
            except (ConnectionFailure, asyncio.TimeoutError) as e:
                last_error = e
                logger.warning(
                    "Database connection attempt failed",
                    extra={
                        "attempt": attempt,
                        "max_attempts": max_attempts,
                        "error": str(e) or type(e).__name__,
                    }
                )
                if attempt < max_attempts:
                    await asyncio.sleep(settings.mongo_retry_backoff * attempt)
            else:
                self._client = client
                logger.info(
                    "Database connection established",
                    extra={"database": settings.mongo_db, "attempts": attempt}
                )
                return

        if client is not None:
            await self._close_quietly(client)

        reason = str(last_error) or type(last_error).__name__
        raise DatabaseConnectionError(
            f"Could not connect to database after {max_attempts} attempt(s): {reason}",
            attempts=max_attempts
        ) from last_error

    def users_collection(self) -> AsyncCollection:
        """Handle to the ``users`` collection of the configured database."""
        return self.client.get_database(self._settings.mongo_db).get_collection(USERS_COLLECTION)

    async def disconnect(self) -> None:
        """
        Close the client and release its connections.

        Raises:
            DatabaseDisconnectError: If the client fails to close
        """
        if self._client is None:
            return

        client, self._client = self._client, None
        try:
            await client.close()
        except PyMongoError as e:
            raise DatabaseDisconnectError(f"Failed to close database connection: {e}") from e

        logger.info("Database connection closed")

    async def _close_quietly(self, client: Any) -> None:
        try:
            await client.close()
        except PyMongoError as e:
            logger.warning("Failed to close unused database client", extra={"error": str(e)})
