"""
Users Service - Main Application
================================

Process bootstrap for the users service:

1. Parse flags into Settings
2. Setup structured logging
3. Connect to MongoDB (fatal on failure, HTTP server never starts)
4. Build the application context
5. Serve HTTP until the server stops (fatal)
6. Close the database connection (fatal on failure)

Clean Architecture Layers:
- Interfaces: FastAPI controllers
- Application: Services and DTOs
- Domain: Entities
- Infrastructure: MongoDB, HTTP server
"""

import asyncio
import sys
from typing import Callable, List, Optional

import typer
import uvicorn
from fastapi import FastAPI

from users_service.config import Settings, build_settings
from users_service.context import ApplicationContext
from users_service.core import ApplicationException, ConfigurationException, ServerError
from users_service.infrastructure.database import MongoDatabase
from users_service.infrastructure.server import build_server
from users_service.shared.api.middleware import (
    CorrelationIDMiddleware,
    LoggingMiddleware,
    TimeoutMiddleware,
    application_exception_handler,
    global_exception_handler,
)
from users_service.shared.infrastructure.logging import get_logger, setup_logging
from users_service.users.infrastructure import MongoUserRepository
from users_service.users.interfaces import users_router

logger = get_logger(__name__)

ServerFactory = Callable[[FastAPI, Settings], uvicorn.Server]


def create_app(context: ApplicationContext) -> FastAPI:
    """
    Create the FastAPI application around an application context.

    Args:
        context: Dependencies shared by all request handlers

    Returns:
        FastAPI: Configured application
    """
    settings = context.settings

    app = FastAPI(
        title="Users API",
        description="User management backed by MongoDB.",
        version=settings.app_version,
        docs_url="/docs",
        redoc_url="/redoc",
    )
    app.state.context = context

    # Last added runs first: timeouts, then correlation ID, then logging.
    app.add_middleware(LoggingMiddleware)
    app.add_middleware(CorrelationIDMiddleware)
    app.add_middleware(
        TimeoutMiddleware,
        read_timeout=settings.server_read_timeout,
        write_timeout=settings.server_write_timeout,
    )
    app.add_exception_handler(ApplicationException, application_exception_handler)
    app.add_exception_handler(Exception, global_exception_handler)

    app.include_router(users_router)
    return app


async def serve(
    settings: Settings,
    database: Optional[MongoDatabase] = None,
    server_factory: ServerFactory = build_server,
) -> None:
    """
    Connect to the database, then serve HTTP until the server stops.

    Never returns normally: a stopped server raises ServerError. The
    database connection is closed on the way out.

    Raises:
        DatabaseConnectionError: If the database is unreachable
        DatabaseDisconnectError: If the connection cannot be closed
        ServerError: When the HTTP server stops or fails to start
    """
    database = database or MongoDatabase(settings)
    await database.connect()

    try:
        repository = MongoUserRepository(database.users_collection())
        context = ApplicationContext.build(settings, logger, repository)
        server = server_factory(create_app(context), settings)

        logger.info(f"Starting server on {settings.server_uri}")
        try:
            await server.serve()
        except SystemExit as e:
            raise ServerError(
                f"Server on {settings.server_uri} failed",
                {"exit_code": e.code}
            ) from e
        raise ServerError(
            f"Server on {settings.server_uri} stopped",
            {"signal": getattr(server, "stop_signal", None)}
        )
    finally:
        await database.disconnect()


def run(settings: Settings) -> None:
    """
    Run the service to completion.

    Every terminal condition is logged and ends the process with exit
    status 1.
    """
    setup_logging(level=settings.log_level, environment=settings.environment)
    logger.info(
        "Starting Users Service",
        extra={"version": settings.app_version, "environment": settings.environment}
    )

    try:
        asyncio.run(serve(settings))
    except ApplicationException as e:
        logger.critical(
            e.message,
            extra={"error_type": type(e).__name__, "details": e.details}
        )
        raise SystemExit(1) from e
    except KeyboardInterrupt:
        logger.critical("Server interrupted")
        raise SystemExit(1)


# === Command Line ===

BOOL_FLAGS = {"enableCreds": "disableCreds"}
TRUE_VALUES = {"1", "t", "T", "true", "TRUE", "True"}
FALSE_VALUES = {"0", "f", "F", "false", "FALSE", "False"}


def normalize_bool_flags(args: List[str]) -> List[str]:
    """
    Rewrite ``-flag=<bool>`` into the presence flags Click understands.

    ``-enableCreds=true`` becomes ``-enableCreds`` and ``-enableCreds=false``
    becomes the hidden ``-disableCreds``, so an explicit false still wins
    over the environment. Values that are not booleans are left alone and
    rejected by the parser.
    """
    normalized = []
    for arg in args:
        name, sep, value = arg.lstrip("-").partition("=")
        prefix = arg[: len(arg) - len(arg.lstrip("-"))]
        if sep and prefix in ("-", "--") and name in BOOL_FLAGS:
            if value in TRUE_VALUES:
                normalized.append(f"{prefix}{name}")
                continue
            if value in FALSE_VALUES:
                normalized.append(f"{prefix}{BOOL_FLAGS[name]}")
                continue
        normalized.append(arg)
    return normalized


cli = typer.Typer(
    name="users-service",
    help="Users Service - user management over HTTP backed by MongoDB",
    add_completion=False,
)


@cli.command()
def main(
    server_addr: Optional[str] = typer.Option(
        None,
        "-serverAddr",
        "--serverAddr",
        help='Http server network address [default: ""]',
    ),
    server_port: Optional[int] = typer.Option(
        None,
        "-serverPort",
        "--serverPort",
        help="Http server network port [default: 4000]",
    ),
    mongo_uri: Optional[str] = typer.Option(
        None,
        "-mongoURI",
        "--mongoURI",
        help="Database hostname url [default: mongo://localhost:27017]",
    ),
    mongo_db: Optional[str] = typer.Option(
        None,
        "-mongoDB",
        "--mongoDB",
        help="DB name [default: users]",
    ),
    enable_creds: bool = typer.Option(
        False,
        "-enableCreds",
        "--enableCreds",
        help="Enable the use of credentials for mongo connection (also -enableCreds=true|false)",
    ),
    disable_creds: bool = typer.Option(
        False,
        "-disableCreds",
        "--disableCreds",
        hidden=True,
    ),
) -> None:
    """Serve the users API."""
    creds: Optional[bool] = None
    if disable_creds:
        creds = False
    elif enable_creds:
        creds = True

    try:
        settings = build_settings(
            server_addr=server_addr,
            server_port=server_port,
            mongo_uri=mongo_uri,
            mongo_db=mongo_db,
            enable_creds=creds,
        )
    except ConfigurationException as e:
        typer.secho(f"✗ Invalid configuration: {e.message}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=2)

    run(settings)


def entrypoint() -> None:
    """Console script entry point."""
    cli(args=normalize_bool_flags(sys.argv[1:]), prog_name="users-service")


if __name__ == "__main__":
    entrypoint()
