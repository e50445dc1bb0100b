"""
HTTP Server
===========

Builds the uvicorn server that serves the FastAPI application.
"""

import contextlib
import signal
import threading
from typing import Iterator, Optional

import uvicorn
from fastapi import FastAPI
from uvicorn.server import HANDLED_SIGNALS

from users_service.config import Settings

# Empty address means every interface.
ALL_INTERFACES = "0.0.0.0"


class UsersServer(uvicorn.Server):
    """
    uvicorn server that turns SIGINT/SIGTERM into a normal return.

    uvicorn re-raises captured signals once serve() finishes, which would
    kill the process before the database is closed and the stop is logged.
    Here the signals only trigger the shutdown.
    """

    @contextlib.contextmanager
    def capture_signals(self) -> Iterator[None]:
        if threading.current_thread() is not threading.main_thread():
            yield
            return

        original_handlers = {sig: signal.signal(sig, self.handle_exit) for sig in HANDLED_SIGNALS}
        try:
            yield
        finally:
            for sig, handler in original_handlers.items():
                signal.signal(sig, handler)

    @property
    def stop_signal(self) -> Optional[str]:
        """Name of the first signal that stopped the server, if any."""
        captured = getattr(self, "_captured_signals", [])
        return signal.Signals(captured[0]).name if captured else None


def bind_host(settings: Settings) -> str:
    return settings.server_addr or ALL_INTERFACES


def build_server(app: FastAPI, settings: Settings) -> UsersServer:
    """
    Compose the server for ``settings.server_uri``.

    The idle timeout maps to uvicorn's keep-alive timeout; read and write
    timeouts are enforced by TimeoutMiddleware inside the app. Logging is
    left to the application's own configuration.

    Args:
        app: Application to serve
        settings: Application settings

    Returns:
        UsersServer: Server ready for ``await server.serve()``
    """
    config = uvicorn.Config(
        app,
        host=bind_host(settings),
        port=settings.server_port,
        timeout_keep_alive=int(settings.server_idle_timeout),
        log_config=None,
        access_log=False,
        lifespan="off",
    )
    return UsersServer(config)
