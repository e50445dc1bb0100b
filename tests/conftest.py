"""Pytest configuration and fixtures for the users service.

HTTP tests run against create_app() through ASGITransport, with the users
collection replaced by an in-memory fake.
"""

import logging

import pytest
from httpx import ASGITransport, AsyncClient

from users_service.config import Settings
from users_service.context import ApplicationContext
from users_service.main import create_app
from users_service.users.infrastructure import MongoUserRepository

from fakes import FakeCollection

# Environment variables Settings and MongoCredentials would pick up.
_SETTINGS_ENV = (
    "SERVER_ADDR",
    "SERVER_PORT",
    "MONGO_URI",
    "MONGO_DB",
    "ENABLE_CREDS",
    "ENVIRONMENT",
    "LOG_LEVEL",
    "MONGODB_USERNAME",
    "MONGODB_PASSWORD",
)


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Keep the host environment out of Settings."""
    for name in _SETTINGS_ENV:
        monkeypatch.delenv(name, raising=False)
    yield


@pytest.fixture(autouse=True)
def quiet_logging():
    logging.getLogger("users_service").setLevel(logging.CRITICAL)
    yield
    logging.getLogger("users_service").setLevel(logging.NOTSET)


@pytest.fixture
def settings() -> Settings:
    return Settings(_env_file=None)


@pytest.fixture
def collection() -> FakeCollection:
    return FakeCollection()


@pytest.fixture
def context(settings, collection) -> ApplicationContext:
    return ApplicationContext.build(
        settings,
        logging.getLogger("users_service.tests"),
        MongoUserRepository(collection)
    )


@pytest.fixture
async def client(context) -> AsyncClient:
    """Async HTTP client against the FastAPI app (ASGI)."""
    transport = ASGITransport(app=create_app(context))
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
