"""
Configuration Module
====================

Application settings and configuration management using Pydantic.

Values are resolved in this order: command-line flags, environment
variables (or a ``.env`` file), then the defaults below. Settings are
frozen once built.
"""

from typing import Any

from pydantic import Field, SecretStr, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from users_service.core import ConfigurationException


# ========== Constants ==========

USERS_COLLECTION = "users"


class Settings(BaseSettings):
    """
    Application settings loaded from flags and environment variables.

    Uses Pydantic for type coercion; the only value checked beyond its type
    is ``environment``.
    """

    # ========== Application ==========
    app_name: str = Field(default="users-service", description="Application name")
    app_version: str = Field(default="1.0.0", description="Application version")
    environment: str = Field(default="development", description="Environment name")
    log_level: str = Field(default="INFO", description="Root log level")

    # ========== Server ==========
    server_addr: str = Field(default="", description="Http server network address")
    server_port: int = Field(default=4000, description="Http server network port")
    server_idle_timeout: float = Field(
        default=60.0,
        description="Seconds an idle keep-alive connection is held open"
    )
    server_read_timeout: float = Field(
        default=5.0,
        description="Seconds allowed for reading a full request"
    )
    server_write_timeout: float = Field(
        default=10.0,
        description="Seconds allowed before the response must start"
    )

    # ========== Database ==========
    mongo_uri: str = Field(
        default="mongo://localhost:27017",
        description="Database hostname url"
    )
    mongo_db: str = Field(default="users", description="DB name")
    enable_creds: bool = Field(
        default=False,
        description="Enable the use of credentials for mongo connection"
    )
    mongo_connect_timeout: float = Field(
        default=20.0,
        description="Seconds allowed for establishing the database connection"
    )
    mongo_connect_retries: int = Field(
        default=0,
        description="Extra connect attempts after a transient failure",
        ge=0
    )
    mongo_retry_backoff: float = Field(
        default=1.0,
        description="Base delay in seconds between connect attempts",
        ge=0
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        frozen=True
    )

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Ensure environment is one of allowed values."""
        allowed = {"development", "staging", "production"}
        if v not in allowed:
            raise ValueError(f"environment must be one of {allowed}")
        return v

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        return v.upper()

    @property
    def server_uri(self) -> str:
        """Bind address in ``<addr>:<port>`` form, e.g. ``:4000``."""
        return f"{self.server_addr}:{self.server_port}"


class MongoCredentials(BaseSettings):
    """
    Database credentials read from ``MONGODB_USERNAME`` and
    ``MONGODB_PASSWORD``.

    Only instantiated when credentials are enabled, so the environment is
    not consulted otherwise.
    """

    mongodb_username: str = Field(default="", description="Database user")
    mongodb_password: SecretStr = Field(default=SecretStr(""), description="Database password")

    model_config = SettingsConfigDict(
        case_sensitive=False,
        extra="ignore",
        frozen=True
    )


def build_settings(**overrides: Any) -> Settings:
    """
    Build settings, applying only the overrides that were actually given.

    Args:
        **overrides: Field values, ``None`` meaning "not provided"

    Returns:
        Settings: Frozen settings instance

    Raises:
        ConfigurationException: If a value from flags or environment is invalid
    """
    provided = {key: value for key, value in overrides.items() if value is not None}
    try:
        return Settings(**provided)
    except ValidationError as e:
        fields = [".".join(str(part) for part in error["loc"]) for error in e.errors()]
        raise ConfigurationException(
            f"Invalid settings: {', '.join(fields)}",
            {"fields": fields}
        ) from e
