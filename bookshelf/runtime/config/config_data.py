"""Pydantic models for parsing the config.yaml configuration file.

These models correspond to the structure of config.yaml and handle
validation and type conversion of the YAML configuration data.
"""

from __future__ import annotations

from typing import Literal

from loguru import logger
from pydantic import BaseModel, Field, computed_field, field_validator
from sqlalchemy.engine import make_url


class LoggingConfig(BaseModel):
    """Logging configuration model."""

    level: str = Field(default="INFO", description="Logging level")
    format: Literal["json", "plain"] = Field(default="plain", description="Log format")
    file: str | None = Field(default=None, description="Log file path (disabled when empty)")
    max_size_mb: int = Field(default=10, description="Maximum log file size in MB")
    backup_count: int = Field(
        default=5, description="Number of backup log files to keep"
    )

    @field_validator("file", mode="before")
    @classmethod
    def _empty_file_disables_sink(cls, value: str | None) -> str | None:
        return value or None


class DatabaseConfig(BaseModel):
    """Database configuration model."""

    url: str = Field(
        default="sqlite:///./bookshelf.db",
        description="SQLAlchemy connection URL",
    )
    username: str | None = Field(
        default=None, description="Database username (DB_USERNAME)"
    )
    password: str | None = Field(
        default=None, description="Database password (DB_PASSWORD)"
    )
    pool_size: int = Field(default=5, ge=1, description="Connection pool size")
    max_overflow: int = Field(default=10, ge=0, description="Maximum pool overflow")
    pool_timeout: int = Field(default=30, description="Pool timeout in seconds")
    pool_recycle: int = Field(default=1800, description="Pool recycle time in seconds")

    @field_validator("username", "password", mode="before")
    @classmethod
    def _blank_credentials_are_unset(cls, value: str | None) -> str | None:
        return value or None

    @property
    def is_sqlite(self) -> bool:
        return make_url(self.url).get_backend_name() == "sqlite"

    @computed_field
    @property
    def connection_string(self) -> str:
        """Construct the connection string, injecting credentials when provided."""
        base_url = make_url(self.url)

        if self.username and self.username != base_url.username:
            if base_url.username:
                logger.warning(
                    "Database user '{}' does not match the one in the URL '{}'. Using '{}'.",
                    self.username,
                    base_url.username,
                    self.username,
                )
            base_url = base_url.set(username=self.username)

        if self.password and self.password != base_url.password:
            if base_url.password:
                logger.warning(
                    "Database password from environment variable does not match the "
                    "one in the URL. Using password from environment variable."
                )
            base_url = base_url.set(password=self.password)

        # Avoid SQLAlchemy's password masking
        return base_url.render_as_string(hide_password=False)


class AppConfig(BaseModel):
    """HTTP server configuration model."""

    environment: Literal["development", "production", "test"] = Field(
        default="development", description="Application environment"
    )
    host: str = Field(default="0.0.0.0", description="Listen address")
    port: int = Field(default=8080, description="Listen port")
    read_timeout: float = Field(
        default=15.0, gt=0, description="Per-connection read timeout in seconds"
    )
    write_timeout: float = Field(
        default=15.0, gt=0, description="Per-connection write timeout in seconds"
    )
    idle_timeout: float = Field(
        default=60.0, gt=0, description="Keep-alive idle timeout in seconds"
    )
    graceful_timeout: float = Field(
        default=15.0, ge=0, description="Drain window for in-flight requests on shutdown"
    )


class ConfigData(BaseModel):
    """Root configuration model that matches the config.yaml structure."""

    app: AppConfig = Field(
        default_factory=AppConfig, description="Application configuration"
    )
    database: DatabaseConfig = Field(
        default_factory=DatabaseConfig, description="Database configuration"
    )
    logging: LoggingConfig = Field(
        default_factory=LoggingConfig, description="Logging configuration"
    )
