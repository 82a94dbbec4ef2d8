"""Environment variables consulted when no config.yaml is present."""

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from bookshelf.runtime.config.config_data import (
    AppConfig,
    ConfigData,
    DatabaseConfig,
    LoggingConfig,
)


class EnvironmentVariables(BaseSettings):
    """Simple primitive values loaded from environment variables and .env files."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        extra="ignore",
    )

    # Environment and deployment
    environment: Literal["development", "production", "test"] = Field(
        default="development", validation_alias="APP_ENVIRONMENT"
    )
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")

    # Database
    database_url: str = Field(
        default="sqlite:///./bookshelf.db", validation_alias="DATABASE_URL"
    )
    db_username: str | None = Field(default=None, validation_alias="DB_USERNAME")
    db_password: str | None = Field(default=None, validation_alias="DB_PASSWORD")

    def to_config(self) -> ConfigData:
        """Build a full configuration from defaults plus these variables."""
        return ConfigData(
            app=AppConfig(environment=self.environment),
            database=DatabaseConfig(
                url=self.database_url,
                username=self.db_username,
                password=self.db_password,
            ),
            logging=LoggingConfig(level=self.log_level),
        )
