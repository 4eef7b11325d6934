"""Primitive settings read from the process environment and .env files."""

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


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
    port: int = Field(default=8000, validation_alias="PORT")

    # Infrastructure URLs
    database_url: str = Field(
        default="sqlite:///./catalog.db", validation_alias="DATABASE_URL"
    )
    base_url: str | None = Field(default=None, validation_alias="BASE_URL")

    metrics_enabled: bool = Field(default=False, validation_alias="METRICS_ENABLED")
    config_file: str | None = Field(default=None, validation_alias="APP_CONFIG_FILE")
