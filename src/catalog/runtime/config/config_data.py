"""Pydantic models for parsing the config.yaml configuration file.

This module contains Pydantic models that correspond to the structure of config.yaml.
These models handle validation and type conversion of the YAML configuration data.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field, computed_field


class CORSConfig(BaseModel):
    """CORS configuration for the application."""

    origins: list[str] = Field(default=["*"])
    allow_credentials: bool = False
    allow_methods: list[str] = Field(
        default=["GET", "POST", "PATCH", "OPTIONS"]
    )
    allow_headers: list[str] = Field(default=["*"])


class LoggingConfig(BaseModel):
    """Logging configuration model."""

    level: str = Field(default="INFO", description="Logging level")
    format: Literal["json", "plain"] = Field(default="json", description="Log format")
    file: str | None = Field(default=None, description="Log file path")
    max_size_mb: int = Field(default=10, description="Maximum log file size in MB")
    backup_count: int = Field(
        default=5, description="Number of backup log files to keep"
    )


class DatabaseConfig(BaseModel):
    """Database configuration model."""

    url: str = Field(
        default="sqlite:///./catalog.db",
        description="Database connection URL",
    )
    pool_size: int = Field(default=20, description="Connection pool size")
    max_overflow: int = Field(default=10, description="Maximum pool overflow")
    pool_timeout: int = Field(default=30, description="Pool timeout in seconds")
    pool_recycle: int = Field(default=1800, description="Pool recycle time in seconds")
    echo: bool = Field(default=False, description="Echo SQL statements")

    @computed_field
    @property
    def backend(self) -> str:
        """Short name of the database backend, derived from the URL scheme."""
        from sqlalchemy.engine import make_url

        return make_url(self.url).get_backend_name()

    @computed_field
    @property
    def connection_string(self) -> str:
        """Connection string handed to the engine.

        Async driver suffixes are dropped since the engine is synchronous.
        """
        from sqlalchemy.engine import make_url

        url = make_url(self.url)
        if url.drivername in ("postgresql+asyncpg", "sqlite+aiosqlite"):
            url = url.set(drivername=url.get_backend_name())
        return url.render_as_string(hide_password=False)


class CatalogConfig(BaseModel):
    """Listing defaults for the product catalog."""

    default_limit: int = Field(default=20, ge=1, description="Default page size")
    max_limit: int = Field(default=100, ge=1, description="Maximum page size")
    discounted_min_percentage: float = Field(
        default=5, ge=0, le=100, description="Default minimum discount for /discounted"
    )
    special_offer_min_percentage: float = Field(
        default=10, ge=0, le=100, description="Minimum discount for special offers"
    )
    featured_limit: int = Field(
        default=10, ge=1, description="Number of best sellers returned by /featured"
    )


class ExternalSourceConfig(BaseModel):
    """External catalog the sync endpoints import from."""

    name: str = Field(default="dummyjson", description="Source tag stored on imported products")
    base_url: str = Field(default="https://dummyjson.com", description="Base URL of the source API")
    fetch_limit: int = Field(default=100, ge=1, description="Products fetched per sync")
    timeout_seconds: float = Field(default=5.0, gt=0, description="HTTP timeout in seconds")
    user_agent: str = Field(default="product-catalog-api/0.1", description="User-Agent header")


class MetricsConfig(BaseModel):
    """Metrics configuration model."""

    enabled: bool = Field(default=False, description="Collect and expose metrics")
    prefix: str = Field(default="catalog_", description="Prefix applied to every metric name")


class AppConfig(BaseModel):
    """Application configuration model."""

    environment: Literal["development", "production", "test"] = Field(
        default="development", description="Application environment"
    )
    host: str = Field(default="localhost", description="Application host")
    port: int = Field(default=8000, description="Application port")
    public_url: str | None = Field(
        default=None, description="Externally visible URL advertised in the API docs"
    )
    cors: CORSConfig = Field(
        default_factory=CORSConfig, description="CORS configuration"
    )

    @property
    def base_url(self) -> str:
        """Public URL if configured, otherwise built from host and port."""
        if self.public_url:
            return self.public_url.rstrip("/")
        scheme = "https" if self.environment == "production" else "http"
        return f"{scheme}://{self.host}:{self.port}"


class ConfigData(BaseModel):
    """Root configuration model that matches the config.yaml structure."""

    app: AppConfig = Field(
        default_factory=AppConfig, description="Application configuration"
    )
    logging: LoggingConfig = Field(
        default_factory=LoggingConfig, description="Logging configuration"
    )
    database: DatabaseConfig = Field(
        default_factory=DatabaseConfig, description="Database configuration"
    )
    catalog: CatalogConfig = Field(
        default_factory=CatalogConfig, description="Catalog listing configuration"
    )
    external_source: ExternalSourceConfig = Field(
        default_factory=ExternalSourceConfig,
        description="External catalog source configuration",
    )
    metrics: MetricsConfig = Field(
        default_factory=MetricsConfig, description="Metrics configuration"
    )
