"""Application configuration.

Loads settings from environment variables (and an optional ``.env`` file)
with sensible defaults. A single ``Settings`` instance is built at startup
and handed to the components that need it.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Service
    service_name: str = "product-catalog"
    api_version: str = "0.1.0"
    app_env: str = "development"
    debug: bool = False

    # Database
    database_url: str = "postgresql+asyncpg://catalog:catalog_dev_password@db:5432/catalog"
    database_pool_size: int = Field(default=10, ge=1)
    database_echo: bool = False

    # Servers
    http_host: str = "0.0.0.0"
    http_port: int = 8080
    grpc_host: str = "0.0.0.0"
    grpc_port: int = 9090
    shutdown_grace_period: float = 30.0

    # Pagination
    default_page_size: int = Field(default=10, ge=1)
    max_page_size: int = Field(default=100, ge=1)
    default_recommendations: int = Field(default=5, ge=1)
    max_recommendations: int = Field(default=20, ge=1)

    # Logging
    log_level: str = "INFO"
    log_json: bool = True

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )
