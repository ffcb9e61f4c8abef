"""Configuration classes for Gateway Mirror.

This module contains all configuration classes organized by domain.
Configuration is loaded from environment variables and .env files.
"""

from typing import Any
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def str_to_bool(value: Any) -> bool:
    """Convert various string representations to boolean values.

    Args:
        value: The value to convert. Can be bool, str, int, or any other type.

    Returns:
        bool: The converted boolean value.

    Examples:
        >>> str_to_bool("true")
        True
        >>> str_to_bool("0")
        False
        >>> str_to_bool("on")
        True
    """
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.lower() in ("true", "1", "yes", "on", "enabled")
    return bool(value)


class ServerConfig(BaseSettings):
    """HTTP server configuration settings."""

    app_name: str = "Gateway Mirror"
    app_version: str = "1.0.0"

    server_host: str = Field(default="0.0.0.0", alias="SERVER_HOST")
    server_port: int = Field(default=3001, alias="SERVER_PORT")


class DatabaseConfig(BaseSettings):
    """Local cache database settings."""

    database_url: str = Field(default="sqlite:///data/dashboard.db", alias="DATABASE_URL")
    database_echo: bool = Field(default=False, alias="DATABASE_ECHO")

    @field_validator("database_echo", mode="before")
    @classmethod
    def validate_database_echo(cls, v) -> bool:
        """Convert string boolean values to actual boolean."""
        return str_to_bool(v)

    @field_validator("database_url")
    @classmethod
    def validate_database_url(cls, v: str) -> str:
        """Only SQLite URLs are supported by the cache reconcilers."""
        if not v.startswith("sqlite"):
            raise ValueError("database_url must be a sqlite:// URL")
        return v


class GatewayClientConfig(BaseSettings):
    """Settings for outbound calls to registered gateways."""

    gateway_request_timeout: float = Field(default=10.0, gt=0, alias="GATEWAY_REQUEST_TIMEOUT")
    history_fetch_limit: int = Field(default=100, ge=1, le=1000, alias="HISTORY_FETCH_LIMIT")
    sync_workers: int = Field(default=4, ge=1, alias="SYNC_WORKERS")


class MonitoringConfig(BaseSettings):
    """Logging configuration settings."""

    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    log_json: bool = Field(default=False, alias="LOG_JSON")

    @field_validator("log_json", mode="before")
    @classmethod
    def validate_log_json(cls, v) -> bool:
        return str_to_bool(v)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"log_level must be one of: {valid_levels}")
        return v.upper()


class ApplicationConfig(
    ServerConfig,
    DatabaseConfig,
    GatewayClientConfig,
    MonitoringConfig,
    BaseSettings
):
    """Main application configuration that combines all configuration domains."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )
