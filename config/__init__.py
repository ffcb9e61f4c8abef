"""Configuration management for Gateway Mirror.

Configuration is loaded from environment variables and .env files
using Pydantic BaseSettings.
"""

from .config import (
    ApplicationConfig,
    ServerConfig,
    DatabaseConfig,
    GatewayClientConfig,
    MonitoringConfig,
    str_to_bool,
)


def load_config() -> ApplicationConfig:
    """Load and validate application configuration."""
    return ApplicationConfig()


__all__ = [
    "ApplicationConfig",
    "ServerConfig",
    "DatabaseConfig",
    "GatewayClientConfig",
    "MonitoringConfig",
    "load_config",
    "str_to_bool",
]
