"""
Shared configuration management for the Mini App Auth service.
"""

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class BaseConfig(BaseSettings):
    """Base configuration class with common settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="ACCESS_",
        case_sensitive=False,
        extra="ignore"
    )

    # Environment
    env: str = "local"
    log_level: str = "info"

    # Telegram bot credentials; only presence is required unless strict_bot_token is set
    bot_token: Optional[str] = Field(default=None, repr=False)
    strict_bot_token: bool = False

    # Init-data verification
    max_age: int = Field(default=86400, ge=0)
    max_future_skew: Optional[int] = Field(default=None, ge=0)

    # Output switches
    include_raw_data: bool = False
    include_hash: bool = False


class ServiceConfig(BaseConfig):
    """Service-specific configuration."""

    service_name: str
    port: int
    host: str = "0.0.0.0"

    def __init__(self, service_name: str, port: int, **kwargs):
        super().__init__(service_name=service_name, port=port, **kwargs)


def get_config(service_name: str, port: int, **overrides) -> ServiceConfig:
    """Get configuration for a specific service."""
    return ServiceConfig(service_name=service_name, port=port, **overrides)
