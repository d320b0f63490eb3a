"""
Shared configuration management for the Calorie Foods API.
"""

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class BaseConfig(BaseSettings):
    """Base configuration class with common settings."""

    model_config = SettingsConfigDict(
        env_prefix="FOODS_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore"
    )

    # Environment
    env: str = Field(default="local")
    log_level: str = Field(default="info")


class HandlerConfig(BaseConfig):
    """Collection query handler configuration."""

    service_name: str = Field(default="foods")

    # Database; a full DSN wins over the individual fields
    database_url: Optional[str] = Field(default=None)
    db_host: str = Field(default="localhost")
    db_port: int = Field(default=5432)
    db_name: str = Field(default="calories")
    db_user: Optional[str] = Field(default=None)
    db_password: Optional[str] = Field(default=None)
    db_ssl: bool = Field(default=True)
    db_connect_timeout: float = Field(default=10.0)
    db_command_timeout: float = Field(default=10.0)
    db_pool_max_size: int = Field(default=2)

    # Secrets
    db_secret_arn: Optional[str] = Field(default=None)
    aws_region: str = Field(default="us-east-2")


class ClientConfig(BaseSettings):
    """Gateway client configuration."""

    model_config = SettingsConfigDict(
        env_prefix="FOODS_API_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore"
    )

    base_url: str = Field(default="http://localhost:8080")
    max_retries: int = Field(default=3)
    retry_base_delay: float = Field(default=1.0)
    timeout: float = Field(default=10.0)


def get_config(**overrides) -> HandlerConfig:
    """Get configuration for the handler service."""
    return HandlerConfig(**overrides)


def get_client_config(**overrides) -> ClientConfig:
    """Get configuration for the gateway client."""
    return ClientConfig(**overrides)
