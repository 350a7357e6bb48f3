"""
Shared configuration management for the Word Inverser service.
"""

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class BaseConfig(BaseSettings):
    """Base configuration class with common settings."""

    model_config = SettingsConfigDict(
        env_prefix="INVERSER_",
        env_file=".env",
        case_sensitive=False,
        extra="allow"
    )

    # Environment
    env: str = Field(default="local")
    log_level: str = Field(default="info")
    enable_docs: Optional[bool] = Field(default=None)

    # Durable store
    postgres_dsn: str = Field(default="postgres://localhost:5432/word_inverser")
    postgres_min_pool_size: int = Field(default=2, ge=1)
    postgres_max_pool_size: int = Field(default=10, ge=1)
    postgres_command_timeout: float = Field(default=30.0, gt=0)

    # Word cache preload
    cache_batch_size: int = Field(default=1000, ge=1)
    cache_batch_delay_ms: int = Field(default=10, ge=0)

    # Write-back
    write_back_queue_size: int = Field(default=10000, ge=1)
    write_back_workers: int = Field(default=2, ge=1)
    write_back_drain_timeout: float = Field(default=5.0, ge=0)

    # Audit log
    request_log_enabled: bool = Field(default=True)

    @property
    def docs_enabled(self) -> bool:
        """Whether interactive API docs are served."""
        if self.enable_docs is not None:
            return self.enable_docs
        return self.env == "local"


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
