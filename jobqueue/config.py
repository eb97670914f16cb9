"""
Application configuration using Pydantic Settings.
Loads configuration from environment variables with sensible defaults.
"""

import os
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Store
    redis_url: str = "redis://localhost:6379/0"
    redis_namespace: str = "jobqueue"
    redis_socket_timeout_seconds: float = 5.0

    # API Configuration
    api_host: str = "0.0.0.0"
    api_port: int = 8000

    # Worker Configuration
    worker_queues: str = "default"  # comma separated, highest priority first
    worker_poll_interval_seconds: float = 5.0
    worker_hostname: str | None = None

    # Reaper Configuration
    reaper_interval_seconds: int = 60

    # Observability
    otel_exporter_otlp_endpoint: str = "http://localhost:4317"
    otel_service_name: str = "jobqueue"
    log_level: str = "INFO"
    log_format: str = "json"  # json or console

    @property
    def queue_names(self) -> list[str]:
        """Configured worker queues in priority order."""
        return [name.strip() for name in self.worker_queues.split(",") if name.strip()]


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


def get_hostname() -> str:
    """Host name workers register under; overridable for containers."""
    return get_settings().worker_hostname or os.uname().nodename
