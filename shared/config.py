"""
Shared configuration management for the Model Comments service.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class BaseConfig(BaseSettings):
    """Base configuration class with common settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="COMMENTS_",
        case_sensitive=False,
        extra="allow"
    )

    # Environment
    env: str = Field(default="local")
    log_level: str = Field(default="info")

    # Comment storage: "memory" or "postgres"
    storage_backend: str = Field(default="memory")
    postgres_dsn: str = Field(default="postgres://localhost:5432/comments")

    # Model catalog, namespaces, roles and accounts: "memory" or "http"
    catalog_backend: str = Field(default="memory")
    repository_service_url: str = Field(default="http://localhost:8080")
    http_timeout_seconds: float = Field(default=10.0)

    # Notification transport: "log" or "kafka"
    notification_backend: str = Field(default="log")
    kafka_bootstrap: str = Field(default="localhost:9092")
    notification_topic: str = Field(default="model-repository.notifications.comments.v1")

    # Comment semantics
    comment_date_format: str = Field(default="%Y-%m-%d %H:%M:%S")
    anonymous_username: str = Field(default="anonymous")
    namespace_admin_role: str = Field(default="namespace_admin")


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
