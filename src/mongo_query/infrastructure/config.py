"""Configuration management for the query layer."""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class MongoConfig(BaseModel):
    """Connection configuration for the document store."""

    uri: str = Field(
        default="mongodb://localhost:27017", description="MongoDB connection URI"
    )
    app_name: str = Field(default="mongo_query", description="Application name sent to server")
    connect_timeout_ms: int = Field(
        default=20000, ge=1, description="Socket connect timeout in milliseconds"
    )
    server_selection_timeout_ms: int = Field(
        default=30000, ge=1, description="Server selection timeout in milliseconds"
    )
    max_time_ms: int | None = Field(
        default=None, ge=1, description="Server-side deadline applied to every find"
    )


class ObservabilityConfig(BaseModel):
    """Observability configuration."""

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO", description="Log level"
    )
    log_format: Literal["json", "console"] = Field(default="json", description="Log format")
    otel_endpoint: str | None = Field(
        default=None, description="OpenTelemetry collector endpoint"
    )
    otel_service_name: str = Field(default="mongo_query", description="Service name for tracing")
    otel_console_export: bool = Field(default=False, description="Also print spans to stdout")
    metrics_port: int | None = Field(
        default=None, ge=1, le=65535, description="Prometheus metrics port (disabled if unset)"
    )


class Config(BaseSettings):
    """Main configuration for the query layer."""

    model_config = SettingsConfigDict(
        env_prefix="MONGO_QUERY_",
        env_nested_delimiter="__",
        case_sensitive=False,
    )

    mongo: MongoConfig = Field(default_factory=MongoConfig)
    observability: ObservabilityConfig = Field(default_factory=ObservabilityConfig)


@lru_cache
def get_config() -> Config:
    """Get the global configuration instance."""
    return Config()
