"""Configuration management for the key-value store."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class StorageConfig(BaseModel):
    """Storage configuration."""

    workdir: Path = Field(
        default=Path("flash-store.workdir"), description="Working directory for engine files"
    )
    map_size: int = Field(
        default=1073741824, ge=1048576, description="Maximum database size in bytes (default 1GB)"
    )
    sync: bool = Field(default=True, description="Flush to disk on every write")
    max_readers: int = Field(
        default=126, ge=1, le=65536, description="Maximum concurrently open cursors"
    )


class CodecConfig(BaseModel):
    """Value encoding configuration."""

    value_format: Literal["json", "msgpack"] = Field(
        default="json", description="Encoding used for stored values"
    )


class ServerConfig(BaseModel):
    """HTTP server configuration."""

    host: str = Field(default="0.0.0.0", description="Server host")
    port: int = Field(default=8000, ge=1, le=65535, description="Server port")


class ObservabilityConfig(BaseModel):
    """Observability configuration."""

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO", description="Log level"
    )
    log_format: Literal["json", "console"] = Field(default="json", description="Log format")
    otel_endpoint: str | None = Field(
        default=None, description="OpenTelemetry collector endpoint"
    )
    otel_service_name: str = Field(default="flash_store", description="Service name for tracing")


class Config(BaseSettings):
    """Main configuration for the key-value store."""

    model_config = SettingsConfigDict(
        env_prefix="FLASH_STORE_",
        env_nested_delimiter="__",
        case_sensitive=False,
    )

    storage: StorageConfig = Field(default_factory=StorageConfig)
    codec: CodecConfig = Field(default_factory=CodecConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
    observability: ObservabilityConfig = Field(default_factory=ObservabilityConfig)


@lru_cache
def get_config() -> Config:
    """Get the global configuration instance.

    Directories are not created here; a store creates its working directory
    when it is opened.
    """
    return Config()
