"""
Publish configuration.

Every setting can be overridden through environment variables, so the
server is fully configurable without touching the request pipeline.
"""

from pathlib import Path
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field


class ServerConfig(BaseSettings):
    """Listener parameters.  The port is supplied on the command line."""

    model_config = SettingsConfigDict(env_prefix="PUBLISH_")

    host: str = "127.0.0.1"


class StorageConfig(BaseSettings):
    """Where uploads land and how long they are kept."""

    model_config = SettingsConfigDict(env_prefix="PUBLISH_")

    data_dir: Path = Path("data")
    write_buffer_bytes: int = 64 * 1024  # buffer size of each upload file

    # Seconds after which a stored upload is deleted.  None keeps uploads forever.
    retention_seconds: float | None = None


class AppConfig(BaseSettings):
    """Top-level application configuration."""

    model_config = SettingsConfigDict(env_prefix="PUBLISH_")

    app_name: str = "publish"
    version: str = "0.1.0"
    debug: bool = False

    server: ServerConfig = Field(default_factory=ServerConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)


config = AppConfig()
