"""Configuration management using pydantic-settings."""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        case_sensitive=False,
        env_ignore_empty=True,
        extra="ignore",
    )

    host: str = Field(default="0.0.0.0", description="Interface to listen on")
    port: int = Field(default=8090, ge=1, le=65535, description="Port to listen on")
    send_server_hostname: str = Field(
        default="",
        description="Set to 'false' to stop disclosing the server host name",
    )
    log_http_headers: bool = Field(default=False, description="Log request headers")
    log_http_body: bool = Field(default=False, description="Hex dump request bodies")
    log_level: str = Field(default="INFO", description="Logging level")
    access_log: bool = Field(default=False, description="Keep aiohttp access log lines")
    stream_interval: float = Field(
        default=1.0, gt=0, description="Seconds between event stream heartbeats"
    )
    static_page_path: str = Field(default="/.ws", description="Path of the browser test page")
    stream_path: str = Field(default="/.sse", description="Path of the event stream")


@lru_cache
def get_settings() -> Settings:
    """Get the application settings instance."""
    return Settings()
