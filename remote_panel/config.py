"""Central configuration for the remote panel service."""
from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .exceptions import ConfigError

ROOT_DIR = Path(__file__).resolve().parents[1]
DEFAULT_ENV_FILE = ROOT_DIR / ".env"
PRODUCTION = "production"


class Settings(BaseSettings):
    """Environment-driven settings for the panel server and session controller."""

    model_config = SettingsConfigDict(
        env_file=str(DEFAULT_ENV_FILE),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    environment: str = Field("development", description="Deployment environment; 'production' selects the prod URL")
    prod_websocket_url: Optional[str] = Field(None, description="Device controller WebSocket URL in production")
    dev_websocket_url: Optional[str] = Field(None, description="Device controller WebSocket URL in development")
    config_url: Optional[str] = Field(
        None, description="Remote /config endpoint; when unset the URL is resolved from this process's settings"
    )

    host: str = Field("0.0.0.0", description="Host interface for the panel server")
    port: int = Field(3000, description="Port for the panel server")

    record_cap_seconds: int = Field(240, description="Maximum recording duration enforced by the panel")
    tick_interval_seconds: float = Field(1.0, description="Countdown refresh period")
    reset_recording_on_disconnect: bool = Field(
        True, description="Force recording display to idle when the device connection drops"
    )

    ws_ping_interval: Optional[float] = Field(20.0, description="Keepalive ping interval for the device socket")
    ws_ping_timeout: Optional[float] = Field(20.0, description="Keepalive ping timeout for the device socket")
    ui_queue_size: int = Field(16, description="Per-tab backlog of UI events before the oldest is dropped")

    log_level: str = Field("INFO", description="Logging level for the panel")


@lru_cache()
def get_settings(override_env_file: Optional[Path] = None) -> Settings:
    """Cached Settings instance; accepts optional env override for tests."""

    if override_env_file:
        return Settings(_env_file=str(override_env_file))
    return Settings()


def resolve_ws_url(settings: Settings) -> Optional[str]:
    """Pick the device controller URL for the current environment."""

    if settings.environment.lower() == PRODUCTION:
        return settings.prod_websocket_url
    return settings.dev_websocket_url


def require_ws_url(settings: Settings) -> str:
    url = resolve_ws_url(settings)
    if not url:
        raise ConfigError(f"No WebSocket URL configured for environment {settings.environment!r}")
    return url


__all__ = ["Settings", "get_settings", "resolve_ws_url", "require_ws_url"]
