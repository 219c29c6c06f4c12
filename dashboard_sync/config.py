"""Application configuration settings."""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

ENV_FILE = ".env"
ENV_FILE_ENCODING = "utf-8"

KNOWN_ROLES = ("SUPER_ADMIN", "MAINTAINER", "ADMIN", "STAFF")


class Settings(BaseSettings):
    """Synchronization settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=ENV_FILE, env_file_encoding=ENV_FILE_ENCODING, extra="ignore"
    )

    api_base_url: str = Field(
        default="http://localhost:3000/api",
        description="Base URL of the REST API serving the activity log",
        min_length=1,
    )
    push_url: str = Field(
        default="ws://localhost:3000/notifications/ws",
        description="Websocket URL of the push channel",
        min_length=1,
    )
    activity_log_path: str = Field(
        default="/system-activity-logs",
        description="Path of the activity log endpoint relative to the API base URL",
    )
    poll_interval_seconds: float = Field(
        default=30.0, gt=0, description="Seconds between activity log polls"
    )
    fetch_timeout_seconds: float = Field(
        default=10.0,
        description="Request timeout for a single activity log fetch",
    )
    reconnect_attempts: int = Field(
        default=5, ge=0, description="Automatic reconnection attempts of the push channel"
    )
    reconnect_delay_seconds: float = Field(
        default=1.0, ge=0, description="Fixed delay between reconnection attempts"
    )
    auth_failure_threshold: int = Field(
        default=3,
        gt=0,
        description="Consecutive authentication failures that end the session",
    )
    catch_up_window: int = Field(
        default=5,
        gt=0,
        description="Entries emitted when the stored cursor is no longer in the log",
    )
    initial_backfill_window: int = Field(
        default=10,
        gt=0,
        description="Entries emitted on the first session of a viewer",
    )
    error_log_interval_seconds: float = Field(
        default=5.0,
        ge=0,
        description="Minimum seconds between repeated transport error log lines",
    )
    database_url: str = Field(
        default="sqlite:///./dashboard_sync.db",
        description="SQLAlchemy URL of the key-value store holding cursors",
        min_length=1,
    )
    app_timezone: str | None = Field(
        default=None,
        description="Timezone used to evaluate business hours (defaults to Africa/Lagos)",
    )
    viewer_id: str | None = Field(
        default=None, description="Identifier of the locally signed-in viewer"
    )
    viewer_role: str | None = Field(default=None, description="Role of the local viewer")
    viewer_branch_id: str | None = Field(default=None)
    viewer_branch: str | None = Field(default=None)
    viewer_name: str = Field(default="")
    viewer_email: str = Field(default="")
    cors_origins: list[str] = Field(
        default_factory=lambda: ["http://localhost:5173"],
        description="Origins allowed to call the local companion API",
    )

    @model_validator(mode="after")
    def _validate_consistency(self) -> "Settings":
        if self.fetch_timeout_seconds <= 0:
            raise ValueError("FETCH_TIMEOUT_SECONDS must be a positive number")
        if self.viewer_role is not None:
            normalized = self.viewer_role.strip().upper()
            if normalized not in KNOWN_ROLES:
                raise ValueError(
                    "VIEWER_ROLE must be one of: " + ", ".join(KNOWN_ROLES)
                )
            self.viewer_role = normalized
        if self.viewer_id and not self.viewer_role:
            raise ValueError("VIEWER_ROLE is required when VIEWER_ID is provided")
        return self


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings instance."""

    return Settings()


def reset_settings_cache() -> None:
    """Clear the settings cache to force reloading from the environment."""

    get_settings.cache_clear()


__all__ = ["KNOWN_ROLES", "Settings", "get_settings", "reset_settings_cache"]
