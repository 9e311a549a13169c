"""12-factor configuration adapter using environment variables and TOML config."""

import tomllib
from pathlib import Path
from typing import Any

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# TOML section -> fields it may override.
_TOML_SECTIONS: dict[str, tuple[str, ...]] = {
    "api": (
        "api_base_url",
        "auth_cookie_name",
        "request_timeout_seconds",
    ),
    "polling": (
        "servers_poll_interval_seconds",
        "channel_messages_poll_interval_seconds",
        "direct_conversations_poll_interval_seconds",
        "direct_messages_poll_interval_seconds",
        "voice_presence_poll_interval_seconds",
        "moderation_poll_interval_seconds",
        "message_page_limit",
    ),
    "notifications": (
        "chat_notification_sound_enabled",
        "voice_join_sound_enabled",
    ),
    "storage": (
        "state_dir",
        "clear_state_on_logout",
    ),
}


class AppConfig(BaseSettings):
    """Application configuration following 12-factor principles."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        validate_assignment=True,
    )

    # Chat server
    api_base_url: str = Field(
        default="http://localhost:3000", description="Base URL of the chat server"
    )
    auth_cookie_name: str = Field(
        default="twinslkit_auth", description="Name of the session cookie"
    )
    session_token: str | None = Field(
        default=None, description="Session cookie value issued at login"
    )
    request_timeout_seconds: float | None = Field(
        default=None,
        description="Transport timeout for chat server requests (None: no timeout)",
    )

    # Polling intervals
    servers_poll_interval_seconds: float = Field(
        default=2.0, description="Interval of the servers list loop"
    )
    channel_messages_poll_interval_seconds: float = Field(
        default=2.0, description="Interval of the active channel messages loop"
    )
    direct_conversations_poll_interval_seconds: float = Field(
        default=2.5, description="Interval of the direct conversation list loop"
    )
    direct_messages_poll_interval_seconds: float = Field(
        default=2.5, description="Interval of the active direct conversation loop"
    )
    voice_presence_poll_interval_seconds: float = Field(
        default=3.0, description="Interval of the voice presence loop"
    )
    moderation_poll_interval_seconds: float = Field(
        default=3.0, description="Interval of the moderation command loop"
    )
    message_page_limit: int = Field(
        default=30, description="Number of messages fetched per page"
    )

    # Notifications
    chat_notification_sound_enabled: bool = Field(
        default=True, description="Play a sound for new messages"
    )
    voice_join_sound_enabled: bool = Field(
        default=True, description="Play a sound when someone joins the local voice channel"
    )

    # Persisted state
    state_dir: str = Field(
        default=".chat_sync_state", description="Directory for per-user persisted state"
    )
    clear_state_on_logout: bool = Field(
        default=True, description="Delete the user's persisted state on logout"
    )

    # TOML config file path (optional)
    config_file: str | None = Field(
        default=None, description="Path to TOML configuration file overriding defaults"
    )

    @field_validator(
        "servers_poll_interval_seconds",
        "channel_messages_poll_interval_seconds",
        "direct_conversations_poll_interval_seconds",
        "direct_messages_poll_interval_seconds",
        "voice_presence_poll_interval_seconds",
        "moderation_poll_interval_seconds",
    )
    @classmethod
    def validate_interval(cls, v: float) -> float:
        """Validate polling intervals are positive."""
        if v <= 0:
            raise ValueError("poll intervals must be greater than 0")
        return v

    @field_validator("request_timeout_seconds")
    @classmethod
    def validate_timeout(cls, v: float | None) -> float | None:
        if v is not None and v <= 0:
            raise ValueError("request_timeout_seconds must be greater than 0")
        return v

    @field_validator("message_page_limit")
    @classmethod
    def validate_page_limit(cls, v: int) -> int:
        """Validate page limit is within what the server accepts."""
        if not 1 <= v <= 100:
            raise ValueError("message_page_limit must be between 1 and 100")
        return v

    @field_validator("api_base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    @classmethod
    def for_testing(cls, **overrides: Any) -> "AppConfig":
        """Build a config that ignores the .env file."""
        return cls(_env_file=None, **overrides)  # type: ignore[call-arg]

    def load_toml_overrides(self) -> dict[str, Any]:
        """Load the TOML file and apply the settings it contains.

        Returns:
            The parsed TOML data (empty if no config_file is set).

        Raises:
            FileNotFoundError: If config_file is set but does not exist.
            ValueError: If a section is not a table or a value is invalid.
        """
        if not self.config_file:
            return {}

        config_path = Path(self.config_file)
        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        with open(config_path, "rb") as f:
            toml_data = tomllib.load(f)

        for section, fields in _TOML_SECTIONS.items():
            values = toml_data.get(section)
            if values is None:
                continue
            if not isinstance(values, dict):
                raise ValueError(f"TOML config '{section}' must be a table")
            for field_name in fields:
                if field_name in values:
                    setattr(self, field_name, values[field_name])

        return toml_data
