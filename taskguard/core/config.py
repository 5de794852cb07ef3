"""Application configuration using Pydantic Settings.

Configuration is environment-aware:
- APP_ENV determines which .env file to load
- Supports: development, testing, staging, production
- Each environment has its own .env.{environment} file
"""

from __future__ import annotations

import os
from pathlib import Path

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


# Determine which environment to load (default: development)
APP_ENV = os.getenv("APP_ENV", "development")

# Project root (so .env resolution doesn't depend on current working directory)
PROJECT_ROOT = Path(__file__).resolve().parents[2]

# Map environments to their respective .env files (relative to PROJECT_ROOT)
ENV_FILE_MAP = {
    "development": ".env.development",
    "testing": ".env.testing",
    "staging": ".env.staging",
    "production": ".env.production",
}

# Select the .env file for the current environment
_env_filename = ENV_FILE_MAP.get(APP_ENV, ".env.development")
_env_path = PROJECT_ROOT / _env_filename

# Only load from file if it exists (production might inject via env vars only)
_env_file = str(_env_path) if _env_path.is_file() else None


# Load .env file early to populate os.environ before creating nested settings
# This is necessary because Pydantic nested BaseSettings don't inherit env_file
if _env_file and not os.getenv("TESTING"):
    from dotenv import load_dotenv
    load_dotenv(_env_file, override=True)


class AppSettings(BaseSettings):
    """Application-wide configuration."""

    debug: bool = Field(
        False,
        description="Enable debug mode with verbose logging",
    )
    api_key_required: bool = Field(
        True,
        description="Whether API key authentication is required on admin routes",
    )
    api_keys: str | None = Field(
        None,
        description="Comma-separated list of valid API keys for admin routes",
    )
    demo_password: str = Field(
        "1234",
        description="Password accepted for every username by the demo credential verifier",
    )
    storage_backend: str = Field(
        "memory",
        description="Key-value storage backend: 'memory' or 'file'",
    )
    storage_path: str = Field(
        "data/store.json",
        description="JSON file used when storage_backend is 'file'",
    )
    audit_max_entries: int = Field(
        1000,
        description="Maximum audit events retained (oldest evicted first)",
        ge=1,
    )
    session_header: str = Field(
        "X-Session-Token",
        description="Header carrying the session token returned by login",
    )

    model_config = SettingsConfigDict(
        env_prefix="APP_",
        case_sensitive=False,
    )


class ThrottleSettings(BaseSettings):
    """Login-attempt throttle configuration.

    Two trailing windows are evaluated on every failed login. The short
    window is checked first and wins when both thresholds are crossed.
    """

    max_attempts_15m: int = Field(
        5,
        description="Failed attempts within the short window before blocking",
        ge=1,
    )
    window_15m_seconds: int = Field(
        15 * 60,
        description="Short trailing window size in seconds",
        ge=1,
    )
    block_15m_seconds: int = Field(
        15 * 60,
        description="Block duration once the short-window threshold is crossed",
        ge=1,
    )
    max_attempts_1h: int = Field(
        10,
        description="Failed attempts within the long window before blocking",
        ge=1,
    )
    window_1h_seconds: int = Field(
        60 * 60,
        description="Long trailing window size in seconds",
        ge=1,
    )
    block_1h_seconds: int = Field(
        60 * 60,
        description="Block duration once the long-window threshold is crossed",
        ge=1,
    )
    fail_closed: bool = Field(
        False,
        description="Deny attempts when the attempt store cannot be read",
    )
    storage_key: str = Field(
        "st_auth_attempts_v1",
        description="Key under which all attempt records are persisted",
    )

    model_config = SettingsConfigDict(
        env_prefix="THROTTLE_",
        case_sensitive=False,
    )

    @model_validator(mode="after")
    def _check_windows(self) -> "ThrottleSettings":
        if self.window_15m_seconds > self.window_1h_seconds:
            raise ValueError("window_15m_seconds must not exceed window_1h_seconds")
        return self

    @property
    def prune_window_seconds(self) -> int:
        """Longest tracked window; older attempts are dropped."""
        return max(self.window_15m_seconds, self.window_1h_seconds)


class LogSettings(BaseSettings):
    """Logging configuration."""

    level: str = Field("INFO", description="Root log level")
    format: str = Field("json", description="Log format: 'json' or 'plain'")
    output: str = Field("stdout", description="Log output: 'stdout' or 'file'")
    file_path: str | None = Field(None, description="Log file path when output is 'file'")
    max_bytes: int = Field(10_485_760, description="Rotate file logs at this size (0 disables)")
    backup_count: int = Field(5, description="Rotated log files to keep")
    request_id_header: str = Field("X-Request-ID", description="Correlation header name")

    model_config = SettingsConfigDict(
        env_prefix="LOG_",
        case_sensitive=False,
    )


class Settings(BaseSettings):
    """Main application settings container.

    Automatically loads from the appropriate .env.{APP_ENV} file.
    Raises validation errors on startup if settings are invalid.
    """

    app_env: str = APP_ENV
    app: AppSettings = Field(default_factory=AppSettings)
    throttle: ThrottleSettings = Field(default_factory=ThrottleSettings)
    log: LogSettings = Field(default_factory=LogSettings)

    model_config = SettingsConfigDict(
        case_sensitive=False,
    )


# Global settings instance - composed from domain-specific settings
# Nested settings are created via default_factory so env loading works.
settings = Settings()
