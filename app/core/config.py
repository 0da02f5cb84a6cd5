"""Application configuration using Pydantic Settings.

Configuration is environment-aware:
- APP_ENV determines which .env file to load
- Supports: development, testing, staging, production
- Each environment has its own .env.{environment} file

Components (rate limiter, gateway, Sheets client) never read the global
``settings`` object directly; ``app.api.dependencies`` builds them from it.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Literal

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


# Determine which environment to load (default: development)
APP_ENV = os.getenv("APP_ENV", "development")

# Project root (so .env resolution doesn't depend on current working directory)
PROJECT_ROOT = Path(__file__).resolve().parents[2]

ENV_FILE_MAP = {
    "development": ".env.development",
    "testing": ".env.testing",
    "staging": ".env.staging",
    "production": ".env.production",
}

_env_filename = ENV_FILE_MAP.get(APP_ENV, ".env.development")
_env_path = PROJECT_ROOT / _env_filename

# Only load from file if it exists (production might inject via env vars only)
_env_file = str(_env_path) if _env_path.is_file() else None


# Nested BaseSettings don't inherit env_file, so populate os.environ first
if _env_file:
    from dotenv import load_dotenv
    load_dotenv(_env_file, override=True)


class SheetsSettings(BaseSettings):
    """Origin (Google Sheets API) configuration.

    The API key is optional at startup: a missing key is reported per request
    as a configuration error rather than preventing the app from booting.
    """

    api_key: str | None = Field(
        None,
        validation_alias=AliasChoices("SHEETS_API_KEY", "GOOGLE_SHEETS_API_KEY"),
        description="Server-held Google Sheets API key",
    )
    base_url: str = Field(
        "https://sheets.googleapis.com/v4/spreadsheets",
        description="Base URL of the Sheets values API",
    )
    timeout_seconds: float = Field(
        10.0,
        description="Origin request timeout in seconds",
        gt=0,
    )
    breaches_spreadsheet_id: str = Field(
        "1n5gJkgPVoGnyeUZAlmQUzv1dKtlwsKgG_DaRktTSuEs",
        description="Spreadsheet holding the breach tracker table",
    )
    breaches_range: str = Field(
        "Data Breach Tracker!A:J",
        description="Cell range (A1 notation) for breach rows",
    )
    conferences_spreadsheet_id: str = Field(
        "1i3ltEo2GhEiAFWdQOOqp7DY0LZ9GRwKknie5FKGdB3k",
        description="Spreadsheet holding the conference calendar",
    )
    conferences_range: str = Field(
        "A:F",
        description="Cell range (A1 notation) for conference rows",
    )

    model_config = SettingsConfigDict(
        env_prefix="SHEETS_",
        case_sensitive=False,
        populate_by_name=True,
    )


class CacheSettings(BaseSettings):
    """Read-through cache configuration."""

    backend: Literal["memory", "none"] = Field(
        "memory",
        description="Key-value store backing cache and rate limits ('none' disables both)",
    )
    ttl_seconds: int = Field(
        300,
        description="TTL for cached non-empty results",
        ge=1,
    )
    empty_ttl_seconds: int = Field(
        60,
        description="TTL for cached empty results (likely transient upstream state)",
        ge=1,
    )
    max_entries: int | None = Field(
        4096,
        description="Maximum entries kept by the in-memory store (None for unlimited)",
    )

    model_config = SettingsConfigDict(
        env_prefix="CACHE_",
        case_sensitive=False,
    )


class RateLimitSettings(BaseSettings):
    """Rate limiting configuration."""

    enabled: bool = Field(
        True,
        description="Enable per-client rate limiting",
    )
    include_headers: bool = Field(
        True,
        description="Include X-RateLimit-* headers on responses",
    )
    breaches_policy: Literal["standard", "strict", "bulk"] = Field(
        "standard",
        description="Policy applied to the breaches resource",
    )
    conferences_policy: Literal["standard", "strict", "bulk"] = Field(
        "standard",
        description="Policy applied to the conferences resource",
    )
    client_ip_headers: str = Field(
        "CF-Connecting-IP,X-Forwarded-For",
        description="Comma-separated trusted proxy headers carrying the client address",
    )

    model_config = SettingsConfigDict(
        env_prefix="RATE_LIMIT_",
        case_sensitive=False,
    )


class LogSettings(BaseSettings):
    """Logging configuration."""

    level: str = Field("INFO", description="Root log level")
    format: Literal["json", "plain"] = Field("json", description="Log line format")
    output: Literal["stdout", "file"] = Field("stdout", description="Log destination")
    file_path: str | None = Field(None, description="Log file path when output=file")
    max_bytes: int | None = Field(
        10 * 1024 * 1024,
        description="Rotate the log file after this many bytes (None disables rotation)",
    )
    backup_count: int = Field(5, description="Rotated files to keep")
    request_id_header: str = Field(
        "X-Request-ID",
        description="Header used to propagate the request correlation id",
    )

    model_config = SettingsConfigDict(
        env_prefix="LOG_",
        case_sensitive=False,
    )


class AppSettings(BaseSettings):
    """Application-wide configuration."""

    debug: bool = Field(
        False,
        description="Enable debug mode with verbose logging",
    )
    cors_allow_origins: str = Field(
        "*",
        description="Comma-separated list of origins allowed by CORS",
    )

    model_config = SettingsConfigDict(
        env_prefix="APP_",
        case_sensitive=False,
    )


class Settings(BaseSettings):
    """Main application settings container.

    Automatically loads from the appropriate .env.{APP_ENV} file.
    """

    app_env: str = APP_ENV
    sheets: SheetsSettings = Field(default_factory=SheetsSettings)
    cache: CacheSettings = Field(default_factory=CacheSettings)
    rate_limit: RateLimitSettings = Field(default_factory=RateLimitSettings)
    log: LogSettings = Field(default_factory=LogSettings)
    app: AppSettings = Field(default_factory=AppSettings)

    model_config = SettingsConfigDict(
        case_sensitive=False,
    )


settings = Settings()
