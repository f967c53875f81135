"""
Application configuration models and helpers.

Centralizes settings management so the HTTP boundary, the message bridge and
the maintenance scripts share a consistent configuration surface.
"""

from functools import lru_cache
from pathlib import Path
from typing import Annotated, Optional

import os

from pydantic import AnyHttpUrl, Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


def _load_env_file(path: str = ".env") -> None:
    """Best-effort load key=value pairs from a .env file without extra deps."""
    env_path = Path(path)
    if not env_path.exists():
        return
    for raw_line in env_path.read_text().splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        key, sep, value = line.partition("=")
        if not sep:
            continue
        key = key.strip()
        if not key or key in os.environ:
            continue
        cleaned = value.strip().strip('"').strip("'")
        os.environ[key] = cleaned


_load_env_file()


class RedditSettings(BaseSettings):
    """Configuration required for interacting with the Reddit API."""

    model_config = SettingsConfigDict(env_prefix="REDDIT_")

    client_id: str = Field(..., description="Installed-app or web-app client id.")
    client_secret: Optional[str] = Field(
        None,
        description="Only set for confidential web apps; installed apps use an empty secret.",
    )
    redirect_uri: AnyHttpUrl = Field(...)
    user_agent: str = Field("web:saved-explorer:0.1.0 (by /u/saved-explorer)")
    scopes: Annotated[tuple[str, ...], NoDecode] = Field(
        ("identity", "history", "read"),
        description="OAuth scopes requested during authorization.",
    )
    duration: str = Field(
        "permanent",
        description="Reddit grant duration; 'permanent' yields a refresh token.",
    )
    page_size: int = Field(100, ge=1, le=100)
    http_timeout: float = Field(10.0, gt=0)

    @field_validator("scopes", mode="before")
    @classmethod
    def _split_scopes(
        cls, value: str | tuple[str, ...] | list[str]
    ) -> tuple[str, ...]:
        """Support providing scopes as a comma-separated string."""
        if isinstance(value, tuple):
            return value
        if isinstance(value, list):
            return tuple(value)
        return tuple(scope.strip() for scope in value.split(",") if scope.strip())


class StorageSettings(BaseSettings):
    """Settings for the persistent key-value store."""

    model_config = SettingsConfigDict(env_prefix="STORAGE_")

    db_path: str = Field("data/saved_explorer.sqlite3")
    token_encryption_secret: Optional[str] = Field(
        None,
        description=(
            "Secret used to derive the symmetric key for encrypting stored tokens. "
            "Tokens are stored in plaintext when omitted."
        ),
    )


class AppSettings(BaseSettings):
    """Root settings object for the explorer service."""

    model_config = SettingsConfigDict(
        env_prefix="APP_", env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    environment: str = Field("development", validation_alias="APP_ENV")
    log_level: str = Field("INFO")
    public_path: str = Field(
        "/",
        description="Base path the UI bundle is served from.",
    )
    reddit: RedditSettings = Field(default_factory=RedditSettings)
    storage: StorageSettings = Field(default_factory=StorageSettings)


@lru_cache()
def get_settings() -> AppSettings:
    """Return a cached settings object."""
    return AppSettings()  # type: ignore[call-arg]


__all__ = [
    "AppSettings",
    "RedditSettings",
    "StorageSettings",
    "get_settings",
]
