"""
Application configuration models and helpers.

Centralizes settings management so the FastAPI app, the upstream clients and
the maintenance scripts share a consistent configuration surface.
"""

from functools import lru_cache
from pathlib import Path
from typing import Annotated, Literal, Optional

import os

from pydantic import AnyHttpUrl, Field, HttpUrl, field_validator
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


class IntraSettings(BaseSettings):
    """Configuration required for interacting with the 42 intranet API."""

    client_id: str = Field(..., validation_alias="INTRA_CLIENT_ID")
    client_secret: str = Field(..., validation_alias="INTRA_CLIENT_SECRET")
    redirect_uri: AnyHttpUrl = Field(
        "http://localhost:3000/api/auth/callback",
        validation_alias="INTRA_REDIRECT_URI",
    )
    api_base_url: str = Field(
        "https://api.intra.42.fr", validation_alias="INTRA_API_BASE_URL"
    )
    scope: str = Field("public", validation_alias="INTRA_OAUTH_SCOPE")
    request_timeout: float = Field(10.0, validation_alias="INTRA_REQUEST_TIMEOUT")

    @field_validator("api_base_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")


class PaginationSettings(BaseSettings):
    """Knobs for the campus events aggregator and single-page queries."""

    page_size: int = Field(100, gt=0, validation_alias="INTRA_PAGE_SIZE")
    max_pages: int = Field(10, gt=0, validation_alias="INTRA_MAX_PAGES")
    page_delay_seconds: float = Field(
        0.2,
        ge=0,
        validation_alias="INTRA_PAGE_DELAY_SECONDS",
        description="Pause between aggregated pages to stay under the upstream rate limit.",
    )
    aggregate_threshold: int = Field(
        200,
        gt=0,
        validation_alias="INTRA_AGGREGATE_THRESHOLD",
        description="per_page values at or above this switch to full aggregation.",
    )
    overfetch_factor: int = Field(3, gt=0, validation_alias="INTRA_OVERFETCH_FACTOR")


class SessionSettings(BaseSettings):
    """Session cookie configuration."""

    cookie_name: str = Field("42_access_token", validation_alias="SESSION_COOKIE_NAME")


class AccessSettings(BaseSettings):
    """Who may see participant lists."""

    admin_logins: Annotated[tuple[str, ...], NoDecode] = Field(
        (),
        validation_alias="ADMIN_LOGINS",
        description="Logins allowed to read and export attendee lists.",
    )
    participants_access: Literal["admin", "public"] = Field(
        "admin",
        validation_alias="PARTICIPANTS_ACCESS",
        description=(
            "'admin' gates attendee routes behind ADMIN_LOGINS, 'public' allows "
            "anonymous reads through the application token."
        ),
    )

    @field_validator("admin_logins", mode="before")
    @classmethod
    def _split_logins(
        cls, value: str | tuple[str, ...] | list[str] | None
    ) -> tuple[str, ...]:
        """Support providing logins as a comma-separated string."""
        if value is None:
            return ()
        if isinstance(value, tuple):
            return value
        if isinstance(value, list):
            return tuple(value)
        return tuple(login.strip() for login in value.split(",") if login.strip())


class AppSettings(BaseSettings):
    """Root settings object for the FastAPI application."""

    environment: str = Field("development", validation_alias="APP_ENV")
    log_level: str = Field("INFO", validation_alias="APP_LOG_LEVEL")
    frontend_base_url: Optional[HttpUrl] = Field(
        None,
        validation_alias="FRONTEND_BASE_URL",
        description="Optional URL used as the base for browser redirects.",
    )
    default_campus_id: int = Field(1, validation_alias="DEFAULT_CAMPUS_ID")
    intra: IntraSettings = Field(default_factory=IntraSettings)
    pagination: PaginationSettings = Field(default_factory=PaginationSettings)
    session: SessionSettings = Field(default_factory=SessionSettings)
    access: AccessSettings = Field(default_factory=AccessSettings)

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"


@lru_cache()
def get_settings() -> AppSettings:
    """Return a cached settings object."""
    return AppSettings()  # type: ignore[call-arg]


__all__ = [
    "AccessSettings",
    "AppSettings",
    "IntraSettings",
    "PaginationSettings",
    "SessionSettings",
    "get_settings",
]
