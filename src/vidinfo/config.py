"""Configuration management using pydantic-settings."""

import re
from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .models import SUPPORTED_MIME_TYPES, Service

_MIME_PATTERN = re.compile(r"^[a-z0-9.+-]+/[a-z0-9.+-]+$")


def find_env_file() -> Path | None:
    """Find .env file in current or parent directories."""
    current = Path.cwd()
    root = Path("/")

    while current != root:
        env_path = current / ".env"
        if env_path.exists():
            return env_path
        current = current.parent

    # Check home directory as fallback
    home_env = Path.home() / ".vidinfo" / ".env"
    if home_env.exists():
        return home_env

    return None


class Settings(BaseSettings):
    """Application settings loaded from environment variables and .env file."""

    model_config = SettingsConfigDict(
        env_file=find_env_file() or ".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Provider credentials
    youtube_api_key: str | None = Field(
        default=None, description="YouTube Data API v3 key (optional)"
    )
    google_drive_api_key: str | None = Field(
        default=None, description="Google Drive API v3 key (optional)"
    )

    # Cache Configuration
    cache_dir: Path = Field(default=Path(".cache"), description="Directory for cache files")
    cache_ttl_hours: int | None = Field(
        default=None, description="Cache time-to-live in hours (default: never expires)"
    )

    # Resolution behavior
    supported_mime_types: str = Field(
        default=",".join(sorted(SUPPORTED_MIME_TYPES)),
        description="Comma-separated list of playable mime types",
    )
    default_search_service: str = Field(
        default=Service.YOUTUBE.value, description="Service used for free-text search"
    )
    search_results_limit: int = Field(default=10, ge=1, le=50, description="Max search results")
    collection_max_items: int = Field(
        default=200, ge=1, description="Max videos resolved from a playlist or folder"
    )
    request_timeout_seconds: float = Field(
        default=10.0, gt=0, description="Timeout for provider HTTP requests"
    )

    @field_validator("supported_mime_types")
    @classmethod
    def validate_mime_types(cls, v: str) -> str:
        """Validate every entry looks like a type/subtype pair."""
        mimes = [m.strip().lower() for m in v.split(",") if m.strip()]
        if not mimes:
            raise ValueError("Supported mime types cannot be empty")
        invalid = [m for m in mimes if not _MIME_PATTERN.match(m)]
        if invalid:
            raise ValueError(f"Invalid mime type(s): {invalid}")
        return ",".join(mimes)

    @field_validator("default_search_service")
    @classmethod
    def validate_search_service(cls, v: str) -> str:
        """Ensure the search service is a known service id."""
        valid = {s.value for s in Service}
        if v not in valid:
            raise ValueError(f"Invalid search service: {v}. Valid options: {sorted(valid)}")
        return v

    @property
    def supported_mime_set(self) -> frozenset[str]:
        return frozenset(self.supported_mime_types.split(","))


@lru_cache
def get_settings() -> Settings:
    """Get application settings (cached singleton).

    Raises:
        RuntimeError: If configuration is invalid
    """
    try:
        return Settings()
    except Exception as e:
        error_msg = str(e)
        if "validation error" in error_msg.lower():
            env_file = find_env_file()
            location = str(env_file) if env_file else "environment"
            raise RuntimeError(
                f"❌ Configuration error in {location}\n\n"
                f"{error_msg}\n\n"
                "See README.md for the list of supported settings."
            ) from e
        raise
