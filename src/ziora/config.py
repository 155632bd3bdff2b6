"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")

DEFAULT_BLOCKED_COUNTRY_CODES = "CN,KP,RU,SY,IR,CU"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    supabase_url: str
    supabase_service_key: str
    storage_bucket: str = "photos"
    photos_table: str = "photos"
    max_image_bytes: int = 10 * 1024 * 1024
    max_thumbnail_bytes: int = 1 * 1024 * 1024
    image_timeout_seconds: float = 20.0
    image_cache_ttl_seconds: int = 3600
    image_cache_entries: int = 128
    photo_ttl_days: int = 7
    blocked_country_codes: str | None = DEFAULT_BLOCKED_COUNTRY_CODES
    ads_enabled: bool = True
    session_idle_ttl_seconds: int = 1800
    max_draw_sessions: int = 10_000
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )


def parse_blocked_country_codes(raw: str | None) -> set[str]:
    """Parse blocked ISO country codes from env."""
    if raw is None:
        return set()
    codes: set[str] = set()
    for chunk in raw.split(","):
        value = chunk.strip().upper()
        if value:
            codes.add(value)
    return codes
