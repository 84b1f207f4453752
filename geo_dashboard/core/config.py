"""
Application configuration — Pydantic Settings.

Loads from .env with strict validation. Single source of truth
for all environment-dependent values.
"""

from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ── Application ──────────────────────────────────────────────
    APP_NAME: str = "GeoDashboard"
    APP_ENV: str = "development"
    DEBUG: bool = False
    API_HOST: str = "0.0.0.0"
    API_PORT: int = 8000

    # ── Logging ──────────────────────────────────────────────────
    LOG_LEVEL: str = "INFO"
    LOG_FILE: str = ""

    # ── Location source ──────────────────────────────────────────
    # "none" (no capability) | "static" | "ip"
    LOCATION_PROVIDER: str = "none"
    LOCATION_CONSENT: bool = False
    STATIC_LATITUDE: Optional[float] = None
    STATIC_LONGITUDE: Optional[float] = None
    IP_GEOLOCATION_URL: str = "https://ipapi.co/json/"
    IP_GEOLOCATION_TIMEOUT: int = 5

    # ── Location cache (persisted across restarts) ───────────────
    LOCATION_CACHE_URL: str = "sqlite:///data/location_cache.db"
    LOCATION_CACHE_KEY: str = "last_known_location"
    # Async driver URL for writes; empty → derived (sqlite → sqlite+aiosqlite)
    LOCATION_CACHE_ASYNC_URL: str = ""

    # ── Widget data endpoint ─────────────────────────────────────
    WIDGET_API_CONFIG: str = ""
    WIDGET_API_ID: str = "widgets"

    # ── Session ──────────────────────────────────────────────────
    SETTLE_TIMEOUT_SECONDS: float = 15.0

    @property
    def has_static_location(self) -> bool:
        return self.STATIC_LATITUDE is not None and self.STATIC_LONGITUDE is not None


@lru_cache
def get_settings() -> Settings:
    """Cached settings singleton."""
    return Settings()


settings = get_settings()
