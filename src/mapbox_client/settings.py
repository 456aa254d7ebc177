"""Configuration for the Mapbox client."""

from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_BASE_URL = "https://api.mapbox.com"
DEFAULT_TIMEOUT = 30.0


class MapboxSettings(BaseSettings):
    """Client configuration read from MAPBOX_* environment variables or .env."""
    api_key: Optional[str] = None
    timeout: float = DEFAULT_TIMEOUT
    base_url: str = DEFAULT_BASE_URL
    # needed when the token has URL restrictions
    referer: Optional[str] = None

    model_config = SettingsConfigDict(
        env_prefix="MAPBOX_",
        env_file=".env",
        extra="ignore",
    )
