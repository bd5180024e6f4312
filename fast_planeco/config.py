"""Configuration settings for FastPlaneco."""

from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # OSRM (distance matrix and driving geometry)
    osrm_base_url: str = "https://router.project-osrm.org"

    # OpenRouteService API (cycling/walking geometry and driving durations)
    ors_api_key: str = ""
    ors_base_url: str = "https://api.openrouteservice.org"
    ors_requests_per_minute: int = 40

    http_timeout_seconds: float = 30.0

    # Route optimization
    # Exact search enumerates (n)! orders, so keep n small
    max_following_stops: int = 8

    # API Configuration
    # Comma-separated list of valid API keys for third-party access
    api_keys: str = ""

    @property
    def api_keys_list(self) -> list[str]:
        """Parse API keys from comma-separated string."""
        if not self.api_keys:
            return []
        return [key.strip() for key in self.api_keys.split(",") if key.strip()]


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings."""
    return Settings()
