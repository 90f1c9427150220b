"""
Runtime configuration.

Settings are read from environment variables. Secrets have no defaults;
services that need them raise ValueError when they are missing.
"""

import os
from dataclasses import dataclass

DEFAULT_DATABASE_URL = "sqlite:///jobinsight.db"
DEFAULT_REDIS_URL = "redis://localhost:6379/0"
DEFAULT_CAREERJET_API_URL = "http://public.api.careerjet.net/search"


@dataclass(frozen=True)
class Settings:
    """Environment-derived settings shared by services and CLI scripts."""

    database_url: str = DEFAULT_DATABASE_URL
    redis_url: str = DEFAULT_REDIS_URL
    careerjet_affid: str | None = None
    careerjet_locale: str = "en_GB"
    careerjet_api_url: str = DEFAULT_CAREERJET_API_URL
    analytics_cache_hours: int = 24
    search_cache_seconds: int = 300
    http_timeout_seconds: float = 30.0

    @classmethod
    def from_env(cls) -> "Settings":
        """
        Build settings from the process environment.

        Environment variables:
            DATABASE_URL, REDIS_URL, CAREERJET_AFFID, CAREERJET_LOCALE,
            CAREERJET_API_URL, ANALYTICS_CACHE_HOURS, SEARCH_CACHE_SECONDS,
            HTTP_TIMEOUT_SECONDS

        Raises:
            ValueError: If a numeric variable is not a number
        """
        return cls(
            database_url=os.getenv("DATABASE_URL", DEFAULT_DATABASE_URL),
            redis_url=os.getenv("REDIS_URL", DEFAULT_REDIS_URL),
            careerjet_affid=os.getenv("CAREERJET_AFFID") or None,
            careerjet_locale=os.getenv("CAREERJET_LOCALE", "en_GB"),
            careerjet_api_url=os.getenv("CAREERJET_API_URL", DEFAULT_CAREERJET_API_URL),
            analytics_cache_hours=_env_number("ANALYTICS_CACHE_HOURS", 24, int),
            search_cache_seconds=_env_number("SEARCH_CACHE_SECONDS", 300, int),
            http_timeout_seconds=_env_number("HTTP_TIMEOUT_SECONDS", 30.0, float),
        )


def _env_number(name: str, default, cast):
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    try:
        return cast(value)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {value!r}")
