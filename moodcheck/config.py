"""
Runtime configuration and logging setup.
"""

import logging
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


class Settings(BaseSettings):
    """Settings read from MOODCHECK_* environment variables or a .env file."""

    model_config = SettingsConfigDict(
        env_prefix="MOODCHECK_", env_file=".env", extra="ignore"
    )

    # Client
    base_url: str = "http://localhost:8000"
    user: str | None = None
    suggestion_seconds: float = 10.0

    # Server
    host: str = "0.0.0.0"
    port: int = 8000

    log_level: str = "info"


@lru_cache()
def get_settings() -> Settings:
    return Settings()


def configure_logging(level: str = "info") -> None:
    """Send log records to stderr with a single shared format."""
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)
