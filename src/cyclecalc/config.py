"""Process-level settings loaded from environment variables."""

import logging
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict

LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s — %(message)s"


class Settings(BaseSettings):
    """Configuration from ``CYCLECALC_*`` environment variables (or .env file)."""

    log_level: str = "INFO"
    environment: str = "development"  # development | staging | production

    # Alternative rule table; the bundled cycle_config.yaml when unset
    cycle_config_path: str | None = None

    model_config = SettingsConfigDict(
        env_prefix="CYCLECALC_", env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )


@lru_cache
def get_settings() -> Settings:
    return Settings()


def configure_logging(settings: Settings | None = None) -> None:
    """Install the root handler used by host processes and scripts."""
    settings = settings or get_settings()
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format=LOG_FORMAT,
    )
