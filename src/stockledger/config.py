"""Runtime settings, read from ``STOCKLEDGER_*`` environment variables or a
``.env`` file in the working directory."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="STOCKLEDGER_", env_file=".env", extra="ignore"
    )

    # Storage
    data_dir: Path = Path("data")

    # Concurrency
    max_retries: int = 3

    # Listings
    page_limit: int = 20
    max_page_limit: int = 100

    # Logging
    log_level: str = "WARNING"


@lru_cache()
def get_settings() -> Settings:
    return Settings()
