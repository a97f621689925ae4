"""Centralized settings for the TaxSaver engine.

Uses pydantic-settings to load from environment variables (prefixed TAXSAVER_)
with defaults suitable for local development against SQLite.
"""

from functools import lru_cache

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """TaxSaver settings loaded from environment variables."""

    # --- Database ---
    database_url: str = "sqlite:///taxsaver.db"
    database_echo: bool = False

    # --- Logging ---
    log_level: str = "INFO"
    log_format: str = "json"

    # --- Engine parameters ---
    wash_sale_window_days: int = 30
    carry_forward_expiry_years: int = 8
    min_harvest_loss: float = 0.0

    model_config = {
        "env_prefix": "TAXSAVER_",
        "env_file": ".env",
        "extra": "ignore",
    }


@lru_cache
def get_settings() -> Settings:
    """Get cached settings singleton."""
    return Settings()
