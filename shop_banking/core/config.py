from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    app_name: str = "Shop Banking API"
    database_url: str = "sqlite:///shop_banking.db"
    log_level: str = "INFO"
    api_prefix: str = "/api"

    # Seeded on startup so a fresh database has someone who can grant access.
    bootstrap_admin_email: Optional[str] = None
    bootstrap_admin_name: str = "Administrator"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="BANKING_",
        extra="ignore",
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
