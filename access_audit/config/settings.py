# access_audit/config/settings.py

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # --- Application ---
    app_name: str = "access-audit-log"
    environment: Literal["dev", "test", "prod"] = "dev"
    debug: bool = False
    version: str = "0.1.0"

    # --- Storage ---
    store_backend: Literal["memory", "database"] = "memory"
    database_url: str = "sqlite+aiosqlite:///./access_audit.db"
    database_echo: bool = False

    # --- Query / export ---
    default_page_size: int = Field(100, ge=1)
    max_page_size: int = Field(1000, ge=1)
    default_lookback_days: int = Field(7, ge=0)
    query_timeout_seconds: float = Field(30.0, gt=0)
    export_timeout_seconds: float = Field(300.0, gt=0)
    export_batch_size: int = Field(500, ge=1)

    # --- Observability ---
    enable_metrics: bool = True
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"


@lru_cache
def get_settings() -> AppSettings:
    return AppSettings()


# Singleton for direct import (e.g. in infrastructure clients)
settings = get_settings()
