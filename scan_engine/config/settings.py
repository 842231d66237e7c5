# scan_engine/config/settings.py

from functools import lru_cache
from typing import Literal, Optional

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
    app_name: str = "factory-scan-engine"
    environment: Literal["dev", "test", "prod"] = "dev"
    debug: bool = False
    version: str = "0.1.0"

    # --- Database ---
    database_url: str = "sqlite+aiosqlite:///./scan_engine.db"

    # --- Scanning ---
    scan_cooldown_seconds: float = Field(2.0, ge=0.0)
    confirmation_timeout_seconds: Optional[float] = Field(None, gt=0.0)
    min_scan_length: int = Field(2, ge=0)
    default_auto_run: bool = False

    # --- Observability ---
    enable_metrics: bool = True
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"


@lru_cache
def get_settings() -> AppSettings:
    return AppSettings()
