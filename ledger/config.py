"""Configuration for the clinic ledger tools."""
from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="CLINIC_LEDGER_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    app_name: str = Field(default="Clinic Ledger")
    seed_path: str = Field(default="data/seed.json")
    currency: str = Field(default="UGX")

    working_day_start_hour: int = Field(default=8, ge=0, le=23)
    marketing_channel: str = Field(default="Social Media")
    no_doctor: str = Field(default="None")
    recent_activity_limit: int = Field(default=5, ge=0)

    log_level: str = Field(default="INFO")
    logging_config_path: str = Field(default="configs/logging.yaml")


@lru_cache
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()


__all__ = ["Settings", "get_settings"]
