"""
Settings for the finance tracker, read from the environment or a ``.env`` file.
"""
from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Storage
    store_backend: Literal["memory", "json"] = Field("memory", alias="FINANCE_STORE")
    data_file: str = Field("data/finance.json", alias="FINANCE_DATA_FILE")
    seed_file: str = Field("data/seed.json", alias="FINANCE_SEED_FILE")

    # Display
    currency: str = Field("USD", alias="FINANCE_CURRENCY")

    # Logging
    log_level: str = Field("INFO", alias="LOG_LEVEL")
    log_json: bool = Field(False, alias="LOG_JSON")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()


__all__ = ["Settings", "get_settings"]
