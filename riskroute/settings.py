"""Centralised environment-driven settings."""

from __future__ import annotations

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings sourced from ``RISKROUTE_*`` environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="RISKROUTE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    LOG_LEVEL: str = "INFO"
    DATA_DIR: str = "./data"
    DEFAULT_INPUT: str = "input.txt"


settings = Settings()

__all__ = ["Settings", "settings"]
