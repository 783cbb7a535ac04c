"""Bay Navigator configuration via environment / .env file."""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="BAY_NAVIGATOR_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # --- Preferences ---
    PREFERENCE_NAMESPACE: str = "bay_navigator"
    PREFERENCES_PATH: Path = Path.home() / ".bay_navigator" / "preferences.json"

    # --- Platform ---
    PLATFORM: Literal["android", "ios", "web", "desktop"] = "desktop"

    # --- History ---
    PERSISTED_HISTORY_LIMIT: int = 20
    SESSION_HISTORY_LIMIT: int = 10

    # --- Connectivity ---
    CONNECTIVITY_POLL_SECONDS: float = 5.0

    # --- Logging ---
    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "WARNING"

    @field_validator("PERSISTED_HISTORY_LIMIT", "SESSION_HISTORY_LIMIT")
    @classmethod
    def _positive_limit(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"history limit must be at least 1, got {v}")
        return v

    @field_validator("CONNECTIVITY_POLL_SECONDS")
    @classmethod
    def _positive_interval(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("CONNECTIVITY_POLL_SECONDS must be positive")
        return v

    @field_validator("PREFERENCE_NAMESPACE")
    @classmethod
    def _strip_namespace(cls, v: str) -> str:
        v = v.strip().rstrip(":")
        if not v:
            raise ValueError("PREFERENCE_NAMESPACE cannot be empty")
        return v


settings = Settings()
