"""Application configuration utilities."""

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
    )

    app_name: str = Field(
        default="Clinic Front Desk",
    )
    app_version: str = Field(
        default="0.1.0",
    )

    clinic_name: str = Field(
        default="Front Desk Clinic",
    )
    layout_file: Optional[str] = Field(
        default=None,
    )
    default_waiting_room_number: int = Field(
        default=1,
        ge=1,
    )

    min_body_temperature: float = Field(
        default=25.0,
    )
    max_body_temperature: float = Field(
        default=45.0,
    )
    report_window_days: int = Field(
        default=365,
        ge=1,
    )

    log_level: str = Field(
        default="INFO",
    )


@lru_cache()
def get_settings() -> Settings:
    """Return cached settings instance."""

    return Settings()
