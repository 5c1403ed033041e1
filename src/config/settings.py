from __future__ import annotations

from datetime import timedelta
from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # None keeps alert state in process memory
    database_url: str | None = None
    log_level: str = "INFO"
    environment: str = "dev"
    # CORS
    cors_allow_origins: str = "*"
    # Alert monitoring
    alert_check_interval_minutes: int = 30
    alert_notifications_enabled: bool = True
    alert_history_limit: int = 100
    alert_persist_limit: int = 50
    alert_dedup_window_minutes: int = 60
    alert_settings_key: str = "herd-alert-settings"
    alerts_storage_key: str = "herd-alerts"
    # Performance reports
    growth_target_weight_grams: float = 2500

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    @field_validator("database_url")
    @classmethod
    def ensure_asyncpg_scheme(cls, value: str | None) -> str | None:
        if not value:
            return None
        if value.startswith("postgres://"):
            return value.replace("postgres://", "postgresql+asyncpg://", 1)
        if value.startswith("postgresql://") and "+" not in value.split("://", 1)[0]:
            return value.replace("postgresql://", "postgresql+asyncpg://", 1)
        return value

    @field_validator("alert_check_interval_minutes", "alert_history_limit", "alert_persist_limit")
    @classmethod
    def ensure_positive(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("must be positive")
        return value

    @property
    def cors_allow_origins_list(self) -> list[str]:
        """Convert cors_allow_origins string to list"""
        return [v.strip() for v in self.cors_allow_origins.split(",") if v.strip()]

    @property
    def alert_dedup_window(self) -> timedelta:
        return timedelta(minutes=self.alert_dedup_window_minutes)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
