from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    app_name: str = "Service Desk"
    app_version: str = "0.1.0"
    debug: bool = False
    environment: Literal["development", "staging", "production"] = "development"
    log_level: str = "INFO"
    database_url: str = "sqlite+aiosqlite:///./service_desk.db"
    cors_origins: list[str] = ["http://localhost:5173", "http://localhost:8000"]

    # Store contention handling.
    store_busy_timeout_seconds: float = 15.0
    store_retry_attempts: int = 3
    store_retry_backoff_seconds: float = 0.05
    store_retry_max_backoff_seconds: float = 1.0

    # Identity sessions.
    session_ttl_hours: int = 24
    session_refresh_grace_minutes: int = 60


_settings: Settings | None = None


def get_settings() -> Settings:
    """Return cached settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
