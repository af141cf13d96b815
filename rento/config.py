# rento/config.py
"""
Application configuration using Pydantic-Settings.
All settings can be overridden via environment variables or .env file.
"""

from pydantic_settings import BaseSettings
from typing import Optional


class Settings(BaseSettings):
    # ── Database ──────────────────────────────────────────────────────────
    DATABASE_URL: str = "sqlite:///./rento.db"

    # ── Network ───────────────────────────────────────────────────────────
    BACKEND_IP: str = "127.0.0.1"
    BACKEND_PORT: int = 8080

    # ── Security ──────────────────────────────────────────────────────────
    API_KEY: Optional[str] = None   # Set in .env to enable auth on API endpoints

    # ── Calendar ──────────────────────────────────────────────────────────
    DEFAULT_TIMEZONE: str = "UTC"          # Used when a vehicle has no pickup timezone
    CALENDAR_HORIZON_DAYS: int = 90        # Disabled-date window for date pickers
    CALENDAR_SUMMARY_MONTHS: int = 2       # Months shown on listing / detail summaries

    # ── Notifications ─────────────────────────────────────────────────────
    NOTIFICATION_WEBHOOK_URL: Optional[str] = None   # Leave empty to disable dispatch
    NOTIFICATION_TIMEOUT_SECONDS: float = 5.0

    # ── Logging ───────────────────────────────────────────────────────────
    LOG_LEVEL: str = "INFO"
    LOG_DIR: str = "logs"

    class Config:
        env_file = ".env"
        extra = "ignore"


settings = Settings()
