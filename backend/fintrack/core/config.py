from __future__ import annotations
"""Application configuration from environment variables."""
from functools import lru_cache
from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=["../.env", ".env"],
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # App
    app_name: str = "Fintrack"
    debug: bool = False
    secret_key: str = "change-me-in-production"

    # Database
    database_url: str = "sqlite+aiosqlite:///./fintrack.db"

    # JWT session token
    jwt_algorithm: str = "HS256"
    jwt_expire_minutes: int = 60 * 24 * 7  # 7 days

    # Session cookie
    session_cookie_name: str = "fintrack_session"
    session_cookie_secure: bool = False

    # Accounting
    base_currency: str = "INR"
    od_limit: float = 500000.0  # Assumed overdraft / credit line limit

    # Exchange rates (Frankfurter)
    exchange_rate_api_url: str = "https://api.frankfurter.app/latest"
    exchange_rate_timeout: float = 10.0

    # CORS
    cors_origins: List[str] = [
        "http://localhost:3000",
        "http://localhost:5173",
    ]

    # Self sign-up; the first registered user becomes admin
    allow_registration: bool = True

    # Seed default categories and accounts into an empty database
    seed_demo_data: bool = True

    # Sentry (Error Monitoring)
    sentry_dsn: Optional[str] = None


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
