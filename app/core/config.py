"""
Configuration settings for the application
"""

import os
from typing import List
from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    """Application settings"""

    # Database
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./table_bookings.db")
    SEED_DEFAULT_CATALOG: bool = os.getenv("SEED_DEFAULT_CATALOG", "true").lower() in ("1", "true", "yes")

    # Application
    DEBUG: bool = os.getenv("DEBUG", "false").lower() in ("1", "true", "yes")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # Sessions
    SESSION_SECRET: str = os.getenv("SESSION_SECRET", "change-me-session-secret")
    SESSION_MAX_AGE: int = 60 * 60 * 24  # 24 hours

    # Identity provider (Discord OAuth2)
    ADMIN_IDENTITY_ID: str | None = os.getenv("ADMIN_IDENTITY_ID")
    DISCORD_CLIENT_ID: str = os.getenv("DISCORD_CLIENT_ID", "")
    DISCORD_CLIENT_SECRET: str = os.getenv("DISCORD_CLIENT_SECRET", "")
    DISCORD_REDIRECT_URI: str = os.getenv("DISCORD_REDIRECT_URI", "http://localhost:8000/auth/callback")
    DISCORD_API_BASE: str = os.getenv("DISCORD_API_BASE", "https://discord.com/api")
    POST_LOGIN_REDIRECT: str = os.getenv("POST_LOGIN_REDIRECT", "/")

    # CORS
    ALLOW_ORIGINS: List[str] = [
        "http://localhost:3000",
        "http://localhost:8000",
    ]

    # Booking policy
    BOOKING_WEEKDAYS: List[int] = [1]  # Monday == 0, so Tuesday only
    ENFORCE_BOOKING_WEEKDAYS: bool = True
    UPCOMING_DATES_COUNT: int = 4
    ONE_BOOKING_PER_USER_PER_DAY: bool = True
    GAME_DELETE_POLICY: str = "nullify"  # nullify | cascade

    class Config:
        env_file = ".env"

settings = Settings()
