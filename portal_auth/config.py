"""Configuration settings for Portal Auth."""

import os
from functools import lru_cache

from dotenv import load_dotenv

load_dotenv()


class Settings:
    """Application settings loaded from environment variables."""

    # Database
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite+aiosqlite:///./portal_auth.db")

    # JWT
    JWT_SECRET_KEY: str = os.getenv("JWT_SECRET_KEY", "")
    JWT_ALGORITHM: str = os.getenv("JWT_ALGORITHM", "HS256")

    # Email
    EMAIL_MODE: str = os.getenv("EMAIL_MODE", "console")
    SMTP_HOST: str | None = os.getenv("SMTP_HOST")
    SMTP_PORT: int = int(os.getenv("SMTP_PORT", "465"))
    SMTP_USER: str | None = os.getenv("SMTP_USER")
    SMTP_PASSWORD: str | None = os.getenv("SMTP_PASSWORD")
    SMTP_FROM_EMAIL: str = os.getenv("SMTP_FROM_EMAIL", "noreply@example.com")

    # Geolocation
    GEOIP_DATABASE_PATH: str | None = os.getenv("GEOIP_DATABASE_PATH")

    # Application
    APP_NAME: str = os.getenv("APP_NAME", "CO2e Portal")
    APP_ENV: str = os.getenv("APP_ENV", "development")
    FRONTEND_URL: str = os.getenv("FRONTEND_URL", "http://localhost:3000")
    DEBUG: bool = os.getenv("DEBUG", "false").lower() == "true"

    @property
    def is_production(self) -> bool:
        return self.APP_ENV == "production"

    @property
    def sync_database_url(self) -> str:
        """Database URL with the async driver removed, for Alembic."""
        return self.DATABASE_URL.replace("+aiosqlite", "")

    def validate(self) -> list[str]:
        """Validate settings and return list of warnings."""
        errors = []
        if self.EMAIL_MODE == "smtp" and not self.SMTP_HOST:
            errors.append("EMAIL_MODE=smtp but SMTP_HOST is not set - emails will be logged to console")
        return errors


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
