# app/config/settings.py
import logging
from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from app.config.env import require_env

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""
    MONGO_URI: str = Field(description="MongoDB connection URI")
    MONGO_DB: str = Field(description="MongoDB database name")
    SECRET_KEY: str = Field(description="Secret key for JWT encoding")
    ACCESS_TOKEN_EXPIRE_MINUTES: int = Field(60 * 24 * 7, ge=1, description="Access token expiration time in minutes")
    CORS_ORIGINS: str = Field("*", description="Comma-separated list of allowed origins")
    RATE_LIMIT_ENABLED: bool = Field(True, description="Enable per-route rate limiting")
    UPLOAD_DIR: str = Field("uploads", description="Directory for uploaded product images")
    MAX_UPLOAD_SIZE_MB: int = Field(5, ge=1, description="Maximum size of an uploaded image in MB")
    CONTACT_HOURLY_LIMIT: int = Field(5, ge=1, description="Contact submissions allowed per IP per hour")
    HCAPTCHA_SECRET: Optional[str] = Field(None, description="hCaptcha secret; contact captcha is checked only when set")
    LOG_LEVEL: str = Field("INFO", description="Root log level")
    LOG_FILE: Optional[str] = Field(None, description="Optional log file path")
    ADMIN_EMAIL: str = Field("admin@example.com", description="Email of the seeded admin account")
    ADMIN_PASSWORD: str = Field("admin123", description="Password of the seeded admin account")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="forbid"
    )

    def __init__(self, **values):
        """Initialize settings and log the loaded values."""
        super().__init__(**values)
        logger.info("Settings initialized successfully")
        logger.debug(f"Loaded settings: MONGO_DB={self.MONGO_DB}, "
                     f"ACCESS_TOKEN_EXPIRE_MINUTES={self.ACCESS_TOKEN_EXPIRE_MINUTES}, "
                     f"RATE_LIMIT_ENABLED={self.RATE_LIMIT_ENABLED}, UPLOAD_DIR={self.UPLOAD_DIR}")

    @property
    def cors_origins(self) -> List[str]:
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]


def load_settings() -> Settings:
    """Load settings with environment variable validation."""
    try:
        settings = Settings(**require_env("MONGO_URI", "MONGO_DB", "SECRET_KEY"))
        return settings
    except ValueError as ve:
        logger.error(f"Validation error loading settings: {str(ve)}", exc_info=True)
        raise
    except Exception as e:
        logger.error(f"Unexpected error loading settings: {str(e)}", exc_info=True)
        raise RuntimeError(f"Failed to load settings: {str(e)}")


settings = load_settings()
