"""
Application Configuration

Centralized settings management using Pydantic Settings.
Supports environment variables and .env files.

Settings are built once at startup and handed to the components that need
them; nothing in the library reads a module-level configured instance.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    # ==========================================================================
    # App Settings
    # ==========================================================================
    APP_NAME: str = "mediahost"
    APP_VERSION: str = "1.0.0"
    ENVIRONMENT: str = "development"  # development, staging, PROD

    # ==========================================================================
    # Cloudinary Credentials
    # ==========================================================================
    # Not validated locally: missing credentials surface as the host's own
    # authentication error on the first remote call.
    CLOUDINARY_CLOUD_NAME: Optional[str] = None
    CLOUDINARY_API_KEY: Optional[str] = None
    CLOUDINARY_API_SECRET: Optional[str] = None

    CLOUDINARY_API_BASE_URL: str = "https://api.cloudinary.com/v1_1"
    CLOUDINARY_TIMEOUT_SECONDS: float = 60.0

    # ==========================================================================
    # Upload Settings
    # ==========================================================================
    DEFAULT_UPLOAD_FOLDER: str = "blog-images"
    UPLOAD_MAX_WIDTH: int = 1200
    UPLOAD_MAX_HEIGHT: int = 630
    UPLOAD_FORMAT: str = "webp"

    # Record field that receives the secure URL
    MEDIA_URL_FIELD: str = "media_url"

    # ==========================================================================
    # Placeholder Settings
    # ==========================================================================
    PLACEHOLDER_FOLDER: str = "ad-defaults"
    PLACEHOLDER_WIDTH: int = 400
    PLACEHOLDER_HEIGHT: int = 200
    PLACEHOLDER_BACKGROUND: str = "#4F46E5"
    PLACEHOLDER_TEXT_COLOR: str = "#FFFFFF"
    PLACEHOLDER_FONT_SIZE: int = 20

    # ==========================================================================
    # Infrastructure
    # ==========================================================================
    DATABASE_URL: str = "sqlite+aiosqlite:///./data/mediahost.db"

    # ==========================================================================
    # Logging Settings
    # ==========================================================================
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT_JSON: bool = True  # JSON for production, console for development

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True
    )


def load_settings(**overrides) -> Settings:
    """Build a fresh Settings instance from the environment plus overrides."""
    return Settings(**overrides)
