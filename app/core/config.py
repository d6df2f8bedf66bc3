"""Application configuration settings."""

import os
from decimal import Decimal

from pydantic_settings import BaseSettings, SettingsConfigDict


def _get_default_database_url() -> str:
    """Get the default database URL, using the mounted volume path if available."""
    if os.path.isdir("/data"):
        return "sqlite:////data/flatmeter.db"
    return "sqlite:///./flatmeter.db"


def _get_default_upload_dir() -> str:
    """Get the default directory for meter photos."""
    if os.path.isdir("/data"):
        return "/data/uploads"
    return "./uploads"


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
    )

    PROJECT_NAME: str = "Flatmeter"
    VERSION: str = "0.1.0"
    DEBUG: bool = True
    HOST: str = "0.0.0.0"
    PORT: int = 8000
    LOG_LEVEL: str = "INFO"

    # Database - defaults to the volume path if /data exists
    DATABASE_URL: str = _get_default_database_url()

    # JWT Authentication
    SECRET_KEY: str = "your-secret-key-change-this-in-production"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 12

    # Meter photos
    UPLOAD_DIR: str = _get_default_upload_dir()
    MAX_UPLOAD_BYTES: int = 5 * 1024 * 1024

    # Billing defaults, used until an admin saves tariff settings
    DEFAULT_TARIFF_PER_UNIT: Decimal = Decimal("0")
    DEFAULT_MINIMUM_PRICE: Decimal = Decimal("250")
    DEFAULT_UNIT_FACTOR: Decimal = Decimal("2.3")
    # Tariff assumed for approved readings stored before tariffs were frozen
    LEGACY_TARIFF_PER_UNIT: Decimal = Decimal("70")

    CURRENCY_LABEL: str = "Rs."


settings = Settings()
