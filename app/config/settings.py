"""
Configuration settings for the Razorpay backend
Handles environment variables and application settings
"""
from typing import List, Optional

from pydantic import SecretStr, field_validator
from pydantic_settings import BaseSettings

from app.errors import ConfigurationError

REQUIRED_ENV_VARS = ("RAZORPAY_KEY_ID", "RAZORPAY_KEY_SECRET")


class Settings(BaseSettings):
    """Application settings"""

    # Application
    APP_NAME: str = "razorpay-backend"
    APP_VERSION: str = "1.0.0"
    ENVIRONMENT: str = "development"
    HOST: str = "0.0.0.0"
    PORT: int = 3000
    LOG_LEVEL: str = "INFO"

    # Razorpay
    RAZORPAY_KEY_ID: Optional[str] = None
    RAZORPAY_KEY_SECRET: Optional[SecretStr] = None
    RAZORPAY_API_BASE: str = "https://api.razorpay.com"
    GATEWAY_TIMEOUT_SECONDS: float = 15.0
    FETCH_PAYMENT_DETAILS: bool = True

    # CORS (comma separated, "*" for any origin)
    ALLOWED_ORIGINS: str = "*"

    @field_validator("RAZORPAY_KEY_ID", "RAZORPAY_API_BASE", mode="before")
    @classmethod
    def strip_blank(cls, v):
        if isinstance(v, str):
            v = v.strip()
            return v or None
        return v

    @field_validator("RAZORPAY_KEY_SECRET", mode="before")
    @classmethod
    def blank_secret_is_missing(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @property
    def cors_origins(self) -> List[str]:
        return [origin.strip() for origin in self.ALLOWED_ORIGINS.split(",") if origin.strip()]

    @property
    def key_secret(self) -> bytes:
        """HMAC key bytes. Only the signature code should touch this."""
        return self.RAZORPAY_KEY_SECRET.get_secret_value().encode("utf-8")

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"  # Ignore extra fields from .env file
        frozen = True


def validate_settings(settings: Settings) -> Settings:
    """Validate critical settings"""
    missing = [name for name in REQUIRED_ENV_VARS if getattr(settings, name) is None]
    if missing:
        raise ConfigurationError(
            f"{', '.join(missing)} is not set in environment variables"
        )
    if settings.GATEWAY_TIMEOUT_SECONDS <= 0:
        raise ConfigurationError("GATEWAY_TIMEOUT_SECONDS must be positive")
    return settings


def load_settings(**overrides) -> Settings:
    """Build settings from the environment and refuse to continue without credentials."""
    return validate_settings(Settings(**overrides))
