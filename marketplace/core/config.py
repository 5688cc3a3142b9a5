"""
marketplace/core/config.py

Purpose: Application configuration

- Loads environment variables
- Centralizes config values (DB URI, JWT secrets, Stripe, Cloudinary)
- Validates configuration on startup
- Environment-specific settings
"""

from pydantic import Field, field_validator, ValidationInfo
from pydantic_settings import BaseSettings
from typing import Optional, Literal

DEFAULT_JWT_SECRET = "change-me-in-production"
DEFAULT_JWT_REFRESH_SECRET = "change-me-refresh-in-production"


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.
    Validates all required configs on startup.
    """

    # Environment
    ENVIRONMENT: Literal["development", "test", "staging", "production"] = "development"

    # MongoDB
    MONGODB_URL: str = Field(
        default="mongodb://localhost:27017",
        description="MongoDB connection URI"
    )
    MONGODB_DB_NAME: str = Field(
        default="ecom_multirole",
        description="MongoDB database name"
    )
    MONGODB_MAX_POOL_SIZE: int = Field(default=50, ge=1)
    MONGODB_CONNECT_RETRIES: int = Field(
        default=3,
        ge=1,
        description="Connection attempts at startup, with exponential backoff"
    )

    # JWT
    JWT_SECRET: str = Field(
        default=DEFAULT_JWT_SECRET,
        description="Secret used to sign access tokens"
    )
    JWT_REFRESH_SECRET: str = Field(
        default=DEFAULT_JWT_REFRESH_SECRET,
        description="Secret used to sign refresh tokens"
    )
    JWT_ALGORITHM: str = "HS256"
    JWT_EXPIRE_MINUTES: int = Field(
        default=60 * 24 * 7,
        description="Access token lifetime in minutes (7 days)"
    )
    JWT_REFRESH_EXPIRE_DAYS: int = Field(
        default=30,
        description="Refresh token lifetime in days"
    )
    MAX_REFRESH_TOKENS: int = Field(
        default=5,
        description="Refresh tokens kept per account; older ones are dropped"
    )
    COOKIE_EXPIRE_DAYS: int = Field(
        default=7,
        description="Lifetime of the auth cookie in days"
    )
    BCRYPT_ROUNDS: int = Field(
        default=12,
        description="bcrypt cost factor for password hashes"
    )
    RESET_TOKEN_EXPIRE_MINUTES: int = 10

    # Stripe
    STRIPE_SECRET_KEY: Optional[str] = Field(
        default=None,
        description="Stripe secret API key"
    )
    STRIPE_WEBHOOK_SECRET: Optional[str] = Field(
        default=None,
        description="Stripe webhook signing secret"
    )
    STRIPE_CURRENCY: str = "usd"

    # Cloudinary
    CLOUDINARY_CLOUD_NAME: Optional[str] = None
    CLOUDINARY_API_KEY: Optional[str] = None
    CLOUDINARY_API_SECRET: Optional[str] = None
    CLOUDINARY_BASE_URL: str = Field(
        default="https://api.cloudinary.com/v1_1",
        description="Cloudinary REST API base URL"
    )
    CLOUDINARY_FOLDER: str = Field(
        default="ecom-multirole",
        description="Root folder for uploaded assets"
    )
    CLOUDINARY_TIMEOUT: int = 30
    MAX_UPLOAD_SIZE_MB: int = 5
    MAX_UPLOAD_FILES: int = 10

    # Orders
    ORDER_TAX_RATE: float = Field(
        default=0.1,
        description="Tax rate applied to the order subtotal"
    )
    RETURN_WINDOW_DAYS: int = 30

    # Rate Limiting (disabled unless turned on explicitly)
    RATE_LIMIT_ENABLED: bool = False
    RATE_LIMIT_MAX_ATTEMPTS: int = Field(
        default=5,
        description="Maximum auth attempts per window"
    )
    RATE_LIMIT_WINDOW_SECONDS: int = Field(
        default=15 * 60,
        description="Length of the rate limit window in seconds"
    )

    # Application
    DEBUG: bool = Field(
        default=False,
        description="Enable debug mode"
    )
    LOG_LEVEL: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )
    API_PREFIX: str = Field(
        default="/api/v1",
        description="API route prefix"
    )
    CORS_ORIGINS: list = Field(
        default=["http://localhost:3000", "http://localhost:5173"],
        description="Allowed CORS origins"
    )
    SITE_NAME: str = "Ecom-MultiRole"

    @field_validator("JWT_SECRET", "JWT_REFRESH_SECRET")
    @classmethod
    def validate_jwt_secret(cls, v, info: ValidationInfo):
        """Ensure JWT secrets are changed in production."""
        if info.data.get("ENVIRONMENT") == "production" and v in (
            DEFAULT_JWT_SECRET, DEFAULT_JWT_REFRESH_SECRET
        ):
            raise ValueError(f"{info.field_name} must be changed in production environment")
        return v

    @field_validator("BCRYPT_ROUNDS")
    @classmethod
    def validate_bcrypt_rounds(cls, v):
        if not 4 <= v <= 31:
            raise ValueError("BCRYPT_ROUNDS must be between 4 and 31")
        return v

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.ENVIRONMENT == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.ENVIRONMENT == "production"

    @property
    def cloudinary_configured(self) -> bool:
        return bool(
            self.CLOUDINARY_CLOUD_NAME and self.CLOUDINARY_API_KEY and self.CLOUDINARY_API_SECRET
        )

    class Config:
        env_file = ".env"
        case_sensitive = True
        env_file_encoding = "utf-8"
        extra = "ignore"


# Global settings instance
settings = Settings()


def validate_settings():
    """
    Validates critical settings on application startup.
    Raises ValueError if any required setting is missing or invalid.
    """
    errors = []

    if not settings.MONGODB_URL:
        errors.append("MONGODB_URL is required")

    if not settings.MONGODB_DB_NAME:
        errors.append("MONGODB_DB_NAME is required")

    if settings.JWT_SECRET == settings.JWT_REFRESH_SECRET:
        errors.append("JWT_SECRET and JWT_REFRESH_SECRET must differ")

    # Production-specific validations
    if settings.is_production:
        if not settings.STRIPE_SECRET_KEY:
            errors.append("STRIPE_SECRET_KEY is required in production")
        if not settings.STRIPE_WEBHOOK_SECRET:
            errors.append("STRIPE_WEBHOOK_SECRET is required in production")
        if not settings.cloudinary_configured:
            errors.append("Cloudinary credentials are required in production")

    if errors:
        raise ValueError(f"Configuration validation failed: {', '.join(errors)}")

    return True
