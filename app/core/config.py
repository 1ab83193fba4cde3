"""
Application configuration management using Pydantic Settings.
"""
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from app.domain.schemas.billing import BillingMode


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.
    """
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Application
    APP_NAME: str = "Tenantry"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = False
    ENVIRONMENT: str = Field(default="development", pattern="^(development|staging|production)$")

    # Billing
    BILLING_MODE: BillingMode = BillingMode.USER
    PER_SEAT_MULTIPLIER: bool = False
    FREE_PLAN_CODE: str = "free"
    ADMIN_OVERRIDE_LIMIT: int = Field(default=1_000_000, gt=0)

    # Service call logging
    LOG_SERVICE_ARGUMENTS: bool = False

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.ENVIRONMENT == "production"

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.ENVIRONMENT == "development"

    @property
    def bills_organizations(self) -> bool:
        """Subscriptions are tracked per organization rather than per user."""
        return self.BILLING_MODE == BillingMode.ORGANIZATION


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Returns:
        Settings: Application settings
    """
    return Settings()


# Create a settings instance for easy import
settings = get_settings()
