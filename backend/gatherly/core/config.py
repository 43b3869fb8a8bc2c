"""
Application configuration and environment settings.
"""
from pydantic_settings import BaseSettings
from pydantic import field_validator
from decimal import Decimal
from typing import List, Union


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application
    APP_NAME: str = "Gatherly"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # Database
    DATABASE_URL: str = "sqlite:///./gatherly.db"
    DB_ECHO: bool = False

    # CORS
    CORS_ORIGINS: Union[List[str], str] = ["http://localhost:3000", "http://localhost:5173"]

    @field_validator("CORS_ORIGINS", mode="before")
    @classmethod
    def parse_cors_origins(cls, v):
        """Parse CORS_ORIGINS from comma-separated string or list."""
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v

    # Bill split
    CURRENCY: str = "USD"
    SETTLEMENT_EPSILON: Decimal = Decimal("0.005")  # Balances within this of zero count as settled

    # Guest links
    GUEST_LINK_BASE_URL: str = "http://localhost:5173/events/guest"

    class Config:
        env_file = ".env"
        case_sensitive = True


settings = Settings()
