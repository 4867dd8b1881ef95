"""
Office Hours Queue - Configuration Settings
Environment-separated settings loaded from the process environment and .env.

Covers:
- Environment separation (development/staging/production/testing)
- Database connection configuration
- Identity resolution (SSO header, forceuser simulation)
"""

import os
from functools import lru_cache
from typing import List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings."""
    
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore"
    )
    
    # Application Settings
    PROJECT_NAME: str = "Office Hours Queue"
    VERSION: str = "1.0.0"
    ENVIRONMENT: str = Field(default="development", pattern="^(development|staging|production|testing)$")
    DEBUG: bool = Field(default=False)
    
    # Server Configuration
    HOST: str = Field(default="127.0.0.1")
    PORT: int = Field(default=8000, ge=1, le=65535)
    
    # HTTP Settings
    ALLOWED_HOSTS: List[str] = Field(default=["localhost", "127.0.0.1"])
    CORS_ORIGINS: List[str] = Field(default=["http://localhost:3000"])
    
    # Database Configuration
    DATABASE_URL: str = Field(default="sqlite+aiosqlite:///./officehours.db")
    DB_POOL_SIZE: int = Field(default=5, ge=1, le=20)
    DB_MAX_OVERFLOW: int = Field(default=10)
    DB_POOL_TIMEOUT: int = Field(default=30)
    DB_POOL_RECYCLE: int = Field(default=3600)
    
    # Identity
    # Header set by the SSO proxy in front of the app, e.g. "netid@illinois.edu"
    AUTH_HEADER: str = Field(default="eppn")
    AUTH_DOMAIN: Optional[str] = Field(default=None)
    # User assumed outside production when no forceuser is given
    DEV_USER: str = Field(default="dev", min_length=1)
    
    # Rate Limiting
    RATE_LIMIT_REQUESTS_PER_MINUTE: int = Field(default=60)
    
    # Monitoring & Logging
    SENTRY_DSN: Optional[str] = Field(default=None)
    SENTRY_TRACES_SAMPLE_RATE: float = Field(default=0.1, ge=0.0, le=1.0)
    LOG_LEVEL: str = Field(default="INFO", pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$")
    
    # Testing Configuration
    TESTING: bool = Field(default=False)
    TEST_DATABASE_URL: Optional[str] = Field(default=None)
    
    @field_validator("DEV_USER")
    @classmethod
    def validate_dev_user(cls, v: str) -> str:
        """NetIDs are stored lowercase."""
        return v.strip().lower()
    
    @property
    def is_production(self) -> bool:
        """Check if running in production."""
        return self.ENVIRONMENT == "production"
    
    @property
    def is_development(self) -> bool:
        """Check if running in development."""
        return self.ENVIRONMENT == "development"
    
    @property
    def allow_force_user(self) -> bool:
        """The forceuser query parameter is honoured everywhere but production."""
        return not self.is_production
    
    @property
    def database_url_sync(self) -> str:
        """Get synchronous database URL."""
        return (
            self.DATABASE_URL
            .replace("postgresql+asyncpg://", "postgresql://")
            .replace("sqlite+aiosqlite://", "sqlite://")
        )


class ProductionSettings(Settings):
    """Production-specific settings."""
    
    DEBUG: bool = False
    LOG_LEVEL: str = "WARNING"
    RATE_LIMIT_REQUESTS_PER_MINUTE: int = 120
    
    @field_validator("ALLOWED_HOSTS")
    @classmethod
    def validate_production_hosts(cls, v: List[str]) -> List[str]:
        """Ensure production hosts are properly configured."""
        if "localhost" in v or "127.0.0.1" in v:
            raise ValueError("Production cannot use localhost in ALLOWED_HOSTS")
        return v


class DevelopmentSettings(Settings):
    """Development-specific settings."""
    
    DEBUG: bool = True
    LOG_LEVEL: str = "DEBUG"
    RATE_LIMIT_REQUESTS_PER_MINUTE: int = 600


class TestingSettings(Settings):
    """Testing-specific settings."""
    
    ENVIRONMENT: str = "testing"
    TESTING: bool = True
    DEBUG: bool = True
    LOG_LEVEL: str = "WARNING"
    DEV_USER: str = "admin"
    
    # The middleware outlives individual test clients
    RATE_LIMIT_REQUESTS_PER_MINUTE: int = 1_000_000
    
    DATABASE_URL: str = "sqlite+aiosqlite:///./officehours-test.db"


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance based on environment.
    
    Returns:
        Settings: Configured settings instance
    """
    environment = os.getenv("ENVIRONMENT", "development").lower()
    
    if environment == "production":
        return ProductionSettings()
    elif environment == "testing":
        return TestingSettings()
    else:
        return DevelopmentSettings()


# Export settings instance
settings = get_settings()
