"""Configuration management for the application."""

from functools import lru_cache

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Database
    database_url: str = Field(default="sqlite:///./references.db")
    # Seconds a SQLite writer waits on BEGIN IMMEDIATE before giving up
    sqlite_busy_timeout: float = Field(default=30.0, gt=0)

    # Logging
    log_level: str = Field(default="INFO")

    # API
    environment: str = Field(default="development")

    @model_validator(mode="after")
    def validate_production_settings(self) -> "Settings":
        """Validate that production has a durable, non-local database."""
        if self.environment == "production":
            if "localhost" in self.database_url:
                raise ValueError("DATABASE_URL should not use localhost in production")
            if self.is_sqlite and ":memory:" in self.database_url:
                raise ValueError("DATABASE_URL should not be an in-memory database in production")
        return self

    @property
    def is_sqlite(self) -> bool:
        """Check if the configured store is SQLite."""
        return self.database_url.startswith("sqlite")

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.environment == "development"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
