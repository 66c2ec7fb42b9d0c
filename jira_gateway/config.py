"""Application configuration using pydantic-settings."""

import os
import warnings
from functools import lru_cache
from typing import Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


# Insecure default that must be changed in production
_INSECURE_SECRET_KEY = "change-this-to-a-secure-random-string"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "JIRA API Gateway"
    app_version: str = "1.0.0"
    debug: bool = False
    environment: str = "development"  # development, staging, production

    # Integration store
    database_url: str = "sqlite:///./jira_gateway.db"

    # Caller token verification
    secret_key: str = _INSECURE_SECRET_KEY
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 30

    # JIRA API
    jira_max_results: int = 10  # bound for assignable user searches
    jira_request_timeout: int = 30  # seconds, applied by the HTTP transport
    jira_verify_ssl: bool = True

    # CORS
    cors_origins: list[str] = ["http://localhost:3000"]

    # API
    api_host: str = "0.0.0.0"
    api_port: int = 8080

    # Logging settings
    log_level: str = "INFO"  # DEBUG, INFO, WARNING, ERROR, CRITICAL
    log_json: bool = True  # Output logs as JSON for aggregation
    log_file: Optional[str] = None  # Optional file path for logs

    @field_validator("secret_key")
    @classmethod
    def validate_secret_key(cls, v: str) -> str:
        """Validate secret key is not the insecure default in production."""
        env = os.getenv("ENVIRONMENT", "development").lower()
        if env == "production" and v == _INSECURE_SECRET_KEY:
            raise ValueError(
                "SECRET_KEY must be set to a secure random value in production. "
                "Generate one with: python -c \"import secrets; print(secrets.token_urlsafe(32))\""
            )
        if len(v) < 32:
            raise ValueError("SECRET_KEY must be at least 32 characters long")
        return v

    @field_validator("jira_max_results")
    @classmethod
    def validate_jira_max_results(cls, v: int) -> int:
        """Validate the search result bound is positive."""
        if v < 1:
            raise ValueError("JIRA_MAX_RESULTS must be at least 1")
        return v

    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment.lower() == "production"


def validate_settings_on_startup(settings: "Settings") -> None:
    """Additional validation run on application startup."""
    if settings.is_production():
        if settings.debug:
            raise ValueError("DEBUG must be False in production")

        if not settings.jira_verify_ssl:
            warnings.warn(
                "JIRA_VERIFY_SSL is disabled. Signed requests to JIRA will not "
                "verify the server certificate."
            )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    settings = Settings()
    validate_settings_on_startup(settings)
    return settings
