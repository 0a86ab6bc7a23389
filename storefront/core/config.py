"""
Configuration management for the storefront API.

Settings are read from environment variables (or a local ``.env`` file)
and validated once per process.
"""

from typing import List

from pydantic import field_validator, ValidationInfo
from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache


DEFAULT_JWT_SECRET = "dev-secret-change-in-production"


class Settings(BaseSettings):
    """
    Application settings with environment variable support.

    Every field can be overridden by an environment variable of the same
    name (case-insensitive), e.g. ``DATABASE_URL`` or ``JWT_SECRET_KEY``.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    app_name: str = "Storefront API"

    # Environment Settings
    environment: str = "development"
    debug: bool = False
    log_level: str = "INFO"

    # Database Configuration
    database_url: str = "sqlite:///./storefront.db"
    log_sql_queries: bool = False
    db_pool_size: int = 10
    db_max_overflow: int = 20

    # JWT Authentication - MUST be overridden in production
    jwt_secret_key: str = DEFAULT_JWT_SECRET
    jwt_algorithm: str = "HS256"
    jwt_access_token_expire_minutes: int = 30
    jwt_issuer: str = "storefront-api"
    jwt_audience: str = "storefront-clients"
    jwt_leeway_seconds: int = 120

    # Comma separated list of allowed origins
    cors_origins: str = "http://localhost:3000"

    # REST surface
    api_prefix: str = "/api/v2"
    reviews_batch_max_items: int = 100

    # RBAC Configuration
    rbac_admin_override_enabled: bool = True

    @field_validator("jwt_secret_key")
    @classmethod
    def validate_jwt_secret(cls, v: str, info: ValidationInfo) -> str:
        """Ensure JWT secret is not using default in production."""
        if info.data.get("environment") == "production" and v == DEFAULT_JWT_SECRET:
            raise ValueError(
                "JWT_SECRET_KEY must be set to a secure value in production"
            )
        return v

    @field_validator("api_prefix")
    @classmethod
    def normalize_api_prefix(cls, v: str) -> str:
        v = "/" + v.strip("/")
        return "" if v == "/" else v

    @property
    def cors_origin_list(self) -> List[str]:
        """Parse CORS origins from the comma separated setting."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment.lower() == "production"

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.environment.lower() == "development"


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Returns:
        Settings instance with environment variables loaded
    """
    return Settings()


# Export settings instance for easy import
settings = get_settings()


def validate_production_config(config: Settings = settings) -> None:
    """Validate configuration for production deployment."""
    if not config.is_production:
        return

    security_issues = []

    if config.jwt_secret_key == DEFAULT_JWT_SECRET:
        security_issues.append("JWT_SECRET_KEY is using default value")

    if config.debug:
        security_issues.append("DEBUG is enabled in production")

    if config.database_url.startswith("sqlite"):
        security_issues.append("Database URL points at SQLite")

    if security_issues:
        raise ValueError(
            f"Production security issues detected: {', '.join(security_issues)}"
        )
