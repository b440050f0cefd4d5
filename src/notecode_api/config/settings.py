# src/notecode_api/config/settings.py
from typing import List, Optional
from functools import lru_cache

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Single source of truth for all application settings.

    Configuration precedence:
    1. Environment variables (highest priority)
    2. .env file (if exists)
    3. Default values in this class (lowest priority)

    Usage:
        from notecode_api.config.settings import get_settings
        settings = get_settings()
        secret = settings.jwt_secret
    """

    # Application Settings
    app_name: str = Field(
        default="notecode-api",
        description="Application name"
    )

    # Deployment Mode
    deployment_mode: str = Field(
        default="local-dev",
        validation_alias=AliasChoices("DEPLOYMENT_MODE", "deployment_mode"),
        description="Deployment mode: local-dev (SQLite documents) or prod (MongoDB)"
    )

    api_prefix: str = Field(
        default="/api",
        description="Path prefix for the protected file routes"
    )

    # Local document store
    sqlite_db_path: str = Field(
        default="notecode.db",
        description="SQLite file backing the local document store"
    )

    # MongoDB
    mongodb_uri: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("MONGODB_URI", "mongodb_uri"),
        description="MongoDB connection string (prod mode)"
    )

    mongodb_database: str = Field(
        default="notecode",
        description="Database used when the URI names none"
    )

    store_timeout_ms: int = Field(
        default=5000,
        gt=0,
        description="Timeout for document store operations in milliseconds"
    )

    # Token signing
    jwt_secret: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("JWT_SECRET", "jwt_secret"),
        description="Secret used to sign and verify bearer tokens"
    )

    jwt_algorithm: str = Field(
        default="HS256",
        description="JWT signing algorithm"
    )

    jwt_expiry_hours: int = Field(
        default=24 * 30,
        gt=0,
        description="Lifetime of tokens minted by the CLI"
    )

    # CORS
    cors_origins: List[str] = Field(
        default=["http://localhost:5173"],
        description="Origins allowed to call the API from a browser"
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level"
    )

    @field_validator('deployment_mode', mode='before')
    @classmethod
    def normalize_deployment_mode(cls, v):
        """Normalize deployment mode values for backwards compatibility."""
        if v:
            mode_mapping = {
                "local": "local-dev",
                "production": "prod",
            }
            return mode_mapping.get(v, v)
        return v

    @field_validator('deployment_mode')
    @classmethod
    def validate_deployment_mode(cls, v):
        """Validate deployment mode is one of the allowed values."""
        valid_modes = ["local-dev", "prod"]
        if v not in valid_modes:
            raise ValueError(f"Invalid deployment_mode: {v}. Must be one of {valid_modes}")
        return v

    @field_validator('log_level')
    @classmethod
    def normalize_log_level(cls, v):
        return v.upper()

    model_config = SettingsConfigDict(
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.
    This ensures we only create one Settings instance per process.
    """
    return Settings()
