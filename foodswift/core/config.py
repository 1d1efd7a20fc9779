"""
Application Configuration Module

Centralizes all configuration using environment variables with Pydantic Settings.
Supports three modes:
    - DEVELOPMENT: In-memory document store, relaxed cookie policy
    - STAGING: Real MongoDB cluster, relaxed cookie policy
    - PRODUCTION: Real MongoDB cluster, cross-site secure cookies

The ENV_MODE variable (NODE_ENV is accepted as an alias) controls which
store implementation is instantiated and how the auth cookie is flagged.

Usage:
    from foodswift.core.config import get_settings

    settings = get_settings()
    if settings.is_production:
        # Secure cookies, SameSite=None

Author: Food Swift Team
Version: 1.0.0
"""

import logging
import sys
from enum import Enum
from functools import lru_cache
from typing import Optional
from urllib.parse import quote_plus

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class EnvironmentMode(str, Enum):
    """
    Application environment modes.

    Attributes:
        DEVELOPMENT: Local testing, in-memory store unless Mongo is configured
        PRODUCTION: Live environment, secure cross-site cookies
        STAGING: Pre-production with the real cluster
    """
    DEVELOPMENT = "development"
    PRODUCTION = "production"
    STAGING = "staging"


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings can be overridden via environment variables or .env file.
    Secrets (database password, token secret) should NEVER be committed.

    Attributes:
        env_mode: Current environment (development/production/staging)
        debug: Enable verbose logging

        # Server
        api_host: Host to bind the server
        api_port: Port for the server (PORT)
        allowed_origins: Comma-separated browser origins for CORS

        # Database
        mongodb_uri: Full connection string, overrides the credential fields
        db_user / db_pass: Atlas credentials
        db_cluster_host: Atlas cluster hostname
        db_name: Database name

        # Auth
        access_token_secret: HS256 signing secret for JWT cookies
        token_expires_hours: Lifetime of issued tokens
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # ==========================================================================
    # ENVIRONMENT
    # ==========================================================================

    env_mode: EnvironmentMode = Field(
        default=EnvironmentMode.DEVELOPMENT,
        validation_alias=AliasChoices("env_mode", "node_env"),
        description="Application environment mode"
    )
    debug: bool = Field(
        default=False,
        description="Enable debug mode with verbose logging"
    )

    # ==========================================================================
    # APPLICATION
    # ==========================================================================

    app_name: str = Field(
        default="Food Swift Server",
        description="Application display name"
    )
    app_version: str = Field(
        default="1.0.0",
        description="Application version"
    )
    api_host: str = Field(
        default="0.0.0.0",
        description="Server host"
    )
    api_port: int = Field(
        default=5000,
        validation_alias=AliasChoices("api_port", "port"),
        description="Server port"
    )
    allowed_origins: str = Field(
        default="http://localhost:5173,https://food-delivery-app-quantum-devs.web.app",
        description="Comma-separated list of allowed browser origins"
    )

    # ==========================================================================
    # DATABASE
    # ==========================================================================

    mongodb_uri: Optional[str] = Field(
        default=None,
        description="Full MongoDB connection string (overrides credentials)"
    )
    db_user: Optional[str] = Field(
        default=None,
        description="MongoDB Atlas user"
    )
    db_pass: Optional[str] = Field(
        default=None,
        description="MongoDB Atlas password"
    )
    db_cluster_host: str = Field(
        default="cluster0.uioun.mongodb.net",
        description="MongoDB Atlas cluster host"
    )
    db_name: str = Field(
        default="Food_Swift",
        description="Database name"
    )

    # ==========================================================================
    # AUTHENTICATION
    # ==========================================================================

    access_token_secret: Optional[str] = Field(
        default=None,
        description="Secret used to sign and verify access tokens"
    )
    token_algorithm: str = Field(
        default="HS256",
        description="JWT signing algorithm"
    )
    token_expires_hours: int = Field(
        default=23,
        description="Access token lifetime in hours"
    )
    token_cookie_name: str = Field(
        default="token",
        description="Name of the auth cookie"
    )

    # ==========================================================================
    # VALIDATORS
    # ==========================================================================

    @field_validator("env_mode", mode="before")
    @classmethod
    def validate_env_mode(cls, v: str) -> EnvironmentMode:
        """Convert string to EnvironmentMode enum."""
        if isinstance(v, EnvironmentMode):
            return v
        try:
            return EnvironmentMode(v.lower())
        except ValueError:
            valid = [e.value for e in EnvironmentMode]
            raise ValueError(f"Invalid env_mode. Must be one of: {valid}")

    # ==========================================================================
    # COMPUTED PROPERTIES
    # ==========================================================================

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.env_mode == EnvironmentMode.DEVELOPMENT

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.env_mode == EnvironmentMode.PRODUCTION

    @property
    def is_staging(self) -> bool:
        """Check if running in staging mode."""
        return self.env_mode == EnvironmentMode.STAGING

    @property
    def use_real_services(self) -> bool:
        """Check if the real MongoDB cluster should be used."""
        return (
            self.env_mode in (EnvironmentMode.PRODUCTION, EnvironmentMode.STAGING)
            or self.mongo_configured
        )

    @property
    def mongo_configured(self) -> bool:
        """Check if enough database settings exist to build a URI."""
        return bool(self.mongodb_uri or (self.db_user and self.db_pass))

    @property
    def allowed_origins_list(self) -> list[str]:
        """Get allowed origins as a list."""
        return [o.strip() for o in self.allowed_origins.split(",") if o.strip()]

    @property
    def database_uri(self) -> str:
        """Build the MongoDB connection string."""
        if self.mongodb_uri:
            return self.mongodb_uri
        user = quote_plus(self.db_user or "")
        password = quote_plus(self.db_pass or "")
        return (
            f"mongodb+srv://{user}:{password}@{self.db_cluster_host}/"
            f"?retryWrites=true&w=majority&appName=Cluster0"
        )

    @property
    def cookie_options(self) -> dict:
        """Flags for the auth cookie; cross-site only in production."""
        return {
            "httponly": True,
            "secure": self.is_production,
            "samesite": "none" if self.is_production else "strict",
        }

    # ==========================================================================
    # VALIDATION METHODS
    # ==========================================================================

    def validate_production_config(self) -> list[str]:
        """
        Validate that all required production settings are configured.

        Returns:
            List of missing configuration keys (empty if all present)
        """
        missing = []

        if not self.access_token_secret:
            missing.append("ACCESS_TOKEN_SECRET")

        if self.use_real_services and not self.mongo_configured:
            missing.append("DB_USER/DB_PASS or MONGODB_URI")

        return missing


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached application settings.

    Returns:
        Settings: Configured application settings

    Example:
        >>> settings = get_settings()
        >>> print(settings.env_mode)
        EnvironmentMode.DEVELOPMENT
    """
    return Settings()


# =============================================================================
# LOGGING CONFIGURATION
# =============================================================================

def setup_logging(level: int = logging.INFO) -> logging.Logger:
    """
    Configure application-wide logging.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR)

    Returns:
        Configured package logger
    """
    settings = get_settings()

    if settings.debug:
        level = logging.DEBUG

    log_format = "%(asctime)s │ %(levelname)-8s │ %(name)-25s │ %(message)s"
    date_format = "%Y-%m-%d %H:%M:%S"

    logging.basicConfig(
        level=level,
        format=log_format,
        datefmt=date_format,
        handlers=[logging.StreamHandler(sys.stdout)],
    )

    # Reduce noise from third-party libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("pymongo").setLevel(logging.WARNING)
    logging.getLogger("engineio").setLevel(logging.WARNING)
    logging.getLogger("socketio").setLevel(logging.WARNING)

    return logging.getLogger("foodswift")

