"""
Core configuration module for Gatehouse.

This module provides centralized configuration management using Pydantic Settings.
All configuration is loaded from environment variables with the GATEHOUSE_ prefix.

Sections:
- Service identity and environment
- Rate limiting (fixed window)
- Sessions and credential hashing
- Request logging (log directory, colours, slow-request threshold)
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All fields use the GATEHOUSE_ prefix for environment variables.
    Example: GATEHOUSE_RATE_LIMIT_MAX_REQUESTS=50
    """

    # =========================================================================
    # Service Configuration
    # =========================================================================
    service_name: str = Field(
        default="gatehouse",
        description="Name of the service for logging and identification",
    )
    host: str = Field(
        default="0.0.0.0",
        description="Interface the service binds to",
    )
    port: int = Field(
        default=3000,
        ge=1,
        le=65535,
        description="Port the service listens on",
    )
    environment: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Deployment environment",
    )
    log_level: str = Field(
        default="INFO",
        description="Log level for structured logging",
    )

    # =========================================================================
    # Rate Limiting Configuration
    # =========================================================================
    rate_limit_window_ms: int = Field(
        default=15 * 60 * 1000,
        ge=1,
        description="Length of the fixed rate-limit window in milliseconds",
    )
    rate_limit_max_requests: int = Field(
        default=100,
        ge=1,
        description="Maximum requests per client within one window",
    )
    rate_limit_message: str = Field(
        default="Too many API requests, please try again later",
        description="Message returned with 429 responses",
    )
    rate_limit_path_prefix: str = Field(
        default="/api/",
        description="Only paths under this prefix are rate limited",
    )
    trust_forwarded_for: bool = Field(
        default=False,
        description="Key clients on the first X-Forwarded-For hop instead of the peer address",
    )

    # =========================================================================
    # Session Configuration
    # =========================================================================
    session_ttl_seconds: int = Field(
        default=3600,
        ge=1,
        description="Session time-to-live in seconds",
    )
    password_hash_rounds: int = Field(
        default=12,
        ge=4,
        le=31,
        description="bcrypt cost factor for stored credentials",
    )
    sweep_interval_seconds: float = Field(
        default=60.0,
        ge=0,
        description="Interval for purging expired sessions and rate records (0 disables)",
    )

    # =========================================================================
    # Request Logging Configuration
    # =========================================================================
    log_dir: str = Field(
        default="logs",
        description="Directory receiving daily access/error log files",
    )
    log_colors: bool = Field(
        default=True,
        description="Colour-code status codes in console request lines",
    )
    detailed_logging: bool = Field(
        default=False,
        description="Write detailed access records for every request",
    )
    slow_request_threshold_ms: float = Field(
        default=1000.0,
        gt=0,
        description="Requests slower than this are logged as warnings",
    )
    slow_route_delay_seconds: float = Field(
        default=2.0,
        ge=0,
        description="Delay used by the slow demo route",
    )

    # =========================================================================
    # Environment Prefix Configuration
    # =========================================================================
    model_config = {
        "env_prefix": "GATEHOUSE_",
        "case_sensitive": False,
        "extra": "ignore",
    }

    # =========================================================================
    # Field Validators
    # =========================================================================
    @field_validator("rate_limit_path_prefix")
    @classmethod
    def validate_path_prefix(cls, v: str) -> str:
        """Rate-limit prefix must be an absolute path."""
        if not v.startswith("/"):
            raise ValueError("rate_limit_path_prefix must start with '/'")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate and normalize the log level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid_levels:
            raise ValueError(f"log_level must be one of: {valid_levels}")
        return upper


# =============================================================================
# Settings Singleton
# =============================================================================


@lru_cache
def get_settings() -> Settings:
    """
    Get the application settings singleton.

    Uses functools.lru_cache to ensure only one Settings instance is created.
    Tests build their own Settings and pass them to create_app() instead.

    Returns:
        Settings: The application settings instance.
    """
    return Settings()
