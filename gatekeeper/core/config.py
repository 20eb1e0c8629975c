"""
Configuration management using Pydantic Settings.

This module provides type-safe, validated configuration loading from environment
variables. Every gateway worker process loads the same values, so limits and
ban thresholds stay consistent across the fleet.

Architecture:
- Flat Settings structure (no nesting)
- All config loaded from environment variables
- Type validation via Pydantic

Usage:
    from gatekeeper.core.config import settings

    redis_url = settings.redis_url
    if settings.is_development:
        ...
"""

from functools import lru_cache

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from gatekeeper.core.enums import Environment


class Settings(BaseSettings):
    """
    Main application settings (flat structure).

    Configuration precedence:
        1. Environment variables
        2. Default values

    Returns:
        Settings: Application configuration loaded from environment.
    """

    # Environment detection
    environment: Environment = Field(
        default=Environment.DEVELOPMENT,
        description="Application environment (development, testing, ci, production)",
    )
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )
    app_name: str = Field(
        default="Gatekeeper",
        description="Application name",
    )

    # Shared store (Redis)
    redis_url: str = Field(
        default="redis://localhost:6379/0",
        description="Redis connection URL (e.g., redis://host:port/db)",
    )
    redis_max_connections: int = Field(
        default=20,
        description="Connection pool size for admission procedures",
    )
    redis_socket_timeout: float = Field(
        default=5.0,
        description="Socket connect/read timeout in seconds",
    )

    # Key namespace
    admission_namespace: str = Field(
        default="ratelimit",
        description="Key prefix: <namespace>:<kind>:<identifier>",
    )

    # Sliding window (per tier)
    default_window_ms: int = Field(
        default=60_000,
        description="Rate limit window length in milliseconds",
    )
    free_requests_per_minute: int = Field(
        default=10,
        description="Accepted requests per window for the free tier",
    )
    pro_requests_per_minute: int = Field(
        default=100,
        description="Accepted requests per window for the pro tier",
    )
    enterprise_requests_per_minute: int = Field(
        default=-1,
        description="Accepted requests per window for enterprise (-1 = unlimited)",
    )
    warn_percentage: int = Field(
        default=80,
        description="Window usage (percent) at which allowed requests are flagged as WARNED",
    )

    # Violation tracking and bans
    violation_window_ms: int = Field(
        default=7 * 24 * 60 * 60 * 1000,
        description="Violation tracking window in milliseconds",
    )
    ban_threshold_first: int = Field(
        default=5,
        description="Violations in window before the first (short) ban",
    )
    ban_threshold_second: int = Field(
        default=7,
        description="Violations in window before the one-day ban",
    )
    ban_threshold_permanent: int = Field(
        default=12,
        description="Violations in window before the permanent ban",
    )
    ban_duration_first_seconds: int = Field(
        default=5 * 60,
        description="Duration of the first ban level",
    )
    ban_duration_second_seconds: int = Field(
        default=24 * 60 * 60,
        description="Duration of the second ban level",
    )
    ban_duration_permanent_seconds: int = Field(
        default=999 * 24 * 60 * 60,
        description="Duration of the permanent ban level",
    )

    # Cooldown observer
    cooldown_marker_ttl_seconds: int = Field(
        default=24 * 60 * 60,
        description="Lifetime of the 'recently limited' marker used for cooldown signals",
    )

    model_config = SettingsConfigDict(
        env_prefix="GATEKEEPER_",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("admission_namespace")
    @classmethod
    def validate_namespace(cls, v: str) -> str:
        """
        Strip separators from the namespace.

        Args:
            v: Namespace string.

        Returns:
            str: Namespace without leading/trailing colons.

        Raises:
            ValueError: If namespace is empty.
        """
        v = v.strip(":")
        if not v:
            raise ValueError("admission_namespace must not be empty")
        return v

    @field_validator("warn_percentage")
    @classmethod
    def validate_warn_percentage(cls, v: int) -> int:
        """
        Validate warning percentage range.

        Raises:
            ValueError: If not between 1 and 100.
        """
        if not 1 <= v <= 100:
            raise ValueError("warn_percentage must be between 1 and 100")
        return v

    @field_validator(
        "free_requests_per_minute",
        "pro_requests_per_minute",
        "enterprise_requests_per_minute",
    )
    @classmethod
    def validate_tier_limit(cls, v: int) -> int:
        """
        Validate a tier's requests per window.

        Raises:
            ValueError: If neither positive nor -1 (unlimited).
        """
        if v == 0 or v < -1:
            raise ValueError("tier limits must be positive, or -1 for unlimited")
        return v

    @field_validator(
        "default_window_ms",
        "violation_window_ms",
        "ban_duration_first_seconds",
        "ban_duration_second_seconds",
        "ban_duration_permanent_seconds",
        "cooldown_marker_ttl_seconds",
    )
    @classmethod
    def validate_positive(cls, v: int) -> int:
        """Reject zero or negative durations."""
        if v <= 0:
            raise ValueError("durations must be positive")
        return v

    @model_validator(mode="after")
    def validate_ban_thresholds(self) -> "Settings":
        """
        Ensure the escalation ladder is strictly ascending.

        Returns:
            Settings: Validated settings.

        Raises:
            ValueError: If thresholds are not 0 < first < second < permanent.
        """
        if not (
            0
            < self.ban_threshold_first
            < self.ban_threshold_second
            < self.ban_threshold_permanent
        ):
            raise ValueError(
                "ban thresholds must satisfy 0 < first < second < permanent"
            )
        return self

    # Convenience properties for environment checks
    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.environment == Environment.DEVELOPMENT

    @property
    def is_testing(self) -> bool:
        """Check if running in testing environment."""
        return self.environment == Environment.TESTING

    @property
    def is_ci(self) -> bool:
        """Check if running in CI environment."""
        return self.environment == Environment.CI

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == Environment.PRODUCTION


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are loaded only once per process.

    Returns:
        Settings: Cached settings instance.
    """
    return Settings()


# Global settings instance (singleton pattern)
settings = get_settings()
