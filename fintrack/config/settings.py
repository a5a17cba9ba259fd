"""
Configuration Management for fintrack

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
Storage location, authentication behaviour and planning thresholds
are all visible in one place and validated at startup.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class StorageSettings(BaseSettings):
    """Local key-value storage configuration."""

    model_config = SettingsConfigDict(
        env_prefix="FINTRACK_STORAGE_",
        extra="ignore"
    )

    data_dir: str = Field(
        default=".fintrack",
        description="Directory holding the local data file"
    )
    file_name: str = Field(
        default="store.json",
        min_length=1,
        description="Name of the JSON document inside data_dir"
    )
    backend: str = Field(
        default="file",
        pattern="^(file|memory)$",
        description="Storage backend: 'file' persists to disk, 'memory' is ephemeral"
    )

    @field_validator('file_name')
    @classmethod
    def validate_file_name(cls, v: str) -> str:
        """The data file must live directly inside data_dir."""
        if Path(v).name != v:
            raise ValueError(f"file_name must be a bare file name, got {v!r}")
        return v

    @property
    def path(self) -> Path:
        """Full path of the JSON document."""
        return Path(self.data_dir).expanduser() / self.file_name


class AuthSettings(BaseSettings):
    """Login / signup behaviour."""

    model_config = SettingsConfigDict(
        env_prefix="FINTRACK_AUTH_",
        extra="ignore"
    )

    # Artificial delays, kept from the mobile app's simulated API calls
    login_delay_seconds: float = Field(
        default=0.0,
        ge=0.0,
        le=5.0,
        description="Delay before a login attempt completes"
    )
    signup_delay_seconds: float = Field(
        default=0.0,
        ge=0.0,
        le=5.0,
        description="Delay before a signup completes"
    )
    logout_delay_seconds: float = Field(
        default=0.0,
        ge=0.0,
        le=5.0,
        description="Delay before a logout completes"
    )
    bcrypt_rounds: int = Field(
        default=12,
        ge=4,
        le=16,
        description="bcrypt cost factor for new password hashes"
    )


class AppSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Environment
    app_environment: str = Field(
        default="development",
        description="Application environment"
    )
    debug_mode: bool = Field(
        default=False,
        description="Enable debug mode"
    )
    log_level: str = Field(
        default="INFO",
        pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$",
        description="Minimum level for structured logs"
    )

    # Planning
    savings_goal_percent: int = Field(
        default=20,
        ge=0,
        le=100,
        description="Target share of income to keep each month"
    )
    week_starts_on: int = Field(
        default=6,
        ge=0,
        le=6,
        description="First day of the calendar week (0=Monday ... 6=Sunday)"
    )

    # Validation thresholds
    max_transaction_amount: float = Field(
        default=1000000.0,
        gt=0,
        description="Amounts above this are flagged for review"
    )
    future_date_tolerance_days: int = Field(
        default=30,
        ge=0,
        description="How many days in the future a transaction date can be"
    )


class Settings(BaseSettings):
    """
    Root settings container.

    Aggregates all sub-settings for easy access.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    @property
    def storage(self) -> StorageSettings:
        return StorageSettings()

    @property
    def auth(self) -> AuthSettings:
        return AuthSettings()

    @property
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings are properly configured.

    Returns a dict of {section_name: is_valid}, plus a
    "<section>_error" entry for each section that failed to load.
    """
    results = {}

    settings = get_settings()

    for section in ("storage", "auth", "app"):
        try:
            getattr(settings, section)
            results[section] = True
        except Exception as e:
            results[section] = False
            results[f"{section}_error"] = str(e)

    return results
