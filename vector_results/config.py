"""Application configuration using Pydantic Settings."""

from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings for the results view engine loaded from environment variables.

    All settings are validated on construction. Invalid values raise a
    pydantic ``ValidationError`` with a clear message instead of surfacing
    later as a confusing runtime failure.
    """

    # Remote store settings
    store_base_url: str = Field(
        default="http://localhost:3000",
        min_length=1,
        description="Base URL of the command API in front of the vector store",
    )
    store_timeout: float = Field(
        default=30.0,
        gt=0.0,
        description="Request timeout for bulk commands in seconds",
    )
    store_max_retries: int = Field(
        default=3,
        ge=1,
        le=10,
        description="Maximum attempts for a bulk command before giving up",
    )

    # Preference settings
    preferences_path: Path = Field(
        default=Path("./data/vector_results_settings.json"),
        description="JSON file holding display settings and column visibility",
    )

    # Display defaults (used when no preference has been stored yet)
    show_attributes_default: bool = Field(
        default=True,
        description="Show attribute columns in the results table",
    )
    show_only_filtered_attributes_default: bool = Field(
        default=False,
        description="Restrict attribute columns to fields used by the filter expression",
    )

    # Logging Settings
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )

    model_config = SettingsConfigDict(
        env_prefix="VECTOR_RESULTS_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("store_base_url")
    @classmethod
    def validate_store_base_url(cls, v: str) -> str:
        """Ensure the base URL is an http(s) URL without a trailing slash."""
        v = v.strip()
        if not v.startswith(("http://", "https://")):
            raise ValueError(
                f"store_base_url must start with http:// or https://, got '{v}'"
            )
        return v.rstrip("/")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensure log level is valid."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(
                f"log_level must be one of {valid_levels}, got '{v}'"
            )
        return v_upper

    @field_validator("preferences_path", mode="before")
    @classmethod
    def validate_preferences_path(cls, v) -> Path:
        """Convert string to Path."""
        if isinstance(v, str):
            return Path(v)
        return v


# Global settings instance, created lazily on first access
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get the global settings instance.

    Returns:
        Settings: The engine settings

    Raises:
        ValidationError: If settings validation fails
    """
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


# Convenience function to reload settings (useful for testing)
def reload_settings() -> Settings:
    """Reload settings from environment.

    Returns:
        Settings: The reloaded settings
    """
    global _settings
    _settings = Settings()
    return _settings
