"""Configuration management for batchfarm."""

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from batchfarm.farm.placement import PlacementPolicy


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="BATCHFARM_",
        extra="ignore",
    )

    # Scheduling
    placement_policy: PlacementPolicy = Field(
        default=PlacementPolicy.EARLIEST_AVAILABLE,
        description="Machine chosen when a job needs a new batch",
    )

    # Build volume used for machines declared without a capacity (mm)
    default_build_x: int = Field(default=256, ge=0, description="Default build volume X")
    default_build_y: int = Field(default=256, ge=0, description="Default build volume Y")
    default_build_z: int = Field(default=256, ge=0, description="Default build volume Z")

    # Logging
    log_level: str = Field(default="INFO", description="Log level for the rich handler")


# Global settings instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get the global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def configure(settings: Optional[Settings]) -> None:
    """Override global settings."""
    global _settings
    _settings = settings
