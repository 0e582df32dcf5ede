"""
Unified application settings.

Aggregates all configuration modules into a single Settings class.
Provides dependency injection factory for FastAPI.

Dependencies: All config modules
System role: Central configuration aggregator for the application
"""

from functools import lru_cache

from pydantic import Field

from facescan.configs.aws import AwsSettings
from facescan.configs.base import BaseSettings
from facescan.configs.client import ClientSettings
from facescan.configs.database import DatabaseSettings
from facescan.configs.drive import DriveSettings
from facescan.configs.engine import EngineSettings


class Settings(BaseSettings):
    """Unified application settings aggregating all config modules."""

    # Built on instantiation so environment changes before get_settings() apply
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    engine: EngineSettings = Field(default_factory=EngineSettings)
    aws: AwsSettings = Field(default_factory=AwsSettings)
    drive: DriveSettings = Field(default_factory=DriveSettings)
    client: ClientSettings = Field(default_factory=ClientSettings)


@lru_cache
def get_settings() -> Settings:
    """
    Get application settings singleton.

    Returns Settings instance, cached for dependency injection.
    Environment variables loaded once at startup.

    Returns:
        Settings: Application settings instance

    Usage:
        from facescan.configs import get_settings
        settings = get_settings()
    """
    return Settings()
