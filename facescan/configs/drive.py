"""
Google Drive configuration settings.

Dependencies: pydantic_settings
System role: Remote folder listing configuration
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class DriveSettings(BaseSettings):
    """Settings for listing and downloading Google Drive folders."""

    model_config = SettingsConfigDict(
        env_prefix="DRIVE_",
        case_sensitive=False,
        extra="ignore",
    )

    api_key: str = Field(default="", description="Google API key with Drive read access")
    api_url: str = Field(
        default="https://www.googleapis.com/drive/v3/files",
        description="Drive v3 files endpoint",
    )
    image_url_template: str = Field(
        default="https://lh3.googleusercontent.com/d/{file_id}={size}",
        description="Download URL for a resized image",
    )
    view_url_template: str = Field(
        default="https://drive.google.com/file/d/{file_id}/view",
        description="Drive page for a file",
    )
    page_size: int = Field(default=1000, ge=1, le=1000, description="Files per listing page")
    image_size: str = Field(default="s1000", description="Requested image size suffix")
    request_timeout: float = Field(default=30.0, gt=0, description="HTTP timeout in seconds")
    page_delay_seconds: float = Field(
        default=0.5,
        ge=0,
        description="Pause between listing pages to avoid rate limiting",
    )
    max_download_workers: int = Field(default=8, ge=1, description="Parallel image downloads")
    listing_cache_size: int = Field(
        default=32,
        ge=1,
        description="Folder listings kept in memory between slices",
    )
