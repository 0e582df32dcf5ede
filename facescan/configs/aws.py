"""
AWS configuration settings.

Settings for Rekognition face comparison and the S3 bucket that keeps
reference faces between ticks.

Dependencies: pydantic_settings
System role: AWS boundary configuration
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AwsSettings(BaseSettings):
    """Settings for Rekognition and S3 reference storage."""

    model_config = SettingsConfigDict(
        env_prefix="AWS_",
        case_sensitive=False,
        extra="ignore",
    )

    region: str = Field(default="us-east-1", description="AWS region for Rekognition and S3")
    similarity_threshold: float = Field(
        default=80.0,
        ge=0,
        le=100,
        description="Minimum Rekognition similarity for a face to count as a match",
    )
    reference_bucket: str | None = Field(
        default=None,
        description="S3 bucket for reference faces; clients resend the face when unset",
    )
    reference_prefix: str = Field(
        default="references/",
        description="Key prefix for stored reference faces",
    )
