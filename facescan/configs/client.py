"""
Client driver configuration settings.

Pacing and polling policy for clients that drive a scan job to completion.

Dependencies: pydantic_settings
System role: Client driver configuration
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ClientSettings(BaseSettings):
    """Settings for the continuation/polling client driver."""

    model_config = SettingsConfigDict(
        env_prefix="CLIENT_",
        case_sensitive=False,
        extra="ignore",
    )

    base_url: str = Field(default="http://localhost:8000/api/v1", description="API base URL")
    request_timeout: float = Field(default=30.0, gt=0, description="HTTP timeout in seconds")
    min_interval_seconds: float = Field(
        default=1.0,
        ge=0,
        description="Minimum spacing between two continuation calls",
    )
    jitter_seconds: float = Field(
        default=0.5,
        ge=0,
        description="Upper bound of random delay added to every call",
    )
    poll_base_seconds: float = Field(default=1.0, gt=0, description="First polling delay")
    poll_max_seconds: float = Field(default=10.0, gt=0, description="Polling delay cap")
    poll_backoff_factor: float = Field(default=2.0, ge=1, description="Polling delay growth")
    max_poll_attempts: int = Field(
        default=30,
        ge=1,
        description="Consecutive failed polls before the driver gives up",
    )
