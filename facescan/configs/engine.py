"""
Batch engine configuration settings.

Batch sizing, concurrency and the per-invocation time budget policy.
The budget is a fraction of the hosting runtime's maximum execution time.

Dependencies: pydantic, pydantic_settings
System role: Tuning knobs for the resumable batch comparison engine
"""

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class EngineSettings(BaseSettings):
    """Settings for the batch orchestrator."""

    model_config = SettingsConfigDict(
        env_prefix="ENGINE_",
        case_sensitive=False,
        extra="ignore",
    )

    batch_size: int = Field(default=10, ge=1, description="Items compared per tick")
    max_batch_size: int = Field(
        default=50,
        ge=1,
        description="Upper bound for client-requested batch sizes",
    )
    max_concurrency: int = Field(
        default=5,
        ge=1,
        description="Comparisons running in parallel within one tick",
    )

    max_execution_seconds: float = Field(
        default=26.0,
        gt=0,
        description="Hard timeout of the hosting function runtime",
    )
    budget_fraction: float = Field(
        default=0.8,
        gt=0,
        le=1,
        description="Share of the runtime timeout a tick may use",
    )
    degrade_fraction: float = Field(
        default=0.5,
        gt=0,
        le=1,
        description="Budget share after which the fetched batch is halved",
    )
    abort_fraction: float = Field(
        default=0.85,
        gt=0,
        le=1,
        description="Budget share after which no new comparison is started",
    )

    max_token_length: int = Field(
        default=4096,
        ge=64,
        description="Longest continuation token accepted from clients",
    )

    @model_validator(mode="after")
    def _check_fractions(self) -> "EngineSettings":
        if self.degrade_fraction > self.abort_fraction:
            raise ValueError("degrade_fraction must not exceed abort_fraction")
        if self.batch_size > self.max_batch_size:
            raise ValueError("batch_size must not exceed max_batch_size")
        return self

    @property
    def budget_seconds(self) -> float:
        """Wall-clock seconds a single tick may spend."""
        return self.max_execution_seconds * self.budget_fraction
