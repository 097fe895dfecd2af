"""
orchestra.execution.config - Dispatcher Configuration
"""

from typing import Self

from pydantic import BaseModel, Field, model_validator


class DispatcherConfig(BaseModel):
    """Explicit configuration for the Dispatcher."""

    pool_size: int = Field(default=16, ge=1, description="Requests executed concurrently")
    base_delay_seconds: float = Field(default=0.5, ge=0, description="First retry delay")
    max_delay_seconds: float = Field(default=30.0, ge=0, description="Backoff cap")
    jitter_ratio: float = Field(
        default=0.25, ge=0, le=1, description="Jitter as a fraction of the backoff delay"
    )
    max_unknown_retries: int = Field(default=1, ge=0, description="Retries for Unknown failures")

    @model_validator(mode="after")
    def _cap_covers_base(self) -> Self:
        if self.max_delay_seconds < self.base_delay_seconds:
            raise ValueError("max_delay_seconds must be >= base_delay_seconds")
        return self
