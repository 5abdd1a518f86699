"""Retry configuration model."""

from pydantic import BaseModel, ConfigDict, Field, model_validator


class RetryConfig(BaseModel):
    """Configuration for retry logic.

    Attributes:
        max_attempts: Maximum number of attempts, counting the initial call
        initial_delay: Delay before the first retry in seconds
        max_delay: Upper bound for any single delay in seconds
        multiplier: Exponential backoff multiplier
    """

    max_attempts: int = Field(3, ge=1)
    initial_delay: float = Field(0.1, ge=0.0)  # Allow 0 for tests
    max_delay: float = Field(5.0, ge=0.0)
    multiplier: float = Field(2.0, ge=1.0)

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="after")
    def _check_delay_bounds(self) -> "RetryConfig":
        if self.max_delay < self.initial_delay:
            raise ValueError("max_delay must be greater than or equal to initial_delay")
        return self
