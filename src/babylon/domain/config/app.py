"""Main application configuration model."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from babylon.domain.config.api import ApiConfig
from babylon.domain.config.log import LoggingConfig
from babylon.domain.config.retry import RetryConfig


class AppConfig(BaseModel):
    """Main application configuration.

    This is the root configuration model that aggregates all configuration sections.
    Validation is performed at load time to fail fast on configuration errors.

    Attributes:
        environment: Deployment environment (production hides unexpected error details)
        logging: Log output configuration
        api: API client configuration
        retry: Retry policy for API requests
    """

    environment: Literal["development", "production", "test"] = "development"
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    api: ApiConfig = Field(default_factory=ApiConfig)
    retry: RetryConfig = Field(default_factory=RetryConfig)

    model_config = ConfigDict(
        validate_assignment=True,  # Validate on attribute assignment
        extra="forbid",  # Reject unknown fields
        json_schema_extra={
            "example": {
                "environment": "production",
                "logging": {"level": "info", "json_output": True},
                "api": {"base_url": "http://localhost:3000", "timeout": 10.0},
                "retry": {
                    "max_attempts": 3,
                    "initial_delay": 0.1,
                    "max_delay": 5.0,
                    "multiplier": 2.0,
                },
            }
        },
    )
