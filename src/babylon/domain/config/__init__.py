"""Configuration models with Pydantic validation."""

from babylon.domain.config.api import ApiConfig
from babylon.domain.config.app import AppConfig
from babylon.domain.config.log import LoggingConfig
from babylon.domain.config.retry import RetryConfig

__all__ = [
    "AppConfig",
    "ApiConfig",
    "LoggingConfig",
    "RetryConfig",
]
