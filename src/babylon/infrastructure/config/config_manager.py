"""Configuration manager for loading and validating .babylon.yml"""

import copy
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import ValidationError

from babylon.domain.config import (
    ApiConfig,
    AppConfig,
    LoggingConfig,
    RetryConfig,
)

logger = logging.getLogger(__name__)

CONFIG_FILE_NAME = ".babylon.yml"

# Environment variable -> dotted config key
ENV_OVERRIDES = {
    "BABYLON_ENV": "environment",
    "LOG_LEVEL": "logging.level",
    "BABYLON_API_URL": "api.base_url",
    "BABYLON_API_TOKEN": "api.token",
}


class ConfigurationError(Exception):
    """Configuration validation error."""

    pass


class ConfigManager:
    """Manages configuration from .babylon.yml and environment variables

    Configuration priority:
    1. Default values (defined in Pydantic models)
    2. .babylon.yml file (searched from current directory upwards)
    3. Environment variables (BABYLON_*, LOG_LEVEL)
    4. CLI arguments (handled by CLI layer)

    The manager is constructed explicitly and passed to whoever needs it.
    """

    def __init__(self, config_path: Optional[Path] = None):
        """Initialize config manager

        Args:
            config_path: Path to .babylon.yml (searches from current dir if None)

        Raises:
            ConfigurationError: If configuration validation fails
        """
        if isinstance(config_path, str):
            config_path = Path(config_path)
        self.config_path = config_path or self._find_config_file()
        try:
            self.config: AppConfig = self._load_config()
        except ValidationError as e:
            errors = []
            for error in e.errors():
                field = ".".join(str(x) for x in error["loc"])
                errors.append(f"  - {field}: {error['msg']}")
            raise ConfigurationError(
                "Invalid configuration:\n" + "\n".join(errors)
            ) from e

    def _find_config_file(self) -> Optional[Path]:
        current = Path.cwd()
        for parent in [current] + list(current.parents):
            config_file = parent / CONFIG_FILE_NAME
            if config_file.exists():
                logger.info(f"Found config file: {config_file}")
                return config_file
        logger.debug(f"No {CONFIG_FILE_NAME} found, using defaults")
        return None

    def _load_config(self) -> AppConfig:
        """Load configuration from file and env, then validate with Pydantic

        Raises:
            ValidationError: If configuration is invalid
            ConfigurationError: If the file cannot be parsed
        """
        config_dict: Dict[str, Any] = {}

        if self.config_path and self.config_path.exists():
            try:
                with open(self.config_path, "r", encoding="utf-8") as f:
                    file_config = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise ConfigurationError(f"Failed to parse {self.config_path}: {e}") from e
            if not isinstance(file_config, dict):
                raise ConfigurationError(f"{self.config_path} must contain a mapping")
            config_dict = self._merge_config(config_dict, file_config)
            logger.info(f"Loaded configuration from {self.config_path}")

        config_dict = self._apply_env_overrides(config_dict)
        return AppConfig(**config_dict)

    def _merge_config(self, base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
        """Recursively merge configuration dictionaries"""
        result = copy.deepcopy(base)
        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._merge_config(result[key], value)
            else:
                result[key] = value
        return result

    def _apply_env_overrides(self, config: Dict[str, Any]) -> Dict[str, Any]:
        """Apply environment variable overrides (values are coerced by Pydantic)"""
        for env_name, dotted_key in ENV_OVERRIDES.items():
            value = os.getenv(env_name)
            if not value:
                continue
            *sections, leaf = dotted_key.split(".")
            target = config
            for section in sections:
                target = target.setdefault(section, {})
            target[leaf] = value.lower() if env_name == "LOG_LEVEL" else value
        return config

    def get_logging_config(self) -> LoggingConfig:
        return self.config.logging

    def get_api_config(self) -> ApiConfig:
        return self.config.api

    def get_retry_config(self) -> RetryConfig:
        return self.config.retry

    def is_production(self) -> bool:
        return self.config.environment == "production"

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value by key (supports dot notation)

        Args:
            key: Configuration key (e.g., "api.base_url" or "api")
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        value = self.config.model_dump()
        for k in key.split("."):
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                return default
        return value
